"""cosaf: adjust colour schemes for colour-vision deficiencies.

Usage: cosaf <command> [options]

Domain and relation strategies are auto-discovered from cosaf/strategies/.
Each strategy module's docstring is its documentation.
Run `cosaf help <strategy>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, cosaf looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
  COSAF_* variables set the default parameters; command-line flags win.
"""

import argparse
import importlib
import sys

from cosaf import registry
from cosaf.adjuster import Adjuster
from cosaf.core.config import load_env, parameters_from_env
from cosaf.core.diagnostics import NULL, StderrDiagnostics
from cosaf.core.report import format_json, format_text
from cosaf.core.scheme import Scheme
from cosaf.core.types import SolverType


def _load_strategy_module(name: str) -> object:
    """Load the raw module for a strategy (for docstring access)."""
    return importlib.import_module(f'cosaf.strategies.{name}')


def _short_doc(name: str, fallback: str) -> str:
    doc = (_load_strategy_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _parse_color(text: str) -> int | str:
    if text.lower().startswith('0x'):
        try:
            return int(text, 16)
        except ValueError:
            raise argparse.ArgumentTypeError(f'invalid colour: {text!r}') from None
    return text


def _parse_pairs(text: str) -> list[tuple[int, int]]:
    """'0-1,1-2' -> [(0, 1), (1, 2)]. An empty string means no pairs."""
    pairs = []
    for item in filter(None, (s.strip() for s in text.split(','))):
        a, sep, b = item.partition('-')
        if not sep:
            raise argparse.ArgumentTypeError(f'invalid pair: {item!r} (expected I-J)')
        try:
            pairs.append((int(a), int(b)))
        except ValueError:
            raise argparse.ArgumentTypeError(f'invalid pair: {item!r} (expected I-J)') from None
    return pairs


def _parse_indices(text: str) -> list[int]:
    try:
        return [int(s) for s in text.split(',') if s.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f'invalid index list: {text!r}') from None


def _add_scheme_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument('colors', nargs='+', type=_parse_color, metavar='COLOR', help="'#e60012', 'red' or 0xe60012")
    p.add_argument(
        '-a',
        '--adjacency',
        type=_parse_pairs,
        default=None,
        metavar='I-J,...',
        help='Pairs that must stay distinguishable (default: every pair)',
    )
    p.add_argument('-f', '--fixed', type=_parse_indices, default=[], metavar='I,...', help='Slots that must not change')
    p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


def _build_parser() -> argparse.ArgumentParser:
    epilog = (
        'Examples:\n'
        "  cosaf adjust '#e60012' '#009944' '#0068b7'\n"
        "  cosaf adjust '#e60012' '#009944' '#0068b7' --adjacency 0-1,1-2 --fixed 2\n"
        "  cosaf adjust red green blue --solver srs3 --time-limit 2000 --json\n"
        "  cosaf inspect '#e60012' '#009944'\n"
        '  cosaf strategies\n'
        '  cosaf help ratio_average\n'
        '\n'
        'Parameter env vars (set in .env or environment):\n'
        '  COSAF_TIME_LIMIT, COSAF_TARGET_DESIRABILITY, COSAF_SOLVER, COSAF_RATIO_MODE,\n'
        '  COSAF_RATIO_PER_VISION, COSAF_RESOLUTION, COSAF_HUE_TOLERANCE, COSAF_TONE_TOLERANCE,\n'
        '  COSAF_BOTTLENECK, COSAF_VISIONS (e.g. PD)\n'
    )
    parser = argparse.ArgumentParser(
        prog='cosaf',
        description='Adjust colour schemes so adjacent colours stay distinguishable under colour-vision deficiencies.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global --env-file option before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='command', help='Command to run')

    p = sub.add_parser('adjust', help='Adjust a colour scheme')
    _add_scheme_arguments(p)
    p.add_argument('-s', '--solver', choices=[s.value for s in SolverType], default=None, help='Search strategy')
    p.add_argument('-t', '--time-limit', type=int, default=None, metavar='MS', help='Solver time limit')
    p.add_argument('--target', type=float, default=None, metavar='D', help='Target desirability in [0, 1]')
    p.add_argument('-b', '--bottleneck', action='store_true', help='Free the bottleneck colour last')
    p.add_argument('--no-ratio', action='store_true', help='Use fixed target differences instead of ratios')
    p.add_argument('--per-vision', action='store_true', help='One ratio to trichromacy per deficient vision')
    p.add_argument('-v', '--verbose', action='store_true', help='Print solver progress to stderr')

    p = sub.add_parser('inspect', help='Show lowest differences and the bottleneck of a scheme')
    _add_scheme_arguments(p)

    sub.add_parser('strategies', help='List domain and relation strategies')

    # `help` subcommand prints the full module docstring of a strategy
    help_parser = sub.add_parser('help', help='Print full docs for a strategy')
    help_parser.add_argument('strategy', nargs='?', help='Strategy name')

    return parser


def _build_scheme(args: argparse.Namespace) -> Scheme:
    scheme = Scheme(args.colors, args.adjacency)
    if args.fixed:
        flags = [False] * scheme.size()
        for i in args.fixed:
            if not 0 <= i < scheme.size():
                raise ValueError(f'Fixed index {i} out of range for {scheme.size()} colours')
            flags[i] = True
        scheme.set_fixed_flags(flags)
    return scheme


def _print_strategies() -> None:
    for kind, strategies in registry.all_strategies().items():
        print(f'{kind}:')
        for name, strat in sorted(strategies.items()):
            print(f'  {name:<18} {strat.help}')


def _print_help(name: str | None) -> None:
    """Print full module docstring for a strategy."""
    strategies = {n: s for kind in registry.all_strategies().values() for n, s in kind.items()}

    if name is None:
        print('Available strategies:\n')
        for n, strat in sorted(strategies.items()):
            print(f'  {n:<18} {_short_doc(n, strat.help)}')
        print('\nRun: cosaf help <strategy> for full docs.')
        return

    if name not in strategies:
        print(f'Unknown strategy: {name}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(strategies))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_strategy_module(name).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {name!r})')
        return
    print(doc)


def _adjust(args: argparse.Namespace, scheme: Scheme) -> int:
    params = parameters_from_env()
    if args.solver:
        params.solver = SolverType(args.solver)
    if args.time_limit is not None:
        params.time_limit = args.time_limit
    if args.target is not None:
        params.target_desirability = args.target
    if args.bottleneck:
        params.bottleneck_resolved = True
    if args.no_ratio:
        params.ratio_mode = False
    if args.per_vision:
        params.ratio_per_vision = True

    diagnostics = StderrDiagnostics() if args.verbose else NULL
    adjusted = Adjuster(params, diagnostics=diagnostics).adjust(scheme)
    if adjusted is None:
        print('cosaf: no adjustment found', file=sys.stderr)
        print(format_json(scheme) if args.json else format_text(scheme))
        return 1
    print(format_json(scheme, adjusted) if args.json else format_text(scheme, adjusted))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Load .env before anything else, OS env vars always win
    env_path = load_env(env_file=getattr(args, 'env_file', None))
    if env_path:
        print(f'cosaf: loaded {env_path}', file=sys.stderr)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == 'strategies':
        _print_strategies()
        return

    if args.command == 'help':
        _print_help(getattr(args, 'strategy', None))
        return

    try:
        scheme = _build_scheme(args)
        if args.command == 'inspect':
            print(format_json(scheme) if args.json else format_text(scheme))
            return
        status = _adjust(args, scheme)
    except ValueError as e:
        print(f'cosaf: {e}', file=sys.stderr)
        sys.exit(1)

    if status:
        sys.exit(status)


if __name__ == '__main__':
    main()
