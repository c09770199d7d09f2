"""Strategy auto-discovery and registration.

Scans cosaf/strategies/ for modules that define a `strategy` object of
type Strategy. Collects them into dicts keyed by kind, then by name.

Handles both normal Python (pkgutil.iter_modules) and frozen PyInstaller
binaries (where iter_modules returns nothing, so it falls back to the
explicit imports in strategies/__init__.py).
"""

import importlib
import pkgutil

from cosaf.core.types import Strategy

_registry: dict[str, dict[str, Strategy]] = {}

# Known strategy module names, fallback for frozen binaries
_STRATEGY_MODULES = [
    'adjacent_radius',
    'global_radius',
    'ratio_average',
    'ratio_per_vision',
    'target_difference',
]


def discover() -> dict[str, dict[str, Strategy]]:
    """Import all strategy modules and return the registry."""
    if _registry:
        return _registry

    import cosaf.strategies as pkg

    # Try pkgutil first (works in normal Python)
    found_modules = [
        modname for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__) if not modname.startswith('_')
    ]

    # Frozen binary fallback: pkgutil finds nothing, use known list
    if not found_modules:
        found_modules = _STRATEGY_MODULES

    registry: dict[str, dict[str, Strategy]] = {kind: {} for kind in Strategy.KINDS}
    for modname in found_modules:
        module = importlib.import_module(f'cosaf.strategies.{modname}')
        strat = getattr(module, 'strategy', None)
        if isinstance(strat, Strategy):
            registry[strat.kind][strat.name] = strat

    _registry.update(registry)
    return _registry


def get(kind: str, name: str) -> Strategy:
    """Get a strategy by kind and name."""
    reg = discover()
    if kind not in reg:
        raise KeyError(f'Unknown strategy kind: {kind}. Available: {", ".join(sorted(reg))}')
    if name not in reg[kind]:
        raise KeyError(f'Unknown {kind} strategy: {name}. Available: {", ".join(sorted(reg[kind]))}')
    return reg[kind][name]


def get_domain_factory(name: str) -> Strategy:
    return get('domain', name)


def get_relation_factory(name: str) -> Strategy:
    return get('relation', name)


def all_strategies() -> dict[str, dict[str, Strategy]]:
    """Return all registered strategies, by kind."""
    return discover()
