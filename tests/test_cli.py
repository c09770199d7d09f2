"""Tests for the cosaf command line."""

import json
from pathlib import Path

import pytest

from cosaf.__main__ import _parse_pairs, main

COLORS = ['#e60012', '#009944', '#0068b7']


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # a .git here stops the .env walk-up
    (tmp_path / '.git').mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('COSAF_RESOLUTION', '10')
    return tmp_path


class TestParsing:
    def test_pairs(self) -> None:
        assert _parse_pairs('0-1, 1-2') == [(0, 1), (1, 2)]
        assert _parse_pairs('') == []

    def test_bad_pair_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main(['inspect', *COLORS, '--adjacency', '0+1'])
        assert exc.value.code == 2


class TestCommands:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main([])
        assert 'usage: cosaf' in capsys.readouterr().out

    def test_strategies(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['strategies'])
        out = capsys.readouterr().out
        assert 'domain:' in out
        assert 'ratio_per_vision' in out

    def test_help_lists_strategies(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['help'])
        assert 'global_radius' in capsys.readouterr().out

    def test_help_for_strategy(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['help', 'target_difference'])
        assert capsys.readouterr().out.strip()

    def test_help_unknown_strategy(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(['help', 'nope'])
        assert exc.value.code == 1
        assert 'Unknown strategy: nope' in capsys.readouterr().err

    def test_inspect_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['inspect', *COLORS, '-a', '0-1,1-2'])
        assert capsys.readouterr().out.startswith('cosaf: 3 colours, 2 adjacent pairs')

    def test_inspect_accepts_hex_ints(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['inspect', '0xe60012', 'green', '--json'])
        obj = json.loads(capsys.readouterr().out)
        assert obj['original']['colors'] == ['#e60012', '#008000']

    def test_adjust_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['adjust', *COLORS, '--fixed', '2', '--time-limit', '1000', '--json'])
        obj = json.loads(capsys.readouterr().out)
        assert len(obj['adjusted']['colors']) == 3
        assert obj['adjusted']['colors'][2] == '#0068b7'
        assert obj['adjusted']['quality'] >= obj['original']['quality']

    def test_verbose_reports_progress(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(['adjust', *COLORS, '-t', '1000', '--solver', 'srs3', '-v'])
        captured = capsys.readouterr()
        assert 'adjuster: Strategies: adjacent_radius + ratio_average' in captured.err
        assert '── adjusted' in captured.out

    def test_invalid_colour(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(['inspect', 'notacolour', 'red'])
        assert exc.value.code == 1
        assert capsys.readouterr().err.startswith('cosaf: Invalid colour')

    def test_fixed_index_out_of_range(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(['inspect', *COLORS, '--fixed', '5'])
        assert exc.value.code == 1
        assert 'out of range' in capsys.readouterr().err

    def test_bad_env_parameter(self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('COSAF_SOLVER', 'simplex')
        with pytest.raises(SystemExit) as exc:
            main(['adjust', *COLORS])
        assert exc.value.code == 1
        assert 'COSAF_SOLVER' in capsys.readouterr().err

    def test_env_file_option(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        env = tmp_path / 'custom.env'
        env.write_text('COSAF_RESOLUTION=10\n')
        main(['--env-file', str(env), 'strategies'])
        assert f'cosaf: loaded {env}' in capsys.readouterr().err
