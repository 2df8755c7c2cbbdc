import importlib
import json
import sys

import pytest

from dragonmaze.maze import Grid, is_valid


@pytest.fixture()
def run_module():
    # Ensure a clean import each time
    if "run" in sys.modules:
        del sys.modules["run"]
    return importlib.import_module("run")


def test_version_flag_outputs_version(run_module, capsys):
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert run_module.__version__ in out
    assert "Dragon Maze" in out


def test_default_command_is_server(run_module):
    assert run_module.parse_args([]).command == "server"


def test_generate_prints_dump(run_module, capsys):
    assert run_module.main(["generate", "--size", "7", "--seed", "3"]) == 0
    lines = capsys.readouterr().out.split("\n")
    assert lines[0] == "seed=3 size=7"
    grid = Grid.from_text("\n".join(lines[1:]))
    assert grid.size == 7
    assert is_valid(grid)


def test_generate_json(run_module, capsys):
    assert run_module.main(["generate", "--size", "9", "--seed", "4", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["seed"] == 4
    assert data["size"] == 9
    assert len(data["rows"]) == 9


def test_generate_invalid_size(run_module, capsys):
    assert run_module.main(["generate", "--size", "6"]) == 2
    assert "odd integer" in capsys.readouterr().out


def test_check_sample(run_module, capsys):
    assert run_module.main(["check", "--count", "5", "--max-size", "15", "--seed", "1"]) == 0
    assert "5/5 mazes valid" in capsys.readouterr().out


def test_check_empty_range(run_module):
    assert run_module.main(["check", "--min-size", "8", "--max-size", "8"]) == 2


def test_server_main_invokes_start_server(monkeypatch, run_module):
    calls = {}

    def fake_start_server(host, port, debug):  # signature match
        calls["host"] = host
        calls["port"] = port
        calls["debug"] = debug

    monkeypatch.setenv("PORT", "5555")
    monkeypatch.setenv("HOST", "127.0.0.1")
    import dragonmaze.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", fake_start_server)
    monkeypatch.setattr(run_module.signal, "signal", lambda *a: None)
    assert run_module.main(["server", "--debug"]) == 0
    assert calls == {"host": "127.0.0.1", "port": 5555, "debug": True}
