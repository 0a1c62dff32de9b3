from pathlib import Path

from gambit import paths


def test_get_gambit_home_defaults(monkeypatch):
    monkeypatch.delenv("GAMBIT_HOME", raising=False)
    home = paths.get_gambit_home()
    assert home.name == ".gambit"


def test_get_gambit_home_env(monkeypatch, tmp_path: Path):
    target = tmp_path / "custom"
    monkeypatch.setenv("GAMBIT_HOME", str(target))
    assert paths.get_gambit_home() == target
    assert paths.default_config_path() == target / "config.toml"
