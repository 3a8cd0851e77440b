from __future__ import annotations

from pathlib import Path

import pytest

from reshader.config import Config, config_dir, data_dir, load_config, save_config
from reshader.errors import ConfigError


def test_roundtrip_preserves_order(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    config = Config(game_paths=["/games/b", "/games/a", "/games/c"])

    save_config(config, path)

    assert load_config(path).game_paths == ["/games/b", "/games/a", "/games/c"]


def test_read_does_not_deduplicate(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('game_paths = ["/games/a", "/games/a"]\n')

    assert load_config(path).game_paths == ["/games/a", "/games/a"]


def test_add_game_rejects_duplicates() -> None:
    config = Config()

    assert config.add_game(Path("/games/a")) is True
    assert config.add_game("/games/a") is False
    assert config.add_game("/games/b") is True
    assert config.game_paths == ["/games/a", "/games/b"]


def test_remove_game() -> None:
    config = Config(game_paths=["/games/a", "/games/b"])

    assert config.remove_game(Path("/games/a")) is True
    assert config.remove_game("/games/a") is False
    assert config.game_paths == ["/games/b"]


def test_missing_config_is_created(tmp_path: Path) -> None:
    path = tmp_path / "reshader" / "config.toml"

    config = load_config(path)

    assert config.game_paths == []
    assert path.exists()
    assert load_config(path).game_paths == []


def test_malformed_config(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("game_paths = [\n")

    with pytest.raises(ConfigError):
        load_config(path)
    assert path.read_text() == "game_paths = [\n"


def test_config_with_wrong_types(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("game_paths = [1, 2]\n")

    with pytest.raises(ConfigError):
        load_config(path)


def test_directories_follow_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "share"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))

    assert data_dir() == tmp_path / "share" / "reshader"
    assert config_dir() == tmp_path / "config" / "reshader"
