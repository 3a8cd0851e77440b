"""
Managed game list persistence and directory layout.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import tomli_w

from reshader.errors import ConfigError, FileSystemError

logger = logging.getLogger(__name__)

APPLICATION = "reshader"
CONFIG_FILE = "config.toml"


# =============================================================================
# Directories
# =============================================================================

def _xdg_dir(variable: str, fallback: str) -> Path:
    value = os.environ.get(variable)
    if value:
        return Path(value).expanduser()
    return Path.home() / fallback


def data_dir() -> Path:
    """Directory holding ReShade builds, shader trees and presets."""
    return _xdg_dir("XDG_DATA_HOME", ".local/share") / APPLICATION


def config_dir() -> Path:
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / APPLICATION


def setup_directories() -> tuple[Path, Path]:
    """Create the data and config directories and return them."""
    directories = (data_dir(), config_dir())
    for directory in directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"create {directory}", e) from e
    return directories


# =============================================================================
# Config Store
# =============================================================================

@dataclass
class Config:
    """Game directories that have ReShade or GShade installed."""
    game_paths: list[str] = field(default_factory=list)

    def add_game(self, game_path: Path | str) -> bool:
        """Track a game directory. Returns False if it was already tracked."""
        path = str(game_path)
        if path in self.game_paths:
            return False
        self.game_paths.append(path)
        return True

    def remove_game(self, game_path: Path | str) -> bool:
        """Stop tracking a game directory. Returns True if it was tracked."""
        path = str(game_path)
        before = len(self.game_paths)
        self.game_paths = [p for p in self.game_paths if p != path]
        return len(self.game_paths) != before

    def to_dict(self) -> dict:
        return {"game_paths": list(self.game_paths)}

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        paths = data.get("game_paths", [])
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            raise ValueError("game_paths must be a list of strings")
        return cls(game_paths=list(paths))


def save_config(config: Config, path: Path) -> None:
    """Write the config to disk, replacing the previous contents."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            tomli_w.dump(config.to_dict(), f)
    except OSError as e:
        raise FileSystemError(f"write {path}", e) from e
    logger.debug("Saved %d game path(s) to %s", len(config.game_paths), path)


def load_config(path: Path) -> Config:
    """
    Load the config from disk.

    A missing file is replaced with an empty default. A file that exists but
    cannot be parsed raises ConfigError instead of being overwritten.
    """
    if not path.exists():
        config = Config()
        save_config(config, path)
        return config

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return Config.from_dict(data)
    except (tomllib.TOMLDecodeError, ValueError) as e:
        raise ConfigError(str(path), str(e)) from e
    except OSError as e:
        raise FileSystemError(f"read {path}", e) from e
