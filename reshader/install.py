"""
Installing and removing ReShade, shaders and GShade presets in game directories.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from importlib import resources
from pathlib import Path

from reshader.archive import unpack_archive
from reshader.constants import (
    D3DCOMPILER_DLL,
    GSHADE_PRESETS_LINK,
    GSHADE_SHADERS_LINK,
    LOADER_DLL,
    PRESETS_DIR,
    RESHADE_INI,
    SHADERS_LINK,
    UNINSTALL_DIRS,
    UNINSTALL_FILES,
)
from reshader.download import reshade_dll_name
from reshader.errors import FileSystemError, GamePathError, SymlinkConflictError
from reshader.shaders import merge_tree, merged_dir

logger = logging.getLogger(__name__)


# =============================================================================
# Symlink Utilities
# =============================================================================

def _check_game_path(game_path: Path) -> None:
    if not game_path.is_dir():
        raise GamePathError(str(game_path))


def _require(path: Path) -> None:
    if not path.exists():
        error = FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))
        raise FileSystemError(f"find {path.name}, install it first", error)


def _check_conflict(source: Path, target: Path) -> None:
    if target.exists() and not target.is_symlink():
        raise SymlinkConflictError(str(source), str(target), "File or directory already exists")


def link(source: Path, target: Path, replace: bool = False) -> bool:
    """
    Point ``target`` at ``source``. Returns True if the link was created or changed.

    An existing symlink is left alone, or re-pointed when ``replace`` is set
    and it names a different source. A real file or directory at ``target``
    raises SymlinkConflictError and is not touched.
    """
    _check_conflict(source, target)

    try:
        if target.is_symlink():
            if not replace or target.readlink() == source:
                return False
            target.unlink()
        target.symlink_to(source)
    except OSError as e:
        raise FileSystemError(f"symlink {source} to {target}", e) from e

    logger.debug("Linked %s -> %s", target, source)
    return True


# =============================================================================
# ReShade
# =============================================================================

def default_ini() -> str:
    return (resources.files("reshader") / "data" / RESHADE_INI).read_text(encoding="utf-8")


def install_reshade(data_dir: Path, game_path: Path, vanilla: bool) -> None:
    """
    Link the ReShade DLL as dxgi.dll and d3dcompiler_47.dll into the game
    directory, and write a default ReShade.ini if the game has none.
    """
    _check_game_path(game_path)

    reshade_dll = data_dir / reshade_dll_name(vanilla)
    d3dcompiler = data_dir / D3DCOMPILER_DLL
    _require(reshade_dll)
    _require(d3dcompiler)

    # Check both before touching anything so a conflict leaves no half install.
    _check_conflict(reshade_dll, game_path / LOADER_DLL)
    _check_conflict(d3dcompiler, game_path / D3DCOMPILER_DLL)

    link(reshade_dll, game_path / LOADER_DLL, replace=True)
    link(d3dcompiler, game_path / D3DCOMPILER_DLL, replace=True)

    ini_path = game_path / RESHADE_INI
    if not ini_path.exists() and not ini_path.is_symlink():
        try:
            ini_path.write_text(default_ini(), encoding="utf-8")
        except OSError as e:
            raise FileSystemError(f"write {ini_path}", e) from e


def install_reshade_shaders(data_dir: Path, game_path: Path) -> None:
    """Link the merged shader tree into the game directory as reshade-shaders."""
    _check_game_path(game_path)
    merged = merged_dir(data_dir)
    _require(merged)
    link(merged, game_path / SHADERS_LINK)


# =============================================================================
# GShade presets
# =============================================================================

def install_presets(data_dir: Path, presets_zip: Path, shaders_zip: Path) -> None:
    """
    Unpack the user supplied GShade archives into the data directory.

    Presets end up in reshade-presets and shaders in reshade-shaders; the
    contents of earlier installs are overwritten file by file.
    """
    shaders_dir = data_dir / SHADERS_LINK

    with tempfile.TemporaryDirectory(prefix="reshader_presets") as tmpdir:
        tmp_path = Path(tmpdir)

        presets_root = unpack_archive(presets_zip, tmp_path / "presets")
        merge_tree(presets_root, data_dir / PRESETS_DIR)

        shaders_root = unpack_archive(shaders_zip, tmp_path / "shaders")
        merge_tree(shaders_root, shaders_dir)

    try:
        (shaders_dir / "Intermediate").mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"create {shaders_dir / 'Intermediate'}", e) from e


def install_presets_for_game(data_dir: Path, game_path: Path) -> None:
    """Link the GShade presets and shaders into the game directory."""
    _check_game_path(game_path)

    links = (
        (data_dir / PRESETS_DIR, game_path / GSHADE_PRESETS_LINK),
        (data_dir / SHADERS_LINK, game_path / GSHADE_SHADERS_LINK),
    )
    for source, target in links:
        _require(source)
        _check_conflict(source, target)

    for source, target in links:
        link(source, target)


# =============================================================================
# Uninstall
# =============================================================================

def uninstall(game_path: Path) -> list[str]:
    """
    Remove ReShade and GShade files from a game directory.

    Shader and preset links are unlinked without following them, so the
    shared content in the data directory survives. ReShade.ini is kept.
    Returns the names that were removed.
    """
    removed = []

    try:
        for name in UNINSTALL_FILES:
            path = game_path / name
            if path.is_symlink() or path.exists():
                path.unlink()
                removed.append(name)

        for name in UNINSTALL_DIRS:
            path = game_path / name
            if path.is_symlink():
                path.unlink()
            elif path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
            else:
                continue
            removed.append(name)
    except OSError as e:
        raise FileSystemError(f"uninstall from {game_path}", e) from e

    logger.debug("Removed %s from %s", removed, game_path)
    return removed
