"""
Game executable analysis.

Only the 64-bit ReShade build is installed and it is always loaded as
dxgi.dll, so the installer looks at the game's executables to warn about
games that will not pick it up.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path

import pefile

from reshader.constants import EXE_BLACKLIST

logger = logging.getLogger(__name__)

I386_MACHINE = 0x14C

# Checked in order, the first imported library decides the API.
API_IMPORTS = (
    ("d3d12.dll", "dx12"),
    ("d3d11.dll", "dx11"),
    ("dxgi.dll", "dx11"),
    ("d3d10.dll", "dx10"),
    ("d3d10_1.dll", "dx10"),
    ("d3d9.dll", "dx9"),
    ("opengl32.dll", "opengl"),
    ("d3d8.dll", "dx8"),
)

# DLL ReShade has to be installed as for APIs that do not go through DXGI.
LOADER_BY_API = {
    "dx9": "d3d9",
    "dx8": "d3d8",
    "opengl": "opengl32",
}


@dataclass
class GameExecutable:
    """An executable found in a game directory."""
    path: Path
    architecture: int = 64
    api: str = "unknown"

    def __str__(self) -> str:
        return f"{self.path.name} ({self.api.upper()}, {self.architecture}-bit)"

    @property
    def dll_override(self) -> str:
        return LOADER_BY_API.get(self.api, "dxgi")

    @property
    def supported(self) -> bool:
        return self.architecture == 64 and self.dll_override == "dxgi"

    def warning(self) -> str:
        if self.architecture != 64:
            return f"{self} is a 32-bit game, but ReShader only installs the 64-bit build."
        return f"{self} needs ReShade as {self.dll_override}.dll, but ReShader only installs it as dxgi.dll."


def _header_machine(exe_path: Path) -> int:
    """Read the COFF machine field straight from the PE header."""
    with open(exe_path, "rb") as f:
        f.seek(0x3C)
        pe_offset = struct.unpack("<I", f.read(4))[0]
        f.seek(pe_offset + 4)
        return struct.unpack("<H", f.read(2))[0]


def _detect_api(imports: set[str]) -> str:
    for library, api in API_IMPORTS:
        if library in imports:
            return api
    return "unknown"


def analyze_executable(exe_path: Path) -> GameExecutable:
    """
    Determine the architecture and graphics API of an executable from its
    import table. Files pefile cannot parse only get their architecture
    read from the raw header; anything unreadable is assumed to be 64-bit.
    """
    exe = GameExecutable(exe_path)

    try:
        pe = pefile.PE(str(exe_path), fast_load=True)
    except (pefile.PEFormatError, OSError) as e:
        logger.debug("pefile could not parse %s: %s", exe_path, e)
        try:
            if _header_machine(exe_path) == I386_MACHINE:
                exe.architecture = 32
        except (OSError, struct.error):
            pass
        return exe

    try:
        if pe.FILE_HEADER.Machine == I386_MACHINE:
            exe.architecture = 32
        pe.parse_data_directories(
            directories=[pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_IMPORT"]]
        )
        imports = {
            entry.dll.decode("utf-8", errors="ignore").lower()
            for entry in getattr(pe, "DIRECTORY_ENTRY_IMPORT", ())
        }
    finally:
        pe.close()
    exe.api = _detect_api(imports)
    return exe


def is_game_executable(exe_path: Path) -> bool:
    """Check if an executable is likely a game (not a tool/installer)."""
    name_lower = exe_path.name.lower()
    return not any(blacklisted in name_lower for blacklisted in EXE_BLACKLIST)


def find_executables(game_path: Path) -> list[Path]:
    if not game_path.is_dir():
        return []
    return sorted(
        exe for exe in game_path.iterdir()
        if exe.is_file() and exe.suffix.lower() == ".exe" and is_game_executable(exe)
    )


def probe_game(game_path: Path) -> list[GameExecutable]:
    """Analyze every game executable directly inside ``game_path``."""
    return [analyze_executable(exe) for exe in find_executables(game_path)]


def compatibility_warnings(game_path: Path) -> list[str]:
    """Describe why ReShade as dxgi.dll might not load for this game."""
    executables = probe_game(game_path)
    if not executables:
        return [f"No game executable found in {game_path}; make sure this is the folder containing it."]

    if any(exe.supported for exe in executables):
        return []

    return [exe.warning() for exe in executables]
