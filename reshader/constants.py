"""
Static tables shared by the ReShader installer.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from reshader import __version__

# =============================================================================
# Network
# =============================================================================

USER_AGENT = f"reshader/{__version__}"

RESHADE_BASE_URL = "https://reshade.me"
RESHADE_TAGS_URL = "https://api.github.com/repos/crosire/reshade/tags"
D3DCOMPILER_URL = "https://lutris.net/files/tools/dll/d3dcompiler_47.dll"

GSHADE_DOWNLOADS_URL = (
    "https://github.com/HereInPlainSight/gshade_installer/blob/master/gshade_installer.sh#L352"
)

DOWNLOAD_CHUNK_SIZE = 8192

# =============================================================================
# Installed file names
# =============================================================================

ZIP_SIGNATURE = b"PK\x03\x04"

RESHADE_DLL = "ReShade64.dll"
RESHADE_VANILLA_DLL = "ReShade64.Vanilla.dll"
RESHADE_ADDON_DLL = "ReShade64.Addon.dll"

LOADER_DLL = "dxgi.dll"
D3DCOMPILER_DLL = "d3dcompiler_47.dll"
RESHADE_INI = "ReShade.ini"

MERGED_DIR = "Merged"
MERGED_SUBDIRS = ("Shaders", "Textures", "Intermediate")
REPOSITORIES_DIR = "repositories"
ZIPS_DIR = "zips"

SHADERS_LINK = "reshade-shaders"
PRESETS_DIR = "reshade-presets"
GSHADE_SHADERS_LINK = "gshade-shaders"
GSHADE_PRESETS_LINK = "gshade-presets"

# Entries cleaned out of a game directory on uninstall.
UNINSTALL_FILES = (LOADER_DLL, D3DCOMPILER_DLL)
UNINSTALL_DIRS = (PRESETS_DIR, GSHADE_PRESETS_LINK, SHADERS_LINK, GSHADE_SHADERS_LINK)

# =============================================================================
# Game inspection
# =============================================================================

EXE_BLACKLIST = frozenset((
    "unins", "setup", "install", "crash", "report", "launcher", "updater",
    "vc_redist", "dxsetup", "dotnet", "directx", "easyanticheat", "battleye",
    "redist", "vcredist", "physx",
))

# =============================================================================
# Shader sources
# =============================================================================


@dataclass(frozen=True)
class ShaderSource:
    """A git repository that contributes Shaders/ and Textures/ to the merged tree."""
    name: str
    url: str
    branch: Optional[str] = None
    essential: bool = False


SHADER_SOURCES: tuple[ShaderSource, ...] = (
    ShaderSource("reshade-shaders", "https://github.com/crosire/reshade-shaders", "slim", True),
    ShaderSource("sweetfx-shaders", "https://github.com/CeeJayDK/SweetFX", None, True),
    ShaderSource("qUINT", "https://github.com/martymcmodding/qUINT"),
    ShaderSource("AstrayFX", "https://github.com/BlueSkyDefender/AstrayFX"),
    ShaderSource("prod80", "https://github.com/prod80/prod80-ReShade-Repository"),
)
