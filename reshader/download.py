"""
HTTP downloads and ReShade release resolution.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

import requests
from packaging.version import InvalidVersion, Version
from rich.progress import BarColumn, DownloadColumn, Progress, SpinnerColumn, TextColumn

from reshader.archive import extract_entry
from reshader.constants import (
    D3DCOMPILER_DLL,
    D3DCOMPILER_URL,
    DOWNLOAD_CHUNK_SIZE,
    RESHADE_ADDON_DLL,
    RESHADE_BASE_URL,
    RESHADE_DLL,
    RESHADE_TAGS_URL,
    RESHADE_VANILLA_DLL,
    USER_AGENT,
)
from reshader.errors import DownloadError, FetchLatestVersionError, FileSystemError
from reshader.ui import console

logger = logging.getLogger(__name__)


def create_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


# =============================================================================
# Asset Fetcher
# =============================================================================

def download_file(session: requests.Session, url: str, path: Path) -> None:
    """Stream ``url`` into ``path``, replacing any existing file."""
    logger.debug("Downloading %s to %s", url, path)

    try:
        with session.get(url, stream=True) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length", 0)) or None

            with Progress(
                SpinnerColumn(),
                TextColumn(f"[cyan]Downloading {path.name}..."),
                BarColumn(),
                DownloadColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task("Download", total=total)

                with open(path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
                        progress.update(task, advance=len(chunk))
    except (requests.RequestException, OSError) as e:
        raise DownloadError(url, str(e)) from e


# =============================================================================
# ReShade releases
# =============================================================================

def get_latest_reshade_version(
    session: requests.Session,
    tags_url: str = RESHADE_TAGS_URL,
) -> str:
    """Return the highest released ReShade version listed by the tags endpoint."""
    try:
        response = session.get(tags_url, timeout=15)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchLatestVersionError(f"error while fetching tags: {e}") from e

    try:
        tags = response.json()
        names = [tag["name"] for tag in tags]
    except (ValueError, TypeError, KeyError) as e:
        raise FetchLatestVersionError("invalid json returned by github") from e

    versions: list[tuple[Version, str]] = []
    for name in names:
        candidate = str(name).removeprefix("v")
        try:
            versions.append((Version(candidate), candidate))
        except InvalidVersion:
            logger.debug("Ignoring tag %s", name)

    if not versions:
        raise FetchLatestVersionError("no tags available")

    return max(versions)[1]


def get_reshade_download_url(
    session: requests.Session,
    version: Optional[str] = None,
    vanilla: bool = False,
    tags_url: str = RESHADE_TAGS_URL,
    base_url: str = RESHADE_BASE_URL,
) -> str:
    """
    Build the installer URL for ``version``, or for the latest release when
    no version is given. The version string is not validated.
    """
    if version is None:
        version = get_latest_reshade_version(session, tags_url)
    version = version.removeprefix("v")

    suffix = "" if vanilla else "_Addon"
    return f"{base_url}/downloads/ReShade_Setup_{version}{suffix}.exe"


def reshade_dll_name(vanilla: bool) -> str:
    return RESHADE_VANILLA_DLL if vanilla else RESHADE_ADDON_DLL


def download_reshade(
    session: requests.Session,
    data_dir: Path,
    vanilla: bool,
    version: Optional[str] = None,
    installer: Optional[Path] = None,
) -> Path:
    """
    Download ReShade and d3dcompiler_47.dll into ``data_dir``.

    If ``installer`` is given it is used instead of downloading one, and
    ``version`` is ignored. Returns the path of the extracted ReShade DLL.
    """
    with tempfile.TemporaryDirectory(prefix="reshader_downloads") as tmpdir:
        tmp_path = Path(tmpdir)

        if installer is None:
            url = get_reshade_download_url(session, version, vanilla)
            console.print(f"[cyan]Downloading ReShade from {url}[/]")
            installer = tmp_path / "reshade.exe"
            download_file(session, url, installer)

        d3dcompiler = tmp_path / D3DCOMPILER_DLL
        download_file(session, D3DCOMPILER_URL, d3dcompiler)

        console.print("[cyan]Extracting ReShade...[/]")
        dll_bytes = extract_entry(installer, RESHADE_DLL)

        reshade_dll = data_dir / reshade_dll_name(vanilla)
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
            reshade_dll.write_bytes(dll_bytes)
            shutil.copy(d3dcompiler, data_dir / D3DCOMPILER_DLL)
        except OSError as e:
            raise FileSystemError(f"store ReShade files in {data_dir}", e) from e

    logger.info("Stored %s (%d bytes)", reshade_dll, len(dll_bytes))
    return reshade_dll
