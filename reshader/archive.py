"""
Locating and unpacking zip archives, including the one embedded in the
ReShade self-extracting installer.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import logging
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Optional

from reshader.constants import ZIP_SIGNATURE
from reshader.errors import (
    EntryNotFoundError,
    FileSystemError,
    NoArchiveFoundError,
    ZipExtractError,
    ZipReadError,
)

logger = logging.getLogger(__name__)

SCAN_CHUNK_SIZE = 64 * 1024

# Folders that hold content themselves and never wrap a package.
CONTENT_DIRS = frozenset(("shaders", "textures"))


# =============================================================================
# Embedded archive
# =============================================================================

def find_zip_offset(stream: BinaryIO, chunk_size: int = SCAN_CHUNK_SIZE) -> int:
    """
    Return the offset of the first zip local file header in the stream.

    The stream is scanned from its start in chunks; the last bytes of each
    chunk are carried over so a signature split across two reads is found.
    """
    stream.seek(0)
    overlap = len(ZIP_SIGNATURE) - 1
    position = 0
    tail = b""

    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            raise NoArchiveFoundError(str(getattr(stream, "name", "<stream>")))

        data = tail + chunk
        index = data.find(ZIP_SIGNATURE)
        if index != -1:
            return position - len(tail) + index

        position += len(chunk)
        tail = data[-overlap:]


class _ArchiveView:
    """File object that exposes a file from ``base`` onwards as if it started at 0."""

    def __init__(self, fileobj: BinaryIO, base: int) -> None:
        self._file = fileobj
        self._base = base
        self._file.seek(base)

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._file.tell() - self._base

    def seek(self, offset: int, whence: int = 0) -> int:
        if whence == 0:
            self._file.seek(self._base + offset)
        else:
            self._file.seek(offset, whence)
        return self.tell()

    def read(self, size: int = -1) -> bytes:
        return self._file.read(size)


def extract_entry(installer: Path, name: str) -> bytes:
    """Extract the bytes of ``name`` from the zip archive embedded in ``installer``."""
    try:
        with open(installer, "rb") as f:
            offset = find_zip_offset(f)
            logger.debug("Found zip archive in %s at offset %d", installer, offset)

            try:
                archive = zipfile.ZipFile(_ArchiveView(f, offset))
            except zipfile.BadZipFile as e:
                raise ZipReadError(str(installer), str(e)) from e

            with archive:
                try:
                    return archive.read(name)
                except KeyError as e:
                    raise EntryNotFoundError(name) from e
                except (zipfile.BadZipFile, zlib.error) as e:
                    raise ZipReadError(str(installer), str(e)) from e
    except OSError as e:
        raise FileSystemError(f"read {installer}", e) from e


# =============================================================================
# Downloaded archives
# =============================================================================

def find_root_directory(names: list[str]) -> Optional[str]:
    """Return the single top-level directory of an archive listing, if there is one."""
    roots = {name.split("/", 1)[0] for name in names if name.strip("/")}
    if len(roots) != 1:
        return None
    root = roots.pop()
    if root.lower() in CONTENT_DIRS:
        return None
    if any(name.startswith(f"{root}/") for name in names):
        return root
    return None


def unpack_archive(zip_path: Path, target_dir: Path) -> Path:
    """
    Extract an archive into ``target_dir`` and return its root folder.

    Archives with a single top-level package directory are extracted as-is.
    Anything else, including an archive holding only Shaders/, is extracted
    into a folder named after the archive itself so callers
    can always look for ``<root>/Shaders`` and ``<root>/Textures``.
    """
    try:
        archive = zipfile.ZipFile(zip_path)
    except (zipfile.BadZipFile, OSError) as e:
        raise ZipReadError(str(zip_path), str(e)) from e

    with archive:
        root = find_root_directory(archive.namelist())
        if root is None:
            root_dir = target_dir / zip_path.stem
            destination = root_dir
        else:
            root_dir = target_dir / root
            destination = target_dir

        try:
            root_dir.mkdir(parents=True, exist_ok=True)
            archive.extractall(destination)
        except (zipfile.BadZipFile, zlib.error, OSError) as e:
            raise ZipExtractError(str(zip_path), str(e)) from e

    logger.debug("Unpacked %s into %s", zip_path, root_dir)
    return root_dir
