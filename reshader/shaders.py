"""
Shader synchronization: building the merged Shaders/Textures tree from git
repositories or from downloadable shader collections.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import configparser
import logging
import re
import shutil
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable

import requests

from reshader import git
from reshader.archive import unpack_archive
from reshader.constants import (
    MERGED_DIR,
    MERGED_SUBDIRS,
    REPOSITORIES_DIR,
    ZIPS_DIR,
    ShaderSource,
)
from reshader.download import download_file
from reshader.errors import FileSystemError, UnknownCollectionError
from reshader.ui import console

logger = logging.getLogger(__name__)

MANIFEST_FILE = "EffectPackages.ini"


# =============================================================================
# Merged tree
# =============================================================================

def merged_dir(data_dir: Path) -> Path:
    return data_dir / MERGED_DIR


def ensure_merged_tree(data_dir: Path) -> Path:
    """Create Merged/{Shaders,Textures,Intermediate} and return the Merged directory."""
    merged = merged_dir(data_dir)
    try:
        for subdir in MERGED_SUBDIRS:
            (merged / subdir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"create {merged}", e) from e
    return merged


def merge_tree(source: Path, destination: Path) -> None:
    """
    Copy ``source`` into ``destination`` recursively.

    Files with the same relative path are overwritten, files that only exist
    in the destination are kept. A missing source only creates the destination.
    """
    try:
        destination.mkdir(parents=True, exist_ok=True)
        if source.is_dir():
            shutil.copytree(source, destination, dirs_exist_ok=True)
            logger.debug("Merged %s into %s", source, destination)
    except OSError as e:
        raise FileSystemError(f"copy {source} to {destination}", e) from e


# =============================================================================
# Repository strategy
# =============================================================================

def repository_path(data_dir: Path, source: ShaderSource) -> Path:
    return data_dir / REPOSITORIES_DIR / source.name


def merge_repositories(data_dir: Path, sources: Iterable[ShaderSource]) -> None:
    """
    Copy each repository's Shaders/ and Textures/ into the merged tree.

    Essential sources land directly in Merged/Shaders, optional ones in
    Merged/Shaders/<name>. Textures always share Merged/Textures.
    """
    merged = ensure_merged_tree(data_dir)

    for source in sources:
        repository = repository_path(data_dir, source)
        shaders_target = merged / "Shaders"
        if not source.essential:
            shaders_target = shaders_target / source.name

        merge_tree(repository / "Shaders", shaders_target)
        merge_tree(repository / "Textures", merged / "Textures")


def sync_repositories(data_dir: Path, sources: Iterable[ShaderSource]) -> None:
    """Clone or update every shader repository, then rebuild the merged tree."""
    sources = tuple(sources)
    repositories = data_dir / REPOSITORIES_DIR
    try:
        repositories.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"create {repositories}", e) from e

    for source in sources:
        repository = repository_path(data_dir, source)
        if repository.exists():
            console.print(f"[cyan]Updating {source.name}...[/]")
            result = git.pull(repository, source.branch)
            logger.info("%s: %s", source.name, result.value)
        else:
            console.print(f"[cyan]Cloning {source.name}...[/]")
            git.clone(source.url, repository, source.branch)

    console.print("[cyan]Merging shaders...[/]")
    merge_repositories(data_dir, sources)


# =============================================================================
# Collection manifest strategy
# =============================================================================

@dataclass(frozen=True)
class ShaderCollection:
    """A downloadable shader package described by the effect package manifest."""
    name: str
    description: str
    enabled: bool
    required: bool
    install_path: str
    texture_install_path: str
    download_url: str

    def __str__(self) -> str:
        return self.name

    @property
    def slug(self) -> str:
        return re.sub(r"[^A-Za-z0-9._-]+", "_", self.name).strip("_")


def convert_install_path(value: str) -> str:
    """Turn ``.\\reshade-shaders\\Shaders\\X`` into ``Merged/Shaders/X``."""
    path = value.strip()
    if path.startswith((".\\", "./")):
        path = path[2:]
    return path.replace("\\", "/").replace("reshade-shaders", MERGED_DIR)


def parse_collections(text: str) -> tuple[ShaderCollection, ...]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    parser.read_string(text)

    collections = []
    for section_name in parser.sections():
        section = parser[section_name]
        collections.append(ShaderCollection(
            name=section["PackageName"],
            description=section.get("PackageDescription", ""),
            enabled=section.get("Enabled", "0").strip() == "1",
            required=section.get("Required", "0").strip() == "1",
            install_path=convert_install_path(section["InstallPath"]),
            texture_install_path=convert_install_path(section["TextureInstallPath"]),
            download_url=section["DownloadUrl"],
        ))
    return tuple(collections)


def load_collections() -> tuple[ShaderCollection, ...]:
    """Load the bundled effect package manifest."""
    manifest = resources.files("reshader") / "data" / MANIFEST_FILE
    return parse_collections(manifest.read_text(encoding="utf-8"))


def default_collections(collections: Iterable[ShaderCollection]) -> list[ShaderCollection]:
    return [c for c in collections if c.enabled]


def select_collections(
    collections: Iterable[ShaderCollection],
    names: Iterable[str],
) -> list[ShaderCollection]:
    """Pick collections by name; required collections are always included."""
    collections = list(collections)
    wanted = set(names)
    known = {c.name for c in collections}
    for name in wanted - known:
        raise UnknownCollectionError(name)
    return [c for c in collections if c.required or c.name in wanted]


def sync_collections(
    session: requests.Session,
    data_dir: Path,
    collections: Iterable[ShaderCollection],
) -> None:
    """
    Download each collection and copy its Shaders/ and Textures/ to the
    install paths declared in the manifest. Previous downloads are discarded.
    """
    zips = data_dir / ZIPS_DIR
    try:
        if zips.exists():
            shutil.rmtree(zips)
        zips.mkdir(parents=True)
    except OSError as e:
        raise FileSystemError(f"prepare {zips}", e) from e

    ensure_merged_tree(data_dir)

    for collection in collections:
        console.print(f"[cyan]Installing {collection.name}...[/]")
        zip_path = zips / f"{collection.slug}.zip"
        download_file(session, collection.download_url, zip_path)
        root = unpack_archive(zip_path, zips / collection.slug)
        if not (root / "Shaders").is_dir() and not (root / "Textures").is_dir():
            logger.warning("%s has no Shaders or Textures folder, nothing to install", collection.name)

        merge_tree(root / "Shaders", data_dir / collection.install_path)
        merge_tree(root / "Textures", data_dir / collection.texture_install_path)
