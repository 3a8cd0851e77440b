"""
Error types raised by the ReShader installer.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations


class ReShaderError(Exception):
    """Base class for every error the installer reports to the user."""


class FetchLatestVersionError(ReShaderError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Unable to fetch latest ReShade version: {reason}")
        self.reason = reason


class DownloadError(ReShaderError):
    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"Unable to download {url}: {cause}")
        self.url = url
        self.cause = cause


class NoArchiveFoundError(ReShaderError):
    def __init__(self, path: str) -> None:
        super().__init__(f"ReShade installer had no zip file: {path}")
        self.path = path


class EntryNotFoundError(ReShaderError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name} not found in ReShade installer")
        self.name = name


class ZipReadError(ReShaderError):
    def __init__(self, path: str, cause: str = "") -> None:
        message = f"Unable to read zip file {path}"
        super().__init__(f"{message}: {cause}" if cause else message)
        self.path = path


class ZipExtractError(ReShaderError):
    def __init__(self, path: str, cause: str = "") -> None:
        message = f"Unable to extract zip file {path}"
        super().__init__(f"{message}: {cause}" if cause else message)
        self.path = path


class SymlinkConflictError(ReShaderError):
    """The link target exists and is a real file or directory."""

    def __init__(self, source: str, target: str, reason: str) -> None:
        super().__init__(f"Could not symlink {source} to {target}: {reason}")
        self.source = source
        self.target = target


class GamePathError(ReShaderError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Game directory does not exist: {path}")
        self.path = path


class RepositoryNotFoundError(ReShaderError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Could not find repository for {name}")
        self.name = name


class BranchNotFoundError(ReShaderError):
    def __init__(self, branch: str, repository: str) -> None:
        super().__init__(f"Could not find branch {branch} for repository {repository}")
        self.branch = branch
        self.repository = repository


class MergeConflictError(ReShaderError):
    """Raised after a pull left conflicts in the working tree."""

    def __init__(self, branch: str, repository: str) -> None:
        super().__init__(
            f"Merge conflicts found for branch {branch} of repository {repository}"
        )
        self.branch = branch
        self.repository = repository


class GitError(ReShaderError):
    def __init__(self, command: str, output: str) -> None:
        super().__init__(f"git {command} failed: {output.strip()}")
        self.command = command
        self.output = output


class UnknownCollectionError(ReShaderError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown shader collection: {name}")
        self.name = name


class FileSystemError(ReShaderError):
    def __init__(self, action: str, cause: OSError) -> None:
        super().__init__(f"Failed to {action}: {cause}")
        self.action = action
        self.cause = cause


class ConfigError(ReShaderError):
    def __init__(self, path: str, cause: str) -> None:
        super().__init__(f"Could not deserialize the configuration file {path}: {cause}")
        self.path = path
