"""
Cloning and updating shader repositories with the git command line.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional

from reshader.errors import (
    BranchNotFoundError,
    GitError,
    MergeConflictError,
    RepositoryNotFoundError,
)

logger = logging.getLogger(__name__)


class PullResult(Enum):
    UP_TO_DATE = "up-to-date"
    FAST_FORWARD = "fast-forward"
    MERGED = "merged"


def _run(
    args: list[str],
    cwd: Optional[Path] = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    command = ["git"]
    if cwd is not None:
        command += ["-C", str(cwd)]
    command += args
    logger.debug("Running %s", " ".join(command))

    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except OSError as e:
        raise GitError(args[0], str(e)) from e

    if check and result.returncode != 0:
        raise GitError(args[0], result.stderr or result.stdout)
    return result


def _output(repository: Path, *args: str) -> str:
    return _run(list(args), cwd=repository).stdout.strip()


def _is_ancestor(repository: Path, ancestor: str, descendant: str) -> bool:
    result = _run(["merge-base", "--is-ancestor", ancestor, descendant], cwd=repository, check=False)
    if result.returncode not in (0, 1):
        raise GitError("merge-base", result.stderr)
    return result.returncode == 0


def _has_ref(repository: Path, refname: str) -> bool:
    result = _run(["show-ref", "--verify", "--quiet", refname], cwd=repository, check=False)
    return result.returncode == 0


def clone(url: str, repository: Path, branch: Optional[str] = None) -> None:
    """Clone ``url`` into ``repository``, optionally checking out ``branch``."""
    args = ["clone"]
    if branch:
        args += ["--branch", branch]
    args += [url, str(repository)]
    _run(args)


def pull(repository: Path, branch: Optional[str] = None) -> PullResult:
    """
    Fetch ``branch`` (or the checked out branch) from origin and integrate it.

    Fast-forwards move the local branch and force a checkout, discarding
    local modifications. Diverged histories are merged with a merge commit;
    on conflicts the working tree is left conflicted for manual resolution
    and MergeConflictError is raised.
    """
    name = repository.name
    if not repository.exists():
        raise RepositoryNotFoundError(name)

    refspec = branch or _output(repository, "rev-parse", "--abbrev-ref", "HEAD")
    _run(["fetch", "origin", refspec], cwd=repository)

    head = _output(repository, "rev-parse", "HEAD")
    fetched = _output(repository, "rev-parse", "FETCH_HEAD")

    if head == fetched or _is_ancestor(repository, fetched, head):
        logger.debug("%s is up to date", name)
        return PullResult.UP_TO_DATE

    if _is_ancestor(repository, head, fetched):
        refname = f"refs/heads/{refspec}"
        if not _has_ref(repository, refname):
            raise BranchNotFoundError(refspec, name)

        _run(["update-ref", "-m", f"ff: {refname} -> {fetched}", refname, fetched], cwd=repository)
        _run(["symbolic-ref", "HEAD", refname], cwd=repository)
        _run(["checkout", "--force", refspec, "--"], cwd=repository)
        logger.debug("Fast-forwarded %s to %s", name, fetched)
        return PullResult.FAST_FORWARD

    message = f"merge: {head} -> {fetched}"
    result = _run(["merge", "--no-ff", "--no-edit", "-m", message, fetched], cwd=repository, check=False)
    if result.returncode != 0:
        conflicts = _output(repository, "diff", "--name-only", "--diff-filter=U")
        if conflicts:
            raise MergeConflictError(refspec, name)
        raise GitError("merge", result.stderr or result.stdout)

    logger.debug("Merged %s into %s", fetched, name)
    return PullResult.MERGED
