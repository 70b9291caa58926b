"""Repository status snapshots.

A snapshot is computed fresh on every call and never cached: the working
copy can change underneath us at any time (the user's own git CLI, an
editor, another request).
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

from gitwapp.git.branch import (
    DEFAULT_TRAVERSAL_LIMIT,
    get_current_branch,
    get_divergence,
    get_head_commit,
)
from gitwapp.git.errors import DetachedOrEmptyRepositoryError, raise_for_result
from gitwapp.git.repository import open_repository
from gitwapp.git.runner import run_git

logger = logging.getLogger(__name__)

DETACHED_BRANCH = "HEAD"


class StatusCode(IntEnum):
    """Per-file status codes, valued as the porcelain status characters."""
    UNMODIFIED = ord(" ")
    UNTRACKED = ord("?")
    MODIFIED = ord("M")
    ADDED = ord("A")
    DELETED = ord("D")
    RENAMED = ord("R")
    COPIED = ord("C")
    UPDATED_BUT_UNMERGED = ord("U")

    @classmethod
    def from_char(cls, char: str) -> "StatusCode":
        # Type changes have no code of their own; the content did change.
        if char == "T":
            return cls.MODIFIED
        return cls(ord(char))


@dataclass
class FileStatus:
    """Status of one path on both axes: index vs HEAD, and worktree vs index."""
    staging: StatusCode
    worktree: StatusCode
    extra: str = ""  # Source path of a rename or copy

    @property
    def is_untracked(self) -> bool:
        return self.staging == StatusCode.UNTRACKED

    @property
    def is_staged(self) -> bool:
        return self.staging not in (StatusCode.UNMODIFIED, StatusCode.UNTRACKED)

    @property
    def has_unstaged_changes(self) -> bool:
        return self.worktree != StatusCode.UNMODIFIED

    @property
    def is_unmodified(self) -> bool:
        return self.staging == StatusCode.UNMODIFIED and self.worktree == StatusCode.UNMODIFIED

    def to_dict(self) -> dict:
        return {
            "Staging": int(self.staging),
            "Worktree": int(self.worktree),
            "Extra": self.extra,
        }


@dataclass
class StatusSnapshot:
    """Point-in-time synchronization state of one working copy."""
    clean: bool
    branch: str
    ahead: int
    behind: int
    entries: dict[str, FileStatus] = field(default_factory=dict)
    divergence_known: bool = True

    def staged_files(self) -> list[str]:
        return sorted(p for p, s in self.entries.items() if s.is_staged)

    def unstaged_files(self) -> list[str]:
        return sorted(p for p, s in self.entries.items() if s.has_unstaged_changes)

    def to_dict(self) -> dict:
        return {
            "Clean": self.clean,
            "Ahead": self.ahead,
            "Behind": self.behind,
            "Branch": self.branch,
            "Worktree": {path: status.to_dict() for path, status in sorted(self.entries.items())},
            "DivergenceKnown": self.divergence_known,
        }


def parse_porcelain_z(output: str) -> dict[str, FileStatus]:
    """
    Parse `git status --porcelain=v1 -z` output into per-path entries.

    -z format: "XY path\\0", or "XY dest\\0source\\0" for renames and copies.
    Paths are never quoted in this format.
    """
    entries: dict[str, FileStatus] = {}
    fields = output.split("\0")
    i = 0
    while i < len(fields):
        entry = fields[i]
        i += 1
        if len(entry) < 4:
            continue

        x, y, path = entry[0], entry[1], entry[3:]
        extra = ""
        if ("R" in (x, y) or "C" in (x, y)) and i < len(fields):
            extra = fields[i]
            i += 1

        entries[path] = FileStatus(
            staging=StatusCode.from_char(x),
            worktree=StatusCode.from_char(y),
            extra=extra,
        )
    return entries


def get_worktree_status(repo: Path) -> dict[str, FileStatus]:
    """Read per-file status for every changed, staged or untracked path."""
    # Never refresh the index: polling must not take index.lock
    result = run_git(
        ["status", "--porcelain=v1", "-z", "--untracked-files=all", "--ignore-submodules=dirty"],
        repo,
        options=["--no-optional-locks"],
    )
    raise_for_result(result, "Reading worktree status", repo)
    return parse_porcelain_z(result.stdout)


def has_uncommitted_changes(repo: Path) -> bool:
    """Check if worktree has any uncommitted changes (staged, unstaged, or untracked)."""
    return bool(get_worktree_status(repo))


def get_status(
    path: Path | str,
    remote: str = "origin",
    traversal_limit: int = DEFAULT_TRAVERSAL_LIMIT,
) -> StatusSnapshot:
    """
    Compute the status snapshot of the repository at path.

    Read-only and safe to call concurrently and repeatedly.

    Raises:
        NotARepositoryError: path is not a repository root
        DetachedOrEmptyRepositoryError: HEAD does not resolve to a commit
    """
    repo = open_repository(path)
    entries = get_worktree_status(repo)

    if get_head_commit(repo) is None:
        raise DetachedOrEmptyRepositoryError(
            f"HEAD in {repo} does not point to a commit; status is unavailable", repo
        )

    branch = get_current_branch(repo)
    if branch is None:
        branch = DETACHED_BRANCH
        ahead, behind, known = 0, 0, True
    else:
        ahead, behind, known = get_divergence(repo, branch, remote, traversal_limit)

    clean = all(status.is_unmodified for status in entries.values())
    logger.debug(
        "Status of %s: branch=%s clean=%s ahead=%d behind=%d entries=%d",
        repo, branch, clean, ahead, behind, len(entries),
    )
    return StatusSnapshot(
        clean=clean,
        branch=branch,
        ahead=ahead,
        behind=behind,
        entries=entries,
        divergence_known=known,
    )
