"""Git index and commit operations.

Each function is a single, independently committing action, like the git
command it wraps. There is no rollback: a failure leaves the working copy
in whatever state git left it.
"""

import logging
import os
from pathlib import Path

from gitwapp.git.branch import get_head_commit
from gitwapp.git.diff import repo_relative_path
from gitwapp.git.errors import (
    EmptyMessageError,
    FileNotFoundInRepoError,
    IdentityUnavailableError,
    NoSuchCommitError,
    NothingToCommitError,
    raise_for_result,
)
from gitwapp.git.repository import open_repository, path_in_head, path_in_index
from gitwapp.git.runner import run_git

logger = logging.getLogger(__name__)

IDENTITY_MARKERS = (
    "please tell me who you are",
    "unable to auto-detect email address",
    "empty ident name",
)


def _require_head(repo: Path, action: str) -> str:
    head = get_head_commit(repo)
    if head is None:
        raise NoSuchCommitError(f"Cannot {action}: {repo} has no commits yet", repo)
    return head


def _require_known_path(repo: Path, relpath: str) -> None:
    if os.path.lexists(repo / relpath):
        return
    if path_in_index(repo, relpath) or path_in_head(repo, relpath):
        return
    raise FileNotFoundInRepoError(f"File not found: {relpath}", repo)


def stage_file(path: Path | str, file: str) -> None:
    """
    Stage one path: new, modified or deleted.

    Staging an already-staged path is a no-op.
    """
    repo = open_repository(path)
    relpath = repo_relative_path(repo, file)
    _require_known_path(repo, relpath)

    result = run_git(["add", "-A", "--", relpath], repo)
    raise_for_result(result, f"Staging {relpath}", repo)
    logger.info("Staged %s in %s", relpath, repo)


def unstage_file(path: Path | str, file: str) -> None:
    """Reset one path's index entry to HEAD, leaving the worktree untouched."""
    repo = open_repository(path)
    relpath = repo_relative_path(repo, file)
    _require_head(repo, f"unstage {relpath}")
    _require_known_path(repo, relpath)

    result = run_git(["reset", "-q", "HEAD", "--", relpath], repo)
    raise_for_result(result, f"Unstaging {relpath}", repo)
    logger.info("Unstaged %s in %s", relpath, repo)


def stage_all(path: Path | str) -> None:
    """Stage all changes (new, modified, deleted)."""
    repo = open_repository(path)
    result = run_git(["add", "-A"], repo)
    raise_for_result(result, "Staging all changes", repo)
    logger.info("Staged all changes in %s", repo)


def unstage_all(path: Path | str) -> None:
    """Reset the whole index to HEAD."""
    repo = open_repository(path)
    _require_head(repo, "unstage changes")
    result = run_git(["reset", "-q"], repo)
    raise_for_result(result, "Unstaging all changes", repo)
    logger.info("Unstaged all changes in %s", repo)


def has_staged_changes(repo: Path) -> bool:
    """Check if the index differs from HEAD (or from nothing, before the first commit)."""
    result = run_git(["diff", "--cached", "--quiet"], repo)
    # exit 0 = no changes, exit 1 = has changes
    if result.returncode in (0, 1):
        return result.returncode == 1
    raise_for_result(result, "Comparing index to HEAD", repo)
    return False


def commit(path: Path | str, message: str) -> str:
    """
    Create a commit from the current index.

    The author comes from git's own configuration chain (repository, global,
    system, environment), never from a hardcoded identity.

    Returns:
        Hash of the new commit

    Raises:
        EmptyMessageError: message is blank; git is never invoked
        NothingToCommitError: index matches HEAD
        IdentityUnavailableError: git cannot determine an author
    """
    if not message or not message.strip():
        raise EmptyMessageError("Commit message required", path)

    repo = open_repository(path)
    if not has_staged_changes(repo):
        raise NothingToCommitError(f"Nothing to commit in {repo}: index matches HEAD", repo)

    result = run_git(["commit", "-q", "-m", message], repo)
    if not result.success and any(m in result.output.lower() for m in IDENTITY_MARKERS):
        raise IdentityUnavailableError(
            "No author identity configured; set user.name and user.email", repo
        )
    raise_for_result(result, "Commit", repo)

    sha = get_head_commit(repo) or ""
    logger.info("Created commit %s in %s: %s", sha[:7], repo, message.splitlines()[0][:50])
    return sha
