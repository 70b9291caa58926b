"""File content and diff accessors.

Both accessors take a file name from an untrusted caller, so the name is
checked for containment before anything touches the filesystem.
"""

import os
from pathlib import Path

from gitwapp.git.branch import get_head_commit
from gitwapp.git.errors import (
    DetachedOrEmptyRepositoryError,
    FileNotFoundInRepoError,
    PathTraversalRejectedError,
    UntrackedFileError,
    raise_for_result,
)
from gitwapp.git.repository import open_repository, path_in_head, path_in_index
from gitwapp.git.runner import run_git

GIT_DIR_NAME = ".git"


def _inside(root: Path, path: Path) -> bool:
    return path == root or root in path.parents


def repo_relative_path(repo: Path, file: str) -> str:
    """
    Normalize a requested file name to a path relative to the repository root.

    The check is lexical: the final component is not followed, so a tracked
    symlink is a valid path even when its target lies outside the root.
    Only the directories leading to it are resolved.

    Raises:
        FileNotFoundInRepoError: file name is empty
        PathTraversalRejectedError: file is absolute, escapes the root
            (lexically or through a symlinked directory), or points into .git
    """
    if not file or not file.strip():
        raise FileNotFoundInRepoError("No file specified", repo)
    if "\0" in file or os.path.isabs(file):
        raise PathTraversalRejectedError(f"Invalid file path: {file!r}", repo)

    relpath = os.path.normpath(file)
    if relpath == os.curdir:
        raise FileNotFoundInRepoError("No file specified", repo)
    if relpath == os.pardir or relpath.startswith(os.pardir + os.sep):
        raise PathTraversalRejectedError(f"Path escapes the repository: {file!r}", repo)

    if Path(relpath).parts[0] == GIT_DIR_NAME:
        raise PathTraversalRejectedError(f"Access to {GIT_DIR_NAME} is not allowed: {file!r}", repo)

    root = repo.resolve()
    if not _inside(root, (root / relpath).parent.resolve()):
        raise PathTraversalRejectedError(f"Path escapes the repository: {file!r}", repo)

    return Path(relpath).as_posix()


def get_file_content(path: Path | str, file: str) -> bytes:
    """
    Read a file's current bytes from the working copy (not the index or HEAD).

    Unlike the other accessors this follows symlinks, so the fully resolved
    target must also lie inside the repository.

    Raises:
        NotARepositoryError: path is not a repository root
        PathTraversalRejectedError: file resolves outside the repository
        FileNotFoundInRepoError: file does not exist in the working copy,
            or cannot be read
    """
    repo = open_repository(path)
    relpath = repo_relative_path(repo, file)
    root = repo.resolve()
    target = (root / relpath).resolve()
    if not _inside(root, target):
        raise PathTraversalRejectedError(f"Path escapes the repository: {file!r}", repo)
    if target.relative_to(root).parts[:1] == (GIT_DIR_NAME,):
        raise PathTraversalRejectedError(f"Access to {GIT_DIR_NAME} is not allowed: {file!r}", repo)
    try:
        return target.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        raise FileNotFoundInRepoError(f"File not found: {relpath}", repo) from None
    except OSError as e:
        raise FileNotFoundInRepoError(f"Cannot read {relpath}: {e.strerror}", repo) from None


def get_file_diff(path: Path | str, file: str) -> str:
    """
    Unified diff of a file between HEAD and the working copy.

    Returns an empty string for a tracked file with no changes. Untracked
    files have nothing in HEAD to diff against and raise UntrackedFileError
    so callers can disable diff viewing for them.

    Raises:
        NotARepositoryError: path is not a repository root
        PathTraversalRejectedError: file resolves outside the repository
        DetachedOrEmptyRepositoryError: repository has no HEAD commit
        UntrackedFileError: file exists but is not tracked
        FileNotFoundInRepoError: file is unknown to HEAD, index and worktree
    """
    repo = open_repository(path)
    relpath = repo_relative_path(repo, file)

    if get_head_commit(repo) is None:
        raise DetachedOrEmptyRepositoryError(f"{repo} has no commits to diff against", repo)

    if not path_in_index(repo, relpath) and not path_in_head(repo, relpath):
        if os.path.lexists(repo / relpath):
            raise UntrackedFileError(f"{relpath} is untracked; there is no diff against HEAD", repo)
        raise FileNotFoundInRepoError(f"File not found: {relpath}", repo)

    result = run_git(["diff", "--no-color", "--no-ext-diff", "HEAD", "--", relpath], repo)
    raise_for_result(result, f"Diffing {relpath}", repo)
    return result.stdout
