"""Opening a repository at a filesystem path."""

from pathlib import Path

from gitwapp.git.errors import NotARepositoryError
from gitwapp.git.runner import run_git


def open_repository(path: Path | str) -> Path:
    """
    Validate that path is the root of a git work tree.

    Nothing is kept open; every operation calls this again so a repository
    that disappears or moves between calls is reported, not cached.

    Returns:
        The resolved top-level directory

    Raises:
        NotARepositoryError: path is missing, is a file, is a bare repository,
            or is a subdirectory of a work tree rather than its root
    """
    repo = Path(path)
    if not repo.is_dir():
        raise NotARepositoryError(f"{repo} does not exist or is not a directory", repo)

    result = run_git(["rev-parse", "--is-inside-work-tree", "--show-toplevel"], repo)
    lines = result.stdout.splitlines()
    if not result.success or len(lines) < 2 or lines[0].strip() != "true":
        raise NotARepositoryError(f"{repo} is not a git repository", repo)

    toplevel = Path(lines[1].strip()).resolve()
    if toplevel != repo.resolve():
        raise NotARepositoryError(
            f"{repo} is inside the repository at {toplevel}, not its root", repo
        )
    return toplevel


def is_repository(path: Path | str) -> bool:
    """Check whether path is the root of a git work tree."""
    try:
        open_repository(path)
    except NotARepositoryError:
        return False
    return True


def path_in_index(repo: Path, relpath: str) -> bool:
    """Check whether the index has an entry for relpath (or files beneath it)."""
    result = run_git(["ls-files", "--error-unmatch", "--", relpath], repo)
    return result.success


def path_in_head(repo: Path, relpath: str) -> bool:
    """Check whether the HEAD commit contains relpath."""
    result = run_git(["cat-file", "-e", f"HEAD:{relpath}"], repo)
    return result.success
