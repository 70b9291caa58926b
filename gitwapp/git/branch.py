"""Git branch, ref and commit-graph operations."""

import logging
from contextlib import closing
from pathlib import Path

from gitwapp.git.runner import iter_git_lines, run_git

logger = logging.getLogger(__name__)

DEFAULT_TRAVERSAL_LIMIT = 10000


def get_current_branch(repo: Path) -> str | None:
    """Short name of HEAD's symbolic ref, or None if HEAD is detached."""
    result = run_git(["symbolic-ref", "-q", "--short", "HEAD"], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def resolve_commit(repo: Path, ref: str) -> str | None:
    """Resolve a ref to a full commit hash, or None if it does not exist."""
    result = run_git(["rev-parse", "-q", "--verify", f"{ref}^{{commit}}"], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def get_head_commit(repo: Path) -> str | None:
    """Hash of the HEAD commit, or None for a repository with no commits."""
    return resolve_commit(repo, "HEAD")


def tracking_ref(branch: str, remote: str = "origin") -> str:
    """Remote-tracking ref name for a local branch."""
    return f"refs/remotes/{remote}/{branch}"


def count_commits_between(
    repo: Path,
    start: str,
    stop: str,
    limit: int = DEFAULT_TRAVERSAL_LIMIT,
) -> int | None:
    """
    Count commits reachable from start but not from stop.

    Walks the ancestry of start newest-first with everything reachable from
    stop excluded, so the walk ends where the two histories meet. If the
    histories share nothing, every ancestor of start is counted.

    Returns:
        Number of commits visited, or None if the walk hit limit first
    """
    if start == stop:
        return 0

    count = 0
    args = ["rev-list", f"--max-count={limit + 1}", start, f"^{stop}"]
    with closing(iter_git_lines(args, repo)) as commits:
        for _ in commits:
            count += 1
            if count > limit:
                return None
    return count


def get_divergence(
    repo: Path,
    branch: str,
    remote: str = "origin",
    limit: int = DEFAULT_TRAVERSAL_LIMIT,
) -> tuple[int, int, bool]:
    """
    Compute how far a branch is ahead of and behind its remote-tracking ref.

    A branch without a remote-tracking ref is neither ahead nor behind.
    Only the local tracking ref is consulted; nothing is fetched.

    Returns:
        (ahead, behind, known). known is False when either walk hit the
        traversal limit, in which case the capped side is reported as 0.
    """
    remote_ref = tracking_ref(branch, remote)
    remote_commit = resolve_commit(repo, remote_ref)
    if remote_commit is None:
        return 0, 0, True

    local_commit = resolve_commit(repo, f"refs/heads/{branch}")
    if local_commit is None or local_commit == remote_commit:
        return 0, 0, True

    ahead = count_commits_between(repo, local_commit, remote_commit, limit)
    behind = count_commits_between(repo, remote_commit, local_commit, limit)

    known = ahead is not None and behind is not None
    if not known:
        logger.warning(
            "Ahead/behind for %s in %s exceeded %d commits; reporting as unknown",
            branch, repo, limit,
        )
    return ahead or 0, behind or 0, known
