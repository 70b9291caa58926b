"""Git remote operations."""

import logging
from pathlib import Path

from gitwapp.git.auth import resolve_auth
from gitwapp.git.branch import get_current_branch, get_head_commit
from gitwapp.git.commit import IDENTITY_MARKERS
from gitwapp.git.errors import (
    AuthenticationUnavailableError,
    DetachedOrEmptyRepositoryError,
    IdentityUnavailableError,
    MergeConflictError,
    NoRemoteConfiguredError,
    NonFastForwardError,
    describe,
    raise_for_result,
)
from gitwapp.git.repository import open_repository
from gitwapp.git.runner import GitResult, run_git

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
NETWORK_TIMEOUT = 60

AUTH_MARKERS = (
    "permission denied",
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "host key verification failed",
    "invalid username or password",
)

REJECTED_MARKERS = (
    "rejected]",
    "non-fast-forward",
    "fetch first",
    "updates were rejected",
)

CONFLICT_MARKERS = (
    "conflict (",
    "automatic merge failed",
    "would be overwritten by merge",
    "you have not concluded your merge",
    "unmerged files",
)

MISSING_REMOTE_BRANCH_MARKERS = (
    "couldn't find remote ref",
)


def _matches(result: GitResult, markers: tuple[str, ...]) -> bool:
    text = result.output.lower()
    return any(marker in text for marker in markers)


def get_remote_url(repo: Path, remote: str = DEFAULT_REMOTE) -> str:
    """URL of a configured remote."""
    result = run_git(["remote", "get-url", remote], repo)
    url = result.stdout.strip()
    if not result.success or not url:
        raise NoRemoteConfiguredError(f"No remote '{remote}' configured in {repo}", repo)
    return url


def has_remote(repo: Path, remote: str = DEFAULT_REMOTE) -> bool:
    """Check if repo has the named remote configured."""
    try:
        get_remote_url(repo, remote)
    except NoRemoteConfiguredError:
        return False
    return True


def _current_branch_for_sync(repo: Path, action: str) -> str:
    branch = get_current_branch(repo)
    if branch is None:
        raise DetachedOrEmptyRepositoryError(f"Cannot {action}: HEAD in {repo} is detached", repo)
    if get_head_commit(repo) is None:
        raise DetachedOrEmptyRepositoryError(f"Cannot {action}: {repo} has no commits yet", repo)
    return branch


def _raise_for_network_result(result: GitResult, action: str, repo: Path) -> None:
    if result.success:
        return
    if _matches(result, AUTH_MARKERS):
        raise AuthenticationUnavailableError(f"{action} failed: {describe(result)}", repo)
    raise_for_result(result, action, repo)


def push(
    path: Path | str,
    remote: str = DEFAULT_REMOTE,
    timeout: int = NETWORK_TIMEOUT,
    home: Path | None = None,
) -> GitResult:
    """
    Push the current branch to the same-named branch on remote.

    Raises:
        NoRemoteConfiguredError: remote is not configured
        AuthenticationUnavailableError: no credentials, or credentials refused
        NonFastForwardError: the remote rejected the update
        DetachedOrEmptyRepositoryError: no branch or no commits to push
    """
    repo = open_repository(path)
    branch = _current_branch_for_sync(repo, "push")
    url = get_remote_url(repo, remote)
    auth = resolve_auth(url, repo, home=home)

    result = run_git(
        ["push", "--porcelain", remote, f"refs/heads/{branch}:refs/heads/{branch}"],
        repo,
        timeout=timeout,
        env=auth.env,
        options=auth.options,
    )
    if not result.success and _matches(result, REJECTED_MARKERS):
        raise NonFastForwardError(
            f"Push of {branch} to {remote} was rejected; pull first ({describe(result)})", repo
        )
    _raise_for_network_result(result, f"Push to {remote}", repo)

    logger.info("Pushed %s to %s from %s (%s)", branch, remote, repo, auth.kind)
    return result


def pull(
    path: Path | str,
    remote: str = DEFAULT_REMOTE,
    timeout: int = NETWORK_TIMEOUT,
    home: Path | None = None,
) -> GitResult:
    """
    Fetch the current branch from remote and merge it (fast-forward or merge commit).

    Being already up to date is a success.

    Raises:
        NoRemoteConfiguredError: remote is not configured or lacks the branch
        AuthenticationUnavailableError: no credentials, or credentials refused
        MergeConflictError: the merge stopped and needs manual resolution
        DetachedOrEmptyRepositoryError: no branch or no commits to merge into
    """
    repo = open_repository(path)
    branch = _current_branch_for_sync(repo, "pull")
    url = get_remote_url(repo, remote)
    auth = resolve_auth(url, repo, home=home)

    result = run_git(
        ["pull", "--no-rebase", "--no-edit", remote, branch],
        repo,
        timeout=timeout,
        env=auth.env,
        options=auth.options,
    )
    if not result.success:
        if _matches(result, CONFLICT_MARKERS):
            raise MergeConflictError(
                f"Pull from {remote} stopped with conflicts; manual intervention required "
                f"({describe(result)})",
                repo,
            )
        if _matches(result, MISSING_REMOTE_BRANCH_MARKERS):
            raise NoRemoteConfiguredError(f"Remote '{remote}' has no branch '{branch}'", repo)
        if _matches(result, IDENTITY_MARKERS):
            raise IdentityUnavailableError(
                "No author identity configured for the merge commit; set user.name and user.email",
                repo,
            )
    _raise_for_network_result(result, f"Pull from {remote}", repo)

    logger.info("Pulled %s from %s into %s (%s)", branch, remote, repo, auth.kind)
    return result
