"""
Error taxonomy for repository operations.

Every failure an operation can report has its own exception class with a
stable ``kind`` string, so callers can branch on the kind without parsing
messages. Nothing here is retried internally; ``retryable`` only tells the
caller whether asking the user to try again makes sense.
"""

from pathlib import Path

from gitwapp.git.runner import GitResult


class GitError(Exception):
    """Base class for repository operation failures."""

    kind = "GitError"
    retryable = False

    def __init__(self, message: str, path: Path | str | None = None):
        self.path = path
        super().__init__(message)


class NotARepositoryError(GitError):
    kind = "NotARepository"


class DetachedOrEmptyRepositoryError(GitError):
    kind = "DetachedOrEmptyRepository"


class FileNotFoundInRepoError(GitError):
    kind = "FileNotFound"


class PathTraversalRejectedError(GitError):
    """Requested file resolves outside the repository root."""

    kind = "PathTraversalRejected"


class UntrackedFileError(GitError):
    """File exists but git does not track it, so there is no diff against HEAD."""

    kind = "UntrackedFile"


class EmptyMessageError(GitError):
    kind = "EmptyMessage"


class NothingToCommitError(GitError):
    kind = "NothingToCommit"


class IdentityUnavailableError(GitError):
    kind = "IdentityUnavailable"


class NoSuchCommitError(GitError):
    kind = "NoSuchCommit"


class NoRemoteConfiguredError(GitError):
    kind = "NoRemoteConfigured"


class AuthenticationUnavailableError(GitError):
    kind = "AuthenticationUnavailable"


class NonFastForwardError(GitError):
    kind = "NonFastForward"


class MergeConflictError(GitError):
    kind = "MergeConflict"


class LockContentionError(GitError):
    """Another git process holds a lock file (usually index.lock)."""

    kind = "LockContention"
    retryable = True


class GitCommandFailedError(GitError):
    """A git command failed in a way no other kind describes."""

    kind = "GitCommandFailed"

    def __init__(self, message: str, path: Path | str | None = None, result: GitResult | None = None):
        self.result = result
        super().__init__(message, path)

    @property
    def timed_out(self) -> bool:
        return bool(self.result and self.result.timed_out)


NOT_A_REPO_MARKERS = (
    "not a git repository",
    "cannot change to",
)

LOCK_MARKERS = (
    "index.lock",
    ".lock': file exists",
    "another git process seems to be running",
    "cannot lock ref",
)


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def describe(result: GitResult) -> str:
    """Short human-readable reason for a failed result."""
    return _first_line(result.stderr) or _first_line(result.stdout) or f"exit code {result.returncode}"


def is_lock_contention(result: GitResult) -> bool:
    text = result.output.lower()
    return any(marker in text for marker in LOCK_MARKERS)


def raise_for_result(result: GitResult, action: str, path: Path | str | None = None) -> None:
    """
    Raise the matching GitError for a failed result; do nothing on success.

    Only the failure modes shared by every operation are classified here.
    Operations check their own specific failures before calling this.
    """
    if result.success:
        return

    if result.timed_out:
        raise GitCommandFailedError(f"{action} timed out: {result.stderr}", path, result)

    text = result.output.lower()
    if any(marker in text for marker in NOT_A_REPO_MARKERS):
        raise NotARepositoryError(f"{action} failed: {path} is not a git repository", path)

    if is_lock_contention(result):
        raise LockContentionError(
            f"{action} failed: repository is locked by another git process ({describe(result)})",
            path,
        )

    raise GitCommandFailedError(f"{action} failed: {describe(result)}", path, result)
