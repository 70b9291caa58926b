"""Repository state engine for gitwapp.

Computes a working copy's status relative to its upstream and performs the
basic mutations (stage, unstage, commit, push, pull) on it. Every operation
takes a filesystem path, opens the repository fresh, and holds nothing
between calls.

Error conventions:
- Operations raise a GitError subclass on failure. Each subclass has a
  stable .kind (e.g. "NotARepository", "MergeConflict") for callers to map
  to their own responses. Nothing is retried internally.
- Functions returning bool or Optional values (has_remote(), resolve_commit())
  report absence instead of raising.
"""

from gitwapp.git.errors import (
    GitError,
    NotARepositoryError,
    DetachedOrEmptyRepositoryError,
    FileNotFoundInRepoError,
    PathTraversalRejectedError,
    UntrackedFileError,
    EmptyMessageError,
    NothingToCommitError,
    IdentityUnavailableError,
    NoSuchCommitError,
    NoRemoteConfiguredError,
    AuthenticationUnavailableError,
    NonFastForwardError,
    MergeConflictError,
    LockContentionError,
    GitCommandFailedError,
)
from gitwapp.git.repository import (
    open_repository,
    is_repository,
)
from gitwapp.git.status import (
    StatusCode,
    FileStatus,
    StatusSnapshot,
    get_status,
    get_worktree_status,
    has_uncommitted_changes,
)
from gitwapp.git.branch import (
    get_current_branch,
    get_head_commit,
    resolve_commit,
    count_commits_between,
    get_divergence,
)
from gitwapp.git.commit import (
    stage_file,
    unstage_file,
    stage_all,
    unstage_all,
    commit,
)
from gitwapp.git.remote import (
    get_remote_url,
    has_remote,
    push,
    pull,
)
from gitwapp.git.auth import (
    AuthMethod,
    resolve_auth,
)
from gitwapp.git.diff import (
    get_file_content,
    get_file_diff,
)

__all__ = [
    # errors
    "GitError",
    "NotARepositoryError",
    "DetachedOrEmptyRepositoryError",
    "FileNotFoundInRepoError",
    "PathTraversalRejectedError",
    "UntrackedFileError",
    "EmptyMessageError",
    "NothingToCommitError",
    "IdentityUnavailableError",
    "NoSuchCommitError",
    "NoRemoteConfiguredError",
    "AuthenticationUnavailableError",
    "NonFastForwardError",
    "MergeConflictError",
    "LockContentionError",
    "GitCommandFailedError",
    # repository
    "open_repository",
    "is_repository",
    # status
    "StatusCode",
    "FileStatus",
    "StatusSnapshot",
    "get_status",
    "get_worktree_status",
    "has_uncommitted_changes",
    # branch
    "get_current_branch",
    "get_head_commit",
    "resolve_commit",
    "count_commits_between",
    "get_divergence",
    # commit
    "stage_file",
    "unstage_file",
    "stage_all",
    "unstage_all",
    "commit",
    # remote
    "get_remote_url",
    "has_remote",
    "push",
    "pull",
    # auth
    "AuthMethod",
    "resolve_auth",
    # diff
    "get_file_content",
    "get_file_diff",
]
