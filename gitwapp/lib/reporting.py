"""Turning operation errors into CLI output and exit codes."""

import sys

from gitwapp.git.errors import GitError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

HINTS = {
    "LockContention": "Another git process is using this repository; try again in a moment.",
    "MergeConflict": "Manual intervention required: resolve the conflicts in the working copy, then commit.",
    "NonFastForward": "The remote has commits you don't have; pull first.",
    "AuthenticationUnavailable": "Start ssh-agent, add a key under ~/.ssh, or configure a git credential helper.",
    "IdentityUnavailable": "Run: git config --global user.name '...' && git config --global user.email '...'",
    "UntrackedFile": "Untracked files have no diff; use 'show' to view the content.",
}


def report_error(error: GitError) -> int:
    """Print an operation error with a hint for the user; return the exit code."""
    print(f"ERROR: {error}", file=sys.stderr)
    hint = HINTS.get(error.kind)
    if hint:
        print(f"  {hint}", file=sys.stderr)
    return EXIT_FAILED
