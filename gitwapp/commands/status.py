"""
gitwapp status - Show a repository's synchronization status.
"""

import json

from gitwapp.git import GitError, StatusCode, StatusSnapshot, get_status
from gitwapp.lib.config import AppConfig
from gitwapp.lib.registry import RepositoryRecord
from gitwapp.lib.reporting import EXIT_OK, report_error

CODE_LABELS = {
    StatusCode.MODIFIED: "modified",
    StatusCode.ADDED: "new file",
    StatusCode.DELETED: "deleted",
    StatusCode.RENAMED: "renamed",
    StatusCode.COPIED: "copied",
    StatusCode.UPDATED_BUT_UNMERGED: "unmerged",
    StatusCode.UNTRACKED: "untracked",
}


def format_sync(snapshot: StatusSnapshot) -> str:
    """One-line ahead/behind summary."""
    if not snapshot.divergence_known:
        return "ahead/behind unknown (history too large to compare)"
    if snapshot.ahead == 0 and snapshot.behind == 0:
        return "up to date with remote-tracking branch"
    parts = []
    if snapshot.ahead:
        parts.append(f"ahead {snapshot.ahead}")
    if snapshot.behind:
        parts.append(f"behind {snapshot.behind}")
    return ", ".join(parts)


def format_status(record: RepositoryRecord, snapshot: StatusSnapshot) -> str:
    lines = [
        f"Repository: {record.name}",
        "=" * 60,
        "",
        f"Path:    {record.path}",
        f"Branch:  {snapshot.branch}",
        f"Sync:    {format_sync(snapshot)}",
        f"State:   {'clean' if snapshot.clean else 'dirty'}",
    ]

    staged = snapshot.staged_files()
    if staged:
        lines += ["", "Staged:"]
        for path in staged:
            entry = snapshot.entries[path]
            label = CODE_LABELS.get(entry.staging, "changed")
            source = f" (from {entry.extra})" if entry.extra else ""
            lines.append(f"  {label + ':':<11} {path}{source}")

    unstaged = [p for p in snapshot.unstaged_files() if not snapshot.entries[p].is_untracked]
    if unstaged:
        lines += ["", "Not staged:"]
        for path in unstaged:
            label = CODE_LABELS.get(snapshot.entries[path].worktree, "changed")
            lines.append(f"  {label + ':':<11} {path}")

    untracked = sorted(p for p, s in snapshot.entries.items() if s.is_untracked)
    if untracked:
        lines += ["", "Untracked:"]
        lines += [f"  {path}" for path in untracked]

    return "\n".join(lines)


def cmd_status(args, record: RepositoryRecord, config: AppConfig) -> int:
    """Show status of a tracked repository."""
    try:
        snapshot = get_status(
            record.path,
            remote=config.remote_name,
            traversal_limit=config.traversal_limit,
        )
    except GitError as e:
        return report_error(e)

    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2))
    else:
        print(format_status(record, snapshot))
    return EXIT_OK
