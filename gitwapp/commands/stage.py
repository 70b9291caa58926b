"""
gitwapp stage / unstage / stage-all / unstage-all / commit - Index and commit operations.
"""

from gitwapp.git import (
    GitError,
    commit,
    stage_all,
    stage_file,
    unstage_all,
    unstage_file,
)
from gitwapp.lib.config import AppConfig
from gitwapp.lib.registry import RepositoryRecord
from gitwapp.lib.reporting import EXIT_OK, report_error


def cmd_stage(args, record: RepositoryRecord, config: AppConfig) -> int:
    try:
        stage_file(record.path, args.file)
    except GitError as e:
        return report_error(e)
    print(f"Staged {args.file}")
    return EXIT_OK


def cmd_unstage(args, record: RepositoryRecord, config: AppConfig) -> int:
    try:
        unstage_file(record.path, args.file)
    except GitError as e:
        return report_error(e)
    print(f"Unstaged {args.file}")
    return EXIT_OK


def cmd_stage_all(args, record: RepositoryRecord, config: AppConfig) -> int:
    try:
        stage_all(record.path)
    except GitError as e:
        return report_error(e)
    print(f"Staged all changes in {record.name}")
    return EXIT_OK


def cmd_unstage_all(args, record: RepositoryRecord, config: AppConfig) -> int:
    try:
        unstage_all(record.path)
    except GitError as e:
        return report_error(e)
    print(f"Unstaged all changes in {record.name}")
    return EXIT_OK


def cmd_commit(args, record: RepositoryRecord, config: AppConfig) -> int:
    """Commit the staged changes."""
    try:
        sha = commit(record.path, args.message or "")
    except GitError as e:
        return report_error(e)
    print(f"Committed {sha[:7]}: {args.message.splitlines()[0]}")
    return EXIT_OK
