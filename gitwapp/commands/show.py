"""
gitwapp show / diff - Read a file's working-copy content or its diff against HEAD.
"""

import sys

from gitwapp.git import GitError, get_file_content, get_file_diff
from gitwapp.lib.config import AppConfig
from gitwapp.lib.registry import RepositoryRecord
from gitwapp.lib.reporting import EXIT_OK, report_error


def cmd_show(args, record: RepositoryRecord, config: AppConfig) -> int:
    """Write the file's bytes to stdout unchanged."""
    try:
        content = get_file_content(record.path, args.file)
    except GitError as e:
        return report_error(e)
    sys.stdout.buffer.write(content)
    sys.stdout.flush()
    return EXIT_OK


def cmd_diff(args, record: RepositoryRecord, config: AppConfig) -> int:
    try:
        diff = get_file_diff(record.path, args.file)
    except GitError as e:
        return report_error(e)
    if not diff:
        print(f"No changes in {args.file}")
        return EXIT_OK
    print(diff, end="" if diff.endswith("\n") else "\n")
    return EXIT_OK
