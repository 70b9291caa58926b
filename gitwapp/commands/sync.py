"""
gitwapp push / pull - Exchange commits with the remote.

Each call resolves credentials afresh and reports a failure once; retrying
is left to the user.
"""

from gitwapp.git import GitError, pull, push
from gitwapp.lib.config import AppConfig
from gitwapp.lib.registry import RepositoryRecord
from gitwapp.lib.reporting import EXIT_OK, report_error


def _print_output(text: str) -> None:
    for line in text.strip().splitlines():
        print(f"  {line}")


def cmd_push(args, record: RepositoryRecord, config: AppConfig) -> int:
    print(f"Pushing {record.name} to {config.remote_name}...")
    try:
        result = push(record.path, remote=config.remote_name, timeout=config.network_timeout)
    except GitError as e:
        return report_error(e)
    _print_output(result.stdout)
    print("Push complete.")
    return EXIT_OK


def cmd_pull(args, record: RepositoryRecord, config: AppConfig) -> int:
    print(f"Pulling {record.name} from {config.remote_name}...")
    try:
        result = pull(record.path, remote=config.remote_name, timeout=config.network_timeout)
    except GitError as e:
        return report_error(e)
    _print_output(result.stdout)
    print("Pull complete.")
    return EXIT_OK
