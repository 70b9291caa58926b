#!/usr/bin/env python3
"""gitwapp CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from gitwapp.lib.config import AppConfig, load_app_config
from gitwapp.lib.registry import Registry, RegistryError
from gitwapp.lib.locking import LockTimeout
from gitwapp.lib.reporting import EXIT_FAILED, EXIT_USAGE
from gitwapp.lib.validate import ValidationError
from gitwapp.commands import repo as cmd_repo_module
from gitwapp.commands import status as cmd_status_module
from gitwapp.commands import stage as cmd_stage_module
from gitwapp.commands import sync as cmd_sync_module
from gitwapp.commands import show as cmd_show_module

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(config: AppConfig, verbose: bool = False) -> None:
    """Configure the root logger once, from config and the -v flag."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_file))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def get_context(args) -> tuple[AppConfig, Registry]:
    """Load config (from --config-dir or the default location) and the registry."""
    config_dir = Path(args.config_dir) if args.config_dir else None
    try:
        config = load_app_config(config_dir)
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)
    setup_logging(config, args.verbose)
    return config, Registry.from_config(config)


def resolve_repository(args, registry: Registry):
    """Resolve the repo argument (id or name) to a registry record, fresh on every call."""
    try:
        return registry.find(args.repo)
    except (RegistryError, ValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        print("Use 'gitwapp repo list' to see tracked repositories.", file=sys.stderr)
        sys.exit(EXIT_USAGE)


def _repo_command(func):
    """Wrap a command module function taking (args, record, config)."""
    def run(args):
        config, registry = get_context(args)
        record = resolve_repository(args, registry)
        return func(args, record, config)
    return run


def _registry_command(func):
    """Wrap a command module function taking (args, registry)."""
    def run(args):
        _, registry = get_context(args)
        try:
            return func(args, registry)
        except ValidationError as e:
            print(f"ERROR: Registry file is invalid: {e}", file=sys.stderr)
            return EXIT_USAGE
        except LockTimeout as e:
            print(f"ERROR: {e}; another gitwapp command is updating the registry", file=sys.stderr)
            return EXIT_FAILED
    return run


def cmd_watch(args):
    # Imported lazily: textual is only needed for the dashboard
    from gitwapp.commands import watch as cmd_watch_module
    return _repo_command(cmd_watch_module.cmd_watch)(args)


def main(argv=None):
    parser = argparse.ArgumentParser(prog='gitwapp', description='Track and sync local git working copies')
    parser.add_argument('--config-dir', help='Config directory (default: $GITWAPP_CONFIG_DIR or ~/.config/gitwapp)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # gitwapp repo
    p_repo = subparsers.add_parser('repo', help='Manage tracked repositories')
    repo_sub = p_repo.add_subparsers(dest='repo_cmd', required=True)

    p_repo_add = repo_sub.add_parser('add', help='Track a working copy')
    p_repo_add.add_argument('path', help='Path to the repository root')
    p_repo_add.add_argument('--name', '-n', help='Display name (default: directory name)')
    p_repo_add.add_argument('--user', '-u', help='Owner id')
    p_repo_add.set_defaults(func=_registry_command(cmd_repo_module.cmd_repo_add))

    p_repo_remove = repo_sub.add_parser('remove', help='Stop tracking a repository')
    p_repo_remove.add_argument('id', help='Repository id')
    p_repo_remove.set_defaults(func=_registry_command(cmd_repo_module.cmd_repo_remove))

    p_repo_list = repo_sub.add_parser('list', help='List tracked repositories')
    p_repo_list.add_argument('--json', action='store_true', help='Print JSON')
    p_repo_list.set_defaults(func=_registry_command(cmd_repo_module.cmd_repo_list))

    # gitwapp status
    p_status = subparsers.add_parser('status', help='Show branch, ahead/behind and changed files')
    p_status.add_argument('repo', help='Repository id or name')
    p_status.add_argument('--json', action='store_true', help='Print the status snapshot as JSON')
    p_status.set_defaults(func=_repo_command(cmd_status_module.cmd_status))

    # gitwapp stage / unstage
    p_stage = subparsers.add_parser('stage', help='Stage one file')
    p_stage.add_argument('repo', help='Repository id or name')
    p_stage.add_argument('file', help='Path relative to the repository root')
    p_stage.set_defaults(func=_repo_command(cmd_stage_module.cmd_stage))

    p_unstage = subparsers.add_parser('unstage', help='Unstage one file')
    p_unstage.add_argument('repo', help='Repository id or name')
    p_unstage.add_argument('file', help='Path relative to the repository root')
    p_unstage.set_defaults(func=_repo_command(cmd_stage_module.cmd_unstage))

    p_stage_all = subparsers.add_parser('stage-all', help='Stage every change')
    p_stage_all.add_argument('repo', help='Repository id or name')
    p_stage_all.set_defaults(func=_repo_command(cmd_stage_module.cmd_stage_all))

    p_unstage_all = subparsers.add_parser('unstage-all', help='Reset the index to HEAD')
    p_unstage_all.add_argument('repo', help='Repository id or name')
    p_unstage_all.set_defaults(func=_repo_command(cmd_stage_module.cmd_unstage_all))

    # gitwapp commit
    p_commit = subparsers.add_parser('commit', help='Commit staged changes')
    p_commit.add_argument('repo', help='Repository id or name')
    p_commit.add_argument('--message', '-m', required=True, help='Commit message')
    p_commit.set_defaults(func=_repo_command(cmd_stage_module.cmd_commit))

    # gitwapp push / pull
    p_push = subparsers.add_parser('push', help='Push the current branch')
    p_push.add_argument('repo', help='Repository id or name')
    p_push.set_defaults(func=_repo_command(cmd_sync_module.cmd_push))

    p_pull = subparsers.add_parser('pull', help='Pull the current branch')
    p_pull.add_argument('repo', help='Repository id or name')
    p_pull.set_defaults(func=_repo_command(cmd_sync_module.cmd_pull))

    # gitwapp show / diff
    p_show = subparsers.add_parser('show', help="Print a file's working-copy content")
    p_show.add_argument('repo', help='Repository id or name')
    p_show.add_argument('file', help='Path relative to the repository root')
    p_show.set_defaults(func=_repo_command(cmd_show_module.cmd_show))

    p_diff = subparsers.add_parser('diff', help='Show a file diff against HEAD')
    p_diff.add_argument('repo', help='Repository id or name')
    p_diff.add_argument('file', help='Path relative to the repository root')
    p_diff.set_defaults(func=_repo_command(cmd_show_module.cmd_diff))

    # gitwapp watch
    p_watch = subparsers.add_parser('watch', help='Live dashboard for one repository')
    p_watch.add_argument('repo', help='Repository id or name')
    p_watch.set_defaults(func=cmd_watch)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
