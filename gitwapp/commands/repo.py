"""
gitwapp repo - Register, unregister and list tracked repositories.
"""

import json
import sys

from gitwapp.lib.registry import (
    InvalidRepositoryPathError,
    Registry,
    RepositoryExistsError,
    RepositoryNotFoundError,
)
from gitwapp.lib.reporting import EXIT_FAILED, EXIT_OK


def cmd_repo_add(args, registry: Registry) -> int:
    """Start tracking a working copy."""
    try:
        record = registry.add(args.path, name=args.name or "", user_id=args.user or "")
    except (InvalidRepositoryPathError, RepositoryExistsError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILED

    print(f"Added {record.name} ({record.id})")
    print(f"  Path: {record.path}")
    return EXIT_OK


def cmd_repo_remove(args, registry: Registry) -> int:
    """Stop tracking a repository (files on disk are left alone)."""
    try:
        record = registry.remove(args.id)
    except RepositoryNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILED

    print(f"Removed {record.name} ({record.id})")
    return EXIT_OK


def cmd_repo_list(args, registry: Registry) -> int:
    """List tracked repositories."""
    records = registry.list_all()

    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return EXIT_OK

    if not records:
        print("No repositories tracked. Add one with: gitwapp repo add <path>")
        return EXIT_OK

    print(f"{'ID':<36}  {'NAME':<20}  PATH")
    print("-" * 80)
    for record in records:
        name = record.name[:17] + "..." if len(record.name) > 20 else record.name
        print(f"{record.id:<36}  {name:<20}  {record.path}")
    return EXIT_OK
