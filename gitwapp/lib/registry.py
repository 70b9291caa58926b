"""
Repository registry.

Durable mapping from repository id to the tracked working copy, stored as
repositories.json in the config directory. The state engine only ever
reads it (lookup by id); add and remove are administrative operations.
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from gitwapp.git.errors import NotARepositoryError
from gitwapp.git.repository import open_repository
from . import validate
from .config import AppConfig
from .locking import registry_lock

logger = logging.getLogger(__name__)

SCHEMA_NAME = "repositories"


class RegistryError(Exception):
    """Registry operation failed."""

    kind = "RegistryError"


class RepositoryNotFoundError(RegistryError):
    """No repository with the requested id (or name) is registered."""

    kind = "NotFound"


class RepositoryExistsError(RegistryError):
    kind = "AlreadyTracked"


class InvalidRepositoryPathError(RegistryError):
    kind = "InvalidPath"


@dataclass
class RepositoryRecord:
    """A tracked working copy."""
    id: str
    name: str
    path: Path
    created_at: datetime
    user_id: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "path": str(self.path),
            "created_at": self.created_at.isoformat(),
            "user_id": self.user_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RepositoryRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            path=Path(data["path"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            user_id=data.get("user_id", ""),
        )


class Registry:
    """Reads and writes repositories.json."""

    def __init__(self, registry_path: Path, locks_dir: Path):
        self.registry_path = registry_path
        self.locks_dir = locks_dir

    @classmethod
    def from_config(cls, config: AppConfig) -> "Registry":
        return cls(config.registry_path, config.locks_dir)

    def list_all(self) -> list[RepositoryRecord]:
        """All registered repositories, in registration order."""
        if not self.registry_path.exists():
            return []
        data = validate.validate_file(self.registry_path, SCHEMA_NAME)
        return [RepositoryRecord.from_dict(item) for item in data]

    def _save(self, records: list[RepositoryRecord]) -> None:
        data = [r.to_dict() for r in records]
        validate.validate_before_write(data, SCHEMA_NAME, self.registry_path)

        self.registry_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.registry_path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(data, indent=2) + "\n")
        os.replace(tmp_path, self.registry_path)

    def lookup(self, repo_id: str) -> RepositoryRecord:
        """
        Find a repository by id.

        Raises:
            RepositoryNotFoundError: no repository has this id
        """
        for record in self.list_all():
            if record.id == repo_id:
                return record
        raise RepositoryNotFoundError(f"Repository '{repo_id}' not found")

    def find(self, ref: str) -> RepositoryRecord:
        """
        Find a repository by id, falling back to its display name.

        Raises:
            RepositoryNotFoundError: nothing matches
            RegistryError: the name matches more than one repository
        """
        records = self.list_all()
        for record in records:
            if record.id == ref:
                return record

        named = [r for r in records if r.name == ref]
        if len(named) > 1:
            raise RegistryError(f"Name '{ref}' matches {len(named)} repositories; use the id")
        if named:
            return named[0]
        raise RepositoryNotFoundError(f"Repository '{ref}' not found")

    def add(self, path: Path | str, name: str = "", user_id: str = "") -> RepositoryRecord:
        """
        Register a working copy.

        Raises:
            InvalidRepositoryPathError: path is missing, not a directory, or
                not the root of a git repository
            RepositoryExistsError: path is already registered
        """
        repo_path = Path(path).expanduser()
        if not repo_path.exists():
            raise InvalidRepositoryPathError(f"Path does not exist: {repo_path}")
        if not repo_path.is_dir():
            raise InvalidRepositoryPathError(f"Path is not a directory: {repo_path}")
        try:
            repo_path = open_repository(repo_path)
        except NotARepositoryError as e:
            raise InvalidRepositoryPathError(str(e)) from None

        with registry_lock(self.locks_dir):
            records = self.list_all()
            for record in records:
                if record.path == repo_path:
                    raise RepositoryExistsError(
                        f"Repository already tracked: {repo_path} (id {record.id})"
                    )

            record = RepositoryRecord(
                id=str(uuid.uuid4()),
                name=name or repo_path.name,
                path=repo_path,
                created_at=datetime.now(timezone.utc),
                user_id=user_id,
            )
            records.append(record)
            self._save(records)

        logger.info("Registered repository %s at %s", record.id, record.path)
        return record

    def remove(self, repo_id: str) -> RepositoryRecord:
        """
        Stop tracking a repository. The working copy itself is untouched.

        Raises:
            RepositoryNotFoundError: no repository has this id
        """
        with registry_lock(self.locks_dir):
            records = self.list_all()
            remaining = [r for r in records if r.id != repo_id]
            if len(remaining) == len(records):
                raise RepositoryNotFoundError(f"Repository '{repo_id}' not found")
            removed = next(r for r in records if r.id == repo_id)
            self._save(remaining)

        logger.info("Removed repository %s (%s)", removed.id, removed.path)
        return removed
