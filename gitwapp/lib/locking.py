"""
Lock management for gitwapp.

Uses flock so concurrent CLI invocations never interleave registry writes.
Git's own index.lock still guards the repositories themselves.
"""

import fcntl
import time
from contextlib import contextmanager
from pathlib import Path

LOCK_POLL_SECONDS = 0.1


class LockTimeout(Exception):
    """Lock acquisition timed out."""
    pass


@contextmanager
def file_lock(lock_file: Path, timeout: float = 10, lock_name: str = "lock"):
    """
    Acquire an exclusive flock on lock_file, yield, release on exit.

    Lock files are never deleted: removing one lets two processes hold
    "exclusive" locks on different inodes with the same path.
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    fd = open(lock_file, 'a')
    start = time.monotonic()

    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() - start > timeout:
                    raise LockTimeout(f"Could not acquire {lock_name} within {timeout}s")
                time.sleep(LOCK_POLL_SECONDS)

        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        fd.close()


@contextmanager
def registry_lock(locks_dir: Path, timeout: float = 10):
    """Serialize read-modify-write cycles on the repository registry."""
    with file_lock(locks_dir / "registry.lock", timeout, "registry lock"):
        yield
