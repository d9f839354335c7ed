"""
Lock management for issuectl.

Uses flock on a file inside the issues root so that two commands moving
issues in or out of the same store never interleave.
"""

import fcntl
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path

from issuectl.lib.constants import STORE_LOCK_FILE

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.2


class LockTimeout(Exception):
    """Lock acquisition timed out."""
    pass


@contextmanager
def _acquire_lock(lock_file: Path, timeout: float, lock_name: str):
    """
    Internal helper to acquire an exclusive file lock.

    Args:
        lock_file: Path to the lock file (created if missing)
        timeout: Seconds to wait for the lock
        lock_name: Human-readable name for error messages
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    # Lock files are never deleted: unlinking lets two processes lock different inodes at one path
    fd = open(lock_file, 'w')
    start = time.monotonic()

    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            break
        except BlockingIOError:
            if time.monotonic() - start > timeout:
                fd.close()
                raise LockTimeout(f"Could not acquire {lock_name} within {timeout}s")
            time.sleep(POLL_INTERVAL)

    logger.debug(f"Acquired {lock_name}")
    try:
        fd.write(f"{os.getpid()}\n")
        fd.flush()
        yield
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        fd.close()
        logger.debug(f"Released {lock_name}")


@contextmanager
def store_lock(issues_dir: Path, timeout: float = 30):
    """
    Acquire the issue store lock, yield, release on exit.

    Held while an issue directory moves between the issues and archive roots.
    """
    lock_file = issues_dir / STORE_LOCK_FILE
    with _acquire_lock(lock_file, timeout, f"issue store lock ({lock_file})"):
        yield
