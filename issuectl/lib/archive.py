"""
Move issues between the issues root and the archive root.

Archiving never overwrites: when the archive already holds an issue of the
same name, the moved directory gets a YYYYMMDD-HHMMSS suffix.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import PROBLEM_FILE, TIMESTAMP_FORMAT
from issuectl.lib.issues import IssueError, IssueNotFoundError, validate_issue_name, write_status
from issuectl.lib.locking import store_lock
from issuectl.workflow.fsm import IssueFSM

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[str, str, str], None]


class ArchiveError(IssueError):
    """An issue could not be moved."""
    pass


def archive_destination(archive_dir: Path, name: str, now: Optional[datetime] = None) -> Path:
    """Pick a free destination for name under archive_dir.

    Returns archive_dir/name when free, else archive_dir/name-YYYYMMDD-HHMMSS.
    A second collision within the same second appends -2, -3, ...
    """
    dest = archive_dir / name
    if not dest.exists():
        return dest

    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    candidate = archive_dir / f"{name}-{stamp}"
    counter = 2
    while candidate.exists():
        candidate = archive_dir / f"{name}-{stamp}-{counter}"
        counter += 1
    return candidate


def _move(src: Path, dest: Path) -> None:
    try:
        shutil.move(str(src), str(dest))
    except OSError as e:
        raise ArchiveError(f"Failed to move {src} to {dest}: {e}") from e


def _mark(src: Path, trigger: str, on_transition: Optional[TransitionCallback]) -> Optional[str]:
    """Fire trigger on the issue at src. Returns the previous status, or None if unchanged."""
    fsm = IssueFSM(src, on_transition=on_transition)
    if not fsm.can(trigger):
        logger.info(f"'{src.name}' is already {fsm.state}, leaving status unchanged")
        return None

    previous = fsm.state
    try:
        getattr(fsm, trigger)()
    except OSError as e:
        raise ArchiveError(f"Failed to {trigger} '{src.name}': {e}") from e
    return previous


def archive_issue(
    config: IssuesConfig,
    name: str,
    now: Optional[datetime] = None,
    trigger: Optional[str] = None,
    on_transition: Optional[TransitionCallback] = None,
) -> Path:
    """
    Move issues/<name> into the archive.

    Args:
        config: Store configuration
        name: Issue directory name
        now: Clock override for the collision suffix
        trigger: Optional status trigger ("resolve" or "reject") fired under
            the store lock just before the move
        on_transition: Callback(from_state, to_state, trigger) for that trigger

    Returns:
        Path of the archived directory

    Raises:
        InvalidIssueNameError: If the name is unsafe
        IssueNotFoundError: If issues/<name> is not a directory. Nothing is
            created or moved in that case.
        ArchiveError: If a trigger is given but the issue has no problem.md,
            or the status write or the move fails. A failed move restores the
            previous status.
        LockTimeout: If another command holds the store lock too long
    """
    validate_issue_name(name)
    src = config.issues_dir / name
    if not src.is_dir():
        raise IssueNotFoundError(name, config.issues_dir)
    if trigger and not (src / PROBLEM_FILE).is_file():
        raise ArchiveError(f"Cannot {trigger} '{name}': {src} has no {PROBLEM_FILE}")

    with store_lock(config.issues_dir, config.lock_timeout):
        # Another archiver may have won the race while we waited
        if not src.is_dir():
            raise IssueNotFoundError(name, config.issues_dir)

        previous = _mark(src, trigger, on_transition) if trigger else None

        try:
            try:
                config.archive_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ArchiveError(f"Failed to create {config.archive_dir}: {e}") from e
            dest = archive_destination(config.archive_dir, name, now)
            if dest.name != name:
                logger.info(f"Archive already has '{name}', archiving as '{dest.name}'")
            _move(src, dest)
        except ArchiveError:
            if previous is not None and (src / PROBLEM_FILE).is_file():
                logger.info(f"Move failed, restoring status {previous} on '{name}'")
                write_status(src / PROBLEM_FILE, previous)
            raise

    logger.info(f"Archived {src} -> {dest}")
    return dest


def restore_issue(config: IssuesConfig, name: str) -> Path:
    """
    Move archive/<name> back into the issues root and mark it OPEN.

    Returns:
        Path of the restored directory

    Raises:
        IssueNotFoundError: If archive/<name> is not a directory
        ArchiveError: If issues/<name> already exists or the move fails
    """
    validate_issue_name(name)
    src = config.archive_dir / name
    if not src.is_dir():
        raise IssueNotFoundError(name, config.archive_dir)

    dest = config.issues_dir / name
    if dest.exists():
        raise ArchiveError(f"Cannot restore '{name}': {dest} already exists")

    config.issues_dir.mkdir(parents=True, exist_ok=True)
    with store_lock(config.issues_dir, config.lock_timeout):
        if not src.is_dir():
            raise IssueNotFoundError(name, config.archive_dir)
        if dest.exists():
            raise ArchiveError(f"Cannot restore '{name}': {dest} already exists")
        _move(src, dest)

    logger.info(f"Restored {src} -> {dest}")

    fsm = IssueFSM(dest)
    if fsm.can("reopen"):
        fsm.reopen()

    return dest
