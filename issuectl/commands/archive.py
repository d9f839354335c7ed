"""
issues archive / restore - Move issues between the issues root and the archive.
"""

import logging

from issuectl.lib.archive import ArchiveError, archive_issue, restore_issue
from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import PROBLEM_FILE
from issuectl.lib.issues import InvalidIssueNameError, IssueNotFoundError, read_status, validate_issue_name
from issuectl.lib.locking import LockTimeout

logger = logging.getLogger(__name__)


def cmd_archive(args, config: IssuesConfig) -> int:
    """Move an issue from the issues root into the archive."""
    name = args.name
    try:
        validate_issue_name(name)
    except InvalidIssueNameError as e:
        print(f"ERROR: {e}")
        return 2

    issue_dir = config.issues_dir / name
    if not issue_dir.is_dir():
        print(f"ERROR: Issue '{name}' not found in {config.issues_dir}")
        if (config.archive_dir / name).is_dir():
            print(f"  It is already archived at {config.archive_dir / name}")
        return 1

    trigger = None
    if getattr(args, "resolve", False):
        trigger = "resolve"
    elif getattr(args, "reject", False):
        trigger = "reject"

    marked = []
    try:
        dest = archive_issue(
            config,
            name,
            trigger=trigger,
            on_transition=lambda from_state, to_state, _trigger: marked.append(to_state),
        )
    except (IssueNotFoundError, ArchiveError, LockTimeout) as e:
        print(f"ERROR: {e}")
        return 1

    if marked:
        print(f"Marked '{name}' as {marked[-1]}")
    elif trigger:
        print(f"  Note: status was already {read_status(dest / PROBLEM_FILE)}, left unchanged")
    if dest.name != name:
        print(f"Archive already contains '{name}'; archived as '{dest.name}'")
    print(f"Archived '{name}' to {dest}")
    return 0


def cmd_restore(args, config: IssuesConfig) -> int:
    """Move an archived issue back into the issues root and reopen it."""
    name = args.name
    try:
        dest = restore_issue(config, name)
    except InvalidIssueNameError as e:
        print(f"ERROR: {e}")
        return 2
    except IssueNotFoundError as e:
        print(f"ERROR: {e}")
        print("  Use 'issues list-solved' to list archived issues")
        return 1
    except (ArchiveError, LockTimeout) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Restored '{name}' to {dest}")
    return 0
