"""
issues list-open / list-solved - List active and archived issues.
"""

import json
import logging
from pathlib import Path

from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import LOCATION_ARCHIVED, LOCATION_OPEN
from issuectl.lib.issues import list_issue_names, list_issues
from issuectl.lib.validate import ValidationError, validate_many

logger = logging.getLogger(__name__)


def _print_table(issues) -> None:
    print(f"{'NAME':<40} {'STATUS':<10} STAGE")
    print("-" * 70)
    for issue in issues:
        name = issue.name[:37] + "..." if len(issue.name) > 40 else issue.name
        print(f"{name:<40} {issue.status:<10} {issue.stage}")
    print("-" * 70)
    print(f"{len(issues)} issue(s)")


def _list(args, root: Path, location: str) -> int:
    if getattr(args, "json", False):
        summaries = [issue.to_dict() for issue in list_issues(root, location)]
        try:
            validate_many(summaries, "issue")
        except ValidationError as e:
            print(f"ERROR: {e}")
            return 1
        print(json.dumps(summaries, indent=2))
        return 0

    if getattr(args, "long", False):
        _print_table(list_issues(root, location))
        return 0

    for name in list_issue_names(root):
        print(name)
    return 0


def cmd_list_open(args, config: IssuesConfig) -> int:
    """List issues under the issues root."""
    return _list(args, config.issues_dir, LOCATION_OPEN)


def cmd_list_solved(args, config: IssuesConfig) -> int:
    """List issues under the archive root. A missing archive lists nothing."""
    return _list(args, config.archive_dir, LOCATION_ARCHIVED)
