"""
issues show - Show one issue's location, status and artifacts.
"""

from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import ARTIFACT_FILES
from issuectl.lib.issues import InvalidIssueNameError, IssueNotFoundError, find_issue


def cmd_show(args, config: IssuesConfig) -> int:
    try:
        issue = find_issue(config, args.name)
    except InvalidIssueNameError as e:
        print(f"ERROR: {e}")
        return 2
    except IssueNotFoundError:
        print(f"ERROR: Issue '{args.name}' not found in {config.issues_dir} or {config.archive_dir}")
        return 1

    print(f"Issue:    {issue.name}")
    print(f"Location: {issue.location} ({issue.dir})")
    print(f"Status:   {issue.status}")
    print(f"Stage:    {issue.stage}")
    print()
    print("Artifacts:")
    for filename in ARTIFACT_FILES:
        mark = "x" if filename in issue.artifacts else " "
        print(f"  [{mark}] {filename}")
    return 0
