"""
issues resolve / reject / reopen - Change the Status: marker of an open issue.
"""

from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import LOCATION_OPEN
from issuectl.lib.issues import InvalidIssueNameError, IssueNotFoundError, find_issue
from issuectl.workflow.fsm import IssueFSM


def _transition(args, config: IssuesConfig, trigger: str) -> int:
    try:
        issue = find_issue(config, args.name)
    except InvalidIssueNameError as e:
        print(f"ERROR: {e}")
        return 2
    except IssueNotFoundError as e:
        print(f"ERROR: {e}")
        return 1

    if issue.location != LOCATION_OPEN:
        print(f"ERROR: Issue '{issue.name}' is archived")
        print(f"  Use 'issues restore {issue.name}' first")
        return 1

    fsm = IssueFSM(issue.dir)
    if not fsm.can(trigger):
        print(f"ERROR: Cannot {trigger} '{issue.name}' while it is {fsm.state}")
        return 1

    try:
        getattr(fsm, trigger)()
    except OSError as e:
        print(f"ERROR: Could not update {fsm.problem_path}: {e}")
        return 1
    print(f"Issue '{issue.name}' is now {fsm.state}")
    return 0


def cmd_resolve(args, config: IssuesConfig) -> int:
    return _transition(args, config, "resolve")


def cmd_reject(args, config: IssuesConfig) -> int:
    return _transition(args, config, "reject")


def cmd_reopen(args, config: IssuesConfig) -> int:
    return _transition(args, config, "reopen")
