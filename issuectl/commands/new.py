"""
issues new - Create an issue directory with a problem.md.
"""

from issuectl.lib.config import IssuesConfig
from issuectl.lib.issues import InvalidIssueNameError, IssueError, create_issue, validate_issue_name


def cmd_new(args, config: IssuesConfig) -> int:
    """Create a new open issue."""
    try:
        validate_issue_name(args.name, strict=True)
    except InvalidIssueNameError as e:
        print(f"ERROR: {e}")
        return 2

    if (config.archive_dir / args.name).exists():
        print(f"ERROR: An archived issue named '{args.name}' exists")
        print(f"  Use 'issues restore {args.name}' to reopen it, or pick another name")
        return 1

    try:
        issue = create_issue(
            config.issues_dir,
            args.name,
            title=args.title,
            description=args.description,
        )
    except IssueError as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Created issue '{issue.name}'")
    print(f"  Edit {issue.problem_path}")
    print(f"  Or run 'issues refine {issue.name}' to have the agent tighten it up")
    return 0
