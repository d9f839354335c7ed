"""
issues solve-unsolved - Run the solve workflow on every open issue without a solution.md.
"""

import logging
import re

from issuectl.agents.claude import ClaudeAgent
from issuectl.lib.agents_config import get_stage_command, load_agents_config, missing_binary_message
from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import LOCATION_OPEN
from issuectl.lib.issues import Issue, list_issues
from issuectl.lib.prompts import render_prompt

logger = logging.getLogger(__name__)

WORKFLOW_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.-]*$')


def find_unsolved(config: IssuesConfig) -> list[Issue]:
    """Open issues that have problem.md but no solution.md, sorted by name."""
    return [issue for issue in list_issues(config.issues_dir, LOCATION_OPEN) if not issue.solved]


def cmd_solve_unsolved(args, config: IssuesConfig) -> int:
    workflow = args.workflow or config.default_workflow
    if not WORKFLOW_PATTERN.match(workflow):
        print(f"ERROR: Invalid workflow name '{workflow}'")
        return 2

    unsolved = find_unsolved(config)
    for issue in unsolved:
        print(f"{config.relative(issue.dir)}/")

    print(f"Found {len(unsolved)} unsolved issues")
    print()

    if args.dry_run or not unsolved:
        return 0

    agents_config = load_agents_config(config.base_dir)
    missing = missing_binary_message(agents_config, "solve")
    if missing:
        print(f"ERROR: {missing}")
        return 1

    agent = ClaudeAgent(timeout=config.solve_timeout)
    failed = []

    for issue in unsolved:
        print(f"=== Processing unsolved issue: {issue.name} ===")
        prompt = render_prompt("solve", workflow=workflow, issue_dir=f"{config.relative(issue.dir)}/")
        command = get_stage_command(agents_config, "solve", prompt)

        result = agent.run(command, prompt, cwd=config.base_dir, stream=True)
        if not result.success:
            failed.append(issue.name)
            print(f"ERROR: Solve agent failed on '{issue.name}' (exit code {result.exit_code})")
            if result.stderr.strip():
                print(result.stderr.strip())
            if args.fail_fast:
                print()
                break
        print()

    if failed:
        print(f"{len(failed)} issue(s) failed: {', '.join(failed)}")
        return 1

    print("All unsolved issues processed!")
    return 0
