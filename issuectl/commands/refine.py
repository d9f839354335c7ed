"""
issues refine - Have the agent rewrite an issue's problem.md in place.
"""

import logging

from issuectl.agents.claude import ClaudeAgent
from issuectl.lib.agents_config import get_stage_command, load_agents_config, missing_binary_message
from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import PROBLEM_FILE
from issuectl.lib.issues import InvalidIssueNameError, validate_issue_name
from issuectl.lib.prompts import PromptError, build_section, render_prompt

logger = logging.getLogger(__name__)


def cmd_refine(args, config: IssuesConfig) -> int:
    """Refine problem.md of an open issue through the refine agent stage."""
    name = args.name
    try:
        validate_issue_name(name)
    except InvalidIssueNameError as e:
        print(f"ERROR: {e}")
        return 2

    problem_path = config.issues_dir / name / PROBLEM_FILE
    if not problem_path.is_file():
        print(f"ERROR: Issue '{name}' not found in {config.issues_dir} (no {PROBLEM_FILE})")
        return 1

    agents_config = load_agents_config(config.base_dir)
    missing = missing_binary_message(agents_config, "refine")
    if missing:
        print(f"ERROR: {missing}")
        return 1

    try:
        prompt = render_prompt(
            "refine",
            issue_name=name,
            problem_path=config.relative(problem_path),
            guidance_section=build_section(args.guidance, "## Additional guidance"),
        )
    except PromptError as e:
        print(f"ERROR: {e}")
        return 2

    command = get_stage_command(agents_config, "refine", prompt)
    agent = ClaudeAgent(timeout=config.refine_timeout)

    before = problem_path.read_bytes()
    print(f"Refining {config.relative(problem_path)}...")
    result = agent.run(command, prompt, cwd=config.base_dir)

    if not result.success:
        print(f"ERROR: Refine agent failed (exit code {result.exit_code})")
        if result.stderr.strip():
            print(result.stderr.strip())
        return 1

    if not problem_path.is_file():
        print(f"ERROR: {problem_path} is missing after refinement")
        return 1

    if result.text:
        print(result.text)
        print()

    if problem_path.read_bytes() == before:
        print(f"Note: {PROBLEM_FILE} was not changed")
    else:
        print(f"Updated {config.relative(problem_path)} ({result.elapsed_seconds:.0f}s)")
    return 0
