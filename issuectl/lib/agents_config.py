"""
Agent command configuration.

Loads agents.yaml from the base directory to decide which CLI command runs
for each agent stage. Without a config file the defaults below are used.

Templates may contain {prompt}. When present the rendered prompt is passed
as a single CLI argument; when absent the prompt goes to the agent on stdin.

Example agents.yaml:

    stages:
      solve: claude --print --model opus {prompt} --output-format stream-json --verbose
"""

import logging
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from issuectl.lib.validate import ValidationError, validate

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "agents.yaml"

DEFAULT_STAGE_COMMANDS = {
    "refine": "claude --print --dangerously-skip-permissions {prompt}",
    # Rewrites problem.md in place

    "solve": "claude --print --dangerously-skip-permissions {prompt} --output-format stream-json --verbose",
    # Runs the /<workflow>:solve slash command against one issue directory
}

_PROMPT_PLACEHOLDER = "__PROMPT_PLACEHOLDER__"


@dataclass
class AgentsConfig:
    """Agent configuration from agents.yaml."""
    stages: dict[str, str] = field(default_factory=lambda: DEFAULT_STAGE_COMMANDS.copy())


def load_agents_config(base_dir: Optional[Path]) -> AgentsConfig:
    """Load agents.yaml and return AgentsConfig.

    Missing, unparseable or invalid files fall back to the defaults with a warning.
    """
    if base_dir is None:
        return AgentsConfig()

    config_path = base_dir / CONFIG_FILENAME
    if not config_path.exists():
        return AgentsConfig()

    try:
        data = yaml.safe_load(config_path.read_text()) or {}
        validate(data, "agents")
    except (yaml.YAMLError, ValidationError) as e:
        logger.warning(f"Failed to load {config_path}, using default agent commands: {e}")
        return AgentsConfig()

    stages = DEFAULT_STAGE_COMMANDS.copy()
    stages.update(data.get("stages", {}))
    logger.debug(f"Loaded agent stages from {config_path}: {sorted(data.get('stages', {}))}")
    return AgentsConfig(stages=stages)


@dataclass
class StageCommand:
    """Result of building a stage command."""
    cmd: list[str]  # Command ready for subprocess
    prompt_via_stdin: bool  # True if prompt should be passed via stdin

    def get_stdin_input(self, prompt: str) -> str | None:
        """Return prompt if it should be passed via stdin, else None."""
        return prompt if self.prompt_via_stdin else None


def get_stage_command(config: AgentsConfig, stage: str, prompt: str | None = None) -> StageCommand:
    """Build the command list for a stage.

    The prompt is swapped in after shlex splitting so quotes or spaces in it
    never change how the template is tokenised.

    Raises:
        ValueError: If stage is unknown

    Example:
        >>> get_stage_command(AgentsConfig(), "refine", "tidy it").cmd
        ['claude', '--print', '--dangerously-skip-permissions', 'tidy it']
    """
    if stage not in config.stages:
        raise ValueError(f"Unknown stage: {stage}")

    template = config.stages[stage]
    prompt_via_stdin = "{prompt}" not in template

    cmd = shlex.split(template.replace("{prompt}", _PROMPT_PLACEHOLDER))
    if not prompt_via_stdin:
        prompt_value = prompt or ""
        cmd = [prompt_value if arg == _PROMPT_PLACEHOLDER else arg for arg in cmd]

    return StageCommand(cmd=cmd, prompt_via_stdin=prompt_via_stdin)


def get_stage_binary(config: AgentsConfig, stage: str) -> str:
    """Get the binary name for a stage (first element of command)."""
    if stage not in config.stages:
        raise ValueError(f"Unknown stage: {stage}")
    parts = shlex.split(config.stages[stage])
    return parts[0] if parts else ""


def check_binary_available(binary: str) -> bool:
    """Check if a binary is available in PATH."""
    return bool(binary) and shutil.which(binary) is not None


def missing_binary_message(config: AgentsConfig, stage: str) -> str | None:
    """Return a how-to-fix message if the stage's binary is not installed, else None."""
    binary = get_stage_binary(config, stage)
    if check_binary_available(binary):
        return None

    return "\n".join([
        f"Required tool '{binary}' is not installed (needed by stage '{stage}').",
        "",
        "To fix this, either:",
        f"  1. Install {binary}",
        f"  2. Create {CONFIG_FILENAME} in the working directory to use a different tool:",
        "",
        "     stages:",
        f"       {stage}: <command> {{prompt}}",
    ])
