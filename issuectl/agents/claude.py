"""
Claude agent integration for issuectl.

Claude does the language work: refining problem statements and running the
solve workflow against one issue directory at a time.
"""

import json
import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from issuectl.lib.agents_config import StageCommand

logger = logging.getLogger(__name__)


@dataclass
class AgentResult:
    success: bool
    exit_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float = 0.0

    @property
    def text(self) -> str:
        """Agent response text, unwrapped from --output-format json if present."""
        raw = self.stdout.strip()
        if not raw.startswith("{"):
            return raw
        try:
            wrapper = json.loads(raw)
        except json.JSONDecodeError:
            return raw
        if isinstance(wrapper, dict) and isinstance(wrapper.get("result"), str):
            return wrapper["result"]
        return raw


def agent_env() -> dict[str, str]:
    """Child environment without ANTHROPIC_API_KEY so the CLI uses its own OAuth credentials."""
    return {k: v for k, v in os.environ.items() if k != "ANTHROPIC_API_KEY"}


class ClaudeAgent:
    def __init__(self, timeout: int = 600):
        self.timeout = timeout

    def run(self, command: StageCommand, prompt: str, cwd: Path, stream: bool = False) -> AgentResult:
        """
        Run one agent stage.

        Args:
            command: Built stage command
            prompt: Prompt text (sent on stdin if the template has no {prompt})
            cwd: Working directory for the agent
            stream: Let the agent write straight to this terminal instead of capturing

        Timeouts and a missing binary come back as a failed AgentResult.
        """
        stdin_input = command.get_stdin_input(prompt)
        logger.debug(f"Running agent: {command.cmd[0]} (cwd={cwd}, stdin={stdin_input is not None})")

        kwargs = {
            "cwd": str(cwd),
            "text": True,
            "timeout": self.timeout,
            "env": agent_env(),
        }
        if stdin_input is not None:
            kwargs["input"] = stdin_input
        else:
            kwargs["stdin"] = subprocess.DEVNULL
        if not stream:
            kwargs["capture_output"] = True

        start = time.monotonic()
        try:
            result = subprocess.run(command.cmd, **kwargs)
        except subprocess.TimeoutExpired:
            elapsed = time.monotonic() - start
            logger.warning(f"Agent timed out after {self.timeout}s: {command.cmd[0]}")
            return AgentResult(
                success=False,
                exit_code=-1,
                stdout="",
                stderr=f"Timeout expired after {self.timeout}s",
                elapsed_seconds=elapsed,
            )
        except FileNotFoundError as e:
            return AgentResult(
                success=False,
                exit_code=127,
                stdout="",
                stderr=f"Agent binary not found: {e}",
            )

        elapsed = time.monotonic() - start
        logger.info(f"Agent {command.cmd[0]} exited {result.returncode} after {elapsed:.1f}s")

        return AgentResult(
            success=result.returncode == 0,
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            elapsed_seconds=elapsed,
        )
