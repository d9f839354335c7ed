"""
Configuration loader for issuectl.

Settings come from three layers, lowest precedence first: built-in
defaults, an optional issues.env in the base directory, and the process
environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import envparse

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "issues.env"

DEFAULTS = {
    "ISSUES_DIR": "issues",
    "ARCHIVE_DIR": "archive",
    "ISSUES_WORKFLOW": "go-k8s",
    "REFINE_TIMEOUT": "600",
    "SOLVE_TIMEOUT": "3600",
    "LOCK_TIMEOUT": "30",
}

CONFIG_KEYS = list(DEFAULTS)


@dataclass
class IssuesConfig:
    """Resolved settings for one issue store."""
    base_dir: Path
    issues_dir: Path  # Active issues
    archive_dir: Path  # Resolved/rejected issues
    default_workflow: str  # Prefix of the solve slash command, e.g. "go-k8s"
    refine_timeout: int
    solve_timeout: int
    lock_timeout: int

    def relative(self, path: Path) -> Path:
        """Path relative to base_dir when it lies inside it, else unchanged."""
        try:
            return path.relative_to(self.base_dir)
        except ValueError:
            return path


def _resolve_dir(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path


def _parse_timeout(env: Mapping[str, str], key: str) -> int:
    raw = env.get(key, DEFAULTS[key])
    try:
        value = int(raw)
        if value <= 0:
            raise ValueError(raw)
        return value
    except ValueError:
        logger.warning(f"Invalid {key} '{raw}', using default {DEFAULTS[key]}")
        return int(DEFAULTS[key])


def load_config(base_dir: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> IssuesConfig:
    """Load configuration for the issue store rooted at base_dir.

    Args:
        base_dir: Directory relative paths resolve against (default: cwd)
        environ: Environment mapping (default: os.environ)

    Raises:
        ValueError: If issues.env exists but cannot be parsed
    """
    base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
    environ = os.environ if environ is None else environ

    env = dict(DEFAULTS)

    config_file = base_dir / CONFIG_FILENAME
    if config_file.exists():
        file_env = envparse.load_env(config_file)
        unknown = sorted(set(file_env) - set(CONFIG_KEYS))
        if unknown:
            logger.warning(f"Ignoring unknown keys in {config_file}: {', '.join(unknown)}")
        env.update({k: v for k, v in file_env.items() if k in CONFIG_KEYS})
        logger.debug(f"Loaded {config_file}")

    for key in CONFIG_KEYS:
        value = environ.get(key)
        if value:
            env[key] = value

    return IssuesConfig(
        base_dir=base_dir,
        issues_dir=_resolve_dir(base_dir, env["ISSUES_DIR"]),
        archive_dir=_resolve_dir(base_dir, env["ARCHIVE_DIR"]),
        default_workflow=env["ISSUES_WORKFLOW"],
        refine_timeout=_parse_timeout(env, "REFINE_TIMEOUT"),
        solve_timeout=_parse_timeout(env, "SOLVE_TIMEOUT"),
        lock_timeout=_parse_timeout(env, "LOCK_TIMEOUT"),
    )
