"""
Issue store model.

An issue is a directory under the issues root (open) or the archive root
(archived) that contains problem.md. Its lifecycle stage follows from which
artifact files exist; its status is the Status: marker inside problem.md.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from issuectl.lib.config import IssuesConfig
from issuectl.lib.constants import (
    ARTIFACT_FILES,
    ISSUE_NAME_PATTERN,
    LOCATION_ARCHIVED,
    LOCATION_OPEN,
    MAX_ISSUE_NAME_LEN,
    PROBLEM_FILE,
    SOLUTION_FILE,
    STATUSES,
    STATUS_OPEN,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Issue",
    "IssueError",
    "IssueNotFoundError",
    "InvalidIssueNameError",
    "validate_issue_name",
    "list_issue_names",
    "list_issues",
    "load_issue",
    "find_issue",
    "create_issue",
    "read_status",
    "write_status",
]

# Matches "Status: X", "**Status:** X", "**Status**: X", optionally as a list item
STATUS_LINE_PATTERN = re.compile(
    r'^(?P<prefix>[ \t]*(?:[-*][ \t]+)?\**Status\**:\**[ \t]*)(?P<value>[A-Za-z_]+)',
    re.MULTILINE | re.IGNORECASE,
)

PROBLEM_TEMPLATE = """# {title}

**Status:** {status}
**Created:** {created}

## Problem

{description}
"""


class IssueError(Exception):
    """Base class for issue store errors."""
    pass


class IssueNotFoundError(IssueError):
    """No issue with the given name exists where it was expected."""

    def __init__(self, name: str, where: Path):
        self.name = name
        self.where = where
        super().__init__(f"Issue '{name}' not found in {where}")


class InvalidIssueNameError(IssueError):
    """Issue name is unsafe or not kebab-case."""
    pass


@dataclass
class Issue:
    """One issue directory and what it contains."""
    name: str
    dir: Path
    location: str  # "open" or "archived"
    status: str  # OPEN, RESOLVED or REJECTED
    artifacts: list[str] = field(default_factory=list)  # Present files, lifecycle order

    @property
    def problem_path(self) -> Path:
        return self.dir / PROBLEM_FILE

    @property
    def stage(self) -> str:
        """Furthest lifecycle artifact present, without the .md suffix."""
        if not self.artifacts:
            return "empty"
        return self.artifacts[-1].removesuffix(".md")

    @property
    def solved(self) -> bool:
        return SOLUTION_FILE in self.artifacts

    @property
    def missing_artifacts(self) -> list[str]:
        return [f for f in ARTIFACT_FILES if f not in self.artifacts]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "location": self.location,
            "status": self.status,
            "stage": self.stage,
            "solved": self.solved,
            "artifacts": list(self.artifacts),
            "path": str(self.dir),
        }


def validate_issue_name(name: str, strict: bool = False) -> str:
    """
    Check an issue name before it is joined onto a root directory.

    Args:
        name: Issue name as given on the command line
        strict: Require kebab-case (used when creating new issues)

    Returns:
        The name, unchanged

    Raises:
        InvalidIssueNameError: If the name is empty, escapes its root, or
            (strict) is not kebab-case
    """
    if not name or not name.strip():
        raise InvalidIssueNameError("Issue name must not be empty")
    if "/" in name or "\\" in name or name.startswith(".") or "\0" in name:
        raise InvalidIssueNameError(f"Invalid issue name '{name}': must be a plain directory name")
    if strict:
        if len(name) > MAX_ISSUE_NAME_LEN:
            raise InvalidIssueNameError(
                f"Invalid issue name '{name}': longer than {MAX_ISSUE_NAME_LEN} characters"
            )
        if not ISSUE_NAME_PATTERN.match(name):
            raise InvalidIssueNameError(
                f"Invalid issue name '{name}': use kebab-case (e.g. 'fix-login-timeout')"
            )
    return name


def _is_issue_dir(path: Path) -> bool:
    # Hidden directories never pass validate_issue_name, so they are not issues
    if path.name.startswith("."):
        return False
    return path.is_dir() and (path / PROBLEM_FILE).is_file()


def _read_problem(problem_path: Path) -> str:
    # surrogateescape keeps non-UTF-8 bytes intact through a read/write cycle
    return problem_path.read_text(encoding="utf-8", errors="surrogateescape")


def list_issue_names(root: Path) -> list[str]:
    """Names of issue directories under root, sorted. Missing root yields []."""
    if not root.is_dir():
        logger.debug(f"Issue root {root} does not exist")
        return []
    return sorted(d.name for d in root.iterdir() if _is_issue_dir(d))


def read_status(problem_path: Path) -> str:
    """Read the Status: marker from problem.md. Missing marker means OPEN."""
    try:
        content = _read_problem(problem_path)
    except OSError as e:
        logger.warning(f"Could not read {problem_path}: {e}")
        return STATUS_OPEN

    match = STATUS_LINE_PATTERN.search(content)
    if not match:
        return STATUS_OPEN

    value = match.group("value").upper()
    if value not in STATUSES:
        logger.warning(f"Unknown status '{match.group('value')}' in {problem_path}, treating as {STATUS_OPEN}")
        return STATUS_OPEN
    return value


def write_status(problem_path: Path, status: str) -> None:
    """Rewrite the Status: marker in problem.md, inserting one if absent."""
    if status not in STATUSES:
        raise ValueError(f"Unknown status: {status}")

    content = _read_problem(problem_path)
    match = STATUS_LINE_PATTERN.search(content)

    if match:
        content = content[:match.start("value")] + status + content[match.end("value"):]
    else:
        marker = f"**Status:** {status}"
        lines = content.splitlines()
        heading = next((i for i, line in enumerate(lines) if line.startswith("#")), None)
        if heading is None:
            lines[0:0] = [marker, ""]
        else:
            lines[heading + 1:heading + 1] = ["", marker]
        content = "\n".join(lines) + "\n"

    problem_path.write_text(content, encoding="utf-8", errors="surrogateescape")


def load_issue(issue_dir: Path, location: str) -> Issue:
    """Load an Issue from its directory.

    Raises:
        IssueNotFoundError: If the directory has no problem.md
    """
    if not _is_issue_dir(issue_dir):
        raise IssueNotFoundError(issue_dir.name, issue_dir.parent)

    artifacts = [f for f in ARTIFACT_FILES if (issue_dir / f).is_file()]
    return Issue(
        name=issue_dir.name,
        dir=issue_dir,
        location=location,
        status=read_status(issue_dir / PROBLEM_FILE),
        artifacts=artifacts,
    )


def list_issues(root: Path, location: str) -> list[Issue]:
    """Load every issue under root, sorted by name."""
    return [load_issue(root / name, location) for name in list_issue_names(root)]


def find_issue(config: IssuesConfig, name: str) -> Issue:
    """Find an issue by name, looking in the issues root before the archive.

    Raises:
        InvalidIssueNameError: If the name is unsafe
        IssueNotFoundError: If neither root holds the issue
    """
    validate_issue_name(name)
    for root, location in ((config.issues_dir, LOCATION_OPEN), (config.archive_dir, LOCATION_ARCHIVED)):
        if _is_issue_dir(root / name):
            return load_issue(root / name, location)
    raise IssueNotFoundError(name, config.issues_dir)


def _default_title(name: str) -> str:
    return name.replace("-", " ").capitalize()


def create_issue(
    root: Path,
    name: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Issue:
    """Create a new open issue with a problem.md.

    Raises:
        InvalidIssueNameError: If the name is not kebab-case
        IssueError: If a directory with that name already exists
    """
    validate_issue_name(name, strict=True)
    issue_dir = root / name
    if issue_dir.exists():
        raise IssueError(f"Issue '{name}' already exists at {issue_dir}")

    now = now or datetime.now()
    content = PROBLEM_TEMPLATE.format(
        title=title or _default_title(name),
        status=STATUS_OPEN,
        created=now.strftime("%Y-%m-%d"),
        description=description or "_Describe the problem, how to reproduce it, and the expected behaviour._",
    )

    issue_dir.mkdir(parents=True)
    (issue_dir / PROBLEM_FILE).write_text(content)
    logger.info(f"Created issue {name} at {issue_dir}")

    return load_issue(issue_dir, LOCATION_OPEN)
