"""Shared constants for issuectl."""

import re

# Issue name validation
ISSUE_NAME_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
MAX_ISSUE_NAME_LEN = 80

# Artifact files in lifecycle order
PROBLEM_FILE = "problem.md"
SOLUTION_FILE = "solution.md"
ARTIFACT_FILES = [
    PROBLEM_FILE,
    "validation.md",
    "proposals.md",
    "review.md",
    "implementation.md",
    "testing.md",
    SOLUTION_FILE,
]

# Status markers inside problem.md
STATUS_OPEN = "OPEN"
STATUS_RESOLVED = "RESOLVED"
STATUS_REJECTED = "REJECTED"
STATUSES = [STATUS_OPEN, STATUS_RESOLVED, STATUS_REJECTED]

# Where an issue currently lives
LOCATION_OPEN = "open"
LOCATION_ARCHIVED = "archived"

# Suffix appended on archive name collisions
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

STORE_LOCK_FILE = ".issues.lock"
