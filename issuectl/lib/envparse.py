"""
Safe .env parser for issues.env.

Reads KEY=value lines without ever handing them to a shell, so a checked-in
issues.env cannot smuggle in command substitution.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    re.compile(r'`'),       # backticks
    re.compile(r'\$\('),    # command substitution
    re.compile(r'\$\{'),    # variable expansion
    re.compile(r';'),       # command chaining
    re.compile(r'&&'),      # AND chaining
    re.compile(r'\|'),      # pipe / OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_env_text(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parse env-file content into a dict.

    Supports comments, blank lines, an optional leading ``export`` and
    single or double quoted values.

    Raises:
        ValueError: if a line is malformed or a value contains a forbidden pattern
    """
    result = {}

    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()

        if not line or line.startswith('#'):
            continue

        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        if '=' not in line:
            raise ValueError(f"{source}:{lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        value = _unquote(value.strip())

        if not KEY_PATTERN.match(key):
            raise ValueError(f"{source}:{lineno}: Invalid key '{key}'")

        for pattern in FORBIDDEN_PATTERNS:
            if pattern.search(value):
                raise ValueError(f"{source}:{lineno}: Forbidden pattern in value of {key}")

        result[key] = value

    return result


def load_env(filepath: Path) -> dict[str, str]:
    """
    Parse an env file safely, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {path}")
    return parse_env_text(path.read_text(), source=str(path))
