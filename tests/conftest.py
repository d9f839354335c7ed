"""Shared fixtures for issuectl tests."""

import pytest

from issuectl.lib.config import CONFIG_KEYS, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's ISSUES_DIR and friends out of every test."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def store(tmp_path):
    """Config for an empty issue store rooted at tmp_path."""
    return load_config(tmp_path, environ={})


@pytest.fixture
def make_issue():
    """Factory: make_issue(root, name, files=..., status=...) -> issue dir."""
    def _make(root, name, files=("problem.md",), status=None, problem_text=None):
        issue_dir = root / name
        issue_dir.mkdir(parents=True)
        for filename in files:
            if filename == "problem.md":
                text = problem_text
                if text is None:
                    text = f"# {name}\n\n"
                    if status:
                        text += f"**Status:** {status}\n\n"
                    text += "Something is broken.\n"
                (issue_dir / filename).write_text(text)
            else:
                (issue_dir / filename).write_text(f"{filename} for {name}\n")
        return issue_dir
    return _make
