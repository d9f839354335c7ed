"""CLI-level tests for issue listing, creation, archiving and status commands."""

import json

import pytest

from issuectl.cli import build_parser, main
from issuectl.lib.issues import read_status
from issuectl.lib.locking import store_lock


def run(base_dir, *args):
    return main(["-C", str(base_dir), *args])


@pytest.fixture
def base(tmp_path):
    return tmp_path.resolve()


class TestListOpen:
    """issues list-open"""

    def test_lists_issues_with_problem_md(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-b")
        make_issue(base / "issues", "bug-a")
        (base / "issues" / "not-an-issue").mkdir()

        assert run(base, "list-open") == 0
        assert capsys.readouterr().out.splitlines() == ["bug-a", "bug-b"]

    def test_missing_issues_root_prints_nothing(self, base, capsys):
        assert run(base, "list-open") == 0
        assert capsys.readouterr().out == ""

    def test_hidden_directories_not_listed(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-a")
        make_issue(base / "issues", ".draft")
        assert run(base, "list-open") == 0
        assert capsys.readouterr().out.splitlines() == ["bug-a"]

    def test_non_utf8_problem_md(self, base, make_issue, capsys):
        issue_dir = make_issue(base / "issues", "bug-x")
        (issue_dir / "problem.md").write_bytes(b"# Caf\xe9 crash\n\nStatus: RESOLVED\n")
        make_issue(base / "issues", "bug-y")

        assert run(base, "list-open", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert [(d["name"], d["status"]) for d in data] == [("bug-x", "RESOLVED"), ("bug-y", "OPEN")]

    def test_respects_issues_dir_env(self, base, make_issue, monkeypatch, capsys):
        make_issue(base / "tracker", "bug-x")
        monkeypatch.setenv("ISSUES_DIR", "tracker")
        assert run(base, "list-open") == 0
        assert capsys.readouterr().out.splitlines() == ["bug-x"]

    def test_long_listing(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x", files=("problem.md", "validation.md"), status="OPEN")
        assert run(base, "list-open", "--long") == 0
        out = capsys.readouterr().out
        assert "NAME" in out
        assert "bug-x" in out
        assert "validation" in out
        assert "1 issue(s)" in out

    def test_json_listing(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x", files=("problem.md", "solution.md"), status="RESOLVED")
        assert run(base, "list-open", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data[0]["name"] == "bug-x"
        assert data[0]["status"] == "RESOLVED"
        assert data[0]["solved"] is True


class TestListSolved:
    """issues list-solved"""

    def test_missing_archive_root_is_empty(self, base, capsys):
        assert run(base, "list-solved") == 0
        assert capsys.readouterr().out == ""
        assert not (base / "archive").exists()

    def test_lists_archived(self, base, make_issue, capsys):
        make_issue(base / "archive", "old-bug")
        make_issue(base / "issues", "new-bug")
        assert run(base, "list-solved") == 0
        assert capsys.readouterr().out.splitlines() == ["old-bug"]

    def test_respects_archive_dir_env(self, base, make_issue, monkeypatch, capsys):
        make_issue(base / "done", "old-bug")
        monkeypatch.setenv("ARCHIVE_DIR", str(base / "done"))
        assert run(base, "list-solved") == 0
        assert capsys.readouterr().out.splitlines() == ["old-bug"]


class TestArchive:
    """issues archive"""

    def test_archive_scenario(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x", problem_text="# Bug X\n")

        assert run(base, "archive", "bug-x") == 0

        assert (base / "archive" / "bug-x" / "problem.md").read_text() == "# Bug X\n"
        assert not (base / "issues" / "bug-x").exists()
        assert "Archived 'bug-x'" in capsys.readouterr().out

    def test_collision_reported(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x")
        make_issue(base / "archive", "bug-x", problem_text="old\n")

        assert run(base, "archive", "bug-x") == 0

        out = capsys.readouterr().out
        assert "archived as 'bug-x-" in out
        assert (base / "archive" / "bug-x" / "problem.md").read_text() == "old\n"
        archived = sorted(p.name for p in (base / "archive").iterdir())
        assert len(archived) == 2
        assert archived[1].startswith("bug-x-")

    def test_missing_issue_fails(self, base, capsys):
        assert run(base, "archive", "bug-x") == 1
        assert "ERROR: Issue 'bug-x' not found" in capsys.readouterr().out
        assert not (base / "archive").exists()

    def test_already_archived_hint(self, base, make_issue, capsys):
        make_issue(base / "archive", "bug-x")
        assert run(base, "archive", "bug-x") == 1
        assert "already archived" in capsys.readouterr().out

    def test_invalid_name(self, base, capsys):
        assert run(base, "archive", "../bug-x") == 2
        assert "ERROR: Invalid issue name" in capsys.readouterr().out

    def test_archive_with_resolve(self, base, make_issue):
        make_issue(base / "issues", "bug-x", status="OPEN")
        assert run(base, "archive", "bug-x", "--resolve") == 0
        assert read_status(base / "archive" / "bug-x" / "problem.md") == "RESOLVED"

    def test_archive_with_reject(self, base, make_issue):
        make_issue(base / "issues", "bug-x")
        assert run(base, "archive", "bug-x", "--reject") == 0
        assert read_status(base / "archive" / "bug-x" / "problem.md") == "REJECTED"

    def test_resolve_and_reject_are_exclusive(self, base):
        with pytest.raises(SystemExit) as exc_info:
            run(base, "archive", "bug-x", "--resolve", "--reject")
        assert exc_info.value.code == 2

    def test_resolve_rolled_back_when_lock_busy(self, base, make_issue, monkeypatch, capsys):
        make_issue(base / "issues", "bug-x", status="OPEN")
        monkeypatch.setenv("LOCK_TIMEOUT", "1")

        with store_lock(base / "issues"):
            assert run(base, "archive", "bug-x", "--resolve") == 1

        out = capsys.readouterr().out
        assert "Could not acquire" in out
        assert "Marked" not in out
        assert read_status(base / "issues" / "bug-x" / "problem.md") == "OPEN"

    def test_resolve_without_problem_md_refused(self, base, capsys):
        (base / "issues" / "scratch").mkdir(parents=True)

        assert run(base, "archive", "scratch", "--resolve") == 1

        out = capsys.readouterr().out
        assert "ERROR: Cannot resolve 'scratch'" in out
        assert "Marked" not in out
        assert (base / "issues" / "scratch").is_dir()
        assert not (base / "archive").exists()


class TestRestore:
    """issues restore"""

    def test_restore(self, base, make_issue, capsys):
        make_issue(base / "archive", "bug-x", status="REJECTED")
        assert run(base, "restore", "bug-x") == 0
        assert read_status(base / "issues" / "bug-x" / "problem.md") == "OPEN"
        assert "Restored 'bug-x'" in capsys.readouterr().out

    def test_restore_missing(self, base, capsys):
        assert run(base, "restore", "bug-x") == 1
        assert "list-solved" in capsys.readouterr().out

    def test_restore_conflict(self, base, make_issue, capsys):
        make_issue(base / "archive", "bug-x")
        make_issue(base / "issues", "bug-x")
        assert run(base, "restore", "bug-x") == 1
        assert "already exists" in capsys.readouterr().out


class TestNewAndShow:
    """issues new / issues show"""

    def test_new_then_list(self, base, capsys):
        assert run(base, "new", "slow-startup", "-d", "Takes 40s to boot.") == 0
        capsys.readouterr()
        assert run(base, "list-open") == 0
        assert capsys.readouterr().out.splitlines() == ["slow-startup"]
        assert "Takes 40s to boot." in (base / "issues" / "slow-startup" / "problem.md").read_text()

    def test_new_rejects_bad_name(self, base, capsys):
        assert run(base, "new", "Slow_Startup") == 2
        assert "kebab-case" in capsys.readouterr().out

    def test_new_rejects_duplicate(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x")
        assert run(base, "new", "bug-x") == 1
        assert "already exists" in capsys.readouterr().out

    def test_new_rejects_archived_name(self, base, make_issue, capsys):
        make_issue(base / "archive", "bug-x")
        assert run(base, "new", "bug-x") == 1
        assert "issues restore bug-x" in capsys.readouterr().out

    def test_new_rejects_empty_name(self, base, capsys):
        (base / "archive").mkdir()
        assert run(base, "new", "") == 2
        assert "must not be empty" in capsys.readouterr().out

    def test_show(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x", files=("problem.md", "validation.md"), status="OPEN")
        assert run(base, "show", "bug-x") == 0
        out = capsys.readouterr().out
        assert "Location: open" in out
        assert "Status:   OPEN" in out
        assert "Stage:    validation" in out
        assert "[x] validation.md" in out
        assert "[ ] solution.md" in out

    def test_show_archived(self, base, make_issue, capsys):
        make_issue(base / "archive", "bug-x", status="RESOLVED")
        assert run(base, "show", "bug-x") == 0
        assert "Location: archived" in capsys.readouterr().out

    def test_show_missing(self, base, capsys):
        assert run(base, "show", "bug-x") == 1


class TestStatusCommands:
    """issues resolve / reject / reopen"""

    def test_resolve(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x", status="OPEN")
        assert run(base, "resolve", "bug-x") == 0
        assert read_status(base / "issues" / "bug-x" / "problem.md") == "RESOLVED"
        assert "now RESOLVED" in capsys.readouterr().out

    def test_reject_twice_fails(self, base, make_issue, capsys):
        make_issue(base / "issues", "bug-x")
        assert run(base, "reject", "bug-x") == 0
        assert run(base, "reject", "bug-x") == 1
        assert "Cannot reject 'bug-x' while it is REJECTED" in capsys.readouterr().out

    def test_reopen(self, base, make_issue):
        make_issue(base / "issues", "bug-x", status="RESOLVED")
        assert run(base, "reopen", "bug-x") == 0
        assert read_status(base / "issues" / "bug-x" / "problem.md") == "OPEN"

    def test_archived_issue_refused(self, base, make_issue, capsys):
        make_issue(base / "archive", "bug-x", status="RESOLVED")
        assert run(base, "reopen", "bug-x") == 1
        assert "issues restore bug-x" in capsys.readouterr().out


class TestConfigErrors:
    """Bad configuration exits with code 2."""

    def test_bad_issues_env(self, base, capsys):
        (base / "issues.env").write_text("ISSUES_DIR=`pwd`\n")
        with pytest.raises(SystemExit) as exc_info:
            run(base, "list-open")
        assert exc_info.value.code == 2
        assert "Invalid configuration" in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
