"""Tests for issuectl.workflow.fsm module."""

import pytest
from transitions import MachineError

from issuectl.lib.issues import read_status
from issuectl.workflow.fsm import STATES, TRANSITIONS, IssueFSM


class TestFSMDefinition:
    """Tests for FSM state definitions."""

    def test_states(self):
        assert set(STATES) == {"OPEN", "RESOLVED", "REJECTED"}

    def test_triggers(self):
        assert {t["trigger"] for t in TRANSITIONS} == {"resolve", "reject", "reopen"}


class TestIssueFSM:
    """Basic FSM functionality tests."""

    @pytest.fixture
    def issue_dir(self, store, make_issue):
        return make_issue(store.issues_dir, "bug-x", status="OPEN")

    def test_initial_state_from_problem_md(self, store, make_issue):
        issue_dir = make_issue(store.issues_dir, "done-bug", status="RESOLVED")
        assert IssueFSM(issue_dir).state == "RESOLVED"

    def test_initial_state_defaults_to_open(self, store):
        issue_dir = store.issues_dir / "new-bug"
        issue_dir.mkdir(parents=True)
        assert IssueFSM(issue_dir).state == "OPEN"

    def test_resolve_persists(self, issue_dir):
        fsm = IssueFSM(issue_dir)
        fsm.resolve()
        assert fsm.state == "RESOLVED"
        assert read_status(issue_dir / "problem.md") == "RESOLVED"
        # A fresh FSM sees the persisted state
        assert IssueFSM(issue_dir).state == "RESOLVED"

    def test_reject_then_reopen(self, issue_dir):
        fsm = IssueFSM(issue_dir)
        fsm.reject()
        fsm.reopen()
        assert read_status(issue_dir / "problem.md") == "OPEN"

    def test_invalid_trigger_raises(self, issue_dir):
        fsm = IssueFSM(issue_dir)
        with pytest.raises(MachineError):
            fsm.reopen()
        assert read_status(issue_dir / "problem.md") == "OPEN"

    def test_can(self, issue_dir):
        fsm = IssueFSM(issue_dir)
        assert fsm.can("resolve")
        assert fsm.can("reject")
        assert not fsm.can("reopen")
        fsm.resolve()
        assert fsm.can("reopen")
        assert not fsm.can("reject")

    def test_save_error_propagates(self, store):
        issue_dir = store.issues_dir / "scratch"
        issue_dir.mkdir(parents=True)
        with pytest.raises(FileNotFoundError):
            IssueFSM(issue_dir).resolve()
        assert not (issue_dir / "problem.md").exists()

    def test_transition_logged(self, issue_dir, caplog):
        import logging
        caplog.set_level(logging.INFO)
        IssueFSM(issue_dir).resolve()
        assert "[FSM] bug-x: OPEN -> RESOLVED (resolve)" in caplog.text

    def test_on_transition_callback(self, issue_dir):
        seen = []
        fsm = IssueFSM(issue_dir, on_transition=lambda *args: seen.append(args))
        fsm.reject()
        assert seen == [("OPEN", "REJECTED", "reject")]

    def test_marker_inserted_when_missing(self, store, make_issue):
        issue_dir = make_issue(store.issues_dir, "bug-y", problem_text="# Bug Y\n\nDetails.\n")
        IssueFSM(issue_dir).resolve()
        content = (issue_dir / "problem.md").read_text()
        assert "**Status:** RESOLVED" in content
        assert "Details." in content
