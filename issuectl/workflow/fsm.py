"""Issue status state machine using transitions library.

The status lives in problem.md as a Status: marker. The FSM loads it on
construction and writes it back after every transition.

Usage:
    from issuectl.workflow.fsm import IssueFSM

    fsm = IssueFSM(issue_dir)
    fsm.resolve()  # OPEN -> RESOLVED
    fsm.reopen()   # RESOLVED -> OPEN
"""

import logging
from pathlib import Path
from typing import Callable

from transitions import Machine

from issuectl.lib.constants import (
    PROBLEM_FILE,
    STATUSES,
    STATUS_OPEN,
    STATUS_REJECTED,
    STATUS_RESOLVED,
)
from issuectl.lib.issues import read_status, write_status

logger = logging.getLogger(__name__)


STATES = list(STATUSES)

# Each trigger becomes a method on the FSM
TRANSITIONS = [
    {"trigger": "resolve", "source": STATUS_OPEN, "dest": STATUS_RESOLVED},
    {"trigger": "reject", "source": STATUS_OPEN, "dest": STATUS_REJECTED},
    {"trigger": "reopen", "source": [STATUS_RESOLVED, STATUS_REJECTED], "dest": STATUS_OPEN},
]


class IssueFSM:
    """State machine for one issue's status.

    Wraps the transitions library with issue-specific logic:
    - Loads initial state from problem.md
    - Persists state changes to problem.md
    - Logs all transitions
    """

    def __init__(self, issue_dir: Path, on_transition: Callable[[str, str, str], None] | None = None):
        """Initialize FSM for an issue.

        Args:
            issue_dir: Path to issue directory (contains problem.md)
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.issue_dir = issue_dir
        self.issue_name = issue_dir.name
        self.on_transition = on_transition

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=self._load_state(),
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    @property
    def problem_path(self) -> Path:
        return self.issue_dir / PROBLEM_FILE

    def _load_state(self) -> str:
        if not self.problem_path.exists():
            return STATUS_OPEN
        return read_status(self.problem_path)

    def _save_state(self) -> None:
        write_status(self.problem_path, self.state)

    def on_state_change(self, event) -> None:
        """Persist the new status and report the transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.issue_name}: {from_state} -> {to_state} ({trigger})")

        self._save_state()

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)
