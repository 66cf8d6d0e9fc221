#!/usr/bin/env python3
"""
Unified Data Models for the ApplyMate session engine

Shared session, listing and outcome models used by the search loop,
the application pipeline and the session controller.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime


# ============== Enums ==============

class SessionState(str, Enum):
    """Lifecycle states of an automation session."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPING = "stopping"
    STOPPED = "stopped"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


ACTIVE_STATES = frozenset({SessionState.RUNNING, SessionState.PAUSED, SessionState.STOPPING})
TERMINAL_STATES = frozenset({SessionState.STOPPED, SessionState.COMPLETED, SessionState.ERROR})

# Allowed transitions; start() resets a session out of idle/terminal states.
TRANSITIONS = {
    SessionState.IDLE: {SessionState.RUNNING},
    SessionState.RUNNING: {SessionState.PAUSED, SessionState.STOPPING,
                           SessionState.COMPLETED, SessionState.ERROR},
    SessionState.PAUSED: {SessionState.RUNNING, SessionState.STOPPING,
                          SessionState.COMPLETED, SessionState.ERROR},
    SessionState.STOPPING: {SessionState.STOPPED, SessionState.ERROR},
    SessionState.STOPPED: set(),
    SessionState.COMPLETED: set(),
    SessionState.ERROR: set(),
}


class AttemptOutcome(str, Enum):
    """Result of pushing one listing through the apply flow."""
    SUBMITTED = "submitted"
    SKIPPED = "skipped"
    FAILED_NO_BUTTON = "failed-no-button"
    FAILED_EXTERNAL = "failed-external"
    FAILED_CANNOT_CONTINUE = "failed-cannot-continue"
    FAILED_NO_SUBMIT = "failed-no-submit"

    @property
    def success(self) -> bool:
        return self is AttemptOutcome.SUBMITTED


class Category(str, Enum):
    """Job family derived from the configured search titles."""
    GOVERNMENT = "government"
    LEADERSHIP = "leadership"
    PROJECT = "project"
    SALES = "sales"
    ADMIN = "admin"
    TECH = "tech"
    GENERIC = "generic"


# ============== Data Models ==============

@dataclass(frozen=True)
class Listing:
    """A job posting discovered on a results page."""
    title: str
    company: str
    url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "company": self.company, "url": self.url}


@dataclass(frozen=True)
class ApplicationAttempt:
    """Outcome record of one application attempt."""
    listing: Listing
    outcome: AttemptOutcome
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.outcome.success

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "job_title": self.listing.title,
            "company": self.listing.company,
            "job_url": self.listing.url,
            "status": self.outcome.value,
            "applied_at": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class FilterDecision:
    """Whether a listing should be pursued, and why."""
    accepted: bool
    reason: str


@dataclass(frozen=True)
class RunSummary:
    """Counters reported when a session finishes."""
    found: int
    applied: int
    skipped: int

    def to_dict(self) -> Dict[str, int]:
        return {"found": self.found, "applied": self.applied, "skipped": self.skipped}


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a Session at one point in time."""
    owner_id: str
    state: SessionState
    jobs_found: int = 0
    jobs_applied: int = 0
    jobs_skipped: int = 0
    current_listing: Optional[Listing] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "owner_id": self.owner_id,
            "status": self.state.value,
            "jobs_found": self.jobs_found,
            "jobs_applied": self.jobs_applied,
            "jobs_skipped": self.jobs_skipped,
            "current_job": self.current_listing.title if self.current_listing else None,
            "current_company": self.current_listing.company if self.current_listing else None,
            "error_message": self.error_message,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class Session:
    """
    Mutable per-owner session record.

    Only the session controller and the search loop running on its behalf
    mutate it; everyone else reads snapshots.
    """
    owner_id: str
    max_jobs: int
    state: SessionState = SessionState.IDLE
    jobs_found: int = 0
    jobs_applied: int = 0
    jobs_skipped: int = 0
    current_listing: Optional[Listing] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def _touch(self):
        self.updated_at = datetime.now()

    def transition(self, new_state: SessionState):
        """Move to a new state, enforcing the lifecycle graph."""
        if new_state == self.state:
            return
        if new_state not in TRANSITIONS[self.state]:
            raise ValueError(f"Illegal session transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        if new_state.is_terminal:
            self.current_listing = None
        self._touch()

    def fail(self, message: str):
        self.error_message = message
        self.transition(SessionState.ERROR)

    @property
    def limit_reached(self) -> bool:
        return self.jobs_applied >= self.max_jobs

    def record_found(self, count: int = 1):
        self.jobs_found += max(count, 0)
        self._touch()

    def record_applied(self):
        if self.limit_reached:
            raise ValueError(f"jobs_applied already at max_jobs ({self.max_jobs})")
        self.jobs_applied += 1
        self._touch()

    def record_skipped(self):
        self.jobs_skipped += 1
        self._touch()

    def set_current(self, listing: Optional[Listing]):
        self.current_listing = listing
        self._touch()

    def summary(self) -> RunSummary:
        return RunSummary(found=self.jobs_found, applied=self.jobs_applied, skipped=self.jobs_skipped)

    def counters(self) -> Dict[str, int]:
        return {
            "jobs_found": self.jobs_found,
            "jobs_applied": self.jobs_applied,
            "jobs_skipped": self.jobs_skipped,
        }

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            owner_id=self.owner_id,
            state=self.state,
            jobs_found=self.jobs_found,
            jobs_applied=self.jobs_applied,
            jobs_skipped=self.jobs_skipped,
            current_listing=self.current_listing,
            error_message=self.error_message,
            started_at=self.started_at,
            updated_at=self.updated_at,
        )
