"""
Core components of the ApplyMate session engine.

Modules:
- session_controller: Session lifecycle, registry and background tasks
- search_loop: Search titles, pagination and per-listing processing
- application_pipeline: Multi-stage apply flow for one listing
- listing_filter: Title match, category expansion and block lists
- form_rules: Radio group and dropdown heuristics
- pacing: Speed-scaled delays, cooldown and stealth behaviour
- run_gate: Pause/stop checkpoints
- settings / config: Per-run settings and process configuration

Import the controller from core.session_controller; this package only
re-exports the leaf modules.
"""

from .errors import (
    AlreadyRunningError,
    ApplyMateError,
    InteractionError,
    MisconfiguredError,
    NotRunningError,
)
from .models import (
    ApplicationAttempt,
    AttemptOutcome,
    Category,
    Listing,
    RunSummary,
    SessionSnapshot,
    SessionState,
)
from .settings import BotSettings, CandidateProfile

__all__ = [
    "AlreadyRunningError",
    "ApplyMateError",
    "InteractionError",
    "MisconfiguredError",
    "NotRunningError",
    "ApplicationAttempt",
    "AttemptOutcome",
    "Category",
    "Listing",
    "RunSummary",
    "SessionSnapshot",
    "SessionState",
    "BotSettings",
    "CandidateProfile",
]
