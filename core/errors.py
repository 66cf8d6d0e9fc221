"""
Error taxonomy for the session engine.

Configuration and concurrency errors are raised synchronously to callers of
the session controller. InteractionError wraps browser failures so engine code
can catch page problems without swallowing programming errors.
"""

from typing import List, Optional


class ApplyMateError(Exception):
    """Base class for engine errors."""


class MisconfiguredError(ApplyMateError):
    """Required run settings are missing."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required settings: {', '.join(self.missing)}")


class AlreadyRunningError(ApplyMateError):
    """The owner already has an active session."""

    def __init__(self, owner_id: str):
        self.owner_id = owner_id
        super().__init__(f"Session already running for {owner_id}")


class NotRunningError(ApplyMateError):
    """The owner has no session that accepts this command."""

    def __init__(self, owner_id: str, detail: Optional[str] = None):
        self.owner_id = owner_id
        super().__init__(detail or f"No active session for {owner_id}")


class InteractionError(ApplyMateError):
    """A single page interaction (navigation, query, click, type) failed."""

    def __init__(self, action: str, detail: str = ""):
        self.action = action
        self.detail = detail
        message = f"{action} failed"
        if detail:
            message += f": {detail[:150]}"
        super().__init__(message)
