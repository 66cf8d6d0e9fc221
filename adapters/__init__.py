"""
Job Board Adapters
Board-specific URLs and page descriptors for the session engine.

Supports: SEEK.
"""

from .base import JobBoard
from .seek import SeekBoard

BOARDS = {
    SeekBoard.name: SeekBoard,
}


def get_board(name: str = "seek") -> JobBoard:
    """Adapter instance for a board name (case-insensitive)."""
    try:
        return BOARDS[(name or "seek").strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown job board '{name}'. Available: {', '.join(sorted(BOARDS))}")


__all__ = ["JobBoard", "SeekBoard", "BOARDS", "get_board"]
