"""
Browser Automation Module

PageInteraction is the engine's only view of a browser; PlaywrightPage
implements it over Playwright and StealthBrowserManager launches the
browsers behind it.

Environment Variables Used:
    HEADLESS - Run browsers without a window (default true)
    BROWSER_USER_DATA_DIR - Root for persistent per-owner profiles
    NAVIGATION_TIMEOUT_MS - Page navigation timeout
"""

from .page import (
    AttributePredicate,
    Descriptor,
    PageInteraction,
    PlaywrightPage,
)
from .stealth_manager import StealthBrowserManager

__all__ = [
    "AttributePredicate",
    "Descriptor",
    "PageInteraction",
    "PlaywrightPage",
    "StealthBrowserManager",
]
