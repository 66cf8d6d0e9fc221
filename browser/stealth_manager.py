"""
Stealth Browser Manager
Launches local Playwright Chromium sessions with anti-detection patches.

Features:
- Random realistic user agent and viewport per session
- navigator.webdriver and friends masked by an init script
- Optional persistent profile per owner, so a board login survives restarts
"""

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from browser.page import PlaywrightPage
from core.config import get_config
from core.errors import InteractionError

logger = logging.getLogger(__name__)


USER_AGENTS = [
    # Chrome 131 on Windows 11
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    # Chrome 131 on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    # Edge 131 on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0",
    # Chrome on Linux
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
]

VIEWPORTS = [
    {"width": 1920, "height": 1080},
    {"width": 1680, "height": 1050},
    {"width": 1536, "height": 864},
    {"width": 1440, "height": 900},
    {"width": 1366, "height": 768},
]

STEALTH_SCRIPT = """
    // Hide webdriver property
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });

    // Mock languages
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-AU', 'en']
    });

    // Mock hardware concurrency
    Object.defineProperty(navigator, 'hardwareConcurrency', {
        get: () => 8
    });

    // Hide automation indicators
    window.chrome = {
        runtime: {},
        loadTimes: function() {},
        csi: function() {},
        app: {}
    };

    // Override permissions API
    const originalQuery = window.navigator.permissions.query;
    window.navigator.permissions.query = (parameters) => (
        parameters.name === 'notifications' ?
            Promise.resolve({ state: Notification.permission }) :
            originalQuery(parameters)
    );
"""


@dataclass
class BrowserSession:
    """An owner's live browser."""
    owner_id: str
    context: BrowserContext
    page: Page
    browser: Optional[Browser] = None


class StealthBrowserManager:
    """
    Hands out one stealth browsing context per owner.

    Args:
        headless: Run without a window (default HEADLESS)
        user_data_dir: Root for persistent per-owner profiles (default BROWSER_USER_DATA_DIR)
        navigation_timeout_ms: Page navigation timeout (default NAVIGATION_TIMEOUT_MS)
        action_timeout_ms: Default timeout for clicks and fills (default ACTION_TIMEOUT_MS)
    """

    def __init__(self, headless: Optional[bool] = None, user_data_dir: Optional[str] = None,
                 navigation_timeout_ms: Optional[int] = None, action_timeout_ms: Optional[int] = None):
        cfg = get_config()
        self.headless = cfg.HEADLESS if headless is None else headless
        self.user_data_dir = user_data_dir if user_data_dir is not None else cfg.BROWSER_USER_DATA_DIR
        self.navigation_timeout_ms = navigation_timeout_ms or cfg.NAVIGATION_TIMEOUT_MS
        self.action_timeout_ms = action_timeout_ms or cfg.ACTION_TIMEOUT_MS
        self.active_sessions: Dict[str, BrowserSession] = {}
        self.playwright = None

    async def initialize(self):
        """Initialize Playwright instance."""
        if not self.playwright:
            self.playwright = await async_playwright().start()

    def _launch_args(self, viewport: dict):
        return [
            f"--window-size={viewport['width']},{viewport['height']}",
            "--disable-blink-features=AutomationControlled",
        ]

    def _context_args(self, viewport: dict) -> dict:
        return {
            "viewport": viewport,
            "user_agent": random.choice(USER_AGENTS),
            "locale": "en-AU",
            "timezone_id": "Australia/Brisbane",
            "color_scheme": "light",
        }

    async def acquire(self, owner_id: str) -> PlaywrightPage:
        """Launch a stealth browser for an owner and return its main page."""
        if owner_id in self.active_sessions:
            await self.close_session(owner_id)
        try:
            await self.initialize()
            session = await self._launch(owner_id)
        except PlaywrightError as e:
            raise InteractionError("browser launch", str(e).split("\n")[0]) from e

        self.active_sessions[owner_id] = session
        logger.info(f"Browser session started for {owner_id} (headless={self.headless})")

        async def _on_close():
            await self.close_session(owner_id)

        return PlaywrightPage(session.page, navigation_timeout_ms=self.navigation_timeout_ms,
                              on_close=_on_close)

    async def _launch(self, owner_id: str) -> BrowserSession:
        viewport = random.choice(VIEWPORTS)
        args = self._launch_args(viewport)
        context_args = self._context_args(viewport)
        browser = None
        context = None

        try:
            if self.user_data_dir:
                profile_dir = Path(self.user_data_dir) / owner_id
                profile_dir.mkdir(parents=True, exist_ok=True)
                context = await self.playwright.chromium.launch_persistent_context(
                    str(profile_dir), headless=self.headless, args=args, **context_args
                )
            else:
                browser = await self.playwright.chromium.launch(headless=self.headless, args=args)
                context = await browser.new_context(**context_args)

            context.set_default_timeout(self.action_timeout_ms)
            await context.add_init_script(STEALTH_SCRIPT)
            page = context.pages[0] if context.pages else await context.new_page()
        except Exception:
            # Half-built session: nothing owns it yet
            await self._close_browser(owner_id, context, browser)
            raise
        return BrowserSession(owner_id=owner_id, context=context, page=page, browser=browser)

    async def _close_browser(self, owner_id: str, context, browser):
        try:
            if context is not None:
                await context.close()
            if browser is not None:
                await browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser for {owner_id}: {e}")

    async def release(self, page: PlaywrightPage):
        """Close an owner's page and the browser behind it."""
        await page.close()

    async def close_session(self, owner_id: str):
        """Close a browser session and cleanup."""
        session = self.active_sessions.pop(owner_id, None)
        if not session:
            return
        await self._close_browser(owner_id, session.context, session.browser)
        logger.info(f"Browser session closed for {owner_id}")

    async def close_all(self):
        """Close all active sessions."""
        for owner_id in list(self.active_sessions.keys()):
            await self.close_session(owner_id)

        if self.playwright:
            try:
                await self.playwright.stop()
            except PlaywrightError as e:
                logger.warning(f"Error stopping Playwright: {e}")
            self.playwright = None
