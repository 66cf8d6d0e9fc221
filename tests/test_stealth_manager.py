"""
Tests for StealthBrowserManager with Playwright mocked out.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from playwright.async_api import Error as PlaywrightError

from browser.page import PlaywrightPage
from browser.stealth_manager import STEALTH_SCRIPT, StealthBrowserManager
from core.errors import InteractionError


@pytest.fixture
def playwright_mock():
    """Fake async_playwright() with one browser, context and page."""
    page = MagicMock()
    page.close = AsyncMock()

    context = MagicMock()
    context.pages = []
    context.new_page = AsyncMock(return_value=page)
    context.add_init_script = AsyncMock()
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser)
    pw.chromium.launch_persistent_context = AsyncMock(return_value=context)
    pw.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)

    with patch("browser.stealth_manager.async_playwright", return_value=starter):
        yield pw, browser, context, page


class TestStealthBrowserManager:

    @pytest.mark.asyncio
    async def test_acquire_launches_stealth_context(self, playwright_mock):
        pw, browser, context, page = playwright_mock
        manager = StealthBrowserManager(headless=True, user_data_dir="", action_timeout_ms=7000)

        result = await manager.acquire("owner-1")

        assert isinstance(result, PlaywrightPage)
        assert result.page is page
        pw.chromium.launch.assert_awaited_once()
        assert pw.chromium.launch.await_args.kwargs["headless"] is True
        context_args = browser.new_context.await_args.kwargs
        assert context_args["locale"] == "en-AU"
        assert context_args["user_agent"]
        context.add_init_script.assert_awaited_once_with(STEALTH_SCRIPT)
        context.set_default_timeout.assert_called_once_with(7000)
        assert "owner-1" in manager.active_sessions

    @pytest.mark.asyncio
    async def test_release_closes_browser(self, playwright_mock):
        pw, browser, context, page = playwright_mock
        manager = StealthBrowserManager(headless=True, user_data_dir="")

        result = await manager.acquire("owner-1")
        await manager.release(result)

        page.close.assert_awaited_once()
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        assert manager.active_sessions == {}

    @pytest.mark.asyncio
    async def test_persistent_profile_per_owner(self, playwright_mock, tmp_path):
        pw, browser, context, page = playwright_mock
        context.pages = [page]
        manager = StealthBrowserManager(headless=False, user_data_dir=str(tmp_path))

        result = await manager.acquire("owner-1")

        assert result.page is page
        profile_dir = pw.chromium.launch_persistent_context.await_args.args[0]
        assert profile_dir == str(tmp_path / "owner-1")
        assert (tmp_path / "owner-1").is_dir()
        pw.chromium.launch.assert_not_awaited()
        context.new_page.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_launch_failure_converted(self, playwright_mock):
        pw, *_ = playwright_mock
        pw.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist\nrun playwright install")
        manager = StealthBrowserManager(headless=True, user_data_dir="")

        with pytest.raises(InteractionError) as exc_info:
            await manager.acquire("owner-1")

        assert exc_info.value.detail == "Executable doesn't exist"
        assert manager.active_sessions == {}

    @pytest.mark.asyncio
    async def test_context_failure_closes_browser(self, playwright_mock):
        pw, browser, context, page = playwright_mock
        browser.new_context.side_effect = PlaywrightError("Target closed")
        manager = StealthBrowserManager(headless=True, user_data_dir="")

        with pytest.raises(InteractionError):
            await manager.acquire("owner-1")

        browser.close.assert_awaited_once()
        assert manager.active_sessions == {}

    @pytest.mark.asyncio
    async def test_setup_failure_closes_context_and_browser(self, playwright_mock):
        pw, browser, context, page = playwright_mock
        context.add_init_script.side_effect = PlaywrightError("Target closed")
        manager = StealthBrowserManager(headless=True, user_data_dir="")

        with pytest.raises(InteractionError):
            await manager.acquire("owner-1")

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        page.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persistent_context_closed_on_page_failure(self, playwright_mock, tmp_path):
        pw, browser, context, page = playwright_mock
        context.new_page.side_effect = PlaywrightError("Target closed")
        manager = StealthBrowserManager(headless=True, user_data_dir=str(tmp_path))

        with pytest.raises(InteractionError):
            await manager.acquire("owner-1")

        context.close.assert_awaited_once()
        browser.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_close_all(self, playwright_mock):
        pw, browser, context, page = playwright_mock
        manager = StealthBrowserManager(headless=True, user_data_dir="")
        await manager.acquire("a")

        await manager.close_all()

        context.close.assert_awaited_once()
        pw.stop.assert_awaited_once()
        assert manager.playwright is None
