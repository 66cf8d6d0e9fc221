#!/usr/bin/env python3
"""
Session Controller

Owns the lifecycle of every owner's automation session:

    idle/terminal --start--> running <--pause/resume--> paused
    running/paused --stop--> stopping --(loop observes)--> stopped
    running/paused --(loop finishes / max jobs)--> completed
    any active --(unexpected fault)--> error

Each session runs as its own asyncio task. Commands never wait for the
task; pause and stop take effect at the search loop's next checkpoint.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from adapters import get_board
from ai.content_generator import create_generator
from browser.stealth_manager import StealthBrowserManager
from core.application_pipeline import ApplicationPipeline
from core.config import get_config
from core.errors import AlreadyRunningError, MisconfiguredError, NotRunningError
from core.logging_config import log_session_event
from core.models import Session, SessionSnapshot, SessionState
from core.pacing import PacingController
from core.run_gate import RunGate
from core.search_loop import SearchLoop
from core.settings import BotSettings
from monitoring.progress import ProgressReporter, Subscriber

logger = logging.getLogger(__name__)

FINAL_MESSAGES = {
    SessionState.COMPLETED: "Completed! Applied to {applied} jobs",
    SessionState.STOPPED: "Stopped. Applied to {applied} jobs",
    SessionState.ERROR: "Stopped on error: {error}",
}


@dataclass
class SessionHandle:
    """Everything the controller holds for one running session."""
    session: Session
    settings: BotSettings
    reporter: ProgressReporter
    gate: RunGate = field(default_factory=RunGate)
    task: Optional[asyncio.Task] = None

    @property
    def owner_id(self) -> str:
        return self.session.owner_id


class SessionRegistry:
    """Active sessions by owner; at most one entry per owner."""

    def __init__(self):
        self._handles: Dict[str, SessionHandle] = {}

    def register(self, owner_id: str, handle: SessionHandle):
        if owner_id in self._handles:
            raise AlreadyRunningError(owner_id)
        self._handles[owner_id] = handle

    def unregister(self, owner_id: str, handle: Optional[SessionHandle] = None):
        """Remove an owner's entry (only if it is still `handle`, when given)."""
        current = self._handles.get(owner_id)
        if current is None:
            return
        if handle is not None and current is not handle:
            return
        del self._handles[owner_id]

    def lookup(self, owner_id: str) -> Optional[SessionHandle]:
        return self._handles.get(owner_id)

    def active_owners(self) -> List[str]:
        return list(self._handles)

    def __contains__(self, owner_id: str) -> bool:
        return owner_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)


def default_pipeline_factory(board, generator, pacing, reporter, settings) -> ApplicationPipeline:
    return ApplicationPipeline(board, generator, pacing, reporter, settings)


class SessionController:
    """
    Start, pause, resume and stop automation sessions.

    Args:
        browser_manager: Object with async acquire(owner_id) -> PageInteraction
            and release(page); defaults to a StealthBrowserManager
        generator_factory: settings -> content generator
        board: JobBoard adapter (default from JOB_BOARD)
        registry: SessionRegistry (a fresh one by default)
        subscribers: Progress subscribers attached to every session
        pipeline_factory: Builds the ApplicationPipeline for a session
        sleep: Awaitable sleep used for all pacing (default asyncio.sleep)
    """

    def __init__(
        self,
        browser_manager=None,
        generator_factory: Optional[Callable] = None,
        board=None,
        registry: Optional[SessionRegistry] = None,
        subscribers: Optional[List[Subscriber]] = None,
        pipeline_factory: Optional[Callable] = None,
        sleep: Optional[Callable] = None,
    ):
        self.browser_manager = browser_manager or StealthBrowserManager()
        self.generator_factory = generator_factory or create_generator
        self.board = board or get_board(get_config().JOB_BOARD)
        self.registry = registry or SessionRegistry()
        self.pipeline_factory = pipeline_factory or default_pipeline_factory
        self._subscribers: List[Subscriber] = list(subscribers or [])
        self._sleep = sleep
        self._latest: Dict[str, SessionHandle] = {}

    # ============== Commands ==============

    def start(self, owner_id: str, settings: BotSettings) -> SessionSnapshot:
        """
        Start a session for an owner. Must be called from a running event loop.

        Raises:
            AlreadyRunningError: The owner has an active session
            MisconfiguredError: Required settings are missing
        """
        existing = self.registry.lookup(owner_id)
        if existing is not None:
            if existing.session.state.is_active:
                raise AlreadyRunningError(owner_id)
            # Finished but still releasing its browser
            self.registry.unregister(owner_id, existing)

        missing = settings.validate()
        if missing:
            raise MisconfiguredError(missing)

        loop = asyncio.get_running_loop()
        session = Session(owner_id=owner_id, max_jobs=settings.max_jobs)
        session.started_at = datetime.now()
        session.transition(SessionState.RUNNING)

        handle = SessionHandle(
            session=session,
            settings=settings,
            reporter=ProgressReporter(owner_id, self._subscribers),
        )
        self.registry.register(owner_id, handle)
        try:
            handle.task = loop.create_task(self._run(handle), name=f"applymate-session-{owner_id}")
        except Exception:
            self.registry.unregister(owner_id, handle)
            raise
        self._latest[owner_id] = handle
        log_session_event(owner_id, "started", f"{len(settings.job_titles)} titles, max {settings.max_jobs} jobs")
        return session.snapshot()

    def pause(self, owner_id: str) -> SessionSnapshot:
        handle = self._require_active(owner_id)
        session = handle.session
        if session.state == SessionState.RUNNING:
            handle.gate.pause()
            session.transition(SessionState.PAUSED)
            handle.reporter.status_update("Bot paused", status=SessionState.PAUSED.value)
            log_session_event(owner_id, "paused")
        return session.snapshot()

    def resume(self, owner_id: str) -> SessionSnapshot:
        handle = self._require_active(owner_id)
        session = handle.session
        if session.state == SessionState.PAUSED:
            session.transition(SessionState.RUNNING)
            handle.gate.resume()
            handle.reporter.status_update("Bot resumed", status=SessionState.RUNNING.value)
            log_session_event(owner_id, "resumed")
        return session.snapshot()

    def stop(self, owner_id: str) -> SessionSnapshot:
        """Request a stop. Succeeds (as a no-op) when nothing is running."""
        handle = self.registry.lookup(owner_id)
        if handle is None or not handle.session.state.is_active:
            return self.get_status(owner_id)
        session = handle.session
        if session.state != SessionState.STOPPING:
            handle.gate.stop()
            session.transition(SessionState.STOPPING)
            handle.reporter.status_update("Stopping bot...", status=SessionState.STOPPING.value)
            log_session_event(owner_id, "stop requested")
        return session.snapshot()

    def get_status(self, owner_id: str) -> SessionSnapshot:
        handle = self.registry.lookup(owner_id) or self._latest.get(owner_id)
        if handle is None:
            return SessionSnapshot(owner_id=owner_id, state=SessionState.IDLE)
        return handle.session.snapshot()

    def subscribe(self, callback: Subscriber):
        """Attach a subscriber to every current and future session."""
        self._subscribers.append(callback)
        for owner_id in self.registry.active_owners():
            handle = self.registry.lookup(owner_id)
            if handle:
                handle.reporter.subscribe(callback)

    def reporter(self, owner_id: str) -> Optional[ProgressReporter]:
        handle = self.registry.lookup(owner_id) or self._latest.get(owner_id)
        return handle.reporter if handle else None

    async def wait(self, owner_id: str) -> SessionSnapshot:
        """Wait for an owner's session task to finish."""
        handle = self._latest.get(owner_id)
        if handle and handle.task:
            await asyncio.wait({handle.task})
            await handle.reporter.drain()
        return self.get_status(owner_id)

    async def shutdown(self):
        """Stop every active session and wait for all of them."""
        owners = self.registry.active_owners()
        for owner_id in owners:
            self.stop(owner_id)
        for owner_id in owners:
            await self.wait(owner_id)
        close_all = getattr(self.browser_manager, "close_all", None)
        if close_all:
            await close_all()

    def _require_active(self, owner_id: str) -> SessionHandle:
        handle = self.registry.lookup(owner_id)
        if handle is None or handle.session.state not in (SessionState.RUNNING, SessionState.PAUSED):
            raise NotRunningError(owner_id)
        return handle

    # ============== Session task ==============

    async def _run(self, handle: SessionHandle):
        session, settings, reporter = handle.session, handle.settings, handle.reporter
        owner_id = session.owner_id
        page = None
        generator = None
        try:
            page = await self.browser_manager.acquire(owner_id)
            generator = self.generator_factory(settings)
            pacing = PacingController.from_settings(settings, reporter=reporter, sleep=self._sleep)
            pipeline = self.pipeline_factory(self.board, generator, pacing, reporter, settings)
            loop = SearchLoop(session, settings, self.board, pipeline, pacing, reporter, handle.gate)
            await loop.run(page)
            self._finish(session)
        except asyncio.CancelledError:
            logger.warning(f"Session [{owner_id}] task cancelled")
            self._finish(session, cancelled=True)
            raise
        except Exception as e:
            logger.error(f"Session [{owner_id}] failed: {e}", exc_info=True)
            session.fail(str(e) or type(e).__name__)
            reporter.error(f"Session error: {session.error_message}")
        finally:
            await self._cleanup(handle, page, generator)

    def _finish(self, session: Session, cancelled: bool = False):
        if session.state == SessionState.STOPPING:
            session.transition(SessionState.STOPPED)
        elif session.state.is_active:
            if cancelled:
                session.transition(SessionState.STOPPING)
                session.transition(SessionState.STOPPED)
            else:
                session.transition(SessionState.COMPLETED)

    async def _cleanup(self, handle: SessionHandle, page, generator):
        session, reporter = handle.session, handle.reporter
        owner_id = session.owner_id

        if generator is not None:
            close = getattr(generator, "close", None)
            if close:
                try:
                    await close()
                except Exception as e:
                    logger.warning(f"Session [{owner_id}] generator close failed: {e}")

        if page is not None:
            try:
                await self.browser_manager.release(page)
            except Exception as e:
                logger.warning(f"Session [{owner_id}] browser release failed: {e}")

        self.registry.unregister(owner_id, handle)

        summary = session.summary()
        reporter.complete(summary)
        message = FINAL_MESSAGES.get(session.state, "{state}").format(
            applied=summary.applied, error=session.error_message, state=session.state.value
        )
        reporter.status_update(message, status=session.state.value, counters=session.counters())
        log_session_event(
            owner_id, session.state.value,
            f"found={summary.found} applied={summary.applied} skipped={summary.skipped}",
        )
