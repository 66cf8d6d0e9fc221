#!/usr/bin/env python3
"""
Search Loop

Iterates the configured search titles, paginates each title's results and
drives every accepted listing through the application pipeline. Pause and
stop are honoured only at checkpoints: before each title, before each
results page and between listings. An attempt in flight always finishes.
"""

import logging
from typing import List, Optional

from core.errors import InteractionError
from core.listing_filter import COMPANY_BLOCKED, TITLE_BLOCKED, ListingFilter
from core.logging_config import log_attempt
from core.models import ApplicationAttempt, AttemptOutcome, Listing, Session, SessionState

logger = logging.getLogger(__name__)

OUTCOME_MESSAGES = {
    AttemptOutcome.FAILED_NO_BUTTON: "No apply button",
    AttemptOutcome.FAILED_EXTERNAL: "External application",
    AttemptOutcome.FAILED_CANNOT_CONTINUE: "Cannot continue",
    AttemptOutcome.FAILED_NO_SUBMIT: "No submit button",
    AttemptOutcome.SKIPPED: "Skipped",
}


class SearchLoop:
    """
    One session's search-and-apply run.

    Args:
        session: The Session record to update
        settings: BotSettings for the run
        board: JobBoard adapter
        pipeline: ApplicationPipeline
        pacing: PacingController
        reporter: ProgressReporter
        gate: RunGate shared with the controller
        listing_filter: Optional prebuilt ListingFilter
    """

    def __init__(self, session: Session, settings, board, pipeline, pacing, reporter, gate,
                 listing_filter: Optional[ListingFilter] = None):
        self.session = session
        self.settings = settings
        self.board = board
        self.pipeline = pipeline
        self.pacing = pacing
        self.reporter = reporter
        self.gate = gate
        self.listing_filter = listing_filter or ListingFilter.from_settings(settings)

    def _should_exit(self) -> bool:
        return self.gate.stopped or self.session.limit_reached

    def _status(self, message: str):
        self.reporter.status_update(message, counters=self.session.counters())

    async def run(self, page) -> None:
        """Run every search title to exhaustion, the job limit, or a stop."""
        logger.info(
            f"Session [{self.session.owner_id}] searching {len(self.settings.job_titles)} titles "
            f"in {self.settings.location} (category: {self.listing_filter.category.value})"
        )
        self.reporter.status_update("Starting job search...", status=SessionState.RUNNING.value)

        for title in self.settings.job_titles:
            if self._should_exit():
                break
            if not await self.gate.checkpoint():
                break
            await self.search_title(page, title)

        if self.session.limit_reached:
            self._status(f"Reached max jobs ({self.session.max_jobs})")

    async def search_title(self, page, title: str) -> None:
        self.reporter.status_update(f"Searching: {title}")
        url = self.board.build_search_url(title, self.settings.location)
        try:
            await page.navigate(url)
        except InteractionError as e:
            logger.warning(f"Search for '{title}' failed: {e}")
            self.reporter.error(f"Search failed for '{title}': {e}")
            return
        await self.pacing.scan_delay(3000)

        page_number = 1
        while not self._should_exit():
            if not await self.gate.checkpoint():
                return
            self.reporter.status_update(f"Page {page_number} - {title}")

            try:
                listings = await self.board.collect_listings(page)
            except InteractionError as e:
                logger.warning(f"Reading results for '{title}' failed: {e}")
                self.reporter.error(f"Could not read results for '{title}': {e}")
                return
            if not listings:
                self.reporter.status_update("No more jobs found")
                return

            self.session.record_found(len(listings))
            if not await self.process_listings(page, listings):
                return

            try:
                advanced = await self.next_page(page)
            except InteractionError as e:
                logger.warning(f"Pagination for '{title}' failed: {e}")
                self.reporter.error(f"Could not open next page for '{title}': {e}")
                return
            if not advanced:
                return
            await self.pacing.scan_delay(3000)
            page_number += 1

    async def process_listings(self, page, listings: List[Listing]) -> bool:
        """Handle one results page; False when the loop should stop."""
        for listing in listings:
            if self._should_exit():
                return False
            if not await self.gate.checkpoint():
                return False
            await self.process_listing(page, listing)
        return True

    async def next_page(self, page) -> bool:
        control = await page.first_visible(self.board.next_page)
        if control is None:
            return False
        await page.click(control)
        return True

    async def process_listing(self, page, listing: Listing) -> None:
        decision = self.listing_filter.accepts(listing)
        if not decision.accepted:
            self.session.record_skipped()
            if decision.reason == TITLE_BLOCKED:
                self._status(f"Blocked title: {listing.title}")
            elif decision.reason == COMPANY_BLOCKED:
                self._status(f"Blocked company: {listing.company}")
            else:
                logger.debug(f"Skipping '{listing.title}': {decision.reason}")
            return

        if not listing.url:
            self.session.record_skipped()
            self._status(f"No link for: {listing.title}")
            return

        self.session.set_current(listing)
        self.reporter.job_found(listing.title, listing.company)
        self.reporter.status_update(f"Applying: {listing.title} at {listing.company}")

        try:
            outcome = await self.pipeline.apply(listing, page)
        except InteractionError as e:
            logger.warning(f"Application to '{listing.title}' failed: {e}")
            self.session.record_skipped()
            self.reporter.error(f"{listing.title}: {e}")
        else:
            self._record_outcome(listing, outcome)
        finally:
            self.session.set_current(None)

        await self.pacing.cooldown()

    def _record_outcome(self, listing: Listing, outcome: AttemptOutcome):
        attempt = ApplicationAttempt(listing=listing, outcome=outcome)
        log_attempt(self.session.owner_id, attempt)
        if outcome.success:
            self.session.record_applied()
            self.reporter.job_applied(attempt)
            self._status(f"✓ Applied: {listing.title}")
        else:
            self.session.record_skipped()
            self._status(f"{OUTCOME_MESSAGES.get(outcome, outcome.value)}: {listing.title}")
