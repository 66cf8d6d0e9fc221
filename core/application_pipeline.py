#!/usr/bin/env python3
"""
Application Pipeline

Pushes one accepted listing through the board's apply flow in an isolated
browsing context:

    listing page -> apply trigger -> stage 1 (documents, cover letter,
    selection criteria, short answers) -> continue -> follow-up stages
    (short answers, radio groups, dropdowns) -> submit

Each form stage is best-effort: an InteractionError inside it is reported
and the stage is skipped. Only missing controls (apply, continue, submit)
or an external redirect decide a non-submitted outcome.
"""

import logging
from collections import OrderedDict
from typing import Any, Callable, List, Optional

from ai.content_generator import JobRole
from browser.page import LABEL, RADIO, SELECT, TEXTAREA, PageInteraction
from core.config import get_config
from core.errors import InteractionError
from core.form_rules import resolve_dropdown, resolve_radio_group
from core.models import AttemptOutcome, Listing

logger = logging.getLogger(__name__)

COVER_FIELD_MARKER = "cover"
COVER_FIELD_ATTRIBUTES = ("name", "id", "placeholder", "aria-label")

MIN_QUESTION_CHARS = 5
MAX_PREFILLED_CHARS = 10


class ApplicationPipeline:
    """
    Apply flow for one session.

    Args:
        board: JobBoard adapter with the page descriptors
        generator: ContentGenerator (or anything with the same async methods)
        pacing: PacingController for the session
        reporter: ProgressReporter for the session
        settings: BotSettings (profile and expected salary)
        essay_height_px: Textareas taller than this are not short answers
        max_followup_pages: Upper bound on stages after the first
    """

    def __init__(self, board, generator, pacing, reporter, settings,
                 essay_height_px: Optional[int] = None,
                 max_followup_pages: Optional[int] = None):
        cfg = get_config()
        self.board = board
        self.generator = generator
        self.pacing = pacing
        self.reporter = reporter
        self.settings = settings
        self.essay_height_px = essay_height_px if essay_height_px is not None else cfg.ESSAY_FIELD_HEIGHT_PX
        self.max_followup_pages = max_followup_pages if max_followup_pages is not None else cfg.MAX_FOLLOWUP_PAGES

    @property
    def profile(self):
        return self.settings.profile

    async def apply(self, listing: Listing, main_page: PageInteraction) -> AttemptOutcome:
        """
        Run the apply flow for a listing.

        The isolated context is always closed before returning. Failures to
        open it or to load the listing raise InteractionError.
        """
        page = await main_page.open_isolated_context()
        try:
            return await self._run(listing, page)
        finally:
            try:
                await page.close()
            except InteractionError as e:
                logger.warning(f"Could not close application context: {e}")

    async def _run(self, listing: Listing, page: PageInteraction) -> AttemptOutcome:
        role = JobRole(title=listing.title, company=listing.company)

        await page.navigate(listing.url)
        await self.pacing.scan_delay(2000)
        await self.pacing.stealth_scroll(page)
        await self.pacing.stealth_pause()

        description = await self._stage("job description", self.board.read_description, page) or ""

        if await page.first_visible(self.board.external_apply):
            self.reporter.status_update(f"Skipping external: {listing.title}")
            return AttemptOutcome.FAILED_EXTERNAL

        await self._stage("scroll", page.scroll_by, 300)
        await self.pacing.scan_delay(1000)
        await self.pacing.stealth_reading_delay()

        trigger = await page.first_visible(self.board.apply_triggers)
        if trigger is None:
            self.reporter.status_update(f"No apply button: {listing.title}")
            return AttemptOutcome.FAILED_NO_BUTTON
        await self.pacing.stealth_pause()
        await page.click(trigger)
        await self.pacing.apply_delay(3000)
        await self.pacing.stealth_pause()

        # Stage 1: documents and generated content
        await self._stage("document selection", self.select_document_options, page)
        await self._stage("cover letter", self.fill_cover_letter, page, role, description)
        await self._stage("selection criteria", self.fill_selection_criteria, page, role, description)
        await self._stage("screening questions", self.answer_short_questions, page, role)

        if not await self._click_control(page, self.board.continue_control, "continue"):
            self.reporter.status_update(f"Cannot continue: {listing.title}")
            return AttemptOutcome.FAILED_CANNOT_CONTINUE
        await self.pacing.apply_delay(3000)

        # Stages 2..N
        for _ in range(self.max_followup_pages):
            await self._stage("screening questions", self.answer_short_questions, page, role)
            await self._stage("radio buttons", self.answer_radio_groups, page)
            await self._stage("dropdowns", self.answer_dropdowns, page)
            if not await self._click_control(page, self.board.continue_control, "continue"):
                break
            await self.pacing.apply_delay(2000)

        if await self._click_control(page, self.board.submit_control, "submit"):
            await self.pacing.apply_delay(2000)
            return AttemptOutcome.SUBMITTED
        self.reporter.status_update(f"No submit button: {listing.title}")
        return AttemptOutcome.FAILED_NO_SUBMIT

    async def _stage(self, name: str, fn: Callable, *args) -> Any:
        try:
            return await fn(*args)
        except InteractionError as e:
            logger.warning(f"{name} stage skipped: {e}")
            self.reporter.error(f"{name.capitalize()} error: {e}")
            return None

    async def _click_control(self, page: PageInteraction, descriptors, name: str) -> bool:
        try:
            control = await page.first_visible(descriptors)
            if control is None:
                return False
            await page.click(control)
            return True
        except InteractionError as e:
            logger.warning(f"Could not click {name}: {e}")
            self.reporter.error(f"Could not click {name}: {e}")
            return False

    async def _is_cover_field(self, page: PageInteraction, element) -> bool:
        for name in COVER_FIELD_ATTRIBUTES:
            if COVER_FIELD_MARKER in (await page.attribute(element, name)).lower():
                return True
        return False

    # ============== Stage 1 ==============

    async def select_document_options(self, page: PageInteraction) -> int:
        """Click the saved-resume / write-cover-letter / write-statement options."""
        clicked = 0
        phrases = [p.lower() for p in self.board.document_option_phrases]
        for label in await page.query(LABEL):
            text = (await page.read_text(label)).lower()
            if any(phrase in text for phrase in phrases):
                await page.click(label)
                await self.pacing.apply_delay(500)
                clicked += 1
        return clicked

    async def fill_cover_letter(self, page: PageInteraction, role: JobRole, description: str) -> bool:
        field = await page.first_visible(self.board.cover_letter_field)
        if field is None:
            return False
        letter = await self.generator.generate_cover_letter(self.profile, role, description)
        if not letter:
            logger.info(f"No cover letter generated for {role.title}")
            self.reporter.status_update("Cover letter skipped: nothing generated")
            return False
        await self.pacing.apply_delay(500)
        await page.set_value(field, letter)
        self.reporter.status_update("Cover letter added")
        return True

    async def fill_selection_criteria(self, page: PageInteraction, role: JobRole, description: str) -> bool:
        field = None
        for descriptor in self.board.selection_criteria_field:
            for element in await page.query(descriptor):
                if await self._is_cover_field(page, element):
                    continue
                if await page.is_visible(element):
                    field = element
                    break
            if field is not None:
                break
        if field is None:
            return False

        statement = await self.generator.generate_selection_criteria(self.profile, role, description)
        if not statement:
            self.reporter.status_update("Selection criteria skipped: nothing generated")
            return False
        await self.pacing.apply_delay(500)
        await page.set_value(field, statement)
        self.reporter.status_update("Selection criteria added")
        return True

    async def answer_short_questions(self, page: PageInteraction, role: JobRole) -> int:
        """Fill short free-text questions that are still empty."""
        answered = 0
        for textarea in await page.query(TEXTAREA):
            if await self._is_cover_field(page, textarea):
                continue
            if await page.element_height(textarea) > self.essay_height_px:
                continue
            question = await page.label_text(textarea)
            if len(question) < MIN_QUESTION_CHARS:
                continue
            if len(await page.input_value(textarea)) > MAX_PREFILLED_CHARS:
                continue

            answer = await self.generator.answer_question(self.profile, role, question)
            if not answer:
                self.reporter.status_update(f"Skipped question: {question[:30]}...")
                continue
            await self.pacing.apply_delay(500)
            await page.set_value(textarea, answer)
            self.reporter.status_update(f"Answered: {question[:30]}...")
            answered += 1
        return answered

    # ============== Stages 2..N ==============

    async def answer_radio_groups(self, page: PageInteraction) -> int:
        groups: "OrderedDict[str, List[Any]]" = OrderedDict()
        for radio in await page.query(RADIO):
            name = await page.attribute(radio, "name")
            if name:
                groups.setdefault(name, []).append(radio)

        answered = 0
        for name, radios in groups.items():
            try:
                if await self._answer_radio_group(page, radios):
                    answered += 1
            except InteractionError as e:
                logger.warning(f"Radio group '{name}' skipped: {e}")
                self.reporter.error(f"Radio group '{name}' error: {e}")
        return answered

    async def _answer_radio_group(self, page: PageInteraction, radios: List[Any]) -> bool:
        question = await page.group_question(radios[0])
        labels = [await page.option_label(radio) for radio in radios]

        choice = resolve_radio_group(question, labels)
        if choice is None:
            picked = await self.generator.choose_option(question, labels, self.profile.location)
            choice = labels.index(picked) if picked in labels else None
        if choice is None:
            logger.debug(f"No option chosen for '{question}'")
            return False

        await page.click(radios[choice])
        await self.pacing.apply_delay(200)
        return True

    async def answer_dropdowns(self, page: PageInteraction) -> int:
        answered = 0
        for select in await page.query(SELECT):
            options = await page.option_texts(select)
            label = await page.label_text(select)
            choice = resolve_dropdown(label, options, self.settings.expected_salary)
            if choice is None:
                continue
            await self.pacing.apply_delay(300)
            await page.select_option(select, choice)
            await self.pacing.apply_delay(200)
            answered += 1
        return answered
