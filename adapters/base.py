"""
Base adapter interface for job boards.
All board-specific adapters inherit from this.

An adapter knows a board's URLs and the element descriptors for its pages;
the search loop and application pipeline do the driving.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from urllib.parse import urljoin

from browser.page import Descriptor, PageInteraction
from core.models import Listing


class JobBoard(ABC):
    """Descriptors and URL rules for one job board."""

    name: str = ""
    base_url: str = ""

    # Results page
    result_card: Descriptor
    card_title: Descriptor
    card_company: Descriptor
    card_link: Descriptor
    next_page: Sequence[Descriptor] = ()

    # Listing and application pages
    job_description: Sequence[Descriptor] = ()
    external_apply: Sequence[Descriptor] = ()
    apply_triggers: Sequence[Descriptor] = ()
    continue_control: Sequence[Descriptor] = ()
    submit_control: Sequence[Descriptor] = ()
    document_option_phrases: Sequence[str] = ()

    # Form fields
    cover_letter_field: Sequence[Descriptor] = ()
    selection_criteria_field: Sequence[Descriptor] = ()

    min_description_chars = 50

    @abstractmethod
    def build_search_url(self, title: str, location: str) -> str:
        """Results URL for a search title and location."""
        pass

    def absolute_url(self, href: str) -> str:
        if not href:
            return ""
        return urljoin(self.base_url, href)

    async def parse_card(self, page: PageInteraction, card) -> Optional[Listing]:
        """Listing from one result card, or None if the card has no title."""
        titles = await page.query_within(card, self.card_title)
        if not titles:
            return None
        title = await page.read_text(titles[0])
        if not title:
            return None

        companies = await page.query_within(card, self.card_company)
        company = await page.read_text(companies[0]) if companies else ""

        links = await page.query_within(card, self.card_link)
        href = await page.attribute(links[0], "href") if links else ""
        return Listing(title=title, company=company, url=self.absolute_url(href))

    async def collect_listings(self, page: PageInteraction) -> List[Listing]:
        """All listings on the current results page, in page order."""
        listings = []
        for card in await page.query(self.result_card):
            listing = await self.parse_card(page, card)
            if listing:
                listings.append(listing)
        return listings

    async def read_description(self, page: PageInteraction) -> str:
        """Text of the first description block long enough to be the posting."""
        for descriptor in self.job_description:
            for element in await page.query(descriptor):
                text = await page.read_text(element)
                if len(text) > self.min_description_chars:
                    return text
        return ""
