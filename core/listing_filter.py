"""
Listing Filter

Decides whether a discovered listing is worth applying to. A title matches
directly, by reverse word match, or through the keyword expansion of the
category the configured search titles belong to. Matched listings are then
checked against the blocked title and company lists.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from core.form_rules import has_term
from core.models import Category, FilterDecision, Listing

logger = logging.getLogger(__name__)

DIRECT_MATCH = "direct-match"
REVERSE_MATCH = "reverse-match"
CATEGORY_MATCH = "category-match"
NO_TITLE_MATCH = "no-title-match"
TITLE_BLOCKED = "title-blocked"
COMPANY_BLOCKED = "company-blocked"

BLOCK_REASONS = frozenset({TITLE_BLOCKED, COMPANY_BLOCKED})

# Ordered: the first category with any keyword in the allowed titles wins.
# Short single-word keywords ("ea", "it", "gm") only count as whole words.
CATEGORY_RULES: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.GOVERNMENT, ("el1", "el 1", "el2", "el 2", "ses", "policy", "governance",
                           "compliance", "public sector", "principal", "advisor")),
    (Category.LEADERSHIP, ("director", "program director", "operations director", "head of",
                           "general manager", "executive", "principal", "gm")),
    (Category.PROJECT, ("project manager", "program manager", "agile", "scrum master",
                        "project lead", "delivery manager")),
    (Category.SALES, ("bdm", "business development", "sales", "account manager",
                      "relationship manager", "client", "growth")),
    (Category.ADMIN, ("admin", "coordinator", "ea", "executive assistant")),
    (Category.TECH, ("it", "developer", "engineer", "software", "cyber", "cloud", "data")),
)

CATEGORY_EXPANSIONS = {
    Category.GOVERNMENT: ("el1", "el 1", "el2", "el 2", "ses", "director", "policy", "principal",
                          "executive", "governance", "advisor", "analyst", "coordinator",
                          "officer", "manager"),
    Category.LEADERSHIP: ("director", "head", "general manager", "gm", "executive", "principal",
                          "lead", "chief", "senior", "manager"),
    Category.PROJECT: ("project", "program", "delivery", "scrum", "agile", "lead", "coordinator",
                       "manager", "officer", "analyst"),
    Category.SALES: ("bdm", "business development", "sales", "account", "partnership", "growth",
                     "client", "relationship", "solutions", "commercial"),
    Category.ADMIN: ("admin", "coordinator", "ea", "executive assistant", "office",
                     "project coordinator", "officer", "support"),
    Category.TECH: ("developer", "engineer", "software", "it", "cloud", "cyber", "product",
                    "technical", "devops", "data", "analyst"),
    Category.GENERIC: (),
}


def _normalise(values: Iterable[str]) -> List[str]:
    return [v.strip().lower() for v in values if v and v.strip()]


def detect_category(titles: Iterable[str]) -> Category:
    """Classify a set of search titles into a job family."""
    lowered = _normalise(titles)
    for category, keywords in CATEGORY_RULES:
        if any(has_term(title, keyword) for title in lowered for keyword in keywords):
            return category
    return Category.GENERIC


def reverse_words(title: str) -> List[str]:
    """Words of a title longer than three characters, hyphens read as spaces."""
    return [w for w in title.replace("-", " ").split() if len(w) > 3]


class ListingFilter:
    """
    Accept/reject listings for one set of settings.

    The category of the allowed titles is computed once per filter; build a
    new filter when the titles change.
    """

    def __init__(self, job_titles: Sequence[str], blocked_titles: Sequence[str] = (),
                 blocked_companies: Sequence[str] = ()):
        self.job_titles = _normalise(job_titles)
        self.blocked_titles = _normalise(blocked_titles)
        self.blocked_companies = _normalise(blocked_companies)
        self.category = detect_category(self.job_titles)
        self.expansion = CATEGORY_EXPANSIONS[self.category]

    @classmethod
    def from_settings(cls, settings) -> "ListingFilter":
        return cls(settings.job_titles, settings.blocked_titles, settings.blocked_companies)

    def match_reason(self, title: str) -> str:
        """Which title rule (if any) lets this listing title through."""
        candidate = (title or "").strip().lower()
        if not candidate:
            return NO_TITLE_MATCH
        if any(allowed in candidate for allowed in self.job_titles):
            return DIRECT_MATCH
        words = reverse_words(candidate)
        if any(word in allowed for word in words for allowed in self.job_titles):
            return REVERSE_MATCH
        if any(keyword in candidate for keyword in self.expansion):
            return CATEGORY_MATCH
        return NO_TITLE_MATCH

    def accepts(self, listing: Listing) -> FilterDecision:
        reason = self.match_reason(listing.title)
        if reason == NO_TITLE_MATCH:
            return FilterDecision(False, NO_TITLE_MATCH)

        title = listing.title.lower()
        if any(blocked in title for blocked in self.blocked_titles):
            return FilterDecision(False, TITLE_BLOCKED)

        company = (listing.company or "").lower()
        if any(blocked in company for blocked in self.blocked_companies):
            return FilterDecision(False, COMPANY_BLOCKED)

        return FilterDecision(True, reason)


def accepts(listing: Listing, settings) -> FilterDecision:
    """One-off filter decision for a listing against run settings."""
    return ListingFilter.from_settings(settings).accepts(listing)
