"""
SEEK (seek.com.au) job board adapter.
"""

from urllib.parse import quote

from adapters.base import JobBoard
from browser.page import Descriptor


def _button(*text: str) -> Descriptor:
    return Descriptor.of("button", *text)


class SeekBoard(JobBoard):
    """SEEK results, listing and quick-apply pages."""

    name = "seek"
    base_url = "https://www.seek.com.au"

    result_card = Descriptor.of("article")
    card_title = Descriptor.of("*", exact={"data-automation": "jobTitle"})
    card_company = Descriptor.of("*", exact={"data-automation": "jobCompany"})
    card_link = Descriptor.of("a", exact={"data-automation": "jobTitle"})
    next_page = (
        Descriptor.of("a", exact={"aria-label": "Next"}),
        Descriptor.of("a", "Next"),
    )

    job_description = (
        Descriptor.of("*", exact={"data-automation": "jobDescription"}),
        Descriptor.of("div", contains={"data-automation": "jobAdDetails"}),
        Descriptor.of("div", contains={"data-automation": "job"}),
    )
    external_apply = (
        _button("company site", "Apply on company"),
        Descriptor.of("a", "Apply on company"),
    )
    apply_triggers = (
        _button("Quick apply"),
        Descriptor.of("*", exact={"data-automation": "quickApplyButton"}),
        _button("Apply now"),
        _button("Apply"),
        Descriptor.of("a", "Quick apply"),
        Descriptor.of("a", "Apply now"),
    )
    continue_control = (_button("Continue", "Next"),)
    submit_control = (_button("Submit application"),)
    document_option_phrases = (
        "select a resum",
        "select a résumé",
        "write a cover letter",
        "write a statement",
    )

    cover_letter_field = (
        Descriptor.of("textarea", contains={"name": "cover"}),
        Descriptor.of("textarea", contains={"id": "cover"}),
    )
    selection_criteria_field = (
        Descriptor.of("textarea", contains={"placeholder": "selection"}),
        Descriptor.of("textarea", contains={"placeholder": "criteria"}),
        Descriptor.of("textarea", contains={"placeholder": "statement"}),
        Descriptor.of("textarea", contains={"name": "statement"}),
        Descriptor.of("textarea", contains={"aria-label": "selection"}),
        Descriptor.of("textarea", contains={"aria-label": "criteria"}),
    )

    def build_search_url(self, title: str, location: str) -> str:
        where = (location or "").replace(", Australia", "").strip()
        return (
            f"{self.base_url}/jobs?keywords={quote(title, safe='')}"
            f"&where={quote(where, safe='')}&sortmode=ListedDate"
        )
