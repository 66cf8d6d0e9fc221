"""
Pytest fixtures and configuration for the ApplyMate test suite.
"""

import pytest
import asyncio
from pathlib import Path
from typing import Callable, Dict, List, Optional
from unittest.mock import AsyncMock

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from adapters.seek import SeekBoard
from browser.page import Descriptor, PageInteraction
from core.errors import InteractionError
from core.models import AttemptOutcome
from core.settings import BotSettings, CandidateProfile
from monitoring.progress import EventKind, ProgressReporter


# === Fake browser ===

class FakeElement:
    """In-memory stand-in for a DOM element."""

    def __init__(self, tag: str, text: str = "", attrs: Optional[Dict[str, str]] = None,
                 children=(), visible: bool = True, height: float = 40, value: str = "",
                 label: str = "", question: str = "", option_label: str = "",
                 options=(), on_click: Optional[Callable] = None, fails=()):
        self.tag = tag
        self.text = text
        self.attrs = dict(attrs or {})
        self.children = list(children)
        self.visible = visible
        self.height = height
        self.value = value
        self.label = label
        self.question = question
        self.option_label = option_label
        self.options = list(options)
        self.on_click = on_click
        self.fails = set(fails)
        self.selected_index: Optional[int] = None

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()

    def __repr__(self):
        return f"<FakeElement {self.tag} {self.attrs} {self.text[:20]!r}>"


class FakePage(PageInteraction):
    """
    PageInteraction over FakeElements.

    routes maps a URL to the elements shown after navigating there (a list
    or a zero-argument callable). Clicking an element runs its on_click with
    the page, which can show() a new set of elements.
    """

    def __init__(self, routes: Optional[Dict[str, object]] = None, elements=(), fail_urls=()):
        self.routes = routes if routes is not None else {}
        self.elements: List[FakeElement] = list(elements)
        self.fail_urls = set(fail_urls)
        self.url = ""
        self.visited: List[str] = []
        self.clicked: List[FakeElement] = []
        self.typed: List[tuple] = []
        self.scrolled: List[int] = []
        self.opened: List["FakePage"] = []
        self.closed = False

    def show(self, elements):
        self.elements = list(elements)

    def _check(self, element: FakeElement, action: str):
        if action in element.fails:
            raise InteractionError(action, f"{element!r} refused")

    def _all(self):
        for element in self.elements:
            yield from element.walk()

    async def navigate(self, url: str) -> None:
        if url in self.fail_urls:
            raise InteractionError(f"navigate {url}", "net::ERR_CONNECTION_RESET")
        self.url = url
        self.visited.append(url)
        route = self.routes.get(url, [])
        self.show(route() if callable(route) else route)

    async def query(self, descriptor: Descriptor):
        return [e for e in self._all() if descriptor.matches(e.tag, e.attrs, e.text)]

    async def query_within(self, element, descriptor: Descriptor):
        return [e for child in element.children for e in child.walk()
                if descriptor.matches(e.tag, e.attrs, e.text)]

    async def read_text(self, element) -> str:
        self._check(element, "read")
        return element.text.strip()

    async def attribute(self, element, name: str) -> str:
        return element.attrs.get(name, "")

    async def input_value(self, element) -> str:
        return element.value

    async def set_value(self, element, text: str) -> None:
        self._check(element, "type")
        element.value = text
        self.typed.append((element, text))

    async def click(self, element) -> None:
        self._check(element, "click")
        self.clicked.append(element)
        if element.on_click:
            element.on_click(self)

    async def is_visible(self, element) -> bool:
        return element.visible

    async def element_height(self, element) -> float:
        return element.height

    async def label_text(self, element) -> str:
        return element.label

    async def group_question(self, element) -> str:
        return element.question

    async def option_label(self, element) -> str:
        return element.option_label

    async def option_texts(self, element):
        return list(element.options)

    async def select_option(self, element, index: int) -> None:
        self._check(element, "select")
        element.selected_index = index

    async def scroll_by(self, pixels: int) -> None:
        self.scrolled.append(pixels)

    async def open_isolated_context(self) -> "FakePage":
        child = FakePage(routes=self.routes, fail_urls=self.fail_urls)
        self.opened.append(child)
        return child

    async def close(self) -> None:
        self.closed = True


# === Page builders ===

def job_card(title: str, company: str, href: str = None) -> FakeElement:
    """A SEEK result card."""
    if href is None:
        href = "/job/" + title.lower().replace(" ", "-")
    link_attrs = {"data-automation": "jobTitle"}
    if href:
        link_attrs["href"] = href
    return FakeElement("article", children=[
        FakeElement("a", title, attrs=link_attrs),
        FakeElement("span", company, attrs={"data-automation": "jobCompany"}),
    ])


def next_link(target: List[FakeElement]) -> FakeElement:
    return FakeElement("a", "Next", attrs={"aria-label": "Next"},
                       on_click=lambda page: page.show(target))


def button(text: str, on_click: Callable = None, **kwargs) -> FakeElement:
    return FakeElement("button", text, on_click=on_click, **kwargs)


def search_url(title: str, location: str = "Brisbane, Australia") -> str:
    return SeekBoard().build_search_url(title, location)


def events_of(reporter: ProgressReporter, kind: EventKind):
    return [e for e in reporter.history if e.kind == kind]


def messages(reporter: ProgressReporter, kind: EventKind = EventKind.STATUS) -> List[str]:
    return [e.payload.get("message", "") for e in events_of(reporter, kind)]


class FakePipeline:
    """Pipeline double returning scripted outcomes."""

    def __init__(self, outcomes=None, default=AttemptOutcome.SUBMITTED, side_effect=None):
        self.outcomes = list(outcomes or [])
        self.default = default
        self.side_effect = side_effect
        self.calls = []

    async def apply(self, listing, page):
        self.calls.append(listing)
        if self.side_effect:
            result = self.side_effect(listing)
            if asyncio.iscoroutine(result):
                result = await result
            if isinstance(result, AttemptOutcome):
                return result
        return self.outcomes.pop(0) if self.outcomes else self.default


class FakeBrowserManager:
    def __init__(self, page: FakePage = None, fail: Exception = None):
        self.page = page or FakePage()
        self.fail = fail
        self.acquired: List[str] = []
        self.released: List[FakePage] = []

    async def acquire(self, owner_id: str):
        self.acquired.append(owner_id)
        if self.fail:
            raise self.fail
        return self.page

    async def release(self, page):
        self.released.append(page)
        await page.close()

    async def close_all(self):
        pass


async def yield_to_loop(times: int = 50):
    for _ in range(times):
        await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0)


# === Test Data Fixtures ===

@pytest.fixture
def profile():
    return CandidateProfile(
        full_name="Jane Citizen",
        location="Brisbane, Australia",
        background_bio="Delivery lead with ten years running infrastructure programs.",
    )


@pytest.fixture
def settings(profile):
    """Fast settings: full speed, no cooldown."""
    return BotSettings(
        profile=profile,
        job_titles=["project manager"],
        scan_speed=100,
        apply_speed=100,
        cooldown_delay=0,
        openai_api_key="sk-test",
    )


@pytest.fixture
def no_sleep():
    """Sleep double that records requested durations without waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def reporter():
    return ProgressReporter("owner-1")


@pytest.fixture
def board():
    return SeekBoard()


@pytest.fixture
def mock_generator():
    """Mock content generator for testing."""
    mock = AsyncMock()
    mock.generate_cover_letter.return_value = "Dear Acme Hiring Team,\n\nLetter body.\n\nJane Citizen"
    mock.generate_selection_criteria.return_value = "I meet each criterion as follows."
    mock.answer_question.return_value = "I have led similar programs for ten years."
    mock.choose_option.return_value = ""
    return mock


# === Test Environment Setup ===

@pytest.fixture(autouse=True)
def setup_test_env(tmp_path, monkeypatch):
    """Keep log files out of the working tree."""
    monkeypatch.setenv("TESTING", "true")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    yield


# === Markers ===

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: Tests that exercise a whole session")
