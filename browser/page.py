"""
Page interaction capability.

The engine talks to the browser only through PageInteraction, using
Descriptors built from attribute and text predicates. PlaywrightPage is the
production implementation; tests use an in-memory fake.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from playwright.async_api import Error as PlaywrightError

from core.errors import InteractionError

logger = logging.getLogger(__name__)


# ============== Descriptors ==============

def _escape(value: str) -> str:
    return value.replace('"', '\\"')


@dataclass(frozen=True)
class AttributePredicate:
    """Attribute contains (or equals) a value, case-insensitive."""
    name: str
    value: str
    exact: bool = False

    def matches(self, attrs: Mapping[str, str]) -> bool:
        actual = (attrs.get(self.name) or "").lower()
        expected = self.value.lower()
        return actual == expected if self.exact else expected in actual


@dataclass(frozen=True)
class Descriptor:
    """
    Element descriptor: tag name, attribute predicates (all must hold) and
    text alternatives (any may appear in the element's text).
    """
    tag: str = "*"
    attributes: Tuple[AttributePredicate, ...] = ()
    text: Tuple[str, ...] = ()

    @classmethod
    def of(cls, tag: str = "*", *text: str, exact: Mapping[str, str] = None,
           contains: Mapping[str, str] = None) -> "Descriptor":
        preds = [AttributePredicate(k, v, exact=True) for k, v in (exact or {}).items()]
        preds += [AttributePredicate(k, v) for k, v in (contains or {}).items()]
        return cls(tag=tag, attributes=tuple(preds), text=tuple(text))

    def matches(self, tag: str, attrs: Mapping[str, str], text: str = "") -> bool:
        if self.tag != "*" and self.tag.lower() != (tag or "").lower():
            return False
        if not all(p.matches(attrs) for p in self.attributes):
            return False
        if self.text:
            haystack = (text or "").lower()
            return any(t.lower() in haystack for t in self.text)
        return True

    def to_selector(self) -> str:
        """Render as a Playwright CSS selector."""
        base = "" if self.tag == "*" and self.attributes else self.tag
        for p in self.attributes:
            value = _escape(p.value)
            base += f'[{p.name}="{value}" i]' if p.exact else f'[{p.name}*="{value}" i]'
        if not self.text:
            return base
        return ", ".join(f'{base}:has-text("{_escape(t)}")' for t in self.text)


TEXTAREA = Descriptor.of("textarea")
SELECT = Descriptor.of("select")
LABEL = Descriptor.of("label")
RADIO = Descriptor.of("input", exact={"type": "radio"})


# ============== Capability ==============

class PageInteraction(ABC):
    """Everything the engine needs from one browsing context."""

    @abstractmethod
    async def navigate(self, url: str) -> None: ...

    @abstractmethod
    async def query(self, descriptor: Descriptor) -> List[Any]: ...

    @abstractmethod
    async def query_within(self, element: Any, descriptor: Descriptor) -> List[Any]: ...

    @abstractmethod
    async def read_text(self, element: Any) -> str: ...

    @abstractmethod
    async def attribute(self, element: Any, name: str) -> str: ...

    @abstractmethod
    async def input_value(self, element: Any) -> str: ...

    @abstractmethod
    async def set_value(self, element: Any, text: str) -> None: ...

    @abstractmethod
    async def click(self, element: Any) -> None: ...

    @abstractmethod
    async def is_visible(self, element: Any) -> bool: ...

    @abstractmethod
    async def element_height(self, element: Any) -> float: ...

    @abstractmethod
    async def label_text(self, element: Any) -> str:
        """Text of the label belonging to a form field."""

    @abstractmethod
    async def group_question(self, element: Any) -> str:
        """Question text (fieldset legend) around a radio button."""

    @abstractmethod
    async def option_label(self, element: Any) -> str:
        """Visible label of a single radio option."""

    @abstractmethod
    async def option_texts(self, element: Any) -> List[str]:
        """Texts of a dropdown's options, in order."""

    @abstractmethod
    async def select_option(self, element: Any, index: int) -> None: ...

    @abstractmethod
    async def scroll_by(self, pixels: int) -> None: ...

    @abstractmethod
    async def open_isolated_context(self) -> "PageInteraction":
        """Open a secondary context for a single application attempt."""

    @abstractmethod
    async def close(self) -> None: ...

    async def first_visible(self, descriptors) -> Optional[Any]:
        """First visible element matching any descriptor, in order."""
        for descriptor in descriptors:
            for element in await self.query(descriptor):
                if await self.is_visible(element):
                    return element
        return None


# ============== Playwright ==============

_LABEL_JS = """el => {
    if (el.id) {
        const byFor = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
        if (byFor) return byFor.textContent.trim();
    }
    const label = el.closest('div')?.querySelector('label');
    return label ? label.textContent.trim() : '';
}"""

_LEGEND_JS = """el => {
    const legend = el.closest('fieldset')?.querySelector('legend');
    return legend ? legend.textContent.trim() : '';
}"""

_OPTION_LABEL_JS = """el => {
    if (el.id) {
        const byFor = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
        if (byFor) return byFor.textContent.trim();
    }
    const wrapping = el.closest('label');
    if (wrapping) return wrapping.textContent.trim();
    const next = el.nextElementSibling;
    return next ? next.textContent.trim() : '';
}"""


class PlaywrightPage(PageInteraction):
    """PageInteraction over a Playwright async Page."""

    def __init__(self, page, navigation_timeout_ms: int = 30000, on_close=None):
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms
        self._on_close = on_close

    @asynccontextmanager
    async def _interaction(self, action: str):
        try:
            yield
        except PlaywrightError as e:
            raise InteractionError(action, str(e).split("\n")[0]) from e

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str) -> None:
        async with self._interaction(f"navigate {url}"):
            await self.page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)

    async def query(self, descriptor: Descriptor) -> List[Any]:
        async with self._interaction("query"):
            return await self.page.query_selector_all(descriptor.to_selector())

    async def query_within(self, element, descriptor: Descriptor) -> List[Any]:
        async with self._interaction("query"):
            return await element.query_selector_all(descriptor.to_selector())

    async def read_text(self, element) -> str:
        async with self._interaction("read text"):
            return ((await element.text_content()) or "").strip()

    async def attribute(self, element, name: str) -> str:
        async with self._interaction(f"read attribute {name}"):
            return (await element.get_attribute(name)) or ""

    async def input_value(self, element) -> str:
        async with self._interaction("read value"):
            return await element.input_value()

    async def set_value(self, element, text: str) -> None:
        async with self._interaction("type"):
            await element.scroll_into_view_if_needed()
            await element.click(click_count=3)
            await element.fill(text)

    async def click(self, element) -> None:
        async with self._interaction("click"):
            await element.scroll_into_view_if_needed()
            await element.click()

    async def is_visible(self, element) -> bool:
        async with self._interaction("visibility check"):
            return await element.is_visible()

    async def element_height(self, element) -> float:
        async with self._interaction("measure"):
            return float(await element.evaluate("el => el.offsetHeight"))

    async def label_text(self, element) -> str:
        async with self._interaction("read label"):
            return await element.evaluate(_LABEL_JS)

    async def group_question(self, element) -> str:
        async with self._interaction("read question"):
            return await element.evaluate(_LEGEND_JS)

    async def option_label(self, element) -> str:
        async with self._interaction("read option"):
            return await element.evaluate(_OPTION_LABEL_JS)

    async def option_texts(self, element) -> List[str]:
        async with self._interaction("read options"):
            return await element.evaluate(
                "el => Array.from(el.options).map(o => (o.textContent || '').trim())"
            )

    async def select_option(self, element, index: int) -> None:
        async with self._interaction("select option"):
            await element.scroll_into_view_if_needed()
            await element.select_option(index=index)

    async def scroll_by(self, pixels: int) -> None:
        async with self._interaction("scroll"):
            await self.page.evaluate(f"window.scrollBy(0, {int(pixels)})")

    async def open_isolated_context(self) -> "PlaywrightPage":
        async with self._interaction("open tab"):
            new_page = await self.page.context.new_page()
        return PlaywrightPage(new_page, navigation_timeout_ms=self.navigation_timeout_ms)

    async def close(self) -> None:
        try:
            await self.page.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing page: {e}")
        if self._on_close:
            await self._on_close()
