"""
Form heuristics for application screening questions.

Radio groups are resolved by an ordered rule table: each rule pairs a
question predicate with an option chooser, and the first rule whose
predicate holds and whose chooser finds an option wins. Dropdowns pick the
option closest to the expected salary when the label is about pay, otherwise
the last option.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

YES_NO_PHRASES = ("do you", "have you", "can you", "did you", "were you")
EXPERIENCE_PHRASES = ("experience",)
ELIGIBILITY_PHRASES = ("eligibility", "right to work", "visa", "citizen")
CITIZEN_TERMS = ("australian", "citizen", "permanent resident", "pr")
NEGATIVE_TERMS = ("no", "none", "visa", "sponsor")

SALARY_PHRASES = ("salary", "pay", "remuneration", "expectation")

_LEADING_NUMBER = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(k)?", re.IGNORECASE)


def _mentions(text: str, phrases: Sequence[str]) -> bool:
    text = (text or "").lower()
    return any(p in text for p in phrases)


def _words(text: str) -> Tuple[str, ...]:
    return tuple(re.findall(r"[a-z0-9]+", (text or "").lower()))


def has_term(text: str, term: str) -> bool:
    # short single words ("no", "pr") must stand alone
    if " " not in term and len(term) <= 4:
        return term in _words(text)
    return term in (text or "").lower()


# ============== Radio option choosers ==============

def choose_yes(labels: Sequence[str]) -> Optional[int]:
    for i, label in enumerate(labels):
        if "yes" in _words(label):
            return i
    return None


def choose_last(labels: Sequence[str]) -> Optional[int]:
    return len(labels) - 1 if labels else None


def choose_citizen(labels: Sequence[str]) -> Optional[int]:
    for i, label in enumerate(labels):
        if any(has_term(label, term) for term in CITIZEN_TERMS):
            return i
    return None


def choose_affirmative(labels: Sequence[str]) -> Optional[int]:
    """First option that carries no negative wording."""
    for i, label in enumerate(labels):
        if not any(has_term(label, term) for term in NEGATIVE_TERMS):
            return i
    return None


@dataclass(frozen=True)
class RadioRule:
    name: str
    applies: Callable[[str], bool]
    choose: Callable[[Sequence[str]], Optional[int]]


RADIO_RULES: Tuple[RadioRule, ...] = (
    RadioRule("yes-no", lambda q: _mentions(q, YES_NO_PHRASES), choose_yes),
    RadioRule("experience", lambda q: _mentions(q, EXPERIENCE_PHRASES), choose_last),
    RadioRule("eligibility", lambda q: _mentions(q, ELIGIBILITY_PHRASES), choose_citizen),
    RadioRule("default", lambda q: True, choose_affirmative),
)


def resolve_radio_group(question: str, labels: Sequence[str]) -> Optional[int]:
    """
    Index of the option to select for a radio group, or None.

    Args:
        question: Group question (fieldset legend)
        labels: Visible option labels, in page order
    """
    if not labels:
        return None
    for rule in RADIO_RULES:
        if rule.applies(question or ""):
            choice = rule.choose(labels)
            if choice is not None:
                return choice
    return None


# ============== Dropdowns ==============

def parse_salary(text: str) -> Optional[int]:
    """
    Leading number of an option, in dollars.

    "100k-110k" -> 100000, "$95,000+" -> 95000, "120" -> 120000.
    """
    match = _LEADING_NUMBER.search(text or "")
    if not match:
        return None
    value = float(match.group(1).replace(",", ""))
    if match.group(2) or value < 1000:
        value *= 1000
    return int(value)


def is_salary_question(label: str) -> bool:
    return _mentions(label, SALARY_PHRASES)


def resolve_dropdown(label: str, options: Sequence[str], target_salary: int) -> Optional[int]:
    """
    Index of the option to select in a dropdown, or None when there is
    nothing to choose (fewer than two options).
    """
    if len(options) < 2:
        return None

    if is_salary_question(label):
        best_index, best_distance = None, None
        for i, option in enumerate(options):
            value = parse_salary(option)
            if value is None:
                continue
            distance = abs(value - target_salary)
            if best_distance is None or distance < best_distance:
                best_index, best_distance = i, distance
        if best_index is not None:
            return best_index

    return len(options) - 1
