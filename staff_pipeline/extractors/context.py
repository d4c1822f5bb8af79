"""Resolve sport, title and contact details from the text around a name."""

import re
from dataclasses import dataclass
from typing import Optional

from staff_pipeline.extractors.vocabulary import (
    DEFAULT_SPORT,
    DEFAULT_TITLE,
    SPORT_PATTERNS,
    TITLE_PATTERNS,
)
from staff_pipeline.models import StaffTitle

# Title and sport usually sit right next to the name; contact details drift further
TITLE_WINDOW = 150
CONTACT_WINDOW = 250

EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,})")
PHONE_PATTERNS = [
    re.compile(r"(\(\d{3}\)\s*\d{3}[-.\s]\d{4})"),  # (205) 348-3600
    re.compile(r"(?<!\d)(\d{3}[-.]\d{3}[-.]\d{4})(?!\d)"),  # 205-348-3600, 205.348.3600
    re.compile(r"(?<!\d)(\d{3}\s\d{3}\s\d{4})(?!\d)"),  # 205 348 3600
]


@dataclass
class StaffContext:
    """Everything the surrounding text says about one person."""

    sport: str = DEFAULT_SPORT
    title: StaffTitle = DEFAULT_TITLE
    email: Optional[str] = None
    phone: Optional[str] = None


def find_name(name: str, content: str) -> int:
    """Index of the first case-insensitive occurrence of `name`, or -1."""
    return content.lower().find(name.lower())


def context_window(name: str, content: str, radius: int) -> Optional[tuple[str, int]]:
    """Text within `radius` chars either side of the name, plus the name's offset in it."""
    index = find_name(name, content)
    if index == -1:
        return None
    start = max(0, index - radius)
    end = min(len(content), index + len(name) + radius)
    return content[start:end], index - start


def classify_sport(text: str) -> Optional[str]:
    for sport, pattern in SPORT_PATTERNS:
        if pattern.search(text):
            return sport
    return None


def classify_title(text: str) -> Optional[StaffTitle]:
    for pattern, title in TITLE_PATTERNS:
        if pattern.search(text):
            return title
    return None


def extract_sport_and_title(name: str, content: str) -> tuple[str, StaffTitle]:
    """Sport and normalized title near the first mention of `name`.

    Falls back to General Athletics / Assistant Coach.
    """
    found = context_window(name, content, TITLE_WINDOW)
    if found is None:
        return DEFAULT_SPORT, DEFAULT_TITLE
    window, _ = found
    return classify_sport(window) or DEFAULT_SPORT, classify_title(window) or DEFAULT_TITLE


def _first_phone(text: str) -> Optional[str]:
    for pattern in PHONE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_contact_info(name: str, content: str) -> tuple[Optional[str], Optional[str]]:
    """(email, phone) near the first mention of `name`.

    Text from the name onwards is searched before the text preceding it, so a
    list entry does not pick up the previous person's details.
    """
    found = context_window(name, content, CONTACT_WINDOW)
    if found is None:
        return None, None
    window, offset = found
    after, whole = window[offset:], window

    email_match = EMAIL_PATTERN.search(after) or EMAIL_PATTERN.search(whole)
    email = email_match.group(1) if email_match else None
    phone = _first_phone(after) or _first_phone(whole)
    return email, phone


def extract_context(name: str, content: str) -> StaffContext:
    sport, title = extract_sport_and_title(name, content)
    email, phone = extract_contact_info(name, content)
    return StaffContext(sport=sport, title=title, email=email, phone=phone)
