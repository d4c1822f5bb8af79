"""Content patterns: each one finds candidate names in a single page layout.

Patterns only locate spans. Validation, context checks and classification
happen in the engine, so a pattern may be generous.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup

from staff_pipeline.extractors.markup import (
    extract_json_ld,
    image_url,
    iter_people,
    iter_staff_cards,
    looks_like_html,
)
from staff_pipeline.models import Candidate, RawContent

# Capitalized parts joined by spaces or tabs; names and titles never cross a line break
NAME_PART = r"[A-ZÀ-Þ][\w'\-]*\.?"
NAME = NAME_PART + r"(?:[ \t]+" + NAME_PART + r"){1,3}"

TITLE_RANK = (
    r"(?:Interim[ \t]+)?"
    r"(?:Associate[ \t]+Head|Assistant[ \t]+Head|Graduate[ \t]+Assistant|Head|Assistant|Associate|Volunteer)"
)
TITLE_PHRASE = (
    r"(?i:" + TITLE_RANK + r"(?:[ \t]+[\w&'.\-]+){0,3}?[ \t]+Coach(?:es)?\b"
    r"|Recruiting[ \t]+Coordinator"
    r"|Director[ \t]+of[ \t]+Athletics"
    r"|Athletics?[ \t]+Director"
    r"|Strength[ \t]+(?:and|&)[ \t]+Conditioning(?:[ \t]+Coach)?)"
)

# Longest line the line-list layout treats as a title
MAX_FRAGMENT_LINE = 80


class ContentPattern:
    """A named way of finding names (and title fragments) in page content."""

    name = "pattern"

    def match(self, content: RawContent) -> list[Candidate]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class RegexPattern(ContentPattern):
    """Pattern backed by one regex over the page text."""

    regex: re.Pattern

    def fragment(self, match: re.Match, text: str) -> Optional[str]:
        return match.group(2).strip() if match.lastindex and match.lastindex >= 2 else None

    def match(self, content: RawContent) -> list[Candidate]:
        candidates = []
        for m in self.regex.finditer(content.text):
            candidates.append(Candidate(
                name=m.group(1).strip(),
                title_fragment=self.fragment(m, content.text) or None,
                pattern=self.name,
            ))
        return candidates


class MarkdownTableLinkPattern(RegexPattern):
    """| [Jane Doe](/staff/jane-doe) | Head Basketball Coach |"""

    name = "markdown_table_link"
    regex = re.compile(
        r"\|[ \t]*\[(" + NAME + r")\]\([^)]*\)[ \t]*\|[ \t]*"
        r"([^|\n]*?(?i:coach|coordinator|director|staff)[^|\n]*)"
    )


class MarkdownTablePattern(RegexPattern):
    """| Jane Doe | Head Basketball Coach |"""

    name = "markdown_table"
    regex = re.compile(
        r"\|[ \t]*(" + NAME + r")[ \t]*\|[ \t]*"
        r"([^|\n]*?(?i:coach|coordinator|assistant|head|director)[^|\n]*)"
    )


class StructuredMarkupPattern(ContentPattern):
    """JSON-LD Person objects and staff-card markup in rendered HTML."""

    name = "structured_markup"

    def match(self, content: RawContent) -> list[Candidate]:
        html = content.html
        if html is None and looks_like_html(content.text):
            html = content.text
        if not html:
            return []

        soup = BeautifulSoup(html, "lxml")
        candidates = []

        for block in extract_json_ld(soup):
            for person in iter_people(block):
                job_title = person.get("jobTitle")
                if isinstance(job_title, list):
                    job_title = ", ".join(str(t) for t in job_title)
                candidates.append(Candidate(
                    name=str(person["name"]).strip(),
                    title_fragment=job_title or None,
                    pattern=self.name,
                    email=(person.get("email") or "").replace("mailto:", "") or None,
                    phone=person.get("telephone") or None,
                    bio=person.get("description") or None,
                    photo_url=image_url(person.get("image")),
                ))

        for card in iter_staff_cards(soup):
            candidates.append(Candidate(
                name=card["name"],
                title_fragment=card["title"] or None,
                pattern=self.name,
                email=card.get("email"),
                phone=card.get("phone"),
                bio=card.get("bio"),
                photo_url=card.get("photo_url"),
            ))

        return candidates


class TitleThenNamePattern(RegexPattern):
    """Head Coach: Jane Doe"""

    name = "title_then_name"
    regex = re.compile(r"(" + TITLE_PHRASE + r")[ \t]*[:\-–—]?[ \t]*(" + NAME + r")")

    def match(self, content: RawContent) -> list[Candidate]:
        return [
            Candidate(name=m.group(2).strip(), title_fragment=m.group(1).strip(), pattern=self.name)
            for m in self.regex.finditer(content.text)
        ]


class NameThenTitlePattern(RegexPattern):
    """Jane Doe - Head Coach / Jane Doe, Assistant Football Coach"""

    name = "name_then_title"
    regex = re.compile(
        r"(" + NAME + r")[ \t]*(?:[-–—,|:]+[ \t]*)?(" + TITLE_PHRASE + r")"
    )


class LineListPattern(RegexPattern):
    """One name per line, title on the line(s) below."""

    name = "line_list"
    regex = re.compile(r"^[ \t]*(" + NAME + r")[ \t]*$", re.M)

    def fragment(self, match: re.Match, text: str) -> Optional[str]:
        following = text[match.end():match.end() + 2 * MAX_FRAGMENT_LINE + 20]
        lines = [line.strip() for line in following.splitlines() if line.strip()]
        lines = [line for line in lines[:2] if len(line) <= MAX_FRAGMENT_LINE]
        return " ".join(lines) or None


DEFAULT_PATTERNS: list[ContentPattern] = [
    MarkdownTableLinkPattern(),
    MarkdownTablePattern(),
    StructuredMarkupPattern(),
    TitleThenNamePattern(),
    NameThenTitlePattern(),
    LineListPattern(),
]
