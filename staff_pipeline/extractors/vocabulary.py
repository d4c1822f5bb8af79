"""Word lists and ordered classifiers used by extraction and routing.

The sets that tend to change between deployments (known-difficult programs,
name denylist) live on `Vocabulary` so they can be replaced from a JSON file.
The ordered regex tables are code: their order is part of their meaning.
"""

import json
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from staff_pipeline.models import StaffTitle

# Programs that historically block the remote extraction API
KNOWN_DIFFICULT_TARGETS = [
    "Alabama",
    "UCLA",
    "Georgia",
    "Ohio State",
    "Michigan",
    "Texas",
    "Florida",
    "Auburn",
    "LSU",
    "Tennessee",
]

# Single name parts that mean the span is not a person
NAME_DENYLIST = [
    # Roles and departments
    "head", "assistant", "associate", "coach", "coaches", "coaching", "staff",
    "department", "athletics", "athletic", "sports", "sport", "performance",
    "director", "coordinator", "volunteer", "graduate", "recruiting", "roster",
    "team", "program", "university", "college", "school", "office",
    # Sports
    "football", "basketball", "baseball", "softball", "soccer", "volleyball",
    "tennis", "golf", "swimming", "diving", "track", "field", "lacrosse",
    "wrestling", "gymnastics", "rowing", "hockey",
    # Function words
    "the", "an", "of", "for", "with", "and", "or", "but", "to", "in", "at",
    # UI chrome
    "menu", "navigation", "search", "login", "register", "subscribe", "follow",
    "loading", "skip", "main", "content", "javascript", "browser", "error",
    "please", "click", "here", "play", "video", "toggle", "media", "overlay",
    "image", "related", "download", "upcoming", "events", "available",
    "blocker", "detected", "schedule", "tickets", "news", "home", "contact",
    "email", "phone", "bio", "view", "full", "more", "read", "close", "open",
    "welcome", "meet",
    # Social networks
    "facebook", "twitter", "instagram", "youtube", "linkedin", "tiktok",
]

# Keywords that must appear near a name for it to count as coaching staff
COACHING_CONTEXT_FORWARD = [
    "Coach", "Assistant", "Head", "Associate", "Volunteer", "Graduate",
    "Coordinator", "Staff", "Athletics", "Sports",
]
COACHING_CONTEXT_REVERSE = [
    "Coach", "Assistant", "Head", "Associate", "Volunteer", "Graduate",
    "Coordinator",
]

# Non-coaching role markers; a title carrying one must also name a coach
FACULTY_MARKERS = [
    "professor", "instructor", "lecturer", "advisor", "adviser", "administrator",
    "director", "coordinator", "manager", "trainer",
]

COACHING_TERMS = [
    "coach",
    "director of strength and conditioning",
    "director of strength & conditioning",
    "recruiting coordinator",
    "offensive coordinator",
    "defensive coordinator",
    "special teams coordinator",
    "graduate assistant",
    "director of athletics",
    "athletics director",
    "athletic director",
    "strength and conditioning",
    "strength & conditioning",
]

# First match wins; more specific sports come before ones they contain
SPORT_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("Football", re.compile(r"\bfootball\b|\bgridiron\b", re.I)),
    ("Basketball", re.compile(r"\bbasketball\b|\bhoops\b", re.I)),
    ("Baseball", re.compile(r"\bbaseball\b", re.I)),
    ("Softball", re.compile(r"\bsoftball\b", re.I)),
    ("Soccer", re.compile(r"\bsoccer\b", re.I)),
    ("Volleyball", re.compile(r"\bvolleyball\b", re.I)),
    ("Tennis", re.compile(r"\btennis\b", re.I)),
    ("Golf", re.compile(r"\bgolf\b", re.I)),
    ("Water Polo", re.compile(r"\bwater\s+polo\b", re.I)),
    ("Swimming", re.compile(r"\bswimming\b|\baquatics\b|\bdiving\b", re.I)),
    ("Field Hockey", re.compile(r"\bfield\s+hockey\b", re.I)),
    ("Ice Hockey", re.compile(r"\bhockey\b", re.I)),
    ("Track and Field", re.compile(r"\btrack\b|\bcross[\s-]country\b", re.I)),
    ("Lacrosse", re.compile(r"\blacrosse\b", re.I)),
    ("Wrestling", re.compile(r"\bwrestling\b", re.I)),
    ("Gymnastics", re.compile(r"\bgymnastics\b", re.I)),
    ("Rowing", re.compile(r"\browing\b|\bcrew\b", re.I)),
]

DEFAULT_SPORT = "General Athletics"
DEFAULT_TITLE = StaffTitle.ASSISTANT_COACH

# Up to three qualifier words between a rank and "Coach" ("Head Women's Soccer Coach")
_QUALIFIERS = r"(?:[\w&'.\-]+\s+){0,3}?"

# First match wins; specific ranks before the general ones they contain
TITLE_PATTERNS: list[tuple[re.Pattern, StaffTitle]] = [
    (re.compile(r"associate\s+head\s+" + _QUALIFIERS + r"coach", re.I), StaffTitle.ASSOCIATE_HEAD_COACH),
    (re.compile(r"graduate\s+assistant", re.I), StaffTitle.GRADUATE_ASSISTANT_COACH),
    (re.compile(r"volunteer\s+" + _QUALIFIERS + r"coach", re.I), StaffTitle.VOLUNTEER_COACH),
    (re.compile(r"strength\s+(?:and|&)\s+conditioning", re.I), StaffTitle.STRENGTH_AND_CONDITIONING_COACH),
    (re.compile(r"assistant\s+head\s+" + _QUALIFIERS + r"coach", re.I), StaffTitle.ASSISTANT_COACH),
    (re.compile(r"\bhead\s+" + _QUALIFIERS + r"coach", re.I), StaffTitle.HEAD_COACH),
    (re.compile(r"endowed\b.{0,60}?\bhead\b", re.I), StaffTitle.HEAD_COACH),
    (re.compile(r"assistant\s+" + _QUALIFIERS + r"coach", re.I), StaffTitle.ASSISTANT_COACH),
    (re.compile(r"recruiting\s+coordinator", re.I), StaffTitle.RECRUITING_COORDINATOR),
    (re.compile(r"director\s+of\s+athletics|athletics?\s+director", re.I), StaffTitle.ATHLETICS_DIRECTOR),
]


class Vocabulary(BaseModel):
    """Replaceable word lists, loaded once at startup."""

    known_difficult: list[str] = Field(default_factory=lambda: list(KNOWN_DIFFICULT_TARGETS))
    name_denylist: frozenset[str] = Field(
        default_factory=lambda: frozenset(w.lower() for w in NAME_DENYLIST)
    )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Vocabulary":
        """Defaults, with any lists present in the JSON file replacing them."""
        if path is None:
            return cls()
        with open(path) as f:
            data = json.load(f)
        values = {}
        if "known_difficult" in data:
            values["known_difficult"] = list(data["known_difficult"])
        if "name_denylist" in data:
            values["name_denylist"] = frozenset(w.lower() for w in data["name_denylist"])
        return cls(**values)

    def is_known_difficult(self, target_name: str) -> bool:
        lowered = target_name.lower()
        return any(keyword.lower() in lowered for keyword in self.known_difficult)

    def is_denied(self, part: str) -> bool:
        return part.strip(".'-").lower() in self.name_denylist


DEFAULT_VOCABULARY = Vocabulary()
