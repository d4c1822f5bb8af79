"""Pattern extraction engine: raw page content in, validated staff records out.

Pipeline per page:
1. Run every content pattern in order; a pattern that blows up is skipped
2. Clean and validate each candidate name (first pattern to accept a name wins)
3. Require a coaching keyword near the name
4. Reject academic/administrative titles without a coaching term
5. Classify title and sport, pick up contact details, attach confidence
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from rich.console import Console

from staff_pipeline.errors import ExtractionError
from staff_pipeline.extractors.context import (
    classify_sport,
    classify_title,
    extract_context,
    find_name,
)
from staff_pipeline.extractors.markup import html_to_text
from staff_pipeline.extractors.names import validate_and_clean_name
from staff_pipeline.extractors.patterns import DEFAULT_PATTERNS, ContentPattern
from staff_pipeline.extractors.vocabulary import (
    COACHING_CONTEXT_FORWARD,
    COACHING_CONTEXT_REVERSE,
    COACHING_TERMS,
    DEFAULT_VOCABULARY,
    FACULTY_MARKERS,
    Vocabulary,
)
from staff_pipeline.models import Candidate, RawContent, StaffRecord, Strategy

console = Console()

# Max distance between a name and the keyword that makes it coaching staff
CONTEXT_RADIUS = 100

STRATEGY_CONFIDENCE = {
    Strategy.REMOTE: 0.7,
    Strategy.STEALTH: 0.8,
}
STRUCTURED_CONFIDENCE = 0.8

_FORWARD_KEYWORDS = "|".join(COACHING_CONTEXT_FORWARD)
_REVERSE_KEYWORDS = "|".join(COACHING_CONTEXT_REVERSE)


def is_name_in_coaching_context(name: str, content: str, radius: int = CONTEXT_RADIUS) -> bool:
    """True if a coaching keyword sits within `radius` chars after or before the name."""
    escaped = re.escape(name)
    forward = re.compile(
        escaped + r"[\s\S]{0,%d}?\b(?:%s)" % (radius, _FORWARD_KEYWORDS), re.I
    )
    if forward.search(content):
        return True
    reverse = re.compile(
        r"\b(?:%s)[\s\S]{0,%d}?" % (_REVERSE_KEYWORDS, radius) + escaped, re.I
    )
    return bool(reverse.search(content))


def is_coaching_position(label: Optional[str]) -> bool:
    """True if the label names a coaching role.

    A label carrying a faculty or administrative marker ("Director of
    Marketing", "Assistant Athletic Trainer") only passes when it says
    "coach" or the marker is part of a coaching term itself
    ("Recruiting Coordinator", "Director of Athletics").
    """
    if not label:
        return False
    lowered = label.lower()
    if "coach" not in lowered:
        remainder = lowered
        for term in COACHING_TERMS:
            remainder = remainder.replace(term, " ")
        if any(marker in remainder for marker in FACULTY_MARKERS):
            return False
    return any(term in lowered for term in COACHING_TERMS)


def adjacent_label(name: str, content: str) -> Optional[str]:
    """Text right after the name, or the next line when the name ends its line."""
    index = find_name(name, content)
    if index == -1:
        return None
    after = content[index + len(name):index + len(name) + 200]
    lines = after.split("\n")
    label = lines[0].strip(" \t-–—,|:")
    if not label:
        label = next((line.strip() for line in lines[1:] if line.strip()), "")
    return label or None


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass
class ExtractionReport:
    """What happened to every candidate on one page."""

    records: list[StaffRecord] = field(default_factory=list)
    candidates: int = 0
    pattern_hits: dict[str, int] = field(default_factory=dict)
    rejected_name: int = 0
    rejected_context: int = 0
    rejected_position: int = 0
    duplicates: int = 0
    pattern_errors: list[str] = field(default_factory=list)

    @property
    def rejected(self) -> int:
        return self.rejected_name + self.rejected_context + self.rejected_position


class PatternExtractionEngine:
    """Runs the pattern cascade over one page and builds validated records."""

    def __init__(
        self,
        patterns: Optional[list[ContentPattern]] = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        context_radius: int = CONTEXT_RADIUS,
    ):
        self.patterns = list(patterns) if patterns is not None else list(DEFAULT_PATTERNS)
        self.vocabulary = vocabulary
        self.context_radius = context_radius

    def extract(
        self,
        content: RawContent,
        confidence: Optional[float] = None,
        structured: Iterable[dict] = (),
    ) -> list[StaffRecord]:
        return self.extract_with_report(content, confidence, structured).records

    def extract_with_report(
        self,
        content: RawContent,
        confidence: Optional[float] = None,
        structured: Iterable[dict] = (),
    ) -> ExtractionReport:
        """Extract staff from one page.

        `structured` entries (name/title/sport/... dicts from a remote LLM
        extraction) are considered before any pattern and go through the
        same validation.
        """
        base_confidence = confidence if confidence is not None else STRATEGY_CONFIDENCE[content.strategy]
        if not content.text.strip() and content.html:
            content = content.model_copy(update={"text": html_to_text(content.html)})
        text = content.text

        report = ExtractionReport()
        seen: set[str] = set()

        batches = [("structured", lambda: candidates_from_structured(structured))]
        batches += [(p.name, lambda p=p: p.match(content)) for p in self.patterns]

        for pattern_name, run in batches:
            try:
                candidates = run()
            except Exception as e:
                error = ExtractionError(f"Pattern {pattern_name} failed: {e}")
                console.print(f"[yellow]  ⚠ {error}[/yellow]")
                report.pattern_errors.append(str(error))
                continue

            for candidate in candidates:
                report.candidates += 1
                record = self._accept(candidate, text, content, base_confidence, seen, report)
                if record is None:
                    continue
                seen.add(record.name.lower())
                report.records.append(record)
                report.pattern_hits[pattern_name] = report.pattern_hits.get(pattern_name, 0) + 1

        return report

    def _accept(
        self,
        candidate: Candidate,
        text: str,
        content: RawContent,
        base_confidence: float,
        seen: set[str],
        report: ExtractionReport,
    ) -> Optional[StaffRecord]:
        name = validate_and_clean_name(candidate.name, self.vocabulary)
        if name is None:
            report.rejected_name += 1
            return None
        if name.lower() in seen:
            report.duplicates += 1
            return None

        # Structured sources may name people who never appear in the visible text
        context_text = text if find_name(name, text) != -1 else f"{name} {candidate.title_fragment or ''}"
        if not is_name_in_coaching_context(name, context_text, self.context_radius):
            report.rejected_context += 1
            return None

        label = candidate.title_fragment or adjacent_label(name, context_text)
        if not is_coaching_position(label):
            report.rejected_position += 1
            return None

        return build_record(name, candidate, context_text, content, base_confidence)


def build_record(
    name: str,
    candidate: Candidate,
    text: str,
    content: RawContent,
    base_confidence: float,
) -> StaffRecord:
    """Classify and assemble a record for an accepted name."""
    context = extract_context(name, text)
    fragment = candidate.title_fragment or ""

    title = classify_title(fragment) or context.title
    sport = candidate.sport or classify_sport(fragment) or context.sport
    score = candidate.confidence if candidate.confidence is not None else base_confidence

    return StaffRecord(
        name=name,
        title=title,
        sport=sport,
        email=candidate.email or context.email,
        phone=candidate.phone or context.phone,
        bio=candidate.bio,
        photo_url=candidate.photo_url,
        confidence_score=clamp_confidence(score),
        source_strategy=content.strategy,
        source_url=content.source_url,
    )


def candidates_from_structured(entries: Iterable[dict]) -> list[Candidate]:
    """Turn remote LLM extraction entries into candidates."""
    candidates = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        confidence = entry.get("confidence")
        candidates.append(Candidate(
            name=str(entry["name"]),
            title_fragment=entry.get("title") or None,
            pattern="structured",
            email=entry.get("email") or None,
            phone=entry.get("phone") or None,
            bio=entry.get("bio") or None,
            photo_url=entry.get("photo_url") or entry.get("photoUrl") or None,
            sport=entry.get("sport") or None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else STRUCTURED_CONFIDENCE,
        ))
    return candidates


def merge_records(*groups: Iterable[StaffRecord]) -> list[StaffRecord]:
    """Concatenate record lists, keeping the first record per (name, sport)."""
    merged: list[StaffRecord] = []
    seen: set[tuple[str, str]] = set()
    for group in groups:
        for record in group:
            if record.dedupe_key in seen:
                continue
            seen.add(record.dedupe_key)
            merged.append(record)
    return merged


def extract_staff(
    content: RawContent,
    confidence: Optional[float] = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[StaffRecord]:
    """Convenience wrapper around the default engine."""
    return PatternExtractionEngine(vocabulary=vocabulary).extract(content, confidence)
