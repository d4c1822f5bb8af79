"""Page content → coaching staff extraction engine.

This module turns acquired page content into validated staff records:
1. Content patterns find candidate names in each known layout:
   - Markdown tables (with and without profile links)
   - JSON-LD Person objects and staff-card markup
   - "Title: Name" / "Name - Title" prose
   - One-name-per-line directory lists
2. Candidates are cleaned, validated and checked for coaching context
3. Sport, title and contact details are resolved from surrounding text
"""

from staff_pipeline.extractors.context import (
    extract_contact_info,
    extract_context,
    extract_sport_and_title,
)
from staff_pipeline.extractors.engine import (
    ExtractionReport,
    PatternExtractionEngine,
    extract_staff,
    is_coaching_position,
    is_name_in_coaching_context,
    merge_records,
)
from staff_pipeline.extractors.names import is_valid_name, validate_and_clean_name
from staff_pipeline.extractors.patterns import DEFAULT_PATTERNS, ContentPattern
from staff_pipeline.extractors.vocabulary import DEFAULT_VOCABULARY, Vocabulary

__all__ = [
    "extract_contact_info",
    "extract_context",
    "extract_sport_and_title",
    "ExtractionReport",
    "PatternExtractionEngine",
    "extract_staff",
    "is_coaching_position",
    "is_name_in_coaching_context",
    "merge_records",
    "is_valid_name",
    "validate_and_clean_name",
    "DEFAULT_PATTERNS",
    "ContentPattern",
    "DEFAULT_VOCABULARY",
    "Vocabulary",
]
