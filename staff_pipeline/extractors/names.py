"""Person-name cleaning and validation.

Extraction quality hinges on precision here: a false positive becomes a
bogus staff record downstream, so anything doubtful is rejected.
"""

import re
from typing import Optional

from staff_pipeline.extractors.vocabulary import DEFAULT_VOCABULARY, Vocabulary

MIN_NAME_LENGTH = 4
MAX_NAME_LENGTH = 40

LEADING_NOISE = re.compile(r"^(?:The|A|An|Dr|Mr|Mrs|Ms|Coach)\.?\s+", re.I)
TRAILING_NOISE = re.compile(r"\s+(?:Coach|Coaching|Staff|Department|Athletics?)$", re.I)

# Letters (including accented), spaces, and the punctuation names actually use
ALLOWED_NAME = re.compile(r"^[^\W\d_]+(?:[ .'\-]+[^\W\d_]+)*\.?$")


def _strip_noise(name: str) -> str:
    while True:
        stripped = TRAILING_NOISE.sub("", LEADING_NOISE.sub("", name)).strip()
        if stripped == name:
            return stripped
        name = stripped


def validate_and_clean_name(
    raw: Optional[str],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> Optional[str]:
    """Return the cleaned name, or None if the span is not a plausible person.

    Cleaning an already-clean name returns it unchanged.
    """
    if not raw:
        return None

    cleaned = re.sub(r"\s+", " ", raw).strip()
    cleaned = _strip_noise(cleaned)

    parts = [part for part in cleaned.split(" ") if len(part) > 1]
    if len(parts) < 2:
        return None
    if not all(part[0].isupper() for part in parts):
        return None

    if any(vocabulary.is_denied(part) for part in cleaned.split(" ")):
        return None

    if not MIN_NAME_LENGTH <= len(cleaned) <= MAX_NAME_LENGTH:
        return None

    if not ALLOWED_NAME.match(cleaned):
        return None

    return cleaned


def is_valid_name(raw: Optional[str], vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    return validate_and_clean_name(raw, vocabulary) is not None
