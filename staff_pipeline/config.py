"""Runtime settings for the staff pipeline.

Values come from environment variables (a local `.env` is honoured) with
defaults tuned for polite, bot-resistant scraping of athletic websites.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_DATA_DIR = Path(__file__).parent.parent / ".cache"

# Remote extraction pages, primary first
REMOTE_STAFF_PATHS = [
    "/staff",
    "/coaches",
    "/coaching-staff",
    "/athletics/staff",
    "/sports/staff",
]

# Browser staff-directory candidates, tried in order; "" is the base URL itself
BROWSER_STAFF_PATHS = [
    "/staff",
    "/coaches",
    "/coaching-staff",
    "/athletics/staff",
    "/sports/staff",
    "/directory/staff",
    "/staff-directory",
    "/about/staff",
    "/administration",
    "/sports/football/coaches",
    "/sports/m-baskbl/coaches",
    "/sports/w-baskbl/coaches",
    "/sports/baseball/coaches",
    "/sports/softball/coaches",
    "/football/coaches",
    "/basketball/coaches",
    "",
]


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Tunable knobs for acquisition, extraction and batching."""

    # Remote extraction API (Firecrawl v0 compatible)
    remote_api_key: Optional[str] = None
    remote_api_url: str = "https://api.firecrawl.dev/v0"
    remote_timeout: float = 60.0
    remote_retries: int = 2
    remote_llm_extraction: bool = False
    remote_paths: list[str] = Field(default_factory=lambda: list(REMOTE_STAFF_PATHS))
    remote_page_delay_ms: int = 1000

    # Hybrid routing
    fallback_threshold: int = 3

    # Browser
    browser_headless: bool = True
    browser_paths: list[str] = Field(default_factory=lambda: list(BROWSER_STAFF_PATHS))
    navigation_timeout_ms: int = 30000
    navigation_retries: int = 2  # retries after the first attempt
    settle_delay_ms: int = 4000
    ready_timeout_ms: int = 5000
    selector_timeout_ms: int = 8000
    post_load_delay_ms: int = 2000
    backoff_base_ms: int = 2000
    backoff_cap_ms: int = 10000
    path_delay_ms: int = 2000
    min_content_length: int = 10000

    # Politeness
    inter_target_delay_ms: int = 2000
    jitter_ratio: float = 0.3
    min_delay_ms: int = 100

    # Storage
    data_dir: Path = DEFAULT_DATA_DIR
    vocabulary_file: Optional[Path] = None

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Build settings from the environment, then apply explicit overrides."""
        load_dotenv(override=True)

        vocabulary_file = os.environ.get("STAFF_VOCABULARY_FILE")
        values = {
            "remote_api_key": os.environ.get("FIRECRAWL_API_KEY") or None,
            "remote_api_url": os.environ.get("FIRECRAWL_API_URL", cls.model_fields["remote_api_url"].default),
            "remote_llm_extraction": _env_bool("STAFF_REMOTE_LLM_EXTRACTION", False),
            "fallback_threshold": _env_int("STAFF_FALLBACK_THRESHOLD", 3),
            "inter_target_delay_ms": _env_int("STAFF_INTER_TARGET_DELAY_MS", 2000),
            "browser_headless": _env_bool("STAFF_BROWSER_HEADLESS", True),
            "navigation_timeout_ms": _env_int("STAFF_NAVIGATION_TIMEOUT_MS", 30000),
            "navigation_retries": _env_int("STAFF_NAVIGATION_RETRIES", 2),
            "min_content_length": _env_int("STAFF_MIN_CONTENT_LENGTH", 10000),
            "data_dir": Path(os.environ.get("STAFF_DATA_DIR", str(DEFAULT_DATA_DIR))),
            "vocabulary_file": Path(vocabulary_file) if vocabulary_file else None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def backoff_ms(self, attempt: int) -> int:
        """Backoff before retry number `attempt` (1-based), doubling and capped."""
        return min(self.backoff_base_ms * (2 ** (attempt - 1)), self.backoff_cap_ms)
