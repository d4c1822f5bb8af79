"""Data models for coaching staff extraction."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Strategy(str, Enum):
    """Acquisition strategy that produced a piece of content."""

    REMOTE = "remote"
    STEALTH = "stealth"


class ScrapeMethod(str, Enum):
    """Batch-level method selection."""

    REMOTE = "remote"
    STEALTH = "stealth"
    HYBRID = "hybrid"


class TargetState(str, Enum):
    """Per-target orchestration states."""

    PENDING = "pending"
    TRYING_PRIMARY = "trying_primary"
    TRYING_FALLBACK = "trying_fallback"
    SUCCESS = "success"
    FAILED = "failed"


class StaffTitle(str, Enum):
    """Closed set of normalized coaching titles."""

    HEAD_COACH = "Head Coach"
    ASSOCIATE_HEAD_COACH = "Associate Head Coach"
    ASSISTANT_COACH = "Assistant Coach"
    VOLUNTEER_COACH = "Volunteer Coach"
    GRADUATE_ASSISTANT_COACH = "Graduate Assistant Coach"
    RECRUITING_COORDINATOR = "Recruiting Coordinator"
    ATHLETICS_DIRECTOR = "Athletics Director"
    STRENGTH_AND_CONDITIONING_COACH = "Strength & Conditioning Coach"


class Target(BaseModel):
    """One athletic program to scrape."""

    id: Union[int, str]
    display_name: str = Field(alias="name")
    base_url: str = Field(alias="athletic_website")

    class Config:
        frozen = True
        populate_by_name = True
        extra = "ignore"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


class RawContent(BaseModel):
    """Page content produced by a strategy, consumed once by extraction."""

    source_url: str
    text: str
    html: Optional[str] = None  # Rendered markup when the strategy has it
    strategy: Strategy

    @property
    def length(self) -> int:
        return len(self.html) if self.html is not None else len(self.text)


@dataclass
class Candidate:
    """An unvalidated name found by a content pattern."""

    name: str
    title_fragment: Optional[str] = None
    pattern: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    sport: Optional[str] = None
    confidence: Optional[float] = None  # Only set by structured sources


class StaffRecord(BaseModel):
    """A validated coaching staff entry."""

    name: str
    title: StaffTitle
    sport: str = "General Athletics"
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    photo_url: Optional[str] = None
    confidence_score: float = Field(ge=0.0, le=1.0)
    source_strategy: Strategy
    source_url: Optional[str] = None
    extracted_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @property
    def contact_priority(self) -> int:
        """1 for head coaches, 2 for everyone else."""
        return 1 if self.title == StaffTitle.HEAD_COACH else 2

    @property
    def is_recruiting_coordinator(self) -> bool:
        return self.title == StaffTitle.RECRUITING_COORDINATOR

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return self.name.lower(), self.sport

    def to_store_record(self, target_id: Union[int, str, None] = None) -> dict:
        """Row shape written to the staff store."""
        record = {
            "target_id": target_id,
            "name": self.name,
            "title": self.title.value,
            "sport": self.sport,
            "email": self.email,
            "phone": self.phone,
            "bio": self.bio,
            "photo_url": self.photo_url,
            "confidence_score": round(self.confidence_score, 3),
            "scraping_method": self.source_strategy.value,
            "source_url": self.source_url,
            "contact_priority": self.contact_priority,
            "recruiting_coordinator": self.is_recruiting_coordinator,
            "extracted_at": self.extracted_at.isoformat(),
        }
        return record


class ScrapeAttemptResult(BaseModel):
    """Outcome of scraping one target with one strategy (or the hybrid chain)."""

    target: Target
    strategy_used: Strategy
    success: bool
    staff_records: list[StaffRecord] = Field(default_factory=list)
    source_url: str
    elapsed_ms: int = 0
    error: Optional[str] = None
    states: list[TargetState] = Field(default_factory=list)  # Orchestration trail

    @property
    def fell_back(self) -> bool:
        return TargetState.TRYING_FALLBACK in self.states

    def to_report_entry(self) -> dict:
        return {
            "target_id": self.target.id,
            "target_name": self.target.display_name,
            "strategy": self.strategy_used.value,
            "success": self.success,
            "coaches_found": len(self.staff_records),
            "source_url": self.source_url,
            "scraping_time": self.elapsed_ms,
            "error": self.error,
            "states": [s.value for s in self.states],
            "coaches": [r.to_store_record(self.target.id) for r in self.staff_records],
        }


class RunError(BaseModel):
    """One error entry on a run."""

    message: str
    target_id: Union[int, str, None] = None
    target_name: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


class RunSummary(BaseModel):
    """Aggregate bookkeeping for one batch."""

    id: Optional[int] = None
    method: ScrapeMethod
    targets_total: int = 0
    targets_processed: int = 0
    targets_succeeded: int = 0
    records_extracted: int = 0
    success_rate: float = 0.0  # Percentage of processed targets that succeeded
    avg_elapsed_ms: int = 0
    errors: list[RunError] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def status(self) -> str:
        return "completed" if self.completed_at else "running"

    @property
    def duration_seconds(self) -> int:
        end = self.completed_at or utcnow()
        return round((end - self.started_at).total_seconds())

    def to_job_status(self) -> dict:
        """External job view of the run."""
        return {
            "job_id": self.id,
            "method": self.method.value,
            "status": self.status,
            "schools_processed": self.targets_processed,
            "coaches_extracted": self.records_extracted,
            "success_rate": self.success_rate,
            "average_scraping_time": self.avg_elapsed_ms,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "errors": [e.model_dump(mode="json") for e in self.errors] or None,
            "duration": self.duration_seconds,
        }
