"""Data models for the staff pipeline."""

from staff_pipeline.models.staff import (
    Candidate,
    RawContent,
    RunError,
    RunSummary,
    ScrapeAttemptResult,
    ScrapeMethod,
    StaffRecord,
    StaffTitle,
    Strategy,
    Target,
    TargetState,
    utcnow,
)

__all__ = [
    "Candidate",
    "RawContent",
    "RunError",
    "RunSummary",
    "ScrapeAttemptResult",
    "ScrapeMethod",
    "StaffRecord",
    "StaffTitle",
    "Strategy",
    "Target",
    "TargetState",
    "utcnow",
]
