"""Error types raised by the scraping pipeline."""

from typing import Optional


class ScrapeError(Exception):
    """Base class for pipeline errors."""


class AcquisitionError(ScrapeError):
    """A page could not be acquired (timeout, non-2xx, browser crash)."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        retryable: bool = True,
    ):
        super().__init__(message)
        self.url = url
        self.status = status
        self.retryable = retryable


class ExtractionError(ScrapeError):
    """A content pattern or structured-data parse failed."""


class BatchFatalError(ScrapeError):
    """Target enumeration or run persistence failed; the batch cannot continue."""
