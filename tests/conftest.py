"""Shared test fixtures and configuration."""

from contextlib import asynccontextmanager
from typing import Optional, Union

import pytest

from staff_pipeline.config import Settings
from staff_pipeline.extractors import Vocabulary
from staff_pipeline.models import ScrapeAttemptResult, StaffRecord, StaffTitle, Strategy, Target
from staff_pipeline.strategies import NoDelay, ScrapeContext, ScrapeStrategy

BASE_URL = "https://athletics.example.edu"

STAFF_NAMES = ["Jane Doe", "John Smith", "Maria Garcia", "Pat Lee", "Sam Jones", "Alex Brown"]

STAFF_MARKDOWN = """
# Coaching Staff

| Name | Title |
| --- | --- |
| [Jane Doe](/staff/jane-doe) | Head Basketball Coach |
| [John Smith](/staff/john-smith) | Assistant Basketball Coach |
| [Maria Garcia](/staff/maria-garcia) | Associate Head Basketball Coach |
"""

STAFF_HTML = """<html><head><title>Staff Directory</title></head><body>
<nav><a href="/">Home</a> <a href="/tickets">Tickets</a></nav>
<div class="sidearm-staff-member">
  <img src="/images/jane-doe.jpg" alt="">
  <h3 class="sidearm-staff-member-name">Jane Doe</h3>
  <div class="sidearm-staff-member-title">Head Basketball Coach</div>
  <a href="mailto:jdoe@example.edu">Email</a>
</div>
<div class="sidearm-staff-member">
  <h3 class="sidearm-staff-member-name">John Smith</h3>
  <div class="sidearm-staff-member-title">Assistant Basketball Coach</div>
</div>
<footer>Copyright Example University</footer>
</body></html>"""


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, status: int):
        self.status = status


Outcome = Union[str, int, Exception]


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.closed = False
        self._html = ""

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        self.browser.visits.append(url)
        if self.browser.clock is not None:
            self.browser.clock.advance(self.browser.step_seconds)
        outcome = self.browser.next_outcome(url)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return FakeResponse(outcome)
        self._html = outcome
        return FakeResponse(200)

    async def wait_for_function(self, expression: str, timeout: Optional[int] = None):
        return True

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None):
        self.browser.selectors.append(selector)
        return None

    async def content(self) -> str:
        return self._html

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    """In-memory stand-in for PlaywrightBrowser.

    `pages` maps URL → outcomes consumed in order (the last one repeats):
    HTML string for a 200, an int status, or an exception to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, pages: Optional[dict[str, list[Outcome]]] = None, clock: Optional[FakeClock] = None,
                 step_seconds: float = 0.0):
        self.pages = {url: list(outcomes) for url, outcomes in (pages or {}).items()}
        self.clock = clock
        self.step_seconds = step_seconds
        self.visits: list[str] = []
        self.selectors: list[str] = []
        self.opened: list[FakePage] = []
        self.closed = False

    def next_outcome(self, url: str) -> Outcome:
        outcomes = self.pages.get(url)
        if not outcomes:
            return 404
        return outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]

    @asynccontextmanager
    async def page(self):
        page = FakePage(self)
        self.opened.append(page)
        try:
            yield page
        finally:
            await page.close()

    async def close(self) -> None:
        self.closed = True


class FakeStrategy(ScrapeStrategy):
    """Strategy returning a canned number of records."""

    def __init__(self, kind: Strategy, count: int = 0, error: Optional[Exception] = None, elapsed_ms: int = 100):
        self.kind = kind
        self.count = count
        self.error = error
        self.elapsed_ms = elapsed_ms
        self.calls: list[Target] = []

    async def scrape(self, target: Target, ctx: ScrapeContext) -> ScrapeAttemptResult:
        self.calls.append(target)
        if self.error is not None:
            raise self.error
        records = [make_record(STAFF_NAMES[i], self.kind) for i in range(self.count)]
        return ScrapeAttemptResult(
            target=target,
            strategy_used=self.kind,
            success=bool(records),
            staff_records=records,
            source_url=f"{target.base_url}/staff",
            elapsed_ms=self.elapsed_ms,
            error=None if records else "No coaching staff found",
        )


def make_record(name: str, strategy: Strategy = Strategy.STEALTH, **kwargs) -> StaffRecord:
    values = {"title": StaffTitle.ASSISTANT_COACH, "sport": "Football", "confidence_score": 0.8}
    values.update(kwargs)
    return StaffRecord(name=name, source_strategy=strategy, **values)


@pytest.fixture
def target() -> Target:
    return Target(id=1, name="Example State University", athletic_website=BASE_URL + "/")


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with a test API, short path lists and no content floor."""
    return Settings(
        remote_api_key="test-key",
        remote_api_url="https://api.firecrawl.test/v0",
        remote_retries=1,
        remote_paths=["/staff"],
        browser_paths=["/staff", "/coaches"],
        min_content_length=0,
        data_dir=tmp_path,
    )


@pytest.fixture
def no_delay() -> NoDelay:
    return NoDelay()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def vocabulary() -> Vocabulary:
    return Vocabulary()


@pytest.fixture
def make_ctx(settings, no_delay, clock, vocabulary):
    """Factory for a ScrapeContext wired to fakes."""

    def _make(browser: Optional[FakeBrowser] = None, **overrides) -> ScrapeContext:
        browser = browser or FakeBrowser()

        async def browser_factory(_settings):
            return browser

        return ScrapeContext(
            overrides.pop("settings", settings),
            vocabulary=vocabulary,
            delay=no_delay,
            clock=clock,
            browser_factory=browser_factory,
            **overrides,
        )

    return _make


@pytest.fixture
def staff_markdown() -> str:
    return STAFF_MARKDOWN


@pytest.fixture
def staff_html() -> str:
    return STAFF_HTML


@pytest.fixture
def make_browser(clock):
    """FakeBrowser factory sharing the test clock."""

    def _make(pages: Optional[dict[str, list[Outcome]]] = None, step_seconds: float = 0.0) -> FakeBrowser:
        return FakeBrowser(pages, clock=clock, step_seconds=step_seconds)

    return _make


@pytest.fixture
def make_strategy():
    return FakeStrategy


@pytest.fixture(name="make_record")
def make_record_fixture():
    return make_record
