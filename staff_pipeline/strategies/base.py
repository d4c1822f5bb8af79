"""Shared plumbing for acquisition strategies: the batch context."""

import time
from collections import Counter
from typing import Awaitable, Callable, Optional

from rich.console import Console

from staff_pipeline.config import Settings
from staff_pipeline.extractors import DEFAULT_VOCABULARY, PatternExtractionEngine, Vocabulary
from staff_pipeline.models import ScrapeAttemptResult, Target
from staff_pipeline.strategies.browser import PlaywrightBrowser
from staff_pipeline.strategies.firecrawl import RemoteExtractionClient
from staff_pipeline.strategies.timing import DelayPolicy, HumanDelay

console = Console()


BrowserFactory = Callable[[Settings], Awaitable[PlaywrightBrowser]]
RemoteClientFactory = Callable[[Settings], RemoteExtractionClient]


class ScrapeContext:
    """Everything a strategy needs for one batch.

    Holds the settings, vocabulary, extraction engine, delay policy, clock and
    request counters, plus the browser and remote client, both created on
    first use and released when the context exits.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        vocabulary: Optional[Vocabulary] = None,
        delay: Optional[DelayPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
        browser_factory: Optional[BrowserFactory] = None,
        remote_client_factory: Optional[RemoteClientFactory] = None,
        engine: Optional[PatternExtractionEngine] = None,
    ):
        self.settings = settings or Settings()
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self.delay = delay or HumanDelay(min_ms=self.settings.min_delay_ms)
        self.clock = clock
        self.engine = engine or PatternExtractionEngine(vocabulary=self.vocabulary)
        self.counters: Counter = Counter()
        self._browser_factory = browser_factory or PlaywrightBrowser.launch
        self._remote_client_factory = remote_client_factory or (
            lambda s: RemoteExtractionClient.from_settings(s, delay=self.delay)
        )
        self._browser = None
        self._remote_client = None

    async def __aenter__(self) -> "ScrapeContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def get_browser(self):
        if self._browser is None:
            self._browser = await self._browser_factory(self.settings)
            self.counters["browser_launches"] += 1
        return self._browser

    def get_remote_client(self):
        """Remote API client; raises ValueError when no API key is configured."""
        if self._remote_client is None:
            self._remote_client = self._remote_client_factory(self.settings)
        return self._remote_client

    @property
    def browser_open(self) -> bool:
        return self._browser is not None

    async def aclose(self) -> None:
        browser, self._browser = self._browser, None
        client, self._remote_client = self._remote_client, None
        try:
            if client is not None:
                await client.aclose()
        finally:
            if browser is not None:
                await browser.close()
                console.print("[dim]Browser closed[/dim]")

    def elapsed_ms(self, started: float) -> int:
        return int(round((self.clock() - started) * 1000))


class ScrapeStrategy:
    """One way of turning a target into staff records."""

    name = "strategy"

    async def scrape(self, target: Target, ctx: ScrapeContext) -> ScrapeAttemptResult:
        raise NotImplementedError
