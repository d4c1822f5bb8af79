"""Stealth browser strategy: walk likely staff-directory paths in a real browser.

For each candidate path:
1. Navigate (retrying with capped exponential backoff)
2. Pause like a human, wait for document-ready and a staff/roster element
3. Skip pages too small to be a directory
4. Extract; the first path that yields staff wins
"""

from typing import Optional

from playwright.async_api import Error as PlaywrightError
from rich.console import Console

from staff_pipeline.errors import AcquisitionError
from staff_pipeline.extractors.markup import html_to_text
from staff_pipeline.models import RawContent, ScrapeAttemptResult, Strategy, Target
from staff_pipeline.strategies.base import ScrapeContext, ScrapeStrategy

console = Console()

STAFF_SELECTOR = '[class*="staff"], [class*="coach"], [class*="roster"], .sidearm-roster'
DOCUMENT_READY = "document.readyState === 'complete'"

# Gone for good: retrying the same URL is pointless
PERMANENT_STATUSES = {404, 410}


def staff_url_candidates(base_url: str, paths: list[str]) -> list[str]:
    """Absolute URLs for each path, in order, without duplicates."""
    base = base_url.rstrip("/")
    urls = []
    for path in paths:
        url = f"{base}{path}" if path else base
        if url not in urls:
            urls.append(url)
    return urls


class StealthBrowserStrategy(ScrapeStrategy):
    name = Strategy.STEALTH.value

    async def _load(self, page, url: str, ctx: ScrapeContext) -> str:
        """Navigate one page and return its rendered HTML."""
        settings = ctx.settings
        response = await page.goto(url, wait_until="domcontentloaded", timeout=settings.navigation_timeout_ms)
        if response is not None and response.status >= 400:
            raise AcquisitionError(
                f"HTTP {response.status} for {url}",
                url=url,
                status=response.status,
                retryable=response.status not in PERMANENT_STATUSES,
            )

        await ctx.delay.delay(settings.settle_delay_ms, settings.jitter_ratio)

        try:
            await page.wait_for_function(DOCUMENT_READY, timeout=settings.ready_timeout_ms)
        except PlaywrightError:
            console.print(f"[dim]  Page not fully ready, continuing: {url}[/dim]")
        try:
            await page.wait_for_selector(STAFF_SELECTOR, timeout=settings.selector_timeout_ms)
        except PlaywrightError:
            pass  # Plenty of directories use none of these class names

        await ctx.delay.delay(settings.post_load_delay_ms, settings.jitter_ratio)
        return await page.content()

    async def fetch_with_retry(self, url: str, ctx: ScrapeContext) -> str:
        """HTML for `url`, after up to `navigation_retries` retries.

        Raises AcquisitionError carrying the last failure.
        """
        settings = ctx.settings
        browser = await ctx.get_browser()
        attempts = max(1, settings.navigation_retries + 1)
        last_error: Optional[AcquisitionError] = None

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                backoff = settings.backoff_ms(attempt - 1)
                console.print(f"[dim]  Retry {attempt - 1}/{settings.navigation_retries} in ~{backoff}ms: {url}[/dim]")
                await ctx.delay.delay(backoff, settings.jitter_ratio)

            ctx.counters["navigations"] += 1
            try:
                async with browser.page() as page:
                    return await self._load(page, url, ctx)
            except AcquisitionError as e:
                last_error = e
                if not e.retryable:
                    break
            except PlaywrightError as e:
                last_error = AcquisitionError(f"Navigation failed for {url}: {e.message}", url=url)

        raise last_error

    async def scrape(self, target: Target, ctx: ScrapeContext) -> ScrapeAttemptResult:
        settings = ctx.settings
        started = ctx.clock()
        last_error = None
        last_url = target.base_url

        for i, url in enumerate(staff_url_candidates(target.base_url, settings.browser_paths)):
            if i:
                await ctx.delay.delay(settings.path_delay_ms, settings.jitter_ratio)
            last_url = url
            console.print(f"[dim]  Trying {url}[/dim]")

            try:
                html = await self.fetch_with_retry(url, ctx)
            except AcquisitionError as e:
                last_error = str(e)
                continue
            except PlaywrightError as e:
                # Browser could not be launched: no other path will do better
                last_error = f"Browser unavailable: {e.message}"
                break

            if len(html) < settings.min_content_length:
                last_error = f"Low content ({len(html)} chars) at {url}"
                continue

            content = RawContent(source_url=url, text=html_to_text(html), html=html, strategy=Strategy.STEALTH)
            records = ctx.engine.extract(content)
            if records:
                console.print(f"[green]  ✓ {len(records)} coaches at {url}[/green]")
                return ScrapeAttemptResult(
                    target=target,
                    strategy_used=Strategy.STEALTH,
                    success=True,
                    staff_records=records,
                    source_url=url,
                    elapsed_ms=ctx.elapsed_ms(started),
                )
            last_error = f"No coaching staff found at {url}"

        return ScrapeAttemptResult(
            target=target,
            strategy_used=Strategy.STEALTH,
            success=False,
            source_url=last_url,
            elapsed_ms=ctx.elapsed_ms(started),
            error=last_error or "No staff directory paths configured",
        )
