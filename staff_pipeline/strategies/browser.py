"""Headless Chromium configured to look like an ordinary desktop visitor.

One browser (and one browser context) is shared by every target in a batch;
each navigation gets its own page, closed on every exit path.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from rich.console import Console

from staff_pipeline.config import Settings

console = Console()

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1366, "height": 768}

EXTRA_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
    "--disable-blink-features=AutomationControlled",
]

# Hide the usual automation fingerprints before any page script runs
STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
"""


class PlaywrightBrowser:
    """Shared browser handle: launch once, open a fresh page per navigation."""

    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext):
        self._playwright = playwright
        self._browser = browser
        self._context = context

    @classmethod
    async def launch(cls, settings: Settings) -> "PlaywrightBrowser":
        console.print(f"[cyan]Launching browser (headless={settings.browser_headless})[/cyan]")
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=settings.browser_headless,
                args=BROWSER_ARGS,
            )
            context = await browser.new_context(
                user_agent=USER_AGENT,
                viewport=VIEWPORT,
                locale="en-US",
                extra_http_headers=EXTRA_HEADERS,
            )
            await context.add_init_script(STEALTH_INIT_SCRIPT)
        except PlaywrightError:
            await playwright.stop()
            raise
        return cls(playwright, browser, context)

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        page = await self._context.new_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                console.print(f"[dim]Page close failed: {e}[/dim]")

    async def close(self) -> None:
        try:
            await self._context.close()
            await self._browser.close()
        except PlaywrightError as e:
            console.print(f"[yellow]Browser close failed: {e}[/yellow]")
        finally:
            await self._playwright.stop()
