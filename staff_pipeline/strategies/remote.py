"""Remote extraction: let the hosted scraping API render the staff pages."""

from rich.console import Console

from staff_pipeline.extractors import merge_records
from staff_pipeline.models import RawContent, ScrapeAttemptResult, StaffRecord, Strategy, Target
from staff_pipeline.strategies.base import ScrapeContext, ScrapeStrategy

console = Console()


class RemoteExtractionStrategy(ScrapeStrategy):
    """Scrape the primary staff page, then the secondary coaching pages.

    Records from every page are merged, keeping the first per (name, sport).
    """

    name = Strategy.REMOTE.value

    async def scrape(self, target: Target, ctx: ScrapeContext) -> ScrapeAttemptResult:
        settings = ctx.settings
        started = ctx.clock()
        primary_url = f"{target.base_url}{settings.remote_paths[0]}" if settings.remote_paths else target.base_url

        try:
            client = ctx.get_remote_client()
        except ValueError as e:
            console.print(f"[yellow]  Remote extraction unavailable: {e}[/yellow]")
            return ScrapeAttemptResult(
                target=target,
                strategy_used=Strategy.REMOTE,
                success=False,
                source_url=primary_url,
                elapsed_ms=ctx.elapsed_ms(started),
                error=str(e),
            )

        records: list[StaffRecord] = []
        last_error = None

        for i, path in enumerate(settings.remote_paths):
            if i:
                await ctx.delay.delay(settings.remote_page_delay_ms)
            url = f"{target.base_url}{path}"
            ctx.counters["remote_requests"] += 1

            response = await client.scrape(url, llm_extraction=settings.remote_llm_extraction)
            if not response.success:
                last_error = f"{response.error} ({url})"
                console.print(f"[dim]  Could not access {path}: {response.error}[/dim]")
                continue

            content = RawContent(
                source_url=response.source_url or url,
                text=response.content,
                strategy=Strategy.REMOTE,
            )
            page_records = ctx.engine.extract(content, structured=response.extracted)
            if page_records:
                console.print(f"[dim]  {path}: {len(page_records)} coaches[/dim]")
            records = merge_records(records, page_records)

        error = None
        if not records:
            error = last_error or "No coaching staff found"

        return ScrapeAttemptResult(
            target=target,
            strategy_used=Strategy.REMOTE,
            success=bool(records),
            staff_records=records,
            source_url=primary_url,
            elapsed_ms=ctx.elapsed_ms(started),
            error=error,
        )
