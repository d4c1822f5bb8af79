"""CLI for the coaching staff pipeline."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from staff_pipeline.config import Settings
from staff_pipeline.errors import BatchFatalError
from staff_pipeline.extractors import PatternExtractionEngine, Vocabulary
from staff_pipeline.extractors.markup import html_to_text
from staff_pipeline.models import RawContent, ScrapeMethod, Strategy
from staff_pipeline.pipeline import load_batch_targets, parse_method, run_batch
from staff_pipeline.store import RUNS_FILE, RunStore
from staff_pipeline.strategies import ScrapeContext
from staff_pipeline.tracker import RunTracker

# Load environment variables (override=True to beat shell env vars)
load_dotenv(override=True)

app = typer.Typer(
    name="staff-pipeline",
    help="Athletic coaching staff scraping pipeline",
    add_completion=False,
)
console = Console()


async def _scrape(targets, method: ScrapeMethod, settings: Settings, vocabulary: Vocabulary, **kwargs):
    async with ScrapeContext(settings, vocabulary=vocabulary) as ctx:
        return await run_batch(targets, method, ctx=ctx, **kwargs)


@app.command()
def scrape(
    method: str = typer.Option("hybrid", "--method", "-m", help="remote, stealth or hybrid"),
    schools_file: Optional[Path] = typer.Option(
        None, "--schools-file", "-f",
        help="JSON list of {id, name, athletic_website} (default: <data dir>/schools.json)",
    ),
    school_ids: Optional[list[str]] = typer.Option(None, "--school", "-s", help="Only these school ids"),
    limit: int = typer.Option(0, "--limit", "-l", help="Max schools to scrape (0 = all)"),
    threshold: Optional[int] = typer.Option(
        None, "--threshold", "-t", help="Remote results below this trigger the browser fallback"
    ),
    headless: bool = typer.Option(True, "--headless/--headful", help="Run the browser headless"),
    report_dir: Optional[Path] = typer.Option(None, "--report-dir", "-r", help="Where to write the JSON report"),
):
    """Scrape coaching staff for a batch of schools."""
    try:
        scrape_method = parse_method(method)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    settings = Settings.from_env(browser_headless=headless)
    if scrape_method != ScrapeMethod.STEALTH and not settings.remote_api_key:
        console.print(f"[red]Error: {scrape_method.value} scraping needs a remote extraction API key[/red]")
        console.print("[dim]Make sure to set FIRECRAWL_API_KEY in .env, or use --method stealth[/dim]")
        raise typer.Exit(1)
    vocabulary = Vocabulary.load(settings.vocabulary_file)

    try:
        tracker = RunTracker(RunStore(settings.data_dir / RUNS_FILE))
        targets = load_batch_targets(
            schools_file or settings.data_dir / "schools.json", school_ids, scrape_method, tracker
        )
    except BatchFatalError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if limit > 0:
        targets = targets[:limit]
    if not targets:
        console.print("[yellow]No schools with an athletic website to scrape[/yellow]")
        raise typer.Exit(0)

    console.print(f"[cyan]Scraping {len(targets)} schools with {scrape_method.value} method...[/cyan]")
    try:
        outcome = asyncio.run(_scrape(
            targets,
            scrape_method,
            settings,
            vocabulary,
            tracker=tracker,
            fallback_threshold=threshold,
            report_dir=report_dir or settings.data_dir / "reports",
        ))
    except BatchFatalError as e:
        console.print(f"[red]Batch failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[dim]Job {outcome.run.id}: {outcome.run.status}[/dim]")


@app.command()
def status(
    job_id: Optional[int] = typer.Argument(None, help="Job id (omit to list recent jobs)"),
    limit: int = typer.Option(10, "--limit", "-l", help="Recent jobs to list (max 50)"),
):
    """Show one scrape job, or the most recent ones."""
    settings = Settings.from_env()
    try:
        tracker = RunTracker(RunStore(settings.data_dir / RUNS_FILE))
    except BatchFatalError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if job_id is not None:
        job = tracker.job_status(job_id)
        if job is None:
            console.print(f"[red]Scraping job not found: {job_id}[/red]")
            raise typer.Exit(1)

        table = Table(title=f"Job {job_id}", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for key, value in job.items():
            if key == "errors":
                value = len(value) if value else 0
            table.add_row(key, str(value))
        console.print(table)

        for error in (job["errors"] or [])[:10]:
            console.print(f"  [red]•[/red] {error.get('target_name') or '-'}: {error['message']}")
        return

    runs = tracker.list_recent(limit)
    if not runs:
        console.print("[yellow]No scrape jobs yet[/yellow]")
        return

    table = Table(title="Recent scrape jobs")
    table.add_column("Job", justify="right")
    table.add_column("Method")
    table.add_column("Status")
    table.add_column("Schools", justify="right")
    table.add_column("Coaches", justify="right")
    table.add_column("Success", justify="right")
    table.add_column("Started")
    for run in runs:
        color = "green" if run.status == "completed" else "yellow"
        table.add_row(
            str(run.id),
            run.method.value,
            f"[{color}]{run.status}[/{color}]",
            f"{run.targets_processed}/{run.targets_total}",
            str(run.records_extracted),
            f"{run.success_rate}%",
            run.started_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def extract(
    path: Path = typer.Argument(..., help="Saved markdown or HTML staff page"),
    strategy: str = typer.Option("stealth", "--strategy", help="Strategy to attribute records to (remote/stealth)"),
    source_url: str = typer.Option("", "--url", "-u", help="Source URL to record"),
):
    """Run the extraction engine over a local file."""
    try:
        kind = Strategy(strategy)
    except ValueError:
        console.print(f"[red]Error: unknown strategy {strategy}[/red]")
        raise typer.Exit(1)
    if not path.exists():
        console.print(f"[red]Error: {path} not found[/red]")
        raise typer.Exit(1)

    settings = Settings.from_env()
    raw = path.read_text(errors="replace")
    if path.suffix.lower() in (".html", ".htm"):
        content = RawContent(source_url=source_url or str(path), text=html_to_text(raw), html=raw, strategy=kind)
    else:
        content = RawContent(source_url=source_url or str(path), text=raw, strategy=kind)

    engine = PatternExtractionEngine(vocabulary=Vocabulary.load(settings.vocabulary_file))
    report = engine.extract_with_report(content)

    table = Table(title=f"{len(report.records)} coaches in {path.name}")
    table.add_column("Name", style="cyan")
    table.add_column("Title")
    table.add_column("Sport")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Conf.", justify="right")
    for record in report.records:
        table.add_row(
            record.name,
            record.title.value,
            record.sport,
            record.email or "-",
            record.phone or "-",
            f"{record.confidence_score:.2f}",
        )
    console.print(table)
    console.print(
        f"[dim]{report.candidates} candidates, {report.rejected} rejected, "
        f"{report.duplicates} duplicates[/dim]"
    )
    for error in report.pattern_errors:
        console.print(f"[yellow]{error}[/yellow]")


@app.command("check-target")
def check_target(
    name: str = typer.Argument(..., help="School name"),
    threshold: Optional[int] = typer.Option(None, "--threshold", "-t", help="Fallback threshold"),
):
    """Show how the hybrid method would route a school."""
    settings = Settings.from_env()
    vocabulary = Vocabulary.load(settings.vocabulary_file)
    threshold = threshold if threshold is not None else settings.fallback_threshold

    if vocabulary.is_known_difficult(name):
        console.print(f"[yellow]{name}: known difficult → stealth browser only[/yellow]")
    else:
        console.print(
            f"[green]{name}: remote extraction first, "
            f"stealth browser if fewer than {threshold} coaches[/green]"
        )


if __name__ == "__main__":
    app()
