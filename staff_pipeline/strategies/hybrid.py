"""Hybrid orchestration: cheap remote extraction first, the browser when it under-delivers.

Per target:
    PENDING → TRYING_PRIMARY → SUCCESS
                             → TRYING_FALLBACK → SUCCESS | FAILED

Known-difficult targets skip straight to TRYING_FALLBACK.
"""

from typing import Optional

from rich.console import Console

from staff_pipeline.models import ScrapeAttemptResult, ScrapeMethod, Strategy, Target, TargetState
from staff_pipeline.strategies.base import ScrapeContext, ScrapeStrategy
from staff_pipeline.strategies.remote import RemoteExtractionStrategy
from staff_pipeline.strategies.stealth import StealthBrowserStrategy

console = Console()


class HybridOrchestrator:
    """Routes each target through the remote and browser strategies."""

    def __init__(
        self,
        remote: Optional[ScrapeStrategy] = None,
        stealth: Optional[ScrapeStrategy] = None,
    ):
        self.remote = remote or RemoteExtractionStrategy()
        self.stealth = stealth or StealthBrowserStrategy()

    def should_bypass_remote(self, target: Target, ctx: ScrapeContext) -> bool:
        return ctx.vocabulary.is_known_difficult(target.display_name)

    async def _run(
        self,
        strategy: ScrapeStrategy,
        strategy_kind: Strategy,
        target: Target,
        ctx: ScrapeContext,
    ) -> ScrapeAttemptResult:
        """Run one strategy; anything it raises becomes a failed result."""
        started = ctx.clock()
        try:
            return await strategy.scrape(target, ctx)
        except Exception as e:
            console.print(f"[red]  {strategy_kind.value} strategy crashed for {target.display_name}: {e}[/red]")
            return ScrapeAttemptResult(
                target=target,
                strategy_used=strategy_kind,
                success=False,
                source_url=target.base_url,
                elapsed_ms=ctx.elapsed_ms(started),
                error=f"{type(e).__name__}: {e}",
            )

    def _finish(self, result: ScrapeAttemptResult, states: list[TargetState]) -> ScrapeAttemptResult:
        states.append(TargetState.SUCCESS if result.success else TargetState.FAILED)
        return result.model_copy(update={"states": states})

    async def scrape_target(
        self,
        target: Target,
        ctx: ScrapeContext,
        method: ScrapeMethod = ScrapeMethod.HYBRID,
        fallback_threshold: Optional[int] = None,
    ) -> ScrapeAttemptResult:
        threshold = fallback_threshold if fallback_threshold is not None else ctx.settings.fallback_threshold
        states = [TargetState.PENDING]

        if method == ScrapeMethod.REMOTE:
            states.append(TargetState.TRYING_PRIMARY)
            return self._finish(await self._run(self.remote, Strategy.REMOTE, target, ctx), states)

        if method == ScrapeMethod.STEALTH:
            states.append(TargetState.TRYING_FALLBACK)
            return self._finish(await self._run(self.stealth, Strategy.STEALTH, target, ctx), states)

        if self.should_bypass_remote(target, ctx):
            console.print("[yellow]  Known difficult target, going straight to browser[/yellow]")
            states.append(TargetState.TRYING_FALLBACK)
            return self._finish(await self._run(self.stealth, Strategy.STEALTH, target, ctx), states)

        states.append(TargetState.TRYING_PRIMARY)
        primary = await self._run(self.remote, Strategy.REMOTE, target, ctx)
        found = len(primary.staff_records)
        if found >= threshold:
            return self._finish(primary, states)

        console.print(f"[yellow]  Remote found {found} coaches (< {threshold}), trying browser[/yellow]")
        states.append(TargetState.TRYING_FALLBACK)
        fallback = await self._run(self.stealth, Strategy.STEALTH, target, ctx)
        return self._finish(
            fallback.model_copy(update={"elapsed_ms": primary.elapsed_ms + fallback.elapsed_ms}),
            states,
        )
