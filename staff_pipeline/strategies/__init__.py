"""Acquisition strategies and the hybrid orchestrator."""

from staff_pipeline.strategies.base import ScrapeContext, ScrapeStrategy
from staff_pipeline.strategies.browser import PlaywrightBrowser
from staff_pipeline.strategies.firecrawl import RemoteExtractionClient, RemoteScrapeResponse
from staff_pipeline.strategies.hybrid import HybridOrchestrator
from staff_pipeline.strategies.remote import RemoteExtractionStrategy
from staff_pipeline.strategies.stealth import StealthBrowserStrategy, staff_url_candidates
from staff_pipeline.strategies.timing import DelayPolicy, HumanDelay, NoDelay

__all__ = [
    "DelayPolicy",
    "HumanDelay",
    "NoDelay",
    "ScrapeContext",
    "ScrapeStrategy",
    "PlaywrightBrowser",
    "RemoteExtractionClient",
    "RemoteScrapeResponse",
    "HybridOrchestrator",
    "RemoteExtractionStrategy",
    "StealthBrowserStrategy",
    "staff_url_candidates",
]
