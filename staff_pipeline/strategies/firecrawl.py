"""Client for the remote content-extraction API (Firecrawl v0 compatible)."""

from typing import Any, Optional

import httpx
from pydantic import BaseModel
from rich.console import Console

from staff_pipeline.config import Settings
from staff_pipeline.strategies.timing import DelayPolicy, HumanDelay

console = Console()

# Responses that will not get better on retry
PERMANENT_STATUSES = {401, 403, 404, 410}

COACH_EXTRACTION_PROMPT = """
Extract COACHING STAFF ONLY from this athletic website.

INCLUDE ONLY:
- Head Coaches
- Assistant Coaches
- Associate Head Coaches
- Recruiting Coordinators
- Volunteer Coaches
- Graduate Assistant Coaches

EXCLUDE ALL:
- Faculty members
- Academic advisors
- Professors
- Administrators (unless they're also coaches)
- Support staff (trainers, managers, etc.)
- Academic coordinators

For each COACH, extract:
- Full name
- Exact title (Head Coach, Assistant Coach, etc.)
- Sport/team they coach
- Email address
- Phone number
- Brief bio/background
- Photo URL if available
- Whether they handle recruiting

Return as structured JSON with high confidence scores for coaching staff only.
"""

COACH_EXTRACTION_SCHEMA = {
    "type": "object",
    "properties": {
        "coaches": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "title": {"type": "string"},
                    "sport": {"type": "string"},
                    "email": {"type": "string"},
                    "phone": {"type": "string"},
                    "bio": {"type": "string"},
                    "photo_url": {"type": "string"},
                    "recruiting_coordinator": {"type": "boolean"},
                    "confidence": {"type": "number"},
                },
                "required": ["name", "title"],
            },
        },
    },
}


class RemoteScrapeResponse(BaseModel):
    """One page as returned by the remote API."""

    success: bool
    url: str
    content: str = ""
    title: Optional[str] = None
    source_url: Optional[str] = None
    extracted: list[dict] = []
    error: Optional[str] = None
    status: Optional[int] = None


def _structured_entries(llm_extraction: Any) -> list[dict]:
    if isinstance(llm_extraction, list):
        return [e for e in llm_extraction if isinstance(e, dict)]
    if isinstance(llm_extraction, dict):
        for key in ("coaches", "staff", "people"):
            if isinstance(llm_extraction.get(key), list):
                return [e for e in llm_extraction[key] if isinstance(e, dict)]
    return []


class RemoteExtractionClient:
    """Thin async wrapper around `POST {base}/scrape`."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.firecrawl.dev/v0",
        timeout: float = 60.0,
        retries: int = 2,
        backoff_base_ms: float = 1000,
        jitter_ratio: float = 0.0,
        delay: Optional[DelayPolicy] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ValueError("FIRECRAWL_API_KEY environment variable not set")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self.backoff_base_ms = backoff_base_ms
        self.jitter_ratio = jitter_ratio
        self.delay = delay or HumanDelay()
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10.0),
            limits=httpx.Limits(max_connections=5, max_keepalive_connections=5),
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RemoteExtractionClient":
        kwargs.setdefault("jitter_ratio", settings.jitter_ratio)
        return cls(
            settings.remote_api_key,
            base_url=settings.remote_api_url,
            timeout=settings.remote_timeout,
            retries=settings.remote_retries,
            **kwargs,
        )

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()

    def _payload(self, url: str, wait_for: int, llm_extraction: bool) -> dict:
        payload = {
            "url": url,
            "formats": ["markdown"],
            "onlyMainContent": True,
            "waitFor": wait_for,
        }
        if llm_extraction:
            payload["extractorOptions"] = {
                "mode": "llm-extraction",
                "extractionPrompt": COACH_EXTRACTION_PROMPT.strip(),
                "extractionSchema": COACH_EXTRACTION_SCHEMA,
            }
        return payload

    async def scrape(
        self,
        url: str,
        wait_for: int = 0,
        llm_extraction: bool = False,
    ) -> RemoteScrapeResponse:
        """Scrape one URL. Never raises for HTTP or transport failures."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = self._payload(url, wait_for, llm_extraction)

        last_error = None
        last_status = None
        for attempt in range(self.retries + 1):
            try:
                response = await self._client.post(f"{self.base_url}/scrape", json=payload, headers=headers)
                last_status = response.status_code
                if response.status_code >= 400:
                    last_error = f"HTTP {response.status_code}: {response.reason_phrase}"
                    if response.status_code in PERMANENT_STATUSES:
                        break
                else:
                    return self._parse(url, response.json(), response.status_code)
            except httpx.TimeoutException:
                last_error = "timeout"
            except httpx.TransportError as e:
                last_error = f"connection: {e}"
            except ValueError as e:
                # Unparsable body: the API answered, retrying will not help
                last_error = f"invalid response: {e}"
                break

            if attempt < self.retries:
                console.print(f"[dim]Attempt {attempt+1}: {last_error} for {url}, retrying...[/dim]")
                await self.delay.delay(self.backoff_base_ms * (2 ** attempt), self.jitter_ratio)

        return RemoteScrapeResponse(success=False, url=url, error=last_error, status=last_status)

    def _parse(self, url: str, body: Any, status: int) -> RemoteScrapeResponse:
        if not isinstance(body, dict):
            return RemoteScrapeResponse(success=False, url=url, error="invalid response body", status=status)
        if body.get("success") is False:
            return RemoteScrapeResponse(
                success=False, url=url, error=body.get("error") or "remote scrape failed", status=status
            )

        data = body.get("data") or {}
        metadata = data.get("metadata") or {}
        return RemoteScrapeResponse(
            success=True,
            url=url,
            content=data.get("markdown") or data.get("content") or "",
            title=metadata.get("title") or None,
            source_url=metadata.get("sourceURL") or url,
            extracted=_structured_entries(data.get("llm_extraction")),
            status=status,
        )
