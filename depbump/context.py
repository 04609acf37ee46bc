"""Per-call resolution state."""

from dataclasses import dataclass, field

import httpx

from .config import Settings
from .models import Property
from .registry_client import RegistryClient


@dataclass
class ResolutionContext:
    """Caches scoped to one top-level update call.

    A context is created by the orchestrator for every call and dropped with
    it; only the registry client may be shared between calls.
    """

    client: RegistryClient
    settings: Settings = field(default_factory=Settings)
    responses: dict[str, httpx.Response] = field(default_factory=dict)
    properties: dict[tuple, Property | None] = field(default_factory=dict)
    releases: dict[tuple[str, str], dict] = field(default_factory=dict)

    async def get(self, url: str, retry_limit: int | None = None) -> httpx.Response:
        """Fetch a URL once per context; later calls reuse the response."""
        if url not in self.responses:
            self.responses[url] = await self.client.get(url, retry_limit=retry_limit)
        return self.responses[url]
