"""HTTP access to package registries."""

import logging

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


class RegistryClient:
    """Thin wrapper over ``httpx.AsyncClient`` with a bounded retry."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize registry client.

        Args:
            settings: Timeouts, retry and redirect limits
            client: Shared async client; one is created (and owned) if omitted
        """
        self.settings = settings or Settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                self.settings.read_timeout,
                connect=self.settings.connect_timeout,
            ),
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
        )

    async def get(self, url: str, retry_limit: int | None = None) -> httpx.Response:
        """Fetch a URL, retrying only on transport failures.

        Args:
            url: Absolute URL to fetch
            retry_limit: Retries after the first attempt (defaults to settings)

        Returns:
            The response, whatever its status

        Raises:
            httpx.TransportError: When every attempt failed at transport level
            httpx.TooManyRedirects: When the redirect limit was exceeded
            httpx.InvalidURL: When the URL cannot be requested
        """
        if retry_limit is None:
            retry_limit = self.settings.retry_limit

        attempt = 0
        while True:
            try:
                return await self._client.get(url)
            except httpx.TransportError as e:
                if attempt >= retry_limit:
                    raise
                attempt += 1
                logger.debug("Retrying %s after %s (attempt %d)", url, e, attempt)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
