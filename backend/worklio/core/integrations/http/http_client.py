"""
Generic async HTTP client wrapper using aiohttp.
"""

from typing import Optional, Dict, Any
import aiohttp
import logging

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Async HTTP client wrapper using aiohttp.
    One attempt per call; callers decide what a failure means.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: int = 30):
        """
        Initialize HTTP client.

        Args:
            base_url: Optional base URL for all requests
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint."""
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        return endpoint

    async def get_json(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Make GET request and decode the JSON body.

        Raises:
            aiohttp.ClientError: transport failure or status >= 400
            asyncio.TimeoutError: request exceeded the configured timeout
            ValueError: body is not valid JSON
        """
        url = self._build_url(endpoint)
        session = await self._get_session()
        logger.debug(f"GET {url}", extra={"params": params})
        async with session.get(url, params=params, headers=headers) as response:
            response.raise_for_status()
            # Body must be read before the connection is released
            return await response.json(content_type=None)
