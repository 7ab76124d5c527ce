"""HTTP transport for upstream LLM calls."""

import logging
import httpx
from typing import Any, Callable, Optional

from ..models import ProviderRequest
from .errors import UpstreamError

logger = logging.getLogger(__name__)


class LLMClient:
    """Asynchronous client that POSTs prebuilt provider requests.

    Exactly one HTTP call per ``send``; no retries. Every failure mode
    (non-2xx status, timeout, network error, non-JSON body) comes back as
    ``UpstreamError``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def send(
        self,
        provider: str,
        request: ProviderRequest,
        is_transient: Callable[[int], bool] = lambda status: True,
    ) -> dict[str, Any]:
        """Send a provider request and return the decoded JSON body.

        Args:
            provider: Provider name, for error reporting
            request: Prebuilt url/headers/body
            is_transient: Adapter hook classifying HTTP statuses

        Raises:
            UpstreamError: On any transport, status or decoding failure
        """
        client = await self._get_client()
        logger.debug(f"POST {request.url} ({provider})")

        try:
            response = await client.post(request.url, headers=request.headers, json=request.body)
        except httpx.TimeoutException as e:
            raise UpstreamError(provider, f"{provider} request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(provider, f"{provider} request failed: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                provider,
                f"{provider} API error: {response.status_code}",
                status=response.status_code,
                transient=is_transient(response.status_code),
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(provider, f"{provider} returned a non-JSON body", transient=False) from e

        if not isinstance(data, dict):
            raise UpstreamError(provider, f"{provider} returned an unexpected body", transient=False)
        return data

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
