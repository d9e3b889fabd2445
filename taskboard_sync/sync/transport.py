"""
HTTP transport to the spreadsheet backend.

The backend exchanges whole-sheet snapshots: a POST carries every table, a
GET returns every table. There are no row-level operations, no retries and
no auth header; the endpoint URL itself is the shared secret.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from ..codec import Table
from .errors import TransportError

logger = structlog.get_logger()


class BackendTransport:
    """Client for one spreadsheet endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the transport.

        Args:
            endpoint_url: Backend endpoint (script web app URL)
            timeout: Per-request timeout in seconds
            client: Pre-configured client, mainly for tests
        """
        self.endpoint_url = endpoint_url
        self._owns_client = client is None
        # Script endpoints answer with a redirect to the actual content
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self.logger = logger.bind(component="transport")

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def push(self, payload: Dict[str, Table]) -> None:
        """Send every table to the backend.

        The response body is not parsed; anything short of a transport error
        or an HTTP error status counts as success.

        Raises:
            TransportError: on network failure, an unusable endpoint URL or
                an HTTP error status
        """
        try:
            response = await self.client.post(self.endpoint_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Push rejected with HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Push failed: {e!r}") from e

        self.logger.debug(
            "push_sent",
            tables=len(payload),
            rows=sum(max(len(table) - 1, 0) for table in payload.values()),
        )

    async def pull(self) -> Dict[str, Any]:
        """Fetch every table from the backend.

        Returns:
            Mapping of sheet tab name to table. Tabs may be missing.

        Raises:
            TransportError: on network failure, an unusable endpoint URL, an
                HTTP error status or a body that is not a JSON object
        """
        try:
            response = await self.client.get(self.endpoint_url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Pull failed with HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Pull failed: {e!r}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError("Malformed response: body is not JSON") from e
        if not isinstance(data, dict):
            raise TransportError(
                f"Malformed response: expected an object, got {type(data).__name__}"
            )

        self.logger.debug("pull_received", tables=sorted(data))
        return data
