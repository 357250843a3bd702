"""HTTP client for the HFS server.

Provides retry logic for RPC calls, a single-shot streaming upload, and a
server-sent events reader for the notification channel.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import httpx

from hfsupload.core.exceptions import (
    NetworkError,
    PermissionDeniedError,
    ResourceNotFoundError,
    RetryExhaustedError,
    ServerUnreachableError,
)
from hfsupload.core.validation import validate_server_url

# =============================================================================
# Constants
# =============================================================================

API_PREFIX = "/~/api/"
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2
RETRYABLE_STATUS_CODES = {502, 503, 504}


# =============================================================================
# HFSClient
# =============================================================================


@dataclass
class HFSClient:
    """HTTP client for an HFS server with retry for API calls."""

    base_url: str
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    verify_ssl: bool = True
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> HFSClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> httpx.Response:
        """Execute HTTP request with retry logic.

        Args:
            method: HTTP method.
            path: Server path.
            params: Query parameters.
            json: JSON body.
            headers: Additional headers.
            timeout: Request timeout override.

        Returns:
            HTTP response.

        Raises:
            PermissionDeniedError: On 401/403.
            ResourceNotFoundError: On 404.
            httpx.HTTPStatusError: On other non-retryable error statuses.
            RetryExhaustedError: If all retries fail.
        """
        client = self._get_client()
        request_timeout = timeout or self.timeout
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                resp = client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=headers,
                    timeout=request_timeout,
                )

                if resp.status_code in (401, 403):
                    raise PermissionDeniedError(path, method.lower())

                if resp.status_code == 404:
                    raise ResourceNotFoundError("path", path)

                if resp.status_code in RETRYABLE_STATUS_CODES:
                    last_error = NetworkError(self.base_url, f"HTTP {resp.status_code}")
                    if attempt < self.max_retries:
                        time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))
                        continue

                resp.raise_for_status()
                return resp

            except httpx.ConnectError:
                last_error = ServerUnreachableError(self.base_url)
            except httpx.TimeoutException:
                last_error = NetworkError(self.base_url, f"Timeout after {request_timeout}s")

            if attempt < self.max_retries:
                time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))

        raise RetryExhaustedError(f"{method} {path}", self.max_retries + 1, last_error)

    def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: int | None = None,
    ) -> httpx.Response:
        """GET request."""
        return self._request("GET", path, params=params, timeout=timeout)

    def post(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        timeout: int | None = None,
    ) -> httpx.Response:
        """POST request."""
        return self._request("POST", path, params=params, json=json, timeout=timeout)

    def api_call(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Invoke a server API method and return its decoded JSON result.

        Args:
            name: API method name, e.g. ``create_folder``.
            params: Method parameters, sent as a JSON object.
        """
        resp = self.post(API_PREFIX + name, json=dict(params or {}))
        if not resp.content:
            return None
        return resp.json()

    # =========================================================================
    # Transfer Primitives
    # =========================================================================

    def upload(
        self,
        path: str,
        *,
        params: dict[str, Any],
        content: Iterable[bytes],
        headers: dict[str, str],
    ) -> int:
        """Send one streaming POST and return the response status code.

        Never retried: the body is a one-shot iterator and a resumed upload is
        negotiated with the server instead.
        """
        client = self._get_client()
        timeout = httpx.Timeout(self.timeout, read=None, write=None)
        resp = client.post(path, params=params, content=content, headers=headers, timeout=timeout)
        return resp.status_code

    @contextmanager
    def stream_events(self, path: str, *, params: dict[str, Any]) -> Iterator[httpx.Response]:
        """Open a ``text/event-stream`` response with no read timeout.

        Raises:
            httpx.HTTPStatusError: If the server refuses the subscription.
        """
        client = self._get_client()
        timeout = httpx.Timeout(self.timeout, read=None)
        headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        with client.stream("GET", path, params=params, headers=headers, timeout=timeout) as resp:
            resp.raise_for_status()
            yield resp

    def ping(self) -> dict[str, Any]:
        """Check server connectivity.

        Returns:
            Dict with server info.
        """
        start = time.time()
        resp = self.get("/")
        latency = int((time.time() - start) * 1000)

        return {
            "url": self.base_url,
            "status": "ok",
            "server": resp.headers.get("server", "-"),
            "latency_ms": latency,
        }
