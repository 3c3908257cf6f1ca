# ABOUTME: JSON-over-HTTP transport for enrichment lookups, built on httpx.
# ABOUTME: Spaces out requests, backs off on 429/5xx (honouring Retry-After), and takes a test transport.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

from shelfwise.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})
_USER_AGENT = "shelfwise/0.1.0"
# Upper bound on a server-requested Retry-After pause, in seconds.
_MAX_RETRY_AFTER = 60.0


@runtime_checkable
class HttpClient(Protocol):
    """Anything an enrichment source can fetch JSON documents through."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class ShelfwiseHttpClient:
    """Polite JSON fetcher for Open Library.

    Requests are spaced at least ``min_request_interval`` seconds apart.
    Transient answers are retried up to ``max_retries`` times, waiting
    ``retry_delay * 2**n`` seconds unless the server sends Retry-After.
    Every failure surfaces as ExternalServiceError.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        options: dict[str, Any] = {
            "headers": {"User-Agent": _USER_AGENT, "Accept": "application/json"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            options["transport"] = transport
        self._client = httpx.Client(**options)
        self._spacing = min_request_interval
        self._max_retries = max_retries
        self._base_delay = retry_delay
        self._previous_send = 0.0

    def __enter__(self) -> "ShelfwiseHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Fetch ``url`` and decode its JSON body.

        Raises:
            ExternalServiceError: Connection problems, a permanent error
                status, an undecodable body, or a transient status that
                outlasted every retry.
        """
        retries_left = self._max_retries
        backoff_step = 0
        while True:
            response = self._send(url, params)
            if response.status_code == 200:
                return self._decode(url, response)
            if response.status_code not in _TRANSIENT_STATUSES:
                raise ExternalServiceError(f"HTTP {response.status_code} from {url}")
            if retries_left == 0:
                raise ExternalServiceError(
                    f"HTTP {response.status_code} from {url} "
                    f"after {self._max_retries + 1} attempts"
                )

            pause = self._pause_before_retry(response, backoff_step)
            logger.warning(
                "%s answered %d; retry %d of %d in %.1fs",
                url,
                response.status_code,
                backoff_step + 1,
                self._max_retries,
                pause,
            )
            time.sleep(pause)
            retries_left -= 1
            backoff_step += 1

    def _send(self, url: str, params: dict[str, str] | None) -> httpx.Response:
        self._respect_spacing()
        try:
            return self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise ExternalServiceError(f"Request failed: {url}: {exc}") from exc

    @staticmethod
    def _decode(url: str, response: httpx.Response) -> dict[str, Any]:
        try:
            return response.json()
        except ValueError as exc:
            raise ExternalServiceError(f"Invalid JSON from {url}") from exc

    def _pause_before_retry(self, response: httpx.Response, step: int) -> float:
        retry_after = response.headers.get("Retry-After", "").strip()
        if retry_after.isdigit():
            return min(float(retry_after), _MAX_RETRY_AFTER)
        return self._base_delay * (2**step)

    def _respect_spacing(self) -> None:
        if self._spacing > 0 and self._previous_send:
            wait = self._previous_send + self._spacing - time.monotonic()
            if wait > 0:
                time.sleep(wait)
        self._previous_send = time.monotonic()
