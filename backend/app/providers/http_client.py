"""
backend/app/providers/http_client.py

Purpose:
    Shared async transport for upstream football APIs: retries 429/5xx and
    transient network errors with capped exponential backoff (honouring
    Retry-After), and stops calling an upstream that keeps failing via a
    per-client circuit breaker.

Dependencies:
    - httpx
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable
from urllib.parse import urlparse

import httpx

logger = logging.getLogger("footdata.http_client")

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
MAX_RETRY_DELAY_SECONDS = 60.0

_NETWORK_ERRORS = (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)


class CircuitOpenError(httpx.HTTPError):
    """Raised instead of calling upstream while the circuit breaker is open."""


class CircuitBreaker:
    """Counts consecutive failed requests; opens after ``failure_threshold``.

    An open breaker lets a single trial request through once ``recovery_timeout``
    seconds have passed since the last failure (half-open). A successful
    trial request closes it again.
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        recovery_timeout: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock
        self.failure_count = 0
        self.last_failure_time: float | None = None

    @property
    def is_open(self) -> bool:
        return self.failure_count >= self.failure_threshold

    @property
    def state(self) -> str:
        if not self.is_open:
            return "closed"
        return "half_open" if self._recovery_elapsed() else "open"

    def _recovery_elapsed(self) -> bool:
        if self.last_failure_time is None:
            return True
        return self._clock() - self.last_failure_time >= self.recovery_timeout

    def record_success(self) -> None:
        if self.is_open:
            logger.info("Circuit breaker closed after successful trial request")
        self.failure_count = 0
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = self._clock()
        if self.failure_count == self.failure_threshold:
            logger.warning("Circuit breaker OPEN after %d failed requests", self.failure_count)

    def can_attempt(self) -> bool:
        return self.state != "open"


def _retry_after(response: httpx.Response) -> float | None:
    for header in ("retry-after", "x-ratelimit-retry-after"):
        value = response.headers.get(header)
        if value is None:
            continue
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            continue
    return None


def _safe_url(url: str) -> str:
    """URL without its query string, for logs."""
    parsed = urlparse(str(url))
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


class ResilientClient:
    """httpx.AsyncClient wrapper with retry, backoff and a circuit breaker.

    Exhausted retries on a retryable status return the last response so the
    caller can map the status; exhausted network retries re-raise the last
    httpx error.
    """

    def __init__(
        self,
        name: str,
        timeout: float = 15.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
        circuit: CircuitBreaker | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._name = name
        self._max_retries = max_retries
        self._base_delay = base_delay
        self.circuit = circuit or CircuitBreaker()

    def _retry_delay(self, attempt: int, response: httpx.Response | None = None) -> float:
        """Retry-After when the upstream sent one, else base * 2**attempt; capped."""
        delay = _retry_after(response) if response is not None else None
        if delay is None:
            delay = self._base_delay * (2 ** attempt)
        return min(delay, MAX_RETRY_DELAY_SECONDS)

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        target = f"{method} {_safe_url(url)}"
        if not self.circuit.can_attempt():
            raise CircuitOpenError(f"[{self._name}] circuit open, refusing {target}")

        attempts = self._max_retries + 1
        last_error: httpx.HTTPError | None = None
        last_response: httpx.Response | None = None

        for attempt in range(attempts):
            try:
                response = await self._client.request(method, url, **kwargs)
            except _NETWORK_ERRORS as exc:
                last_error, last_response = exc, None
                logger.warning(
                    "[%s] Network error on %s (attempt %d/%d): %s",
                    self._name, target, attempt + 1, attempts, exc,
                )
            else:
                if response.status_code not in RETRYABLE_STATUSES:
                    self.circuit.record_success()
                    return response
                last_error, last_response = None, response
                logger.warning(
                    "[%s] %s on %s (attempt %d/%d)",
                    self._name,
                    "Rate limited (429)" if response.status_code == 429 else f"Server error {response.status_code}",
                    target, attempt + 1, attempts,
                )

            if attempt < self._max_retries:
                await asyncio.sleep(self._retry_delay(attempt, last_response))

        self.circuit.record_failure()
        if last_response is not None:
            logger.error(
                "[%s] All %d attempts failed for %s (last status: %d)",
                self._name, attempts, target, last_response.status_code,
            )
            return last_response

        logger.error("[%s] All %d attempts failed for %s: %s", self._name, attempts, target, last_error)
        raise last_error  # type: ignore[misc]

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
