"""httpx async transport wrapper with retry, backoff, and rate-limit handling."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


class RetryingTransport(httpx.AsyncBaseTransport):
    """Retries transient failures of the wrapped transport.

    Connection-level errors and 502/503/504 answers are retried with
    exponential backoff plus jitter. A 429 pauses every request sharing this
    transport for the ``Retry-After`` interval before the retry. Once the
    budget of *max_retries* is spent the last response (or error) is returned
    to the caller unchanged.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries

        self._pause_lock = asyncio.Lock()
        self._pause_clear = asyncio.Event()
        self._pause_clear.set()
        self._pause_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            await self._pause_clear.wait()
            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError:
                if attempt >= self._max_retries:
                    raise
                await self._backoff(request, attempt)
                attempt += 1
                continue

            if response.status_code not in _RETRYABLE_STATUS_CODES or attempt >= self._max_retries:
                return response

            retry_after = self._retry_after(response)
            await response.aclose()
            if response.status_code == 429:
                await self._pause_all(retry_after)
            elif retry_after > 0:
                await asyncio.sleep(retry_after)
            await self._backoff(request, attempt)
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _pause_all(self, seconds: float) -> None:
        async with self._pause_lock:
            until = time.monotonic() + max(0.0, seconds)
            if until <= self._pause_until:
                return
            self._pause_until = until
            self._pause_clear.clear()

        await asyncio.sleep(max(0.0, self._pause_until - time.monotonic()))

        async with self._pause_lock:
            if time.monotonic() >= self._pause_until:
                self._pause_clear.set()

    @staticmethod
    def _retry_after(response: httpx.Response) -> float:
        raw = response.headers.get("Retry-After")
        if raw is None:
            return 0.0 if response.status_code != 429 else 1.0
        try:
            return max(0.0, float(raw))
        except ValueError:
            return 1.0

    @staticmethod
    async def _backoff(request: httpx.Request, attempt: int) -> None:
        seconds = min(4.0, float(2**attempt)) + random.uniform(0.0, 0.25)
        _LOG.warning("Retrying %s %s (attempt %d)", request.method, request.url.path, attempt + 1)
        await asyncio.sleep(seconds)
