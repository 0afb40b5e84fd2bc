"""Two-tier backend resolution for the mobile data-access layer.

``BackendChain`` is the only place that decides which backend answers a
request. Tiers are tried in declared order; a transport error, a timeout or a
5xx moves on to the next tier, while any 2xx/3xx/4xx response is final.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error envelope returned by the API (maps back to the server taxonomy)."""

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"{status_code} {code}: {message}")


class BackendUnavailable(Exception):
    """Every tier failed; ``attempts`` lists ``(backend name, reason)`` in order."""

    def __init__(self, attempts: list[tuple[str, str]]):
        self.attempts = attempts
        summary = "; ".join(f"{name}: {reason}" for name, reason in attempts)
        super().__init__(f"No backend available ({summary})")


@dataclass(frozen=True)
class Backend:
    name: str
    base_url: str


class BackendChain:
    def __init__(
        self,
        backends: Sequence[Backend],
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not backends:
            raise ValueError("BackendChain needs at least one backend")
        self.backends = list(backends)
        self._clients = [
            httpx.AsyncClient(base_url=b.base_url, timeout=timeout, transport=transport)
            for b in self.backends
        ]

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        attempts: list[tuple[str, str]] = []
        for backend, client in zip(self.backends, self._clients):
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TransportError as exc:
                reason = f"{type(exc).__name__}: {exc}"
                attempts.append((backend.name, reason))
                logger.warning("%s %s via %s failed (%s); trying next backend", method, path, backend.name, reason)
                continue
            if response.status_code >= 500:
                attempts.append((backend.name, f"HTTP {response.status_code}"))
                logger.warning(
                    "%s %s via %s returned %d; trying next backend",
                    method, path, backend.name, response.status_code,
                )
                continue
            if attempts:
                logger.info("%s %s served by fallback backend %s", method, path, backend.name)
            return response
        raise BackendUnavailable(attempts)

    async def aclose(self) -> None:
        for client in self._clients:
            await client.aclose()
