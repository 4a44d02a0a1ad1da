"""HTTP health probe for the local n8n service."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from n8n_bootstrap.contracts.exceptions import HealthCheckError

logger = logging.getLogger(__name__)


class HealthProbe:
    """Tries each endpoint in order and reports the first successful answer."""

    def __init__(self, client: httpx.AsyncClient, endpoints: Sequence[str], *, timeout: float = 5.0) -> None:
        self._client = client
        self._endpoints = tuple(endpoints)
        self._timeout = timeout

    async def check(self) -> str:
        for endpoint in self._endpoints:
            try:
                response = await self._client.get(endpoint, timeout=self._timeout)
            except httpx.HTTPError as exc:
                logger.debug("Health endpoint %s unreachable: %s", endpoint, exc)
                continue
            if response.is_success:
                return f"healthy - {response.status_code} {response.reason_phrase}".rstrip()
            logger.debug("Health endpoint %s answered HTTP %d", endpoint, response.status_code)
        raise HealthCheckError("n8n service did not respond")
