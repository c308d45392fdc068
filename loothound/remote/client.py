"""Remote stash fetch over the provider's HTTP API."""

import asyncio
import json
import socket
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlparse
from urllib.request import Request, urlopen

import structlog

from ..config.defaults import RemoteParams
from ..data.parsers import Container, parse_containers
from ..errors import TransportError


class ContainerFetcher(ABC):
    """Fetches raw stash containers by id."""

    @abstractmethod
    async def fetch_containers(self, container_ids: Sequence[str],
                               league: Optional[str] = None) -> list[Container]:
        """
        Fetch the given stash tabs.

        Raises:
            TransportError: If any tab cannot be fetched or decoded
        """


class HttpContainerFetcher(ContainerFetcher):
    """Fetches stash tabs one request at a time from ``/stash/{league}/{id}``."""

    def __init__(self, config: Optional[RemoteParams] = None):
        self.config = config or RemoteParams()
        self.logger = structlog.get_logger("loothound.remote")

        parsed = urlparse(self.config.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise TransportError(f"Invalid URL: {self.config.base_url}", url=self.config.base_url)

    def stash_url(self, stash_id: str, league: Optional[str] = None) -> str:
        league = league or self.config.league
        return "{}/stash/{}/{}".format(
            self.config.base_url.rstrip("/"),
            quote(league, safe=""),
            quote(stash_id, safe=""),
        )

    async def fetch_containers(self, container_ids: Sequence[str],
                               league: Optional[str] = None) -> list[Container]:
        payloads = []

        for stash_id in container_ids:
            payload = await asyncio.to_thread(self._get_json, self.stash_url(stash_id, league))
            payloads.append(self._unwrap_stash(stash_id, payload))

        # Stash bodies without an id cannot be attached and are skipped
        containers = parse_containers(payloads)
        self.logger.info("Fetched stashes", count=len(containers), requested=len(payloads))
        return containers

    def _unwrap_stash(self, stash_id: str, payload: Any) -> Any:
        if not isinstance(payload, dict) or "stash" not in payload:
            raise TransportError(
                f"Unreadable stash {stash_id}: response has no stash body",
                context={"stash_id": stash_id}
            )
        return payload["stash"]

    def _get_json(self, url: str) -> Any:
        """Issue a GET request and decode the JSON body."""
        headers = {
            'Accept': 'application/json',
            'User-Agent': self.config.user_agent
        }

        if self.config.headers:
            headers.update(self.config.headers)

        req = Request(url, headers=headers, method='GET')

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                response_code = response.getcode()
                body = response.read().decode('utf-8')

        except HTTPError as e:
            self.logger.warning(
                "Stash fetch HTTP error",
                url=url,
                error_code=e.code,
                error_reason=e.reason
            )
            raise TransportError(f"HTTP {e.code}: {e.reason}", url=url, status_code=e.code) from e

        except (OSError, URLError, socket.timeout) as e:
            self.logger.warning("Stash fetch network error", url=url, error=str(e))
            raise TransportError(f"Network error: {e}", url=url) from e

        if not 200 <= response_code < 300:
            raise TransportError(f"HTTP {response_code}: {body[:200]}", url=url, status_code=response_code)

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise TransportError(f"Invalid JSON from provider: {e}", url=url) from e
