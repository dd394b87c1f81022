"""
Endpoint Prober.

Miners running different AxeOS/ESP-Miner firmware expose their system info
under different paths. The prober tries an ordered list of candidate paths
against one address and stops at the first success response with a JSON
body:

  GET /api/system/info    - current firmware
  GET /api/system         - older firmware
  GET /api/swarm/info     - swarm-capable builds (status fetch only)

Per-path failures (transport errors, timeouts, non-success status,
unparseable body) are misses, never errors. Only exhausting every path is
a failure, and whether that raises depends on the variant:

- ``fetch_json`` (raw status) raises ``ConnectionExhaustedError``
- ``probe`` (discovery) returns None, since an empty address is normal
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Sequence, Tuple

import httpx
import structlog

from app.config import Settings, get_settings
from app.models.miner import DiscoveredMiner
from app.services.errors import ConnectionExhaustedError

logger = structlog.get_logger()


# Newest/most specific path first; discovery uses the first two only.
STATUS_PATHS: Tuple[str, ...] = (
    "/api/system/info",
    "/api/system",
    "/api/swarm/info",
)
DISCOVERY_PATHS: Tuple[str, ...] = STATUS_PATHS[:2]
RESTART_PATH = "/api/system/restart"
SETTINGS_PATH = "/api/system"

_MISS = object()


@dataclass(frozen=True)
class ClientConfig:
    """
    HTTP client policy handed explicitly to each component.

    ``transport`` is only set by tests or embedding code that wants to route
    requests somewhere other than the network.
    """
    timeout: float
    max_connections: Optional[int] = None
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def for_scanning(cls, settings: Optional[Settings] = None) -> "ClientConfig":
        settings = settings or get_settings()
        return cls(
            timeout=settings.scan_timeout,
            max_connections=settings.scan_concurrency,
        )

    @classmethod
    def for_commands(cls, settings: Optional[Settings] = None) -> "ClientConfig":
        settings = settings or get_settings()
        return cls(timeout=settings.command_timeout)

    def build_client(self) -> httpx.AsyncClient:
        """Create an AsyncClient with this policy."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=0,
            ),
            headers={"Accept": "application/json"},
            transport=self.transport,
        )


def build_url(address: str, path: str) -> str:
    return f"http://{address}{path}"


class EndpointProber:
    """Tries candidate paths in order against a single address."""

    def __init__(self, config: ClientConfig):
        self.config = config

    @asynccontextmanager
    async def _session(
        self,
        client: Optional[httpx.AsyncClient]
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Use the caller's shared client, or open a private one for this call."""
        if client is not None:
            yield client
            return
        async with self.config.build_client() as own_client:
            yield own_client

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        address: str,
        path: str
    ) -> Any:
        """GET one path; return the parsed body or ``_MISS``."""
        url = build_url(address, path)
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Probe path unreachable", address=address, path=path, error=str(e))
            return _MISS

        if not response.is_success:
            logger.debug(
                "Probe path returned error status",
                address=address,
                path=path,
                status_code=response.status_code
            )
            return _MISS

        try:
            return response.json()
        except ValueError:
            logger.debug("Probe path returned non-JSON body", address=address, path=path)
            return _MISS

    async def _first_json(
        self,
        address: str,
        paths: Sequence[str],
        client: Optional[httpx.AsyncClient]
    ) -> Any:
        async with self._session(client) as session:
            for path in paths:
                data = await self._get_json(session, address, path)
                if data is not _MISS:
                    logger.debug("Probe path succeeded", address=address, path=path)
                    return data
        return _MISS

    async def fetch_json(
        self,
        address: str,
        paths: Sequence[str] = STATUS_PATHS,
        client: Optional[httpx.AsyncClient] = None
    ) -> Any:
        """
        Fetch the raw status JSON from the first path that answers.

        Args:
            address: Device IPv4 address (optionally ``host:port``)
            paths: Candidate paths in priority order
            client: Shared client; a private one is opened when omitted

        Returns:
            The parsed JSON body, unmodified

        Raises:
            ConnectionExhaustedError: if every path failed
        """
        data = await self._first_json(address, paths, client)
        if data is _MISS:
            raise ConnectionExhaustedError(address, paths)
        return data

    async def probe(
        self,
        address: str,
        paths: Sequence[str] = DISCOVERY_PATHS,
        client: Optional[httpx.AsyncClient] = None
    ) -> Optional[DiscoveredMiner]:
        """Return a normalized record for the device at ``address``, or None."""
        data = await self._first_json(address, paths, client)
        if data is _MISS:
            return None
        return DiscoveredMiner.from_payload(address, data)
