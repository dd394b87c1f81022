"""
Miner Discovery Service.

This module provides:
- Subnet scanning for AxeOS/ESP-Miner based devices (Bitaxe, NerdAxe, ...)
- Detection of the host's local /24 prefix for auto-scan

Scanning probes every address in ``{prefix}.{start}`` .. ``{prefix}.{end}``
concurrently with a short timeout. An address only counts when one of the
discovery paths answers with JSON; everything else is silently skipped, so a
scan never fails because a single host misbehaves.
"""
import asyncio
import re
import socket
from typing import List, Optional

import psutil
import structlog

from app.config import Settings, get_settings
from app.models.miner import DiscoveredMiner
from app.services.errors import (
    InvalidScanRangeError,
    MalformedSubnetError,
    NoLocalSubnetError,
)
from app.services.prober import DISCOVERY_PATHS, ClientConfig, EndpointProber

logger = structlog.get_logger()

_OCTET_RE = re.compile(r"[0-9]+")


def parse_subnet_prefix(subnet: str) -> str:
    """
    Validate a three-octet prefix such as ``192.168.1``.

    Returns:
        The prefix with each octet in canonical decimal form

    Raises:
        MalformedSubnetError: naming the offending octet
    """
    parts = subnet.split(".")
    if len(parts) != 3:
        raise MalformedSubnetError(subnet)

    octets = []
    for part in parts:
        if not _OCTET_RE.fullmatch(part) or int(part) > 255:
            raise MalformedSubnetError(subnet, part)
        octets.append(str(int(part)))
    return ".".join(octets)


class SubnetScanner:
    """
    Fans discovery probes out across a last-octet range.

    All probes share one HTTP client built from ``config``. In-flight probes
    are capped by ``max_concurrency`` (defaults to the client's connection
    limit); each address is still probed exactly once.
    """

    def __init__(
        self,
        config: ClientConfig,
        max_concurrency: Optional[int] = None
    ):
        self.config = config
        self.max_concurrency = max_concurrency or config.max_connections
        self.prober = EndpointProber(config)

    async def scan(
        self,
        subnet: str,
        start: int = 1,
        end: int = 254
    ) -> List[DiscoveredMiner]:
        """
        Scan ``{subnet}.{start}`` through ``{subnet}.{end}`` inclusive.

        Args:
            subnet: Three-octet prefix, e.g. "192.168.1"
            start: First last-octet value (0-255)
            end: Last last-octet value (0-255, >= start)

        Returns:
            Miners that answered, in address order. Empty when none did.

        Raises:
            MalformedSubnetError: bad prefix, raised before any network I/O
            InvalidScanRangeError: bad bounds, raised before any network I/O
        """
        prefix = parse_subnet_prefix(subnet)
        if not (0 <= start <= 255 and 0 <= end <= 255) or start > end:
            raise InvalidScanRangeError(start, end)

        addresses = [f"{prefix}.{i}" for i in range(start, end + 1)]
        logger.info(
            "Starting miner scan",
            subnet=prefix,
            start=start,
            end=end,
            timeout=self.config.timeout
        )

        semaphore = asyncio.Semaphore(self.max_concurrency or len(addresses))

        async with self.config.build_client() as client:
            async def probe_host(address: str) -> Optional[DiscoveredMiner]:
                async with semaphore:
                    return await self.prober.probe(address, DISCOVERY_PATHS, client=client)

            results = await asyncio.gather(
                *(probe_host(address) for address in addresses),
                return_exceptions=True
            )

        discovered = []
        for address, result in zip(addresses, results):
            if isinstance(result, DiscoveredMiner):
                logger.info(
                    "Miner discovered",
                    ip=address,
                    hostname=result.hostname,
                    model=result.model
                )
                discovered.append(result)
            elif isinstance(result, BaseException):
                logger.debug("Probe failed", ip=address, error=str(result))

        logger.info(
            "Scan complete",
            total_scanned=len(addresses),
            miners_found=len(discovered)
        )
        return discovered


def get_local_subnet() -> str:
    """
    Return the first three octets of the first usable local IPv4 address.

    Loopback (127.x) and link-local (169.254.x) addresses are skipped.

    Raises:
        NoLocalSubnetError: if no interface carries a usable address
    """
    for interface, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            octets = addr.address.split(".")
            if octets[0] == "127" or octets[:2] == ["169", "254"]:
                continue
            logger.debug("Local subnet detected", interface=interface, ip=addr.address)
            return ".".join(octets[:3])

    raise NoLocalSubnetError("No suitable network interface found")


def get_subnet_scanner(settings: Optional[Settings] = None) -> SubnetScanner:
    """Build a scanner with the configured scan timeout and concurrency."""
    settings = settings or get_settings()
    return SubnetScanner(
        ClientConfig.for_scanning(settings),
        max_concurrency=settings.scan_concurrency
    )
