"""
Miner Command Client.

Targeted operations against a single known device. Uses the longer command
timeout and, except for the status fetch, no path fallback.
"""
from typing import Any, Dict, Optional

import httpx
import structlog

from app.config import get_settings
from app.models.miner import SettingsUpdate
from app.services.errors import RestartFailedError, SettingsUpdateFailedError
from app.services.prober import (
    RESTART_PATH,
    SETTINGS_PATH,
    STATUS_PATHS,
    ClientConfig,
    EndpointProber,
    build_url,
)

logger = structlog.get_logger()

# Returned when a command succeeds but the device sends no usable body.
COMMAND_ACK: Dict[str, Any] = {"success": True}


def _body_or_ack(response: httpx.Response) -> Any:
    """Parsed JSON body, or the synthetic acknowledgment when there is none."""
    try:
        return response.json()
    except ValueError:
        return dict(COMMAND_ACK)


class MinerClient:
    """
    Async client for a miner's AxeOS HTTP API.

    Every call opens its own short-lived connection; there is no state shared
    between calls apart from the immutable ``ClientConfig``.
    """

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig.for_commands()
        self.prober = EndpointProber(self.config)

    async def _request(
        self,
        method: str,
        address: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        """Send one request; transport errors propagate as httpx exceptions."""
        async with self.config.build_client() as client:
            return await client.request(
                method=method,
                url=build_url(address, path),
                json=json_data
            )

    async def fetch_status(self, address: str) -> Any:
        """
        Get the full status payload of a miner.

        Tries each status path in order and returns the first JSON body
        unmodified.

        Raises:
            ConnectionExhaustedError: if no path answered with JSON
        """
        return await self.prober.fetch_json(address, STATUS_PATHS)

    async def restart(self, address: str) -> Any:
        """
        Restart a miner.

        Returns:
            The device's JSON reply, or ``{"success": True}`` when the device
            acknowledges with an empty or non-JSON body

        Raises:
            RestartFailedError: on non-success status or transport failure
        """
        try:
            response = await self._request("POST", address, RESTART_PATH)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Miner restart request error", ip=address, error=str(e))
            raise RestartFailedError(address, detail=str(e) or type(e).__name__)

        if not response.is_success:
            logger.warning(
                "Miner restart rejected",
                ip=address,
                status_code=response.status_code
            )
            raise RestartFailedError(
                address,
                status_code=response.status_code,
                detail=response.reason_phrase
            )

        logger.info("Miner restarted", ip=address)
        return _body_or_ack(response)

    async def update_settings(self, address: str, update: SettingsUpdate) -> Any:
        """
        Write frequency and core voltage to a miner.

        Returns:
            The device's JSON reply, or ``{"success": True}`` when the device
            acknowledges with an empty or non-JSON body

        Raises:
            SettingsUpdateFailedError: on non-success status (carrying the
                device's response text) or transport failure
        """
        payload = update.to_payload()
        try:
            response = await self._request("PATCH", address, SETTINGS_PATH, json_data=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Miner settings request error", ip=address, error=str(e))
            raise SettingsUpdateFailedError(address, body=str(e) or type(e).__name__)

        if not response.is_success:
            logger.warning(
                "Miner settings rejected",
                ip=address,
                status_code=response.status_code,
                body=response.text
            )
            raise SettingsUpdateFailedError(
                address,
                status_code=response.status_code,
                body=response.text
            )

        logger.info(
            "Miner settings updated",
            ip=address,
            frequency=update.frequency_mhz,
            core_voltage=update.core_voltage_mv
        )
        return _body_or_ack(response)


# Singleton instance
_miner_client: Optional[MinerClient] = None


def get_miner_client() -> MinerClient:
    """Get the singleton miner client instance, built from the cached settings."""
    global _miner_client
    if _miner_client is None:
        _miner_client = MinerClient(ClientConfig.for_commands(get_settings()))
    return _miner_client
