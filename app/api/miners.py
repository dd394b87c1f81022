"""
Miner API Routes.

Thin HTTP surface over the discovery and command layer, consumed by the
dashboard UI. Failures come back as ``{"error": ...}`` so the UI can tell an
unreachable device (504) from one that rejected the request (the device's
own 4xx/5xx status code).
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import structlog

from app.config import get_settings
from app.models.miner import DiscoveredMiner, SettingsUpdate
from app.services.errors import (
    ConnectionExhaustedError,
    InvalidScanRangeError,
    MalformedSubnetError,
    NoLocalSubnetError,
    RestartFailedError,
    SettingsUpdateFailedError,
)
from app.services.miner_client import get_miner_client
from app.services.miner_discovery import get_local_subnet, get_subnet_scanner

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Miners"])


class SubnetResponse(BaseModel):
    """Detected local subnet prefix."""
    subnet: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _device_error(status_code: Optional[int], message: str) -> JSONResponse:
    """Relay a 4xx/5xx from the device; anything else, or no reply at all, is 502."""
    if status_code is None or not 400 <= status_code <= 599:
        return _error(status.HTTP_502_BAD_GATEWAY, message)
    return _error(status_code, message)


# =========================================================================
# Single Device Endpoints
# =========================================================================

@router.get("/miner/{ip}", summary="Get full status of a miner")
async def get_miner_status(ip: str) -> Any:
    """Return the device's raw status JSON from the first path that answers."""
    try:
        return await get_miner_client().fetch_status(ip)
    except ConnectionExhaustedError as e:
        logger.warning("Miner status unavailable", ip=ip)
        return _error(
            status.HTTP_504_GATEWAY_TIMEOUT,
            f"{e}. The device may be offline or unresponsive."
        )


@router.post("/miner/{ip}/restart", summary="Restart a miner")
async def restart_miner(ip: str) -> Any:
    """Send the restart command to a miner."""
    try:
        data = await get_miner_client().restart(ip)
    except RestartFailedError as e:
        return _device_error(e.status_code, str(e))

    response = {"message": "Restart command sent successfully"}
    if isinstance(data, dict):
        response.update(data)
    return response


@router.patch("/miner/{ip}/settings", summary="Update miner frequency and core voltage")
async def update_miner_settings(ip: str, update: SettingsUpdate) -> Any:
    """
    Apply frequency (MHz) and core voltage (mV) to a miner.

    Both values are required.
    """
    try:
        return await get_miner_client().update_settings(ip, update)
    except SettingsUpdateFailedError as e:
        return _device_error(e.status_code, str(e))


# =========================================================================
# Discovery Endpoints
# =========================================================================

@router.get(
    "/scan",
    response_model=List[DiscoveredMiner],
    summary="Scan a subnet for miners"
)
async def scan_network(
    subnet: Optional[str] = Query(None, description="Three-octet prefix, e.g. 192.168.1"),
    start: Optional[int] = Query(None, description="First last-octet value"),
    end: Optional[int] = Query(None, description="Last last-octet value"),
):
    """
    Probe every address in the range and return the miners that answered.

    Without ``subnet`` the configured default is used, then the host's own
    local subnet.
    """
    settings = get_settings()
    start = settings.scan_start if start is None else start
    end = settings.scan_end if end is None else end

    try:
        prefix = subnet or settings.default_subnet or get_local_subnet()
        return await get_subnet_scanner(settings).scan(prefix, start, end)
    except (MalformedSubnetError, InvalidScanRangeError) as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except NoLocalSubnetError as e:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(e))


@router.get(
    "/network/subnet",
    response_model=SubnetResponse,
    summary="Detect the local subnet prefix"
)
async def local_subnet():
    """First non-loopback, non-link-local IPv4 prefix of this host."""
    try:
        return SubnetResponse(subnet=get_local_subnet())
    except NoLocalSubnetError as e:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(e))
