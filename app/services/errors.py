"""
Errors raised by the miner discovery and command layer.

Each error's message is meant to be shown to an operator as-is.
"""
from typing import Optional, Sequence


class MinerAPIError(Exception):
    """Base exception for miner API errors."""
    pass


class MalformedSubnetError(MinerAPIError, ValueError):
    """Subnet prefix is not three dot-separated 8-bit octets."""

    def __init__(self, subnet: str, octet: Optional[str] = None):
        self.subnet = subnet
        self.octet = octet
        if octet is None:
            message = "Invalid subnet format. Expected format: 192.168.1"
        else:
            message = f"Invalid subnet octet: {octet}"
        super().__init__(message)


class InvalidScanRangeError(MinerAPIError, ValueError):
    """Last-octet bounds are outside 0-255 or reversed."""

    def __init__(self, start: int, end: int):
        self.start = start
        self.end = end
        super().__init__(
            f"Invalid scan range {start}-{end}: bounds must be within 0-255 and start <= end"
        )


class ConnectionExhaustedError(MinerAPIError):
    """Every candidate path failed or the device was unreachable."""

    def __init__(self, address: str, paths: Sequence[str] = ()):
        self.address = address
        self.paths = tuple(paths)
        super().__init__(f"Failed to connect to miner at {address}")


class RestartFailedError(MinerAPIError):
    """Device rejected the restart or could not be reached."""

    def __init__(
        self,
        address: str,
        status_code: Optional[int] = None,
        detail: str = ""
    ):
        self.address = address
        self.status_code = status_code
        self.detail = detail
        if status_code is not None:
            message = f"Miner restart failed with status: {status_code} {detail}".rstrip()
        else:
            message = f"Miner restart failed: {detail}"
        super().__init__(message)


class SettingsUpdateFailedError(MinerAPIError):
    """
    Device rejected the settings PATCH or could not be reached.

    ``body`` carries the device's response text so misconfiguration
    diagnostics reach the operator.
    """

    def __init__(
        self,
        address: str,
        status_code: Optional[int] = None,
        body: str = ""
    ):
        self.address = address
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"Failed to update settings ({status_code}): {body}"
        else:
            message = f"Failed to update settings: {body}"
        super().__init__(message)


class NoLocalSubnetError(MinerAPIError):
    """No non-loopback, non-link-local IPv4 interface was found."""
    pass
