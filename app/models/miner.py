"""
Pydantic models for AxeOS-style miner HTTP API payloads.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def _string_field(payload: Any, *keys: str) -> Optional[str]:
    """Return the first present key's value if it is a string."""
    if not isinstance(payload, dict):
        return None
    for key in keys:
        if key in payload:
            value = payload[key]
            return value if isinstance(value, str) else None
    return None


class DiscoveredMiner(BaseModel):
    """
    A device that answered at least one discovery probe.

    Built fresh for every scan and never mutated afterwards.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str = Field(..., description="Dotted IPv4 address of the device")
    hostname: Optional[str] = None
    firmware_version: Optional[str] = Field(None, alias="firmwareVersion")
    model: Optional[str] = None

    @classmethod
    def from_payload(cls, address: str, payload: Any) -> "DiscoveredMiner":
        """
        Normalize a device's system-info JSON.

        ``version`` wins over ``axeOSVersion`` when both keys exist. Missing or
        non-string values are left as None.
        """
        return cls(
            address=address,
            hostname=_string_field(payload, "hostname"),
            firmware_version=_string_field(payload, "version", "axeOSVersion"),
            model=_string_field(payload, "ASICModel"),
        )


class SettingsUpdate(BaseModel):
    """
    Tunable settings written to a device in a single PATCH.

    Both fields are required; partial updates are not supported.
    """
    model_config = ConfigDict(populate_by_name=True)

    frequency_mhz: int = Field(..., ge=0, alias="frequency")
    core_voltage_mv: int = Field(..., ge=0, alias="coreVoltage")

    def to_payload(self) -> Dict[str, int]:
        """Body sent to the device."""
        return self.model_dump(by_alias=True)
