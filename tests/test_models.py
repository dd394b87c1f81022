"""
Tests for miner payload models.
"""
import pytest
from pydantic import ValidationError

from app.models.miner import DiscoveredMiner, SettingsUpdate


class TestDiscoveredMiner:
    """Tests for normalization of system-info JSON."""

    def test_falls_back_to_axeos_version(self):
        """Without a ``version`` key, ``axeOSVersion`` is used."""
        miner = DiscoveredMiner.from_payload(
            "192.168.1.20",
            {"hostname": "miner1", "axeOSVersion": "2.1", "ASICModel": "BM1397"}
        )

        assert miner.address == "192.168.1.20"
        assert miner.hostname == "miner1"
        assert miner.firmware_version == "2.1"
        assert miner.model == "BM1397"

    def test_version_wins_over_axeos_version(self):
        miner = DiscoveredMiner.from_payload(
            "192.168.1.20",
            {"version": "v2.4.0", "axeOSVersion": "2.1"}
        )

        assert miner.firmware_version == "v2.4.0"

    def test_wrong_types_are_absent(self):
        """Non-string values become None, never coerced or defaulted."""
        miner = DiscoveredMiner.from_payload(
            "192.168.1.20",
            {"hostname": 42, "version": None, "axeOSVersion": "2.1", "ASICModel": ["BM1397"]}
        )

        assert miner.hostname is None
        assert miner.firmware_version is None
        assert miner.model is None

    def test_non_object_payload(self):
        miner = DiscoveredMiner.from_payload("192.168.1.20", [1, 2, 3])

        assert miner == DiscoveredMiner(address="192.168.1.20")

    def test_frozen(self):
        miner = DiscoveredMiner(address="192.168.1.20")

        with pytest.raises(ValidationError):
            miner.hostname = "renamed"

    def test_serializes_with_camel_case(self):
        miner = DiscoveredMiner(address="10.0.0.1", firmware_version="2.1")

        assert miner.model_dump(by_alias=True) == {
            "address": "10.0.0.1",
            "hostname": None,
            "firmwareVersion": "2.1",
            "model": None,
        }


class TestSettingsUpdate:
    """Tests for the settings PATCH payload."""

    def test_payload_keys(self):
        update = SettingsUpdate(frequency=525, coreVoltage=1150)

        assert update.to_payload() == {"frequency": 525, "coreVoltage": 1150}

    def test_both_fields_required(self):
        with pytest.raises(ValidationError):
            SettingsUpdate(frequency=525)

    def test_rejects_negative(self):
        with pytest.raises(ValidationError):
            SettingsUpdate(frequency=525, coreVoltage=-5)
