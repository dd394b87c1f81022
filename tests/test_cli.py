"""
Tests for the minerscan command-line interface.
"""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from app.cli import main
from app.models.miner import DiscoveredMiner
from app.services.errors import ConnectionExhaustedError, SettingsUpdateFailedError
from app.services.miner_client import MinerClient
from app.services.miner_discovery import SubnetScanner

from conftest import axeos_device


class TestScanCommand:

    def test_scan_prints_miners(self, capsys):
        scanner = MagicMock()
        scanner.scan = AsyncMock(return_value=[DiscoveredMiner(address="10.0.0.9", hostname="m9")])

        with patch("app.cli.get_subnet_scanner", return_value=scanner):
            exit_code = main(["scan", "10.0.0", "--start", "5", "--end", "9"])

        assert exit_code == 0
        scanner.scan.assert_awaited_once_with("10.0.0", 5, 9)
        output = json.loads(capsys.readouterr().out)
        assert output[0]["address"] == "10.0.0.9"
        assert output[0]["firmwareVersion"] is None

    def test_scan_malformed_subnet_exits_nonzero(self, capsys):
        exit_code = main(["scan", "10.0", "--start", "1", "--end", "2"])

        assert exit_code == 1
        assert "Invalid subnet format" in capsys.readouterr().err


class TestDeviceCommands:

    def test_status(self, capsys):
        client = AsyncMock()
        client.fetch_status = AsyncMock(return_value={"hostname": "m1"})

        with patch("app.cli.get_miner_client", return_value=client):
            exit_code = main(["status", "10.0.0.1"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"hostname": "m1"}

    def test_status_unreachable(self, capsys):
        client = AsyncMock()
        client.fetch_status = AsyncMock(side_effect=ConnectionExhaustedError("10.0.0.1"))

        with patch("app.cli.get_miner_client", return_value=client):
            exit_code = main(["status", "10.0.0.1"])

        assert exit_code == 1
        assert "Failed to connect to miner at 10.0.0.1" in capsys.readouterr().err

    def test_settings(self, capsys):
        client = AsyncMock()
        client.update_settings = AsyncMock(
            side_effect=SettingsUpdateFailedError("10.0.0.1", status_code=400, body="bad core voltage")
        )

        with patch("app.cli.get_miner_client", return_value=client):
            exit_code = main(["settings", "10.0.0.1", "--frequency", "600", "--core-voltage", "1500"])

        assert exit_code == 1
        _, update = client.update_settings.await_args.args
        assert update.to_payload() == {"frequency": 600, "coreVoltage": 1500}
        assert "bad core voltage" in capsys.readouterr().err

    def test_negative_value_is_reported(self, capsys):
        """Out-of-range settings print an error instead of a traceback."""
        client = AsyncMock()

        with patch("app.cli.get_miner_client", return_value=client):
            exit_code = main(["settings", "10.0.0.1", "--frequency", "500", "--core-voltage", "-5"])

        assert exit_code == 1
        client.update_settings.assert_not_awaited()
        err = capsys.readouterr().err
        assert err.startswith("Error: ")
        assert "coreVoltage" in err


class TestMachineReadableOutput:
    """stdout carries only JSON, even while the services are logging."""

    def test_status_output_is_pure_json(self, capsys, network):
        network.add_device("10.0.0.5", axeos_device({"hostname": "m5"}, path="/api/system"))

        with patch("app.cli.get_miner_client", return_value=MinerClient(network.config())):
            exit_code = main(["status", "10.0.0.5"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"hostname": "m5"}

    def test_scan_output_is_pure_json(self, capsys, network):
        network.add_device("10.0.0.3", axeos_device({"hostname": "m3", "ASICModel": "BM1366"}))
        network.add_device("10.0.0.4", lambda request: httpx.Response(500))

        with patch("app.cli.get_subnet_scanner", return_value=SubnetScanner(network.config())):
            exit_code = main(["scan", "10.0.0", "--start", "1", "--end", "6"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert [miner["address"] for miner in output] == ["10.0.0.3"]
        assert output[0]["model"] == "BM1366"
