# Services package
from app.services.errors import (
    MinerAPIError,
    MalformedSubnetError,
    InvalidScanRangeError,
    ConnectionExhaustedError,
    RestartFailedError,
    SettingsUpdateFailedError,
    NoLocalSubnetError,
)
from app.services.prober import (
    STATUS_PATHS,
    DISCOVERY_PATHS,
    ClientConfig,
    EndpointProber,
)
from app.services.miner_discovery import (
    SubnetScanner,
    get_local_subnet,
    get_subnet_scanner,
)
from app.services.miner_client import (
    MinerClient,
    get_miner_client,
)

__all__ = [
    "MinerAPIError",
    "MalformedSubnetError",
    "InvalidScanRangeError",
    "ConnectionExhaustedError",
    "RestartFailedError",
    "SettingsUpdateFailedError",
    "NoLocalSubnetError",
    "STATUS_PATHS",
    "DISCOVERY_PATHS",
    "ClientConfig",
    "EndpointProber",
    "SubnetScanner",
    "get_local_subnet",
    "get_subnet_scanner",
    "MinerClient",
    "get_miner_client",
]
