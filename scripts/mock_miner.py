"""
Mock AxeOS miner for development and testing.

This script simulates a single Bitaxe-style device so the service and CLI
can be exercised without real mining hardware.

Run with: python scripts/mock_miner.py [port]
"""
import random
import sys

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
import uvicorn


app = FastAPI(title="Mock AxeOS Miner")

MIN_CORE_VOLTAGE = 1000  # mV
MAX_CORE_VOLTAGE = 1300  # mV


class MockMiner:
    def __init__(self, hostname: str, model: str, version: str):
        self.hostname = hostname
        self.model = model
        self.version = version
        self.frequency = 485
        self.core_voltage = 1200
        self.restarts = 0

    def to_dict(self) -> dict:
        return {
            "hostname": self.hostname,
            "ASICModel": self.model,
            "version": self.version,
            "frequency": self.frequency,
            "coreVoltage": self.core_voltage,
            "hashRate": round(random.uniform(450, 520), 2) if self.frequency else 0,
            "temp": round(random.uniform(48, 62), 1),
            "power": round(random.uniform(11, 14), 2),
            "uptimeSeconds": random.randint(60, 86400),
        }


MOCK_MINER = MockMiner("bitaxe-mock", "BM1366", "2.4.0")


@app.get("/api/system/info")
async def system_info():
    """Full system info."""
    return MOCK_MINER.to_dict()


@app.patch("/api/system")
async def update_system(request: Request):
    """Apply frequency/coreVoltage the way AxeOS does."""
    try:
        body = await request.json()
        frequency = int(body["frequency"])
        core_voltage = int(body["coreVoltage"])
    except (ValueError, KeyError, TypeError):
        return PlainTextResponse("invalid settings payload", status_code=400)

    if not MIN_CORE_VOLTAGE <= core_voltage <= MAX_CORE_VOLTAGE:
        return PlainTextResponse("bad core voltage", status_code=400)

    MOCK_MINER.frequency = frequency
    MOCK_MINER.core_voltage = core_voltage
    print(f"[MOCK] Settings applied: {frequency} MHz, {core_voltage} mV")
    return JSONResponse(MOCK_MINER.to_dict())


@app.post("/api/system/restart")
async def restart():
    """Real firmware answers the restart with an empty body."""
    MOCK_MINER.restarts += 1
    print("[MOCK] Restart requested")
    return Response(status_code=200)


if __name__ == "__main__":
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8081
    print("=" * 50)
    print("Mock AxeOS Miner")
    print("=" * 50)
    print(f"  {MOCK_MINER.hostname}: {MOCK_MINER.model} (firmware {MOCK_MINER.version})")
    print(f"Starting server on http://localhost:{port}")
    print("=" * 50)

    uvicorn.run(app, host="0.0.0.0", port=port)
