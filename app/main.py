"""
Miner Scan - ASIC Miner Discovery and Control Service

Main FastAPI application entry point.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import structlog

from app.config import get_settings
from app.api.miners import router as miners_router
from app.logging_config import configure_logging

settings = get_settings()

# Configure structured logging
configure_logging(settings.log_level)

logger = structlog.get_logger()


# Create FastAPI application
app = FastAPI(
    title="Miner Scan",
    description="""
    Discovery and control of AxeOS-based ASIC miners on the local network.

    ## Endpoints

    - **GET /api/scan** - Scan a subnet range for miners
    - **GET /api/network/subnet** - Detect the local subnet prefix
    - **GET /api/miner/{ip}** - Full status of one miner
    - **POST /api/miner/{ip}/restart** - Restart one miner
    - **PATCH /api/miner/{ip}/settings** - Set frequency and core voltage
    """,
    version="1.0.0",
)

# Add CORS middleware for the desktop/web UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(miners_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker/load balancer probes."""
    return {"status": "healthy"}


# =========================================================================
# Error Handlers
# =========================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler ensuring JSON responses."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error occurred."}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.host_port,
        reload=True
    )
