# flake8: noqa: E402
from dotenv import load_dotenv

load_dotenv()

import asyncio
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from pydantic import BaseModel

from .config import config
from .exc import DatabaseConnectionError, DatabaseInitializationError
from .lib.database import ConnectionManager
from .lib.initializer import initialize
from .lib.log import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager.

    Traffic is only served once the database is connected and reconciled.
    The connection is closed on shutdown and on every startup failure.
    """
    configure_logging()
    logger.info(f"Starting {config.app_name}...")

    db = ConnectionManager()
    app.state.db = db
    connected = await asyncio.to_thread(db.connect, config.mongodb_url)
    if not connected:
        raise DatabaseConnectionError()

    try:
        if not await initialize(db):
            raise DatabaseInitializationError()
        logger.info("Database initialization completed successfully")
        yield
    finally:
        # Shutdown
        logger.info(f"Shutting down {config.app_name}...")
        await asyncio.to_thread(db.close)


app = FastAPI(
    title=config.app_name,
    description="MongoDB connection lifecycle and schema reconciliation",
    version="0.1.0",
    lifespan=lifespan,
)


class HealthResponse(BaseModel):
    status: str
    database: str


@app.get("/health")
async def health(request: Request) -> HealthResponse:
    """Health check endpoint"""
    db: ConnectionManager | None = getattr(request.app.state, "db", None)
    if db is not None and db.is_connected:
        return HealthResponse(status="healthy", database="connected")
    return HealthResponse(status="degraded", database="disconnected")


if __name__ == "__main__":
    import uvicorn

    port_value = os.getenv("PORT", "8080")
    try:
        port = int(port_value)
    except ValueError:
        logger.warning(
            f"Invalid PORT value '{port_value}', defaulting to 8080"
        )
        port = 8080

    uvicorn.run(app, host="0.0.0.0", port=port)  # noqa: S104
