"""Main FastAPI application for the heart rate relay."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hr_relay.api import router
from hr_relay.config import RelayConfig
from hr_relay.forwarder import GreptimeForwarder
from hr_relay.logger import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    config: Optional[RelayConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application around one immutable configuration."""
    if config is None:
        config = RelayConfig.from_env()
    forwarder = GreptimeForwarder(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Lifespan context manager for startup and shutdown."""
        logger.info(
            f"Starting heart rate relay - GreptimeDB: {config.base_url}, "
            f"database: {config.database}, precision: {config.precision}, "
            f"auth: {'basic' if config.username else 'none'}"
        )
        await forwarder.start()
        app.state.forwarder = forwarder
        yield
        await forwarder.stop()
        logger.info("Heart rate relay stopped")

    app = FastAPI(
        title="Heart Rate Relay",
        description="Relays heart rate readings from a phone shortcut to GreptimeDB as line protocol",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.config.port)
