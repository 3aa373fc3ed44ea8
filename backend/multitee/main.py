"""Main FastAPI application entry point"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Response

from multitee.api import api_router
from multitee.core.config import settings
from multitee.core.logging import setup_logging
from multitee.services.attestation import AttestationNetworkService

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


def setup_metrics(app: FastAPI, service: AttestationNetworkService):
    """
    Setup Prometheus metrics endpoint for the FastAPI application.

    Adds a /metrics endpoint that Prometheus can scrape.
    """

    @app.get("/metrics", include_in_schema=False)
    async def metrics_endpoint():
        """Prometheus metrics endpoint"""
        return Response(
            content=service.metrics.get_metrics(),
            media_type=service.metrics.get_content_type(),
        )

    logger.info("Prometheus metrics endpoint setup at /metrics")


def create_app(service: Optional[AttestationNetworkService] = None) -> FastAPI:
    """
    Build the application.

    Args:
        service: Pre-built service context; built from settings when omitted
    """
    service = service or AttestationNetworkService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler
        """
        logger.info(f"Starting {settings.APP_NAME} node {service.registry.self_id}...")
        await service.initialize()
        try:
            yield
        finally:
            logger.info("Shutting down...")
            await service.shutdown()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Mutual remote attestation for TEE networks",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.network_service = service
    app.include_router(api_router)

    if settings.PROMETHEUS_ENABLED:
        try:
            setup_metrics(app, service)
        except Exception as exc:
            logger.warning(f"Metrics setup failed: {exc}")

    return app


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "multitee.main:create_app",
        factory=True,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
