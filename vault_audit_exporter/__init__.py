# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from asyncio import create_task, gather
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import REGISTRY, CollectorRegistry

from vault_audit_exporter.exceptions import ListenerBindError
from vault_audit_exporter.handlers.dispatcher import EventDispatcher
from vault_audit_exporter.handlers.event_processor import EventProcessor
from vault_audit_exporter.listeners.audit_listener import (
    AuditListener,
    ConnectionHandler,
)
from vault_audit_exporter.logging import logger
from vault_audit_exporter.managers.timestamp_cache import TimestampCache
from vault_audit_exporter.routing import collect_subrouters
from vault_audit_exporter.settings import Settings, app_settings
from vault_audit_exporter.tasks.cache_cleanup_task import cache_cleanup_task
from vault_audit_exporter.tasks.cache_metrics_task import cache_metrics_task
from vault_audit_exporter.utils.metrics import AuditMetrics
from vault_audit_exporter.utils.network import parse_listen_address

__version__ = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Run the audit pipeline alongside the HTTP server.

    Startup:
    - Starts the event processing workers
    - Binds the audit log listener (a bind failure aborts startup)
    - Creates the cache size gauge and cache cleanup background tasks

    Shutdown stops accepting audit connections, then cancels the
    background tasks and the workers. Uses gather() with
    return_exceptions=True to absorb the CancelledError of each task.
    """
    settings: Settings = app.state.settings

    dispatcher = EventDispatcher(
        app.state.processor,
        app.state.metrics,
        workers=settings.DISPATCH_WORKERS,
        max_queue_size=settings.DISPATCH_QUEUE_MAX_SIZE,
    )
    dispatcher.start()

    listener = AuditListener(
        app.state.audit_address,
        ConnectionHandler(dispatcher),
        max_line_bytes=settings.AUDIT_MAX_LINE_BYTES,
    )
    try:
        await listener.start()
    except ListenerBindError as ex:
        logger.error(str(ex))
        await dispatcher.stop()
        raise

    tasks = [
        create_task(cache_metrics_task(app.state.timestamps, app.state.metrics)),
        create_task(cache_cleanup_task(app.state.timestamps)),
    ]
    app.state.dispatcher = dispatcher
    app.state.listener = listener
    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Application shutdown initiated")
        await listener.close()

        logger.info(f"Cancelling {len(tasks)} background tasks")
        for task in tasks:
            task.cancel()
        await gather(*tasks, return_exceptions=True)

        await dispatcher.stop()
        logger.info("Application shutdown complete")


def application(
    settings: Settings | None = None,
    registry: CollectorRegistry | None = None,
) -> FastAPI:
    """
    Build the exporter application.

    The shared components (request timestamp cache, metrics, event
    processor) are created here once and attached to ``app.state``; the
    HTTP routes and the audit pipeline started by ``lifespan`` resolve them
    from there.

    Args:
        settings: Configuration, the environment-derived settings by
            default.
        registry: Prometheus registry, the process default by default.

    Returns:
        Configured FastAPI application serving /metrics and /healthz.

    Raises:
        ConfigurationError: If the audit listener address is invalid.
    """
    settings = settings or app_settings

    metrics = AuditMetrics(registry if registry is not None else REGISTRY)
    timestamps = TimestampCache(
        ttl=settings.CACHE_TTL, cleanup_interval=settings.CACHE_CLEANUP
    )

    app = FastAPI(
        title="Vault audit exporter",
        description="Prometheus metrics from Vault audit log events",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.audit_address = parse_listen_address(
        settings.AUDIT_NETWORK, settings.AUDIT_ADDR
    )
    app.state.metrics = metrics
    app.state.timestamps = timestamps
    app.state.processor = EventProcessor(timestamps, metrics)

    app.include_router(collect_subrouters())

    return app
