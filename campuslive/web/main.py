"""Main entry point for the realtime web application."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import typing as t

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import campuslive
from campuslive.core import BootConfiguration, CampusLiveContainer, di
from campuslive.core.config.web import WebSettings
from campuslive.realtime import EventBridge, RealtimeHub

from .route import router

logger = logging.getLogger(__name__)

BootVariable = "__CampusLive_BOOT"


def lifespan(hub: RealtimeHub, bridge: EventBridge) -> t.Callable[[FastAPI], t.AsyncContextManager[None]]:
    @contextlib.asynccontextmanager
    async def run(app: FastAPI) -> t.AsyncIterator[None]:
        listener = asyncio.create_task(bridge.listen(), name="campuslive-bridge")
        logger.info("realtime hub started", extra={"bridge": type(bridge).__name__})
        try:
            yield
        finally:
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener
            await hub.shutdown()
            logger.info("realtime hub stopped")

    return run


@di.inject
def _create_app(
    config: WebSettings = di.Provide["config.web", di.as_(WebSettings)],
    hub: RealtimeHub = di.Provide["realtime.hub"],
    bridge: EventBridge = di.Provide["realtime.bridge"],
) -> FastAPI:
    app = FastAPI(
        title="CampusLive",
        description="Realtime push service for campus notifications, messaging and class sessions",
        version=campuslive.__version__,
        lifespan=lifespan(hub, bridge),
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory function for uvicorn."""
    boot_vars = os.getenv(BootVariable)
    if boot_vars:
        boot_cf = BootConfiguration.model_validate_json(boot_vars)
        ct = CampusLiveContainer()
        CampusLiveContainer.boot(ct, **dict(boot_cf))
        return _create_app(
            config=WebSettings(**ct.config.web()),
            hub=ct.realtime.hub(),
            bridge=ct.realtime.bridge(),
        )
    return _create_app()
