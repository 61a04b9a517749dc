"""
Authentication service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.handlers import register_exception_handlers
from api.middleware import register_middleware
from auth.dependencies import build_services
from auth.routes import router as auth_router
from config.settings import Settings, config
from connectors.base import BaseIdentityProvider
from connectors.routes import router as federated_router
from database.session import init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "sqlalchemy.engine", "aiosqlite"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    providers: Optional[Iterable[BaseIdentityProvider]] = None,
) -> FastAPI:
    settings = settings or config
    app = FastAPI(
        title="Auth Service",
        version="1.0.0",
        description="Username/password and Google sign-in with opaque, expiring sessions.",
    )
    app.state.auth = build_services(settings, providers=providers)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")
    app.include_router(federated_router, prefix="/api/v1/auth")

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    @app.on_event("startup")
    async def on_startup():
        services = app.state.auth
        if services.engine is not None:
            logger.info("Ensuring database schema…")
            await init_models(services.engine)

        if settings.purge_expired_sessions_on_startup:
            purged = await services.store.purge_expired_sessions()
            if purged:
                logger.info("Cleaned up %d expired sessions from previous runs", purged)

        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        engine = app.state.auth.engine
        if engine is not None:
            await engine.dispose()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
