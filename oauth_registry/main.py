from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from oauth_registry.api.health import router as health_router
from oauth_registry.api.metrics_endpoint import router as metrics_router
from oauth_registry.api.oauth_servers import lookup_router as oauth_lookup_router
from oauth_registry.api.oauth_servers import router as oauth_servers_router
from oauth_registry.core.config import SETTINGS, Settings
from oauth_registry.core.logging import setup_logging
from oauth_registry.middleware.metrics import MetricsMiddleware
from oauth_registry.middleware.request_context import RequestContextMiddleware
from oauth_registry.repos.file_oauth_server_repo import FileSystemOAuthServerRepo
from oauth_registry.repos.oauth_server_repo import OAuthServerRepo

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings = SETTINGS,
    repo: OAuthServerRepo | None = None,
) -> FastAPI:
    """Build the application around one OAuth server repository.

    Pass ``repo`` to inject an already-built repository.  Otherwise the
    definition directory from ``settings`` is loaded at startup, and a
    load failure aborts startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if getattr(app.state, "oauth_server_repo", None) is None:
            app.state.oauth_server_repo = FileSystemOAuthServerRepo(
                settings.oauth_servers_dir,
                strict=settings.oauth_servers_strict,
            )
        logger.info(
            "oauth-registry started  env=%s log_level=%s port=%d oauth_servers=%d",
            settings.app_env,
            settings.log_level,
            settings.port,
            len(app.state.oauth_server_repo),
        )
        yield

    app = FastAPI(
        title="oauth-registry",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.oauth_server_repo = repo

    # Last-added runs first: RequestContext → Metrics → route handler
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(oauth_servers_router)
    app.include_router(oauth_lookup_router)

    return app


app = create_app()
