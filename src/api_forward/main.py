"""FastAPI application entry point."""

import os
from pathlib import Path

import httpx
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api_forward.auth import AdminAuth
from api_forward.config import load_settings, settings_path_from_env
from api_forward.dispatcher import Dispatcher
from api_forward.models.config import AppSettings
from api_forward.proxy import ProxyExecutor
from api_forward.registry import EndpointRegistry
from api_forward.routes.admin import create_admin_router
from api_forward.routes.catalogue import create_catalogue_router
from api_forward.routes.config import create_config_router
from api_forward.routes.dispatch import create_dispatch_router
from api_forward.store import ConfigStore


def create_app(
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Loads settings from API_FORWARD_CONFIG or "config.yaml" unless given.
    Loads the endpoint snapshot from the configuration store, adds the admin
    cookie middleware and CORS, and registers the fixed routes before the
    catch-all endpoint route.

    Args:
        settings: Settings to use instead of reading the settings file.
        transport: Optional httpx transport for outbound proxy requests.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings(settings_path_from_env())

    store = ConfigStore(
        db_path=Path(settings.storage.db_path),
        backup_path=Path(settings.storage.backup_path),
        enable_file_operations=settings.storage.enable_file_operations,
    )
    registry = EndpointRegistry(store.load())
    dispatcher = Dispatcher(registry, ProxyExecutor(transport=transport))

    app = FastAPI(
        title="API Forward",
        description="Configuration-driven redirect and proxy router for image APIs",
        version="0.1.0",
    )

    # Admin cookie gate, then CORS outermost so 401s still carry CORS headers
    app.middleware("http")(AdminAuth(settings.admin))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_admin_router(settings.admin))
    app.include_router(create_config_router(registry, store))
    app.include_router(create_catalogue_router(registry))

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # Must stay last: /{api_key} would shadow every single-segment route above
    app.include_router(create_dispatch_router(dispatcher))

    return app


def main():
    """Run the application with uvicorn."""
    # Load .env file if it exists
    load_dotenv()

    settings = load_settings(settings_path_from_env())

    # Use settings values, with env var overrides
    host = os.environ.get("API_FORWARD_HOST", settings.server.host)
    port = int(os.environ.get("API_FORWARD_PORT", settings.server.port))
    uvicorn.run(
        create_app,
        host=host,
        port=port,
        reload=False,
        factory=True,
        log_level=settings.server.log_level,
    )


if __name__ == "__main__":
    main()
