# filmshare/main.py

from contextlib import asynccontextmanager

from fastapi import FastAPI

from filmshare import config
from filmshare.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from filmshare.middleware.rate_limiter import RateLimitMiddleware
from filmshare.observability.logger import configure_logging
from filmshare.routers.favorites import router as favorites_router
from filmshare.routers.health import router as health_router
from filmshare.routers.lists import router as lists_router
from filmshare.services.errors import RegistryLoadError
from filmshare.services.registry_loader import get_registry_loader
from filmshare.utils.logger import log_exception, log_info


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Warm the registry; a broken mapping file leaves the app up but not ready
    try:
        await get_registry_loader().load()
    except RegistryLoadError as e:
        log_exception(e, "startup: loading short-code registry")
    log_info(f"filmshare started, sharing links point at {config.SHARE_ORIGIN}")
    yield


def create_app(warm_registry: bool = True) -> FastAPI:
    configure_logging(config)

    app = FastAPI(
        title="Film Favorites Sharing API",
        description="Encode, decode and import shared film favorites lists",
        version="1.0.0",
        lifespan=lifespan if warm_registry else None,
    )

    # Order matters: first added = innermost. Error handler must be outermost.
    app.add_middleware(
        RateLimitMiddleware,
        api_limit=config.settings.API_RATE_LIMIT,
        general_limit=config.settings.GENERAL_RATE_LIMIT,
    )
    app.add_middleware(ErrorHandlerMiddleware, debug=config.DEBUG)

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(favorites_router, prefix="/api")
    app.include_router(lists_router, prefix="/api")
    return app


app = create_app()


def get_app() -> FastAPI:
    return app
