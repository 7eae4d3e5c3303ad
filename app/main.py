"""FastAPI application setup for the coastal conditions proxy."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .aggregator import ConditionsAggregator, build_aggregator
from .api import router as api_router
from .config import Settings, settings as default_settings
from .errors import ProxyError
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__)

APP_TITLE = "Coastal Conditions Proxy"


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    """Turn any ProxyError into its JSON envelope and status code."""
    logger.error(
        f"{request.method} {request.url.path} failed: {exc.error}",
        extra={"details": exc.details, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def create_app(
    settings: Optional[Settings] = None,
    aggregator: Optional[ConditionsAggregator] = None,
) -> FastAPI:
    """Build the app; services are constructed once here and shared by all requests."""
    settings = settings or default_settings
    setup_logging(level=settings.log_level)

    app = FastAPI(title=APP_TITLE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.state.aggregator = aggregator or build_aggregator(settings)
    app.include_router(api_router)
    return app


app = create_app()
