"""
NIM Proxy Application Entry Point

FastAPI application main entry, including router registration and application configuration.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nim_proxy.api.deps import ModelResolverDep, SettingsDep
from nim_proxy.api.proxy import openai_router
from nim_proxy.common.errors import AppError, NotFoundError
from nim_proxy.config import get_settings
from nim_proxy.logging_config import setup_logging
from nim_proxy.middleware.body_limit import BodySizeLimitMiddleware
from nim_proxy.providers.nim_client import NimClient
from nim_proxy.services import FallbackCache, ModelResolver, build_proxy_service

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()


def _enabled(flag: bool) -> str:
    return "ENABLED" if flag else "DISABLED"


# Application Lifecycle Management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Builds the process-wide resolver and backend client on startup and
    releases backend connections on shutdown.
    """
    settings = get_settings()
    if not settings.NIM_API_KEY:
        logger.error("NIM_API_KEY environment variable is not set!")
        raise RuntimeError("NIM_API_KEY environment variable is not set")

    resolver = ModelResolver(FallbackCache(settings.MODEL_CACHE_SIZE))
    client = NimClient(
        base_url=settings.NIM_API_BASE,
        api_key=settings.NIM_API_KEY,
        timeout=settings.HTTP_TIMEOUT,
    )
    app.state.model_resolver = resolver
    app.state.proxy_service = build_proxy_service(settings, resolver, client)

    logger.info("%s running on port %s", settings.APP_NAME, settings.PORT)
    logger.info("Reasoning display: %s", _enabled(settings.SHOW_REASONING))
    logger.info("Thinking mode: %s", _enabled(settings.ENABLE_THINKING_MODE))
    logger.info("Forced streaming: %s", _enabled(settings.FORCE_STREAMING))
    yield
    await client.close()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="OpenAI-compatible proxy for the NVIDIA NIM API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.MAX_BODY_SIZE)


# Global Exception Handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Handle application custom exceptions

    Error details are only returned in debug mode.
    """
    if exc.status_code >= 500:
        logger.error("Proxy error: %s (path=%s)", exc.message, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=get_settings().DEBUG),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render unmatched paths and methods as an OpenAI-style 404
    """
    if exc.status_code in (404, 405):
        error = NotFoundError(f"Endpoint {request.url.path} not found")
    else:
        error = AppError(message=str(exc.detail), error_type="invalid_request_error", status_code=exc.status_code)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions

    Stack traces are logged; they are only returned to clients in debug mode.
    """
    stack = traceback.format_exc()
    logger.error("Uncaught exception: %s\nPath: %s\nTraceback:\n%s", exc, request.url.path, stack)

    error = AppError(message="Internal server error")
    content = error.to_dict()
    if get_settings().DEBUG:
        content["error"].update(message=str(exc), traceback=stack.split("\n"))
    return JSONResponse(status_code=error.status_code, content=content)


# Health Check Endpoint
@app.get("/health", tags=["Health"])
async def health_check(settings: SettingsDep, resolver: ModelResolverDep):
    """
    Health Check

    Reports the active toggles and the number of remembered fallback models.
    """
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "reasoning_display": settings.SHOW_REASONING,
        "thinking_mode": settings.ENABLE_THINKING_MODE,
        "forced_streaming": settings.FORCE_STREAMING,
        "cached_models": resolver.cache_size,
    }


# Register Proxy Routers
app.include_router(openai_router)


def run() -> None:
    """Console entry point"""
    import uvicorn

    settings = get_settings()
    if not settings.NIM_API_KEY:
        logger.error("NIM_API_KEY environment variable is not set!")
        sys.exit(1)

    uvicorn.run(
        "nim_proxy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
