"""
Ollama Honeypot

A decoy server that speaks the Ollama REST API:
- advertises a model catalog read from static configuration
- simulates loading, keep-alive expiry and deletion of models
- serves per-model detail documents from JSON files on disk
- records every inbound request to a JSON-lines log
"""

import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from honeypot import __version__
from honeypot.config import ConfigError, HoneypotConfig, get_settings, load_config
from honeypot.dependencies import OllamaAPIError
from honeypot.logging_setup import LogHandles, setup_logging
from honeypot.middleware.request_log import RequestLogMiddleware
from honeypot.models import ErrorResponse
from honeypot.routers import generate_router, misc_router, models_router
from honeypot.state import HoneypotState


def create_app(config: HoneypotConfig, logs: LogHandles) -> FastAPI:
    """Build the application around a single, already validated configuration."""
    state = HoneypotState.from_config(config, logs.ops)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        server = config.server
        logs.ops.warning(
            "honeypot_starting",
            address=server.listen_address,
            port=server.listen_port,
            models=len(config.api_behavior.tag_models),
        )

        yield

        logs.ops.warning("honeypot_shutting_down")

    app = FastAPI(
        title="Ollama Honeypot",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.honeypot = state
    app.state.logs = logs

    @app.exception_handler(OllamaAPIError)
    async def ollama_error_handler(request: Request, exc: OllamaAPIError):
        return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Same plain-text bodies as Go's net/http
        if exc.status_code == 404:
            return PlainTextResponse("404 page not found", status_code=404)
        if exc.status_code == 405:
            return PlainTextResponse("405 method not allowed", status_code=405)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logs.ops.error(
            "unhandled_exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            exc_info=exc,
        )
        return PlainTextResponse("Internal Server Error", status_code=500)

    app.add_middleware(RequestLogMiddleware, logs=logs)

    app.include_router(misc_router)
    app.include_router(models_router)
    app.include_router(generate_router)

    return app


def main() -> int:
    config_path = sys.argv[1] if len(sys.argv) > 1 else get_settings().config_path

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"FATAL: Failed to load configuration '{config_path}': {e}", file=sys.stderr)
        return 1

    try:
        logs = setup_logging(config.logging)
    except (OSError, ValueError) as e:
        print(f"FATAL: Failed to initialize logging: {e}", file=sys.stderr)
        return 1

    logs.ops.info("configuration_loaded", path=config_path)

    app = create_app(config, logs)
    uvicorn.run(
        app,
        host=config.server.listen_address,
        port=config.server.listen_port,
        log_level="warning",
        server_header=False,
        date_header=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
