"""FastAPI application entry point.

This module initialises the FastAPI app, configures logging and
registers API routes.  The `uvicorn` ASGI server can point to
``chat_relay.main:app`` to serve the application, or run it through
the ``chat-relay`` console script.
"""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config.app_config import AppConfig, get_app_config
from .controllers.chat_controller import router as chat_router
from .utils.error_handler import register_exception_handlers
from .utils.logger import setup_logging


def create_app(app_config: AppConfig | None = None) -> FastAPI:
    """Create and configure a FastAPI application."""
    app_config = app_config or get_app_config()
    setup_logging(app_config)

    app = FastAPI(title="Chat Relay", version="0.1.0", debug=app_config.app_debug)

    origins = app_config.cors_origin_list or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "{} {} -> {} ({:.1f} ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    register_exception_handlers(app)

    app.include_router(chat_router)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, bool]:
        """Simple health check endpoint."""
        logger.debug("Health check invoked")
        return {"ok": True}

    return app


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    app_config = get_app_config()
    uvicorn.run(
        "chat_relay.main:app",
        host=app_config.app_host,
        port=app_config.app_port,
        reload=app_config.app_debug,
    )


# Create an application instance for ASGI servers
app = create_app()


if __name__ == "__main__":  # pragma: no cover
    run()
