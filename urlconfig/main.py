"""
FastAPI entry point for the GitHub URL service.
Configuration is loaded and validated before the listener binds; a bad config
exits with status 1 and the service never accepts connections.
"""
import argparse
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from pythonjsonlogger import jsonlogger

from urlconfig.api import github
from urlconfig.config import (
    ConfigurationValidationError,
    DEFAULT_LOG_LEVEL,
    ServerSettings,
    UrlConfig,
    load_server_settings,
    load_url_config,
)

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    """Configure root logger: JSON format to stderr at the given level."""
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(lineno)s  %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)


def _log_routes(app: FastAPI) -> None:
    """Log all registered routes at startup."""
    logger.info("Registered routes:")
    for route in app.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            for method in sorted(route.methods - {"HEAD", "OPTIONS"}):
                logger.info(f"  {method} {route.path}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _log_routes(app)
    logger.info(
        "Serving configured URL",
        extra={
            "base_url": app.state.url_config.base_url,
            "repository_url": app.state.url_config.repository_url,
        },
    )
    yield


def create_app(url_config: UrlConfig) -> FastAPI:
    """Build the app around an already validated UrlConfig."""
    app = FastAPI(
        title="GitHub URL Service",
        description="Serves a base URL and repository path bound from external configuration",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.url_config = url_config
    app.include_router(github.router, tags=["github"])

    @app.get("/health")
    async def health():
        """Health check for Docker/orchestration."""
        return {"status": "ok"}

    return app


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="urlconfig-service", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--host", help="Interface to bind (overrides HOST)")
    parser.add_argument("--port", type=int, help="Port to bind (overrides PORT)")
    return parser.parse_args(argv)


def _log_validation_error(e: ConfigurationValidationError) -> None:
    logger.error(
        str(e),
        extra={"errors": [{"field": err.field, "constraint": err.constraint} for err in e.errors]},
    )


def main(argv: list[str] | None = None) -> int:
    """Load and validate configuration, then serve until shutdown. Returns the exit code."""
    args = _parse_args(argv)
    try:
        server: ServerSettings = load_server_settings()
    except ConfigurationValidationError as e:
        _setup_logging(DEFAULT_LOG_LEVEL)
        _log_validation_error(e)
        return 1

    _setup_logging(server.log_level)
    try:
        url_config = load_url_config()
    except ConfigurationValidationError as e:
        _log_validation_error(e)
        return 1

    host = args.host if args.host is not None else server.host
    port = args.port if args.port is not None else server.port
    app = create_app(url_config)
    logger.info(f"Starting listener on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=server.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
