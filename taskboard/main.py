"""
Application entry point for the Taskboard API
Builds the FastAPI app, wires middleware, error handlers and routers
"""
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.responses import ApiResponse, register_exception_handlers
from .api.routes import auth_router, categories_router, tasks_router
from .config import settings
from .database.database import create_db_and_tables
from .utils.logging import get_logger, setup_logging
from .utils.timeutils import utcnow


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = get_logger()
    if settings.storage_backend == "sql":
        create_db_and_tables()
    logger.info("%s started (storage=%s)", settings.app_name, settings.storage_backend)
    yield
    logger.info("%s shutting down", settings.app_name)


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    request_logger = get_logger("http")

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        request_logger.info(
            "%s %s %s %.1fms",
            request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response

    register_exception_handlers(app)

    prefix = settings.api_prefix.rstrip("/")
    app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(tasks_router, prefix=f"{prefix}/tasks", tags=["tasks"])
    app.include_router(categories_router, prefix=f"{prefix}/categories", tags=["categories"])

    @app.get(f"{prefix}/health", response_model=ApiResponse, tags=["health"])
    def health():
        return ApiResponse(data={
            "status": "OK",
            "timestamp": utcnow().isoformat(),
            "storage": settings.storage_backend,
        })

    return app


app = create_app()


def run() -> None:
    uvicorn.run("taskboard.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
