"""
PinSpace - Studio Wall Backend API
FastAPI service for board placement on studio walls, wall configuration and
the discovery network layout. Storage backends: JSON files or SQLite.

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

import contextvars
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.base import StorageAdapter
from core.dimensions import DimensionResolver, GeometryReader
from core.errors import PinSpaceError
from routers import boards, network, wall_config, workspaces
from settings import Settings, get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0"


# ============================================================================
# STORAGE ADAPTER INITIALIZATION
# ============================================================================

def build_storage_adapter(settings: Settings) -> StorageAdapter:
    backend = settings.storage_backend.lower()
    logger.info(f"🔧 Storage Backend: {backend.upper()}")

    if backend == "json":
        from adapters.json import JsonAdapter
        adapter = JsonAdapter(data_dir=settings.data_dir)
        logger.info(f"✓ JSON adapter initialized at {adapter.data_dir}")
        return adapter

    if backend == "sqlite":
        from adapters.sqlite import SqliteAdapter
        adapter = SqliteAdapter.from_url(settings.db_url)
        logger.info(f"✓ SQLite adapter initialized ({settings.db_url.split('://')[0]})")
        return adapter

    raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")


# ============================================================================
# FASTAPI APP
# ============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = time.time()
        app.state.storage_adapter = build_storage_adapter(settings)

        reader = GeometryReader(
            max_workers=settings.decode_workers,
            max_image_pixels=settings.max_image_pixels,
        )
        reader.start()
        app.state.geometry_reader = reader
        app.state.dimension_resolver = DimensionResolver(
            reader,
            timeout_s=settings.decode_timeout_s,
            cache_size=settings.dimension_cache_size,
        )
        logger.info("PinSpace API starting up...")
        logger.info(f"Allowed origins: {settings.get_origins_list()}")
        try:
            yield
        finally:
            logger.info("PinSpace API shutting down...")
            reader.close()
            dispose = getattr(app.state.storage_adapter, "dispose", None)
            if dispose is not None:
                dispose()

    app = FastAPI(
        title="PinSpace API",
        description="Board placement, studio walls and discovery network",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ========== Request Tracing Middleware ==========
    @app.middleware("http")
    async def request_tracing_middleware(request: Request, call_next):
        """Add request_id and timing to all requests."""
        request_id = str(uuid.uuid4())[:8]
        token = request_id_var.set(request_id)
        started = time.time()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        latency_ms = round((time.time() - started) * 1000, 2)
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({latency_ms}ms)"
        )
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PinSpaceError)
    async def pinspace_error_handler(request: Request, exc: PinSpaceError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind}: {exc.detail}")
        else:
            logger.warning(f"{request.method} {request.url.path} -> {exc.kind}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error": exc.kind},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"}
        )

    # ============================================================================
    # HEALTH ENDPOINTS
    # ============================================================================

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        try:
            request.app.state.storage_adapter.ping()
            return {
                "status": "healthy",
                "backend": settings.storage_backend.lower(),
                "version": API_VERSION,
            }
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "backend": settings.storage_backend, "error": str(e)}
            )

    @app.get("/healthz")
    async def healthz():
        """
        Liveness probe: is the process alive and responding?
        """
        return {
            "status": "ok",
            "timestamp": time.time(),
            "version": API_VERSION,
        }

    @app.get("/readyz")
    async def readyz(request: Request):
        """
        Readiness probe: storage reachable and decoder pool running.
        Returns 200 if ready, 503 if not ready.
        """
        try:
            request.app.state.storage_adapter.ping()
            if not request.app.state.geometry_reader.started:
                raise RuntimeError("geometry reader not started")
        except Exception as e:
            logger.warning(f"Readiness check failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "error": str(e)},
            )
        return {
            "status": "ready",
            "backend": settings.storage_backend.lower(),
            "uptime_seconds": round(time.time() - request.app.state.started_at, 1),
        }

    app.include_router(boards.router)
    app.include_router(wall_config.router)
    app.include_router(workspaces.router)
    app.include_router(network.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
