import logging
import time
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from loanflow.api.errors import register_exception_handlers
from loanflow.api.v1.router import router as v1_router
from loanflow.config import settings
from loanflow.database import SessionLocal
from loanflow.directories import build_directories

logger = logging.getLogger("loanflow.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One connection pool for all directory calls; every call shares the same timeout.
    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.directory_timeout_seconds)) as client:
        app.state.directories = build_directories(settings, client=client, session_factory=SessionLocal)
        logger.info(
            "directories ready mode=%s tag_service=%s",
            settings.directory_mode,
            settings.tag_service_url or "local",
        )
        yield


def create_app() -> FastAPI:
    app = FastAPI(title="Loanflow Application Service API", lifespan=lifespan)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Attach a request id to every response and log a compact access line.

        - If the caller provides X-Request-ID, we reuse it.
        - Otherwise we generate a UUID4.
        """

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "access request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
