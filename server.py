"""FastAPI entry point for the Arsip web API."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from sqlmodel import select
from starlette.middleware.base import BaseHTTPMiddleware

load_dotenv(Path(__file__).resolve().with_name(".env"))

from arsip import storage, storage_config
from arsip_web import models
from arsip_web.database import init_db, session_scope
from arsip_web.routes import records, transfers, units

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(
        "Filing %s records per drawer across %s drawers for %s mapped units",
        storage_config.DRAWER_CAPACITY,
        storage_config.MAX_DRAWERS,
        len(storage_config.UNIT_CABINETS),
    )
    with session_scope() as session:
        unmapped = [
            unit.name
            for unit in session.exec(select(models.Unit)).all()
            if not storage.resolve_cabinet(unit.name, storage_config.UNIT_CABINETS)
        ]
    if unmapped:
        logger.warning("Units without a filing cabinet: %s", ", ".join(sorted(unmapped)))
    yield


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject strict security headers for every HTTP response."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        response = await call_next(request)
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload"
        )
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        return response


app = FastAPI(title="Arsip", version="1.0.0", lifespan=lifespan)
app.add_middleware(SecurityHeadersMiddleware)
app.include_router(units.router)
app.include_router(records.router)
app.include_router(transfers.router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


def run() -> None:
    """Helper to run the development server."""

    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    run()
