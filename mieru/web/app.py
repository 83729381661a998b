"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from mieru import __version__
from mieru.web.api_analysis import router as analysis_router


def create_app() -> FastAPI:
    app = FastAPI(title="mieru", version=__version__)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "version": __version__}

    app.include_router(analysis_router)
    return app
