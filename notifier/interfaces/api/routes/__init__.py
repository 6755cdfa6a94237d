from fastapi import FastAPI

from .destinations import router as destinations_router
from .ingest import router as ingest_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(destinations_router)
    app.include_router(notifications_router)
    app.include_router(ingest_router)
