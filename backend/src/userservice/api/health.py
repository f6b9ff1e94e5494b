"""Health check endpoints."""

import logging
from typing import Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from userservice.errors import StoreFailure
from userservice.persistence import SQLUserStore

logger = logging.getLogger(__name__)


def create_health_router(get_user_store: Callable[[], SQLUserStore | None]) -> APIRouter:
    router = APIRouter(prefix="/api/health", tags=["health"])

    @router.get("/db")
    def database_health():
        """Report whether the database answers a trivial query."""
        store = get_user_store()
        if store is None:
            return JSONResponse(
                status_code=503,
                content={"status": "error", "message": "Database not initialized"},
            )
        try:
            store.ping()
        except StoreFailure as e:
            logger.warning("Database health check failed: %s", e)
            return JSONResponse(
                status_code=503,
                content={"status": "error", "message": "Database connection failed"},
            )
        return {"status": "ok", "message": "Database connection is OK"}

    return router
