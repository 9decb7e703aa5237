from fastapi import APIRouter, HTTPException, status
import logging

from photochat.core.db_manager import DatabaseManager


class HealthAPI:
    def __init__(self, db_manager: DatabaseManager, logger: logging.Logger):
        self.db_manager = db_manager
        self.logger = logger

        self._health_router = APIRouter(tags=["Health"])
        self._register_endpoints()

    def get_router(self) -> APIRouter:
        return self._health_router

    def _register_endpoints(self):
        @self._health_router.get("/liveness")
        async def liveness():
            try:
                await self.db_manager.ping()
            except Exception as e:
                self.logger.error("Liveness check failed: %s", e)
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail="Database unavailable"
                ) from e
            return {"status": "ok"}
