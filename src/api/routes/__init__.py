"""API routers."""

from src.api.routes.credits import router as credits_router

__all__ = ["credits_router"]
