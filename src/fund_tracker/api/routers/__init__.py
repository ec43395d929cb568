"""API routers package."""

from fund_tracker.api.routers.holdings import router as holdings_router
from fund_tracker.api.routers.refresh import router as refresh_router

__all__ = [
    "holdings_router",
    "refresh_router",
]
