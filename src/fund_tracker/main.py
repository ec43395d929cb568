"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fund_tracker import __version__
from fund_tracker.config.settings import get_settings
from fund_tracker.config.logging_config import setup_logging
from fund_tracker.repositories.sqlalchemy.database import init_db
from fund_tracker.api.routers import holdings_router, refresh_router
from fund_tracker.core.exceptions import AppError

# Error codes that map to something other than 400
_STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "REFRESH_IN_PROGRESS": 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    init_db()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Client fund holdings with batch NAV refresh",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(holdings_router)
app.include_router(refresh_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(exc.code, 400),
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
