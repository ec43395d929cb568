"""Fund data refresh endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import sessionmaker

from fund_tracker.api.deps import get_db_session_factory, get_refresh_service
from fund_tracker.api.schemas import RefreshCancelResponse, RefreshStatusResponse
from fund_tracker.repositories.sqlalchemy import holding_repository_scope
from fund_tracker.services import RefreshService

router = APIRouter(prefix="/refresh", tags=["refresh"])


def _start(service: RefreshService, session_factory: sessionmaker, outdated_only: bool) -> None:
    service.start_background(
        lambda: holding_repository_scope(session_factory),
        outdated_only=outdated_only,
    )


@router.post("", response_model=RefreshStatusResponse, status_code=202)
def refresh_all(
    service: RefreshService = Depends(get_refresh_service),
    session_factory: sessionmaker = Depends(get_db_session_factory),
) -> RefreshStatusResponse:
    """Start refreshing every holding. 409 if a refresh is already running."""
    _start(service, session_factory, outdated_only=False)
    return RefreshStatusResponse.from_domain(service.status())


@router.post("/outdated", response_model=RefreshStatusResponse, status_code=202)
def refresh_outdated(
    service: RefreshService = Depends(get_refresh_service),
    session_factory: sessionmaker = Depends(get_db_session_factory),
) -> RefreshStatusResponse:
    """Start refreshing holdings that were never loaded or lag the newest NAV date."""
    _start(service, session_factory, outdated_only=True)
    return RefreshStatusResponse.from_domain(service.status())


@router.post("/cancel", response_model=RefreshCancelResponse)
def cancel_refresh(
    service: RefreshService = Depends(get_refresh_service),
) -> RefreshCancelResponse:
    """Cancel the running refresh, if any."""
    return RefreshCancelResponse(cancelled=service.cancel())


@router.get("/status", response_model=RefreshStatusResponse)
def get_refresh_status(
    service: RefreshService = Depends(get_refresh_service),
) -> RefreshStatusResponse:
    """Current refresh state, progress and last summary."""
    return RefreshStatusResponse.from_domain(service.status())
