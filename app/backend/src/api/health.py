"""Liveness, readiness and metrics endpoints for the assistant service."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..db import get_session_dependency

LOGGER = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health/live")
def liveness() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health/ready")
def readiness(session: Session = Depends(get_session_dependency)) -> dict[str, str]:
    """Report whether the read models are reachable and answers can be phrased."""

    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        LOGGER.warning("readiness_database_unreachable", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from exc

    answers = "enabled" if get_settings().answers_enabled else "disabled"
    return {"status": "ready", "database": "ok", "answers": answers}


@router.get("/metrics")
def metrics() -> Response:
    """Expose assistant query and answer counters in Prometheus format."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
