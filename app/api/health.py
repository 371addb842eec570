"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.sales import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(response: Response, db: Session = Depends(get_db)):
    """Service health check, including a round trip to the database."""
    environment = get_settings().ENVIRONMENT
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed, database unreachable: {e}")
        response.status_code = 503
        return HealthResponse(status="error", database="disconnected", environment=environment)

    return HealthResponse(status="ok", database="connected", environment=environment)
