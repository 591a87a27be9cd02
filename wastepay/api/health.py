import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..db.engine import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", tags=["System"])
async def get_system_health(session: AsyncSession = Depends(get_session)):
    """
    Returns the service status and whether the database answers.
    """
    try:
        await session.exec(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check: database unavailable: {e}")
        return {"status": "degraded", "database": "unavailable"}
    return {"status": "ok", "database": "ok"}
