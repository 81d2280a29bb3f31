"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from servicedesk.db import get_session

router = APIRouter()


@router.get("/health", operation_id="healthCheck")
async def health_check(session: Annotated[AsyncSession, Depends(get_session)]) -> dict[str, str]:
    """Health check endpoint, including a database round trip."""
    await session.execute(text("SELECT 1"))
    return {"status": "healthy", "database": "ok"}
