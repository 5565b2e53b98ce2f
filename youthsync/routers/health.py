from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from youthsync.database import get_db

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check():
    """
    Simple probe to verify the API server is up.
    """
    return {"status": "ok", "service": "YouthSync API"}


@router.get("/db", status_code=status.HTTP_200_OK)
async def db_health_check(db: AsyncSession = Depends(get_db)):
    """
    Deep probe to verify the Database connection is active.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        value = result.scalar_one()
    except (SQLAlchemyError, OSError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {e}",
        )

    if value != 1:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database returned unexpected result",
        )
    return {"status": "up", "database": "connected"}
