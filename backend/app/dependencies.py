"""
FastAPI dependencies.
"""

from typing import Generator, Optional
from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_household_id(
    x_household_id: Optional[str] = Header(None, alias=settings.household_header)
) -> str:
    """
    Resolve the household (scope) the request acts on.

    Authentication happens upstream; the gateway forwards the caller's
    household id in a header.
    """
    if not x_household_id or not x_household_id.strip():
        raise HTTPException(
            status_code=400,
            detail=f"Missing {settings.household_header} header"
        )
    return x_household_id.strip()
