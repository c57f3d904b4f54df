import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from biolink.core.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])

@router.get("/z")
def healthz(db: Session = Depends(get_db)):
    # API up + base joignable
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
    return {"status": "ok", "database": "ok"}
