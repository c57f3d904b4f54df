from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from biolink.core.database import get_db
from biolink.core.deps import get_current_user
from biolink.models.user import User
from biolink.schemas.analytics import AnalyticsSummary
from biolink.services.analytics_service import get_user_analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])

@router.get("", response_model=AnalyticsSummary)
def analytics(days: int = Query(30, ge=1, le=365), db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Statistiques de clics de toutes les pages de l'user sur les `days` derniers jours"""
    return get_user_analytics(db, current_user.id, days)
