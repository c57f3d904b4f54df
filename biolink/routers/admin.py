from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from biolink.core.database import get_db
from biolink.core.deps import require_admin
from biolink.models.user import User
from biolink.schemas.billing import GrantPlanRequest, GrantPlanResponse
from biolink.services.billing_service import grant_plan

router = APIRouter(prefix="/admin", tags=["admin"])

@router.post("/grant-plan", response_model=GrantPlanResponse)
def grant_plan_endpoint(body: GrantPlanRequest, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    """Donner / retirer le plan Pro manuellement (admins uniquement)"""
    subscription = grant_plan(db, admin, body.user_id, body.plan, body.note)
    if subscription is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {
        "user_id": body.user_id,
        "plan": subscription.plan,
        "current_period_end": subscription.current_period_end
    }
