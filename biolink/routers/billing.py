"""
Router billing (Stripe).

Endpoints:
- GET  /billing/subscription - plan courant + abonnement
- POST /billing/checkout     - URL de paiement Stripe Checkout
- POST /billing/webhook      - événements Stripe (signature vérifiée)
"""

import logging
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session
from typing import Optional
from biolink.core.database import get_db
from biolink.core.deps import get_current_user
from biolink.models.user import User
from biolink.schemas.billing import BillingStatus, CheckoutResponse
from biolink.services.billing_service import (
    StripeBillingClient,
    get_billing_client,
    get_subscription,
    handle_webhook_event,
    start_checkout,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/billing", tags=["billing"])

@router.get("/subscription", response_model=BillingStatus)
def subscription_status(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"plan": current_user.plan, "subscription": get_subscription(db, current_user.id)}

@router.post("/checkout", response_model=CheckoutResponse)
def checkout(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    client: StripeBillingClient = Depends(get_billing_client)
):
    return {"url": start_checkout(db, client, current_user)}

@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    client: StripeBillingClient = Depends(get_billing_client)
):
    payload = await request.body()
    event = client.construct_event(payload, stripe_signature or "")
    plan = handle_webhook_event(db, client, event)
    if plan is None:
        logger.info("Stripe event %s ignored", event.get("type"))
    return {"received": True}
