from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, Literal

class SubscriptionResponse(BaseModel):
    user_id: int
    stripe_customer_id: Optional[str]
    stripe_subscription_id: Optional[str]
    plan: str
    status: str
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

class BillingStatus(BaseModel):
    plan: str
    subscription: Optional[SubscriptionResponse] = None

class CheckoutResponse(BaseModel):
    url: str

class GrantPlanRequest(BaseModel):
    user_id: int
    plan: Literal["free", "pro"]
    note: Optional[str] = None  # note d'audit, seulement loggée

class GrantPlanResponse(BaseModel):
    user_id: int
    plan: str
    current_period_end: Optional[datetime]
