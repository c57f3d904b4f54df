"""
Service billing - Stripe checkout et synchronisation des abonnements

Le webhook Stripe est la source de vérité: chaque événement est recopié
dans la table subscriptions et dans users.plan.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Optional

import stripe
from sqlalchemy.orm import Session

from biolink.core.config import settings
from biolink.core.errors import BillingNotConfiguredError, InvalidWebhookError
from biolink.models.subscription import Subscription
from biolink.models.user import User, PLAN_FREE, PLAN_PRO

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("active", "trialing")
MANUAL_GRANT_DAYS = 365


class StripeBillingClient:
    """Client Stripe injecté via get_billing_client() (remplacé dans les tests)"""

    def __init__(self, api_key: str, webhook_secret: str, price_id: str, app_url: str):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.price_id = price_id
        self.app_url = app_url.rstrip("/")

    def construct_event(self, payload: bytes, signature: str) -> dict:
        if not self.webhook_secret:
            raise InvalidWebhookError("STRIPE_WEBHOOK_SECRET is not configured")
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"), signature, self.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
            return json.loads(payload)
        except (stripe.SignatureVerificationError, ValueError) as e:
            raise InvalidWebhookError(f"Invalid signature: {e}")

    def retrieve_subscription(self, subscription_id: str) -> dict:
        subscription = stripe.Subscription.retrieve(subscription_id, api_key=self.api_key)
        # StripeObject -> dict JSON simple
        return json.loads(str(subscription))

    def create_customer(self, email: str, user_id: int) -> str:
        customer = stripe.Customer.create(
            email=email,
            metadata={"user_id": str(user_id)},
            api_key=self.api_key,
        )
        return customer.id

    def create_checkout_session(self, customer_id: str, user_id: int) -> str:
        session = stripe.checkout.Session.create(
            customer=customer_id,
            mode="subscription",
            payment_method_types=["card"],
            line_items=[{"price": self.price_id, "quantity": 1}],
            success_url=f"{self.app_url}/dashboard/upgrade?success=true",
            cancel_url=f"{self.app_url}/dashboard/upgrade?canceled=true",
            subscription_data={"metadata": {"user_id": str(user_id)}},
            allow_promotion_codes=True,
            api_key=self.api_key,
        )
        return session.url


def get_billing_client() -> StripeBillingClient:
    """Dépendance FastAPI"""
    if not settings.STRIPE_SECRET_KEY:
        raise BillingNotConfiguredError("STRIPE_SECRET_KEY is not configured")
    return StripeBillingClient(
        api_key=settings.STRIPE_SECRET_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        price_id=settings.STRIPE_PRO_PRICE_ID,
        app_url=settings.APP_URL,
    )


# ============ HELPERS ============

def _timestamp(value) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.utcfromtimestamp(int(value))


def _period(subscription: dict, key: str) -> Optional[datetime]:
    # les versions récentes de l'API Stripe portent la période sur les items
    if subscription.get(key) is not None:
        return _timestamp(subscription[key])
    items = (subscription.get("items") or {}).get("data") or []
    if items and items[0].get(key) is not None:
        return _timestamp(items[0][key])
    return None


def _user_id_from(subscription: dict) -> Optional[int]:
    raw = (subscription.get("metadata") or {}).get("user_id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def get_subscription(db: Session, user_id: int) -> Optional[Subscription]:
    return db.query(Subscription).filter(Subscription.user_id == user_id).first()


def upsert_subscription(db: Session, user_id: int, **fields) -> Subscription:
    subscription = get_subscription(db, user_id)
    if subscription is None:
        subscription = Subscription(user_id=user_id)
        db.add(subscription)
    for key, value in fields.items():
        setattr(subscription, key, value)
    return subscription


def _get_user(db: Session, user_id: Optional[int]) -> Optional[User]:
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id).first()


def set_user_plan(db: Session, user_id: int, plan: str) -> Optional[User]:
    user = _get_user(db, user_id)
    if user is None:
        logger.warning("Plan change for unknown user %s ignored", user_id)
        return None
    if user.plan != plan:
        logger.info("User %s plan %s -> %s", user_id, user.plan, plan)
    user.plan = plan
    return user


# ============ CHECKOUT ============

def start_checkout(db: Session, client: StripeBillingClient, user: User) -> str:
    """Crée le client Stripe si besoin puis une session Checkout, retourne son URL"""
    subscription = get_subscription(db, user.id)
    customer_id = subscription.stripe_customer_id if subscription else None

    if not customer_id:
        customer_id = client.create_customer(user.email, user.id)
        upsert_subscription(
            db, user.id,
            stripe_customer_id=customer_id,
            plan=subscription.plan if subscription else PLAN_FREE,
            status=subscription.status if subscription else "active",
        )
        db.commit()
        logger.info("Stripe customer %s created for user %s", customer_id, user.id)

    return client.create_checkout_session(customer_id, user.id)


# ============ WEBHOOK ============

def _event_user(db: Session, subscription: dict, event_type: str) -> Optional[User]:
    # événement sans user résolvable (compte supprimé, autre environnement): ignoré
    user_id = _user_id_from(subscription)
    user = _get_user(db, user_id)
    if user is None:
        logger.warning("Stripe %s for unknown user %r ignored", event_type, user_id)
    return user


def handle_webhook_event(db: Session, client: StripeBillingClient, event: dict) -> Optional[str]:
    """
    Recopie l'état Stripe en base.

    - checkout.session.completed      -> plan pro
    - customer.subscription.updated   -> pro si active/trialing, sinon free
    - customer.subscription.deleted   -> free, status canceled
    Retourne le plan appliqué, ou None si l'événement est ignoré.
    """
    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}
    logger.info("Stripe event %s (%s)", event.get("id"), event_type)

    if event_type == "checkout.session.completed":
        if obj.get("mode") != "subscription" or not obj.get("subscription"):
            return None
        subscription = client.retrieve_subscription(obj["subscription"])
        user = _event_user(db, subscription, event_type)
        if user is None:
            return None

        upsert_subscription(
            db, user.id,
            stripe_customer_id=obj.get("customer"),
            stripe_subscription_id=subscription.get("id"),
            plan=PLAN_PRO,
            status=subscription.get("status") or "active",
            current_period_start=_period(subscription, "current_period_start"),
            current_period_end=_period(subscription, "current_period_end"),
        )
        set_user_plan(db, user.id, PLAN_PRO)
        db.commit()
        return PLAN_PRO

    if event_type == "customer.subscription.updated":
        user = _event_user(db, obj, event_type)
        if user is None:
            return None
        status = obj.get("status")
        plan = PLAN_PRO if status in ACTIVE_STATUSES else PLAN_FREE

        upsert_subscription(
            db, user.id,
            stripe_subscription_id=obj.get("id"),
            plan=plan,
            status=status,
            current_period_start=_period(obj, "current_period_start"),
            current_period_end=_period(obj, "current_period_end"),
        )
        set_user_plan(db, user.id, plan)
        db.commit()
        return plan

    if event_type == "customer.subscription.deleted":
        user = _event_user(db, obj, event_type)
        if user is None:
            return None

        # suppression tardive d'un ancien abonnement: la ligne courante n'est pas touchée
        current = get_subscription(db, user.id)
        if current and current.stripe_subscription_id and current.stripe_subscription_id != obj.get("id"):
            logger.info("Stale deletion of %s for user %s ignored (current %s)",
                        obj.get("id"), user.id, current.stripe_subscription_id)
            return None

        upsert_subscription(db, user.id, stripe_subscription_id=obj.get("id"), plan=PLAN_FREE, status="canceled")
        set_user_plan(db, user.id, PLAN_FREE)
        db.commit()
        return PLAN_FREE

    return None


# ============ ADMIN ============

def grant_plan(db: Session, admin: User, user_id: int, plan: str, note: Optional[str] = None) -> Optional[Subscription]:
    """Attribution manuelle d'un plan (pro: un an, free: révocation)"""
    user = set_user_plan(db, user_id, plan)
    if user is None:
        return None

    now = datetime.utcnow()
    if plan == PLAN_PRO:
        subscription = upsert_subscription(
            db, user_id,
            plan=PLAN_PRO,
            status="active",
            stripe_subscription_id=f"manual_{admin.id}_{int(now.timestamp())}",
            current_period_start=now,
            current_period_end=now + timedelta(days=MANUAL_GRANT_DAYS),
        )
    else:
        subscription = upsert_subscription(
            db, user_id,
            plan=PLAN_FREE,
            status="inactive",
            stripe_subscription_id=None,
            current_period_start=None,
            current_period_end=None,
        )

    db.commit()
    db.refresh(subscription)
    logger.info("Admin %s set plan %s for user %s (note=%r)", admin.id, plan, user_id, note)
    return subscription
