"""
Billing Router
Stripe customer/subscription management plus the unauthenticated webhook.
"""
from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional
from appraze.core.exceptions import ValidationFailedError
from appraze.database import get_db
from appraze.models.profile import Profile
from appraze.routers.auth_deps import require_org_context
from appraze.schemas.billing import (
    SubscriptionCreate, PortalRequest, CheckoutRequest,
    CustomerResponse, SubscriptionResponse, SessionResponse, InvoiceResponse, WebhookResponse,
)
from appraze.services.billing import BillingService
from appraze.services.team import TeamService

router = APIRouter(
    prefix="/billing",
    tags=["billing"]
)


def _require_customer(current_user: Profile) -> str:
    if not current_user.stripe_customer_id:
        raise ValidationFailedError("No billing customer exists for this account")
    return current_user.stripe_customer_id


@router.post("/customer", response_model=CustomerResponse)
def create_customer(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    return {"customer_id": BillingService(db, current_user.organization_id).create_customer(current_user)}


@router.post("/subscriptions", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def create_subscription(
    data: SubscriptionCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    service = BillingService(db, current_user.organization_id)
    customer_id = service.create_customer(current_user)
    return service.create_subscription(customer_id, data.price_id)


@router.delete("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
def cancel_subscription(
    subscription_id: str,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    return BillingService(db, current_user.organization_id).cancel_subscription(current_user, subscription_id)


@router.post("/portal", response_model=SessionResponse)
def create_portal_session(
    data: PortalRequest,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    customer_id = _require_customer(current_user)
    return BillingService(db, current_user.organization_id).create_portal_session(customer_id, data.return_url)


@router.post("/checkout", response_model=SessionResponse)
def create_checkout_session(
    data: CheckoutRequest,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_org_context)
):
    # Team must belong to the caller's organization
    TeamService(db, current_user.organization_id).get_team(data.team_id)
    return BillingService(db, current_user.organization_id).create_checkout_session(data.team_id, data.price_id)


@router.get("/invoices", response_model=List[InvoiceResponse])
def list_invoices(db: Session = Depends(get_db), current_user: Profile = Depends(require_org_context)):
    customer_id = _require_customer(current_user)
    return BillingService(db, current_user.organization_id).list_invoices(customer_id)


async def _raw_body(request: Request) -> bytes:
    # Signature verification needs the exact bytes Stripe sent
    return await request.body()


@router.post("/webhook", response_model=WebhookResponse)
def stripe_webhook(
    payload: bytes = Depends(_raw_body),
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    db: Session = Depends(get_db),
):
    event = BillingService.construct_event(payload, stripe_signature)
    return BillingService(db).handle_event(event)
