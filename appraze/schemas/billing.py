from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class SubscriptionCreate(BaseModel):
    price_id: str


class PortalRequest(BaseModel):
    return_url: str


class CheckoutRequest(BaseModel):
    team_id: str
    price_id: str


class CustomerResponse(BaseModel):
    customer_id: str


class SubscriptionResponse(BaseModel):
    subscription_id: str
    client_secret: Optional[str] = None
    status: Optional[str] = None


class SessionResponse(BaseModel):
    url: str
    session_id: Optional[str] = None


class InvoiceResponse(BaseModel):
    id: str
    amount_paid: Optional[int] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    created: Optional[datetime] = None
    hosted_invoice_url: Optional[str] = None
    invoice_pdf: Optional[str] = None


class WebhookResponse(BaseModel):
    received: bool
    handled: bool
