"""
Billing: Stripe customers, subscriptions, checkout/portal sessions, invoices,
webhook dispatch and per-team usage metering.

Subscription state is owned by Stripe; this module only mirrors what the
webhook reports onto profiles, subscriptions and teams.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import stripe

from appraze.core.config import settings
from appraze.core.exceptions import BillingError, NotFoundError, WebhookSignatureError
from appraze.services.base import BaseService

USAGE_WINDOW_DAYS = 30
UNLIMITED = -1


def _configure_stripe() -> None:
    stripe.api_key = settings.billing.stripe_secret_key
    stripe.api_version = settings.billing.stripe_api_version


def _timestamp(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


class BillingService(BaseService):
    # ------------------------------------------------------------------
    # Stripe API calls
    # ------------------------------------------------------------------
    def create_customer(self, profile) -> str:
        if profile.stripe_customer_id:
            return profile.stripe_customer_id
        _configure_stripe()
        try:
            customer = stripe.Customer.create(
                email=profile.email,
                name=profile.full_name or None,
                metadata={"user_id": profile.id},
            )
        except stripe.StripeError as e:
            self.log_error(f"Error creating Stripe customer: {e}")
            raise BillingError("Failed to create customer") from e

        self.store.update("profiles", {"stripe_customer_id": customer["id"]}, {"id": profile.id})
        return customer["id"]

    def create_subscription(self, customer_id: str, price_id: str) -> Dict[str, Any]:
        _configure_stripe()
        try:
            subscription = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                expand=["latest_invoice.payment_intent"],
            )
        except stripe.StripeError as e:
            self.log_error(f"Error creating subscription: {e}")
            raise BillingError("Failed to create subscription") from e

        client_secret = None
        invoice = subscription.get("latest_invoice")
        if invoice and invoice.get("payment_intent"):
            client_secret = invoice["payment_intent"].get("client_secret")
        return {"subscription_id": subscription["id"], "client_secret": client_secret}

    def cancel_subscription(self, profile, subscription_id: str) -> Dict[str, Any]:
        """Cancel one of the caller's own subscriptions; anything else is not found."""
        owned = self.store.maybe_single(
            "subscriptions", {"stripe_subscription_id": subscription_id, "user_id": profile.id}
        )
        if owned is None and profile.stripe_customer_id:
            owned = self.store.maybe_single(
                "subscriptions",
                {"stripe_subscription_id": subscription_id, "stripe_customer_id": profile.stripe_customer_id},
            )
        if owned is None:
            raise NotFoundError("Subscription not found")

        _configure_stripe()
        try:
            subscription = stripe.Subscription.cancel(subscription_id)
        except stripe.StripeError as e:
            self.log_error(f"Error canceling subscription: {e}")
            raise BillingError("Failed to cancel subscription") from e
        return {"subscription_id": subscription["id"], "status": subscription["status"]}

    def create_portal_session(self, customer_id: str, return_url: str) -> Dict[str, str]:
        _configure_stripe()
        try:
            session = stripe.billing_portal.Session.create(customer=customer_id, return_url=return_url)
        except stripe.StripeError as e:
            self.log_error(f"Error creating portal session: {e}")
            raise BillingError("Failed to create billing portal session") from e
        return {"url": session["url"]}

    def create_checkout_session(self, team_id: str, price_id: str) -> Dict[str, str]:
        _configure_stripe()
        billing_url = f"{settings.email.app_url}/dashboard/billing"
        try:
            session = stripe.checkout.Session.create(
                mode="subscription",
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=f"{billing_url}?success=true",
                cancel_url=f"{billing_url}?canceled=true",
                metadata={"teamId": team_id},
                subscription_data={"metadata": {"teamId": team_id}},
            )
        except stripe.StripeError as e:
            self.log_error(f"Error creating checkout session: {e}")
            raise BillingError("Failed to create checkout session") from e
        return {"session_id": session["id"], "url": session["url"]}

    def list_invoices(self, customer_id: str, limit: int = 24) -> List[Dict[str, Any]]:
        _configure_stripe()
        try:
            invoices = stripe.Invoice.list(customer=customer_id, limit=limit)
        except stripe.StripeError as e:
            self.log_error(f"Error listing invoices: {e}")
            raise BillingError("Failed to fetch invoices") from e
        return [
            {
                "id": invoice["id"],
                "amount_paid": invoice.get("amount_paid"),
                "currency": invoice.get("currency"),
                "status": invoice.get("status"),
                "created": _timestamp(invoice.get("created")),
                "hosted_invoice_url": invoice.get("hosted_invoice_url"),
                "invoice_pdf": invoice.get("invoice_pdf"),
            }
            for invoice in invoices["data"]
        ]

    # ------------------------------------------------------------------
    # Webhook
    # ------------------------------------------------------------------
    @staticmethod
    def construct_event(payload: bytes, signature: Optional[str]):
        secret = settings.billing.stripe_webhook_secret
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")
        if not secret:
            raise WebhookSignatureError("Webhook secret is not configured")
        try:
            return stripe.Webhook.construct_event(payload, signature, secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise WebhookSignatureError(f"Webhook signature verification failed: {e}") from e

    def handle_event(self, event) -> Dict[str, Any]:
        handlers = {
            "customer.subscription.created": self._subscription_changed,
            "customer.subscription.updated": self._subscription_changed,
            "customer.subscription.deleted": self._subscription_deleted,
            "invoice.paid": self._payment_succeeded,
            "invoice.payment_succeeded": self._payment_succeeded,
            "invoice.payment_failed": self._payment_failed,
        }
        event_type = event["type"]
        handler = handlers.get(event_type)
        if handler is None:
            self.log_info(f"Unhandled event type: {event_type}")
            return {"received": True, "handled": False}
        handler(event["data"]["object"])
        return {"received": True, "handled": True}

    def _subscription_changed(self, subscription) -> None:
        self._sync_subscription(subscription, subscription.get("status"))

    def _subscription_deleted(self, subscription) -> None:
        self._sync_subscription(subscription, "canceled")

    def _sync_subscription(self, subscription, status: Optional[str]) -> None:
        customer_id = subscription.get("customer")
        plan = self._plan_key(subscription)
        period_start = _timestamp(subscription.get("current_period_start"))
        period_end = _timestamp(subscription.get("current_period_end"))

        profile = None
        if customer_id:
            profile = self.store.maybe_single("profiles", {"stripe_customer_id": customer_id})
        if profile is not None:
            self.store.update(
                "profiles",
                {"subscription_status": status, "subscription_plan": plan, "subscription_period_end": period_end},
                {"id": profile["id"]},
            )
        else:
            self.log_warning(f"No profile for Stripe customer {customer_id}")

        self.store.upsert(
            "subscriptions",
            {
                "stripe_subscription_id": subscription["id"],
                "stripe_customer_id": customer_id,
                "user_id": profile["id"] if profile else None,
                "status": status,
                "plan_id": plan,
                "current_period_start": period_start,
                "current_period_end": period_end,
                "cancel_at_period_end": bool(subscription.get("cancel_at_period_end")),
            },
            on_conflict=("stripe_subscription_id",),
        )

        team_id = (subscription.get("metadata") or {}).get("teamId")
        if team_id:
            values = {"subscription_status": status, "subscription_period_end": period_end}
            if plan and self.store.maybe_single("subscription_plans", {"id": plan}) is not None:
                values["plan_id"] = plan
            updated = self.store.update("teams", values, {"id": team_id})
            if not updated:
                self.log_warning(f"Subscription {subscription['id']} references unknown team {team_id}")

    def _payment_succeeded(self, invoice) -> None:
        self._record_payment(invoice, "succeeded")

    def _payment_failed(self, invoice) -> None:
        self._record_payment(invoice, "failed")

    def _record_payment(self, invoice, payment_status: str) -> None:
        customer_id = invoice.get("customer")
        if not customer_id:
            # A None filter would match every profile without a customer
            self.log_warning(f"Invoice {invoice.get('id')} has no customer; payment not recorded")
            return
        updated = self.store.update(
            "profiles",
            {"last_payment_status": payment_status, "last_payment_date": datetime.now(timezone.utc)},
            {"stripe_customer_id": customer_id},
        )
        if not updated:
            self.log_warning(f"No profile for Stripe customer {customer_id}")

    @staticmethod
    def _plan_key(subscription) -> Optional[str]:
        items = (subscription.get("items") or {}).get("data") or []
        if not items:
            return None
        price = items[0].get("price") or {}
        return price.get("lookup_key") or price.get("id")

    # ------------------------------------------------------------------
    # Usage metering
    # ------------------------------------------------------------------
    def track_usage(self, team_id: str, feature: str, quantity: int = 1) -> Dict[str, Any]:
        return self.store.insert("usage_logs", [{"team_id": team_id, "feature": feature, "quantity": quantity}])[0]

    def check_usage_limit(self, team_id: str, feature: str) -> bool:
        """True while the team is under its plan's quota for the trailing 30 days."""
        team = self.store.maybe_single("teams", {"id": team_id}, expand=("plan",))
        if team is None or team.get("plan") is None:
            return False
        limit = (team["plan"].get("limits") or {}).get(feature)
        if limit is None:
            return False
        if limit == UNLIMITED:
            return True

        since = datetime.now(timezone.utc) - timedelta(days=USAGE_WINDOW_DAYS)
        logs = self.store.select("usage_logs", {"team_id": team_id, "feature": feature, "created_at__gte": since})
        used = sum(log["quantity"] or 0 for log in logs)
        return used < limit
