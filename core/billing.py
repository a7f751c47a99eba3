import logging
import uuid
from datetime import datetime, timezone
from typing import Any

import stripe
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from core.errors import BillingError
from db.trek_store import TrekStore
from models.records import User, utcnow

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = {"active", "trialing"}


def _timestamp(value: int | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _first_item(subscription: Any) -> dict:
    items = subscription["items"]["data"]
    return items[0] if items else {}


def _period(subscription: Any, key: str) -> datetime | None:
    # newer API versions only report billing periods on the subscription items
    value = subscription.get(key) or _first_item(subscription).get(key)
    return _timestamp(value)


def _interval(subscription: Any) -> str | None:
    plan = _first_item(subscription).get("plan") or {}
    return plan.get("interval")


class BillingService:

    def __init__(self, settings: Settings, store: TrekStore, client: Any = stripe) -> None:
        self.settings = settings
        self.store = store
        self.stripe = client
        self.api_key = settings.stripe_secret_key
        self.webhook_secret = settings.stripe_webhook_secret

    async def _call(self, method, *args, **kwargs) -> Any:
        # the SDK is blocking, keep it off the event loop
        return await run_in_threadpool(method, *args, api_key=self.api_key, **kwargs)

    def plans(self) -> dict:
        s = self.settings
        return {
            "basic": {
                "name": "Basic",
                "description": "Get started with basic trekking itineraries",
                "prices": {
                    "monthly": {"id": s.stripe_basic_plan_monthly_id, "price": 0, "interval": "month", "display": "$0/month"},
                    "annual": {"id": s.stripe_basic_plan_annual_id, "price": 0, "interval": "year", "display": "$0/year"},
                },
                "features": [
                    f"Generate up to {s.free_monthly_generations} itineraries per month",
                    "Advanced filters and preferences",
                    "Basic conversational planning",
                ],
            },
            "pro": {
                "name": "Professional",
                "description": "Unlock unlimited itineraries and premium features",
                "prices": {
                    "monthly": {"id": s.stripe_pro_plan_monthly_id, "price": 9.99, "interval": "month", "display": "$9.99/month"},
                    "annual": {
                        "id": s.stripe_pro_plan_annual_id,
                        "price": 99.99,
                        "interval": "year",
                        "display": "$99.99/year",
                        "savings": "17%",
                        "saveAmount": "$19.89",
                    },
                },
                "features": [
                    "Unlimited itinerary generation",
                    "Unlimited saved itineraries",
                    "Advanced filters and preferences",
                    "Advanced conversational planning",
                    "Access to early features",
                ],
            },
        }

    async def _ensure_customer(self, user: User) -> str:
        if user.stripe_customer_id:
            return user.stripe_customer_id

        customer = await self._call(
            self.stripe.Customer.create,
            email=user.email,
            name=user.display_name or user.email,
            metadata={"userId": str(user.id)},
        )
        await self.store.update_user(user.id, stripe_customer_id=customer["id"])
        user.stripe_customer_id = customer["id"]
        logger.info(f"Created Stripe customer {customer['id']} for user {user.id}")
        return customer["id"]

    async def _checkout(self, customer_id: str, price_id: str, origin: str, metadata: dict) -> dict:
        session = await self._call(
            self.stripe.checkout.Session.create,
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            mode="subscription",
            success_url=f"{origin}/subscription/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}/subscription/cancel",
            metadata=metadata,
            allow_promotion_codes=True,
        )
        return {"sessionId": session["id"], "url": session["url"]}

    async def create_checkout_session(
        self,
        user: User,
        price_id: str,
        billing_interval: str = "monthly",
        origin: str | None = None,
    ) -> dict:
        try:
            customer_id = await self._ensure_customer(user)
            return await self._checkout(
                customer_id,
                price_id,
                origin or self.settings.frontend_url,
                {"userId": str(user.id), "billingInterval": billing_interval},
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating checkout session: {e}")
            raise BillingError("Failed to create checkout session", status_code=500) from e

    def construct_event(self, payload: bytes, signature: str | None) -> Any:
        try:
            return self.stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.error(f"Webhook Error: {e}")
            raise BillingError(f"Webhook Error: {e}") from e

    async def handle_event(self, event: Any) -> dict:
        event_type = event["type"]
        obj = event["data"]["object"]
        logger.info(f"Stripe event received: {event_type}")

        if event_type == "checkout.session.completed":
            if obj.get("mode") != "subscription":
                return {"received": True, "message": "Non-subscription session, ignoring"}

            subscription = await self._call(self.stripe.Subscription.retrieve, obj["subscription"])
            user_id = uuid.UUID((obj.get("metadata") or {})["userId"])
            await self.store.update_user(
                user_id,
                subscription_status="premium",
                stripe_subscription_id=subscription["id"],
                billing_interval=_interval(subscription),
                subscription_start=_period(subscription, "current_period_start"),
                subscription_end=_period(subscription, "current_period_end"),
            )

        elif event_type == "customer.subscription.updated":
            user = await self.store.find_user_by_subscription(obj["id"])
            if user:
                await self.store.update_user(
                    user.id,
                    subscription_status="premium" if obj.get("status") in ACTIVE_STATUSES else "free",
                    billing_interval=_interval(obj),
                    subscription_end=_period(obj, "current_period_end"),
                )

        elif event_type == "customer.subscription.deleted":
            user = await self.store.find_user_by_subscription(obj["id"])
            if user:
                await self.store.update_user(
                    user.id,
                    subscription_status="free",
                    subscription_end=utcnow(),
                    stripe_subscription_id=None,
                )

        return {"received": True}

    async def current_subscription(self, user: User) -> dict:
        details = {
            "status": user.subscription_status or "free",
            "billingInterval": user.billing_interval or "month",
            "formattedInterval": "annually" if user.billing_interval == "year" else "monthly",
            "startDate": user.subscription_start,
            "endDate": user.subscription_end,
            "isActive": user.is_premium,
        }
        if not user.stripe_subscription_id:
            return details

        # Stripe outages only cost the extra details
        try:
            subscription = await self._call(self.stripe.Subscription.retrieve, user.stripe_subscription_id)
        except stripe.StripeError as e:
            logger.error(f"Error fetching subscription from Stripe: {e}")
            return details

        plan = _first_item(subscription).get("plan") or {}
        period_end = _period(subscription, "current_period_end")
        details.update({
            "currentPeriodEnd": period_end,
            "cancelAtPeriodEnd": subscription.get("cancel_at_period_end", False),
            "nextInvoice": period_end,
            "plan": {
                "name": "Pro" if plan.get("product") else "Basic",
                "amount": f"{plan['amount'] / 100:.2f}" if plan.get("amount") else 0,
                "currency": (plan.get("currency") or "usd").upper(),
            },
        })

        if plan.get("product"):
            try:
                product = await self._call(self.stripe.Product.retrieve, plan["product"])
                details["plan"]["name"] = product["name"]
            except stripe.StripeError as e:
                logger.error(f"Error fetching product details: {e}")

        return details

    def _require_subscription(self, user: User, message: str = "No active subscription found") -> str:
        if not user.stripe_subscription_id:
            raise BillingError(message)
        return user.stripe_subscription_id

    async def cancel(self, user: User) -> dict:
        subscription_id = self._require_subscription(user)
        try:
            await self._call(self.stripe.Subscription.modify, subscription_id, cancel_at_period_end=True)
        except stripe.StripeError as e:
            logger.error(f"Error canceling subscription: {e}")
            raise BillingError("Failed to cancel subscription", status_code=500) from e
        return {
            "message": "Subscription will be canceled at the end of the billing period",
            "endDate": user.subscription_end,
        }

    async def reactivate(self, user: User) -> dict:
        subscription_id = self._require_subscription(user, "No subscription found")
        try:
            subscription = await self._call(self.stripe.Subscription.retrieve, subscription_id)
            if not subscription.get("cancel_at_period_end"):
                raise BillingError("Subscription is not set to cancel")
            await self._call(self.stripe.Subscription.modify, subscription_id, cancel_at_period_end=False)
        except stripe.StripeError as e:
            logger.error(f"Error reactivating subscription: {e}")
            raise BillingError("Failed to reactivate subscription", status_code=500) from e
        return {"message": "Subscription reactivated successfully"}

    async def change_plan(self, user: User, new_price_id: str, origin: str | None = None) -> dict:
        try:
            if not user.stripe_subscription_id:
                customer_id = await self._ensure_customer(user)
                return await self._checkout(
                    customer_id,
                    new_price_id,
                    origin or self.settings.frontend_url,
                    {"userId": str(user.id)},
                )

            subscription = await self._call(self.stripe.Subscription.retrieve, user.stripe_subscription_id)
            await self._call(
                self.stripe.Subscription.modify,
                user.stripe_subscription_id,
                items=[{"id": _first_item(subscription)["id"], "price": new_price_id}],
                proration_behavior="create_prorations",
            )
        except stripe.StripeError as e:
            logger.error(f"Error changing subscription plan: {e}")
            raise BillingError("Failed to change subscription plan", status_code=500) from e
        return {"message": "Subscription updated successfully"}

    async def cancel_immediately(self, user: User) -> dict:
        subscription_id = self._require_subscription(user)
        try:
            await self._call(self.stripe.Subscription.cancel, subscription_id)
        except stripe.StripeError as e:
            logger.error(f"Error canceling subscription: {e}")
            raise BillingError("Failed to cancel subscription", status_code=500) from e

        await self.store.update_user(
            user.id,
            subscription_status="free",
            stripe_subscription_id=None,
            subscription_end=utcnow(),
        )
        return {"message": "Subscription has been canceled immediately"}

    async def customer_portal(self, user: User, return_url: str | None = None) -> dict:
        if not user.stripe_customer_id:
            raise BillingError("No Stripe customer found")
        try:
            session = await self._call(
                self.stripe.billing_portal.Session.create,
                customer=user.stripe_customer_id,
                return_url=return_url or f"{self.settings.frontend_url}/account",
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating customer portal session: {e}")
            raise BillingError("Failed to create customer portal session", status_code=500) from e
        return {"url": session["url"]}
