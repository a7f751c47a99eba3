import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from app.api.deps import current_user, get_billing
from core.billing import BillingService
from core.errors import BillingError
from models.dtos import ChangePlanRequest, CheckoutRequest
from models.records import User


logger = logging.getLogger(__name__)
router = APIRouter()


def _http_error(e: BillingError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/plans")
def get_plans(billing: BillingService = Depends(get_billing)):
    return billing.plans()


@router.post("/create-checkout-session")
async def create_checkout_session(
    body: CheckoutRequest,
    origin: str | None = Header(default=None),
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
):
    try:
        return await billing.create_checkout_session(user, body.price_id, body.billing_interval, origin)
    except BillingError as e:
        raise _http_error(e)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    billing: BillingService = Depends(get_billing),
):
    payload = await request.body()
    try:
        event = billing.construct_event(payload, stripe_signature)
    except BillingError as e:
        raise _http_error(e)

    try:
        return await billing.handle_event(event)
    except Exception as e:
        logger.error(f"Error processing webhook: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process webhook")


@router.get("/current")
async def current_subscription(user: User = Depends(current_user), billing: BillingService = Depends(get_billing)):
    return await billing.current_subscription(user)


@router.post("/cancel")
async def cancel_subscription(user: User = Depends(current_user), billing: BillingService = Depends(get_billing)):
    try:
        return await billing.cancel(user)
    except BillingError as e:
        raise _http_error(e)


@router.post("/reactivate")
async def reactivate_subscription(user: User = Depends(current_user), billing: BillingService = Depends(get_billing)):
    try:
        return await billing.reactivate(user)
    except BillingError as e:
        raise _http_error(e)


@router.post("/change-plan")
async def change_plan(
    body: ChangePlanRequest,
    origin: str | None = Header(default=None),
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
):
    try:
        return await billing.change_plan(user, body.new_price_id, origin)
    except BillingError as e:
        raise _http_error(e)


@router.post("/cancel-immediately")
async def cancel_immediately(user: User = Depends(current_user), billing: BillingService = Depends(get_billing)):
    try:
        return await billing.cancel_immediately(user)
    except BillingError as e:
        raise _http_error(e)


@router.get("/customer-portal")
async def customer_portal(
    returnUrl: str | None = None,
    user: User = Depends(current_user),
    billing: BillingService = Depends(get_billing),
):
    try:
        return await billing.customer_portal(user, returnUrl)
    except BillingError as e:
        raise _http_error(e)
