"""
Webhook handlers.
Only Stripe subscription webhooks.

Handles:
- customer.subscription.created
- customer.subscription.updated
- customer.subscription.deleted

Every handled event answers 200 with a plain-text trace of what happened
to the sheet. Bad signatures answer 400, other event types 500.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from ...config import get_settings
from ...errors import WebhookError
from ...lib import SubscriptionReconciler, parse_subscription_event, verify_event


logger = logging.getLogger(__name__)

router = APIRouter()


def get_webhook_secret() -> Optional[str]:
    return get_settings().stripe_webhook_secret


def get_reconciler() -> SubscriptionReconciler:
    return SubscriptionReconciler()


def webhook_error(status_code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(f"Webhook Error: {message}", status_code=status_code)


@router.post("/stripe", response_class=PlainTextResponse)
async def stripe_webhook(
    request: Request,
    webhook_secret: Optional[str] = Depends(get_webhook_secret),
    reconciler: SubscriptionReconciler = Depends(get_reconciler),
):
    """
    Handle Stripe subscription webhooks.

    1. Read the raw body (signature is computed over the exact bytes)
    2. Verify it with STRIPE_WEBHOOK_SECRET
    3. Reject anything that is not a subscription lifecycle event
    4. Reconcile the sheet against current Stripe state

    Stripe and Sheets failures during step 4 are not caught.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    if not webhook_secret:
        logger.error("STRIPE_WEBHOOK_SECRET is not configured")
        return webhook_error(500, "Webhook secret not configured")

    try:
        event = verify_event(payload, sig_header, webhook_secret)
        subscription_event = parse_subscription_event(event)
    except WebhookError as e:
        logger.warning("Webhook rejected: %s", e)
        return webhook_error(e.status_code, str(e))

    # Stripe and Google clients block; keep them off the event loop
    result = await run_in_threadpool(reconciler.reconcile, subscription_event)

    return PlainTextResponse(result.message, status_code=200)
