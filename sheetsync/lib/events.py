"""
Webhook verification and event classification.
Stripe's SDK does the signature check; we only translate its failures and
reduce the verified event to a SubscriptionEvent.
"""

from datetime import datetime, timezone
from typing import Optional

import stripe

from ..errors import InvalidSignature, UnsupportedEventType
from ..models import EventKind, SubscriptionEvent


def verify_event(payload: bytes, sig_header: Optional[str], secret: str) -> stripe.Event:
    """
    Verify a raw webhook body against its Stripe-Signature header.
    Raises InvalidSignature on any failure; nothing else is touched.
    """
    if not sig_header:
        raise InvalidSignature("No Stripe-Signature header value was provided.")

    try:
        return stripe.Webhook.construct_event(payload, sig_header, secret)
    except ValueError as e:
        raise InvalidSignature(f"Invalid payload: {e}") from e
    except stripe.SignatureVerificationError as e:
        raise InvalidSignature(str(e)) from e


def _customer_id(customer) -> Optional[str]:
    # `customer` is an id string unless the event was sent with it expanded
    if customer is None or isinstance(customer, str):
        return customer
    return getattr(customer, "id", None)


def parse_subscription_event(event) -> SubscriptionEvent:
    """Classify a verified event. Anything but created/updated/deleted is rejected."""
    try:
        kind = EventKind(event.type)
    except ValueError:
        raise UnsupportedEventType(event.type)

    # StripeObject is not a dict; absent fields are read as None
    obj = event.data.object
    created = getattr(obj, "created", None)

    return SubscriptionEvent(
        kind=kind,
        subscription_id=getattr(obj, "id", None) or "",
        customer_id=_customer_id(getattr(obj, "customer", None)),
        email_hint=getattr(obj, "email", None),
        customer_email_hint=getattr(obj, "customer_email", None),
        created_at=datetime.fromtimestamp(created, tz=timezone.utc) if created else None,
    )
