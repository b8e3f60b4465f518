"""
Customer identity and entitlement, straight from Stripe.

Key design:
- Stripe is the source of truth; nothing is cached between events
- Entitlement = at least one subscription in "active" status
- Entitlement can be checked per email, across every customer id that
  shares it (people re-subscribe under a new customer after a card change)
"""

import logging
from typing import Optional

import stripe

from ..config import get_settings
from ..errors import CustomerDeleted, CustomerNotFound, ProviderUnavailable
from ..models import CustomerRecord, CustomerState, SubscriptionEvent


logger = logging.getLogger(__name__)

ACTIVE_STATUS = "active"


class CustomerService:
    """Resolves who a customer is and whether they are currently paying."""

    def __init__(self, api_key: Optional[str] = None):
        stripe.api_key = api_key or get_settings().stripe_secret_key

    def lookup_customer(self, customer_id: str) -> CustomerRecord:
        """Fetch a customer. Missing and deleted customers are states, not errors."""
        try:
            customer = stripe.Customer.retrieve(customer_id)
        except stripe.InvalidRequestError as e:
            if e.code == "resource_missing":
                return CustomerRecord(id=customer_id, state=CustomerState.NOT_FOUND)
            raise ProviderUnavailable(f"Stripe customer lookup failed: {e}") from e
        except stripe.StripeError as e:
            raise ProviderUnavailable(f"Stripe customer lookup failed: {e}") from e

        if getattr(customer, "deleted", False):
            return CustomerRecord(id=customer_id, state=CustomerState.DELETED)

        return CustomerRecord(
            id=customer_id,
            state=CustomerState.FOUND,
            email=getattr(customer, "email", None),
            name=getattr(customer, "name", None),
            description=getattr(customer, "description", None),
        )

    def resolve_email(self, event: SubscriptionEvent) -> Optional[str]:
        """
        Email for the event, in priority order:
        1. `email` on the event object
        2. `customer_email` on the event object
        3. Stripe lookup by customer id (None if missing or deleted)
        """
        if event.email_hint:
            return event.email_hint
        if event.customer_email_hint:
            return event.customer_email_hint
        if not event.customer_id:
            return None

        record = self.lookup_customer(event.customer_id)
        if record.state != CustomerState.FOUND:
            logger.info("Customer %s is %s, no email", event.customer_id, record.state.value)
            return None
        return record.email

    def get_display_name(self, customer_id: str) -> str:
        """Name, else description, else "-". Deleted customers are never named."""
        record = self.lookup_customer(customer_id)
        if record.state == CustomerState.DELETED:
            raise CustomerDeleted(customer_id)
        if record.state == CustomerState.NOT_FOUND:
            raise CustomerNotFound(customer_id)
        return record.display_name

    def has_active_subscription(self, customer_id: Optional[str]) -> bool:
        if not customer_id:
            # Without a customer filter Stripe would list every subscription
            return False

        try:
            subscriptions = stripe.Subscription.list(
                customer=customer_id,
                status=ACTIVE_STATUS,
                limit=1,
            )
        except stripe.StripeError as e:
            raise ProviderUnavailable(f"Stripe subscription list failed: {e}") from e

        return len(subscriptions.data) > 0

    def has_active_subscription_by_email(self, email: str) -> bool:
        """True on the first customer sharing `email` with an active subscription."""
        try:
            customers = stripe.Customer.list(email=email, limit=100)
            for customer in customers.auto_paging_iter():
                if self.has_active_subscription(customer.id):
                    return True
        except stripe.StripeError as e:
            raise ProviderUnavailable(f"Stripe customer list failed: {e}") from e

        return False
