"""
Error taxonomy.

Only webhook errors get a tailored HTTP response. Everything else is left
to propagate and ends the request with a plain 500 - there is no retry and
no rollback of a half-finished reconciliation.
"""


class WebhookError(Exception):
    """Base for failures that map to a specific webhook response."""
    status_code = 500


class InvalidSignature(WebhookError):
    """Signature header missing, malformed, or not matching the secret."""
    status_code = 400


class UnsupportedEventType(WebhookError):
    """Verified event that is not a subscription created/updated/deleted event."""
    status_code = 500

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"Unexpected event type: {event_type}")


class CustomerDeleted(Exception):
    """Name lookup on a customer Stripe reports as deleted."""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} has been deleted")


class CustomerNotFound(Exception):
    """Name lookup on a customer id Stripe does not know."""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"No such customer: {customer_id}")


class ProviderUnavailable(Exception):
    """Any Stripe API failure other than a missing customer."""


class StoreUnavailable(Exception):
    """Any Google Sheets API failure."""
