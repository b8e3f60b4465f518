"""
Reconciliation: bring the sheet in line with current entitlement.

Webhooks can arrive out of order and a customer can hold several
subscriptions, so the event type alone never decides anything. Each
handler re-reads Stripe and the sheet, then mutates at most one row.

Decision table:

    created  active & absent            -> append
             otherwise                  -> nothing
    updated  entitled & absent          -> append
             entitled & present         -> nothing
             not entitled & present     -> clear
             not entitled & absent      -> nothing
    deleted  still active (same cust.)  -> nothing
             otherwise                  -> clear

"entitled" on update = active by customer id OR active by email.

No locking: two events for the same email processed concurrently can
double-append or clear a fresh row. Failures from Stripe or Sheets
propagate with no compensation.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from ..models import (
    EventKind,
    ReconcileAction,
    ReconcileResult,
    SubscriptionEvent,
)
from ..sheets.store import SheetStore
from .customers import CustomerService


logger = logging.getLogger(__name__)


class SubscriptionReconciler:
    """Maps one subscription event to at most one sheet mutation."""

    def __init__(
        self,
        customers: Optional[CustomerService] = None,
        store: Optional[SheetStore] = None,
    ):
        self._customers = customers
        self._store = store

    @property
    def customers(self) -> CustomerService:
        if self._customers is None:
            self._customers = CustomerService()
        return self._customers

    @property
    def store(self) -> SheetStore:
        # Built on first use so a rejected webhook never needs sheet config.
        if self._store is None:
            self._store = SheetStore.from_settings()
        return self._store

    def reconcile(self, event: SubscriptionEvent) -> ReconcileResult:
        email = self.customers.resolve_email(event)
        if not email:
            logger.warning(
                "No email for %s on subscription %s (customer %s), skipping",
                event.kind.value, event.subscription_id, event.customer_id,
            )
            return ReconcileResult(
                action=ReconcileAction.SKIPPED,
                message=f"No email found for customer: {event.customer_id}",
            )

        handlers = {
            EventKind.CREATED: self.handle_subscription_created,
            EventKind.UPDATED: self.handle_subscription_updated,
            EventKind.DELETED: self.handle_subscription_deleted,
        }
        result = handlers[event.kind](event, email)
        logger.info("%s -> %s: %s", event.kind.value, result.action.value, result.message)
        return result

    def handle_subscription_created(self, event: SubscriptionEvent, email: str) -> ReconcileResult:
        if self.store.contains_email(email):
            return self._unchanged(email, f"Email already in Google Sheet: {email}")

        if not self.customers.has_active_subscription(event.customer_id):
            return self._unchanged(email, f"No active subscription for {email}, nothing written")

        return self._append(event, email, f"Wrote email to Google Sheet: {email}")

    def handle_subscription_updated(self, event: SubscriptionEvent, email: str) -> ReconcileResult:
        present = self.store.contains_email(email)
        entitled = (
            self.customers.has_active_subscription(event.customer_id)
            or self.customers.has_active_subscription_by_email(email)
        )

        if entitled and not present:
            return self._append(
                event, email, f"Active subscription found, wrote email to Google Sheet: {email}"
            )
        if entitled:
            return self._unchanged(
                email, f"Active subscription found, email already in Google Sheet: {email}"
            )
        if present:
            self.store.clear_row_by_email(email)
            return ReconcileResult(
                action=ReconcileAction.CLEARED,
                email=email,
                message=f"No active subscription, deleted email from Google Sheet: {email}",
            )
        return self._unchanged(
            email, f"No active subscription and email not in Google Sheet: {email}"
        )

    def handle_subscription_deleted(self, event: SubscriptionEvent, email: str) -> ReconcileResult:
        # The deletion may race a resubscription under the same customer
        if self.customers.has_active_subscription(event.customer_id):
            return self._unchanged(email, f"Subscription still active for {email}, row kept")

        if self.store.clear_row_by_email(email):
            return ReconcileResult(
                action=ReconcileAction.CLEARED,
                email=email,
                message=f"Deleted email from Google Sheet: {email}",
            )
        return self._unchanged(email, f"Email not found in Google Sheet: {email}")

    def _append(self, event: SubscriptionEvent, email: str, message: str) -> ReconcileResult:
        # CustomerDeleted here leaves the row unwritten; nothing is retried
        name = self.customers.get_display_name(event.customer_id)
        row = self.store.append_row(
            subscription_id=event.subscription_id,
            email=email,
            name=name,
            created_at=event.created_at or datetime.now(timezone.utc),
        )
        return ReconcileResult(
            action=ReconcileAction.APPENDED,
            email=email,
            row=row,
            message=message,
        )

    @staticmethod
    def _unchanged(email: str, message: str) -> ReconcileResult:
        return ReconcileResult(action=ReconcileAction.UNCHANGED, email=email, message=message)
