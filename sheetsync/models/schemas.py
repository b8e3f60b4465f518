"""
Data models for the subscription sheet sync.
Every shape that crosses a boundary (Stripe, Google Sheets, HTTP) is typed here.
"""

import re
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel


class EventKind(str, Enum):
    """The three Stripe subscription events we reconcile."""
    CREATED = "customer.subscription.created"
    UPDATED = "customer.subscription.updated"
    DELETED = "customer.subscription.deleted"


class SubscriptionEvent(BaseModel):
    """A verified subscription webhook, reduced to what reconciliation needs."""
    kind: EventKind
    subscription_id: str
    customer_id: Optional[str] = None
    email_hint: Optional[str] = None
    customer_email_hint: Optional[str] = None
    created_at: Optional[datetime] = None


class CustomerState(str, Enum):
    """Outcome of a Stripe customer lookup."""
    FOUND = "found"
    DELETED = "deleted"
    NOT_FOUND = "not_found"


class CustomerRecord(BaseModel):
    """
    A Stripe customer as seen at lookup time.
    Never stored - fetched fresh for every event.
    """
    id: str
    state: CustomerState
    email: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None

    PLACEHOLDER_NAME: ClassVar[str] = "-"

    @property
    def display_name(self) -> str:
        return self.name or self.description or self.PLACEHOLDER_NAME


class SheetRow(BaseModel):
    """
    One tracked subscriber in the sheet.

    SHEET_COLUMNS is the only place the column order lives. Append and clear
    both use its width, so a cleared row never leaves stray cells behind.
    """
    subscription_id: str
    email: str
    name: str
    created_at: datetime
    processed_at: datetime

    SHEET_COLUMNS: ClassVar[Tuple[str, ...]] = (
        "subscription_id",
        "email",
        "name",
        "created_at",
        "processed_at",
    )
    HEADERS: ClassVar[Tuple[str, ...]] = (
        "Subscription ID",
        "Email",
        "Name",
        "Created At",
        "Processed At",
    )

    @classmethod
    def width(cls) -> int:
        return len(cls.SHEET_COLUMNS)

    @classmethod
    def email_column_index(cls) -> int:
        return cls.SHEET_COLUMNS.index("email")

    @classmethod
    def blank_values(cls) -> List[str]:
        return [""] * cls.width()

    def to_values(self) -> List[str]:
        """Positional cell values in sheet column order."""
        cells = {
            "subscription_id": self.subscription_id,
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "processed_at": self.processed_at.isoformat(),
        }
        return [cells[column] for column in self.SHEET_COLUMNS]


_ROW_NUMBER = re.compile(r"![A-Z]+(\d+)")


class RowRef(BaseModel):
    """Where an appended row landed, as reported by the Sheets API."""
    range: str
    row_number: Optional[int] = None

    @classmethod
    def from_updated_range(cls, updated_range: str) -> "RowRef":
        # e.g. "Sheet1!A7:E7"
        match = _ROW_NUMBER.search(updated_range)
        return cls(
            range=updated_range,
            row_number=int(match.group(1)) if match else None,
        )


class ReconcileAction(str, Enum):
    """What a reconciliation did to the sheet."""
    APPENDED = "appended"
    CLEARED = "cleared"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


class ReconcileResult(BaseModel):
    """
    Outcome of handling one event.
    `message` is a human-readable trace returned as the webhook response body.
    """
    action: ReconcileAction
    message: str
    email: Optional[str] = None
    row: Optional[RowRef] = None

    @property
    def mutated(self) -> bool:
        return self.action in (ReconcileAction.APPENDED, ReconcileAction.CLEARED)
