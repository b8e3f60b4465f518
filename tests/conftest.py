"""
Shared fakes for the test suite.

MockStripe stands in for the Stripe API (customers + subscriptions) and is
patched onto the SDK classes the app calls. It answers with real
StripeObjects built by construct_from, so field access matches the SDK.
MockSheetsService stands in for the googleapiclient Sheets resource: same
call chain, in-memory grid.
"""

import re
import sys
from pathlib import Path

import httplib2
import pytest
import stripe
from googleapiclient.errors import HttpError

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sheetsync.lib import CustomerService, SubscriptionReconciler
from sheetsync.sheets import SheetStore


SHEET_ID = "sheet_test_123"
API_KEY = "sk_test_fake"


class MockList:
    """Simulates a Stripe ListObject."""

    def __init__(self, data):
        self.data = list(data)

    def auto_paging_iter(self):
        return iter(self.data)


class MockStripe:
    """Simulates the Stripe API for customers and subscriptions."""

    def __init__(self):
        self.customers = {}
        self.subscriptions = {}
        self.calls = []
        self.outage = False
        self.next_id = 1

    def _new_id(self, prefix: str) -> str:
        new_id = f"{prefix}_test_{self.next_id}"
        self.next_id += 1
        return new_id

    def _check_outage(self):
        if self.outage:
            raise stripe.APIConnectionError("Could not connect to Stripe")

    # --- Test setup helpers ---

    def create_customer(self, email=None, name=None, description=None) -> str:
        cust_id = self._new_id("cus")
        self.customers[cust_id] = {
            "id": cust_id,
            "object": "customer",
            "email": email,
            "name": name,
            "description": description,
        }
        return cust_id

    def delete_customer(self, customer_id: str):
        self.customers[customer_id] = {"id": customer_id, "object": "customer", "deleted": True}

    def create_subscription(self, customer_id: str, status: str = "active") -> dict:
        sub_id = self._new_id("sub")
        self.subscriptions[sub_id] = {
            "id": sub_id,
            "object": "subscription",
            "customer": customer_id,
            "status": status,
        }
        return self.subscriptions[sub_id]

    def cancel_subscription(self, sub_id: str):
        self.subscriptions[sub_id]["status"] = "canceled"

    # --- Patched SDK entry points ---

    def retrieve_customer(self, customer_id, **params):
        self.calls.append(("Customer.retrieve", customer_id))
        self._check_outage()
        if customer_id not in self.customers:
            raise stripe.InvalidRequestError(
                f"No such customer: '{customer_id}'", "id", code="resource_missing"
            )
        return stripe.Customer.construct_from(self.customers[customer_id], API_KEY)

    def list_customers(self, email=None, limit=None, **params):
        self.calls.append(("Customer.list", email))
        self._check_outage()
        return MockList(
            stripe.Customer.construct_from(c, API_KEY) for c in self.customers.values()
            if not c.get("deleted") and c.get("email") == email
        )

    def list_subscriptions(self, customer=None, status=None, limit=None, **params):
        self.calls.append(("Subscription.list", customer))
        self._check_outage()
        matches = [
            stripe.Subscription.construct_from(s, API_KEY) for s in self.subscriptions.values()
            if s["customer"] == customer and (status is None or s["status"] == status)
        ]
        return MockList(matches[:limit] if limit else matches)


_RANGE = re.compile(r"!([A-Z]+)(\d*)(?::([A-Z]+)(\d*))?$")


def _col(letter: str) -> int:
    return ord(letter) - ord("A")


class MockRequest:
    def __init__(self, service, fn):
        self._service = service
        self._fn = fn

    def execute(self):
        if self._service.fail_with is not None:
            raise HttpError(
                httplib2.Response({"status": str(self._service.fail_with)}),
                b'{"error": {"message": "Backend Error"}}',
            )
        return self._fn()


class MockValues:
    def __init__(self, service):
        self._service = service

    def get(self, spreadsheetId, range):
        return MockRequest(self._service, lambda: self._service.do_get(range))

    def append(self, spreadsheetId, range, valueInputOption, insertDataOption, body):
        return MockRequest(self._service, lambda: self._service.do_append(range, body["values"]))

    def update(self, spreadsheetId, range, valueInputOption, body):
        return MockRequest(self._service, lambda: self._service.do_update(range, body["values"]))


class MockSheetsService:
    """Simulates the Google Sheets v4 values API on an in-memory grid."""

    def __init__(self, rows=None):
        self.grid = [list(r) for r in rows or []]
        self.calls = []
        self.fail_with = None

    def spreadsheets(self):
        return self

    def values(self):
        return MockValues(self)

    @property
    def writes(self):
        return [c for c in self.calls if c[0] in ("append", "update")]

    def _parse(self, a1: str):
        start_col, start_row, end_col, end_row = _RANGE.search(a1).groups()
        end_col = end_col or start_col
        return (
            _col(start_col),
            int(start_row) if start_row else None,
            _col(end_col),
            int(end_row) if end_row else None,
        )

    def do_get(self, a1):
        self.calls.append(("get", a1))
        c1, _, c2, _ = self._parse(a1)
        values = []
        for row in self.grid:
            cells = row[c1:c2 + 1]
            while cells and cells[-1] == "":
                cells.pop()
            values.append(cells)
        while values and not values[-1]:
            values.pop()
        return {"range": a1, "values": values} if values else {"range": a1}

    def do_append(self, a1, rows):
        self.calls.append(("append", a1))
        last_used = 0
        for index, row in enumerate(self.grid):
            if any(row):
                last_used = index + 1
        del self.grid[last_used:]
        self.grid.extend(list(r) for r in rows)
        first, last = last_used + 1, last_used + len(rows)
        width = max(len(r) for r in rows)
        end_col = chr(ord("A") + width - 1)
        return {"updates": {"updatedRange": f"Sheet1!A{first}:{end_col}{last}"}}

    def do_update(self, a1, rows):
        self.calls.append(("update", a1))
        c1, r1, _, _ = self._parse(a1)
        for offset, values in enumerate(rows):
            index = r1 - 1 + offset
            while len(self.grid) <= index:
                self.grid.append([])
            row = self.grid[index]
            while len(row) < c1 + len(values):
                row.append("")
            row[c1:c1 + len(values)] = values
        return {"updatedRange": a1}

    def emails(self):
        return [row[1] if len(row) > 1 else "" for row in self.grid]


@pytest.fixture
def mock_stripe(monkeypatch):
    fake = MockStripe()
    monkeypatch.setattr(stripe.Customer, "retrieve", fake.retrieve_customer)
    monkeypatch.setattr(stripe.Customer, "list", fake.list_customers)
    monkeypatch.setattr(stripe.Subscription, "list", fake.list_subscriptions)
    return fake


@pytest.fixture
def sheet():
    return MockSheetsService()


@pytest.fixture
def store(sheet):
    return SheetStore(SHEET_ID, "Sheet1", service=sheet)


@pytest.fixture
def customers(mock_stripe):
    return CustomerService(api_key=API_KEY)


@pytest.fixture
def reconciler(customers, store):
    return SubscriptionReconciler(customers=customers, store=store)
