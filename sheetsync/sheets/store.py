"""
The tracked Google Sheet.

Key design:
- One row per entitled customer, keyed by the email column
- Rows are never deleted, only blanked (same column span as append)
- No local cache - every check reads the sheet fresh
- Membership check and append are NOT atomic; two concurrent events for the
  same email can both append
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from googleapiclient.errors import HttpError

from ..config import Settings, get_settings
from ..errors import StoreUnavailable
from ..models import RowRef, SheetRow
from .client import get_sheets_service


logger = logging.getLogger(__name__)


def _column_letter(index: int) -> str:
    """0 -> A, 4 -> E. The row layout never grows past Z."""
    return chr(ord("A") + index)


class SheetStore:
    """Range-addressed reads and writes against one worksheet."""

    def __init__(self, spreadsheet_id: str, sheet_name: str = "Sheet1", service=None):
        if not spreadsheet_id:
            raise ValueError("GOOGLE_SHEET_ID must be set")
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._service = service

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SheetStore":
        settings = settings or get_settings()
        return cls(settings.google_sheet_id, settings.google_sheet_name)

    @property
    def service(self):
        # Built on first use so constructing a store never touches credentials.
        if self._service is None:
            self._service = get_sheets_service()
        return self._service

    @property
    def _values(self):
        return self.service.spreadsheets().values()

    def _a1(self, cells: str) -> str:
        quoted = self.sheet_name.replace("'", "''")
        return f"'{quoted}'!{cells}"

    @property
    def _first_column(self) -> str:
        return _column_letter(0)

    @property
    def _last_column(self) -> str:
        return _column_letter(SheetRow.width() - 1)

    @property
    def _email_column(self) -> str:
        return _column_letter(SheetRow.email_column_index())

    def _execute(self, request, operation: str) -> dict:
        try:
            return request.execute() or {}
        except HttpError as e:
            raise StoreUnavailable(f"Google Sheets {operation} failed: {e}") from e

    def get_emails(self) -> List[str]:
        """Every cell of the email column, top to bottom ("" for blank rows)."""
        column = self._email_column
        result = self._execute(
            self._values.get(
                spreadsheetId=self.spreadsheet_id,
                range=self._a1(f"{column}:{column}"),
            ),
            "values.get",
        )
        return [row[0] if row else "" for row in result.get("values", [])]

    def get_rows(self) -> List[List[str]]:
        """All rows across the tracked column span, padded to full width."""
        result = self._execute(
            self._values.get(
                spreadsheetId=self.spreadsheet_id,
                range=self._a1(f"{self._first_column}:{self._last_column}"),
            ),
            "values.get",
        )
        width = SheetRow.width()
        return [
            list(row) + [""] * (width - len(row))
            for row in result.get("values", [])
        ]

    def find_row(self, email: str) -> Optional[int]:
        """
        1-based sheet row number of the first row whose email cell equals `email`.
        Exact, case-sensitive match; callers normalize upstream.
        """
        for index, cell in enumerate(self.get_emails()):
            if cell == email:
                return index + 1
        return None

    def contains_email(self, email: str) -> bool:
        return self.find_row(email) is not None

    def append_row(
        self,
        subscription_id: str,
        email: str,
        name: str,
        created_at: datetime,
        processed_at: Optional[datetime] = None,
    ) -> RowRef:
        """Append one row after the last used row of the table."""
        row = SheetRow(
            subscription_id=subscription_id,
            email=email,
            name=name,
            created_at=created_at,
            processed_at=processed_at or datetime.now(timezone.utc),
        )
        result = self._execute(
            self._values.append(
                spreadsheetId=self.spreadsheet_id,
                range=self._a1(f"{self._first_column}1"),
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [row.to_values()]},
            ),
            "values.append",
        )
        updated_range = result.get("updates", {}).get("updatedRange", "")
        logger.info("Wrote email to Google Sheet: %s (%s)", email, updated_range or "range unknown")
        return RowRef.from_updated_range(updated_range)

    def clear_row(self, row_number: int) -> None:
        """Blank every tracked cell of one row. The row itself stays."""
        self._execute(
            self._values.update(
                spreadsheetId=self.spreadsheet_id,
                range=self._a1(
                    f"{self._first_column}{row_number}:{self._last_column}{row_number}"
                ),
                valueInputOption="RAW",
                body={"values": [SheetRow.blank_values()]},
            ),
            "values.update",
        )

    def clear_row_by_email(self, email: str) -> bool:
        """
        Blank the first row holding `email`.
        Returns False (and writes nothing) when no row matches. Later
        duplicates of the same email are left alone.
        """
        row_number = self.find_row(email)
        if row_number is None:
            logger.info("Email not found in Google Sheet: %s", email)
            return False

        self.clear_row(row_number)
        logger.info("Deleted email from Google Sheet: %s (row %d)", email, row_number)
        return True

    def write_header(self) -> bool:
        """Write the header row into row 1 if the sheet is empty."""
        if self.get_rows():
            return False

        self._execute(
            self._values.update(
                spreadsheetId=self.spreadsheet_id,
                range=self._a1(f"{self._first_column}1:{self._last_column}1"),
                valueInputOption="RAW",
                body={"values": [list(SheetRow.HEADERS)]},
            ),
            "values.update",
        )
        return True
