"""
Google Sheets client configuration.
One service-account client, scoped to spreadsheets only.
"""

import base64
import binascii
from functools import lru_cache

from google.oauth2 import service_account
from googleapiclient.discovery import build

from ..config import get_settings


SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def decode_private_key(raw: str) -> str:
    """
    Normalize GOOGLE_PRIVATE_KEY into a PEM string.

    Accepts the PEM itself or a base64 encoding of it. Escaped newlines
    ("\\n" as two characters) are turned back into real ones, since most
    hosting dashboards flatten multi-line values.
    """
    key = raw.strip()
    if not key.startswith("-----BEGIN"):
        try:
            key = base64.b64decode(key, validate=True).decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError("GOOGLE_PRIVATE_KEY is neither PEM nor base64-encoded PEM") from e
    return key.replace("\\n", "\n")


@lru_cache()
def get_sheets_service():
    """
    Get a Google Sheets v4 service authenticated as the service account.
    Used by SheetStore for every read and write.
    """
    settings = get_settings()
    email = settings.google_service_account_email
    raw_key = settings.google_private_key

    if not email or not raw_key:
        raise ValueError("GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY must be set")

    credentials = service_account.Credentials.from_service_account_info(
        {
            "type": "service_account",
            "client_email": email,
            "private_key": decode_private_key(raw_key),
            "token_uri": TOKEN_URI,
        },
        scopes=SCOPES,
    )

    return build("sheets", "v4", credentials=credentials, cache_discovery=False)
