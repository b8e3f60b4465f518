from .client import get_sheets_service, decode_private_key, SCOPES
from .store import SheetStore

__all__ = [
    "get_sheets_service",
    "decode_private_key",
    "SCOPES",
    "SheetStore",
]
