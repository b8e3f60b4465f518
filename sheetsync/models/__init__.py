from .schemas import (
    EventKind,
    SubscriptionEvent,
    CustomerState,
    CustomerRecord,
    SheetRow,
    RowRef,
    ReconcileAction,
    ReconcileResult,
)

__all__ = [
    "EventKind",
    "SubscriptionEvent",
    "CustomerState",
    "CustomerRecord",
    "SheetRow",
    "RowRef",
    "ReconcileAction",
    "ReconcileResult",
]
