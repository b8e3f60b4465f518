from .customers import CustomerService
from .events import verify_event, parse_subscription_event
from .reconciler import SubscriptionReconciler

__all__ = [
    "CustomerService",
    "verify_event",
    "parse_subscription_event",
    "SubscriptionReconciler",
]
