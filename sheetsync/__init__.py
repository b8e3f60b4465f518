"""Stripe subscription webhooks -> Google Sheet of active subscribers."""

__version__ = "1.0.0"
