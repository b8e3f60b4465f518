#!/usr/bin/env python3
"""
Admin utilities for the subscriber sheet.

Commands:
    python scripts/admin.py rows                 - List tracked rows
    python scripts/admin.py check EMAIL          - Sheet membership + Stripe entitlement
    python scripts/admin.py resync CUSTOMER_ID   - Re-run the "updated" decision for a customer
    python scripts/admin.py init                 - Write the header row into an empty sheet
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from sheetsync.lib import SubscriptionReconciler
from sheetsync.models import EventKind, SubscriptionEvent


def get_reconciler() -> SubscriptionReconciler:
    """Reconciler wired to the real Stripe account and sheet from .env."""
    load_dotenv()
    return SubscriptionReconciler()


def cmd_rows(reconciler, args):
    """List every non-blank row of the sheet."""
    print("\n📋 Tracked Rows")
    print("=" * 60)

    rows = reconciler.store.get_rows()
    shown = 0
    for number, row in enumerate(rows, start=1):
        if not any(row):
            continue
        subscription_id, email, name, created_at = row[:4]
        print(f"  {number:4}  {email:30} {name[:20]:20} {subscription_id} ({created_at[:10]})")
        shown += 1

    print(f"\n  {shown} rows ({len(rows) - shown} blank)")


def cmd_check(reconciler, args):
    """Show whether an email is in the sheet and whether Stripe says it should be."""
    email = args.email

    present = reconciler.store.contains_email(email)
    entitled = reconciler.customers.has_active_subscription_by_email(email)

    print(f"\n🔎 {email}")
    print("=" * 40)
    print(f"  In sheet:            {'yes' if present else 'no'}")
    print(f"  Active subscription: {'yes' if entitled else 'no'}")

    if present != entitled:
        print("  ⚠ Out of sync - run `resync` with the customer id")


def cmd_resync(reconciler, args):
    """Reconcile one customer as if an update webhook had just arrived."""
    event = SubscriptionEvent(
        kind=EventKind.UPDATED,
        subscription_id=args.subscription or "",
        customer_id=args.customer_id,
    )
    result = reconciler.reconcile(event)

    marker = "✓" if result.mutated else "·"
    print(f"{marker} [{result.action.value}] {result.message}")


def cmd_init(reconciler, args):
    """Write column headers into row 1."""
    if reconciler.store.write_header():
        print("✓ Header row written")
    else:
        print("✗ Sheet is not empty, header left alone")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Subscriber sheet admin utilities")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Rows command
    subparsers.add_parser("rows", help="List tracked rows")

    # Check command
    check_parser = subparsers.add_parser("check", help="Check one email")
    check_parser.add_argument("email", help="Customer email, exactly as stored")

    # Resync command
    resync_parser = subparsers.add_parser("resync", help="Reconcile one customer")
    resync_parser.add_argument("customer_id", help="Stripe customer ID (cus_...)")
    resync_parser.add_argument("--subscription", help="Subscription ID to record if a row is written")

    # Init command
    subparsers.add_parser("init", help="Write the header row")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    reconciler = get_reconciler()

    commands = {
        "rows": cmd_rows,
        "check": cmd_check,
        "resync": cmd_resync,
        "init": cmd_init,
    }

    commands[args.command](reconciler, args)


if __name__ == "__main__":
    main()
