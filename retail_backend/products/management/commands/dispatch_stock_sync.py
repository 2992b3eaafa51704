# products/management/commands/dispatch_stock_sync.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from products.services.stock_sync import dispatch_pending_stock_sync


class Command(BaseCommand):
    help = "Publish pending/failed stock-sync outbox events to external channels."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None, help="Max events to process")
        parser.add_argument(
            "--max-attempts",
            type=int,
            default=None,
            help="Attempts before an event is marked dead (default: STOCK_SYNC_MAX_ATTEMPTS)",
        )

    def handle(self, *args, **options):
        summary = dispatch_pending_stock_sync(
            limit=options.get("limit"),
            max_attempts=options.get("max_attempts"),
        )

        self.stdout.write(self.style.MIGRATE_HEADING("Stock sync dispatch"))
        self.stdout.write(f"Sent:   {summary.sent}")
        self.stdout.write(f"Failed: {summary.failed}")

        if summary.dead:
            self.stdout.write(self.style.WARNING(f"Dead:   {summary.dead}"))
        else:
            self.stdout.write(f"Dead:   {summary.dead}")

        self.stdout.write(self.style.SUCCESS(f"Processed {summary.processed} event(s)."))
