# trading/management/commands/generate_missing_documents.py

from django.core.management.base import BaseCommand

from trading.derivation import generate_missing_documents, orders_missing_documents


class Command(BaseCommand):
    help = "Generate invoices/vendor bills for confirmed orders that have none"

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None, help="Process at most N orders")
        parser.add_argument("--dry-run", action="store_true", help="Only list the orders")

    def handle(self, *args, **options):
        if options["dry_run"]:
            orders = orders_missing_documents()
            for order in orders:
                self.stdout.write(f"{order.number} ({order.get_direction_display()})")
            self.stdout.write(self.style.SUCCESS(f"{orders.count()} order(s) without a document."))
            return

        result = generate_missing_documents(limit=options["limit"])
        for number in result["created"]:
            self.stdout.write(f"Created {number}")
        for number in result["failed"]:
            self.stderr.write(f"Failed {number}")

        self.stdout.write(self.style.SUCCESS(
            f"Done! Created {len(result['created'])}, failed {len(result['failed'])}."
        ))
