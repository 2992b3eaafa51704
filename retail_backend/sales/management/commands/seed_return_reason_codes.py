from django.core.management.base import BaseCommand

from sales.models import ReturnReasonCode


class Command(BaseCommand):
    help = "Seed the return reason code catalog"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding return reason codes..."))

        # (code, description, requires_notes)
        reasons = [
            ("CHANGED_MIND", "Customer changed mind", False),
            ("WRONG_SIZE", "Wrong size or fit", False),
            ("DEFECTIVE", "Defective or not working", True),
            ("DAMAGED", "Damaged on arrival", True),
            ("NOT_AS_DESCRIBED", "Not as described", True),
            ("GIFT", "Unwanted gift", False),
            ("OTHER", "Other", True),
        ]

        created_count = 0
        for order, (code, description, requires_notes) in enumerate(reasons):
            _, created = ReturnReasonCode.objects.update_or_create(
                code=code,
                defaults={
                    "description": description,
                    "requires_notes": requires_notes,
                    "sort_order": order,
                    "is_active": True,
                },
            )
            if created:
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(f"Return reason codes seeded ({created_count} new).")
        )
