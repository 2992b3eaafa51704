from decimal import Decimal

from django.core.management.base import BaseCommand

from products.models import Product


class Command(BaseCommand):
    help = "Seed catalog products with opening on-hand stock"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        # (sku, name, selling_price, cost_price, taxable, opening qty)
        products_data = [
            ("TV-55-4K", "55in 4K Television", "799.99", "520.00", True, 12),
            ("SB-200", "Soundbar 200W", "249.99", "140.00", True, 20),
            ("HDMI-2M", "HDMI Cable 2m", "19.99", "4.50", True, 150),
            ("WM-FL-45", "Front Load Washer 4.5cu", "1099.00", "780.00", True, 6),
            ("EXT-WARR-2Y", "Extended Warranty 2yr", "129.00", "0.00", False, 0),
        ]

        created_count = 0

        for sku, name, price, cost, taxable, qty in products_data:
            _, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "selling_price": Decimal(price),
                    "cost_price": Decimal(cost),
                    "taxable": taxable,
                    "quantity_on_hand": qty,
                },
            )
            if created:
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(f"Products seeded ({created_count} new).")
        )
