# products/tests/test_seed_products.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from products.models import Product


class SeedProductsCommandTests(TestCase):
    def test_seed_creates_catalog_once(self):
        out = StringIO()
        call_command("seed_products", stdout=out)
        call_command("seed_products", stdout=out)

        self.assertEqual(Product.objects.count(), 5)
        self.assertIn("(5 new)", out.getvalue())
        self.assertIn("(0 new)", out.getvalue())

        warranty = Product.objects.get(sku="EXT-WARR-2Y")
        self.assertFalse(warranty.taxable)
        self.assertEqual(warranty.quantity_on_hand, 0)
