# sales/tests/test_seed_return_reason_codes.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from sales.models import ReturnReasonCode


class SeedReturnReasonCodesCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        out = StringIO()
        call_command("seed_return_reason_codes", stdout=out)
        call_command("seed_return_reason_codes", stdout=out)

        self.assertEqual(ReturnReasonCode.objects.count(), 7)
        self.assertIn("(0 new)", out.getvalue())

        defective = ReturnReasonCode.objects.get(code="DEFECTIVE")
        self.assertTrue(defective.requires_notes)
        self.assertFalse(ReturnReasonCode.objects.get(code="CHANGED_MIND").requires_notes)

    def test_reactivates_retired_code(self):
        ReturnReasonCode.objects.create(
            code="GIFT", description="Old wording", is_active=False
        )

        call_command("seed_return_reason_codes", stdout=StringIO())

        gift = ReturnReasonCode.objects.get(code="GIFT")
        self.assertTrue(gift.is_active)
        self.assertEqual(gift.description, "Unwanted gift")
