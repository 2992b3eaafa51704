# store_credits/tests/test_issuance.py

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase

from sales.models import Customer
from store_credits.models import StoreCredit, StoreCreditTransaction
from store_credits.services import (
    StoreCreditCodeGenerator,
    StoreCreditError,
    issue_store_credit,
)

User = get_user_model()


def scripted_generator(chars: str, **kwargs) -> StoreCreditCodeGenerator:
    stream = iter(chars)
    return StoreCreditCodeGenerator(
        length=5, choice=lambda alphabet: next(stream), **kwargs
    )


class IssueStoreCreditTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="manager", password="pass")
        self.customer = Customer.objects.create(name="Lee Park")

    def test_issue_creates_credit_and_single_ledger_entry(self):
        credit = issue_store_credit(
            amount_cents=5650,
            source_id="RTN-1",
            customer=self.customer,
            user=self.user,
        )

        self.assertEqual(credit.original_amount_cents, 5650)
        self.assertEqual(credit.current_balance_cents, 5650)
        self.assertEqual(credit.source_type, StoreCredit.SOURCE_RETURN)
        self.assertEqual(credit.source_id, "RTN-1")
        self.assertEqual(credit.customer, self.customer)
        self.assertTrue(credit.code.startswith("SC-"))

        entries = list(StoreCreditTransaction.objects.filter(store_credit=credit))
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].transaction_type, StoreCreditTransaction.Type.ISSUE)
        self.assertEqual(entries[0].amount_cents, 5650)
        self.assertEqual(entries[0].balance_after, 5650)
        self.assertEqual(entries[0].performed_by, self.user)

    def test_rejects_non_positive_or_non_integer_amounts(self):
        for bad in (0, -100, 12.5, "100", True):
            with self.subTest(amount=bad):
                with self.assertRaises(StoreCreditError):
                    issue_store_credit(amount_cents=bad)

        self.assertFalse(StoreCredit.objects.exists())
        self.assertFalse(StoreCreditTransaction.objects.exists())

    def test_skips_codes_already_issued(self):
        issue_store_credit(amount_cents=100, generator=scripted_generator("AAAAA"))

        credit = issue_store_credit(
            amount_cents=200, generator=scripted_generator("AAAAABBBBB")
        )

        self.assertEqual(credit.code, "SC-BBBBB")
        self.assertEqual(StoreCredit.objects.count(), 2)

    def test_insert_race_retries_with_fresh_code(self):
        issue_store_credit(amount_cents=100, generator=scripted_generator("AAAAA"))

        # The pre-insert check misses the existing code once (a concurrent
        # writer), so the unique index rejects the insert.
        with patch(
            "store_credits.services.issuance._code_exists",
            side_effect=[False, True, False],
        ):
            with self.assertLogs("store_credits.services.issuance", level="WARNING"):
                credit = issue_store_credit(
                    amount_cents=300, generator=scripted_generator("AAAAABBBBB")
                )

        self.assertEqual(credit.code, "SC-BBBBB")
        self.assertEqual(
            StoreCreditTransaction.objects.filter(store_credit=credit).count(), 1
        )
