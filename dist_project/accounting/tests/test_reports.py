import datetime
from decimal import Decimal
from django.test import SimpleTestCase, TestCase
from ..models import Account
from ..services.journals import create_journal_entry
from ..services.reports import (balance_sheet, build_vat_summary,
                                quarter_bounds, safe_ratio, trial_balance)

D = datetime.date


def post(debit_code, credit_code, amount, date="2025-04-01"):
    return create_journal_entry(
        {
            "date": date,
            "description": "Report fixture",
            "status": "posted",
            "entries": [
                {"account_code": debit_code, "debit_amount": amount},
                {"account_code": credit_code, "credit_amount": amount},
            ],
        }
    )


class TrialBalanceTests(TestCase):

    def setUp(self):
        Account.objects.create(code="1110", name="Cash on Hand", ac_type="asset")
        Account.objects.create(code="3000", name="Owner Capital", ac_type="equity")
        Account.objects.create(code="6100", name="Rent", ac_type="expense")
        post("1110", "3000", 1000)
        post("6100", "1110", 200)

    def test_posted_entries_give_a_balanced_trial_balance(self):
        report = trial_balance(as_of=D(2025, 12, 31))

        rows = {row["account_code"]: row for row in report["accounts"]}
        self.assertEqual(set(rows), {"1110", "3000", "6100"})  # zero balances hidden
        self.assertEqual(rows["1110"]["debit_balance"], "800.00")
        self.assertEqual(rows["3000"]["credit_balance"], "1000.00")
        self.assertEqual(report["totals"]["total_debits"], "1000.00")
        self.assertTrue(report["totals"]["is_balanced"])
        self.assertEqual(report["warnings"], [])

    def test_include_zero_lists_idle_accounts(self):
        report = trial_balance(as_of=D(2025, 12, 31), include_zero=True)
        codes = [row["account_code"] for row in report["accounts"]]
        self.assertIn("4100", codes)

    def test_one_sided_opening_balance_is_surfaced_as_warning(self):
        Account.objects.create(
            code="1500", name="Stock", ac_type="asset", sub_type="inventory",
            opening_balance=Decimal("500"),
        )

        with self.assertLogs("accounting.services.reports", level="WARNING"):
            report = trial_balance(as_of=D(2025, 12, 31))

        self.assertFalse(report["totals"]["is_balanced"])
        self.assertEqual(report["totals"]["difference"], "500.00")
        self.assertEqual(len(report["warnings"]), 1)


class BalanceSheetTests(TestCase):

    def setUp(self):
        Account.objects.create(code="1110", name="Cash on Hand", ac_type="asset")
        Account.objects.create(code="2500", name="Bank Loan", ac_type="liability", sub_type="long_term")
        Account.objects.create(code="3000", name="Owner Capital", ac_type="equity")
        Account.objects.create(code="6100", name="Rent", ac_type="expense")
        post("1110", "3000", 1000)
        post("1110", "2500", 700)
        post("1110", "4100", 500)
        post("6100", "1110", 200)

    def test_sections_and_current_earnings(self):
        report = balance_sheet(as_of=D(2025, 12, 31))

        self.assertEqual(report["assets"]["total_assets"], "2000.00")
        self.assertEqual(report["liabilities"]["long_term_liabilities"]["total"], "700.00")
        self.assertEqual(report["equity"]["current_earnings"], "300.00")
        self.assertEqual(report["equity"]["total_equity"], "1300.00")
        self.assertEqual(report["total_liabilities_and_equity"], "2000.00")
        self.assertTrue(report["is_balanced"])

    def test_ratios_with_zero_denominator_are_null(self):
        ratios = balance_sheet(as_of=D(2025, 12, 31))["ratios"]

        # no current liabilities
        self.assertIsNone(ratios["current_ratio"])
        self.assertIsNone(ratios["quick_ratio"])
        self.assertEqual(ratios["debt_to_equity"], "0.5385")
        self.assertEqual(ratios["return_on_assets"], "0.1500")

    def test_empty_books_do_not_raise(self):
        report = balance_sheet(as_of=D(2024, 12, 31))
        self.assertTrue(all(value is None for value in report["ratios"].values()))


class ReportArithmeticTests(SimpleTestCase):

    def test_safe_ratio(self):
        self.assertIsNone(safe_ratio(Decimal("10"), Decimal("0")))
        self.assertEqual(safe_ratio(Decimal("1"), Decimal("3")), Decimal("0.3333"))

    def test_quarter_bounds(self):
        self.assertEqual(quarter_bounds(2024, 1), (D(2024, 1, 1), D(2024, 3, 31)))
        self.assertEqual(quarter_bounds(2025, 4), (D(2025, 10, 1), D(2025, 12, 31)))
        with self.assertRaises(ValueError):
            quarter_bounds(2025, 5)

    def test_more_input_than_output_vat_is_refundable(self):
        summary = build_vat_summary(
            {"taxable": Decimal("2000"), "vat": Decimal("260"), "count": 2},
            {"taxable": Decimal("1000"), "vat": Decimal("130"), "count": 1},
            D(2025, 1, 1),
            D(2025, 3, 31),
            quarter=1,
            year=2025,
        )
        self.assertEqual(summary["position"], "refundable")
        self.assertEqual(summary["net_vat"], "130.00")

    def test_no_documents_is_nil(self):
        empty = {"taxable": None, "vat": None, "count": 0}
        summary = build_vat_summary(empty, empty, D(2025, 1, 1), D(2025, 3, 31))
        self.assertEqual(summary["position"], "nil")
        self.assertEqual(summary["input_vat"], "0.00")
