from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase
from ..exceptions import JournalLineError, UnbalancedJournalError
from ..services.balance import balance_errors, check_balance, compute_totals, to_decimal
from ..services.vat import expected_vat


def line(debit=0, credit=0):
    return {"debit_amount": debit, "credit_amount": credit}


""" Balance checker: pure functions, no database """
class BalanceCheckerTests(SimpleTestCase):

    def test_minimal_balanced_entry_is_accepted(self):
        totals = check_balance([line(debit=100), line(credit=100)])

        self.assertEqual(totals.total_debit, Decimal("100"))
        self.assertEqual(totals.total_credit, Decimal("100"))
        self.assertTrue(totals.is_balanced)

    def test_unbalanced_entry_reports_totals_and_difference(self):
        with self.assertRaises(UnbalancedJournalError) as ctx:
            check_balance([line(debit=50), line(credit=40)])

        err = ctx.exception
        self.assertEqual(err.difference, Decimal("10"))
        self.assertIn("Difference: 10.00", str(err))
        self.assertIn("Total debits (50.00)", str(err))
        self.assertIn("total credits (40.00)", str(err))

    def test_two_sided_line_is_rejected_with_its_index(self):
        with self.assertRaises(JournalLineError) as ctx:
            check_balance([line(debit=50, credit=50), line(credit=50)])

        self.assertEqual(ctx.exception.index, 1)
        self.assertIn("line 1 cannot have both debit and credit", str(ctx.exception))

    def test_empty_line_is_rejected(self):
        with self.assertRaises(JournalLineError) as ctx:
            check_balance([line(debit=10), line(credit=10), line()])

        self.assertEqual(ctx.exception.index, 3)
        self.assertIn("must have either a debit or a credit", str(ctx.exception))

    def test_single_line_entry_is_rejected(self):
        with self.assertRaises(JournalLineError):
            check_balance([line(debit=100)])

    def test_split_entry_is_accepted(self):
        # one debit, many credits
        totals = check_balance(
            [line(debit="1130"), line(credit="1000"), line(credit="130")]
        )
        self.assertEqual(totals.line_count, 3)

    def test_rounding_noise_within_tolerance_is_accepted(self):
        totals = check_balance([line(debit="100.00"), line(credit="99.99")])
        self.assertTrue(totals.is_balanced)

    def test_difference_above_tolerance_is_rejected(self):
        with self.assertRaises(UnbalancedJournalError):
            check_balance([line(debit="100.00"), line(credit="99.98")])

    """ Same payload → same verdict & same message """
    def test_verdict_is_idempotent(self):
        payload = [line(debit=50), line(credit=40)]
        messages = []
        for _ in range(3):
            with self.assertRaises(UnbalancedJournalError) as ctx:
                check_balance(payload)
            messages.append(str(ctx.exception))
        self.assertEqual(len(set(messages)), 1)

        ok_payload = [line(debit=10), line(credit=10)]
        self.assertEqual(check_balance(ok_payload), check_balance(ok_payload))

    def test_balance_errors_collects_every_problem(self):
        errors = balance_errors([line(debit=50, credit=50)])

        self.assertEqual(len(errors), 2)
        self.assertIn("at least 2 lines", errors[0])
        self.assertIn("line 1 cannot have both", errors[1])

    def test_balance_errors_is_empty_for_valid_entry(self):
        self.assertEqual(balance_errors([line(debit=5), line(credit=5)]), [])

    def test_floats_keep_their_printed_value(self):
        self.assertEqual(to_decimal(0.1), Decimal("0.1"))
        totals = compute_totals([line(debit=0.1), line(debit=0.2), line(credit=0.3)])
        self.assertEqual(totals.difference, Decimal("0"))

    def test_unparseable_amount_is_a_validation_error(self):
        with self.assertRaises(ValidationError):
            to_decimal("twelve")

    def test_vat_on_out_of_range_amount_is_a_validation_error(self):
        self.assertEqual(expected_vat("1000"), Decimal("130.00"))
        with self.assertRaises(ValidationError) as ctx:
            expected_vat("1e30")
        self.assertIn("taxable_amount", ctx.exception.message_dict)
