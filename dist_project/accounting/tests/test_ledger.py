import datetime
from decimal import Decimal
import pytest
from django.test import TestCase
from ..exceptions import AccountNotFound, NotFoundError, PartyNotFound
from ..models import Account, PartyLedger
from ..services.journals import create_journal_entry, reverse_journal_entry
from ..services.ledger import (aging_bucket, balance_from_totals,
                               debtors_and_creditors, get_account_balance,
                               get_account_ledger, get_party_balance)
from ..tasks import refresh_party_balances

D = datetime.date


def post(date, debit_code, credit_code, amount, party=None):
    return create_journal_entry(
        {
            "date": date,
            "description": "Ledger movement",
            "status": "posted",
            "entries": [
                {"account_code": debit_code, "debit_amount": amount, "party_id": party},
                {"account_code": credit_code, "credit_amount": amount},
            ],
        }
    )


class AccountBalanceTests(TestCase):

    def setUp(self):
        self.cash = Account.objects.create(
            code="1110", name="Cash on Hand", ac_type="asset", opening_balance=Decimal("500")
        )
        self.capital = Account.objects.create(code="3000", name="Owner Capital", ac_type="equity")
        self.rent = Account.objects.create(code="6100", name="Rent", ac_type="expense")
        post("2025-01-05", "1110", "3000", 1000)
        post("2025-02-01", "6100", "1110", 300)

    def test_balance_includes_opening_and_posted_movements(self):
        result = get_account_balance("1110")

        self.assertEqual(result.balance, Decimal("1200.00"))  # 500 + 1000 − 300
        self.assertEqual(result.balance_type, "debit")
        self.assertEqual(result.total_debit, Decimal("1000.00"))
        self.assertEqual(result.total_credit, Decimal("300.00"))

    def test_credit_normal_account_grows_with_credits(self):
        result = get_account_balance("3000")
        self.assertEqual(result.balance, Decimal("1000.00"))
        self.assertEqual(result.balance_type, "credit")

    def test_movements_after_cutoff_are_excluded(self):
        self.assertEqual(get_account_balance("1110", as_of=D(2025, 1, 31)).balance, Decimal("1500.00"))
        self.assertEqual(get_account_balance("1110", as_of=D(2025, 1, 4)).balance, Decimal("500.00"))

    def test_as_of_balance_survives_later_movement_and_its_reversal(self):
        cutoff = D(2025, 2, 15)
        before = get_account_balance("1110", as_of=cutoff)

        later = post("2025-03-01", "6100", "1110", 250)
        reverse_journal_entry(later.pk, date=D(2025, 3, 2))

        self.assertEqual(get_account_balance("1110", as_of=cutoff), before)
        self.assertEqual(get_account_balance("1110").balance, before.balance)

    def test_overdrawn_debit_account_flips_side(self):
        post("2025-03-01", "6100", "1110", 2000)
        result = get_account_balance("1110")
        self.assertEqual(result.balance, Decimal("-800.00"))
        self.assertEqual(result.balance_type, "credit")
        self.assertEqual(result.as_dict()["balance"], "800.00")

    def test_unknown_account_is_not_a_zero_balance(self):
        with self.assertRaises(AccountNotFound):
            get_account_balance("9999")

        # an existing account with no activity is a real zero
        idle = Account.objects.create(code="1900", name="Idle", ac_type="asset")
        self.assertEqual(get_account_balance(idle.code).balance, Decimal("0"))

    def test_ledger_rows_carry_running_balance(self):
        ledger = get_account_ledger("1110", from_date=D(2025, 1, 10))

        self.assertEqual(ledger["opening_balance"], "1500.00")
        self.assertEqual(len(ledger["rows"]), 1)
        self.assertEqual(ledger["rows"][0]["credit_amount"], "300.00")
        self.assertEqual(ledger["closing_balance"], "1200.00")


class PartyBalanceTests(TestCase):

    def setUp(self):
        self.customer = PartyLedger.objects.create(
            party_name="Pokhara Mart", party_type="customer", opening_balance=Decimal("200")
        )
        self.supplier = PartyLedger.objects.create(
            party_name="Himal Traders", party_type="supplier",
            opening_balance=Decimal("50"), opening_balance_type="credit",
        )

    def test_new_party_starts_at_opening_balance(self):
        self.assertEqual(self.customer.current_balance, Decimal("200"))
        self.assertEqual(self.supplier.current_balance, Decimal("-50"))

    def test_posting_refreshes_stored_balance(self):
        post("2025-01-05", "1200", "4100", 300, party=self.customer.pk)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("500.00"))
        self.assertEqual(get_party_balance(self.customer.pk).balance, Decimal("500.00"))

    def test_debtors_and_creditors_split_by_sign(self):
        summary = debtors_and_creditors()

        self.assertEqual([p["party_name"] for p in summary["debtors"]], ["Pokhara Mart"])
        self.assertEqual([p["party_name"] for p in summary["creditors"]], ["Himal Traders"])
        self.assertEqual(summary["totals"]["net_position"], "150.00")

    def test_refresh_task_repairs_drifted_balance(self):
        PartyLedger.objects.filter(pk=self.customer.pk).update(current_balance=Decimal("1"))

        refresh_party_balances.apply(args=[[self.customer.pk]])

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("200.00"))

    def test_unknown_party(self):
        with self.assertRaises(PartyNotFound):
            get_party_balance(987654)


def test_not_found_errors_share_a_base():
    assert issubclass(AccountNotFound, NotFoundError)
    assert issubclass(PartyNotFound, NotFoundError)


@pytest.mark.parametrize(
    "normal, debit, credit, expected",
    [
        ("debit", Decimal("100"), Decimal("30"), (Decimal("70"), "debit")),
        ("debit", Decimal("30"), Decimal("100"), (Decimal("-70"), "credit")),
        ("credit", Decimal("30"), Decimal("100"), (Decimal("70"), "credit")),
        ("credit", Decimal("100"), Decimal("30"), (Decimal("-70"), "debit")),
    ],
)
def test_balance_sign_follows_normal_side(normal, debit, credit, expected):
    assert balance_from_totals(normal, Decimal("0"), debit, credit) == expected


@pytest.mark.parametrize(
    "days, bucket",
    [(-3, "current"), (0, "current"), (30, "current"), (31, "days_31_60"),
     (90, "days_61_90"), (180, "days_91_180"), (181, "over_180")],
)
def test_aging_buckets(days, bucket):
    assert aging_bucket(days) == bucket
