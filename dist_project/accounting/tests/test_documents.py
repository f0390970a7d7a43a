import datetime
from decimal import Decimal
from django.core.exceptions import ValidationError
from django.test import TestCase
from ..models import JournalEntry, PartyLedger, PurchaseEntry
from ..services.documents import (delete_purchase, mark_overdue_documents,
                                  mark_purchase_paid, mark_sale_received,
                                  record_purchase, record_sale, update_purchase)
from ..services.ledger import aging_analysis, get_account_balance
from ..services.reports import vat_summary

D = datetime.date
TODAY = D(2025, 1, 10)


def bill(supplier, **overrides):
    data = {
        "purchase_date": "2025-01-10",
        "bill_number": "INV-4567",
        "supplier_id": supplier.pk,
        "supplier_name": supplier.party_name,
        "items": [
            {"description": "Instant noodles (carton)", "quantity": 10, "unit_price": 100, "amount": 1000}
        ],
        "subtotal": 1000,
        "taxable_amount": 1000,
        "vat_amount": 130,
        "total_amount": 1130,
        "payment_method": "credit",
        "due_date": "2025-02-10",
    }
    data.update(overrides)
    return data


def invoice(customer, **overrides):
    data = {
        "sale_date": "2025-02-15",
        "invoice_number": "SI-0001",
        "customer_id": customer.pk,
        "customer_name": customer.party_name,
        "items": [{"description": "Biscuits", "quantity": 20, "unit_price": 100, "amount": 2000}],
        "subtotal": 2000,
        "taxable_amount": 2000,
        "vat_amount": 260,
        "total_amount": 2260,
        "payment_method": "credit",
        "due_date": "2025-03-15",
    }
    data.update(overrides)
    return data


class PurchaseLifecycleTests(TestCase):

    def setUp(self):
        self.supplier = PartyLedger.objects.create(party_name="Himal Traders", party_type="supplier")
        self.customer = PartyLedger.objects.create(party_name="Pokhara Mart", party_type="customer")
        self.purchase = record_purchase(bill(self.supplier), today=TODAY)

    def test_purchase_posts_its_journal(self):
        je = self.purchase.journal_entry
        self.assertEqual(je.status, "posted")
        self.assertEqual(je.source_type, "purchase")

        lines = {line.account.code: line for line in je.lines.select_related("account")}
        self.assertEqual(lines["5100"].debit_amount, Decimal("1000.00"))
        self.assertEqual(lines["1300"].debit_amount, Decimal("130.00"))
        self.assertEqual(lines["2100"].credit_amount, Decimal("1130.00"))
        self.assertEqual(lines["2100"].party, self.supplier)

    def test_supplier_becomes_a_creditor(self):
        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal("-1130.00"))
        self.assertEqual(self.supplier.balance_type, "credit")
        self.assertEqual(self.purchase.items.count(), 1)

    def test_payment_settles_creditor_through_bank(self):
        mark_purchase_paid(self.purchase, payment_date=D(2025, 2, 1))

        self.purchase.refresh_from_db()
        self.supplier.refresh_from_db()
        self.assertEqual(self.purchase.status, "paid")
        self.assertEqual(self.purchase.paid_at, D(2025, 2, 1))
        self.assertEqual(self.supplier.current_balance, Decimal("0.00"))
        self.assertEqual(get_account_balance("1020").balance, Decimal("-1130.00"))
        self.assertEqual(get_account_balance("2100").balance, Decimal("0.00"))

    def test_cash_payment_goes_through_cash_account(self):
        purchase = record_purchase(
            bill(self.supplier, bill_number="INV-4568", payment_method="cash", due_date=None),
            today=TODAY,
        )
        mark_purchase_paid(purchase, payment_date=D(2025, 1, 10))
        self.assertEqual(get_account_balance("1010").balance, Decimal("-1130.00"))

    def test_zero_bill_is_settled_without_a_payment_journal(self):
        free = [{"description": "Promotional stand", "quantity": 1, "unit_price": 0, "amount": 0}]
        purchase = record_purchase(
            bill(self.supplier, bill_number="FOC-1", items=free, subtotal=0, taxable_amount=0,
                 vat_amount=0, total_amount=0, payment_method="cash", due_date=None),
            today=TODAY,
        )
        self.assertIsNone(purchase.journal_entry)
        journals = JournalEntry.objects.count()

        mark_purchase_paid(purchase, payment_date=D(2025, 1, 12))

        purchase.refresh_from_db()
        self.assertEqual(purchase.status, "paid")
        self.assertIsNone(purchase.payment_journal)
        self.assertEqual(JournalEntry.objects.count(), journals)
        self.assertEqual(mark_overdue_documents(today=D(2025, 6, 1)), 1)  # only INV-4567

    def test_zero_bill_recorded_as_paid(self):
        free = [{"description": "Sample pack", "quantity": 1, "unit_price": 0, "amount": 0}]
        purchase = record_purchase(
            bill(self.supplier, bill_number="FOC-2", items=free, subtotal=0, taxable_amount=0,
                 vat_amount=0, total_amount=0, payment_method="cash", due_date=None, status="paid"),
            today=TODAY,
        )
        self.assertEqual(purchase.status, "paid")
        self.assertIsNone(purchase.payment_journal)

    def test_total_without_taxable_amount_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            record_purchase(
                bill(self.supplier, bill_number="ODD-1", subtotal=0, taxable_amount=0,
                     vat_amount=0, total_amount="0.01"),
                today=TODAY,
            )
        self.assertIn("taxable_amount", ctx.exception.message_dict)
        self.assertFalse(PurchaseEntry.objects.filter(bill_number="ODD-1").exists())

    def test_paid_purchase_is_immutable(self):
        mark_purchase_paid(self.purchase, payment_date=D(2025, 2, 1))
        self.purchase.refresh_from_db()

        self.purchase.total_amount = Decimal("1")
        with self.assertRaises(ValidationError):
            self.purchase.save()
        with self.assertRaises(ValidationError):
            delete_purchase(self.purchase)
        with self.assertRaises(ValidationError):
            PurchaseEntry.objects.filter(pk=self.purchase.pk).delete()
        with self.assertRaises(ValidationError):
            mark_purchase_paid(self.purchase)

    def test_update_reverses_old_journal(self):
        old_journal = self.purchase.journal_entry
        update_purchase(
            self.purchase,
            bill(self.supplier, subtotal=2000, taxable_amount=2000, vat_amount=260, total_amount=2260,
                 items=[{"description": "Noodles", "quantity": 20, "unit_price": 100, "amount": 2000}]),
            today=TODAY,
        )

        self.assertTrue(JournalEntry.objects.filter(reverses=old_journal).exists())
        self.assertNotEqual(self.purchase.journal_entry_id, old_journal.pk)
        self.assertEqual(get_account_balance("2100").balance, Decimal("2260.00"))

    def test_delete_pending_purchase_reverses_journal(self):
        delete_purchase(self.purchase)

        self.assertFalse(PurchaseEntry.objects.exists())
        self.assertEqual(get_account_balance("5100").balance, Decimal("0.00"))

    def test_duplicate_bill_number_for_same_supplier(self):
        with self.assertRaises(ValidationError) as ctx:
            record_purchase(bill(self.supplier), today=TODAY)
        self.assertIn("bill_number", ctx.exception.message_dict)

    def test_customer_cannot_be_used_as_supplier(self):
        with self.assertRaises(ValidationError) as ctx:
            record_purchase(bill(self.customer, bill_number="X-1"), today=TODAY)
        self.assertIn("supplier_id", ctx.exception.message_dict)

    def test_overdue_task_flags_past_due_credit_purchases(self):
        self.assertEqual(mark_overdue_documents(today=D(2025, 2, 10)), 0)
        self.assertEqual(mark_overdue_documents(today=D(2025, 2, 11)), 1)

        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, "overdue")
        # overdue bills can still be paid
        mark_purchase_paid(self.purchase, payment_date=D(2025, 2, 20))

    def test_aging_buckets_outstanding_bills(self):
        report = aging_analysis(party_type="supplier", today=D(2025, 3, 1))

        self.assertEqual(report["summary"]["total_outstanding"], "1130.00")
        self.assertEqual(report["parties"][0]["aging"]["days_31_60"], "1130.00")


class SalesAndVatTests(TestCase):

    def setUp(self):
        self.supplier = PartyLedger.objects.create(party_name="Himal Traders", party_type="supplier")
        self.customer = PartyLedger.objects.create(party_name="Pokhara Mart", party_type="customer")
        record_purchase(bill(self.supplier), today=TODAY)
        self.sale = record_sale(invoice(self.customer), today=TODAY)

    def test_sale_posts_output_vat_and_debtor(self):
        self.assertEqual(get_account_balance("2200").balance, Decimal("260.00"))
        self.assertEqual(get_account_balance("4100").balance, Decimal("2000.00"))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("2260.00"))

    def test_receipt_clears_debtor(self):
        mark_sale_received(self.sale, receipt_date=D(2025, 3, 1))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assertEqual(get_account_balance("1020").balance, Decimal("2260.00"))

    def test_zero_invoice_is_received_without_a_journal(self):
        free = [{"description": "Free sample", "quantity": 1, "unit_price": 0, "amount": 0}]
        sale = record_sale(
            invoice(self.customer, invoice_number="SI-0000", items=free, subtotal=0,
                    taxable_amount=0, vat_amount=0, total_amount=0),
            today=TODAY,
        )
        mark_sale_received(sale, receipt_date=D(2025, 3, 1))

        sale.refresh_from_db()
        self.assertEqual(sale.status, "paid")
        self.assertIsNone(sale.journal_entry)
        self.assertIsNone(sale.payment_journal)

    def test_quarter_vat_summary(self):
        summary = vat_summary(2025, 1)

        self.assertEqual(summary["from_date"], "2025-01-01")
        self.assertEqual(summary["to_date"], "2025-03-31")
        self.assertEqual(summary["input_vat"], "130.00")
        self.assertEqual(summary["output_vat"], "260.00")
        self.assertEqual(summary["net_vat"], "130.00")
        self.assertEqual(summary["position"], "payable")
        self.assertEqual(summary["purchase_count"], 1)

    def test_date_window_narrows_the_quarter(self):
        summary = vat_summary(2025, 1, from_date=D(2025, 2, 1))

        self.assertEqual(summary["input_vat"], "0.00")
        self.assertEqual(summary["output_vat"], "260.00")

    def test_other_quarter_is_empty(self):
        self.assertEqual(vat_summary(2025, 2)["position"], "nil")
