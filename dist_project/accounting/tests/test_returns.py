import datetime
import json
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from ..models import JournalEntry, PartyLedger, SalesReturn
from ..services.documents import record_purchase, record_sale
from ..services.ledger import get_account_balance
from ..services.reports import document_register, vat_summary
from ..services.returns import (delete_sales_return, process_purchase_return,
                                process_sales_return, record_purchase_return,
                                record_sales_return, update_sales_return)
from .test_documents import TODAY, bill, invoice

D = datetime.date


def sales_return(customer, **overrides):
    data = {
        "return_date": "2025-02-20",
        "customer_id": customer.pk,
        "customer_name": customer.party_name,
        "original_invoice_number": "SI-0001",
        "items": [
            {"description": "Biscuits", "quantity": 2, "unit_price": 100, "amount": 200,
             "reason": "Crushed in transit"}
        ],
        "subtotal": 200,
        "taxable_amount": 200,
        "vat_amount": 26,
        "total_amount": 226,
    }
    data.update(overrides)
    return data


def purchase_return(supplier, **overrides):
    data = {
        "return_date": "2025-01-20",
        "supplier_id": supplier.pk,
        "supplier_name": supplier.party_name,
        "original_bill_number": "INV-4567",
        "items": [
            {"description": "Instant noodles (carton)", "quantity": 1, "unit_price": 100, "amount": 100,
             "reason": "Past expiry"}
        ],
        "subtotal": 100,
        "taxable_amount": 100,
        "vat_amount": 13,
        "total_amount": 113,
    }
    data.update(overrides)
    return data


def journal_lines(je):
    return {line.account.code: line for line in je.lines.select_related("account")}


class SalesReturnTests(TestCase):

    def setUp(self):
        self.supplier = PartyLedger.objects.create(party_name="Himal Traders", party_type="supplier")
        self.customer = PartyLedger.objects.create(party_name="Pokhara Mart", party_type="customer")
        record_purchase(bill(self.supplier), today=TODAY)
        self.sale = record_sale(invoice(self.customer), today=TODAY)
        self.sales_return = record_sales_return(sales_return(self.customer))

    def test_draft_return_is_not_in_the_books(self):
        self.assertEqual(self.sales_return.status, "draft")
        self.assertEqual(self.sales_return.return_number, "SR2025000001")
        self.assertEqual(self.sales_return.original_sale, self.sale)
        self.assertIsNone(self.sales_return.journal_entry)
        self.assertFalse(JournalEntry.objects.filter(source_type="sales_return").exists())
        self.assertEqual(vat_summary(2025, 1)["output_vat"], "260.00")

    def test_processing_reverses_revenue_vat_and_debtor(self):
        process_sales_return(self.sales_return, processed_date=D(2025, 2, 21))

        self.sales_return.refresh_from_db()
        self.assertEqual(self.sales_return.status, "processed")
        self.assertEqual(self.sales_return.processed_at, D(2025, 2, 21))
        je = self.sales_return.journal_entry
        self.assertEqual(je.status, "posted")
        self.assertEqual(je.reference_number, "SR2025000001")

        lines = journal_lines(je)
        self.assertEqual(lines["4200"].debit_amount, Decimal("200.00"))
        self.assertEqual(lines["2200"].debit_amount, Decimal("26.00"))
        self.assertEqual(lines["1200"].credit_amount, Decimal("226.00"))
        self.assertEqual(lines["1200"].party, self.customer)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("2034.00"))
        self.assertEqual(get_account_balance("2200").balance, Decimal("234.00"))

    def test_vat_summary_nets_processed_returns(self):
        process_sales_return(self.sales_return)
        summary = vat_summary(2025, 1)

        self.assertEqual(summary["output_vat"], "234.00")
        self.assertEqual(summary["taxable_sales"], "1800.00")
        self.assertEqual(summary["sales_returns_vat"], "26.00")
        self.assertEqual(summary["sales_return_count"], 1)
        self.assertEqual(summary["net_vat"], "104.00")
        self.assertEqual(summary["position"], "payable")

    def test_processed_return_is_frozen(self):
        process_sales_return(self.sales_return)
        self.sales_return.refresh_from_db()

        self.sales_return.total_amount = Decimal("1")
        with self.assertRaises(ValidationError):
            self.sales_return.save()
        with self.assertRaises(ValidationError):
            update_sales_return(self.sales_return, sales_return(self.customer))
        with self.assertRaises(ValidationError):
            delete_sales_return(self.sales_return)
        with self.assertRaises(ValidationError):
            SalesReturn.objects.filter(pk=self.sales_return.pk).delete()
        with self.assertRaises(ValidationError):
            process_sales_return(self.sales_return)

    def test_draft_return_can_be_edited_and_deleted(self):
        update_sales_return(self.sales_return, sales_return(self.customer, status="approved", notes="Checked"))
        self.sales_return.refresh_from_db()
        self.assertEqual(self.sales_return.status, "approved")
        self.assertEqual(self.sales_return.items.get().reason, "Crushed in transit")

        delete_sales_return(self.sales_return)
        self.assertFalse(SalesReturn.objects.exists())

    def test_returns_cannot_exceed_the_invoice(self):
        too_much = sales_return(
            self.customer, subtotal=2100, taxable_amount=2100, vat_amount=273, total_amount=2373,
            items=[{"description": "Biscuits", "quantity": 21, "unit_price": 100, "amount": 2100}],
        )
        with self.assertRaises(ValidationError) as ctx:
            record_sales_return(too_much)
        self.assertIn("total_amount", ctx.exception.message_dict)

    def test_unknown_invoice_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            record_sales_return(sales_return(self.customer, original_invoice_number="SI-9999"))
        self.assertIn("original_invoice_number", ctx.exception.message_dict)

    def test_invoice_of_another_customer_is_rejected(self):
        other = PartyLedger.objects.create(party_name="Butwal Stores", party_type="customer")
        with self.assertRaises(ValidationError) as ctx:
            record_sales_return(sales_return(other))
        self.assertIn("original_invoice_number", ctx.exception.message_dict)

    def test_zero_return_is_processed_without_a_journal(self):
        free = [{"description": "Free sample", "quantity": 1, "unit_price": 0, "amount": 0}]
        zero = record_sales_return(
            sales_return(self.customer, items=free, subtotal=0, taxable_amount=0,
                         vat_amount=0, total_amount=0)
        )
        process_sales_return(zero)

        zero.refresh_from_db()
        self.assertEqual(zero.status, "processed")
        self.assertIsNone(zero.journal_entry)

    def test_register_lists_sales_returns(self):
        process_sales_return(self.sales_return)
        register = document_register("sales_return", D(2025, 1, 1), D(2025, 3, 31))

        self.assertEqual(register["rows"][0]["number"], "SR2025000001")
        self.assertEqual(register["rows"][0]["party_name"], "Pokhara Mart")
        self.assertEqual(register["totals"]["vat_amount"], "26.00")


class PurchaseReturnTests(TestCase):

    def setUp(self):
        self.supplier = PartyLedger.objects.create(party_name="Himal Traders", party_type="supplier")
        self.purchase = record_purchase(bill(self.supplier), today=TODAY)

    def test_processing_reverses_stock_vat_and_creditor(self):
        purchase_return_doc = record_purchase_return(purchase_return(self.supplier))
        self.assertEqual(purchase_return_doc.return_number, "PR2025000001")
        self.assertEqual(purchase_return_doc.original_purchase, self.purchase)

        process_purchase_return(purchase_return_doc)

        lines = journal_lines(purchase_return_doc.journal_entry)
        self.assertEqual(lines["2100"].debit_amount, Decimal("113.00"))
        self.assertEqual(lines["2100"].party, self.supplier)
        self.assertEqual(lines["5200"].credit_amount, Decimal("100.00"))
        self.assertEqual(lines["1300"].credit_amount, Decimal("13.00"))

        self.supplier.refresh_from_db()
        self.assertEqual(self.supplier.current_balance, Decimal("-1017.00"))

        summary = vat_summary(2025, 1)
        self.assertEqual(summary["input_vat"], "117.00")
        self.assertEqual(summary["purchase_returns_vat"], "13.00")
        self.assertEqual(summary["purchase_return_count"], 1)

    def test_bill_of_another_supplier_is_rejected(self):
        other = PartyLedger.objects.create(party_name="Everest Foods", party_type="supplier")
        with self.assertRaises(ValidationError) as ctx:
            record_purchase_return(purchase_return(other))
        self.assertIn("original_bill_number", ctx.exception.message_dict)

    def test_customer_cannot_receive_a_purchase_return(self):
        customer = PartyLedger.objects.create(party_name="Pokhara Mart", party_type="customer")
        with self.assertRaises(ValidationError) as ctx:
            record_purchase_return(purchase_return(customer, original_bill_number=""))
        self.assertIn("supplier_id", ctx.exception.message_dict)


class ReturnApiTests(TestCase):

    def setUp(self):
        staff = get_user_model().objects.create_user("accountant", password="x", is_staff=True)
        self.client.force_login(staff)
        self.customer = PartyLedger.objects.create(party_name="Pokhara Mart", party_type="customer")
        record_sale(invoice(self.customer), today=TODAY)

    def test_create_then_process(self):
        response = self.client.post(
            reverse("accounting:sales-return-list"),
            data=json.dumps(sales_return(self.customer)),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["status"], "draft")
        self.assertIsNone(data["journal_entry"])
        self.assertEqual(data["items"][0]["reason"], "Crushed in transit")

        url = reverse("accounting:sales-return-process", kwargs={"pk": data["id"]})
        processed = self.client.post(url)
        self.assertEqual(processed.status_code, 200)
        self.assertEqual(processed.json()["data"]["status"], "processed")
        self.assertIsNotNone(processed.json()["data"]["journal_entry"])

        self.assertEqual(self.client.post(url).status_code, 400)
        self.assertEqual(self.client.delete(
            reverse("accounting:sales-return-detail", kwargs={"pk": data["id"]})
        ).status_code, 400)

    def test_invalid_return_reports_field_errors(self):
        response = self.client.post(
            reverse("accounting:sales-return-list"),
            data=json.dumps(sales_return(self.customer, status="processed", items=[])),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIn("status", errors)
        self.assertIn("items", errors)
