import json
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from ..models import JournalEntry, PartyLedger, PurchaseEntry


def journal(amount=500, credit=None, status="posted"):
    return {
        "date": "2025-01-15",
        "description": "Owner capital introduced",
        "status": status,
        "entries": [
            {"account_code": "1020", "debit_amount": amount},
            {"account_code": "4100", "credit_amount": amount if credit is None else credit},
        ],
    }


class AccountingApiTests(TestCase):

    def setUp(self):
        User = get_user_model()
        self.staff = User.objects.create_user("accountant", password="x", is_staff=True)
        self.client.force_login(self.staff)

    def post_json(self, name, payload, **kwargs):
        return self.client.post(
            reverse(name, kwargs=kwargs or None),
            data=json.dumps(payload),
            content_type="application/json",
        )

    def test_create_journal(self):
        response = self.post_json("accounting:journal-list", journal())

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["status"], "posted")
        self.assertEqual(body["data"]["total_debit"], "500.00")
        self.assertEqual(len(body["data"]["entries"]), 2)

    def test_unbalanced_journal_is_rejected(self):
        response = self.post_json("accounting:journal-list", journal(credit=400))

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertFalse(JournalEntry.objects.exists())

    def test_validate_endpoint_reports_without_saving(self):
        response = self.post_json("accounting:journal-validate", journal(credit=400))

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertFalse(data["is_valid"])
        self.assertTrue(data["errors"])
        self.assertFalse(JournalEntry.objects.exists())

    def test_malformed_body(self):
        response = self.client.post(
            reverse("accounting:journal-list"), data="[1, 2]", content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)

    def test_post_then_reverse_through_api(self):
        created = self.post_json("accounting:journal-list", journal(status="draft")).json()["data"]

        posted = self.post_json("accounting:journal-post", {}, pk=created["id"])
        self.assertEqual(posted.status_code, 200)
        self.assertEqual(posted.json()["data"]["status"], "posted")

        reversed_ = self.post_json("accounting:journal-reverse", {"date": "2025-01-20"}, pk=created["id"])
        self.assertEqual(reversed_.status_code, 201)
        self.assertEqual(reversed_.json()["data"]["reverses"], created["entry_number"])

        again = self.post_json("accounting:journal-reverse", {}, pk=created["id"])
        self.assertEqual(again.status_code, 400)

    def test_account_balance(self):
        self.post_json("accounting:journal-list", journal())

        response = self.client.get(reverse("accounting:account-balance", kwargs={"code": "1020"}))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["balance"], "500.00")
        self.assertEqual(response.json()["data"]["balance_type"], "debit")

    def test_unknown_account_is_404(self):
        response = self.client.get(reverse("accounting:account-balance", kwargs={"code": "9999"}))
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])

    def test_missing_journal_is_404(self):
        response = self.client.get(reverse("accounting:journal-detail", kwargs={"pk": 12345}))
        self.assertEqual(response.status_code, 404)

    def test_trial_balance(self):
        self.post_json("accounting:journal-list", journal())

        response = self.client.get(reverse("accounting:trial-balance"), {"as_of_date": "2025-12-31"})
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertTrue(data["totals"]["is_balanced"])
        self.assertEqual(data["totals"]["total_debits"], "500.00")

    def test_vat_report_needs_valid_quarter(self):
        response = self.client.get(reverse("accounting:vat-report"), {"year": 2025, "quarter": 5})

        self.assertEqual(response.status_code, 400)
        self.assertIn("quarter", response.json()["errors"])

    def test_party_list_is_paginated(self):
        for i in range(3):
            PartyLedger.objects.create(party_name=f"Retailer {i}", party_type="customer")

        response = self.client.get(reverse("accounting:party-list"), {"limit": 2, "page": 2})
        body = response.json()
        self.assertEqual(len(body["items"]), 1)
        self.assertEqual(body["pagination"], {"page": 2, "limit": 2, "total": 3, "total_pages": 2})

    def test_bad_page_number(self):
        response = self.client.get(reverse("accounting:party-list"), {"page": "zero"})
        self.assertEqual(response.status_code, 400)

    def test_wrong_method(self):
        response = self.client.delete(reverse("accounting:trial-balance"))
        self.assertEqual(response.status_code, 405)

    def test_oversized_journal_amount_is_a_field_error(self):
        response = self.post_json("accounting:journal-list", journal(amount="1e30"))

        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIn("entries[0].debit_amount", errors)
        self.assertIn("entries[1].credit_amount", errors)
        self.assertFalse(JournalEntry.objects.exists())

    def test_oversized_purchase_amounts_are_field_errors(self):
        supplier = PartyLedger.objects.create(party_name="Himal Traders", party_type="supplier")
        payload = {
            "purchase_date": "2025-01-10",
            "bill_number": "HT-900",
            "supplier_id": supplier.pk,
            "supplier_name": supplier.party_name,
            "subtotal": "1e30",
            "taxable_amount": "1e30",
            "vat_amount": "1.3e29",
            "total_amount": "1.13e30",
            "payment_method": "cash",
            "items": [{"description": "Noodles", "quantity": 1, "unit_price": "1e30", "amount": "1e30"}],
        }

        response = self.post_json("accounting:purchase-list", payload)

        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        for field in ("taxable_amount", "vat_amount", "total_amount", "items[0].amount"):
            self.assertIn(field, errors)
        self.assertFalse(PurchaseEntry.objects.exists())


class AccountingApiAccessTests(TestCase):

    def test_anonymous_gets_401(self):
        response = self.client.get(reverse("accounting:trial-balance"))
        self.assertEqual(response.status_code, 401)

    def test_non_staff_gets_403(self):
        user = get_user_model().objects.create_user("retailer", password="x")
        self.client.force_login(user)

        response = self.client.get(reverse("accounting:trial-balance"))
        self.assertEqual(response.status_code, 403)
