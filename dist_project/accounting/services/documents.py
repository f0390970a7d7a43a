"""
Purchase bills & sales invoices, and the journals they generate.

  purchase:  Dr Purchases (taxable)  Dr VAT input (vat)   Cr Creditors (total)
  payment:   Dr Creditors (total)    Cr Bank/Cash (total)
  sale:      Dr Debtors (total)      Cr Sales (taxable)    Cr VAT output (vat)
  receipt:   Dr Bank/Cash (total)    Cr Debtors (total)
"""
import logging
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from ..forms import validate_purchase_entry, validate_sales_entry
from ..models import (Account, PartyLedger, PurchaseEntry, PurchaseItem,
                      SalesEntry, SalesItem)
from .audit_helper import log_action
from .journals import post_generated_journal

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "subtotal", "discount_amount", "taxable_amount", "vat_amount",
    "total_amount", "payment_method", "due_date", "notes",
)


def posting_account(key):
    """Ledger account configured for automatic journals (settings.ACCOUNTING_POSTING_ACCOUNTS)."""
    code = settings.ACCOUNTING_POSTING_ACCOUNTS[key]
    account = Account.objects.filter(code=code, is_active=True).first()
    if account is None:
        raise ValidationError(
            f"Posting account for '{key}' ({code}) is not set up in the chart of accounts"
        )
    return account


def settlement_account(payment_method):
    return posting_account("cash" if payment_method == "cash" else "bank")


def _party_for(party_id, party_type, field):
    party = PartyLedger.objects.filter(pk=party_id, is_active=True).first()
    if party is None:
        raise ValidationError({field: [f"{party_type.capitalize()} not found"]})
    if party.party_type != party_type:
        raise ValidationError({field: [f"Party '{party.party_name}' is not a {party_type}"]})
    return party


def _header(cleaned):
    return {name: cleaned.get(name) for name in HEADER_FIELDS}


def _replace_items(document, item_model, fk_name, items):
    getattr(document, "items").all().delete()
    for item in items:
        item_model.objects.create(**{fk_name: document}, **item)


def _ensure_editable(document):
    if document.status == "paid":
        raise ValidationError(f"Cannot modify a paid {document._meta.verbose_name}")


def _reverse_journal(document, user):
    # corrections never touch a posted journal, they reverse it
    if document.journal_entry_id:
        document.journal_entry.reverse(user=user)


# ---------- Purchases ----------
def _purchase_journal(purchase, user):
    name = purchase.supplier_name
    return post_generated_journal(
        date=purchase.date,
        description=f"Purchase from {name}",
        reference_number=purchase.bill_number,
        source_type="purchase",
        source_id=purchase.pk,
        user=user,
        lines=[
            {"account": posting_account("purchases"), "description": f"Purchase from {name}",
             "debit_amount": purchase.taxable_amount},
            {"account": posting_account("vat_input"), "description": f"VAT on purchase from {name}",
             "debit_amount": purchase.vat_amount},
            {"account": posting_account("creditors"), "party": purchase.supplier,
             "description": f"Amount due to {name}", "credit_amount": purchase.total_amount},
        ],
    )


def record_purchase(data, user=None, today=None):
    """Validate & store a supplier bill, then post its purchase journal."""
    result = validate_purchase_entry(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    supplier = _party_for(cleaned["supplier_id"], "supplier", "supplier_id")

    if PurchaseEntry.objects.filter(supplier=supplier, bill_number=cleaned["bill_number"]).exists():
        raise ValidationError({"bill_number": ["Bill number already exists for this supplier"]})

    with transaction.atomic():
        purchase = PurchaseEntry.objects.create(
            date=cleaned["purchase_date"],
            bill_number=cleaned["bill_number"],
            supplier=supplier,
            supplier_name=cleaned["supplier_name"],
            created_by=user,
            **_header(cleaned),
        )
        _replace_items(purchase, PurchaseItem, "purchase", cleaned["items"])
        if purchase.total_amount > 0:
            purchase.journal_entry = _purchase_journal(purchase, user)
            purchase.save(update_fields=["journal_entry", "updated_at"])
        log_action(action="create", instance=purchase, user=user)
        if cleaned["status"] == "paid":
            mark_purchase_paid(purchase, user=user, payment_date=purchase.date)

    logger.info("Recorded purchase %s from %s: %s", purchase.bill_number,
                purchase.supplier_name, purchase.total_amount)
    return purchase


def update_purchase(purchase, data, user=None, today=None):
    _ensure_editable(purchase)
    result = validate_purchase_entry(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    supplier = _party_for(cleaned["supplier_id"], "supplier", "supplier_id")

    with transaction.atomic():
        _reverse_journal(purchase, user)
        purchase.date = cleaned["purchase_date"]
        purchase.bill_number = cleaned["bill_number"]
        purchase.supplier = supplier
        purchase.supplier_name = cleaned["supplier_name"]
        for name, value in _header(cleaned).items():
            setattr(purchase, name, value)
        purchase.journal_entry = None
        purchase.save()
        _replace_items(purchase, PurchaseItem, "purchase", cleaned["items"])
        if purchase.total_amount > 0:
            purchase.journal_entry = _purchase_journal(purchase, user)
            purchase.save(update_fields=["journal_entry", "updated_at"])
        log_action(action="update", instance=purchase, user=user)
    return purchase


def delete_purchase(purchase, user=None):
    _ensure_editable(purchase)
    with transaction.atomic():
        _reverse_journal(purchase, user)
        log_action(action="delete", instance=purchase, user=user,
                   changes={"bill_number": purchase.bill_number})
        purchase.delete()


def _payment_journal(purchase, user, payment_date):
    name = purchase.supplier_name
    return post_generated_journal(
        date=payment_date,
        description=f"Payment to {name}",
        reference_number=purchase.bill_number,
        reference_type="payment",
        source_type="purchase_payment",
        source_id=purchase.pk,
        user=user,
        lines=[
            {"account": posting_account("creditors"), "party": purchase.supplier,
             "description": f"Payment to {name}", "debit_amount": purchase.total_amount},
            {"account": settlement_account(purchase.payment_method),
             "description": f"Payment to {name}", "credit_amount": purchase.total_amount},
        ],
    )


def mark_purchase_paid(purchase, user=None, payment_date=None):
    """Settle a bill: post Dr Creditors / Cr Bank (or Cash) and mark it paid."""
    if purchase.status == "paid":
        raise ValidationError("Purchase entry is already paid")
    payment_date = payment_date or timezone.localdate()

    with transaction.atomic():
        # a zero bill owes nothing, it is settled without a payment journal
        if purchase.total_amount > 0:
            purchase.payment_journal = _payment_journal(purchase, user, payment_date)
        purchase.paid_at = payment_date
        purchase.transition_to("paid")
        log_action(action="pay", instance=purchase, user=user)

    logger.info("Purchase %s paid on %s", purchase.bill_number, payment_date)
    return purchase


# ---------- Sales ----------
def _sales_journal(sale, user):
    name = sale.customer_name
    return post_generated_journal(
        date=sale.date,
        description=f"Sales to {name}",
        reference_number=sale.invoice_number,
        source_type="sale",
        source_id=sale.pk,
        user=user,
        lines=[
            {"account": posting_account("debtors"), "party": sale.customer,
             "description": f"Amount due from {name}", "debit_amount": sale.total_amount},
            {"account": posting_account("sales"), "description": f"Sales to {name}",
             "credit_amount": sale.taxable_amount},
            {"account": posting_account("vat_output"), "description": f"VAT on sales to {name}",
             "credit_amount": sale.vat_amount},
        ],
    )


def record_sale(data, user=None, today=None):
    result = validate_sales_entry(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    customer = _party_for(cleaned["customer_id"], "customer", "customer_id")

    if SalesEntry.objects.filter(invoice_number=cleaned["invoice_number"]).exists():
        raise ValidationError({"invoice_number": ["Invoice number already exists"]})

    with transaction.atomic():
        sale = SalesEntry.objects.create(
            date=cleaned["sale_date"],
            invoice_number=cleaned["invoice_number"],
            customer=customer,
            customer_name=cleaned["customer_name"],
            created_by=user,
            **_header(cleaned),
        )
        _replace_items(sale, SalesItem, "sale", cleaned["items"])
        if sale.total_amount > 0:
            sale.journal_entry = _sales_journal(sale, user)
            sale.save(update_fields=["journal_entry", "updated_at"])
        log_action(action="create", instance=sale, user=user)
        if cleaned["status"] == "paid":
            mark_sale_received(sale, user=user, receipt_date=sale.date)

    logger.info("Recorded sale %s to %s: %s", sale.invoice_number,
                sale.customer_name, sale.total_amount)
    return sale


def update_sale(sale, data, user=None, today=None):
    _ensure_editable(sale)
    result = validate_sales_entry(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    customer = _party_for(cleaned["customer_id"], "customer", "customer_id")

    with transaction.atomic():
        _reverse_journal(sale, user)
        sale.date = cleaned["sale_date"]
        sale.invoice_number = cleaned["invoice_number"]
        sale.customer = customer
        sale.customer_name = cleaned["customer_name"]
        for name, value in _header(cleaned).items():
            setattr(sale, name, value)
        sale.journal_entry = None
        sale.save()
        _replace_items(sale, SalesItem, "sale", cleaned["items"])
        if sale.total_amount > 0:
            sale.journal_entry = _sales_journal(sale, user)
            sale.save(update_fields=["journal_entry", "updated_at"])
        log_action(action="update", instance=sale, user=user)
    return sale


def delete_sale(sale, user=None):
    _ensure_editable(sale)
    with transaction.atomic():
        _reverse_journal(sale, user)
        log_action(action="delete", instance=sale, user=user,
                   changes={"invoice_number": sale.invoice_number})
        sale.delete()


def _receipt_journal(sale, user, receipt_date):
    name = sale.customer_name
    return post_generated_journal(
        date=receipt_date,
        description=f"Receipt from {name}",
        reference_number=sale.invoice_number,
        reference_type="payment",
        source_type="sale_receipt",
        source_id=sale.pk,
        user=user,
        lines=[
            {"account": settlement_account(sale.payment_method),
             "description": f"Receipt from {name}", "debit_amount": sale.total_amount},
            {"account": posting_account("debtors"), "party": sale.customer,
             "description": f"Receipt from {name}", "credit_amount": sale.total_amount},
        ],
    )


def mark_sale_received(sale, user=None, receipt_date=None):
    """Collect an invoice: post Dr Bank (or Cash) / Cr Debtors and mark it paid."""
    if sale.status == "paid":
        raise ValidationError("Sales entry is already paid")
    receipt_date = receipt_date or timezone.localdate()

    with transaction.atomic():
        if sale.total_amount > 0:
            sale.payment_journal = _receipt_journal(sale, user, receipt_date)
        sale.paid_at = receipt_date
        sale.transition_to("paid")
        log_action(action="pay", instance=sale, user=user)

    logger.info("Sale %s received on %s", sale.invoice_number, receipt_date)
    return sale


def mark_overdue_documents(today=None):
    """Pending credit documents past their due date become overdue."""
    today = today or timezone.localdate()
    count = 0
    for model in (PurchaseEntry, SalesEntry):
        for document in model.objects.filter(
            status="pending", payment_method="credit", due_date__lt=today
        ):
            document.transition_to("overdue")
            count += 1
    if count:
        logger.info("Marked %s documents overdue", count)
    return count
