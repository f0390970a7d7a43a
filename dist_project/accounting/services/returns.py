"""
Sales & purchase returns. A return is booked only when it is processed:

  sales return:     Dr Sales Returns (taxable)  Dr VAT output (vat)   Cr Debtors (total)
  purchase return:  Dr Creditors (total)        Cr Purchase Returns (taxable)  Cr VAT input (vat)
"""
import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from ..constants import BALANCE_TOLERANCE, ZERO
from ..forms import validate_purchase_return, validate_sales_return
from ..models import (PurchaseEntry, PurchaseReturn, PurchaseReturnItem,
                      SalesEntry, SalesReturn, SalesReturnItem)
from .audit_helper import log_action
from .documents import _party_for, _replace_items, posting_account
from .journals import post_generated_journal

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    "subtotal", "discount_amount", "taxable_amount", "vat_amount", "total_amount", "notes",
)


def _header(cleaned):
    return {name: cleaned.get(name) for name in HEADER_FIELDS}


def _ensure_editable(document):
    if document.status == "processed":
        raise ValidationError(f"Cannot modify a processed {document._meta.verbose_name}")


def _check_returned_total(original, total, exclude_pk, label):
    """Returns against one document never add up to more than it was worth."""
    returned = (
        original.returns.exclude(pk=exclude_pk).aggregate(total=Sum("total_amount"))["total"]
        or ZERO
    )
    if returned + total > original.total_amount + BALANCE_TOLERANCE:
        raise ValidationError({
            "total_amount": [
                f"Returns would exceed the {label} total of {original.total_amount:.2f} "
                f"({returned:.2f} already returned)"
            ]
        })


def _original_sale(customer, invoice_number, total, exclude_pk=None):
    if not invoice_number:
        return None
    sale = SalesEntry.objects.filter(invoice_number=invoice_number).first()
    if sale is None:
        raise ValidationError({"original_invoice_number": ["Original invoice not found"]})
    if sale.customer_id != customer.pk:
        raise ValidationError(
            {"original_invoice_number": [f"Invoice {invoice_number} belongs to another customer"]}
        )
    _check_returned_total(sale, total, exclude_pk, "invoice")
    return sale


def _original_purchase(supplier, bill_number, total, exclude_pk=None):
    if not bill_number:
        return None
    purchase = PurchaseEntry.objects.filter(supplier=supplier, bill_number=bill_number).first()
    if purchase is None:
        raise ValidationError({"original_bill_number": ["Original bill not found for this supplier"]})
    _check_returned_total(purchase, total, exclude_pk, "bill")
    return purchase


# ---------- Sales returns ----------
def _sales_return_journal(sales_return, user):
    name = sales_return.customer_name
    return post_generated_journal(
        date=sales_return.date,
        description=f"Sales return from {name}",
        reference_number=sales_return.return_number,
        reference_type="adjustment",
        source_type="sales_return",
        source_id=sales_return.pk,
        user=user,
        lines=[
            {"account": posting_account("sales_returns"), "description": f"Sales return from {name}",
             "debit_amount": sales_return.taxable_amount},
            {"account": posting_account("vat_output"),
             "description": f"VAT on sales return from {name}",
             "debit_amount": sales_return.vat_amount},
            {"account": posting_account("debtors"), "party": sales_return.customer,
             "description": f"Amount due to {name}", "credit_amount": sales_return.total_amount},
        ],
    )


def record_sales_return(data, user=None, today=None):
    """Store a customer's return as draft/approved; nothing is posted yet."""
    result = validate_sales_return(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    customer = _party_for(cleaned["customer_id"], "customer", "customer_id")
    original = _original_sale(customer, cleaned["original_invoice_number"], cleaned["total_amount"])

    with transaction.atomic():
        sales_return = SalesReturn.objects.create(
            date=cleaned["return_date"],
            customer=customer,
            customer_name=cleaned["customer_name"],
            original_sale=original,
            original_invoice_number=cleaned["original_invoice_number"],
            status=cleaned["status"],
            created_by=user,
            **_header(cleaned),
        )
        _replace_items(sales_return, SalesReturnItem, "sales_return", cleaned["items"])
        log_action(action="create", instance=sales_return, user=user)

    logger.info("Recorded sales return %s from %s: %s", sales_return.return_number,
                sales_return.customer_name, sales_return.total_amount)
    return sales_return


def update_sales_return(sales_return, data, user=None, today=None):
    _ensure_editable(sales_return)
    result = validate_sales_return(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    customer = _party_for(cleaned["customer_id"], "customer", "customer_id")
    original = _original_sale(
        customer, cleaned["original_invoice_number"], cleaned["total_amount"],
        exclude_pk=sales_return.pk,
    )

    with transaction.atomic():
        sales_return.date = cleaned["return_date"]
        sales_return.customer = customer
        sales_return.customer_name = cleaned["customer_name"]
        sales_return.original_sale = original
        sales_return.original_invoice_number = cleaned["original_invoice_number"]
        sales_return.status = cleaned["status"]
        for name, value in _header(cleaned).items():
            setattr(sales_return, name, value)
        sales_return.save()
        _replace_items(sales_return, SalesReturnItem, "sales_return", cleaned["items"])
        log_action(action="update", instance=sales_return, user=user)
    return sales_return


def delete_sales_return(sales_return, user=None):
    _ensure_editable(sales_return)
    with transaction.atomic():
        log_action(action="delete", instance=sales_return, user=user,
                   changes={"return_number": sales_return.return_number})
        sales_return.delete()


def process_sales_return(sales_return, user=None, processed_date=None):
    """Book the return: post its reversing VAT journal and freeze it."""
    if sales_return.status == "processed":
        raise ValidationError("Sales return is already processed")

    with transaction.atomic():
        if sales_return.total_amount > 0:
            sales_return.journal_entry = _sales_return_journal(sales_return, user)
        sales_return.processed_at = processed_date or timezone.localdate()
        sales_return.transition_to("processed")
        log_action(action="process", instance=sales_return, user=user)

    logger.info("Sales return %s processed", sales_return.return_number)
    return sales_return


# ---------- Purchase returns ----------
def _purchase_return_journal(purchase_return, user):
    name = purchase_return.supplier_name
    return post_generated_journal(
        date=purchase_return.date,
        description=f"Purchase return to {name}",
        reference_number=purchase_return.return_number,
        reference_type="adjustment",
        source_type="purchase_return",
        source_id=purchase_return.pk,
        user=user,
        lines=[
            {"account": posting_account("creditors"), "party": purchase_return.supplier,
             "description": f"Amount due to {name}", "debit_amount": purchase_return.total_amount},
            {"account": posting_account("purchase_returns"),
             "description": f"Purchase return to {name}",
             "credit_amount": purchase_return.taxable_amount},
            {"account": posting_account("vat_input"),
             "description": f"VAT on purchase return to {name}",
             "credit_amount": purchase_return.vat_amount},
        ],
    )


def record_purchase_return(data, user=None, today=None):
    result = validate_purchase_return(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    supplier = _party_for(cleaned["supplier_id"], "supplier", "supplier_id")
    original = _original_purchase(supplier, cleaned["original_bill_number"], cleaned["total_amount"])

    with transaction.atomic():
        purchase_return = PurchaseReturn.objects.create(
            date=cleaned["return_date"],
            supplier=supplier,
            supplier_name=cleaned["supplier_name"],
            original_purchase=original,
            original_bill_number=cleaned["original_bill_number"],
            status=cleaned["status"],
            created_by=user,
            **_header(cleaned),
        )
        _replace_items(purchase_return, PurchaseReturnItem, "purchase_return", cleaned["items"])
        log_action(action="create", instance=purchase_return, user=user)

    logger.info("Recorded purchase return %s to %s: %s", purchase_return.return_number,
                purchase_return.supplier_name, purchase_return.total_amount)
    return purchase_return


def update_purchase_return(purchase_return, data, user=None, today=None):
    _ensure_editable(purchase_return)
    result = validate_purchase_return(data, today=today)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    supplier = _party_for(cleaned["supplier_id"], "supplier", "supplier_id")
    original = _original_purchase(
        supplier, cleaned["original_bill_number"], cleaned["total_amount"],
        exclude_pk=purchase_return.pk,
    )

    with transaction.atomic():
        purchase_return.date = cleaned["return_date"]
        purchase_return.supplier = supplier
        purchase_return.supplier_name = cleaned["supplier_name"]
        purchase_return.original_purchase = original
        purchase_return.original_bill_number = cleaned["original_bill_number"]
        purchase_return.status = cleaned["status"]
        for name, value in _header(cleaned).items():
            setattr(purchase_return, name, value)
        purchase_return.save()
        _replace_items(purchase_return, PurchaseReturnItem, "purchase_return", cleaned["items"])
        log_action(action="update", instance=purchase_return, user=user)
    return purchase_return


def delete_purchase_return(purchase_return, user=None):
    _ensure_editable(purchase_return)
    with transaction.atomic():
        log_action(action="delete", instance=purchase_return, user=user,
                   changes={"return_number": purchase_return.return_number})
        purchase_return.delete()


def process_purchase_return(purchase_return, user=None, processed_date=None):
    if purchase_return.status == "processed":
        raise ValidationError("Purchase return is already processed")

    with transaction.atomic():
        if purchase_return.total_amount > 0:
            purchase_return.journal_entry = _purchase_return_journal(purchase_return, user)
        purchase_return.processed_at = processed_date or timezone.localdate()
        purchase_return.transition_to("processed")
        log_action(action="process", instance=purchase_return, user=user)

    logger.info("Purchase return %s processed", purchase_return.return_number)
    return purchase_return
