from decimal import Decimal
from django import forms
from django.utils import timezone
from ..models.document import DOCUMENT_STATUS, PAYMENT_METHODS
from ..services.vat import vat_amount_errors
from .base import ValidationResult, as_list, form_errors, money_field, validate_items

AMOUNT_FIELDS = ("taxable_amount", "vat_amount", "total_amount")


class DocumentItemForm(forms.Form):
    description = forms.CharField(min_length=1, max_length=200)
    quantity = forms.DecimalField(min_value=Decimal("0.01"), max_digits=14, decimal_places=4)
    unit_price = money_field()
    amount = money_field()
    is_vat_exempt = forms.BooleanField(required=False)


class ReturnItemForm(DocumentItemForm):
    reason = forms.CharField(max_length=200, required=False)


class VatAmountsForm(forms.Form):
    """Amount fields & VAT rules shared by every VAT document."""

    subtotal = money_field()
    discount_amount = money_field(required=False)
    taxable_amount = money_field()
    vat_amount = money_field()
    total_amount = money_field()
    notes = forms.CharField(max_length=1000, required=False)

    def __init__(self, *args, today=None, **kwargs):
        super().__init__(*args, **kwargs)
        # "now" is injectable so date rules stay deterministic
        self.today = today or timezone.localdate()

    def clean_discount_amount(self):
        return self.cleaned_data.get("discount_amount") or Decimal("0")

    def clean(self):
        cleaned = super().clean()
        amounts = [cleaned.get(f) for f in AMOUNT_FIELDS]
        if None not in amounts:
            # raw values so messages echo what the client sent
            raw = [self.data.get(f) for f in AMOUNT_FIELDS]
            for name, message in vat_amount_errors(*raw).items():
                self.add_error(name, message)
            taxable, _, total = amounts
            # the generated journal needs a taxable line to balance the party line
            if taxable == 0 and total > 0 and "taxable_amount" not in self.errors:
                self.add_error(
                    "taxable_amount", "Taxable amount must be greater than zero when total is not zero"
                )
        return cleaned


class TaxableDocumentForm(VatAmountsForm):
    """Purchase bills and sales invoices: payment terms on top of the amounts."""

    payment_method = forms.ChoiceField(choices=PAYMENT_METHODS, required=False)
    due_date = forms.DateField(required=False)
    status = forms.ChoiceField(choices=DOCUMENT_STATUS, required=False)

    def clean_payment_method(self):
        return self.cleaned_data.get("payment_method") or "credit"

    def clean_status(self):
        return self.cleaned_data.get("status") or "pending"


class PurchaseEntryForm(TaxableDocumentForm):
    purchase_date = forms.DateField()
    bill_number = forms.CharField(min_length=1, max_length=50)
    supplier_id = forms.IntegerField(min_value=1)
    supplier_name = forms.CharField(min_length=2, max_length=100)

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("payment_method") == "credit":
            due_date = cleaned.get("due_date")
            if due_date is None and "due_date" not in self.errors:
                self.add_error("due_date", "Due date is required for credit purchases")
            elif due_date is not None and due_date <= self.today:
                self.add_error("due_date", "Due date must be in the future for credit purchases")
        return cleaned


class SalesEntryForm(TaxableDocumentForm):
    sale_date = forms.DateField()
    invoice_number = forms.CharField(min_length=1, max_length=50)
    customer_id = forms.IntegerField(min_value=1)
    customer_name = forms.CharField(min_length=2, max_length=100)


class ReturnForm(VatAmountsForm):
    return_date = forms.DateField()
    # "processed" is reached only through processing
    status = forms.ChoiceField(choices=[("draft", "Draft"), ("approved", "Approved")], required=False)

    def clean_status(self):
        return self.cleaned_data.get("status") or "draft"


class SalesReturnForm(ReturnForm):
    customer_id = forms.IntegerField(min_value=1)
    customer_name = forms.CharField(min_length=2, max_length=100)
    original_invoice_number = forms.CharField(max_length=50, required=False)


class PurchaseReturnForm(ReturnForm):
    supplier_id = forms.IntegerField(min_value=1)
    supplier_name = forms.CharField(min_length=2, max_length=100)
    original_bill_number = forms.CharField(max_length=50, required=False)


def _validate_document(form, data, item_form=DocumentItemForm):
    errors = form_errors(form)
    cleaned = dict(form.cleaned_data) if form.is_valid() else {}
    items = as_list(data, "items")
    if not items:
        errors["items"] = ["At least one item is required"]
        return ValidationResult(cleaned, errors)
    cleaned["items"], item_errors = validate_items(item_form, items, "items")
    errors.update(item_errors)
    return ValidationResult(cleaned, errors)


def validate_purchase_entry(data, today=None):
    return _validate_document(PurchaseEntryForm(data, today=today), data)


def validate_sales_entry(data, today=None):
    return _validate_document(SalesEntryForm(data, today=today), data)


def validate_sales_return(data, today=None):
    return _validate_document(SalesReturnForm(data, today=today), data, ReturnItemForm)


def validate_purchase_return(data, today=None):
    return _validate_document(PurchaseReturnForm(data, today=today), data, ReturnItemForm)
