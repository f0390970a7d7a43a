from decimal import Decimal
from django import forms
from ..models.journal import JOURNAL_STATUS, REFERENCE_TYPES
from ..services.balance import balance_errors, compute_totals
from .base import ValidationResult, as_list, form_errors, money_field, validate_items


class JournalLineForm(forms.Form):
    account_code = forms.CharField(max_length=20)
    account_name = forms.CharField(max_length=100, required=False)
    description = forms.CharField(max_length=200, required=False)
    debit_amount = money_field(required=False)
    credit_amount = money_field(required=False)
    party_id = forms.IntegerField(min_value=1, required=False)

    # missing amounts mean 0
    def clean_debit_amount(self):
        return self.cleaned_data.get("debit_amount") or Decimal("0")

    def clean_credit_amount(self):
        return self.cleaned_data.get("credit_amount") or Decimal("0")


class JournalEntryForm(forms.Form):
    date = forms.DateField()
    description = forms.CharField(min_length=3, max_length=500)
    reference_number = forms.CharField(max_length=50, required=False)
    reference_type = forms.ChoiceField(choices=REFERENCE_TYPES, required=False)
    status = forms.ChoiceField(choices=JOURNAL_STATUS, required=False)
    notes = forms.CharField(max_length=1000, required=False)

    def clean_reference_type(self):
        return self.cleaned_data.get("reference_type") or "manual"

    def clean_status(self):
        return self.cleaned_data.get("status") or "draft"


def validate_journal_entry(data):
    """
    Header fields, every line, then the double-entry rules.
    No database access: account codes are resolved when persisting.
    """
    form = JournalEntryForm(data)
    errors = form_errors(form)
    cleaned = dict(form.cleaned_data) if form.is_valid() else {}

    entries = as_list(data, "entries")
    if entries is None:
        errors["entries"] = ["Journal entry lines are required"]
        return ValidationResult(cleaned, errors)

    lines, line_errors = validate_items(JournalLineForm, entries, "entries")
    errors.update(line_errors)
    if not line_errors:
        problems = balance_errors(lines)
        if problems:
            errors["entries"] = problems
        cleaned["totals"] = compute_totals(lines).as_dict()
    cleaned["entries"] = lines
    return ValidationResult(cleaned, errors)
