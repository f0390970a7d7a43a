from decimal import Decimal
from django import forms
from ..models.account import NORMAL_BALANCE
from ..models.party import PARTY_TYPES
from .base import ValidationResult, form_errors, money_field


class PartyLedgerForm(forms.Form):
    party_name = forms.CharField(min_length=2, max_length=100)
    party_type = forms.ChoiceField(choices=PARTY_TYPES)
    contact_number = forms.RegexField(
        regex=r"^[0-9+\-\s()]+$",
        max_length=30,
        required=False,
        error_messages={"invalid": "Please provide a valid contact number"},
    )
    email = forms.EmailField(required=False)
    address = forms.CharField(max_length=500, required=False)
    pan_number = forms.RegexField(
        regex=r"^[0-9]{9}$",
        required=False,
        error_messages={"invalid": "PAN number must be exactly 9 digits"},
    )
    opening_balance = money_field(required=False)
    opening_balance_type = forms.ChoiceField(choices=NORMAL_BALANCE, required=False)
    credit_limit = money_field(required=False)

    def clean_opening_balance(self):
        return self.cleaned_data.get("opening_balance") or Decimal("0")

    def clean_opening_balance_type(self):
        return self.cleaned_data.get("opening_balance_type") or "debit"


def validate_party(data):
    form = PartyLedgerForm(data)
    if form.is_valid():
        return ValidationResult(form.cleaned_data)
    return ValidationResult(errors=form_errors(form))
