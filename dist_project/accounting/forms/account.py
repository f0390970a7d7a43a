from django import forms
from ..constants import NORMAL_BALANCE_FOR_TYPE
from ..models.account import AC_TYPES, NORMAL_BALANCE, SUB_TYPES
from .base import ValidationResult, form_errors, money_field


class AccountForm(forms.Form):
    code = forms.RegexField(
        regex=r"^[A-Z0-9-]+$",
        min_length=3,
        max_length=20,
        error_messages={
            "invalid": "Account code can only contain uppercase letters, numbers, and hyphens"
        },
    )
    name = forms.CharField(min_length=3, max_length=100)
    type = forms.ChoiceField(choices=AC_TYPES)
    normal_balance = forms.ChoiceField(choices=NORMAL_BALANCE)
    sub_type = forms.ChoiceField(choices=SUB_TYPES, required=False)
    parent_code = forms.CharField(max_length=20, required=False)
    description = forms.CharField(max_length=500, required=False)
    opening_balance = money_field(required=False)
    is_active = forms.NullBooleanField(required=False)

    def clean_sub_type(self):
        return self.cleaned_data.get("sub_type") or "current"

    def clean_is_active(self):
        value = self.cleaned_data.get("is_active")
        return True if value is None else value

    def clean(self):
        cleaned = super().clean()
        # normal balance is fixed by the account type
        ac_type = cleaned.get("type")
        normal_balance = cleaned.get("normal_balance")
        expected = NORMAL_BALANCE_FOR_TYPE.get(ac_type)
        if expected and normal_balance and normal_balance != expected:
            self.add_error(
                "normal_balance",
                f"{ac_type} accounts should have {expected} normal balance",
            )
        if cleaned.get("parent_code") and cleaned.get("parent_code") == cleaned.get("code"):
            self.add_error("parent_code", "An account cannot be its own parent")
        return cleaned


def validate_account(data):
    form = AccountForm(data)
    if form.is_valid():
        return ValidationResult(form.cleaned_data)
    return ValidationResult(errors=form_errors(form))
