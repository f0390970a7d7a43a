from django import forms
from .base import ValidationResult, form_errors


class DateRangeForm(forms.Form):
    from_date = forms.DateField()
    to_date = forms.DateField()

    def __init__(self, *args, require_dates=True, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["from_date"].required = require_dates
        self.fields["to_date"].required = require_dates

    def clean(self):
        cleaned = super().clean()
        from_date, to_date = cleaned.get("from_date"), cleaned.get("to_date")
        if from_date and to_date and to_date < from_date:
            self.add_error("to_date", "To date must be after from date")
        return cleaned


class VatReportForm(DateRangeForm):
    quarter = forms.IntegerField(
        min_value=1,
        max_value=4,
        error_messages={
            "min_value": "Quarter must be between 1 and 4",
            "max_value": "Quarter must be between 1 and 4",
        },
    )
    year = forms.IntegerField(
        min_value=2000,
        max_value=2100,
        error_messages={
            "min_value": "Year must be 2000 or later",
            "max_value": "Year must be 2100 or earlier",
        },
    )

    def __init__(self, *args, **kwargs):
        # from/to only narrow the quarter
        kwargs.setdefault("require_dates", False)
        super().__init__(*args, **kwargs)


class AsOfDateForm(forms.Form):
    as_of_date = forms.DateField(required=False)
    include_zero = forms.BooleanField(required=False)


REPORT_TYPES = [
    ("purchase", "Purchase"),
    ("sales", "Sales"),
    ("purchase_return", "Purchase return"),
    ("sales_return", "Sales return"),
]


class DocumentRegisterForm(DateRangeForm):
    report_type = forms.ChoiceField(choices=REPORT_TYPES)


def validate_query(form_class, data, **kwargs):
    form = form_class(data, **kwargs)
    if form.is_valid():
        return ValidationResult(form.cleaned_data)
    return ValidationResult(errors=form_errors(form))
