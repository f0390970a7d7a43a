from dataclasses import dataclass, field
from django import forms
from ..constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS


@dataclass
class ValidationResult:
    """Outcome of a validator: cleaned data or field-path → messages."""

    data: dict = field(default_factory=dict)
    errors: dict = field(default_factory=dict)

    @property
    def is_valid(self):
        return not self.errors


def form_errors(form, prefix=""):
    """Flatten Django's ErrorDict into {path: [messages]}."""
    errors = {}
    for name, messages in form.errors.items():
        if name == "__all__":
            key = prefix or "__all__"
        else:
            key = f"{prefix}.{name}" if prefix else name
        errors.setdefault(key, []).extend(str(m) for m in messages)
    return errors


def validate_items(form_class, items, prefix, **form_kwargs):
    """Validate each element of a nested list with its own form.

    Returns (cleaned_items, errors) with errors keyed like "items[0].amount".
    """
    cleaned = []
    errors = {}
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors[f"{prefix}[{index}]"] = ["Must be an object"]
            continue
        form = form_class(item, **form_kwargs)
        if form.is_valid():
            cleaned.append(form.cleaned_data)
        else:
            errors.update(form_errors(form, prefix=f"{prefix}[{index}]"))
    return cleaned, errors


def as_list(data, key):
    """The nested list under `key`, or None when it is missing / not a list."""
    value = data.get(key)
    return value if isinstance(value, list) else None


def money_field(**kwargs):
    """Non-negative amount with the same precision as the money columns."""
    kwargs.setdefault("min_value", 0)
    return forms.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, **kwargs
    )
