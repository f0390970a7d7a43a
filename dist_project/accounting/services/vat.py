from decimal import ROUND_HALF_UP, InvalidOperation
from django.core.exceptions import ValidationError
from ..constants import BALANCE_TOLERANCE, CENTS, VAT_RATE
from .balance import to_decimal


def expected_vat(taxable_amount):
    """VAT due on a taxable amount, rounded to paisa."""
    try:
        return (to_decimal(taxable_amount) * VAT_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError({"taxable_amount": [f"Amount out of range: {taxable_amount}"]})


def vat_rate_label():
    return f"{VAT_RATE * 100:.0f}%"


def vat_amount_errors(taxable_amount, vat_amount, total_amount):
    """
    Cross-field checks shared by purchase and sales documents:
      vat   == taxable × VAT_RATE   (± BALANCE_TOLERANCE)
      total == taxable + vat        (± BALANCE_TOLERANCE)
    Returns {field: message}; empty when both hold.
    """
    errors = {}
    taxable = to_decimal(taxable_amount)
    vat = to_decimal(vat_amount)
    total = to_decimal(total_amount)

    vat_due = expected_vat(taxable)
    if abs(vat - vat_due) > BALANCE_TOLERANCE:
        errors["vat_amount"] = (
            f"VAT amount should be {vat_due:.2f} ({vat_rate_label()} of taxable amount), "
            f"but got {vat_amount}"
        )

    total_due = taxable + vat
    if abs(total - total_due) > BALANCE_TOLERANCE:
        errors["total_amount"] = (
            f"Total amount should be {total_due:.2f} (taxable + VAT), "
            f"but got {total_amount}"
        )
    return errors
