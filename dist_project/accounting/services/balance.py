"""
Double-entry balance checker.

Pure functions over an already assembled set of journal lines. A line is
anything exposing `debit_amount` / `credit_amount`, either as attributes
(JournalLine rows) or as mapping keys (cleaned form data).
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from django.core.exceptions import ValidationError
from ..constants import BALANCE_TOLERANCE, ZERO
from ..exceptions import JournalLineError, UnbalancedJournalError

MIN_LINES = 2


@dataclass(frozen=True)
class BalanceTotals:
    total_debit: Decimal
    total_credit: Decimal
    line_count: int

    @property
    def difference(self):
        return abs(self.total_debit - self.total_credit)

    @property
    def is_balanced(self):
        return self.difference <= BALANCE_TOLERANCE

    def as_dict(self):
        return {
            "total_debit": f"{self.total_debit:.2f}",
            "total_credit": f"{self.total_credit:.2f}",
            "difference": f"{self.difference:.2f}",
            "is_balanced": self.is_balanced,
        }


def to_decimal(value):
    """Coerce a JSON number/string/None into a Decimal (None → 0)."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats keep their printed value (0.1 → "0.1")
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value!r}")


def _amounts(line):
    if isinstance(line, dict):
        debit, credit = line.get("debit_amount"), line.get("credit_amount")
    else:
        debit, credit = line.debit_amount, line.credit_amount
    return to_decimal(debit), to_decimal(credit)


def compute_totals(lines):
    """Sum debits and credits of all lines."""
    total_debit = ZERO
    total_credit = ZERO
    count = 0
    for line in lines:
        debit, credit = _amounts(line)
        total_debit += debit
        total_credit += credit
        count += 1
    return BalanceTotals(total_debit, total_credit, count)


def line_error(index, debit, credit):
    """Message for a line that is not one-sided, else None. index is 1-based."""
    has_debit = debit > 0
    has_credit = credit > 0
    if has_debit and has_credit:
        return f"Journal line {index} cannot have both debit and credit amounts"
    if not has_debit and not has_credit:
        return f"Journal line {index} must have either a debit or a credit amount"
    return None


def check_balance(lines):
    """
    Enforce the double-entry rules on one journal entry:
      1. at least two lines
      2. each line is either a debit or a credit (1-based index reported)
      3. |Σ debit − Σ credit| <= BALANCE_TOLERANCE

    Returns the BalanceTotals, or raises JournalLineError /
    UnbalancedJournalError. Same input → same verdict & message.
    """
    lines = list(lines)
    if len(lines) < MIN_LINES:
        raise JournalLineError(
            f"Journal entry must have at least {MIN_LINES} lines"
        )

    for index, line in enumerate(lines, start=1):
        message = line_error(index, *_amounts(line))
        if message:
            raise JournalLineError(message, index=index)

    totals = compute_totals(lines)
    if not totals.is_balanced:
        raise UnbalancedJournalError(totals.total_debit, totals.total_credit)
    return totals


def balance_errors(lines):
    """Like check_balance() but collects every problem instead of stopping."""
    lines = list(lines)
    errors = []
    if len(lines) < MIN_LINES:
        errors.append(f"Journal entry must have at least {MIN_LINES} lines")

    for index, line in enumerate(lines, start=1):
        message = line_error(index, *_amounts(line))
        if message:
            errors.append(message)

    totals = compute_totals(lines)
    if lines and not totals.is_balanced:
        errors.append(str(UnbalancedJournalError(totals.total_debit, totals.total_credit)))
    return errors
