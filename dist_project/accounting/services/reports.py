"""
Report generators: trial balance, balance sheet, VAT summary.

The build_* functions are pure arithmetic over already fetched balances /
documents; the thin wrappers below them fetch from the database.
"""
import calendar
import logging
from datetime import date as date_cls
from decimal import ROUND_HALF_UP, Decimal
from django.db.models import Count, Sum
from django.utils import timezone
from ..constants import BALANCE_TOLERANCE, ZERO
from ..models import PurchaseEntry, PurchaseReturn, SalesEntry, SalesReturn
from .ledger import account_balances

logger = logging.getLogger(__name__)

RATIO_PLACES = Decimal("0.0001")


def _money(value):
    return f"{value:.2f}"


# ---------- Trial balance ----------
def build_trial_balance(balances, as_of=None):
    """
    One row per account with its balance on the debit or credit column.
    An unbalanced result means bad data upstream: it is reported through
    `warnings`, never raised.
    """
    rows = []
    total_debits = ZERO
    total_credits = ZERO
    for item in balances:
        total_debits += item.debit_side
        total_credits += item.credit_side
        rows.append(
            {
                "account_code": item.code,
                "account_name": item.name,
                "account_type": item.account_type,
                "debit_balance": _money(item.debit_side),
                "credit_balance": _money(item.credit_side),
            }
        )

    difference = abs(total_debits - total_credits)
    is_balanced = difference <= BALANCE_TOLERANCE
    warnings = []
    if not is_balanced:
        warnings.append(
            f"Trial balance does not balance: debits {total_debits:.2f} vs "
            f"credits {total_credits:.2f} (difference {difference:.2f}). "
            "Check opening balances and posted journals."
        )
        logger.warning("Unbalanced trial balance as of %s: difference %s", as_of, difference)

    return {
        "as_of_date": as_of.isoformat() if as_of else None,
        "accounts": rows,
        "totals": {
            "total_debits": _money(total_debits),
            "total_credits": _money(total_credits),
            "difference": _money(difference),
            "is_balanced": is_balanced,
        },
        "warnings": warnings,
    }


def trial_balance(as_of=None, include_zero=False):
    as_of = as_of or timezone.localdate()
    balances = account_balances(as_of)
    if not include_zero:
        balances = [b for b in balances if b.balance != ZERO]
    return build_trial_balance(balances, as_of)


# ---------- Balance sheet ----------
def safe_ratio(numerator, denominator):
    """numerator / denominator, or None when the denominator is zero."""
    if not denominator:
        return None
    return (Decimal(numerator) / Decimal(denominator)).quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)


def _ratio_str(value):
    return None if value is None else str(value)


def _section(items):
    total = sum((item.balance for item in items), ZERO)
    return {
        "accounts": [
            {"account_code": i.code, "account_name": i.name, "amount": _money(i.balance)}
            for i in items
        ],
        "total": total,
    }


def build_balance_sheet(balances, as_of=None):
    """
    Partition balances by account type and derive the usual ratios.
    Balances are taken on each account's normal side, so contra balances
    show up as negative amounts inside their section.
    """
    by_type = {}
    for item in balances:
        by_type.setdefault(item.account_type, []).append(item)

    assets = by_type.get("asset", [])
    liabilities = by_type.get("liability", [])

    current_assets = _section([a for a in assets if a.sub_type in ("current", "inventory")])
    inventory = sum((a.balance for a in assets if a.sub_type == "inventory"), ZERO)
    fixed_assets = _section([a for a in assets if a.sub_type == "long_term"])
    current_liabilities = _section([item for item in liabilities if item.sub_type != "long_term"])
    long_term_liabilities = _section([item for item in liabilities if item.sub_type == "long_term"])
    equity = _section(by_type.get("equity", []))

    revenue = sum((item.balance for item in by_type.get("revenue", [])), ZERO)
    expenses = sum((item.balance for item in by_type.get("expense", [])), ZERO)
    net_income = revenue - expenses

    total_assets = current_assets["total"] + fixed_assets["total"]
    total_liabilities = current_liabilities["total"] + long_term_liabilities["total"]
    # current earnings are not closed into equity yet → show them there
    total_equity = equity["total"] + net_income
    difference = total_assets - (total_liabilities + total_equity)

    ratios = {
        "current_ratio": safe_ratio(current_assets["total"], current_liabilities["total"]),
        "quick_ratio": safe_ratio(current_assets["total"] - inventory, current_liabilities["total"]),
        "debt_to_equity": safe_ratio(total_liabilities, total_equity),
        "return_on_assets": safe_ratio(net_income, total_assets),
        "return_on_equity": safe_ratio(net_income, total_equity),
    }

    def _out(section):
        return {"accounts": section["accounts"], "total": _money(section["total"])}

    return {
        "as_of_date": as_of.isoformat() if as_of else None,
        "assets": {
            "current_assets": _out(current_assets),
            "fixed_assets": _out(fixed_assets),
            "total_assets": _money(total_assets),
        },
        "liabilities": {
            "current_liabilities": _out(current_liabilities),
            "long_term_liabilities": _out(long_term_liabilities),
            "total_liabilities": _money(total_liabilities),
        },
        "equity": {
            "accounts": equity["accounts"],
            "current_earnings": _money(net_income),
            "total_equity": _money(total_equity),
        },
        "total_liabilities_and_equity": _money(total_liabilities + total_equity),
        "is_balanced": abs(difference) <= BALANCE_TOLERANCE,
        "working_capital": _money(current_assets["total"] - current_liabilities["total"]),
        "ratios": {name: _ratio_str(value) for name, value in ratios.items()},
    }


def balance_sheet(as_of=None):
    as_of = as_of or timezone.localdate()
    return build_balance_sheet(account_balances(as_of), as_of)


# ---------- VAT summary ----------
def quarter_bounds(year, quarter):
    """First and last day of a calendar quarter (1-4)."""
    if quarter not in (1, 2, 3, 4):
        raise ValueError("Quarter must be between 1 and 4")
    first_month = 3 * (quarter - 1) + 1
    last_month = first_month + 2
    return (
        date_cls(year, first_month, 1),
        date_cls(year, last_month, calendar.monthrange(year, last_month)[1]),
    )


NO_RETURNS = {"taxable": None, "vat": None, "count": 0}


def build_vat_summary(purchase_totals, sales_totals, from_date, to_date, quarter=None, year=None,
                      purchase_return_totals=NO_RETURNS, sales_return_totals=NO_RETURNS):
    """
    *_totals: dicts with taxable, vat, count.
    Returns reduce their side: input VAT = purchases − purchase returns,
    output VAT = sales − sales returns.
    net = output VAT − input VAT; > 0 is payable.
    """
    purchase_returns_vat = purchase_return_totals["vat"] or ZERO
    sales_returns_vat = sales_return_totals["vat"] or ZERO
    input_vat = (purchase_totals["vat"] or ZERO) - purchase_returns_vat
    output_vat = (sales_totals["vat"] or ZERO) - sales_returns_vat
    taxable_purchases = (purchase_totals["taxable"] or ZERO) - (purchase_return_totals["taxable"] or ZERO)
    taxable_sales = (sales_totals["taxable"] or ZERO) - (sales_return_totals["taxable"] or ZERO)

    net_vat = output_vat - input_vat
    if net_vat > 0:
        position = "payable"
    elif net_vat < 0:
        position = "refundable"
    else:
        position = "nil"

    return {
        "quarter": quarter,
        "year": year,
        "from_date": from_date.isoformat(),
        "to_date": to_date.isoformat(),
        "taxable_purchases": _money(taxable_purchases),
        "input_vat": _money(input_vat),
        "purchase_count": purchase_totals["count"],
        "purchase_returns_vat": _money(purchase_returns_vat),
        "purchase_return_count": purchase_return_totals["count"],
        "taxable_sales": _money(taxable_sales),
        "output_vat": _money(output_vat),
        "sales_count": sales_totals["count"],
        "sales_returns_vat": _money(sales_returns_vat),
        "sales_return_count": sales_return_totals["count"],
        "net_vat": _money(abs(net_vat)),
        "position": position,
    }


def _document_totals(queryset, from_date, to_date):
    return queryset.in_period(from_date, to_date).aggregate(
        taxable=Sum("taxable_amount"), vat=Sum("vat_amount"), count=Count("id")
    )


def vat_summary(year, quarter, from_date=None, to_date=None):
    """VAT for a quarter, optionally narrowed to a from/to window inside it."""
    start, end = quarter_bounds(year, quarter)
    from_date = max(start, from_date) if from_date else start
    to_date = min(end, to_date) if to_date else end
    return build_vat_summary(
        _document_totals(PurchaseEntry.objects.all(), from_date, to_date),
        _document_totals(SalesEntry.objects.all(), from_date, to_date),
        from_date,
        to_date,
        quarter=quarter,
        year=year,
        # only processed returns are in the books
        purchase_return_totals=_document_totals(
            PurchaseReturn.objects.filter(status="processed"), from_date, to_date
        ),
        sales_return_totals=_document_totals(
            SalesReturn.objects.filter(status="processed"), from_date, to_date
        ),
    )


# ---------- Purchase / sales register ----------
REGISTERS = {
    "purchase": (PurchaseEntry, "bill_number", "supplier_name"),
    "sales": (SalesEntry, "invoice_number", "customer_name"),
    "purchase_return": (PurchaseReturn, "return_number", "supplier_name"),
    "sales_return": (SalesReturn, "return_number", "customer_name"),
}


def document_register(report_type, from_date, to_date):
    """Documents of one kind in a window, with column totals."""
    model, number_field, party_field = REGISTERS[report_type]
    documents = model.objects.in_period(from_date, to_date).order_by("date", "id")
    totals = documents.aggregate(
        taxable=Sum("taxable_amount"), vat=Sum("vat_amount"), total=Sum("total_amount")
    )
    rows = [
        {
            "date": doc.date.isoformat(),
            "number": getattr(doc, number_field),
            "party_name": getattr(doc, party_field),
            "taxable_amount": _money(doc.taxable_amount),
            "vat_amount": _money(doc.vat_amount),
            "total_amount": _money(doc.total_amount),
            "status": doc.status,
        }
        for doc in documents
    ]
    return {
        "report_type": report_type,
        "from_date": from_date.isoformat(),
        "to_date": to_date.isoformat(),
        "rows": rows,
        "totals": {
            "taxable_amount": _money(totals["taxable"] or ZERO),
            "vat_amount": _money(totals["vat"] or ZERO),
            "total_amount": _money(totals["total"] or ZERO),
            "count": len(rows),
        },
    }
