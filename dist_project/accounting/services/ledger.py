"""
Ledger / account balance aggregator.

Balances are always computed from posted journal lines dated on or before
the cutoff; drafts never count. Unknown identifiers raise a NotFoundError
subclass instead of reporting a zero balance.
"""
import logging
from dataclasses import dataclass
from datetime import date as date_cls
from decimal import Decimal
from django.db.models import Sum
from django.utils import timezone
from ..constants import AGING_BUCKETS, ZERO
from ..exceptions import AccountNotFound, PartyNotFound
from ..models import Account, JournalLine, PartyLedger, PurchaseEntry, SalesEntry

logger = logging.getLogger(__name__)

OPPOSITE_SIDE = {"debit": "credit", "credit": "debit"}


@dataclass(frozen=True)
class LedgerBalance:
    """Balance of one account or party as of a date.

    `balance` is signed in the direction of `normal_balance`: positive means
    the balance sits on the normal side, negative means it flipped.
    """

    code: str
    name: str
    normal_balance: str
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal
    balance_type: str
    as_of: date_cls | None = None
    account_type: str = ""
    sub_type: str = ""

    @property
    def amount(self):
        return abs(self.balance)

    @property
    def debit_side(self):
        return self.amount if self.balance_type == "debit" else ZERO

    @property
    def credit_side(self):
        return self.amount if self.balance_type == "credit" else ZERO

    def as_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "account_type": self.account_type,
            "normal_balance": self.normal_balance,
            "opening_balance": f"{self.opening_balance:.2f}",
            "total_debit": f"{self.total_debit:.2f}",
            "total_credit": f"{self.total_credit:.2f}",
            "balance": f"{self.amount:.2f}",
            "balance_type": self.balance_type,
            "as_of": self.as_of.isoformat() if self.as_of else None,
        }


def signed_movement(normal_balance, debit, credit):
    """A debit raises a debit-normal balance, a credit lowers it (and vice versa)."""
    if normal_balance == "debit":
        return debit - credit
    return credit - debit


def balance_from_totals(normal_balance, opening, debit, credit):
    """Return (signed balance, balance_type) for the given totals."""
    balance = opening + signed_movement(normal_balance, debit, credit)
    balance_type = normal_balance if balance >= 0 else OPPOSITE_SIDE[normal_balance]
    return balance, balance_type


def _account_balance(account, debit, credit, as_of):
    balance, balance_type = balance_from_totals(
        account.normal_balance, account.opening_balance, debit, credit
    )
    return LedgerBalance(
        code=account.code,
        name=account.name,
        normal_balance=account.normal_balance,
        opening_balance=account.opening_balance,
        total_debit=debit,
        total_credit=credit,
        balance=balance,
        balance_type=balance_type,
        as_of=as_of,
        account_type=account.ac_type,
        sub_type=account.sub_type,
    )


def get_account(code):
    try:
        return Account.objects.get(code=code)
    except Account.DoesNotExist:
        raise AccountNotFound(code)


def get_party(party_id):
    try:
        return PartyLedger.objects.get(pk=party_id)
    except (PartyLedger.DoesNotExist, ValueError, TypeError):
        raise PartyNotFound(party_id)


def get_account_balance(code, as_of=None):
    """Balance of the account `code` from posted lines dated <= as_of."""
    account = get_account(code)
    debit, credit = JournalLine.objects.filter(account=account).posted(as_of).totals()
    return _account_balance(account, debit, credit, as_of)


def get_party_balance(party_id, as_of=None):
    """Party balance, debit positive: opening ± posted movements tagged with the party."""
    party = get_party(party_id)
    debit, credit = JournalLine.objects.filter(party=party).posted(as_of).totals()
    balance, balance_type = balance_from_totals(
        "debit", party.signed_opening_balance, debit, credit
    )
    return LedgerBalance(
        code=str(party.pk),
        name=party.party_name,
        normal_balance="debit",
        opening_balance=party.signed_opening_balance,
        total_debit=debit,
        total_credit=credit,
        balance=balance,
        balance_type=balance_type,
        as_of=as_of,
        account_type=party.party_type,
    )


def account_balances(as_of=None, include_inactive=False):
    """Balances of every (active) account in one grouped query, ordered by code."""
    accounts = Account.objects.all() if include_inactive else Account.objects.active()
    sums = {
        row["account_id"]: (row["debit"] or ZERO, row["credit"] or ZERO)
        for row in JournalLine.objects.posted(as_of)
        .values("account_id")
        .annotate(debit=Sum("debit_amount"), credit=Sum("credit_amount"))
    }
    return [
        _account_balance(account, *sums.get(account.pk, (ZERO, ZERO)), as_of)
        for account in accounts.order_by("code")
    ]


def _running_rows(lines, normal_balance, opening):
    running = opening
    rows = []
    for line in lines:
        running += signed_movement(normal_balance, line.debit_amount, line.credit_amount)
        rows.append(
            {
                "date": line.journal.date.isoformat(),
                "entry_number": line.journal.entry_number,
                "journal_id": line.journal_id,
                "description": line.description or line.journal.description,
                "debit_amount": f"{line.debit_amount:.2f}",
                "credit_amount": f"{line.credit_amount:.2f}",
                "balance": f"{abs(running):.2f}",
                "balance_type": normal_balance if running >= 0 else OPPOSITE_SIDE[normal_balance],
            }
        )
    return rows, running


def _ledger(lines, normal_balance, opening, from_date, to_date):
    # balance brought forward = everything before from_date
    if from_date:
        before = lines.posted().filter(journal__date__lt=from_date)
        debit, credit = before.totals()
        opening = opening + signed_movement(normal_balance, debit, credit)
        lines = lines.filter(journal__date__gte=from_date)

    period_lines = (
        lines.posted(to_date)
        .select_related("journal")
        .order_by("journal__date", "journal_id", "id")
    )
    rows, closing = _running_rows(period_lines, normal_balance, opening)
    return {
        "opening_balance": f"{abs(opening):.2f}",
        "opening_balance_type": normal_balance if opening >= 0 else OPPOSITE_SIDE[normal_balance],
        "rows": rows,
        "closing_balance": f"{abs(closing):.2f}",
        "closing_balance_type": normal_balance if closing >= 0 else OPPOSITE_SIDE[normal_balance],
    }


def get_account_ledger(code, from_date=None, to_date=None):
    """Posted movements of an account with a running balance, oldest first."""
    account = get_account(code)
    ledger = _ledger(
        JournalLine.objects.filter(account=account),
        account.normal_balance,
        account.opening_balance,
        from_date,
        to_date,
    )
    ledger["account"] = {
        "code": account.code,
        "name": account.name,
        "type": account.ac_type,
        "normal_balance": account.normal_balance,
    }
    return ledger


def get_party_ledger(party_id, from_date=None, to_date=None):
    party = get_party(party_id)
    ledger = _ledger(
        JournalLine.objects.filter(party=party),
        "debit",
        party.signed_opening_balance,
        from_date,
        to_date,
    )
    ledger["party"] = {
        "id": party.pk,
        "party_name": party.party_name,
        "party_type": party.party_type,
    }
    return ledger


def refresh_party_balance(party):
    """Recompute the stored current_balance of a party from the ledger."""
    result = get_party_balance(party.pk)
    if party.current_balance != result.balance:
        party.current_balance = result.balance
        party.save(update_fields=["current_balance", "updated_at"])
    return party


def debtors_and_creditors(party_type=None):
    """Split active parties by the sign of their balance."""
    parties = PartyLedger.objects.active()
    if party_type:
        parties = parties.filter(party_type=party_type)

    debtors = parties.filter(current_balance__gt=0).order_by("-current_balance")
    creditors = parties.filter(current_balance__lt=0).order_by("current_balance")

    def _rows(qs):
        return [
            {
                "id": party.pk,
                "party_name": party.party_name,
                "party_type": party.party_type,
                "balance": f"{abs(party.current_balance):.2f}",
            }
            for party in qs
        ]

    total_debtors = debtors.aggregate(total=Sum("current_balance"))["total"] or ZERO
    total_creditors = creditors.aggregate(total=Sum("current_balance"))["total"] or ZERO
    return {
        "debtors": _rows(debtors),
        "creditors": _rows(creditors),
        "totals": {
            "total_debtors": f"{total_debtors:.2f}",
            "total_creditors": f"{abs(total_creditors):.2f}",
            "net_position": f"{total_debtors + total_creditors:.2f}",
        },
    }


def aging_bucket(age_in_days):
    for name, low, high in AGING_BUCKETS:
        if age_in_days >= low and (high is None or age_in_days <= high):
            return name
    # documents dated in the future count as current
    return AGING_BUCKETS[0][0]


def aging_analysis(party_type=None, today=None):
    """Outstanding purchase & sales documents per party, bucketed by age."""
    today = today or timezone.localdate()
    documents = []
    if party_type in (None, "", "supplier"):
        documents += [
            (doc.supplier, doc) for doc in PurchaseEntry.objects.outstanding().select_related("supplier")
        ]
    if party_type in (None, "", "customer"):
        documents += [
            (doc.customer, doc) for doc in SalesEntry.objects.outstanding().select_related("customer")
        ]

    empty = {name: ZERO for name, _, _ in AGING_BUCKETS}
    parties = {}
    totals = dict(empty)
    for party, doc in documents:
        entry = parties.setdefault(
            party.pk,
            {
                "id": party.pk,
                "party_name": party.party_name,
                "party_type": party.party_type,
                "aging": dict(empty),
                "total_outstanding": ZERO,
            },
        )
        bucket = aging_bucket((today - doc.date).days)
        entry["aging"][bucket] += doc.total_amount
        entry["total_outstanding"] += doc.total_amount
        totals[bucket] += doc.total_amount

    def _fmt(values):
        return {k: f"{v:.2f}" for k, v in values.items()}

    rows = [
        dict(p, aging=_fmt(p["aging"]), total_outstanding=f"{p['total_outstanding']:.2f}")
        for p in sorted(parties.values(), key=lambda p: p["party_name"])
    ]
    return {
        "parties": rows,
        "totals": _fmt(totals),
        "summary": {
            "total_parties": len(rows),
            "total_outstanding": f"{sum(totals.values(), ZERO):.2f}",
        },
    }
