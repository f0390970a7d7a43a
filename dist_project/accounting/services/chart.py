"""Chart of accounts & party ledger maintenance."""
import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from ..forms import validate_account, validate_party
from ..models import Account, PartyLedger
from .audit_helper import log_action
from .ledger import refresh_party_balance

logger = logging.getLogger(__name__)


def _validated(validator, data):
    result = validator(data)
    if not result.is_valid:
        raise ValidationError(result.errors)
    return result.data


def _parent(code):
    if not code:
        return None
    parent = Account.objects.filter(code=code).first()
    if parent is None:
        raise ValidationError({"parent_code": [f"Parent account '{code}' not found"]})
    return parent


# ---------- Accounts ----------
def create_account(data, user=None):
    cleaned = _validated(validate_account, data)
    if Account.objects.filter(code=cleaned["code"]).exists():
        raise ValidationError({"code": ["Account code already exists"]})

    with transaction.atomic():
        account = Account.objects.create(
            code=cleaned["code"],
            name=cleaned["name"],
            ac_type=cleaned["type"],
            normal_balance=cleaned["normal_balance"],
            sub_type=cleaned["sub_type"],
            parent=_parent(cleaned.get("parent_code")),
            description=cleaned.get("description") or "",
            opening_balance=cleaned.get("opening_balance") or 0,
            is_active=cleaned["is_active"],
        )
        log_action(action="create", instance=account, user=user)
    logger.info("Created account %s", account.code)
    return account


def update_account(account, data, user=None):
    """Edit an account. Code and type are frozen once journals use the account."""
    cleaned = _validated(validate_account, data)
    used = account.has_transactions()

    if cleaned["code"] != account.code:
        if used:
            raise ValidationError({"code": ["Cannot change the code of an account with transactions"]})
        if Account.objects.filter(code=cleaned["code"]).exclude(pk=account.pk).exists():
            raise ValidationError({"code": ["Account code already exists"]})
    if cleaned["type"] != account.ac_type and used:
        raise ValidationError({"type": ["Cannot change the type of an account with transactions"]})

    before = {"code": account.code, "name": account.name, "type": account.ac_type}
    with transaction.atomic():
        account.code = cleaned["code"]
        account.name = cleaned["name"]
        account.ac_type = cleaned["type"]
        account.normal_balance = cleaned["normal_balance"]
        account.sub_type = cleaned["sub_type"]
        account.parent = _parent(cleaned.get("parent_code"))
        account.description = cleaned.get("description") or ""
        account.opening_balance = cleaned.get("opening_balance") or 0
        account.is_active = cleaned["is_active"]
        account.save()
        log_action(action="update", instance=account, user=user, changes={"before": before})
    return account


def delete_account(account, user=None):
    # Account.delete refuses accounts that carry transactions
    with transaction.atomic():
        log_action(action="delete", instance=account, user=user,
                   changes={"code": account.code})
        account.delete()


def chart_of_accounts():
    """Active accounts nested under their parents, grouped by type."""
    accounts = list(Account.objects.active().order_by("code"))
    nodes = {
        a.pk: {
            "code": a.code,
            "name": a.name,
            "type": a.ac_type,
            "normal_balance": a.normal_balance,
            "children": [],
        }
        for a in accounts
    }
    grouped = {}
    for account in accounts:
        node = nodes[account.pk]
        if account.parent_id in nodes:
            nodes[account.parent_id]["children"].append(node)
        else:
            grouped.setdefault(account.ac_type, []).append(node)
    return grouped


# ---------- Party ledgers ----------
def _party_fields(cleaned):
    return {
        "party_name": cleaned["party_name"],
        "party_type": cleaned["party_type"],
        "contact_number": cleaned.get("contact_number") or "",
        "email": cleaned.get("email") or "",
        "address": cleaned.get("address") or "",
        "pan_number": cleaned.get("pan_number") or "",
        "opening_balance": cleaned["opening_balance"],
        "opening_balance_type": cleaned["opening_balance_type"],
        "credit_limit": cleaned.get("credit_limit"),
    }


def _ensure_unique_party(cleaned, exclude_pk=None):
    qs = PartyLedger.objects.filter(
        party_name=cleaned["party_name"], party_type=cleaned["party_type"]
    )
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError(
            {"party_name": ["Party with this name and type already exists"]}
        )


def create_party(data, user=None):
    cleaned = _validated(validate_party, data)
    _ensure_unique_party(cleaned)
    with transaction.atomic():
        party = PartyLedger.objects.create(**_party_fields(cleaned))
        log_action(action="create", instance=party, user=user)
    logger.info("Created party ledger %s (%s)", party.party_name, party.party_type)
    return party


def update_party(party, data, user=None):
    cleaned = _validated(validate_party, data)
    _ensure_unique_party(cleaned, exclude_pk=party.pk)
    with transaction.atomic():
        for name, value in _party_fields(cleaned).items():
            setattr(party, name, value)
        party.save()
        # opening balance may have changed
        refresh_party_balance(party)
        log_action(action="update", instance=party, user=user)
    return party


def delete_party(party, user=None):
    with transaction.atomic():
        log_action(action="delete", instance=party, user=user,
                   changes={"party_name": party.party_name})
        party.delete()
