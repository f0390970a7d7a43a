import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from ..forms import validate_journal_entry
from ..models import Account, JournalEntry, JournalLine, PartyLedger
from .audit_helper import log_action

logger = logging.getLogger(__name__)


# ----------------------------
# Journal-related workflows
# ----------------------------
def _resolve_lines(lines):
    """Turn validated line dicts into (account, party) pairs or field errors."""
    codes = {line["account_code"] for line in lines}
    accounts = {a.code: a for a in Account.objects.filter(code__in=codes)}
    party_ids = {line["party_id"] for line in lines if line.get("party_id")}
    parties = {p.pk: p for p in PartyLedger.objects.filter(pk__in=party_ids)}

    errors = {}
    resolved = []
    for index, line in enumerate(lines):
        account = accounts.get(line["account_code"])
        if account is None:
            errors[f"entries[{index}].account_code"] = [
                f"Account '{line['account_code']}' not found"
            ]
        elif not account.is_active:
            errors[f"entries[{index}].account_code"] = [
                f"Account '{account.code}' is inactive"
            ]
        party = None
        if line.get("party_id"):
            party = parties.get(line["party_id"])
            if party is None:
                errors[f"entries[{index}].party_id"] = [
                    f"Party ledger '{line['party_id']}' not found"
                ]
        resolved.append((account, party, line))
    if errors:
        raise ValidationError(errors)
    return resolved


def _write_lines(entry, resolved):
    for account, party, line in resolved:
        JournalLine.objects.create(
            journal=entry,
            account=account,
            party=party,
            description=line.get("description") or "",
            debit_amount=line["debit_amount"],
            credit_amount=line["credit_amount"],
        )


def create_journal_entry(data, user=None):
    """
    Validate, persist as draft and, when submitted with status=posted,
    post in the same transaction (posting re-runs the balance check).
    """
    result = validate_journal_entry(data)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data

    with transaction.atomic():
        resolved = _resolve_lines(cleaned["entries"])
        entry = JournalEntry.objects.create(
            date=cleaned["date"],
            description=cleaned["description"],
            reference_number=cleaned.get("reference_number") or "",
            reference_type=cleaned["reference_type"],
            notes=cleaned.get("notes") or "",
            created_by=user,
        )
        _write_lines(entry, resolved)
        log_action(action="create", instance=entry, user=user)
        if cleaned["status"] == "posted":
            entry.transition_to("posted", user=user)

    logger.info("Created journal %s [%s]", entry.entry_number, entry.status)
    return entry


def update_journal_entry(entry, data, user=None):
    """Replace header & lines of a draft entry."""
    if entry.status == "posted":
        raise ValidationError("Cannot modify a posted journal entry")

    result = validate_journal_entry(data)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data

    with transaction.atomic():
        entry = JournalEntry.objects.select_for_update().get(pk=entry.pk)
        resolved = _resolve_lines(cleaned["entries"])
        entry.date = cleaned["date"]
        entry.description = cleaned["description"]
        entry.reference_number = cleaned.get("reference_number") or ""
        entry.reference_type = cleaned["reference_type"]
        entry.notes = cleaned.get("notes") or ""
        entry.save()
        entry.lines.all().delete()
        _write_lines(entry, resolved)
        log_action(action="update", instance=entry, user=user)
        if cleaned["status"] == "posted":
            entry.transition_to("posted", user=user)
    return entry


def delete_journal_entry(entry, user=None):
    if entry.status == "posted":
        raise ValidationError("Cannot delete a posted journal entry")
    with transaction.atomic():
        log_action(
            action="delete",
            instance=entry,
            user=user,
            changes={"entry_number": entry.entry_number},
        )
        entry.delete()


def post_journal_entry(journal_entry_id, user=None):
    """
    Wraps pure business logic with transaction management + orchestration
    """
    with transaction.atomic():
        # Lock the row to avoid race conditions
        je = JournalEntry.objects.select_for_update().get(pk=journal_entry_id)
        if je.status == "posted":
            # idempotent re-post (raises if the payload changed underneath)
            return je.post(user=user)
        je.transition_to("posted", user=user)
    return je


def reverse_journal_entry(journal_entry_id, user=None, date=None, description=None):
    with transaction.atomic():
        je = JournalEntry.objects.select_for_update().get(pk=journal_entry_id)
        reversal = je.reverse(user=user, date=date, description=description)
        log_action(
            action="reverse",
            instance=je,
            user=user,
            changes={"reversal": reversal.entry_number},
        )
    return reversal


def post_generated_journal(*, date, description, lines, user=None,
                           source_type="", source_id=None, reference_type="invoice",
                           reference_number=""):
    """
    Create & post a journal built by code (purchases, sales, payments).
    lines: dicts with account, party, description, debit_amount, credit_amount.
    Zero-amount lines are skipped.
    """
    entry = JournalEntry.objects.create(
        date=date,
        description=description,
        reference_number=reference_number,
        reference_type=reference_type,
        created_by=user,
        source_type=source_type,
        source_id=source_id,
    )
    for line in lines:
        if not (line.get("debit_amount") or line.get("credit_amount")):
            continue
        JournalLine.objects.create(journal=entry, **line)
    entry.post(user=user)
    return entry
