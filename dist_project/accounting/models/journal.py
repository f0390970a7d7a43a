import hashlib
import json
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone
from ..constants import CENTS
from ..exceptions import AlreadyPostedDifferentPayload
from ..managers import JournalLineManager
from .account import Account
from .party import PartyLedger

logger = logging.getLogger(__name__)

JOURNAL_STATUS = [
    ("draft", "Draft"),  # still editable
    ("posted", "Posted"),  # finalized, feeds ledgers & reports
]

REFERENCE_TYPES = [
    ("invoice", "Invoice"),
    ("payment", "Payment"),
    ("adjustment", "Adjustment"),
    ("manual", "Manual"),
]


# ---------- Journal (Header) & JournalLine ----------
class JournalEntry(models.Model):  # Represents one accounting transaction
    # JE{year}{sequence}, assigned on first save
    entry_number = models.CharField(max_length=20, unique=True, blank=True, editable=False)
    date = models.DateField()
    description = models.CharField(max_length=500)
    reference_number = models.CharField(max_length=50, blank=True)
    reference_type = models.CharField(
        max_length=10, choices=REFERENCE_TYPES, default="manual"
    )
    notes = models.TextField(max_length=1000, blank=True)
    status = models.CharField(
        max_length=10, choices=JOURNAL_STATUS, default="draft"
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="journal_entries",
    )
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL,
        related_name="posted_journal_entries",
    )
    # optional source info (purchase, sale, payment...)
    # Helps trace back where the JE originated
    source_type = models.CharField(max_length=50, blank=True)
    source_id = models.BigIntegerField(null=True, blank=True)

    # A posted entry is corrected by a new entry pointing back at it
    reverses = models.OneToOneField(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="reversed_by",
    )

    # Fingerprint-based idempotency (safe to call twice if nothing has changed)
    posting_fingerprint = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        # Speed up listing & filtering
        # (e.g. show all posted entries this month)
        indexes = [
            models.Index(fields=["date"], name="je_date_idx"),
            models.Index(fields=["status", "date"], name="je_status_date_idx"),
        ]
        verbose_name_plural = "journal entries"

    def __str__(self):
        return f"{self.entry_number or self.pk} {self.date} [{self.status}]"

    @property
    def is_posted(self):
        return self.status == "posted"

    @classmethod
    def next_entry_number(cls, year):
        prefix = f"JE{year}"
        last = (
            cls.objects.filter(entry_number__startswith=prefix)
            .order_by("-entry_number")
            .values_list("entry_number", flat=True)
            .first()
        )
        sequence = int(last[len(prefix):]) + 1 if last else 1
        return f"{prefix}{sequence:06d}"

    # Aggregate all debit and credit amounts across entry's lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        return self.lines.all().totals()

    # True if double-entry rule holds (within tolerance)
    def is_balanced(self):
        from ..services.balance import compute_totals

        return compute_totals(self.lines.all()).is_balanced

    def _posting_payload(self):
        """Deterministic representation of what matters for posting.

        Same data → same JSON string, so a fingerprint of it tells
        whether this exact version has already been posted.
        """
        lines = [
            {
                "acct": line.account_id,
                "party": line.party_id,
                "debit": str(line.debit_amount),
                "credit": str(line.credit_amount),
            }
            # always in the same order (id ascending)
            for line in self.lines.order_by("id")
        ]
        payload = {
            "date": self.date.isoformat(),
            "lines": lines,
        }
        return json.dumps(payload, separators=(",", ":"), sort_keys=True)

    def _fingerprint(self):
        return hashlib.sha256(self._posting_payload().encode()).hexdigest()

    # Post the entry safely inside a database transaction
    @transaction.atomic
    def post(self, user=None):
        """
        Post a journal entry: re-check balance, freeze it,
        refresh party balances. Calling it again on an unchanged
        posted entry is a no-op.
        """
        from ..services.balance import check_balance
        from ..services.ledger import refresh_party_balance
        from ..services.audit_helper import log_action

        # Lock row + lines so nothing changes while posting
        je = JournalEntry.objects.select_for_update().get(pk=self.pk)
        lines = list(je.lines.select_for_update().select_related("account").order_by("id"))

        # Same rule set as on creation (raises JournalLineError / UnbalancedJournalError)
        check_balance(lines)

        fp = je._fingerprint()

        """ Idempotency & immutability """
        if je.status == "posted":
            if je.posting_fingerprint == fp:
                return je
            raise AlreadyPostedDifferentPayload(
                "Journal already posted with different payload."
            )

        # only the draft -> posted step needs live accounts
        inactive = [line.account.code for line in lines if not line.account.is_active]
        if inactive:
            raise ValidationError(
                f"Cannot post to inactive account(s): {', '.join(inactive)}"
            )

        je.status = "posted"
        je.posted_at = timezone.now()
        je.posted_by = user
        je.posting_fingerprint = fp
        je.save(update_fields=["status", "posted_at", "posted_by", "posting_fingerprint"])

        # keep stored party balances in step with the ledger
        for party_id in {line.party_id for line in lines if line.party_id}:
            refresh_party_balance(PartyLedger.objects.get(pk=party_id))

        log_action(action="post", instance=je, user=user)
        logger.info("Posted journal %s (%s lines)", je.entry_number, len(lines))

        # reflect the new state on the caller's instance too
        self.status = je.status
        self.posted_at = je.posted_at
        self.posted_by = je.posted_by
        self.posting_fingerprint = fp
        return je

    @transaction.atomic
    def reverse(self, user=None, date=None, description=None):
        """Correct a posted entry with a new posted entry that swaps every line."""
        if self.status != "posted":
            raise ValidationError("Only posted journal entries can be reversed.")
        if JournalEntry.objects.filter(reverses=self).exists():
            raise ValidationError(f"Journal {self.entry_number} has already been reversed.")

        reversal = JournalEntry.objects.create(
            date=date or timezone.localdate(),
            description=description or f"Reversal of {self.entry_number}",
            reference_number=self.entry_number,
            reference_type="adjustment",
            created_by=user,
            source_type="reversal",
            source_id=self.pk,
            reverses=self,
        )
        for line in self.lines.order_by("id"):
            JournalLine.objects.create(
                journal=reversal,
                account=line.account,
                party=line.party,
                description=line.description,
                debit_amount=line.credit_amount,
                credit_amount=line.debit_amount,
            )
        reversal.post(user=user)
        logger.info("Reversed journal %s with %s", self.entry_number, reversal.entry_number)
        return reversal

    def clean(self):
        """Don't modify posted journals"""
        if self.pk:
            orig = JournalEntry.objects.filter(pk=self.pk).first()
            if orig and orig.status == "posted":
                changed = [
                    f for f in ("date", "description", "reference_number", "notes")
                    if getattr(orig, f) != getattr(self, f)
                ]
                if changed:
                    raise ValidationError(
                        "Cannot modify a posted JournalEntry. It is immutable."
                    )

    def save(self, *args, **kwargs):
        if self.pk:  # Does this row already exist in DB?
            orig = JournalEntry.objects.filter(pk=self.pk).first()
            # disallow toggling posted flag
            if orig and orig.status == "posted" and self.status != "posted":
                raise ValidationError("Cannot unpost a posted journal")
        self.full_clean()  # also turns date strings into dates
        if not self.entry_number:
            self.entry_number = self.next_entry_number(self.date.year)
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status == "posted":
            raise ValidationError(
                "Cannot delete a posted journal entry. Reverse it instead."
            )
        return super().delete(*args, **kwargs)

    # Control status changes
    def transition_to(self, new_status, user=None):
        allowed = {
            "draft": ["posted"],
            "posted": [],  # one-way: corrections go through reverse()
        }
        if new_status not in allowed.get(self.status, []):
            raise ValidationError(f"Cannot go from {self.status} to {new_status}")

        if new_status == "posted":
            return self.post(user=user)


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    One debit-or-credit movement against one account.
    Optionally tagged with a party so it feeds that party's ledger.
    """

    journal = models.ForeignKey(
        JournalEntry, on_delete=models.CASCADE, related_name="lines"
    )
    # can't delete an account if lines exist → PROTECT
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="journal_lines"
    )
    party = models.ForeignKey(
        PartyLedger,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )
    description = models.CharField(max_length=200, blank=True)
    debit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    credit_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    objects = JournalLineManager()

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["account", "journal"], name="jl_account_journal_idx"),
            models.Index(fields=["party"], name="jl_party_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(debit_amount__gte=0) & models.Q(credit_amount__gte=0)
                ),
                name="jl_non_negative_amounts",
            ),
            # exactly one side carries the amount
            models.CheckConstraint(
                condition=(
                    (models.Q(debit_amount__gt=0) & models.Q(credit_amount=0))
                    | (models.Q(debit_amount=0) & models.Q(credit_amount__gt=0))
                ),
                name="jl_debit_xor_credit",
            ),
        ]

    def __str__(self):
        return (
            f"{self.journal_id} | {self.account.code} {self.account.name} | "
            f"D:{self.debit_amount or 0} C:{self.credit_amount or 0}"
        )

    @property
    def side(self):
        return "debit" if self.debit_amount > 0 else "credit"

    @property
    def amount(self):
        return self.debit_amount if self.debit_amount > 0 else self.credit_amount

    def clean(self):
        if self.debit_amount < 0 or self.credit_amount < 0:
            raise ValidationError("Debit and credit must be >= 0")
        if self.debit_amount > 0 and self.credit_amount > 0:
            raise ValidationError(
                "A journal line cannot have both debit and credit amounts"
            )
        if self.debit_amount == 0 and self.credit_amount == 0:
            raise ValidationError(
                "A journal line must have either a debit or a credit amount"
            )

        # Lines of a posted journal are frozen
        if self.journal_id:
            posted = JournalEntry.objects.filter(
                pk=self.journal_id, status="posted"
            ).exists()
            if posted:
                if self.pk:
                    orig = JournalLine.objects.get(pk=self.pk)
                    changed = (
                        orig.debit_amount != self.debit_amount
                        or orig.credit_amount != self.credit_amount
                        or orig.account_id != self.account_id
                        or orig.party_id != self.party_id
                    )
                    if changed:
                        raise ValidationError(
                            "Cannot modify JournalLine: parent JournalEntry is posted."
                        )
                else:
                    raise ValidationError(
                        "Cannot add JournalLine: parent journal is posted."
                    )

    def delete(self, *args, **kwargs):
        if JournalEntry.objects.filter(pk=self.journal_id, status="posted").exists():
            raise ValidationError(
                "Cannot delete JournalLine: parent JournalEntry is posted."
            )
        return super().delete(*args, **kwargs)

    def save(self, *args, **kwargs):
        # round to 2 decimal places before validating
        try:
            self.debit_amount = Decimal(str(self.debit_amount or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)
            self.credit_amount = Decimal(str(self.credit_amount or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValidationError("Journal line amount is out of range")
        self.full_clean()
        return super().save(*args, **kwargs)
