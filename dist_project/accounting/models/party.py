from decimal import Decimal
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from ..managers import ActiveManager
from .account import NORMAL_BALANCE, Account

PARTY_TYPES = [
    ("customer", "Customer"),
    ("supplier", "Supplier"),
    ("bank", "Bank"),
    ("cash", "Cash"),
    ("other", "Other"),
]

contact_number_validator = RegexValidator(
    r"^[0-9+\-\s()]+$", "Please provide a valid contact number"
)
pan_number_validator = RegexValidator(
    r"^[0-9]{9}$", "PAN number must be exactly 9 digits"
)


# ---------- Party ledger (customers, suppliers, banks...) ----------
class PartyLedger(models.Model):
    """
    Sub-ledger for one counterparty.
    Balances are signed with debit positive:
      > 0 → the party owes us (debtor)
      < 0 → we owe the party (creditor)
    """

    party_name = models.CharField(max_length=100)
    party_type = models.CharField(max_length=10, choices=PARTY_TYPES)

    # Contact fields
    contact_number = models.CharField(
        max_length=30, blank=True, validators=[contact_number_validator]
    )
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=500, blank=True)
    pan_number = models.CharField(
        max_length=9, blank=True, validators=[pan_number_validator]
    )

    opening_balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    opening_balance_type = models.CharField(
        max_length=6, choices=NORMAL_BALANCE, default="debit"
    )
    # Derived: opening balance ± posted movements (see services.ledger)
    current_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    credit_limit = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    # Optional GL control account (Sundry Debtors / Sundry Creditors)
    control_account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.PROTECT,
        related_name="parties",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveManager()

    class Meta:
        ordering = ["party_name"]
        constraints = [
            # Same name may exist once as customer and once as supplier
            models.UniqueConstraint(
                fields=["party_name", "party_type"], name="uq_party_name_type"
            )
        ]

    def __str__(self):
        return f"{self.party_name} ({self.party_type})"

    @property
    def signed_opening_balance(self):
        if self.opening_balance_type == "credit":
            return -self.opening_balance
        return self.opening_balance

    @property
    def balance_type(self):
        return "debit" if self.current_balance >= 0 else "credit"

    def has_transactions(self):
        return (
            self.journal_lines.exists()
            or self.purchases.exists()
            or self.sales.exists()
        )

    def delete(self, *args, **kwargs):
        if self.has_transactions():
            raise ValidationError(
                "Cannot delete party ledger with existing transactions. "
                "Consider deactivating instead."
            )
        return super().delete(*args, **kwargs)

    def save(self, *args, **kwargs):
        if not self.pk:
            # a new party starts at its opening balance
            self.current_balance = self.signed_opening_balance
        self.full_clean()
        return super().save(*args, **kwargs)
