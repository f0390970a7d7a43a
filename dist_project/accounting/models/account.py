from decimal import Decimal
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from ..constants import NORMAL_BALANCE_FOR_TYPE
from ..managers import ActiveManager

# Choice Lists
AC_TYPES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("revenue", "Revenue"),
    ("expense", "Expense"),
]

# Define whether the account normally increases
# on the debit side or credit side
NORMAL_BALANCE = [
    ("debit", "Debit"),
    ("credit", "Credit"),
]

# Balance sheet grouping for assets & liabilities
# (ignored for equity, revenue and expense accounts)
SUB_TYPES = [
    ("current", "Current"),
    ("inventory", "Inventory"),  # current, but excluded from quick ratio
    ("long_term", "Long-term / Fixed"),
]

account_code_validator = RegexValidator(
    r"^[A-Z0-9-]+$",
    "Account code can only contain uppercase letters, numbers, and hyphens",
)


class Account(models.Model):
    """
    Ledger account in the Chart of Accounts.
    - code is unique and is how journals and reports refer to an account
    - ac_type decides Balance Sheet vs P&L
    - normal_balance is fixed by ac_type and gives the sign of balances
    """

    code = models.CharField(
        max_length=20, unique=True, validators=[account_code_validator]
    )
    name = models.CharField(max_length=100)  # "Cash on Hand", "Sundry Creditors"

    ac_type = models.CharField(max_length=10, choices=AC_TYPES)

    # Assets/Expenses → Debit, Liabilities/Equity/Revenue → Credit.
    # Left blank → derived from ac_type on save
    normal_balance = models.CharField(
        max_length=6, choices=NORMAL_BALANCE, blank=True
    )
    sub_type = models.CharField(
        max_length=10, choices=SUB_TYPES, default="current"
    )

    # Optional hierarchy: 1000 Cash → 1010 Petty Cash, 1020 Bank
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,  # you can't delete a parent if children exist
        related_name="children",
    )
    description = models.CharField(max_length=500, blank=True)

    # Balance carried in from before the system was used,
    # expressed on the normal-balance side
    opening_balance = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    # accounts are never deleted once used, only deactivated
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveManager()

    class Meta:
        ordering = ["code"]
        indexes = [
            # For reports grouped by ac_type (Trial Balance, Balance Sheet)
            models.Index(fields=["ac_type", "is_active"], name="acct_type_active_idx"),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @property
    def expected_normal_balance(self):
        return NORMAL_BALANCE_FOR_TYPE.get(self.ac_type)

    def clean(self):
        if not self.normal_balance:
            self.normal_balance = self.expected_normal_balance or ""

        # Normal balance is determined by the account type
        expected = self.expected_normal_balance
        if expected and self.normal_balance != expected:
            raise ValidationError(
                {
                    "normal_balance": (
                        f"{self.ac_type} accounts should have "
                        f"{expected} normal balance"
                    )
                }
            )

        if self.parent_id and self.pk and self.parent_id == self.pk:
            raise ValidationError({"parent": "An account cannot be its own parent."})

    def has_transactions(self):
        return self.journal_lines.exists()

    def delete(self, *args, **kwargs):
        if self.has_transactions():
            raise ValidationError(
                "Cannot delete account with existing transactions. "
                "Consider deactivating instead."
            )
        return super().delete(*args, **kwargs)

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
