from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from ..managers import DocumentManager

DOCUMENT_STATUS = [
    ("pending", "Pending"),
    ("paid", "Paid"),
    ("overdue", "Overdue"),
]

PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank_transfer", "Bank Transfer"),
    ("cheque", "Cheque"),
    ("credit", "Credit"),
]

non_negative = [MinValueValidator(Decimal("0.00"))]


def money_field(**kwargs):
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(
        max_digits=18, decimal_places=2, validators=non_negative, **kwargs
    )


class VatDocument(models.Model):
    """
    Amounts & generated journal shared by every VAT document
    (purchase bills, sales invoices and their returns).
    taxable = subtotal − discount, vat = taxable × VAT_RATE, total = taxable + vat
    """

    date = models.DateField()
    subtotal = money_field()
    discount_amount = money_field()
    taxable_amount = money_field()
    vat_amount = money_field()
    total_amount = money_field()
    notes = models.TextField(max_length=1000, blank=True)

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        null=True, blank=True, on_delete=models.PROTECT, related_name="+",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL, related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DocumentManager()

    class Meta:
        abstract = True
        ordering = ["-date", "-id"]

    def clean(self):
        from ..services.vat import vat_amount_errors

        errors = vat_amount_errors(self.taxable_amount, self.vat_amount, self.total_amount)
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class TaxableDocument(VatDocument):
    """Purchase bill or sales invoice: settled by a payment or receipt."""

    payment_method = models.CharField(
        max_length=15, choices=PAYMENT_METHODS, default="credit"
    )
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=10, choices=DOCUMENT_STATUS, default="pending"
    )
    paid_at = models.DateField(null=True, blank=True)

    payment_journal = models.ForeignKey(
        "accounting.JournalEntry",
        null=True, blank=True, on_delete=models.PROTECT, related_name="+",
    )

    # fields that may not change once the document is paid
    frozen_fields = (
        "date", "subtotal", "discount_amount", "taxable_amount",
        "vat_amount", "total_amount", "payment_method",
    )

    class Meta(VatDocument.Meta):
        abstract = True

    def clean(self):
        super().clean()

        """ Make paid documents immutable in all code paths """
        if self.pk:
            orig = type(self).objects.filter(pk=self.pk).first()
            if orig and orig.status == "paid":
                changed = [
                    f for f in self.frozen_fields
                    if getattr(orig, f) != getattr(self, f)
                ]
                if changed or self.status != "paid":
                    raise ValidationError(
                        f"Cannot modify a paid {self._meta.verbose_name}."
                    )

    def delete(self, *args, **kwargs):
        if self.status == "paid":
            raise ValidationError(f"Cannot delete a paid {self._meta.verbose_name}.")
        return super().delete(*args, **kwargs)

    def transition_to(self, new_status):
        allowed = {
            "pending": ["paid", "overdue"],
            "overdue": ["paid"],
            "paid": [],
        }
        if new_status not in allowed.get(self.status, []):
            raise ValidationError(f"Cannot go from {self.status} to {new_status}")
        self.status = new_status
        self.save()


class DocumentItem(models.Model):
    description = models.CharField(max_length=200)
    quantity = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    unit_price = money_field()
    amount = money_field()
    is_vat_exempt = models.BooleanField(default=False)

    class Meta:
        abstract = True
        ordering = ["id"]

    def __str__(self):
        return f"{self.description} x{self.quantity} = {self.amount}"
