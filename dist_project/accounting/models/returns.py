from django.core.exceptions import ValidationError
from django.db import models
from .document import DocumentItem, VatDocument
from .party import PartyLedger
from .purchase import PurchaseEntry
from .sales import SalesEntry

RETURN_STATUS = [
    ("draft", "Draft"),  # still editable, not in the books
    ("approved", "Approved"),  # accepted, goods not yet back
    ("processed", "Processed"),  # journal posted, frozen
]


class ReturnDocument(VatDocument):
    """
    Goods sent back against a sale or a purchase.
    Nothing reaches the ledger until the return is processed.
    """

    number_prefix = ""

    return_number = models.CharField(max_length=20, unique=True, blank=True, editable=False)
    status = models.CharField(max_length=10, choices=RETURN_STATUS, default="draft")
    processed_at = models.DateField(null=True, blank=True)

    frozen_fields = (
        "date", "subtotal", "discount_amount", "taxable_amount",
        "vat_amount", "total_amount",
    )

    class Meta(VatDocument.Meta):
        abstract = True

    def __str__(self):
        return f"{self.return_number} [{self.status}]"

    @classmethod
    def next_return_number(cls, year):
        prefix = f"{cls.number_prefix}{year}"
        last = (
            cls.objects.filter(return_number__startswith=prefix)
            .order_by("-return_number")
            .values_list("return_number", flat=True)
            .first()
        )
        sequence = int(last[len(prefix):]) + 1 if last else 1
        return f"{prefix}{sequence:06d}"

    def clean(self):
        super().clean()
        if self.pk:
            orig = type(self).objects.filter(pk=self.pk).first()
            if orig and orig.status == "processed":
                changed = [
                    f for f in self.frozen_fields
                    if getattr(orig, f) != getattr(self, f)
                ]
                if changed or self.status != "processed":
                    raise ValidationError(
                        f"Cannot modify a processed {self._meta.verbose_name}."
                    )

    def save(self, *args, **kwargs):
        if not self.return_number:
            self.full_clean()  # date strings become dates
            self.return_number = self.next_return_number(self.date.year)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status == "processed":
            raise ValidationError(
                f"Cannot delete a processed {self._meta.verbose_name}."
            )
        return super().delete(*args, **kwargs)

    def transition_to(self, new_status):
        allowed = {
            "draft": ["approved", "processed"],
            "approved": ["draft", "processed"],
            "processed": [],
        }
        if new_status not in allowed.get(self.status, []):
            raise ValidationError(f"Cannot go from {self.status} to {new_status}")
        self.status = new_status
        self.save()


class SalesReturn(ReturnDocument):
    number_prefix = "SR"

    customer = models.ForeignKey(
        PartyLedger, on_delete=models.PROTECT, related_name="sales_returns"
    )
    customer_name = models.CharField(max_length=100)
    original_sale = models.ForeignKey(
        SalesEntry, null=True, blank=True, on_delete=models.PROTECT, related_name="returns"
    )
    original_invoice_number = models.CharField(max_length=50, blank=True)

    class Meta(ReturnDocument.Meta):
        verbose_name = "sales return"
        indexes = [
            models.Index(fields=["date"], name="sales_return_date_idx"),
            models.Index(fields=["customer", "status"], name="sales_return_customer_idx"),
        ]

    @property
    def party(self):
        return self.customer


class SalesReturnItem(DocumentItem):
    sales_return = models.ForeignKey(
        SalesReturn, on_delete=models.CASCADE, related_name="items"
    )
    reason = models.CharField(max_length=200, blank=True)


class PurchaseReturn(ReturnDocument):
    number_prefix = "PR"

    supplier = models.ForeignKey(
        PartyLedger, on_delete=models.PROTECT, related_name="purchase_returns"
    )
    supplier_name = models.CharField(max_length=100)
    original_purchase = models.ForeignKey(
        PurchaseEntry, null=True, blank=True, on_delete=models.PROTECT, related_name="returns"
    )
    original_bill_number = models.CharField(max_length=50, blank=True)

    class Meta(ReturnDocument.Meta):
        verbose_name = "purchase return"
        indexes = [
            models.Index(fields=["date"], name="purchase_return_date_idx"),
            models.Index(fields=["supplier", "status"], name="purchase_return_supplier_idx"),
        ]

    @property
    def party(self):
        return self.supplier


class PurchaseReturnItem(DocumentItem):
    purchase_return = models.ForeignKey(
        PurchaseReturn, on_delete=models.CASCADE, related_name="items"
    )
    reason = models.CharField(max_length=200, blank=True)
