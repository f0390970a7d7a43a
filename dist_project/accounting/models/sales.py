from django.db import models
from .document import DocumentItem, TaxableDocument
from .party import PartyLedger


# ---------- Sales invoices (Accounts Receivable) ----------
class SalesEntry(TaxableDocument):
    invoice_number = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(
        PartyLedger,
        on_delete=models.PROTECT,
        related_name="sales",
    )
    customer_name = models.CharField(max_length=100)

    class Meta(TaxableDocument.Meta):
        verbose_name = "sales entry"
        verbose_name_plural = "sales entries"
        indexes = [
            models.Index(fields=["date"], name="sale_date_idx"),
            models.Index(fields=["customer", "status"], name="sale_customer_status_idx"),
        ]

    def __str__(self):
        return f"Invoice {self.invoice_number} ({self.customer_name})"

    @property
    def party(self):
        return self.customer


class SalesItem(DocumentItem):
    sale = models.ForeignKey(
        SalesEntry, on_delete=models.CASCADE, related_name="items"
    )
