from django.db import models
from .document import DocumentItem, TaxableDocument
from .party import PartyLedger


# ---------- Purchase bills (Accounts Payable) ----------
class PurchaseEntry(TaxableDocument):
    # Supplier's bill/invoice number (e.g. "INV-4567")
    bill_number = models.CharField(max_length=50)
    supplier = models.ForeignKey(
        PartyLedger,
        on_delete=models.PROTECT,  # keep suppliers who have bills
        related_name="purchases",
    )
    # name as printed on the bill
    supplier_name = models.CharField(max_length=100)

    class Meta(TaxableDocument.Meta):
        verbose_name = "purchase entry"
        verbose_name_plural = "purchase entries"
        indexes = [
            models.Index(fields=["date"], name="purchase_date_idx"),
            models.Index(fields=["supplier", "status"], name="purchase_supplier_status_idx"),
        ]
        constraints = [
            # one bill number per supplier
            models.UniqueConstraint(
                fields=["supplier", "bill_number"], name="uq_purchase_supplier_bill"
            )
        ]

    def __str__(self):
        return f"Bill {self.bill_number} ({self.supplier_name})"

    @property
    def party(self):
        return self.supplier


class PurchaseItem(DocumentItem):
    purchase = models.ForeignKey(
        PurchaseEntry, on_delete=models.CASCADE, related_name="items"
    )
