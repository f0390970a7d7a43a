from django.contrib import admin
from accounting.models import PurchaseEntry, PurchaseReturn, SalesEntry, SalesReturn
from .actions import mark_documents_overdue, process_returns
from .inlines import (PurchaseItemInline, PurchaseReturnItemInline,
                      SalesItemInline, SalesReturnItemInline)

DOCUMENT_READONLY = (
    "status",
    "paid_at",
    "journal_entry",
    "payment_journal",
    "created_by",
)


class TaxableDocumentAdmin(admin.ModelAdmin):
    list_filter = ("status", "payment_method", "date")
    date_hierarchy = "date"
    readonly_fields = DOCUMENT_READONLY
    actions = [mark_documents_overdue]

    """ Paid documents are frozen """
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.status == "paid":
            return [f.name for f in self.model._meta.concrete_fields]
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        if obj and obj.status == "paid":
            return False
        return super().has_delete_permission(request, obj)


# Register `PurchaseEntry` model
@admin.register(PurchaseEntry)
class PurchaseEntryAdmin(TaxableDocumentAdmin):
    list_display = (
        "bill_number",
        "date",
        "supplier_name",
        "taxable_amount",
        "vat_amount",
        "total_amount",
        "due_date",
        "status",
    )
    search_fields = ("bill_number", "supplier_name")
    inlines = [PurchaseItemInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("supplier", "journal_entry")


# Register `SalesEntry` model
@admin.register(SalesEntry)
class SalesEntryAdmin(TaxableDocumentAdmin):
    list_display = (
        "invoice_number",
        "date",
        "customer_name",
        "taxable_amount",
        "vat_amount",
        "total_amount",
        "due_date",
        "status",
    )
    search_fields = ("invoice_number", "customer_name")
    inlines = [SalesItemInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("customer", "journal_entry")


class ReturnDocumentAdmin(admin.ModelAdmin):
    list_filter = ("status", "date")
    date_hierarchy = "date"
    readonly_fields = ("return_number", "status", "processed_at", "journal_entry", "created_by")
    actions = [process_returns]

    """ Processed returns are frozen """
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.status == "processed":
            return [f.name for f in self.model._meta.concrete_fields]
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        if obj and obj.status == "processed":
            return False
        return super().has_delete_permission(request, obj)


@admin.register(SalesReturn)
class SalesReturnAdmin(ReturnDocumentAdmin):
    list_display = (
        "return_number",
        "date",
        "customer_name",
        "original_invoice_number",
        "taxable_amount",
        "vat_amount",
        "total_amount",
        "status",
    )
    search_fields = ("return_number", "customer_name", "original_invoice_number")
    inlines = [SalesReturnItemInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("customer", "journal_entry")


@admin.register(PurchaseReturn)
class PurchaseReturnAdmin(ReturnDocumentAdmin):
    list_display = (
        "return_number",
        "date",
        "supplier_name",
        "original_bill_number",
        "taxable_amount",
        "vat_amount",
        "total_amount",
        "status",
    )
    search_fields = ("return_number", "supplier_name", "original_bill_number")
    inlines = [PurchaseReturnItemInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("supplier", "journal_entry")
