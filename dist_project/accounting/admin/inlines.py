from django.contrib import admin

from accounting.models import (JournalLine, PurchaseItem, PurchaseReturnItem,
                               SalesItem, SalesReturnItem)

# ---------- Inline admin classes ----------


class JournalLineInline(
    admin.TabularInline
    # shows related objects in table format (rows under parent form)
):
    """Show JournalLine rows on JournalEntry page"""

    model = JournalLine
    extra = 0  # don’t show “empty” rows by default (prevents clutter)
    fields = (
        "account",
        "party",
        "description",
        "debit_amount",
        "credit_amount",
    )
    show_change_link = True  # each row has a link to full detail page
    ordering = ("id",)  # lines appear in creation order

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("account", "party")

    def get_readonly_fields(self, request, obj=None):
        # Once journal is `posted`, all its lines become completely locked
        if obj and obj.status == "posted":
            return list(self.fields)
        return self.readonly_fields

    # If parent JE is posted, don't allow adding new lines
    def has_add_permission(self, request, obj=None):
        if obj and getattr(obj, "status", None) == "posted":
            return False
        return super().has_add_permission(request, obj)

    # If parent JE is posted, disallow deleting lines
    def has_delete_permission(self, request, obj=None):
        if obj and getattr(obj, "status", None) == "posted":
            return False
        return super().has_delete_permission(request, obj)


class _DocumentItemInline(admin.TabularInline):
    extra = 0
    fields = ("description", "quantity", "unit_price", "amount", "is_vat_exempt")

    def get_readonly_fields(self, request, obj=None):
        # items of a paid document are part of the settled amount
        if obj and obj.status == "paid":
            return list(self.fields)
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        if obj and getattr(obj, "status", None) == "paid":
            return False
        return super().has_delete_permission(request, obj)


class PurchaseItemInline(_DocumentItemInline):
    """Shows bill items under a PurchaseEntry page"""

    model = PurchaseItem


class SalesItemInline(_DocumentItemInline):
    """Shows invoice items under a SalesEntry page"""

    model = SalesItem


class _ReturnItemInline(admin.TabularInline):
    extra = 0
    fields = ("description", "quantity", "unit_price", "amount", "is_vat_exempt", "reason")

    def get_readonly_fields(self, request, obj=None):
        if obj and obj.status == "processed":
            return list(self.fields)
        return self.readonly_fields

    def has_delete_permission(self, request, obj=None):
        if obj and getattr(obj, "status", None) == "processed":
            return False
        return super().has_delete_permission(request, obj)


class SalesReturnItemInline(_ReturnItemInline):
    model = SalesReturnItem


class PurchaseReturnItemInline(_ReturnItemInline):
    model = PurchaseReturnItem
