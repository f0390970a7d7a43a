from django.contrib import admin
from accounting.models import Account, PartyLedger
from .actions import refresh_balances


# Register `Account` model
@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    # show key accounting fields
    list_display = (
        "code",
        "name",
        "ac_type",
        "normal_balance",
        "sub_type",
        "parent",
        "opening_balance",
        "is_active",
    )
    list_filter = ("ac_type", "sub_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    fieldsets = (
        (
            None,
            {
                "fields": (
                    "code",
                    "name",
                    "ac_type",
                    "normal_balance",
                    "sub_type",
                    "parent",
                    "description",
                    "opening_balance",
                    "is_active",
                )
            },
        ),
    )

    # code & type are part of posted history once journals use the account
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.has_transactions():
            return ("code", "ac_type", "normal_balance")
        return ()

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("parent")


# Register `PartyLedger` model
@admin.register(PartyLedger)
class PartyLedgerAdmin(admin.ModelAdmin):
    list_display = (
        "party_name",
        "party_type",
        "contact_number",
        "pan_number",
        "current_balance",
        "credit_limit",
        "is_active",
    )
    list_filter = ("party_type", "is_active")
    search_fields = ("party_name", "contact_number", "pan_number", "email")
    readonly_fields = ("current_balance",)  # derived from posted journals
    actions = [refresh_balances]
