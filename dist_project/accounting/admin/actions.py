from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
from accounting.exceptions import (AlreadyPostedDifferentPayload,
                                   JournalLineError, UnbalancedJournalError)
from accounting.models import SalesReturn
from accounting.services.documents import mark_overdue_documents
from accounting.services.journals import (post_journal_entry,
                                          reverse_journal_entry)
from accounting.services.ledger import refresh_party_balance
from accounting.services.returns import (process_purchase_return,
                                         process_sales_return)

POSTING_ERRORS = (
    ValidationError,
    UnbalancedJournalError,
    JournalLineError,
    AlreadyPostedDifferentPayload,
)

# ---------- Admin actions ----------


@admin.action(description="Post selected journal entries (make immutable)")
# Bulk-post multiple journal entries from Django admin list view
def post_journal_entries(modeladmin, request, queryset):
    """
    Post each selected draft in its own transaction (post_journal_entry
    locks the row), so one failure doesn't stop the batch.
    Reports success / per-entry failures via admin messages.
    """
    candidates = queryset.filter(status="draft")
    total = candidates.count()
    success = 0
    failures = 0

    for je in candidates:
        try:
            post_journal_entry(je.pk, user=request.user)
            success += 1
        except POSTING_ERRORS as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not post journal %(number)s: %(err)s") % {"number": je.entry_number, "err": exc},
                level=messages.ERROR,
            )

    # Final summary message
    modeladmin.message_user(
        request,
        _("Posted %(success)d of %(total)d journal entries. %(failures)d failed.") % {
            "success": success,
            "total": total,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )


""" Correct posted journals with reversing entries """


@admin.action(description="Reverse selected posted journal entries")
def reverse_journal_entries(modeladmin, request, queryset):
    for je in queryset.filter(status="posted"):
        try:
            reversal = reverse_journal_entry(je.pk, user=request.user)
            modeladmin.message_user(
                request, f"{je.entry_number} reversed by {reversal.entry_number}"
            )
        except POSTING_ERRORS as e:
            modeladmin.message_user(
                request, f"{je.entry_number}: {e}", level=messages.ERROR)


@admin.action(description="Recompute current balance from the ledger")
def refresh_balances(modeladmin, request, queryset):
    for party in queryset:
        refresh_party_balance(party)
    modeladmin.message_user(request, f"Refreshed {queryset.count()} party balances")


@admin.action(description="Flag documents past their due date as overdue")
def mark_documents_overdue(modeladmin, request, queryset):
    count = mark_overdue_documents()
    modeladmin.message_user(request, f"{count} documents marked overdue")


@admin.action(description="Process selected returns (post their journals)")
def process_returns(modeladmin, request, queryset):
    process = (
        process_sales_return if queryset.model is SalesReturn else process_purchase_return
    )
    for document in queryset.exclude(status="processed"):
        try:
            process(document, user=request.user)
            modeladmin.message_user(request, f"{document.return_number} processed")
        except POSTING_ERRORS as e:
            modeladmin.message_user(
                request, f"{document.return_number}: {e}", level=messages.ERROR)
