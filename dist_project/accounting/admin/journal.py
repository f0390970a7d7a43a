from django.contrib import admin
from django.core.exceptions import PermissionDenied
from django.db.models import Prefetch
from django.utils.html import format_html
from accounting.models import JournalEntry, JournalLine
from .actions import post_journal_entries, reverse_journal_entries
from .inlines import JournalLineInline


# Register `JournalEntry` model
@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    """Basic admin display setup"""

    list_display = (
        "entry_number",
        "date",
        "description",
        "reference_number",
        "status",
        "posted_at",
        "created_by",
        "balanced",
    )
    list_filter = ("status", "reference_type", "date")
    search_fields = ("entry_number", "reference_number", "description")
    readonly_fields = (
        "entry_number",
        "status",
        "posted_at",
        "posted_by",
        "created_by",
        "source_type",
        "source_id",
        "reverses",
        "posting_fingerprint",
    )  # users can see but not edit these; status only moves through actions
    inlines = [
        JournalLineInline
    ]  # allows editing JournalLines directly on JournalEntry page
    actions = [post_journal_entries, reverse_journal_entries]

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        """ Prefetch each entry's lines (with their accounts) for the balanced column. """
        qs = super().get_queryset(request)
        journalline_qs = JournalLine.objects.select_related("account")
        return qs.select_related("created_by").prefetch_related(
            Prefetch("lines", queryset=journalline_qs)
        )

    """ Computed column for balance check """
    def balanced(self, obj):
        d = sum((line.debit_amount for line in obj.lines.all()), 0)
        c = sum((line.credit_amount for line in obj.lines.all()), 0)
        # format: bold debits / small credits
        return format_html("<b>{}</b> / <small>{}</small>", f"{d:.2f}", f"{c:.2f}")

    # set column header in admin
    balanced.short_description = "Debits / Credits"

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)

    """ Make entries immutable once posted """
    def get_readonly_fields(self, request, obj=None):
        r = list(self.readonly_fields)
        if obj and obj.status == "posted":
            r += ["date", "description", "reference_number", "reference_type", "notes"]
        return r

    """ Prevent deletion after posting """
    def has_delete_permission(self, request, obj=None):
        if obj and obj.status == "posted":
            return False  # corrections go through a reversing entry
        return super().has_delete_permission(request, obj)


# Register `JournalLine` model
@admin.register(JournalLine)
class JournalLineAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "journal",
        "account",
        "party",
        "debit_amount",
        "credit_amount",
    )
    list_filter = ("journal__status", "account__ac_type")
    search_fields = ("description", "account__code", "journal__entry_number")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("journal", "account", "party")

    # if this JournalLine belongs to a posted JE, make all model fields readonly
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.journal.status == "posted":
            return [f.name for f in self.model._meta.concrete_fields]
        return super().get_readonly_fields(request, obj)

    # lines are created only via the JournalEntry inline
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        if obj and obj.journal.status == "posted":
            return False
        return super().has_delete_permission(request, obj)

    # prevent saving/POST requests for posted journal lines (but allow GET so view is visible)
    def change_view(self, request, object_id, form_url='', extra_context=None):
        obj = self.get_object(request, object_id)
        if obj and obj.journal.status == "posted" and request.method == "POST":
            raise PermissionDenied("Cannot edit a JournalLine belonging to a posted JournalEntry.")
        return super().change_view(request, object_id, form_url, extra_context=extra_context)
