from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from .models import ApplicationHistory, ApplicationStatus, DistributorApplication
from .services import update_status


class ApplicationHistoryInline(admin.TabularInline):
    """Status trail under the application page (append-only)"""

    model = ApplicationHistory
    extra = 0
    fields = ("status", "notes", "changed_by", "changed_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


def _status_action(new_status, description):
    # each selected application goes through the same workflow as the API
    @admin.action(description=description)
    def action(modeladmin, request, queryset):
        changed = 0
        for application in queryset:
            try:
                update_status(application, {"status": new_status}, user=request.user)
                changed += 1
            except ValidationError as exc:
                modeladmin.message_user(
                    request, f"{application}: {'; '.join(exc.messages)}", level=messages.ERROR
                )
        modeladmin.message_user(request, f"{changed} applications moved to {new_status}")

    action.__name__ = f"mark_{new_status.lower()}"
    return action


@admin.register(DistributorApplication)
class DistributorApplicationAdmin(admin.ModelAdmin):
    list_display = (
        "full_name",
        "company_name",
        "mobile_number",
        "desired_distributor_area",
        "status",
        "reviewed_by",
        "created_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("full_name", "company_name", "email", "mobile_number", "citizenship_number")
    date_hierarchy = "created_at"
    inlines = [ApplicationHistoryInline]
    # status only moves through the actions below
    readonly_fields = (
        "status", "review_notes", "reviewed_by", "reviewed_at", "distributor_user",
        "created_at", "updated_at",
    )
    actions = [
        _status_action(ApplicationStatus.UNDER_REVIEW, "Mark selected applications under review"),
        _status_action(ApplicationStatus.APPROVED, "Approve selected applications"),
        _status_action(ApplicationStatus.REJECTED, "Reject selected applications"),
        _status_action(ApplicationStatus.REQUIRES_CHANGES, "Ask selected applicants for changes"),
    ]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("reviewed_by", "distributor_user")
