import logging
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

logger = logging.getLogger(__name__)


class ApplicationStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    UNDER_REVIEW = "UNDER_REVIEW", "Under review"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    REQUIRES_CHANGES = "REQUIRES_CHANGES", "Requires changes"


# reviewer-driven only; APPROVED and REJECTED are final
ALLOWED_TRANSITIONS = {
    ApplicationStatus.PENDING: [
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.REQUIRES_CHANGES,
    ],
    ApplicationStatus.UNDER_REVIEW: [
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.REQUIRES_CHANGES,
    ],
    ApplicationStatus.REQUIRES_CHANGES: [
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.REJECTED,
    ],
    ApplicationStatus.APPROVED: [],
    ApplicationStatus.REJECTED: [],
}


def json_section(**kwargs):
    kwargs.setdefault("default", dict)
    return models.JSONField(encoder=DjangoJSONEncoder, blank=True, **kwargs)


class DistributorApplication(models.Model):
    """
    Onboarding form submitted by a prospective distributor.

    The searchable/identifying answers get their own columns; every form
    section is also kept whole as JSON, exactly as it was validated.
    """

    # Personal details
    full_name = models.CharField(max_length=100)
    age = models.PositiveSmallIntegerField()
    gender = models.CharField(max_length=10)
    citizenship_number = models.CharField(max_length=20)
    mobile_number = models.CharField(max_length=15)
    email = models.EmailField(blank=True)

    # Business details
    company_name = models.CharField(max_length=100)
    pan_vat_number = models.CharField(max_length=9)
    desired_distributor_area = models.CharField(max_length=100)
    business_type = models.CharField(max_length=50)

    # Form sections
    personal_details = json_section()
    business_details = json_section()
    staff_infrastructure = json_section()
    current_transactions = json_section(default=list)
    business_information = json_section()
    products_to_distribute = json_section(default=list)
    partnership_details = json_section(null=True, default=None)
    retailer_requirements = json_section()
    area_coverage = json_section(default=list)
    additional_information = json_section()
    documents = json_section()

    # Declaration
    declaration_accepted = models.BooleanField(default=False)
    signature = models.CharField(max_length=100)
    declaration_date = models.DateField()

    # Review
    status = models.CharField(
        max_length=20, choices=ApplicationStatus.choices, default=ApplicationStatus.PENDING
    )
    review_notes = models.TextField(max_length=1000, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL, related_name="reviewed_applications",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    # login created on approval
    distributor_user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL, related_name="distributor_application",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="application_status_idx"),
            models.Index(fields=["mobile_number"], name="application_mobile_idx"),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.company_name}) - {self.status}"

    def can_transition_to(self, new_status):
        return new_status in ALLOWED_TRANSITIONS.get(self.status, [])

    def transition_to(self, new_status, user=None, notes=""):
        """Move to `new_status` on a reviewer's decision and record it in the history."""
        if not self.can_transition_to(new_status):
            logger.warning(
                "Refused application %s transition %s -> %s", self.pk, self.status, new_status
            )
            raise ValidationError(
                {"status": [f"Cannot go from {self.status} to {new_status}"]}
            )

        previous = self.status
        self.status = new_status
        self.review_notes = notes or ""
        self.reviewed_by = user
        self.reviewed_at = timezone.now()
        self.save()
        ApplicationHistory.objects.create(
            application=self,
            status=new_status,
            notes=notes or f"Status changed: {previous} -> {new_status}",
            changed_by=user.get_username() if user else "System",
        )
        logger.info("Application %s moved %s -> %s", self.pk, previous, new_status)


class ApplicationHistory(models.Model):
    """Append-only trail of status changes."""

    application = models.ForeignKey(
        DistributorApplication, on_delete=models.CASCADE, related_name="history"
    )
    status = models.CharField(max_length=20, choices=ApplicationStatus.choices)
    notes = models.TextField(blank=True)
    changed_by = models.CharField(max_length=150)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-changed_at", "-id"]
        verbose_name_plural = "application history"

    def __str__(self):
        return f"{self.application_id}: {self.status} by {self.changed_by}"
