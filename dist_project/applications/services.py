"""Distributor application workflow: submission, review decisions, stats."""
import logging
from datetime import timedelta
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import SetPasswordForm
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count
from django.db.models.functions import TruncMonth
from django.utils import timezone
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from accounting.forms.base import form_errors
from .forms import validate_application, validate_status_update
from .models import ApplicationHistory, ApplicationStatus, DistributorApplication
from .tasks import send_approval_email, send_status_email

logger = logging.getLogger(__name__)

JSON_SECTIONS = (
    "personal_details", "business_details", "staff_infrastructure",
    "current_transactions", "business_information", "products_to_distribute",
    "partnership_details", "retailer_requirements", "area_coverage",
)


def submit_application(data):
    result = validate_application(data)
    if not result.is_valid:
        raise ValidationError(result.errors)
    cleaned = result.data
    personal = cleaned["personal_details"]
    business = cleaned["business_details"]
    declaration = cleaned["declaration"]

    with transaction.atomic():
        application = DistributorApplication.objects.create(
            full_name=personal["full_name"],
            age=personal["age"],
            gender=personal["gender"],
            citizenship_number=personal["citizenship_number"],
            mobile_number=personal["mobile_number"],
            email=personal.get("email") or "",
            company_name=business["company_name"],
            pan_vat_number=business["pan_vat_number"],
            desired_distributor_area=business["desired_distributor_area"],
            business_type=business["business_type"],
            additional_information=cleaned["additional_information"] or {},
            documents=cleaned["documents"] or {},
            declaration_accepted=declaration["declaration"],
            signature=declaration["signature"],
            declaration_date=declaration["date"],
            **{name: cleaned[name] for name in JSON_SECTIONS},
        )
        ApplicationHistory.objects.create(
            application=application,
            status=ApplicationStatus.PENDING,
            notes="Application submitted",
            changed_by="System",
        )
    logger.info("Application %s submitted by %s (%s)",
                application.pk, application.full_name, application.company_name)
    return application


def create_distributor_account(application):
    """
    Login for an approved distributor, created at most once per application.
    Returns (user, created). The account starts without a usable password;
    the approval email carries a one-time link to choose one.
    """
    if application.distributor_user_id:
        return application.distributor_user, False

    User = get_user_model()
    username = f"dist_{application.pk:08d}"
    first_name, _, last_name = application.full_name.partition(" ")
    user = User.objects.create_user(
        username=username,
        email=application.email or f"{username}@distributor.local",
        password=None,
        first_name=first_name[:150],
        last_name=last_name[:150],
    )
    application.distributor_user = user
    application.save(update_fields=["distributor_user", "updated_at"])
    logger.info("Created distributor account %s for application %s", username, application.pk)
    return user, True


def set_distributor_password(uidb64, token, data):
    """Redeem the link from the approval email: choose the first password."""
    User = get_user_model()
    try:
        user = User.objects.get(
            pk=force_str(urlsafe_base64_decode(uidb64)), distributor_application__isnull=False
        )
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None
    if user is None or not default_token_generator.check_token(user, token):
        raise ValidationError({"token": ["Password link is invalid or has expired"]})

    form = SetPasswordForm(user, data)
    if not form.is_valid():
        raise ValidationError(form_errors(form))
    form.save()
    logger.info("Distributor %s set their password", user.get_username())
    return user


def update_status(application, data, user=None):
    """Apply a reviewer's decision and queue the notification email."""
    result = validate_status_update(data)
    if not result.is_valid:
        raise ValidationError(result.errors)
    new_status = result.data["status"]
    notes = result.data.get("review_notes") or ""

    with transaction.atomic():
        application = DistributorApplication.objects.select_for_update().get(pk=application.pk)
        application.transition_to(new_status, user=user, notes=notes)

        if new_status == ApplicationStatus.APPROVED:
            account, _ = create_distributor_account(application)
            transaction.on_commit(
                lambda: send_approval_email.delay(application.pk, account.get_username())
            )
            logger.info("Queued approval email for application %s", application.pk)
        elif application.email:
            transaction.on_commit(lambda: send_status_email.delay(application.pk))
            logger.info("Queued %s email for application %s", new_status, application.pk)
    return application


def withdraw_application(application, user=None):
    """Soft delete: a pending application is closed as rejected, never removed."""
    if application.status != ApplicationStatus.PENDING:
        raise ValidationError("Only pending applications can be deleted")
    application.transition_to(ApplicationStatus.REJECTED, user=user, notes="Application cancelled")
    return application


def application_stats(today=None):
    today = today or timezone.localdate()
    by_status = dict(
        DistributorApplication.objects.order_by().values_list("status").annotate(total=Count("id"))
    )
    since = timezone.now() - timedelta(days=365)
    by_month = (
        DistributorApplication.objects.filter(created_at__gte=since)
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(count=Count("id"))
        .order_by("month")
    )
    return {
        "total_applications": sum(by_status.values()),
        "by_status": {status: by_status.get(status, 0) for status in ApplicationStatus.values},
        "recent_applications": DistributorApplication.objects.filter(
            created_at__date__gte=today - timedelta(days=7)
        ).count(),
        "applications_by_month": [
            {"month": row["month"].strftime("%Y-%m"), "count": row["count"]} for row in by_month
        ],
    }
