import logging
from smtplib import SMTPException
from celery import shared_task
from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    "UNDER_REVIEW": "Your application is now being reviewed by our sales team.",
    "REJECTED": "We are unable to accept your application at this time.",
    "REQUIRES_CHANGES": "Your application needs some changes before we can continue.",
}


def _deliver(application, subject, body):
    try:
        send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [application.email],
            fail_silently=False,
        )
    except (SMTPException, OSError):
        # the decision is already saved, a lost email must not undo it
        logger.exception("Failed to send '%s' to application %s", subject, application.pk)
        return False
    logger.info("Sent '%s' to %s", subject, application.email)
    return True


def password_setup_link(user):
    """One-time portal link to choose a password; it stops working once used."""
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    portal = settings.DISTRIBUTOR_PORTAL_URL.rstrip("/")
    return f"{portal}/set-password/{uid}/{token}/"


@shared_task
def send_approval_email(application_id, username=None):
    """Congratulate an approved distributor, with a password link for a new login."""
    from .models import DistributorApplication

    application = DistributorApplication.objects.get(pk=application_id)
    if not application.email:
        logger.info("Application %s has no email address, approval not mailed", application_id)
        return False

    lines = [
        f"Dear {application.full_name},",
        "",
        f"Congratulations! {application.company_name} has been approved as our "
        f"distributor for {application.desired_distributor_area}.",
    ]
    if application.review_notes:
        lines += ["", f"Notes: {application.review_notes}"]
    if username:
        lines += ["", f"Portal: {settings.DISTRIBUTOR_PORTAL_URL}", f"Username: {username}"]
        account = application.distributor_user
        if account is not None and not account.has_usable_password():
            lines.append(f"Set your password: {password_setup_link(account)}")
    return _deliver(application, "Distributor application approved", "\n".join(lines))


@shared_task
def send_status_email(application_id):
    from .models import DistributorApplication

    application = DistributorApplication.objects.get(pk=application_id)
    if not application.email:
        return False

    lines = [
        f"Dear {application.full_name},",
        "",
        STATUS_MESSAGES.get(
            application.status, f"Your application status is now {application.get_status_display()}."
        ),
    ]
    if application.review_notes:
        lines += ["", f"Notes: {application.review_notes}"]
    subject = f"Distributor application: {application.get_status_display()}"
    return _deliver(application, subject, "\n".join(lines))
