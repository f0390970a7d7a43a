from django.core.exceptions import ValidationError
from django.db.models import Q
from django.shortcuts import get_object_or_404
from accounting.forms import DateRangeForm, validate_query
from accounting.http import api_view, json_body, ok, paginate
from . import services
from .models import DistributorApplication
from .serializers import application_to_dict


# public: prospective distributors submit without an account
@api_view(methods=("POST",), staff_required=False)
def submit_application(request):
    application = services.submit_application(json_body(request))
    return ok(application_to_dict(application), status=201, message="Application submitted")


@api_view()
def application_list(request):
    qs = DistributorApplication.objects.select_related("reviewed_by", "distributor_user")

    dates = validate_query(DateRangeForm, request.GET, require_dates=False)
    if not dates.is_valid:
        raise ValidationError(dates.errors)
    if dates.data.get("from_date"):
        qs = qs.filter(created_at__date__gte=dates.data["from_date"])
    if dates.data.get("to_date"):
        qs = qs.filter(created_at__date__lte=dates.data["to_date"])

    status = request.GET.get("status")
    if status:
        qs = qs.filter(status=status)
    search = request.GET.get("search")
    if search:
        qs = qs.filter(
            Q(full_name__icontains=search)
            | Q(company_name__icontains=search)
            | Q(email__icontains=search)
            | Q(mobile_number__icontains=search)
            | Q(citizenship_number__icontains=search)
        )
    return ok(**paginate(request, qs, lambda a: application_to_dict(a, with_sections=False)))


@api_view(methods=("GET", "DELETE"))
def application_detail(request, pk):
    application = get_object_or_404(DistributorApplication, pk=pk)
    if request.method == "DELETE":
        services.withdraw_application(application, user=request.user)
        return ok(message="Application deleted")
    return ok(application_to_dict(application))


@api_view(methods=("PUT", "PATCH", "POST"))
def application_status(request, pk):
    application = get_object_or_404(DistributorApplication, pk=pk)
    application = services.update_status(application, json_body(request), user=request.user)
    return ok(application_to_dict(application), message="Application status updated")


@api_view()
def application_stats(request):
    return ok(services.application_stats())


# public: redeemed from the link in the approval email
@api_view(methods=("POST",), staff_required=False)
def set_password(request, uidb64, token):
    services.set_distributor_password(uidb64, token, json_body(request))
    return ok(message="Password set, you can now sign in")
