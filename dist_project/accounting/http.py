"""
JSON plumbing shared by the API views.

Every endpoint answers {"success": bool, ...}. Domain errors are mapped to
status codes here so views only deal with the happy path.
"""
import functools
import json
import logging
from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db.models import ProtectedError
from django.http import Http404, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from .exceptions import (AlreadyPostedDifferentPayload, JournalLineError,
                         NotFoundError, UnbalancedJournalError)

logger = logging.getLogger(__name__)


class BadRequest(Exception):
    """Malformed request (body is not a JSON object, bad query value)."""


def error_response(message, status=400, errors=None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JsonResponse(body, status=status)


def validation_errors(exc):
    """ValidationError → (message, {field: [messages]})."""
    if hasattr(exc, "error_dict"):
        return "Validation failed", exc.message_dict
    messages = exc.messages
    if len(messages) == 1:
        return messages[0], None
    return "Validation failed", {"__all__": messages}


def api_view(methods=("GET",), staff_required=True):
    """
    Decorator for JSON endpoints: method check, staff check, error mapping.
    """

    def decorator(view):
        @csrf_exempt
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in methods:
                return error_response("Method not allowed", status=405)
            if staff_required:
                user = request.user
                if not user.is_authenticated:
                    return error_response("Authentication required", status=401)
                if not user.is_staff:
                    return error_response("Permission denied", status=403)
            try:
                return view(request, *args, **kwargs)
            except BadRequest as exc:
                return error_response(str(exc))
            except ValidationError as exc:
                message, errors = validation_errors(exc)
                return error_response(message, errors=errors)
            except (UnbalancedJournalError, JournalLineError) as exc:
                logger.warning("Rejected journal on %s: %s", request.path, exc)
                return error_response(str(exc))
            except AlreadyPostedDifferentPayload as exc:
                return error_response(str(exc), status=409)
            except ProtectedError:
                return error_response(
                    "Record is referenced by other records and cannot be deleted"
                )
            except (NotFoundError, ObjectDoesNotExist, Http404) as exc:
                return error_response(str(exc) or "Not found", status=404)

        return wrapper

    return decorator


def json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def ok(data=None, status=200, message=None, **extra):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JsonResponse(body, status=status)


def _positive_int(value, default, name):
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must be a positive integer")
    if number < 1:
        raise BadRequest(f"{name} must be a positive integer")
    return number


def paginate(request, queryset, serializer):
    """Slice a queryset by ?page=&limit= and serialize the page."""
    page_number = _positive_int(request.GET.get("page"), 1, "page")
    limit = _positive_int(request.GET.get("limit"), settings.ACCOUNTING_PAGE_SIZE, "limit")
    limit = min(limit, settings.ACCOUNTING_MAX_PAGE_SIZE)

    paginator = Paginator(queryset, limit)
    try:
        page = paginator.page(page_number)
        items = [serializer(obj) for obj in page.object_list]
    except EmptyPage:
        items = []
    return {
        "items": items,
        "pagination": {
            "page": page_number,
            "limit": limit,
            "total": paginator.count,
            "total_pages": paginator.num_pages if paginator.count else 0,
        },
    }
