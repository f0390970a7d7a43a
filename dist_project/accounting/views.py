from django.core.exceptions import ValidationError
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .forms import (AsOfDateForm, DateRangeForm, DocumentRegisterForm,
                    VatReportForm, validate_journal_entry, validate_query)
from .http import api_view, json_body, ok, paginate
from .models import (Account, JournalEntry, PartyLedger, PurchaseEntry, PurchaseReturn,
                     SalesEntry, SalesReturn)
from .serializers import (account_to_dict, journal_to_dict, party_to_dict,
                          purchase_return_to_dict, purchase_to_dict,
                          sale_to_dict, sales_return_to_dict)
from .services import chart, documents, journals, ledger, reports, returns


def _query(form_class, request, **kwargs):
    """Validated query-string values (400 on bad input)."""
    result = validate_query(form_class, request.GET, **kwargs)
    if not result.is_valid:
        raise ValidationError(result.errors)
    return result.data


def _filter_dates(queryset, request, field="date"):
    dates = _query(DateRangeForm, request, require_dates=False)
    if dates.get("from_date"):
        queryset = queryset.filter(**{f"{field}__gte": dates["from_date"]})
    if dates.get("to_date"):
        queryset = queryset.filter(**{f"{field}__lte": dates["to_date"]})
    return queryset


# ---------- Journal entries ----------
@api_view(methods=("GET", "POST"))
def journal_list(request):
    if request.method == "POST":
        entry = journals.create_journal_entry(json_body(request), user=request.user)
        return ok(journal_to_dict(entry), status=201, message="Journal entry created")

    qs = _filter_dates(JournalEntry.objects.all(), request)
    status = request.GET.get("status")
    if status:
        qs = qs.filter(status=status)
    search = request.GET.get("search")
    if search:
        qs = qs.filter(
            Q(entry_number__icontains=search)
            | Q(description__icontains=search)
            | Q(reference_number__icontains=search)
        )
    return ok(**paginate(request, qs, lambda e: journal_to_dict(e, with_lines=False)))


@api_view(methods=("POST",))
def journal_validate(request):
    """Dry run: every problem with the payload, nothing persisted."""
    result = validate_journal_entry(json_body(request))
    return ok(
        {
            "is_valid": result.is_valid,
            "errors": result.errors,
            "totals": result.data.get("totals"),
        }
    )


@api_view(methods=("GET", "PUT", "DELETE"))
def journal_detail(request, pk):
    entry = get_object_or_404(JournalEntry, pk=pk)
    if request.method == "PUT":
        entry = journals.update_journal_entry(entry, json_body(request), user=request.user)
        return ok(journal_to_dict(entry), message="Journal entry updated")
    if request.method == "DELETE":
        journals.delete_journal_entry(entry, user=request.user)
        return ok(message="Journal entry deleted")
    return ok(journal_to_dict(entry))


@api_view(methods=("POST",))
def journal_post(request, pk):
    get_object_or_404(JournalEntry, pk=pk)
    entry = journals.post_journal_entry(pk, user=request.user)
    return ok(journal_to_dict(entry), message="Journal entry posted")


@api_view(methods=("POST",))
def journal_reverse(request, pk):
    get_object_or_404(JournalEntry, pk=pk)
    body = json_body(request)
    dates = validate_query(AsOfDateForm, {"as_of_date": body.get("date")})
    if not dates.is_valid:
        raise ValidationError({"date": dates.errors["as_of_date"]})
    reversal = journals.reverse_journal_entry(
        pk,
        user=request.user,
        date=dates.data.get("as_of_date"),
        description=body.get("description"),
    )
    return ok(journal_to_dict(reversal), status=201, message="Journal entry reversed")


# ---------- Accounts ----------
@api_view(methods=("GET", "POST"))
def account_list(request):
    if request.method == "POST":
        account = chart.create_account(json_body(request), user=request.user)
        return ok(account_to_dict(account), status=201, message="Account created")

    qs = Account.objects.select_related("parent")
    ac_type = request.GET.get("type")
    if ac_type:
        qs = qs.filter(ac_type=ac_type)
    if request.GET.get("is_active") in ("true", "false"):
        qs = qs.filter(is_active=request.GET["is_active"] == "true")
    search = request.GET.get("search")
    if search:
        qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
    return ok(**paginate(request, qs, account_to_dict))


@api_view()
def chart_of_accounts(request):
    return ok(chart.chart_of_accounts())


@api_view(methods=("GET", "PUT", "DELETE"))
def account_detail(request, code):
    account = ledger.get_account(code)
    if request.method == "PUT":
        account = chart.update_account(account, json_body(request), user=request.user)
        return ok(account_to_dict(account), message="Account updated")
    if request.method == "DELETE":
        chart.delete_account(account, user=request.user)
        return ok(message="Account deleted")
    return ok(account_to_dict(account))


@api_view()
def account_balance(request, code):
    as_of = _query(AsOfDateForm, request).get("as_of_date")
    return ok(ledger.get_account_balance(code, as_of).as_dict())


@api_view()
def account_ledger(request, code):
    dates = _query(DateRangeForm, request, require_dates=False)
    return ok(ledger.get_account_ledger(code, dates.get("from_date"), dates.get("to_date")))


# ---------- Party ledgers ----------
@api_view(methods=("GET", "POST"))
def party_list(request):
    if request.method == "POST":
        party = chart.create_party(json_body(request), user=request.user)
        return ok(party_to_dict(party), status=201, message="Party ledger created")

    qs = PartyLedger.objects.all()
    party_type = request.GET.get("party_type")
    if party_type:
        qs = qs.filter(party_type=party_type)
    search = request.GET.get("search")
    if search:
        qs = qs.filter(
            Q(party_name__icontains=search)
            | Q(contact_number__icontains=search)
            | Q(pan_number__icontains=search)
        )
    return ok(**paginate(request, qs, party_to_dict))


@api_view(methods=("GET", "PUT", "DELETE"))
def party_detail(request, pk):
    party = ledger.get_party(pk)
    if request.method == "PUT":
        party = chart.update_party(party, json_body(request), user=request.user)
        return ok(party_to_dict(party), message="Party ledger updated")
    if request.method == "DELETE":
        chart.delete_party(party, user=request.user)
        return ok(message="Party ledger deleted")
    return ok(party_to_dict(party))


@api_view()
def party_balance(request, pk):
    as_of = _query(AsOfDateForm, request).get("as_of_date")
    return ok(ledger.get_party_balance(pk, as_of).as_dict())


@api_view()
def party_ledger(request, pk):
    dates = _query(DateRangeForm, request, require_dates=False)
    return ok(ledger.get_party_ledger(pk, dates.get("from_date"), dates.get("to_date")))


@api_view()
def debtors_creditors(request):
    return ok(ledger.debtors_and_creditors(request.GET.get("party_type")))


@api_view()
def aging_report(request):
    return ok(ledger.aging_analysis(request.GET.get("party_type")))


# ---------- Purchases & sales ----------
def _document_list(request, qs, party_field, number_field, serializer):
    qs = _filter_dates(qs, request)
    status = request.GET.get("status")
    if status:
        qs = qs.filter(status=status)
    search = request.GET.get("search")
    if search:
        qs = qs.filter(
            Q(**{f"{number_field}__icontains": search})
            | Q(**{f"{party_field}__icontains": search})
        )
    return ok(**paginate(request, qs, lambda doc: serializer(doc, with_items=False)))


@api_view(methods=("GET", "POST"))
def purchase_list(request):
    if request.method == "POST":
        purchase = documents.record_purchase(json_body(request), user=request.user)
        return ok(purchase_to_dict(purchase), status=201, message="Purchase entry created")
    return _document_list(
        request, PurchaseEntry.objects.select_related("journal_entry", "payment_journal"),
        "supplier_name", "bill_number", purchase_to_dict,
    )


@api_view(methods=("GET", "PUT", "DELETE"))
def purchase_detail(request, pk):
    purchase = get_object_or_404(PurchaseEntry, pk=pk)
    if request.method == "PUT":
        purchase = documents.update_purchase(purchase, json_body(request), user=request.user)
        return ok(purchase_to_dict(purchase), message="Purchase entry updated")
    if request.method == "DELETE":
        documents.delete_purchase(purchase, user=request.user)
        return ok(message="Purchase entry deleted")
    return ok(purchase_to_dict(purchase))


@api_view(methods=("POST",))
def purchase_pay(request, pk):
    purchase = get_object_or_404(PurchaseEntry, pk=pk)
    payment_date = _query(AsOfDateForm, request).get("as_of_date")
    purchase = documents.mark_purchase_paid(purchase, user=request.user, payment_date=payment_date)
    return ok(purchase_to_dict(purchase), message="Purchase entry marked as paid")


@api_view(methods=("GET", "POST"))
def sale_list(request):
    if request.method == "POST":
        sale = documents.record_sale(json_body(request), user=request.user)
        return ok(sale_to_dict(sale), status=201, message="Sales entry created")
    return _document_list(
        request, SalesEntry.objects.select_related("journal_entry", "payment_journal"),
        "customer_name", "invoice_number", sale_to_dict,
    )


@api_view(methods=("GET", "PUT", "DELETE"))
def sale_detail(request, pk):
    sale = get_object_or_404(SalesEntry, pk=pk)
    if request.method == "PUT":
        sale = documents.update_sale(sale, json_body(request), user=request.user)
        return ok(sale_to_dict(sale), message="Sales entry updated")
    if request.method == "DELETE":
        documents.delete_sale(sale, user=request.user)
        return ok(message="Sales entry deleted")
    return ok(sale_to_dict(sale))


@api_view(methods=("POST",))
def sale_receive(request, pk):
    sale = get_object_or_404(SalesEntry, pk=pk)
    receipt_date = _query(AsOfDateForm, request).get("as_of_date")
    sale = documents.mark_sale_received(sale, user=request.user, receipt_date=receipt_date)
    return ok(sale_to_dict(sale), message="Sales entry marked as received")


# ---------- Returns ----------
@api_view(methods=("GET", "POST"))
def sales_return_list(request):
    if request.method == "POST":
        sales_return = returns.record_sales_return(json_body(request), user=request.user)
        return ok(sales_return_to_dict(sales_return), status=201, message="Sales return created")
    return _document_list(
        request, SalesReturn.objects.select_related("journal_entry"),
        "customer_name", "return_number", sales_return_to_dict,
    )


@api_view(methods=("GET", "PUT", "DELETE"))
def sales_return_detail(request, pk):
    sales_return = get_object_or_404(SalesReturn, pk=pk)
    if request.method == "PUT":
        sales_return = returns.update_sales_return(sales_return, json_body(request), user=request.user)
        return ok(sales_return_to_dict(sales_return), message="Sales return updated")
    if request.method == "DELETE":
        returns.delete_sales_return(sales_return, user=request.user)
        return ok(message="Sales return deleted")
    return ok(sales_return_to_dict(sales_return))


@api_view(methods=("POST", "PATCH"))
def sales_return_process(request, pk):
    sales_return = get_object_or_404(SalesReturn, pk=pk)
    processed_date = _query(AsOfDateForm, request).get("as_of_date")
    sales_return = returns.process_sales_return(
        sales_return, user=request.user, processed_date=processed_date
    )
    return ok(sales_return_to_dict(sales_return), message="Sales return processed")


@api_view(methods=("GET", "POST"))
def purchase_return_list(request):
    if request.method == "POST":
        purchase_return = returns.record_purchase_return(json_body(request), user=request.user)
        return ok(purchase_return_to_dict(purchase_return), status=201,
                  message="Purchase return created")
    return _document_list(
        request, PurchaseReturn.objects.select_related("journal_entry"),
        "supplier_name", "return_number", purchase_return_to_dict,
    )


@api_view(methods=("GET", "PUT", "DELETE"))
def purchase_return_detail(request, pk):
    purchase_return = get_object_or_404(PurchaseReturn, pk=pk)
    if request.method == "PUT":
        purchase_return = returns.update_purchase_return(
            purchase_return, json_body(request), user=request.user
        )
        return ok(purchase_return_to_dict(purchase_return), message="Purchase return updated")
    if request.method == "DELETE":
        returns.delete_purchase_return(purchase_return, user=request.user)
        return ok(message="Purchase return deleted")
    return ok(purchase_return_to_dict(purchase_return))


@api_view(methods=("POST", "PATCH"))
def purchase_return_process(request, pk):
    purchase_return = get_object_or_404(PurchaseReturn, pk=pk)
    processed_date = _query(AsOfDateForm, request).get("as_of_date")
    purchase_return = returns.process_purchase_return(
        purchase_return, user=request.user, processed_date=processed_date
    )
    return ok(purchase_return_to_dict(purchase_return), message="Purchase return processed")


# ---------- Reports ----------
@api_view()
def trial_balance_report(request):
    params = _query(AsOfDateForm, request)
    return ok(reports.trial_balance(params.get("as_of_date"), params.get("include_zero")))


@api_view()
def balance_sheet_report(request):
    params = _query(AsOfDateForm, request)
    return ok(reports.balance_sheet(params.get("as_of_date")))


@api_view()
def vat_report(request):
    params = _query(VatReportForm, request)
    return ok(
        reports.vat_summary(
            params["year"], params["quarter"], params.get("from_date"), params.get("to_date")
        )
    )


@api_view()
def register_report(request):
    params = _query(DocumentRegisterForm, request)
    return ok(
        reports.document_register(params["report_type"], params["from_date"], params["to_date"])
    )
