#  finance/views.py

"""
JSON API for the agency financial hub: ledger transactions, recurring
templates, monthly obligations and the dashboard summary.
"""

import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from .forms import (
    ObligationMonthForm,
    ObligationPaymentForm,
    RecurringTransactionForm,
    SummaryRangeForm,
    TransactionFilterForm,
    TransactionForm,
)
from .models import RecurringTransaction, Transaction
from .serializers import (
    serialize_report,
    serialize_summary,
    serialize_template,
    serialize_transaction,
)
from .services.recurring import RecurringObligationService
from .services.summary import get_financial_summary
from .utils.http import api_view, parse_json_body, query_params, validation_error

logger = logging.getLogger(__name__)


# ==============================================================================
# TRANSACTIONS
# ==============================================================================

@login_required
@require_http_methods(["GET", "POST"])
@api_view
def transactions_collection(request):
    """List ledger transactions or record a new one."""
    if request.method == "POST":
        form = TransactionForm.for_create(parse_json_body(request))
        if not form.is_valid():
            return validation_error(form)
        tx = form.save()
        logger.info(f"Transaction {tx.pk} created ({tx.type} {tx.amount})")
        return JsonResponse(serialize_transaction(tx), status=201)

    filters = TransactionFilterForm(query_params(request))
    if not filters.is_valid():
        return validation_error(filters)

    qs = Transaction.objects.all()
    if filters.cleaned_data.get("type"):
        qs = qs.filter(type=filters.cleaned_data["type"])
    if filters.cleaned_data.get("start_date"):
        qs = qs.filter(date__gte=filters.cleaned_data["start_date"])
    if filters.cleaned_data.get("end_date"):
        qs = qs.filter(date__lte=filters.cleaned_data["end_date"])

    return JsonResponse([serialize_transaction(tx) for tx in qs], safe=False)


@login_required
@require_http_methods(["GET", "PATCH", "DELETE"])
@api_view
def transaction_detail(request, pk):
    tx = get_object_or_404(Transaction, pk=pk)

    if request.method == "DELETE":
        tx.delete()
        logger.info(f"Transaction {pk} deleted")
        return HttpResponse(status=204)

    if request.method == "PATCH":
        form = TransactionForm.for_update(tx, parse_json_body(request))
        if not form.is_valid():
            return validation_error(form)
        tx = form.save()

    return JsonResponse(serialize_transaction(tx))


# ==============================================================================
# RECURRING TEMPLATES
# ==============================================================================

@login_required
@require_http_methods(["GET", "POST"])
@api_view
def recurring_collection(request):
    """List recurring templates or create one (optionally already paid)."""
    if request.method == "POST":
        form = RecurringTransactionForm.for_create(parse_json_body(request))
        if not form.is_valid():
            return validation_error(form)

        template, payment = RecurringObligationService().register_template(
            form.save(commit=False),
            already_paid=form.cleaned_data.get("already_paid", False),
        )
        data = serialize_template(template)
        if payment is not None:
            data["payment"] = serialize_transaction(payment)
        return JsonResponse(data, status=201)

    templates = RecurringTransaction.objects.select_related("client")
    return JsonResponse([serialize_template(t) for t in templates], safe=False)


@login_required
@require_http_methods(["GET", "PATCH", "DELETE"])
@api_view
def recurring_detail(request, pk):
    template = get_object_or_404(RecurringTransaction, pk=pk)

    if request.method == "DELETE":
        # Generated transactions survive with their template link nulled
        template.delete()
        logger.info(f"Recurring template {pk} deleted")
        return HttpResponse(status=204)

    if request.method == "PATCH":
        form = RecurringTransactionForm.for_update(template, parse_json_body(request))
        if not form.is_valid():
            return validation_error(form)
        template = form.save()

    return JsonResponse(serialize_template(template))


@login_required
@require_POST
@api_view
def recurring_execute(request, pk):
    """Execute a recurring template manually."""
    tx = RecurringObligationService().execute_recurring_transaction(pk)
    return JsonResponse(serialize_transaction(tx), status=201)


@login_required
@require_POST
@api_view
def recurring_execute_pending(request):
    """Execute all due recurring templates."""
    report = RecurringObligationService().execute_pending_recurring_transactions()
    return JsonResponse(serialize_report(report), status=201 if report.count else 200)


# ==============================================================================
# SUMMARY & OBLIGATIONS
# ==============================================================================

@login_required
@require_GET
@api_view
def financial_summary(request):
    form = SummaryRangeForm(query_params(request))
    if not form.is_valid():
        return validation_error(form)
    summary = get_financial_summary(
        start_date=form.cleaned_data.get("start_date"),
        end_date=form.cleaned_data.get("end_date"),
    )
    return JsonResponse(serialize_summary(summary))


def _obligations(request, loader_name):
    form = ObligationMonthForm(query_params(request))
    if not form.is_valid():
        return validation_error(form)
    year, month = form.resolve(timezone.localdate())
    loader = getattr(RecurringObligationService(), loader_name)
    return JsonResponse([serialize_template(t) for t in loader(year, month)], safe=False)


@login_required
@require_GET
@api_view
def obligations_payables(request):
    """Recurring expenses still unpaid for the month."""
    return _obligations(request, "get_monthly_accounts_payable")


@login_required
@require_GET
@api_view
def obligations_receivables(request):
    """Recurring income still uncollected for the month."""
    return _obligations(request, "get_monthly_accounts_receivable")


@login_required
@require_POST
@api_view
def obligation_pay(request, pk):
    form = ObligationPaymentForm(parse_json_body(request))
    if not form.is_valid():
        return validation_error(form)
    tx = RecurringObligationService().mark_obligation_as_paid(
        pk, paid_date=form.cleaned_data.get("paid_date")
    )
    return JsonResponse(serialize_transaction(tx), status=201)


@login_required
@require_POST
@api_view
def obligation_unpay(request, pk):
    template = RecurringObligationService().unpay_obligation(pk)
    return JsonResponse(serialize_template(template))


def healthz(_request):
    """
    Lightweight health endpoint used by external monitors.
    Must not touch the database.
    """
    response = HttpResponse("ok", content_type="text/plain", status=200)
    response["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    return response
