"""camelCase JSON <-> snake_case form/model mapping for the finance API."""

import re
from decimal import Decimal

from django.core.exceptions import NON_FIELD_ERRORS

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")
CENTS = Decimal("0.01")

# Wire names that do not map one-to-one onto form fields
FIELD_ALIASES = {
    "client_id": "client",
    "iva": "tax",
}


def camel_to_snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def payload_to_form_data(payload: dict) -> dict:
    data = {}
    for key, value in payload.items():
        field = camel_to_snake(key)
        data[FIELD_ALIASES.get(field, field)] = value
    return data


def error_key(field: str) -> str:
    return "nonFieldErrors" if field == NON_FIELD_ERRORS else snake_to_camel(field)


def form_errors(form) -> dict:
    """All field errors of a bound form, keyed by wire name."""
    return {error_key(field): [str(message) for message in messages] for field, messages in form.errors.items()}


def _money(value):
    return None if value is None else Decimal(value).quantize(CENTS)


def _ledger_fields(entry) -> dict:
    return {
        "id": entry.pk,
        "type": entry.type,
        "category": entry.category,
        "amount": _money(entry.amount),
        "description": entry.description,
        "notes": entry.notes,
        "subtotal": _money(entry.subtotal),
        "tax": _money(entry.tax),
        "provider": entry.provider,
        "rfc": entry.rfc,
        "clientId": entry.client_id,
        "createdAt": entry.created_at,
        "updatedAt": entry.updated_at,
    }


def serialize_transaction(tx) -> dict:
    data = _ledger_fields(tx)
    data.update({
        "date": tx.date,
        "invoiceNumber": tx.invoice_number,
        "isPaid": tx.is_paid,
        "paidDate": tx.paid_date,
        "recurringTemplateId": tx.recurring_template_id,
        "isRecurringInstance": tx.is_recurring_instance,
        "scheduledDate": tx.scheduled_date,
        "source": tx.source,
        "sourceId": tx.source_id,
    })
    return data


def serialize_template(template) -> dict:
    data = _ledger_fields(template)
    data.update({
        "name": template.name,
        "frequency": template.frequency,
        "dayOfMonth": template.day_of_month,
        "dayOfWeek": template.day_of_week,
        "isActive": template.is_active,
        "nextExecutionDate": template.next_execution_date,
        "lastExecutionDate": template.last_execution_date,
    })
    return data


def serialize_summary(summary: dict) -> dict:
    return {
        "startDate": summary["start_date"],
        "endDate": summary["end_date"],
        "totalIncome": summary["total_income"],
        "totalExpenses": summary["total_expenses"],
        "netProfit": summary["net_profit"],
        "cashFlow": summary["cash_flow"],
        "incomeByCategory": summary["income_by_category"],
        "expensesByCategory": summary["expenses_by_category"],
        "monthlyData": summary["monthly_data"],
    }


def serialize_report(report) -> dict:
    return {
        "count": report.count,
        "transactions": [serialize_transaction(tx) for tx in report.created],
        "failures": report.failures,
    }
