import logging
from datetime import date, datetime
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Q, Sum
from django.db.models.functions import TruncMonth

from ..models import Transaction, TransactionType
from ..utils.date_helpers import iter_months, month_label
from ..validators import validate_date_range
from .recurring import local_today

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def default_window(end: date, months: int | None = None):
    """Trailing window of ``months`` calendar months ending on ``end``."""
    months = months or settings.FINANCE_SUMMARY_MONTHS
    start = date(end.year, end.month, 1) - relativedelta(months=months - 1)
    return start, end


def _money(value) -> Decimal:
    return (value or ZERO).quantize(Decimal("0.01"))


def get_financial_summary(start_date=None, end_date=None, now=None) -> dict:
    """
    Aggregate the ledger between ``start_date`` and ``end_date`` (inclusive).

    Missing bounds fall back to a trailing window ending today. The monthly
    series has one bucket per calendar month of the window, oldest first,
    including months without transactions. A start after the resolved end
    raises ``ValidationError`` on ``start_date``.
    """
    end = end_date or local_today(now)
    start = start_date or default_window(end)[0]
    try:
        validate_date_range(start, end)
    except ValidationError as exc:
        raise ValidationError({"start_date": exc.messages})

    qs = Transaction.objects.filter(date__gte=start, date__lte=end)

    totals = qs.aggregate(
        income=Sum("amount", filter=Q(type=TransactionType.INCOME)),
        expenses=Sum("amount", filter=Q(type=TransactionType.EXPENSE)),
    )
    total_income = _money(totals["income"])
    total_expenses = _money(totals["expenses"])
    net = total_income - total_expenses

    income_by_category = {}
    expenses_by_category = {}
    for row in qs.values("type", "category").annotate(total=Sum("amount")).order_by("type", "category"):
        target = income_by_category if row["type"] == TransactionType.INCOME else expenses_by_category
        target[row["category"]] = _money(row["total"])

    buckets = {
        month_label(m): {"month": month_label(m), "label": m.strftime("%b"), "income": ZERO, "expenses": ZERO}
        for m in iter_months(start, end)
    }
    monthly_rows = (
        qs.annotate(bucket=TruncMonth("date"))
        .values("bucket", "type")
        .annotate(total=Sum("amount"))
        .order_by("bucket")
    )
    for row in monthly_rows:
        bucket = row["bucket"]
        if isinstance(bucket, datetime):
            bucket = bucket.date()
        entry = buckets.get(month_label(bucket))
        if entry is None:
            continue
        key = "income" if row["type"] == TransactionType.INCOME else "expenses"
        entry[key] = _money(row["total"])

    logger.debug(f"Financial summary {start}..{end}: income={total_income} expenses={total_expenses}")

    return {
        "start_date": start,
        "end_date": end,
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net_profit": net,
        # No accrual model: cash flow is the same figure as net profit
        "cash_flow": net,
        "income_by_category": income_by_category,
        "expenses_by_category": expenses_by_category,
        "monthly_data": list(buckets.values()),
    }
