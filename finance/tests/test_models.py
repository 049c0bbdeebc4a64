from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from hypothesis import given, settings, strategies as st

from finance.models import (
    ExpenseCategory,
    IncomeCategory,
    RecurringTransaction,
    Transaction,
    TransactionType,
    categories_for,
)
from finance.utils.date_helpers import js_weekday

from .factories import RecurringTransactionFactory, TransactionFactory

Frequency = RecurringTransaction.Frequency


def test_categories_are_partitioned_by_type():
    income = set(categories_for(TransactionType.INCOME))
    expense = set(categories_for(TransactionType.EXPENSE))
    assert income == set(IncomeCategory.values)
    assert expense == set(ExpenseCategory.values)
    assert not income & expense
    assert categories_for("transfer") == []


@pytest.mark.django_db
def test_subtotal_defaults_tax_and_total():
    tx = TransactionFactory(subtotal=Decimal("1000.00"), tax=None, amount=Decimal("1"))
    tx.refresh_from_db()
    assert tx.tax == Decimal("160.00")
    assert tx.amount == Decimal("1160.00")


@pytest.mark.django_db
def test_explicit_tax_is_kept():
    tx = TransactionFactory(subtotal=Decimal("500.00"), tax=Decimal("0.00"))
    assert tx.tax == Decimal("0.00")
    assert tx.amount == Decimal("500.00")


@pytest.mark.django_db
def test_paid_date_follows_is_paid():
    tx = TransactionFactory(is_paid=True, date=date(2025, 2, 10))
    assert tx.paid_date == date(2025, 2, 10)

    tx.is_paid = False
    tx.save()
    tx.refresh_from_db()
    assert tx.paid_date is None


@pytest.mark.django_db
def test_category_must_match_type_in_database():
    with pytest.raises(IntegrityError), transaction.atomic():
        Transaction.objects.create(
            type=TransactionType.INCOME,
            category=ExpenseCategory.RENT,
            amount=Decimal("10.00"),
            date=date(2025, 1, 1),
        )


@pytest.mark.django_db
def test_amount_must_be_positive_in_database():
    with pytest.raises(IntegrityError), transaction.atomic():
        TransactionFactory(amount=Decimal("0.00"))


def test_full_clean_reports_category_mismatch():
    tx = Transaction(
        type=TransactionType.EXPENSE,
        category=IncomeCategory.RETAINER,
        amount=Decimal("10.00"),
        date=date(2025, 1, 1),
    )
    with pytest.raises(ValidationError) as exc:
        tx.clean()
    assert "category" in exc.value.message_dict


@pytest.mark.django_db
def test_monthly_template_keeps_its_day_of_month():
    template = RecurringTransactionFactory(next_execution_date=date(2025, 1, 31))
    assert template.day_of_month == 31
    assert template.day_of_week is None


@pytest.mark.django_db
def test_weekly_template_derives_day_of_week():
    # 2025-03-05 is a Wednesday
    template = RecurringTransactionFactory(frequency=Frequency.WEEKLY, next_execution_date=date(2025, 3, 5))
    assert template.day_of_week == 3
    assert template.day_of_month is None


@pytest.mark.parametrize(
    "frequency, day_of_month, after, expected",
    [
        (Frequency.MONTHLY, 31, date(2025, 1, 31), date(2025, 2, 28)),
        (Frequency.MONTHLY, 31, date(2024, 1, 31), date(2024, 2, 29)),
        (Frequency.MONTHLY, 31, date(2025, 2, 28), date(2025, 3, 31)),
        (Frequency.QUARTERLY, 30, date(2025, 11, 30), date(2026, 2, 28)),
        (Frequency.YEARLY, None, date(2024, 2, 29), date(2025, 2, 28)),
        (Frequency.YEARLY, 29, date(2027, 2, 28), date(2028, 2, 29)),
        (Frequency.BIWEEKLY, None, date(2025, 3, 1), date(2025, 3, 15)),
    ],
)
def test_date_after(frequency, day_of_month, after, expected):
    template = RecurringTransaction(frequency=frequency, day_of_month=day_of_month)
    assert template.date_after(after) == expected


def test_is_paid_for():
    template = RecurringTransaction(last_execution_date=date(2025, 3, 2))
    assert template.is_paid_for(2025, 3)
    assert not template.is_paid_for(2025, 4)
    assert not RecurringTransaction().is_paid_for(2025, 3)


@given(
    after=st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31)),
    day=st.integers(min_value=1, max_value=31),
)
@settings(max_examples=200, deadline=None)
def test_monthly_advance_lands_in_next_month(after, day):
    template = RecurringTransaction(frequency=Frequency.MONTHLY, day_of_month=day)
    result = template.date_after(after)
    assert result > after
    assert result.year * 12 + result.month == after.year * 12 + after.month + 1
    assert result.day == day or (result + timedelta(days=1)).day == 1


@given(
    after=st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31)),
    dow=st.integers(min_value=0, max_value=6),
)
@settings(max_examples=200, deadline=None)
def test_weekly_advance_hits_weekday_within_a_week(after, dow):
    template = RecurringTransaction(frequency=Frequency.WEEKLY, day_of_week=dow)
    result = template.date_after(after)
    assert after < result <= after + timedelta(days=7)
    assert js_weekday(result) == dow


@pytest.mark.django_db
def test_yearly_template_keeps_its_anchor_day():
    template = RecurringTransactionFactory(frequency=Frequency.YEARLY, next_execution_date=date(2024, 2, 29))
    assert template.day_of_month == 29

    current = template.next_execution_date
    seen = []
    for _ in range(4):
        current = template.date_after(current)
        seen.append(current)

    assert seen == [date(2025, 2, 28), date(2026, 2, 28), date(2027, 2, 28), date(2028, 2, 29)]
