from datetime import date
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from finance.forms import (
    ObligationMonthForm,
    RecurringTransactionForm,
    SummaryRangeForm,
    TransactionForm,
)
from finance.serializers import form_errors, payload_to_form_data

from .factories import TransactionFactory


@pytest.mark.django_db
def test_transaction_form_reports_every_missing_field():
    form = TransactionForm.for_create({})
    assert not form.is_valid()
    assert {"type", "category", "amount", "date"} <= set(form.errors)


@pytest.mark.django_db
def test_transaction_form_rejects_category_of_other_type():
    form = TransactionForm.for_create(
        {"type": "income", "category": "rent", "amount": "10.00", "date": "2025-03-01"}
    )
    assert not form.is_valid()
    assert "category" in form.errors


@pytest.mark.django_db
@pytest.mark.parametrize("amount", ["0", "-5", "10.123", "1000000000.00"])
def test_transaction_form_rejects_bad_amounts(amount):
    form = TransactionForm.for_create(
        {"type": "expense", "category": "software", "amount": amount, "date": "2025-03-01"}
    )
    assert not form.is_valid()
    assert "amount" in form.errors


@pytest.mark.django_db
def test_transaction_form_accepts_iso_timestamps_and_subtotal_only():
    form = TransactionForm.for_create(
        {
            "type": "expense",
            "category": "software",
            "subtotal": Decimal("100.00"),
            "date": "2025-03-01T00:00:00Z",
        }
    )
    assert form.is_valid(), form.errors
    tx = form.save()
    assert tx.date == date(2025, 3, 1)
    assert tx.amount == Decimal("116.00")


@pytest.mark.django_db
def test_partial_update_recomputes_tax_for_new_subtotal():
    tx = TransactionFactory(subtotal=Decimal("100.00"))
    form = TransactionForm.for_update(tx, {"subtotal": Decimal("200.00")})
    assert form.is_valid(), form.errors
    tx = form.save()
    assert tx.tax == Decimal("32.00")
    assert tx.amount == Decimal("232.00")


@pytest.mark.django_db
def test_partial_update_keeps_other_fields():
    tx = TransactionFactory(description="Retainer March", amount=Decimal("900.00"))
    form = TransactionForm.for_update(tx, {"notes": "paid by wire"})
    assert form.is_valid(), form.errors
    tx = form.save()
    assert tx.description == "Retainer March"
    assert tx.amount == Decimal("900.00")
    assert tx.notes == "paid by wire"


@pytest.mark.django_db
def test_recurring_form_defaults():
    form = RecurringTransactionForm.for_create(
        {"name": "Figma", "type": "expense", "category": "software", "amount": "45.00"}
    )
    assert form.is_valid(), form.errors
    assert form.cleaned_data["frequency"] == "monthly"
    assert form.cleaned_data["is_active"] is True
    assert form.cleaned_data["next_execution_date"] is not None
    assert form.cleaned_data["already_paid"] is False


@pytest.mark.django_db
def test_recurring_form_rejects_next_before_last():
    form = RecurringTransactionForm.for_create(
        {
            "name": "Rent",
            "type": "expense",
            "category": "rent",
            "amount": "100.00",
            "next_execution_date": "2025-03-01",
            "last_execution_date": "2025-03-05",
        }
    )
    assert not form.is_valid()
    assert "next_execution_date" in form.errors


def test_summary_range_rejects_inverted_dates():
    form = SummaryRangeForm({"start_date": "2025-03-01", "end_date": "2025-01-01"})
    assert not form.is_valid()
    assert "start_date" in form.errors


def test_obligation_month_defaults_to_today():
    form = ObligationMonthForm({})
    assert form.is_valid()
    assert form.resolve(date(2025, 7, 9)) == (2025, 7)

    form = ObligationMonthForm({"month": "13"})
    assert not form.is_valid()


@pytest.mark.django_db
def test_form_errors_use_wire_names():
    form = RecurringTransactionForm.for_create(payload_to_form_data({"dayOfMonth": 40}))
    assert not form.is_valid()
    errors = form_errors(form)
    assert "dayOfMonth" in errors
    assert "name" in errors


@pytest.mark.django_db
@given(
    amount=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("999999999.99"), places=2),
)
@settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_any_two_place_positive_amount_is_accepted(amount):
    form = TransactionForm.for_create(
        {"type": "income", "category": "consulting", "amount": amount, "date": "2025-03-01"}
    )
    assert form.is_valid(), form.errors
