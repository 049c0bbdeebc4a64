from datetime import date
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.utils import timezone

from finance.models import Transaction
from finance.tasks import process_recurring_transactions

from .factories import RecurringTransactionFactory


@pytest.mark.django_db
def test_task_executes_due_templates():
    template = RecurringTransactionFactory(next_execution_date=timezone.localdate())
    RecurringTransactionFactory(next_execution_date=date(2999, 1, 1))

    result = process_recurring_transactions()

    assert result == {"count": 1, "failures": []}
    assert Transaction.objects.get().recurring_template == template
    template.refresh_from_db()
    assert template.next_execution_date > timezone.localdate()


@pytest.mark.django_db
def test_task_runs_eagerly_through_celery():
    RecurringTransactionFactory(next_execution_date=timezone.localdate())
    result = process_recurring_transactions.delay()
    assert result.get()["count"] == 1


@pytest.mark.django_db
def test_command_runs_as_of_date():
    template = RecurringTransactionFactory(next_execution_date=date(2025, 3, 1))
    out = StringIO()

    call_command("execute_recurring", "--date", "2025-03-05", stdout=out)

    assert "1 recurring transaction(s) created as of 2025-03-05" in out.getvalue()
    template.refresh_from_db()
    assert template.last_execution_date == date(2025, 3, 5)
    assert template.next_execution_date == date(2025, 4, 1)


@pytest.mark.django_db
def test_command_dry_run_creates_nothing():
    template = RecurringTransactionFactory(next_execution_date=date(2025, 3, 1))
    out = StringIO()

    call_command("execute_recurring", "--date", "2025-03-05", "--dry-run", stdout=out)

    assert f"{template.pk}: {template.name} due 2025-03-01" in out.getvalue()
    assert "Dry run: 1 template(s) due" in out.getvalue()
    assert Transaction.objects.count() == 0


def test_command_rejects_bad_date():
    with pytest.raises(CommandError):
        call_command("execute_recurring", "--date", "not-a-date")
