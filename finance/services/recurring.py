import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from django.db import transaction as db_transaction
from django.db.models import Min
from django.utils import timezone

from ..exceptions import AlreadyPaid, ConcurrentExecution, FinanceError, TemplateNotFound
from ..models import RecurringTransaction, Transaction, TransactionType
from ..utils.date_helpers import month_bounds


logger = logging.getLogger(__name__)


def local_today(now=None) -> date:
    """Calendar date of ``now`` in the active time zone (defaults to the current instant)."""
    if now is None:
        now = timezone.now()
    if isinstance(now, datetime):
        if timezone.is_naive(now):
            return now.date()
        return timezone.localdate(now)
    return now


@dataclass
class ExecutionReport:
    """Outcome of a batch run: materialized transactions and per-template failures."""

    created: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.created)


class RecurringObligationService:
    """Turns due recurring templates into ledger transactions and tracks monthly obligations."""

    # ------------------------------------------------------------------ helpers

    def _get_template(self, template_id, *, lock=False, active_only=True) -> RecurringTransaction:
        qs = RecurringTransaction.objects.all()
        if lock:
            qs = qs.select_for_update()
        try:
            template = qs.get(pk=template_id)
        except RecurringTransaction.DoesNotExist:
            raise TemplateNotFound(template_id=template_id)
        if active_only and not template.is_active:
            raise TemplateNotFound("Recurring template is inactive", template_id=template_id)
        return template

    def _materialize(self, template: RecurringTransaction, on_date: date) -> Transaction:
        return Transaction.objects.create(
            type=template.type,
            category=template.category,
            amount=template.amount,
            date=on_date,
            is_paid=True,
            paid_date=on_date,
            description=template.description or template.name,
            notes=template.notes,
            subtotal=template.subtotal,
            tax=template.tax,
            provider=template.provider,
            rfc=template.rfc,
            client_id=template.client_id,
            recurring_template=template,
            is_recurring_instance=True,
            scheduled_date=template.next_execution_date,
            source=Transaction.Source.RECURRING_TEMPLATE,
            source_id=template.pk,
        )

    def _advance(self, template: RecurringTransaction, executed_on: date) -> None:
        """
        Move the schedule one period forward (further if it still lags behind
        ``executed_on``) and record the execution.

        The update only applies while ``next_execution_date`` still holds the
        value read under lock; otherwise another worker already advanced it.
        """
        scheduled = template.next_execution_date
        next_date = template.date_after(scheduled)
        while next_date <= executed_on:
            next_date = template.date_after(next_date)

        updated = RecurringTransaction.objects.filter(
            pk=template.pk, next_execution_date=scheduled
        ).update(
            next_execution_date=next_date,
            last_execution_date=executed_on,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ConcurrentExecution(template_id=template.pk)

        template.next_execution_date = next_date
        template.last_execution_date = executed_on

    def _execute(self, template_id, executed_on: date, *, guard_month=False, due_only=False):
        with db_transaction.atomic():
            template = self._get_template(template_id, lock=True)

            if due_only and template.next_execution_date > executed_on:
                logger.debug(f"Template {template_id} no longer due (next {template.next_execution_date})")
                return None

            if guard_month and template.is_paid_for(executed_on.year, executed_on.month):
                raise AlreadyPaid(
                    template_id=template_id,
                    month=executed_on.strftime("%Y-%m"),
                )

            scheduled = template.next_execution_date
            tx = self._materialize(template, executed_on)
            self._advance(template, executed_on)

        logger.info(
            f"Recurring template {template_id} executed on {executed_on} "
            f"(covered {scheduled}, next {template.next_execution_date}) -> transaction {tx.pk}"
        )
        return tx

    # --------------------------------------------------------------- execution

    def execute_recurring_transaction(self, template_id, now=None) -> Transaction:
        """Materialize one template immediately and advance its schedule."""
        return self._execute(template_id, local_today(now))

    def execute_pending_recurring_transactions(self, now=None) -> ExecutionReport:
        """
        Execute every active template whose ``next_execution_date`` is on or
        before today, one at a time.

        Each template runs in its own database transaction; a failure is
        logged and reported without stopping the rest of the batch.
        """
        today = local_today(now)
        report = ExecutionReport()

        due_ids = list(
            RecurringTransaction.objects.filter(is_active=True, next_execution_date__lte=today)
            .order_by("next_execution_date", "id")
            .values_list("id", flat=True)
        )
        logger.info(f"Executing {len(due_ids)} pending recurring template(s) for {today}")

        for template_id in due_ids:
            try:
                tx = self._execute(template_id, today, due_only=True)
            except FinanceError as exc:
                logger.warning(f"Recurring template {template_id} skipped: {exc.message}")
                report.failures.append({"templateId": template_id, "error": exc.message})
                continue
            except Exception:
                logger.exception(f"Failed to execute recurring template {template_id}")
                report.failures.append({"templateId": template_id, "error": "Unexpected error"})
                continue
            if tx is not None:
                report.created.append(tx)

        if report.failures:
            logger.warning(f"{len(report.failures)} recurring template(s) failed during batch execution")
        return report

    def register_template(self, template: RecurringTransaction, *, already_paid=False, now=None):
        """Save a new template; when ``already_paid`` the current obligation is paid today."""
        with db_transaction.atomic():
            template.save()
            payment = None
            if already_paid and template.is_active:
                payment = self.mark_obligation_as_paid(template.pk, now=now)
                template.refresh_from_db()
        return template, payment

    # ------------------------------------------------------------- obligations

    def mark_obligation_as_paid(self, template_id, paid_date=None, now=None) -> Transaction:
        """
        Record the payment (or collection) of an obligation on ``paid_date``.

        Raises ``AlreadyPaid`` when the template already has an execution in
        the month of ``paid_date``.
        """
        paid_on = local_today(paid_date) if paid_date is not None else local_today(now)
        return self._execute(template_id, paid_on, guard_month=True)

    def unpay_obligation(self, template_id) -> RecurringTransaction:
        """
        Revert the paid status of an obligation so it shows up as pending again.

        The generated transactions are kept for the audit trail; only the
        template's execution markers are rolled back. When the template was
        executed more than once that month, the schedule goes back to the
        earliest period those executions covered.
        """
        with db_transaction.atomic():
            template = self._get_template(template_id, lock=True, active_only=False)
            last = template.last_execution_date
            if last is None:
                return template

            # Every period paid during the month of the last execution is reopened
            first_scheduled = Transaction.objects.filter(
                source=Transaction.Source.RECURRING_TEMPLATE,
                source_id=template.pk,
                date__range=month_bounds(last.year, last.month),
            ).aggregate(first=Min("scheduled_date"))["first"]
            fields = ["last_execution_date", "updated_at"]
            if first_scheduled and first_scheduled < template.next_execution_date:
                template.next_execution_date = first_scheduled
                fields.append("next_execution_date")

            template.last_execution_date = None
            template.save(update_fields=fields)

        logger.info(f"Obligation {template_id} reverted to pending (next {template.next_execution_date})")
        return template

    def _outstanding(self, tx_type, year: int, month: int):
        first, last = month_bounds(year, month)
        return (
            RecurringTransaction.objects.filter(
                is_active=True,
                type=tx_type,
                next_execution_date__range=(first, last),
            )
            .exclude(last_execution_date__range=(first, last))
            .select_related("client")
            .order_by("next_execution_date", "id")
        )

    def get_monthly_accounts_payable(self, year: int, month: int):
        """Expense obligations still unpaid for the month."""
        return list(self._outstanding(TransactionType.EXPENSE, year, month))

    def get_monthly_accounts_receivable(self, year: int, month: int):
        """Income obligations still uncollected for the month."""
        return list(self._outstanding(TransactionType.INCOME, year, month))
