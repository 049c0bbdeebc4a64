import logging

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from finance.models import RecurringTransaction
from finance.services.recurring import RecurringObligationService, local_today

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Execute every active recurring template that is due'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Run as of this date (YYYY-MM-DD); defaults to today'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List due templates without creating transactions'
        )

    def handle(self, *args, **options):
        as_of = local_today()
        if options.get('date'):
            as_of = parse_date(options['date'])
            if as_of is None:
                raise CommandError(f"Invalid date: {options['date']}")

        if options.get('dry_run'):
            due = RecurringTransaction.objects.filter(
                is_active=True, next_execution_date__lte=as_of
            ).order_by('next_execution_date', 'id')
            for template in due:
                self.stdout.write(f"{template.pk}: {template.name} due {template.next_execution_date}")
            self.stdout.write(self.style.WARNING(f"Dry run: {due.count()} template(s) due as of {as_of}"))
            return

        report = RecurringObligationService().execute_pending_recurring_transactions(now=as_of)

        for failure in report.failures:
            self.stdout.write(
                self.style.ERROR(f"Template {failure['templateId']}: {failure['error']}")
            )
        self.stdout.write(
            self.style.SUCCESS(f"{report.count} recurring transaction(s) created as of {as_of}")
        )
