# finance/signals.py

import logging

from django.db.models.signals import post_save, pre_delete
from django.dispatch import receiver

from .models import RecurringTransaction, Transaction

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Transaction)
def log_transaction_created(sender, instance, created, **kwargs):
    """Debug trail of new ledger entries."""
    if not created:
        return
    if instance.is_recurring_instance:
        logger.debug(f"Recurring instance created: {instance} (template {instance.recurring_template_id})")
    else:
        logger.debug(f"Transaction created: {instance}")


@receiver(pre_delete, sender=RecurringTransaction)
def log_template_deleted(sender, instance, **kwargs):
    """
    Generated transactions are kept when a template is deleted; their
    template link is nulled by the foreign key.
    """
    kept = instance.instances.count()
    if kept:
        logger.info(f"Deleting recurring template {instance.pk}; {kept} generated transaction(s) kept")
