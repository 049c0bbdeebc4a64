from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
from decimal import Decimal

MAX_AMOUNT = Decimal('999999999.99')
MAX_RANGE_DAYS = 365 * 10


def validate_money_amount(value):
    """Money amounts are strictly positive with at most 2 decimal places."""
    if value is None:
        return

    if value <= 0:
        raise ValidationError(_('Amount must be greater than zero.'))

    if value > MAX_AMOUNT:
        raise ValidationError(_('Amount is too large.'))

    if value.as_tuple().exponent < -2:
        raise ValidationError(_('Amount cannot have more than 2 decimal places.'))


def validate_tax_amount(value):
    """Tax may be zero but never negative."""
    if value is None:
        return
    if value < 0:
        raise ValidationError(_('Tax cannot be negative.'))
    if value.as_tuple().exponent < -2:
        raise ValidationError(_('Tax cannot have more than 2 decimal places.'))


def validate_category_for_type(tx_type, category):
    """The category must belong to the set of its transaction type."""
    from .models import categories_for

    if not tx_type or not category:
        return
    allowed = categories_for(tx_type)
    if category not in allowed:
        raise ValidationError(
            {'category': _('"%(category)s" is not a valid %(type)s category.') % {
                'category': category,
                'type': tx_type,
            }}
        )


def validate_date_range(start_date, end_date):
    """Start must not follow end and the span is capped at ten years."""
    if start_date and end_date:
        if start_date > end_date:
            raise ValidationError(_('Start date cannot be after end date.'))

        if (end_date - start_date).days > MAX_RANGE_DAYS:
            raise ValidationError(_('Date range cannot exceed 10 years.'))
