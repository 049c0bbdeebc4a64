# models.py

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q

from .utils.date_helpers import add_months_clamped, js_weekday, next_weekday, same_month
from .validators import validate_category_for_type, validate_money_amount, validate_tax_amount

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


# --------------------------------------------------------------------------------
# Types & categories
# --------------------------------------------------------------------------------

class TransactionType(models.TextChoices):
    INCOME = "income", "Income"
    EXPENSE = "expense", "Expense"


class IncomeCategory(models.TextChoices):
    RETAINER = "retainer", "Retainer"
    PROJECT = "project", "Project fee"
    CONSULTING = "consulting", "Consulting"
    AD_MANAGEMENT = "ad_management", "Ad management"
    COMMISSION = "commission", "Commission"
    OTHER_INCOME = "other_income", "Other income"


class ExpenseCategory(models.TextChoices):
    PAYROLL = "payroll", "Payroll"
    FREELANCERS = "freelancers", "Freelancers"
    SOFTWARE = "software", "Software & subscriptions"
    ADVERTISING = "advertising", "Ad spend"
    RENT = "rent", "Rent"
    UTILITIES = "utilities", "Utilities"
    TAXES = "taxes", "Taxes"
    EQUIPMENT = "equipment", "Equipment"
    OPERATIONS = "operations", "Operations"
    OTHER_EXPENSE = "other_expense", "Other expense"


CATEGORIES_BY_TYPE = {
    TransactionType.INCOME: IncomeCategory,
    TransactionType.EXPENSE: ExpenseCategory,
}

CATEGORY_CHOICES = IncomeCategory.choices + ExpenseCategory.choices


def categories_for(tx_type) -> list[str]:
    """Return the category values allowed for a transaction type."""
    choices = CATEGORIES_BY_TYPE.get(tx_type)
    return list(choices.values) if choices else []


def category_matches_type() -> Q:
    return (
        Q(type=TransactionType.INCOME, category__in=IncomeCategory.values)
        | Q(type=TransactionType.EXPENSE, category__in=ExpenseCategory.values)
    )


# --------------------------------------------------------------------------------
# Clients
# --------------------------------------------------------------------------------

class Client(models.Model):
    """Agency client that ledger entries can be attributed to."""

    company_name = models.CharField(max_length=150, unique=True)
    contact_email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "clients"
        ordering = ("company_name",)

    def __str__(self):
        return self.company_name


# --------------------------------------------------------------------------------
# Ledger
# --------------------------------------------------------------------------------

class LedgerEntry(models.Model):
    """Fields shared by ledger transactions and recurring templates."""

    type = models.CharField(max_length=10, choices=TransactionType.choices)
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES)
    amount = models.DecimalField(max_digits=14, decimal_places=2, validators=[validate_money_amount])
    description = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    # Fiscal data
    subtotal = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, validators=[validate_money_amount]
    )
    tax = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[validate_tax_amount],
        help_text="IVA; defaults to FINANCE_DEFAULT_TAX_RATE of the subtotal",
    )
    provider = models.CharField(max_length=150, blank=True)
    rfc = models.CharField(max_length=13, blank=True, help_text="Tax id of the counterparty")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def clean(self):
        super().clean()
        validate_category_for_type(self.type, self.category)

    def apply_tax_totals(self):
        """When a subtotal is present the total is always subtotal + tax."""
        if self.subtotal is None or self.subtotal <= 0:
            return
        subtotal = Decimal(self.subtotal)
        if self.tax is None:
            rate = Decimal(str(settings.FINANCE_DEFAULT_TAX_RATE))
            self.tax = (subtotal * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
        self.subtotal = subtotal.quantize(CENTS, rounding=ROUND_HALF_UP)
        self.amount = (self.subtotal + Decimal(self.tax)).quantize(CENTS, rounding=ROUND_HALF_UP)


class RecurringTransaction(LedgerEntry):
    """Template that materializes ledger transactions on a schedule."""

    class Frequency(models.TextChoices):
        WEEKLY = "weekly", "Weekly"
        BIWEEKLY = "biweekly", "Biweekly"
        MONTHLY = "monthly", "Monthly"
        QUARTERLY = "quarterly", "Quarterly"
        YEARLY = "yearly", "Yearly"

    name = models.CharField(max_length=120)
    frequency = models.CharField(max_length=10, choices=Frequency.choices, default=Frequency.MONTHLY)
    day_of_month = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Used by monthly, quarterly and yearly templates",
    )
    day_of_week = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(6)],
        help_text="Used by weekly templates (0 = Sunday)",
    )
    client = models.ForeignKey(
        Client,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recurring_transactions",
    )
    is_active = models.BooleanField(default=True)
    next_execution_date = models.DateField()
    last_execution_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "recurring_transactions"
        ordering = ("-next_execution_date", "-id")
        indexes = [
            models.Index(fields=["is_active", "next_execution_date"], name="recurring_t_is_acti_6f1c2e_idx"),
            models.Index(fields=["type", "is_active"], name="recurring_t_type_3b8d41_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=category_matches_type(),
                name="recurring_category_matches_type",
                violation_error_message="Category does not belong to the transaction type.",
            ),
            models.CheckConstraint(condition=Q(amount__gt=0), name="recurring_amount_positive"),
            models.CheckConstraint(
                condition=Q(day_of_month__isnull=True) | Q(day_of_month__gte=1, day_of_month__lte=31),
                name="recurring_day_of_month_range",
            ),
            models.CheckConstraint(
                condition=Q(day_of_week__isnull=True) | Q(day_of_week__lte=6),
                name="recurring_day_of_week_range",
            ),
        ]

    def __str__(self):
        return f"{self.name} – {self.amount} ({self.frequency})"

    def normalize_schedule(self):
        """Keep only the day field that applies to the frequency."""
        if self.frequency in (self.Frequency.MONTHLY, self.Frequency.QUARTERLY, self.Frequency.YEARLY):
            self.day_of_week = None
            if not self.day_of_month and self.next_execution_date:
                self.day_of_month = self.next_execution_date.day
        elif self.frequency == self.Frequency.WEEKLY:
            self.day_of_month = None
            if self.day_of_week is None and self.next_execution_date:
                self.day_of_week = js_weekday(self.next_execution_date)
        else:
            self.day_of_month = None
            self.day_of_week = None

    def date_after(self, after: date) -> date:
        """Advance ``after`` by exactly one period of this template's frequency."""
        if self.frequency == self.Frequency.WEEKLY:
            if self.day_of_week is None:
                return after + timedelta(days=7)
            return next_weekday(after, self.day_of_week)
        if self.frequency == self.Frequency.BIWEEKLY:
            return after + timedelta(days=14)
        if self.frequency == self.Frequency.QUARTERLY:
            return add_months_clamped(after, 3, self.day_of_month)
        if self.frequency == self.Frequency.YEARLY:
            return add_months_clamped(after, 12, self.day_of_month)
        return add_months_clamped(after, 1, self.day_of_month)

    def is_paid_for(self, year: int, month: int) -> bool:
        """True when the template was already executed in the given month."""
        return same_month(self.last_execution_date, date(year, month, 1))

    def save(self, *args, **kwargs):
        self.apply_tax_totals()
        self.normalize_schedule()
        super().save(*args, **kwargs)


class Transaction(LedgerEntry):
    """Income or expense entry in the agency ledger."""

    class Source(models.TextChoices):
        MANUAL = "manual", "Manual"
        RECURRING_TEMPLATE = "recurring_template", "Recurring template"

    date = models.DateField()
    invoice_number = models.CharField(max_length=64, blank=True)
    is_paid = models.BooleanField(default=False)
    paid_date = models.DateField(null=True, blank=True)
    client = models.ForeignKey(
        Client,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )

    # Provenance; the template link is nulled (not cascaded) when the template goes away
    recurring_template = models.ForeignKey(
        RecurringTransaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="instances",
    )
    is_recurring_instance = models.BooleanField(default=False)
    scheduled_date = models.DateField(
        null=True,
        blank=True,
        help_text="Template execution date this instance covered",
    )
    source = models.CharField(max_length=32, choices=Source.choices, default=Source.MANUAL)
    source_id = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = "transactions"
        ordering = ("-date", "-id")
        indexes = [
            models.Index(fields=["date"], name="transaction_date_9a7c10_idx"),
            models.Index(fields=["type", "date"], name="transaction_type_4e2b77_idx"),
            models.Index(fields=["recurring_template", "date"], name="transaction_recurri_c05d93_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=category_matches_type(),
                name="transaction_category_matches_type",
                violation_error_message="Category does not belong to the transaction type.",
            ),
            models.CheckConstraint(condition=Q(amount__gt=0), name="transaction_amount_positive"),
        ]

    def __str__(self):
        return f"{self.date} {self.get_type_display()} {self.amount}"

    def save(self, *args, **kwargs):
        """Apply tax totals and keep paid_date in sync with is_paid."""
        self.apply_tax_totals()

        if self.is_paid and not self.paid_date:
            self.paid_date = self.date
        elif not self.is_paid:
            self.paid_date = None

        super().save(*args, **kwargs)
