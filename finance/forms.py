# forms.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from django import forms
from django.forms.models import model_to_dict
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.utils.translation import gettext_lazy as _

from .models import RecurringTransaction, Transaction, TransactionType
from .validators import validate_date_range

logger = logging.getLogger(__name__)


class LenientDateField(forms.DateField):
    """DateField that also accepts ISO-8601 timestamps as sent by JavaScript clients."""

    def to_python(self, value):
        if isinstance(value, str) and "T" in value:
            parsed = parse_datetime(value.strip())
            if parsed is not None:
                if timezone.is_aware(parsed):
                    return timezone.localdate(parsed)
                return parsed.date()
        if isinstance(value, datetime):
            return value.date()
        return super().to_python(value)


class LedgerEntryForm(forms.ModelForm):
    """Shared create/update plumbing for ledger model forms fed from JSON bodies."""

    create_defaults: dict[str, Any] = {}

    @classmethod
    def for_create(cls, payload: dict) -> LedgerEntryForm:
        data = dict(cls.create_defaults)
        data.update(payload)
        return cls(data=data)

    @classmethod
    def for_update(cls, instance, payload: dict) -> LedgerEntryForm:
        """Validate a partial update against the full resulting record."""
        data = model_to_dict(instance, fields=cls._meta.fields)
        # Changing the subtotal recalculates the default tax unless a tax is sent too
        if "subtotal" in payload and "tax" not in payload:
            data["tax"] = None
        # A bare amount replaces the fiscal breakdown it would contradict
        elif "amount" in payload and "subtotal" not in payload:
            data["subtotal"] = None
            if "tax" not in payload:
                data["tax"] = None
        data.update(payload)
        return cls(data=data, instance=instance)

    def clean(self):
        cleaned_data = super().clean()
        amount = cleaned_data.get("amount")
        subtotal = cleaned_data.get("subtotal")
        if amount is None and subtotal is None and "amount" not in self.errors:
            self.add_error("amount", _("This field is required."))
        return cleaned_data


class TransactionForm(LedgerEntryForm):
    """Form for creating or editing ledger transactions."""

    date = LenientDateField()
    paid_date = LenientDateField(required=False)

    class Meta:
        model = Transaction
        fields = [
            "type",
            "category",
            "amount",
            "date",
            "description",
            "notes",
            "subtotal",
            "tax",
            "provider",
            "rfc",
            "invoice_number",
            "is_paid",
            "paid_date",
            "client",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["amount"].required = False


class RecurringTransactionForm(LedgerEntryForm):
    """Form for recurring templates; ``already_paid`` only applies on create."""

    next_execution_date = LenientDateField()
    last_execution_date = LenientDateField(required=False)
    already_paid = forms.BooleanField(required=False)

    create_defaults = {"is_active": True, "frequency": RecurringTransaction.Frequency.MONTHLY}

    class Meta:
        model = RecurringTransaction
        fields = [
            "name",
            "type",
            "category",
            "amount",
            "frequency",
            "day_of_month",
            "day_of_week",
            "next_execution_date",
            "last_execution_date",
            "is_active",
            "client",
            "description",
            "notes",
            "subtotal",
            "tax",
            "provider",
            "rfc",
        ]

    @classmethod
    def for_create(cls, payload: dict) -> RecurringTransactionForm:
        payload = dict(payload)
        payload.setdefault("next_execution_date", timezone.localdate())
        return super().for_create(payload)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["amount"].required = False

    def clean(self):
        cleaned_data = super().clean()
        next_date = cleaned_data.get("next_execution_date")
        last_date = cleaned_data.get("last_execution_date")
        if next_date and last_date and next_date < last_date:
            self.add_error(
                "next_execution_date",
                _("Next execution date cannot be before the last execution date."),
            )
        return cleaned_data


class ObligationPaymentForm(forms.Form):
    paid_date = LenientDateField(required=False)


class SummaryRangeForm(forms.Form):
    start_date = LenientDateField(required=False)
    end_date = LenientDateField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        try:
            validate_date_range(cleaned_data.get("start_date"), cleaned_data.get("end_date"))
        except forms.ValidationError as exc:
            self.add_error("start_date", exc)
        return cleaned_data


class TransactionFilterForm(SummaryRangeForm):
    type = forms.ChoiceField(choices=TransactionType.choices, required=False)


class ObligationMonthForm(forms.Form):
    year = forms.IntegerField(required=False, min_value=1900, max_value=2100)
    month = forms.IntegerField(required=False, min_value=1, max_value=12)

    def resolve(self, today):
        """Return (year, month), defaulting to the month of ``today``."""
        return (
            self.cleaned_data.get("year") or today.year,
            self.cleaned_data.get("month") or today.month,
        )
