# finance/admin.py

from django.contrib import admin

from .models import Client, RecurringTransaction, Transaction


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("company_name", "contact_email", "is_active")
    list_filter = ("is_active",)
    search_fields = ("company_name", "contact_email")


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("date", "type", "category", "amount", "client", "is_paid", "source")
    list_filter = ("type", "category", "is_paid", "source")
    search_fields = ("description", "notes", "invoice_number", "provider", "rfc")
    autocomplete_fields = ("client",)
    date_hierarchy = "date"


@admin.register(RecurringTransaction)
class RecurringTransactionAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "amount", "frequency", "next_execution_date", "last_execution_date", "is_active")
    list_filter = ("type", "frequency", "is_active")
    search_fields = ("name", "description", "provider")
    autocomplete_fields = ("client",)
