from django.urls import path

from . import views

urlpatterns = [
    # Transactions
    path("transactions", views.transactions_collection, name="transactions"),
    path("transactions/<int:pk>", views.transaction_detail, name="transaction_detail"),

    # Recurring transactions
    path("recurring-transactions", views.recurring_collection, name="recurring_transactions"),
    path(
        "recurring-transactions/execute-pending",
        views.recurring_execute_pending,
        name="recurring_execute_pending",
    ),
    path("recurring-transactions/<int:pk>", views.recurring_detail, name="recurring_detail"),
    path("recurring-transactions/<int:pk>/execute", views.recurring_execute, name="recurring_execute"),

    # Summary & monthly obligations
    path("finance/summary", views.financial_summary, name="financial_summary"),
    path("finance/obligations/payables", views.obligations_payables, name="obligations_payables"),
    path("finance/obligations/receivables", views.obligations_receivables, name="obligations_receivables"),
    path("finance/obligations/<int:pk>/pay", views.obligation_pay, name="obligation_pay"),
    path("finance/obligations/<int:pk>/unpay", views.obligation_unpay, name="obligation_unpay"),
]
