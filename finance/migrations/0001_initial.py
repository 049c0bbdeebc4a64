import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import finance.validators


INCOME_CATEGORIES = ['retainer', 'project', 'consulting', 'ad_management', 'commission', 'other_income']
EXPENSE_CATEGORIES = [
    'payroll', 'freelancers', 'software', 'advertising', 'rent',
    'utilities', 'taxes', 'equipment', 'operations', 'other_expense',
]

CATEGORY_CHOICES = [
    ('retainer', 'Retainer'),
    ('project', 'Project fee'),
    ('consulting', 'Consulting'),
    ('ad_management', 'Ad management'),
    ('commission', 'Commission'),
    ('other_income', 'Other income'),
    ('payroll', 'Payroll'),
    ('freelancers', 'Freelancers'),
    ('software', 'Software & subscriptions'),
    ('advertising', 'Ad spend'),
    ('rent', 'Rent'),
    ('utilities', 'Utilities'),
    ('taxes', 'Taxes'),
    ('equipment', 'Equipment'),
    ('operations', 'Operations'),
    ('other_expense', 'Other expense'),
]

TYPE_CHOICES = [('income', 'Income'), ('expense', 'Expense')]

CATEGORY_MATCHES_TYPE = (
    models.Q(type='income', category__in=INCOME_CATEGORIES)
    | models.Q(type='expense', category__in=EXPENSE_CATEGORIES)
)


def ledger_fields():
    return [
        ('type', models.CharField(choices=TYPE_CHOICES, max_length=10)),
        ('category', models.CharField(choices=CATEGORY_CHOICES, max_length=32)),
        ('amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[finance.validators.validate_money_amount])),
        ('description', models.CharField(blank=True, max_length=255)),
        ('notes', models.TextField(blank=True)),
        ('subtotal', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True, validators=[finance.validators.validate_money_amount])),
        ('tax', models.DecimalField(blank=True, decimal_places=2, help_text='IVA; defaults to FINANCE_DEFAULT_TAX_RATE of the subtotal', max_digits=14, null=True, validators=[finance.validators.validate_tax_amount])),
        ('provider', models.CharField(blank=True, max_length=150)),
        ('rfc', models.CharField(blank=True, help_text='Tax id of the counterparty', max_length=13)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(max_length=150, unique=True)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'clients',
                'ordering': ('company_name',),
            },
        ),
        migrations.CreateModel(
            name='RecurringTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *ledger_fields(),
                ('name', models.CharField(max_length=120)),
                ('frequency', models.CharField(choices=[('weekly', 'Weekly'), ('biweekly', 'Biweekly'), ('monthly', 'Monthly'), ('quarterly', 'Quarterly'), ('yearly', 'Yearly')], default='monthly', max_length=10)),
                ('day_of_month', models.PositiveSmallIntegerField(blank=True, help_text='Used by monthly, quarterly and yearly templates', null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)])),
                ('day_of_week', models.PositiveSmallIntegerField(blank=True, help_text='Used by weekly templates (0 = Sunday)', null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(6)])),
                ('is_active', models.BooleanField(default=True)),
                ('next_execution_date', models.DateField()),
                ('last_execution_date', models.DateField(blank=True, null=True)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recurring_transactions', to='finance.client')),
            ],
            options={
                'db_table': 'recurring_transactions',
                'ordering': ('-next_execution_date', '-id'),
                'indexes': [
                    models.Index(fields=['is_active', 'next_execution_date'], name='recurring_t_is_acti_6f1c2e_idx'),
                    models.Index(fields=['type', 'is_active'], name='recurring_t_type_3b8d41_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=CATEGORY_MATCHES_TYPE, name='recurring_category_matches_type', violation_error_message='Category does not belong to the transaction type.'),
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name='recurring_amount_positive'),
                    models.CheckConstraint(condition=models.Q(day_of_month__isnull=True) | models.Q(day_of_month__gte=1, day_of_month__lte=31), name='recurring_day_of_month_range'),
                    models.CheckConstraint(condition=models.Q(day_of_week__isnull=True) | models.Q(day_of_week__lte=6), name='recurring_day_of_week_range'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *ledger_fields(),
                ('date', models.DateField()),
                ('invoice_number', models.CharField(blank=True, max_length=64)),
                ('is_paid', models.BooleanField(default=False)),
                ('paid_date', models.DateField(blank=True, null=True)),
                ('is_recurring_instance', models.BooleanField(default=False)),
                ('scheduled_date', models.DateField(blank=True, help_text='Template execution date this instance covered', null=True)),
                ('source', models.CharField(choices=[('manual', 'Manual'), ('recurring_template', 'Recurring template')], default='manual', max_length=32)),
                ('source_id', models.PositiveIntegerField(blank=True, null=True)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transactions', to='finance.client')),
                ('recurring_template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='instances', to='finance.recurringtransaction')),
            ],
            options={
                'db_table': 'transactions',
                'ordering': ('-date', '-id'),
                'indexes': [
                    models.Index(fields=['date'], name='transaction_date_9a7c10_idx'),
                    models.Index(fields=['type', 'date'], name='transaction_type_4e2b77_idx'),
                    models.Index(fields=['recurring_template', 'date'], name='transaction_recurri_c05d93_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=CATEGORY_MATCHES_TYPE, name='transaction_category_matches_type', violation_error_message='Category does not belong to the transaction type.'),
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name='transaction_amount_positive'),
                ],
            },
        ),
    ]
