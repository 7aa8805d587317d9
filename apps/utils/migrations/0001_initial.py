# apps/utils/migrations/0001_initial.py

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='FinancialAuditLog',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('timestamp', models.DateTimeField(db_index=True, help_text="When this financial action occurred (in school's operational timezone)")),
                ('action', models.CharField(choices=[('BILL_CREATE', 'Bill Created'), ('BILL_STATUS_CHANGE', 'Bill Status Changed'), ('PAYMENT_RECEIVE', 'Payment Received'), ('SAVINGS_DEPOSIT', 'Savings Deposit'), ('SAVINGS_WITHDRAWAL', 'Savings Withdrawal'), ('INCOME_CREATE', 'Other Income Recorded'), ('EXPENSE_CREATE', 'Expense Created'), ('FINANCIAL_REPORT_GENERATE', 'Financial Report Generated'), ('FINANCIAL_DATA_EXPORT', 'Financial Data Exported')], db_index=True, max_length=30)),
                ('user_id', models.CharField(blank=True, db_index=True, help_text='ID of user who performed this action', max_length=100, null=True)),
                ('user_name', models.CharField(blank=True, max_length=200, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('object_type', models.CharField(blank=True, max_length=100, null=True)),
                ('object_id', models.CharField(blank=True, max_length=100, null=True)),
                ('object_description', models.CharField(blank=True, max_length=500, null=True)),
                ('amount_involved', models.DecimalField(blank=True, decimal_places=2, help_text='Monetary amount involved in the action', max_digits=15, null=True)),
                ('currency', models.CharField(blank=True, default='UGX', max_length=3, null=True)),
                ('student_id', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('student_name', models.CharField(blank=True, max_length=200, null=True)),
                ('additional_data', models.JSONField(blank=True, default=dict, help_text='Additional context-specific data')),
                ('notes', models.TextField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Financial Audit Log',
                'verbose_name_plural': 'Financial Audit Logs',
                'ordering': ['-timestamp', '-id'],
                'indexes': [
                    models.Index(fields=['timestamp', 'action'], name='fin_audit_ts_action_idx'),
                    models.Index(fields=['student_id', 'timestamp'], name='fin_audit_student_ts_idx'),
                ],
            },
        ),
    ]
