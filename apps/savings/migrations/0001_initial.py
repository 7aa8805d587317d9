# apps/savings/migrations/0001_initial.py

from decimal import Decimal
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SavingsTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(db_index=True, help_text="When this record was created (in school's operational timezone)", verbose_name='Created At')),
                ('updated_at', models.DateTimeField(db_index=True, help_text="When this record was last updated (in school's operational timezone)", verbose_name='Updated At')),
                ('created_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who created this record', max_length=50, null=True, verbose_name='Created By ID')),
                ('updated_by_id', models.CharField(blank=True, db_index=True, help_text='ID of user who last updated this record', max_length=50, null=True, verbose_name='Updated By ID')),
                ('created_from_ip', models.GenericIPAddressField(blank=True, help_text='IP address from which this record was created', null=True, verbose_name='Created From IP')),
                ('updated_from_ip', models.GenericIPAddressField(blank=True, help_text='IP address from which this record was last updated', null=True, verbose_name='Updated From IP')),
                ('change_reason', models.CharField(blank=True, help_text='Explanation for why this change was made', max_length=255, null=True, verbose_name='Change Reason')),
                ('transaction_type', models.CharField(choices=[('DEPOSIT', 'Deposit'), ('WITHDRAWAL', 'Withdrawal')], db_index=True, max_length=15, verbose_name='Transaction Type')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Amount')),
                ('balance_after', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Balance After Transaction')),
                ('sequence', models.PositiveIntegerField(editable=False, help_text='Per-student recording order, starting at 1', verbose_name='Sequence')),
                ('description', models.TextField(blank=True, null=True, verbose_name='Description')),
                ('transaction_date', models.DateTimeField(db_index=True, verbose_name='Transaction Date')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='savings_transactions', to='students.student', verbose_name='Student')),
            ],
            options={
                'verbose_name': 'Savings Transaction',
                'verbose_name_plural': 'Savings Transactions',
                'ordering': ['-transaction_date', '-sequence'],
                'constraints': [
                    models.UniqueConstraint(fields=('student', 'sequence'), name='savings_student_sequence_unique'),
                    models.CheckConstraint(condition=models.Q(('amount__gt', 0)), name='savings_amount_positive'),
                    models.CheckConstraint(condition=models.Q(('balance_after__gte', 0)), name='savings_balance_non_negative'),
                ],
                'indexes': [
                    models.Index(fields=['student', '-transaction_date'], name='savings_student_date_idx'),
                    models.Index(fields=['transaction_type', 'transaction_date'], name='savings_type_date_idx'),
                ],
            },
        ),
    ]
