"""Money helpers, school time, JSON error mapping and the audit context"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import pytest
from django.core.exceptions import ValidationError
from django.test import RequestFactory, override_settings

from core.exceptions import BillNotFound, InsufficientFunds
from core.utils import (
    MAX_AMOUNT, format_money, to_money, validate_positive_amount, start_of_day, end_of_day,
    validate_date_range, json_endpoint,
)
from finance.services import ExpenseService
from utils.context import RequestContext, get_client_ip, get_request_context
from utils.models import FinancialAuditLog


class TestMoney:

    def test_to_money_quantizes(self):
        assert to_money('10') == Decimal('10.00')
        assert to_money(0.1) == Decimal('0.10')
        assert to_money(Decimal('2.345')) == Decimal('2.35')

    @pytest.mark.parametrize('value', ['abc', 'Infinity', 'NaN'])
    def test_to_money_rejects_garbage(self, value):
        with pytest.raises(InvalidOperation):
            to_money(value)

    def test_validate_positive_amount(self):
        assert validate_positive_amount('0.01') == Decimal('0.01')
        with pytest.raises(ValidationError) as excinfo:
            validate_positive_amount('0.00', field='monthly_fee')
        assert 'monthly_fee' in excinfo.value.message_dict

    def test_validate_positive_amount_enforces_column_limit(self):
        assert validate_positive_amount(MAX_AMOUNT) == Decimal('9999999999.99')
        with pytest.raises(ValidationError) as excinfo:
            validate_positive_amount('10000000000.00')
        assert 'amount' in excinfo.value.message_dict

    @override_settings(SCHOOL_CURRENCY='KES')
    def test_format_money(self):
        assert format_money(Decimal('1500000')) == 'KES 1,500,000.00'
        assert format_money('12.5', include_symbol=False) == '12.50'


class TestSchoolTime:

    @override_settings(SCHOOL_TIMEZONE='Africa/Nairobi')
    def test_day_bounds_use_school_timezone(self):
        start = start_of_day(date(2024, 1, 31))
        end = end_of_day(date(2024, 1, 31))

        assert start.utcoffset().total_seconds() == 3 * 3600
        assert (start.hour, end.hour, end.minute) == (0, 23, 59)

    def test_date_range(self):
        assert validate_date_range(date(2024, 1, 1), date(2024, 1, 1)) == (True, None)
        assert validate_date_range(date(2024, 2, 1), date(2024, 1, 1))[0] is False
        assert validate_date_range(date(2024, 1, 1), date(2024, 1, 1), allow_same_day=False)[0] is False


class TestJsonEndpoint:

    def call(self, exc):
        @json_endpoint
        def view(request):
            raise exc
        return view(RequestFactory().get('/'))

    def test_status_mapping(self):
        assert self.call(ValidationError({'amount': 'bad'})).status_code == 400
        assert self.call(BillNotFound('missing')).status_code == 404
        assert self.call(InsufficientFunds('s1', Decimal('5.00'), Decimal('10.00'))).status_code == 409
        assert self.call(RuntimeError('boom')).status_code == 500


class TestAuditContext:

    def test_client_ip_prefers_forwarded_for(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.7, 172.16.0.1', REMOTE_ADDR='127.0.0.1')

        assert get_client_ip(request) == '10.0.0.7'

    @pytest.mark.django_db
    def test_context_fills_audit_fields(self, admin_user):
        with RequestContext(user=admin_user, ip_address='10.0.0.7'):
            expense = ExpenseService.create_expense('FOOD', 'Lunch', '10.00', date(2024, 1, 1), admin_user)

        assert get_request_context() is None
        assert expense.created_from_ip == '10.0.0.7'
        assert FinancialAuditLog.objects.get(action='EXPENSE_CREATE').ip_address == '10.0.0.7'
