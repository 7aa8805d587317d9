# core/utils.py

"""
Central utilities for the school finance system
Prevents code duplication and ensures consistency across all apps
"""
from django.conf import settings
from django.http import JsonResponse
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date, datetime, time
from functools import wraps
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import json
import logging

logger = logging.getLogger(__name__)

DEFAULT_SCHOOL_TIMEZONE = 'Africa/Kampala'
TWO_PLACES = Decimal('0.01')

# Largest values the 2-place money columns hold: amounts are max_digits=12,
# running savings balances max_digits=14.
MAX_AMOUNT = Decimal('9999999999.99')
MAX_BALANCE = Decimal('999999999999.99')


# =============================================================================
# CURRENCY & MONEY FORMATTING
# =============================================================================

def get_base_currency():
    """
    Get the school's currency code from settings.

    Returns:
        str: Currency code (defaults to 'UGX')
    """
    return getattr(settings, 'SCHOOL_CURRENCY', None) or 'UGX'


def format_money(amount, include_symbol=True):
    """
    Format money amount for receipts and exported reports.

    Example:
        >>> format_money(1500000)         # "UGX 1,500,000.00"
        >>> format_money(1500000, False)  # "1,500,000.00"
    """
    try:
        amount_decimal = Decimal(str(amount or 0))
    except (InvalidOperation, ValueError, TypeError):
        amount_decimal = Decimal('0')
    formatted = f"{amount_decimal:,.2f}"
    return f"{get_base_currency()} {formatted}" if include_symbol else formatted


def to_money(value):
    """
    Convert user input to a 2-place Decimal.

    Malformed input raises InvalidOperation so callers can report it as a
    validation error.
    """
    if isinstance(value, float):
        value = str(value)
    amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    if not amount.is_finite():
        raise InvalidOperation(f"Amount must be a finite number, got {value!r}")
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# =============================================================================
# SCHOOL TIMEZONE UTILITIES
# =============================================================================

def get_school_timezone():
    """
    Get the school's operational timezone.

    Use this consistently across the application so that "today" and "now"
    mean the same thing for fee due dates, savings entries and reports.

    Returns:
        ZoneInfo: School's operational timezone (defaults to Africa/Kampala)
    """
    tz_name = getattr(settings, 'SCHOOL_TIMEZONE', None) or DEFAULT_SCHOOL_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error(f"Unknown school timezone '{tz_name}', falling back to {DEFAULT_SCHOOL_TIMEZONE}")
        return ZoneInfo(DEFAULT_SCHOOL_TIMEZONE)


def get_school_current_time():
    """
    Get current time in school's operational timezone.

    Returns:
        datetime: Current datetime in school's timezone
    """
    from django.utils import timezone
    return timezone.now().astimezone(get_school_timezone())


def get_school_today():
    """
    Get today's date in school's operational timezone.

    Always use this instead of date.today() for business logic such as
    overdue checks and default report periods.
    """
    return get_school_current_time().date()


def localize_datetime(dt):
    """
    Convert a datetime to school's operational timezone.

    Naive datetimes are interpreted as school-local time.
    """
    from django.utils import timezone
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, get_school_timezone())
    return dt.astimezone(get_school_timezone())


def start_of_day(value):
    """First instant of the given date (or datetime's date) in school time."""
    if isinstance(value, datetime):
        value = localize_datetime(value).date()
    return datetime.combine(value, time.min, tzinfo=get_school_timezone())


def end_of_day(value):
    """Last instant of the given date (or datetime's date) in school time."""
    if isinstance(value, datetime):
        value = localize_datetime(value).date()
    return datetime.combine(value, time.max, tzinfo=get_school_timezone())


def start_of_year(year=None):
    """1 January 00:00 of ``year`` (default: current school year) in school time."""
    if year is None:
        year = get_school_today().year
    return start_of_day(date(year, 1, 1))


def as_school_date(value):
    """Calendar date of a date/datetime as seen in school time."""
    if isinstance(value, datetime):
        return localize_datetime(value).date()
    return value


# =============================================================================
# VALIDATION UTILITIES
# =============================================================================

def validate_date_range(start_date, end_date, allow_same_day=True):
    """
    Validate date range.

    Returns:
        tuple: (is_valid, error_message)

    Example:
        >>> is_valid, error = validate_date_range(date(2024, 1, 1), date(2024, 12, 31))
    """
    if not start_date or not end_date:
        return False, "Both start and end dates are required"

    start_date, end_date = as_school_date(start_date), as_school_date(end_date)

    if allow_same_day:
        if start_date > end_date:
            return False, "Start date must be on or before end date"
    else:
        if start_date >= end_date:
            return False, "Start date must be before end date"

    return True, None


def validate_positive_amount(value, field='amount'):
    """
    Parse a monetary amount that must be strictly positive.

    Returns:
        Decimal: amount quantized to 2 places

    Raises:
        ValidationError: malformed, non-finite, <= 0 or above MAX_AMOUNT
    """
    from django.core.exceptions import ValidationError
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError({field: f"Invalid amount: {value!r}"})
    if amount <= Decimal('0.00'):
        raise ValidationError({field: "Amount must be greater than zero."})
    if amount > MAX_AMOUNT:
        raise ValidationError({field: f"Amount must not exceed {MAX_AMOUNT:,}."})
    return amount


def validate_choice(value, choices, field):
    """Raise ValidationError unless ``value`` is one of the (code, label) choices."""
    from django.core.exceptions import ValidationError
    if value not in dict(choices):
        raise ValidationError({field: f"Invalid choice '{value}'."})
    return value


def coerce_datetime(value, field='date'):
    """
    Normalise a date or datetime to an aware datetime in school time.

    Dates become the start of that day; naive datetimes are taken as
    school-local.
    """
    from django.core.exceptions import ValidationError
    if isinstance(value, datetime):
        return localize_datetime(value)
    if isinstance(value, date):
        return start_of_day(value)
    raise ValidationError({field: f"Invalid date: {value!r}"})


def get_or_not_found(queryset, pk, exc_class, label=None):
    """
    Fetch ``queryset.get(pk=pk)`` or raise the given NotFoundError subclass.

    Malformed keys (e.g. a non-UUID string) are treated as not found.

    Example:
        >>> student = get_or_not_found(Student.objects, student_id, StudentNotFound)
    """
    from django.core.exceptions import ValidationError
    label = label or queryset.model._meta.verbose_name.title()
    if pk is None or pk == '':
        raise exc_class(f"{label} not found.")
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValidationError, ValueError, TypeError):
        raise exc_class(f"{label} {pk} not found.")


# =============================================================================
# JSON RESPONSE HELPERS
# =============================================================================

def json_error(message, status=400, error=None, **extra):
    """
    Uniform JSON error payload used by every ajax view.

    Example:
        >>> return json_error("Student not found.", status=404, error="not_found")
    """
    payload = {"success": False, "message": message}
    if error:
        payload["error"] = error
    payload.update(extra)
    return JsonResponse(payload, status=status)


def validation_messages(exc):
    """Flatten a Django ValidationError into a list of strings."""
    if hasattr(exc, 'message_dict'):
        return [
            f"{field}: {msg}" if field != '__all__' else msg
            for field, messages in exc.message_dict.items()
            for msg in messages
        ]
    return list(getattr(exc, 'messages', [str(exc)]))


def form_errors(form):
    """Flatten bound form errors into a list of strings."""
    return [
        f"{field}: {msg}" if field != '__all__' else msg
        for field, messages in form.errors.items()
        for msg in messages
    ]


def parse_json_body(request):
    """
    Decode a JSON object request body.

    Raises:
        ValidationError: body is not a JSON object
    """
    from django.core.exceptions import ValidationError
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON data.")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def json_endpoint(view_func):
    """
    Map domain exceptions raised by an ajax view onto JSON responses.

    ValidationError -> 400, NotFoundError -> 404, InvariantViolation -> 409,
    anything else -> 500 (logged).
    """
    from django.core.exceptions import ValidationError
    from core.exceptions import NotFoundError, InvariantViolation

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ValidationError as e:
            messages = validation_messages(e)
            return json_error("; ".join(messages), status=400, error='validation_error', errors=messages)
        except NotFoundError as e:
            return json_error(str(e) or "Not found.", status=404, error=e.error_code)
        except InvariantViolation as e:
            return json_error(str(e), status=409, error=e.error_code)
        except Exception as e:
            logger.error(f"Unhandled error in {view_func.__name__}: {e}", exc_info=True)
            return json_error("Server error.", status=500, error='server_error')

    return wrapper
