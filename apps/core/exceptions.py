# core/exceptions.py

"""
Domain exceptions shared by the finance apps.

Two families:
- NotFoundError: a referenced record does not exist (HTTP 404 in views).
  Subclasses ObjectDoesNotExist so generic Django handling still applies.
- InvariantViolation: the request is well-formed but would break a
  business rule (HTTP 409 in views).

Malformed input raises django.core.exceptions.ValidationError (HTTP 400).
"""

from django.core.exceptions import ObjectDoesNotExist


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFoundError(ObjectDoesNotExist):
    """Base class for missing referenced records."""

    error_code = 'not_found'


class StudentNotFound(NotFoundError):
    error_code = 'student_not_found'


class BillNotFound(NotFoundError):
    error_code = 'bill_not_found'


class PaymentNotFound(NotFoundError):
    error_code = 'payment_not_found'


class UserNotFound(NotFoundError):
    error_code = 'user_not_found'


class ClassNotFound(NotFoundError):
    error_code = 'class_not_found'


# =============================================================================
# INVARIANT VIOLATIONS
# =============================================================================

class InvariantViolation(Exception):
    """Base class for rejected operations that would corrupt state."""

    error_code = 'invariant_violation'


class InsufficientFunds(InvariantViolation):
    """A savings withdrawal would take the balance below zero."""

    error_code = 'insufficient_funds'

    def __init__(self, student_id, balance, requested):
        self.student_id = student_id
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient savings balance: available {balance}, requested {requested}"
        )


class InvalidBillTransition(InvariantViolation):
    error_code = 'invalid_bill_transition'

    def __init__(self, bill_id, from_status, to_status):
        self.bill_id = bill_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Bill {bill_id} cannot move from {from_status} to {to_status}")


class LedgerConflict(InvariantViolation):
    """Concurrent ledger appends kept colliding on the same sequence number."""

    error_code = 'ledger_conflict'


class ImmutableRecordError(InvariantViolation):
    """Attempt to modify or delete an append-only record."""

    error_code = 'immutable_record'
