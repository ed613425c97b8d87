# Input validators shared by the operations layer and the request models

import re
from typing import Any

ROLES = ('dining-hall', 'student-group', 'food-bank', 'student')
DONOR_ROLES = ('dining-hall', 'student-group')
RESERVER_ROLES = ('student', 'student-group', 'food-bank')
ACCOUNT_TYPES = ('student-group', 'food-bank')

_EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def validate_role(role: str) -> bool:
    return role in ROLES


def validate_account_type(account_type: str) -> bool:
    return account_type in ACCOUNT_TYPES


def validate_positive_integer(value: Any) -> bool:
    """
    Check for a positive int.

    Strings, floats and bools are rejected rather than coerced.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value > 0


def validate_non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_email(email: Any) -> bool:
    if not isinstance(email, str):
        return False
    return bool(_EMAIL_PATTERN.match(email.strip()))
