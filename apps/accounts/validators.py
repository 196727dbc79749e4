"""
Signup and settings validation rules shared by serializers.
"""
import re
from typing import Dict, Optional

from django.conf import settings
from django.utils import timezone

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6


def is_valid_username(value) -> bool:
    if not isinstance(value, str):
        return False
    return len(value) >= USERNAME_MIN_LENGTH and bool(USERNAME_RE.fullmatch(value))


def username_error(value) -> Optional[str]:
    if not value or len(value) < USERNAME_MIN_LENGTH:
        return "Username must be at least 3 characters long"
    if not USERNAME_RE.fullmatch(value):
        return "Username can only contain letters, numbers, and underscores"
    return None


def is_valid_email(value) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.fullmatch(value))


def passwords_match(password, password_confirm) -> bool:
    return password == password_confirm


def academic_year_bounds(current_year: Optional[int] = None):
    current_year = current_year or timezone.now().year
    low = getattr(settings, "ACADEMIC_YEAR_MIN", 1900)
    high = current_year + getattr(settings, "ACADEMIC_YEAR_MAX_OFFSET", 10)
    return low, high


def academic_year_errors(year_of_enroll, year_of_completion, current_year: Optional[int] = None) -> Dict[str, str]:
    """
    Return field -> message for invalid enrollment/completion years.

    Both years must fall within [ACADEMIC_YEAR_MIN, current year + offset] and
    enrollment cannot come after completion. Either may be missing, in which
    case only the present one is range-checked.
    """
    current_year = current_year or timezone.now().year
    low, high = academic_year_bounds(current_year)
    errors = {}

    if year_of_enroll is not None and not (low <= year_of_enroll <= high):
        errors["year_of_enroll"] = "Invalid enrollment year"
    if year_of_completion is not None and not (low <= year_of_completion <= high):
        errors["year_of_completion"] = "Invalid completion year"
    if (
        year_of_enroll is not None
        and year_of_completion is not None
        and year_of_enroll > year_of_completion
        and "year_of_enroll" not in errors
    ):
        errors["year_of_enroll"] = "Enrollment year cannot be after completion year"
    return errors
