"""Input validation predicates. Pure functions: no I/O, never raise."""

import re

_ALLOWED = re.compile(r"[A-Za-z0-9 ]+")

USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 20


def _letters_digits_single_spaces(value: str) -> bool:
    if not isinstance(value, str) or not _ALLOWED.fullmatch(value):
        return False
    return "  " not in value


def is_valid_username(value: str) -> bool:
    """4-20 chars of letters, digits and single spaces"""
    if not isinstance(value, str):
        return False
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        return False
    return _letters_digits_single_spaces(value)


def is_valid_name(value: str) -> bool:
    return _letters_digits_single_spaces(value)


def is_valid_breed(value: str) -> bool:
    return is_valid_name(value)


def is_valid_password(value: str) -> bool:
    # Permissive policy: any non-empty password.
    return isinstance(value, str) and len(value) > 0
