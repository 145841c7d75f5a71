"""Client-side validation for the sign-up form"""

import re

# RFC 2822 style addr-spec: local part, "@", dot-separated labels of 1-63
# alphanumeric-or-hyphen characters that neither start nor end with a hyphen
EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 60
PHONE_LENGTH = 13
PHONE_PREFIX = "+380"


def is_valid_name(name: str) -> bool:
    return NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_phone(phone: str) -> bool:
    """Ukrainian mobile number, e.g. +380501234567"""
    return len(phone) == PHONE_LENGTH and PHONE_PREFIX in phone
