# gatekeeper/domain/services.py
from __future__ import annotations

import hashlib
import hmac
import re
import secrets

from gatekeeper.domain.errors import InvalidRegistration, PasswordMismatch, WeakPassword

CODE_LENGTH = 6
PASSWORD_MIN_LENGTH = 8
USERNAME_MIN_LENGTH = 4
USERNAME_MAX_SPECIAL = 2

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9._-]+$")
_USERNAME_SPECIAL_RE = re.compile(r"[._-]")

# (pattern, message) pairs, checked in order after the length rule.
_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter."),
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter."),
    (re.compile(r"\d"), "Password must contain at least one digit."),
    (
        re.compile(r"[^a-zA-Z0-9]"),
        "Password must contain at least one special character.",
    ),
)


def generate_code() -> str:
    """Zero-padded 6-digit numeric code, uniform over 000000-999999."""
    return f"{secrets.randbelow(10**CODE_LENGTH):0{CODE_LENGTH}d}"


def is_well_formed_code(code: object) -> bool:
    return isinstance(code, str) and len(code) == CODE_LENGTH and code.isdigit()


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    hmac.compare_digest only takes ASCII str, so compare the UTF-8 bytes.
    """
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def hash_identifier(identifier: str) -> str:
    """
    Fixed-length hex digest of a low-entropy identifier (IP, email, user id).
    Keys are only ever matched, never reversed, so md5 is enough here.
    """
    return hashlib.md5(identifier.encode("utf-8"), usedforsecurity=False).hexdigest()


def store_key(prefix: str, identifier: str) -> str:
    return f"{prefix}{hash_identifier(identifier)}"


def validate_password_strength(password: str) -> None:
    """Raise WeakPassword for the first rule the password breaks."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise WeakPassword("Password must be at least 8 characters.")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            raise WeakPassword(message)


def validate_password_confirmation(password: str, confirmation: str) -> None:
    if not secure_compare(password, confirmation):
        raise PasswordMismatch()


def validate_username(username: str) -> None:
    if len(username) < USERNAME_MIN_LENGTH:
        raise InvalidRegistration("Username must be at least 4 characters.")
    if not _USERNAME_RE.match(username):
        raise InvalidRegistration(
            "Username may only contain letters, numbers, hyphens, underscores, and dots."
        )
    if len(_USERNAME_SPECIAL_RE.findall(username)) > USERNAME_MAX_SPECIAL:
        raise InvalidRegistration(
            "Username may contain at most 2 special characters (-, _, .)."
        )


def validate_names(first_name: str, last_name: str) -> None:
    if not first_name.strip():
        raise InvalidRegistration("First name is required.")
    if not last_name.strip():
        raise InvalidRegistration("Last name is required.")
