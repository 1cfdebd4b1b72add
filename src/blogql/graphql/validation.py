"""
Input validation for GraphQL mutations and queries.

Each validator returns every violated constraint rather than stopping at the
first one; ``raise_if_invalid`` turns a non-empty list into an InvalidInputError.
"""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from ..errors import FieldError, InvalidInputError

PASSWORD_MIN_LENGTH = 5


def is_email(value: str) -> bool:
    """Check for a bare address (no display name); ``.test`` domains are allowed."""
    try:
        validate_email(
            value,
            allow_display_name=False,
            check_deliverability=False,
            test_environment=True,
        )
    except EmailNotValidError:
        return False
    return True


def is_empty(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_registration(email: str, password: str) -> list[FieldError]:
    errors: list[FieldError] = []

    if not is_email(email):
        errors.append(FieldError(message="Email is invalid"))
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        errors.append(FieldError(message="Password is too short"))

    return errors


def validate_post_input(title: str | None, content: str | None) -> list[FieldError]:
    errors: list[FieldError] = []

    if is_empty(title):
        errors.append(FieldError(message="Title is invalid."))
    if is_empty(content):
        errors.append(FieldError(message="Content is invalid."))

    return errors


def validate_image_url(image_url: str | None) -> list[FieldError]:
    if is_empty(image_url):
        return [FieldError(message="Image is invalid.")]
    return []


def validate_page(page: int) -> list[FieldError]:
    if page < 1:
        return [FieldError(message="Page must be at least 1.")]
    return []


def raise_if_invalid(errors: list[FieldError]) -> None:
    """Raise InvalidInputError (422) carrying ``errors`` if there are any."""
    if errors:
        raise InvalidInputError(errors)
