"""
Form validation with inline, per-field error messages
"""

import re
from typing import Any, Dict, Mapping, Optional

from sportsbnb.core.exceptions import ValidationError

MIN_PASSWORD_LENGTH = 8
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.]{3,30}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9 ()-]{6,20}$")


class FormErrors(dict):
    """
    Field -> message mapping; the first failure recorded for a field wins
    """

    def add(self, field: str, message: str) -> None:
        self.setdefault(field, message)

    def check(self, condition: bool, field: str, message: str) -> bool:
        if not condition:
            self.add(field, message)
        return condition

    def require(self, data: Mapping[str, Any], field: str, message: str = None) -> bool:
        value = data.get(field)
        present = value is not None and (not isinstance(value, str) or value.strip() != "")
        return self.check(present, field, message or "This field is required")

    def text(self, data: Mapping[str, Any], field: str, message: str = None) -> Optional[str]:
        """Required text field; returns the stripped value when it is usable"""
        if not self.require(data, field, message):
            return None
        value = data[field]
        if not self.check(isinstance(value, str), field, "Enter text for this field"):
            return None
        return value.strip()

    def optional_text(self, data: Mapping[str, Any], field: str, max_length: int = 255) -> Optional[str]:
        value = data.get(field)
        if blank(value):
            return None
        if not self.check(isinstance(value, str), field, "Enter text for this field"):
            return None
        value = value.strip()
        self.check(len(value) <= max_length, field, "This field is too long")
        return value

    def number(self, data: Mapping[str, Any], field: str, message: str = "Enter a number") -> Optional[float]:
        value = data.get(field)
        if value is None or isinstance(value, bool):
            if value is not None:
                self.add(field, message)
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            self.add(field, message)
            return None

    def raise_if_any(self) -> None:
        if self:
            raise ValidationError(dict(self))


def blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_password(errors: FormErrors, password: str, confirm: str, field: str = "password") -> None:
    if not errors.require({field: password}, field, "Password is required"):
        return
    errors.check(
        len(password) >= MIN_PASSWORD_LENGTH,
        field,
        f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    )
    errors.check(password == confirm, "confirm_password", "Passwords do not match")


def validate_signup(data: Mapping[str, Any]) -> FormErrors:
    """Signup gating: run before anything is persisted"""
    errors = FormErrors()
    errors.require(data, "full_name", "Please enter your name")
    if errors.require(data, "email", "Email is required"):
        errors.check(bool(EMAIL_PATTERN.match(data["email"].strip())), "email", "Enter a valid email address")
    validate_password(errors, data.get("password") or "", data.get("confirm_password") or "")
    errors.check(
        data.get("user_type", "player") in ("player", "owner"),
        "user_type",
        "Choose whether you are a player or a venue owner"
    )
    return errors


def validate_password_change(data: Mapping[str, Any]) -> FormErrors:
    errors = FormErrors()
    errors.require(data, "current_password", "Enter your current password")
    validate_password(errors, data.get("new_password") or "", data.get("confirm_password") or "", "new_password")
    return errors
