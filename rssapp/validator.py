"""
Field-level validation helpers.

A Validator collects at most one message per field, keeping the order in
which fields first failed.
"""

import re
from typing import Any, Dict, Iterable

# WHATWG pattern for <input type="email">
EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


class Validator:
    """Accumulates validation errors keyed by field name."""

    def __init__(self):
        self.errors: Dict[str, str] = {}

    def valid(self) -> bool:
        """Return True if no errors have been recorded."""
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        """
        Record an error for a field.

        The first message recorded for a field wins; later ones are ignored.
        """
        if key not in self.errors:
            self.errors[key] = message

    def check(self, ok: bool, key: str, message: str) -> None:
        """Record ``message`` against ``key`` when ``ok`` is false."""
        if not ok:
            self.add_error(key, message)


def permitted_value(value: Any, *permitted_values: Any) -> bool:
    """Return True if value is one of the permitted values."""
    return value in permitted_values


def matches(value: str, rx: re.Pattern) -> bool:
    """Return True if the whole string matches the pattern."""
    return rx.fullmatch(value) is not None


def unique(values: Iterable[Any]) -> bool:
    """Return True if all values are distinct."""
    values = list(values)
    return len(set(values)) == len(values)
