"""
Error taxonomy for the RSS feed API.

Every failure that crosses a layer boundary is a FeedError tagged with one
ErrorKind. The data access layer raises INVALID_ARGUMENT, NOT_FOUND,
EDIT_CONFLICT and STORAGE_FAILURE; the request pipeline adds
MALFORMED_REQUEST and VALIDATION_FAILED. Callers match on ``kind``.
"""

from enum import Enum
from typing import Dict, Optional


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    INVALID_ARGUMENT = 'invalid argument'
    NOT_FOUND = 'record not found'
    EDIT_CONFLICT = 'edit conflict'
    VALIDATION_FAILED = 'failed validation'
    MALFORMED_REQUEST = 'malformed request'
    STORAGE_FAILURE = 'storage failure'


class FeedError(Exception):
    """
    Structured error carrying its kind.

    Attributes:
        kind: The ErrorKind of this failure
        message: Human readable detail (client-safe only for MALFORMED_REQUEST)
        errors: Field -> message map for VALIDATION_FAILED
    """

    def __init__(self, kind: ErrorKind, message: Optional[str] = None,
                 errors: Optional[Dict[str, str]] = None):
        self.kind = kind
        self.message = message or kind.value
        self.errors = dict(errors) if errors else {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f'<FeedError {self.kind.name}: {self.message}>'


def invalid_argument(message: str) -> FeedError:
    return FeedError(ErrorKind.INVALID_ARGUMENT, message)


def not_found() -> FeedError:
    return FeedError(ErrorKind.NOT_FOUND)


def edit_conflict() -> FeedError:
    return FeedError(ErrorKind.EDIT_CONFLICT)


def malformed_request(message: str) -> FeedError:
    return FeedError(ErrorKind.MALFORMED_REQUEST, message)


def validation_failed(errors: Dict[str, str]) -> FeedError:
    return FeedError(ErrorKind.VALIDATION_FAILED, errors=errors)


def storage_failure(message: str) -> FeedError:
    return FeedError(ErrorKind.STORAGE_FAILURE, message)
