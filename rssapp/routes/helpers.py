"""
Request and response helpers shared by the API routes.

Decoding of JSON bodies, path and query parameter parsing, response
envelopes, and the mapping from FeedError kinds to HTTP responses.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Type, TypedDict, TypeVar, Union

from flask import current_app, jsonify, request
from pydantic import BaseModel, ValidationError
from werkzeug.datastructures import MultiDict

from rssapp.errors import ErrorKind, FeedError, invalid_argument, malformed_request
from rssapp.validator import Validator

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)

DEFAULT_MAX_BODY_BYTES = 1_048_576
MAX_ID = 2 ** 63 - 1

ID_RX = re.compile(r'[+-]?[0-9]+')
WHITESPACE_RX = re.compile(r'[ \t\n\r]*')
# Unpaired UTF-16 surrogates left by \uXXXX escapes
LONE_SURROGATE_RX = re.compile(r'[\ud800-\udfff]')

NOT_FOUND_MESSAGE = 'the requested resource could not be found'
EDIT_CONFLICT_MESSAGE = 'unable to update the record due to an edit conflict, please try again'
SERVER_ERROR_MESSAGE = 'the server encountered a problem and could not process your request'


# =========================================================================
# Response envelopes
# =========================================================================

class ErrorEnvelope(TypedDict):
    error: Union[str, Dict[str, str]]


class FeedEnvelope(TypedDict):
    feed: Dict[str, Any]


class FeedListEnvelope(TypedDict):
    feeds: List[Dict[str, Any]]
    metadata: Dict[str, int]


class MessageEnvelope(TypedDict):
    message: str


class SystemInfo(TypedDict):
    environment: str
    version: str


class HealthEnvelope(TypedDict):
    status: str
    system_info: SystemInfo


Envelope = Union[ErrorEnvelope, FeedEnvelope, FeedListEnvelope, MessageEnvelope, HealthEnvelope]


def write_json(envelope: Envelope, status: int = 200,
               headers: Optional[Dict[str, str]] = None):
    """Build a JSON response tuple for a view or error handler."""
    return jsonify(envelope), status, headers or {}


def error_response(status: int, message: Union[str, Dict[str, str]]):
    return write_json(ErrorEnvelope(error=message), status)


def log_error(err: BaseException) -> None:
    logger.error(f"{err} method={request.method} uri={request.full_path.rstrip('?')}",
                 exc_info=err)


def server_error_response(err: BaseException):
    """Log the underlying error and answer with a generic 500."""
    log_error(err)
    return error_response(500, SERVER_ERROR_MESSAGE)


def feed_error_response(err: FeedError):
    """
    Map a FeedError to its HTTP response.

    NOT_FOUND and INVALID_ARGUMENT -> 404, EDIT_CONFLICT -> 409,
    VALIDATION_FAILED -> 422, MALFORMED_REQUEST -> 400, anything else -> 500.
    """
    if err.kind in (ErrorKind.NOT_FOUND, ErrorKind.INVALID_ARGUMENT):
        return error_response(404, NOT_FOUND_MESSAGE)
    if err.kind is ErrorKind.EDIT_CONFLICT:
        return error_response(409, EDIT_CONFLICT_MESSAGE)
    if err.kind is ErrorKind.VALIDATION_FAILED:
        return error_response(422, err.errors)
    if err.kind is ErrorKind.MALFORMED_REQUEST:
        return error_response(400, err.message)
    return server_error_response(err)


# =========================================================================
# Request decoding
# =========================================================================

def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"invalid constant {name}")


_decoder = json.JSONDecoder(parse_constant=_reject_constant)


def _skip_whitespace(text: str, pos: int) -> int:
    return WHITESPACE_RX.match(text, pos).end()


def decode_single_value(text: str) -> Tuple[Any, int, int]:
    """
    Decode exactly one JSON value from ``text``.

    Returns:
        Tuple of (value, start offset, end offset)

    Raises:
        FeedError: MALFORMED_REQUEST describing why the text is unusable
    """
    start = _skip_whitespace(text, 0)
    if start == len(text):
        raise malformed_request('body must not be empty')

    try:
        value, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as e:
        if e.pos >= len(text) or e.msg.startswith('Unterminated string'):
            raise malformed_request('body contains badly-formed JSON') from e
        raise malformed_request(
            f'body contains badly-formed JSON (at character {e.pos + 1})'
        ) from e
    except RecursionError as e:
        # nesting deeper than the decoder can follow
        raise malformed_request('body contains badly-formed JSON') from e
    except ValueError as e:
        raise malformed_request('body contains badly-formed JSON') from e

    if _skip_whitespace(text, end) != len(text):
        raise malformed_request('body must only contain a single JSON value')

    return value, start, end


def _replace_lone_surrogates(value: Any) -> Any:
    # Unencodable as UTF-8; substitute U+FFFD like other JSON decoders do
    if isinstance(value, str):
        return LONE_SURROGATE_RX.sub('\ufffd', value)
    return value


def _describe_schema_error(error: ValidationError, key_order: List[str]) -> str:
    # Report the problem whose key appears first in the document
    problems = []
    for detail in error.errors():
        key = str(detail['loc'][0]) if detail['loc'] else ''
        position = key_order.index(key) if key in key_order else len(key_order)
        if detail['type'] == 'extra_forbidden':
            message = f'body contains unknown key "{key}"'
        else:
            message = f'body contains incorrect JSON type for field "{key}"'
        problems.append((position, message))
    return min(problems)[1]


def read_json(model: Type[ModelT], max_bytes: Optional[int] = None) -> ModelT:
    """
    Decode the request body into ``model``.

    The body must hold a single JSON object of at most ``max_bytes`` bytes
    whose keys and value types match the model.

    Args:
        model: Pydantic model class with ``extra='forbid'``
        max_bytes: Size cap, defaults to the MAX_BODY_BYTES config value

    Returns:
        Validated model instance

    Raises:
        FeedError: MALFORMED_REQUEST with a client-facing message
    """
    if max_bytes is None:
        max_bytes = current_app.config.get('MAX_BODY_BYTES', DEFAULT_MAX_BODY_BYTES)

    raw = request.stream.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise malformed_request(f'body must not be larger than {max_bytes} bytes')

    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise malformed_request('body contains badly-formed JSON') from e

    data, start, end = decode_single_value(text)

    if not isinstance(data, dict):
        offset = start + 1 if isinstance(data, (list, dict)) else end
        raise malformed_request(f'body contains incorrect JSON type (at character {offset})')

    data = {_replace_lone_surrogates(key): _replace_lone_surrogates(value)
            for key, value in data.items()}

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise malformed_request(_describe_schema_error(e, list(data))) from e


# =========================================================================
# Path and query parameters
# =========================================================================

def read_id_param(raw: str) -> int:
    """
    Parse a feed id from the URL path.

    Raises:
        FeedError: INVALID_ARGUMENT unless raw is a positive 64-bit integer
    """
    if not ID_RX.fullmatch(raw):
        raise invalid_argument(f'invalid id parameter: {raw!r}')
    value = int(raw)
    if value < 1 or value > MAX_ID:
        raise invalid_argument(f'invalid id parameter: {raw!r}')
    return value


def read_string(args: MultiDict, key: str, default: str = '') -> str:
    value = args.get(key, '')
    return value if value else default


def read_int(args: MultiDict, key: str, default: int, v: Validator) -> int:
    """Read an integer query parameter, recording a failure on ``v``."""
    value = args.get(key, '')
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        v.add_error(key, 'must be an integer value')
        return default
