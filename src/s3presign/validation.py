"""Input validation for presigning.

Every check here runs before any hashing, so a rejected request never
produces a partial signature.  Configuration problems raise
``ConfigurationError``; per-call argument problems raise ``ValidationError``.
"""

import re
from collections.abc import Mapping

from s3presign.errors import ConfigurationError, EncodingError, ValidationError
from s3presign.models import AUTH_PARAMS, MAX_PRESIGNED_EXPIRES, MIN_PRESIGNED_EXPIRES

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# S3 bucket naming rules:
#   - 3-63 characters
#   - lowercase letters, digits, hyphens, and periods
#   - must start and end with a letter or digit
#   - must not be formatted as an IP address
#   - no consecutive periods ("..") allowed

_BUCKET_RE = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")
_IP_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
_REGION_RE = re.compile(r"^[a-z0-9][a-z0-9\-]*[a-z0-9]$")

_MAX_KEY_BYTES = 1024

_AUTH_PARAMS_LOWER = frozenset(name.lower() for name in AUTH_PARAMS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def require(field_name: str, value: str | None) -> str:
    """Return ``value`` if it is a non-empty string.

    Raises:
        ConfigurationError: If the value is missing or blank.
    """
    if value is None or not str(value).strip():
        raise ConfigurationError(f"Missing required configuration field: {field_name}.")
    return value


def validate_bucket_name(name: str) -> None:
    """Validate an S3 bucket name against AWS naming rules.

    Raises:
        ConfigurationError: If the name violates a bucket naming rule.
    """
    if not _BUCKET_RE.match(name) or _IP_RE.match(name) or ".." in name:
        raise ConfigurationError(f"Invalid bucket name: {name!r}.")


def validate_region(region: str) -> None:
    """Validate a region identifier such as 'us-east-2'.

    Raises:
        ConfigurationError: If the region contains characters that cannot
            appear in a hostname label.
    """
    if not _REGION_RE.match(region):
        raise ConfigurationError(f"Invalid region: {region!r}.")


def validate_expires(value: object) -> int:
    """Validate and parse a presigned URL expiry.

    Args:
        value: Expiry in seconds, as an int or a decimal string.

    Returns:
        An integer in the range [1, 604800].

    Raises:
        ValidationError: If the value is not an integer or is out of range.
    """
    message = (
        f"Expires must be an integer between {MIN_PRESIGNED_EXPIRES} "
        f"and {MAX_PRESIGNED_EXPIRES} seconds."
    )
    if isinstance(value, bool):
        raise ValidationError(message)
    try:
        n = int(value)  # type: ignore[call-overload]
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(message)
    if isinstance(value, float) and value != n:
        raise ValidationError(message)

    if n < MIN_PRESIGNED_EXPIRES or n > MAX_PRESIGNED_EXPIRES:
        raise ValidationError(message)

    return n


def validate_object_key(key: str) -> None:
    """Validate an S3 object key.

    Raises:
        ValidationError: If the key is empty or longer than 1024 bytes.
        EncodingError: If the key is not encodable as UTF-8.
    """
    if not key:
        raise ValidationError("Object key must not be empty.")
    try:
        encoded = key.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"Object key is not valid UTF-8 text: {exc.reason}.") from exc
    if len(encoded) > _MAX_KEY_BYTES:
        raise ValidationError("Your key is too long.")


def validate_extra_params(params: Mapping[str, str]) -> None:
    """Validate caller-supplied query parameters.

    Raises:
        ValidationError: If a name is empty or collides with an
            authentication parameter.
    """
    for name, value in params.items():
        if not name:
            raise ValidationError("Query parameter names must not be empty.")
        if name.lower() in _AUTH_PARAMS_LOWER:
            raise ValidationError(f"Query parameter {name} is reserved for authentication.")
        if not isinstance(value, str):
            raise ValidationError(f"Query parameter {name} must be a string.")
