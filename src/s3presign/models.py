"""Data model types for SigV4 query-string signing.

These dataclasses describe one signing operation: what is being requested
(``RequestDescriptor``), who is signing it (``Credentials``), when and for how
long (``SigningContext``) and the scope the derived key is bound to
(``CredentialScope``).  They are built per call and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Protocol constants
ALGORITHM = "AWS4-HMAC-SHA256"
KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
SERVICE_NAME = "s3"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
HTTP_METHOD = "GET"

MIN_PRESIGNED_EXPIRES = 1
MAX_PRESIGNED_EXPIRES = 604800  # 7 days in seconds
DEFAULT_EXPIRES = 3600

# Query parameter names, fixed by the protocol
PARAM_ALGORITHM = "X-Amz-Algorithm"
PARAM_CREDENTIAL = "X-Amz-Credential"
PARAM_DATE = "X-Amz-Date"
PARAM_EXPIRES = "X-Amz-Expires"
PARAM_SIGNED_HEADERS = "X-Amz-SignedHeaders"
PARAM_SECURITY_TOKEN = "X-Amz-Security-Token"
PARAM_SIGNATURE = "X-Amz-Signature"

AUTH_PARAMS = frozenset(
    {
        PARAM_ALGORITHM,
        PARAM_CREDENTIAL,
        PARAM_DATE,
        PARAM_EXPIRES,
        PARAM_SIGNED_HEADERS,
        PARAM_SECURITY_TOKEN,
        PARAM_SIGNATURE,
    }
)


@dataclass(frozen=True)
class RequestDescriptor:
    """The request a presigned URL authorizes.

    Attributes:
        host: Host header value (e.g. 'my-bucket.s3.us-east-2.amazonaws.com').
        path: Raw, unencoded request path beginning with '/'.
        query: Business query parameters, name -> unencoded value.
        headers: Extra headers to sign, name -> value. ``host`` is always
            signed and taken from ``host``.
        method: HTTP method; always GET for read access.
    """

    host: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    method: str = HTTP_METHOD

    def signed_headers(self) -> dict[str, str]:
        """Return every signed header keyed by lower-cased name."""
        result = {name.lower(): value for name, value in self.headers.items()}
        result["host"] = self.host
        return result


@dataclass(frozen=True)
class Credentials:
    """Signing credentials.

    The secret key is kept out of ``repr()`` so it cannot leak through
    logging or tracebacks.

    Attributes:
        access_key_id: The access key ID, published in the URL.
        secret_key: The secret access key.
        session_token: Optional temporary session token.
    """

    access_key_id: str
    secret_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class CredentialScope:
    """The date/region/service scope a signing key is bound to."""

    date: str
    region: str
    service: str = SERVICE_NAME
    terminator: str = SCOPE_TERMINATOR

    def __str__(self) -> str:
        return f"{self.date}/{self.region}/{self.service}/{self.terminator}"


@dataclass(frozen=True)
class SigningContext:
    """When the URL was signed and how long it stays valid.

    Attributes:
        timestamp: Signing time in basic ISO 8601 form (YYYYMMDDTHHMMSSZ).
        expires: Validity window in seconds.
    """

    timestamp: str
    expires: int

    @property
    def date(self) -> str:
        """The YYYYMMDD date portion of the timestamp."""
        return self.timestamp[:8]

    def scope(self, region: str) -> CredentialScope:
        """Build the credential scope for this context.

        The scope date is always taken from the signing timestamp.
        """
        return CredentialScope(date=self.date, region=region)
