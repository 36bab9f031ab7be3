"""Presigned URL verification.

Recomputes the SigV4 query-string signature of a presigned URL the way the
storage service does and compares it in constant time.  Useful for services
that accept presigned URLs issued by this package, and for checking that a
generated URL is self-contained.

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/API/sigv4-query-string-auth.html
"""

import hmac
import logging
import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from s3presign import metrics
from s3presign.canonical import build_canonical_request
from s3presign.clock import Clock, SystemClock, parse_amz_date, to_utc
from s3presign.errors import (
    AccessDenied,
    AuthorizationQueryParametersError,
    ExpiredPresignedUrl,
    PresignError,
    SignatureDoesNotMatch,
)
from s3presign.models import (
    ALGORITHM,
    AUTH_PARAMS,
    HTTP_METHOD,
    MAX_PRESIGNED_EXPIRES,
    MIN_PRESIGNED_EXPIRES,
    PARAM_ALGORITHM,
    PARAM_CREDENTIAL,
    PARAM_DATE,
    PARAM_EXPIRES,
    PARAM_SIGNATURE,
    PARAM_SIGNED_HEADERS,
    SCOPE_TERMINATOR,
    SERVICE_NAME,
    CredentialScope,
    Credentials,
    RequestDescriptor,
)
from s3presign.signing import build_string_to_sign, compute_signature, derive_scoped_signing_key

logger = logging.getLogger(__name__)

CLOCK_SKEW_TOLERANCE = 900  # 15 minutes in seconds

REQUIRED_PARAMS = (
    PARAM_ALGORITHM,
    PARAM_CREDENTIAL,
    PARAM_DATE,
    PARAM_EXPIRES,
    PARAM_SIGNED_HEADERS,
    PARAM_SIGNATURE,
)


@dataclass(frozen=True)
class VerifiedURL:
    """The facts established by a successful verification."""

    access_key_id: str
    scope: CredentialScope
    signed_at: datetime
    expires_at: datetime


def verify_presigned_url(
    url: str,
    credentials: Credentials,
    clock: Clock | None = None,
    method: str = HTTP_METHOD,
    headers: Mapping[str, str] | None = None,
) -> VerifiedURL:
    """Verify a presigned URL against the given credentials.

    Args:
        url: The full presigned URL.
        credentials: The credentials the URL is expected to be signed with.
        clock: Time source for the expiry check. Defaults to the system clock.
        method: The HTTP method the URL is being used with.
        headers: Request headers, needed only when the URL signs headers
            other than ``host``.

    Returns:
        A VerifiedURL describing the signer, scope and validity window.

    Raises:
        AuthorizationQueryParametersError: On missing or malformed params.
        AccessDenied: On an unsupported algorithm, foreign access key, bad
            credential scope or a URL dated in the future.
        ExpiredPresignedUrl: If the URL has expired.
        SignatureDoesNotMatch: If the signature is wrong.
    """
    try:
        result = _verify(url, credentials, clock or SystemClock(), method, headers or {})
    except PresignError as exc:
        metrics.record_verify(exc.code)
        raise
    metrics.record_verify("ok")
    return result


def _verify(
    url: str,
    credentials: Credentials,
    clock: Clock,
    method: str,
    headers: Mapping[str, str],
) -> VerifiedURL:
    parts = urllib.parse.urlsplit(url)
    params = parse_query_params(parts.query)

    for name in REQUIRED_PARAMS:
        if name not in params:
            raise AuthorizationQueryParametersError()

    algorithm = params[PARAM_ALGORITHM]
    if algorithm != ALGORITHM:
        raise AccessDenied(f"Unsupported algorithm: {algorithm}")

    scope, access_key = _parse_credential(params[PARAM_CREDENTIAL])
    if access_key != credentials.access_key_id:
        raise AccessDenied("The access key ID in the URL does not match.")

    amz_date = params[PARAM_DATE]
    if amz_date[:8] != scope.date:
        raise AccessDenied(
            f"Date in Credential scope ({scope.date}) does not match "
            f"X-Amz-Date ({amz_date[:8]})."
        )

    try:
        expires_seconds = int(params[PARAM_EXPIRES])
    except ValueError:
        raise AuthorizationQueryParametersError("Invalid X-Amz-Expires value.")
    if expires_seconds < MIN_PRESIGNED_EXPIRES or expires_seconds > MAX_PRESIGNED_EXPIRES:
        raise AuthorizationQueryParametersError(
            f"X-Amz-Expires must be between {MIN_PRESIGNED_EXPIRES} and "
            f"{MAX_PRESIGNED_EXPIRES} seconds."
        )

    try:
        signed_at = parse_amz_date(amz_date)
    except ValueError:
        raise AccessDenied("Invalid X-Amz-Date format.")

    now = to_utc(clock.now())
    if (signed_at - now).total_seconds() > CLOCK_SKEW_TOLERANCE:
        raise AccessDenied("X-Amz-Date is too far in the future.")
    expires_at = signed_at + timedelta(seconds=expires_seconds)
    if now > expires_at:
        raise ExpiredPresignedUrl()

    signed_header_names = params[PARAM_SIGNED_HEADERS].split(";")
    descriptor = RequestDescriptor(
        host=parts.netloc,
        path=urllib.parse.unquote(parts.path),
        query={name: value for name, value in params.items() if name not in AUTH_PARAMS},
        headers=_signed_header_values(signed_header_names, headers),
        method=method,
    )
    canonical_query = {name: value for name, value in params.items() if name != PARAM_SIGNATURE}
    canonical_request = build_canonical_request(descriptor, canonical_query)
    if canonical_request.signed_headers != params[PARAM_SIGNED_HEADERS]:
        raise AccessDenied("X-Amz-SignedHeaders is not in canonical form.")

    string_to_sign = build_string_to_sign(amz_date, scope, str(canonical_request))
    signing_key = derive_scoped_signing_key(credentials.secret_key, scope)
    expected_signature = compute_signature(signing_key, string_to_sign)

    if not hmac.compare_digest(expected_signature, params[PARAM_SIGNATURE]):
        logger.debug("Presigned signature mismatch for %s%s", parts.netloc, parts.path)
        raise SignatureDoesNotMatch()

    return VerifiedURL(
        access_key_id=access_key,
        scope=scope,
        signed_at=signed_at,
        expires_at=expires_at,
    )


def parse_query_params(query_string: str) -> dict[str, str]:
    """Parse a raw query string into decoded name -> value pairs.

    Raises:
        AccessDenied: If a parameter name appears more than once.
    """
    params: dict[str, str] = {}
    if not query_string:
        return params
    for pair in query_string.split("&"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        decoded_name = urllib.parse.unquote_plus(name)
        if decoded_name in params:
            raise AccessDenied(f"Duplicate query parameter: {decoded_name}")
        params[decoded_name] = urllib.parse.unquote_plus(value)
    return params


def _parse_credential(credential: str) -> tuple[CredentialScope, str]:
    credential_parts = credential.split("/")
    if len(credential_parts) != 5:
        raise AccessDenied("Invalid Credential format.")

    access_key, date, region, service, terminator = credential_parts
    if terminator != SCOPE_TERMINATOR:
        raise AccessDenied(f"Invalid credential scope terminator: {terminator}")
    if service != SERVICE_NAME:
        raise AccessDenied(f"Invalid credential service: {service}")
    scope = CredentialScope(date=date, region=region, service=service, terminator=terminator)
    return scope, access_key


def _signed_header_values(names: list[str], headers: Mapping[str, str]) -> dict[str, str]:
    """Collect values for every signed header other than host."""
    if "host" not in names:
        raise AccessDenied("The host header must be signed.")
    lower_headers = {name.lower(): value for name, value in headers.items()}
    result: dict[str, str] = {}
    for name in names:
        if name == "host":
            continue
        if name not in lower_headers:
            raise AccessDenied(f"Signed header {name} is missing from the request.")
        result[name] = lower_headers[name]
    return result
