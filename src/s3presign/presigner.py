"""Presigned GET URL generation.

The pipeline is a single linear pass:

    validate -> canonical request -> string to sign -> signing key
             -> signature -> URL

Every precondition is checked before the first hash is computed, so a
failure never yields a partial signature or URL.
"""

import logging
from collections.abc import Mapping
from dataclasses import replace
from urllib.parse import urlsplit

from s3presign import metrics
from s3presign.canonical import build_canonical_headers, build_canonical_request
from s3presign.clock import Clock, SystemClock, format_amz_date, parse_amz_date
from s3presign.config import PresignConfig
from s3presign.errors import PresignError, ValidationError
from s3presign.models import (
    ALGORITHM,
    PARAM_ALGORITHM,
    PARAM_CREDENTIAL,
    PARAM_DATE,
    PARAM_EXPIRES,
    PARAM_SECURITY_TOKEN,
    PARAM_SIGNATURE,
    PARAM_SIGNED_HEADERS,
    CredentialScope,
    Credentials,
    RequestDescriptor,
    SigningContext,
)
from s3presign.signing import build_string_to_sign, compute_signature, derive_scoped_signing_key
from s3presign.validation import (
    require,
    validate_expires,
    validate_extra_params,
    validate_object_key,
    validate_region,
)

logger = logging.getLogger(__name__)


class S3Presigner:
    """Generates presigned GET URLs for objects in one bucket.

    The configuration is checked once at construction and only read
    afterwards, so a single instance may be shared across threads.

    Attributes:
        config: The frozen presigning configuration.
        expires: The resolved default expiry in seconds.
        clock: Time source, read once per ``presign()`` call.
    """

    def __init__(self, config: PresignConfig, clock: Clock | None = None) -> None:
        """Initialize the presigner.

        Args:
            config: Bucket, region, credentials and defaults.
            clock: Time source. Defaults to the system clock.

        Raises:
            ConfigurationError: If a required field is missing or invalid.
            ValidationError: If the default expiry is out of range.
        """
        config.check()
        self.config = config
        self.expires = validate_expires(config.expires)
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.scheme, self.host, self.base_path = resolve_endpoint(config)

    def presign(
        self,
        key: str,
        expires: int | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        """Generate a presigned GET URL for ``key``.

        Args:
            key: The object key. Treated as raw text and percent-encoded
                exactly once.
            expires: Expiry override in seconds. Defaults to the configured
                expiry.
            extra_params: Additional query parameters to sign, such as
                ``response-content-disposition`` or ``versionId``.

        Returns:
            The presigned URL.

        Raises:
            ValidationError: On an invalid key, expiry or query parameter.
            EncodingError: If the key cannot be percent-encoded.
        """
        try:
            url = self._presign(key, expires, extra_params)
        except PresignError as exc:
            metrics.record_presign(exc.code)
            raise
        metrics.record_presign("ok")
        return url

    def _presign(
        self,
        key: str,
        expires: int | None,
        extra_params: Mapping[str, str] | None,
    ) -> str:
        validate_object_key(key)
        expires_seconds = self.expires if expires is None else validate_expires(expires)
        query = dict(extra_params or {})
        validate_extra_params(query)

        context = SigningContext(
            timestamp=format_amz_date(self.clock.now()),
            expires=expires_seconds,
        )
        descriptor = RequestDescriptor(
            host=self.host,
            path=f"{self.base_path}/{key}",
            query=query,
        )

        logger.debug(
            "Presigning GET s3://%s/%s (region=%s, expires=%d)",
            self.config.bucket,
            key,
            self.config.region,
            expires_seconds,
            extra={
                "bucket": self.config.bucket,
                "key": key,
                "region": self.config.region,
                "expires": expires_seconds,
            },
        )

        return presign_request(
            descriptor,
            self.config.credentials,
            self.config.region,
            context,
            scheme=self.scheme,
        )


def generate_presigned_url(
    key: str,
    config: PresignConfig,
    expires: int | None = None,
    extra_params: Mapping[str, str] | None = None,
    clock: Clock | None = None,
) -> str:
    """Generate a presigned GET URL for one object.

    Convenience wrapper around ``S3Presigner`` for one-off calls.

    Example:
        >>> config = PresignConfig(
        ...     region="us-east-2",
        ...     bucket="my-bucket",
        ...     access_key_id="AKIA...",
        ...     secret_key="...",
        ... )
        >>> url = generate_presigned_url("uploads/doc.pdf", config, expires=3600)
    """
    return S3Presigner(config, clock=clock).presign(key, expires=expires, extra_params=extra_params)


def presign_request(
    descriptor: RequestDescriptor,
    credentials: Credentials,
    region: str,
    context: SigningContext,
    scheme: str = "https",
) -> str:
    """Sign a request descriptor and return the presigned URL.

    This is the low-level entry point: the caller chooses host, path and
    signing time explicitly.

    Args:
        descriptor: The request to authorize.
        credentials: Access key ID, secret key and optional session token.
        region: Region for the credential scope.
        context: Signing timestamp and expiry.
        scheme: URL scheme.

    Returns:
        The presigned URL.

    Raises:
        ConfigurationError: If a credential field or the region is missing.
        ValidationError: If the expiry, timestamp or a query parameter is
            invalid.
        EncodingError: If the path or a query component cannot be encoded.
    """
    require("access_key_id", credentials.access_key_id)
    require("secret_key", credentials.secret_key)
    require("region", region)
    validate_region(region)
    context = replace(context, expires=validate_expires(context.expires))
    try:
        parse_amz_date(context.timestamp)
    except ValueError:
        raise ValidationError(f"Invalid signing timestamp: {context.timestamp!r}.")
    validate_extra_params(descriptor.query)

    scope = context.scope(region)
    _, signed_headers = build_canonical_headers(descriptor.signed_headers())
    query = dict(descriptor.query)
    query.update(build_auth_params(credentials, scope, context, signed_headers))

    canonical_request = build_canonical_request(descriptor, query)

    string_to_sign = build_string_to_sign(context.timestamp, scope, str(canonical_request))
    signing_key = derive_scoped_signing_key(credentials.secret_key, scope)
    signature = compute_signature(signing_key, string_to_sign)

    return assemble_url(
        scheme, descriptor.host, canonical_request.uri, canonical_request.query, signature
    )


def build_auth_params(
    credentials: Credentials,
    scope: CredentialScope,
    context: SigningContext,
    signed_headers: str,
) -> dict[str, str]:
    """Build the X-Amz-* query parameters, excluding the signature.

    ``X-Amz-Security-Token`` is included only when a session token is set.
    """
    params = {
        PARAM_ALGORITHM: ALGORITHM,
        PARAM_CREDENTIAL: f"{credentials.access_key_id}/{scope}",
        PARAM_DATE: context.timestamp,
        PARAM_EXPIRES: str(context.expires),
        PARAM_SIGNED_HEADERS: signed_headers,
    }
    if credentials.session_token:
        params[PARAM_SECURITY_TOKEN] = credentials.session_token
    return params


def assemble_url(
    scheme: str, host: str, canonical_uri: str, canonical_query: str, signature: str
) -> str:
    """Assemble the final URL with the signature appended last.

    The query string is the canonical query string verbatim, so the URL
    carries byte-for-byte what was signed.
    """
    signature_param = f"{PARAM_SIGNATURE}={signature}"
    query = f"{canonical_query}&{signature_param}" if canonical_query else signature_param
    return f"{scheme}://{host}{canonical_uri}?{query}"


def resolve_endpoint(config: PresignConfig) -> tuple[str, str, str]:
    """Work out scheme, host and base path for a configuration.

    Virtual-hosted style puts the bucket in the host
    (``my-bucket.s3.us-east-2.amazonaws.com``); path style puts it in the
    path (``s3.us-east-2.amazonaws.com/my-bucket``).

    Bucket names containing dots fall back to path style over https unless
    virtual hosting is requested explicitly, since ``my.bucket.s3...`` does
    not match the endpoint's wildcard certificate.

    Returns:
        A ``(scheme, host, base_path)`` tuple. ``base_path`` has no
        trailing slash.
    """
    if config.endpoint:
        parts = urlsplit(config.endpoint)
        scheme, service_host, prefix = parts.scheme, parts.netloc, parts.path.rstrip("/")
    else:
        scheme, service_host, prefix = "https", f"s3.{config.region}.amazonaws.com", ""

    style = config.resolved_addressing_style
    if config.addressing_style is None and scheme == "https" and "." in config.bucket:
        style = "path"
    if style == "virtual":
        return scheme, f"{config.bucket}.{service_host}", prefix
    return scheme, service_host, f"{prefix}/{config.bucket}"
