"""Error definitions for s3presign."""


class PresignError(Exception):
    """A presigning or verification error with a stable code and message.

    Attributes:
        code: Machine-readable error code (e.g. "InvalidArgument").
        message: Human-readable error description.
    """

    def __init__(self, code: str, message: str) -> None:
        """Initialize the error.

        Args:
            code: Error code string.
            message: Error description.
        """
        super().__init__(message)
        self.code = code
        self.message = message


# -- Presigning errors ---------------------------------------------------------


class ConfigurationError(PresignError):
    """A required configuration field is missing, empty or invalid."""

    def __init__(self, message: str = "Invalid configuration.") -> None:
        super().__init__(code="InvalidConfiguration", message=message)


class ValidationError(PresignError):
    """A per-call argument (expiry, object key, query parameter) is invalid."""

    def __init__(self, message: str = "Invalid Argument", code: str = "InvalidArgument") -> None:
        super().__init__(code=code, message=message)


class EncodingError(ValidationError):
    """A path or query component cannot be percent-encoded."""

    def __init__(self, message: str = "Component cannot be percent-encoded.") -> None:
        super().__init__(message=message, code="InvalidEncoding")


# -- Verification errors -------------------------------------------------------


class AccessDenied(PresignError):
    """Access denied error."""

    def __init__(self, message: str = "Access Denied") -> None:
        super().__init__(code="AccessDenied", message=message)


class AuthorizationQueryParametersError(PresignError):
    """Presigned URL query parameters are missing or malformed."""

    def __init__(
        self,
        message: str = "Query-string authentication requires the X-Amz-Algorithm, "
        "X-Amz-Credential, X-Amz-Signature, X-Amz-Date, X-Amz-SignedHeaders, "
        "and X-Amz-Expires parameters.",
    ) -> None:
        super().__init__(code="AuthorizationQueryParametersError", message=message)


class SignatureDoesNotMatch(PresignError):
    """The recomputed signature does not match the one in the URL."""

    def __init__(
        self,
        message: str = "The request signature we calculated does not match the signature "
        "you provided. Check your key and signing method.",
    ) -> None:
        super().__init__(code="SignatureDoesNotMatch", message=message)


class ExpiredPresignedUrl(PresignError):
    """The presigned URL has expired."""

    def __init__(self, message: str = "Request has expired.") -> None:
        super().__init__(code="AccessDenied", message=message)
