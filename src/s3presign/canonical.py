"""Canonical request construction for SigV4 query-string signing.

The canonical request is the exact string that is hashed and signed:

    <METHOD>\\n
    <canonical URI>\\n
    <canonical query string>\\n
    <canonical headers>\\n
    <signed headers>\\n
    <payload hash>

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/API/sig-v4-header-based-auth.html
"""

import re
import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass

from s3presign.errors import EncodingError
from s3presign.models import UNSIGNED_PAYLOAD, RequestDescriptor


@dataclass(frozen=True)
class CanonicalRequest:
    """The components of a canonical request.

    ``uri`` and ``query`` are reused verbatim when the final URL is
    assembled, so the URL carries exactly what was signed.
    """

    method: str
    uri: str
    query: str
    headers: str
    signed_headers: str
    payload_hash: str = UNSIGNED_PAYLOAD

    def __str__(self) -> str:
        return "\n".join(
            [
                self.method,
                self.uri,
                self.query,
                self.headers,
                self.signed_headers,
                self.payload_hash,
            ]
        )


def build_canonical_request(
    descriptor: RequestDescriptor, query_params: Mapping[str, str]
) -> CanonicalRequest:
    """Build the canonical request for a presigned URL.

    Args:
        descriptor: The request being authorized.
        query_params: Every query parameter that will appear in the URL
            except the signature: business parameters plus the X-Amz-*
            authentication parameters.

    Returns:
        The canonical request components.

    Raises:
        EncodingError: If the path or a query component cannot be encoded.
    """
    canonical_headers, signed_headers = build_canonical_headers(descriptor.signed_headers())
    return CanonicalRequest(
        method=descriptor.method.upper(),
        uri=uri_encode_path(descriptor.path),
        query=build_canonical_query_string(query_params),
        headers=canonical_headers,
        signed_headers=signed_headers,
    )


def uri_encode(s: str, encode_slash: bool = True) -> str:
    """S3-compatible URI encoding.

    Characters A-Z, a-z, 0-9, '-', '_', '.', '~' are not encoded.
    All other characters are UTF-8 encoded and percent-encoded with
    uppercase hex.  Spaces become %20 (not +).

    Args:
        s: The string to encode.
        encode_slash: If True (default), '/' is encoded as %2F.
                     If False, '/' is left as-is.

    Returns:
        The URI-encoded string.

    Raises:
        EncodingError: If ``s`` is not valid Unicode text (e.g. it contains
            lone surrogates).
    """
    safe = "-_.~" if encode_slash else "-_.~/"
    try:
        return urllib.parse.quote(s, safe=safe, encoding="utf-8", errors="strict")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"Cannot percent-encode {s!r}: {exc.reason}.") from exc


def uri_encode_path(path: str) -> str:
    """URI-encode a path, preserving forward slashes.

    Each path segment is individually URI-encoded.  Input is treated as raw
    text, so an existing '%XX' sequence is encoded again ('%' -> '%25').

    Args:
        path: The unencoded URI path.

    Returns:
        The URI-encoded path, always starting with '/'.
    """
    if not path:
        return "/"
    encoded = "/".join(uri_encode(segment) for segment in path.split("/"))
    if not encoded.startswith("/"):
        encoded = "/" + encoded
    return encoded


def build_canonical_query_string(params: Mapping[str, str]) -> str:
    """Build the canonical query string from unencoded parameters.

    Names and values are URI-encoded ('/' included), then sorted by encoded
    name and, for equal names, by encoded value.  Empty values are kept as
    'name='.

    Args:
        params: Query parameters, name -> unencoded value.

    Returns:
        The canonical query string (no leading '?').
    """
    encoded = sorted((uri_encode(name), uri_encode(value)) for name, value in params.items())
    return "&".join(f"{name}={value}" for name, value in encoded)


def build_canonical_headers(headers: Mapping[str, str]) -> tuple[str, str]:
    """Build the canonical headers block and the signed headers list.

    Args:
        headers: Headers to sign, name -> value.

    Returns:
        A ``(canonical_headers, signed_headers)`` pair.  Every canonical
        header line ends with a newline.
    """
    lower_headers = {name.lower(): trim_header_value(value) for name, value in headers.items()}
    names = sorted(lower_headers)
    canonical_headers = "".join(f"{name}:{lower_headers[name]}\n" for name in names)
    return canonical_headers, ";".join(names)


def trim_header_value(value: str) -> str:
    """Trim and normalize a header value for canonical headers.

    Strips leading/trailing whitespace and collapses sequential spaces
    to a single space.
    """
    return re.sub(r" +", " ", value.strip())
