"""s3presign - SigV4 presigned GET URLs for private S3 objects."""

from s3presign.clock import FixedClock, SystemClock
from s3presign.config import PresignConfig, load_config
from s3presign.errors import ConfigurationError, EncodingError, PresignError, ValidationError
from s3presign.metrics import init_metrics
from s3presign.models import CredentialScope, Credentials, RequestDescriptor, SigningContext
from s3presign.presigner import S3Presigner, generate_presigned_url, presign_request
from s3presign.verify import VerifiedURL, verify_presigned_url

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "CredentialScope",
    "Credentials",
    "EncodingError",
    "FixedClock",
    "PresignConfig",
    "PresignError",
    "RequestDescriptor",
    "S3Presigner",
    "SigningContext",
    "SystemClock",
    "ValidationError",
    "VerifiedURL",
    "generate_presigned_url",
    "init_metrics",
    "load_config",
    "presign_request",
    "verify_presigned_url",
]
