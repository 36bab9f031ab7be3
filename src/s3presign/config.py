"""Configuration loading and Pydantic models for s3presign."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field

from s3presign.errors import ConfigurationError
from s3presign.models import DEFAULT_EXPIRES, Credentials
from s3presign.validation import require, validate_bucket_name, validate_region

ADDRESSING_STYLES = ("virtual", "path")


class PresignConfig(BaseModel):
    """Reusable presigning configuration.

    Frozen so that one instance can be shared by any number of concurrent
    signing calls.  ``expires`` is the resolved default validity window;
    per-call overrides do not modify it.
    """

    model_config = ConfigDict(frozen=True)

    region: str = ""
    bucket: str = ""
    access_key_id: str = ""
    secret_key: str = Field(default="", repr=False)
    session_token: str | None = Field(default=None, repr=False)
    expires: int = DEFAULT_EXPIRES
    endpoint: str | None = None
    addressing_style: str | None = None

    @property
    def credentials(self) -> Credentials:
        """The signing credentials held by this configuration."""
        return Credentials(
            access_key_id=self.access_key_id,
            secret_key=self.secret_key,
            session_token=self.session_token or None,
        )

    @property
    def resolved_addressing_style(self) -> str:
        """'virtual' or 'path'; custom endpoints default to path style."""
        if self.addressing_style:
            return self.addressing_style
        return "path" if self.endpoint else "virtual"

    def check(self) -> None:
        """Check that every required field is present and well formed.

        Raises:
            ConfigurationError: On a missing or invalid field.
        """
        require("region", self.region)
        require("bucket", self.bucket)
        require("access_key_id", self.access_key_id)
        require("secret_key", self.secret_key)
        validate_region(self.region)
        validate_bucket_name(self.bucket)
        if self.addressing_style is not None and self.addressing_style not in ADDRESSING_STYLES:
            raise ConfigurationError(
                f"addressing_style must be one of {', '.join(ADDRESSING_STYLES)}; "
                f"got {self.addressing_style!r}."
            )
        if self.endpoint:
            parts = urlsplit(self.endpoint)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ConfigurationError(f"Invalid endpoint URL: {self.endpoint!r}.")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"


class S3PresignSettings(BaseModel):
    """Top-level s3presign configuration file contents."""

    s3: PresignConfig = Field(default_factory=PresignConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def credentials_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Read credentials and region from the standard AWS environment variables.

    Only variables that are set and non-empty are returned.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        A dict of PresignConfig field names to values.
    """
    if environ is None:
        environ = os.environ
    mapping = {
        "access_key_id": ("AWS_ACCESS_KEY_ID",),
        "secret_key": ("AWS_SECRET_ACCESS_KEY",),
        "session_token": ("AWS_SESSION_TOKEN",),
        "region": ("AWS_REGION", "AWS_DEFAULT_REGION"),
    }
    result: dict[str, Any] = {}
    for field_name, names in mapping.items():
        for name in names:
            value = environ.get(name)
            if value:
                result[field_name] = value
                break
    return result


def _parse_s3(
    s3: dict[str, Any] | None,
    credentials: dict[str, Any] | None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Merge the s3 and credentials sections, falling back to the environment.

    Values in the file win over environment variables.
    """
    result = credentials_from_env(environ)
    if s3:
        for name in ("region", "bucket", "endpoint", "addressing_style"):
            if s3.get(name):
                result[name] = s3[name]
        if s3.get("expires") is not None:
            result["expires"] = s3["expires"]
    if credentials:
        for name in ("access_key_id", "secret_key", "session_token"):
            if credentials.get(name):
                result[name] = credentials[name]
    return result


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> S3PresignSettings:
    """Load S3PresignSettings from a YAML file.

    Args:
        path: Path to the YAML configuration file.
        environ: Environment used for credential fallback. Defaults to
            ``os.environ``.

    Returns:
        A populated S3PresignSettings validated by Pydantic.  Required-field
        checks are deferred to ``PresignConfig.check()``.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return S3PresignSettings(
        s3=PresignConfig(**_parse_s3(raw.get("s3"), raw.get("credentials"), environ)),
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
    )
