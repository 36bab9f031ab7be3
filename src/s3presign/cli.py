"""CLI entry point for s3presign."""

import argparse
import logging
import sys
from pathlib import Path

from s3presign.config import PresignConfig, S3PresignSettings, credentials_from_env, load_config
from s3presign.errors import PresignError
from s3presign.logging_config import LOG_FORMATS, configure_logging
from s3presign.presigner import S3Presigner


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="s3presign",
        description="Generate a time-limited presigned GET URL for an S3 object",
    )
    parser.add_argument("key", help="Object key, e.g. uploads/doc.pdf")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: environment variables only)",
    )
    parser.add_argument("--bucket", type=str, default=None, help="Bucket name (overrides config)")
    parser.add_argument("--region", type=str, default=None, help="Region (overrides config)")
    parser.add_argument(
        "--expires",
        "-e",
        type=int,
        default=None,
        help="Expiration time in seconds, 1-604800 (default: config value or 3600)",
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        default=None,
        help="Custom S3-compatible endpoint URL, e.g. https://minio.example.com:9000",
    )
    parser.add_argument(
        "--path-style",
        action="store_true",
        help="Use path-style addressing (bucket in the path instead of the host)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=list(LOG_FORMATS),
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the s3presign CLI.

    Loads configuration, applies CLI overrides, and prints one presigned
    URL on stdout.  Logs go to stderr.  Exits with status 1 on any
    configuration or validation error.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].
    """
    args = parse_args(argv)

    # Use a basic stderr logger for config-loading errors
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    logger = logging.getLogger("s3presign")

    if args.config is not None:
        try:
            settings = load_config(args.config)
        except FileNotFoundError:
            logger.error("Config file not found: %s", args.config)
            sys.exit(1)
        except Exception as exc:
            logger.error("Failed to load config: %s", exc)
            sys.exit(1)
    else:
        settings = S3PresignSettings(s3=PresignConfig(**credentials_from_env()))

    # Apply CLI overrides
    overrides: dict[str, object] = {}
    if args.bucket is not None:
        overrides["bucket"] = args.bucket
    if args.region is not None:
        overrides["region"] = args.region
    if args.endpoint is not None:
        overrides["endpoint"] = args.endpoint
    if args.path_style:
        overrides["addressing_style"] = "path"
    config = settings.s3.model_copy(update=overrides)

    configure_logging(
        level=args.log_level or settings.logging.level,
        fmt=args.log_format or settings.logging.format,
    )

    try:
        presigner = S3Presigner(config)
        url = presigner.presign(args.key, expires=args.expires)
    except PresignError as exc:
        logger.error("%s: %s", exc.code, exc.message, extra={"error_code": exc.code})
        sys.exit(1)

    print(url)


if __name__ == "__main__":
    main()
