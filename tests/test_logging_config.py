"""Tests for logging configuration and secret hygiene in log output."""

import io
import json
import logging
import sys

from s3presign.logging_config import JSONFormatter, configure_logging
from s3presign.presigner import S3Presigner


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_text_format(self, restore_root_logger):
        """Text format writes human-readable lines."""
        stream = io.StringIO()
        configure_logging(level="INFO", fmt="text", stream=stream)
        logging.getLogger("s3presign.test").info("hello %s", "world")
        assert "INFO s3presign.test: hello world" in stream.getvalue()

    def test_json_format(self, restore_root_logger):
        """JSON format writes one object per line with extras."""
        stream = io.StringIO()
        configure_logging(level="DEBUG", fmt="json", stream=stream)
        logging.getLogger("s3presign.test").debug(
            "signed", extra={"bucket": "my-bucket", "expires": 60}
        )
        entry = json.loads(stream.getvalue().strip())
        assert entry["level"] == "DEBUG"
        assert entry["logger"] == "s3presign.test"
        assert entry["message"] == "signed"
        assert entry["bucket"] == "my-bucket"
        assert entry["expires"] == 60

    def test_level_filters(self, restore_root_logger):
        """Records below the configured level are dropped."""
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream)
        logging.getLogger("s3presign.test").info("quiet")
        assert stream.getvalue() == ""

    def test_replaces_existing_handlers(self, restore_root_logger):
        """Only the newly installed handler remains on the root logger."""
        handler = configure_logging(stream=io.StringIO())
        assert logging.getLogger().handlers == [handler]


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_exception_included(self):
        """Exception text is included when a record carries exc_info."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.getLogger("x").makeRecord(
                "x", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
            )
        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]


class TestPresignLogging:
    """Presigning logs context but never secrets."""

    def test_debug_log_has_context_without_secrets(self, config, clock, caplog):
        """Bucket and key are logged; secret key and signature are not."""
        cfg = config.model_copy(update={"session_token": "session-token-value"})
        with caplog.at_level(logging.DEBUG, logger="s3presign"):
            url = S3Presigner(cfg, clock=clock).presign("uploads/doc.pdf")

        assert "my-bucket" in caplog.text
        assert "uploads/doc.pdf" in caplog.text
        assert cfg.secret_key not in caplog.text
        assert "session-token-value" not in caplog.text
        signature = url.rsplit("X-Amz-Signature=", 1)[1]
        assert signature not in caplog.text
