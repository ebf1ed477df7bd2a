"""Unit tests for coursereg logging configuration."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from coursereg.logging import get_logger, sanitize_for_log, setup_logging


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_log_directory(self) -> None:
        """Log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "nested" / "logs"
            setup_logging(log_dir=log_dir, console=False)

            assert log_dir.exists()

    def test_writes_to_log_file(self) -> None:
        """Log messages are written to the file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=False)
            logger.info("test message 123")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            assert "test message 123" in content

    def test_log_format(self) -> None:
        """Log entries carry level and logger name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=False)
            logger.info("format test")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            # Format: 2026-01-28 16:30:45 | INFO     | coursereg | message
            assert " | INFO" in content
            assert " | coursereg | " in content

    def test_all_components_write_to_same_file(self) -> None:
        """Component loggers write to the shared log file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)

            logging.getLogger("coursereg.workflow.workflow").info("workflow log")
            logging.getLogger("coursereg.registry.store").info("store log")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            assert "workflow log" in content
            assert "coursereg.registry.store" in content

    def test_log_level_configurable(self) -> None:
        """Log level filters messages appropriately."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, level="WARNING", console=False)
            logger = logging.getLogger("coursereg")
            logger.info("should not appear")
            logger.warning("should appear")

            content = (Path(tmpdir) / "coursereg.log").read_text()
            assert "should not appear" not in content
            assert "should appear" in content

    @patch.dict(os.environ, {"COURSEREG_LOG_LEVEL": "DEBUG"})
    def test_log_level_from_env(self) -> None:
        """Log level can be set via environment variable."""
        with tempfile.TemporaryDirectory() as tmpdir:
            logger = setup_logging(log_dir=tmpdir, console=False)

            assert logger.level == logging.DEBUG

    def test_log_dir_from_env(self) -> None:
        """Log directory can be set via environment variable."""
        with (
            tempfile.TemporaryDirectory() as tmpdir,
            patch.dict(os.environ, {"COURSEREG_LOG_DIR": tmpdir}),
        ):
            setup_logging(console=False)

            assert (Path(tmpdir) / "coursereg.log").exists()

    def test_no_duplicate_handlers_on_repeated_setup(self) -> None:
        """Repeated setup_logging calls don't add duplicate handlers."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, console=False)
            setup_logging(log_dir=tmpdir, console=False)

            assert len(logging.getLogger("coursereg").handlers) == 1

    def test_rotation_configured(self) -> None:
        """RotatingFileHandler is configured with the given size and backups."""
        with tempfile.TemporaryDirectory() as tmpdir:
            setup_logging(log_dir=tmpdir, max_bytes=1024, backup_count=3, console=False)

            handlers = [h for h in logging.getLogger("coursereg").handlers if hasattr(h, "maxBytes")]
            assert len(handlers) == 1
            assert handlers[0].maxBytes == 1024
            assert handlers[0].backupCount == 3


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_prefixes_package(self) -> None:
        assert get_logger("workflow").name == "coursereg.workflow"

    def test_get_logger_no_double_prefix(self) -> None:
        assert get_logger("coursereg.registry").name == "coursereg.registry"


@pytest.mark.unit
class TestSanitize:
    """Tests for sanitize_for_log function."""

    def test_masks_dashed_id_card(self) -> None:
        result = sanitize_for_log("id 1-2345-67890-12-3 submitted")
        assert "67890" not in result
        assert "[ID_CARD]" in result

    def test_masks_plain_id_card(self) -> None:
        result = sanitize_for_log("id 1234567890123")
        assert result == "id [ID_CARD]"

    def test_masks_email_local_part(self) -> None:
        result = sanitize_for_log("applicant somchai.k@hospital.go.th")
        assert "somchai" not in result
        assert "***@hospital.go.th" in result

    def test_safe_text_unchanged(self) -> None:
        text = "Workflow abc123 moved to contact"
        assert sanitize_for_log(text) == text
