# tests/test_logging.py
"""Tests for session logging and codec log helpers."""

import logging
import os
import subprocess
import sys
from pathlib import Path


class TestSessionLogging:

    def test_setup_creates_session_file_and_symlink(self, tmp_path):
        """setup_logging writes a session file and a latest symlink."""
        from phenoattr.utils.logging import SYMLINK_NAME, get_current_log_file, get_session_id, setup_logging

        log_file = setup_logging(level="DEBUG", log_dir=tmp_path)
        assert log_file.parent == tmp_path
        assert log_file.name.startswith("phenoattr_")
        assert get_session_id() in log_file.name
        assert get_current_log_file() == log_file
        link = tmp_path / SYMLINK_NAME
        if link.is_symlink():
            assert link.resolve() == log_file.resolve()

    def test_unusable_log_dir_disables_file_logging(self, tmp_path):
        """An unusable log directory falls back to no file logging."""
        from phenoattr.utils.logging import get_current_log_file, get_logger, setup_logging

        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        assert setup_logging(log_dir=blocker / "logs") is None
        assert get_current_log_file() is None
        get_logger("tests").warning("still usable")

    def test_get_logger_opens_no_files(self, tmp_path, monkeypatch):
        """get_logger alone never creates a log directory."""
        from phenoattr.utils.logging import get_logger

        log_dir = tmp_path / "logs"
        monkeypatch.setenv("PHENOATTR_LOG_DIR", str(log_dir))
        get_logger("phenoattr.attributes.codec").warning("library record")
        assert not log_dir.exists()

    def test_import_with_unusable_home(self, tmp_path):
        """The package imports and runs with an unusable HOME."""
        blocker = tmp_path / "home_is_a_file"
        blocker.write_text("", encoding="utf-8")
        env = {k: v for k, v in os.environ.items() if k != "PHENOATTR_LOG_DIR"}
        env["HOME"] = str(blocker / "home")
        code = (
            "import phenoattr\n"
            "codec = phenoattr.AttributeCodec()\n"
            "assert codec.decode(codec.encode(phenoattr.AttributeValue.null())).is_null\n"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parents[1],
            env=env,
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, result.stderr

    def test_get_logger_namespaces(self):
        """Loggers live under the phenoattr namespace."""
        from phenoattr.utils.logging import get_logger

        assert get_logger("phenoattr.attributes.codec").name == "phenoattr.attributes.codec"
        assert get_logger("tests").name == "phenoattr.tests"


class TestCodecLogging:

    def test_rejected_decode_is_logged(self, caplog):
        """A rejected decode is logged before raising."""
        import pytest

        from phenoattr.attributes import AttributeCodec
        from phenoattr.config import CodecLimits
        from phenoattr.errors import UnknownVariantError

        logger = logging.getLogger("phenoattr")
        logger.addHandler(caplog.handler)
        try:
            with caplog.at_level(logging.WARNING, logger="phenoattr"):
                with pytest.raises(UnknownVariantError):
                    AttributeCodec(limits=CodecLimits()).decode(b"\x01\x63")
        finally:
            logger.removeHandler(caplog.handler)
        assert any("REJECTED [decode] UnknownVariantError" in r.getMessage() for r in caplog.records)

    def test_log_codec_operation(self, caplog):
        """log_codec_operation formats a one-line summary."""
        from phenoattr.utils.logging import log_codec_operation

        logger = logging.getLogger("phenoattr.test_helpers")
        logger.addHandler(caplog.handler)
        try:
            with caplog.at_level(logging.DEBUG, logger="phenoattr.test_helpers"):
                log_codec_operation(logger, "encode", 12, "MAP")
        finally:
            logger.removeHandler(caplog.handler)
        assert caplog.records[-1].getMessage() == "ENCODE ok | 12 bytes | root=MAP"
