"""
phenoattr Logging Utilities - Session Logging for Codec Runs

Overview:
---------
Centralised logging configuration for the attribute-value codec and the CLI.
Provides session-based file logging with unique identifiers, configurable
verbosity, and uniform messages for encode/decode runs and rejected input.

Log Location:
-------------
- Default: ~/.phenoattr/logs/
- Each session creates a timestamped log file with session ID
- A symlink 'phenoattr.log' always points to the latest session
- Can be overridden via PHENOATTR_LOG_DIR environment variable
- Importing phenoattr writes nothing: library loggers only carry a
  NullHandler until setup_logging() runs (the CLI calls it for every
  command)
- If the log directory cannot be created, logging continues without a file

Log File Format:
----------------
- phenoattr_YYYYMMDD_HHMMSS_<session_id>.log  (per-session files)
- phenoattr.log (symlink to latest)

Log Levels:
-----------
- DEBUG: Per-call codec summaries (byte counts, node counts)
- INFO: CLI command flow
- WARNING: Rejected input (limit violations, unknown tags, malformed bytes)
- ERROR: Unexpected failures

Usage:
------
    from phenoattr.utils.logging import get_logger, setup_logging

    log_file = setup_logging(level="DEBUG")
    logger = get_logger(__name__)
    logger.info("Decoding buffer...")
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

# ============================================================================
# Constants
# ============================================================================

DEFAULT_LOG_DIR = Path.home() / ".phenoattr" / "logs"
DEFAULT_LOG_LEVEL = "INFO"
SYMLINK_NAME = "phenoattr.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# File logging includes line numbers
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(session_id)s | %(name)s:%(lineno)d | %(message)s"

_log_file_path: Optional[Path] = None
_session_id: Optional[str] = None


# ============================================================================
# Session ID Filter / Formatter
# ============================================================================

class SessionIdFilter(logging.Filter):
    """Add session_id to all log records."""

    def __init__(self, session_id: str):
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = self.session_id  # type: ignore[attr-defined]
        return True


class SessionFormatter(logging.Formatter):
    """Formatter that adds session_id, defaulting to 'N/A' if not present."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id or "N/A"  # type: ignore[attr-defined]
        return super().format(record)


# ============================================================================
# Setup Functions
# ============================================================================

def generate_session_id() -> str:
    """Generate a short unique session ID (6 characters)."""
    return uuid.uuid4().hex[:6]


def get_log_directory() -> Path:
    """Get the log directory, respecting PHENOATTR_LOG_DIR environment variable."""
    env_log_dir = os.getenv("PHENOATTR_LOG_DIR")
    if env_log_dir:
        return Path(env_log_dir)
    return DEFAULT_LOG_DIR


def generate_log_filename(session_id: str) -> str:
    """Generate a timestamped log filename with session ID."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"phenoattr_{timestamp}_{session_id}.log"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console_output: bool = False,
    quiet: bool = False,
) -> Optional[Path]:
    """
    Initialise phenoattr logging with session-based file and optional console output.

    Parameters
    ----------
    level : str, optional
        Log level: DEBUG, INFO, WARNING, ERROR. Defaults to INFO.
        Can also be set via PHENOATTR_LOG_LEVEL environment variable.
    log_dir : Path, optional
        Directory for log files. Defaults to ~/.phenoattr/logs/
    console_output : bool
        If True, also log to console (stderr). Default False.
    quiet : bool
        If True, suppress console output entirely. Default False.

    Returns
    -------
    Path or None
        Path to the log file being written to, or None when the log
        directory is unusable and file logging is disabled.
    """
    global _log_file_path, _session_id

    _session_id = generate_session_id()

    if level is None:
        level = os.getenv("PHENOATTR_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_dir is None:
        log_dir = get_log_directory()

    root_logger = logging.getLogger("phenoattr")

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for f in root_logger.filters[:]:
        root_logger.removeFilter(f)

    root_logger.setLevel(log_level)
    root_logger.addFilter(SessionIdFilter(_session_id))
    root_logger.propagate = False

    if console_output and not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(SessionFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(console_handler)

    log_file: Optional[Path] = log_dir / generate_log_filename(_session_id)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        # No rotation - each session gets its own file
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as exc:
        log_file = None
        root_logger.addHandler(logging.NullHandler())
        root_logger.warning(f"File logging disabled, cannot write to {log_dir}: {exc}")
    else:
        file_handler.setLevel(log_level)
        file_handler.setFormatter(SessionFormatter(FILE_LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

        symlink_path = log_dir / SYMLINK_NAME
        try:
            if symlink_path.is_symlink() or symlink_path.exists():
                symlink_path.unlink()
            symlink_path.symlink_to(log_file.name)
        except OSError:
            # Symlinks are unavailable on some platforms (e.g. Windows without admin)
            pass

    _log_file_path = log_file

    root_logger.info("=" * 80)
    root_logger.info("phenoattr Logging Session Started")
    root_logger.info(f"  Session ID: {_session_id}")
    root_logger.info(f"  Log file: {log_file}")
    root_logger.info(f"  Log level: {level.upper()}")
    root_logger.info("=" * 80)

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module name.

    Until setup_logging() runs, records go to a NullHandler on the
    ``phenoattr`` logger, so library use opens no files.

    Parameters
    ----------
    name : str
        Module name (typically __name__)

    Returns
    -------
    logging.Logger
        Logger under the ``phenoattr`` namespace
    """
    root_logger = logging.getLogger("phenoattr")
    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    if name.startswith("phenoattr"):
        return logging.getLogger(name)
    return logging.getLogger(f"phenoattr.{name}")


def get_current_log_file() -> Optional[Path]:
    """Return the path to the current log file, if logging is initialised."""
    return _log_file_path


def get_session_id() -> Optional[str]:
    """Return the current session ID, if logging is initialised."""
    return _session_id


# ============================================================================
# Logging Helper Functions - Structured Logging
# ============================================================================

def log_codec_operation(
    logger: logging.Logger,
    operation: str,
    byte_count: int,
    kind: Optional[str] = None,
) -> None:
    """Log a completed encode/decode call at DEBUG level."""
    msg = f"{operation.upper()} ok | {byte_count} bytes"
    if kind:
        msg += f" | root={kind}"
    logger.debug(msg)


def log_limit_violation(
    logger: logging.Logger,
    operation: str,
    error: Exception,
    offset: Optional[int] = None,
) -> None:
    """Log rejected input before the error propagates to the caller."""
    msg = f"✗ REJECTED [{operation}] {type(error).__name__}: {error}"
    if offset is not None:
        msg += f" (offset {offset})"
    logger.warning(msg)
