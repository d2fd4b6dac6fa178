"""
phenoattr Utilities Package - Cross-Cutting Helpers

Logging configuration shared by the codec, the traversal engine and the CLI,
forwarded through ``__all__`` to keep intra-package imports short.
"""

from .logging import (
    setup_logging,
    get_logger,
    get_current_log_file,
    get_session_id,
    log_codec_operation,
    log_limit_violation,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_current_log_file",
    "get_session_id",
    "log_codec_operation",
    "log_limit_violation",
]
