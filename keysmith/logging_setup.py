"""Secure logging setup: no secrets in logs, rotation, OS-appropriate dir."""

from __future__ import annotations

import logging
import logging.handlers
import os
import platform
from pathlib import Path

from keysmith.paths import get_log_path

# String arguments longer than this are logged as a length only
MAX_LOGGED_STR = 32


class SecureFormatter(logging.Formatter):
    """Formatter that sanitises potentially sensitive arguments."""

    def format(self, record):
        if hasattr(record, "args") and record.args and isinstance(record.args, tuple):
            safe = []
            for arg in record.args:
                if isinstance(arg, (bytes, bytearray)):
                    safe.append(f"<{len(arg)} bytes>")
                elif isinstance(arg, str) and len(arg) > MAX_LOGGED_STR:
                    safe.append(f"<{len(arg)} chars>")
                else:
                    safe.append(arg)
            record.args = tuple(safe)
        return super().format(record)


def setup_secure_logging(
    log_dir: Path, level: int = logging.INFO, console: bool = False
) -> logging.Logger:
    """Configure the *keysmith* logger with rotation and safe formatting."""
    log_dir.mkdir(parents=True, exist_ok=True)
    if platform.system() != "Windows":
        try:
            os.chmod(log_dir, 0o700)
        except OSError:
            pass

    log_file = get_log_path(log_dir)

    formatter = SecureFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root_logger = logging.getLogger("keysmith")
    root_logger.setLevel(level)
    # avoid duplicate handlers on repeated calls; foreign handlers don't count
    log_target = os.path.abspath(log_file)
    has_file = any(
        isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == log_target
        for h in root_logger.handlers
    )
    if not has_file:
        handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    has_console = any(type(h) is logging.StreamHandler for h in root_logger.handlers)
    if console and not has_console:
        stream = logging.StreamHandler()
        stream.setFormatter(SecureFormatter("%(levelname)s %(name)s: %(message)s"))
        root_logger.addHandler(stream)
    root_logger.propagate = False

    try:
        if platform.system() != "Windows":
            os.chmod(log_file, 0o600)
    except OSError:
        pass

    return root_logger
