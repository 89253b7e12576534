"""Logging configuration for the Helix task bot.

Two handlers are attached to the root logger:

1. **Console** -- :class:`SafeStreamHandler` with a compact
   ``HH:MM:SS LEVEL message`` format; characters the console cannot
   encode (emoji, progress-bar blocks on narrow Windows code pages) are
   replaced instead of raising.
2. **File** -- :class:`CompressedRotatingFileHandler` writing the full
   format to ``logs/testnet_task.log``; rotated files (10 MiB each, 5
   kept) are gzip-compressed.

A ``SUCCESS`` level (25, between ``INFO`` and ``WARNING``) is registered
for completed tasks.

Usage::

    from core.logging_setup import setup_logging
    setup_logging("DEBUG")
"""

import gzip
import logging
import os
import shutil
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

SUCCESS: int = 25
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
CONSOLE_FORMAT = '%(asctime)s %(levelname)-7s %(message)s'
CONSOLE_DATEFMT = '%H:%M:%S'
DEFAULT_LOG_FILE = os.path.join("logs", "testnet_task.log")
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

logging.addLevelName(SUCCESS, "SUCCESS")


def _gz_name(default_name: str) -> str:
    return f"{default_name}.gz"


def _gzip_rotate(source: str, dest: str) -> None:
    with open(source, 'rb') as f_in, gzip.open(dest, 'wb') as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)


class CompressedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler whose backups are ``<name>.N.gz`` archives."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.namer = _gz_name
        self.rotator = _gzip_rotate


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that degrades unencodable characters to ``?``."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record) + self.terminator
            try:
                self.stream.write(msg)
            except UnicodeEncodeError:
                encoding = getattr(self.stream, 'encoding', None) or 'ascii'
                self.stream.write(
                    msg.encode(encoding, errors='replace').decode(encoding),
                )
            self.flush()
        except Exception:
            self.handleError(record)


def _force_utf8_console() -> None:
    """Switch the Windows console streams to UTF-8 where possible."""
    if sys.platform != "win32":
        return
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, 'reconfigure', None)
        if reconfigure is None:
            continue
        try:
            reconfigure(encoding='utf-8', errors='replace')
        except (ValueError, OSError):
            # Stream already in use; SafeStreamHandler still replaces
            os.environ['PYTHONIOENCODING'] = 'utf-8:replace'


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger with console and file handlers.

    Args:
        log_level: Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).
            Unknown names fall back to ``INFO``.
        log_file: Log file path; defaults to ``logs/testnet_task.log``.
    """
    # Must happen before the StreamHandler captures sys.stdout
    _force_utf8_console()

    level = getattr(logging, log_level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    log_path = log_file or DEFAULT_LOG_FILE
    log_dir = os.path.dirname(log_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    file_handler = CompressedRotatingFileHandler(
        log_path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8',
    )
    stream_handler = SafeStreamHandler(sys.stdout)
    stream_handler.setFormatter(
        logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT),
    )

    # basicConfig only applies LOG_FORMAT to handlers without a formatter
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[file_handler, stream_handler],
        force=True,
    )
