"""Unified event logger for UniFi Block Clients.

This logger writes to:
1. Home Assistant logs - ALWAYS
2. Rotating file log - when file logging is enabled
3. Daily structured event logs (JSON lines) - when file logging is enabled

File logging is off by default and is switched on from the integration
options (debug logging). All file I/O is done in a background thread so the
event loop never blocks on disk.
"""

from __future__ import annotations

import atexit
import json
import logging
import queue
import threading
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_LOGGER = logging.getLogger(__name__)


class UnifiBlockLogger:
    """Event logger that always reaches the HA log.

    Features:
    - Event-style messages: ``EVENT_NAME | key=value | ...``
    - Optional rotating file (max 5MB, 3 backups)
    - Optional daily structured logs in YEAR/MONTH/DAY format
    - All file I/O runs in a background thread (non-blocking)
    """

    CRITICAL = "critical"
    INFO = "info"
    DEBUG = "debug"
    WARNING = "warning"
    ERROR = "error"

    def __init__(
        self,
        name: str = "events",
        log_dir: Path | None = None,
        file_logging_enabled: bool = False,
        max_file_size_mb: int = 5,
        backup_count: int = 3,
    ) -> None:
        """Initialize the unified logger.

        Args:
            name: Logger name, appended to the integration logger
            log_dir: Base directory for logs (default: component directory/log)
            file_logging_enabled: Whether to start with file logging on
            max_file_size_mb: Max size of the rotating log file
            backup_count: Number of rotated files to keep
        """
        self.name = name
        self._file_logging_enabled = file_logging_enabled
        self._max_file_size_mb = max_file_size_mb
        self._backup_count = backup_count

        if log_dir is None:
            log_dir = Path(__file__).parent.parent / "log"
        self.log_dir = log_dir

        self._ha_logger = logging.getLogger(f"custom_components.unifi_block_clients.{name}")

        self._rotating_log_file = self.log_dir / "unifi_block_clients.log"

        self._write_queue: queue.Queue | None = None
        self._writer_thread: threading.Thread | None = None
        self._atexit_registered = False

        if file_logging_enabled:
            self._start_writer_thread()

    def _start_writer_thread(self) -> None:
        """Start the background writer thread."""
        if self._writer_thread is not None:
            return

        # Each writer drains its own queue, so a stopping writer never
        # consumes the sentinel meant for its successor
        self._write_queue = queue.Queue()
        self._writer_thread = threading.Thread(
            target=self._writer_loop,
            args=(self._write_queue,),
            name="UnifiBlockLogWriter",
            daemon=True,
        )
        self._writer_thread.start()

        if not self._atexit_registered:
            atexit.register(self._shutdown_writer, True)
            self._atexit_registered = True

    def _shutdown_writer(self, wait: bool = False) -> threading.Thread | None:
        """Ask the writer thread to stop once its queue is drained.

        Only joins when ``wait`` is set; the event loop never waits here.

        Returns:
            The stopping thread, or None if no writer was running
        """
        thread, write_queue = self._writer_thread, self._write_queue
        self._writer_thread = None
        self._write_queue = None
        if thread is None or write_queue is None:
            return None

        write_queue.put(None)
        if wait:
            thread.join(timeout=2.0)
        return thread

    def _writer_loop(self, write_queue: queue.Queue) -> None:
        """Background loop that drains the write queue up to the sentinel."""
        file_handler = self._init_file_handler_sync()

        while True:
            item = write_queue.get()
            if item is None:
                break

            event, level, data, timestamp = item
            self._write_to_daily_log_sync(event, level, data, timestamp)

        if file_handler:
            self._ha_logger.removeHandler(file_handler)
            file_handler.close()

    def _init_file_handler_sync(self) -> RotatingFileHandler | None:
        """Create the rotating file handler (runs in background thread)."""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self._rotating_log_file,
                maxBytes=self._max_file_size_mb * 1024 * 1024,
                backupCount=self._backup_count,
                encoding="utf-8",
            )
        except OSError as ex:
            _LOGGER.error("Failed to set up file handler: %s", ex)
            return None

        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        file_handler.setLevel(logging.DEBUG)
        self._ha_logger.addHandler(file_handler)
        return file_handler

    def _get_daily_log_file(self, dt: datetime) -> Path:
        """Get path to the daily structured log file."""
        daily_dir = self.log_dir / str(dt.year) / f"{dt.month:02d}" / f"{dt.day:02d}"
        daily_dir.mkdir(parents=True, exist_ok=True)
        return daily_dir / "events.log"

    def _write_to_daily_log_sync(
        self, event: str, level: str, data: dict, timestamp: datetime
    ) -> None:
        """Append one structured event (runs in background thread)."""
        entry = {
            "timestamp": timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
            "level": level,
            "event": event,
            "data": data,
        }
        try:
            with open(self._get_daily_log_file(timestamp), "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError as ex:
            _LOGGER.error("Failed to write to daily log: %s", ex)

    def _queue_daily_log(self, event: str, level: str, data: dict) -> None:
        """Queue a daily log write (non-blocking)."""
        write_queue = self._write_queue
        if not self._file_logging_enabled or write_queue is None:
            return
        write_queue.put_nowait((event, level, data, datetime.now()))

    def log(self, level: str, event: str, /, **data: Any) -> None:
        """Log an event at the given level.

        Args:
            level: Log level (critical, info, debug, warning, error)
            event: Event name (e.g., "CLIENT_ADDED", "AUTH_FAILED")
            **data: Additional context data; any key, including "event" or "level"
        """
        message = event
        if data:
            data_str = " | ".join(f"{k}={v}" for k, v in data.items())
            message = f"{event} | {data_str}"

        if level == self.CRITICAL:
            self._ha_logger.critical(message)
        elif level == self.ERROR:
            self._ha_logger.error(message)
        elif level == self.WARNING:
            self._ha_logger.warning(message)
        elif level == self.INFO:
            self._ha_logger.info(message)
        else:
            self._ha_logger.debug(message)

        self._queue_daily_log(event, level, data)

    def critical(self, event: str, /, **data: Any) -> None:
        """Log critical event."""
        self.log(self.CRITICAL, event, **data)

    def error(self, event: str, /, **data: Any) -> None:
        """Log error event."""
        self.log(self.ERROR, event, **data)

    def warning(self, event: str, /, **data: Any) -> None:
        """Log warning event."""
        self.log(self.WARNING, event, **data)

    def info(self, event: str, /, **data: Any) -> None:
        """Log info event."""
        self.log(self.INFO, event, **data)

    def debug(self, event: str, /, **data: Any) -> None:
        """Log debug event."""
        self.log(self.DEBUG, event, **data)

    def set_file_logging(self, enabled: bool) -> None:
        """Enable or disable file logging."""
        if enabled == self._file_logging_enabled:
            return

        self._file_logging_enabled = enabled
        if enabled:
            self._start_writer_thread()
        else:
            self._shutdown_writer()

        self.info("FILE_LOGGING_CHANGED", enabled=enabled)

    @property
    def file_logging_enabled(self) -> bool:
        """Check if file logging is enabled."""
        return self._file_logging_enabled

    def get_total_size_kb(self) -> float:
        """Get total size of all log files in KB.

        Note: This method does blocking I/O - call from executor if in async context.
        """
        if not self.log_dir.exists():
            return 0.0
        total = sum(f.stat().st_size for f in self.log_dir.rglob("*.log*"))
        return round(total / 1024, 2)


# Singleton instance
_logger_instance: UnifiBlockLogger | None = None


def get_logger() -> UnifiBlockLogger:
    """Get or create the singleton logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = UnifiBlockLogger()
    return _logger_instance
