"""
Logging Handler

Owns the Lakach log directory: per-run rotation of the log file, the size
capped file handler every module logs into, and the quiet console handler
that has to get out of the way once curses takes the terminal.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional

DEFAULT_LOG_FILE = "lakach.log"
MAX_LOG_BYTES = 1024 * 1024
LOG_BACKUPS = 5


class LoggingHandler:
    """
    Log setup for the lakach package logger.

    Files live in <data dir>/logs/. Each run starts a fresh file (the
    previous one becomes .1, .2, ...), and a running session rolls over by
    size. Only errors reach the console.

    Usage:
        handler = LoggingHandler()
        handler.rotate_log_for_logger()
        logger = handler.setup_logger('lakach')
    """
    def __init__(self, log_dir: Optional[Path] = None):
        if log_dir is None:
            from lakach.shared.paths import get_lakach_logs_dir
            log_dir = get_lakach_logs_dir()
        self.log_dir = Path(log_dir)
        self.ensure_log_directory()

    def ensure_log_directory(self) -> None:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"Cannot create log directory {self.log_dir}: {e}")

    @staticmethod
    def _backup_path(log_file_path: Path, index: int) -> Path:
        return log_file_path.with_name(f"{log_file_path.name}.{index}")

    def rotate_log_file_per_run(self, log_file_path: Path, backup_count: int = LOG_BACKUPS):
        """Shift name -> name.1 -> ... -> name.<backup_count>, dropping the last one."""
        if not log_file_path.exists():
            return
        self._backup_path(log_file_path, backup_count).unlink(missing_ok=True)
        for index in reversed(range(1, backup_count)):
            older = self._backup_path(log_file_path, index)
            if older.exists():
                older.rename(self._backup_path(log_file_path, index + 1))
        log_file_path.rename(self._backup_path(log_file_path, 1))

    def rotate_log_for_logger(self, log_file: Optional[str] = None, backup_count: int = LOG_BACKUPS):
        """Start a new log file for this run. Call before setup_logger()."""
        self.rotate_log_file_per_run(self.log_dir / (log_file or DEFAULT_LOG_FILE),
                                     backup_count=backup_count)

    def setup_logger(self, name: str, log_file: Optional[str] = None,
                     level: int = logging.WARNING) -> logging.Logger:
        """
        Attach the console and file handlers to a logger (idempotent).

        Args:
            name: Logger name; 'lakach' covers every module in the package
            log_file: File name inside the log directory
            level: Logger level; handlers filter further

        Returns:
            logging.Logger: The configured logger
        """
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False

        if not any(type(h) is logging.StreamHandler for h in logger.handlers):
            console = logging.StreamHandler()
            console.setLevel(logging.ERROR)
            console.setFormatter(logging.Formatter('lakach %(levelname)s: %(message)s'))
            logger.addHandler(console)

        file_path = (self.log_dir / (log_file or DEFAULT_LOG_FILE)).resolve()
        already_attached = any(
            isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == str(file_path)
            for h in logger.handlers
        )
        if not already_attached:
            rotating = logging.handlers.RotatingFileHandler(
                file_path, encoding='utf-8', maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
            )
            rotating.setLevel(logging.DEBUG)
            rotating.setFormatter(logging.Formatter(
                '%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s'
            ))
            logger.addHandler(rotating)

        return logger

    def remove_console_output(self, logger: logging.Logger) -> None:
        """Drop console handlers while a full-screen UI owns the terminal."""
        for handler in list(logger.handlers):
            if type(handler) is logging.StreamHandler:
                logger.removeHandler(handler)

    def get_log_files(self) -> List[Path]:
        """Current log plus its rotated backups."""
        return sorted(self.log_dir.glob("*.log*"))
