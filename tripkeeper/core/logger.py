"""
Logging setup
The [logging] config section drives one console handler and, unless
logging.to_file is false, a rotating tripkeeper.log plus an error-only error.log
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Dict, Optional

from tripkeeper.config.loader import get_config

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"

_SIZE_UNITS = {
    "": 1, "B": 1,
    "K": 1024, "KB": 1024,
    "M": 1024**2, "MB": 1024**2,
    "G": 1024**3, "GB": 1024**3,
}
_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([KMG]?B?)\s*$", re.IGNORECASE)


def parse_size(value) -> int:
    """Byte count from 4096, "512KB", "10MB" or "1GB" """
    match = _SIZE_PATTERN.match(str(value))
    if match is None:
        raise ValueError(f"Invalid log file size: {value!r}")
    number, unit = match.groups()
    return int(number) * _SIZE_UNITS[unit.upper()]


def _rotating_handler(
    path: Path, level: int, max_bytes: int, backups: int
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


class LoggerManager:
    """Owns the root logger's handlers"""

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self.configure()

    def configure(self):
        """(Re)build root handlers from the current configuration"""
        config = get_config()
        level_name = str(config.get("logging.level", "INFO")).upper()

        root = logging.getLogger()
        root.setLevel(getattr(logging, level_name, logging.INFO))
        root.handlers.clear()

        console = logging.StreamHandler()
        console.setLevel(logging.DEBUG)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root.addHandler(console)

        if not config.get("logging.to_file", True):
            return

        logs_dir = Path(config.get("logging.logs_dir", "./logs")).expanduser()
        logs_dir.mkdir(parents=True, exist_ok=True)
        max_bytes = parse_size(config.get("logging.max_file_size", "10MB"))
        backups = int(config.get("logging.backup_count", 5))

        root.addHandler(_rotating_handler(logs_dir / "tripkeeper.log", logging.DEBUG, max_bytes, backups))
        root.addHandler(_rotating_handler(logs_dir / "error.log", logging.ERROR, max_bytes, backups))

    def get_logger(self, name: str) -> logging.Logger:
        return self._loggers.setdefault(name, logging.getLogger(name))


# Created on first use (lazy initialization to avoid circular imports)
_logger_manager: Optional[LoggerManager] = None


def get_logger(name: str) -> logging.Logger:
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    return _logger_manager.get_logger(name)


def setup_logging():
    """Apply the logging section again, e.g. after loading another config file"""
    global _logger_manager
    if _logger_manager is None:
        _logger_manager = LoggerManager()
    else:
        _logger_manager.configure()
