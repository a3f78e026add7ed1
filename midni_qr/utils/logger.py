"""
Centralized logger for the MiDNI QR decoder.

Provides configurable logging with file and console output,
level filtering, and consistent formatting.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


class QRLogger:
    """
    Centralized logger factory with file and console output.
    """

    _loggers = {}

    @staticmethod
    def get_logger(
        name: str,
        log_dir: Optional[str] = None,
        level: int = logging.INFO,
        console_output: bool = True,
    ) -> logging.Logger:
        """
        Get or create a configured logger.

        Args:
            name: Logger name (e.g. "midni_qr", "midni_qr.api")
            log_dir: Directory for log files (optional)
            level: Minimum log level (default: INFO)
            console_output: If True, also log to stdout

        Returns:
            Configured logger ready for use
        """
        if name in QRLogger._loggers:
            return QRLogger._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False

        # Evita handler duplicati
        logger.handlers.clear()

        # [2026-10-19 14:30:45] [midni_qr] [INFO] Message
        formatter = logging.Formatter(
            fmt="[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_path / f"{name}.log", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        QRLogger._loggers[name] = logger
        return logger

    @staticmethod
    def for_component(component: str, level: int = logging.INFO) -> logging.Logger:
        """
        Logger for a pipeline component, named "<root>.<component>".

        An existing logger is re-levelled so that a parser built with a
        different config level takes effect.
        """
        from midni_qr.config import QR_CONSTANTS

        name = f"{QR_CONSTANTS.LOGGER_NAME}.{component}"
        if name in QRLogger._loggers:
            QRLogger.set_level(name, level)
            return QRLogger._loggers[name]
        return QRLogger.get_logger(name, level=level)

    @staticmethod
    def set_level(name: str, level: int):
        """Changes log level for an existing logger."""
        if name in QRLogger._loggers:
            logger = QRLogger._loggers[name]
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)

    @staticmethod
    def set_all_levels(level: int):
        """Changes log level for every cached logger."""
        for name in list(QRLogger._loggers):
            QRLogger.set_level(name, level)

    @staticmethod
    def clear_cache():
        """Clears logger cache."""
        QRLogger._loggers.clear()
