import logging
import os
import sys
from datetime import datetime
from logging import Logger, StreamHandler
from logging.handlers import TimedRotatingFileHandler
from typing import Literal

from pythonjsonlogger.json import JsonFormatter


class ColoredStructuredFormatter(logging.Formatter):
    """Colored console formatter with a dedicated layout for evaluation reports."""

    COLORS = {
        'DEBUG': '\033[36m',  # Cyan
        'INFO': '\033[32m',  # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',  # Red
        'RESET': '\033[0m'
    }

    def format(self, record):
        # Evaluation reports carry a trigger reason
        if hasattr(record, 'reason'):
            level_color = self.COLORS.get(record.levelname, '')
            reset = self.COLORS['RESET']

            msg_parts = [f"{level_color}[{record.reason}]{reset}", record.getMessage()]

            details = []
            if hasattr(record, 'phase'):
                details.append(f"  ⏳ Wait phase: {record.phase}")
            if hasattr(record, 'identity'):
                details.append(f"  🏷  Faction: {record.identity or '(not found)'}")
            if hasattr(record, 'source'):
                count = getattr(record, 'count', 0)
                details.append(f"  📚 List source: {record.source} ({count})")
            if hasattr(record, 'matched'):
                forced = getattr(record, 'forced', False)
                details.append(f"  🔎 In alliance (match | force): {record.matched} | {forced}")
            if hasattr(record, 'placement'):
                details.append(f"  📌 Inserted: {record.placement}")

            full_msg = " ".join(msg_parts)
            if details:
                full_msg += "\n" + "\n".join(details)
            return full_msg

        # For other logs show the level only for ERROR/WARNING
        level_indicator = ""
        if record.levelname == 'ERROR':
            level_indicator = f"{self.COLORS['ERROR']}[ERROR]{self.COLORS['RESET']} "
        elif record.levelname == 'WARNING':
            level_indicator = f"{self.COLORS['WARNING']}[WARN]{self.COLORS['RESET']} "

        return f"{level_indicator}{record.getMessage()}"


class HumanReadableFormatter(logging.Formatter):
    """Human-readable file log format, keeps structured extras as key=value."""

    SKIP_FIELDS = {
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
        'filename', 'module', 'lineno', 'funcName', 'created',
        'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'getMessage', 'exc_info',
        'exc_text', 'stack_info', 'message', 'taskName', 'asctime',
    }

    def format(self, record):
        timestamp = self.formatTime(record, '%Y-%m-%d %H:%M:%S')

        level_prefix = ""
        if record.levelname in ['ERROR', 'WARNING']:
            level_prefix = f"[{record.levelname}] "

        base_info = f"[{timestamp}] {level_prefix}{record.getMessage()}"

        extras = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in self.SKIP_FIELDS and value is not None
        ]
        if extras:
            base_info += f" | {' | '.join(extras)}"

        if record.exc_info:
            base_info += "\n" + self.formatException(record.exc_info)

        return base_info


class CompactJsonFormatter(JsonFormatter):
    """Compact JSON formatter that removes redundant fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record.pop('name', None)
        log_record['level'] = record.levelname

        # Second precision is enough
        asctime = log_record.get('asctime')
        if isinstance(asctime, str) and ',' in asctime:
            log_record['asctime'] = asctime.split(',')[0]


def create_logger(
        lgr_nm: str,
        log_folder: str | None = None,
        enable_console: bool = True,
        file_format: Literal["jsonl", "readable", "both"] = "both",
        console_level: int = logging.INFO,
) -> tuple[Logger, str]:
    """
    Create an independent logger instance, supporting multiple file formats.

    Args:
        lgr_nm: Logger name
        log_folder: Log folder; no file handlers are attached when None
        enable_console: Whether to enable console output
        file_format: File log format
        console_level: Minimum level printed to the console

    Returns:
        (logger instance, timestamp)
    """
    current_time = datetime.now().strftime("%Y%m%d_%H%M%S")

    logger = logging.getLogger(lgr_nm)

    # Re-creating a logger replaces its handlers
    cleanup_logger(logger)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if log_folder is not None:
        os.makedirs(log_folder, exist_ok=True)

        if file_format in ["jsonl", "both"]:
            jsonl_file = os.path.join(log_folder, f"{current_time}_{lgr_nm}.jsonl")
            jsonl_handler = TimedRotatingFileHandler(
                jsonl_file,
                when="D",
                backupCount=14,
                encoding="utf-8"
            )
            jsonl_handler.setFormatter(CompactJsonFormatter('%(asctime)s %(message)s'))
            jsonl_handler.setLevel(logging.DEBUG)
            logger.addHandler(jsonl_handler)

        if file_format in ["readable", "both"]:
            readable_file = os.path.join(log_folder, f"{current_time}_{lgr_nm}.log")
            readable_handler = TimedRotatingFileHandler(
                readable_file,
                when="D",
                backupCount=14,
                encoding="utf-8"
            )
            readable_handler.setFormatter(HumanReadableFormatter())
            readable_handler.setLevel(logging.DEBUG)
            logger.addHandler(readable_handler)

    if enable_console:
        console_handler = StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredStructuredFormatter())
        console_handler.setLevel(console_level)
        logger.addHandler(console_handler)

    return logger, current_time


def create_sub_logger(parent_logger: Logger, sub_name: str) -> Logger:
    """
    Create a sub-logger that propagates to the parent logger's handlers.
    """
    sub_logger = logging.getLogger(f"{parent_logger.name}.{sub_name}")
    sub_logger.setLevel(parent_logger.level)
    sub_logger.propagate = True
    return sub_logger


def cleanup_logger(logger: Logger) -> None:
    """Remove and close all handlers of the logger."""
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
