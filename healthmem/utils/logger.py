"""
Logging configuration using Loguru.

Structured fields passed as ``extra={...}`` and fields bound with
``log_context`` both end up at the top level of ``record["extra"]``, so the
JSON file sink carries patient and request identifiers as plain keys.
"""

import sys
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<magenta>{extra[context]}</magenta> - <level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]}:{function}:{line} | {extra[context]} - {message}"

# Bound fields shown in the console line, in this order
CONTEXT_KEYS = ("patient_id", "request_id", "adapter")


def _patch_record(record) -> None:
    extra = record["extra"]
    fields = extra.pop("extra", None)
    if isinstance(fields, dict):
        for key, value in fields.items():
            extra.setdefault(key, value)
    extra.setdefault("module", record["name"])
    extra["context"] = " ".join(f"{key}={extra[key]}" for key in CONTEXT_KEYS if key in extra) or "-"


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """Configure Loguru with a coloured console sink and an optional rotating JSON file."""
    logger.remove()
    logger.configure(patcher=_patch_record)

    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True, serialize=False)

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / "healthmem_{time:YYYY-MM-DD}.log",
            level=level,
            format=FILE_FORMAT,
            rotation=file_rotation,
            retention=file_retention,
            compression=compression,
            serialize=serialize,
            enqueue=True,
        )


@contextmanager
def log_context(**fields):
    """
    Bind fields to every record logged inside the block, across awaits.

    Usage:
        with log_context(patient_id="patient-1"):
            await generator.generate_summary(start, end)
    """
    with logger.contextualize(**{key: value for key, value in fields.items() if value is not None}):
        yield


def get_logger(name: str):
    """Get a logger instance for a module."""
    return logger.bind(module=name)
