"""Utility modules for healthmem."""

from healthmem.utils.exceptions import (
    BackendFailureError,
    BackendUnavailableError,
    ConfigurationError,
    HealthMemoryError,
    InvalidInputError,
    LLMError,
    ModelAcquisitionError,
    NotFoundError,
    StoreError,
)
from healthmem.utils.id_generator import generate_node_id, generate_request_id
from healthmem.utils.locks import ReadWriteLock
from healthmem.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_node_id",
    "generate_request_id",
    # Concurrency
    "ReadWriteLock",
    # Exceptions
    "HealthMemoryError",
    "StoreError",
    "InvalidInputError",
    "NotFoundError",
    "ConfigurationError",
    "LLMError",
    "BackendUnavailableError",
    "BackendFailureError",
    "ModelAcquisitionError",
]
