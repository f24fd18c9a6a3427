"""Shared utilities for text transcoding.

This module provides configuration objects, result and fault types, and the
logging helpers used across the registry, pipeline and CLI layers.
"""

from .config import (
    EXIT_FAULT,
    EXIT_OK,
    EXIT_USAGE,
    ConfigError,
    ConfigValidationError,
    OutputConfig,
    RegistryConfig,
    StreamConfig,
    TranscoderConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    FaultCause,
    PerformanceMetrics,
    TranscodeFault,
    TranscodeResult,
)

__all__ = [
    "EXIT_FAULT",
    "EXIT_OK",
    "EXIT_USAGE",
    "ConfigError",
    "ConfigValidationError",
    "OutputConfig",
    "RegistryConfig",
    "StreamConfig",
    "TranscoderConfig",
    "CorrelationLogger",
    "get_logger",
    "FaultCause",
    "PerformanceMetrics",
    "TranscodeFault",
    "TranscodeResult",
]
