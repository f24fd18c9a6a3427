"""Result objects and fault types for text transcoding.

A transcode never raises for bad data: the pipeline returns a
:class:`TranscodeResult` whose ``fault`` describes what stopped it. The fault
is itself an exception so that API helpers and the CLI can raise it as is.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class FaultCause(Enum):
    """Stage of the pipeline that stopped a transcode."""

    DECODE = "decode"   # malformed or unmappable input bytes
    ENCODE = "encode"   # character missing from the output repertoire
    IO = "io"           # source read or sink write failed


class TranscodeFault(Exception):
    """A transcode stopped before the end of its source.

    Attributes:
        cause: Which stage faulted
        bytes_consumed: Source bytes fully processed before the fault
        offset: 1-based source offset of the fault, None for I/O faults
        error: Underlying exception raised by the codec or the stream
    """

    def __init__(
        self,
        cause: FaultCause,
        bytes_consumed: int,
        error: BaseException,
        offset: Optional[int] = None,
    ) -> None:
        self.cause = cause
        self.bytes_consumed = bytes_consumed
        self.error = error
        if offset is None and cause is not FaultCause.IO:
            offset = bytes_consumed + 1
        self.offset = offset
        super().__init__(self.describe())

    @property
    def retryable(self) -> bool:
        """Only I/O faults can succeed when repeated on the same input."""
        return self.cause is FaultCause.IO

    def describe(self) -> str:
        """Human-readable summary used in CLI error messages."""
        if self.offset is None:
            return f"I/O error: {self.error}"
        return (
            f"read input up to byte {self.offset}: "
            f"{self.cause.value} error: {self.error}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cause": self.cause.value,
            "bytes_consumed": self.bytes_consumed,
            "offset": self.offset,
            "error": str(self.error),
        }


@dataclass
class PerformanceMetrics:
    """Performance metrics for a transcode."""

    processing_time_ms: float = 0.0
    chunks_read: int = 0
    memory_start_bytes: int = 0
    memory_end_bytes: int = 0

    @property
    def memory_delta_bytes(self) -> int:
        """Change in resident memory across the transcode."""
        return self.memory_end_bytes - self.memory_start_bytes


@dataclass
class TranscodeResult:
    """Outcome of one pass through the transcode pipeline.

    Attributes:
        bytes_consumed: Source bytes processed (up to the fault, if any)
        bytes_written: Bytes written to the sink, including partial output
        characters: Characters that passed through the internal text form
        fault: Fault that stopped the pipeline, None on success
        performance: Timing and chunk statistics
        correlation_id: Correlation ID the invocation was logged under
    """

    bytes_consumed: int = 0
    bytes_written: int = 0
    characters: int = 0
    fault: Optional[TranscodeFault] = None
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.bytes_consumed < 0:
            raise ValueError("bytes_consumed must be >= 0")
        if self.bytes_written < 0:
            raise ValueError("bytes_written must be >= 0")

    @property
    def success(self) -> bool:
        return self.fault is None

    def raise_for_fault(self) -> None:
        """Raise the recorded fault, if any."""
        if self.fault is not None:
            raise self.fault

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "bytes_consumed": self.bytes_consumed,
            "bytes_written": self.bytes_written,
            "characters": self.characters,
            "fault": self.fault.to_dict() if self.fault else None,
            "processing_time_ms": self.performance.processing_time_ms,
            "correlation_id": self.correlation_id,
        }
