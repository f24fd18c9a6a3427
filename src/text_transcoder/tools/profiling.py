"""Performance profiling for transcodes.

Measures wall time and resident memory around a transcode so that the
bounded-memory behaviour of the streaming pipeline can be observed from the
command line (``--stats``) or from tests.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import psutil

from text_transcoder.shared.logging import get_logger
from text_transcoder.shared.result import TranscodeResult

BYTES_PER_MB = 1024 * 1024


@dataclass
class ProfilingSession:
    """Measurements for one profiled transcode."""

    session_id: str
    start_time: float
    end_time: float = 0.0
    memory_start: int = 0  # bytes
    memory_end: int = 0  # bytes
    bytes_in: int = 0
    bytes_out: int = 0
    success: Optional[bool] = None
    result: Optional[TranscodeResult] = field(default=None, repr=False)

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        """Resident memory change in bytes."""
        return self.memory_end - self.memory_start

    @property
    def throughput_mb_per_s(self) -> float:
        """Input throughput in MB/s."""
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.bytes_in / BYTES_PER_MB) / duration_s

    def record(self, result: TranscodeResult) -> None:
        """Attach the byte counts of a finished transcode."""
        self.bytes_in = result.bytes_consumed
        self.bytes_out = result.bytes_written
        self.success = result.success
        self.result = result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "duration_ms": self.duration_ms,
            "bytes_in": self.bytes_in,
            "bytes_out": self.bytes_out,
            "throughput_mb_per_s": self.throughput_mb_per_s,
            "memory_start": self.memory_start,
            "memory_end": self.memory_end,
            "memory_delta": self.memory_delta,
            "success": self.success,
        }

    def summary(self) -> str:
        """One-line report for stderr."""
        return (
            f"{self.bytes_in} bytes in, {self.bytes_out} bytes out, "
            f"{self.duration_ms:.1f}ms ({self.throughput_mb_per_s:.2f} MB/s), "
            f"rss {self.memory_end / BYTES_PER_MB:.1f} MB "
            f"({self.memory_delta / BYTES_PER_MB:+.1f} MB)"
        )


class TranscodeProfiler:
    """Wall-time and resident-memory profiler.

    Examples:
        >>> profiler = TranscodeProfiler()
        >>> with profiler.profile("session1") as session:
        ...     result = transcode(source, sink, UTF_8, ISO_8859_1)
        ...     session.record(result)
        >>> profiler.sessions[-1].duration_ms >= 0
        True
    """

    def __init__(self, enable_memory_tracking: bool = True) -> None:
        self.enable_memory_tracking = enable_memory_tracking
        self.sessions: List[ProfilingSession] = []
        self.logger = get_logger(__name__, None, "profiler")
        self._process = psutil.Process() if enable_memory_tracking else None

    def _rss(self) -> int:
        if self._process is None:
            return 0
        return self._process.memory_info().rss

    def profile(self, session_id: str) -> "SessionProfiler":
        return SessionProfiler(self, session_id)

    def start_session(self, session_id: str) -> ProfilingSession:
        return ProfilingSession(
            session_id=session_id,
            start_time=time.perf_counter(),
            memory_start=self._rss(),
        )

    def end_session(self, session: ProfilingSession) -> ProfilingSession:
        session.end_time = time.perf_counter()
        session.memory_end = self._rss()
        if session.result is not None:
            session.result.performance.memory_start_bytes = session.memory_start
            session.result.performance.memory_end_bytes = session.memory_end
        self.sessions.append(session)
        self.logger.bind(session.session_id).debug(
            "Profiling session finished", extra=session.to_dict()
        )
        return session


class SessionProfiler:
    """Context manager for profiling one transcode."""

    def __init__(self, profiler: TranscodeProfiler, session_id: str) -> None:
        self.profiler = profiler
        self.session_id = session_id
        self.session: Optional[ProfilingSession] = None

    def __enter__(self) -> ProfilingSession:
        self.session = self.profiler.start_session(self.session_id)
        return self.session

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.session is not None:
            self.profiler.end_session(self.session)
