"""Developer tools for text transcoding."""

from .profiling import ProfilingSession, SessionProfiler, TranscodeProfiler

__all__ = [
    "ProfilingSession",
    "SessionProfiler",
    "TranscodeProfiler",
]
