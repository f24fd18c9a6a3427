"""Library entry points for text transcoding."""

from .transcoder import (
    Transcoder,
    default_registry,
    transcode_bytes,
    transcode_file,
)

__all__ = [
    "Transcoder",
    "default_registry",
    "transcode_bytes",
    "transcode_file",
]
