"""Text Transcoder.

Re-encodes a stream of text from one legacy or Unicode character encoding
into another, keeping partial output and reporting the exact source byte
offset when the input cannot be decoded or the output cannot represent it.

Progressive API Disclosure:
- Level 1: Simple functions - transcode_bytes(), transcode_file()
- Level 2: Configured transcoder - Transcoder class
- Level 3: Pipeline primitives - build_catalog(), transcode()
"""

__version__ = "0.1.0"
__author__ = "Text Transcoder Team"

# Progressive API disclosure - Level 1 and Level 2
from .api import Transcoder, default_registry, transcode_bytes, transcode_file

# Level 3: registry and streaming pipeline
from .character import (
    Encoding,
    EncodingNotFoundError,
    Registry,
    build_catalog,
    transcode,
)

# Configuration and result objects for all API levels
from .shared import (
    FaultCause,
    TranscodeFault,
    TranscodeResult,
    TranscoderConfig,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "transcode_bytes",
    "transcode_file",

    # Level 2: Configured transcoder
    "Transcoder",
    "default_registry",

    # Level 3: Registry and pipeline
    "Encoding",
    "EncodingNotFoundError",
    "Registry",
    "build_catalog",
    "transcode",

    # Configuration and results
    "FaultCause",
    "TranscodeFault",
    "TranscodeResult",
    "TranscoderConfig",
]
