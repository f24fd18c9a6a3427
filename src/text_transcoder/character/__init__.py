"""Character layer: encodings, the encoding registry and the transcode pipeline."""

from .encoding import (
    UTF,
    BOMPolicy,
    Charmap,
    CodecEncoding,
    Encoding,
    Endianness,
    MultiByte,
)
from .registry import (
    ALL_ENCODINGS,
    UTF_PREFIX,
    CatalogError,
    EncodingNotFoundError,
    NameEntry,
    Registry,
    build_catalog,
    normalize_name,
)
from .stream import (
    DecodeStage,
    EncodeStage,
    UnmappableCharacter,
    transcode,
)

__all__ = [
    # Modules
    "encoding",
    "registry",
    "stream",
    # Encoding families
    "Encoding",
    "CodecEncoding",
    "Charmap",
    "MultiByte",
    "UTF",
    "BOMPolicy",
    "Endianness",
    # Registry
    "ALL_ENCODINGS",
    "UTF_PREFIX",
    "CatalogError",
    "EncodingNotFoundError",
    "NameEntry",
    "Registry",
    "build_catalog",
    "normalize_name",
    # Pipeline
    "DecodeStage",
    "EncodeStage",
    "UnmappableCharacter",
    "transcode",
]
