"""Transcoding API with progressive disclosure.

Level 1 is a pair of module-level functions that take encoding names. Level 2
is the :class:`Transcoder` class, which holds a configuration and a registry
and can be reused across many invocations.
"""

import io
import uuid
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from text_transcoder.character import (
    Encoding,
    Registry,
    build_catalog,
    transcode,
)
from text_transcoder.shared import (
    TranscodeResult,
    TranscoderConfig,
    get_logger,
)

EncodingSpec = Union[str, Encoding]


@lru_cache(maxsize=1)
def default_registry() -> Registry:
    """Registry built with the default configuration, created on first use."""
    return build_catalog()


class Transcoder:
    """Configured transcoder.

    Examples:
        >>> transcoder = Transcoder()
        >>> transcoder.transcode_bytes("café".encode(), "utf-8", "latin-1")
        b'caf\\xe9'

        Small chunks:
        >>> config = TranscoderConfig.low_memory()
        >>> Transcoder(config).transcode_bytes(b"\\xff\\xfea\\x00", "utf-16-le-bom", "utf8")
        b'a'
    """

    def __init__(
        self,
        config: Optional[TranscoderConfig] = None,
        registry: Optional[Registry] = None,
    ) -> None:
        self.config = config or TranscoderConfig()
        if registry is None:
            if self.config.registry == TranscoderConfig().registry:
                registry = default_registry()
            else:
                registry = build_catalog(self.config.registry)
        self.registry = registry
        self.logger = get_logger(__name__, None, "transcoder")

    def _resolve(self, encoding: EncodingSpec, role: str) -> Encoding:
        if isinstance(encoding, Encoding):
            return encoding
        return self.registry.require(encoding, role)

    def list_encodings(self, prefix: str = "") -> List[str]:
        """Display names of every supported encoding, in listing order."""
        return self.registry.list_names(prefix)

    def transcode_stream(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        input_encoding: EncodingSpec,
        output_encoding: EncodingSpec,
        correlation_id: Optional[str] = None,
    ) -> TranscodeResult:
        """Transcode between caller-owned binary streams.

        Raises:
            EncodingNotFoundError: If an encoding name is not in the catalog
        """
        encoding_in = self._resolve(input_encoding, "input")
        encoding_out = self._resolve(output_encoding, "output")
        correlation_id = correlation_id or str(uuid.uuid4())
        self.logger.bind(correlation_id).debug(
            "Transcoding stream",
            extra={"input_encoding": encoding_in.name, "output_encoding": encoding_out.name},
        )
        return transcode(
            source, sink, encoding_in, encoding_out, self.config, correlation_id
        )

    def transcode_bytes(
        self,
        data: bytes,
        input_encoding: EncodingSpec,
        output_encoding: EncodingSpec,
    ) -> bytes:
        """Transcode an in-memory byte string.

        Raises:
            EncodingNotFoundError: If an encoding name is not in the catalog
            TranscodeFault: If the data cannot be transcoded
        """
        sink = io.BytesIO()
        result = self.transcode_stream(
            io.BytesIO(data), sink, input_encoding, output_encoding
        )
        result.raise_for_fault()
        return sink.getvalue()

    def transcode_file(
        self,
        file_path: Union[str, Path],
        sink: BinaryIO,
        input_encoding: EncodingSpec,
        output_encoding: EncodingSpec,
        correlation_id: Optional[str] = None,
    ) -> TranscodeResult:
        """Transcode a file into a caller-owned sink.

        Encoding names are resolved before the file is opened.

        Raises:
            EncodingNotFoundError: If an encoding name is not in the catalog
            OSError: If the file cannot be opened
        """
        encoding_in = self._resolve(input_encoding, "input")
        encoding_out = self._resolve(output_encoding, "output")
        path = Path(file_path)
        correlation_id = correlation_id or str(uuid.uuid4())
        self.logger.bind(correlation_id).debug("Opening input file", extra={"file": str(path)})
        with path.open("rb") as source:
            return self.transcode_stream(
                source, sink, encoding_in, encoding_out, correlation_id
            )


def transcode_bytes(
    data: bytes,
    input_encoding: EncodingSpec,
    output_encoding: EncodingSpec,
) -> bytes:
    """Transcode a byte string between two named encodings.

    Examples:
        >>> transcode_bytes("café".encode(), "UTF-8", "ISO 8859-1")
        b'caf\\xe9'
    """
    return Transcoder().transcode_bytes(data, input_encoding, output_encoding)


def transcode_file(
    file_path: Union[str, Path],
    sink: BinaryIO,
    input_encoding: EncodingSpec,
    output_encoding: EncodingSpec,
    config: Optional[TranscoderConfig] = None,
) -> TranscodeResult:
    """Transcode a file into ``sink`` between two named encodings."""
    return Transcoder(config).transcode_file(
        file_path, sink, input_encoding, output_encoding
    )
