"""Streaming transcode pipeline.

Source bytes are pulled in bounded chunks through a decode stage, which yields
Python text, and pushed through an encode stage into the sink. Memory use is
proportional to the chunk size, not to the input size.

When either stage faults, everything transcoded before the faulting input is
still written to the sink, and the fault reports the 1-based offset into the
source where the offending byte sequence starts.
"""

import time
from typing import BinaryIO, Optional, Tuple

from text_transcoder.character.encoding import Encoding
from text_transcoder.shared.config import TranscoderConfig
from text_transcoder.shared.logging import get_logger
from text_transcoder.shared.result import (
    FaultCause,
    PerformanceMetrics,
    TranscodeFault,
    TranscodeResult,
)

MS_PER_SECOND = 1000


class UnmappableCharacter(Exception):
    """Raised by :class:`EncodeStage` when text has no output representation.

    Attributes:
        position: Index into the pushed text of the first unmappable character
        error: The codec's UnicodeEncodeError
    """

    def __init__(self, position: int, error: UnicodeEncodeError) -> None:
        super().__init__(str(error))
        self.position = position
        self.error = error


class DecodeStage:
    """Pull side of the pipeline: source bytes to text.

    Keeps the decoder state from before the most recent chunk so that a fault
    can be localized by replaying that chunk.
    """

    def __init__(self, source: BinaryIO, encoding: Encoding, chunk_size: int) -> None:
        self._source = source
        self._decoder = encoding.new_decoder()
        self._chunk_size = chunk_size
        self._chunk = b""
        self._chunk_start = 0
        self._state = self._decoder.getstate()
        self.consumed = 0
        self.chunks = 0
        self.exhausted = False

    def pull(self) -> Tuple[str, Optional[TranscodeFault]]:
        """Read and decode the next chunk.

        Returns:
            Decoded text and, if the chunk held malformed input, the decode
            fault. On a fault the text is the decoded valid prefix of the chunk.

        Raises:
            OSError: If reading the source fails
        """
        try:
            chunk = self._source.read(self._chunk_size)
        except ValueError as error:
            # closed source
            raise OSError(str(error)) from error
        if chunk is None:
            # non-blocking source with nothing available yet
            chunk = b""
            final = False
        else:
            chunk = bytes(chunk)
            final = not chunk
        self.exhausted = final

        self._state = self._decoder.getstate()
        self._chunk = chunk
        self._chunk_start = self.consumed
        self.consumed += len(chunk)
        if chunk:
            self.chunks += 1

        try:
            return self._decoder.decode(chunk, final), None
        except UnicodeDecodeError as error:
            # error.object always ends at the last byte fed to the decoder
            index = self.consumed - len(error.object) + error.start
            index = max(index, 0)
            prefix = self._decode_prefix(index - self._chunk_start)
            return prefix, TranscodeFault(FaultCause.DECODE, index, error)

    def _decode_prefix(self, length: int) -> str:
        self._decoder.setstate(self._state)
        if length <= 0:
            return ""
        return self._decoder.decode(self._chunk[:length])

    def locate(self, position: int) -> int:
        """Return the source index where character ``position`` of the last pull began.

        Replays the last chunk one byte at a time from the saved decoder state.
        Bytes that produce no text (partial sequences, shift escapes, a BOM)
        are attributed to the character they precede.
        """
        self._decoder.setstate(self._state)
        produced = 0
        # bytes still pending from earlier chunks belong to the first character
        sequence_start = self._chunk_start - len(self._state[0])
        for i in range(len(self._chunk)):
            try:
                text = self._decoder.decode(self._chunk[i:i + 1])
            except UnicodeDecodeError:
                break
            if text:
                produced += len(text)
                if produced > position:
                    return sequence_start
                sequence_start = self._chunk_start + i + 1
        return sequence_start


class EncodeStage:
    """Push side of the pipeline: text to sink bytes."""

    def __init__(self, sink: BinaryIO, encoding: Encoding) -> None:
        self._sink = sink
        self._encoder = encoding.new_encoder()
        self.written = 0
        self.characters = 0

    def push(self, text: str, final: bool = False) -> None:
        """Encode text and write the result.

        Raises:
            UnmappableCharacter: After writing the encodable prefix of ``text``
            OSError: If writing to the sink fails
        """
        state = self._encoder.getstate()
        try:
            data = self._encoder.encode(text, final)
        except UnicodeEncodeError as error:
            position = error.start - (len(error.object) - len(text))
            position = min(max(position, 0), len(text))
            self._encoder.setstate(state)
            self._write(self._encoder.encode(text[:position]))
            self.characters += position
            raise UnmappableCharacter(position, error) from error
        self._write(data)
        self.characters += len(text)

    def _write(self, data: bytes) -> None:
        """Write all of ``data``, looping over short writes of raw sinks."""
        while data:
            try:
                count = self._sink.write(data)
            except ValueError as error:
                # closed sink
                raise OSError(str(error)) from error
            if count is None:
                # buffered and file-like sinks take everything
                count = len(data)
            elif count <= 0:
                raise OSError("sink accepted no bytes")
            self.written += count
            data = data[count:]

    def flush(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            try:
                flush()
            except ValueError as error:
                raise OSError(str(error)) from error

    def close(self) -> None:
        """Finalize the encoder, then flush the sink."""
        self.push("", final=True)
        self.flush()


def transcode(
    source: BinaryIO,
    sink: BinaryIO,
    in_encoding: Encoding,
    out_encoding: Encoding,
    config: Optional[TranscoderConfig] = None,
    correlation_id: Optional[str] = None,
) -> TranscodeResult:
    """Re-encode ``source`` from ``in_encoding`` into ``out_encoding`` on ``sink``.

    The caller owns both streams; they are flushed but never closed here.

    Args:
        source: Readable binary stream
        sink: Writable binary stream
        in_encoding: Encoding of the source bytes
        out_encoding: Encoding to write
        config: Pipeline configuration (chunk size)
        correlation_id: Optional correlation ID for log records

    Returns:
        TranscodeResult; ``fault`` is set if the transcode stopped early

    Examples:
        >>> import io
        >>> from text_transcoder.character.registry import ISO_8859_1, UTF_8
        >>> sink = io.BytesIO()
        >>> transcode(io.BytesIO("café".encode()), sink, UTF_8, ISO_8859_1).success
        True
        >>> sink.getvalue()
        b'caf\\xe9'
    """
    config = config or TranscoderConfig()
    logger = get_logger(__name__, correlation_id, "transcode")
    start_time = time.perf_counter()

    logger.info(
        "Starting transcode",
        extra={
            "input_encoding": in_encoding.name,
            "output_encoding": out_encoding.name,
            "chunk_size": config.stream.chunk_size,
        },
    )

    reader = DecodeStage(source, in_encoding, config.stream.chunk_size)
    writer = EncodeStage(sink, out_encoding)
    fault: Optional[TranscodeFault] = None

    try:
        while fault is None:
            text, fault = reader.pull()
            try:
                writer.push(text)
            except UnmappableCharacter as unmappable:
                index = reader.locate(unmappable.position)
                fault = TranscodeFault(FaultCause.ENCODE, index, unmappable.error)
            if reader.exhausted:
                break
        if fault is None:
            writer.close()
    except UnmappableCharacter as unmappable:
        # only the final encode can get here
        fault = TranscodeFault(FaultCause.ENCODE, reader.consumed, unmappable.error)
    except OSError as error:
        fault = TranscodeFault(FaultCause.IO, reader.consumed, error)

    if fault is not None:
        # Best effort only: the first fault is the one reported.
        try:
            if fault.cause is not FaultCause.IO:
                writer.push("", final=True)
            writer.flush()
        except (UnmappableCharacter, OSError):
            logger.debug("Finalizing output after fault failed", exc_info=True)
        logger.info(
            "Transcode stopped by fault",
            extra={"fault": fault.to_dict(), "bytes_written": writer.written},
        )

    processing_time = (time.perf_counter() - start_time) * MS_PER_SECOND
    result = TranscodeResult(
        bytes_consumed=fault.bytes_consumed if fault else reader.consumed,
        bytes_written=writer.written,
        characters=writer.characters,
        fault=fault,
        performance=PerformanceMetrics(
            processing_time_ms=processing_time,
            chunks_read=reader.chunks,
        ),
        correlation_id=correlation_id,
    )

    logger.info(
        "Finished transcode",
        extra={
            "success": result.success,
            "bytes_consumed": result.bytes_consumed,
            "bytes_written": result.bytes_written,
            "processing_time_ms": processing_time,
        },
    )
    return result
