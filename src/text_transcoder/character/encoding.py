"""Encoding families backed by the Python codec library.

An :class:`Encoding` is an immutable, process-wide value that can produce an
incremental decoder (bytes to text) and an incremental encoder (text to
bytes). The byte-level mappings themselves always come from :mod:`codecs`;
this module only adds identity, naming and the byte-order-mark policy of the
Unicode transformation formats.
"""

import codecs
from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar, Optional, Tuple

BOMTable = Tuple[Tuple[bytes, str], ...]


class Endianness(Enum):
    """Byte order of multi-byte code units."""

    BIG = "be"
    LITTLE = "le"


class BOMPolicy(Enum):
    """Byte-order-mark handling for a Unicode transformation format.

    IGNORE keeps a leading U+FEFF as text on read and never writes one.
    USE strips a leading BOM on read (letting it select the byte order) and
    writes one at the start of the output.
    """

    IGNORE = "ignore"
    USE = "use"


class BOMSniffingDecoder(codecs.IncrementalDecoder):
    """Incremental decoder that consumes an optional leading BOM.

    Bytes are held back until they can no longer be the start of a BOM. A
    matched BOM is dropped and selects the codec for the rest of the stream;
    otherwise ``default_codec`` is used and no bytes are dropped.
    """

    def __init__(self, boms: BOMTable, default_codec: str, errors: str = "strict") -> None:
        super().__init__(errors)
        self._boms = boms
        self._default_codec = default_codec
        self._codecs = (default_codec,) + tuple(
            name for _, name in boms if name != default_codec
        )
        self._head = b""
        self._decoder: Optional[codecs.IncrementalDecoder] = None
        self._codec: Optional[str] = None

    def _select(self, codec: str) -> None:
        self._codec = codec
        self._decoder = codecs.getincrementaldecoder(codec)(self.errors)

    def decode(self, input: bytes, final: bool = False) -> str:
        if self._decoder is not None:
            return self._decoder.decode(input, final)

        data = self._head + bytes(input)
        if not final and any(
            len(data) < len(bom) and bom.startswith(data) for bom, _ in self._boms
        ):
            self._head = data
            return ""

        codec = self._default_codec
        for bom, name in self._boms:
            if data.startswith(bom):
                codec = name
                data = data[len(bom):]
                break
        self._head = b""
        self._select(codec)
        return self._decoder.decode(data, final)

    def reset(self) -> None:
        self._head = b""
        self._decoder = None
        self._codec = None

    def getstate(self) -> Tuple[bytes, int]:
        if self._decoder is None:
            return (self._head, 0)
        buffered, _ = self._decoder.getstate()
        return (buffered, self._codecs.index(self._codec) + 1)

    def setstate(self, state: Tuple[bytes, int]) -> None:
        buffered, flag = state
        if flag == 0:
            self.reset()
            self._head = buffered
            return
        self._head = b""
        self._select(self._codecs[flag - 1])
        self._decoder.setstate((buffered, 0))


class BOMWritingEncoder(codecs.IncrementalEncoder):
    """Incremental encoder that emits ``bom`` before its first output."""

    def __init__(self, codec: str, bom: bytes, errors: str = "strict") -> None:
        super().__init__(errors)
        self._encoder = codecs.getincrementalencoder(codec)(errors)
        self._bom = bom
        self._pending_bom = True

    def encode(self, input: str, final: bool = False) -> bytes:
        data = self._encoder.encode(input, final)
        if self._pending_bom:
            self._pending_bom = False
            data = self._bom + data
        return data

    def reset(self) -> None:
        self._encoder.reset()
        self._pending_bom = True

    def getstate(self) -> int:
        return 1 if self._pending_bom else 0

    def setstate(self, state: int) -> None:
        self._pending_bom = bool(state)


class Encoding(ABC):
    """A character encoding: an identity, a name and a pair of codecs.

    Encodings compare by identity. Each supported encoding is a module-level
    constant in :mod:`text_transcoder.character.registry`.
    """

    family: ClassVar[str] = "abstract"

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("Encoding name cannot be empty")
        self._name = name

    @property
    def name(self) -> str:
        """Intrinsic name; may be overridden for display by the registry."""
        return self._name

    @abstractmethod
    def codec_names(self) -> Tuple[str, ...]:
        """Codec library names this encoding depends on."""

    @abstractmethod
    def new_decoder(self, errors: str = "strict") -> codecs.IncrementalDecoder:
        """Create a fresh incremental decoder."""

    @abstractmethod
    def new_encoder(self, errors: str = "strict") -> codecs.IncrementalEncoder:
        """Create a fresh incremental encoder."""

    def decode(self, data: bytes) -> str:
        """Decode a complete byte string."""
        return self.new_decoder().decode(data, final=True)

    def encode(self, text: str) -> bytes:
        """Encode a complete string."""
        return self.new_encoder().encode(text, final=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name!r}>"


class CodecEncoding(Encoding):
    """Encoding that maps directly onto one codec library entry."""

    family = "codec"

    def __init__(self, codec: str, name: Optional[str] = None) -> None:
        super().__init__(name or codec)
        self.codec = codec

    def codec_names(self) -> Tuple[str, ...]:
        return (self.codec,)

    def new_decoder(self, errors: str = "strict") -> codecs.IncrementalDecoder:
        return codecs.getincrementaldecoder(self.codec)(errors)

    def new_encoder(self, errors: str = "strict") -> codecs.IncrementalEncoder:
        return codecs.getincrementalencoder(self.codec)(errors)


class Charmap(CodecEncoding):
    """Single-byte encoding defined by a 256-entry table.

    Charmaps carry a human-readable intrinsic name such as "Windows 1252".
    """

    family = "charmap"

    def __init__(self, codec: str, name: str) -> None:
        super().__init__(codec, name)


class MultiByte(CodecEncoding):
    """East-Asian multi-byte character set (Big5, EUC, GB, ISO-2022, Shift-JIS)."""

    family = "multibyte"


_UTF_BOMS = {
    (8, None): codecs.BOM_UTF8,
    (16, Endianness.BIG): codecs.BOM_UTF16_BE,
    (16, Endianness.LITTLE): codecs.BOM_UTF16_LE,
    (32, Endianness.BIG): codecs.BOM_UTF32_BE,
    (32, Endianness.LITTLE): codecs.BOM_UTF32_LE,
}


class UTF(Encoding):
    """Unicode transformation format with a byte order and BOM policy."""

    family = "utf"

    def __init__(
        self,
        width: int,
        endianness: Optional[Endianness] = None,
        bom: BOMPolicy = BOMPolicy.IGNORE,
    ) -> None:
        if width == 8:
            if endianness is not None:
                raise ValueError("UTF-8 has no byte order")
        elif width in (16, 32):
            if endianness is None:
                raise ValueError(f"UTF-{width} requires a byte order")
        else:
            raise ValueError(f"Unsupported UTF width: {width}")

        self.width = width
        self.endianness = endianness
        self.bom = bom

        order = endianness.value.upper() if endianness else ""
        policy = "Use BOM" if bom is BOMPolicy.USE else "Ignore BOM"
        super().__init__(f"UTF-{width}{order} ({policy})")

    @property
    def codec(self) -> str:
        if self.endianness is None:
            return "utf-8"
        return f"utf-{self.width}-{self.endianness.value}"

    @property
    def byte_order_mark(self) -> bytes:
        return _UTF_BOMS[(self.width, self.endianness)]

    def _bom_table(self) -> BOMTable:
        if self.width == 8:
            return ((codecs.BOM_UTF8, "utf-8"),)
        return (
            (_UTF_BOMS[(self.width, Endianness.BIG)], f"utf-{self.width}-be"),
            (_UTF_BOMS[(self.width, Endianness.LITTLE)], f"utf-{self.width}-le"),
        )

    def codec_names(self) -> Tuple[str, ...]:
        if self.bom is BOMPolicy.USE:
            return tuple(name for _, name in self._bom_table())
        return (self.codec,)

    def new_decoder(self, errors: str = "strict") -> codecs.IncrementalDecoder:
        if self.bom is BOMPolicy.USE:
            return BOMSniffingDecoder(self._bom_table(), self.codec, errors)
        return codecs.getincrementaldecoder(self.codec)(errors)

    def new_encoder(self, errors: str = "strict") -> codecs.IncrementalEncoder:
        if self.bom is BOMPolicy.USE:
            return BOMWritingEncoder(self.codec, self.byte_order_mark, errors)
        return codecs.getincrementalencoder(self.codec)(errors)
