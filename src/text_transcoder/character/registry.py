"""Encoding registry: the catalog of supported encodings and name lookup.

The catalog is a fixed, hand-curated list in listing order. Display names come
from an override table where an encoding's intrinsic name is not fit for
users, and from the encoding itself otherwise. Lookup is by normalized key,
so "UTF-8", "utf8" and "Utf 8" all find the same encoding.
"""

import codecs
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import ebcdic  # noqa: F401  registers the cp1047 codec

from text_transcoder.character.encoding import (
    UTF,
    BOMPolicy,
    Charmap,
    Encoding,
    Endianness,
    MultiByte,
)
from text_transcoder.shared.config import RegistryConfig
from text_transcoder.shared.logging import get_logger

UTF_PREFIX = "UTF"

_VENDOR_PREFIXES = ("ibmcodepage", "windows", "ibm")
_IGNORED_CHARACTERS = str.maketrans("", "", " -_")

# East-Asian multi-byte sets
BIG5 = MultiByte("big5")
EUC_JP = MultiByte("euc_jp")
ISO_2022_JP = MultiByte("iso2022_jp")
SHIFT_JIS = MultiByte("shift_jis")
EUC_KR = MultiByte("euc_kr")
GB18030 = MultiByte("gb18030")
GBK = MultiByte("gbk")
HZ_GB2312 = MultiByte("hz")

# IBM and Windows code pages
CODE_PAGE_037 = Charmap("cp037", "IBM Code Page 037")
CODE_PAGE_437 = Charmap("cp437", "IBM Code Page 437")
CODE_PAGE_850 = Charmap("cp850", "IBM Code Page 850")
CODE_PAGE_852 = Charmap("cp852", "IBM Code Page 852")
CODE_PAGE_855 = Charmap("cp855", "IBM Code Page 855")
CODE_PAGE_858 = Charmap("cp858", "IBM Code Page 858")
CODE_PAGE_860 = Charmap("cp860", "IBM Code Page 860")
CODE_PAGE_862 = Charmap("cp862", "IBM Code Page 862")
CODE_PAGE_863 = Charmap("cp863", "IBM Code Page 863")
CODE_PAGE_865 = Charmap("cp865", "IBM Code Page 865")
CODE_PAGE_866 = Charmap("cp866", "IBM Code Page 866")
CODE_PAGE_1047 = Charmap("cp1047", "IBM Code Page 1047")
CODE_PAGE_1140 = Charmap("cp1140", "IBM Code Page 1140")
WINDOWS_874 = Charmap("cp874", "Windows 874")
WINDOWS_1250 = Charmap("cp1250", "Windows 1250")
WINDOWS_1251 = Charmap("cp1251", "Windows 1251")
WINDOWS_1252 = Charmap("cp1252", "Windows 1252")
WINDOWS_1253 = Charmap("cp1253", "Windows 1253")
WINDOWS_1254 = Charmap("cp1254", "Windows 1254")
WINDOWS_1255 = Charmap("cp1255", "Windows 1255")
WINDOWS_1256 = Charmap("cp1256", "Windows 1256")
WINDOWS_1257 = Charmap("cp1257", "Windows 1257")
WINDOWS_1258 = Charmap("cp1258", "Windows 1258")

# ISO 8859; the E and I variants mark explicit and implicit text direction
# and share their base table
ISO_8859_1 = Charmap("iso8859_1", "ISO 8859-1")
ISO_8859_2 = Charmap("iso8859_2", "ISO 8859-2")
ISO_8859_3 = Charmap("iso8859_3", "ISO 8859-3")
ISO_8859_4 = Charmap("iso8859_4", "ISO 8859-4")
ISO_8859_5 = Charmap("iso8859_5", "ISO 8859-5")
ISO_8859_6 = Charmap("iso8859_6", "ISO 8859-6")
ISO_8859_6E = Charmap("iso8859_6", "ISO 8859-6")
ISO_8859_6I = Charmap("iso8859_6", "ISO 8859-6")
ISO_8859_7 = Charmap("iso8859_7", "ISO 8859-7")
ISO_8859_8 = Charmap("iso8859_8", "ISO 8859-8")
ISO_8859_8E = Charmap("iso8859_8", "ISO 8859-8")
ISO_8859_8I = Charmap("iso8859_8", "ISO 8859-8")
ISO_8859_9 = Charmap("iso8859_9", "ISO 8859-9")
ISO_8859_10 = Charmap("iso8859_10", "ISO 8859-10")
ISO_8859_13 = Charmap("iso8859_13", "ISO 8859-13")
ISO_8859_14 = Charmap("iso8859_14", "ISO 8859-14")
ISO_8859_15 = Charmap("iso8859_15", "ISO 8859-15")
ISO_8859_16 = Charmap("iso8859_16", "ISO 8859-16")

KOI8_R = Charmap("koi8_r", "KOI8-R")
KOI8_U = Charmap("koi8_u", "KOI8-U")
MACINTOSH = Charmap("mac_roman", "Macintosh")
MACINTOSH_CYRILLIC = Charmap("mac_cyrillic", "Macintosh Cyrillic")

# Unicode transformation formats
UTF_8 = UTF(8)
UTF_8_BOM = UTF(8, bom=BOMPolicy.USE)
UTF_16_BE = UTF(16, Endianness.BIG)
UTF_16_BE_BOM = UTF(16, Endianness.BIG, BOMPolicy.USE)
UTF_16_LE = UTF(16, Endianness.LITTLE)
UTF_16_LE_BOM = UTF(16, Endianness.LITTLE, BOMPolicy.USE)
UTF_32_BE = UTF(32, Endianness.BIG)
UTF_32_BE_BOM = UTF(32, Endianness.BIG, BOMPolicy.USE)
UTF_32_LE = UTF(32, Endianness.LITTLE)
UTF_32_LE_BOM = UTF(32, Endianness.LITTLE, BOMPolicy.USE)

# Display names for encodings whose intrinsic name is a codec id, or is shared
# with another catalog entry.
SPECIAL_NAMES: Mapping[Encoding, str] = MappingProxyType({
    ISO_8859_6E: "ISO 8859-6E",
    ISO_8859_6I: "ISO 8859-6I",
    ISO_8859_8E: "ISO 8859-8E",
    ISO_8859_8I: "ISO 8859-8I",

    EUC_JP: "EUCJP",
    ISO_2022_JP: "ISO 2022-JP",
    SHIFT_JIS: "SHIFT-JIS",

    EUC_KR: "EUCKR",

    GB18030: "GB18030",
    GBK: "GBK",
    HZ_GB2312: "HZ-GB2312",

    BIG5: "Big5",

    UTF_8: "UTF-8",
    UTF_8_BOM: "UTF-8-BOM",

    UTF_16_BE: "UTF-16-BE",
    UTF_16_BE_BOM: "UTF-16-BE-BOM",
    UTF_16_LE: "UTF-16-LE",
    UTF_16_LE_BOM: "UTF-16-LE-BOM",

    UTF_32_BE: "UTF-32-BE",
    UTF_32_BE_BOM: "UTF-32-BE-BOM",
    UTF_32_LE: "UTF-32-LE",
    UTF_32_LE_BOM: "UTF-32-LE-BOM",
})

# Historical spellings accepted by resolve() but not listed.
ALIASES: Mapping[Encoding, Tuple[str, ...]] = MappingProxyType({
    ISO_8859_1: ("Latin-1",),
    ISO_8859_2: ("Latin-2",),
    ISO_8859_15: ("Latin-9",),
    SHIFT_JIS: ("SJIS",),
    HZ_GB2312: ("HZ",),
    MACINTOSH: ("Mac Roman",),
    KOI8_R: ("KOI8",),
})

# Listing order.
ALL_ENCODINGS: Tuple[Encoding, ...] = (
    BIG5,
    CODE_PAGE_037,
    CODE_PAGE_437,
    CODE_PAGE_850,
    CODE_PAGE_852,
    CODE_PAGE_855,
    CODE_PAGE_858,
    CODE_PAGE_860,
    CODE_PAGE_862,
    CODE_PAGE_863,
    CODE_PAGE_865,
    CODE_PAGE_866,
    WINDOWS_874,
    CODE_PAGE_1047,
    CODE_PAGE_1140,
    WINDOWS_1250,
    WINDOWS_1251,
    WINDOWS_1252,
    WINDOWS_1253,
    WINDOWS_1254,
    WINDOWS_1255,
    WINDOWS_1256,
    WINDOWS_1257,
    WINDOWS_1258,
    EUC_JP,
    EUC_KR,
    GB18030,
    GBK,
    HZ_GB2312,
    ISO_2022_JP,
    ISO_8859_1,
    ISO_8859_2,
    ISO_8859_3,
    ISO_8859_4,
    ISO_8859_5,
    ISO_8859_6,
    ISO_8859_6E,
    ISO_8859_6I,
    ISO_8859_7,
    ISO_8859_8,
    ISO_8859_8E,
    ISO_8859_8I,
    ISO_8859_9,
    ISO_8859_10,
    ISO_8859_13,
    ISO_8859_14,
    ISO_8859_15,
    ISO_8859_16,
    KOI8_R,
    KOI8_U,
    MACINTOSH,
    MACINTOSH_CYRILLIC,
    SHIFT_JIS,
    UTF_8,
    UTF_8_BOM,
    UTF_16_BE,
    UTF_16_BE_BOM,
    UTF_16_LE,
    UTF_16_LE_BOM,
    UTF_32_BE,
    UTF_32_BE_BOM,
    UTF_32_LE,
    UTF_32_LE_BOM,
)


class CatalogError(RuntimeError):
    """The encoding catalog could not be built.

    This is a configuration fault in the installed codec library, never a
    consequence of user input.
    """


class EncodingNotFoundError(LookupError):
    """A user-supplied encoding name matched no catalog entry."""

    def __init__(self, raw_name: str, role: Optional[str] = None) -> None:
        self.raw_name = raw_name
        self.role = role
        label = f"invalid {role} encoding name" if role else "invalid encoding name"
        super().__init__(f"{label}: {raw_name}")


def normalize_name(name: str, alias_vendor_prefixes: bool = True) -> str:
    """Return the lookup key for an encoding name.

    Lower-cases the name and drops spaces, hyphens and underscores. With
    ``alias_vendor_prefixes`` a leading "ibm code page", "windows" or "ibm"
    becomes "cp", so "Windows 1252" and "cp1252" share a key.

    Examples:
        >>> normalize_name("UTF-16 BE")
        'utf16be'
        >>> normalize_name("IBM Code Page 437")
        'cp437'
    """
    key = name.lower().translate(_IGNORED_CHARACTERS)
    if alias_vendor_prefixes:
        for prefix in _VENDOR_PREFIXES:
            if key.startswith(prefix):
                return "cp" + key[len(prefix):]
    return key


@dataclass(frozen=True)
class NameEntry:
    """One accepted spelling of an encoding name."""

    display_name: str
    key: str
    encoding: Encoding
    listed: bool = True


class Registry:
    """Read-only catalog of encodings with normalized-name lookup.

    Built once by :func:`build_catalog` and never mutated afterwards, so a
    single instance can be shared freely.
    """

    def __init__(
        self,
        encodings: Sequence[Encoding],
        entries: Sequence[NameEntry],
        alias_vendor_prefixes: bool = True,
    ) -> None:
        self._encodings = tuple(encodings)
        self._entries = tuple(entries)
        self._alias_vendor_prefixes = alias_vendor_prefixes

        by_key: Dict[str, Encoding] = {}
        display: Dict[Encoding, str] = {}
        for entry in self._entries:
            by_key.setdefault(entry.key, entry.encoding)
            if entry.listed:
                display.setdefault(entry.encoding, entry.display_name)
        self._by_key: Mapping[str, Encoding] = MappingProxyType(by_key)
        self._display: Mapping[Encoding, str] = MappingProxyType(display)

    @property
    def encodings(self) -> Tuple[Encoding, ...]:
        return self._encodings

    @property
    def entries(self) -> Tuple[NameEntry, ...]:
        return self._entries

    @property
    def keys(self) -> Mapping[str, Encoding]:
        return self._by_key

    def normalize(self, name: str) -> str:
        return normalize_name(name, self._alias_vendor_prefixes)

    def resolve(self, raw_name: str) -> Optional[Encoding]:
        """Look up an encoding by any accepted spelling.

        Args:
            raw_name: Name as typed by the user

        Returns:
            The matching Encoding, or None when nothing matches
        """
        return self._by_key.get(self.normalize(raw_name))

    def require(self, raw_name: str, role: Optional[str] = None) -> Encoding:
        """Like :meth:`resolve` but raise EncodingNotFoundError when nothing matches."""
        encoding = self.resolve(raw_name)
        if encoding is None:
            raise EncodingNotFoundError(raw_name, role)
        return encoding

    def display_name(self, encoding: Encoding) -> str:
        """Canonical display name of a catalog encoding."""
        try:
            return self._display[encoding]
        except KeyError:
            raise KeyError(f"{encoding!r} is not in the catalog") from None

    def list_names(self, prefix: str = "") -> List[str]:
        """Display names in catalog order, optionally filtered by a case-sensitive prefix."""
        return [
            self._display[encoding]
            for encoding in self._encodings
            if self._display[encoding].startswith(prefix)
        ]

    def __len__(self) -> int:
        return len(self._encodings)

    def __iter__(self) -> Iterator[Encoding]:
        return iter(self._encodings)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None


def _introspect(encoding: Encoding) -> None:
    for codec in encoding.codec_names():
        try:
            codecs.lookup(codec)
        except LookupError as e:
            raise CatalogError(
                f"codec {codec!r} for {encoding.name} is not available"
            ) from e


def build_catalog(
    config: Optional[RegistryConfig] = None,
    encodings: Sequence[Encoding] = ALL_ENCODINGS,
    special_names: Mapping[Encoding, str] = SPECIAL_NAMES,
    aliases: Mapping[Encoding, Sequence[str]] = ALIASES,
) -> Registry:
    """Build the encoding registry.

    Args:
        config: Name normalization policy
        encodings: Encodings in listing order
        special_names: Display-name overrides
        aliases: Extra accepted spellings per encoding

    Returns:
        Registry ready for lookup and listing

    Raises:
        CatalogError: If a codec is missing or an encoding is listed twice

    Two distinct encodings whose names normalize to the same key are not an
    error: the one earlier in listing order owns the key.
    """
    config = config or RegistryConfig()
    logger = get_logger(__name__, None, "registry")

    entries: List[NameEntry] = []
    owners: Dict[str, Encoding] = {}
    seen = set()

    def add(display_name: str, encoding: Encoding, listed: bool) -> None:
        key = normalize_name(display_name, config.alias_vendor_prefixes)
        owner = owners.get(key)
        if owner is None:
            owners[key] = encoding
        elif owner is not encoding:
            # first encoding in catalog order keeps the key
            logger.warning(
                "Encoding name collides with an earlier catalog entry",
                extra={"display_name": display_name, "key": key},
            )
            if not listed:
                return
        elif not listed:
            return
        entries.append(NameEntry(display_name, key, encoding, listed))

    for encoding in encodings:
        if encoding in seen:
            raise CatalogError(f"{encoding!r} is listed more than once")
        seen.add(encoding)
        _introspect(encoding)
        add(special_names.get(encoding, encoding.name), encoding, listed=True)

    for encoding in encodings:
        for alias in aliases.get(encoding, ()):
            add(alias, encoding, listed=False)

    logger.debug(
        "Built encoding catalog",
        extra={"encodings": len(encodings), "names": len(entries)},
    )
    return Registry(encodings, entries, config.alias_vendor_prefixes)
