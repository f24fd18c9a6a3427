"""Tests for encoding families and byte-order-mark handling."""

import codecs

import pytest

from text_transcoder.character.encoding import (
    UTF,
    BOMPolicy,
    BOMSniffingDecoder,
    BOMWritingEncoder,
    Charmap,
    CodecEncoding,
    Encoding,
    Endianness,
    MultiByte,
)
from text_transcoder.character.registry import (
    BIG5,
    CODE_PAGE_1047,
    CODE_PAGE_1140,
    ISO_8859_1,
    ISO_8859_6,
    ISO_8859_6E,
    UTF_8,
    UTF_8_BOM,
    UTF_16_BE,
    UTF_16_BE_BOM,
    UTF_16_LE,
    UTF_16_LE_BOM,
    UTF_32_LE_BOM,
    WINDOWS_1252,
)


class TestEncodingFamilies:
    """Test Encoding construction, naming and identity."""

    def test_encoding_is_abstract(self):
        """Test that the base class cannot be instantiated."""
        with pytest.raises(TypeError):
            Encoding("anything")

    def test_empty_name_rejected(self):
        """Test that an encoding needs a name."""
        with pytest.raises(ValueError, match="cannot be empty"):
            MultiByte("")

    def test_family_tags(self):
        """Test family attribute per concrete class."""
        assert WINDOWS_1252.family == "charmap"
        assert BIG5.family == "multibyte"
        assert UTF_8.family == "utf"
        assert CodecEncoding("ascii").family == "codec"

    def test_intrinsic_names(self):
        """Test names derived from the encoding definition."""
        assert WINDOWS_1252.name == "Windows 1252"
        assert BIG5.name == "big5"
        assert UTF_8.name == "UTF-8 (Ignore BOM)"
        assert UTF_16_BE_BOM.name == "UTF-16BE (Use BOM)"
        assert CodecEncoding("ascii").name == "ascii"

    def test_repr(self):
        """Test repr shows class and name."""
        assert repr(WINDOWS_1252) == "<Charmap 'Windows 1252'>"

    def test_identity_equality(self):
        """Test that encodings sharing a table are still distinct."""
        assert ISO_8859_6E is not ISO_8859_6
        assert ISO_8859_6E != ISO_8859_6
        assert ISO_8859_6E.codec == ISO_8859_6.codec
        assert ISO_8859_6E.name == ISO_8859_6.name

    def test_codec_names(self):
        """Test codec dependencies reported for catalog introspection."""
        assert WINDOWS_1252.codec_names() == ("cp1252",)
        assert UTF_16_LE.codec_names() == ("utf-16-le",)
        assert UTF_16_BE_BOM.codec_names() == ("utf-16-be", "utf-16-le")
        assert UTF_8_BOM.codec_names() == ("utf-8",)


class TestUTFConstruction:
    """Test UTF width and byte order validation."""

    def test_utf8_has_no_byte_order(self):
        """Test UTF-8 with an endianness is rejected."""
        with pytest.raises(ValueError, match="no byte order"):
            UTF(8, Endianness.BIG)

    @pytest.mark.parametrize("width", [16, 32])
    def test_wide_formats_need_byte_order(self, width):
        """Test UTF-16 and UTF-32 without an endianness are rejected."""
        with pytest.raises(ValueError, match="requires a byte order"):
            UTF(width)

    def test_unsupported_width(self):
        """Test widths other than 8, 16 and 32."""
        with pytest.raises(ValueError, match="Unsupported UTF width"):
            UTF(7)

    def test_codec_and_bom(self):
        """Test codec id and byte order mark per format."""
        assert UTF_8.codec == "utf-8"
        assert UTF_16_LE.codec == "utf-16-le"
        assert UTF(32, Endianness.BIG).codec == "utf-32-be"
        assert UTF_16_BE.byte_order_mark == codecs.BOM_UTF16_BE
        assert UTF_8_BOM.byte_order_mark == codecs.BOM_UTF8


class TestCharmapDecoding:
    """Test single-byte table behaviour."""

    def test_latin1_covers_every_byte(self):
        """Test ISO 8859-1 maps all 256 bytes."""
        data = bytes(range(256))
        assert ISO_8859_1.decode(data) == "".join(chr(i) for i in range(256))

    def test_undefined_byte_is_malformed(self):
        """Test that an unmapped table slot raises instead of substituting."""
        with pytest.raises(UnicodeDecodeError):
            WINDOWS_1252.decode(b"\x81")

    def test_unrepresentable_character(self):
        """Test that encoding outside the repertoire raises."""
        with pytest.raises(UnicodeEncodeError):
            ISO_8859_1.encode("€")

    def test_ebcdic_1047(self):
        """Test the EBCDIC Latin-1 open-systems table."""
        assert CODE_PAGE_1047.encode("A[]") == b"\xc1\xad\xbd"
        assert CODE_PAGE_1047.decode(b"\xc1\xad\xbd") == "A[]"
        # the brackets are where 1047 and 1140 differ
        assert CODE_PAGE_1140.encode("A") == b"\xc1"
        assert CODE_PAGE_1140.encode("[") != b"\xad"


class TestIgnoreBOMPolicy:
    """Test formats that treat a BOM as ordinary text."""

    def test_bom_kept_on_read(self):
        """Test a leading U+FEFF survives decoding."""
        assert UTF_8.decode(b"\xef\xbb\xbfabc") == "\ufeffabc"
        assert UTF_16_LE.decode(b"\xff\xfea\x00") == "\ufeffa"

    def test_no_bom_written(self):
        """Test that encoding writes no BOM."""
        assert UTF_8.encode("abc") == b"abc"
        assert UTF_16_BE.encode("a") == b"\x00a"
        assert UTF_16_BE.encode("") == b""


class TestUseBOMPolicy:
    """Test formats that consume and produce a BOM."""

    def test_bom_stripped_on_read(self):
        """Test a matching BOM is dropped."""
        assert UTF_8_BOM.decode(b"\xef\xbb\xbfabc") == "abc"
        assert UTF_16_BE_BOM.decode(b"\xfe\xff\x00a") == "a"

    def test_missing_bom_uses_default_order(self):
        """Test input without a BOM is read in the declared byte order."""
        assert UTF_8_BOM.decode(b"abc") == "abc"
        assert UTF_16_BE_BOM.decode(b"\x00a") == "a"

    def test_bom_switches_byte_order(self):
        """Test that the opposite BOM selects the opposite byte order."""
        assert UTF_16_BE_BOM.decode(b"\xff\xfea\x00") == "a"
        assert UTF_16_LE_BOM.decode(b"\xfe\xff\x00a") == "a"

    def test_bom_written_once(self):
        """Test that the BOM precedes the output exactly once."""
        assert UTF_8_BOM.encode("abc") == b"\xef\xbb\xbfabc"
        assert UTF_32_LE_BOM.encode("a") == b"\xff\xfe\x00\x00a\x00\x00\x00"

    def test_bom_written_for_empty_text(self):
        """Test that a final encode of nothing still writes the BOM."""
        assert UTF_16_BE_BOM.encode("") == b"\xfe\xff"

    def test_bom_split_across_chunks(self):
        """Test that BOM detection waits for enough bytes."""
        decoder = UTF_16_LE_BOM.new_decoder()
        pieces = [decoder.decode(bytes([b])) for b in b"\xfe\xff\x00a"]
        pieces.append(decoder.decode(b"", final=True))
        assert "".join(pieces) == "a"

    def test_short_input_at_end(self):
        """Test that a lone partial BOM at end of input is malformed."""
        decoder = UTF_8_BOM.new_decoder()
        with pytest.raises(UnicodeDecodeError):
            decoder.decode(b"\xef\xbb", final=True)


class TestBOMSniffingDecoderState:
    """Test getstate/setstate of the BOM-sniffing decoder."""

    def test_state_before_selection(self):
        """Test that held-back bytes are reported as pending."""
        decoder = BOMSniffingDecoder(((codecs.BOM_UTF8, "utf-8"),), "utf-8")
        assert decoder.decode(b"\xef") == ""
        assert decoder.getstate() == (b"\xef", 0)

    def test_state_round_trip_after_selection(self):
        """Test that a restored decoder continues with the selected codec."""
        decoder = UTF_16_LE_BOM.new_decoder()
        assert decoder.decode(b"\xfe\xff\x00") == ""
        state = decoder.getstate()
        assert state == (b"\x00", 2)

        fresh = UTF_16_LE_BOM.new_decoder()
        fresh.setstate(state)
        assert fresh.decode(b"a") == "a"

    def test_reset(self):
        """Test that reset forgets the selected codec."""
        decoder = UTF_16_LE_BOM.new_decoder()
        decoder.decode(b"\xfe\xff")
        decoder.reset()
        assert decoder.getstate() == (b"", 0)
        assert decoder.decode(b"a\x00") == "a"


class TestBOMWritingEncoderState:
    """Test getstate/setstate of the BOM-writing encoder."""

    def test_bom_pending_flag(self):
        """Test that the state tracks whether the BOM was written."""
        encoder = BOMWritingEncoder("utf-8", codecs.BOM_UTF8)
        assert encoder.getstate() == 1
        assert encoder.encode("a") == codecs.BOM_UTF8 + b"a"
        assert encoder.getstate() == 0
        assert encoder.encode("b") == b"b"

    def test_restore_pending_bom(self):
        """Test that restoring the initial state writes the BOM again."""
        encoder = UTF_8_BOM.new_encoder()
        state = encoder.getstate()
        encoder.encode("a")
        encoder.setstate(state)
        assert encoder.encode("b") == codecs.BOM_UTF8 + b"b"

    def test_failed_encode_keeps_bom_pending(self):
        """Test that an encode error does not consume the BOM."""
        encoder = UTF_16_LE_BOM.new_encoder()
        with pytest.raises(UnicodeEncodeError):
            encoder.encode("\ud800")
        assert encoder.getstate() == 1

    def test_reset(self):
        """Test that reset re-arms the BOM."""
        encoder = UTF_8_BOM.new_encoder()
        encoder.encode("a")
        encoder.reset()
        assert encoder.encode("c") == codecs.BOM_UTF8 + b"c"


class TestCustomEncodings:
    """Test building encodings outside the catalog."""

    def test_charmap_from_codec(self):
        """Test a charmap over any single-byte codec."""
        cp500 = Charmap("cp500", "IBM Code Page 500")
        assert cp500.encode("A") == "A".encode("cp500")
        assert cp500.decode(cp500.encode("Hello")) == "Hello"

    def test_multibyte_incremental_decoding(self):
        """Test that multi-byte sequences may be split across calls."""
        data = "日本".encode("shift_jis")
        decoder = MultiByte("shift_jis").new_decoder()
        text = "".join(decoder.decode(data[i:i + 1]) for i in range(len(data)))
        text += decoder.decode(b"", final=True)
        assert text == "日本"

    def test_bom_policy_values(self):
        """Test the enum values used in configuration and logs."""
        assert BOMPolicy.IGNORE.value == "ignore"
        assert BOMPolicy.USE.value == "use"
        assert Endianness.BIG.value == "be"
