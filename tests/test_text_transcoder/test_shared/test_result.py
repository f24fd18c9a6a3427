"""Tests for result and fault types."""

import pytest

from text_transcoder.shared.result import (
    FaultCause,
    PerformanceMetrics,
    TranscodeFault,
    TranscodeResult,
)


def decode_error():
    return UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")


class TestTranscodeFault:
    """Test fault offsets and messages."""

    def test_offset_is_one_based(self):
        """Test that the offset follows the last consumed byte."""
        fault = TranscodeFault(FaultCause.DECODE, 12, decode_error())
        assert fault.bytes_consumed == 12
        assert fault.offset == 13

    def test_explicit_offset(self):
        """Test that an explicit offset wins."""
        fault = TranscodeFault(FaultCause.ENCODE, 3, decode_error(), offset=7)
        assert fault.offset == 7

    def test_io_fault_has_no_offset(self):
        """Test that I/O faults are not tied to a source position."""
        fault = TranscodeFault(FaultCause.IO, 5, OSError("boom"))
        assert fault.offset is None
        assert fault.describe() == "I/O error: boom"

    def test_describe_data_fault(self):
        """Test the message for decode faults."""
        fault = TranscodeFault(FaultCause.DECODE, 12, decode_error())
        assert fault.describe() == (
            "read input up to byte 13: decode error: "
            "'utf-8' codec can't decode byte 0xff in position 0: invalid start byte"
        )
        assert str(fault) == fault.describe()

    def test_retryable(self):
        """Test that only I/O faults are retryable."""
        assert TranscodeFault(FaultCause.IO, 0, OSError("x")).retryable
        assert not TranscodeFault(FaultCause.DECODE, 0, decode_error()).retryable

    def test_to_dict(self):
        """Test fault serialization."""
        data = TranscodeFault(FaultCause.ENCODE, 3, decode_error()).to_dict()
        assert data["cause"] == "encode"
        assert data["bytes_consumed"] == 3
        assert data["offset"] == 4
        assert "invalid start byte" in data["error"]

    def test_is_exception(self):
        """Test that a fault can be raised and caught."""
        with pytest.raises(TranscodeFault, match="read input up to byte 1"):
            raise TranscodeFault(FaultCause.DECODE, 0, decode_error())


class TestTranscodeResult:
    """Test the transcode outcome."""

    def test_success(self):
        """Test a result without a fault."""
        result = TranscodeResult(bytes_consumed=5, bytes_written=4, characters=4)
        assert result.success
        result.raise_for_fault()

    def test_failure(self):
        """Test a result carrying a fault."""
        fault = TranscodeFault(FaultCause.DECODE, 2, decode_error())
        result = TranscodeResult(bytes_consumed=2, fault=fault)
        assert not result.success
        with pytest.raises(TranscodeFault) as exc_info:
            result.raise_for_fault()
        assert exc_info.value is fault

    @pytest.mark.parametrize("field_name", ["bytes_consumed", "bytes_written"])
    def test_negative_counts(self, field_name):
        """Test that byte counts cannot be negative."""
        with pytest.raises(ValueError, match=f"{field_name} must be >= 0"):
            TranscodeResult(**{field_name: -1})

    def test_to_dict(self):
        """Test result serialization."""
        fault = TranscodeFault(FaultCause.DECODE, 2, decode_error())
        data = TranscodeResult(bytes_consumed=2, fault=fault, correlation_id="id").to_dict()
        assert data["success"] is False
        assert data["fault"]["offset"] == 3
        assert data["correlation_id"] == "id"

    def test_memory_delta(self):
        """Test the derived memory change."""
        metrics = PerformanceMetrics(memory_start_bytes=100, memory_end_bytes=250)
        assert metrics.memory_delta_bytes == 150
