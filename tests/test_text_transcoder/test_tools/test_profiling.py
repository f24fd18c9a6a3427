"""Tests for transcode profiling."""

import io
from unittest.mock import MagicMock, patch

from text_transcoder.character.registry import ISO_8859_1, UTF_8
from text_transcoder.character.stream import transcode
from text_transcoder.tools.profiling import ProfilingSession, TranscodeProfiler


class TestProfilingSession:
    """Test derived session measurements."""

    def test_duration_and_memory(self):
        """Test duration and memory delta."""
        session = ProfilingSession(
            session_id="s", start_time=1.0, end_time=1.5,
            memory_start=1000, memory_end=3000,
        )
        assert session.duration_ms == 500.0
        assert session.memory_delta == 2000

    def test_throughput(self):
        """Test input throughput in MB/s."""
        session = ProfilingSession(session_id="s", start_time=0.0, end_time=2.0)
        session.bytes_in = 4 * 1024 * 1024
        assert session.throughput_mb_per_s == 2.0

    def test_zero_duration_throughput(self):
        """Test that an unfinished session reports no throughput."""
        session = ProfilingSession(session_id="s", start_time=5.0, end_time=5.0)
        assert session.throughput_mb_per_s == 0.0

    def test_to_dict(self):
        """Test session serialization."""
        data = ProfilingSession(session_id="abc", start_time=0.0).to_dict()
        assert data["session_id"] == "abc"
        assert data["success"] is None
        assert "result" not in data


class TestTranscodeProfiler:
    """Test profiling real transcodes."""

    def test_profile_transcode(self):
        """Test that a session records byte counts and memory."""
        profiler = TranscodeProfiler()
        with profiler.profile("session1") as session:
            result = transcode(io.BytesIO("café".encode()), io.BytesIO(), UTF_8, ISO_8859_1)
            session.record(result)

        assert profiler.sessions == [session]
        assert session.bytes_in == 5
        assert session.bytes_out == 4
        assert session.success is True
        assert session.memory_start > 0
        assert session.memory_end > 0
        assert session.duration_ms >= 0
        assert result.performance.memory_end_bytes == session.memory_end

    def test_summary(self):
        """Test the one-line report."""
        profiler = TranscodeProfiler()
        with profiler.profile("s") as session:
            session.record(transcode(io.BytesIO(b"abc"), io.BytesIO(), UTF_8, UTF_8))
        summary = session.summary()
        assert summary.startswith("3 bytes in, 3 bytes out, ")
        assert "MB/s" in summary
        assert "rss" in summary

    def test_memory_tracking_disabled(self):
        """Test that no process handle is used when tracking is off."""
        with patch("text_transcoder.tools.profiling.psutil.Process") as process:
            profiler = TranscodeProfiler(enable_memory_tracking=False)
            with profiler.profile("s") as session:
                pass
        process.assert_not_called()
        assert session.memory_start == 0
        assert session.memory_end == 0

    def test_memory_from_psutil(self):
        """Test that resident set size comes from psutil."""
        fake_process = MagicMock()
        fake_process.memory_info.return_value.rss = 1234
        with patch("text_transcoder.tools.profiling.psutil.Process", return_value=fake_process):
            profiler = TranscodeProfiler()
            with profiler.profile("s") as session:
                pass
        assert session.memory_start == 1234
        assert session.memory_delta == 0

    def test_session_recorded_on_exception(self):
        """Test that a session is kept when the profiled block raises."""
        profiler = TranscodeProfiler(enable_memory_tracking=False)
        try:
            with profiler.profile("s"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert len(profiler.sessions) == 1
        assert profiler.sessions[0].success is None
