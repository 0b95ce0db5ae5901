"""Tests for RecordingController transitions, sink writes and file naming."""

from datetime import datetime

import cv2
import numpy as np
import pytest

from cvgrab import recording
from cvgrab.config import GrabConfig
from cvgrab.recording import RecordingController, RecordingError, RecordingState
from cvgrab.tests.fakes import FakeWriter, failing_writer, make_frame

NOW = datetime(2024, 3, 5, 14, 7, 9)


def _controller(tmp_path, writer_factory=FakeWriter):
    return RecordingController(GrabConfig(output_dir=tmp_path), writer_factory=writer_factory)


class TestTimestampedPath:
    def test_format(self, tmp_path):
        path = recording.timestamped_path(tmp_path, "bmp", NOW)
        assert path == tmp_path / "20240305140709.bmp"

    def test_same_second_collides(self, tmp_path):
        a = recording.timestamped_path(tmp_path, "avi", NOW)
        b = recording.timestamped_path(tmp_path, "avi", NOW.replace(microsecond=999))
        assert a == b


class TestTransitions:
    def test_starts_idle(self, tmp_path):
        rec = _controller(tmp_path)
        assert rec.state == RecordingState.IDLE
        assert not rec.active
        assert rec.file_path is None

    def test_toggle_on_opens_sink_at_frame_size(self, tmp_path, frame):
        rec = _controller(tmp_path)
        assert rec.toggle(frame, NOW) == RecordingState.ACTIVE
        writer = FakeWriter.instances[-1]
        assert writer.size == (64, 48)
        assert writer.fps == 25.0
        assert writer.fourcc == cv2.VideoWriter_fourcc(*"MJPG")
        assert writer.path == str(tmp_path / "20240305140709.avi")
        assert rec.file_path == tmp_path / "20240305140709.avi"

    def test_toggle_off_closes_sink_and_keeps_name(self, tmp_path, frame):
        rec = _controller(tmp_path)
        rec.toggle(frame, NOW)
        writer = FakeWriter.instances[-1]
        assert rec.toggle(frame) == RecordingState.IDLE
        assert writer.released
        assert rec.file_path is None
        assert rec.last_path == tmp_path / "20240305140709.avi"

    def test_each_activation_gets_new_name(self, tmp_path, frame):
        rec = _controller(tmp_path)
        first = rec.start((64, 48), NOW)
        rec.stop()
        second = rec.start((64, 48), NOW.replace(second=10))
        rec.stop()
        assert first != second
        assert len(FakeWriter.instances) == 2

    def test_sink_open_failure_raises(self, tmp_path, frame):
        rec = _controller(tmp_path, writer_factory=failing_writer)
        with pytest.raises(RecordingError, match="Could not open"):
            rec.toggle(frame, NOW)
        assert not rec.active
        assert FakeWriter.instances[-1].released

    def test_unusable_directory_raises_recording_error(self, tmp_path, frame):
        blocker = tmp_path / "file"
        blocker.write_bytes(b"")
        rec = RecordingController(
            GrabConfig(output_dir=blocker / "sub"), writer_factory=FakeWriter,
        )
        with pytest.raises(RecordingError, match="output directory"):
            rec.toggle(frame, NOW)
        assert not rec.active
        assert FakeWriter.instances == []

    def test_start_while_active_rejected(self, tmp_path):
        rec = _controller(tmp_path)
        rec.start((10, 10), NOW)
        with pytest.raises(RuntimeError, match="Already recording"):
            rec.start((10, 10), NOW)

    def test_stop_when_idle_is_noop(self, tmp_path):
        rec = _controller(tmp_path)
        assert rec.stop() is None
        assert not rec.active

    def test_context_exit_closes_active_sink(self, tmp_path, frame):
        with _controller(tmp_path) as rec:
            rec.toggle(frame, NOW)
        assert not rec.active
        assert FakeWriter.instances[-1].released


class TestWrite:
    def test_no_write_while_idle(self, tmp_path, frame):
        rec = _controller(tmp_path)
        assert rec.write(frame) is False
        assert rec.frames_written == 0

    def test_frames_written_verbatim_while_active(self, tmp_path):
        rec = _controller(tmp_path)
        frames = [make_frame(seed=i) for i in range(3)]
        rec.toggle(frames[0], NOW)
        for f in frames:
            assert rec.write(f)
        writer = FakeWriter.instances[-1]
        assert rec.frames_written == 3
        assert all(np.array_equal(a, b) for a, b in zip(writer.frames, frames))

    def test_no_write_after_stop(self, tmp_path, frame):
        rec = _controller(tmp_path)
        rec.toggle(frame, NOW)
        rec.write(frame)
        rec.toggle(frame)
        assert rec.write(frame) is False
        assert len(FakeWriter.instances[-1].frames) == 1

    def test_resized_frame_is_fitted_to_sink(self, tmp_path, frame):
        rec = _controller(tmp_path)
        rec.toggle(frame, NOW)
        rec.write(make_frame(80, 60))
        written = FakeWriter.instances[-1].frames[-1]
        assert written.shape == (48, 64, 3)


class TestRealSink:
    def test_on_then_off_without_frames_leaves_file(self, tmp_path, frame):
        rec = RecordingController(GrabConfig(output_dir=tmp_path))
        rec.toggle(frame, NOW)
        rec.toggle(frame)
        assert (tmp_path / "20240305140709.avi").exists()
        assert rec.frames_written == 0
        assert not rec.active

    def test_recorded_file_has_content(self, tmp_path):
        rec = RecordingController(GrabConfig(output_dir=tmp_path))
        frame = make_frame(64, 48)
        rec.toggle(frame, NOW)
        for _ in range(5):
            rec.write(frame)
        path = rec.stop()
        assert path.stat().st_size > 0


class TestSnapshot:
    def test_snapshot_written_as_bmp(self, tmp_path, frame):
        path = recording.save_snapshot(frame, tmp_path, NOW)
        assert path == tmp_path / "20240305140709.bmp"
        assert np.array_equal(cv2.imread(str(path)), frame)

    def test_snapshot_creates_directory(self, tmp_path, frame):
        path = recording.save_snapshot(frame, tmp_path / "out", NOW)
        assert path.exists()

    def test_unusable_directory_returns_none(self, tmp_path, frame, caplog):
        blocker = tmp_path / "file"
        blocker.write_bytes(b"")
        path = recording.save_snapshot(frame, blocker / "sub", NOW)
        assert path is None
        assert "Could not save snapshot" in caplog.text
