"""Recording state machine and timestamped output files.

RecordingController is either IDLE or ACTIVE. While ACTIVE every frame
passed to write() goes to a video sink opened at activation time. Failing
to open the sink is the one fatal error of a run (RecordingError).
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Protocol

import cv2
import numpy as np

from . import constants
from .config import GrabConfig

logger = logging.getLogger(__name__)


class RecordingError(RuntimeError):
    """The recording sink could not be opened."""


class RecordingState(Enum):
    IDLE = auto()
    ACTIVE = auto()


class VideoWriterLike(Protocol):
    def write(self, frame: np.ndarray) -> None: ...

    def isOpened(self) -> bool: ...

    def release(self) -> None: ...


WriterFactory = Callable[..., VideoWriterLike]


def timestamped_path(
    directory: Path,
    extension: str,
    now: datetime | None = None,
) -> Path:
    """<directory>/<YYYYmmddHHMMSS>.<extension> (one-second resolution)."""
    stamp = (now or datetime.now()).strftime(constants.FILENAME_TIMESTAMP_FORMAT)
    return Path(directory) / f"{stamp}.{extension}"


def _warn_existing(path: Path) -> None:
    # Names only resolve to the second; two events in one second share a name
    if path.exists():
        logger.warning("%s already exists and will be overwritten", path)


def save_snapshot(
    frame: np.ndarray,
    directory: Path,
    now: datetime | None = None,
) -> Path | None:
    """Write *frame* as a timestamped still; returns the path or None on failure."""
    path = timestamped_path(directory, constants.SNAPSHOT_EXTENSION, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Could not save snapshot %s: %s", path, e)
        return None
    _warn_existing(path)
    if not cv2.imwrite(str(path), frame):
        logger.error("Could not save snapshot %s", path)
        return None
    return path


class RecordingController:
    """Idle/active recorder writing post-processed frames to a video file."""

    def __init__(
        self,
        config: GrabConfig | None = None,
        writer_factory: WriterFactory = cv2.VideoWriter,
    ):
        self._config = config or GrabConfig()
        self._writer_factory = writer_factory
        self._writer: VideoWriterLike | None = None
        self.state = RecordingState.IDLE
        self.file_path: Path | None = None
        self.last_path: Path | None = None
        self.frame_size: tuple[int, int] | None = None
        self.frames_written = 0

    @property
    def active(self) -> bool:
        return self.state == RecordingState.ACTIVE

    def start(self, frame_size: tuple[int, int], now: datetime | None = None) -> Path:
        """Open a new sink sized *frame_size* (width, height).

        Raises RecordingError if the sink cannot be opened.
        """
        if self.active:
            raise RuntimeError(f"Already recording to {self.file_path}")

        path = timestamped_path(self._config.output_dir, constants.RECORD_EXTENSION, now)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RecordingError(f"Could not create the output directory {path.parent}") from e
        _warn_existing(path)
        fourcc = cv2.VideoWriter_fourcc(*self._config.record_fourcc)
        writer = self._writer_factory(
            str(path), fourcc, self._config.record_fps, tuple(frame_size),
        )
        if not writer.isOpened():
            writer.release()
            raise RecordingError(f"Could not open the video file {path} for writing")

        self._writer = writer
        self.state = RecordingState.ACTIVE
        self.file_path = path
        self.last_path = path
        self.frame_size = (int(frame_size[0]), int(frame_size[1]))
        self.frames_written = 0
        logger.debug(
            "Sink %s opened (%dx%d @ %.1f fps, %s)",
            path, self.frame_size[0], self.frame_size[1],
            self._config.record_fps, self._config.record_fourcc,
        )
        return path

    def stop(self) -> Path | None:
        """Flush and close the sink; returns the file that was written."""
        if not self.active:
            return self.last_path
        if self._writer is not None:
            self._writer.release()
        self._writer = None
        self.state = RecordingState.IDLE
        self.file_path = None
        logger.debug("Sink %s closed after %d frames", self.last_path, self.frames_written)
        return self.last_path

    def toggle(self, frame: np.ndarray, now: datetime | None = None) -> RecordingState:
        """Start recording at *frame*'s resolution, or stop if already active."""
        if self.active:
            self.stop()
        else:
            h, w = frame.shape[:2]
            self.start((w, h), now)
        return self.state

    def write(self, frame: np.ndarray) -> bool:
        """Write *frame* if recording. Returns True when a frame was written."""
        if not self.active or self._writer is None:
            return False
        h, w = frame.shape[:2]
        if (w, h) != self.frame_size:
            # Size commands change the frame size mid-recording
            frame = cv2.resize(frame, self.frame_size)
        self._writer.write(frame)
        self.frames_written += 1
        return True

    def close(self) -> None:
        if self.active:
            logger.info("Stopped recording in %s.", self.stop())

    def __enter__(self) -> "RecordingController":
        return self

    def __exit__(self, *exc) -> bool:
        self.close()
        return False
