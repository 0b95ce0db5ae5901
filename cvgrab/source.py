"""Media source abstraction: still image file, live camera or movie clip.

A MediaSource is a plain record tagged with its SourceKind; read_frame()
dispatches on the tag. Camera and clip origins never fail the caller: an
unavailable or exhausted origin yields the placeholder ("no data") frame,
sized to the origin's native resolution or the configured default.

A still image is read fresh on every call and is not replaced by the
placeholder; a missing or corrupt file comes back as an empty frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Protocol

import cv2
import numpy as np

from . import display
from .config import GrabConfig

logger = logging.getLogger(__name__)


class SourceKind(Enum):
    STILL = auto()
    DEVICE = auto()
    CLIP = auto()


class VideoCaptureLike(Protocol):
    """The subset of cv2.VideoCapture used by device and clip sources."""

    def isOpened(self) -> bool: ...

    def read(self) -> tuple[bool, np.ndarray | None]: ...

    def get(self, prop_id: int) -> float: ...

    def set(self, prop_id: int, value: float) -> bool: ...

    def release(self) -> None: ...


CaptureFactory = Callable[..., VideoCaptureLike]


def empty_frame() -> np.ndarray:
    """A zero-sized 3-channel frame (what a failed still decode yields)."""
    return np.zeros((0, 0, 3), dtype=np.uint8)


def is_empty(frame: np.ndarray | None) -> bool:
    return frame is None or frame.size == 0


@dataclass
class MediaSource:
    """One origin plus its cached placeholder frame."""

    kind: SourceKind
    origin: str | int
    capture: VideoCaptureLike | None = None
    placeholder: np.ndarray | None = field(default=None, repr=False)
    degraded: bool = False

    def is_opened(self) -> bool:
        if self.kind == SourceKind.STILL:
            return Path(str(self.origin)).is_file()
        return self.capture is not None and self.capture.isOpened()

    @property
    def placeholder_size(self) -> tuple[int, int] | None:
        """(width, height) of the placeholder, None for still sources."""
        if self.placeholder is None:
            return None
        return (self.placeholder.shape[1], self.placeholder.shape[0])


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def _probe_size(capture: VideoCaptureLike, config: GrabConfig) -> tuple[int, int]:
    """Native (width, height) of *capture*, defaults for non-positive values."""
    width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
    height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
    default_width, default_height = config.default_size
    return (width if width > 0 else default_width, height if height > 0 else default_height)


def _open_capture(
    kind: SourceKind,
    origin: str | int,
    config: GrabConfig,
    capture_factory: CaptureFactory,
) -> MediaSource:
    capture = capture_factory(origin)
    width, height = _probe_size(capture, config)
    placeholder = display.load_placeholder(width, height, config.placeholder_path)
    source = MediaSource(kind=kind, origin=origin, capture=capture, placeholder=placeholder)
    if capture.isOpened():
        logger.info("Opened %s source %s (%dx%d)", kind.name.lower(), origin, width, height)
    else:
        logger.warning(
            "%s source %s not available, serving %dx%d placeholder",
            kind.name.capitalize(), origin, *source.placeholder_size,
        )
    return source


def open_still(path: Path | str) -> MediaSource:
    path = Path(path)
    if not path.is_file():
        logger.warning("Still image %s does not exist", path)
    return MediaSource(kind=SourceKind.STILL, origin=str(path))


def open_device(
    index: int,
    config: GrabConfig,
    capture_factory: CaptureFactory = cv2.VideoCapture,
) -> MediaSource:
    return _open_capture(SourceKind.DEVICE, int(index), config, capture_factory)


def open_clip(
    path: Path | str,
    config: GrabConfig,
    capture_factory: CaptureFactory = cv2.VideoCapture,
) -> MediaSource:
    return _open_capture(SourceKind.CLIP, str(path), config, capture_factory)


def create_source(
    config: GrabConfig,
    device: int | None = None,
    still: Path | None = None,
    clip: Path | None = None,
    capture_factory: CaptureFactory = cv2.VideoCapture,
) -> MediaSource:
    """Factory: exactly one of *device*, *still* or *clip* must be given."""
    given = [name for name, value in (("device", device), ("still", still), ("clip", clip))
             if value is not None]
    if len(given) != 1:
        raise ValueError(f"Exactly one origin is required, got {given or 'none'}")

    if still is not None:
        return open_still(still)
    if clip is not None:
        return open_clip(clip, config, capture_factory)
    return open_device(device, config, capture_factory)


def release(source: MediaSource) -> None:
    if source.capture is not None:
        source.capture.release()
        source.capture = None
        logger.info("Released %s source %s", source.kind.name.lower(), source.origin)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _grab(capture: VideoCaptureLike | None) -> np.ndarray | None:
    """One read attempt; None when not opened, the read fails or is empty."""
    if capture is None or not capture.isOpened():
        return None
    ok, frame = capture.read()
    if not ok or is_empty(frame):
        return None
    return frame


def _substitute(source: MediaSource) -> np.ndarray:
    if not source.degraded:
        logger.warning("No frame from %s source %s, showing placeholder",
                       source.kind.name.lower(), source.origin)
        source.degraded = True
    else:
        logger.debug("Placeholder for %s source %s", source.kind.name.lower(), source.origin)
    return source.placeholder.copy()


def _live(source: MediaSource, frame: np.ndarray) -> np.ndarray:
    if source.degraded:
        logger.info("%s source %s delivering frames again",
                    source.kind.name.capitalize(), source.origin)
        source.degraded = False
    return frame


def _read_still(source: MediaSource) -> np.ndarray:
    frame = cv2.imread(str(source.origin))
    if frame is None:
        return empty_frame()
    return frame


def _read_device(source: MediaSource) -> np.ndarray:
    frame = _grab(source.capture)
    if frame is None:
        return _substitute(source)
    return _live(source, frame)


def _read_clip(source: MediaSource) -> np.ndarray:
    frame = _grab(source.capture)
    if frame is None and source.capture is not None:
        # End of clip or a transient error: rewind once and retry
        logger.debug("Rewinding clip %s", source.origin)
        source.capture.set(cv2.CAP_PROP_POS_FRAMES, 0)
        source.capture.set(cv2.CAP_PROP_POS_MSEC, 0)
        frame = _grab(source.capture)
    if frame is None:
        return _substitute(source)
    return _live(source, frame)


_READERS: dict[SourceKind, Callable[[MediaSource], np.ndarray]] = {
    SourceKind.STILL: _read_still,
    SourceKind.DEVICE: _read_device,
    SourceKind.CLIP: _read_clip,
}


def read_frame(source: MediaSource) -> np.ndarray:
    """Return the next raw (not post-processed) frame from *source*."""
    return _READERS[source.kind](source)
