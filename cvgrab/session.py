"""CaptureSession: one media source plus one post-processor for a run."""

from __future__ import annotations

import numpy as np

from . import source as media
from .config import GrabConfig
from .postprocess import PostProcessor


class CaptureSession:
    """Owns a MediaSource and a PostProcessor for the lifetime of the run.

    get_image() reads one frame (falling back per the source kind) and
    post-processes it. Use as a context manager so the origin is released
    on every exit path.
    """

    def __init__(
        self,
        source: media.MediaSource,
        config: GrabConfig | None = None,
        postprocessor: PostProcessor | None = None,
    ):
        self.config = config or GrabConfig()
        self.source = source
        self.postprocessor = postprocessor or PostProcessor(self.config)

    def get_image(self) -> np.ndarray:
        frame = media.read_frame(self.source)
        if media.is_empty(frame):
            return frame
        return self.postprocessor.apply(frame)

    def is_opened(self) -> bool:
        return self.source.is_opened()

    def release(self) -> None:
        media.release(self.source)

    def __enter__(self) -> "CaptureSession":
        return self

    def __exit__(self, *exc) -> bool:
        self.release()
        return False
