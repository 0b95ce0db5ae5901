"""Pixel probe: report BGR, HSV and gray values under a mouse click."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import cv2
import numpy as np


@dataclass(frozen=True)
class PixelSample:
    x: int
    y: int
    bgr: tuple[int, int, int]
    hsv: tuple[int, int, int]
    gray: int

    def format(self) -> str:
        b, g, r = self.bgr
        h, s, v = self.hsv
        return (
            f"XY=({self.x},{self.y}), BGR=({b},{g},{r}), "
            f"HSV=({h},{s},{v}), gray={self.gray}."
        )


def probe_pixel(frame: np.ndarray, x: int, y: int) -> PixelSample:
    """Sample *frame* at (x, y) as BGR, HSV (OpenCV 8-bit ranges) and gray."""
    h, w = frame.shape[:2]
    if not (0 <= x < w and 0 <= y < h):
        raise ValueError(f"Pixel ({x},{y}) outside {w}x{h} frame")

    # Convert a 1x1 patch so values match a whole-frame cvtColor exactly
    patch = np.ascontiguousarray(frame[y:y + 1, x:x + 1])
    b, g, r = (int(c) for c in patch[0, 0])
    hue, sat, val = (int(c) for c in cv2.cvtColor(patch, cv2.COLOR_BGR2HSV)[0, 0])
    gray = int(cv2.cvtColor(patch, cv2.COLOR_BGR2GRAY)[0, 0])
    return PixelSample(x=x, y=y, bgr=(b, g, r), hsv=(hue, sat, val), gray=gray)


class PixelProbe:
    """Mouse callback bound to the most recently rendered frame.

    Read-only: it never touches the source, post-processor or recorder.
    """

    def __init__(self, report: Callable[[str], None] = print):
        self._report = report
        self.frame: np.ndarray | None = None

    def update(self, frame: np.ndarray) -> None:
        self.frame = frame

    def on_mouse(
        self, event: int, x: int, y: int, flags: int, param=None,
    ) -> PixelSample | None:
        """Report the pixel under a left click; returns the sample taken."""
        if event != cv2.EVENT_LBUTTONDOWN or self.frame is None:
            return None
        sample = probe_pixel(self.frame, x, y)
        self._report(sample.format())
        return sample
