"""Scale and mirror transform applied to every frame a source produces."""

from __future__ import annotations

import cv2
import numpy as np

from . import constants
from .config import GrabConfig

# Keeps repeated 0.1 steps from drifting (1.0 + 10 * 0.1 != 2.0 in floats)
_SCALE_DIGITS = 6


class PostProcessor:
    """Stateful scale + horizontal/vertical mirror.

    Operations are applied in a fixed order: scale, horizontal mirror,
    vertical mirror. Mutators only affect frames passed to apply() later.
    """

    def __init__(self, config: GrabConfig | None = None):
        self._config = config or GrabConfig()
        self.size_factor: float = constants.SIZE_FACTOR_NORMAL
        self.flip_horizontal = False
        self.flip_vertical = False

    def _clamp(self, value: float) -> float:
        value = round(value, _SCALE_DIGITS)
        return min(max(value, self._config.min_scale), self._config.max_scale)

    def increase_size(self) -> float:
        self.size_factor = self._clamp(self.size_factor + self._config.scale_step)
        return self.size_factor

    def decrease_size(self) -> float:
        self.size_factor = self._clamp(self.size_factor - self._config.scale_step)
        return self.size_factor

    def set_normal_size(self) -> float:
        self.size_factor = constants.SIZE_FACTOR_NORMAL
        return self.size_factor

    def toggle_flip_horizontal(self) -> bool:
        self.flip_horizontal = not self.flip_horizontal
        return self.flip_horizontal

    def toggle_flip_vertical(self) -> bool:
        self.flip_vertical = not self.flip_vertical
        return self.flip_vertical

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """Return the post-processed version of *frame*.

        The input is never modified. Empty frames are returned unchanged.
        """
        if frame is None or frame.size == 0:
            return frame

        out = frame
        if self.size_factor != constants.SIZE_FACTOR_NORMAL:
            h, w = frame.shape[:2]
            new_w = max(1, int(round(w * self.size_factor)))
            new_h = max(1, int(round(h * self.size_factor)))
            out = cv2.resize(frame, (new_w, new_h), interpolation=cv2.INTER_LINEAR)
        if self.flip_horizontal:
            out = cv2.flip(out, 1)
        if self.flip_vertical:
            out = cv2.flip(out, 0)
        return out

    def describe(self) -> str:
        flips = []
        if self.flip_horizontal:
            flips.append("H")
        if self.flip_vertical:
            flips.append("V")
        return f"size={self.size_factor:.1f} flip={'+'.join(flips) or 'none'}"
