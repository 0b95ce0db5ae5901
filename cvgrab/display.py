"""OpenCV highgui window, recording marker and placeholder card helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from . import constants

logger = logging.getLogger(__name__)

# Colours (BGR)
RED = (0, 0, 255)
WHITE = (255, 255, 255)
GREY = (128, 128, 128)
BG_DARK = (30, 30, 30)

FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.55
FONT_THICKNESS = 1
LINE_HEIGHT = 22

NO_DATA_TEXT = "NO DATA"


def open_window(window_name: str) -> None:
    cv2.namedWindow(window_name, cv2.WINDOW_AUTOSIZE)


def show_frame(
    window_name: str,
    image: np.ndarray,
    recording: bool = False,
    hud_lines: list[str] | None = None,
) -> np.ndarray:
    """Display a copy of *image*, marked when *recording*.

    Returns the copy that was shown; *image* itself is never drawn on.
    """
    shown = draw_recording_marker(image) if recording else image.copy()
    if hud_lines:
        _draw_status(shown, hud_lines)
    cv2.imshow(window_name, shown)
    return shown


def draw_recording_marker(image: np.ndarray) -> np.ndarray:
    """Filled red dot in the upper-left corner (returns a copy)."""
    out = image.copy()
    cv2.circle(
        out,
        constants.RECORD_MARKER_CENTER,
        constants.RECORD_MARKER_RADIUS,
        RED,
        -1,
    )
    return out


def render_no_data(width: int, height: int) -> np.ndarray:
    """Render the built-in placeholder card at *width* x *height*."""
    card = np.zeros((height, width, 3), dtype=np.uint8)
    card[:] = BG_DARK

    # Diagonal cross keeps the card recognisable when scaled down
    cv2.line(card, (0, 0), (width - 1, height - 1), GREY, 1)
    cv2.line(card, (0, height - 1), (width - 1, 0), GREY, 1)

    scale = max(0.5, min(width, height) / 160.0)
    thickness = max(1, int(scale))
    (tw, th), _ = cv2.getTextSize(NO_DATA_TEXT, FONT, scale, thickness)
    origin = ((width - tw) // 2, (height + th) // 2)
    cv2.rectangle(
        card,
        (origin[0] - 10, origin[1] - th - 10),
        (origin[0] + tw + 10, origin[1] + 10),
        BG_DARK,
        -1,
    )
    cv2.putText(card, NO_DATA_TEXT, origin, FONT, scale, WHITE, thickness)
    return card


def load_placeholder(
    width: int,
    height: int,
    image_path: Path | None = None,
) -> np.ndarray:
    """Return the "no data" frame resized to *width* x *height*.

    Uses *image_path* when it decodes, otherwise the built-in card.
    """
    base = None
    if image_path is not None:
        base = cv2.imread(str(image_path))
        if base is None:
            logger.warning("Placeholder image %s unreadable, using built-in card", image_path)
    if base is None:
        return render_no_data(width, height)
    if base.shape[1] != width or base.shape[0] != height:
        base = cv2.resize(base, (width, height))
    return base


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _draw_status(image: np.ndarray, lines: list[str], margin: int = 6) -> None:
    """Render *lines* in a translucent strip along the bottom edge of *image*."""
    if not lines:
        return

    rows, cols = image.shape[:2]
    text_width = max(
        cv2.getTextSize(line, FONT, FONT_SCALE, FONT_THICKNESS)[0][0]
        for line in lines
    )
    top = max(0, rows - len(lines) * LINE_HEIGHT - 10 - margin)
    right = min(cols - 1, margin + text_width + 10)

    overlay = image.copy()
    cv2.rectangle(overlay, (margin, top), (right, rows - margin), BG_DARK, -1)
    cv2.addWeighted(overlay, 0.65, image, 0.35, 0, image)

    for i, line in enumerate(lines):
        baseline = top + 20 + i * LINE_HEIGHT
        cv2.putText(image, line, (margin + 5, baseline), FONT, FONT_SCALE, WHITE, FONT_THICKNESS)
