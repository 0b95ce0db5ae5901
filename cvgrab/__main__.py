"""cvgrab entry point: keyboard-driven preview / snapshot / record loop.

Usage:
    python3 -m cvgrab            # camera 0
    python3 -m cvgrab 1          # camera 1
    python3 -m cvgrab 1 --output-dir ~/captures
"""

from __future__ import annotations

import logging
import sys
import time
from enum import Enum, auto

import cv2
import numpy as np

from . import cli, constants, display, recording
from . import source as media
from .config import GrabConfig
from .probe import PixelProbe
from .recording import RecordingController, RecordingError
from .session import CaptureSession

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("cvgrab")

WINDOW = "cvgrab"

# How long the post-processing status line stays on the preview
STATUS_SECONDS = 1.5

KEY_HELP = [
    "Click in the preview window to print the selected pixel's properties.",
    "SPACE=snapshot  RETURN=start/stop recording  ESC=quit",
    "h=flip horizontally  v=flip vertically  +/-=resize  n=normal size",
    "Keys only work while the preview window has focus.",
]


class Command(Enum):
    QUIT = auto()
    FLIP_HORIZONTAL = auto()
    FLIP_VERTICAL = auto()
    SNAPSHOT = auto()
    RECORD = auto()
    INCREASE_SIZE = auto()
    DECREASE_SIZE = auto()
    NORMAL_SIZE = auto()


KEYMAP: dict[int, Command] = {
    constants.KEY_ESC: Command.QUIT,
    ord("h"): Command.FLIP_HORIZONTAL,
    ord("v"): Command.FLIP_VERTICAL,
    constants.KEY_SPACE: Command.SNAPSHOT,
    constants.KEY_RETURN: Command.RECORD,
    constants.KEY_LINEFEED: Command.RECORD,
    ord("+"): Command.INCREASE_SIZE,
    ord("="): Command.INCREASE_SIZE,
    ord("-"): Command.DECREASE_SIZE,
    ord("n"): Command.NORMAL_SIZE,
}

_POSTPROCESS_COMMANDS = (
    Command.FLIP_HORIZONTAL,
    Command.FLIP_VERTICAL,
    Command.INCREASE_SIZE,
    Command.DECREASE_SIZE,
    Command.NORMAL_SIZE,
)


# ---------------------------------------------------------------------------
# Key dispatch
# ---------------------------------------------------------------------------

def handle_key(
    key: int,
    frame: np.ndarray,
    session: CaptureSession,
    recorder: RecordingController,
) -> Command | None:
    """Apply the command bound to *key*. Unbound keys return None.

    RecordingError propagates when a recording sink cannot be opened.
    """
    command = KEYMAP.get(key)
    if command is None or command == Command.QUIT:
        return command

    post = session.postprocessor

    if command == Command.FLIP_HORIZONTAL:
        if post.toggle_flip_horizontal():
            logger.info("Flipping horizontally.")
        else:
            logger.info("No longer flipping horizontally.")

    elif command == Command.FLIP_VERTICAL:
        if post.toggle_flip_vertical():
            logger.info("Flipping vertically.")
        else:
            logger.info("No longer flipping vertically.")

    elif command == Command.INCREASE_SIZE:
        logger.info("Size factor %.1f", post.increase_size())

    elif command == Command.DECREASE_SIZE:
        logger.info("Size factor %.1f", post.decrease_size())

    elif command == Command.NORMAL_SIZE:
        logger.info("Size factor %.1f (normal)", post.set_normal_size())

    elif command == Command.SNAPSHOT:
        if media.is_empty(frame):
            logger.warning("No frame to save")
            return command
        path = recording.save_snapshot(frame, session.config.output_dir)
        if path is not None:
            logger.info("Saved a snapshot as %s.", path)

    elif command == Command.RECORD:
        if recorder.active:
            logger.info("Stopped recording in %s.", recorder.stop())
        elif media.is_empty(frame):
            logger.warning("No frame to size the recording, not starting")
        else:
            recorder.toggle(frame)
            logger.info("Started recording in %s.", recorder.file_path)

    return command


# ---------------------------------------------------------------------------
# Interaction loop
# ---------------------------------------------------------------------------

def run_grab(
    session: CaptureSession,
    recorder: RecordingController,
    window: str = WINDOW,
    probe: PixelProbe | None = None,
) -> None:
    """Capture, record, show, wait for a key and dispatch until ESC."""
    wait_ms = session.config.key_wait_ms
    status_lines: list[str] = []
    status_until = 0.0
    frame_missing = False

    while True:
        frame = session.get_image()

        if media.is_empty(frame):
            if not frame_missing:
                logger.error("Could not read an image from %s", session.source.origin)
                frame_missing = True
        else:
            frame_missing = False
            recorder.write(frame)
            hud = status_lines if time.monotonic() < status_until else None
            display.show_frame(window, frame, recording=recorder.active, hud_lines=hud)
            if probe is not None:
                probe.update(frame)

        key = cv2.waitKey(wait_ms) & 0xFF
        command = handle_key(key, frame, session, recorder)

        if command == Command.QUIT:
            break
        if command in _POSTPROCESS_COMMANDS:
            status_lines = [session.postprocessor.describe()]
            status_until = time.monotonic() + STATUS_SECONDS


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None) -> int:
    args = cli.parse_args(argv)

    try:
        config = GrabConfig.from_env(
            output_dir=args.output_dir,
            placeholder_path=args.placeholder,
        )
    except ValueError as e:
        logger.error("%s", e)
        return 1

    source = media.create_source(config, device=args.camera)
    with CaptureSession(source, config) as session, RecordingController(config) as recorder:
        if not session.is_opened():
            logger.error("Could not access camera %d.", args.camera)
            return 1

        logger.info("Using camera %d, saving to %s", args.camera, config.output_dir.resolve())
        for line in KEY_HELP:
            logger.info("%s", line)

        display.open_window(WINDOW)
        probe = PixelProbe()
        cv2.setMouseCallback(WINDOW, probe.on_mouse)
        try:
            run_grab(session, recorder, WINDOW, probe)
        except RecordingError as e:
            logger.error("%s", e)
            return 1
        finally:
            cv2.destroyAllWindows()

    return 0


if __name__ == "__main__":
    sys.exit(main())
