"""Command-line argument parsing for cvgrab."""

import argparse
from pathlib import Path

from . import constants


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cvgrab",
        description="Image and video capture utility (preview, snapshot, record)",
    )

    parser.add_argument(
        "camera",
        nargs="?",
        type=int,
        default=constants.DEFAULT_CAMERA,
        help="Camera device index (default: %(default)s)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for snapshots and recordings "
             "(default: $CVGRAB_OUTPUT_DIR or the working directory)",
    )
    parser.add_argument(
        "--placeholder",
        type=Path,
        default=None,
        help="Image shown while the camera delivers no frames "
             "(default: $CVGRAB_PLACEHOLDER_IMAGE or a built-in card)",
    )

    return parser.parse_args(argv)
