"""Run configuration for cvgrab.

Nothing here is persisted between runs. Values come from the dataclass
defaults, optionally overridden from the environment and the command line.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from . import constants

ENV_OUTPUT_DIR = "CVGRAB_OUTPUT_DIR"
ENV_PLACEHOLDER_IMAGE = "CVGRAB_PLACEHOLDER_IMAGE"


@dataclass(frozen=True)
class GrabConfig:
    """Scale bounds, default origin resolution and output settings."""

    min_scale: float = constants.SIZE_FACTOR_MIN
    max_scale: float = constants.SIZE_FACTOR_MAX
    scale_step: float = constants.SIZE_FACTOR_STEP
    default_width: int = constants.MEDIA_DEFAULT_WIDTH
    default_height: int = constants.MEDIA_DEFAULT_HEIGHT
    record_fps: float = constants.RECORD_FPS
    record_fourcc: str = constants.RECORD_FOURCC
    key_wait_ms: int = constants.KEY_WAIT_MS
    output_dir: Path = Path(".")
    placeholder_path: Path | None = None

    def validate(self) -> "GrabConfig":
        """Raise ValueError on inconsistent values; return self otherwise."""
        if self.scale_step <= 0:
            raise ValueError(f"scale_step must be positive, got {self.scale_step}")
        if not (0 < self.min_scale <= constants.SIZE_FACTOR_NORMAL <= self.max_scale):
            raise ValueError(
                "Scale bounds must satisfy 0 < min_scale <= 1.0 <= max_scale, "
                f"got [{self.min_scale}, {self.max_scale}]"
            )
        if self.default_width <= 0 or self.default_height <= 0:
            raise ValueError(
                f"Default resolution must be positive, got "
                f"{self.default_width}x{self.default_height}"
            )
        if self.record_fps <= 0:
            raise ValueError(f"record_fps must be positive, got {self.record_fps}")
        if len(self.record_fourcc) != 4:
            raise ValueError(f"record_fourcc must be 4 characters, got {self.record_fourcc!r}")
        if self.key_wait_ms <= 0:
            raise ValueError(f"key_wait_ms must be positive, got {self.key_wait_ms}")
        return self

    @property
    def default_size(self) -> tuple[int, int]:
        """(width, height) used when an origin cannot report its resolution."""
        return (self.default_width, self.default_height)

    @classmethod
    def from_env(cls, **overrides) -> "GrabConfig":
        """Build a config from defaults, the environment, then *overrides*.

        Overrides whose value is None are ignored so argparse defaults can be
        passed straight through.
        """
        config = cls()
        output_dir = os.environ.get(ENV_OUTPUT_DIR, "").strip()
        if output_dir:
            config = replace(config, output_dir=Path(output_dir).expanduser())
        placeholder = os.environ.get(ENV_PLACEHOLDER_IMAGE, "").strip()
        if placeholder:
            config = replace(config, placeholder_path=Path(placeholder).expanduser())

        explicit = {k: v for k, v in overrides.items() if v is not None}
        if explicit:
            config = replace(config, **explicit)
        return config.validate()
