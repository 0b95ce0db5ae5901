"""Tests for GrabConfig defaults, validation and environment overrides."""

from pathlib import Path

import pytest

from cvgrab import config as config_mod
from cvgrab.config import GrabConfig


class TestDefaults:
    def test_named_fields(self):
        config = GrabConfig()
        assert config.min_scale == 0.2
        assert config.max_scale == 2.0
        assert config.scale_step == 0.1
        assert config.default_size == (640, 480)
        assert config.record_fps == 25.0
        assert config.key_wait_ms == 40
        assert config.output_dir == Path(".")
        assert config.placeholder_path is None

    def test_defaults_validate(self):
        assert GrabConfig().validate() == GrabConfig()


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"scale_step": 0}, "scale_step"),
            ({"min_scale": 1.5}, "Scale bounds"),
            ({"max_scale": 0.5}, "Scale bounds"),
            ({"min_scale": 0.0}, "Scale bounds"),
            ({"default_width": 0}, "Default resolution"),
            ({"default_height": -1}, "Default resolution"),
            ({"record_fps": 0}, "record_fps"),
            ({"record_fourcc": "MJPEG"}, "record_fourcc"),
            ({"key_wait_ms": 0}, "key_wait_ms"),
        ],
    )
    def test_invalid_values_rejected(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            GrabConfig(**kwargs).validate()


class TestFromEnv:
    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv(config_mod.ENV_OUTPUT_DIR, str(tmp_path))
        monkeypatch.setenv(config_mod.ENV_PLACEHOLDER_IMAGE, str(tmp_path / "p.png"))
        config = GrabConfig.from_env()
        assert config.output_dir == tmp_path
        assert config.placeholder_path == tmp_path / "p.png"

    def test_explicit_overrides_win(self, monkeypatch, tmp_path):
        monkeypatch.setenv(config_mod.ENV_OUTPUT_DIR, str(tmp_path / "env"))
        config = GrabConfig.from_env(output_dir=tmp_path / "cli")
        assert config.output_dir == tmp_path / "cli"

    def test_none_overrides_ignored(self, monkeypatch):
        monkeypatch.delenv(config_mod.ENV_OUTPUT_DIR, raising=False)
        monkeypatch.delenv(config_mod.ENV_PLACEHOLDER_IMAGE, raising=False)
        config = GrabConfig.from_env(output_dir=None, placeholder_path=None)
        assert config == GrabConfig()

    def test_invalid_override_raises(self):
        with pytest.raises(ValueError):
            GrabConfig.from_env(max_scale=0.9)
