# tests/test_config.py
"""Tests for PhenoattrConfig — Pydantic Settings single source of truth."""

from pathlib import Path

import pytest
from pydantic import ValidationError


class TestPhenoattrConfig:
    """Test PhenoattrConfig defaults and overrides."""

    def test_default_values(self, monkeypatch):
        """Config should have sensible defaults without any env vars."""
        from phenoattr.config import PhenoattrConfig

        for name in ("PHENOATTR_MAX_DEPTH", "PHENOATTR_MAX_COLLECTION_SIZE", "PHENOATTR_MAX_PAYLOAD_BYTES"):
            monkeypatch.delenv(name, raising=False)
        cfg = PhenoattrConfig()
        assert cfg.max_depth == 64
        assert cfg.max_collection_size == 10_000
        assert cfg.max_payload_bytes == 16 * 1024 * 1024

    def test_env_override(self, monkeypatch):
        """Environment variables with PHENOATTR_ prefix override defaults."""
        from phenoattr.config import PhenoattrConfig

        monkeypatch.setenv("PHENOATTR_MAX_DEPTH", "8")
        monkeypatch.setenv("PHENOATTR_MAX_COLLECTION_SIZE", "100")
        cfg = PhenoattrConfig()
        assert cfg.max_depth == 8
        assert cfg.max_collection_size == 100

    def test_invalid_depth_rejected(self, monkeypatch):
        """max_depth below one is rejected."""
        from phenoattr.config import PhenoattrConfig

        monkeypatch.setenv("PHENOATTR_MAX_DEPTH", "0")
        with pytest.raises(ValidationError):
            PhenoattrConfig()

    def test_home_dir_default(self, monkeypatch):
        """home_dir defaults to ~/.phenoattr."""
        from phenoattr.config import PhenoattrConfig

        monkeypatch.delenv("PHENOATTR_HOME_DIR", raising=False)
        cfg = PhenoattrConfig()
        assert cfg.home_dir == Path.home() / ".phenoattr"

    def test_derived_paths(self):
        """log_dir derives from home_dir."""
        from phenoattr.config import PhenoattrConfig

        cfg = PhenoattrConfig(home_dir=Path("/tmp/phenoattr-home"))
        assert cfg.log_dir == Path("/tmp/phenoattr-home/logs")

    def test_get_config_singleton(self):
        """get_config() returns the same instance."""
        from phenoattr.config import get_config

        c1 = get_config()
        c2 = get_config()
        assert c1 is c2


class TestCodecLimits:

    def test_from_config(self):
        """CodecLimits copies values from a given config."""
        from phenoattr.config import CodecLimits, PhenoattrConfig

        cfg = PhenoattrConfig(max_depth=5, max_collection_size=7, max_payload_bytes=9)
        limits = CodecLimits.from_config(cfg)
        assert (limits.max_depth, limits.max_collection_size, limits.max_payload_bytes) == (5, 7, 9)

    def test_from_global_config(self, monkeypatch):
        """CodecLimits defaults to the global config."""
        from phenoattr.config import CodecLimits, get_config

        monkeypatch.setenv("PHENOATTR_MAX_DEPTH", "12")
        get_config.cache_clear()
        try:
            assert CodecLimits.from_config().max_depth == 12
        finally:
            get_config.cache_clear()

    def test_frozen(self):
        """CodecLimits is immutable."""
        from phenoattr.config import CodecLimits

        limits = CodecLimits()
        with pytest.raises(ValidationError):
            limits.max_depth = 3

    def test_resolve_max_depth(self):
        """None resolves to the configured max_depth."""
        from phenoattr.config import get_config, resolve_max_depth

        assert resolve_max_depth(None) == get_config().max_depth
        assert resolve_max_depth(3) == 3
        with pytest.raises(ValueError):
            resolve_max_depth(0)
