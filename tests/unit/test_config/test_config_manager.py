"""
Unit tests for the configuration singleton.
"""

import tomllib

import pytest
import toml

from buildpilot.config import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)
from buildpilot.models import RunnerKind
from buildpilot.validation import ValidationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "build.toml"
    with open(path, "w") as f:
        toml.dump({
            "build": {"incremental_compilation": True},
            "testing": {"main_module": "intellij.foo", "runner": "task_runner"},
        }, f)
    return path


@pytest.mark.unit
class TestConfigManager:
    """Test cases for configuration loading and caching."""

    def test_load_and_cache(self, config_file):
        set_config_path(config_file)

        config = get_config()

        assert config.build.incremental_compilation is True
        assert config.testing.main_module == "intellij.foo"
        assert config.testing.runner is RunnerKind.TASK_RUNNER
        assert get_config() is config
        assert is_config_loaded()
        assert get_config_info() == {"config_loaded": True, "config_path": str(config_file),
                                     "runner": "task_runner"}

    def test_clear_cache_reloads(self, config_file):
        set_config_path(config_file)
        first = get_config()

        clear_config_cache()

        assert not is_config_loaded()
        assert get_config() is not first

    def test_default_file_missing_uses_defaults(self, tmp_path, monkeypatch):
        """Without a build.toml in the working directory the defaults apply."""
        monkeypatch.chdir(tmp_path)

        config = get_config()

        assert config.testing.main_module is None
        assert config.build.toolchain_version == 11

    def test_explicit_file_missing(self, tmp_path):
        set_config_path(tmp_path / "custom.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "build.toml"
        path.write_text("[build\n")
        set_config_path(path)

        with pytest.raises(tomllib.TOMLDecodeError):
            get_config()

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "build.toml"
        path.write_text('[testing]\nrunner = "docker"\n')
        set_config_path(path)

        with pytest.raises(ValidationError):
            get_config()
