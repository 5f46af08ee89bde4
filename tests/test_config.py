"""
Tests for fsv/config.py configuration management.

Tests the hierarchical configuration system with sensible defaults,
including file loading, environment variables, and path expansion.
"""
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import tomli

from fsv.config import ConfigError, FsvConfig, get_config, init_config
from fsv.registry import PredicateRegistry


class TestFsvConfigDefaults:
    """Test default configuration values."""

    def test_default_output_format_is_plain(self):
        """Default output format should be 'plain'."""
        assert FsvConfig().output_format == "plain"

    def test_default_color_output_is_true(self):
        """Color output should be enabled by default."""
        assert FsvConfig().color_output is True

    def test_default_log_level_is_warning(self):
        """Library logging stays quiet by default."""
        assert FsvConfig().log_level == "WARNING"

    def test_default_predicates_file_is_none(self):
        assert FsvConfig().predicates_file is None

    def test_default_max_display(self):
        assert FsvConfig().max_display == 50


class TestFsvConfigLoading:
    """Test loading from files and environment."""

    def test_load_without_files(self, isolated_env):
        """With no files, defaults apply."""
        config = FsvConfig.load()
        assert config.output_format == "plain"

    def test_load_local_file(self, isolated_env):
        """./fsv.toml is picked up from the working directory."""
        Path("fsv.toml").write_text('output_format = "json"\nmax_display = 5\n')
        config = FsvConfig.load()
        assert config.output_format == "json"
        assert config.max_display == 5

    def test_load_user_file(self, isolated_env):
        """~/.config/fsv/config.toml is read first."""
        user = Path.home() / ".config" / "fsv"
        user.mkdir(parents=True)
        (user / "config.toml").write_text('output_format = "table"\n')
        assert FsvConfig.load().output_format == "table"

    def test_local_overrides_user(self, isolated_env):
        user = Path.home() / ".config" / "fsv"
        user.mkdir(parents=True)
        (user / "config.toml").write_text('output_format = "table"\n')
        Path("fsv.toml").write_text('output_format = "json"\n')
        assert FsvConfig.load().output_format == "json"

    def test_explicit_file(self, isolated_env, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('default_predicate = "vowels"\n')
        assert FsvConfig.load(path).default_predicate == "vowels"

    def test_unknown_keys_ignored(self, isolated_env, caplog):
        """Unknown keys are skipped with a warning naming the file."""
        Path("fsv.toml").write_text('not_a_setting = 1\n')
        with caplog.at_level(logging.WARNING, logger="fsv.config"):
            config = FsvConfig.load()
        assert not hasattr(config, "not_a_setting")
        assert "not_a_setting" in caplog.text

    def test_only_fsv_toml_is_read_locally(self, isolated_env):
        """Other dotfiles in the working directory are not configuration."""
        Path(".fsvrc").write_text('output_format = "json"\n')
        assert FsvConfig.load().output_format == "plain"

    def test_missing_explicit_file(self, isolated_env, tmp_path):
        with pytest.raises(FileNotFoundError):
            FsvConfig.load(tmp_path / "missing.toml")

    def test_env_vars(self, isolated_env):
        """FSV_* variables override files and are coerced."""
        Path("fsv.toml").write_text('output_format = "json"\n')
        with patch.dict(os.environ, {
            "FSV_OUTPUT_FORMAT": "table",
            "FSV_COLOR_OUTPUT": "false",
            "FSV_MAX_DISPLAY": "7",
        }):
            config = FsvConfig.load()
        assert config.output_format == "table"
        assert config.color_output is False
        assert config.max_display == 7

    def test_paths_expanded(self, isolated_env):
        with patch.dict(os.environ, {"FSV_PREDICATES_FILE": "~/preds.yaml"}):
            config = FsvConfig.load()
        assert config.predicates_file == str(Path.home() / "preds.yaml")
        assert not config.predicates_dir.startswith("~")


class TestFsvConfigSave:
    """Test saving and setting values."""

    def test_save_round_trip(self, isolated_env, tmp_path):
        path = tmp_path / "out" / "config.toml"
        config = FsvConfig(output_format="json")
        config.save(path)

        with open(path, "rb") as f:
            data = tomli.load(f)
        assert data["output_format"] == "json"
        assert "predicates_file" not in data

    def test_save_default_location(self, isolated_env):
        FsvConfig().save()
        assert (Path.home() / ".config" / "fsv" / "config.toml").exists()

    def test_set_value_coerces(self):
        config = FsvConfig()
        config.set_value("color_output", "no")
        config.set_value("max_display", "3")
        config.set_value("output_format", "table")
        assert config.color_output is False
        assert config.max_display == 3
        assert config.output_format == "table"

    def test_set_value_unknown_key(self):
        with pytest.raises(KeyError):
            FsvConfig().set_value("nope", "1")


class TestGlobalConfig:
    """Test the cached global instance."""

    def test_get_config_caches(self, isolated_env):
        assert get_config() is get_config()

    def test_get_config_reload(self, isolated_env):
        first = get_config()
        assert get_config(reload=True) is not first

    def test_init_config_overrides(self, isolated_env):
        config = init_config(output_format="json", predicates_file=None)
        assert config.output_format == "json"
        assert config.predicates_file is None

    def test_init_config_with_file(self, isolated_env, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('output_format = "table"\n')
        assert init_config(config_file=path).output_format == "table"


class TestFsvConfigValidation:
    """Test that bad values are rejected with their source."""

    def test_invalid_output_format(self):
        with pytest.raises(ConfigError):
            FsvConfig(output_format="xml")

    def test_invalid_output_format_in_file(self, isolated_env):
        Path("fsv.toml").write_text('output_format = "xml"\n')
        with pytest.raises(ConfigError, match="output_format"):
            FsvConfig.load()

    def test_invalid_env_value_names_source(self, isolated_env):
        with patch.dict(os.environ, {"FSV_MAX_DISPLAY": "lots"}):
            with pytest.raises(ConfigError, match="environment"):
                FsvConfig.load()

    def test_invalid_bool(self, isolated_env):
        with patch.dict(os.environ, {"FSV_COLOR_OUTPUT": "maybe"}):
            with pytest.raises(ConfigError, match="color_output"):
                FsvConfig.load()

    def test_wrong_toml_type(self, isolated_env):
        Path("fsv.toml").write_text('output_format = 3\n')
        with pytest.raises(ConfigError):
            FsvConfig.load()

    def test_malformed_toml(self, isolated_env):
        Path("fsv.toml").write_text('output_format = \n')
        with pytest.raises(ConfigError, match="fsv.toml"):
            FsvConfig.load()

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError):
            FsvConfig(log_level="LOUD")

    def test_max_display_must_be_positive(self):
        with pytest.raises(ConfigError):
            FsvConfig(max_display=0)

    def test_set_value_validates(self):
        config = FsvConfig()
        with pytest.raises(ConfigError):
            config.set_value("output_format", "xml")

    def test_init_config_validates_overrides(self, isolated_env):
        with pytest.raises(ConfigError):
            init_config(output_format="xml")

    def test_default_predicate_known(self):
        config = FsvConfig(default_predicate="vowels")
        config.check_default_predicate(PredicateRegistry())

    def test_default_predicate_literal_forms(self):
        registry = PredicateRegistry()
        FsvConfig(default_predicate="keep:ab").check_default_predicate(registry)
        FsvConfig(default_predicate="drop:ab").check_default_predicate(registry)

    def test_default_predicate_unknown(self):
        config = FsvConfig(default_predicate="nope")
        with pytest.raises(ConfigError, match="nope"):
            config.check_default_predicate(PredicateRegistry())
