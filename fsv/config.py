"""
Configuration for the fsv command line.

Settings come from the user file (~/.config/fsv/config.toml), then a
project file (./fsv.toml), then an explicit --config file, then FSV_*
environment variables, then command line options. Later sources win.
Every source goes through the same coercion and validation, so a bad
value fails with the name of the file or variable it came from.
"""
import logging
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from dataclasses import dataclass, field, asdict, fields

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("plain", "json", "table")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_BOOL_FIELDS = {"color_output"}
_INT_FIELDS = {"max_display"}
_PATH_FIELDS = {"predicates_file", "predicates_dir"}

ENV_PREFIX = "FSV_"


class ConfigError(ValueError):
    """A configuration value is missing, malformed or out of range."""


def user_config_path() -> Path:
    return Path.home() / ".config" / "fsv" / "config.toml"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _expand(value: str) -> str:
    return os.path.expanduser(os.path.expandvars(value))


@dataclass
class FsvConfig:
    """Effective settings for one fsv invocation."""

    # Output
    output_format: str = field(default="plain")
    color_output: bool = field(default=True)
    max_display: int = field(default=50)  # rows shown by table output

    # Predicates
    predicates_file: Optional[str] = field(default=None)
    predicates_dir: str = field(default="~/.config/fsv/predicates")
    default_predicate: Optional[str] = field(default=None)

    log_level: str = field(default="WARNING")

    def __post_init__(self):
        for name in _PATH_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, _expand(value))
        self.validate()

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "FsvConfig":
        """
        Build the configuration from files and environment.

        Args:
            config_file: extra file applied after the user and project files

        Raises:
            ConfigError: if a value cannot be coerced or is out of range
            FileNotFoundError: if config_file is given but does not exist
        """
        config = cls()

        sources = [user_config_path(), Path.cwd() / "fsv.toml"]
        for path in sources:
            if path.exists():
                config.update(_read_toml(path), source=str(path))

        if config_file is not None:
            config.update(_read_toml(Path(config_file)), source=str(config_file))

        config.update(_env_overrides(), source="environment")
        config.validate()
        return config

    def update(self, values: Mapping[str, Any], source: str = "overrides"):
        """Apply values from one source, skipping keys fsv does not know."""
        known = {f.name for f in fields(self)}
        for key, value in values.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key '{key}' in {source}")
                continue
            try:
                setattr(self, key, _coerce(key, value))
            except (TypeError, ValueError) as e:
                raise ConfigError(f"{source}: invalid value for {key}: {e}") from e

    def validate(self):
        """Check values that coercion alone cannot."""
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got {self.output_format!r}"
            )
        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level: {self.log_level!r}")
        if self.max_display < 1:
            raise ConfigError(f"max_display must be at least 1, got {self.max_display}")

    def check_default_predicate(self, registry) -> None:
        """
        Fail early when default_predicate names nothing the registry knows.

        `keep:` and `drop:` forms are accepted as is.
        """
        name = self.default_predicate
        if not name or name.startswith(("keep:", "drop:")):
            return
        if not registry.has(name):
            raise ConfigError(
                f"default_predicate {name!r} is not defined; "
                f"known predicates: {', '.join(registry.list())}"
            )

    def set_value(self, key: str, value: str):
        """Set one field from its string form, as `fsv config set` does."""
        if key not in {f.name for f in fields(self)}:
            raise KeyError(f"Unknown config key: {key}")
        self.update({key: value}, source="command line")
        self.validate()

    def save(self, path: Optional[Path] = None):
        """Write the configuration as TOML (to the user file by default)."""
        path = path or user_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null; unset options are left out
        data = {key: value for key, value in asdict(self).items() if value is not None}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get_predicates_dir(self) -> Path:
        return Path(self.predicates_dir)


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e


def _env_overrides() -> Dict[str, str]:
    return {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in os.environ.items()
        if key.startswith(ENV_PREFIX)
    }


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw value (TOML or string) to the type the field holds."""
    if value is None:
        return None
    if key in _BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        return _parse_bool(str(value))
    if key in _INT_FIELDS:
        if isinstance(value, bool):
            raise TypeError("expected an integer, got a boolean")
        return int(value)
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value).__name__}")
    if key in _PATH_FIELDS:
        return _expand(value)
    return value


_config: Optional[FsvConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> FsvConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None or reload:
        _config = FsvConfig.load(config_file)
    return _config


def init_config(config_file: Optional[Path] = None, **overrides) -> FsvConfig:
    """
    Load the configuration once and apply command line overrides.

    Overrides that are None are treated as not given.
    """
    config = get_config(reload=True, config_file=config_file)
    config.update(
        {key: value for key, value in overrides.items() if value is not None},
        source="command line",
    )
    config.validate()
    return config
