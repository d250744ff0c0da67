"""
Config system - layered typed configuration.

Merge order (later overrides earlier):
1. Dataclass defaults
2. Config files (YAML or JSON)
3. .env file (MODKIT_* keys)
4. Environment variables (MODKIT_* keys)
5. Manual overrides
"""

from typing import Any, Dict, Optional, Sequence, Tuple, Type, get_type_hints, get_origin, get_args
from dataclasses import dataclass, field, fields, MISSING
from pathlib import Path
import os
import json

import yaml
from dotenv import dotenv_values

from .registry.manifest import DEFAULT_MANIFEST_NAMES


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class ModkitConfig:
    """Import session settings."""

    packages_dir: str = "mods"
    strict: bool = True
    workers: int = 1
    log_level: str = "INFO"
    manifest_names: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_MANIFEST_NAMES)

    def __post_init__(self):
        if self.workers < 1:
            raise ConfigError(f"Config field 'workers' must be >= 1, got {self.workers}")
        self.log_level = str(self.log_level).upper()
        self.manifest_names = tuple(self.manifest_names)
        if not self.manifest_names:
            raise ConfigError("Config field 'manifest_names' must not be empty")

    @property
    def packages_path(self) -> Path:
        return Path(self.packages_dir)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "MODKIT_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[Sequence[str]] = None,
        env_prefix: str = "MODKIT_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ModkitConfig:
        """
        Load configuration.

        Args:
            paths: Config file paths (.yaml, .yml or .json); missing files are skipped
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Validated ModkitConfig
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or []:
            loader._load_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(
                loader.config_data,
                {k: v for k, v in overrides.items() if v is not None},
            )

        return loader.build(ModkitConfig)

    def _load_file(self, path: Path) -> None:
        if not path.exists():
            return
        if path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
        elif path.suffix in (".yaml", ".yml"):
            with open(path) as f:
                data = yaml.safe_load(f)
        else:
            raise ConfigError(f"Unsupported config file: {path}")
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        self._merge_dict(self.config_data, data.get("modkit", data))

    def _load_env_file(self, path: str) -> None:
        """Load MODKIT_* keys from a .env file."""
        if not Path(path).exists():
            return
        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set(key, value)

    def _load_from_env(self) -> None:
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set(key, value)

    def _set(self, key: str, value: str) -> None:
        """MODKIT_PACKAGES_DIR -> packages_dir"""
        name = key[len(self.env_prefix):].lower()
        self.config_data[name] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict) -> None:
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def build(self, config_class: Type) -> Any:
        """Instantiate a dataclass config from the merged data, type-checked."""
        hints = get_type_hints(config_class)
        kwargs = {}

        for field_info in fields(config_class):
            name = field_info.name
            if name in self.config_data:
                value = self._coerce(self.config_data[name], hints[name])
                if not self._check_type(value, hints[name]):
                    raise ConfigError(
                        f"Config field '{name}' expected {hints[name]}, "
                        f"got {type(value).__name__}"
                    )
                kwargs[name] = value
            elif field_info.default is MISSING and field_info.default_factory is MISSING:
                raise ConfigError(f"Required config field '{name}' not provided")

        return config_class(**kwargs)

    def _coerce(self, value: Any, expected_type: Any) -> Any:
        # Env values are parsed eagerly: "1" becomes an int, "1.0" a float.
        if expected_type is str and isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if expected_type is bool and value in (0, 1) and not isinstance(value, bool):
            return bool(value)
        if get_origin(expected_type) is tuple and isinstance(value, list):
            return tuple(value)
        if get_origin(expected_type) is tuple and isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        """Basic type checking."""
        origin = get_origin(expected_type)
        if origin is tuple:
            args = get_args(expected_type)
            return isinstance(value, tuple) and all(isinstance(v, args[0]) for v in value)
        if origin:
            return isinstance(value, origin)
        if expected_type is int and isinstance(value, bool):
            return False
        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True
