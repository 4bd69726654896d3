"""Autoload configuration loading.

Configuration comes from JSON, YAML, TOML or Python files (a ``.py`` file
must define a ``CONFIG`` dict) and has three autoload sections that feed the
autoloader, plus discovery and development settings:

```yaml
auto_register: true
autoload:
  namespaces:
    App.: src/app
    Vendor.Package.: [vendor/package/src, vendor/package/lib]
  classmap:
    Legacy.Helper: legacy/helper.py
  files:
    - helpers/functions.py
```

Relative paths are resolved against the directory of the last loaded file,
or an explicit base path passed to :meth:`AutoloadConfig.apply`.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import runpy
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from .paths import resolve_against

if TYPE_CHECKING:
    from .autoloader import AutoloaderManager

logger = logging.getLogger(__name__)

AUTO_REGISTER_ENV = "MODMAP_AUTO_REGISTER"

SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml", ".toml", ".py")


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ----- Schema -----


class AutoloadSection(BaseModel):
    """The three mapping sections fed into the autoloader."""

    namespaces: dict[str, str | list[str]] = Field(
        default_factory=dict, description="Namespace prefix -> directory or list of directories"
    )
    classmap: dict[str, str] = Field(default_factory=dict, description="Identifier -> file")
    files: list[str] = Field(default_factory=list, description="Files included once at registration")


class DiscoveryDirectory(BaseModel):
    """A directory scanned by the discovery manager."""

    path: str = Field(..., description="Directory, relative to the base path")
    base_namespace: str | None = Field(None, description="Namespace mapped to the directory")
    recursive: bool = Field(default=True)
    exclude_directories: list[str] = Field(default_factory=list)
    module_discovery: bool = Field(default=False, description="Treat subdirectories as modules")
    src_subdir: str = Field(default="src", description="Source directory inside each module")


class DiscoveryOptions(BaseModel):
    file_extensions: list[str] | None = None
    exclude_directories: list[str] | None = None


class DiscoverySettings(BaseModel):
    enabled: bool = Field(default=True)
    options: DiscoveryOptions = Field(default_factory=DiscoveryOptions)
    directories: dict[str, DiscoveryDirectory] = Field(default_factory=dict)
    fallback_namespaces: dict[str, str] = Field(default_factory=dict)


class DevelopmentSettings(BaseModel):
    cache_enabled: bool = Field(default=False)
    cache_path: str = Field(default=".modmap/cache")
    debug: bool = Field(default=False)


class AutoloadSettings(BaseModel):
    """Complete, validated configuration."""

    auto_register: bool = Field(default_factory=lambda: _env_flag(AUTO_REGISTER_ENV))
    longest_prefix_first: bool = Field(default=False, description="Match most specific prefix first")
    autoload: AutoloadSection = Field(default_factory=AutoloadSection)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    development: DevelopmentSettings = Field(default_factory=DevelopmentSettings)


# ----- Loading -----


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts: dicts merge, lists concatenate, overlay wins otherwise."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        elif key in result and isinstance(result[key], list) and isinstance(value, list):
            result[key] = result[key] + value
        else:
            result[key] = value
    return result


def read_config_file(config_path: Path) -> dict[str, Any]:
    """Parse a configuration file into a dict.

    Raises:
        ConfigError: File missing or unreadable, unsupported format,
            malformed content, or content that is not a mapping
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ConfigError(f"Unsupported configuration file format: {suffix or config_path.name}")

    try:
        if suffix == ".json":
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        elif suffix in (".yaml", ".yml"):
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        else:
            data = _run_python_config(config_path)
    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError, UnicodeDecodeError, OSError) as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping: {config_path}")
    return data


def _run_python_config(config_path: Path) -> Any:
    """Execute a Python configuration file and return its ``CONFIG``."""
    try:
        namespace = runpy.run_path(str(config_path))
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    if "CONFIG" not in namespace:
        raise ConfigError(f"Python configuration file must define a CONFIG dict: {config_path}")
    return namespace["CONFIG"]


class AutoloadConfig:
    """Configuration holder with dotted-key access.

    Usage:
        config = AutoloadConfig().load_from_file(Path("autoload.yaml"))
        autoloader = config.apply(AutoloaderManager())
    """

    def __init__(self, config: dict[str, Any] | None = None, base_path: Path | None = None):
        self._config: dict[str, Any] = copy.deepcopy(config) if config else {}
        self.base_path = base_path
        self.sources: list[Path] = []

    def load_from_file(self, config_path: str | Path) -> AutoloadConfig:
        """Merge a configuration file into this configuration."""
        config_path = Path(config_path)
        data = read_config_file(config_path)
        self.merge(data)
        self.sources.append(config_path)
        self.base_path = config_path.resolve().parent
        logger.debug(f"[autoload:config] loaded {config_path}")
        return self

    def set(self, key: str, value: Any) -> AutoloadConfig:
        current = self._config
        *parents, last = key.split(".")
        for part in parents:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[last] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        current: Any = self._config
        for part in key.split("."):
            if not isinstance(current, dict) or current.get(part) is None:
                return default
            current = current[part]
        return current

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def all(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def merge(self, config: dict[str, Any]) -> AutoloadConfig:
        self._config = deep_merge(self._config, config)
        return self

    # ----- Sections -----

    def get_namespaces(self) -> dict[str, str | list[str]]:
        return self.get("autoload.namespaces", {})

    def get_classmap(self) -> dict[str, str]:
        return self.get("autoload.classmap", {})

    def get_files(self) -> list[str]:
        return self.get("autoload.files", [])

    @property
    def auto_register(self) -> bool:
        return self.validate().auto_register

    def validate(self) -> AutoloadSettings:
        """Validate against the settings schema.

        Raises:
            ConfigError: Configuration does not match the schema
        """
        try:
            return AutoloadSettings.model_validate(self._config)
        except ValidationError as e:
            raise ConfigError(f"Invalid autoload configuration:\n{e}") from e

    def apply(
        self,
        autoloader: AutoloaderManager,
        base_path: str | Path | None = None,
        register: bool = True,
    ) -> AutoloaderManager:
        """Feed namespaces, class map and files into ``autoloader``.

        Registers the autoloader when ``auto_register`` is set, unless
        ``register`` is False (callers that only inspect mappings).
        """
        settings = self.validate()
        base = base_path if base_path is not None else self.base_path

        namespaces: dict[str, list[str]] = {}
        for namespace, paths in settings.autoload.namespaces.items():
            paths = [paths] if isinstance(paths, str) else paths
            namespaces[namespace] = [resolve_against(path, base) for path in paths]

        autoloader.add_namespaces(namespaces)
        autoloader.add_classes(
            {class_name: resolve_against(path, base) for class_name, path in settings.autoload.classmap.items()}
        )
        autoloader.add_files(resolve_against(path, base) for path in settings.autoload.files)

        if settings.longest_prefix_first and hasattr(autoloader.get_namespace_map(), "longest_prefix_first"):
            autoloader.get_namespace_map().longest_prefix_first = True

        logger.debug(
            f"[autoload:config] applied {len(namespaces)} namespaces, "
            f"{len(settings.autoload.classmap)} classes, {len(settings.autoload.files)} files"
        )

        if register and settings.auto_register:
            autoloader.register()
        return autoloader

    def __repr__(self) -> str:
        sources = ", ".join(str(s) for s in self.sources) or "in-memory"
        return f"AutoloadConfig({sources})"
