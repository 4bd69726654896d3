"""Scope-aware autoload settings files.

Scope priority (most specific wins):
1. local (.modmap/autoload.local.yaml) - machine-specific, not committed
2. project (.modmap/autoload.yaml) - committed, team-shared
3. global (~/.modmap/autoload.yaml) - user defaults

Relative paths in every scope resolve against the project root, not
against the ``.modmap`` directory holding the file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import Literal

import yaml

from .config import AutoloadConfig
from .config import ConfigError
from .config import read_config_file
from .paths import get_global_settings_path
from .paths import get_local_settings_path
from .paths import get_project_settings_path

Scope = Literal["local", "project", "global"]


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    root: Path
    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls, root: Path | None = None) -> SettingsPaths:
        root = root or Path.cwd()
        return cls(
            root=root,
            global_settings=get_global_settings_path(),
            project_settings=get_project_settings_path(root),
            local_settings=get_local_settings_path(root),
        )


class ScopedSettings:
    """Reads merged autoload settings and edits a single scope.

    Usage:
        settings = ScopedSettings()
        config = settings.load_config()
        settings.add_namespace("App.", "src/app", scope="project")
    """

    def __init__(self, paths: SettingsPaths | None = None) -> None:
        self.paths = paths or SettingsPaths.default()

    def load_config(self) -> AutoloadConfig:
        """Merge every existing scope file, lowest precedence first.

        Raises:
            ConfigError: A settings file exists but cannot be parsed
        """
        config = AutoloadConfig()
        for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]:
            if path.exists():
                config.load_from_file(path)
        config.base_path = self.paths.root
        return config

    def existing_files(self) -> list[Path]:
        return [
            path
            for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]
            if path.exists()
        ]

    # ----- Scope edits -----

    def add_namespace(self, namespace: str, path: str, scope: Scope = "project") -> Path:
        """Append ``path`` to ``namespace`` in one scope file (no duplicates)."""
        settings = self._read_scope(scope)
        namespaces = settings.setdefault("autoload", {}).setdefault("namespaces", {})

        existing = namespaces.get(namespace)
        if existing is None:
            namespaces[namespace] = path
        else:
            paths = [existing] if isinstance(existing, str) else list(existing)
            if path not in paths:
                paths.append(path)
            namespaces[namespace] = paths[0] if len(paths) == 1 else paths

        return self._write_scope(scope, settings)

    def add_classes(self, classes: dict[str, str], scope: Scope = "project") -> Path:
        settings = self._read_scope(scope)
        settings.setdefault("autoload", {}).setdefault("classmap", {}).update(classes)
        return self._write_scope(scope, settings)

    def set_auto_register(self, enabled: bool, scope: Scope = "project") -> Path:
        settings = self._read_scope(scope)
        settings["auto_register"] = enabled
        return self._write_scope(scope, settings)

    # ----- Scope utilities -----

    def _get_scope_path(self, scope: Scope) -> Path:
        return {
            "local": self.paths.local_settings,
            "project": self.paths.project_settings,
            "global": self.paths.global_settings,
        }[scope]

    def _read_scope(self, scope: Scope) -> dict[str, Any]:
        path = self._get_scope_path(scope)
        if not path.exists():
            return {}
        return read_config_file(path)

    def _write_scope(self, scope: Scope, settings: dict[str, Any]) -> Path:
        path = self._get_scope_path(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Cannot write settings to {path}: {e}") from e
        return path
