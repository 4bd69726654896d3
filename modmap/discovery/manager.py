"""Configuration-driven discovery.

Reads the ``discovery`` section of an autoload configuration:

```yaml
discovery:
  enabled: true
  options:
    exclude_directories: [migrations]
  directories:
    app:
      path: src/app
      base_namespace: App
    modules:
      path: src/modules
      module_discovery: true
      base_namespace: Modules
  fallback_namespaces:
    Shared.: src/shared
```

Fallback namespaces are registered when discovery is disabled, and for
prefixes discovery did not produce otherwise.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any

from ..config import AutoloadConfig
from ..config import DiscoveryDirectory
from ..config import DiscoverySettings
from ..paths import normalize_namespace
from ..paths import resolve_against
from .classes import ClassDiscovery

if TYPE_CHECKING:
    from ..autoloader import AutoloaderManager

logger = logging.getLogger(__name__)


class ConfigurableDiscoveryManager:
    """Runs discovery for every directory named in configuration."""

    def __init__(self, discovery: ClassDiscovery | None = None, base_path: str | Path | None = None):
        self.discovery = discovery or ClassDiscovery()
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.config = AutoloadConfig()

    def load_config(self, config: dict[str, Any] | AutoloadConfig) -> ConfigurableDiscoveryManager:
        self.config = config if isinstance(config, AutoloadConfig) else AutoloadConfig(config)
        return self

    def load_config_from_file(self, config_path: str | Path) -> ConfigurableDiscoveryManager:
        """Load configuration from a file; missing files leave the config unchanged."""
        config_path = Path(config_path)
        if config_path.exists():
            self.config = AutoloadConfig().load_from_file(config_path)
        else:
            logger.debug(f"[autoload:discovery] no discovery config at {config_path}")
        return self

    @property
    def settings(self) -> DiscoverySettings:
        return self.config.validate().discovery

    def perform_auto_discovery(self, autoloader: AutoloaderManager) -> dict[str, str]:
        """Discover and register namespaces.

        Returns:
            Registered prefix -> directory mappings, fallbacks included
        """
        settings = self.settings
        if not settings.enabled:
            logger.debug("[autoload:discovery] discovery disabled, using fallbacks only")
            return self._load_fallback_namespaces(autoloader, settings, {})

        if settings.options.file_extensions is not None:
            self.discovery.set_file_extensions(settings.options.file_extensions)
        if settings.options.exclude_directories is not None:
            self.discovery.set_exclude_directories(settings.options.exclude_directories)

        discovered: dict[str, str] = {}
        for name, directory in settings.directories.items():
            found = self._process_directory(autoloader, directory)
            logger.debug(f"[autoload:discovery] {name}: {len(found)} namespaces")
            discovered.update(found)

        discovered.update(self._load_fallback_namespaces(autoloader, settings, discovered))
        return discovered

    def get_discovery_statistics(self) -> dict[str, Any]:
        settings = self.settings
        return {
            "discovery_enabled": settings.enabled,
            "configured_directories": len(settings.directories),
            "discovery_options": settings.options.model_dump(exclude_none=True),
            "fallback_namespaces": len(settings.fallback_namespaces),
            "discovered_classes": len(self.discovery.get_discovered_classes()),
        }

    def clear_cache(self) -> ConfigurableDiscoveryManager:
        self.discovery.clear_cache()
        return self

    def get_discovery_service(self) -> ClassDiscovery:
        return self.discovery

    def _process_directory(self, autoloader: AutoloaderManager, directory: DiscoveryDirectory) -> dict[str, str]:
        path = Path(resolve_against(directory.path, self.base_path))
        if not path.is_dir():
            logger.warning(f"[autoload:discovery] directory not found: {path}")
            return {}

        if directory.module_discovery:
            return self.discovery.discover_modules(
                autoloader,
                path,
                base_namespace=directory.base_namespace or "Modules",
                src_subdir=directory.src_subdir,
            )

        if directory.base_namespace:
            namespace = normalize_namespace(directory.base_namespace)
            autoloader.add_namespace(namespace, str(path))
            return {namespace: str(path)}

        # Extra excludes add to the instance-wide setting applied above
        namespaces = self.discovery.discover_namespaces(
            path,
            recursive=directory.recursive,
            exclude_directories=directory.exclude_directories,
        )
        for namespace, namespace_path in namespaces.items():
            autoloader.add_namespace(namespace, namespace_path)
        return namespaces

    def _load_fallback_namespaces(
        self,
        autoloader: AutoloaderManager,
        settings: DiscoverySettings,
        already_discovered: dict[str, str],
    ) -> dict[str, str]:
        loaded = {}
        for namespace, path in settings.fallback_namespaces.items():
            namespace = normalize_namespace(namespace)
            if namespace in already_discovered:
                continue
            full_path = resolve_against(path, self.base_path)
            if Path(full_path).is_dir():
                autoloader.add_namespace(namespace, full_path)
                loaded[namespace] = full_path
        return loaded
