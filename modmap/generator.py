"""Autoload snapshot generation.

Collects namespace mappings from module manifests (and optionally from an
autoload configuration) and writes them into a standalone Python module.
Importing the snapshot builds an autoloader with those mappings and
registers it, so entry points can load every mapping with one import.

A module is a subdirectory of the modules path whose ``pyproject.toml``
has a ``[tool.modmap]`` table:

```toml
[tool.modmap]
namespaces = { "Billing." = "src" }
files = ["bootstrap.py"]
```

Paths in a manifest are relative to the module directory.
"""

import logging
import os
import pprint
import tomllib
from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime
from pathlib import Path
from string import Template

from .autoloader import AutoloaderManager
from .config import AutoloadConfig
from .discovery.classes import ClassDiscovery
from .discovery.manager import ConfigurableDiscoveryManager
from .import_hook import MetaPathHost
from .paths import get_snapshot_path
from .paths import normalize_namespace
from .paths import resolve_against

logger = logging.getLogger(__name__)

SNAPSHOT_TEMPLATE = Template('''\
"""Autoload snapshot generated by modmap on $generated_at.

Regenerate with `modmap generate`; manual edits are overwritten.
"""

from modmap.autoloader import AutoloaderManager

NAMESPACES = $namespaces

CLASSMAP = $classmap

FILES = $files

autoloader = AutoloaderManager()
autoloader.add_namespaces(NAMESPACES)
autoloader.add_classes(CLASSMAP)
autoloader.add_files(FILES)
autoloader.register()
''')


class GeneratorError(Exception):
    """Raised when a snapshot cannot be generated."""


@dataclass
class ModuleManifest:
    """Autoload settings declared by one module."""

    name: str
    path: Path
    manifest: Path
    namespaces: dict[str, list[str]] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)


class AutoloadGenerator:
    """Writes autoload snapshots."""

    def __init__(
        self,
        base_path: str | Path | None = None,
        output_path: str | Path | None = None,
        modules_path: str | Path | None = None,
        discovery: ClassDiscovery | None = None,
    ):
        """Initialize generator.

        Args:
            base_path: Project root (default: cwd)
            output_path: Snapshot file (default: .modmap/cache/autoload_snapshot.py)
            modules_path: Directory holding modules (default: <base>/src/modules)
            discovery: Class discovery used for optimized class maps
        """
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.output_path = Path(output_path) if output_path is not None else get_snapshot_path(self.base_path)
        self.modules_path = Path(modules_path) if modules_path is not None else self.base_path / "src" / "modules"
        self.discovery = discovery or ClassDiscovery()

    def discover_modules(self) -> list[ModuleManifest]:
        """Find modules with a ``[tool.modmap]`` manifest, sorted by name."""
        if not self.modules_path.is_dir():
            return []

        modules = []
        for module_dir in sorted(p for p in self.modules_path.iterdir() if p.is_dir()):
            manifest = module_dir / "pyproject.toml"
            if not manifest.exists():
                continue

            try:
                with open(manifest, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise GeneratorError(f"Invalid manifest {manifest}: {e}") from e

            table = data.get("tool", {}).get("modmap")
            if not table or "namespaces" not in table:
                logger.debug(f"[autoload:generate] {module_dir.name} has no [tool.modmap] namespaces")
                continue

            namespaces = {}
            for namespace, paths in table["namespaces"].items():
                paths = [paths] if isinstance(paths, str) else paths
                namespaces[normalize_namespace(namespace)] = [resolve_against(p, module_dir) for p in paths]

            modules.append(
                ModuleManifest(
                    name=module_dir.name,
                    path=module_dir,
                    manifest=manifest,
                    namespaces=namespaces,
                    files=[resolve_against(p, module_dir) for p in table.get("files", [])],
                )
            )

        return modules

    def collect_mappings(
        self, config: AutoloadConfig | None = None, optimize: bool = False
    ) -> tuple[dict[str, list[str]], dict[str, str], list[str]]:
        """Gather namespaces, class map and files for the snapshot.

        Args:
            config: Autoload configuration (and the namespaces its discovery
                section finds) merged ahead of module manifests
            optimize: Also scan every namespace directory into the class map

        Returns:
            Tuple of (namespaces, classmap, files)
        """
        namespaces: dict[str, list[str]] = {}
        classmap: dict[str, str] = {}
        files: list[str] = []

        def add_paths(namespace: str, paths: list[str]) -> None:
            registered = namespaces.setdefault(normalize_namespace(namespace), [])
            registered.extend(p for p in paths if p not in registered)

        if config is not None:
            settings = config.validate()
            base = config.base_path or self.base_path
            for namespace, paths in settings.autoload.namespaces.items():
                paths = [paths] if isinstance(paths, str) else paths
                add_paths(namespace, [resolve_against(p, base) for p in paths])
            classmap.update({k: resolve_against(v, base) for k, v in settings.autoload.classmap.items()})
            files.extend(resolve_against(p, base) for p in settings.autoload.files)

            # Scratch autoloader, never registered
            scratch = AutoloaderManager(host=MetaPathHost(meta_path=[]))
            ConfigurableDiscoveryManager(self.discovery, base).load_config(config).perform_auto_discovery(scratch)
            for namespace, paths in scratch.get_namespaces().items():
                add_paths(namespace, paths)

        for module in self.discover_modules():
            for namespace, paths in module.namespaces.items():
                add_paths(namespace, paths)
            files.extend(module.files)

        if optimize:
            for namespace, paths in namespaces.items():
                for path in paths:
                    discovered = self.discovery.build_class_map(path, namespace)
                    for identifier, file in discovered.items():
                        classmap.setdefault(identifier, file)

        return namespaces, classmap, files

    def render(self, namespaces: dict[str, list[str]], classmap: dict[str, str], files: list[str]) -> str:
        return SNAPSHOT_TEMPLATE.substitute(
            generated_at=datetime.now(UTC).isoformat(timespec="seconds"),
            namespaces=pprint.pformat(namespaces, indent=4, sort_dicts=False),
            classmap=pprint.pformat(classmap, indent=4, sort_dicts=False),
            files=pprint.pformat(files, indent=4),
        )

    def generate(self, config: AutoloadConfig | None = None, optimize: bool = False) -> Path:
        """Write the snapshot and return its path.

        Raises:
            GeneratorError: Manifest unreadable or output not writable
        """
        namespaces, classmap, files = self.collect_mappings(config, optimize)
        content = self.render(namespaces, classmap, files)

        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.output_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise GeneratorError(f"Cannot write snapshot to {self.output_path}: {e}") from e

        logger.info(
            f"[autoload:generate] wrote {self.output_path} "
            f"({len(namespaces)} namespaces, {len(classmap)} classes, {len(files)} files)"
        )
        return self.output_path

    def is_up_to_date(self, config: AutoloadConfig | None = None) -> bool:
        """True when the snapshot is newer than every manifest and config file."""
        if not self.output_path.exists():
            return False

        generated_at = os.path.getmtime(self.output_path)
        inputs = [module.manifest for module in self.discover_modules()]
        if config is not None:
            inputs.extend(config.sources)

        return all(os.path.getmtime(path) <= generated_at for path in inputs if path.exists())

    def get_output_path(self) -> Path:
        return self.output_path

    def __repr__(self) -> str:
        return f"AutoloadGenerator({self.output_path})"
