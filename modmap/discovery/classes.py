"""Class discovery - scan source trees and derive autoload mappings.

Convention over configuration: a file's namespace is its package path
relative to the scanned directory, prefixed with an optional base namespace.
Class declarations are found by pattern matching over the source text,
without importing anything.

Example layout scanned with base namespace ``App``::

    src/app/
        models/user.py      class User       -> App.models.user
        services/mail.py    class Mailer     -> App.services.mail
"""

import logging
import os
import re
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import TYPE_CHECKING

from ..paths import NAMESPACE_SEPARATOR
from ..paths import normalize_namespace
from ..paths import normalize_path

if TYPE_CHECKING:
    from ..autoloader import AutoloaderManager

logger = logging.getLogger(__name__)

# Top-level class statements only; nested classes are not addressable by file
CLASS_PATTERN = re.compile(r"^class\s+([A-Za-z_][A-Za-z0-9_]*)\s*[:(]", re.MULTILINE)

DEFAULT_EXTENSIONS = [".py"]

DEFAULT_EXCLUDE_DIRECTORIES = [
    "__pycache__",
    ".git",
    ".venv",
    "venv",
    "node_modules",
    "build",
    "dist",
    "tests",
]


@dataclass
class ClassInfo:
    """Classes declared in one source file."""

    namespace: str
    identifier: str
    file: Path
    all_classes: list[str] = field(default_factory=list)

    @property
    def class_name(self) -> str:
        """First declared class (the common one-class-per-file case)."""
        return self.all_classes[0]

    @property
    def qualified_classes(self) -> list[str]:
        return [f"{self.identifier}.{name}" for name in self.all_classes]


class ClassDiscovery:
    """Discovers classes, namespaces and modules in directory trees."""

    def __init__(self) -> None:
        self.file_extensions = list(DEFAULT_EXTENSIONS)
        self.exclude_directories = list(DEFAULT_EXCLUDE_DIRECTORIES)
        self._discovered: list[ClassInfo] = []

    # ----- Scanning -----

    def discover_classes(
        self,
        directory: str | Path,
        base_namespace: str = "",
        recursive: bool = True,
        extensions: Iterable[str] | None = None,
        exclude_directories: Iterable[str] | None = None,
    ) -> list[ClassInfo]:
        """Find every source file declaring at least one top-level class.

        Args:
            directory: Directory to scan
            base_namespace: Namespace of the directory itself
            recursive: Descend into subdirectories
            extensions: File suffixes to scan (default: instance setting)
            exclude_directories: Extra directory names to skip, added to the
                instance setting. Entries containing ``/`` match path fragments.

        Returns:
            ClassInfo list sorted by file path (empty if directory is missing)
        """
        directory = Path(directory)
        if not directory.is_dir():
            return []

        suffixes = {
            ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions or self.file_extensions
        }
        excludes = self.exclude_directories + list(exclude_directories or [])

        pattern = "**/*" if recursive else "*"
        classes = []
        for file in sorted(directory.glob(pattern)):
            if not file.is_file() or file.suffix.lower() not in suffixes:
                continue

            relative = file.relative_to(directory)
            if self._should_exclude(relative, excludes):
                continue

            info = self.extract_class_info(file, directory, base_namespace)
            if info is not None:
                classes.append(info)

        logger.debug(f"[autoload:discovery] {len(classes)} class files in {directory}")
        self._discovered.extend(classes)
        return classes

    def extract_class_info(self, file: Path, directory: Path, base_namespace: str = "") -> ClassInfo | None:
        """Describe the classes declared in ``file``; None if it declares none."""
        try:
            source = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"[autoload:discovery] cannot read {file}: {e}")
            return None

        class_names = self.extract_class_names(source)
        if not class_names:
            return None

        relative = file.relative_to(directory)
        segments = [base_namespace.strip(NAMESPACE_SEPARATOR), *relative.parent.parts]
        namespace = NAMESPACE_SEPARATOR.join(part for part in segments if part)

        if file.stem == "__init__":
            identifier = namespace
        else:
            identifier = f"{namespace}{NAMESPACE_SEPARATOR}{file.stem}" if namespace else file.stem

        return ClassInfo(namespace=namespace, identifier=identifier, file=file, all_classes=class_names)

    @staticmethod
    def extract_class_names(source: str) -> list[str]:
        """Top-level class names in declaration order, without duplicates."""
        return list(dict.fromkeys(CLASS_PATTERN.findall(source)))

    # ----- Mappings -----

    def discover_namespaces(self, directory: str | Path, base_namespace: str = "", **options) -> dict[str, str]:
        """Map each namespace holding classes to its directory.

        Files without a namespace (top level of a scan without base
        namespace) produce no entry.
        """
        namespaces: dict[str, str] = {}
        for info in self.discover_classes(directory, base_namespace, **options):
            if not info.namespace:
                continue
            prefix = normalize_namespace(info.namespace)
            namespaces.setdefault(prefix, normalize_path(info.file.parent))
        return namespaces

    def build_class_map(self, directory: str | Path, base_namespace: str = "", **options) -> dict[str, str]:
        """Map each class-declaring file's identifier to the file."""
        return {
            info.identifier: normalize_path(info.file)
            for info in self.discover_classes(directory, base_namespace, **options)
            if info.identifier
        }

    # ----- Registration -----

    def auto_discover_and_register(
        self,
        autoloader: "AutoloaderManager",
        directories: Iterable[str | Path] | Mapping[str | Path, str],
        discover_sub_namespaces: bool = True,
        **options,
    ) -> dict[str, str]:
        """Discover namespaces and add them to ``autoloader``.

        Args:
            autoloader: Autoloader to populate
            directories: Directories to scan, or a mapping of directory ->
                base namespace
            discover_sub_namespaces: With a base namespace, also register
                every namespace found below it

        Returns:
            Registered prefix -> directory mappings
        """
        discovered: dict[str, str] = {}

        if isinstance(directories, Mapping):
            for directory, base_namespace in directories.items():
                namespaces = {normalize_namespace(base_namespace): normalize_path(directory)}
                if discover_sub_namespaces:
                    namespaces.update(self.discover_namespaces(directory, base_namespace, **options))
                discovered.update(self._register(autoloader, namespaces))
        else:
            for directory in directories:
                discovered.update(self._register(autoloader, self.discover_namespaces(directory, **options)))

        return discovered

    def discover_modules(
        self,
        autoloader: "AutoloaderManager",
        modules_directory: str | Path,
        base_namespace: str = "Modules",
        src_subdir: str = "src",
    ) -> dict[str, str]:
        """Register ``<base>.<module>.`` -> ``<modules>/<module>/<src_subdir>``.

        Module directories without the source subdirectory are skipped.
        """
        modules_directory = Path(modules_directory)
        if not modules_directory.is_dir():
            return {}

        namespaces = {}
        for module_dir in sorted(p for p in modules_directory.iterdir() if p.is_dir()):
            src_dir = module_dir / src_subdir
            if src_dir.is_dir():
                prefix = normalize_namespace(f"{base_namespace.strip(NAMESPACE_SEPARATOR)}.{module_dir.name}")
                namespaces[prefix] = normalize_path(src_dir)

        return self._register(autoloader, namespaces)

    # ----- Settings -----

    def set_file_extensions(self, extensions: Iterable[str]) -> "ClassDiscovery":
        self.file_extensions = list(extensions)
        return self

    def set_exclude_directories(self, exclude_directories: Iterable[str]) -> "ClassDiscovery":
        self.exclude_directories = list(exclude_directories)
        return self

    def get_discovered_classes(self) -> list[ClassInfo]:
        return list(self._discovered)

    def clear_cache(self) -> "ClassDiscovery":
        self._discovered.clear()
        return self

    # ----- Helpers -----

    @staticmethod
    def _register(autoloader: "AutoloaderManager", namespaces: dict[str, str]) -> dict[str, str]:
        for namespace, path in namespaces.items():
            autoloader.add_namespace(namespace, path)
        return namespaces

    @staticmethod
    def _should_exclude(relative: Path, excludes: list[str]) -> bool:
        directory_parts = relative.parent.parts
        relative_posix = relative.as_posix()
        for exclude in excludes:
            if "/" in exclude or os.sep in exclude:
                if exclude.replace(os.sep, "/").strip("/") in relative_posix:
                    return True
            elif exclude in directory_parts:
                return True
        return False
