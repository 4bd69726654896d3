"""Autoloader: class map + namespace map + one-time file inclusion.

Resolution order (first match wins):
1. Class map - explicit identifier -> file entries
2. Namespace map - prefix -> directories, first existing candidate file

``load_class`` distinguishes three outcomes:
- ``True``: a file was found and included (now or earlier)
- ``False``: the class map names a file that does not exist (dangling entry)
- ``None``: nothing maps the identifier; another mechanism may resolve it

Lifecycle: the manager starts unregistered. ``register`` includes the
bootstrap files and installs the import hook; ``unregister`` removes the
hook. Both are idempotent and report hook failures as ``False``.
"""

import logging
import threading
from collections.abc import Iterable
from collections.abc import Mapping

from .class_map import ClassMap
from .import_hook import AutoloadFinder
from .import_hook import MetaPathHost
from .includer import FileIncluder
from .namespace_map import NamespaceMap
from .paths import normalize_path
from .protocols import ClassMapProtocol
from .protocols import HookHost
from .protocols import NamespaceMapProtocol

logger = logging.getLogger(__name__)


class AutoloaderManager:
    """Resolves identifiers to files and includes them once."""

    def __init__(
        self,
        class_map: ClassMapProtocol | None = None,
        namespace_map: NamespaceMapProtocol | None = None,
        includer: FileIncluder | None = None,
        host: HookHost | None = None,
    ):
        """Initialize autoloader.

        Args:
            class_map: Class map to consult first (default: empty ClassMap)
            namespace_map: Namespace map to consult second (default: empty NamespaceMap)
            includer: File includer (default: FileIncluder)
            host: Where the import hook is installed (default: sys.meta_path)
        """
        self._class_map = class_map if class_map is not None else ClassMap()
        self._namespace_map = namespace_map if namespace_map is not None else NamespaceMap()
        self.includer = includer if includer is not None else FileIncluder()
        self.host = host if host is not None else MetaPathHost()
        self.finder = AutoloadFinder(self)

        self._files: list[str] = []
        self._registered = False
        self._lock = threading.RLock()

    # ----- Lifecycle -----

    def register(self) -> bool:
        """Include bootstrap files and install the import hook."""
        with self._lock:
            if self._registered:
                return True

            self._include_files()

            if not self.host.install(self.finder):
                logger.warning("[autoload:register] hook installation failed")
                return False

            self._registered = True
            logger.debug(f"[autoload:register] registered on {self.host!r}")
            return True

    def unregister(self) -> bool:
        """Remove the import hook."""
        with self._lock:
            if not self._registered:
                return True

            if not self.host.uninstall(self.finder):
                logger.warning("[autoload:register] hook removal failed")
                return False

            self._registered = False
            logger.debug("[autoload:register] unregistered")
            return True

    def is_registered(self) -> bool:
        return self._registered

    # ----- Resolution -----

    def load_class(self, class_name: str) -> bool | None:
        """Resolve ``class_name`` and include its file.

        Returns:
            True if included, False for a dangling class map entry,
            None if nothing maps the identifier
        """
        with self._lock:
            file_path, source = self.resolve_with_source(class_name)

        if file_path is None:
            logger.debug(f"[autoload:resolve] {class_name} -> not found")
            return None

        included = self.includer.include(file_path, module_name=class_name)
        if not included:
            logger.warning(f"[autoload:resolve] {class_name} -> {file_path} ({source}) does not exist")
        return included

    __call__ = load_class

    def find_file(self, class_name: str) -> str | None:
        """Resolve without including. Class map paths are returned unchecked."""
        file_path, _source = self.resolve_with_source(class_name)
        return file_path

    def resolve_with_source(self, class_name: str) -> tuple[str | None, str]:
        """Resolve and report which map answered.

        Returns:
            Tuple of (file path or None, source) where source is one of
            ``classmap``, ``namespace``, ``none``
        """
        with self._lock:
            file_path = self._class_map.get_class_file(class_name)
            if file_path is not None:
                logger.debug(f"[autoload:resolve] {class_name} -> class map ({file_path})")
                return (file_path, "classmap")

            file_path = self._namespace_map.find_file(class_name)
            if file_path is not None:
                return (file_path, "namespace")

            return (None, "none")

    # ----- Mutators (delegate, chainable) -----

    def add_namespace(self, namespace: str, path: str, prepend: bool = False) -> "AutoloaderManager":
        with self._lock:
            self._namespace_map.add_namespace(namespace, path, prepend)
        return self

    def add_namespaces(self, namespaces: Mapping[str, str | Iterable[str]]) -> "AutoloaderManager":
        with self._lock:
            self._namespace_map.add_namespaces(namespaces)
        return self

    def add_class(self, class_name: str, file_path: str) -> "AutoloaderManager":
        with self._lock:
            self._class_map.add_class(class_name, file_path)
        return self

    def add_classes(self, classes: Mapping[str, str]) -> "AutoloaderManager":
        with self._lock:
            self._class_map.add_classes(classes)
        return self

    def add_file(self, file_path: str) -> "AutoloaderManager":
        """Add a file to include once when the autoloader registers."""
        with self._lock:
            self._files.append(normalize_path(file_path))
        return self

    def add_files(self, files: Iterable[str]) -> "AutoloaderManager":
        for file_path in files:
            self.add_file(file_path)
        return self

    # ----- Accessors -----

    def get_namespaces(self) -> dict[str, list[str]]:
        with self._lock:
            return self._namespace_map.get_all_namespaces()

    def get_class_map(self) -> ClassMapProtocol:
        return self._class_map

    def get_namespace_map(self) -> NamespaceMapProtocol:
        return self._namespace_map

    def get_files(self) -> list[str]:
        with self._lock:
            return list(self._files)

    def _include_files(self) -> None:
        for file_path in self._files:
            if not self.includer.include(file_path):
                logger.warning(f"[autoload:register] bootstrap file not found: {file_path}")

    def __repr__(self) -> str:
        state = "registered" if self._registered else "unregistered"
        return f"AutoloaderManager({state})"
