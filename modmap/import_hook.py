"""Import system integration.

The autoloader becomes the active class-resolution hook by installing an
:class:`AutoloadFinder` on a :class:`MetaPathHost`. Once installed,
``import App.Models.User`` is answered by the autoloader's class map and
namespace map, and the file is executed through the shared includer so it
runs at most once even when ``load_class`` reached it first.
"""

import importlib.abc
import importlib.machinery
import importlib.util
import logging
import os
import sys
from types import ModuleType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .autoloader import AutoloaderManager
    from .includer import FileIncluder

logger = logging.getLogger(__name__)


class MetaPathHost:
    """Installs finders on ``sys.meta_path`` (or an injected list)."""

    def __init__(self, meta_path: list | None = None):
        self._meta_path = meta_path

    @property
    def meta_path(self) -> list:
        return sys.meta_path if self._meta_path is None else self._meta_path

    def install(self, finder: importlib.abc.MetaPathFinder) -> bool:
        """Prepend ``finder``; installing an installed finder is a no-op."""
        if self.is_installed(finder):
            return True
        try:
            self.meta_path.insert(0, finder)
        except (AttributeError, TypeError) as e:
            logger.warning(f"[autoload:hook] cannot install {finder!r}: {e}")
            return False
        return True

    def uninstall(self, finder: importlib.abc.MetaPathFinder) -> bool:
        """Remove ``finder``; False when it is not installed."""
        for index, installed in enumerate(self.meta_path):
            if installed is finder:
                del self.meta_path[index]
                return True
        logger.warning(f"[autoload:hook] {finder!r} is not installed")
        return False

    def is_installed(self, finder: importlib.abc.MetaPathFinder) -> bool:
        return any(installed is finder for installed in self.meta_path)

    def __repr__(self) -> str:
        target = "sys.meta_path" if self._meta_path is None else "custom"
        return f"MetaPathHost({target})"


class AutoloadLoader(importlib.abc.Loader):
    """Executes a resolved file into the module created by the import system."""

    def __init__(self, includer: "FileIncluder", path: str):
        self.includer = includer
        self.path = path

    def create_module(self, spec: importlib.machinery.ModuleSpec) -> ModuleType | None:
        return None

    def exec_module(self, module: ModuleType) -> None:
        if not self.includer.include(self.path, module=module):
            raise ImportError(f"Resolved file disappeared: {self.path}", name=module.__name__, path=self.path)

    def get_filename(self, fullname: str) -> str:
        return self.path

    def get_source(self, fullname: str) -> str:
        with open(self.path, encoding="utf-8") as f:
            return f.read()

    def is_package(self, fullname: str) -> bool:
        return False

    def __repr__(self) -> str:
        return f"AutoloadLoader({self.path})"


class AutoloadFinder(importlib.abc.MetaPathFinder):
    """Meta path finder answering imports through an autoloader."""

    def __init__(self, autoloader: "AutoloaderManager"):
        self.autoloader = autoloader

    def find_spec(self, fullname: str, path=None, target=None) -> importlib.machinery.ModuleSpec | None:
        file_path = self.autoloader.find_file(fullname)
        if file_path is not None and os.path.isfile(file_path):
            logger.debug(f"[autoload:hook] {fullname} -> {file_path}")
            loader = AutoloadLoader(self.autoloader.includer, file_path)
            return importlib.util.spec_from_file_location(fullname, file_path, loader=loader)

        # Parents of resolvable identifiers import as namespace packages
        namespace_map = self.autoloader.get_namespace_map()
        find_package_dirs = getattr(namespace_map, "find_package_dirs", None)
        if find_package_dirs is None:
            return None

        package_dirs = find_package_dirs(fullname)
        if package_dirs is None:
            return None

        logger.debug(f"[autoload:hook] {fullname} -> namespace package {package_dirs}")
        spec = importlib.machinery.ModuleSpec(fullname, None, is_package=True)
        spec.submodule_search_locations = package_dirs
        return spec

    def __repr__(self) -> str:
        return f"AutoloadFinder({self.autoloader!r})"
