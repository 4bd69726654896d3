"""One-time inclusion of source files.

Including a file executes its top level into a module object. Each real
path is executed successfully at most once per process: the record is
shared by every ``FileIncluder`` and guarded by a per-path lock, so
concurrent callers wait for the first execution instead of repeating it.
A file whose execution raises is not recorded and may be included again.
"""

import hashlib
import importlib.machinery
import importlib.util
import logging
import os
import sys
import threading
from types import ModuleType

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_path_locks: dict[str, threading.RLock] = {}
_included: dict[str, ModuleType] = {}


def _lock_for(key: str) -> threading.RLock:
    with _registry_lock:
        lock = _path_locks.get(key)
        if lock is None:
            lock = _path_locks[key] = threading.RLock()
        return lock


def include_key(path: str | os.PathLike) -> str:
    """Identity of a file for the at-most-once rule."""
    return os.path.realpath(os.fspath(path))


def synthetic_module_name(key: str) -> str:
    """Module name used when a file is included without a free identifier."""
    return "_modmap_include_" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]


class FileIncluder:
    """Executes source files into modules, at most once per real path."""

    def include(
        self,
        path: str | os.PathLike,
        module_name: str | None = None,
        module: ModuleType | None = None,
    ) -> bool:
        """Include ``path``.

        Args:
            path: File to execute
            module_name: Name to register in ``sys.modules`` when the file is
                executed standalone (ignored if the name is taken)
            module: Existing module to execute into (used by the import
                hook, where the import system owns module creation)

        Returns:
            False if the file does not exist, True once it is included
            (including when it already was)

        Raises:
            Any exception raised by the file's top-level code
        """
        if not os.path.isfile(path):
            logger.debug(f"[autoload:include] missing file {path}")
            return False

        key = include_key(path)
        with _lock_for(key):
            existing = _included.get(key)
            if existing is not None:
                if module is not None and module is not existing:
                    _share_definitions(existing, module)
                return True

            if module is None:
                module = self._execute_standalone(key, module_name)
            else:
                self._execute(key, module)

            _included[key] = module
            logger.debug(f"[autoload:include] {key} -> {module.__name__}")
        return True

    def is_included(self, path: str | os.PathLike) -> bool:
        return include_key(path) in _included

    def get_module(self, path: str | os.PathLike) -> ModuleType | None:
        """Module holding the definitions of an included file."""
        return _included.get(include_key(path))

    def included_files(self) -> list[str]:
        return list(_included)

    def _execute_standalone(self, key: str, module_name: str | None) -> ModuleType:
        name = module_name if module_name and module_name not in sys.modules else synthetic_module_name(key)

        # Explicit loader so files with any suffix are accepted
        loader = importlib.machinery.SourceFileLoader(name, key)
        spec = importlib.util.spec_from_file_location(name, key, loader=loader)
        if spec is None:
            raise ImportError(f"Cannot load {key}", name=name, path=key)
        module = importlib.util.module_from_spec(spec)

        sys.modules[name] = module
        try:
            self._execute(key, module)
        except BaseException:
            sys.modules.pop(name, None)
            raise
        return module

    def _execute(self, key: str, module: ModuleType) -> None:
        with open(key, "rb") as f:
            source = f.read()
        code = compile(source, key, "exec", dont_inherit=True)
        exec(code, module.__dict__)

    def __repr__(self) -> str:
        return f"FileIncluder({len(_included)} files included)"


def _share_definitions(source: ModuleType, target: ModuleType) -> None:
    """Expose an already-included file's definitions on another module."""
    target.__dict__.update({name: value for name, value in vars(source).items() if not name.startswith("__")})
