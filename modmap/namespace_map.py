"""Namespace prefix to directory mappings.

Resolution maps an identifier such as ``App.Models.User`` onto
``<dir>/Models/User.py`` for every directory registered under ``App.``.

Matching is a linear scan over prefixes in the order they were first
registered; every prefix the identifier starts with is tried, not only the
most specific one. ``longest_prefix_first=True`` switches to trying matching
prefixes from most to least specific.
"""

import logging
import os
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping

from .paths import NAMESPACE_SEPARATOR
from .paths import identifier_to_relative_path
from .paths import normalize_namespace
from .paths import normalize_path

logger = logging.getLogger(__name__)


class NamespaceMap:
    """Ordered prefix -> directories registry."""

    def __init__(
        self,
        namespaces: Mapping[str, str | Iterable[str]] | None = None,
        longest_prefix_first: bool = False,
    ):
        """Initialize registry.

        Args:
            namespaces: Initial mappings, same shape as ``add_namespaces``
            longest_prefix_first: Try matching prefixes by specificity instead
                of registration order
        """
        self._namespaces: dict[str, list[str]] = {}
        self.longest_prefix_first = longest_prefix_first
        if namespaces:
            self.add_namespaces(namespaces)

    def add_namespace(self, namespace: str, path: str, prepend: bool = False) -> "NamespaceMap":
        """Register ``path`` under ``namespace``.

        Adding a path already registered for the prefix is a no-op.
        """
        namespace = normalize_namespace(namespace)
        path = normalize_path(path)

        paths = self._namespaces.setdefault(namespace, [])
        if path in paths:
            return self

        if prepend:
            paths.insert(0, path)
        else:
            paths.append(path)
        return self

    def add_namespaces(self, namespaces: Mapping[str, str | Iterable[str]]) -> "NamespaceMap":
        """Register several prefixes; each value is a path or a sequence of paths."""
        for namespace, paths in namespaces.items():
            if isinstance(paths, (str, os.PathLike)):
                paths = [paths]
            for path in paths:
                self.add_namespace(namespace, path)
        return self

    def get_namespace_paths(self, namespace: str) -> list[str]:
        return list(self._namespaces.get(normalize_namespace(namespace), []))

    def find_file(self, class_name: str) -> str | None:
        """Return the first existing file defining ``class_name``, or None."""
        for prefix, candidate in self.candidate_files(class_name):
            if os.path.isfile(candidate):
                logger.debug(f"[autoload:namespace] {class_name} -> {candidate} (via {prefix})")
                return candidate
        return None

    def candidate_files(self, class_name: str) -> Iterator[tuple[str, str]]:
        """Yield every (prefix, path) pair ``find_file`` tests, in order."""
        class_name = class_name.lstrip(NAMESPACE_SEPARATOR)

        for prefix in self._matching_prefixes(class_name):
            relative = identifier_to_relative_path(class_name[len(prefix) :])
            for directory in self._namespaces[prefix]:
                yield prefix, directory + os.sep + relative

    def find_package_dirs(self, name: str) -> list[str] | None:
        """Return directories backing ``name`` as a namespace package.

        ``name`` is a package when it is a parent of a registered prefix
        (``App`` for ``App.Models.``) or when a matching prefix has a
        directory for the remainder (``App.Models`` -> ``<dir>/Models``).
        Returns None when ``name`` is neither.
        """
        name = name.strip(NAMESPACE_SEPARATOR)
        if not name:
            return None

        own_prefix = name + NAMESPACE_SEPARATOR
        if own_prefix in self._namespaces:
            return [path for path in self._namespaces[own_prefix] if os.path.isdir(path)]
        if any(prefix.startswith(own_prefix) for prefix in self._namespaces):
            return []

        for prefix in self._matching_prefixes(name):
            remainder = name[len(prefix) :].replace(NAMESPACE_SEPARATOR, os.sep)
            dirs = [
                directory + os.sep + remainder
                for directory in self._namespaces[prefix]
                if os.path.isdir(directory + os.sep + remainder)
            ]
            if dirs:
                return dirs
        return None

    def has_namespace(self, namespace: str) -> bool:
        return normalize_namespace(namespace) in self._namespaces

    def remove_namespace(self, namespace: str) -> "NamespaceMap":
        self._namespaces.pop(normalize_namespace(namespace), None)
        return self

    def get_all_namespaces(self) -> dict[str, list[str]]:
        return {prefix: list(paths) for prefix, paths in self._namespaces.items()}

    def clear_namespaces(self) -> "NamespaceMap":
        self._namespaces.clear()
        return self

    def _matching_prefixes(self, class_name: str) -> list[str]:
        prefixes = [prefix for prefix in self._namespaces if class_name.startswith(prefix)]
        if self.longest_prefix_first:
            prefixes.sort(key=len, reverse=True)
        return prefixes

    def __len__(self) -> int:
        return len(self._namespaces)

    def __repr__(self) -> str:
        return f"NamespaceMap({len(self._namespaces)} namespaces)"
