"""Protocols for the pieces the autoloader composes.

Implementations are injected into :class:`~modmap.autoloader.AutoloaderManager`
so that alternative storage or hook mechanisms can be substituted.
"""

from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any
from typing import Protocol
from typing import runtime_checkable


@runtime_checkable
class ClassMapProtocol(Protocol):
    """Explicit identifier-to-file mappings."""

    def add_class(self, class_name: str, file_path: str) -> Any: ...

    def add_classes(self, classes: Mapping[str, str]) -> Any: ...

    def get_class_file(self, class_name: str) -> str | None: ...

    def has_class(self, class_name: str) -> bool: ...

    def remove_class(self, class_name: str) -> Any: ...

    def get_all_classes(self) -> dict[str, str]: ...

    def clear_classes(self) -> Any: ...


@runtime_checkable
class NamespaceMapProtocol(Protocol):
    """Prefix-to-directories mappings."""

    def add_namespace(self, namespace: str, path: str, prepend: bool = False) -> Any: ...

    def add_namespaces(self, namespaces: Mapping[str, str | Iterable[str]]) -> Any: ...

    def get_namespace_paths(self, namespace: str) -> list[str]: ...

    def find_file(self, class_name: str) -> str | None: ...

    def has_namespace(self, namespace: str) -> bool: ...

    def remove_namespace(self, namespace: str) -> Any: ...

    def get_all_namespaces(self) -> dict[str, list[str]]: ...

    def clear_namespaces(self) -> Any: ...


@runtime_checkable
class HookHost(Protocol):
    """Where the autoloader installs itself as the class-resolution hook."""

    def install(self, finder: Any) -> bool: ...

    def uninstall(self, finder: Any) -> bool: ...
