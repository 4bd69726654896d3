"""Explicit identifier-to-file mappings."""

from collections.abc import Mapping

from .paths import normalize_path


class ClassMap:
    """Identifier to file path map, consulted before namespace resolution.

    Keys are stored verbatim (no validation, empty strings allowed).
    File paths are normalized on insertion; the last write for a key wins.
    """

    def __init__(self, classes: Mapping[str, str] | None = None):
        self._classes: dict[str, str] = {}
        if classes:
            self.add_classes(classes)

    def add_class(self, class_name: str, file_path: str) -> "ClassMap":
        self._classes[class_name] = normalize_path(file_path)
        return self

    def add_classes(self, classes: Mapping[str, str]) -> "ClassMap":
        for class_name, file_path in classes.items():
            self.add_class(class_name, file_path)
        return self

    def get_class_file(self, class_name: str) -> str | None:
        return self._classes.get(class_name)

    def has_class(self, class_name: str) -> bool:
        return class_name in self._classes

    def remove_class(self, class_name: str) -> "ClassMap":
        self._classes.pop(class_name, None)
        return self

    def get_all_classes(self) -> dict[str, str]:
        return dict(self._classes)

    def clear_classes(self) -> "ClassMap":
        self._classes.clear()
        return self

    def __len__(self) -> int:
        return len(self._classes)

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._classes

    def __repr__(self) -> str:
        return f"ClassMap({len(self._classes)} classes)"
