"""Path policy and normalization helpers.

This module centralizes the path decisions of the autoloader:
how identifiers and filesystem paths are normalized, and where the CLI
looks for settings, snapshots and bootstrap files.
"""

import os
from pathlib import Path

# Hierarchical separator of identifiers (App.Models.User)
NAMESPACE_SEPARATOR = "."

# Suffix appended to the identifier remainder when resolving by namespace
SOURCE_SUFFIX = ".py"

SETTINGS_DIR_NAME = ".modmap"
SNAPSHOT_FILE_NAME = "autoload_snapshot.py"
BOOTSTRAP_FILE_NAME = "bootstrap_autoload.py"

# ===== NORMALIZATION =====


def normalize_path(path: str | os.PathLike) -> str:
    """Unify separators to ``os.sep`` and drop trailing separators.

    Both ``/`` and ``\\`` are accepted on input regardless of platform.

    Example:
        >>> normalize_path("src/app/")
        'src/app'
    """
    path = os.fspath(path)
    return path.replace("\\", os.sep).replace("/", os.sep).rstrip(os.sep)


def normalize_namespace(namespace: str) -> str:
    """Normalize a namespace prefix to ``Segment.Segment.`` form.

    Leading and trailing separators are stripped and exactly one trailing
    separator is appended. An empty prefix becomes ``"."`` (global namespace).
    """
    return namespace.strip(NAMESPACE_SEPARATOR) + NAMESPACE_SEPARATOR


def identifier_to_relative_path(identifier: str) -> str:
    """Convert an identifier remainder to a relative source path."""
    return identifier.replace(NAMESPACE_SEPARATOR, os.sep) + SOURCE_SUFFIX


def resolve_against(path: str | os.PathLike, base_path: str | os.PathLike | None) -> str:
    """Return ``path`` unchanged if absolute, otherwise joined to ``base_path``."""
    path = normalize_path(path)
    if base_path is None or os.path.isabs(path):
        return path
    return normalize_path(os.path.join(os.fspath(base_path), path))


# ===== CLI PATH POLICY =====


def get_global_settings_path() -> Path:
    """User-wide settings (~/.modmap/autoload.yaml)."""
    return Path.home() / SETTINGS_DIR_NAME / "autoload.yaml"


def get_project_settings_path(root: Path | None = None) -> Path:
    """Project settings (.modmap/autoload.yaml), committed with the project."""
    return (root or Path.cwd()) / SETTINGS_DIR_NAME / "autoload.yaml"


def get_local_settings_path(root: Path | None = None) -> Path:
    """Machine-local settings (.modmap/autoload.local.yaml), not committed."""
    return (root or Path.cwd()) / SETTINGS_DIR_NAME / "autoload.local.yaml"


def get_snapshot_path(root: Path | None = None) -> Path:
    """Default location of the generated autoload snapshot."""
    return (root or Path.cwd()) / SETTINGS_DIR_NAME / "cache" / SNAPSHOT_FILE_NAME


def get_bootstrap_path(root: Path | None = None) -> Path:
    """Default location of the bootstrap file loaded by entry points."""
    return (root or Path.cwd()) / BOOTSTRAP_FILE_NAME
