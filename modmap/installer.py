"""Project installation - bootstrap file and entry point patching.

Installing writes ``bootstrap_autoload.py`` at the project root and patches
entry point scripts so they run it before anything else. Every step is
idempotent: files that already carry the marker are left alone.
"""

import ast
import logging
import re
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .paths import BOOTSTRAP_FILE_NAME
from .paths import get_bootstrap_path

logger = logging.getLogger(__name__)

MARKER = "modmap autoload"

DEFAULT_ENTRY_POINTS = ["manage.py", "main.py", "app.py", "wsgi.py"]

BOOTSTRAP_TEMPLATE = f'''\
"""Project autoloader bootstrap ({MARKER}).

Loaded by patched entry points before application code runs.
"""

from pathlib import Path

from modmap.bootstrap import bootstrap

autoloader = bootstrap(Path(__file__).resolve().parent)
'''

ENTRY_POINT_BLOCK = f"""\
# >>> {MARKER} >>>
import os as _modmap_os
import runpy as _modmap_runpy

_modmap_runpy.run_path(
    _modmap_os.path.join(_modmap_os.path.dirname(_modmap_os.path.abspath(__file__)), "{{bootstrap}}")
)
# <<< {MARKER} <<<
"""

_CODING_COOKIE = re.compile(r"^[ \t\f]*#.*?coding[:=][ \t]*[-\w.]+")


class InstallError(Exception):
    """Raised when installation fails."""


@dataclass
class InstallReport:
    """What an installation did, one (target, status) per step."""

    actions: list[tuple[Path, str]] = field(default_factory=list)

    def add(self, target: Path, status: str) -> None:
        self.actions.append((target, status))

    def changed(self) -> list[Path]:
        return [target for target, status in self.actions if status in ("created", "patched")]


class AutoloadInstaller:
    """Installs the autoloader into a project."""

    def __init__(self, project_root: str | Path | None = None):
        self.project_root = Path(project_root) if project_root is not None else Path.cwd()
        self.bootstrap_path = get_bootstrap_path(self.project_root)

    def install(self, entry_points: list[str | Path] | None = None) -> InstallReport:
        """Write the bootstrap file and patch entry points.

        Args:
            entry_points: Scripts to patch, relative to the project root
                (default: manage.py, main.py, app.py, wsgi.py when present)

        Raises:
            InstallError: A file cannot be written or an entry point cannot be parsed
        """
        report = InstallReport()
        report.add(self.bootstrap_path, self.install_bootstrap())

        for entry_point in entry_points or DEFAULT_ENTRY_POINTS:
            path = Path(entry_point)
            if not path.is_absolute():
                path = self.project_root / path
            report.add(path, self.patch_entry_point(path))

        logger.info(f"[autoload:install] {len(report.changed())} files changed in {self.project_root}")
        return report

    def install_bootstrap(self) -> str:
        """Write the bootstrap file unless it already carries the marker."""
        if self.bootstrap_path.exists() and MARKER in self.bootstrap_path.read_text(encoding="utf-8"):
            return "exists"

        try:
            self.project_root.mkdir(parents=True, exist_ok=True)
            self.bootstrap_path.write_text(BOOTSTRAP_TEMPLATE, encoding="utf-8")
        except OSError as e:
            raise InstallError(f"Failed to create {self.bootstrap_path}: {e}") from e
        return "created"

    def patch_entry_point(self, path: Path) -> str:
        """Insert the bootstrap block into an entry point script.

        The block goes after the shebang, encoding cookie, module docstring
        and ``from __future__`` imports, which must stay first.

        Returns:
            ``missing``, ``already-patched`` or ``patched``
        """
        if not path.exists():
            logger.debug(f"[autoload:install] {path} not found, skipping")
            return "missing"

        content = path.read_text(encoding="utf-8")
        if MARKER in content:
            return "already-patched"

        lines = content.splitlines(keepends=True)
        insert_at = self._insertion_line(content, lines, path)

        bootstrap = self._relative_bootstrap(path)
        block = ENTRY_POINT_BLOCK.replace("{bootstrap}", bootstrap)

        before = "".join(lines[:insert_at])
        if before and not before.endswith("\n"):
            before += "\n"
        separator = "\n" if before else ""
        updated = before + separator + block + "\n" + "".join(lines[insert_at:]).lstrip("\n")

        try:
            path.write_text(updated, encoding="utf-8")
        except OSError as e:
            raise InstallError(f"Failed to update {path}: {e}") from e
        return "patched"

    def _insertion_line(self, content: str, lines: list[str], path: Path) -> int:
        try:
            module = ast.parse(content, filename=str(path))
        except SyntaxError as e:
            raise InstallError(f"Cannot parse entry point {path}: {e}") from e

        insert_at = 0
        for index, line in enumerate(lines[:2]):
            if (index == 0 and line.startswith("#!")) or _CODING_COOKIE.match(line):
                insert_at = index + 1

        for position, node in enumerate(module.body):
            is_docstring = (
                position == 0
                and isinstance(node, ast.Expr)
                and isinstance(node.value, ast.Constant)
                and isinstance(node.value.value, str)
            )
            is_future = isinstance(node, ast.ImportFrom) and node.module == "__future__"
            if not (is_docstring or is_future):
                break
            insert_at = max(insert_at, node.end_lineno or node.lineno)

        return insert_at

    def _relative_bootstrap(self, entry_point: Path) -> str:
        try:
            return Path(
                *[".."] * len(entry_point.resolve().parent.relative_to(self.project_root.resolve()).parts),
                BOOTSTRAP_FILE_NAME,
            ).as_posix()
        except ValueError:
            return self.bootstrap_path.resolve().as_posix()
