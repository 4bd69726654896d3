"""Process startup helper used by installed bootstrap files.

``bootstrap(root)`` prefers a generated snapshot (``modmap generate``) and
falls back to the project's scoped settings, including the namespaces their
``discovery`` section finds. The snapshot is executed through the shared
includer, so it runs at most once per process no matter how many entry
points call ``bootstrap``.
"""

import logging
import threading
from pathlib import Path

from .autoloader import AutoloaderManager
from .discovery import ConfigurableDiscoveryManager
from .includer import FileIncluder
from .paths import get_snapshot_path
from .settings import ScopedSettings
from .settings import SettingsPaths

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_autoloaders: dict[Path, AutoloaderManager] = {}


def bootstrap(root: str | Path, snapshot: str | Path | None = None) -> AutoloaderManager:
    """Build and register the autoloader for the project at ``root``.

    Repeated calls for the same root return the same autoloader.

    Raises:
        ConfigError: Settings exist but are invalid
    """
    root = Path(root).resolve()
    with _lock:
        if root in _autoloaders:
            return _autoloaders[root]

        snapshot_path = Path(snapshot) if snapshot is not None else get_snapshot_path(root)
        includer = FileIncluder()
        if includer.include(snapshot_path):
            module = includer.get_module(snapshot_path)
            autoloader = getattr(module, "autoloader", None)
            if isinstance(autoloader, AutoloaderManager):
                logger.debug(f"[autoload:bootstrap] using snapshot {snapshot_path}")
                _autoloaders[root] = autoloader
                return autoloader
            logger.warning(f"[autoload:bootstrap] {snapshot_path} does not define an autoloader")

        config = ScopedSettings(SettingsPaths.default(root)).load_config()
        autoloader = config.apply(AutoloaderManager(), register=False)
        ConfigurableDiscoveryManager(base_path=root).load_config(config).perform_auto_discovery(autoloader)
        autoloader.register()
        logger.debug(f"[autoload:bootstrap] using settings for {root}")
        _autoloaders[root] = autoloader
        return autoloader
