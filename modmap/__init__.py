"""modmap - resolve dotted identifiers to source files and load them once.

Mappings come from an explicit class map (identifier -> file) and a
namespace map (prefix -> directories). An ``AutoloaderManager`` combines
both, includes each resolved file at most once per process and installs an
import hook so ``import App.Models.User`` is answered from the mappings.
"""

from .autoloader import AutoloaderManager
from .bootstrap import bootstrap
from .class_map import ClassMap
from .config import AutoloadConfig
from .config import ConfigError
from .generator import AutoloadGenerator
from .generator import GeneratorError
from .import_hook import AutoloadFinder
from .import_hook import MetaPathHost
from .includer import FileIncluder
from .installer import AutoloadInstaller
from .installer import InstallError
from .namespace_map import NamespaceMap

__all__ = [
    "AutoloadConfig",
    "AutoloadFinder",
    "AutoloadGenerator",
    "AutoloadInstaller",
    "AutoloaderManager",
    "ClassMap",
    "ConfigError",
    "FileIncluder",
    "GeneratorError",
    "InstallError",
    "MetaPathHost",
    "NamespaceMap",
    "bootstrap",
]
