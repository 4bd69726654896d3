"""
Discovery - derive autoload mappings from source trees.

Public API:
- ClassDiscovery: Scan directories for class declarations, namespaces and modules
- ClassInfo: Classes declared in one file
- ConfigurableDiscoveryManager: Run discovery from the ``discovery`` config section
"""

from .classes import ClassDiscovery
from .classes import ClassInfo
from .manager import ConfigurableDiscoveryManager

__all__ = [
    "ClassDiscovery",
    "ClassInfo",
    "ConfigurableDiscoveryManager",
]
