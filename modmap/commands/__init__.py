"""CLI commands for modmap."""

from .discover import discover
from .generate import generate
from .install import install
from .resolve import load
from .resolve import resolve
from .show import show

__all__ = ["discover", "generate", "install", "load", "resolve", "show"]
