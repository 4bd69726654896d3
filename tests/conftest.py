"""Pytest configuration for modmap tests.

Every test gets a clean import state: finders added to ``sys.meta_path`` and
modules the test created in ``sys.modules`` are removed afterwards.
"""

import logging
import os
import sys
import uuid

import pytest

from modmap.autoloader import AutoloaderManager
from modmap.import_hook import MetaPathHost


@pytest.fixture(autouse=True)
def isolated_import_state(tmp_path_factory):
    meta_path = list(sys.meta_path)
    modules = set(sys.modules)
    base = os.path.realpath(tmp_path_factory.getbasetemp())
    yield
    sys.meta_path[:] = meta_path
    for name in set(sys.modules) - modules:
        # Only modules created by the tests; lazily imported libraries stay
        spec = getattr(sys.modules[name], "__spec__", None)
        origin = getattr(spec, "origin", None)
        if origin is None or os.path.realpath(origin).startswith(base):
            del sys.modules[name]


@pytest.fixture(autouse=True)
def isolated_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def meta_path():
    """Stand-in for sys.meta_path."""
    return []


@pytest.fixture
def autoloader(meta_path):
    return AutoloaderManager(host=MetaPathHost(meta_path))


@pytest.fixture
def unique_prefix():
    """Top-level namespace no other test or installed package uses."""
    return f"Ns{uuid.uuid4().hex[:10]}"


@pytest.fixture
def counting_source(tmp_path):
    """Source text for a class whose file records each execution in a marker file."""

    def make(class_name, marker_name="executions.log"):
        marker = tmp_path / marker_name
        source = f'with open({str(marker)!r}, "a") as _f:\n    _f.write("x")\n\n\nclass {class_name}:\n    pass\n'
        return source, marker

    return make
