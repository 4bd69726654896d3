"""Tests for the meta path finder and hook host."""

import importlib

from modmap.autoloader import AutoloaderManager
from modmap.import_hook import AutoloadFinder
from modmap.import_hook import AutoloadLoader
from modmap.import_hook import MetaPathHost


class TestMetaPathHost:
    def test_install_prepends_once(self):
        meta_path = [object()]
        host = MetaPathHost(meta_path)
        finder = object()

        assert host.install(finder) is True
        assert host.install(finder) is True
        assert meta_path[0] is finder
        assert len(meta_path) == 2

    def test_uninstall_missing_finder_fails(self):
        host = MetaPathHost([])
        assert host.uninstall(object()) is False

    def test_install_on_unusable_target_fails(self):
        host = MetaPathHost(())
        assert host.install(object()) is False


def make_tree(tmp_path, source="class User:\n    pass\n"):
    models = tmp_path / "Models"
    models.mkdir()
    (models / "User.py").write_text(source)
    return models / "User.py"


def test_find_spec_for_resolvable_identifier(tmp_path, autoloader, unique_prefix):
    user = make_tree(tmp_path)
    autoloader.add_namespace(unique_prefix, str(tmp_path))

    spec = autoloader.finder.find_spec(f"{unique_prefix}.Models.User")
    assert isinstance(spec.loader, AutoloadLoader)
    assert spec.origin == str(user)


def test_find_spec_for_parent_packages(tmp_path, autoloader, unique_prefix):
    make_tree(tmp_path)
    autoloader.add_namespace(f"{unique_prefix}.App", str(tmp_path))

    top = autoloader.finder.find_spec(unique_prefix)
    assert top.loader is None
    assert list(top.submodule_search_locations) == []

    models = autoloader.finder.find_spec(f"{unique_prefix}.App.Models")
    assert list(models.submodule_search_locations) == [str(tmp_path / "Models")]


def test_find_spec_ignores_unrelated_names(autoloader):
    assert AutoloadFinder(autoloader).find_spec("json") is None


def test_import_through_installed_hook(tmp_path, unique_prefix):
    make_tree(tmp_path)
    autoloader = AutoloaderManager().add_namespace(unique_prefix, str(tmp_path))
    autoloader.register()
    try:
        module = importlib.import_module(f"{unique_prefix}.Models.User")
        assert module.User.__name__ == "User"
        assert module.__file__ == str(tmp_path / "Models" / "User.py")
    finally:
        autoloader.unregister()


def test_import_after_load_class_executes_once(tmp_path, unique_prefix, counting_source):
    source, marker = counting_source("User")
    make_tree(tmp_path, source)
    autoloader = AutoloaderManager().add_namespace(unique_prefix, str(tmp_path))
    autoloader.register()
    try:
        assert autoloader.load_class(f"{unique_prefix}.Models.User") is True
        module = importlib.import_module(f"{unique_prefix}.Models.User")
        assert hasattr(module, "User")
        assert marker.read_text() == "x"
    finally:
        autoloader.unregister()


def test_load_class_after_import_executes_once(tmp_path, unique_prefix, counting_source):
    source, marker = counting_source("User")
    make_tree(tmp_path, source)
    autoloader = AutoloaderManager().add_namespace(unique_prefix, str(tmp_path))
    autoloader.register()
    try:
        importlib.import_module(f"{unique_prefix}.Models.User")
        assert autoloader.load_class(f"{unique_prefix}.Models.User") is True
        assert marker.read_text() == "x"
    finally:
        autoloader.unregister()
