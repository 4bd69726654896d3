"""Tests for class discovery."""

from pathlib import Path

import pytest

from modmap.discovery import ClassDiscovery
from modmap.paths import normalize_path


@pytest.fixture
def source_tree(tmp_path):
    root = tmp_path / "app"
    files = {
        "Kernel.py": "class Kernel:\n    pass\n",
        "models/user.py": "class User(Base):\n    pass\n\n\nclass UserQuery:\n    pass\n",
        "models/helpers.py": "def helper():\n    return 1\n",
        "services/mail/mailer.py": "import smtplib\n\n\nclass Mailer:\n    class Nested:\n        pass\n",
        "tests/test_user.py": "class TestUser:\n    pass\n",
        "templates/page.html": "<p>class Fake:</p>\n",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def test_extract_class_names_top_level_only():
    source = "class A:\n    class Inner:\n        pass\n\nclass B(A):\n    pass\n\nclass A:\n    pass\n"
    assert ClassDiscovery.extract_class_names(source) == ["A", "B"]


def test_discover_classes(source_tree):
    discovery = ClassDiscovery()
    infos = discovery.discover_classes(source_tree, base_namespace="App")

    by_identifier = {info.identifier: info for info in infos}
    assert set(by_identifier) == {"App.Kernel", "App.models.user", "App.services.mail.mailer"}
    assert by_identifier["App.models.user"].all_classes == ["User", "UserQuery"]
    assert by_identifier["App.models.user"].namespace == "App.models"
    assert by_identifier["App.services.mail.mailer"].qualified_classes == ["App.services.mail.mailer.Mailer"]
    assert by_identifier["App.Kernel"].class_name == "Kernel"


def test_discover_classes_non_recursive(source_tree):
    infos = ClassDiscovery().discover_classes(source_tree, recursive=False)
    assert [info.identifier for info in infos] == ["Kernel"]


def test_discover_classes_missing_directory(tmp_path):
    assert ClassDiscovery().discover_classes(tmp_path / "missing") == []


def test_exclude_directories(source_tree):
    discovery = ClassDiscovery()
    infos = discovery.discover_classes(source_tree, exclude_directories=["services/mail"])
    assert {info.identifier for info in infos} == {"Kernel", "models.user"}


def test_default_excludes_can_be_replaced(source_tree):
    discovery = ClassDiscovery().set_exclude_directories([])
    identifiers = {info.identifier for info in discovery.discover_classes(source_tree)}
    assert "tests.test_user" in identifiers


def test_file_extensions(source_tree):
    discovery = ClassDiscovery().set_file_extensions(["html"])
    assert [info.identifier for info in discovery.discover_classes(source_tree)] == []


def test_discover_namespaces(source_tree):
    namespaces = ClassDiscovery().discover_namespaces(source_tree, "App")
    assert namespaces == {
        "App.": normalize_path(source_tree),
        "App.models.": normalize_path(source_tree / "models"),
        "App.services.mail.": normalize_path(source_tree / "services" / "mail"),
    }


def test_build_class_map(source_tree):
    class_map = ClassDiscovery().build_class_map(source_tree, "App.")
    assert class_map["App.models.user"] == normalize_path(source_tree / "models" / "user.py")
    assert "App.models.helpers" not in class_map


def test_discovered_classes_accumulate_until_cleared(source_tree):
    discovery = ClassDiscovery()
    discovery.discover_classes(source_tree)
    discovery.discover_classes(source_tree / "models")
    assert len(discovery.get_discovered_classes()) == 4

    discovery.clear_cache()
    assert discovery.get_discovered_classes() == []


def test_auto_discover_and_register_with_base_namespaces(source_tree, autoloader):
    discovered = ClassDiscovery().auto_discover_and_register(autoloader, {source_tree: "App"})

    assert discovered["App."] == normalize_path(source_tree)
    assert autoloader.find_file("App.models.user") == str(source_tree / "models" / "user.py")
    assert autoloader.find_file("App.services.mail.mailer") == str(source_tree / "services" / "mail" / "mailer.py")


def test_auto_discover_and_register_with_plain_directories(source_tree, autoloader):
    discovered = ClassDiscovery().auto_discover_and_register(autoloader, [source_tree])
    assert set(discovered) == {"models.", "services.mail."}
    assert autoloader.get_namespace_map().has_namespace("models.")


def test_discover_modules(tmp_path, autoloader):
    modules = tmp_path / "modules"
    for name in ["Billing", "Shipping"]:
        (modules / name / "src").mkdir(parents=True)
    (modules / "Docs").mkdir()

    discovered = ClassDiscovery().discover_modules(autoloader, modules)

    assert discovered == {
        "Modules.Billing.": normalize_path(modules / "Billing" / "src"),
        "Modules.Shipping.": normalize_path(modules / "Shipping" / "src"),
    }
    assert autoloader.get_namespace_map().has_namespace("Modules.Billing.")


def test_discover_modules_missing_directory(tmp_path, autoloader):
    assert ClassDiscovery().discover_modules(autoloader, Path(tmp_path / "missing")) == {}
