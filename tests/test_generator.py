"""Tests for autoload snapshot generation."""

import os
import time

import pytest

from modmap.config import AutoloadConfig
from modmap.generator import AutoloadGenerator
from modmap.generator import GeneratorError
from modmap.includer import FileIncluder
from modmap.paths import normalize_path


def write_module(modules, name, manifest):
    module_dir = modules / name
    (module_dir / "src").mkdir(parents=True)
    (module_dir / "pyproject.toml").write_text(manifest)
    return module_dir


@pytest.fixture
def project(tmp_path):
    modules = tmp_path / "src" / "modules"
    billing = write_module(
        modules,
        "Billing",
        '[project]\nname = "billing"\n\n[tool.modmap]\nnamespaces = { "Billing" = "src" }\nfiles = ["boot.py"]\n',
    )
    (billing / "src" / "Invoice.py").write_text("class Invoice:\n    pass\n")
    (billing / "boot.py").write_text("BOOTED = True\n")
    write_module(modules, "Plain", '[project]\nname = "plain"\n')
    (modules / "NoManifest").mkdir()
    return tmp_path


def test_discover_modules(project):
    modules = AutoloadGenerator(base_path=project).discover_modules()

    assert [module.name for module in modules] == ["Billing"]
    billing = modules[0]
    module_dir = project / "src" / "modules" / "Billing"
    assert billing.namespaces == {"Billing.": [normalize_path(module_dir / "src")]}
    assert billing.files == [normalize_path(module_dir / "boot.py")]
    assert billing.manifest == module_dir / "pyproject.toml"


def test_invalid_manifest_raises(project):
    write_module(project / "src" / "modules", "Broken", "[tool.modmap\n")
    with pytest.raises(GeneratorError, match="Invalid manifest"):
        AutoloadGenerator(base_path=project).discover_modules()


def test_collect_mappings_merges_config_first(project):
    config = AutoloadConfig(
        {"autoload": {"namespaces": {"App.": "src/app"}, "classmap": {"Legacy": "legacy.py"}, "files": ["a.py"]}},
        base_path=project,
    )
    namespaces, classmap, files = AutoloadGenerator(base_path=project).collect_mappings(config)

    assert list(namespaces) == ["App.", "Billing."]
    assert classmap == {"Legacy": normalize_path(project / "legacy.py")}
    assert files == [
        normalize_path(project / "a.py"),
        normalize_path(project / "src" / "modules" / "Billing" / "boot.py"),
    ]

def test_collect_mappings_includes_discovered_namespaces(project):
    config = AutoloadConfig(
        {"discovery": {"directories": {"billing": {"path": "src/modules/Billing/src", "base_namespace": "Invoices"}}}},
        base_path=project,
    )
    namespaces, _classmap, _files = AutoloadGenerator(base_path=project).collect_mappings(config)

    assert namespaces["Invoices."] == [normalize_path(project / "src" / "modules" / "Billing" / "src")]
    assert "Billing." in namespaces



def test_collect_mappings_optimized_class_map(project):
    _namespaces, classmap, _files = AutoloadGenerator(base_path=project).collect_mappings(optimize=True)
    assert classmap == {
        "Billing.Invoice": normalize_path(project / "src" / "modules" / "Billing" / "src" / "Invoice.py")
    }


def test_generate_writes_loadable_snapshot(project):
    generator = AutoloadGenerator(base_path=project)
    output = generator.generate()

    assert output == project / ".modmap" / "cache" / "autoload_snapshot.py"
    assert output == generator.get_output_path()

    includer = FileIncluder()
    assert includer.include(output) is True
    snapshot = includer.get_module(output)
    try:
        assert snapshot.NAMESPACES == {"Billing.": [normalize_path(project / "src" / "modules" / "Billing" / "src")]}
        assert snapshot.autoloader.is_registered() is True
        assert snapshot.autoloader.find_file("Billing.Invoice") is not None
        assert includer.get_module(project / "src" / "modules" / "Billing" / "boot.py").BOOTED is True
    finally:
        snapshot.autoloader.unregister()


def test_generate_to_custom_output(project, tmp_path):
    output = tmp_path / "out" / "snapshot.py"
    assert AutoloadGenerator(base_path=project, output_path=output).generate() == output
    assert output.exists()


def test_is_up_to_date(project):
    generator = AutoloadGenerator(base_path=project)
    assert generator.is_up_to_date() is False

    output = generator.generate()
    assert generator.is_up_to_date() is True

    manifest = project / "src" / "modules" / "Billing" / "pyproject.toml"
    later = os.path.getmtime(output) + 10
    os.utime(manifest, (later, later))
    assert generator.is_up_to_date() is False


def test_is_up_to_date_tracks_config_sources(project):
    config_path = project / "autoload.yaml"
    config_path.write_text("autoload:\n  files: []\n")
    config = AutoloadConfig().load_from_file(config_path)

    generator = AutoloadGenerator(base_path=project)
    output = generator.generate(config)
    assert generator.is_up_to_date(config) is True

    later = time.time() + 10
    os.utime(config_path, (later, later))
    assert os.path.getmtime(config_path) > os.path.getmtime(output)
    assert generator.is_up_to_date(config) is False


def test_no_modules_directory(tmp_path):
    generator = AutoloadGenerator(base_path=tmp_path)
    assert generator.discover_modules() == []
    assert generator.collect_mappings() == ({}, {}, [])
