"""Tests for scope-aware settings files."""

import pytest
import yaml

from modmap.config import ConfigError
from modmap.paths import normalize_path
from modmap.settings import ScopedSettings
from modmap.settings import SettingsPaths


@pytest.fixture
def settings_paths(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return SettingsPaths(
        root=root,
        global_settings=tmp_path / "home" / ".modmap" / "autoload.yaml",
        project_settings=root / ".modmap" / "autoload.yaml",
        local_settings=root / ".modmap" / "autoload.local.yaml",
    )


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


def test_no_settings_files_gives_empty_config(settings_paths):
    config = ScopedSettings(settings_paths).load_config()
    assert config.all() == {}
    assert config.base_path == settings_paths.root


def test_scopes_merge_lowest_precedence_first(settings_paths):
    write_yaml(settings_paths.global_settings, {"auto_register": False, "autoload": {"files": ["global.py"]}})
    write_yaml(settings_paths.project_settings, {"autoload": {"namespaces": {"App.": "src/app"}}})
    write_yaml(settings_paths.local_settings, {"auto_register": True, "autoload": {"files": ["local.py"]}})

    settings = ScopedSettings(settings_paths)
    config = settings.load_config()

    assert config.get("auto_register") is True
    assert config.get_files() == ["global.py", "local.py"]
    assert config.get_namespaces() == {"App.": "src/app"}
    assert settings.existing_files() == [
        settings_paths.global_settings,
        settings_paths.project_settings,
        settings_paths.local_settings,
    ]


def test_relative_paths_resolve_against_project_root(settings_paths, autoloader):
    write_yaml(settings_paths.project_settings, {"autoload": {"namespaces": {"App.": "src/app"}}})

    ScopedSettings(settings_paths).load_config().apply(autoloader)
    assert autoloader.get_namespaces() == {"App.": [normalize_path(settings_paths.root / "src" / "app")]}


def test_add_namespace_writes_scope_file(settings_paths):
    settings = ScopedSettings(settings_paths)
    settings.add_namespace("App.", "src/app")
    settings.add_namespace("App.", "src/app")
    assert yaml.safe_load(settings_paths.project_settings.read_text()) == {
        "autoload": {"namespaces": {"App.": "src/app"}}
    }

    settings.add_namespace("App.", "lib/app")
    data = yaml.safe_load(settings_paths.project_settings.read_text())
    assert data["autoload"]["namespaces"]["App."] == ["src/app", "lib/app"]


def test_add_classes_and_auto_register_in_local_scope(settings_paths):
    settings = ScopedSettings(settings_paths)
    settings.add_classes({"Legacy.Helper": "legacy/helper.py"}, scope="local")
    settings.set_auto_register(True, scope="local")

    data = yaml.safe_load(settings_paths.local_settings.read_text())
    assert data == {"autoload": {"classmap": {"Legacy.Helper": "legacy/helper.py"}}, "auto_register": True}
    assert not settings_paths.project_settings.exists()


def test_malformed_scope_file_raises(settings_paths):
    settings_paths.project_settings.parent.mkdir(parents=True)
    settings_paths.project_settings.write_text("autoload: [unclosed")
    with pytest.raises(ConfigError):
        ScopedSettings(settings_paths).load_config()
