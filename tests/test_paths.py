"""Tests for pkgdocs.paths module."""

from pathlib import Path

from pkgdocs.paths import DEFAULT_PACKAGES_DIRNAME, get_default_packages_root, get_project_root


def test_get_project_root_contains_package():
    """Returns the directory holding the pkgdocs package."""
    assert (get_project_root() / "pkgdocs" / "paths.py").is_file()


def test_default_packages_root_is_sibling_of_project():
    """Default content root sits next to the project checkout."""
    root = get_default_packages_root()

    assert root.name == DEFAULT_PACKAGES_DIRNAME
    assert root.parent == get_project_root().parent.resolve()
    assert root.is_absolute()


def test_default_packages_root_ignores_cwd(tmp_path, monkeypatch):
    """Does not depend on the working directory."""
    before = get_default_packages_root()
    monkeypatch.chdir(tmp_path)

    assert get_default_packages_root() == before
    assert not str(get_default_packages_root()).startswith(str(Path(tmp_path)))
