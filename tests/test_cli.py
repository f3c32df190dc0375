"""Tests for the pkgdocs command line."""

from pathlib import Path

import pytest

from pkgdocs.build import build_deps, build_source
from pkgdocs.cli import build_parser, main, resolve_settings
from pkgdocs.settings import GeneralSettings, PkgDocsSettings
from pkgdocs.sources import GitHubSource, LocalSource


@pytest.fixture
def base_settings(tmp_path):
    return PkgDocsSettings(_env_file=None, packages_root=tmp_path)


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.transport == "stdio"
    assert args.host == "127.0.0.1"
    assert args.port == 8000
    assert args.mode is None
    assert args.verbose == 0


def test_resolve_settings_keeps_env_values(base_settings):
    settings = resolve_settings(build_parser().parse_args([]), base_settings)
    assert settings == base_settings


def test_resolve_settings_overrides(base_settings, tmp_path):
    args = build_parser().parse_args(["--mode", "github", "--root", str(tmp_path / "other"), "-vv"])

    settings = resolve_settings(args, base_settings)

    assert settings.mode == "github"
    assert settings.packages_root == (tmp_path / "other").resolve()
    assert settings.log_level == "DEBUG"
    assert base_settings.mode == "local"


def test_single_verbose_is_info(base_settings):
    settings = resolve_settings(build_parser().parse_args(["-v"]), base_settings.model_copy(update={"log_level": "WARNING"}))
    assert settings.log_level == "INFO"


@pytest.mark.parametrize(("mode", "expected"), [("local", LocalSource), ("github", GitHubSource)])
def test_build_source_by_mode(base_settings, mode, expected):
    settings = base_settings.model_copy(update={"mode": mode})
    source = build_source(settings, GeneralSettings(_env_file=None, github_token="ghp_test"))
    assert isinstance(source, expected)


def test_build_deps_local(base_settings):
    deps = build_deps(base_settings, GeneralSettings(_env_file=None))

    assert deps.registry.ids() == ["react-core", "react-form", "react-queries", "react-pages"]
    assert deps.registry.lookup("react-form").source.root_directory == Path(base_settings.packages_root) / "form"


def test_main_exits_on_invalid_registry(tmp_path, monkeypatch):
    monkeypatch.setattr("pkgdocs.cli.init_observability", lambda settings, service_name: None)

    with pytest.raises(SystemExit) as exc_info:
        main(["--registry", str(tmp_path / "missing.json"), "--root", str(tmp_path)])

    assert exc_info.value.code == 1
