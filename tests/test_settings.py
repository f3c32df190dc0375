"""Tests for pkgdocs.settings module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from pkgdocs.paths import get_default_packages_root
from pkgdocs.settings import GeneralSettings, PkgDocsSettings


def test_defaults():
    """Local mode against the default content root."""
    with patch.dict(os.environ, {}, clear=True):
        settings = PkgDocsSettings(_env_file=None)

    assert settings.mode == "local"
    assert settings.packages_root == get_default_packages_root()
    assert settings.registry_file is None
    assert settings.hosted_search is True
    assert settings.github_api_url == "https://api.github.com"


def test_env_overrides(tmp_path):
    """PKGDOCS_* variables override defaults."""
    env = {
        "PKGDOCS_MODE": "github",
        "PKGDOCS_PACKAGES_ROOT": str(tmp_path),
        "PKGDOCS_HOSTED_SEARCH": "false",
        "PKGDOCS_HTTP_TIMEOUT": "5",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = PkgDocsSettings(_env_file=None)

    assert settings.mode == "github"
    assert settings.packages_root == Path(tmp_path)
    assert settings.hosted_search is False
    assert settings.http_timeout == 5.0


def test_invalid_mode_rejected():
    with patch.dict(os.environ, {"PKGDOCS_MODE": "ftp"}, clear=True):
        with pytest.raises(ValidationError):
            PkgDocsSettings(_env_file=None)


def test_github_token_is_unprefixed():
    """GITHUB_TOKEN is read without the PKGDOCS_ prefix."""
    with patch.dict(os.environ, {"GITHUB_TOKEN": "ghp_env"}, clear=True):
        settings = GeneralSettings(_env_file=None)

    assert settings.github_token == "ghp_env"
    assert settings.sentry_dsn == ""
