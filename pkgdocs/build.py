"""Factory functions for building the registry, content source, and deps."""

import logging

from pkgdocs.deps import Deps
from pkgdocs.registry import Registry, builtin_registry, load_registry
from pkgdocs.settings import GeneralSettings, PkgDocsSettings
from pkgdocs.sources import ContentSource, GitHubSource, LocalSource
from pkgdocs.types import BrokenInvariant, LocalLocation, RemoteLocation

logger = logging.getLogger(__name__)


def build_registry(settings: PkgDocsSettings) -> Registry:
    """Build the registry from the configured file, or the builtin table.

    Raises:
        BrokenInvariant: If the registry file is invalid or a package's
            location does not match the deployment mode
    """
    if settings.registry_file is not None:
        registry = load_registry(settings.registry_file, settings.packages_root)
    else:
        registry = builtin_registry(settings.mode, settings.packages_root)

    expected = RemoteLocation if settings.mode == "github" else LocalLocation
    for package in registry:
        if not isinstance(package.source, expected):
            raise BrokenInvariant(
                f"Package {package.id} has a {package.source.kind} location but the server runs in {settings.mode} mode"
            )

    logger.debug(f"Registry ready: {', '.join(registry.ids())}")
    return registry


def build_source(settings: PkgDocsSettings, general: GeneralSettings) -> ContentSource:
    """Create the content source for the configured mode."""
    if settings.mode == "github":
        return GitHubSource(
            token=general.github_token,
            api_url=settings.github_api_url,
            timeout=settings.http_timeout,
            hosted_search=settings.hosted_search,
        )
    return LocalSource()


def build_deps(settings: PkgDocsSettings, general: GeneralSettings) -> Deps:
    """Build deps for the server process.

    Raises:
        BrokenInvariant: If configuration is invalid
    """
    registry = build_registry(settings)
    return Deps(registry=registry, source=build_source(settings, general))
