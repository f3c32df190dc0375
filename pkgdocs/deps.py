"""Shared dependency container for pkgdocs services."""

from pydantic import BaseModel, ConfigDict

from pkgdocs.registry import Registry
from pkgdocs.sources import ContentSource


class Deps(BaseModel):
    """Dependency container passed to every tool operation.

    Built once at startup and shared read-only by all requests:
    - registry: the immutable package table
    - source: the content backend chosen for this deployment
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    registry: Registry
    source: ContentSource
