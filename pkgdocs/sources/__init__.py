"""Content sources: where package files come from.

- LocalSource: a directory tree on disk
- GitHubSource: repositories behind the GitHub REST API

Both implement ContentSource; the choice is fixed when the server is built.
"""

from pkgdocs.sources.base import IGNORED_DIRS, SOURCE_EXTENSIONS, CodeSearchPage, ContentSource, is_source_path
from pkgdocs.sources.github import GitHubSource
from pkgdocs.sources.local import LocalSource

__all__ = [
	"CodeSearchPage",
	"ContentSource",
	"GitHubSource",
	"IGNORED_DIRS",
	"LocalSource",
	"SOURCE_EXTENSIONS",
	"is_source_path",
]
