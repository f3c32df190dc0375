"""Content source contract shared by the local and GitHub backends.

A ContentSource turns (package, relative path) into file text and lists a
package's source files. Expected failures come back as typed results
(NotFound, TransportFailure, PathTraversal, Unreadable), never as exceptions,
so the dispatch layer can always answer.
"""

from __future__ import annotations

import logging
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pkgdocs.types import (
	Failure,
	LocalLocation,
	NotFound,
	PackageDescriptor,
	PathTraversal,
	ResolvedFile,
	SearchMatch,
	Success,
	TransportFailure,
)

if TYPE_CHECKING:
	from pkgdocs.registry import Registry

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = frozenset({".ts", ".tsx", ".js", ".jsx"})

# Skipped wherever they appear in a path
IGNORED_DIRS = frozenset({"node_modules", "dist", ".git", ".github", ".claude"})

ReadResult = Success[ResolvedFile] | Failure
ListResult = Success[list[str]] | NotFound | TransportFailure


def is_source_path(relative_path: str) -> bool:
	"""Check a POSIX relative path against the extension allowlist and ignored dirs."""
	parts = relative_path.split("/")
	if any(part in IGNORED_DIRS for part in parts):
		return False
	return posixpath.splitext(parts[-1])[1] in SOURCE_EXTENSIONS


def normalize_relative_path(relative_path: str) -> str | PathTraversal:
	"""Collapse '.' and '..' segments, rejecting paths that leave the package root.

	Examples:
	    normalize_relative_path("hooks/../types.ts")   -> "types.ts"
	    normalize_relative_path("../../user")          -> PathTraversal
	    normalize_relative_path("/etc/passwd")         -> PathTraversal
	"""
	if relative_path.startswith("/"):
		return PathTraversal(relative_path)

	normalized = posixpath.normpath(relative_path)
	if normalized == ".." or normalized.startswith("../"):
		return PathTraversal(relative_path)
	return normalized


@dataclass
class CodeSearchPage:
	"""File-level hits from a hosted code search."""

	total_count: int
	matches: list[SearchMatch]


class ContentSource(ABC):
	"""Resolves package files from one kind of backend.

	Capability flags:
	    hosted_search: search is delegated to the host. A source that sets it
	        must override search_code; search() refuses a source that does not.
	    line_level_search: search matches carry line numbers
	    hint_missing_files: missing-file errors can list the valid paths cheaply
	"""

	hosted_search: bool = False
	hint_missing_files: bool = False

	@property
	def line_level_search(self) -> bool:
		return not self.hosted_search

	@abstractmethod
	async def list_source_files(self, package: PackageDescriptor) -> ListResult:
		"""List source file paths under the package root, sorted."""

	@abstractmethod
	async def read_file(self, package: PackageDescriptor, relative_path: str) -> ReadResult:
		"""Read one file relative to the package root."""

	async def search_code(
		self,
		package: PackageDescriptor,
		pattern: str,
		limit: int,
	) -> Success[CodeSearchPage] | TransportFailure:
		"""Run a hosted code search. Only sources with hosted_search implement this."""
		raise NotImplementedError(f"{type(self).__name__} does not support hosted search")

	async def aclose(self) -> None:
		"""Release any network resources."""

	async def read_readme(self, package: PackageDescriptor) -> ReadResult:
		return await self.read_file(package, package.readme_path)

	async def read_types(self, package: PackageDescriptor, registry: Registry) -> ReadResult:
		"""Read a package's type definitions.

		Packages without a types file get an aggregate of every other package's
		types, in registry order. A sub-package that cannot be read gets a
		"not available" banner instead of failing the aggregate.
		"""
		if package.types_path is not None:
			return await self.read_file(package, package.types_path)

		sections = []
		for other in registry.others(package):
			if other.types_path is None:
				continue

			banner = f"// ═══ {other.display_name} types ═══\n// File: {_types_file_label(package, other)}"
			match await self.read_file(other, other.types_path):
				case Success(resolved):
					sections.append(f"{banner}\n\n{resolved.content}")
				case failure:
					logger.warning(f"Types for {other.id} not available: {failure}")
					sections.append(f"{banner}\n\n// (not available: {failure})")

		if not sections:
			body = "// No other package provides type definitions."
		else:
			body = "\n\n".join(sections)

		content = f"// {package.display_name} aggregated types\n// Re-exported from sub-packages:\n\n{body}"
		return Success(ResolvedFile(relative_path="", content=content, package_id=package.id))


def _types_file_label(package: PackageDescriptor, other: PackageDescriptor) -> str:
	"""Where other's types file lives, relative to the aggregating package when possible."""
	if isinstance(package.source, LocalLocation) and isinstance(other.source, LocalLocation):
		path = other.source.root_directory / other.types_path
		if path.is_relative_to(package.source.root_directory):
			return path.relative_to(package.source.root_directory).as_posix()
	return f"{other.source.describe()}/{other.types_path}"
