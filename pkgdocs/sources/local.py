"""Filesystem content source."""

import logging
import os
from pathlib import Path

from pkgdocs.sources.base import IGNORED_DIRS, ContentSource, ListResult, ReadResult, is_source_path
from pkgdocs.types import (
	BrokenInvariant,
	LocalLocation,
	NotFound,
	PackageDescriptor,
	PathTraversal,
	ResolvedFile,
	Success,
	Unreadable,
)

logger = logging.getLogger(__name__)


class LocalSource(ContentSource):
	"""Reads package content from directories on disk."""

	hint_missing_files = True

	@staticmethod
	def _root(package: PackageDescriptor) -> Path:
		location = package.source
		if not isinstance(location, LocalLocation):
			raise BrokenInvariant(f"Package {package.id} has no local root directory")
		return location.root_directory.resolve()

	def resolve_path(self, package: PackageDescriptor, relative_path: str) -> Path | PathTraversal | NotFound:
		"""Resolve a relative path inside the package root.

		Symlinks and '..' segments are resolved first; anything landing outside
		the root is rejected.
		Paths the OS cannot represent (e.g. an embedded NUL) are NotFound.
		"""
		root = self._root(package)
		try:
			candidate = (root / relative_path).resolve()
		except (ValueError, OSError) as e:
			logger.warning(f"Unresolvable path in {package.id}: {relative_path!r} ({e})")
			return NotFound(f"{package.id}/{relative_path}")

		if not candidate.is_relative_to(root):
			logger.warning(f"Rejected path outside {package.id} root: {relative_path}")
			return PathTraversal(relative_path)
		return candidate

	async def read_file(self, package: PackageDescriptor, relative_path: str) -> ReadResult:
		resolved = self.resolve_path(package, relative_path)
		if isinstance(resolved, (PathTraversal, NotFound)):
			return resolved

		try:
			is_file = resolved.is_file()
		except OSError:
			is_file = False
		if not is_file:
			return NotFound(f"{package.id}/{relative_path}")

		try:
			content = resolved.read_text(encoding="utf-8")
		except UnicodeDecodeError:
			return Unreadable(relative_path, "not UTF-8 text")
		except OSError as e:
			return Unreadable(relative_path, e.strerror or str(e))

		return Success(ResolvedFile(relative_path=relative_path, content=content, package_id=package.id))

	async def list_source_files(self, package: PackageDescriptor) -> ListResult:
		root = self._root(package)
		if not root.is_dir():
			logger.warning(f"Source root for {package.id} does not exist: {root}")
			return Success([])

		files = []
		for dirpath, dirnames, filenames in os.walk(root):
			# Prune in place so ignored trees are never descended into
			dirnames[:] = [d for d in dirnames if d not in IGNORED_DIRS]
			rel_dir = Path(dirpath).relative_to(root)
			for filename in filenames:
				rel_path = (rel_dir / filename).as_posix()
				if is_source_path(rel_path):
					files.append(rel_path)

		files.sort()
		logger.debug(f"Listed {len(files)} source files for {package.id}")
		return Success(files)
