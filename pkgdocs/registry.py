"""Package registry: the static table of servable packages.

The registry is built once at startup (from the builtin table or a JSON
registry file) and never mutated afterwards.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from pkgdocs.types import BrokenInvariant, LocalLocation, PackageDescriptor, RemoteLocation

logger = logging.getLogger(__name__)


class Registry:
	"""Immutable, ordered table of PackageDescriptors."""

	def __init__(
		self,
		packages: Sequence[PackageDescriptor],
		namespace: str | None = None,
		title: str = "Packages",
		canonical: str | None = None,
		manifest_path: str = "package.json",
	) -> None:
		if not packages:
			raise BrokenInvariant("Registry must contain at least one package")

		seen: set[str] = set()
		for package in packages:
			if package.id in seen:
				raise BrokenInvariant(f"Duplicate package id in registry: {package.id}")
			seen.add(package.id)

		self._packages = tuple(packages)
		self.namespace = namespace
		self.title = title
		self.manifest_path = manifest_path

		canonical_id = canonical or self._packages[0].id
		if canonical_id not in seen:
			raise BrokenInvariant(f"Canonical package '{canonical_id}' is not in the registry")
		self._canonical_id = canonical_id

	def __iter__(self) -> Iterator[PackageDescriptor]:
		return iter(self._packages)

	def __len__(self) -> int:
		return len(self._packages)

	@property
	def packages(self) -> tuple[PackageDescriptor, ...]:
		return self._packages

	@property
	def canonical_package(self) -> PackageDescriptor:
		"""Package whose manifest carries the version reported by list_packages."""
		return next(p for p in self._packages if p.id == self._canonical_id)

	def ids(self) -> list[str]:
		return [p.id for p in self._packages]

	def lookup(self, identifier: str) -> PackageDescriptor | None:
		"""Find a package by id, display name, or namespaced id.

		Examples (namespace "@gaddario98"):
		    lookup("react-form")                -> react-form
		    lookup("@gaddario98/react-form")    -> react-form
		    lookup("nope")                      -> None
		"""
		short = identifier
		if self.namespace and identifier.startswith(f"{self.namespace}/"):
			short = identifier[len(self.namespace) + 1 :]

		for package in self._packages:
			if identifier in (package.id, package.display_name) or short == package.id:
				return package
		return None

	def others(self, package: PackageDescriptor) -> list[PackageDescriptor]:
		"""All packages except the given one, in registry order."""
		return [p for p in self._packages if p.id != package.id]


# =============================================================================
# Registry files
# =============================================================================


class RegistryFile(BaseModel):
	"""On-disk JSON registry format."""

	namespace: str | None = Field(default=None, description="Prefix stripped during lookup, e.g. '@gaddario98'")
	title: str = Field(default="Packages", description="Heading used by list_packages")
	canonical: str | None = Field(default=None, description="Package id whose manifest carries the version")
	manifest_path: str = Field(default="package.json", description="Manifest path relative to the canonical root")
	packages: list[PackageDescriptor] = Field(..., min_length=1)


def load_registry(path: Path, packages_root: Path) -> Registry:
	"""Load a registry from a JSON file.

	Relative local root directories are resolved against packages_root.

	Raises:
	    BrokenInvariant: If the file is missing, not JSON, or fails validation
	"""
	logger.info(f"Loading registry from {path}")
	try:
		raw = json.loads(path.read_text(encoding="utf-8"))
		parsed = RegistryFile.model_validate(raw)
	except OSError as e:
		raise BrokenInvariant(f"Cannot read registry file {path}: {e}") from e
	except json.JSONDecodeError as e:
		raise BrokenInvariant(f"Registry file {path} is not valid JSON: {e}") from e
	except ValidationError as e:
		raise BrokenInvariant(f"Registry file {path} is invalid: {e}") from e

	packages = []
	for package in parsed.packages:
		source = package.source
		if isinstance(source, LocalLocation) and not source.root_directory.is_absolute():
			source = LocalLocation(root_directory=packages_root / source.root_directory)
			package = package.model_copy(update={"source": source})
		packages.append(package)

	return Registry(
		packages,
		namespace=parsed.namespace,
		title=parsed.title,
		canonical=parsed.canonical,
		manifest_path=parsed.manifest_path,
	)


# =============================================================================
# Builtin table
# =============================================================================

NAMESPACE = "@gaddario98"
GITHUB_OWNER = "gaddario98"

# (id, sub-directory in the local checkout, description, types file)
_BUILTIN_PACKAGES: list[tuple[str, str, str, str | None]] = [
	(
		"react-core",
		"",
		"Modular, type-safe React framework: state, forms, queries, pages, localization, auth, notifications",
		None,  # re-exports from the sub-packages
	),
	(
		"react-form",
		"form",
		"Dynamic, type-safe form builder on TanStack React Form with Jotai state",
		"types.ts",
	),
	(
		"react-queries",
		"queries",
		"Unified data fetching layer on TanStack Query + Jotai: queries, mutations, WebSockets",
		"types.ts",
	),
	(
		"react-pages",
		"pages",
		"Page orchestrator: forms + queries + SEO + lazy loading + cross-platform",
		"types.ts",
	),
]


def builtin_registry(mode: Literal["local", "github"], packages_root: Path) -> Registry:
	"""Build the builtin @gaddario98 registry for the given deployment mode."""
	packages = []
	for package_id, subdir, description, types_path in _BUILTIN_PACKAGES:
		if mode == "github":
			source: LocalLocation | RemoteLocation = RemoteLocation(repo=f"{GITHUB_OWNER}/{package_id}")
		else:
			root = packages_root / subdir if subdir else packages_root
			source = LocalLocation(root_directory=root)

		packages.append(
			PackageDescriptor(
				id=package_id,
				display_name=f"{NAMESPACE}/{package_id}",
				description=description,
				source=source,
				types_path=types_path,
				link=f"https://github.com/{GITHUB_OWNER}/{package_id}",
			)
		)

	return Registry(
		packages,
		namespace=NAMESPACE,
		title=f"{NAMESPACE} React Packages",
		canonical="react-core",
	)
