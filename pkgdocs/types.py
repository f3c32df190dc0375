"""Type definitions for pkgdocs.

This module contains:
- Exception hierarchy for structured error handling
- Result types for source and search return values
- Domain models shared across layers
- The Envelope returned by every tool operation
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Exceptions
# =============================================================================


class PkgDocsError(Exception):
	"""Base for all pkgdocs errors."""

	pass


class BrokenInvariant(PkgDocsError):
	"""Setup/config error - cannot continue (e.g., duplicate package ids)."""

	pass


class ToolError(PkgDocsError):
	"""Tool input rejected - the caller should try different arguments."""

	pass


# =============================================================================
# Result Types
# =============================================================================

T = TypeVar("T")


@dataclass
class Success(Generic[T]):
	"""Operation returned data successfully."""

	data: T


@dataclass(frozen=True)
class NotFound:
	"""A package, file, or document does not exist."""

	target: str

	def __str__(self) -> str:
		return f"not found: {self.target}"


@dataclass(frozen=True)
class TransportFailure:
	"""The content host answered with a non-success status or could not be reached."""

	message: str
	status_code: int | None = None

	def __str__(self) -> str:
		if self.status_code is None:
			return f"request failed: {self.message}"
		return f"request failed (HTTP {self.status_code}): {self.message}"


@dataclass(frozen=True)
class PathTraversal:
	"""A relative path resolved outside its package root."""

	path: str

	def __str__(self) -> str:
		return f"path traversal not allowed: {self.path}"


@dataclass(frozen=True)
class Unreadable:
	"""The file exists but its content could not be decoded or read."""

	path: str
	reason: str

	def __str__(self) -> str:
		return f"cannot read {self.path}: {self.reason}"


Failure = NotFound | TransportFailure | PathTraversal | Unreadable


# =============================================================================
# Domain Models
# =============================================================================


class RemoteLocation(BaseModel):
	"""Package content hosted in a remote repository."""

	model_config = ConfigDict(frozen=True)

	kind: Literal["remote"] = "remote"
	repo: str = Field(..., description="Repository coordinate, e.g. 'gaddario98/react-form'")
	branch: str = Field(default="main", description="Branch or ref to read from")
	root: str = Field(default="", description="Package directory inside the repository ('' = repo root)")

	def describe(self) -> str:
		suffix = f"/{self.root}" if self.root else ""
		return f"{self.repo}@{self.branch}{suffix}"


class LocalLocation(BaseModel):
	"""Package content stored in a local directory."""

	model_config = ConfigDict(frozen=True)

	kind: Literal["local"] = "local"
	root_directory: Path = Field(..., description="Directory holding the package sources")

	def describe(self) -> str:
		return str(self.root_directory)


SourceLocation = Annotated[RemoteLocation | LocalLocation, Field(discriminator="kind")]


class PackageDescriptor(BaseModel):
	"""One servable package and where to find its content."""

	model_config = ConfigDict(frozen=True)

	id: str = Field(..., min_length=1, description="Short unique slug (e.g., 'react-form')")
	display_name: str = Field(..., description="Fully-qualified name (e.g., '@gaddario98/react-form')")
	description: str = Field(default="", description="One-line summary")
	source: SourceLocation
	readme_path: str = Field(default="README.md", description="README path relative to the source root")
	types_path: str | None = Field(
		default=None,
		description="Type definitions path relative to the source root (None = aggregate other packages)",
	)
	link: str = Field(default="", description="External link, e.g. the repository page")


class ResolvedFile(BaseModel):
	"""A retrieved source artifact."""

	relative_path: str
	content: str
	package_id: str


class SearchMatch(BaseModel):
	"""One located occurrence of a search pattern.

	Hosted code search reports whole files, so line_number is None for those
	hits and url points at the file on the host.
	"""

	package_id: str
	file_path: str
	line_number: int | None = Field(default=None, ge=1, description="1-based line number")
	line_text: str = ""
	url: str | None = None


# Upper bound for SearchQuery.max_results
MAX_RESULTS_LIMIT = 100


class SearchQuery(BaseModel):
	"""Input to the search engine."""

	pattern: str = Field(..., description="Case-insensitive regex; invalid regexes match literally")
	scope: str = Field(default="all", description="Package id or 'all'")
	max_results: int = Field(default=20, ge=0, le=MAX_RESULTS_LIMIT, description="Cap on returned matches")


class Envelope(BaseModel):
	"""Uniform response returned by every tool operation."""

	content: str
	is_error: bool = False

	@classmethod
	def ok(cls, content: str) -> "Envelope":
		return cls(content=content)

	@classmethod
	def error(cls, content: str) -> "Envelope":
		return cls(content=content, is_error=True)
