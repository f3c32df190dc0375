"""FastMCP server for pkgdocs tools and resources.

This is the edge layer that:
1. Validates and parses MCP tool inputs
2. Calls service functions with the process Deps
3. Returns envelope content, or raises ToolError so the client sees isError
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from pydantic import Field

from pkgdocs import service
from pkgdocs.deps import Deps
from pkgdocs.types import MAX_RESULTS_LIMIT, Envelope, PackageDescriptor

logger = logging.getLogger(__name__)


def _unwrap(envelope: Envelope) -> str:
	if envelope.is_error:
		raise ToolError(envelope.content)
	return envelope.content


def build_server(deps: Deps, name: str = "pkgdocs") -> FastMCP:
	"""Create the MCP server for a registry and content source.

	The content source is fixed here for the lifetime of the server.
	"""
	registry = deps.registry
	package_help = "Package identifier: " + ", ".join(f"'{i}'" for i in registry.ids())

	# ─────────────────────────────────────────────────────────────────────────
	# Lifespan
	# ─────────────────────────────────────────────────────────────────────────

	@asynccontextmanager
	async def lifespan(server):
		"""Close the content source when the server shuts down."""
		try:
			yield
		finally:
			await deps.source.aclose()

	mcp = FastMCP(
		name=name,
		instructions=(
			f"Documentation and source code for {registry.title}. "
			"Start with list_packages, then read docs, types, or source files, or search across packages."
		),
		lifespan=lifespan,
	)

	# ─────────────────────────────────────────────────────────────────────────
	# Tools
	# ─────────────────────────────────────────────────────────────────────────

	@mcp.tool
	async def list_packages() -> str:
		"""List all available packages with their descriptions, version, and links."""
		return _unwrap(await service.list_packages(deps))

	@mcp.tool
	async def get_package_docs(
		package_id: Annotated[str, Field(description=package_help)],
	) -> str:
		"""Get the full README documentation for a specific package."""
		return _unwrap(await service.get_docs(deps, package_id))

	@mcp.tool
	async def get_package_types(
		package_id: Annotated[str, Field(description=package_help)],
	) -> str:
		"""Get the type definitions for a specific package.

		Packages without their own types file return the aggregated types of
		the packages they re-export.
		"""
		return _unwrap(await service.get_types(deps, package_id))

	@mcp.tool
	async def get_package_source(
		package_id: Annotated[str, Field(description=package_help)],
		file_path: Annotated[
			str | None,
			Field(
				description=(
					"Relative path to the file within the package (e.g., 'hooks/useFormManager.tsx'). "
					"Omit to list all source files."
				)
			),
		] = None,
	) -> str:
		"""Read a source file from a package, or list its source files.

		Use list_packages first to see available packages, then explore files.

		Examples:
		    - package_id="react-form" - list every source file
		    - package_id="react-form", file_path="hooks/useFormManager.tsx" - read one file
		"""
		return _unwrap(await service.get_source(deps, package_id, file_path))

	@mcp.tool
	async def search_source(
		package_id: Annotated[str, Field(description=f"{package_help}, or 'all' to search every package")],
		pattern: Annotated[str, Field(description="Search pattern (text or regex) to find in source files")],
		max_results: Annotated[
			int,
			Field(description="Maximum number of results to return", ge=0, le=MAX_RESULTS_LIMIT),
		] = 20,
	) -> str:
		"""Search for a pattern (text or regex) across the source files of a package.

		Matching is case-insensitive. Returns matching lines with file location.

		Examples:
		    - package_id="all", pattern="useForm" - search every package
		    - package_id="react-queries", pattern="useMutation\\(", max_results=5
		"""
		return _unwrap(await service.search_source(deps, package_id, pattern, max_results))

	# ─────────────────────────────────────────────────────────────────────────
	# Resources
	# ─────────────────────────────────────────────────────────────────────────

	for package in registry:
		_register_readme(mcp, deps, package)

	logger.debug(f"Built server {name} with {len(registry)} packages")
	return mcp


def _register_readme(mcp: FastMCP, deps: Deps, package: PackageDescriptor) -> None:
	@mcp.resource(
		f"docs://{package.id}/readme",
		name=f"{package.id}-readme",
		description=f"{package.display_name}: full README documentation",
		mime_type="text/markdown",
	)
	async def readme() -> str:
		envelope = await service.get_docs(deps, package.id)
		if envelope.is_error:
			raise ResourceError(envelope.content)
		return envelope.content
