"""Service layer between MCP tools and content sources.

Each operation:
- Resolves the target package through the registry
- Delegates to the content source or the search engine
- Wraps the outcome in an Envelope (success or error, never an exception)
"""

import json
import logging
from functools import wraps
from typing import Any, Awaitable, Callable

import logfire
import sentry_sdk

from pkgdocs import search as search_engine
from pkgdocs.deps import Deps
from pkgdocs.registry import Registry
from pkgdocs.sources.base import normalize_relative_path
from pkgdocs.types import (
	MAX_RESULTS_LIMIT,
	Envelope,
	NotFound,
	PackageDescriptor,
	PathTraversal,
	SearchMatch,
	SearchQuery,
	Success,
	ToolError,
)

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"
ALL_PACKAGES = "all"


def envelope_tool(fn: Callable[..., Awaitable[Envelope]]) -> Callable[..., Awaitable[Envelope]]:
	"""Convert ToolError raised by an operation into an error Envelope.

	BrokenInvariant is not caught: configuration errors halt the server.
	"""

	@wraps(fn)
	async def wrapped(*args: Any, **kwargs: Any) -> Envelope:
		try:
			return await fn(*args, **kwargs)
		except ToolError as e:
			sentry_sdk.capture_exception(e)
			logfire.exception(str(e), tool=fn.__name__)
			return Envelope.error(str(e))

	return wrapped


def unknown_package(registry: Registry, package_id: str, allow_all: bool = False) -> Envelope:
	"""Error envelope naming the bad id and listing every valid id in registry order."""
	available = ", ".join(registry.ids())
	suffix = f", or use '{ALL_PACKAGES}'" if allow_all else ""
	return Envelope.error(f'Package "{package_id}" not found. Available: {available}{suffix}')


# =============================================================================
# Operations
# =============================================================================


@envelope_tool
async def list_packages(deps: Deps) -> Envelope:
	"""List every registered package with its description and link."""
	version = await read_version(deps)
	logger.debug(f"list_packages: {len(deps.registry)} packages, version={version}")

	entries = []
	for package in deps.registry:
		lines = [
			f"### {package.display_name}",
			f"- **ID**: `{package.id}`",
			f"- **Description**: {package.description}",
		]
		if package.link:
			lines.append(f"- **Link**: {package.link}")
		lines.append(f"- **Source**: `{package.source.describe()}`")
		entries.append("\n".join(lines))

	heading = f"# {deps.registry.title} (v{version})" if version != UNKNOWN_VERSION else f"# {deps.registry.title}"
	return Envelope.ok(
		f"{heading}\n\n"
		f"**Version**: {version}\n\n" + "\n\n".join(entries) + "\n\n---\n\n"
		"**Usage**: Use `get_package_docs` to read the full README, `get_package_types` for type "
		"definitions, `get_package_source` to browse files, or `search_source` to find specific patterns."
	)


async def read_version(deps: Deps) -> str:
	"""Read the canonical package's manifest version, or UNKNOWN_VERSION."""
	canonical = deps.registry.canonical_package
	match await deps.source.read_file(canonical, deps.registry.manifest_path):
		case Success(resolved):
			pass
		case failure:
			logger.info(f"Manifest for {canonical.id} unavailable: {failure}")
			return UNKNOWN_VERSION

	try:
		manifest = json.loads(resolved.content)
	except json.JSONDecodeError as e:
		logger.warning(f"Manifest for {canonical.id} is not valid JSON: {e}")
		return UNKNOWN_VERSION

	version = manifest.get("version") if isinstance(manifest, dict) else None
	if not isinstance(version, str) or not version:
		return UNKNOWN_VERSION
	return version


@envelope_tool
async def get_docs(deps: Deps, package_id: str) -> Envelope:
	"""Return a package's README verbatim."""
	package = deps.registry.lookup(package_id)
	if package is None:
		return unknown_package(deps.registry, package_id)

	logger.debug(f"get_docs: package={package.id}")
	match await deps.source.read_readme(package):
		case Success(resolved):
			return Envelope.ok(resolved.content)
		case failure:
			return Envelope.error(f"README not available for {package.display_name} ({package.readme_path}): {failure}")


@envelope_tool
async def get_types(deps: Deps, package_id: str) -> Envelope:
	"""Return a package's type definitions, or the aggregate of the others'."""
	package = deps.registry.lookup(package_id)
	if package is None:
		return unknown_package(deps.registry, package_id)

	logger.debug(f"get_types: package={package.id}, types_path={package.types_path}")
	match await deps.source.read_types(package, deps.registry):
		case Success(resolved) if package.types_path is None:
			return Envelope.ok(resolved.content)
		case Success(resolved):
			return Envelope.ok(f"// {package.display_name}: {package.types_path}\n\n{resolved.content}")
		case failure:
			return Envelope.error(f"Types not available for {package.display_name} ({package.types_path}): {failure}")


@envelope_tool
async def get_source(deps: Deps, package_id: str, file_path: str | None = None) -> Envelope:
	"""List a package's source files, or read one file when file_path is given."""
	package = deps.registry.lookup(package_id)
	if package is None:
		return unknown_package(deps.registry, package_id)

	if not file_path:
		logger.debug(f"get_source: listing package={package.id}")
		match await deps.source.list_source_files(package):
			case Success(files):
				return Envelope.ok(_format_file_listing(package, files))
			case failure:
				return Envelope.error(f"Cannot list source files for {package.display_name}: {failure}")

	logger.debug(f"get_source: package={package.id}, file_path={file_path}")
	if isinstance(normalize_relative_path(file_path), PathTraversal):
		return Envelope.error(f"Error: path traversal not allowed: {file_path}")

	match await deps.source.read_file(package, file_path):
		case Success(resolved):
			return Envelope.ok(f"// {package.display_name}: {file_path}\n\n{resolved.content}")
		case PathTraversal():
			return Envelope.error(f"Error: path traversal not allowed: {file_path}")
		case NotFound():
			return Envelope.error(await _missing_file_message(deps, package, file_path))
		case failure:
			return Envelope.error(f"Cannot read {file_path} from {package.display_name}: {failure}")


@envelope_tool
async def search_source(deps: Deps, package_id: str, pattern: str, max_results: int = 20) -> Envelope:
	"""Search source text of one package, or every package with 'all'."""
	if package_id.lower() == ALL_PACKAGES:
		packages: list[PackageDescriptor] = list(deps.registry)
		scope_label = "any package"
	else:
		package = deps.registry.lookup(package_id)
		if package is None:
			return unknown_package(deps.registry, package_id, allow_all=True)
		packages = [package]
		scope_label = package.id

	if not pattern or not pattern.strip():
		raise ToolError("Search pattern cannot be empty")
	if not 0 <= max_results <= MAX_RESULTS_LIMIT:
		raise ToolError(f"max_results must be between 0 and {MAX_RESULTS_LIMIT}, got {max_results}")

	query = SearchQuery(pattern=pattern, scope=package_id, max_results=max_results)
	outcome = await search_engine.search(deps.source, packages, query)

	if not outcome.matches:
		if outcome.failures and len(outcome.failures) == len(packages):
			return Envelope.error(f'Search for "{pattern}" failed:\n' + "\n".join(f"- {f}" for f in outcome.failures))
		message = f'No results found for pattern "{pattern}" in {scope_label}'
		return Envelope.ok(message + _format_failures(outcome.failures))

	return Envelope.ok(_format_search_results(pattern, outcome) + _format_failures(outcome.failures))


# =============================================================================
# Formatting
# =============================================================================


def _format_file_listing(package: PackageDescriptor, files: list[str]) -> str:
	listing = "\n".join(f"- `{f}`" for f in files) if files else "(no source files found)"
	return (
		f"# Source files in {package.display_name}\n\n{listing}\n\n---\n"
		"Use `get_package_source` with a `file_path` to read a specific file."
	)


async def _missing_file_message(deps: Deps, package: PackageDescriptor, file_path: str) -> str:
	message = f"File not found: {file_path}"
	if not deps.source.hint_missing_files:
		return message

	match await deps.source.list_source_files(package):
		case Success(files) if files:
			return f"{message}\n\nAvailable files:\n" + "\n".join(f"- {f}" for f in files)
		case _:
			return message


def _format_match(match: SearchMatch) -> str:
	if match.line_number is None:
		location = f"[`{match.file_path}`]({match.url})" if match.url else f"`{match.file_path}`"
		snippet = f"\n```\n{match.line_text}\n```" if match.line_text else ""
		return f"**{match.package_id}** - {location}{snippet}"
	return f"**{match.package_id}** - `{match.file_path}:{match.line_number}`\n```\n{match.line_text}\n```"


def _format_search_results(pattern: str, outcome: search_engine.SearchOutcome) -> str:
	count = len(outcome.matches)
	found = f"Found {count} match{'es' if count != 1 else ''}"
	if outcome.total_available is not None and outcome.total_available > count:
		found += f" (host reported {outcome.total_available} matching files)"

	body = "\n\n".join(_format_match(m) for m in outcome.matches)
	return f'# Search results for "{pattern}"\n\n{found}:\n\n{body}'


def _format_failures(failures: list[str]) -> str:
	if not failures:
		return ""
	return "\n\n---\nSkipped:\n" + "\n".join(f"- {f}" for f in failures)
