"""GitHub REST API content source.

Reads files through the contents endpoint, lists files through the git trees
endpoint, and delegates search to the code search endpoint. A bearer token is
optional; without one GitHub applies a much lower rate limit, and code search
answers 401.
"""

import logging
from datetime import UTC, datetime
from urllib.parse import quote

import httpx

from pkgdocs.sources.base import (
	CodeSearchPage,
	ContentSource,
	ListResult,
	ReadResult,
	is_source_path,
	normalize_relative_path,
)
from pkgdocs.types import (
	BrokenInvariant,
	NotFound,
	PackageDescriptor,
	PathTraversal,
	RemoteLocation,
	ResolvedFile,
	SearchMatch,
	Success,
	TransportFailure,
)

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"

RAW_MEDIA_TYPE = "application/vnd.github.raw+json"
TEXT_MATCH_MEDIA_TYPE = "application/vnd.github.text-match+json"

# GitHub caps code search pages at 100 items
SEARCH_PAGE_SIZE = 100

# Entry types in a contents-endpoint directory listing
DIRECTORY_ENTRY_TYPES = frozenset({"file", "dir", "symlink", "submodule"})


class GitHubSource(ContentSource):
	"""Reads package content from GitHub repositories."""

	def __init__(
		self,
		token: str = "",
		api_url: str = GITHUB_API_URL,
		timeout: float = 30.0,
		hosted_search: bool = True,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> None:
		self.hosted_search = hosted_search
		self._has_token = bool(token)

		headers = {
			"Accept": "application/vnd.github+json",
			"X-GitHub-Api-Version": API_VERSION,
			"User-Agent": "pkgdocs",
		}
		if token:
			headers["Authorization"] = f"Bearer {token}"
		else:
			logger.warning("No GitHub token configured - requests are subject to the unauthenticated rate limit")

		self._client = httpx.AsyncClient(
			base_url=api_url,
			headers=headers,
			timeout=timeout,
			follow_redirects=True,
			transport=transport,
		)

	async def aclose(self) -> None:
		await self._client.aclose()

	# ─────────────────────────────────────────────────────────────────────────
	# HTTP helpers
	# ─────────────────────────────────────────────────────────────────────────

	@staticmethod
	def _location(package: PackageDescriptor) -> RemoteLocation:
		location = package.source
		if not isinstance(location, RemoteLocation):
			raise BrokenInvariant(f"Package {package.id} has no remote repository")
		return location

	@staticmethod
	def _repo_path(location: RemoteLocation, relative_path: str) -> str:
		root = location.root.strip("/")
		return f"{root}/{relative_path}" if root else relative_path

	async def _get(
		self,
		url: str,
		params: dict[str, str | int] | None = None,
		accept: str | None = None,
	) -> httpx.Response | TransportFailure:
		headers = {"Accept": accept} if accept else None
		try:
			return await self._client.get(url, params=params, headers=headers)
		except httpx.TimeoutException:
			return TransportFailure(f"timed out requesting {url}")
		except httpx.RequestError as e:
			return TransportFailure(f"{type(e).__name__}: {e}")

	def _failure(self, response: httpx.Response) -> TransportFailure:
		"""Map a non-success response to a TransportFailure, detecting rate limits."""
		status = response.status_code
		if status in (403, 429) and response.headers.get("x-ratelimit-remaining") == "0":
			reset = response.headers.get("x-ratelimit-reset", "")
			when = datetime.fromtimestamp(int(reset), UTC).isoformat() if reset.isdigit() else "unknown"
			message = f"GitHub API rate limit exceeded (resets at {when})"
			if not self._has_token:
				message += "; set GITHUB_TOKEN to raise the limit"
			logger.warning(message)
			return TransportFailure(message, status)

		try:
			detail = response.json().get("message", "")
		except (ValueError, AttributeError):
			detail = ""

		message = detail or response.reason_phrase or response.text[:200]
		logger.error(f"GitHub API {response.request.url} failed (status {status}): {message}")
		return TransportFailure(message, status)

	# ─────────────────────────────────────────────────────────────────────────
	# ContentSource
	# ─────────────────────────────────────────────────────────────────────────

	async def read_file(self, package: PackageDescriptor, relative_path: str) -> ReadResult:
		location = self._location(package)
		normalized = normalize_relative_path(relative_path)
		if isinstance(normalized, PathTraversal):
			logger.warning(f"Rejected path outside {package.id} root: {relative_path}")
			return normalized

		path = self._repo_path(location, normalized)
		logger.debug(f"Fetching {location.repo}@{location.branch}:{path}")

		response = await self._get(
			f"/repos/{location.repo}/contents/{quote(path)}",
			params={"ref": location.branch},
			accept=RAW_MEDIA_TYPE,
		)
		if isinstance(response, TransportFailure):
			return response
		if response.status_code == 404:
			return NotFound(f"{package.id}/{relative_path}")
		if not response.is_success:
			return self._failure(response)
		if _is_directory_listing(response):
			return NotFound(f"{package.id}/{relative_path}")

		return Success(ResolvedFile(relative_path=relative_path, content=response.text, package_id=package.id))

	async def list_source_files(self, package: PackageDescriptor) -> ListResult:
		location = self._location(package)
		response = await self._get(
			f"/repos/{location.repo}/git/trees/{quote(location.branch)}",
			params={"recursive": "1"},
		)
		if isinstance(response, TransportFailure):
			return response
		if response.status_code == 404:
			return NotFound(f"{location.repo}@{location.branch}")
		if not response.is_success:
			return self._failure(response)

		try:
			data = response.json()
		except ValueError:
			return TransportFailure("tree listing is not valid JSON", response.status_code)

		if data.get("truncated"):
			logger.warning(f"Tree listing for {location.describe()} was truncated by GitHub")

		root = location.root.strip("/")
		prefix = f"{root}/" if root else ""
		files = []
		for entry in data.get("tree", []):
			if entry.get("type") != "blob":
				continue
			path = entry.get("path", "")
			if prefix:
				if not path.startswith(prefix):
					continue
				path = path[len(prefix) :]
			if is_source_path(path):
				files.append(path)

		files.sort()
		logger.debug(f"Listed {len(files)} source files for {package.id}")
		return Success(files)

	async def search_code(
		self,
		package: PackageDescriptor,
		pattern: str,
		limit: int,
	) -> Success[CodeSearchPage] | TransportFailure:
		"""Search a repository with GitHub code search.

		Hits are whole files: GitHub does not report line numbers, so each
		SearchMatch has line_number=None and carries the file's html_url. The
		first text-match fragment line, when present, becomes line_text.
		The pattern is sent as a quoted literal ahead of the repo/path scope.
		"""
		location = self._location(package)
		query = f"{_quote_literal(pattern)} repo:{location.repo}"
		if location.root:
			query += f" path:{location.root.strip('/')}"

		per_page = min(SEARCH_PAGE_SIZE, max(limit, 1))
		matches: list[SearchMatch] = []
		total = 0
		page = 1
		while len(matches) < limit:
			response = await self._get(
				"/search/code",
				params={"q": query, "per_page": per_page, "page": page},
				accept=TEXT_MATCH_MEDIA_TYPE,
			)
			if isinstance(response, TransportFailure):
				return response
			if not response.is_success:
				return self._failure(response)

			try:
				data = response.json()
			except ValueError:
				return TransportFailure("code search response is not valid JSON", response.status_code)

			total = data.get("total_count", 0)
			items = data.get("items", [])
			for item in items[: limit - len(matches)]:
				matches.append(self._to_match(package, location, item))

			if len(items) < per_page or page * per_page >= total:
				break
			page += 1

		logger.debug(f"Code search in {location.repo} for '{pattern}': {len(matches)} of {total}")
		return Success(CodeSearchPage(total_count=total, matches=matches))

	def _to_match(self, package: PackageDescriptor, location: RemoteLocation, item: dict) -> SearchMatch:
		path = item.get("path", "")
		root = location.root.strip("/")
		if root and path.startswith(f"{root}/"):
			path = path[len(root) + 1 :]

		line_text = ""
		for text_match in item.get("text_matches") or []:
			fragment_lines = [line.strip() for line in text_match.get("fragment", "").splitlines() if line.strip()]
			if fragment_lines:
				line_text = fragment_lines[0]
				break

		return SearchMatch(
			package_id=package.id,
			file_path=path,
			line_number=None,
			line_text=line_text,
			url=item.get("html_url"),
		)


def _quote_literal(pattern: str) -> str:
	"""Quote a pattern so search qualifiers inside it (repo:, path:, OR) are plain text."""
	escaped = pattern.replace("\\", "\\\\").replace('"', '\\"')
	return f'"{escaped}"'


def _is_directory_listing(response: httpx.Response) -> bool:
	"""The contents endpoint answers a directory path with a JSON array of entries."""
	if not response.headers.get("content-type", "").startswith("application/json"):
		return False
	try:
		data = response.json()
	except ValueError:
		return False
	return isinstance(data, list) and all(
		isinstance(entry, dict) and entry.get("type") in DIRECTORY_ENTRY_TYPES for entry in data
	)
