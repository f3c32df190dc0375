"""Pattern search across package sources.

Two backends present the same SearchMatch shape:
- scan: list each package's files, read them, and test every line
- hosted: delegate to the source's code search (file-level hits, no line numbers)

Packages are searched one after another in the order given, and the search
stops as soon as max_results matches have been collected.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from pkgdocs.sources.base import ContentSource
from pkgdocs.types import BrokenInvariant, PackageDescriptor, SearchMatch, SearchQuery, Success

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
	"""Matches in discovery order, plus per-package failures that were skipped."""

	matches: list[SearchMatch] = field(default_factory=list)
	failures: list[str] = field(default_factory=list)
	# Hosted search only: total hits the host reported across searched packages
	total_available: int | None = None


def try_compile_regex(pattern: str) -> re.Pattern[str] | None:
	"""Compile pattern as a case-insensitive regex, or None if it is invalid."""
	try:
		return re.compile(pattern, re.IGNORECASE)
	except re.error:
		return None


def escape_and_compile_literal(pattern: str) -> re.Pattern[str]:
	"""Compile pattern as a case-insensitive literal substring."""
	return re.compile(re.escape(pattern), re.IGNORECASE)


def compile_pattern(pattern: str) -> re.Pattern[str]:
	"""Regex when valid, literal text otherwise (e.g. 'a(' matches 'a(')."""
	compiled = try_compile_regex(pattern)
	if compiled is None:
		logger.debug(f"Invalid regex {pattern!r}, falling back to literal match")
		return escape_and_compile_literal(pattern)
	return compiled


def scan_text(package_id: str, file_path: str, content: str, regex: re.Pattern[str], limit: int) -> list[SearchMatch]:
	"""Return up to limit line matches from one file, one per line, ascending."""
	matches = []
	for line_number, line in enumerate(content.split("\n"), start=1):
		if regex.search(line):
			matches.append(
				SearchMatch(
					package_id=package_id,
					file_path=file_path,
					line_number=line_number,
					line_text=line.strip(),
				)
			)
			if len(matches) >= limit:
				break
	return matches


async def search(
	source: ContentSource,
	packages: Sequence[PackageDescriptor],
	query: SearchQuery,
) -> SearchOutcome:
	"""Search packages in order, returning at most query.max_results matches."""
	outcome = SearchOutcome()
	if query.max_results <= 0:
		return outcome

	if source.hosted_search:
		if type(source).search_code is ContentSource.search_code:
			raise BrokenInvariant(f"{type(source).__name__} sets hosted_search but does not implement search_code")
		await _search_hosted(source, packages, query, outcome)
	else:
		await _search_scan(source, packages, query, outcome)

	logger.info(
		f"Search for {query.pattern!r} in {query.scope}: "
		f"{len(outcome.matches)} matches, {len(outcome.failures)} packages skipped"
	)
	return outcome


async def _search_scan(
	source: ContentSource,
	packages: Sequence[PackageDescriptor],
	query: SearchQuery,
	outcome: SearchOutcome,
) -> None:
	regex = compile_pattern(query.pattern)

	for package in packages:
		match await source.list_source_files(package):
			case Success(files):
				pass
			case failure:
				logger.warning(f"Cannot list files for {package.id}: {failure}")
				outcome.failures.append(f"{package.id}: {failure}")
				continue

		for file_path in files:
			match await source.read_file(package, file_path):
				case Success(resolved):
					remaining = query.max_results - len(outcome.matches)
					outcome.matches.extend(scan_text(package.id, file_path, resolved.content, regex, remaining))
				case failure:
					# Binary or vanished files are not worth reporting
					logger.debug(f"Skipping {package.id}/{file_path}: {failure}")

			if len(outcome.matches) >= query.max_results:
				return


async def _search_hosted(
	source: ContentSource,
	packages: Sequence[PackageDescriptor],
	query: SearchQuery,
	outcome: SearchOutcome,
) -> None:
	outcome.total_available = 0

	for package in packages:
		remaining = query.max_results - len(outcome.matches)
		match await source.search_code(package, query.pattern, remaining):
			case Success(page):
				outcome.total_available += page.total_count
				outcome.matches.extend(page.matches[:remaining])
			case failure:
				logger.warning(f"Code search failed for {package.id}: {failure}")
				outcome.failures.append(f"{package.id}: {failure}")

		if len(outcome.matches) >= query.max_results:
			return
