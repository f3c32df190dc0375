"""Shared test fixtures: a local package tree, registries, deps, and an MCP client."""

import json
from collections.abc import Callable
from pathlib import Path

import httpx
import logfire
import pytest
import pytest_asyncio
from fastmcp.client import Client

from pkgdocs.deps import Deps
from pkgdocs.registry import Registry, builtin_registry
from pkgdocs.server import build_server
from pkgdocs.sources import GitHubSource, LocalSource

CORE_README = "# React Core\n\nModular React framework.\n"
FORM_README = "# React Form\n\nBuild forms with `useForm`.\n\n```tsx\nconst form = useForm(config);\n```\n"

USE_FORM_TSX = """import { useState } from 'react';

export function useForm(config) {
  const [values] = useState({});
  return useForm.helpers(values);
}
"""

PACKAGE_FILES: dict[str, str] = {
	# react-core (root)
	"README.md": CORE_README,
	"package.json": json.dumps({"name": "@gaddario98/react-core", "version": "2.3.1"}),
	"index.ts": "export * from './form';\nexport * from './queries';\nexport * from './pages';\n",
	"node_modules/lib/index.js": "export const useForm = () => null;\n",
	"dist/index.js": "export const useForm = () => null;\n",
	".git/hooks/pre-commit.js": "useForm\n",
	# react-form
	"form/README.md": FORM_README,
	"form/types.ts": "export interface FormConfig {\n  fields: string[];\n}\n",
	"form/hooks/useForm.tsx": USE_FORM_TSX,
	"form/notes.md": "useForm notes, not source\n",
	# react-queries
	"queries/README.md": "# React Queries\n",
	"queries/types.ts": "export type QueryKey = readonly unknown[];\n",
	"queries/useQuery.ts": "export const useQueryApi = () => null;\n// call a(b here\n",
	# react-pages
	"pages/README.md": "# React Pages\n",
	"pages/types.ts": "export interface PageProps {\n  id: string;\n}\n",
	"pages/PageGenerator.tsx": "import { useForm } from '../form';\n\nexport const PageGenerator = () => useForm({});\n",
	"pages/legacy.jsx": "const a = 1;\n",
	"pages/util.js": "export const noop = () => {};\n",
	"pages/.claude/agent.ts": "export const useForm = 1;\n",
	"pages/.github/workflow.js": "useForm\n",
}


def write_tree(root: Path, files: dict[str, str]) -> None:
	for relative_path, content in files.items():
		path = root / relative_path
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(content, encoding="utf-8")


@pytest.fixture(scope="session", autouse=True)
def _configure_logfire() -> None:
	logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def packages_root(tmp_path: Path) -> Path:
	"""A react-base-core checkout with core at the root and three sub-packages."""
	root = tmp_path / "react-base-core"
	write_tree(root, PACKAGE_FILES)
	return root


@pytest.fixture
def registry(packages_root: Path) -> Registry:
	return builtin_registry("local", packages_root)


@pytest.fixture
def deps(registry: Registry) -> Deps:
	return Deps(registry=registry, source=LocalSource())


@pytest.fixture
def github_registry(tmp_path: Path) -> Registry:
	return builtin_registry("github", tmp_path)


@pytest.fixture
def make_github_source() -> Callable[..., GitHubSource]:
	"""Build a GitHubSource whose HTTP traffic goes to a handler function."""

	def factory(handler: Callable[[httpx.Request], httpx.Response], token: str = "", hosted_search: bool = True):
		return GitHubSource(token=token, hosted_search=hosted_search, transport=httpx.MockTransport(handler))

	return factory


@pytest_asyncio.fixture
async def mcp_client(deps: Deps):
	async with Client(transport=build_server(deps, name="pkgdocs-test")) as client:
		yield client
