"""Tests for the FastMCP server."""

import pytest
from fastmcp.client import Client
from fastmcp.exceptions import ToolError


@pytest.mark.asyncio
async def test_list_tools(mcp_client: Client):
	"""Test that list_tools returns the five package tools."""
	tools = await mcp_client.list_tools()

	assert len(tools) == 5
	tool_names = {t.name for t in tools}
	assert tool_names == {
		"list_packages",
		"get_package_docs",
		"get_package_types",
		"get_package_source",
		"search_source",
	}


@pytest.mark.asyncio
async def test_tool_parameters_are_described(mcp_client: Client):
	tools = {t.name: t for t in await mcp_client.list_tools()}

	source_schema = tools["get_package_source"].inputSchema
	assert source_schema["required"] == ["package_id"]
	assert "react-form" in source_schema["properties"]["package_id"]["description"]

	search_schema = tools["search_source"].inputSchema
	assert "'all'" in search_schema["properties"]["package_id"]["description"]
	assert search_schema["properties"]["max_results"]["default"] == 20


@pytest.mark.asyncio
async def test_list_packages_tool(mcp_client: Client):
	result = await mcp_client.call_tool("list_packages", {})

	assert "@gaddario98 React Packages (v2.3.1)" in result.data
	assert "@gaddario98/react-pages" in result.data


@pytest.mark.asyncio
async def test_get_package_docs_tool(mcp_client: Client, packages_root):
	result = await mcp_client.call_tool("get_package_docs", {"package_id": "react-form"})
	assert result.data == (packages_root / "form" / "README.md").read_text()


@pytest.mark.asyncio
async def test_get_package_types_tool(mcp_client: Client):
	result = await mcp_client.call_tool("get_package_types", {"package_id": "react-core"})
	assert "aggregated types" in result.data


@pytest.mark.asyncio
async def test_get_package_source_tool(mcp_client: Client):
	listing = await mcp_client.call_tool("get_package_source", {"package_id": "react-form"})
	assert "`hooks/useForm.tsx`" in listing.data

	result = await mcp_client.call_tool(
		"get_package_source",
		{"package_id": "react-form", "file_path": "hooks/useForm.tsx"},
	)
	assert "export function useForm(config)" in result.data


@pytest.mark.asyncio
async def test_search_source_tool(mcp_client: Client):
	result = await mcp_client.call_tool(
		"search_source",
		{"package_id": "all", "pattern": "useForm", "max_results": 2},
	)

	assert "Found 2 matches" in result.data


@pytest.mark.asyncio
async def test_unknown_package_is_tool_error(mcp_client: Client):
	with pytest.raises(ToolError, match='Package "nope" not found'):
		await mcp_client.call_tool("get_package_docs", {"package_id": "nope"})


@pytest.mark.asyncio
async def test_traversal_is_tool_error(mcp_client: Client):
	with pytest.raises(ToolError, match="path traversal not allowed"):
		await mcp_client.call_tool(
			"get_package_source",
			{"package_id": "react-form", "file_path": "../../etc/passwd"},
		)


@pytest.mark.asyncio
async def test_max_results_above_limit_is_rejected(mcp_client: Client):
	with pytest.raises(ToolError):
		await mcp_client.call_tool(
			"search_source",
			{"package_id": "all", "pattern": "useForm", "max_results": 101},
		)


@pytest.mark.asyncio
async def test_list_resources(mcp_client: Client):
	resources = await mcp_client.list_resources()

	uris = {str(r.uri) for r in resources}
	assert uris == {
		"docs://react-core/readme",
		"docs://react-form/readme",
		"docs://react-queries/readme",
		"docs://react-pages/readme",
	}
	assert all(r.mimeType == "text/markdown" for r in resources)


@pytest.mark.asyncio
async def test_read_readme_resource(mcp_client: Client, packages_root):
	contents = await mcp_client.read_resource("docs://react-form/readme")
	assert contents[0].text == (packages_root / "form" / "README.md").read_text()
