import pytest

from toolbridge.mcp.catalogue import rest
from toolbridge.mcp.errors import DuplicateToolError
from toolbridge.mcp.registry import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MCPRegistry,
    SchemaRegistry,
    page_window,
    search_tools,
)
from toolbridge.mcp.schema import ToolDescriptor
from toolbridge.mcp.server import MCPServer


def _descriptor(name: str, category: str | None = None) -> ToolDescriptor:
    return ToolDescriptor(name=name, description=f"{name} tool", category=category)


def test_list_tools_preserves_registration_order():
    registry = SchemaRegistry([_descriptor("c_tool"), _descriptor("a_tool"), _descriptor("b_tool")])
    assert [tool.name for tool in registry.list_tools()] == ["c_tool", "a_tool", "b_tool"]
    assert len(registry) == 3
    assert "a_tool" in registry
    assert registry.get_tool("missing") is None


def test_duplicate_names_fail_at_construction():
    with pytest.raises(DuplicateToolError) as excinfo:
        SchemaRegistry([_descriptor("dup"), _descriptor("dup")])
    assert excinfo.value.name == "dup"


def test_descriptor_wire_shape_uses_input_schema_alias():
    descriptor = ToolDescriptor.model_validate(
        {"name": "x", "description": "d", "inputSchema": {"type": "object", "required": ["a"]}}
    )
    assert descriptor.required_fields == ["a"]
    assert descriptor.to_wire() == {
        "name": "x",
        "description": "d",
        "inputSchema": {"type": "object", "required": ["a"]},
    }


def test_category_defaults_to_name_prefix():
    assert _descriptor("github_get_repo").resolved_category == "github"
    assert _descriptor("github_get_repo", category="repos").resolved_category == "repos"


def test_search_filters_by_query_and_category_then_pages():
    descriptors = [
        _descriptor("github_list_repos"),
        _descriptor("github_get_repo"),
        _descriptor("vercel_list_projects"),
        _descriptor("vercel_get_project"),
    ]
    total, page = search_tools(descriptors, query="LIST")
    assert total == 2
    assert [d.name for d in page] == ["github_list_repos", "vercel_list_projects"]

    total, page = search_tools(descriptors, category="vercel", offset=1, limit=1)
    assert total == 2
    assert [d.name for d in page] == ["vercel_get_project"]


def test_search_clamps_offset_and_limit():
    descriptors = [_descriptor(f"t_{index}") for index in range(MAX_PAGE_SIZE + 10)]
    total, page = search_tools(descriptors, offset=-5, limit=10_000)
    assert total == MAX_PAGE_SIZE + 10
    assert len(page) == MAX_PAGE_SIZE
    _, page = search_tools(descriptors, limit=0)
    assert len(page) == DEFAULT_PAGE_SIZE
    _, page = search_tools(descriptors, limit=-3)
    assert len(page) == 1


def test_page_window_echoes_clamped_values():
    assert page_window(-4, 0) == (0, DEFAULT_PAGE_SIZE)
    assert page_window(7, 10_000) == (7, MAX_PAGE_SIZE)
    assert page_window(0, 3) == (0, 3)


def _server(server_id: str, *names: str, client) -> MCPServer:
    entries = [rest(name, name, "GET", f"/{name}") for name in names]
    return MCPServer(server_id, entries, client)


def test_mcp_registry_routes_tools_to_owning_server(stub_client):
    registry = MCPRegistry()
    first = _server("one", "one_a", "one_b", client=stub_client)
    second = _server("two", "two_a", client=stub_client)
    registry.register_server(first)
    registry.register_server(second)

    assert [tool.name for tool in registry.list_tools()] == ["one_a", "one_b", "two_a"]
    assert registry.get_server_for_tool("two_a") is second
    assert registry.get_server_for_tool("nope") is None
    assert registry.describe() == {"one_a": "one", "one_b": "one", "two_a": "two"}


def test_mcp_registry_rejects_tool_claimed_by_another_server(stub_client):
    registry = MCPRegistry()
    registry.register_server(_server("one", "shared_tool", client=stub_client))
    with pytest.raises(DuplicateToolError):
        registry.register_server(_server("two", "shared_tool", client=stub_client))
    assert [server.server_id for server in registry.list_servers()] == ["one"]


def test_mcp_registry_reregistration_replaces_and_removal_purges(stub_client):
    registry = MCPRegistry()
    registry.register_server(_server("one", "one_a", client=stub_client))
    registry.register_server(_server("one", "one_b", client=stub_client))
    assert [tool.name for tool in registry.list_tools()] == ["one_b"]

    registry.remove_server("one")
    assert registry.list_tools() == []
    assert registry.list_servers() == []


def test_mcp_registry_failed_reregistration_keeps_previous_server(stub_client):
    registry = MCPRegistry()
    original = _server("one", "one_a", client=stub_client)
    registry.register_server(original)
    registry.register_server(_server("two", "two_a", client=stub_client))

    with pytest.raises(DuplicateToolError):
        registry.register_server(_server("one", "one_b", "two_a", client=stub_client))

    assert registry.get_server_for_tool("one_a") is original
    assert [tool.name for tool in registry.list_tools()] == ["one_a", "two_a"]
    assert registry.describe() == {"one_a": "one", "two_a": "two"}


def test_mcp_registry_reregistration_may_keep_its_own_tool_names(stub_client):
    registry = MCPRegistry()
    registry.register_server(_server("one", "one_a", client=stub_client))
    replacement = _server("one", "one_a", "one_b", client=stub_client)
    registry.register_server(replacement)
    assert registry.get_server_for_tool("one_a") is replacement
    assert [tool.name for tool in registry.list_tools()] == ["one_a", "one_b"]
