"""
Property-based tests for the tool registry.

Covers category and tag lookups used by mode resolution.
"""

import allure
import pytest
from hypothesis import given, settings, strategies as st

from modeguard.tools import (
    BUILTIN_TOOLS,
    MCP_CATEGORY,
    MCP_TAG,
    TOOL_METADATA,
    ToolDefinition,
    ToolRegistry,
    create_default_registry,
    get_builtin_tools,
)


# Strategies for generating test data

@st.composite
def tool_list_strategy(draw, max_size=15):
    """Generate tools with unique names."""
    names = draw(st.lists(
        st.text(alphabet="abcdefghijklmnop_", min_size=1, max_size=10),
        max_size=max_size,
        unique=True,
    ))
    return [
        ToolDefinition(
            name=name,
            description=f"{name} tool",
            category=draw(st.sampled_from(["Files", "files", "Net", "Shell"])),
            tags=draw(st.lists(st.sampled_from(["read", "Write", "net"]), max_size=3, unique=True)),
        )
        for name in names
    ]


@allure.feature("Tool Registry")
@allure.story("Category lookup partitions the registry")
@allure.severity(allure.severity_level.CRITICAL)
@settings(max_examples=100)
@given(tools=tool_list_strategy())
def test_categories_partition_tools(tools):
    """Every tool appears under exactly one distinct category (ignoring case)."""
    registry = ToolRegistry(tools)

    seen = []
    for category in {c.lower() for c in registry.categories}:
        seen.extend(t.name for t in registry.get_tools_by_category(category))

    assert sorted(seen) == sorted(t.name for t in tools)


@allure.feature("Tool Registry")
@allure.story("Tag lookup matches has_tag")
@allure.severity(allure.severity_level.NORMAL)
@settings(max_examples=100)
@given(tools=tool_list_strategy(), tag=st.sampled_from(["read", "READ", "write", "net", "other"]))
def test_tag_lookup_matches_has_tag(tools, tag):
    registry = ToolRegistry(tools)

    found = [t.name for t in registry.get_tools_by_tag(tag)]

    assert found == [t.name for t in tools if t.has_tag(tag)]


def test_builtin_tools_carry_metadata():
    tools = get_builtin_tools()

    assert [t.name for t in tools] == [t["function"]["name"] for t in BUILTIN_TOOLS]
    for tool in tools:
        category, tags = TOOL_METADATA[tool.name]
        assert tool.category == category
        assert tool.tags == list(tags)
        assert tool.parameters["type"] == "object"


def test_openai_format_round_trip_keeps_schema():
    tool = get_builtin_tools()[0]

    again = ToolDefinition.from_openai_format(tool.to_openai_format())

    assert again == tool


def test_unknown_openai_tool_lands_in_general():
    tool = ToolDefinition.from_openai_format({
        "type": "function",
        "function": {"name": "custom_tool", "description": "Custom"},
    })

    assert tool.category == "General"
    assert tool.tags == []
    assert tool.parameters == {}


def test_default_registry_lookups():
    registry = create_default_registry()

    assert len(registry) == len(BUILTIN_TOOLS)
    assert "read_file" in registry
    assert [t.name for t in registry.get_tools_by_category("filesystem")] == []
    assert [t.name for t in registry.get_tools_by_category("fileoperations")] == [
        "read_file", "list_directory", "write_file", "create_directory",
    ]
    assert [t.name for t in registry.get_tools_by_tag("destructive")] == ["delete_github_file"]
    assert "GitHub" in registry.categories
    assert "query" in registry.tags


@pytest.mark.parametrize("name", ["", None])
def test_empty_lookup_names_return_nothing(name):
    registry = create_default_registry()

    assert registry.get_tools_by_category(name) == []
    assert registry.get_tools_by_tag(name) == []


@pytest.mark.parametrize("name", ["", "   "])
def test_register_rejects_blank_name(name):
    registry = ToolRegistry()

    with pytest.raises(ValueError):
        registry.register(ToolDefinition(name=name, description=""))


def test_register_replaces_same_name():
    registry = ToolRegistry()
    registry.register(ToolDefinition(name="probe", description="old", category="A"))
    registry.register(ToolDefinition(name="probe", description="new", category="B"))

    assert len(registry) == 1
    assert registry.get("probe").description == "new"
    assert registry.get_tools_by_category("A") == []


def test_mcp_tools_get_mcp_category_and_tag():
    registry = ToolRegistry()

    tool = registry.add_mcp_tool({
        "name": "fetch_docs",
        "description": "Fetch documentation",
        "inputSchema": {"type": "object", "properties": {}},
    })

    assert tool.category == MCP_CATEGORY
    assert tool.tags == [MCP_TAG]
    assert tool.parameters == {"type": "object", "properties": {}}
    assert registry.get_tools_by_category("mcp") == [tool]


def test_unregister():
    registry = create_default_registry()

    assert registry.unregister("run_command")
    assert not registry.unregister("run_command")
    assert registry.get("run_command") is None
    assert registry.get_tools_by_category("SystemOperations") == []
