from mcp import types

from kg_memory_mcp import registry

EXPECTED_ORDER = [
    "check_health",
    "create_entities",
    "create_relations",
    "add_observations",
    "delete_entities",
    "delete_observations",
    "delete_relations",
    "read_graph",
    "search_nodes",
    "open_nodes",
    "get_patterns",
    "get_temporal_graph",
    "find_path",
]

EXPECTED_REQUIRED = {
    "check_health": [],
    "create_entities": ["entities"],
    "create_relations": ["relations"],
    "add_observations": ["observations"],
    "delete_entities": ["entityNames"],
    "delete_observations": ["deletions"],
    "delete_relations": ["relations"],
    "read_graph": [],
    "search_nodes": ["query"],
    "open_nodes": ["names"],
    "get_patterns": [],
    "get_temporal_graph": ["startDate", "endDate"],
    "find_path": ["from", "to"],
}


def _schema(name: str) -> dict:
    spec = registry.get_tool(name)
    assert spec is not None
    return spec.input_schema()


def test_catalog_order_is_stable():
    assert registry.tool_names() == EXPECTED_ORDER
    assert [t.name for t in registry.list_tools()] == EXPECTED_ORDER


def test_required_fields_per_tool():
    for name, required in EXPECTED_REQUIRED.items():
        assert _schema(name).get("required", []) == required, name


def test_every_tool_renders_as_mcp_tool_with_object_schema():
    for tool in registry.list_tools():
        assert isinstance(tool, types.Tool)
        assert tool.description
        assert tool.inputSchema["type"] == "object"
        assert isinstance(tool.inputSchema["properties"], dict)


def test_patterns_category_is_an_optional_enum():
    category = _schema("get_patterns")["properties"]["category"]
    assert category["enum"] == ["entity", "relation"]


def test_find_path_max_depth_is_optional_integer():
    max_depth = _schema("find_path")["properties"]["maxDepth"]
    assert max_depth["type"] == "integer"
    assert max_depth["default"] == 3


def test_entity_items_describe_nested_shape():
    items = _schema("create_entities")["properties"]["entities"]["items"]
    assert items["required"] == ["name", "entityType", "observations"]
    assert items["properties"]["observations"] == {
        "type": "array",
        "description": "An array of observation contents associated with the entity",
        "items": {"type": "string"},
    }
    confidence = items["properties"]["metadata"]["properties"]["confidence"]
    assert (confidence["minimum"], confidence["maximum"]) == (0, 1)
    assert items["properties"]["tags"]["items"] == {"type": "string"}


def test_relation_items_carry_temporal_window():
    items = _schema("create_relations")["properties"]["relations"]["items"]
    assert items["required"] == ["from", "to", "relationType"]
    temporal = items["properties"]["temporal"]
    assert set(temporal["properties"]) == {"startDate", "endDate", "isActive"}
    assert items["properties"]["bidirectional"]["type"] == "boolean"


def test_delete_relations_only_needs_the_composite_key():
    items = _schema("delete_relations")["properties"]["relations"]["items"]
    assert set(items["properties"]) == {"from", "to", "relationType"}


def test_unknown_name_lookup():
    assert registry.get_tool("nope") is None
