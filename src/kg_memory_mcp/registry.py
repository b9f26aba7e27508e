"""
Tool catalog served on tools/list.

Pure data built once at import. The schemas are advisory: they tell the host
what to send, the dispatcher only looks tools up by name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from mcp import types


@dataclass(frozen=True)
class Field:
    name: str
    type: str
    description: str = ""
    required: bool = False
    items: Optional[Any] = None  # "string" / "object" item type, or a tuple of Fields for object items
    fields: tuple["Field", ...] = ()  # nested object properties
    enum: tuple[str, ...] = ()
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    default: Optional[Any] = None

    def schema(self) -> dict:
        out: dict[str, Any] = {"type": self.type}
        if self.description:
            out["description"] = self.description
        if self.enum:
            out["enum"] = list(self.enum)
        if self.minimum is not None:
            out["minimum"] = self.minimum
        if self.maximum is not None:
            out["maximum"] = self.maximum
        if self.default is not None:
            out["default"] = self.default
        if self.type == "array":
            if isinstance(self.items, tuple):
                out["items"] = object_schema(self.items)
            else:
                out["items"] = {"type": self.items or "string"}
        if self.type == "object" and self.fields:
            out.update(object_schema(self.fields))
        return out


def object_schema(fields: tuple[Field, ...]) -> dict:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {f.name: f.schema() for f in fields},
    }
    required = [f.name for f in fields if f.required]
    if required:
        schema["required"] = required
    return schema


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    fields: tuple[Field, ...] = ()

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    def input_schema(self) -> dict:
        return object_schema(self.fields)

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema())


# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------

_PROPERTIES = Field("properties", "object", "Free-form key/value properties")

_ENTITY_METADATA = Field(
    "metadata",
    "object",
    "Provenance of the entity",
    fields=(
        Field("source", "string", "Where the information came from"),
        Field("confidence", "number", "Confidence score", minimum=0, maximum=1),
        Field("llmContext", "string", "Conversation context the entity was extracted from"),
    ),
)

_ENTITY = (
    Field("name", "string", "The name of the entity", required=True),
    Field("entityType", "string", "The type of the entity", required=True),
    Field(
        "observations",
        "array",
        "An array of observation contents associated with the entity",
        required=True,
        items="string",
    ),
    _ENTITY_METADATA,
    _PROPERTIES,
    Field("status", "string", "Lifecycle status of the entity"),
    Field("tags", "array", "Tags attached to the entity", items="string"),
)

_RELATION_KEY = (
    Field("from", "string", "The name of the entity where the relation starts", required=True),
    Field("to", "string", "The name of the entity where the relation ends", required=True),
    Field("relationType", "string", "The type of the relation", required=True),
)

_RELATION = _RELATION_KEY + (
    Field("metadata", "object", "Provenance of the relation"),
    Field(
        "temporal",
        "object",
        "Validity window of the relation",
        fields=(
            Field("startDate", "string", "ISO-8601 start of validity"),
            Field("endDate", "string", "ISO-8601 end of validity"),
            Field("isActive", "boolean", "Whether the relation currently holds"),
        ),
    ),
    _PROPERTIES,
    Field("context", "string", "Context in which the relation was stated"),
    Field("strength", "number", "Strength of the relation"),
    Field("bidirectional", "boolean", "Treat the relation as holding in both directions"),
)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "check_health",
        "Check the health of the memory API and which features (base, temporal, patterns, pathfinding) it supports",
    ),
    ToolSpec(
        "create_entities",
        "Create multiple new entities in the knowledge graph",
        (Field("entities", "array", "Entities to create", required=True, items=_ENTITY),),
    ),
    ToolSpec(
        "create_relations",
        "Create multiple new relations between entities in the knowledge graph. Relations should be in active voice",
        (Field("relations", "array", "Relations to create", required=True, items=_RELATION),),
    ),
    ToolSpec(
        "add_observations",
        "Add new observations to existing entities in the knowledge graph",
        (
            Field(
                "observations",
                "array",
                "Observations to add, grouped by entity",
                required=True,
                items=(
                    Field("entityName", "string", "The name of the entity to add the observations to", required=True),
                    Field("contents", "array", "An array of observation contents to add", required=True, items="string"),
                ),
            ),
        ),
    ),
    ToolSpec(
        "delete_entities",
        "Delete multiple entities and their associated relations from the knowledge graph",
        (Field("entityNames", "array", "An array of entity names to delete", required=True, items="string"),),
    ),
    ToolSpec(
        "delete_observations",
        "Delete specific observations from entities in the knowledge graph",
        (
            Field(
                "deletions",
                "array",
                "Observations to delete, grouped by entity",
                required=True,
                items=(
                    Field("entityName", "string", "The name of the entity containing the observations", required=True),
                    Field("observations", "array", "An array of observations to delete", required=True, items="string"),
                ),
            ),
        ),
    ),
    ToolSpec(
        "delete_relations",
        "Delete multiple relations from the knowledge graph",
        (Field("relations", "array", "An array of relations to delete", required=True, items=_RELATION_KEY),),
    ),
    ToolSpec("read_graph", "Read the entire knowledge graph"),
    ToolSpec(
        "search_nodes",
        "Search for nodes in the knowledge graph based on a query",
        (
            Field(
                "query",
                "string",
                "The search query to match against entity names, types, and observation content",
                required=True,
            ),
        ),
    ),
    ToolSpec(
        "open_nodes",
        "Open specific nodes in the knowledge graph by their names",
        (Field("names", "array", "An array of entity names to retrieve", required=True, items="string"),),
    ),
    ToolSpec(
        "get_patterns",
        "Get usage patterns of entity types and relation types observed in the knowledge graph",
        (Field("category", "string", "Restrict patterns to one category", enum=("entity", "relation")),),
    ),
    ToolSpec(
        "get_temporal_graph",
        "Get the knowledge graph as it was valid within a time window",
        (
            Field("startDate", "string", "ISO-8601 start of the window", required=True),
            Field("endDate", "string", "ISO-8601 end of the window", required=True),
        ),
    ),
    ToolSpec(
        "find_path",
        "Find a path of relations connecting two entities",
        (
            Field("from", "string", "Name of the entity the path starts at", required=True),
            Field("to", "string", "Name of the entity the path ends at", required=True),
            Field("maxDepth", "integer", "Maximum number of hops to search", minimum=1, default=3),
        ),
    ),
)

_BY_NAME: dict[str, ToolSpec] = {t.name: t for t in TOOLS}


def get_tool(name: str) -> ToolSpec | None:
    return _BY_NAME.get(name)


def tool_names() -> list[str]:
    return [t.name for t in TOOLS]


def list_tools() -> list[types.Tool]:
    return [t.to_mcp_tool() for t in TOOLS]
