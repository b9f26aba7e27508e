"""
Shapes of the memory API payloads.

The models only check that a response looks like a graph, a pattern list or a
health report. Callers hand back the payload exactly as received: nothing is
defaulted, coerced or dropped on the way through.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

Scalar = Union[str, int, float]


class _Remote(BaseModel):
    # Fields the remote service adds are tolerated.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class EntityMetadata(_Remote):
    source: Optional[str] = None
    confidence: Optional[float] = None
    llmContext: Optional[str] = None


class Entity(_Remote):
    name: str
    entityType: Optional[str] = None
    observations: Optional[List[Any]] = None
    metadata: Optional[EntityMetadata] = None
    properties: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    tags: Optional[List[Any]] = None


class Temporal(_Remote):
    startDate: Optional[Scalar] = None
    endDate: Optional[Scalar] = None
    isActive: Optional[bool] = None


class Relation(_Remote):
    from_: str = Field(alias="from")
    to: str
    relationType: str
    metadata: Optional[Dict[str, Any]] = None
    temporal: Optional[Temporal] = None
    properties: Optional[Dict[str, Any]] = None
    context: Optional[str] = None
    strength: Optional[float] = None
    bidirectional: Optional[bool] = None


class KnowledgeGraph(_Remote):
    entities: List[Entity] = Field(default_factory=list)
    relations: List[Relation] = Field(default_factory=list)


class Pattern(_Remote):
    category: str
    value: str
    frequency: Optional[float] = None
    lastUsed: Optional[Scalar] = None
    commonProperties: Optional[List[Any]] = None


class HealthFeatures(_Remote):
    base: Optional[bool] = None
    temporal: Optional[bool] = None
    patterns: Optional[bool] = None
    pathfinding: Optional[bool] = None


class HealthStatus(_Remote):
    status: str
    features: Optional[HealthFeatures] = None


def checked(model: Type[BaseModel], raw: Any) -> Any:
    """Validate `raw` against `model` and return `raw` itself, untouched."""
    model.model_validate(raw)
    return raw
