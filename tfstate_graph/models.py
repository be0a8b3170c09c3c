"""Pydantic models for Terraform/OpenTofu state records and the resource graph."""

from __future__ import annotations

import math
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
    model_validator,
)

MANAGED = "managed"
DATA = "data"


# ──────────────────────────── State (input) ───────────────────────────────────


def _check_finite(value: Any) -> None:
    """Reject NaN and Infinity, which the JSON parser accepts but JSON does not allow."""
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{value} is not a valid JSON number")
    if isinstance(value, dict):
        for item in value.values():
            _check_finite(item)
    elif isinstance(value, list):
        for item in value:
            _check_finite(item)


class _StateRecord(BaseModel):
    """Base for decoded state records.

    JSON ``null`` decodes as the field's zero value, the same as an absent key.
    Unknown keys are ignored.
    """

    @model_validator(mode="before")
    @classmethod
    def _nulls_as_absent(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Instance(_StateRecord):
    """One concrete instantiation of a resource (``count`` / ``for_each`` element)."""

    index_key: JsonValue = None
    dependencies: list[str] = Field(default_factory=list)
    attributes: dict[str, JsonValue] | None = None
    sensitive_attributes: JsonValue = Field(
        default=None,
        description="Sensitivity marker; its shape varies across Terraform releases",
    )

    @field_validator("dependencies", mode="before")
    @classmethod
    def _null_dependencies_as_empty(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ["" if dep is None else dep for dep in value]
        return value

    @field_validator("index_key", "attributes", "sensitive_attributes")
    @classmethod
    def _finite_numbers_only(cls, value: Any) -> Any:
        _check_finite(value)
        return value


class Resource(_StateRecord):
    """One resource declaration in state."""

    module: str = Field(default="", description="Module path, empty for the root module")
    mode: str = Field(default="", description="'managed' or 'data'")
    type: str = ""
    name: str = ""
    provider: str = Field(
        default="",
        description='Provider address, e.g. provider["registry.terraform.io/hashicorp/aws"]',
    )
    instances: list[Instance] = Field(default_factory=list)


class State(_StateRecord):
    """The subset of a ``terraform.tfstate`` document needed to build a graph."""

    version: int = 0
    terraform_version: str = ""
    serial: int = 0
    lineage: str = ""
    resources: list[Resource] = Field(default_factory=list)


# ──────────────────────────── Graph (output) ──────────────────────────────────


class _OmitEmpty(BaseModel):
    """Drops the fields listed in ``omit_empty`` from serialized output when empty."""

    omit_empty: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {k: v for k, v in data.items() if v or k not in self.omit_empty}


class InstanceInfo(_OmitEmpty):
    """A rendered instance of a grouped node."""

    omit_empty: ClassVar[frozenset[str]] = frozenset(
        {"index", "dependencies", "attributes", "created_at"}
    )

    addr: str = Field(description="Full address including the index suffix")
    index: str = Field(default="", description='Index suffix, e.g. [0] or ["key"]')
    dependencies: list[str] = Field(default_factory=list)
    attributes: dict[str, JsonValue] | None = None
    created_at: str = Field(default="", description="RFC 3339 timestamp when one is exposed")


class Node(_OmitEmpty):
    """One graph node per base address, grouping all of its instances."""

    omit_empty: ClassVar[frozenset[str]] = frozenset(
        {"module", "provider", "instances_count", "instances"}
    )

    id: str
    addr: str
    mode: str = ""
    type: str = ""
    name: str = ""
    module: str = ""
    provider: str = ""
    instances_count: int = 0
    instances: list[InstanceInfo] = Field(default_factory=list)

    @property
    def is_managed(self) -> bool:
        return self.mode == MANAGED


class Edge(BaseModel):
    """``source`` must exist before ``target`` can be created or updated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)


class Graph(BaseModel):
    """Grouped resource nodes and the dependency edges between them."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def summary(self) -> dict[str, int]:
        """Count nodes by resource type."""
        counts: dict[str, int] = {}
        for n in self.nodes:
            counts[n.type] = counts.get(n.type, 0) + 1
        return counts
