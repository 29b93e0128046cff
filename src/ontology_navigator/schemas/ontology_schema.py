"""
Ontology View Schema

Defines the canonical types for the explored subgraph: resource categories,
relationship kinds, labels, and the nodes and edges held by the view graph.
"""

import hashlib
from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

ResourceId = str

LITERAL_ID_PREFIX = "literal:"
LITERAL_LABEL_MAX = 30


class ResourceCategory(Enum):
    """Display categories for explored resources"""
    CLASS = "class"
    PROPERTY = "property"
    INSTANCE = "instance"
    SHAPE = "shape"


class NodeKind(Enum):
    """Whether a view node stands for a named resource or a literal value"""
    RESOURCE = "resource"
    LITERAL = "literal"


class NodeState(Enum):
    """Expansion lifecycle of a view node"""
    UNEXPANDED = "unexpanded"
    EXPANDING = "expanding"
    EXPANDED = "expanded"


class RelationKind(Enum):
    """Relationship kinds drawn between view nodes"""
    SUBCLASS_OF = "subclass_of"
    DOMAIN = "domain"
    RANGE = "range"
    GENERIC = "generic"


@dataclass(frozen=True)
class Label:
    """One candidate label of a resource"""
    text: str
    language: Optional[str]
    source_property: ResourceId


@dataclass(frozen=True)
class NamespaceEntry:
    """Prefix binding used for URI compression"""
    prefix: str
    uri: str


@dataclass
class ViewNode:
    """Node representation in the explored view"""
    id: ResourceId
    label: str
    category: ResourceCategory = ResourceCategory.INSTANCE
    kind: NodeKind = NodeKind.RESOURCE
    state: NodeState = NodeState.UNEXPANDED
    uri_display: Optional[str] = None
    types: List[ResourceId] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)

    @property
    def expanded(self) -> bool:
        return self.state is NodeState.EXPANDED


@dataclass(frozen=True)
class ViewEdge:
    """Edge representation in the explored view"""
    id: str
    source: ResourceId
    target: ResourceId
    relation: str
    label: str
    kind: RelationKind = RelationKind.GENERIC


def edge_id(source: ResourceId, relation: str, target: ResourceId) -> str:
    """Deterministic edge identity, so rediscovering a relation is idempotent"""
    return f"{source} -[{relation}]-> {target}"


def literal_node_id(source: ResourceId, predicate: ResourceId, value: str) -> ResourceId:
    """Deterministic id for a literal object hanging off (source, predicate)"""
    digest = hashlib.sha1(
        "\x1f".join((source, predicate, value)).encode("utf-8")
    ).hexdigest()
    return f"{LITERAL_ID_PREFIX}{digest[:16]}"


def literal_display(value: str) -> str:
    """Truncated display form of a literal value"""
    if len(value) > LITERAL_LABEL_MAX:
        return value[:LITERAL_LABEL_MAX] + "..."
    return value
