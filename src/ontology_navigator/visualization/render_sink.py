"""
Rendering sink contract.

The navigator only writes to a sink; the view graph state remains the source
of truth for what is displayed.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..schemas.ontology_schema import (
    NodeKind, RelationKind, ResourceCategory, ViewEdge, ViewNode,
)


class RenderSink(ABC):
    """Write-only target for view graph changes"""

    @abstractmethod
    def upsert_node(
        self,
        node_id: str,
        label: str,
        category: ResourceCategory,
        kind: NodeKind,
        title: Optional[str] = None
    ):
        """Add a node or update the one with the same id"""
        pass

    @abstractmethod
    def upsert_edge(self, edge_id: str, source: str, target: str, label: str, kind: RelationKind):
        """Add an edge or update the one with the same id"""
        pass

    @abstractmethod
    async def request_layout(self):
        """Re-run the layout; returns once the layout is ready"""
        pass

    @abstractmethod
    def clear_all(self):
        pass


class NullRenderSink(RenderSink):
    """Sink for headless sessions"""

    def upsert_node(self, node_id, label, category, kind, title=None):
        pass

    def upsert_edge(self, edge_id, source, target, label, kind):
        pass

    async def request_layout(self):
        pass

    def clear_all(self):
        pass


def node_tooltip(node: ViewNode) -> str:
    lines = [node.label, f"Type: {node.category.value.title()}"]
    if node.kind is NodeKind.RESOURCE:
        lines.append(f"URI: {node.id}")
        if node.uri_display and node.uri_display != node.id:
            lines.append(f"Short: {node.uri_display}")
    else:
        lines[1] = "Type: Literal"
    if node.expanded:
        lines.append("Expanded")
    return "\n".join(lines)


def render_node(sink: RenderSink, node: ViewNode):
    sink.upsert_node(node.id, node.label, node.category, node.kind, title=node_tooltip(node))


def render_edge(sink: RenderSink, edge: ViewEdge):
    sink.upsert_edge(edge.id, edge.source, edge.target, edge.label, edge.kind)
