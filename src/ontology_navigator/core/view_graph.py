"""
View graph state: the authoritative set of nodes and edges currently shown.

Owns node identity, edge deduplication, the per-node expansion state, the
automatic expansion queue and the node cap. One instance per explorer
session; nothing here is shared between sessions.
"""

import logging
from collections import Counter, deque
from typing import Deque, Dict, Iterable, List, Optional

from rdflib import Graph

from ..schemas.ontology_schema import (
    NodeState, RelationKind, ResourceId, ViewEdge, ViewNode, edge_id,
)
from .labels import local_name

logger = logging.getLogger(__name__)


class ViewGraphState:
    """Nodes, edges and expansion bookkeeping of one explored view"""

    def __init__(self, node_cap: int = 50):
        self.node_cap = node_cap
        self.generation = 0
        self._nodes: Dict[ResourceId, ViewNode] = {}
        self._edges: Dict[str, ViewEdge] = {}
        self._expanded: set = set()
        self._queue: Deque[ResourceId] = deque()
        self.known_triples = Graph()

    # Membership

    def add_node(self, node: ViewNode) -> bool:
        """Insert node; returns False (and changes nothing) if its id is present"""
        if node.id in self._nodes:
            return False
        self._nodes[node.id] = node
        return True

    def add_edge(
        self,
        source: ResourceId,
        target: ResourceId,
        relation: str,
        kind: RelationKind = RelationKind.GENERIC,
        label: Optional[str] = None
    ) -> bool:
        """Insert the (source, relation, target) edge; returns False if it exists"""
        identity = edge_id(source, relation, target)
        if identity in self._edges:
            return False
        self._edges[identity] = ViewEdge(
            id=identity,
            source=source,
            target=target,
            relation=relation,
            label=label or local_name(relation),
            kind=kind
        )
        return True

    def contains(self, node_id: ResourceId) -> bool:
        return node_id in self._nodes

    __contains__ = contains

    def size(self) -> int:
        return len(self._nodes)

    __len__ = size

    def get_node(self, node_id: ResourceId) -> Optional[ViewNode]:
        return self._nodes.get(node_id)

    def get_edge(self, identity: str) -> Optional[ViewEdge]:
        return self._edges.get(identity)

    def nodes(self) -> List[ViewNode]:
        return list(self._nodes.values())

    def edges(self) -> List[ViewEdge]:
        return list(self._edges.values())

    def clear(self):
        """Reset nodes, edges, expansion state, queue and known triples together"""
        self._nodes = {}
        self._edges = {}
        self._expanded = set()
        self._queue = deque()
        self.known_triples = Graph()
        self.generation += 1
        logger.info("🧹 View graph cleared")

    # Capacity

    def remaining_capacity(self) -> int:
        return max(self.node_cap - len(self._nodes), 0)

    def has_capacity(self) -> bool:
        return len(self._nodes) < self.node_cap

    # Expansion state

    def state_of(self, node_id: ResourceId) -> NodeState:
        if node_id in self._expanded:
            return NodeState.EXPANDED
        node = self._nodes.get(node_id)
        return node.state if node is not None else NodeState.UNEXPANDED

    def is_expanded(self, node_id: ResourceId) -> bool:
        return node_id in self._expanded

    def mark_expanding(self, node_id: ResourceId) -> bool:
        """Unexpanded -> Expanding; False if the node is already expanding or expanded"""
        if self.state_of(node_id) is not NodeState.UNEXPANDED:
            return False
        node = self._nodes.get(node_id)
        if node is not None:
            node.state = NodeState.EXPANDING
        return True

    def mark_expanded(self, node_id: ResourceId):
        self._expanded.add(node_id)
        node = self._nodes.get(node_id)
        if node is not None:
            node.state = NodeState.EXPANDED

    def revert_expansion(self, node_id: ResourceId):
        """Roll a failed expansion back to Unexpanded so it can be retried"""
        self._expanded.discard(node_id)
        node = self._nodes.get(node_id)
        if node is not None:
            node.state = NodeState.UNEXPANDED

    @property
    def expanded_nodes(self) -> frozenset:
        return frozenset(self._expanded)

    # Expansion queue

    def enqueue(self, node_ids: Iterable[ResourceId]):
        self._queue.extend(node_ids)

    def dequeue(self) -> Optional[ResourceId]:
        return self._queue.popleft() if self._queue else None

    def clear_queue(self):
        self._queue.clear()

    @property
    def pending(self) -> List[ResourceId]:
        return list(self._queue)

    # Reporting

    def statistics(self) -> Dict[str, object]:
        """Summary of the current view"""
        return {
            "total_nodes": len(self._nodes),
            "total_edges": len(self._edges),
            "node_cap": self.node_cap,
            "node_categories": dict(Counter(n.category.value for n in self._nodes.values())),
            "node_kinds": dict(Counter(n.kind.value for n in self._nodes.values())),
            "edge_kinds": dict(Counter(e.kind.value for e in self._edges.values())),
            "expanded": len(self._expanded),
            "queued": len(self._queue),
            "known_triples": len(self.known_triples),
        }
