"""
Controlled expansion of the view graph.

Each expansion issues the four one-hop ontology queries of a node in
parallel, commits whatever succeeded, and (with automatic expansion on)
queues the newly shown neighbors. A single driver drains the queue in FIFO
order, one expansion at a time, pausing at the node cap.

Per-node states:   UNEXPANDED -> EXPANDING -> EXPANDED
                   EXPANDING -> UNEXPANDED (expansion failed)
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, List, NamedTuple, Optional
from dataclasses import dataclass, field

from rdflib import URIRef
from rdflib.namespace import RDFS

from ..client.queries import NEIGHBORHOOD_KINDS, QueryKind, neighborhood_queries
from ..config import ExplorerConfig
from ..exceptions import ExpansionError, NavigatorError, QueryError
from ..schemas.ontology_schema import NodeKind, NodeState, RelationKind, ResourceId, edge_id
from ..visualization.render_sink import NullRenderSink, RenderSink, render_edge, render_node
from .describer import ResourceDescriber
from .labels import local_name
from .view_graph import ViewGraphState

logger = logging.getLogger(__name__)

SUBCLASS_OF = str(RDFS.subClassOf)


class DrainOutcome(Enum):
    """Why a queue drain returned"""
    EMPTY = "empty"
    PAUSED_AT_CAP = "paused_at_cap"
    STOPPED = "stopped"


class Relation(NamedTuple):
    """One discovered edge and the neighbor it reaches"""
    source: ResourceId
    target: ResourceId
    relation: str
    kind: RelationKind
    label: str
    neighbor: ResourceId


@dataclass
class ExpansionResult:
    """Outcome of one node expansion"""
    node_id: ResourceId
    added_nodes: List[ResourceId] = field(default_factory=list)
    added_edges: int = 0
    failures: Dict[QueryKind, QueryError] = field(default_factory=dict)
    dropped: int = 0
    capacity_reached: bool = False
    discarded: bool = False

    @property
    def partial(self) -> bool:
        return bool(self.failures)


def collect_relations(node_id: ResourceId, results: Dict[QueryKind, object]) -> List[Relation]:
    """Edges implied by the neighborhood query results, in query order"""
    relations = []

    subclasses = results.get(QueryKind.SUBCLASSES)
    if subclasses is not None:
        for term in subclasses.values('class'):
            if term.is_uri:
                relations.append(Relation(
                    term.value, node_id, SUBCLASS_OF, RelationKind.SUBCLASS_OF, 'subClassOf', term.value
                ))

    superclasses = results.get(QueryKind.SUPERCLASSES)
    if superclasses is not None:
        for term in superclasses.values('class'):
            if term.is_uri:
                relations.append(Relation(
                    node_id, term.value, SUBCLASS_OF, RelationKind.SUBCLASS_OF, 'subClassOf', term.value
                ))

    for row in results.get(QueryKind.DOMAIN_PROPERTIES, ()):
        prop, range_ = row.get('property'), row.get('range')
        if prop is not None and range_ is not None and prop.is_uri and range_.is_uri:
            relations.append(Relation(
                node_id, range_.value, prop.value, RelationKind.DOMAIN, local_name(prop.value), range_.value
            ))

    for row in results.get(QueryKind.RANGE_PROPERTIES, ()):
        prop, domain = row.get('property'), row.get('domain')
        if prop is not None and domain is not None and prop.is_uri and domain.is_uri:
            relations.append(Relation(
                domain.value, node_id, prop.value, RelationKind.RANGE, local_name(prop.value), domain.value
            ))

    return relations


class ExpansionScheduler:
    """Single-flight expansion and queue driver for one view"""

    def __init__(
        self,
        gateway,
        state: ViewGraphState,
        describer: ResourceDescriber,
        sink: Optional[RenderSink] = None,
        config: Optional[ExplorerConfig] = None
    ):
        config = config or ExplorerConfig()
        self.gateway = gateway
        self.state = state
        self.describer = describer
        self.sink = sink or NullRenderSink()
        self.auto_expand = config.auto_expand
        self.expansion_delay = config.expansion_delay_ms / 1000.0
        self.hierarchy_limit = config.hierarchy_limit
        self.property_limit = config.property_limit
        self.last_error: Optional[ExpansionError] = None

        self._lock = asyncio.Lock()
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def is_draining(self) -> bool:
        return self._drain_task is not None and not self._drain_task.done()

    # Expansion

    async def request_expand(self, node_id: ResourceId) -> Optional[ExpansionResult]:
        """
        Expand node_id once. Returns None when the node is unknown, a literal,
        already expanded or already expanding; raises ExpansionError when no
        neighborhood query succeeds. Any failure leaves the node Unexpanded.
        """

        node = self.state.get_node(node_id)
        if node is None:
            logger.warning(f"Cannot expand {node_id}: not in the view")
            return None
        if node.kind is NodeKind.LITERAL:
            logger.debug(f"Skipping {node_id}: literal values have no neighborhood")
            return None
        if not self.state.mark_expanding(node_id):
            logger.debug(f"Skipping {node_id}: {self.state.state_of(node_id).value}")
            return None

        generation = self.state.generation
        async with self._lock:
            if self.state.generation != generation:
                return None
            try:
                return await self._expand(node_id, generation)
            except BaseException:
                if not self.state.is_expanded(node_id):
                    self.state.revert_expansion(node_id)
                raise

    def _failed(self, node_id: ResourceId, failures: Dict[QueryKind, QueryError]) -> ExpansionError:
        error = ExpansionError(node_id, failures)
        self.last_error = error
        logger.error(f"❌ {error}")
        return error

    async def _expand(self, node_id: ResourceId, generation: int) -> ExpansionResult:
        logger.info(f"🔎 Expanding {self.describer.namespaces.compress(node_id)}")

        try:
            queries = neighborhood_queries(node_id, self.hierarchy_limit, self.property_limit)
        except QueryError as e:
            # an id that cannot be written as an IRI fails every query alike
            raise self._failed(node_id, {kind: e for kind in NEIGHBORHOOD_KINDS}) from e

        outcomes = await asyncio.gather(
            *(self.gateway.execute(queries[kind]) for kind in NEIGHBORHOOD_KINDS),
            return_exceptions=True
        )

        if self.state.generation != generation:
            logger.info(f"View cleared while expanding {node_id}; discarding results")
            return ExpansionResult(node_id, discarded=True)

        results = {}
        failures: Dict[QueryKind, QueryError] = {}
        for kind, outcome in zip(NEIGHBORHOOD_KINDS, outcomes):
            if isinstance(outcome, QueryError):
                failures[kind] = outcome
                logger.warning(f"  {kind.value} query for {node_id} failed: {outcome}")
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results[kind] = outcome

        if not results:
            raise self._failed(node_id, failures)

        result = ExpansionResult(node_id, failures=failures)
        relations = collect_relations(node_id, results)
        self._record_relations(relations)

        new_neighbors = []
        for relation in relations:
            if relation.neighbor not in self.state and relation.neighbor not in new_neighbors:
                new_neighbors.append(relation.neighbor)

        capped = self.auto_expand
        if capped:
            room = self.state.remaining_capacity()
            if len(new_neighbors) > room:
                result.dropped = len(new_neighbors) - room
                new_neighbors = new_neighbors[:room]

        nodes = await asyncio.gather(*(self.describer.describe(uri) for uri in new_neighbors))
        if self.state.generation != generation:
            logger.info(f"View cleared while describing neighbors of {node_id}; discarding results")
            return ExpansionResult(node_id, discarded=True)

        for node in nodes:
            if self.state.add_node(node):
                result.added_nodes.append(node.id)
                render_node(self.sink, node)

        for relation in relations:
            if relation.source not in self.state or relation.target not in self.state:
                continue
            if self.state.add_edge(relation.source, relation.target, relation.relation, relation.kind, relation.label):
                result.added_edges += 1
                render_edge(self.sink, self.state.get_edge(
                    edge_id(relation.source, relation.relation, relation.target)
                ))

        self.state.mark_expanded(node_id)
        render_node(self.sink, self.state.get_node(node_id))

        if self.auto_expand and result.added_nodes:
            self.state.enqueue(result.added_nodes)

        result.capacity_reached = capped and not self.state.has_capacity()

        await self.sink.request_layout()

        logger.info(
            f"  Added {len(result.added_nodes)} new nodes, {result.added_edges} edges. "
            f"Total nodes: {len(self.state)}"
        )
        if result.dropped:
            logger.info(f"  Node cap {self.state.node_cap} reached; skipped {result.dropped} neighbors")
        if failures:
            logger.warning(
                f"⚠️  Partial expansion of {node_id}: "
                f"{', '.join(kind.value for kind in failures)} failed"
            )

        return result

    def _record_relations(self, relations: List[Relation]):
        """Keep the discovered ontology facts alongside the view"""
        graph = self.state.known_triples
        for relation in relations:
            if relation.kind is RelationKind.SUBCLASS_OF:
                graph.add((URIRef(relation.source), RDFS.subClassOf, URIRef(relation.target)))
            else:
                # domain and range edges both run from the property's domain to its range
                prop = URIRef(relation.relation)
                graph.add((prop, RDFS.domain, URIRef(relation.source)))
                graph.add((prop, RDFS.range, URIRef(relation.target)))

    # Queue driver

    def schedule_drain(self) -> Optional[asyncio.Task]:
        """Start the queue driver unless it is already running or auto expansion is off"""
        if not self.auto_expand:
            return None
        if not self.is_draining:
            self._drain_task = asyncio.get_running_loop().create_task(self._drain_loop())
        return self._drain_task

    async def drain(self) -> DrainOutcome:
        """Run (or join) the queue driver until it stops"""
        task = self.schedule_drain()
        if task is None:
            return DrainOutcome.STOPPED
        return await task

    async def _drain_loop(self) -> DrainOutcome:
        processed = 0
        while True:
            if not self.auto_expand:
                return DrainOutcome.STOPPED
            if not self.state.pending:
                logger.info(f"✅ Expansion queue empty. Total nodes: {len(self.state)}")
                return DrainOutcome.EMPTY
            if not self.state.has_capacity():
                logger.info(
                    f"⏸️  Node cap {self.state.node_cap} reached; "
                    f"{len(self.state.pending)} nodes left in queue"
                )
                return DrainOutcome.PAUSED_AT_CAP

            node_id = self.state.dequeue()
            if node_id not in self.state or self.state.state_of(node_id) is not NodeState.UNEXPANDED:
                continue

            if processed and self.expansion_delay:
                await asyncio.sleep(self.expansion_delay)
                if not self.auto_expand:
                    return DrainOutcome.STOPPED

            try:
                await self.request_expand(node_id)
            except NavigatorError as e:
                logger.error(f"Continuing with the next queued node after: {e}")
            processed += 1

    # Controls

    def set_auto_expand(self, enabled: bool):
        """Disabling drops queued work; an expansion already running still commits"""
        self.auto_expand = enabled
        if not enabled:
            dropped = len(self.state.pending)
            self.state.clear_queue()
            logger.info(f"Automatic expansion off; dropped {dropped} queued nodes")
        else:
            logger.info("Automatic expansion on")

    def reset(self):
        """Clear the view; expansions still awaiting queries discard their results"""
        self.state.clear()
        self.last_error = None

    def set_node_cap(self, node_cap: int):
        """Change the cap; a drain paused at the old cap resumes on the next drain()"""
        if node_cap < 1:
            raise ValueError(f"node_cap must be positive, got {node_cap}")
        self.state.node_cap = node_cap
