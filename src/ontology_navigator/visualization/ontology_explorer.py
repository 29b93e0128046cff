"""
Ontology Exploration Session

One explorer per visualized session: wires the search resolver, the view
graph state and the expansion scheduler together, and turns discrete user
events (typing, picking a suggestion, activating a node, toggling automatic
expansion) into state transitions.
"""

import json
import logging
from typing import Any, Dict, Optional
from dataclasses import asdict

from rdflib import URIRef

from ..client.sparql_client import BindingSet
from ..config import ExplorerConfig
from ..core.describer import ResourceDescriber
from ..core.expansion import DrainOutcome, ExpansionResult, ExpansionScheduler
from ..core.namespaces import NamespaceDictionary
from ..core.search import SearchCandidate, SearchResolver, Selection
from ..core.view_graph import ViewGraphState
from ..exceptions import QueryError
from ..schemas.ontology_schema import NodeKind, RelationKind, ViewNode, edge_id
from .render_sink import NullRenderSink, RenderSink, render_edge, render_node

logger = logging.getLogger(__name__)


class OntologyExplorer:
    """
    Interactive ontology exploration over a SPARQL gateway
    for one independent view
    """

    def __init__(
        self,
        gateway,
        config: Optional[ExplorerConfig] = None,
        namespaces: Optional[NamespaceDictionary] = None,
        sink: Optional[RenderSink] = None,
        graph: Optional[str] = None
    ):
        self.config = config or ExplorerConfig()
        self.gateway = gateway
        self.namespaces = namespaces or NamespaceDictionary.common()
        self.sink = sink or NullRenderSink()

        self.state = ViewGraphState(node_cap=self.config.node_cap)
        self.describer = ResourceDescriber(
            gateway, self.state, self.namespaces, self.config.preferred_language
        )
        self.search = SearchResolver(gateway, self.namespaces, self.config, graph=graph)
        self.scheduler = ExpansionScheduler(
            gateway, self.state, self.describer, self.sink, self.config
        )

    @property
    def auto_expand(self) -> bool:
        return self.scheduler.auto_expand

    # Search events

    def on_text_changed(self, text: str):
        self.search.on_text_changed(text)

    def on_suggestion_selected(self, index: int) -> SearchCandidate:
        candidate = self.search.select(index)
        logger.info(
            f"• Found: {candidate.display_label} ({candidate.type_hint or 'Resource'}) - {candidate.uri_display}"
        )
        return candidate

    async def confirm_selection(self, text: Optional[str] = None) -> ViewNode:
        """
        Add the selected (or typed absolute) resource to the view and, with
        automatic expansion on, expand it and drain the resulting queue.
        Raises AmbiguousSelectionError when nothing resolvable was chosen.
        """

        selection: Selection = self.search.confirm(text)
        node = await self.add_resource(selection.resource_id)

        if self.auto_expand and not self.state.is_expanded(node.id):
            logger.info("✓ Node added to graph. Automatically expanding connections...")
            await self.scheduler.request_expand(node.id)
            self.scheduler.schedule_drain()
        else:
            logger.info("✓ Node added to graph. Activate it to expand connections.")
        return node

    # Graph events

    async def add_resource(self, uri: str) -> ViewNode:
        """Describe and insert one resource; an id already in the view is left as is"""
        existing = self.state.get_node(uri)
        if existing is not None:
            return existing

        node = await self.describer.describe(uri)
        if self.state.add_node(node):
            render_node(self.sink, node)
            await self.sink.request_layout()
        return self.state.get_node(uri)

    async def on_node_activated(self, uri: str) -> Optional[ExpansionResult]:
        """Click-to-expand: one expansion step, followed by queue draining when automatic"""
        result = await self.scheduler.request_expand(uri)
        if result is not None and self.auto_expand:
            self.scheduler.schedule_drain()
        return result

    def on_toggle_auto_expand(self, enabled: bool):
        self.scheduler.set_auto_expand(enabled)
        if enabled:
            self.scheduler.schedule_drain()

    async def set_node_cap(self, node_cap: int) -> DrainOutcome:
        """Raise or lower the cap; a drain paused at the old cap resumes"""
        self.scheduler.set_node_cap(node_cap)
        return await self.scheduler.drain()

    def clear(self):
        """Reset the view and the rendering sink"""
        self.scheduler.reset()
        self.search.reset()
        self.sink.clear_all()

    async def wait_until_idle(self) -> DrainOutcome:
        """Wait for pending lookups and for the expansion queue to settle"""
        await self.search.wait_idle()
        if self.scheduler.is_draining:
            return await self.scheduler.drain()
        if not self.auto_expand:
            return DrainOutcome.STOPPED
        return DrainOutcome.PAUSED_AT_CAP if self.state.pending else DrainOutcome.EMPTY

    # Query results as graph

    def load_triples(self, results: BindingSet) -> Dict[str, int]:
        """
        Show a triple-shaped result set (s/p/o, or any three variables) as
        graph. URI objects become resource nodes, literal objects become
        literal nodes with ids derived from (subject, predicate, value);
        blank objects are skipped.
        """

        variables = results.variables
        if all(v in variables for v in ('s', 'p', 'o')):
            subject_var, predicate_var, object_var = 's', 'p', 'o'
        elif len(variables) == 3:
            subject_var, predicate_var, object_var = variables
        else:
            raise QueryError("Cannot determine which columns represent triples for visualization")

        triples = []
        for row in results:
            subject, predicate, obj = row.get(subject_var), row.get(predicate_var), row.get(object_var)
            if subject is None or predicate is None or obj is None:
                continue
            if not subject.is_uri or not predicate.is_uri:
                continue
            if not (obj.is_uri or obj.is_literal):
                continue
            triples.append((subject, predicate, obj))
            self.state.known_triples.add(
                (URIRef(subject.value), URIRef(predicate.value), obj.to_rdflib())
            )

        nodes_before, edges_before = len(self.state), len(self.state.edges())
        for subject, predicate, obj in triples:
            self._show_resource(subject.value)
            if obj.is_uri:
                self._show_resource(obj.value)
                target = obj.value
            else:
                literal = self.describer.literal_node(subject.value, predicate.value, obj.value)
                if self.state.add_node(literal):
                    render_node(self.sink, literal)
                target = literal.id

            if self.state.add_edge(subject.value, target, predicate.value, RelationKind.GENERIC):
                render_edge(self.sink, self.state.get_edge(edge_id(subject.value, predicate.value, target)))

        self._refresh_categories()

        stats = {
            'nodes_added': len(self.state) - nodes_before,
            'edges_added': len(self.state.edges()) - edges_before,
            'triples': len(triples),
        }
        logger.info(
            f"Visualizing {stats['nodes_added']} new nodes and {stats['edges_added']} "
            f"new edges from {stats['triples']} triples"
        )
        return stats

    def _show_resource(self, uri: str):
        if uri not in self.state:
            node = self.describer.build_node(uri)
            self.state.add_node(node)
            render_node(self.sink, node)

    def _refresh_categories(self):
        """Categories are derived data; recompute them after new facts arrive"""
        for node in self.state.nodes():
            if node.kind is not NodeKind.RESOURCE:
                continue
            fresh = self.describer.build_node(node.id)
            if (fresh.category, fresh.label) != (node.category, node.label):
                node.category = fresh.category
                node.label = fresh.label
                node.types = fresh.types
                node.labels = fresh.labels
                render_node(self.sink, node)

    # Export

    def get_visualization_data(self) -> Dict[str, Any]:
        """View data formatted for visualization"""

        nodes = [
            {
                "id": node.id,
                "label": node.label,
                "category": node.category.value,
                "kind": node.kind.value,
                "state": node.state.value,
                "uri_display": node.uri_display,
                "types": list(node.types),
                "labels": [asdict(label) for label in node.labels],
            }
            for node in self.state.nodes()
        ]
        edges = [
            {
                "id": edge.id,
                "source": edge.source,
                "target": edge.target,
                "relation": edge.relation,
                "label": edge.label,
                "kind": edge.kind.value,
            }
            for edge in self.state.edges()
        ]

        return {
            "nodes": nodes,
            "edges": edges,
            "statistics": self.state.statistics()
        }

    def export_for_web_visualization(self, output_path: str):
        """Export view data for web-based visualization tools"""

        viz_data = self.get_visualization_data()

        # Format for common visualization libraries (D3.js, vis.js, etc.)
        web_format = {
            "nodes": viz_data["nodes"],
            "links": viz_data["edges"],  # D3.js expects "links" not "edges"
            "metadata": viz_data["statistics"]
        }

        with open(output_path, 'w') as f:
            json.dump(web_format, f, indent=2, default=str)

        logger.info(f"Exported view visualization data to {output_path}")
