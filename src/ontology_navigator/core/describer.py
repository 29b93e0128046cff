"""
Builds view nodes for resources about to be shown.

Looks up a resource's types, labels and shape facts, records them in the
view's known triples, and derives the display label and category from them.
"""

import logging
from typing import List

from rdflib import Literal, URIRef

from ..client.queries import describe_resource
from ..exceptions import QueryError
from ..schemas.ontology_schema import (
    Label, NodeKind, ResourceCategory, ViewNode, literal_display, literal_node_id,
)
from .classifier import classify_resource, declared_types
from .labels import LABEL_PROPERTIES, display_label
from .namespaces import NamespaceDictionary
from .view_graph import ViewGraphState

logger = logging.getLogger(__name__)


class ResourceDescriber:
    """Turns resource ids into fully populated view nodes"""

    def __init__(
        self,
        gateway,
        state: ViewGraphState,
        namespaces: NamespaceDictionary,
        preferred_language: str = "en"
    ):
        self.gateway = gateway
        self.state = state
        self.namespaces = namespaces
        self.preferred_language = preferred_language

    async def describe(self, uri: str) -> ViewNode:
        """Fetch and record facts about uri, then build its node"""
        try:
            results = await self.gateway.execute(describe_resource(uri))
        except QueryError as e:
            logger.warning(f"Could not describe {uri}, using its local name: {e}")
        else:
            subject = URIRef(uri)
            for row in results:
                predicate, obj = row.get('p'), row.get('o')
                if predicate is None or obj is None:
                    continue
                self.state.known_triples.add((subject, URIRef(predicate.value), obj.to_rdflib()))

        return self.build_node(uri)

    def labels_of(self, uri: str) -> List[Label]:
        subject = URIRef(uri)
        labels = []
        for prop in LABEL_PROPERTIES:
            for obj in self.state.known_triples.objects(subject, URIRef(prop)):
                if isinstance(obj, Literal):
                    labels.append(Label(str(obj), obj.language, prop))
        return labels

    def build_node(self, uri: str) -> ViewNode:
        """Node for uri from what the known triples currently say about it"""
        labels = self.labels_of(uri)
        types = declared_types(uri, self.state.known_triples)
        return ViewNode(
            id=uri,
            label=display_label(uri, labels, self.preferred_language),
            category=classify_resource(uri, types, self.state.known_triples),
            kind=NodeKind.RESOURCE,
            uri_display=self.namespaces.compress(uri),
            types=types,
            labels=labels
        )

    def literal_node(self, source: str, predicate: str, value: str) -> ViewNode:
        return ViewNode(
            id=literal_node_id(source, predicate, value),
            label=literal_display(value),
            category=ResourceCategory.INSTANCE,
            kind=NodeKind.LITERAL
        )
