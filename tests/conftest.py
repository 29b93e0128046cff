"""
Shared fixtures: an in-memory SPARQL gateway scripted per (query kind, anchor)
and a sink that records what would have been drawn.
"""

import asyncio
from typing import Dict, List, Tuple

import pytest
from rdflib.namespace import RDF, RDFS

from ontology_navigator.client.queries import QueryKind
from ontology_navigator.client.sparql_client import BindingSet, RdfTerm, TermKind
from ontology_navigator.config import ExplorerConfig
from ontology_navigator.exceptions import QueryError
from ontology_navigator.visualization.ontology_explorer import OntologyExplorer
from ontology_navigator.visualization.render_sink import RenderSink

EX = "http://example.com/"


def uri(value) -> RdfTerm:
    return RdfTerm(TermKind.URI, str(value))


def lit(value: str, language: str = None) -> RdfTerm:
    return RdfTerm(TermKind.LITERAL, value, language=language)


def bnode(value: str) -> RdfTerm:
    return RdfTerm(TermKind.BLANK, value)


def rows(variables, *bindings) -> BindingSet:
    return BindingSet(variables=list(variables), bindings=[dict(b) for b in bindings])


class FakeGateway:
    """Answers pattern queries from canned results; unknown queries return no rows"""

    def __init__(self):
        self.responses: Dict[Tuple[QueryKind, str], object] = {}
        self.gates: Dict[Tuple[QueryKind, str], asyncio.Event] = {}
        self.calls: List = []

    def respond(self, kind: QueryKind, anchor: str, result):
        self.responses[(kind, anchor)] = result

    def fail(self, kind: QueryKind, anchor: str, message: str = "endpoint unavailable"):
        self.responses[(kind, anchor)] = QueryError(message, kind=kind, status_code=503)

    def hold(self, kind: QueryKind, anchor: str) -> asyncio.Event:
        """Block matching queries until the returned event is set"""
        gate = asyncio.Event()
        self.gates[(kind, anchor)] = gate
        return gate

    def subclasses(self, anchor: str, *children: str):
        self.respond(QueryKind.SUBCLASSES, anchor, rows(['class'], *({'class': uri(c)} for c in children)))

    def superclasses(self, anchor: str, *parents: str):
        self.respond(QueryKind.SUPERCLASSES, anchor, rows(['class'], *({'class': uri(p)} for p in parents)))

    def domain_properties(self, anchor: str, *pairs):
        self.respond(QueryKind.DOMAIN_PROPERTIES, anchor, rows(
            ['property', 'range'], *({'property': uri(p), 'range': uri(r)} for p, r in pairs)
        ))

    def range_properties(self, anchor: str, *pairs):
        self.respond(QueryKind.RANGE_PROPERTIES, anchor, rows(
            ['property', 'domain'], *({'property': uri(p), 'domain': uri(d)} for p, d in pairs)
        ))

    def describe(self, anchor: str, *facts):
        self.respond(QueryKind.DESCRIBE, anchor, rows(
            ['p', 'o'], *({'p': uri(p), 'o': o} for p, o in facts)
        ))

    def fail_neighborhood(self, anchor: str):
        for kind in (QueryKind.SUBCLASSES, QueryKind.SUPERCLASSES,
                     QueryKind.DOMAIN_PROPERTIES, QueryKind.RANGE_PROPERTIES):
            self.fail(kind, anchor)

    def calls_of(self, kind: QueryKind) -> List:
        return [query for query in self.calls if query.kind is kind]

    async def execute(self, query):
        self.calls.append(query)
        key = (query.kind, query.anchor)
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)

        response = self.responses.get(key)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return BindingSet()
        return response


class RecordingSink(RenderSink):
    """Keeps the latest drawn state of every node and edge"""

    def __init__(self):
        self.nodes: Dict[str, dict] = {}
        self.edges: Dict[str, dict] = {}
        self.node_writes = 0
        self.layout_requests = 0
        self.clears = 0

    def upsert_node(self, node_id, label, category, kind, title=None):
        self.node_writes += 1
        self.nodes[node_id] = {'label': label, 'category': category, 'kind': kind, 'title': title}

    def upsert_edge(self, edge_id, source, target, label, kind):
        self.edges[edge_id] = {'source': source, 'target': target, 'label': label, 'kind': kind}

    async def request_layout(self):
        self.layout_requests += 1

    def clear_all(self):
        self.nodes = {}
        self.edges = {}
        self.clears += 1


def class_facts(label: str, language: str = "en"):
    return ((RDF.type, uri("http://www.w3.org/2002/07/owl#Class")), (RDFS.label, lit(label, language)))


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def config():
    return ExplorerConfig(search_debounce_ms=10, expansion_delay_ms=0)


@pytest.fixture
def explorer(gateway, config, sink):
    return OntologyExplorer(gateway, config, sink=sink)


@pytest.fixture
def manual_explorer(gateway, sink):
    return OntologyExplorer(
        gateway,
        ExplorerConfig(search_debounce_ms=10, expansion_delay_ms=0, auto_expand=False),
        sink=sink
    )
