"""
SPARQL Query Gateway
Issues pattern queries against a SPARQL endpoint and returns typed bindings
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field

import httpx
from rdflib import BNode, Literal, URIRef

from ..config import EndpointSettings
from ..exceptions import QueryError
from .queries import PatternQuery

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = 'application/sparql-results+json'


class TermKind(Enum):
    """Kinds of RDF terms found in SPARQL JSON results"""
    URI = "uri"
    LITERAL = "literal"
    BLANK = "bnode"


@dataclass(frozen=True)
class RdfTerm:
    """One bound value of a SPARQL result row"""
    kind: TermKind
    value: str
    language: Optional[str] = None
    datatype: Optional[str] = None

    @property
    def is_uri(self) -> bool:
        return self.kind is TermKind.URI

    @property
    def is_literal(self) -> bool:
        return self.kind is TermKind.LITERAL

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RdfTerm":
        term_type = data['type']
        if term_type in ('literal', 'typed-literal'):
            return cls(
                TermKind.LITERAL,
                data['value'],
                language=data.get('xml:lang') or None,
                datatype=data.get('datatype')
            )
        return cls(TermKind(term_type), data['value'])

    def to_rdflib(self):
        if self.kind is TermKind.URI:
            return URIRef(self.value)
        if self.kind is TermKind.BLANK:
            return BNode(self.value)
        return Literal(
            self.value,
            lang=self.language,
            datatype=URIRef(self.datatype) if self.datatype and not self.language else None
        )


@dataclass
class BindingSet:
    """Result of a SELECT query: ordered variables and ordered bindings"""
    variables: List[str] = field(default_factory=list)
    bindings: List[Dict[str, RdfTerm]] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "BindingSet":
        variables = list(payload.get('head', {}).get('vars', []))
        rows = payload['results']['bindings']
        bindings = [
            {name: RdfTerm.from_json(value) for name, value in row.items()}
            for row in rows
        ]
        return cls(variables=variables, bindings=bindings)

    def values(self, variable: str) -> List[RdfTerm]:
        """All bound values of one variable, in row order"""
        return [row[variable] for row in self.bindings if variable in row]

    def __len__(self) -> int:
        return len(self.bindings)

    def __iter__(self):
        return iter(self.bindings)


class SparqlGateway:
    """Async SPARQL client for the navigator's fixed query set"""

    def __init__(
        self,
        endpoint: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        default_graph: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.endpoint = endpoint
        self.default_graph = default_graph
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            verify=verify_ssl,
            auth=(username, password or "") if username else None,
            headers={'Accept': SPARQL_RESULTS_JSON}
        )

    @classmethod
    def from_settings(cls, settings: EndpointSettings) -> "SparqlGateway":
        return cls(
            settings.endpoint,
            username=settings.username,
            password=settings.password,
            timeout=settings.timeout_seconds,
            verify_ssl=settings.verify_ssl,
            default_graph=settings.default_graph
        )

    async def execute(self, query: Union[PatternQuery, str]) -> BindingSet:
        """Execute a SELECT query; raises QueryError on any failure"""
        kind = query.kind if isinstance(query, PatternQuery) else None
        text = str(query)

        form = {'query': text}
        if self.default_graph:
            form['default-graph-uri'] = self.default_graph

        logger.debug(f"SPARQL query on {self.endpoint}:\n{text}")

        try:
            response = await self.client.post(
                self.endpoint,
                data=form,
                headers={'Accept': SPARQL_RESULTS_JSON}
            )
        except httpx.HTTPError as e:
            raise QueryError(f"SPARQL request failed: {e}", kind=kind) from e

        if response.status_code >= 400:
            raise QueryError(
                f"Query failed with status {response.status_code}: {response.text[:500]}",
                kind=kind,
                status_code=response.status_code
            )

        try:
            return BindingSet.from_json(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise QueryError(f"Malformed SPARQL results: {e}", kind=kind) from e

    async def close(self):
        """Close the underlying HTTP client if this gateway created it"""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "SparqlGateway":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
