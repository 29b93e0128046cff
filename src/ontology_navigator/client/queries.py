"""
Fixed parametrized SPARQL queries used by the navigator.

Only these shapes are ever sent: the four one-hop neighborhood queries, the
free-text search query, and the per-node description lookup.
"""

import re
from enum import Enum
from typing import Optional
from dataclasses import dataclass

from rdflib.namespace import RDF, RDFS, SH, SKOS

from ..exceptions import QueryError

PREFIXES = """
PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX owl: <http://www.w3.org/2002/07/owl#>
PREFIX skos: <http://www.w3.org/2004/02/skos/core#>
"""

# Characters excluded from IRIREF by the SPARQL grammar
_INVALID_IRI = re.compile(r'[<>"{}|^`\\\x00-\x20]')

DESCRIBE_PREDICATES = (
    RDF.type, RDFS.label, SKOS.prefLabel, SKOS.altLabel,
    SH.targetClass, SH.property, SH.path, SH.datatype, SH.minCount, SH.maxCount,
)


class QueryKind(Enum):
    """The query shapes issued by the navigator"""
    SUBCLASSES = "subclasses"
    SUPERCLASSES = "superclasses"
    DOMAIN_PROPERTIES = "domain_properties"
    RANGE_PROPERTIES = "range_properties"
    SEARCH = "search"
    DESCRIBE = "describe"


NEIGHBORHOOD_KINDS = (
    QueryKind.SUBCLASSES,
    QueryKind.SUPERCLASSES,
    QueryKind.DOMAIN_PROPERTIES,
    QueryKind.RANGE_PROPERTIES,
)


@dataclass(frozen=True)
class PatternQuery:
    """A rendered query together with the shape and anchor it was built from"""
    kind: QueryKind
    anchor: str
    text: str

    def __str__(self) -> str:
        return self.text


def iri(uri: str) -> str:
    """Render uri as a SPARQL IRI reference, rejecting unsafe input"""
    if not uri or _INVALID_IRI.search(uri):
        raise QueryError(f"Not a valid IRI: {uri!r}")
    return f"<{uri}>"


def string_literal(value: str) -> str:
    """Render value as a double-quoted SPARQL string literal"""
    escaped = (
        value.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
    )
    return f'"{escaped}"'


def subclasses_of(uri: str, limit: int = 20) -> PatternQuery:
    text = f"""{PREFIXES}
SELECT DISTINCT ?class WHERE {{
    ?class rdfs:subClassOf {iri(uri)} .
    FILTER (!isBlank(?class))
}} LIMIT {limit}
"""
    return PatternQuery(QueryKind.SUBCLASSES, uri, text)


def superclasses_of(uri: str, limit: int = 20) -> PatternQuery:
    text = f"""{PREFIXES}
SELECT DISTINCT ?class WHERE {{
    {iri(uri)} rdfs:subClassOf ?class .
    FILTER (!isBlank(?class))
}} LIMIT {limit}
"""
    return PatternQuery(QueryKind.SUPERCLASSES, uri, text)


def properties_with_domain(uri: str, limit: int = 15) -> PatternQuery:
    text = f"""{PREFIXES}
SELECT DISTINCT ?property ?range WHERE {{
    ?property rdfs:domain {iri(uri)} .
    OPTIONAL {{ ?property rdfs:range ?range }}
    FILTER (!isBlank(?property))
}} LIMIT {limit}
"""
    return PatternQuery(QueryKind.DOMAIN_PROPERTIES, uri, text)


def properties_with_range(uri: str, limit: int = 15) -> PatternQuery:
    text = f"""{PREFIXES}
SELECT DISTINCT ?property ?domain WHERE {{
    ?property rdfs:range {iri(uri)} .
    OPTIONAL {{ ?property rdfs:domain ?domain }}
    FILTER (!isBlank(?property))
}} LIMIT {limit}
"""
    return PatternQuery(QueryKind.RANGE_PROPERTIES, uri, text)


def neighborhood_queries(uri: str, hierarchy_limit: int = 20, property_limit: int = 15):
    """The four one-hop queries of an expansion, keyed by kind"""
    return {
        QueryKind.SUBCLASSES: subclasses_of(uri, hierarchy_limit),
        QueryKind.SUPERCLASSES: superclasses_of(uri, hierarchy_limit),
        QueryKind.DOMAIN_PROPERTIES: properties_with_domain(uri, property_limit),
        QueryKind.RANGE_PROPERTIES: properties_with_range(uri, property_limit),
    }


def search_resources(term: str, limit: int = 20, graph: Optional[str] = None) -> PatternQuery:
    """
    Free-text search over classes and instances by label, and over any
    subject by URI substring. Matching is case-insensitive.
    """

    needle = f"LCASE({string_literal(term)})"
    body = f"""
    {{
        ?resource rdf:type ?classType .
        FILTER(?classType IN (owl:Class, rdfs:Class))
        ?resource ?labelProp ?label .
        FILTER(?labelProp IN (rdfs:label, skos:prefLabel))
        FILTER(CONTAINS(LCASE(STR(?label)), {needle}))
        BIND("Class" AS ?type)
    }} UNION {{
        ?resource rdf:type ?class .
        ?class rdf:type ?classType .
        FILTER(?classType IN (owl:Class, rdfs:Class))
        ?resource ?labelProp ?label .
        FILTER(?labelProp IN (rdfs:label, skos:prefLabel))
        FILTER(CONTAINS(LCASE(STR(?label)), {needle}))
        BIND("Instance" AS ?type)
    }} UNION {{
        ?resource ?p ?o .
        FILTER(isIRI(?resource))
        FILTER(CONTAINS(LCASE(STR(?resource)), {needle}))
        OPTIONAL {{
            ?resource ?labelProp ?label .
            FILTER(?labelProp IN (rdfs:label, skos:prefLabel))
        }}
        OPTIONAL {{
            ?resource rdf:type ?anyType .
            BIND(IF(EXISTS {{ ?resource rdf:type owl:Class }} || EXISTS {{ ?resource rdf:type rdfs:Class }}, "Class", "Instance") AS ?type)
        }}
    }}
"""
    if graph:
        body = f"GRAPH {iri(graph)} {{{body}}}"

    text = f"""{PREFIXES}
SELECT DISTINCT ?resource ?label ?labelProp ?type WHERE {{
{body}
}} LIMIT {limit}
"""
    return PatternQuery(QueryKind.SEARCH, term, text)


def describe_resource(uri: str, limit: int = 50) -> PatternQuery:
    """Types, labels and shape-characteristic facts of one resource"""
    predicates = ", ".join(iri(str(p)) for p in DESCRIBE_PREDICATES)
    text = f"""{PREFIXES}
SELECT ?p ?o WHERE {{
    {iri(uri)} ?p ?o .
    FILTER(?p IN ({predicates}))
}} LIMIT {limit}
"""
    return PatternQuery(QueryKind.DESCRIBE, uri, text)
