"""
Resource classification for coloring and shaping view nodes.

Declared types win over structural heuristics. Shape is checked before Class
so that OWL classes which double as SHACL node shapes render as shapes.
"""

from typing import Iterable, List, Optional

from rdflib import Graph, URIRef
from rdflib.namespace import OWL, RDF, RDFS, SH, SKOS

from ..schemas.ontology_schema import ResourceCategory

SHAPE_TYPES = frozenset(str(t) for t in (SH.NodeShape, SH.PropertyShape, SH.Shape))

CLASS_TYPES = frozenset(str(t) for t in (
    OWL.Class, RDFS.Class, SKOS.Concept, SKOS.ConceptScheme,
))

PROPERTY_TYPES = frozenset(str(t) for t in (
    OWL.ObjectProperty, OWL.DatatypeProperty, OWL.AnnotationProperty, RDF.Property,
))

SHAPE_PREDICATES = (SH.targetClass, SH.property, SH.path, SH.datatype, SH.minCount, SH.maxCount)


def declared_types(uri: str, known_triples: Optional[Graph]) -> List[str]:
    """rdf:type objects asserted for uri in the known triples"""
    if known_triples is None:
        return []
    return [str(t) for t in known_triples.objects(URIRef(uri), RDF.type)]


def is_used_as_predicate(uri: str, known_triples: Optional[Graph]) -> bool:
    if known_triples is None:
        return False
    return (None, URIRef(uri), None) in known_triples


def has_shape_predicates(uri: str, known_triples: Optional[Graph]) -> bool:
    if known_triples is None:
        return False
    subject = URIRef(uri)
    return any((subject, predicate, None) in known_triples for predicate in SHAPE_PREDICATES)


def classify_resource(
    uri: str,
    types: Iterable[str] = (),
    known_triples: Optional[Graph] = None
) -> ResourceCategory:
    """
    Categorize a resource; first match wins:

    1. declared shape type      -> SHAPE
    2. declared class type      -> CLASS
    3. declared property type   -> PROPERTY
    4. used as a predicate      -> PROPERTY
    5. has shape predicates     -> SHAPE
    6. any other declared type  -> INSTANCE
    7. otherwise                -> INSTANCE
    """

    types = [str(t) for t in types]

    if any(t in SHAPE_TYPES for t in types):
        return ResourceCategory.SHAPE
    if any(t in CLASS_TYPES for t in types):
        return ResourceCategory.CLASS
    if any(t in PROPERTY_TYPES for t in types):
        return ResourceCategory.PROPERTY

    if is_used_as_predicate(uri, known_triples):
        return ResourceCategory.PROPERTY
    if has_shape_predicates(uri, known_triples):
        return ResourceCategory.SHAPE

    return ResourceCategory.INSTANCE
