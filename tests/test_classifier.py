from rdflib import Graph, Literal, URIRef
from rdflib.namespace import OWL, RDF, RDFS, SH, SKOS

from ontology_navigator.core.classifier import classify_resource, declared_types
from ontology_navigator.schemas.ontology_schema import ResourceCategory

EX = "http://example.com/"


class TestDeclaredTypes:
    def test_shape_wins_over_class(self):
        types = [str(OWL.Class), str(SH.NodeShape)]
        assert classify_resource(EX + "PersonShape", types) is ResourceCategory.SHAPE

    def test_class_types(self):
        assert classify_resource(EX + "Person", [str(RDFS.Class)]) is ResourceCategory.CLASS
        assert classify_resource(EX + "Animals", [str(SKOS.Concept)]) is ResourceCategory.CLASS

    def test_property_types(self):
        assert classify_resource(EX + "name", [str(OWL.DatatypeProperty)]) is ResourceCategory.PROPERTY

    def test_other_type_is_instance(self):
        assert classify_resource(EX + "alice", [EX + "Person"]) is ResourceCategory.INSTANCE

    def test_untyped_is_instance(self):
        assert classify_resource(EX + "thing") is ResourceCategory.INSTANCE


class TestHeuristics:
    def test_used_as_predicate_is_property(self):
        graph = Graph()
        graph.add((URIRef(EX + "alice"), URIRef(EX + "knows"), URIRef(EX + "bob")))
        assert classify_resource(EX + "knows", [], graph) is ResourceCategory.PROPERTY

    def test_declared_type_beats_usage(self):
        graph = Graph()
        graph.add((URIRef(EX + "alice"), URIRef(EX + "Odd"), URIRef(EX + "bob")))
        assert classify_resource(EX + "Odd", [str(OWL.Class)], graph) is ResourceCategory.CLASS

    def test_shape_predicates_make_a_shape(self):
        graph = Graph()
        graph.add((URIRef(EX + "PersonShape"), SH.targetClass, URIRef(EX + "Person")))
        assert classify_resource(EX + "PersonShape", [], graph) is ResourceCategory.SHAPE

    def test_predicate_usage_checked_before_shape_predicates(self):
        graph = Graph()
        subject = URIRef(EX + "odd")
        graph.add((subject, SH.path, URIRef(EX + "name")))
        graph.add((URIRef(EX + "alice"), subject, Literal("x")))
        assert classify_resource(EX + "odd", [], graph) is ResourceCategory.PROPERTY

    def test_declared_types_reads_graph(self):
        graph = Graph()
        graph.add((URIRef(EX + "alice"), RDF.type, URIRef(EX + "Person")))
        assert declared_types(EX + "alice", graph) == [EX + "Person"]
        assert declared_types(EX + "alice", None) == []
