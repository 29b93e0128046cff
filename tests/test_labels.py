from rdflib.namespace import RDFS, SKOS

from ontology_navigator.core.labels import (
    UNKNOWN_PRIORITY, best_label, display_label, label_priority, local_name,
)
from ontology_navigator.schemas.ontology_schema import Label

PREF = str(SKOS.prefLabel)
ALT = str(SKOS.altLabel)
LABEL = str(RDFS.label)


class TestBestLabel:
    def test_property_priority_beats_language(self):
        labels = [Label("Person", "en", ALT), Label("Personne", "fr", PREF)]
        assert best_label(labels, "en").text == "Personne"

    def test_preferred_language_within_same_property(self):
        labels = [Label("Personne", "fr", LABEL), Label("Person", "en", LABEL)]
        assert best_label(labels, "en").text == "Person"

    def test_untagged_before_other_languages(self):
        labels = [Label("Persona", "es", LABEL), Label("person", None, LABEL)]
        assert best_label(labels, "en").text == "person"

    def test_ties_keep_input_order(self):
        labels = [Label("First", "de", LABEL), Label("Second", "fr", LABEL)]
        assert best_label(labels, "en").text == "First"

    def test_unknown_property_ranks_last(self):
        labels = [Label("Odd", "en", "http://example.com/title"), Label("Alt", "fr", ALT)]
        assert best_label(labels).text == "Alt"
        assert label_priority("http://example.com/title") == UNKNOWN_PRIORITY

    def test_no_labels(self):
        assert best_label([]) is None


class TestDisplayLabel:
    def test_local_name(self):
        assert local_name("http://example.com/ontology#Person") == "Person"
        assert local_name("http://example.com/Person") == "Person"
        assert local_name("http://example.com/Person/") == "Person"

    def test_falls_back_to_local_name(self):
        assert display_label("http://example.com/Person", []) == "Person"

    def test_uses_best_label(self):
        labels = [Label("Mensch", "de", PREF)]
        assert display_label("http://example.com/Person", labels) == "Mensch"
