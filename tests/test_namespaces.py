import json

import pytest

from ontology_navigator.core.namespaces import NamespaceDictionary, compress_uri
from ontology_navigator.exceptions import ConfigurationError
from ontology_navigator.schemas.ontology_schema import NamespaceEntry


@pytest.fixture
def namespaces():
    return NamespaceDictionary.from_pairs([
        ('ex', 'http://example.com/'),
        ('exv', 'http://example.com/vocab#'),
        ('owl', 'http://www.w3.org/2002/07/owl#'),
    ])


class TestCompression:
    def test_prefix_form(self, namespaces):
        assert namespaces.compress("http://example.com/Person") == "ex:Person"

    def test_nested_path_falls_back_to_brackets(self, namespaces):
        assert namespaces.compress("http://example.com/a/Person") == "<example.com/a/Person>"

    def test_longest_namespace_wins(self, namespaces):
        assert namespaces.compress("http://example.com/vocab#Term") == "exv:Term"

    def test_empty_local_part_is_not_a_match(self, namespaces):
        assert namespaces.compress("http://example.com/") == "<example.com/>"

    def test_non_web_identifier_unchanged(self, namespaces):
        assert namespaces.compress("urn:isbn:0451450523") == "urn:isbn:0451450523"

    def test_https_fallback(self):
        assert compress_uri("https://data.example.net/x", []) == "<data.example.net/x>"

    def test_compression_is_idempotent(self, namespaces):
        for uri in ("http://example.com/Person", "http://example.com/a/Person", "urn:x"):
            once = namespaces.compress(uri)
            assert namespaces.compress(once) == once

    def test_accepts_plain_entries(self):
        entries = [NamespaceEntry('owl', 'http://www.w3.org/2002/07/owl#')]
        assert compress_uri("http://www.w3.org/2002/07/owl#Class", entries) == "owl:Class"


class TestNamespaceDictionary:
    def test_common_prefixes(self):
        common = NamespaceDictionary.common()
        prefixes = {entry.prefix for entry in common}
        assert {'rdf', 'rdfs', 'owl', 'skos', 'sh', 'ex'} <= prefixes
        assert common.compress("http://www.w3.org/ns/shacl#NodeShape") == "sh:NodeShape"

    def test_from_json(self, tmp_path):
        path = tmp_path / "namespaces.json"
        path.write_text(json.dumps([{"prefix": "org", "uri": "http://org.example/"}]))

        namespaces = NamespaceDictionary.from_json(path)

        assert len(namespaces) == 1
        assert namespaces.compress("http://org.example/Unit") == "org:Unit"

    def test_from_json_rejects_bad_file(self, tmp_path):
        path = tmp_path / "namespaces.json"
        path.write_text(json.dumps([{"prefix": "org"}]))

        with pytest.raises(ConfigurationError):
            NamespaceDictionary.from_json(path)

    def test_from_json_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            NamespaceDictionary.from_json(tmp_path / "absent.json")
