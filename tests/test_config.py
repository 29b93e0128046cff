import pytest

from ontology_navigator.config import EndpointSettings, ExplorerConfig
from ontology_navigator.exceptions import ConfigurationError

ENDPOINT = "http://localhost:3030/ontologies/sparql"


class TestEndpointSettings:
    def test_from_env(self):
        settings = EndpointSettings.from_env({
            'SPARQL_ENDPOINT': ENDPOINT,
            'SPARQL_USERNAME': 'admin',
            'SPARQL_PASSWORD': 'secret',
            'SPARQL_TIMEOUT_SECONDS': '12.5',
            'SPARQL_DEFAULT_GRAPH': 'http://example.com/graph',
            'VERIFY_SSL': 'false',
        })

        assert settings.endpoint == ENDPOINT
        assert settings.username == 'admin'
        assert settings.timeout_seconds == 12.5
        assert settings.default_graph == 'http://example.com/graph'
        assert settings.verify_ssl is False

    def test_defaults(self):
        settings = EndpointSettings.from_env({'SPARQL_ENDPOINT': ENDPOINT})
        assert settings.timeout_seconds == 30.0
        assert settings.verify_ssl is True
        assert settings.username is None

    def test_endpoint_required(self):
        with pytest.raises(ConfigurationError, match="SPARQL_ENDPOINT"):
            EndpointSettings.from_env({})

    def test_username_needs_password(self):
        with pytest.raises(ConfigurationError, match="SPARQL_PASSWORD"):
            EndpointSettings.from_env({'SPARQL_ENDPOINT': ENDPOINT, 'SPARQL_USERNAME': 'admin'})

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            EndpointSettings.from_env({'SPARQL_ENDPOINT': ENDPOINT, 'SPARQL_TIMEOUT_SECONDS': '-1'})
        with pytest.raises(ConfigurationError):
            EndpointSettings.from_env({'SPARQL_ENDPOINT': ENDPOINT, 'VERIFY_SSL': 'maybe'})


class TestExplorerConfig:
    def test_defaults(self):
        config = ExplorerConfig.from_env({})
        assert config.auto_expand is True
        assert config.node_cap == 50
        assert config.search_debounce_ms == 300
        assert config.search_min_chars == 3
        assert config.preferred_language == "en"
        assert config.hierarchy_limit == 20
        assert config.property_limit == 15

    def test_from_env(self):
        config = ExplorerConfig.from_env({
            'GRAPH_MAX_NODES': '80',
            'GRAPH_SEARCH_LIMIT': '10',
            'SEARCH_DEBOUNCE_MS': '150',
            'EXPANSION_DELAY_MS': '0',
            'PREFERRED_LANGUAGE': 'de',
            'GRAPH_AUTO_EXPAND': 'no',
        })

        assert config.node_cap == 80
        assert config.search_limit == 10
        assert config.search_debounce_ms == 150
        assert config.expansion_delay_ms == 0
        assert config.preferred_language == 'de'
        assert config.auto_expand is False

    def test_query_limits_from_env(self):
        config = ExplorerConfig.from_env({
            'GRAPH_EXPANSION_LIMIT': '8',
            'GRAPH_PROPERTY_LIMIT': '4',
        })

        assert config.hierarchy_limit == 8
        assert config.property_limit == 4

    def test_node_cap_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            ExplorerConfig.from_env({'GRAPH_MAX_NODES': '0'})
