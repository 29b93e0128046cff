"""
Configuration for the SPARQL endpoint and the explorer session.

Both models can be built directly or from environment variables.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


def _env_bool(env: Mapping[str, str], name: str) -> Optional[bool]:
    raw = env.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean value for {name}: {raw}")


def _collect(env: Mapping[str, str], mapping: Mapping[str, str]) -> dict:
    return {field_name: env[var] for var, field_name in mapping.items() if env.get(var)}


class EndpointSettings(BaseModel):
    """Connection settings for the SPARQL query endpoint"""
    endpoint: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    verify_ssl: bool = True
    default_graph: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EndpointSettings":
        env = os.environ if env is None else env

        if not env.get('SPARQL_ENDPOINT'):
            raise ConfigurationError("Missing required environment variable: SPARQL_ENDPOINT")
        if env.get('SPARQL_USERNAME') and not env.get('SPARQL_PASSWORD'):
            raise ConfigurationError("SPARQL_PASSWORD is required when SPARQL_USERNAME is set")

        values = _collect(env, {
            'SPARQL_ENDPOINT': 'endpoint',
            'SPARQL_USERNAME': 'username',
            'SPARQL_PASSWORD': 'password',
            'SPARQL_TIMEOUT_SECONDS': 'timeout_seconds',
            'SPARQL_DEFAULT_GRAPH': 'default_graph',
        })
        verify_ssl = _env_bool(env, 'VERIFY_SSL')
        if verify_ssl is not None:
            values['verify_ssl'] = verify_ssl

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid endpoint settings: {e}") from e


class ExplorerConfig(BaseModel):
    """Behavior of one exploration session"""
    auto_expand: bool = True
    node_cap: int = Field(default=50, ge=1)
    search_debounce_ms: int = Field(default=300, ge=0)
    search_min_chars: int = Field(default=3, ge=1)
    preferred_language: str = "en"
    expansion_delay_ms: int = Field(default=1000, ge=0)
    search_limit: int = Field(default=20, ge=1)
    hierarchy_limit: int = Field(default=20, ge=1)
    property_limit: int = Field(default=15, ge=1)
    layout: str = "breadthfirst"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ExplorerConfig":
        env = os.environ if env is None else env

        values = _collect(env, {
            'GRAPH_MAX_NODES': 'node_cap',
            'GRAPH_EXPANSION_LIMIT': 'hierarchy_limit',
            'GRAPH_PROPERTY_LIMIT': 'property_limit',
            'GRAPH_SEARCH_LIMIT': 'search_limit',
            'SEARCH_DEBOUNCE_MS': 'search_debounce_ms',
            'EXPANSION_DELAY_MS': 'expansion_delay_ms',
            'PREFERRED_LANGUAGE': 'preferred_language',
        })
        auto_expand = _env_bool(env, 'GRAPH_AUTO_EXPAND')
        if auto_expand is not None:
            values['auto_expand'] = auto_expand

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid explorer settings: {e}") from e
