"""
Namespace dictionary and URI compression.

The dictionary itself is maintained by an external namespace manager; the
navigator only reads it to turn full URIs into short display strings.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union

from ..exceptions import ConfigurationError
from ..schemas.ontology_schema import NamespaceEntry

logger = logging.getLogger(__name__)

COMMON_NAMESPACES: List[Tuple[str, str]] = [
    ('rdf', 'http://www.w3.org/1999/02/22-rdf-syntax-ns#'),
    ('rdfs', 'http://www.w3.org/2000/01/rdf-schema#'),
    ('xsd', 'http://www.w3.org/2001/XMLSchema#'),
    ('owl', 'http://www.w3.org/2002/07/owl#'),
    ('skos', 'http://www.w3.org/2004/02/skos/core#'),
    ('foaf', 'http://xmlns.com/foaf/0.1/'),
    ('dc', 'http://purl.org/dc/elements/1.1/'),
    ('dcterms', 'http://purl.org/dc/terms/'),
    ('schema', 'http://schema.org/'),
    ('sh', 'http://www.w3.org/ns/shacl#'),
    ('ex', 'http://example.com/'),
    ('exo', 'http://example.org/'),
]

WEB_SCHEMES = ('http://', 'https://')


def compress_uri(uri: str, namespaces: Iterable[NamespaceEntry]) -> str:
    """
    Compress a URI to prefix:local form using the longest matching namespace.

    A namespace only matches when the remaining local part is a leaf term
    (non-empty, no further '/' or '#'). Unmatched web addresses fall back to
    <host/path>; anything else is returned unchanged.
    """

    for entry in sorted(namespaces, key=lambda ns: len(ns.uri), reverse=True):
        if entry.uri and uri.startswith(entry.uri):
            local_part = uri[len(entry.uri):]
            if local_part and '/' not in local_part and '#' not in local_part:
                return f"{entry.prefix}:{local_part}"

    for scheme in WEB_SCHEMES:
        if uri.startswith(scheme):
            return f"<{uri[len(scheme):]}>"

    return uri


class NamespaceDictionary:
    """Read-only ordered collection of prefix bindings"""

    def __init__(self, entries: Iterable[NamespaceEntry] = ()):
        self._entries: Tuple[NamespaceEntry, ...] = tuple(entries)

    @classmethod
    def common(cls) -> "NamespaceDictionary":
        """Well-known vocabulary prefixes plus the example namespaces"""
        return cls.from_pairs(COMMON_NAMESPACES)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "NamespaceDictionary":
        return cls(NamespaceEntry(prefix, uri) for prefix, uri in pairs)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "NamespaceDictionary":
        """Load a [{"prefix": ..., "uri": ...}, ...] file written by the namespace manager"""
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding='utf-8'))
            entries = [NamespaceEntry(item['prefix'], item['uri']) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid namespace file {path}: {e}") from e

        logger.info(f"Loaded {len(entries)} namespaces from {path}")
        return cls(entries)

    def compress(self, uri: str) -> str:
        return compress_uri(uri, self._entries)

    def __iter__(self) -> Iterator[NamespaceEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
