"""
Ontology Navigator

Incremental exploration of SPARQL-hosted ontologies:
- Typeahead search for a starting resource
- Bounded, deduplicated view graph of classes, properties and shapes
- Controlled one-hop expansion (subclasses, superclasses, domain/range)
- Pyvis rendering of the explored subgraph
"""

__version__ = "0.1.0"
