"""
Error taxonomy for ontology exploration.

Every failure is scoped to one query, one node expansion or one user
selection; none of them is fatal to the explorer session.
"""

from typing import Dict, Optional


class NavigatorError(Exception):
    """Base exception for all navigator errors."""


class ConfigurationError(NavigatorError):
    """Missing or invalid endpoint / explorer settings."""


class QueryError(NavigatorError):
    """A SPARQL call failed or the endpoint reported a fault."""

    def __init__(self, message: str, kind=None, status_code: Optional[int] = None):
        self.message = message
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)


class ExpansionError(NavigatorError):
    """All neighborhood queries of one expansion failed."""

    def __init__(self, node_id: str, failures: Dict):
        self.node_id = node_id
        self.failures = failures
        kinds = ", ".join(getattr(kind, "value", str(kind)) for kind in failures)
        super().__init__(f"Expansion of {node_id} failed ({kinds})")


class AmbiguousSelectionError(NavigatorError):
    """The search text does not resolve to a single resource."""
