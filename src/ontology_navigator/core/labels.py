"""
Label resolution for explored resources.

Picks the best human-readable label from the labels collected for a
resource: SKOS preferred label first, then rdfs:label, then SKOS alternate
label, then anything else.
"""

from typing import Dict, Iterable, Optional

from rdflib.namespace import RDFS, SKOS

from ..schemas.ontology_schema import Label

UNKNOWN_PRIORITY = 999

LABEL_PRIORITY: Dict[str, int] = {
    str(SKOS.prefLabel): 1,
    str(RDFS.label): 2,
    str(SKOS.altLabel): 3,
}

LABEL_PROPERTIES = tuple(LABEL_PRIORITY)


def label_priority(source_property: str) -> int:
    return LABEL_PRIORITY.get(source_property, UNKNOWN_PRIORITY)


def best_label(labels: Iterable[Label], preferred_language: str = "en") -> Optional[Label]:
    """
    Return the highest ranked label, or None when there are no labels.

    Ranking: labeling property priority, then preferred language, then
    untagged before language-tagged. The sort is stable, so remaining ties
    keep their input order.
    """

    def rank(label: Label):
        language = label.language or ""
        return (
            label_priority(label.source_property),
            0 if language == preferred_language else 1,
            0 if not language else 1,
        )

    ranked = sorted(labels, key=rank)
    return ranked[0] if ranked else None


def local_name(uri: str) -> str:
    """Extract local name from URI"""
    if '#' in uri:
        name = uri.rsplit('#', 1)[1]
    else:
        name = uri.rstrip('/').rsplit('/', 1)[-1]
    return name or uri


def display_label(uri: str, labels: Iterable[Label], preferred_language: str = "en") -> str:
    """Best label text for a resource, falling back to its local name"""
    label = best_label(labels, preferred_language)
    if label is not None and label.text:
        return label.text
    return local_name(uri)
