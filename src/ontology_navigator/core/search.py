"""
Typeahead search resolver.

Turns free text into ranked candidate resources. Keystrokes are debounced;
a keystroke during the debounce window restarts it, and a response that
arrives after newer input is discarded by comparing request sequence numbers.

    IDLE -> DEBOUNCING -> QUERYING -> DISPLAYING -> IDLE
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Set
from dataclasses import dataclass, field

from rdflib.namespace import RDFS

from ..client.queries import search_resources
from ..config import ExplorerConfig
from ..exceptions import AmbiguousSelectionError, QueryError
from ..schemas.ontology_schema import Label, ResourceId
from .labels import best_label, local_name
from .namespaces import WEB_SCHEMES, NamespaceDictionary

logger = logging.getLogger(__name__)


class SearchPhase(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    QUERYING = "querying"
    DISPLAYING = "displaying"


class MatchKind(Enum):
    """How a candidate matched the search text, best first"""
    EXACT_LABEL = 0
    LABEL_PREFIX = 1
    LABEL_SUBSTRING = 2
    URI = 3


TYPE_RANK = {"Class": 0, "Instance": 1}


@dataclass
class SearchCandidate:
    """One ranked search suggestion"""
    resource_id: ResourceId
    display_label: str
    uri_display: str
    label: Optional[Label] = None
    type_hint: Optional[str] = None
    match: MatchKind = MatchKind.URI
    labels: List[Label] = field(default_factory=list)


@dataclass(frozen=True)
class Selection:
    """A confirmed resource to add to the view"""
    resource_id: ResourceId
    label: Optional[Label] = None


def is_web_address(text: str) -> bool:
    return text.startswith(WEB_SCHEMES) and len(text) > len('https://')


def _match_kind(needle: str, labels: List[Label]) -> MatchKind:
    texts = [label.text.lower() for label in labels]
    if needle in texts:
        return MatchKind.EXACT_LABEL
    if any(text.startswith(needle) for text in texts):
        return MatchKind.LABEL_PREFIX
    if any(needle in text for text in texts):
        return MatchKind.LABEL_SUBSTRING
    return MatchKind.URI


def rank_candidates(
    term: str,
    binding_set,
    namespaces: NamespaceDictionary,
    preferred_language: str = "en"
) -> List[SearchCandidate]:
    """Group search rows per resource and order them by match quality"""

    grouped: Dict[str, dict] = {}
    for row in binding_set:
        resource = row.get('resource')
        if resource is None or not resource.is_uri:
            continue

        entry = grouped.setdefault(resource.value, {'labels': [], 'types': set()})

        label = row.get('label')
        if label is not None and label.is_literal:
            prop = row.get('labelProp')
            candidate = Label(
                label.value,
                label.language,
                prop.value if prop is not None else str(RDFS.label)
            )
            if candidate not in entry['labels']:
                entry['labels'].append(candidate)

        type_hint = row.get('type')
        if type_hint is not None:
            entry['types'].add(type_hint.value)

    needle = term.strip().lower()
    candidates = []
    for resource_id, entry in grouped.items():
        labels = entry['labels']
        chosen = best_label(labels, preferred_language)
        type_hint = next((t for t in TYPE_RANK if t in entry['types']), None)
        candidates.append(SearchCandidate(
            resource_id=resource_id,
            display_label=chosen.text if chosen else local_name(resource_id),
            uri_display=namespaces.compress(resource_id),
            label=chosen,
            type_hint=type_hint,
            match=_match_kind(needle, labels),
            labels=labels
        ))

    # sorted() is stable, so first-seen order breaks the remaining ties
    return sorted(
        candidates,
        key=lambda c: (c.match.value, TYPE_RANK.get(c.type_hint, len(TYPE_RANK)))
    )


class SearchResolver:
    """Debounced, cancellable typeahead over the search query"""

    def __init__(
        self,
        gateway,
        namespaces: Optional[NamespaceDictionary] = None,
        config: Optional[ExplorerConfig] = None,
        graph: Optional[str] = None,
        on_update: Optional[Callable[["SearchResolver"], None]] = None
    ):
        config = config or ExplorerConfig()
        self.gateway = gateway
        self.namespaces = namespaces or NamespaceDictionary.common()
        self.debounce_seconds = config.search_debounce_ms / 1000.0
        self.min_chars = config.search_min_chars
        self.limit = config.search_limit
        self.preferred_language = config.preferred_language
        self.graph = graph
        self.on_update = on_update

        self.phase = SearchPhase.IDLE
        self.text = ""
        self.candidates: List[SearchCandidate] = []
        self.selected: Optional[SearchCandidate] = None
        self.error: Optional[str] = None
        self.queries_issued = 0

        self._request_seq = 0
        self._debounce_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    def _set_phase(self, phase: SearchPhase):
        self.phase = phase
        if self.on_update is not None:
            self.on_update(self)

    def _cancel_debounce(self):
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    def on_text_changed(self, text: str):
        """Keystroke event; must be called from within a running event loop"""
        text = text.strip()
        self._request_seq += 1
        self.text = text
        self.selected = None
        self._cancel_debounce()

        if len(text) < self.min_chars:
            self.candidates = []
            self.error = None
            self._set_phase(SearchPhase.IDLE)
            return

        self._set_phase(SearchPhase.DEBOUNCING)
        task = asyncio.get_running_loop().create_task(self._debounce(text, self._request_seq))
        self._debounce_task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _debounce(self, text: str, seq: int):
        await asyncio.sleep(self.debounce_seconds)
        # Past this point newer keystrokes no longer cancel the lookup
        self._debounce_task = None
        await self._run(text, seq)

    async def _run(self, text: str, seq: int) -> Optional[List[SearchCandidate]]:
        self._set_phase(SearchPhase.QUERYING)
        self.queries_issued += 1

        try:
            results = await self.gateway.execute(search_resources(text, self.limit, self.graph))
        except QueryError as e:
            if seq != self._request_seq:
                return None
            logger.warning(f"Search for '{text}' failed: {e}")
            self.candidates = []
            self.error = str(e)
            self._set_phase(SearchPhase.DISPLAYING)
            return []

        if seq != self._request_seq:
            logger.debug(f"Discarding stale search results for '{text}'")
            return None

        self.candidates = rank_candidates(text, results, self.namespaces, self.preferred_language)
        self.error = None
        logger.info(f"🔍 '{text}': {len(self.candidates)} candidates")
        self._set_phase(SearchPhase.DISPLAYING)
        return self.candidates

    async def search(self, text: str) -> List[SearchCandidate]:
        """Immediate lookup without debouncing"""
        text = text.strip()
        self._request_seq += 1
        self._cancel_debounce()
        self.text = text
        self.selected = None
        if len(text) < self.min_chars:
            self.candidates = []
            self._set_phase(SearchPhase.IDLE)
            return []
        return await self._run(text, self._request_seq) or []

    def select(self, index: int) -> SearchCandidate:
        """Pick a displayed candidate by position"""
        if not 0 <= index < len(self.candidates):
            raise AmbiguousSelectionError(f"No search suggestion at position {index}")
        self.selected = self.candidates[index]
        return self.selected

    def confirm(self, text: Optional[str] = None) -> Selection:
        """
        Resolve the current input to a resource: the selected candidate if
        any, otherwise the typed text when it is an absolute web address.
        """

        if self.selected is not None:
            selection = Selection(self.selected.resource_id, self.selected.label)
            self.reset()
            return selection

        typed = (self.text if text is None else text).strip()
        if is_web_address(typed):
            self.reset()
            return Selection(typed)

        if not typed:
            raise AmbiguousSelectionError("Nothing to add: type a search term first")
        if self.phase is SearchPhase.DISPLAYING and not self.candidates:
            raise AmbiguousSelectionError(f"No resources match '{typed}'")
        raise AmbiguousSelectionError("Please select a resource from the search suggestions")

    def reset(self):
        self._cancel_debounce()
        self._request_seq += 1
        self.text = ""
        self.candidates = []
        self.selected = None
        self.error = None
        self._set_phase(SearchPhase.IDLE)

    async def wait_idle(self):
        """Wait for pending debounce timers and in-flight lookups"""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
