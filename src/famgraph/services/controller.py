"""GraphViewController — one graph view session, from data to painted layout.

State machine per session::

    IDLE -> BUILDING -> AWAITING_STORED_POSITIONS -> READY
              ^                                        |
              +------------- rebuild(persons) ---------+

Building (index, build, layout) is synchronous. Only the stored-position
load and the explicit save suspend. Every rebuild takes a fresh token;
a load that resolves after a newer rebuild started is discarded, so a
stale layout never overwrites a newer one.

Nodes and edges are only exposed once READY for the current token: the
renderer never sees computed positions that stored positions are about
to replace.

The node/edge/position collection is owned by the controller alone.
Subscribers receive immutable snapshots.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import StrEnum

from pydantic import BaseModel, Field

from famgraph.domain.graph import GraphEdge, GraphNode, Point, Selection
from famgraph.domain.layouts import (
    Layout,
    PositionRecord,
    extract_positions,
    layout_key,
    merge_positions,
)
from famgraph.domain.people import Person
from famgraph.services.builder import build_graph
from famgraph.services.indexer import index_relations
from famgraph.services.layout import LayeredLayoutEngine
from famgraph.services.positions import LayoutSaveError, PositionStore
from famgraph.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


class ViewState(StrEnum):
    """Lifecycle of a graph view session."""

    IDLE = "idle"
    BUILDING = "building"
    AWAITING_STORED_POSITIONS = "awaiting_stored_positions"
    READY = "ready"


class ViewSnapshot(BaseModel):
    """What the renderer may paint right now."""

    model_config = {"frozen": True}

    state: ViewState
    token: int
    layout_key: str | None = None
    family_id: int | None = None
    stored_layout_applied: bool = False
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    @property
    def positions(self) -> dict[str, Point]:
        return {n.id: n.position for n in self.nodes}


type Listener = Callable[[ViewSnapshot], None]


class GraphViewController:
    """Orchestrates rebuilds, position merging, drags and explicit saves.

    Args:
        store: Two-tier position store.
        family_id: Family scoping the session's saved layout, if any.
        layout_engine: Layout engine; defaults to one with stock settings.
        selection: Initial selection flags.
    """

    def __init__(
        self,
        store: PositionStore,
        *,
        family_id: int | None = None,
        layout_engine: LayeredLayoutEngine | None = None,
        selection: Selection | None = None,
    ) -> None:
        self._store = store
        self._family_id = family_id
        self._layout = layout_engine or LayeredLayoutEngine()
        self._selection = selection or Selection()

        self._state = ViewState.IDLE
        self._token = 0
        self._key: str | None = None
        self._person_ids: list[str] = []
        self._computed: list[GraphNode] = []
        self._nodes: list[GraphNode] = []
        self._edges: list[GraphEdge] = []
        self._stored_applied = False

        self._listeners: list[Listener] = []
        self._save_task: asyncio.Task[ServiceResult] | None = None

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def family_id(self) -> int | None:
        return self._family_id

    def current_state(self) -> ViewSnapshot:
        """Snapshot of the session. Nodes and edges are empty until READY."""
        ready = self._state is ViewState.READY
        return ViewSnapshot(
            state=self._state,
            token=self._token,
            layout_key=self._key,
            family_id=self._family_id,
            stored_layout_applied=self._stored_applied if ready else False,
            nodes=list(self._nodes) if ready else [],
            edges=list(self._edges) if ready else [],
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with a snapshot on every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.current_state()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.warning("View listener %r failed", listener, exc_info=True)

    def _set_state(self, state: ViewState) -> None:
        self._state = state
        self._notify()

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    async def rebuild(
        self,
        persons: Sequence[Person],
        *,
        use_stored: bool = True,
    ) -> ViewSnapshot | None:
        """Rebuild from scratch for *persons* and merge stored positions.

        Returns the READY snapshot, or None when a newer rebuild superseded
        this one while its stored-position load was in flight.
        ``use_stored=False`` skips the load and paints computed positions.
        """
        self._token += 1
        token = self._token
        self._set_state(ViewState.BUILDING)

        graph = build_graph(persons, index_relations(persons), selection=self._selection)
        computed = self._layout.apply(graph)
        self._person_ids = graph.node_ids
        self._key = layout_key(self._family_id, self._person_ids)
        self._computed = computed
        self._edges = list(graph.edges)
        self._nodes = list(computed)
        self._stored_applied = False

        if not use_stored:
            self._set_state(ViewState.READY)
            return self.current_state()

        self._set_state(ViewState.AWAITING_STORED_POSITIONS)
        loaded: Layout | None
        try:
            loaded = await self._store.load_layout(self._family_id, self._person_ids)
        except Exception:
            logger.warning("Stored layout load failed; using computed layout", exc_info=True)
            loaded = None

        if token != self._token:
            logger.debug("Discarding stored layout for superseded rebuild %d", token)
            return None

        self._nodes = merge_positions(computed, loaded)
        self._stored_applied = loaded is not None and bool(loaded.positions)
        self._set_state(ViewState.READY)
        return self.current_state()

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Move one node (a drag). No rebuild, no save.

        Returns False when the view is not READY or *node_id* is unknown.
        """
        if self._state is not ViewState.READY:
            return False
        if node_id not in {n.id for n in self._nodes}:
            return False
        moved = Point(x=x, y=y)
        self._nodes = [
            n.model_copy(update={"position": moved}) if n.id == node_id else n for n in self._nodes
        ]
        self._notify()
        return True

    def set_selection(self, selection: Selection) -> None:
        """Update selection flags in place; structure and positions are untouched."""
        self._selection = selection

        def flag(node: GraphNode) -> GraphNode:
            return node.model_copy(
                update={
                    "selected_a": selection.selected_a == node.id,
                    "selected_b": selection.selected_b == node.id,
                    "is_me": selection.me == node.id,
                }
            )

        self._nodes = [flag(n) for n in self._nodes]
        self._computed = [flag(n) for n in self._computed]
        self._notify()

    # ------------------------------------------------------------------
    # Persistence commands
    # ------------------------------------------------------------------

    async def save_current_layout(self) -> ServiceResult:
        """Persist the positions on screen right now.

        Positions are snapshotted at call time; drags after that belong to
        the next save. While a save is in flight, further calls wait for
        and return that same save instead of starting a second write.
        """
        if self._save_task is not None and not self._save_task.done():
            return await asyncio.shield(self._save_task)

        if self._state is not ViewState.READY:
            return ServiceResult(
                ok=False,
                op="save_layout",
                error=ServiceError(
                    code="NOT_READY",
                    message=f"Cannot save while the view is {self._state.value}",
                ),
            )
        if not self._nodes:
            return ServiceResult(
                ok=True,
                op="save_layout",
                data={"layout_key": self._key, "count": 0},
                warnings=["Nothing to save: the graph is empty"],
            )

        layout = extract_positions(self._nodes, family_id=self._family_id)
        self._save_task = asyncio.ensure_future(
            self._save(layout.positions, list(self._person_ids), self._key or "")
        )
        return await asyncio.shield(self._save_task)

    async def _save(
        self,
        positions: Sequence[PositionRecord],
        person_ids: list[str],
        key: str,
    ) -> ServiceResult:
        try:
            stored = await self._store.save_layout(self._family_id, positions, person_ids)
        except LayoutSaveError as exc:
            logger.warning("Layout save failed: %s", exc)
            return ServiceResult(
                ok=False,
                op="save_layout",
                error=ServiceError(
                    code="SAVE_FAILED",
                    message=str(exc),
                    detail={"layout_key": exc.layout_key, "retryable": True},
                ),
            )
        logger.debug("Saved %d positions under %s", len(stored.positions), key)
        return ServiceResult(
            ok=True,
            op="save_layout",
            data={
                "layout_key": key,
                "family_id": self._family_id,
                "count": len(stored.positions),
            },
        )

    def reset_layout(self) -> ViewSnapshot:
        """Drop the locally cached layout and fall back to computed positions."""
        self._store.clear_layout(self._family_id, self._person_ids)
        if self._state is ViewState.READY:
            self._nodes = list(self._computed)
            self._stored_applied = False
            self._notify()
        return self.current_state()
