# tool_state_sync/synchronizer.py
"""
StateSynchronizer - the live state of one tool page.

All mutations go through ``set_field`` / ``set_fields``. Each call:
- replaces the typed state
- rewrites the affected address-bar mirror keys right away
- flags fields too large for the mirror instead of writing them
- drives history: input edits are committed after the debounce window,
  parameter edits amend the latest entry immediately

Each input field carries a small commit state machine:

    Idle --edit--> PendingCommit(v) --timer--> Committed(v)
                        |  ^                        |
                        |  +--------edit------------+
                        +--edit back to settled value--> Idle / Committed

Hydration seeds Committed(v), so data that was just loaded from history
or from a shared link is never committed again as if the user typed it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

from tool_state_sync.config import DEFAULT_DEBOUNCE_MS, OVERSIZE_THRESHOLD_BYTES
from tool_state_sync.history import HistoryStore, make_preview
from tool_state_sync.hydration import HistoryLoader, HydrationResult, default_history_loader
from tool_state_sync.models import HistoryEntry, HistoryFiles, HydrationSource
from tool_state_sync.scheduler import DebounceScheduler
from tool_state_sync.schema import FieldRole, FieldSpec, ToolSchema, ToolState
from tool_state_sync.url_state import encode_query, project_field, project_state

logger = logging.getLogger(__name__)

MirrorListener = Callable[[str], None]


class CommitPhase(str, Enum):
    """Where an input field stands relative to history."""

    IDLE = "idle"  # Never committed; holds its initial value
    PENDING = "pending_commit"  # Edited, waiting for the debounce window
    COMMITTED = "committed"  # Matches what history (or hydration) holds


class CommitTracker(BaseModel):
    """Commit state machine of one input field."""

    field: str
    phase: CommitPhase = CommitPhase.IDLE
    initial_value: str = ""
    pending_value: str | None = None
    committed_value: str | None = None

    @property
    def settled_value(self) -> str:
        """Value that needs no commit: last committed, else the initial one."""
        return self.committed_value if self.committed_value is not None else self.initial_value

    def edit(self, value: str) -> bool:
        """
        Apply a user edit.

        Returns:
            True if the field now has a pending commit.
        """
        if value == self.settled_value:
            self.phase = CommitPhase.COMMITTED if self.committed_value is not None else CommitPhase.IDLE
            self.pending_value = None
            return False
        self.phase = CommitPhase.PENDING
        self.pending_value = value
        return True

    def mark_committed(self, value: str) -> None:
        self.phase = CommitPhase.COMMITTED
        self.committed_value = value
        self.pending_value = None


class StateSynchronizer:
    """
    Owns a tool's current state, its address-bar mirror and its oversize set.

    Examples:
        ```python
        sync = StateSynchronizer(schema, hydration, history=history)
        await sync.set_field("leftText", "hello")        # mirror now, history after idle
        await sync.set_field("padding", False)           # mirror and history amend now
        sync.query_string                                # "leftText=hello&padding=false"
        await sync.close()
        ```
    """

    def __init__(
        self,
        schema: ToolSchema,
        hydration: HydrationResult | None = None,
        history: HistoryStore | None = None,
        scheduler: DebounceScheduler | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        oversize_threshold: int = OVERSIZE_THRESHOLD_BYTES,
        on_mirror_change: MirrorListener | None = None,
        on_load_history: HistoryLoader | None = None,
    ):
        self._schema = schema
        self._hydration = hydration or HydrationResult(source=HydrationSource.DEFAULT, state=schema.defaults())
        self._history = history
        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or DebounceScheduler()
        self._debounce_seconds = debounce_ms / 1000
        self._threshold = oversize_threshold
        self._on_mirror_change = on_mirror_change
        self._on_load_history = on_load_history or default_history_loader

        self._input_key = f"{schema.tool_id}:input"
        self._params_key = f"{schema.tool_id}:params"
        self._started = False
        self._closed = False

        self._state: ToolState = self._hydration.state
        projection = project_state(schema, self._state, self._threshold)
        self._mirror: dict[str, str] = projection.params
        self._oversize: set[str] = projection.oversize

        self._trackers = {
            name: CommitTracker(field=name, initial_value=getattr(self._state, name))
            for name in schema.input_fields
        }
        if self._hydration.source != HydrationSource.DEFAULT:
            self._seed_trackers()
        # Params last handed to or loaded from history. A param edit that lands
        # back on them writes nothing.
        self._committed_params: dict[str, Any] = self.params_snapshot()
        self._files: HistoryFiles | None = self._hydration.files

    # --- Read access ---

    @property
    def schema(self) -> ToolSchema:
        return self._schema

    @property
    def state(self) -> ToolState:
        return self._state

    @property
    def values(self) -> dict[str, Any]:
        return self._schema.to_values(self._state)

    @property
    def hydration(self) -> HydrationResult:
        return self._hydration

    @property
    def hydration_source(self) -> HydrationSource:
        return self._hydration.source

    @property
    def mirror(self) -> dict[str, str]:
        """Key/value pairs currently written to the address bar."""
        return dict(self._mirror)

    @property
    def query_string(self) -> str:
        return encode_query(self._mirror)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def files(self) -> HistoryFiles | None:
        """Files attached to the current input, stored with its next commit."""
        return self._files

    def get_oversize_keys(self) -> frozenset[str]:
        """Fields kept out of the mirror because of their size."""
        return frozenset(self._oversize)

    def is_oversize(self, name: str) -> bool:
        return name in self._oversize

    def tracker(self, name: str) -> CommitTracker:
        return self._trackers[name]

    def commit_phase(self, name: str) -> CommitPhase:
        return self._trackers[name].phase

    @property
    def has_pending_commit(self) -> bool:
        return self._scheduler.is_pending(self._input_key) or self._scheduler.is_pending(self._params_key)

    def inputs_snapshot(self) -> dict[str, str]:
        return {name: getattr(self._state, name) for name in self._schema.input_fields}

    def params_snapshot(self) -> dict[str, Any]:
        return {name: getattr(self._state, name) for name in self._schema.param_fields}

    def active_input_text(self) -> str:
        """Text of the input the user is working in."""
        active = self._schema.active_input_field(self._state)
        if active is not None:
            return getattr(self._state, active)
        return next((v for v in self.inputs_snapshot().values() if v), "")

    # --- Mutation ---

    async def set_field(self, name: str, value: Any, immediate: bool | None = None) -> None:
        """
        Update one field.

        Args:
            name: Field name declared by the schema
            value: New value, native or text form
            immediate: Commit history without waiting. Defaults to False for
                input fields and True for param fields. The mirror is always
                written immediately.

        Raises:
            UnknownFieldError: The schema does not declare ``name``
            InvalidFieldValueError: ``value`` is not legal for the field
        """
        await self.set_fields({name: value}, immediate=immediate)

    async def set_fields(self, updates: Mapping[str, Any], immediate: bool | None = None) -> None:
        """
        Update several fields as one edit.

        State and mirror are updated for every field before history is
        touched, so switching the side and typing into it in one call is
        seen as an edit of the newly active input.
        """
        coerced = {name: self._schema.coerce_field(name, value) for name, value in updates.items()}
        if not coerced:
            return
        self._state = self._state.model_copy(update=coerced)

        mirror_changed = False
        for name, value in coerced.items():
            mirror_changed |= self._project(self._schema.field(name), value)
        if mirror_changed:
            self._notify_mirror()

        if self._history is None or self._closed:
            return

        specs = [self._schema.field(name) for name in coerced]
        input_names = [s.name for s in specs if s.role == FieldRole.INPUT]
        param_specs = [s for s in specs if s.role == FieldRole.PARAM]

        if input_names:
            await self._on_input_edit(input_names, immediate if immediate is not None else False)
        if param_specs:
            await self._on_param_edit(immediate if immediate is not None else True)

    async def reset_to_defaults(self) -> None:
        self._files = None
        defaults = self._schema.to_values(self._schema.defaults())
        await self.set_fields(defaults, immediate=True)

    async def attach_files(self, files: HistoryFiles | None) -> None:
        """
        Attach opened files to the current input and commit right away.

        Passing None detaches them; the next input commit is stored without files.
        """
        self._files = files
        if self._history is None or self._closed or files is None:
            return
        self._scheduler.cancel(self._input_key)
        await self._commit_inputs()

    async def load_history_entry(self, entry: HistoryEntry) -> None:
        """
        Apply a history entry the user picked.

        The loaded values count as committed, so no history write follows.
        Fields the entry does not mention keep their current value.
        """
        self._scheduler.cancel(self._input_key)
        self._scheduler.cancel(self._params_key)

        merged = {**self.values, **self._on_load_history(entry)}
        self._state = self._schema.bind(merged)
        projection = project_state(self._schema, self._state, self._threshold)
        changed = projection.params != self._mirror
        self._mirror = projection.params
        self._oversize = projection.oversize
        self._files = entry.files
        self._seed_trackers()
        self._committed_params = self.params_snapshot()
        if changed:
            self._notify_mirror()
        logger.debug(f"Loaded history entry {entry.id} into {self._schema.tool_id}")

    # --- Lifecycle ---

    async def start(self) -> None:
        """
        Record a shared link in history once.

        Only state hydrated from the address bar is recorded; state loaded
        from history or defaults is already where it belongs.
        """
        if self._started:
            return
        self._started = True
        if self._history is None or self._hydration.source != HydrationSource.URL:
            return
        if self.active_input_text():
            await self._write_input_entry()
        else:
            self._committed_params = self.params_snapshot()
            await self._history.upsert_params(self._committed_params)

    async def flush(self) -> None:
        """Commit pending history writes now."""
        await self._scheduler.flush(self._input_key)
        await self._scheduler.flush(self._params_key)

    async def close(self) -> None:
        """Cancel pending commits. Nothing is written to history afterwards."""
        self._closed = True
        if self._owns_scheduler:
            await self._scheduler.aclose()
        else:
            self._scheduler.cancel(self._input_key)
            self._scheduler.cancel(self._params_key)

    async def __aenter__(self) -> StateSynchronizer:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # --- Internals ---

    def _seed_trackers(self) -> None:
        for name, tracker in self._trackers.items():
            tracker.mark_committed(getattr(self._state, name))

    def _project(self, spec: FieldSpec, value: Any) -> bool:
        """Rewrite one mirror key. Returns True if the mirror changed."""
        result = project_field(spec, value, self._threshold)
        if result.oversize:
            if spec.name not in self._oversize:
                logger.debug(f"{self._schema.tool_id}.{spec.name} exceeds {self._threshold} bytes, not mirrored")
            self._oversize.add(spec.name)
            return self._mirror.pop(spec.name, None) is not None

        self._oversize.discard(spec.name)
        if result.text is None:
            return self._mirror.pop(spec.name, None) is not None
        if self._mirror.get(spec.name) == result.text:
            return False
        self._mirror[spec.name] = result.text
        return True

    def _notify_mirror(self) -> None:
        if self._on_mirror_change is not None:
            self._on_mirror_change(self.query_string)

    async def _on_input_edit(self, names: list[str], immediate: bool) -> None:
        active = self._schema.active_input_field(self._state)
        pending = False
        for name in names:
            # Writes into the inactive pane are derived output, not user input
            if active is not None and name != active:
                continue
            pending |= self._trackers[name].edit(getattr(self._state, name))

        if not pending:
            if not any(t.phase == CommitPhase.PENDING for t in self._trackers.values()):
                self._scheduler.cancel(self._input_key)
            return

        if immediate:
            self._scheduler.cancel(self._input_key)
            await self._commit_inputs()
        else:
            self._scheduler.schedule(self._input_key, self._debounce_seconds, self._commit_inputs)

    async def _on_param_edit(self, immediate: bool) -> None:
        if self.params_snapshot() == self._committed_params:
            self._scheduler.cancel(self._params_key)
            return
        if immediate:
            self._scheduler.cancel(self._params_key)
            await self._commit_params()
        else:
            self._scheduler.schedule(self._params_key, self._debounce_seconds, self._commit_params)

    async def _commit_inputs(self) -> None:
        if self._history is None or self._closed:
            return
        # Settle trackers first so edits made while the write is in flight
        # are compared against what is being written. A failed write is not
        # retried; the edit still counts as committed.
        for name, tracker in self._trackers.items():
            tracker.mark_committed(getattr(self._state, name))
        has_files = self._files is not None and self._files.has_payload
        if not self.active_input_text() and not has_files:
            logger.debug(f"Skipping history commit for {self._schema.tool_id}: input is empty")
            return
        await self._write_input_entry()

    async def _write_input_entry(self) -> None:
        active_text = self.active_input_text()
        self._committed_params = self.params_snapshot()
        await self._history.upsert_input_entry(
            self.inputs_snapshot(),
            self._committed_params,
            self._schema.active_side(self._state),
            make_preview(active_text) if active_text else None,
            self._files,
        )

    async def _commit_params(self) -> None:
        if self._history is None or self._closed:
            return
        params = self.params_snapshot()
        if params == self._committed_params:
            return
        self._committed_params = params
        await self._history.upsert_params(params)
