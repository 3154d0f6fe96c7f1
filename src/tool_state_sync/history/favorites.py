# tool_state_sync/history/favorites.py
from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import ValidationError

from tool_state_sync.exceptions import StorageError
from tool_state_sync.models import FavoriteRecord, now_ms
from tool_state_sync.storage import FAVORITES_TABLE, KeyValueStore

log = logging.getLogger(__name__)

FavoritesListener = Callable[[list[str]], None]


class FavoritesStore:
    """
    Pinned tools, in the order they were pinned.

    Listeners registered with :meth:`subscribe` are called with the new
    list after every successful toggle, so other views of the same store
    can refresh.
    """

    def __init__(self, db: KeyValueStore, clock: Callable[[], int] = now_ms):
        self._db = db
        self._clock = clock
        self._favorites: list[str] = []
        self._listeners: list[FavoritesListener] = []

    @property
    def favorites(self) -> list[str]:
        return list(self._favorites)

    def is_favorite(self, tool_id: str) -> bool:
        return tool_id in self._favorites

    async def load(self) -> list[str]:
        try:
            rows = await self._db.get_all(FAVORITES_TABLE)
        except StorageError as e:
            log.warning(f"Failed to load favorites: {e}")
            return self.favorites
        records = []
        for row in rows:
            try:
                records.append(FavoriteRecord.from_row(row))
            except ValidationError as e:
                log.debug(f"Skipping unreadable favorite record: {e}")
        self._favorites = [r.tool_id for r in sorted(records, key=lambda r: r.added_at)]
        return self.favorites

    async def toggle(self, tool_id: str) -> bool:
        """
        Pin or unpin a tool.

        Returns:
            Membership after the toggle. Unchanged if the store failed.
        """
        try:
            existing = await self._db.get(FAVORITES_TABLE, tool_id)
            if existing is not None:
                await self._db.delete(FAVORITES_TABLE, tool_id)
                self._favorites = [t for t in self._favorites if t != tool_id]
            else:
                record = FavoriteRecord(tool_id=tool_id, added_at=self._clock())
                await self._db.put(FAVORITES_TABLE, record.to_row())
                self._favorites = [*(t for t in self._favorites if t != tool_id), tool_id]
        except StorageError as e:
            log.warning(f"Failed to toggle favorite {tool_id}: {e}")
            return self.is_favorite(tool_id)

        self._notify()
        return self.is_favorite(tool_id)

    def subscribe(self, listener: FavoritesListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.favorites
        for listener in list(self._listeners):
            listener(snapshot)
