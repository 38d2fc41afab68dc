from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..auth.session_state import AuthSession
from .reconciler import Workspace

logger = logging.getLogger(__name__)

WorkspaceFactory = Callable[[AuthSession], Workspace]

DEFAULT_MAX_AGE = 30.0
DEFAULT_IDLE_TIMEOUT = 30 * 60.0


@dataclass
class _Entry:
    workspace: Workspace
    loaded_at: float
    used_at: float


class WorkspaceRegistry:
    """Loaded :class:`Workspace` objects of this process, one per signed-in user.

    Other processes (and other devices served by them) write to the same
    store, so a workspace older than ``max_age`` seconds is refetched before
    it is handed out; ``max_age=0`` refetches on every request. Workspaces
    unused for ``idle_timeout`` seconds are dropped.
    """

    def __init__(
        self,
        factory: WorkspaceFactory,
        *,
        max_age: float = DEFAULT_MAX_AGE,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._max_age = max_age
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._entries: dict[int, _Entry] = {}

    def open(self, user_id: int) -> Workspace:
        """Return the user's workspace, loading it on first use and refetching it when stale."""

        now = self._clock()
        self._evict_idle(now)

        entry = self._entries.get(user_id)
        if entry is None:
            workspace = self._factory(AuthSession.authenticated(user_id))
            workspace.refresh()
            entry = self._entries[user_id] = _Entry(workspace, loaded_at=now, used_at=now)
            logger.info("Workspace loaded for user %s", user_id)
        elif now - entry.loaded_at >= self._max_age:
            entry.workspace.refresh()
            entry.loaded_at = now

        entry.used_at = now
        return entry.workspace

    def refresh(self, user_id: int) -> Workspace:
        """Refetch every collection now, as a full page load does."""

        entry = self._entries.get(user_id)
        if entry is None:
            return self.open(user_id)
        now = self._clock()
        entry.workspace.refresh()
        entry.loaded_at = entry.used_at = now
        return entry.workspace

    def close(self, user_id: int) -> None:
        """Sign the workspace out (which empties its caches) and forget it."""

        entry = self._entries.pop(user_id, None)
        if entry is not None:
            entry.workspace.auth.sign_out()

    def _evict_idle(self, now: float) -> None:
        idle = [uid for uid, e in self._entries.items() if now - e.used_at >= self._idle_timeout]
        for uid in idle:
            self.close(uid)
            logger.info("Workspace of user %s dropped after %.0fs idle", uid, self._idle_timeout)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
