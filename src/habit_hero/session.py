from __future__ import annotations

import logging
from collections import deque
from datetime import date, datetime

from habit_hero.converters import state_to_snapshot
from habit_hero.economy import effective_tuning
from habit_hero.identity import get_or_create_player_id
from habit_hero.intents import Intent
from habit_hero.models import GameState
from habit_hero.outbox import RemoteOutbox
from habit_hero.reconciler import LoadResult, reconcile
from habit_hero.reducer import MutationResult, ReducerContext, apply_intent
from habit_hero.reminders import Reminder, pending_notifications
from habit_hero.service import HeroStatus, build_status
from habit_hero.storage import LocalStore, RemoteStore, StorageError
from habit_hero.time_utils import DEFAULT_TZ, now_local

logger = logging.getLogger(__name__)

COMMAND_LOG_LIMIT = 500


class GameSession:
    """Owns the current GameState and persists it after every applied intent."""

    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        outbox: RemoteOutbox | None = None,
        tuning: dict[str, int] | None = None,
        lang: str = "en",
        tz_name: str = DEFAULT_TZ,
        player_id: str | None = None,
        command_log_limit: int = COMMAND_LOG_LIMIT,
    ) -> None:
        self.local = local
        self.remote = remote
        self.outbox = outbox or RemoteOutbox(remote)
        self.tuning = effective_tuning(tuning)
        self.lang = lang
        self.tz_name = tz_name
        self.player_id = player_id
        self.source: str | None = None
        # most recent applied intents, oldest dropped first
        self.command_log: deque[Intent] = deque(maxlen=command_log_limit)
        self._state: GameState | None = None

    @property
    def loaded(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> GameState:
        if self._state is None:
            raise RuntimeError("Session is not loaded; call load() first")
        return self._state

    async def load(self) -> LoadResult:
        if self.player_id is None:
            self.player_id = get_or_create_player_id(self.local)
        result = await reconcile(self.player_id, self.local, self.remote)
        self._state = result.state
        self.source = result.source
        return result

    def dispatch(self, intent: Intent, now: datetime | None = None) -> MutationResult:
        state = self.state
        ctx = ReducerContext(now=now or now_local(self.tz_name), tuning=self.tuning, lang=self.lang)
        result = apply_intent(state, intent, ctx)
        if not result.applied:
            return result

        self._state = result.state
        self.command_log.append(intent)
        self._persist(result.state)
        return result

    def _persist(self, state: GameState) -> None:
        assert self.player_id is not None
        snapshot = state_to_snapshot(state)
        try:
            self.local.save_snapshot(self.player_id, snapshot)
        except StorageError as exc:
            logger.error("Local write failed for player=%s: %s", self.player_id, exc)
        self.outbox.submit(self.player_id, snapshot)

    def today(self) -> date:
        return now_local(self.tz_name).date()

    def status(self, today: date | None = None) -> HeroStatus:
        return build_status(self.state, today or self.today(), tuning=self.tuning)

    def pending_reminders(self, today: date | None = None) -> tuple[Reminder, ...]:
        window = int(self.tuning["goal_reminder_days"])
        return pending_notifications(self.state, today or self.today(), goal_window=window)

    async def close(self) -> None:
        await self.outbox.stop()
        await self.remote.aclose()
