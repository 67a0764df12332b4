from __future__ import annotations

import logging
import uuid

from habit_hero.storage import LocalStore

logger = logging.getLogger(__name__)


def get_or_create_player_id(store: LocalStore) -> str:
    existing = store.get_player_id()
    if existing:
        return existing
    player_id = str(uuid.uuid4())
    store.set_player_id(player_id)
    logger.info("Created player identity %s", player_id)
    return player_id
