from __future__ import annotations

import asyncio
import logging
from datetime import date

from habit_hero.intents import MarkNotified, ResetDay
from habit_hero.reminders import Reminder
from habit_hero.session import GameSession

logger = logging.getLogger(__name__)

JOBS = ("reminders", "reset_day")


async def run_reminders(session: GameSession, today: date | None = None) -> list[Reminder]:
    if not session.loaded:
        await session.load()
    day = today or session.today()
    sent: list[Reminder] = []
    for reminder in session.pending_reminders(day):
        logger.info("reminder player=%s: %s", session.player_id, reminder.message(session.lang))
        result = session.dispatch(
            MarkNotified(kind=reminder.kind, entity_id=reminder.entity_id, today=reminder.days_left == 0)
        )
        if result.applied:
            sent.append(reminder)
    await session.outbox.flush()
    logger.info("reminders job done: %s sent", len(sent))
    return sent


async def run_reset_day(session: GameSession) -> int:
    if not session.loaded:
        await session.load()
    result = session.dispatch(ResetDay())
    await session.outbox.flush()
    logger.info("reset_day job: %s", result.message)
    return len(session.state.habits)


async def _run(job_name: str, session: GameSession) -> None:
    try:
        if job_name == "reminders":
            await run_reminders(session)
        else:
            await run_reset_day(session)
    finally:
        await session.close()


def run_job(job_name: str, session: GameSession) -> None:
    if job_name not in JOBS:
        raise SystemExit(f"Unknown job '{job_name}'. Expected one of: {', '.join(JOBS)}")
    asyncio.run(_run(job_name, session))
