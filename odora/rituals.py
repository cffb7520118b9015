"""Streak, completion count and badge tracking for finished rituals.

All gamification values live in one composite JSON record so an update is a
single write: there is no window where the streak is saved but the badges
are not.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import TYPE_CHECKING

import anyio
from loguru import logger
from pydantic import ValidationError

from .clock import Clock, calendar_date, system_clock
from .errors import StorageError
from .models import Badge, CompletionResult, RitualState
from .storage import read_json, write_json

if TYPE_CHECKING:
    from .storage import KeyValueStorage

__all__ = [
    "RITUALS_KEY",
    "BadgeMetric",
    "BadgeRule",
    "BADGE_RULES",
    "RitualTracker",
]

RITUALS_KEY = "@odora_rituals"
ONE_DAY = timedelta(days=1)


class BadgeMetric(str, Enum):
    STREAK = "streak"
    TOTAL_COUNT = "total_count"


@dataclass(frozen=True)
class BadgeRule:
    id: str
    name: str
    icon: str
    metric: BadgeMetric
    threshold: int

    def is_met(self, state: RitualState) -> bool:
        return getattr(state, self.metric.value) >= self.threshold

    def badge(self) -> Badge:
        return Badge(id=self.id, name=self.name, icon=self.icon)


# Evaluated in this order; simultaneous unlocks are appended in table order.
BADGE_RULES: tuple[BadgeRule, ...] = (
    BadgeRule("first_ritual", "First Ritual", "sparkles", BadgeMetric.TOTAL_COUNT, 1),
    BadgeRule("three_days", "Three Day Streak", "flame", BadgeMetric.STREAK, 3),
    BadgeRule("week_streak", "Week of Rituals", "calendar", BadgeMetric.STREAK, 7),
    BadgeRule("ten_rituals", "Ten Rituals", "ribbon", BadgeMetric.TOTAL_COUNT, 10),
    BadgeRule("month_streak", "Month of Memories", "trophy", BadgeMetric.STREAK, 30),
    BadgeRule("fifty_rituals", "Fifty Rituals", "star", BadgeMetric.TOTAL_COUNT, 50),
)


def _next_streak(state: RitualState, today: date) -> int:
    last = state.last_completion_date
    if last == today:
        return state.streak
    if last is not None and today - last == ONE_DAY:
        return state.streak + 1
    return 1


class RitualTracker:
    """Derives streak and badge state from completion events."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Clock = system_clock,
        tz: tzinfo | None = None,
        key: str = RITUALS_KEY,
        rules: tuple[BadgeRule, ...] = BADGE_RULES,
    ) -> None:
        self.storage = storage
        self.key = key
        self.tz = tz
        self.rules = rules
        self._clock = clock
        self._lock = anyio.Lock()

    def _today(self, now: datetime | None) -> date:
        return calendar_date(now or self._clock(), self.tz)

    async def _load(self) -> RitualState:
        data = await read_json(self.storage, self.key)
        if data is None:
            return RitualState()
        try:
            return RitualState.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Corrupt ritual state under '{self.key}': {e}", key=self.key) from e

    async def _save(self, state: RitualState) -> None:
        await write_json(self.storage, self.key, state.to_storage())

    async def get_state(self) -> RitualState:
        return await self._load()

    async def record_completion(self, now: datetime | None = None) -> CompletionResult:
        """Count one finished ritual and unlock any badges it earns."""
        today = self._today(now)

        async with self._lock:
            state = await self._load()
            streak = _next_streak(state, today)
            updated = state.model_copy(
                update={
                    "streak": streak,
                    "total_count": state.total_count + 1,
                    "longest_streak": max(state.longest_streak, streak),
                    "last_completion_date": today,
                }
            )

            earned = updated.badge_ids()
            new_badges = [
                rule.badge()
                for rule in self.rules
                if rule.id not in earned and rule.is_met(updated)
            ]
            updated.badges = [*updated.badges, *new_badges]
            await self._save(updated)

        logger.info(
            f"Ritual completed on {today.isoformat()}: streak={updated.streak} "
            f"total={updated.total_count}"
        )
        for badge in new_badges:
            logger.info(f"Badge unlocked: {badge.id}")
        return CompletionResult(state=updated, new_badges=new_badges)

    async def check_streak_validity(self, now: datetime | None = None) -> RitualState:
        """Zero the streak when the last completion was before yesterday."""
        today = self._today(now)

        async with self._lock:
            state = await self._load()
            last = state.last_completion_date
            if last is None or last in (today, today - ONE_DAY) or state.streak == 0:
                return state

            state.streak = 0
            await self._save(state)

        logger.info(f"Streak broken: last ritual on {last.isoformat()}")
        return state

    async def reset(self) -> None:
        async with self._lock:
            await self.storage.remove(self.key)
        logger.info("Ritual state reset")
