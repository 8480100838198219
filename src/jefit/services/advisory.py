"""Advice gateway with fallbacks and superseding requests."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from jefit.domain.advice import AdviceSnapshot
from jefit.domain.reference import GOALS
from jefit.services.ledger import LocalLedger

SYSTEM_PROMPT = (
    "You are an expert, friendly and motivating fitness coach and nutritionist. "
    "Always answer in Italian, concisely (2-3 sentences at most). "
    "Use emoji to make the message engaging. "
    "Base your advice on the user data provided and keep it specific and practical."
)
EMPTY_ADVICE = "Non ho consigli al momento."
UNAVAILABLE_ADVICE = "Connessione al coach non disponibile."

_logger = logging.getLogger(__name__)


class AdviceClient(Protocol):
    """Interface for an advice provider."""

    async def get_advice(
        self, snapshot: AdviceSnapshot, question: str | None = None
    ) -> str:
        """Return free-text advice for the snapshot."""


def build_snapshot(ledger: LocalLedger) -> AdviceSnapshot:
    """Collect today's intake and targets from the ledger."""
    profile = ledger.profile
    target = ledger.daily_target()
    meals = ledger.today_meals()
    return AdviceSnapshot(
        weight=profile.weight,
        height=profile.height,
        age=profile.age,
        goal=GOALS[profile.goal].name,
        today_kcal=sum(meal.total_kcal for meal in meals),
        target_kcal=target.target_kcal,
        today_protein=sum(meal.total_protein for meal in meals),
        target_protein=target.protein,
        workout_done=ledger.today_workout_kcal() > 0,
    )


def format_user_context(snapshot: AdviceSnapshot, question: str | None) -> str:
    """Render the snapshot as the user message for a language model."""
    lines = [
        "USER DATA:",
        f"- Weight: {snapshot.weight}kg, Height: {snapshot.height}cm, "
        f"Age: {snapshot.age}",
        f"- Goal: {snapshot.goal}",
        f"- Today: {snapshot.today_kcal}/{snapshot.target_kcal} kcal eaten",
        f"- Protein: {snapshot.today_protein}/{snapshot.target_protein}g",
        f"- Workout today: {'yes' if snapshot.workout_done else 'no'}",
        "",
        f"QUESTION: {question}"
        if question
        else "Give a quick tip based on today's data.",
    ]
    return "\n".join(lines)


@dataclass
class AdvisoryService:
    """Fetches advice, degrading to a fixed message when unavailable."""

    client: AdviceClient
    _pending: asyncio.Task | None = field(default=None, init=False, repr=False)

    async def get_advice(
        self, snapshot: AdviceSnapshot, question: str | None = None
    ) -> str:
        """Return advice text, or a fallback message on any provider failure."""
        try:
            advice = await self.client.get_advice(snapshot, question)
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.exception("Advice provider failed")
            return UNAVAILABLE_ADVICE
        return advice.strip() or EMPTY_ADVICE

    async def request(
        self, snapshot: AdviceSnapshot, question: str | None = None
    ) -> str | None:
        """Start a request that supersedes any outstanding one.

        Returns ``None`` when a newer request cancelled this one.
        """
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        task = asyncio.create_task(self.get_advice(snapshot, question))
        self._pending = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._pending is not task:
                return None
            raise
