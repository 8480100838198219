"""Metrics snapshot handed to the advice provider."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AdviceSnapshot(BaseModel):
    """Today's intake against the computed targets."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    weight: float
    height: float
    age: int
    goal: str
    today_kcal: int
    target_kcal: int
    today_protein: int
    target_protein: int
    workout_done: bool
