"""Pydantic models for sync and coach request bodies."""

from pydantic import BaseModel, ConfigDict, Field

from jefit.domain.advice import AdviceSnapshot


class PushRequest(BaseModel):
    """Tagged mutation sent to ``POST /api/sync``."""

    action: str
    data: dict[str, object] | None = None


class CoachRequest(BaseModel):
    """Advice request sent to ``POST /api/coach``."""

    model_config = ConfigDict(populate_by_name=True)

    user_data: AdviceSnapshot = Field(alias="userData")
    question: str | None = None
