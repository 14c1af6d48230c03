"""Input and report models for training data collection."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PairInput(BaseModel):
    """A prompt/response pair submitted for a training session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt: str
    response: str
    quality_score: Optional[int] = None
    tokens_used: int = Field(default=0, ge=0)
    user_feedback: Optional[str] = None


class SessionStats(BaseModel):
    """Aggregate view of the pairs collected in one session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_pairs: int = 0
    rated_pairs: int = 0
    average_quality: float = 0.0
    total_tokens: int = 0
    estimated_cost: float = 0.0
    high_quality_pairs: int = 0
    ready_for_training: bool = False
    recommended_minimum: Optional[int] = None
