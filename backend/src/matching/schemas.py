import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntityKind(str, enum.Enum):
    CLIENT = "client"
    PRODUCT = "product"


class Confidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchResult(BaseModel):
    """
    Ranked candidates for one extracted entity.

    ``matches`` holds at most three candidates, best first, in the form they
    were passed in (ORM rows, schemas or dicts). ``scores`` is aligned with
    ``matches``. ``confidence`` is derived from the top score only.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    matches: list[Any] = Field(default_factory=list)
    confidence: Confidence = Confidence.LOW
    scores: list[float] = Field(default_factory=list)

    @property
    def best(self) -> Any:
        return self.matches[0] if self.matches else None
