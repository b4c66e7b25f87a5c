from pydantic import BaseModel, ConfigDict, Field


class SafetyEvaluation(BaseModel):
    model_config = ConfigDict(frozen=True)

    safety_score: int = Field(ge=0, le=100)
    reason: str = Field(min_length=1)
