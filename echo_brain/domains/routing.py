from pydantic import BaseModel, ConfigDict, Field

from echo_brain.domains.enums import QueryIntent


class IntentAnalysis(BaseModel):
    """Classification of a user query's purpose."""
    model_config = ConfigDict(extra="forbid")

    intent: QueryIntent
    confidence: float = Field(
        ..., description="Confidence in the classification", ge=0.0, le=1.0
    )
