from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union

from estimation_engine.schemas import ComplexityFactorsUpdate, Requirement


class Scored(BaseModel):
    """Rating obtained from the text scoring backend."""
    kind: Literal["scored"] = "scored"
    value: float = Field(..., ge=1, le=10)


class Fallback(BaseModel):
    """Heuristic rating used because the backend failed or answered unusably."""
    kind: Literal["fallback"] = "fallback"
    value: float = Field(..., ge=1, le=10)
    reason: str


ScoringOutcome = Annotated[Union[Scored, Fallback], Field(discriminator="kind")]


class ComplexityOptions(BaseModel):
    """Per-call options for complexity calculation."""
    custom_factors: Optional[ComplexityFactorsUpdate] = None
    context: List[str] = Field(default_factory=list)


class ComplexityRequest(BaseModel):
    """Request for complexity calculation."""
    requirements: List[Requirement]
    options: Optional[ComplexityOptions] = None


class RequirementCategories(BaseModel):
    """Axis membership of a single requirement."""
    technical: bool = False
    integration: bool = False
    business: bool = False
    extensive_testing: bool = False
