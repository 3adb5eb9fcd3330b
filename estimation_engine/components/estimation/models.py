from pydantic import BaseModel, Field
from typing import List, Optional

from estimation_engine.schemas import CodebaseMetrics, ComplexityFactorsUpdate, Requirement


class TimeEstimateOptions(BaseModel):
    """Per-call options for time estimation."""
    # When given, confidence also reflects how clearly these are written.
    requirements: List[Requirement] = Field(default_factory=list)
    # Skips similarity matching against history and uses this factor as is.
    historical_adjustment: Optional[float] = None


class ProjectEstimateOptions(BaseModel):
    """Per-call options for a full project estimate."""
    include_risks: bool = False
    use_historical_data: bool = False
    codebase_context: Optional[CodebaseMetrics] = None
    custom_factors: Optional[ComplexityFactorsUpdate] = None


class EstimationRequest(BaseModel):
    """Request for a full project estimate."""
    requirements: List[Requirement]
    options: ProjectEstimateOptions = Field(default_factory=ProjectEstimateOptions)
