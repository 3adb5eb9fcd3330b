from pydantic import BaseModel, Field
from typing import List, Optional

from estimation_engine.schemas import CodebaseMetrics, Requirement


class RiskAssessmentOptions(BaseModel):
    """Selects which detection passes run. All run by default."""
    technical: bool = True
    integration: bool = True
    business: bool = True
    resource: bool = True


class RiskRequest(BaseModel):
    """Request for risk assessment."""
    requirements: List[Requirement]
    codebase: Optional[CodebaseMetrics] = None
    options: RiskAssessmentOptions = Field(default_factory=RiskAssessmentOptions)
