"""
Estimation schemas: complexity, risk, time, cost and resource aggregates.

Every aggregate returned by the engine is created fresh per call. Variants
(scenarios, resource plans) are derived with ``model_copy`` rather than by
mutating the base estimate.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .requirement import Priority, Requirement

BreakdownCategory = Literal["Development", "Testing", "Documentation", "Deployment"]
ScenarioName = Literal["optimistic", "realistic", "pessimistic"]


# ---------------------------------------------------------------------------
# Complexity
# ---------------------------------------------------------------------------


class ComplexityFactors(BaseModel):
    """Weight multipliers applied to category scores."""

    model_config = ConfigDict(validate_assignment=True)

    technical: float = 1.0
    business: float = 0.8
    integration: float = 1.2
    testing: float = 0.6
    documentation: float = 0.4


class ComplexityFactorsUpdate(BaseModel):
    """Partial override of ComplexityFactors; unset fields are left alone."""

    technical: Optional[float] = None
    business: Optional[float] = None
    integration: Optional[float] = None
    testing: Optional[float] = None
    documentation: Optional[float] = None


class ComplexityFactor(BaseModel):
    """Named sub-score contributing to a complexity score."""

    name: str
    weight: float
    score: float
    description: str


class ComplexityScore(BaseModel):
    """Multi-axis complexity score. All axes are bounded to [1, 10]."""

    model_config = ConfigDict(frozen=True)

    overall: float = Field(..., ge=1, le=10)
    technical: float = Field(..., ge=1, le=10)
    business: float = Field(..., ge=1, le=10)
    integration: float = Field(..., ge=1, le=10)
    factors: List[ComplexityFactor] = Field(default_factory=list)

    @property
    def average_axis(self) -> float:
        return (self.technical + self.business + self.integration) / 3


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


class RiskFactor(BaseModel):
    """A detected risk with its mitigation."""

    id: str
    name: str
    probability: float = Field(..., ge=0, le=1)
    impact: Priority
    description: str
    mitigation: str


class RiskAssessment(BaseModel):
    """Aggregated risk picture for a set of requirements."""

    overall: Priority = "low"
    factors: List[RiskFactor] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class CodeIssue(BaseModel):
    """Known issue in an existing codebase."""

    severity: Priority
    description: str = ""


class CodebaseMetrics(BaseModel):
    """Codebase health signals fed into the technical risk pass."""

    technical_debt: float = Field(default=0.0, ge=0, le=1)
    dependencies: List[str] = Field(default_factory=list)
    issues: List[CodeIssue] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Time and cost
# ---------------------------------------------------------------------------


class RateConfiguration(BaseModel):
    """Billing rates read by every cost calculation."""

    hourly_rate: float = 100.0
    currency: str = "USD"
    overhead: float = 0.3
    profit_margin: float = 0.2


class EstimateBreakdown(BaseModel):
    """Hours allocated to one delivery phase."""

    category: str
    hours: float
    description: str
    requirements: List[str] = Field(default_factory=list)


class TimeEstimate(BaseModel):
    total_hours: float
    breakdown: List[EstimateBreakdown]
    confidence: float = Field(..., ge=0.1, le=1.0)
    assumptions: List[str] = Field(default_factory=list)


class BufferedTimeEstimate(TimeEstimate):
    buffer: float
    total_with_buffer: float


class CostLineItem(BaseModel):
    category: str
    hours: float
    cost: float
    description: str


class CostBreakdown(BaseModel):
    """Per-phase cost with overhead and profit applied on top."""

    line_items: List[CostLineItem]
    subtotal: float
    overhead: float
    profit: float
    total: float
    currency: str = "USD"


class ProjectEstimate(BaseModel):
    """Complete estimate for a set of requirements."""

    id: str
    created_at: datetime
    updated_at: datetime
    total_hours: float
    total_cost: float
    breakdown: List[EstimateBreakdown]
    risks: List[RiskFactor] = Field(default_factory=list)
    assumptions: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.1, le=1.0)
    requirements: List[Requirement] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class TeamConfiguration(BaseModel):
    """Team composition and per-tier hourly rates."""

    senior_developers: int = Field(default=0, ge=0)
    mid_developers: int = Field(default=0, ge=0)
    junior_developers: int = Field(default=0, ge=0)
    senior_rate: float = Field(default=0.0, ge=0)
    mid_rate: float = Field(default=0.0, ge=0)
    junior_rate: float = Field(default=0.0, ge=0)

    @property
    def total_members(self) -> int:
        return self.senior_developers + self.mid_developers + self.junior_developers


class ResourceAllocation(BaseModel):
    hours: float
    cost: float
    developers: int


class ResourceBreakdown(BaseModel):
    senior: ResourceAllocation
    mid: ResourceAllocation
    junior: ResourceAllocation


class ResourceBasedEstimate(ProjectEstimate):
    resource_breakdown: ResourceBreakdown


# ---------------------------------------------------------------------------
# Calibration and validation
# ---------------------------------------------------------------------------


class CalibrationResult(BaseModel):
    """Accuracy and directional bias of past estimates.

    ``bias`` is mean((estimated - actual) / actual); the calibration
    recommendations read a positive value as systematic underestimation.
    """

    accuracy: float = Field(..., ge=0, le=1)
    bias: float
    recommendations: List[str] = Field(default_factory=list)


class EstimateValidation(BaseModel):
    valid: bool
    warnings: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
