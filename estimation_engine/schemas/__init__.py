from .requirement import (
    EstimationFeedback,
    HistoricalDataFilter,
    Priority,
    ProjectData,
    ProjectSize,
    Requirement,
    RequirementType,
)
from .estimation import (
    BreakdownCategory,
    BufferedTimeEstimate,
    CalibrationResult,
    CodebaseMetrics,
    CodeIssue,
    ComplexityFactor,
    ComplexityFactors,
    ComplexityFactorsUpdate,
    ComplexityScore,
    CostBreakdown,
    CostLineItem,
    EstimateBreakdown,
    EstimateValidation,
    ProjectEstimate,
    RateConfiguration,
    ResourceAllocation,
    ResourceBasedEstimate,
    ResourceBreakdown,
    RiskAssessment,
    RiskFactor,
    ScenarioName,
    TeamConfiguration,
    TimeEstimate,
)

__all__ = [
    "BreakdownCategory",
    "BufferedTimeEstimate",
    "CalibrationResult",
    "CodebaseMetrics",
    "CodeIssue",
    "ComplexityFactor",
    "ComplexityFactors",
    "ComplexityFactorsUpdate",
    "ComplexityScore",
    "CostBreakdown",
    "CostLineItem",
    "EstimateBreakdown",
    "EstimateValidation",
    "EstimationFeedback",
    "HistoricalDataFilter",
    "Priority",
    "ProjectData",
    "ProjectEstimate",
    "ProjectSize",
    "RateConfiguration",
    "Requirement",
    "RequirementType",
    "ResourceAllocation",
    "ResourceBasedEstimate",
    "ResourceBreakdown",
    "RiskAssessment",
    "RiskFactor",
    "ScenarioName",
    "TeamConfiguration",
    "TimeEstimate",
]
