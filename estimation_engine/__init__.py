"""Project estimation engine: complexity, risk, time and cost estimates from requirements."""

from estimation_engine.components.base import ComponentError, EstimationValidationError, get_settings
from estimation_engine.components.complexity import ComplexityAnalyzer, ComplexityOptions
from estimation_engine.components.risks import RiskAnalyzer, RiskAssessmentOptions
from estimation_engine.components.estimation import (
    EstimationEngine,
    ProjectEstimateOptions,
    TimeEstimateOptions,
)
from estimation_engine.utils import GenerationOptions, OllamaClient, TextScoringClient

__version__ = "1.0.0"

__all__ = [
    "ComplexityAnalyzer",
    "ComplexityOptions",
    "ComponentError",
    "EstimationEngine",
    "EstimationValidationError",
    "GenerationOptions",
    "OllamaClient",
    "ProjectEstimateOptions",
    "RiskAnalyzer",
    "RiskAssessmentOptions",
    "TextScoringClient",
    "TimeEstimateOptions",
    "get_settings",
]
