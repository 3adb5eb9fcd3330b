"""Pure numeric helpers behind the estimation engine."""

import math
from typing import Dict, List, Sequence, Tuple

from estimation_engine.schemas import (
    BreakdownCategory,
    ComplexityFactors,
    ComplexityScore,
    EstimateBreakdown,
    EstimationFeedback,
    ProjectSize,
    Requirement,
    ScenarioName,
)
from estimation_engine.utils.keywords import matching_keywords

HOURS_PER_COMPLEXITY_POINT = 8
AXIS_WEIGHTS = {"technical": 0.4, "business": 0.3, "integration": 0.3}

HISTORICAL_ADJUSTMENT_RANGE = (0.7, 1.5)
HOURS_PER_COMPLEXITY_PROXY = 40
SIMILAR_COMPLEXITY_DISTANCE = 2

BREAKDOWN_SHARES: List[Tuple[BreakdownCategory, float, str]] = [
    ("Development", 0.60, "Core development work including implementation and unit testing"),
    ("Testing", 0.25, "Integration testing, system testing, and bug fixes"),
    ("Documentation", 0.10, "Technical documentation and user guides"),
    ("Deployment", 0.05, "Environment setup, deployment, and configuration"),
]
REQUIRED_CATEGORIES: List[BreakdownCategory] = ["Development", "Testing", "Documentation"]

BASE_CONFIDENCE = 0.7
CONFIDENCE_RANGE = (0.1, 1.0)
COMPLEXITY_CONFIDENCE_THRESHOLD = 5

VAGUE_TERMS = [
    "user-friendly", "intuitive", "flexible", "scalable", "robust", "efficient",
    "as needed", "appropriate", "good", "nice", "easy",
]
SPECIFIC_TERMS = [
    "api", "database", "authentication", "validation", "integration",
    "endpoint", "response", "request", "format", "protocol",
]

SCENARIO_FACTOR_SCALES: Dict[ScenarioName, Dict[str, float]] = {
    "optimistic": {
        "technical": 0.8, "business": 0.8, "integration": 0.8,
        "testing": 0.7, "documentation": 0.7,
    },
    "pessimistic": {
        "technical": 1.3, "business": 1.2, "integration": 1.4,
        "testing": 1.3, "documentation": 1.2,
    },
}
SCENARIO_MULTIPLIERS: Dict[ScenarioName, float] = {"optimistic": 0.85, "realistic": 1.0, "pessimistic": 1.25}

STANDARD_ASSUMPTIONS = [
    "Estimates assume standard working hours (8 hours per day)",
    "Requirements are stable and well-defined",
    "Development team has appropriate skill level",
]


def round2(value: float) -> float:
    """Round half up to cents."""
    return math.floor(value * 100 + 0.5) / 100


def clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


def calculate_base_hours(complexity: ComplexityScore) -> float:
    return (
        complexity.technical * AXIS_WEIGHTS["technical"]
        + complexity.business * AXIS_WEIGHTS["business"]
        + complexity.integration * AXIS_WEIGHTS["integration"]
    ) * HOURS_PER_COMPLEXITY_POINT


def is_similar_complexity(complexity: ComplexityScore, estimated_hours: float) -> bool:
    """Coarse proxy: one complexity point per 40 estimated hours."""
    proxy = estimated_hours / HOURS_PER_COMPLEXITY_PROXY
    return abs(proxy - complexity.overall) < SIMILAR_COMPLEXITY_DISTANCE


def create_breakdown(total_hours: float) -> List[EstimateBreakdown]:
    return [
        EstimateBreakdown(
            category=category,
            hours=round2(total_hours * share),
            description=description,
        )
        for category, share, description in BREAKDOWN_SHARES
    ]


def requirement_clarity(requirements: Sequence[Requirement]) -> float:
    """Mean clarity in [0, 1]; 0.5 when there is nothing to judge.

    Long descriptions, concrete technical terms and detailed acceptance
    criteria raise the score. Vague qualities lower it.
    """
    if not requirements:
        return 0.5

    total = 0.0
    for requirement in requirements:
        score = 0.5
        description = requirement.description

        word_count = len(description.split())
        if word_count > 15:
            score += 0.2
        elif word_count < 5:
            score -= 0.2

        score -= len(matching_keywords(description, VAGUE_TERMS)) * 0.1
        score += len(matching_keywords(description, SPECIFIC_TERMS)) * 0.05

        criteria = requirement.acceptance_criteria
        if criteria:
            score += 0.1
            if sum(len(c) for c in criteria) / len(criteria) > 20:
                score += 0.1
        else:
            score -= 0.1

        total += clamp(score, (0.0, 1.0))

    return total / len(requirements)


def calculate_confidence(
    complexity: ComplexityScore,
    sample_count: int,
    requirements: Sequence[Requirement] = (),
) -> float:
    confidence = BASE_CONFIDENCE

    if sample_count > 10:
        confidence += 0.2
    elif sample_count > 5:
        confidence += 0.1

    if complexity.average_axis < COMPLEXITY_CONFIDENCE_THRESHOLD:
        confidence += 0.1
    elif complexity.average_axis > COMPLEXITY_CONFIDENCE_THRESHOLD:
        confidence -= 0.1

    if requirements:
        confidence += (requirement_clarity(requirements) - 0.5) * 0.3

    return clamp(confidence, CONFIDENCE_RANGE)


def time_assumptions(complexity: ComplexityScore, has_history: bool) -> List[str]:
    assumptions = list(STANDARD_ASSUMPTIONS)
    if not has_history:
        assumptions.append("No historical data available - estimates based on industry standards")
    if complexity.integration > 7:
        assumptions.append("Complex integrations may require additional coordination time")
    if complexity.technical > 8:
        assumptions.append("High technical complexity may require research and prototyping time")
    return assumptions


def buffer_assumption(buffer_percentage: float) -> str:
    return f"{round(buffer_percentage * 100)}% buffer added for uncertainty and scope changes"


def scenario_factors(base: ComplexityFactors, scenario: str) -> ComplexityFactors:
    """Scale the base factors for a scenario. Unknown names keep the base."""
    scales = SCENARIO_FACTOR_SCALES.get(scenario)
    if not scales:
        return base.model_copy()
    return base.model_copy(
        update={name: getattr(base, name) * scale for name, scale in scales.items()}
    )


def scenario_multiplier(scenario: str) -> float:
    return SCENARIO_MULTIPLIERS.get(scenario, 1.0)


def project_size(hours: float) -> ProjectSize:
    if hours < 100:
        return "small"
    if hours < 500:
        return "medium"
    return "large"


def calibration_recommendations(accuracy: float, bias: float, sample_count: int) -> List[str]:
    recommendations = []
    if accuracy < 0.7:
        recommendations.append(
            "Estimation accuracy is below 70% - consider refining estimation methodology"
        )
    if bias > 0.2:
        recommendations.append(
            "Consistent underestimation detected - increase complexity factors by 10-20%"
        )
    elif bias < -0.2:
        recommendations.append(
            "Consistent overestimation detected - reduce complexity factors by 10-15%"
        )
    if sample_count < 10:
        recommendations.append(
            "Collect more historical project data to improve estimation accuracy"
        )
    return recommendations


def overrun_share(feedback: Sequence[EstimationFeedback], tag: str) -> float:
    """Share of feedback tagged with ``tag`` whose actual hours exceeded the estimate."""
    tagged = [f for f in feedback if any(tag in factor.lower() for factor in f.factors)]
    if not tagged:
        return 0.0
    return sum(1 for f in tagged if f.actual_hours > f.estimated_hours) / len(tagged)
