from .service import ComplexityAnalyzer
from .models import ComplexityOptions, ComplexityRequest, Fallback, Scored, ScoringOutcome

__all__ = [
    "ComplexityAnalyzer",
    "ComplexityOptions",
    "ComplexityRequest",
    "Fallback",
    "Scored",
    "ScoringOutcome",
]
