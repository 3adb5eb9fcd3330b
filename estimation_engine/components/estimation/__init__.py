from .service import EstimationEngine
from .models import EstimationRequest, ProjectEstimateOptions, TimeEstimateOptions

__all__ = [
    "EstimationEngine",
    "EstimationRequest",
    "ProjectEstimateOptions",
    "TimeEstimateOptions",
]
