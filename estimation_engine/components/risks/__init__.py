from .service import RiskAnalyzer
from .models import RiskAssessmentOptions, RiskRequest

__all__ = ["RiskAnalyzer", "RiskAssessmentOptions", "RiskRequest"]
