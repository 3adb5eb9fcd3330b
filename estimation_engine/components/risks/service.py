from typing import Dict, List, Optional, Sequence

from estimation_engine.components.base.component import BaseComponent
from estimation_engine.components.base.logging import get_logger
from estimation_engine.schemas import (
    CodebaseMetrics,
    Priority,
    Requirement,
    RiskAssessment,
    RiskFactor,
)
from estimation_engine.utils.keywords import contains_any, contains_keyword
from . import patterns
from .models import RiskAssessmentOptions, RiskRequest

logger = get_logger(__name__)


class RiskAnalyzer(BaseComponent[RiskRequest, RiskAssessment]):
    """Keyword-driven risk detection over requirements and codebase metrics.

    Runs technical, integration, business and resource passes, scores the
    overall level from probability and impact, and collects mitigations as
    recommendations. Deterministic: no scoring backend is involved.
    """

    @property
    def component_name(self) -> str:
        return "risks"

    async def process(self, request: RiskRequest) -> RiskAssessment:
        return await self.assess_risks(request.requirements, request.codebase, request.options)

    async def assess_risks(
        self,
        requirements: Sequence[Requirement],
        codebase: Optional[CodebaseMetrics] = None,
        options: Optional[RiskAssessmentOptions] = None,
    ) -> RiskAssessment:
        options = options or RiskAssessmentOptions()
        factors: List[RiskFactor] = []

        if options.technical:
            factors.extend(await self.identify_technical_risks(requirements, codebase))
        if options.integration:
            factors.extend(await self.assess_integration_risks(requirements))
        if options.business:
            factors.extend(self.identify_business_risks(requirements))
        if options.resource:
            factors.extend(self.assess_resource_risks(requirements))

        overall = self.calculate_overall_risk(factors)
        logger.info(
            "risks_assessed",
            requirements=len(requirements),
            factors=len(factors),
            overall=overall,
        )
        return RiskAssessment(
            overall=overall,
            factors=factors,
            recommendations=self.generate_recommendations(factors),
        )

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    async def identify_technical_risks(
        self,
        requirements: Sequence[Requirement],
        codebase: Optional[CodebaseMetrics] = None,
    ) -> List[RiskFactor]:
        risks = []
        for requirement in requirements:
            for template in patterns.TECHNICAL_PATTERNS:
                if contains_any(requirement.description, template.keywords):
                    risks.append(template.build(requirement.id))

        if codebase is not None:
            risks.extend(self.analyze_codebase_risks(codebase))
        return risks

    def analyze_codebase_risks(self, codebase: CodebaseMetrics) -> List[RiskFactor]:
        risks = []
        if codebase.technical_debt > patterns.TECHNICAL_DEBT_THRESHOLD:
            risks.append(patterns.TECHNICAL_DEBT.build())
        if len(codebase.dependencies) > patterns.DEPENDENCY_THRESHOLD:
            risks.append(patterns.DEPENDENCIES.build())
        if any(issue.severity == "high" for issue in codebase.issues):
            risks.append(patterns.ARCHITECTURE.build())
        return risks

    async def assess_integration_risks(
        self, requirements: Sequence[Requirement]
    ) -> List[RiskFactor]:
        risks = []
        for requirement in requirements:
            if not self.is_integration_requirement(requirement):
                continue
            for template in (patterns.THIRD_PARTY, patterns.DATA_MIGRATION):
                if contains_any(requirement.description, template.keywords):
                    risks.append(template.build(requirement.id))
        return risks

    def identify_business_risks(self, requirements: Sequence[Requirement]) -> List[RiskFactor]:
        risks = []

        vague = [r for r in requirements if self.is_vague(r.description)]
        if len(vague) > len(requirements) * patterns.VAGUE_SHARE_THRESHOLD:
            risks.append(patterns.SCOPE_CREEP.build())

        if self.find_conflicting_requirements(requirements):
            risks.append(patterns.STAKEHOLDER_ALIGNMENT.build())
        return risks

    def assess_resource_risks(self, requirements: Sequence[Requirement]) -> List[RiskFactor]:
        risks = []

        if any(contains_any(r.description, patterns.SKILL_GAP.keywords) for r in requirements):
            risks.append(patterns.SKILL_GAP.build())

        high_priority = sum(1 for r in requirements if r.priority == "high")
        if high_priority > len(requirements) * patterns.HIGH_PRIORITY_SHARE_THRESHOLD:
            risks.append(patterns.TIMELINE_PRESSURE.build())
        return risks

    # ------------------------------------------------------------------
    # Detection helpers
    # ------------------------------------------------------------------

    @staticmethod
    def is_integration_requirement(requirement: Requirement) -> bool:
        return contains_any(requirement.description, patterns.INTEGRATION_KEYWORDS)

    @staticmethod
    def is_vague(description: str) -> bool:
        """Short requirement leaning on unmeasurable qualities."""
        return (
            contains_any(description, patterns.VAGUE_INDICATORS)
            and len(description.split()) < patterns.VAGUE_MAX_WORDS
        )

    def find_conflicting_requirements(
        self, requirements: Sequence[Requirement]
    ) -> List[Requirement]:
        """Requirements involved in at least one contradictory keyword pair."""
        conflicting: Dict[str, Requirement] = {}
        for i, first in enumerate(requirements):
            for second in requirements[i + 1:]:
                if self._are_conflicting(first, second):
                    conflicting.setdefault(first.id, first)
                    conflicting.setdefault(second.id, second)
        return list(conflicting.values())

    @staticmethod
    def _are_conflicting(first: Requirement, second: Requirement) -> bool:
        a, b = first.description, second.description
        return any(
            (contains_keyword(a, x) and contains_keyword(b, y))
            or (contains_keyword(a, y) and contains_keyword(b, x))
            for x, y in patterns.CONFLICT_PAIRS
        )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_overall_risk(factors: Sequence[RiskFactor]) -> Priority:
        if not factors:
            return "low"
        average = sum(
            f.probability * patterns.IMPACT_WEIGHTS[f.impact] for f in factors
        ) / len(factors)
        if average >= 0.7:
            return "high"
        if average >= 0.4:
            return "medium"
        return "low"

    @staticmethod
    def generate_recommendations(factors: Sequence[RiskFactor]) -> List[str]:
        recommendations: Dict[str, None] = {}
        for factor in factors:
            recommendations.setdefault(factor.mitigation, None)

        if any(f.impact == "high" for f in factors):
            recommendations.setdefault(patterns.MONITORING_RECOMMENDATION, None)
            recommendations.setdefault(patterns.CONTINGENCY_RECOMMENDATION, None)

        if any("Technology" in f.name or "Technical" in f.name for f in factors):
            recommendations.setdefault(patterns.PROOF_OF_CONCEPT_RECOMMENDATION, None)

        return list(recommendations)
