import json
import math
import re
from typing import Dict, List, Mapping, Optional, Sequence, Union

from estimation_engine.components.base.component import BaseComponent
from estimation_engine.components.base.config import get_settings
from estimation_engine.components.base.exceptions import ResponseParsingError
from estimation_engine.components.base.logging import get_logger
from estimation_engine.schemas import (
    ComplexityFactor,
    ComplexityFactors,
    ComplexityFactorsUpdate,
    ComplexityScore,
    ProjectData,
    Requirement,
)
from estimation_engine.utils.json_repair import parse_llm_json
from estimation_engine.utils.keywords import contains_any, significant_words
from estimation_engine.utils.ledger import HistoricalLedger
from estimation_engine.utils.ollama_client import get_ollama_client
from estimation_engine.utils.scoring_client import GenerationOptions, TextScoringClient
from .models import (
    ComplexityOptions,
    ComplexityRequest,
    Fallback,
    RequirementCategories,
    Scored,
    ScoringOutcome,
)
from .prompts import COMPLEXITY_SYSTEM_PROMPT, COMPLEXITY_USER_PROMPT

logger = get_logger(__name__)

MIN_SCORE = 1.0
MAX_SCORE = 10.0
HEURISTIC_BASE_SCORE = 5.0
TESTING_FACTOR_SCORE = 6.0
SIMILARITY_THRESHOLD = 0.3
MAX_BIAS_ADJUSTMENT = 1.5

NEW_TECHNOLOGY_CATEGORIES: Dict[str, List[str]] = {
    "machine_learning": ["machine learning", "deep learning", "neural network", "ml"],
    "artificial_intelligence": ["artificial intelligence", "ai", "llm", "nlp", "computer vision"],
    "blockchain": ["blockchain", "smart contract", "cryptocurrency"],
    "iot": ["iot", "internet of things"],
    "extended_reality": ["augmented reality", "virtual reality", "ar", "vr"],
    "quantum": ["quantum"],
    "edge_computing": ["edge computing"],
    "distributed_systems": ["distributed"],
}

TECHNICAL_KEYWORDS = [
    "api", "database", "algorithm", "performance", "security",
    "authentication", "encryption", "optimization", "caching",
]

INTEGRATION_KEYWORDS = [
    "integrate", "integration", "connect", "sync", "import", "export",
    "third-party", "external", "webhook",
]

BUSINESS_KEYWORDS = [
    "workflow", "report", "dashboard", "approval", "billing", "invoice",
    "pricing", "customer", "order", "checkout", "notification",
]

TESTING_KEYWORDS = [
    "security", "payment", "critical", "safety", "compliance",
    "real-time", "performance", "scalability",
]

# Checked in order; "very complex" must win over "complex".
VERBAL_SCALE = [
    ("very complex", 9.0),
    ("extremely", 9.0),
    ("complex", 7.0),
    ("difficult", 7.0),
    ("moderate", 5.0),
    ("medium", 5.0),
    ("simple", 3.0),
    ("basic", 3.0),
]

NUMBER_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")
SCALE_RANGE_PATTERN = re.compile(r"scale\s+of\s+\d+\s*(?:-|to)\s*\d+", re.IGNORECASE)


def clamp_score(value: float) -> float:
    return min(MAX_SCORE, max(MIN_SCORE, value))


class ComplexityAnalyzer(BaseComponent[ComplexityRequest, ComplexityScore]):
    """Scores requirements into a multi-axis complexity score.

    Each requirement is rated by the text scoring backend; any backend error or
    unusable answer falls back to a deterministic keyword heuristic. Ratings are
    then aggregated into technical, business and integration axes weighted by
    the current ComplexityFactors, and the overall score is nudged upward when
    similar historical projects overran their estimates.
    """

    def __init__(
        self,
        client: Optional[TextScoringClient] = None,
        initial_factors: Union[ComplexityFactorsUpdate, Mapping[str, float], None] = None,
        ledger_capacity: Optional[int] = None,
    ):
        settings = get_settings()
        self.client = client or get_ollama_client()
        self.generation_options = GenerationOptions(
            temperature=settings.scoring_temperature,
            max_tokens=settings.scoring_max_tokens,
            format="json",
            system_prompt=COMPLEXITY_SYSTEM_PROMPT,
        )
        self._factors = ComplexityFactors(
            technical=settings.factor_technical,
            business=settings.factor_business,
            integration=settings.factor_integration,
            testing=settings.factor_testing,
            documentation=settings.factor_documentation,
        )
        if initial_factors is not None:
            self.update_complexity_factors(initial_factors)
        self._ledger = HistoricalLedger(ledger_capacity or settings.historical_ledger_capacity)

    @property
    def component_name(self) -> str:
        return "complexity"

    async def process(self, request: ComplexityRequest) -> ComplexityScore:
        return await self.calculate_complexity(request.requirements, request.options)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    async def calculate_complexity(
        self,
        requirements: Sequence[Requirement],
        options: Optional[ComplexityOptions] = None,
    ) -> ComplexityScore:
        """Score every requirement and aggregate into a ComplexityScore."""
        options = options or ComplexityOptions()
        factors = self._resolve_factors(options.custom_factors)

        outcomes = await self.score_requirements(requirements, options.context)
        score = self.aggregate(requirements, [o.value for o in outcomes], factors)

        logger.info(
            "complexity_calculated",
            requirements=len(requirements),
            fallbacks=sum(1 for o in outcomes if isinstance(o, Fallback)),
            overall=round(score.overall, 2),
        )
        return score

    async def score_requirements(
        self,
        requirements: Sequence[Requirement],
        context: Optional[List[str]] = None,
    ) -> List[ScoringOutcome]:
        """Score requirements one at a time against the backend."""
        outcomes = []
        for requirement in requirements:
            outcomes.append(await self.score_requirement(requirement, context))
        return outcomes

    async def analyze_requirement_complexity(
        self,
        requirement: Requirement,
        context: Optional[List[str]] = None,
    ) -> float:
        """Rate a single requirement in [1, 10]."""
        outcome = await self.score_requirement(requirement, context)
        return outcome.value

    async def score_requirement(
        self,
        requirement: Requirement,
        context: Optional[List[str]] = None,
    ) -> ScoringOutcome:
        """Rate a single requirement, reporting whether the heuristic was used."""
        prompt = self._build_prompt(requirement, context)
        try:
            raw_response = await self.client.generate(prompt, self.generation_options)
            value = self._parse_score(raw_response)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
            fallback = self.calculate_heuristic_complexity(requirement)
            logger.warning(
                "complexity_scoring_fallback",
                requirement_id=requirement.id,
                reason=reason,
                score=fallback,
            )
            return Fallback(value=fallback, reason=reason)
        return Scored(value=clamp_score(value))

    def calculate_heuristic_complexity(self, requirement: Requirement) -> float:
        """Deterministic rating used when the backend cannot be relied on."""
        score = HEURISTIC_BASE_SCORE
        score += len(self.detect_new_technologies(requirement))
        if requirement.type == "non-functional":
            score += 1
        if requirement.priority == "high":
            score += 1
        return clamp_score(score)

    def detect_new_technologies(self, requirement: Requirement) -> List[str]:
        """Names of the cutting-edge technology categories a requirement mentions."""
        return [
            category
            for category, keywords in NEW_TECHNOLOGY_CATEGORIES.items()
            if contains_any(requirement.description, keywords)
        ]

    def _build_prompt(self, requirement: Requirement, context: Optional[List[str]]) -> str:
        criteria = "\n".join(f"- {c}" for c in requirement.acceptance_criteria) or "- None provided"
        context_block = f"\n\nCONTEXT: {', '.join(context)}" if context else ""
        return COMPLEXITY_USER_PROMPT.format(
            description=requirement.description or "(no description)",
            requirement_type=requirement.type,
            priority=requirement.priority,
            acceptance_criteria=criteria,
            context=context_block,
        )

    def _parse_score(self, raw: str) -> float:
        """Extract a numeric rating from a backend response.

        Tries a JSON object first, then the first number in the text, then a
        verbal rating ("simple", "very complex", ...). A stated range such as
        "scale of 1-10" is not read as the rating.
        """
        value: Optional[float] = None
        try:
            parsed = parse_llm_json(raw, component_name=self.component_name)
            candidate = parsed.get("complexity", parsed.get("score"))
            if isinstance(candidate, (int, float)) and not isinstance(candidate, bool):
                value = float(candidate)
            elif isinstance(candidate, str):
                match = NUMBER_PATTERN.search(candidate)
                value = float(match.group(1)) if match else None
        except json.JSONDecodeError:
            pass

        if value is None:
            match = NUMBER_PATTERN.search(SCALE_RANGE_PATTERN.sub(" ", raw or ""))
            if match:
                value = float(match.group(1))

        if value is None:
            lowered = (raw or "").lower()
            for phrase, rating in VERBAL_SCALE:
                if phrase in lowered:
                    value = rating
                    break

        if value is None or not math.isfinite(value):
            raise ResponseParsingError(
                "No complexity rating in response",
                component=self.component_name,
                details={"response": (raw or "")[:200]},
            )
        return value

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def categorize(self, requirement: Requirement) -> RequirementCategories:
        """Axis membership by keyword category; unmatched requirements are business."""
        description = requirement.description
        technical = contains_any(description, TECHNICAL_KEYWORDS)
        integration = contains_any(description, INTEGRATION_KEYWORDS)
        business = contains_any(description, BUSINESS_KEYWORDS) or not (technical or integration)
        return RequirementCategories(
            technical=technical,
            integration=integration,
            business=business,
            extensive_testing=contains_any(description, TESTING_KEYWORDS),
        )

    def aggregate(
        self,
        requirements: Sequence[Requirement],
        scores: Sequence[float],
        factors: Optional[ComplexityFactors] = None,
    ) -> ComplexityScore:
        """Combine per-requirement ratings into axis scores.

        Pure with respect to the backend: used directly when the same ratings
        are re-weighted under different factors.
        """
        if len(scores) != len(requirements):
            raise ValueError("Expected one score per requirement")
        factors = factors or self._factors

        technical_total = business_total = integration_total = 0.0
        complexity_factors: List[ComplexityFactor] = []

        for requirement, score in zip(requirements, scores):
            categories = self.categorize(requirement)
            if categories.technical:
                technical_total += score * factors.technical
                complexity_factors.append(ComplexityFactor(
                    name="Technical Implementation",
                    weight=factors.technical,
                    score=score,
                    description="Complexity of technical implementation",
                ))
            if categories.integration:
                integration_total += score * factors.integration
                complexity_factors.append(ComplexityFactor(
                    name="System Integration",
                    weight=factors.integration,
                    score=score,
                    description="Complexity of integrating with existing systems",
                ))
            if categories.business:
                business_total += score * factors.business
                complexity_factors.append(ComplexityFactor(
                    name="Business Logic",
                    weight=factors.business,
                    score=score,
                    description="Complexity of business rules and user-facing behavior",
                ))
            if categories.extensive_testing:
                complexity_factors.append(ComplexityFactor(
                    name="Testing Complexity",
                    weight=factors.testing,
                    score=TESTING_FACTOR_SCORE,
                    description="Requires extensive testing and validation",
                ))

        count = len(requirements) or 1
        technical = clamp_score(technical_total / count)
        business = clamp_score(business_total / count)
        integration = clamp_score(integration_total / count)

        base_overall = (technical + business + integration) / 3
        overall = clamp_score(base_overall * self.historical_adjustment(requirements))

        return ComplexityScore(
            overall=overall,
            technical=technical,
            business=business,
            integration=integration,
            factors=complexity_factors,
        )

    # ------------------------------------------------------------------
    # Historical bias correction
    # ------------------------------------------------------------------

    def historical_adjustment(self, requirements: Sequence[Requirement]) -> float:
        """Upward multiplier from similar projects that overran, in [1.0, 1.5]."""
        if not len(self._ledger):
            return 1.0

        ratios = [
            p.overrun_ratio
            for p in self.find_similar_projects(requirements)
            if p.overrun_ratio is not None
        ]
        if not ratios:
            return 1.0

        average = sum(ratios) / len(ratios)
        if average <= 1.0:
            return 1.0
        return min(MAX_BIAS_ADJUSTMENT, average)

    def find_similar_projects(self, requirements: Sequence[Requirement]) -> List[ProjectData]:
        """Projects sharing at least 30% of significant keywords (coarse heuristic)."""
        current = set(self._extract_keywords(requirements))
        similar = []
        for project in self._ledger:
            past = set(self._extract_keywords(project.requirements))
            longest = max(len(past), len(current))
            if not longest:
                continue
            if len(current & past) / longest >= SIMILARITY_THRESHOLD:
                similar.append(project)
        return similar

    @staticmethod
    def _extract_keywords(requirements: Sequence[Requirement]) -> List[str]:
        keywords: Dict[str, None] = {}
        for requirement in requirements:
            for word in significant_words(requirement.description):
                keywords.setdefault(word, None)
        return list(keywords)

    # ------------------------------------------------------------------
    # Configuration and memory
    # ------------------------------------------------------------------

    def update_complexity_factors(
        self, factors: Union[ComplexityFactorsUpdate, Mapping[str, float]]
    ) -> None:
        """Merge override weights in place; affects all subsequent calls."""
        update = self._as_update(factors)
        for name, value in update.model_dump(exclude_none=True).items():
            setattr(self._factors, name, value)

    def get_complexity_factors(self) -> ComplexityFactors:
        return self._factors.model_copy()

    def _resolve_factors(
        self, override: Union[ComplexityFactorsUpdate, Mapping[str, float], None]
    ) -> ComplexityFactors:
        """Current factors with a per-call override applied, without persisting it."""
        if override is None:
            return self._factors
        update = self._as_update(override)
        return self._factors.model_copy(update=update.model_dump(exclude_none=True))

    @staticmethod
    def _as_update(
        factors: Union[ComplexityFactorsUpdate, Mapping[str, float]]
    ) -> ComplexityFactorsUpdate:
        if isinstance(factors, ComplexityFactorsUpdate):
            return factors
        return ComplexityFactorsUpdate.model_validate(dict(factors))

    def add_historical_project(self, project: ProjectData) -> None:
        self._ledger.append(project)

    def get_historical_data(self) -> List[ProjectData]:
        return self._ledger.snapshot()

    def clear_historical_data(self) -> None:
        self._ledger.clear()
