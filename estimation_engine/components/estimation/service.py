import time
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Union

from estimation_engine.components.base.component import BaseComponent
from estimation_engine.components.base.config import get_settings
from estimation_engine.components.base.exceptions import EstimationValidationError
from estimation_engine.components.base.logging import get_logger
from estimation_engine.components.complexity import ComplexityAnalyzer, ComplexityOptions
from estimation_engine.components.risks import RiskAnalyzer
from estimation_engine.schemas import (
    BufferedTimeEstimate,
    CalibrationResult,
    CodebaseMetrics,
    ComplexityFactors,
    ComplexityFactorsUpdate,
    ComplexityScore,
    CostBreakdown,
    CostLineItem,
    EstimateValidation,
    EstimationFeedback,
    HistoricalDataFilter,
    ProjectData,
    ProjectEstimate,
    RateConfiguration,
    Requirement,
    ResourceAllocation,
    ResourceBasedEstimate,
    ResourceBreakdown,
    RiskAssessment,
    RiskFactor,
    TeamConfiguration,
    TimeEstimate,
)
from estimation_engine.utils.ledger import HistoricalLedger
from estimation_engine.utils.scoring_client import TextScoringClient
from . import calculations as calc
from .models import EstimationRequest, ProjectEstimateOptions, TimeEstimateOptions

logger = get_logger(__name__)

WORK_DISTRIBUTION = {"complex": 0.4, "moderate": 0.4, "simple": 0.2}
FEEDBACK_OVERRUN_THRESHOLD = 0.2
FEEDBACK_FACTOR_STEP = 1.1


class EstimationEngine(BaseComponent[EstimationRequest, ProjectEstimate]):
    """Turns requirements into time, cost, scenario and resource estimates.

    Owns the rate configuration and a capped ledger of completed projects.
    Complexity scoring and risk detection are delegated to their analyzers.
    """

    def __init__(
        self,
        client: Optional[TextScoringClient] = None,
        complexity_analyzer: Optional[ComplexityAnalyzer] = None,
        risk_analyzer: Optional[RiskAnalyzer] = None,
        rates: Optional[RateConfiguration] = None,
        ledger_capacity: Optional[int] = None,
    ):
        settings = get_settings()
        capacity = ledger_capacity or settings.historical_ledger_capacity
        self.complexity_analyzer = complexity_analyzer or ComplexityAnalyzer(
            client=client, ledger_capacity=capacity
        )
        self.risk_analyzer = risk_analyzer or RiskAnalyzer()
        self._rates = (rates or RateConfiguration(
            hourly_rate=settings.default_hourly_rate,
            currency=settings.default_currency,
            overhead=settings.default_overhead,
            profit_margin=settings.default_profit_margin,
        )).model_copy()
        self._ledger = HistoricalLedger(capacity)

    @property
    def component_name(self) -> str:
        return "estimation"

    async def process(self, request: EstimationRequest) -> ProjectEstimate:
        return await self.generate_project_estimate(request.requirements, request.options)

    # ------------------------------------------------------------------
    # Complexity and risk delegation
    # ------------------------------------------------------------------

    async def calculate_complexity(
        self,
        requirements: Sequence[Requirement],
        options: Optional[ComplexityOptions] = None,
    ) -> ComplexityScore:
        return await self.complexity_analyzer.calculate_complexity(requirements, options)

    async def analyze_requirement_complexity(
        self,
        requirement: Requirement,
        context: Optional[List[str]] = None,
    ) -> float:
        return await self.complexity_analyzer.analyze_requirement_complexity(requirement, context)

    async def assess_risks(
        self,
        requirements: Sequence[Requirement],
        codebase: Optional[CodebaseMetrics] = None,
    ) -> RiskAssessment:
        return await self.risk_analyzer.assess_risks(requirements, codebase)

    async def identify_technical_risks(
        self,
        requirements: Sequence[Requirement],
        codebase: Optional[CodebaseMetrics] = None,
    ) -> List[str]:
        risks = await self.risk_analyzer.identify_technical_risks(requirements, codebase)
        return [risk.description for risk in risks]

    async def assess_integration_risks(
        self,
        requirements: Sequence[Requirement],
        existing_systems: Optional[List[str]] = None,
    ) -> List[str]:
        lines = []
        for requirement in requirements:
            if not self.risk_analyzer.is_integration_requirement(requirement):
                continue
            lines.append(f"Integration risk for: {requirement.description}")
            if existing_systems:
                lines.append(
                    f"Potential conflicts with existing systems: {', '.join(existing_systems)}"
                )
        return lines

    def update_complexity_factors(
        self, factors: Union[ComplexityFactorsUpdate, Mapping[str, float]]
    ) -> None:
        self.complexity_analyzer.update_complexity_factors(factors)

    def get_complexity_factors(self) -> ComplexityFactors:
        return self.complexity_analyzer.get_complexity_factors()

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    async def generate_time_estimate(
        self,
        complexity: ComplexityScore,
        historical_data: Optional[Sequence[ProjectData]] = None,
        options: Optional[TimeEstimateOptions] = None,
    ) -> TimeEstimate:
        """Hours from complexity, adjusted by similar past projects.

        ``historical_data=None`` reads the engine's own ledger; pass an empty
        list to estimate without history.
        """
        options = options or TimeEstimateOptions()
        history = self._ledger.snapshot() if historical_data is None else list(historical_data)

        adjustment = options.historical_adjustment
        if adjustment is None:
            adjustment = self.calculate_historical_adjustment(complexity, history)
        adjusted_hours = calc.calculate_base_hours(complexity) * adjustment

        return TimeEstimate(
            total_hours=calc.round2(adjusted_hours),
            breakdown=calc.create_breakdown(adjusted_hours),
            confidence=calc.calculate_confidence(complexity, len(history), options.requirements),
            assumptions=calc.time_assumptions(complexity, has_history=bool(history)),
        )

    async def generate_time_estimate_with_buffer(
        self,
        complexity: ComplexityScore,
        buffer_percentage: float = 0.2,
        historical_data: Optional[Sequence[ProjectData]] = None,
        options: Optional[TimeEstimateOptions] = None,
    ) -> BufferedTimeEstimate:
        base = await self.generate_time_estimate(complexity, historical_data, options)
        buffer = calc.round2(base.total_hours * buffer_percentage)
        return BufferedTimeEstimate(
            **base.model_dump(exclude={"assumptions"}),
            assumptions=base.assumptions + [calc.buffer_assumption(buffer_percentage)],
            buffer=buffer,
            total_with_buffer=calc.round2(base.total_hours + buffer),
        )

    def calculate_historical_adjustment(
        self,
        complexity: ComplexityScore,
        history: Sequence[ProjectData],
    ) -> float:
        """Mean actual/estimated ratio of similar projects, clamped to [0.7, 1.5]."""
        ratios = [
            p.overrun_ratio
            for p in history
            if p.overrun_ratio is not None and calc.is_similar_complexity(complexity, p.estimated_hours)
        ]
        if not ratios:
            return 1.0
        return calc.clamp(sum(ratios) / len(ratios), calc.HISTORICAL_ADJUSTMENT_RANGE)

    async def estimate_by_category(
        self,
        requirements: Sequence[Requirement],
        categories: Sequence[str],
    ) -> Dict[str, TimeEstimate]:
        """Separate time estimates per requirement category."""
        grouped: Dict[str, List[Requirement]] = {category: [] for category in categories}
        fallback = next((c for c in categories if c.lower() == "general"), None)
        if fallback is None and categories:
            fallback = categories[0]

        for requirement in requirements:
            description = requirement.description.lower()
            category = next((c for c in categories if c.lower() in description), fallback)
            if category is not None:
                grouped[category].append(requirement)

        estimates = {}
        for category, members in grouped.items():
            if not members:
                continue
            complexity = await self.calculate_complexity(members)
            estimates[category] = await self.generate_time_estimate(complexity)
        return estimates

    # ------------------------------------------------------------------
    # Cost
    # ------------------------------------------------------------------

    def calculate_total_cost(self, hours: float) -> float:
        rates = self._rates
        base_cost = calc.round2(hours * rates.hourly_rate)
        with_overhead = calc.round2(base_cost * (1 + rates.overhead))
        return calc.round2(with_overhead * (1 + rates.profit_margin))

    def calculate_cost_breakdown(self, time_estimate: TimeEstimate) -> CostBreakdown:
        rates = self._rates
        line_items = [
            CostLineItem(
                category=item.category,
                hours=item.hours,
                cost=calc.round2(item.hours * rates.hourly_rate),
                description=item.description,
            )
            for item in time_estimate.breakdown
        ]
        subtotal = calc.round2(sum(item.cost for item in line_items))
        overhead = calc.round2(subtotal * rates.overhead)
        profit = calc.round2((subtotal + overhead) * rates.profit_margin)
        return CostBreakdown(
            line_items=line_items,
            subtotal=subtotal,
            overhead=overhead,
            profit=profit,
            total=calc.round2(subtotal + overhead + profit),
            currency=rates.currency,
        )

    def set_hourly_rates(self, rates: RateConfiguration) -> None:
        self._rates = rates.model_copy()

    def get_hourly_rates(self) -> RateConfiguration:
        return self._rates.model_copy()

    # ------------------------------------------------------------------
    # Project estimates
    # ------------------------------------------------------------------

    async def generate_project_estimate(
        self,
        requirements: Sequence[Requirement],
        options: Optional[ProjectEstimateOptions] = None,
    ) -> ProjectEstimate:
        options = options or ProjectEstimateOptions()

        # Custom factors apply to this call only
        complexity = await self.calculate_complexity(
            requirements, ComplexityOptions(custom_factors=options.custom_factors)
        )
        history = self._ledger.snapshot() if options.use_historical_data else []

        risks: List[RiskFactor] = []
        if options.include_risks:
            assessment = await self.risk_analyzer.assess_risks(requirements, options.codebase_context)
            risks = assessment.factors

        estimate = await self._assemble_estimate(requirements, complexity, history, risks)
        logger.info(
            "project_estimate_generated",
            estimate_id=estimate.id,
            requirements=len(requirements),
            total_hours=estimate.total_hours,
            confidence=round(estimate.confidence, 2),
        )
        return estimate

    async def _assemble_estimate(
        self,
        requirements: Sequence[Requirement],
        complexity: ComplexityScore,
        history: List[ProjectData],
        risks: List[RiskFactor],
        historical_adjustment: Optional[float] = None,
    ) -> ProjectEstimate:
        time_estimate = await self.generate_time_estimate(
            complexity,
            history,
            TimeEstimateOptions(
                requirements=list(requirements),
                historical_adjustment=historical_adjustment,
            ),
        )
        now = datetime.now()
        return ProjectEstimate(
            id=f"estimate-{int(time.time() * 1000)}",
            created_at=now,
            updated_at=now,
            total_hours=time_estimate.total_hours,
            total_cost=self.calculate_total_cost(time_estimate.total_hours),
            breakdown=time_estimate.breakdown,
            risks=risks,
            assumptions=time_estimate.assumptions,
            confidence=time_estimate.confidence,
            requirements=list(requirements),
        )

    async def generate_scenarios(
        self,
        requirements: Sequence[Requirement],
        scenario_names: Sequence[str],
    ) -> Dict[str, ProjectEstimate]:
        """Estimates under optimistic, realistic and pessimistic assumptions.

        Requirements are scored once and re-weighted per scenario, and the
        historical adjustment is taken from the realistic complexity, so
        optimistic < realistic < pessimistic in total hours.
        """
        names = list(dict.fromkeys(scenario_names))
        if not names:
            return {}

        outcomes = await self.complexity_analyzer.score_requirements(requirements)
        scores = [outcome.value for outcome in outcomes]
        base_factors = self.get_complexity_factors()

        realistic = self.complexity_analyzer.aggregate(requirements, scores, base_factors)
        history = self._ledger.snapshot()
        adjustment = self.calculate_historical_adjustment(realistic, history)
        risks = (await self.risk_analyzer.assess_risks(requirements)).factors

        scenarios = {}
        for name in names:
            factors = calc.scenario_factors(base_factors, name)
            complexity = self.complexity_analyzer.aggregate(requirements, scores, factors)
            estimate = await self._assemble_estimate(
                requirements, complexity, history, risks, historical_adjustment=adjustment
            )
            scenarios[name] = self._apply_scenario(estimate, name)
        return scenarios

    def _apply_scenario(self, estimate: ProjectEstimate, scenario: str) -> ProjectEstimate:
        multiplier = calc.scenario_multiplier(scenario)
        return estimate.model_copy(update={
            "id": f"{estimate.id}-{scenario}",
            "total_hours": calc.round2(estimate.total_hours * multiplier),
            "total_cost": calc.round2(estimate.total_cost * multiplier),
            "breakdown": [
                item.model_copy(update={"hours": calc.round2(item.hours * multiplier)})
                for item in estimate.breakdown
            ],
            "assumptions": estimate.assumptions + [
                f"Scenario: {scenario} ({multiplier}x adjustment applied)"
            ],
        })

    async def generate_resource_based_estimate(
        self,
        requirements: Sequence[Requirement],
        team: TeamConfiguration,
        options: Optional[ComplexityOptions] = None,
    ) -> ResourceBasedEstimate:
        if team.total_members == 0:
            raise EstimationValidationError(
                "Team configuration must include at least one developer",
                component=self.component_name,
                details={"team": team.model_dump()},
            )

        complexity = await self.calculate_complexity(requirements, options)
        time_estimate = await self.generate_time_estimate(complexity)
        total_hours = time_estimate.total_hours

        complex_work = total_hours * WORK_DISTRIBUTION["complex"]
        moderate_work = total_hours * WORK_DISTRIBUTION["moderate"]
        simple_work = total_hours * WORK_DISTRIBUTION["simple"]

        resource_breakdown = ResourceBreakdown(
            senior=self._allocate(complex_work + moderate_work * 0.5, team.senior_rate, team.senior_developers),
            mid=self._allocate(moderate_work * 0.5 + simple_work * 0.5, team.mid_rate, team.mid_developers),
            junior=self._allocate(simple_work * 0.5, team.junior_rate, team.junior_developers),
        )
        resource_cost = (
            resource_breakdown.senior.cost
            + resource_breakdown.mid.cost
            + resource_breakdown.junior.cost
        )
        risks = await self.risk_analyzer.assess_risks(requirements)

        now = datetime.now()
        return ResourceBasedEstimate(
            id=f"resource-estimate-{int(time.time() * 1000)}",
            created_at=now,
            updated_at=now,
            total_hours=total_hours,
            total_cost=calc.round2(
                resource_cost * (1 + self._rates.overhead) * (1 + self._rates.profit_margin)
            ),
            breakdown=time_estimate.breakdown,
            risks=risks.factors,
            assumptions=time_estimate.assumptions + [
                "Resource allocation based on complexity distribution",
                f"Team: {team.senior_developers} senior, {team.mid_developers} mid, "
                f"{team.junior_developers} junior developers",
            ],
            confidence=time_estimate.confidence,
            requirements=list(requirements),
            resource_breakdown=resource_breakdown,
        )

    @staticmethod
    def _allocate(hours: float, rate: float, developers: int) -> ResourceAllocation:
        return ResourceAllocation(
            hours=calc.round2(hours),
            cost=calc.round2(hours * rate),
            developers=developers,
        )

    # ------------------------------------------------------------------
    # Calibration and validation
    # ------------------------------------------------------------------

    async def calibrate_estimates(self, actual_projects: Sequence[ProjectData]) -> CalibrationResult:
        # Projects without recorded actual hours cannot be compared
        projects = [p for p in actual_projects if p.actual_hours > 0]
        if not projects:
            return CalibrationResult(
                accuracy=0.0,
                bias=0.0,
                recommendations=["No historical data available for calibration"],
            )

        errors = [abs(p.actual_hours - p.estimated_hours) / p.actual_hours for p in projects]
        accuracy = 1 - sum(errors) / len(errors)
        bias = sum((p.estimated_hours - p.actual_hours) / p.actual_hours for p in projects) / len(projects)

        return CalibrationResult(
            accuracy=calc.clamp(accuracy, (0.0, 1.0)),
            bias=bias,
            recommendations=calc.calibration_recommendations(accuracy, bias, len(projects)),
        )

    async def validate_estimate(
        self,
        estimate: ProjectEstimate,
        requirements: Sequence[Requirement],
    ) -> EstimateValidation:
        warnings: List[str] = []
        suggestions: List[str] = []

        if requirements:
            average = estimate.total_hours / len(requirements)
            if average < 2:
                warnings.append("Estimate seems very low - average less than 2 hours per requirement")
                suggestions.append("Review requirement complexity and consider hidden tasks")
            if average > 100:
                warnings.append("Estimate seems very high - average more than 100 hours per requirement")
                suggestions.append("Consider breaking down requirements into smaller, more manageable pieces")

        if estimate.confidence < 0.5:
            warnings.append(
                "Low confidence in estimate due to unclear requirements or lack of historical data"
            )
            suggestions.append("Gather more detailed requirements or similar project data")

        present = {item.category for item in estimate.breakdown}
        missing = [c for c in calc.REQUIRED_CATEGORIES if c not in present]
        if missing:
            warnings.append(f"Missing estimate categories: {', '.join(missing)}")
            suggestions.append("Ensure all development phases are included in the estimate")

        return EstimateValidation(valid=not warnings, warnings=warnings, suggestions=suggestions)

    async def improve_accuracy(self, feedback: Sequence[EstimationFeedback]) -> None:
        """Raise factors for areas that keep running over estimate."""
        current = self.get_complexity_factors()
        update = {}
        for axis in ("technical", "integration"):
            if calc.overrun_share(feedback, axis) > FEEDBACK_OVERRUN_THRESHOLD:
                update[axis] = getattr(current, axis) * FEEDBACK_FACTOR_STEP
        if update:
            self.update_complexity_factors(update)
            logger.info("complexity_factors_adjusted", **update)

    # ------------------------------------------------------------------
    # Historical ledger
    # ------------------------------------------------------------------

    def add_historical_project(self, project: ProjectData) -> None:
        self._ledger.append(project)
        self.complexity_analyzer.add_historical_project(project)

    async def get_historical_data(
        self, filters: Optional[HistoricalDataFilter] = None
    ) -> List[ProjectData]:
        projects = self._ledger.snapshot()
        if filters is None:
            return projects

        if filters.size:
            projects = [p for p in projects if calc.project_size(p.actual_hours) == filters.size]
        if filters.technology:
            technologies = [t.lower() for t in filters.technology]
            projects = [p for p in projects if any(t in p.name.lower() for t in technologies)]
        if filters.domain:
            domain = filters.domain.lower()
            projects = [p for p in projects if domain in p.name.lower()]
        return projects

    def clear_historical_data(self) -> None:
        self._ledger.clear()
        self.complexity_analyzer.clear_historical_data()
