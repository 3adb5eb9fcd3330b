"""Tests for the complexity analyzer."""

from unittest.mock import AsyncMock

import pytest

from conftest import make_project, make_requirement
from estimation_engine.components.base.exceptions import OllamaTimeoutError
from estimation_engine.components.complexity import (
    ComplexityAnalyzer,
    ComplexityOptions,
    ComplexityRequest,
    Fallback,
    Scored,
)
from estimation_engine.schemas import ComplexityFactorsUpdate


def client_returning(*responses):
    client = AsyncMock()
    client.generate.side_effect = list(responses)
    return client


def assert_axes_bounded(score):
    for value in (score.overall, score.technical, score.business, score.integration):
        assert 1 <= value <= 10


class TestScoreRequirement:
    """Backend rating with heuristic fallback."""

    @pytest.mark.asyncio
    async def test_json_rating_is_scored(self, analyzer, requirements):
        outcome = await analyzer.score_requirement(requirements[0])

        assert isinstance(outcome, Scored)
        assert outcome.kind == "scored"
        assert outcome.value == 6

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response, expected",
        [
            ('```json\n{"complexity": 4}\n```', 4),
            ('{"complexity": 8', 8),
            ("Complexity: 7.5 out of 10", 7.5),
            ("15", 10),
            ("0", 1),
            ("This is very complex and difficult", 9),
            ("Looks complex to me", 7),
            ("Fairly simple change", 3),
            ("Medium effort", 5),
            ("On a scale of 1-10 this is very complex", 9),
            ("On a scale of 1 to 10, I would rate it 8", 8),
        ],
    )
    async def test_response_parsing(self, requirements, response, expected):
        analyzer = ComplexityAnalyzer(client=client_returning(response))

        outcome = await analyzer.score_requirement(requirements[0])

        assert isinstance(outcome, Scored)
        assert outcome.value == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_unparseable_response_falls_back(self):
        analyzer = ComplexityAnalyzer(client=client_returning("I cannot rate this requirement"))
        requirement = make_requirement("r1", "Add a settings page")

        outcome = await analyzer.score_requirement(requirement)

        assert isinstance(outcome, Fallback)
        assert outcome.value == 5
        assert "ResponseParsingError" in outcome.reason

    @pytest.mark.asyncio
    async def test_backend_error_falls_back(self, failing_client):
        analyzer = ComplexityAnalyzer(client=failing_client)
        requirement = make_requirement(
            "r1",
            "Train a machine learning model on a distributed cluster",
            type="non-functional",
            priority="high",
        )

        outcome = await analyzer.score_requirement(requirement)

        assert isinstance(outcome, Fallback)
        # base 5 + machine learning + distributed + non-functional + high priority
        assert outcome.value == 9
        assert "OllamaUnavailableError" in outcome.reason

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self):
        client = AsyncMock()
        client.generate.side_effect = OllamaTimeoutError("timed out", component="ollama")
        analyzer = ComplexityAnalyzer(client=client)

        value = await analyzer.analyze_requirement_complexity(make_requirement("r1", "Simple form"))

        assert value == 5

    @pytest.mark.asyncio
    async def test_prompt_carries_requirement_and_context(self, analyzer, scoring_client, requirements):
        await analyzer.score_requirement(requirements[0], context=["Legacy PHP monolith"])

        prompt, options = scoring_client.generate.call_args.args
        assert requirements[0].description in prompt
        assert "Legacy PHP monolith" in prompt
        assert "Passwords are hashed" in prompt
        assert options.format == "json"
        assert options.temperature == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_requirements_scored_one_call_each(self, analyzer, scoring_client, requirements):
        outcomes = await analyzer.score_requirements(requirements)

        assert len(outcomes) == 3
        assert scoring_client.generate.await_count == 3


class TestHeuristic:
    """Deterministic fallback rating."""

    def test_base_score(self, analyzer):
        assert analyzer.calculate_heuristic_complexity(make_requirement("r1", "Add a button")) == 5

    def test_priority_and_type_raise_score(self, analyzer):
        requirement = make_requirement("r1", "Add a button", type="non-functional", priority="high")

        assert analyzer.calculate_heuristic_complexity(requirement) == 7

    def test_clamped_to_ten(self, analyzer):
        requirement = make_requirement(
            "r1",
            "Machine learning and AI on blockchain with IoT sensors, AR overlays, "
            "quantum simulation, edge computing and distributed storage",
            type="non-functional",
            priority="high",
        )

        assert analyzer.calculate_heuristic_complexity(requirement) == 10

    def test_short_keywords_need_whole_words(self, analyzer):
        # "ai" inside "maintain" and "ar" inside "archive" are not technologies
        requirement = make_requirement("r1", "Maintain the archive of invoices")

        assert analyzer.detect_new_technologies(requirement) == []


class TestAggregation:
    """Axis aggregation over per-requirement ratings."""

    def test_single_technical_requirement(self, analyzer):
        requirement = make_requirement("r1", "Optimize database query performance")

        score = analyzer.aggregate([requirement], [6.0])

        assert score.technical == pytest.approx(6.0)
        assert score.business == 1
        assert score.integration == 1
        assert score.overall == pytest.approx(8 / 3)
        names = [f.name for f in score.factors]
        assert names == ["Technical Implementation", "Testing Complexity"]

    def test_uncategorized_requirement_counts_as_business(self, analyzer):
        requirement = make_requirement("r1", "Let managers rename teams")

        categories = analyzer.categorize(requirement)
        score = analyzer.aggregate([requirement], [5.0])

        assert categories.business and not categories.technical and not categories.integration
        assert score.business == pytest.approx(4.0)

    def test_requirement_can_feed_several_axes(self, analyzer):
        requirement = make_requirement("r1", "Integrate the external billing API")

        categories = analyzer.categorize(requirement)

        assert categories.technical
        assert categories.integration
        assert categories.business

    def test_plural_short_keyword(self, analyzer):
        requirement = make_requirement("r1", "Expose public REST APIs for partner systems")

        categories = analyzer.categorize(requirement)

        assert categories.technical
        assert not categories.business

    def test_axes_clamped_to_upper_bound(self, analyzer):
        requirement = make_requirement("r1", "Sync records to the external CRM")

        score = analyzer.aggregate([requirement], [10.0])

        # 10 * 1.2 integration weight exceeds the scale
        assert score.integration == 10
        assert_axes_bounded(score)

    def test_empty_requirements(self, analyzer):
        score = analyzer.aggregate([], [])

        assert score.overall == 1
        assert score.factors == []

    def test_mismatched_scores_rejected(self, analyzer, requirements):
        with pytest.raises(ValueError):
            analyzer.aggregate(requirements, [5.0])


class TestCalculateComplexity:
    """End-to-end complexity calculation."""

    @pytest.mark.asyncio
    async def test_axes_bounded(self, analyzer, requirements):
        score = await analyzer.calculate_complexity(requirements)

        assert_axes_bounded(score)

    @pytest.mark.asyncio
    async def test_axes_bounded_with_failing_backend(self, failing_client, requirements):
        analyzer = ComplexityAnalyzer(client=failing_client)

        score = await analyzer.calculate_complexity(requirements)

        assert_axes_bounded(score)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", ["-50", "9999", "", "null", "[1, 2, 3]"])
    async def test_axes_bounded_with_hostile_responses(self, requirements, response):
        client = AsyncMock()
        client.generate.return_value = response
        analyzer = ComplexityAnalyzer(client=client)

        score = await analyzer.calculate_complexity(requirements)

        assert_axes_bounded(score)

    @pytest.mark.asyncio
    async def test_custom_factors_apply_to_single_call(self, analyzer):
        requirement = make_requirement("r1", "Optimize database query performance")
        options = ComplexityOptions(custom_factors=ComplexityFactorsUpdate(technical=1.5))

        score = await analyzer.calculate_complexity([requirement], options)

        assert score.technical == pytest.approx(9.0)
        assert analyzer.get_complexity_factors().technical == 1.0

    @pytest.mark.asyncio
    async def test_process_entry_point(self, analyzer, requirements):
        score = await analyzer(ComplexityRequest(requirements=requirements))

        assert_axes_bounded(score)


class TestFactors:
    """Complexity factor configuration."""

    def test_defaults(self, analyzer):
        factors = analyzer.get_complexity_factors()

        assert factors.technical == 1.0
        assert factors.business == 0.8
        assert factors.integration == 1.2
        assert factors.testing == 0.6
        assert factors.documentation == 0.4

    def test_partial_update_from_mapping(self, analyzer):
        analyzer.update_complexity_factors({"integration": 2.0})

        factors = analyzer.get_complexity_factors()
        assert factors.integration == 2.0
        assert factors.technical == 1.0

    def test_returned_factors_are_a_copy(self, analyzer):
        factors = analyzer.get_complexity_factors()
        factors.technical = 5.0

        assert analyzer.get_complexity_factors().technical == 1.0

    def test_initial_factors(self, scoring_client):
        analyzer = ComplexityAnalyzer(client=scoring_client, initial_factors={"business": 1.0})

        assert analyzer.get_complexity_factors().business == 1.0


class TestHistoricalBias:
    """Similarity-based bias nudges (coarse heuristic thresholds)."""

    def test_overrun_history_nudges_upward(self, analyzer):
        requirement = make_requirement("r1", "Optimize database query performance")
        analyzer.add_historical_project(make_project("p1", actual=300, estimated=100, requirements=[requirement]))

        score = analyzer.aggregate([requirement], [6.0])

        # ratio 3.0 is capped at 1.5
        assert score.overall == pytest.approx(8 / 3 * 1.5)

    def test_underrun_history_never_nudges_downward(self, analyzer):
        requirement = make_requirement("r1", "Optimize database query performance")
        analyzer.add_historical_project(make_project("p1", actual=50, estimated=100, requirements=[requirement]))

        score = analyzer.aggregate([requirement], [6.0])

        assert score.overall == pytest.approx(8 / 3)

    def test_dissimilar_history_ignored(self, analyzer):
        past = make_requirement("old", "Export quarterly invoices into spreadsheet files")
        analyzer.add_historical_project(make_project("p1", actual=300, estimated=100, requirements=[past]))

        adjustment = analyzer.historical_adjustment([make_requirement("r1", "Optimize database query performance")])

        assert adjustment == 1.0

    def test_projects_without_estimate_ignored(self, analyzer):
        requirement = make_requirement("r1", "Optimize database query performance")
        analyzer.add_historical_project(make_project("p1", actual=300, estimated=0, requirements=[requirement]))

        assert analyzer.historical_adjustment([requirement]) == 1.0


class TestHistoricalLedger:
    """Bounded historical memory."""

    def test_keeps_most_recent_hundred(self, analyzer):
        for i in range(105):
            analyzer.add_historical_project(make_project(f"p{i}", actual=10, estimated=10))

        history = analyzer.get_historical_data()

        assert len(history) == 100
        assert history[0].id == "p5"
        assert history[-1].id == "p104"

    def test_snapshot_is_defensive(self, analyzer):
        analyzer.add_historical_project(make_project("p1", actual=10, estimated=10))

        analyzer.get_historical_data().clear()

        assert len(analyzer.get_historical_data()) == 1

    def test_clear(self, analyzer):
        analyzer.add_historical_project(make_project("p1", actual=10, estimated=10))

        analyzer.clear_historical_data()

        assert analyzer.get_historical_data() == []
