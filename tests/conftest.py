"""Pytest configuration and fixtures for estimation engine tests."""

from typing import List
from unittest.mock import AsyncMock

import pytest

from estimation_engine.components.base.exceptions import OllamaUnavailableError
from estimation_engine.components.complexity import ComplexityAnalyzer
from estimation_engine.components.estimation import EstimationEngine
from estimation_engine.components.risks import RiskAnalyzer
from estimation_engine.schemas import ProjectData, Requirement


def make_requirement(req_id: str, description: str, **kwargs) -> Requirement:
    return Requirement(id=req_id, description=description, **kwargs)


def make_project(project_id: str, actual: float, estimated: float, name: str = "", **kwargs) -> ProjectData:
    return ProjectData(
        id=project_id,
        name=name or f"Project {project_id}",
        actual_hours=actual,
        estimated_hours=estimated,
        **kwargs,
    )


@pytest.fixture
def requirements() -> List[Requirement]:
    """Mixed set touching technical, integration and business axes."""
    return [
        make_requirement(
            "req-1",
            "Implement user authentication API with encryption of stored passwords",
            priority="high",
            acceptance_criteria=["Passwords are hashed with a salted algorithm before storage"],
        ),
        make_requirement(
            "req-2",
            "Integrate with the external payment gateway and sync order status via webhook",
        ),
        make_requirement(
            "req-3",
            "Build a dashboard showing monthly customer orders",
            type="functional",
            priority="low",
        ),
    ]


@pytest.fixture
def scoring_client() -> AsyncMock:
    """Backend that always rates requirements at 6."""
    client = AsyncMock()
    client.generate.return_value = '{"complexity": 6, "rationale": "moderate business logic"}'
    return client


@pytest.fixture
def failing_client() -> AsyncMock:
    """Backend that is never reachable."""
    client = AsyncMock()
    client.generate.side_effect = OllamaUnavailableError("connection refused", component="ollama")
    return client


@pytest.fixture
def analyzer(scoring_client) -> ComplexityAnalyzer:
    return ComplexityAnalyzer(client=scoring_client)


@pytest.fixture
def risk_analyzer() -> RiskAnalyzer:
    return RiskAnalyzer()


@pytest.fixture
def engine(scoring_client) -> EstimationEngine:
    return EstimationEngine(client=scoring_client)
