"""
Requirement and historical project schemas.

Requirements are immutable caller input. The ``complexity`` and
``estimated_hours`` fields are placeholders filled by upstream tooling and are
never trusted by the engine.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RequirementType = Literal["functional", "non-functional"]
Priority = Literal["low", "medium", "high"]
ProjectSize = Literal["small", "medium", "large"]


class Requirement(BaseModel):
    """A single natural-language project requirement."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: RequirementType = "functional"
    priority: Priority = "medium"
    description: str = ""
    acceptance_criteria: List[str] = Field(default_factory=list)
    complexity: float = 0.0
    estimated_hours: float = 0.0


class ProjectData(BaseModel):
    """Completed project used to calibrate future estimates."""

    id: str
    name: str
    actual_hours: float = Field(..., ge=0)
    estimated_hours: float = Field(..., ge=0)
    requirements: List[Requirement] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=datetime.now)

    @property
    def overrun_ratio(self) -> Optional[float]:
        """actual / estimated, or None when no estimate was recorded."""
        if self.estimated_hours <= 0:
            return None
        return self.actual_hours / self.estimated_hours


class HistoricalDataFilter(BaseModel):
    """Filters for querying the historical project ledger."""

    technology: Optional[List[str]] = None
    size: Optional[ProjectSize] = None
    domain: Optional[str] = None


class EstimationFeedback(BaseModel):
    """Post-delivery feedback on a single estimate."""

    project_id: str
    actual_hours: float
    estimated_hours: float
    factors: List[str] = Field(default_factory=list)
