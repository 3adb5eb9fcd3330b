"""Keyword tables and risk templates for the detection passes."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from estimation_engine.schemas import Priority, RiskFactor

IMPACT_WEIGHTS = {"high": 1.0, "medium": 0.6, "low": 0.3}


@dataclass(frozen=True)
class RiskTemplate:
    id: str
    name: str
    probability: float
    impact: Priority
    description: str
    mitigation: str
    keywords: Tuple[str, ...] = ()

    def build(self, requirement_id: Optional[str] = None) -> RiskFactor:
        """Instantiate the template, suffixing the id per requirement."""
        risk_id = f"{self.id}-{requirement_id}" if requirement_id else self.id
        return RiskFactor(
            id=risk_id,
            name=self.name,
            probability=self.probability,
            impact=self.impact,
            description=self.description,
            mitigation=self.mitigation,
        )


# Per-requirement technical patterns
PERFORMANCE = RiskTemplate(
    id="perf",
    name="Performance Risk",
    probability=0.6,
    impact="high",
    description="Requirement may have significant performance implications",
    mitigation="Conduct performance testing early, implement caching strategies",
    keywords=("real-time", "high-volume", "concurrent", "scalable", "performance",
              "fast", "responsive", "load"),
)

SECURITY = RiskTemplate(
    id="sec",
    name="Security Risk",
    probability=0.4,
    impact="high",
    description="Requirement involves security-sensitive functionality",
    mitigation="Security review, penetration testing, compliance audit",
    keywords=("authentication", "authorization", "security", "encrypt", "payment",
              "personal data", "sensitive", "compliance"),
)

SCALABILITY = RiskTemplate(
    id="scale",
    name="Scalability Risk",
    probability=0.5,
    impact="medium",
    description="Solution may not scale with increased load",
    mitigation="Design for horizontal scaling, implement load testing",
    keywords=("scale", "growth", "expand", "multiple users", "distributed", "cloud",
              "microservices"),
)

NEW_TECHNOLOGY = RiskTemplate(
    id="tech",
    name="Technology Risk",
    probability=0.7,
    impact="medium",
    description="Requirement involves unfamiliar or cutting-edge technology",
    mitigation="Proof of concept, team training, expert consultation",
    keywords=("machine learning", "ai", "blockchain", "iot", "ar", "vr", "quantum",
              "edge computing"),
)

TECHNICAL_PATTERNS: List[RiskTemplate] = [PERFORMANCE, SECURITY, SCALABILITY, NEW_TECHNOLOGY]

# Codebase metrics
TECHNICAL_DEBT_THRESHOLD = 0.7
DEPENDENCY_THRESHOLD = 50

TECHNICAL_DEBT = RiskTemplate(
    id="tech-debt",
    name="Technical Debt Risk",
    probability=0.8,
    impact="medium",
    description="High technical debt may slow development",
    mitigation="Refactoring sprint, code quality improvements",
)

DEPENDENCIES = RiskTemplate(
    id="dependency-risk",
    name="Dependency Management Risk",
    probability=0.6,
    impact="medium",
    description="Large number of dependencies increases maintenance risk",
    mitigation="Dependency audit, update strategy, alternatives evaluation",
)

ARCHITECTURE = RiskTemplate(
    id="architecture-risk",
    name="Architecture Risk",
    probability=0.7,
    impact="high",
    description="Existing architecture issues may complicate implementation",
    mitigation="Architecture review, refactoring plan, design patterns",
)

# Integration
INTEGRATION_KEYWORDS = ("integrate", "connect", "sync", "import", "export", "api",
                        "webhook", "third-party", "external")

THIRD_PARTY = RiskTemplate(
    id="integration",
    name="Third-party Integration Risk",
    probability=0.6,
    impact="medium",
    description="External service dependencies may cause delays or failures",
    mitigation="API documentation review, fallback strategies, SLA verification",
    keywords=("third-party", "external api", "service integration", "payment gateway",
              "social media", "cloud service"),
)

DATA_MIGRATION = RiskTemplate(
    id="migration",
    name="Data Migration Risk",
    probability=0.5,
    impact="high",
    description="Data migration may be complex and error-prone",
    mitigation="Migration testing, rollback plan, data validation",
    keywords=("migrate", "transfer", "import data", "legacy system", "data conversion",
              "database migration"),
)

# Business
VAGUE_INDICATORS = ("user-friendly", "intuitive", "flexible", "scalable", "robust",
                    "efficient", "as needed", "appropriate")
VAGUE_MAX_WORDS = 10
VAGUE_SHARE_THRESHOLD = 0.3

CONFLICT_PAIRS: List[Tuple[str, str]] = [
    ("simple", "complex"),
    ("fast", "secure"),
    ("cheap", "high-quality"),
    ("automated", "manual"),
    ("public", "private"),
]

SCOPE_CREEP = RiskTemplate(
    id="scope-creep",
    name="Scope Creep Risk",
    probability=0.8,
    impact="high",
    description="Vague requirements may lead to scope expansion",
    mitigation="Requirements clarification, change control process",
)

STAKEHOLDER_ALIGNMENT = RiskTemplate(
    id="stakeholder-alignment",
    name="Stakeholder Alignment Risk",
    probability=0.7,
    impact="medium",
    description="Conflicting requirements suggest stakeholder misalignment",
    mitigation="Stakeholder workshops, requirement prioritization",
)

# Resource
SKILL_GAP = RiskTemplate(
    id="skill-gap",
    name="Skill Gap Risk",
    probability=0.6,
    impact="medium",
    description="Requirements may require specialized skills not available in team",
    mitigation="Training plan, external consultants, skill assessment",
    keywords=("machine learning", "ai", "blockchain", "devops", "security expert",
              "data scientist", "architect", "specialized", "expert knowledge"),
)

HIGH_PRIORITY_SHARE_THRESHOLD = 0.5

TIMELINE_PRESSURE = RiskTemplate(
    id="timeline-pressure",
    name="Timeline Pressure Risk",
    probability=0.7,
    impact="high",
    description="High number of high-priority requirements may create timeline pressure",
    mitigation="Requirement prioritization, phased delivery, resource allocation",
)

# Recommendations
MONITORING_RECOMMENDATION = "Implement risk monitoring and early warning systems"
CONTINGENCY_RECOMMENDATION = "Create detailed contingency plans for high-impact risks"
PROOF_OF_CONCEPT_RECOMMENDATION = (
    "Conduct proof-of-concept development for high-risk technical components"
)
