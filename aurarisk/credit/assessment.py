"""Credit risk assessment container."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from .stress import BASELINE


@dataclass
class RiskAssessment:
    """All outputs of one credit risk assessment.

    Attributes
    ----------
    id : str
        Assessment id (``RISK_<epoch ms>_<suffix>``).
    application_id : str | None
        Id of the assessed application.
    timestamp : str
        ISO 8601 start time.
    agent_id : str
        Agent that produced the assessment.
    borrower_profile : dict[str, Any]
        Demographics, financial and behavioural summary.
    risk_scores : dict[str, float]
        Component scores, ``overall`` and PD/LGD/EAD/expected loss.
    risk_factors : dict[str, Any]
        Detailed factor groups.
    concentration_analysis : dict[str, Any]
        Exposure per concentration bucket.
    stress_test_results : dict[str, Any]
        Stressed parameters per scenario key.
    model_outputs : dict[str, Any]
        Predictions and diagnostics per model.
    validation_results : dict[str, Any]
        Sanity checks over the assessment.
    recommendation : dict[str, Any]
        Decision, risk level, reasons and conditions.
    pricing_adjustments : dict[str, Any]
        Rate build-up for the offer.
    risk_thresholds : dict[str, float]
        Thresholds the recommendation was taken against.

    Examples
    --------
    >>> assessment = agent.assess_credit_risk(application)
    >>> assessment.recommendation["decision"]
    'APPROVE'
    """

    id: str
    application_id: str | None
    timestamp: str
    agent_id: str
    borrower_profile: dict[str, Any] = field(default_factory=dict)
    risk_scores: dict[str, float] = field(default_factory=dict)
    risk_factors: dict[str, Any] = field(default_factory=dict)
    concentration_analysis: dict[str, Any] = field(default_factory=dict)
    stress_test_results: dict[str, Any] = field(default_factory=dict)
    model_outputs: dict[str, Any] = field(default_factory=dict)
    validation_results: dict[str, Any] = field(default_factory=dict)
    recommendation: dict[str, Any] = field(default_factory=dict)
    pricing_adjustments: dict[str, Any] = field(default_factory=dict)
    risk_thresholds: dict[str, float] = field(default_factory=dict)

    @property
    def capital_requirement(self) -> float:
        """Baseline-scenario capital in currency units, 0 before stress testing."""
        baseline = self.stress_test_results.get(BASELINE)
        if not baseline:
            return 0.0
        return float(baseline["capital_requirement"])

    @property
    def decision(self) -> str | None:
        return self.recommendation.get("decision")

    def to_dict(self) -> dict[str, Any]:
        """Serialise, adding ``capital_requirement`` at the top level."""
        data = asdict(self)
        data["capital_requirement"] = self.capital_requirement
        return data
