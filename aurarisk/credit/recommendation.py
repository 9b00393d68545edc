"""Assessment validation, lending decision and pricing.

The decision is driven by the risk index, ``1 - overall score``, read
through the configured thresholds:

    risk index < low       MINIMAL   APPROVE
    risk index < medium    LOW       APPROVE
    risk index < high      MEDIUM    CONDITIONAL_APPROVE
    risk index < critical  HIGH      MANUAL_REVIEW
    otherwise              CRITICAL  DECLINE

Failed validation, failed stress tests and concentration breaches can
only move a decision further down that ladder.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from ..data.applications import ValidationResult
from .concentration import exceeds_any_limit
from .stress import BASELINE

if TYPE_CHECKING:
    from .assessment import RiskAssessment

logger = logging.getLogger(__name__)

APPROVE = "APPROVE"
CONDITIONAL_APPROVE = "CONDITIONAL_APPROVE"
MANUAL_REVIEW = "MANUAL_REVIEW"
DECLINE = "DECLINE"

DECISION_LADDER = [APPROVE, CONDITIONAL_APPROVE, MANUAL_REVIEW, DECLINE]

RISK_LEVEL_DECISIONS = {
    "MINIMAL": APPROVE,
    "LOW": APPROVE,
    "MEDIUM": CONDITIONAL_APPROVE,
    "HIGH": MANUAL_REVIEW,
    "CRITICAL": DECLINE,
}

DEFAULT_THRESHOLDS = {"low": 0.15, "medium": 0.35, "high": 0.65, "critical": 0.85}

MIN_MODEL_CONFIDENCE = 0.5


def categorize_risk(risk_index: float, thresholds: dict[str, float] | None = None) -> str:
    """Map a risk index in [0, 1] to MINIMAL, LOW, MEDIUM, HIGH or CRITICAL."""
    thresholds = {**DEFAULT_THRESHOLDS, **(thresholds or {})}
    if risk_index < thresholds["low"]:
        return "MINIMAL"
    if risk_index < thresholds["medium"]:
        return "LOW"
    if risk_index < thresholds["high"]:
        return "MEDIUM"
    if risk_index < thresholds["critical"]:
        return "HIGH"
    return "CRITICAL"


def implied_decision(risk_index: float, thresholds: dict[str, float] | None = None) -> str:
    """Decision the risk index alone supports."""
    return RISK_LEVEL_DECISIONS[categorize_risk(risk_index, thresholds)]


def worse(first: str, second: str) -> str:
    """The more adverse of two decisions."""
    return max(first, second, key=DECISION_LADDER.index)


def validate_assessment(assessment: RiskAssessment) -> ValidationResult:
    """
    Sanity-check an assessment before a decision is taken on it.

    Errors: component scores outside [0, 1], PD or LGD outside [0, 1],
    negative EAD, missing baseline stress result.
    Warnings: model confidence below 0.5, NaN loss rates.
    """
    errors: list[str] = []
    warnings: list[str] = []
    scores = assessment.risk_scores

    for component in ("credit_score", "financial_stability", "behavioral", "collateral",
                      "market_conditions", "overall", "probability_of_default", "loss_given_default"):
        value = scores.get(component)
        if value is None or np.isnan(value) or not 0 <= value <= 1:
            errors.append(f"Score '{component}' out of range: {value}")

    if scores.get("exposure_at_default", 0) < 0:
        errors.append("Exposure at default is negative")

    if BASELINE not in assessment.stress_test_results:
        errors.append("Missing baseline stress test")

    confidences = {
        name: output.get("confidence")
        for name, output in assessment.model_outputs.items()
        if isinstance(output, dict) and output.get("confidence") is not None
    }
    for name, confidence in confidences.items():
        if confidence < MIN_MODEL_CONFIDENCE:
            warnings.append(f"Low confidence in {name} model: {confidence:.2f}")

    for key, result in assessment.stress_test_results.items():
        if np.isnan(result.get("loss_rate", np.nan)):
            warnings.append(f"Loss rate undefined under scenario '{key}'")

    stats: dict[str, int | float] = {
        "scenarios": len(assessment.stress_test_results),
        "models": len(confidences),
        "min_confidence": min(confidences.values()) if confidences else np.nan,
    }

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        stats=stats,
    )


def generate_detailed_recommendation(
    assessment: RiskAssessment,
    thresholds: dict[str, float] | None = None,
) -> dict[str, Any]:
    """
    Take the lending decision for an assessment.

    Returns
    -------
    dict[str, Any]
        ``decision``, ``risk_level``, ``risk_index``, ``implied_decision``,
        ``reasons`` and ``conditions``.
    """
    overall = assessment.risk_scores.get("overall", 0.0)
    risk_index = float(np.clip(1 - overall, 0.0, 1.0))
    risk_level = categorize_risk(risk_index, thresholds)
    implied = RISK_LEVEL_DECISIONS[risk_level]

    decision = implied
    reasons = [f"Risk level {risk_level} (risk index {risk_index:.2f})"]
    conditions: list[str] = []

    if not assessment.validation_results.get("is_valid", True):
        decision = worse(decision, MANUAL_REVIEW)
        reasons.append("Assessment failed validation")

    failed_scenarios = [
        key for key, result in assessment.stress_test_results.items()
        if not result.get("passes_stress_test", True)
    ]
    if BASELINE in failed_scenarios:
        decision = worse(decision, MANUAL_REVIEW)
        reasons.append("Fails baseline stress test")
    elif failed_scenarios:
        decision = worse(decision, CONDITIONAL_APPROVE)
        reasons.append(f"Fails stress scenarios: {', '.join(failed_scenarios)}")
        conditions.append("Additional collateral or reduced amount")

    if exceeds_any_limit(assessment.concentration_analysis):
        decision = worse(decision, MANUAL_REVIEW)
        breaches = [name for name, result in assessment.concentration_analysis.items() if result["exceeds_limit"]]
        reasons.append(f"Concentration limits exceeded: {', '.join(breaches)}")

    if decision == CONDITIONAL_APPROVE and risk_level == "MEDIUM":
        conditions.append("Income and employment reverification")

    return {
        "decision": decision,
        "risk_level": risk_level,
        "risk_index": risk_index,
        "implied_decision": implied,
        "reasons": reasons,
        "conditions": conditions,
    }


def calculate_pricing_adjustments(
    assessment: RiskAssessment,
    pricing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the offered rate.

    Formula:
        rate = base_rate + expected_loss_rate + risk_spread(level)
               + concentration_surcharge (if any limit is exceeded)

    expected_loss_rate is PD * LGD, the annual loss per unit drawn.
    """
    pricing = pricing or {}
    base_rate = pricing.get("base_rate", 0.08)
    spreads = pricing.get("risk_spreads") or {}
    scores = assessment.risk_scores
    risk_level = assessment.recommendation.get("risk_level", "MEDIUM")

    expected_loss_rate = scores.get("probability_of_default", 0.0) * scores.get("loss_given_default", 0.0)
    risk_spread = spreads.get(risk_level, 0.0)
    surcharge = (
        pricing.get("concentration_surcharge", 0.0)
        if exceeds_any_limit(assessment.concentration_analysis)
        else 0.0
    )

    return {
        "base_rate": base_rate,
        "expected_loss_rate": expected_loss_rate,
        "risk_premium": expected_loss_rate + risk_spread,
        "concentration_surcharge": surcharge,
        "final_rate": base_rate + expected_loss_rate + risk_spread + surcharge,
    }
