"""Fair lending monitoring.

Protected characteristics are identified for monitoring only. They are
never read by the credit models and never feed a lending decision; this
module only checks whether the decision actually taken departs from the
one the risk score implies.
"""
from __future__ import annotations

import logging
from typing import Any

from ..credit.recommendation import DECISION_LADDER, implied_decision
from ..data.config import get_nested
from .results import PASS, REVIEW_REQUIRED, FairLendingResult

logger = logging.getLogger(__name__)


def identify_protected_classes(demographics: dict[str, Any] | None, protected_age: int = 40) -> list[str]:
    """List the protected classes present in the applicant's demographics."""
    demographics = demographics or {}
    protected: list[str] = []

    if demographics.get("race"):
        protected.append("RACE")
    if demographics.get("gender"):
        protected.append("GENDER")
    age = demographics.get("age")
    if age is not None and age >= protected_age:
        protected.append("AGE")
    if demographics.get("marital_status"):
        protected.append("MARITAL_STATUS")

    return protected


def analyze_decision_consistency(
    application: dict[str, Any],
    risk_assessment: dict[str, Any],
) -> dict[str, Any] | None:
    """
    Compare the recommended decision with the one the risk index implies.

    Returns
    -------
    dict[str, Any] | None
        ``consistent``, ``variance`` (ladder distance scaled to [0, 1]),
        ``implied_decision`` and ``actual_decision``. None when the
        assessment lacks a decision or a risk index.
    """
    actual = get_nested(risk_assessment, "recommendation", "decision")
    risk_index = get_nested(risk_assessment, "recommendation", "risk_index")
    thresholds = risk_assessment.get("risk_thresholds") or {}
    if actual not in DECISION_LADDER or risk_index is None:
        logger.debug("No decision to compare for application %s", application.get("id"))
        return None

    implied = implied_decision(risk_index, thresholds)
    distance = DECISION_LADDER.index(actual) - DECISION_LADDER.index(implied)

    return {
        "consistent": distance == 0,
        "variance": abs(distance) / (len(DECISION_LADDER) - 1),
        "implied_decision": implied,
        "actual_decision": actual,
        "more_adverse": distance > 0,
    }


def assess_bias_risk(protected_classes: list[str], consistency: dict[str, Any] | None) -> str:
    """
    Grade the risk that a decision reflects bias.

    HIGH when a protected applicant got a harsher decision than their score
    implies, MEDIUM for any other inconsistency, otherwise LOW.
    """
    if consistency is None or consistency["consistent"]:
        return "LOW"
    if protected_classes and consistency["more_adverse"]:
        return "HIGH"
    return "MEDIUM"


def perform_fair_lending_check(
    application: dict[str, Any],
    risk_assessment: dict[str, Any] | None = None,
    config: dict[str, Any] | None = None,
) -> FairLendingResult:
    """
    Monitor the application for fair lending concerns.

    Returns
    -------
    FairLendingResult
        REVIEW_REQUIRED when the bias risk is HIGH, otherwise PASS.
    """
    protected_age = get_nested(config or {}, "fair_lending", "protected_age", default=40)
    fair_lending = FairLendingResult()

    if application.get("demographics"):
        fair_lending.protected_classes = identify_protected_classes(
            application["demographics"], protected_age=protected_age
        )

    if risk_assessment:
        fair_lending.decision_consistency = analyze_decision_consistency(application, risk_assessment)

    fair_lending.bias_risk = assess_bias_risk(fair_lending.protected_classes, fair_lending.decision_consistency)

    if fair_lending.bias_risk == "HIGH":
        fair_lending.disparate_impact = True
        fair_lending.recommendations.append("Require additional review")
        fair_lending.recommendations.append("Document decision rationale")
        fair_lending.status = REVIEW_REQUIRED
        logger.warning(f"High bias risk on application {application.get('id')}")
    else:
        fair_lending.status = PASS

    return fair_lending
