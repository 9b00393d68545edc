"""Component risk scores and their weighted aggregate.

Component scores are quality scores in [0, 1]: higher means a safer
borrower. The PD/LGD/EAD triple gives the expected loss in currency.
"""
from __future__ import annotations

import logging
from typing import Any

import numpy as np

from ..data.applications import section
from ..models.default import geographic_risk, industry_risk

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = {
    "credit_score": 0.30,
    "financial_stability": 0.25,
    "behavioral": 0.20,
    "collateral": 0.15,
    "market_conditions": 0.10,
}

CHANNEL_SCORES = {"branch": 0.8, "online": 0.9}
COLLATERAL_TYPE_QUALITY = {"real_estate": 0.9, "vehicle": 0.6, "securities": 0.8}

INTEREST_RATE_ENVIRONMENT = 0.7
ECONOMIC_GROWTH = 0.8


def calculate_financial_stability_score(application: dict[str, Any]) -> float:
    """
    Income, leverage and tenure score.

    Formula:
        0.4 * min(income / 50k, 1) + 0.4 * clip(1 - debt / income, 0, 1)
        + 0.2 * min(tenure_months / 24, 1)
    """
    financial = section(application, "financial_info")
    income = financial.get("annual_income") or 0
    debt = (financial.get("monthly_debt") or 0) * 12
    employment = financial.get("employment_history") or 0

    income_score = min(income / 50000, 1.0) * 0.4
    debt_score = min(max(0.0, 1 - debt / income), 1.0) * 0.4 if income > 0 else 0.0
    employment_score = min(employment / 24, 1.0) * 0.2

    return income_score + debt_score + employment_score


def calculate_behavioral_score(application: dict[str, Any]) -> float:
    """Relationship length (60 month cap), product count (5 cap) and channel."""
    relationship = section(application, "relationship_info")
    history_score = min((relationship.get("length") or 0) / 60, 1.0) * 0.5
    usage_score = min(len(relationship.get("products") or []) / 5, 1.0) * 0.3
    channel_score = CHANNEL_SCORES.get(application.get("channel"), 0.7)

    return history_score + usage_score + channel_score * 0.2


def calculate_collateral_score(application: dict[str, Any]) -> float:
    """
    Collateral type and loan-to-value score. Unsecured loans score 0.5.

    Formula:
        0.4 * type_quality + 0.6 * max(0, 1 - LTV)
    """
    collateral = section(application, "collateral")
    value = collateral.get("collateral_value") or 0
    if not collateral or value <= 0:
        return 0.5

    loan_to_value = (section(application, "loan_details").get("loan_amount") or 0) / value
    type_score = COLLATERAL_TYPE_QUALITY.get(collateral.get("collateral_type"), 0.7)
    ltv_score = max(0.0, 1 - loan_to_value)

    return type_score * 0.4 + ltv_score * 0.6


def calculate_market_conditions_score(application: dict[str, Any]) -> float:
    """Mean of rate environment, growth, industry and regional performance."""
    factors = [
        INTEREST_RATE_ENVIRONMENT,
        ECONOMIC_GROWTH,
        1 - industry_risk(section(application, "financial_info").get("industry_type")),
        1 - geographic_risk(section(application, "personal_info").get("address")),
    ]
    return float(np.mean(factors))


def weighted_overall(scores: dict[str, float], weights: dict[str, float]) -> float:
    """Weighted sum of component scores; weights are used as given."""
    return float(sum(scores[component] * weight for component, weight in weights.items()))


def calculate_comprehensive_risk_scores(
    application: dict[str, Any],
    models: dict[str, Any],
    weights: dict[str, float] | None = None,
) -> dict[str, float]:
    """
    Compute every component score, the weighted overall score and expected loss.

    Parameters
    ----------
    application : dict[str, Any]
        Loan application.
    models : dict[str, Any]
        Calibrated models keyed by ``credit_score``, ``pd``, ``lgd`` and ``ead``.
    weights : dict[str, float] | None
        Component weights. Defaults to ``DEFAULT_WEIGHTS``.

    Returns
    -------
    dict[str, float]
        Component scores, ``overall``, ``probability_of_default``,
        ``loss_given_default``, ``exposure_at_default`` (currency) and
        ``expected_loss`` (currency).

    Notes
    -----
    expected_loss = PD * LGD * EAD
    """
    weights = weights or DEFAULT_WEIGHTS
    missing = set(weights) - set(DEFAULT_WEIGHTS)
    if missing:
        raise ValueError(f"Unknown score components in weights: {sorted(missing)}")

    scores: dict[str, float] = {
        "credit_score": models["credit_score"].predict(application),
        "financial_stability": calculate_financial_stability_score(application),
        "behavioral": calculate_behavioral_score(application),
        "collateral": calculate_collateral_score(application),
        "market_conditions": calculate_market_conditions_score(application),
    }
    scores["overall"] = weighted_overall(scores, weights)

    scores["probability_of_default"] = models["pd"].predict(application)
    scores["loss_given_default"] = models["lgd"].predict(application)
    scores["exposure_at_default"] = models["ead"].predict(application)
    scores["expected_loss"] = (
        scores["probability_of_default"] * scores["loss_given_default"] * scores["exposure_at_default"]
    )

    logger.debug("Scores for %s: %s", application.get("id"), scores)
    return scores
