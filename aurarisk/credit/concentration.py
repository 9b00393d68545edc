"""Concentration limits against the lending capital base."""
from __future__ import annotations

import logging
from typing import Any

from ..data.applications import section
from ..models.correlation import CorrelationModel
from .portfolio import Portfolio, bucket_keys

logger = logging.getLogger(__name__)

DEFAULT_LIMITS = {
    "single_borrower": 0.25,
    "industry": 0.30,
    "geography": 0.40,
    "product_type": 0.50,
}

# result key -> (limit key, portfolio column)
DIMENSIONS = {
    "borrower": ("single_borrower", "borrower_id"),
    "industry": ("industry", "industry"),
    "geographic": ("geography", "state"),
    "product": ("product_type", "product"),
}


def analyze_concentration_risk(
    application: dict[str, Any],
    portfolio: Portfolio,
    limits: dict[str, float] | None = None,
    capital_base: float = 10_000_000,
    correlation_model: CorrelationModel | None = None,
) -> dict[str, dict[str, Any]]:
    """
    Measure how the new loan moves each concentration bucket.

    Exposures are fractions of ``capital_base``:

        current  = bucket exposure / capital_base
        proposed = (bucket exposure + loan amount) / capital_base
        limit_utilization = proposed / limit

    Parameters
    ----------
    application : dict[str, Any]
        Loan application.
    portfolio : Portfolio
        Loans already booked.
    limits : dict[str, float] | None
        Limits keyed by ``single_borrower``, ``industry``, ``geography``
        and ``product_type``.
    capital_base : float
        Lending capacity the limits are measured against.
    correlation_model : CorrelationModel | None
        When given, the industry entry also reports
        ``correlated_exposure``: proposed exposure with every other
        industry in the book weighted by its correlation with the
        applicant's industry. Informational; limits use direct exposure.

    Returns
    -------
    dict[str, dict[str, Any]]
        ``borrower``, ``industry``, ``geographic`` and ``product`` entries
        with current and proposed exposure, limit utilisation and
        ``exceeds_limit`` (proposed strictly above the limit).
    """
    if capital_base <= 0:
        raise ValueError(f"capital_base must be positive, got {capital_base}")

    limits = {**DEFAULT_LIMITS, **(limits or {})}
    loan_amount = section(application, "loan_details").get("loan_amount") or 0
    keys = bucket_keys(application)
    frame = portfolio.to_frame()

    analysis: dict[str, dict[str, Any]] = {}
    for name, (limit_key, column) in DIMENSIONS.items():
        bucket = keys[column]
        current = float(frame.loc[frame[column] == bucket, "exposure"].sum()) if len(frame) else 0.0
        proposed = current + loan_amount
        limit = limits[limit_key]

        analysis[name] = {
            "bucket": bucket,
            "current_exposure": current / capital_base,
            "proposed_exposure": proposed / capital_base,
            "limit": limit,
            "limit_utilization": proposed / capital_base / limit,
            "exceeds_limit": proposed / capital_base > limit,
        }

    if correlation_model is not None:
        analysis["industry"]["correlated_exposure"] = (
            correlated_industry_exposure(keys["industry"], portfolio, correlation_model) + loan_amount
        ) / capital_base

    breaches = [name for name, result in analysis.items() if result["exceeds_limit"]]
    if breaches:
        logger.warning(f"Application {application.get('id')} breaches concentration limits: {breaches}")

    return analysis


def correlated_industry_exposure(
    industry: str,
    portfolio: Portfolio,
    correlation_model: CorrelationModel,
) -> float:
    """Booked exposure per industry weighted by its correlation with ``industry``."""
    by_industry = portfolio.exposure_by("industry")
    return float(sum(
        exposure * correlation_model.industry_correlation(industry, other)
        for other, exposure in by_industry.items()
    ))


def exceeds_any_limit(concentration: dict[str, dict[str, Any]]) -> bool:
    return any(result["exceeds_limit"] for result in concentration.values())
