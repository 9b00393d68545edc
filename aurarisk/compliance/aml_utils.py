"""Transaction pattern heuristics for AML screening.

All functions take the transaction frame produced by
``aurarisk.data.transactions_frame`` (columns ``date``, ``amount``,
``type``, ``on_time``).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import numpy as np
import pandas as pd

from ..data.applications import transactions_frame

logger = logging.getLogger(__name__)


def detect_structuring(
    transactions: pd.DataFrame,
    threshold: float = 10000,
    band: float = 0.9,
    min_count: int = 5,
) -> dict[str, Any]:
    """
    Detect deposits kept just under the reporting threshold.

    A transaction is suspicious when ``threshold * band < amount < threshold``.
    Structuring is detected when more than ``min_count`` such transactions exist.

    Returns
    -------
    dict[str, Any]
        ``{"detected": bool, "count": int}``
    """
    amounts = transactions["amount"]
    suspicious = (amounts > threshold * band) & (amounts < threshold)
    count = int(suspicious.sum())
    return {"detected": count > min_count, "count": count}


def calculate_recent_volume(
    transactions: pd.DataFrame,
    as_of: datetime | str | None = None,
    lookback_days: int = 30,
) -> float:
    """Sum of amounts dated strictly after ``as_of - lookback_days``."""
    if len(transactions) == 0:
        return 0.0

    as_of = pd.Timestamp(as_of) if as_of is not None else pd.Timestamp.now()
    cutoff = as_of - pd.Timedelta(days=lookback_days)

    dates = transactions["date"]
    if dates.dt.tz is not None and cutoff.tzinfo is None:
        cutoff = cutoff.tz_localize(dates.dt.tz)
    elif dates.dt.tz is None and cutoff.tzinfo is not None:
        cutoff = cutoff.tz_convert(None)

    recent = transactions.loc[dates > cutoff, "amount"]
    return float(recent.sum())


def calculate_average_monthly_volume(transactions: pd.DataFrame) -> float:
    """Total volume spread over a twelve month year."""
    return float(transactions["amount"].sum() / 12)


def detect_unusual_volume(
    transactions: pd.DataFrame,
    multiple: float = 3,
    as_of: datetime | str | None = None,
    lookback_days: int = 30,
) -> dict[str, Any]:
    """
    Flag a recent window whose volume exceeds ``multiple`` monthly averages.

    Returns
    -------
    dict[str, Any]
        ``{"detected": bool, "ratio": float}``. Ratio is NaN when the
        average monthly volume is zero.
    """
    average = calculate_average_monthly_volume(transactions)
    recent = calculate_recent_volume(transactions, as_of=as_of, lookback_days=lookback_days)

    if average == 0:
        ratio = np.nan
    else:
        ratio = recent / average

    return {"detected": bool(recent > average * multiple), "ratio": ratio}


def analyze_transaction_patterns(
    account_history: dict[str, Any] | None,
    aml_config: dict[str, Any] | None = None,
    as_of: datetime | str | None = None,
) -> dict[str, Any]:
    """
    Combine structuring and volume heuristics into one risk score.

    Parameters
    ----------
    account_history : dict[str, Any] | None
        Mapping with a ``transactions`` list.
    aml_config : dict[str, Any] | None
        The ``aml`` section of the compliance configuration.
    as_of : datetime | str | None
        Reference date for the recent-volume window. Defaults to now.

    Returns
    -------
    dict[str, Any]
        ``{"suspicious": bool, "flags": list[str], "risk_score": float}``

    Notes
    -----
    STRUCTURING adds ``structuring_weight`` (0.3) and UNUSUAL_VOLUME adds
    ``unusual_volume_weight`` (0.2). The pattern is suspicious once the
    score reaches ``suspicious_risk_score`` (0.5), i.e. both fire.
    """
    cfg = aml_config or {}
    transactions = transactions_frame(account_history)

    patterns: dict[str, Any] = {"suspicious": False, "flags": [], "risk_score": 0.0}
    if len(transactions) == 0:
        return patterns

    structuring = detect_structuring(
        transactions,
        threshold=cfg.get("structuring_threshold", 10000),
        band=cfg.get("structuring_band", 0.9),
        min_count=cfg.get("structuring_min_count", 5),
    )
    if structuring["detected"]:
        patterns["flags"].append("STRUCTURING")
        patterns["risk_score"] += cfg.get("structuring_weight", 0.3)

    volume = detect_unusual_volume(
        transactions,
        multiple=cfg.get("unusual_volume_multiple", 3),
        as_of=as_of,
        lookback_days=cfg.get("lookback_days", 30),
    )
    if volume["detected"]:
        patterns["flags"].append("UNUSUAL_VOLUME")
        patterns["risk_score"] += cfg.get("unusual_volume_weight", 0.2)

    patterns["risk_score"] = round(patterns["risk_score"], 10)
    patterns["suspicious"] = patterns["risk_score"] >= cfg.get("suspicious_risk_score", 0.5)
    patterns["structuring_count"] = structuring["count"]
    patterns["volume_ratio"] = volume["ratio"]

    if patterns["flags"]:
        logger.info(f"Transaction patterns flagged: {patterns['flags']}")

    return patterns


def assess_geographic_risk(
    address: dict[str, Any] | None,
    high_risk_countries: list[str] | None = None,
    high_risk_score: float = 0.8,
    low_risk_score: float = 0.1,
) -> dict[str, Any]:
    """Score the applicant's country of residence."""
    country = (address or {}).get("country")
    risky = set(high_risk_countries or [])
    risk_score = high_risk_score if country in risky else low_risk_score

    return {
        "risk_score": risk_score,
        "country": country,
        "risk_level": "HIGH" if risk_score > 0.5 else "LOW",
    }
