"""Borrower profile construction."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import numpy as np
import pandas as pd

from ..data.applications import section, transactions_frame
from ..models.exposure import card_utilization

logger = logging.getLogger(__name__)

EMPLOYMENT_TYPE_STABILITY = {"full_time": 0.9, "part_time": 0.6}
INCOME_SOURCE_STABILITY = {"employment": 0.9, "business": 0.7}


def _naive_utc(ts: pd.Timestamp) -> pd.Timestamp:
    return ts.tz_convert(None) if ts.tzinfo is not None else ts


def calculate_age(date_of_birth: str | None, as_of: datetime | str | None = None) -> int | None:
    """Whole years between birth and ``as_of`` (default today)."""
    if not date_of_birth:
        return None
    born = _naive_utc(pd.Timestamp(date_of_birth))
    today = _naive_utc(pd.Timestamp(as_of) if as_of is not None else pd.Timestamp.now())
    return int((today - born).days // 365.25)


def assess_income_stability(financial_info: dict[str, Any]) -> float:
    """
    Mean of employment type, tenure and income source stability.

    Tenure saturates at 60 months. Unknown employment types score 0.3
    and unknown income sources 0.5.
    """
    factors = [
        EMPLOYMENT_TYPE_STABILITY.get(financial_info.get("employment_type"), 0.3),
        min((financial_info.get("employment_history") or 0) / 60, 1.0),
        INCOME_SOURCE_STABILITY.get(financial_info.get("income_source"), 0.5),
    ]
    return float(np.mean(factors))


def calculate_credit_utilization(financial_info: dict[str, Any]) -> float:
    return card_utilization(financial_info, default=0.0)


def payment_trend(payments: pd.DataFrame) -> str:
    """Compare the on-time rate of the later half of payments with the earlier half."""
    if len(payments) < 4:
        return "stable"

    ordered = payments.sort_values("date")
    on_time = (~ordered["on_time"].eq(False)).astype(float).to_numpy()
    half = len(on_time) // 2
    delta = on_time[half:].mean() - on_time[:half].mean()

    if delta > 0.1:
        return "improving"
    if delta < -0.1:
        return "deteriorating"
    return "stable"


def analyze_payment_history(account_history: dict[str, Any] | None) -> dict[str, Any]:
    """
    On-time payment rate and trend. No history gives a neutral 0.5 score.

    Payments with no ``on_time`` flag count as on time, as in the trend
    and the credit score model.
    """
    transactions = transactions_frame(account_history)
    payments = transactions[transactions["type"] == "payment"]
    if len(payments) == 0:
        return {"score": 0.5, "trend": "stable", "on_time_rate": 0.0}

    on_time_rate = float((~payments["on_time"].eq(False)).sum() / len(payments))
    return {
        "score": on_time_rate,
        "trend": payment_trend(payments),
        "on_time_rate": on_time_rate,
    }


def analyze_communication_pattern(history: list[dict[str, Any]] | None) -> dict[str, Any]:
    """Contact count and most used channel."""
    if not history:
        return {"contacts": 0, "preferred_channel": None}

    channels = pd.Series([item.get("channel") for item in history]).dropna()
    preferred = channels.mode().iloc[0] if len(channels) else None
    return {"contacts": len(history), "preferred_channel": preferred}


def create_borrower_profile(application: dict[str, Any], as_of: datetime | str | None = None) -> dict[str, Any]:
    """
    Summarise the borrower's demographics, finances and behaviour.

    Returns
    -------
    dict[str, Any]
        Sections ``demographics``, ``financial`` and ``behavioral``.
    """
    personal = section(application, "personal_info")
    financial = section(application, "financial_info")
    relationship = section(application, "relationship_info")

    monthly_income = financial.get("monthly_income") or 0
    if monthly_income > 0:
        dti = (financial.get("monthly_debt") or 0) / monthly_income
    else:
        logger.warning(f"Application {application.get('id')} has no monthly income")
        dti = np.nan

    return {
        "demographics": {
            "age": calculate_age(personal.get("date_of_birth"), as_of),
            "employment_tenure": financial.get("employment_history"),
            "income_stability": assess_income_stability(financial),
            "geographic_location": personal.get("address"),
            "industry_type": financial.get("industry_type") or "unknown",
        },
        "financial": {
            "income": financial.get("annual_income"),
            "debt_to_income_ratio": dti,
            "credit_utilization": calculate_credit_utilization(financial),
            "liquid_assets": financial.get("liquid_assets") or 0,
            "net_worth": financial.get("net_worth") or 0,
            "payment_history": analyze_payment_history(financial.get("account_history")),
        },
        "behavioral": {
            "banking_relationship_length": relationship.get("length") or 0,
            "channel_preference": application.get("channel"),
            "product_usage": relationship.get("products") or [],
            "communication_pattern": analyze_communication_pattern(application.get("communication_history")),
        },
    }
