"""Detailed risk factor analysis.

Breaks an application down into credit, financial, operational, market,
concentration and regulatory factor groups. These are explanatory: the
recommendation reads a few of them, the rest are reported as-is.
"""
from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd

from ..data.applications import section, transactions_frame
from ..models.default import credit_grade, geographic_risk, industry_risk, loan_to_value
from ..models.exposure import card_utilization
from ..models.loss import collateral_liquidity
from .portfolio import bucket_keys
from .profile import payment_trend

logger = logging.getLogger(__name__)

GRADE_RISK = {
    "excellent": "LOW",
    "good": "LOW",
    "fair": "MEDIUM",
    "poor": "HIGH",
    "very_poor": "CRITICAL",
}

COLLATERAL_VOLATILITY = {
    "real_estate": 0.15,
    "vehicle": 0.25,
    "securities": 0.30,
    "equipment": 0.20,
    "inventory": 0.35,
}

DEFAULT_EVENT_TYPES = {"default", "charge_off"}
DEFAULT_INTEREST_RATE = 0.08
CONFORMING_LOAN_LIMIT = 726200
QM_DTI_LIMIT = 0.43


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else np.nan


# Credit


def payments_frame(account_history: dict[str, Any] | None) -> pd.DataFrame:
    transactions = transactions_frame(account_history)
    return transactions[transactions["type"] == "payment"]


def identify_credit_factors(credit_score: float | None, payments: pd.DataFrame) -> list[str]:
    factors: list[str] = []
    if credit_score is None:
        factors.append("NO_CREDIT_SCORE")
    elif credit_score < 650:
        factors.append("LOW_CREDIT_SCORE")
    if payments["on_time"].eq(False).any():
        factors.append("LATE_PAYMENTS")
    if len(payments) < 6:
        factors.append("THIN_FILE")
    return factors


def analyze_credit_risk_factors(application: dict[str, Any]) -> dict[str, Any]:
    financial = section(application, "financial_info")
    credit_score = financial.get("credit_score")
    history = financial.get("account_history")
    payments = payments_frame(history)
    transactions = transactions_frame(history)

    late = int(payments["on_time"].eq(False).sum())
    defaults = int(transactions["type"].isin(DEFAULT_EVENT_TYPES).sum())
    cards = financial.get("credit_cards") or []
    utilization = card_utilization(financial)

    return {
        "credit_score": {
            "value": credit_score,
            "risk": GRADE_RISK[credit_grade(credit_score)],
            "trend": payment_trend(payments),
            "factors": identify_credit_factors(credit_score, payments),
        },
        "payment_behavior": {
            "on_time_payments": _safe_ratio(len(payments) - late, len(payments)),
            "delinquency_history": {"late_payments": late, "delinquency_rate": _safe_ratio(late, len(payments))},
            "default_history": {"defaults": defaults, "has_defaulted": defaults > 0},
        },
        "credit_utilization": {
            "current_utilization": utilization,
            "utilization_trend": "elevated" if utilization > 0.3 else "normal",
            "available_credit": float(sum(card.get("limit", 0) - card.get("balance", 0) for card in cards)),
        },
    }


# Financial


def income_growth(income_history: list[float] | None) -> float:
    """Growth from the first to the last recorded income."""
    if not income_history or len(income_history) < 2 or income_history[0] == 0:
        return np.nan
    return (income_history[-1] - income_history[0]) / income_history[0]


def income_volatility(income_history: list[float] | None) -> float:
    """Coefficient of variation of recorded income."""
    if not income_history or len(income_history) < 2:
        return np.nan
    values = np.asarray(income_history, dtype=float)
    mean = values.mean()
    return float(values.std(ddof=1) / mean) if mean else np.nan


def debt_composition(existing_debts: list[dict[str, Any]] | None) -> dict[str, float]:
    """Share of outstanding balance by debt type."""
    if not existing_debts:
        return {}
    df = pd.DataFrame(existing_debts)
    if "balance" not in df.columns or df["balance"].sum() <= 0:
        return {}
    if "type" not in df.columns:
        df["type"] = "other"
    shares = df.groupby(df["type"].fillna("other"))["balance"].sum() / df["balance"].sum()
    return {str(key): float(value) for key, value in shares.items()}


def analyze_financial_risk_factors(application: dict[str, Any]) -> dict[str, Any]:
    financial = section(application, "financial_info")
    loan = section(application, "loan_details")
    income = financial.get("annual_income") or 0
    monthly_debt = financial.get("monthly_debt") or 0
    monthly_income = financial.get("monthly_income") or 0
    liquid_assets = financial.get("liquid_assets") or 0
    debt = monthly_debt * 12
    rate = loan.get("interest_rate") or DEFAULT_INTEREST_RATE

    return {
        "income_stability": {
            "income_source": financial.get("income_source") or "employment",
            "employment_type": financial.get("employment_type") or "full_time",
            "industry_risk": industry_risk(financial.get("industry_type")),
            "income_growth_trend": income_growth(financial.get("income_history")),
            "income_volatility": income_volatility(financial.get("income_history")),
        },
        "debt_burden": {
            "debt_to_income_ratio": _safe_ratio(debt, income),
            "total_monthly_obligations": monthly_debt,
            "debt_composition": debt_composition(financial.get("existing_debts")),
            "debt_service_coverage": _safe_ratio(income, debt + (loan.get("loan_amount") or 0) * rate),
        },
        "liquidity": {
            "liquid_assets": liquid_assets,
            "liquidity_ratio": _safe_ratio(liquid_assets, monthly_debt * 6),
            "emergency_fund_coverage": _safe_ratio(liquid_assets, monthly_income * 6),
        },
    }


# Operational


def income_consistent(application: dict[str, Any], tolerance: float = 0.2) -> bool:
    """Stated monthly income agrees with annual income within ``tolerance``."""
    financial = section(application, "financial_info")
    annual = financial.get("annual_income") or 0
    monthly = financial.get("monthly_income") or 0
    if annual <= 0 or monthly <= 0:
        return False
    return abs(monthly * 12 - annual) / annual <= tolerance


def documentation_completeness(application: dict[str, Any]) -> float:
    personal = section(application, "personal_info")
    items = [
        personal.get("ssn"),
        personal.get("date_of_birth"),
        personal.get("address"),
        application.get("income_documents"),
        application.get("employment_verified"),
    ]
    return sum(1 for item in items if item) / len(items)


def documentation_verification(application: dict[str, Any]) -> float:
    flags = [
        section(application, "personal_info").get("address_verified"),
        application.get("income_verified"),
        application.get("employment_verified"),
    ]
    return sum(1 for flag in flags if flag) / len(flags)


def calculate_fraud_score(application: dict[str, Any]) -> float:
    """Rule-based fraud indicator in [0, 1]."""
    personal = section(application, "personal_info")
    score = 0.0
    if not personal.get("ssn"):
        score += 0.3
    if not personal.get("address_verified"):
        score += 0.2
    if not income_consistent(application):
        score += 0.2
    if application.get("channel") == "online" and not section(application, "relationship_info").get("length"):
        score += 0.3
    return float(min(score, 1.0))


def processing_complexity(application: dict[str, Any]) -> str:
    points = 0
    if section(application, "collateral"):
        points += 1
    if (section(application, "loan_details").get("loan_amount") or 0) > 500000:
        points += 1
    if section(application, "financial_info").get("income_source") == "business":
        points += 1
    return ["LOW", "MEDIUM", "HIGH", "HIGH"][points]


def analyze_operational_risk_factors(application: dict[str, Any]) -> dict[str, Any]:
    personal = section(application, "personal_info")
    fraud_score = calculate_fraud_score(application)
    consistent = income_consistent(application)

    return {
        "documentation": {
            "completeness": documentation_completeness(application),
            "verification": documentation_verification(application),
        },
        "fraud": {
            "fraud_score": fraud_score,
            "identity_verification": bool(
                personal.get("ssn") and personal.get("date_of_birth") and personal.get("address_verified")
            ),
            "application_consistency": consistent,
        },
        "process": {
            "application_channel": application.get("channel"),
            "processing_complexity": processing_complexity(application),
            "manual_intervention_required": fraud_score >= 0.5 or not consistent,
        },
    }


# Market


def analyze_market_risk_factors(application: dict[str, Any]) -> dict[str, Any]:
    loan = section(application, "loan_details")
    financial = section(application, "financial_info")
    collateral = section(application, "collateral")
    variable = loan.get("rate_type") == "variable"
    monthly_income = financial.get("monthly_income") or 0

    # Extra monthly payment per 100bp rate rise, relative to income
    if variable:
        sensitivity = _safe_ratio((loan.get("loan_amount") or 0) * 0.01 / 12, monthly_income)
    else:
        sensitivity = 0.0

    return {
        "interest_rate": {
            "rate_type": loan.get("rate_type") or "fixed",
            "sensitivity_per_100bp": sensitivity,
            "repricing": "HIGH" if variable else "LOW",
        },
        "economic": {
            "regional_economics": 1 - geographic_risk(section(application, "personal_info").get("address")),
            "industry_outlook": 1 - industry_risk(financial.get("industry_type")),
        },
        "collateral": {
            "market_value": collateral.get("collateral_value") or 0,
            "volatility": COLLATERAL_VOLATILITY.get(collateral.get("collateral_type"), 0.0) if collateral else 0.0,
            "liquidity": collateral_liquidity(collateral),
        },
    }


# Regulatory


def analyze_regulatory_risk_factors(application: dict[str, Any]) -> dict[str, Any]:
    financial = section(application, "financial_info")
    loan = section(application, "loan_details")
    collateral = section(application, "collateral")
    monthly_income = financial.get("monthly_income") or 0
    dti = _safe_ratio(financial.get("monthly_debt") or 0, monthly_income)
    mortgage = (loan.get("loan_type") or application.get("loan_type")) == "mortgage"

    flags: list[str] = []
    if mortgage and not dti <= QM_DTI_LIMIT:
        flags.append("QM_DTI_EXCEEDED")
    if mortgage and (loan.get("loan_amount") or 0) > CONFORMING_LOAN_LIMIT:
        flags.append("JUMBO_LOAN")
    if collateral.get("collateral_type") == "real_estate" and loan_to_value(application, default=0.0) > 0.8:
        flags.append("PMI_REQUIRED")
    if not application.get("income_verified"):
        flags.append("INCOME_UNVERIFIED")

    return {"mortgage": mortgage, "debt_to_income_ratio": dti, "flags": flags}


def analyze_detailed_risk_factors(application: dict[str, Any]) -> dict[str, Any]:
    """
    Every factor group for one application.

    Returns
    -------
    dict[str, Any]
        Keys ``credit``, ``financial``, ``operational``, ``market``,
        ``concentration`` and ``regulatory``.
    """
    return {
        "credit": analyze_credit_risk_factors(application),
        "financial": analyze_financial_risk_factors(application),
        "operational": analyze_operational_risk_factors(application),
        "market": analyze_market_risk_factors(application),
        "concentration": bucket_keys(application),
        "regulatory": analyze_regulatory_risk_factors(application),
    }
