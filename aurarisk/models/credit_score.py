"""Linear credit quality score in [0, 1] (higher is better)."""
from __future__ import annotations

from typing import Any

import numpy as np

from ..data.applications import section, transactions_frame
from .base import RiskModel

DEFAULT_CREDIT_SCORE = 600
MAX_CREDIT_SCORE = 850


def payment_behavior_score(account_history: dict[str, Any] | None) -> float:
    """
    Share of payments not marked late.

    Payments with no ``on_time`` flag count as on time. Without payment
    history the score is a neutral 0.5.
    """
    transactions = transactions_frame(account_history)
    payments = transactions[transactions["type"] == "payment"]
    if len(payments) == 0:
        return 0.5

    on_time = (~payments["on_time"].eq(False)).sum()
    return float(on_time / len(payments))


class CreditScoreModel(RiskModel):
    """Weighted linear score over income, tenure, DTI, bureau score and payments."""

    inputs = [
        ("financial_info", "annual_income"),
        ("financial_info", "employment_history"),
        ("financial_info", "monthly_debt"),
        ("financial_info", "credit_score"),
        ("financial_info", "account_history"),
    ]

    def calibrate(self) -> None:
        self.coefficients = {
            "income": 0.3,
            "employment_history": 0.25,
            "debt_to_income": -0.4,
            "credit_history": 0.35,
            "payment_behavior": 0.4,
        }
        self.performance = {"accuracy": 0.85, "precision": 0.82, "recall": 0.78}
        self.is_calibrated = True

    def extract_features(self, application: dict[str, Any]) -> dict[str, float]:
        financial = section(application, "financial_info")
        annual_income = financial.get("annual_income") or 1

        return {
            "income": (financial.get("annual_income") or 0) / 100000,
            "employment_history": (financial.get("employment_history") or 0) / 60,
            "debt_to_income": (financial.get("monthly_debt") or 0) * 12 / annual_income,
            "credit_history": (financial.get("credit_score") or DEFAULT_CREDIT_SCORE) / MAX_CREDIT_SCORE,
            "payment_behavior": payment_behavior_score(financial.get("account_history")),
        }

    def predict(self, application: dict[str, Any]) -> float:
        self.ensure_calibrated()
        score = self.weighted_sum(self.extract_features(application))
        return float(np.clip(score, 0.0, 1.0))

    def get_feature_importance(self) -> dict[str, float]:
        return {
            "credit_score": 0.35,
            "income": 0.25,
            "employment_history": 0.20,
            "debt_to_income": 0.15,
            "payment_behavior": 0.05,
        }
