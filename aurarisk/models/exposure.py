"""Exposure at default, in currency units."""
from __future__ import annotations

from typing import Any

import numpy as np

from ..data.applications import section
from .base import RiskModel

UTILIZATION_FACTORS = {
    "term_loan": 1.0,
    "revolving_credit": 0.7,
    "credit_card": 0.8,
    "mortgage": 1.0,
    "overdraft": 0.9,
}
DEFAULT_UTILIZATION = 0.8

PRODUCT_TYPE_SCORES = {
    "revolving_credit": 0.9,
    "credit_card": 0.8,
    "overdraft": 0.95,
    "term_loan": 0.2,
    "mortgage": 0.1,
}


def card_utilization(financial_info: dict[str, Any], default: float = 0.0) -> float:
    """Total card balance over total card limit."""
    cards = financial_info.get("credit_cards") or []
    if not cards:
        return default

    total_limit = sum(card.get("limit", 0) for card in cards)
    total_balance = sum(card.get("balance", 0) for card in cards)
    return total_balance / total_limit if total_limit > 0 else default


class ExposureAtDefaultModel(RiskModel):
    """Drawn amount expected at default.

    Formula:
        utilisation = clip(factor(loan_type) + 0.1 * sum(coef_i * x_i), 0.1, 1.0)
        EAD = utilisation * loan_amount
    """

    inputs = [
        ("loan_details", "loan_type"),
        ("loan_details", "loan_amount"),
        ("financial_info", "credit_score"),
        ("financial_info", "credit_cards"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.utilization_factors: dict[str, float] = {}

    def calibrate(self) -> None:
        self.coefficients = {
            "product_type": 0.3,
            "borrower_quality": -0.2,
            "facility_usage": 0.8,
            "time_to_default": 0.4,
            "economic_stress": 0.3,
            "line_management": -0.2,
        }
        self.utilization_factors = dict(UTILIZATION_FACTORS)
        self.performance = {"accuracy": 0.85, "rmse": 0.12}
        self.is_calibrated = True

    def extract_features(self, application: dict[str, Any]) -> dict[str, float]:
        financial = section(application, "financial_info")
        loan_type = section(application, "loan_details").get("loan_type")

        return {
            "product_type": PRODUCT_TYPE_SCORES.get(loan_type, 0.5),
            "borrower_quality": (financial.get("credit_score") or 650) / 850,
            "facility_usage": card_utilization(financial, default=0.3),
            "time_to_default": 0.5,
            "economic_stress": 0.3,
            "line_management": 0.7,
        }

    def get_utilization_factor(self, application: dict[str, Any]) -> float:
        self.ensure_calibrated()
        loan_type = section(application, "loan_details").get("loan_type") or "term_loan"
        return self.utilization_factors.get(loan_type, DEFAULT_UTILIZATION)

    def predict_utilization(self, application: dict[str, Any]) -> float:
        self.ensure_calibrated()
        adjustment = self.weighted_sum(self.extract_features(application)) * 0.1
        return float(np.clip(self.get_utilization_factor(application) + adjustment, 0.1, 1.0))

    def predict(self, application: dict[str, Any]) -> float:
        loan_amount = section(application, "loan_details").get("loan_amount") or 0
        return self.predict_utilization(application) * loan_amount
