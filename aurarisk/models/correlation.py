"""Asset and industry correlations used for capital and concentration."""
from __future__ import annotations

from typing import Any

from ..data.applications import section
from .base import RiskModel

DEFAULT_ASSET_CORRELATION = 0.12
DEFAULT_INDUSTRY_CORRELATION = 0.2


class CorrelationModel(RiskModel):
    """Basel-style asset correlation by asset class."""

    def __init__(self) -> None:
        super().__init__()
        self.asset_correlations: dict[str, float] = {}
        self.correlation_matrix: dict[frozenset[str], float] = {}

    def calibrate(self) -> None:
        self.asset_correlations = {
            "real_estate": 0.15,
            "corporate": 0.12,
            "retail": 0.03,
            "sme": 0.04,
            "sovereign": 0.04,
        }
        self.correlation_matrix = {
            frozenset(("technology", "finance")): 0.3,
            frozenset(("retail", "hospitality")): 0.6,
            frozenset(("energy", "manufacturing")): 0.4,
            frozenset(("healthcare", "government")): 0.1,
        }
        self.performance = {"accuracy": 0.78}
        self.is_calibrated = True

    def predict(self, application: dict[str, Any]) -> float:
        return self.calculate_asset_correlation(application)

    @staticmethod
    def determine_asset_class(application: dict[str, Any]) -> str:
        if section(application, "collateral").get("collateral_type") == "real_estate":
            return "real_estate"
        if (section(application, "financial_info").get("annual_income") or 0) > 100000:
            return "corporate"
        if (section(application, "loan_details").get("loan_amount") or 0) < 50000:
            return "retail"
        return "sme"

    def calculate_asset_correlation(self, application: dict[str, Any]) -> float:
        self.ensure_calibrated()
        return self.asset_correlations.get(self.determine_asset_class(application), DEFAULT_ASSET_CORRELATION)

    def industry_correlation(self, first: str | None, second: str | None) -> float:
        """Symmetric lookup; an industry is perfectly correlated with itself."""
        self.ensure_calibrated()
        if first is not None and first == second:
            return 1.0
        return self.correlation_matrix.get(frozenset((first, second)), DEFAULT_INDUSTRY_CORRELATION)
