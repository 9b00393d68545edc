"""Booked loan portfolio.

The portfolio is the agent's only mutable state. It records each booked
loan with the scores it was approved on, and exposes pandas views for
concentration analysis and portfolio stress testing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from ..data.applications import section

logger = logging.getLogger(__name__)

PORTFOLIO_COLUMNS = [
    "loan_id",
    "borrower_id",
    "exposure",
    "industry",
    "state",
    "product",
    "probability_of_default",
    "loss_given_default",
    "exposure_at_default",
    "expected_loss",
    "capital_requirement",
]

# Inverse of the 8% Basel capital ratio
RWA_MULTIPLIER = 12.5


def borrower_id(application: dict[str, Any]) -> str:
    """Stable borrower key: explicit id, else SSN, else lower-cased name."""
    if application.get("borrower_id"):
        return str(application["borrower_id"])
    personal_info = section(application, "personal_info")
    if personal_info.get("ssn"):
        return str(personal_info["ssn"])
    first = personal_info.get("first_name") or ""
    last = personal_info.get("last_name") or ""
    return f"{first} {last}".strip().lower()


def bucket_keys(application: dict[str, Any]) -> dict[str, str]:
    """Concentration buckets an application falls into."""
    address = section(application, "personal_info").get("address") or {}
    return {
        "borrower_id": borrower_id(application),
        "industry": section(application, "financial_info").get("industry_type") or "unknown",
        "state": address.get("state") or address.get("country") or "unknown",
        "product": section(application, "loan_details").get("loan_type") or "term_loan",
    }


@dataclass
class LoanRecord:
    """A booked loan and the scores it was approved on."""

    loan_id: str
    exposure: float
    risk_scores: dict[str, float]
    application: dict[str, Any]
    capital_requirement: float = 0.0

    def row(self) -> dict[str, Any]:
        return {
            "loan_id": self.loan_id,
            **bucket_keys(self.application),
            "exposure": self.exposure,
            "probability_of_default": self.risk_scores.get("probability_of_default", 0.0),
            "loss_given_default": self.risk_scores.get("loss_given_default", 0.0),
            "exposure_at_default": self.risk_scores.get("exposure_at_default", 0.0),
            "expected_loss": self.risk_scores.get("expected_loss", 0.0),
            "capital_requirement": self.capital_requirement,
        }


@dataclass
class Portfolio:
    """Loans keyed by id.

    Examples
    --------
    >>> portfolio = Portfolio()
    >>> portfolio.add_loan("L1", 250000, scores, application)
    >>> portfolio.exposure_by("industry")
    industry
    technology    250000.0
    Name: exposure, dtype: float64
    """

    loans: dict[str, LoanRecord] = field(default_factory=dict)

    def add_loan(
        self,
        loan_id: str,
        exposure: float,
        risk_scores: dict[str, float],
        application: dict[str, Any],
        capital_requirement: float = 0.0,
    ) -> LoanRecord:
        if exposure < 0:
            raise ValueError(f"exposure must be non-negative, got {exposure}")
        if loan_id in self.loans:
            logger.warning(f"Replacing existing loan {loan_id}")

        record = LoanRecord(
            loan_id=loan_id,
            exposure=float(exposure),
            risk_scores=dict(risk_scores),
            application=application,
            capital_requirement=float(capital_requirement),
        )
        self.loans[loan_id] = record
        return record

    def remove_loan(self, loan_id: str) -> LoanRecord:
        if loan_id not in self.loans:
            raise KeyError(f"Unknown loan: {loan_id}")
        return self.loans.pop(loan_id)

    @property
    def total_exposure(self) -> float:
        return float(sum(loan.exposure for loan in self.loans.values()))

    @property
    def risk_weighted_assets(self) -> float:
        return float(sum(loan.capital_requirement for loan in self.loans.values()) * RWA_MULTIPLIER)

    def to_frame(self) -> pd.DataFrame:
        """One row per loan with bucket keys and risk parameters."""
        if not self.loans:
            return pd.DataFrame(columns=PORTFOLIO_COLUMNS)
        return pd.DataFrame([loan.row() for loan in self.loans.values()])[PORTFOLIO_COLUMNS]

    def exposure_by(self, column: str) -> pd.Series:
        """Total exposure per bucket of ``column``."""
        df = self.to_frame()
        if column not in df.columns:
            raise ValueError(f"Unknown portfolio column '{column}'")
        return df.groupby(column)["exposure"].sum().astype(float)

    def __len__(self) -> int:
        return len(self.loans)
