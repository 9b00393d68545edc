"""Loan application loading and validation.

Applications arrive as decoded JSON dicts. This module is the only place
that reads them from disk; everything downstream receives the dict.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = ["date", "amount", "type", "on_time"]


@dataclass
class ValidationResult:
    """Result of a validation check."""

    is_valid: bool
    errors: list[str]
    warnings: list[str]
    stats: dict[str, int | float]


def load_application(path: str | Path) -> dict[str, Any]:
    """
    Load a loan application from a JSON file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file does not hold a JSON object.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Application file not found: {path}")

    with open(path, "r") as f:
        application = json.load(f)

    if not isinstance(application, dict):
        raise ValueError(f"Application file {path} must contain a JSON object")

    logger.info(f"Loaded application {application.get('id')} from {path}")
    return application


def section(application: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a nested section of the application, ``{}`` when absent."""
    value = application.get(name)
    return value if isinstance(value, dict) else {}


def lookup(application: dict[str, Any], key: str, default: Any = None) -> Any:
    """Read ``key`` from the top level, falling back to ``financial_info``."""
    if application.get(key) is not None:
        return application[key]
    return section(application, "financial_info").get(key, default)


def validate_application(application: dict[str, Any]) -> ValidationResult:
    """
    Validate a loan application before scoring.

    Parameters
    ----------
    application : dict[str, Any]
        Decoded application.

    Returns
    -------
    ValidationResult
        Errors block scoring; warnings mean a model falls back to defaults.

    Examples
    --------
    >>> result = validate_application(app)
    >>> result.is_valid
    True
    """
    errors: list[str] = []
    warnings: list[str] = []
    stats: dict[str, int | float] = {}

    if not application.get("id"):
        errors.append("Missing application id")

    for name in ("personal_info", "financial_info", "loan_details"):
        if not isinstance(application.get(name), dict):
            errors.append(f"Missing section '{name}'")

    financial = section(application, "financial_info")
    for key in ("annual_income", "monthly_income"):
        value = financial.get(key)
        if value is None or value <= 0:
            errors.append(f"'{key}' must be positive")

    if (financial.get("monthly_debt") or 0) < 0:
        errors.append("'monthly_debt' must not be negative")

    loan_amount = section(application, "loan_details").get("loan_amount")
    if loan_amount is None or loan_amount <= 0:
        errors.append("'loan_amount' must be positive")

    if financial.get("credit_score") is None:
        warnings.append("No credit score; models will assume a default")

    collateral = section(application, "collateral")
    if collateral and (collateral.get("collateral_value") or 0) <= 0:
        warnings.append("Collateral has no positive value")

    if not section(section(application, "personal_info"), "address"):
        warnings.append("No address supplied")

    transactions = section(financial, "account_history").get("transactions") or []
    stats["transactions"] = len(transactions)
    stats["credit_cards"] = len(financial.get("credit_cards") or [])

    if errors:
        logger.warning(f"Application {application.get('id')} failed validation: {errors}")

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        stats=stats,
    )


def transactions_frame(account_history: dict[str, Any] | None) -> pd.DataFrame:
    """
    Build a transaction frame from an account history.

    Parameters
    ----------
    account_history : dict[str, Any] | None
        Mapping with a ``transactions`` list.

    Returns
    -------
    pd.DataFrame
        Columns ``date`` (datetime), ``amount`` (float), ``type``,
        ``on_time``. Empty when there is no history.
    """
    transactions = (account_history or {}).get("transactions") or []
    if not transactions:
        return pd.DataFrame(columns=TRANSACTION_COLUMNS).astype({"amount": float})

    df = pd.DataFrame(transactions)
    for col in TRANSACTION_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).astype(float)

    return df[TRANSACTION_COLUMNS].reset_index(drop=True)
