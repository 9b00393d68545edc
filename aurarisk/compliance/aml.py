"""Anti-money-laundering screening."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..data.config import get_nested
from ..errors import ComplianceError
from .aml_utils import analyze_transaction_patterns, assess_geographic_risk
from .results import FAIL, PASS, REVIEW_REQUIRED, AMLResult
from .screening import screen_against_watchlist

logger = logging.getLogger(__name__)

RISK_LEVEL_ORDER = ["LOW", "MEDIUM", "HIGH"]


def _raise_level(current: str, level: str) -> str:
    """Return the higher of two risk levels."""
    return max(current, level, key=RISK_LEVEL_ORDER.index)


def perform_aml_check(
    application: dict[str, Any],
    watchlists: dict[str, list[dict[str, Any]]],
    config: dict[str, Any] | None = None,
    as_of: datetime | str | None = None,
) -> AMLResult:
    """
    Screen an application for money-laundering risk.

    Parameters
    ----------
    application : dict[str, Any]
        Loan application.
    watchlists : dict[str, list[dict[str, Any]]]
        Lists keyed by ``sanctions``, ``pep`` and ``adverse``.
    config : dict[str, Any] | None
        Compliance configuration.
    as_of : datetime | str | None
        Reference date for transaction volume windows.

    Returns
    -------
    AMLResult
        FAIL on a sanctions hit, REVIEW_REQUIRED when any other flag
        needs a reviewer, otherwise PASS.

    Notes
    -----
    Flags and the risk level they imply:

    - SANCTIONS_MATCH: HIGH
    - PEP_MATCH: MEDIUM
    - ADVERSE_MEDIA: MEDIUM
    - SUSPICIOUS_PATTERN: MEDIUM
    - HIGH_RISK_GEOGRAPHY: MEDIUM

    The risk level only ever rises; a PEP hit does not lower a
    sanctions-driven HIGH.
    """
    config = config or {}
    personal_info = application.get("personal_info")
    if not isinstance(personal_info, dict):
        raise ComplianceError(
            f"AML check cannot run on application {application.get('id')}: no personal_info",
            "AML_FAILURE",
        )

    threshold = get_nested(config, "screening", "fuzzy_threshold", default=0.8)
    aml = AMLResult()

    sanctions = screen_against_watchlist(personal_info, watchlists.get("sanctions", []), threshold)
    pep = screen_against_watchlist(personal_info, watchlists.get("pep", []), threshold)
    adverse = screen_against_watchlist(personal_info, watchlists.get("adverse", []), threshold)
    aml.screening_results["sanctions"] = sanctions.to_dict()
    aml.screening_results["pep"] = pep.to_dict()
    aml.screening_results["adverse"] = adverse.to_dict()

    account_history = application.get("account_history") or get_nested(
        application, "financial_info", "account_history"
    )
    patterns = None
    if account_history:
        patterns = analyze_transaction_patterns(account_history, config.get("aml"), as_of=as_of)
        aml.screening_results["transaction_pattern"] = patterns

    geography = assess_geographic_risk(
        personal_info.get("address"),
        high_risk_countries=get_nested(config, "geography", "high_risk_countries", default=[]),
        high_risk_score=get_nested(config, "geography", "high_risk_score", default=0.8),
        low_risk_score=get_nested(config, "geography", "low_risk_score", default=0.1),
    )
    aml.screening_results["geographic"] = geography

    if sanctions.matches:
        aml.risk_level = _raise_level(aml.risk_level, "HIGH")
        aml.flags.append("SANCTIONS_MATCH")
        aml.requires_manual_review = True

    if pep.matches:
        aml.risk_level = _raise_level(aml.risk_level, "MEDIUM")
        aml.flags.append("PEP_MATCH")
        aml.requires_manual_review = True

    if adverse.matches:
        aml.risk_level = _raise_level(aml.risk_level, "MEDIUM")
        aml.flags.append("ADVERSE_MEDIA")
        aml.requires_manual_review = True

    if patterns and patterns["suspicious"]:
        aml.risk_level = _raise_level(aml.risk_level, "MEDIUM")
        aml.flags.append("SUSPICIOUS_PATTERN")
        aml.requires_manual_review = True

    if geography["risk_level"] == "HIGH":
        aml.risk_level = _raise_level(aml.risk_level, "MEDIUM")
        aml.flags.append("HIGH_RISK_GEOGRAPHY")
        aml.requires_manual_review = True

    if "SANCTIONS_MATCH" in aml.flags:
        aml.status = FAIL
    elif aml.requires_manual_review:
        aml.status = REVIEW_REQUIRED
    else:
        aml.status = PASS

    if aml.flags:
        logger.info(f"AML flags for application {application.get('id')}: {aml.flags}")

    return aml
