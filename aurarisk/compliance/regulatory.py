"""Regulatory framework checks (Basel III, Dodd-Frank, lending rules)."""
from __future__ import annotations

import logging
from typing import Any

import numpy as np

from ..data.applications import lookup, section
from ..data.config import get_nested
from .results import COMPLIANT, VIOLATION, WARNING, RegulatoryResult

logger = logging.getLogger(__name__)

# Basel capital ratio: risk weight = capital / (8% of exposure)
BASEL_CAPITAL_RATIO = 0.08


def check_basel_compliance(
    application: dict[str, Any],
    risk_assessment: dict[str, Any] | None,
    max_risk_weight: float = 1.5,
) -> dict[str, Any]:
    """
    Derive the loan's risk weight from the assessed capital requirement.

    Formula:
        risk_weight = capital / (0.08 * loan_amount)

    A risk weight above ``max_risk_weight`` is a WARNING. Without an
    assessment the standardised weight of 1.0 applies.
    """
    capital = float((risk_assessment or {}).get("capital_requirement") or 0.0)
    loan_amount = section(application, "loan_details").get("loan_amount") or 0

    if risk_assessment and loan_amount > 0:
        risk_weight = capital / (BASEL_CAPITAL_RATIO * loan_amount)
    else:
        risk_weight = 1.0

    issues: list[str] = []
    status = COMPLIANT
    if risk_weight > max_risk_weight:
        status = WARNING
        issues.append(f"Risk weight {risk_weight:.2f} exceeds {max_risk_weight:.2f}")

    return {
        "status": status,
        "capital_requirement": capital,
        "risk_weight": risk_weight,
        "issues": issues,
    }


def check_qm_compliance(application: dict[str, Any], dti_limit: float = 0.43) -> dict[str, Any]:
    """Qualified Mortgage test: debt-to-income at or under ``dti_limit``."""
    monthly_debt = lookup(application, "monthly_debt", 0) or 0
    monthly_income = lookup(application, "monthly_income", 0) or 0

    if monthly_income > 0:
        dti = monthly_debt / monthly_income
    else:
        logger.warning(f"Application {application.get('id')} has no monthly income; DTI undefined")
        dti = np.nan

    return {
        "compliant": bool(dti <= dti_limit),
        "dti_ratio": dti,
        "verification": bool(application.get("income_verified")),
    }


def loan_type(application: dict[str, Any]) -> str | None:
    return application.get("loan_type") or section(application, "loan_details").get("loan_type")


def check_dodd_frank_compliance(application: dict[str, Any], dti_limit: float = 0.43) -> dict[str, Any]:
    """Mortgages must meet the Qualified Mortgage test."""
    result: dict[str, Any] = {
        "status": COMPLIANT,
        "qualified_mortgage": None,
        "issues": [],
        "violations": [],
    }

    if loan_type(application) == "mortgage":
        qm = check_qm_compliance(application, dti_limit)
        result["qualified_mortgage"] = qm
        if not qm["compliant"]:
            result["status"] = VIOLATION
            result["issues"].append("Mortgage fails Qualified Mortgage DTI test")
            result["violations"].append({
                "framework": "DODD_FRANK",
                "severity": "HIGH",
                "description": f"DTI {qm['dti_ratio']:.2f} exceeds QM limit {dti_limit:.2f}",
            })

    return result


def check_lending_regulations(application: dict[str, Any]) -> dict[str, Any]:
    """Ability-to-repay documentation under state and federal rules."""
    issues: list[str] = []
    if not application.get("income_verified"):
        issues.append("Income not verified for ability-to-repay")

    return {
        "status": WARNING if issues else COMPLIANT,
        "state_compliance": True,
        "federal_compliance": not issues,
        "issues": issues,
    }


def extract_violations(frameworks: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    violations: list[dict[str, Any]] = []
    for result in frameworks.values():
        violations.extend(result.get("violations") or [])
    return violations


def perform_regulatory_check(
    application: dict[str, Any],
    risk_assessment: dict[str, Any] | None = None,
    config: dict[str, Any] | None = None,
) -> RegulatoryResult:
    """
    Run every framework check and fold them into one status.

    Returns
    -------
    RegulatoryResult
        VIOLATION if any framework is in violation, WARNING if any warns,
        otherwise COMPLIANT.
    """
    config = config or {}
    dti_limit = get_nested(config, "regulatory", "qm_dti_limit", default=0.43)
    max_risk_weight = get_nested(config, "regulatory", "max_risk_weight", default=1.5)

    regulatory = RegulatoryResult()
    regulatory.frameworks["BASEL_III"] = check_basel_compliance(application, risk_assessment, max_risk_weight)
    regulatory.frameworks["DODD_FRANK"] = check_dodd_frank_compliance(application, dti_limit)
    regulatory.frameworks["LENDING_REGS"] = check_lending_regulations(application)

    for name, result in regulatory.frameworks.items():
        regulatory.requirements.extend(f"{name}: {issue}" for issue in result["issues"])

    statuses = [result["status"] for result in regulatory.frameworks.values()]
    if VIOLATION in statuses:
        regulatory.status = VIOLATION
        regulatory.violations = extract_violations(regulatory.frameworks)
    elif WARNING in statuses:
        regulatory.status = WARNING
    else:
        regulatory.status = COMPLIANT

    return regulatory
