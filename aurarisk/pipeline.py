"""End-to-end application review.

Validates the application, runs the credit risk assessment, then hands
the serialised assessment to the compliance agent so the fair lending
and Basel checks can read the decision and capital figures.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

import numpy as np

from .compliance import ComplianceAgent, ComplianceCheck
from .credit import CreditRiskAgent, RiskAssessment
from .data.applications import ValidationResult, validate_application

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    """
    Convert a nested result to plain JSON types.

    NaN and infinite floats become ``None``; numpy scalars become Python
    scalars; tuples become lists.
    """
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and not np.isfinite(value):
        return None
    return value


@dataclass
class PipelineResult:
    """Outcome of one application review.

    Attributes
    ----------
    validation : ValidationResult
        Input sanity checks.
    assessment : RiskAssessment
        Credit risk assessment.
    compliance : ComplianceCheck
        Compliance verdict taken with the assessment in hand.
    """

    validation: ValidationResult
    assessment: RiskAssessment
    compliance: ComplianceCheck

    @property
    def decision(self) -> str | None:
        return self.assessment.decision

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-ready dict; undefined ratios are ``None``."""
        return to_jsonable({
            "validation": asdict(self.validation),
            "assessment": self.assessment.to_dict(),
            "compliance": self.compliance.to_dict(),
        })


def run_pipeline(
    application: dict[str, Any],
    credit_agent: CreditRiskAgent | None = None,
    compliance_agent: ComplianceAgent | None = None,
    as_of: datetime | str | None = None,
) -> PipelineResult:
    """
    Assess an application and screen it for compliance.

    Parameters
    ----------
    application : dict[str, Any]
        Loan application.
    credit_agent : CreditRiskAgent | None
        Agent to assess with. A default-configured one is created if omitted.
    compliance_agent : ComplianceAgent | None
        Agent to screen with. A default-configured one with empty
        watchlists is created if omitted.
    as_of : datetime | str | None
        Reference date for ages and transaction windows.

    Returns
    -------
    PipelineResult

    Raises
    ------
    RiskAssessmentError
        If the assessment fails.
    ComplianceError
        If the application cannot be screened.
    """
    credit_agent = credit_agent or CreditRiskAgent()
    compliance_agent = compliance_agent or ComplianceAgent()

    validation = validate_application(application)
    if not validation.is_valid:
        logger.warning(f"Application {application.get('id')} has {len(validation.errors)} validation errors")

    assessment = credit_agent.assess_credit_risk(application, as_of=as_of)
    compliance = compliance_agent.perform_compliance_check(
        application, risk_assessment=assessment.to_dict(), as_of=as_of
    )

    logger.info(
        f"Application {application.get('id')}: decision {assessment.decision}, "
        f"compliance {compliance.overall_status}"
    )
    return PipelineResult(validation=validation, assessment=assessment, compliance=compliance)
