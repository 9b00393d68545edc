"""Compliance agent.

Runs the KYC, AML, fair lending, regulatory and sanctions checks over a
loan application and folds them into one verdict with follow-up
recommendations. Every check and every inter-agent message is recorded
in the agent's audit trail.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..audit import AuditTrail, utc_now
from ..data.config import load_default_config, merge_config
from ..data.watchlists import empty_watchlists
from ..errors import ComplianceError
from .aml import perform_aml_check
from .fair_lending import perform_fair_lending_check
from .kyc import perform_kyc_check
from .regulatory import perform_regulatory_check
from .results import (
    BLOCKING_STATUSES,
    COMPLIANT,
    NON_COMPLIANT,
    REVIEW_REQUIRED,
    REVIEW_STATUSES,
    ComplianceCheck,
)
from .sanctions import perform_sanctions_check

logger = logging.getLogger(__name__)

COMPLIANCE_CHECK = "COMPLIANCE_CHECK"
AGENT_COMMUNICATION = "AGENT_COMMUNICATION"

CREDIT_RISK_AGENT_ID = "credit-risk-001"
REPORTING_AGENT_ID = "reporting-001"


class ComplianceAgent:
    """Regulatory compliance screening for loan applications.

    Parameters
    ----------
    config : dict[str, Any] | None
        Overrides merged over the bundled ``compliance.yaml``.
    watchlists : dict[str, list[dict[str, Any]]] | None
        Lists keyed by ``pep``, ``sanctions`` and ``adverse``. Missing
        keys screen against an empty list.

    Examples
    --------
    >>> agent = ComplianceAgent(watchlists=load_watchlists("data/lists"))
    >>> check = agent.perform_compliance_check(application)
    >>> check.overall_status
    'COMPLIANT'
    """

    agent_id = "compliance-001"
    name = "Compliance Agent"
    capabilities = [
        "regulatory_compliance",
        "kyc_verification",
        "aml_screening",
        "policy_enforcement",
        "audit_support",
    ]
    regulatory_frameworks = [
        "BASEL_III",
        "DODD_FRANK",
        "GDPR",
        "KYC",
        "AML",
        "FAIR_LENDING",
    ]

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        watchlists: dict[str, list[dict[str, Any]]] | None = None,
    ) -> None:
        self.config = merge_config(load_default_config("compliance"), config)
        self.watchlists = {**empty_watchlists(), **(watchlists or {})}
        self.audit_trail = AuditTrail(self.agent_id)

    def perform_compliance_check(
        self,
        application: dict[str, Any],
        risk_assessment: dict[str, Any] | None = None,
        as_of: datetime | str | None = None,
    ) -> ComplianceCheck:
        """
        Run every compliance check on an application.

        Parameters
        ----------
        application : dict[str, Any]
            Loan application.
        risk_assessment : dict[str, Any] | None
            Serialised credit risk assessment, used by the fair lending
            and Basel checks.
        as_of : datetime | str | None
            Reference date for transaction windows. Defaults to now.

        Returns
        -------
        ComplianceCheck
            Individual results, overall status, violations and recommendations.

        Raises
        ------
        ComplianceError
            If the application cannot be screened at all.
        """
        if not isinstance(application, dict):
            raise ComplianceError(
                f"Application must be a dict, got {type(application).__name__}", "INVALID_APPLICATION"
            )

        check = ComplianceCheck(
            application_id=application.get("id"),
            timestamp=utc_now().isoformat(),
            agent_id=self.agent_id,
        )

        check.checks["kyc"] = perform_kyc_check(application, self.config).to_dict()
        check.checks["aml"] = perform_aml_check(application, self.watchlists, self.config, as_of=as_of).to_dict()
        check.checks["fair_lending"] = perform_fair_lending_check(application, risk_assessment, self.config).to_dict()
        check.checks["regulatory"] = perform_regulatory_check(application, risk_assessment, self.config).to_dict()
        check.checks["sanctions"] = perform_sanctions_check(application, self.watchlists, self.config).to_dict()

        check.overall_status = self.evaluate_overall_compliance(check.checks)
        check.violations = self.identify_violations(check.checks)
        check.recommendations = self.generate_compliance_recommendations(check)

        self.audit_trail.record(COMPLIANCE_CHECK, {
            "application_id": check.application_id,
            "status": check.overall_status,
            "violations": len(check.violations),
        })

        return check

    @staticmethod
    def evaluate_overall_compliance(checks: dict[str, dict[str, Any]]) -> str:
        """NON_COMPLIANT beats REVIEW_REQUIRED beats COMPLIANT."""
        statuses = {check["status"] for check in checks.values()}

        if statuses & BLOCKING_STATUSES:
            return NON_COMPLIANT
        if statuses & REVIEW_STATUSES:
            return REVIEW_REQUIRED
        return COMPLIANT

    @staticmethod
    def identify_violations(checks: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
        violations: list[dict[str, Any]] = []

        for check_type, result in checks.items():
            for violation in result.get("violations") or []:
                violations.append({"type": check_type, **violation})
            if result["status"] in BLOCKING_STATUSES:
                violations.append({
                    "type": check_type,
                    "severity": "HIGH",
                    "description": f"{check_type} check failed",
                })

        return violations

    @staticmethod
    def generate_compliance_recommendations(check: ComplianceCheck) -> list[dict[str, Any]]:
        if check.overall_status == NON_COMPLIANT:
            return [{
                "priority": "HIGH",
                "action": "REJECT_APPLICATION",
                "reason": "Compliance violations detected",
            }]
        if check.overall_status == REVIEW_REQUIRED:
            return [{
                "priority": "MEDIUM",
                "action": "MANUAL_REVIEW",
                "reason": "Additional compliance review required",
            }]
        return []

    # Agent communication

    def communicate_with_agent(self, target_agent: str, message: str, data: dict[str, Any]) -> dict[str, Any]:
        communication = {
            "from": self.agent_id,
            "to": target_agent,
            "timestamp": utc_now().isoformat(),
            "message": message,
            "data": data,
            "type": AGENT_COMMUNICATION,
        }
        self.audit_trail.record(AGENT_COMMUNICATION, communication)
        return communication

    def request_risk_reassessment(self, application_id: str, reason: str) -> dict[str, Any]:
        return self.communicate_with_agent(CREDIT_RISK_AGENT_ID, "REQUEST_REASSESSMENT", {
            "application_id": application_id,
            "reason": reason,
        })

    def notify_reporting(self, check: ComplianceCheck) -> dict[str, Any]:
        return self.communicate_with_agent(REPORTING_AGENT_ID, "COMPLIANCE_COMPLETE", {
            "application_id": check.application_id,
            "status": check.overall_status,
            "violations": check.violations,
        })

    def get_audit_trail(
        self,
        action: str | None = None,
        date_from: str | datetime | None = None,
        date_to: str | datetime | None = None,
    ) -> list[dict[str, Any]]:
        return self.audit_trail.filter(action=action, date_from=date_from, date_to=date_to)

    def get_status(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "name": self.name,
            "capabilities": list(self.capabilities),
            "status": "ACTIVE",
            "last_activity": self.audit_trail.last_timestamp,
            "total_checks": self.audit_trail.count(COMPLIANCE_CHECK),
            "regulatory_frameworks": list(self.regulatory_frameworks),
        }
