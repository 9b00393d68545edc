"""Know-your-customer scoring."""
from __future__ import annotations

import logging
from typing import Any

from ..data.config import get_nested
from ..errors import ComplianceError
from .results import CONDITIONAL, FAIL, PASS, KYCResult

logger = logging.getLogger(__name__)


def perform_kyc_check(application: dict[str, Any], config: dict[str, Any] | None = None) -> KYCResult:
    """
    Score identity, address, income and employment verification.

    Each verified requirement adds ``points_per_requirement`` (25) to the
    score. The score is then compared against the pass (75) and
    conditional (50) thresholds.

    Parameters
    ----------
    application : dict[str, Any]
        Loan application.
    config : dict[str, Any] | None
        Compliance configuration.

    Returns
    -------
    KYCResult
        Status PASS, CONDITIONAL or FAIL with the verified requirements
        and outstanding issues.

    Raises
    ------
    ComplianceError
        With code ``KYC_FAILURE`` when the application has no
        ``personal_info`` section.
    """
    config = config or {}
    personal_info = application.get("personal_info")
    if not isinstance(personal_info, dict):
        raise ComplianceError(
            f"KYC check cannot run on application {application.get('id')}: no personal_info",
            "KYC_FAILURE",
        )

    points = get_nested(config, "kyc", "points_per_requirement", default=25)
    pass_threshold = get_nested(config, "kyc", "thresholds", "pass", default=75)
    conditional_threshold = get_nested(config, "kyc", "thresholds", "conditional", default=50)

    kyc = KYCResult()

    if personal_info.get("ssn"):
        kyc.score += points
        kyc.requirements.append("SSN_VERIFIED")
        kyc.documents.append("SSN")
    else:
        kyc.issues.append("Missing SSN")

    if personal_info.get("address") and personal_info.get("address_verified"):
        kyc.score += points
        kyc.requirements.append("ADDRESS_VERIFIED")
        kyc.documents.append("PROOF_OF_ADDRESS")
    else:
        kyc.issues.append("Address not verified")

    income_documents = application.get("income_documents")
    if application.get("income_verified") and income_documents:
        kyc.score += points
        kyc.requirements.append("INCOME_VERIFIED")
        if isinstance(income_documents, list):
            kyc.documents.extend(str(doc) for doc in income_documents)
        else:
            kyc.documents.append("INCOME_DOCUMENTS")
    else:
        kyc.issues.append("Income documentation incomplete")

    if application.get("employment_verified"):
        kyc.score += points
        kyc.requirements.append("EMPLOYMENT_VERIFIED")
    else:
        kyc.issues.append("Employment not verified")

    if kyc.score >= pass_threshold:
        kyc.status = PASS
    elif kyc.score >= conditional_threshold:
        kyc.status = CONDITIONAL
    else:
        kyc.status = FAIL

    logger.debug("KYC for %s: %s (%d)", application.get("id"), kyc.status, kyc.score)
    return kyc
