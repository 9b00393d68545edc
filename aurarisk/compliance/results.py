"""Result containers for the compliance checks.

Every check result carries a ``status``. The agent folds those statuses
into one overall verdict, so the vocabulary is shared:

- PASS / CLEAR / COMPLIANT: nothing to act on
- CONDITIONAL: passes with conditions
- REVIEW_REQUIRED / WARNING: a person must look at it
- FAIL / VIOLATION: blocks the application
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

PENDING = "PENDING"
PASS = "PASS"
CLEAR = "CLEAR"
COMPLIANT = "COMPLIANT"
CONDITIONAL = "CONDITIONAL"
REVIEW_REQUIRED = "REVIEW_REQUIRED"
WARNING = "WARNING"
FAIL = "FAIL"
VIOLATION = "VIOLATION"
NON_COMPLIANT = "NON_COMPLIANT"

BLOCKING_STATUSES = {FAIL, VIOLATION}
REVIEW_STATUSES = {REVIEW_REQUIRED, WARNING}


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class KYCResult(_Serializable):
    status: str = PENDING
    score: int = 0
    requirements: list[str] = field(default_factory=list)
    documents: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)


@dataclass
class AMLResult(_Serializable):
    status: str = PENDING
    risk_level: str = "LOW"
    flags: list[str] = field(default_factory=list)
    screening_results: dict[str, Any] = field(default_factory=dict)
    requires_manual_review: bool = False


@dataclass
class SanctionsResult(_Serializable):
    status: str = PENDING
    lists: list[str] = field(default_factory=list)
    matches: list[dict[str, Any]] = field(default_factory=list)
    false_positives: list[dict[str, Any]] = field(default_factory=list)
    requires_review: bool = False


@dataclass
class FairLendingResult(_Serializable):
    status: str = PENDING
    protected_classes: list[str] = field(default_factory=list)
    disparate_impact: bool = False
    bias_risk: str = "LOW"
    decision_consistency: dict[str, Any] | None = None
    recommendations: list[str] = field(default_factory=list)


@dataclass
class RegulatoryResult(_Serializable):
    status: str = PENDING
    frameworks: dict[str, dict[str, Any]] = field(default_factory=dict)
    violations: list[dict[str, Any]] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)


@dataclass
class ComplianceCheck(_Serializable):
    """Full compliance verdict for one application.

    Attributes
    ----------
    application_id : str | None
        Id of the screened application.
    timestamp : str
        ISO 8601 time the check started.
    agent_id : str
        Agent that ran the check.
    checks : dict[str, Any]
        Individual results keyed by ``kyc``, ``aml``, ``fair_lending``,
        ``regulatory`` and ``sanctions``.
    overall_status : str
        COMPLIANT, REVIEW_REQUIRED or NON_COMPLIANT.
    violations : list[dict[str, Any]]
        Violations tagged with the check ``type`` that raised them.
    recommendations : list[dict[str, Any]]
        Follow-up actions with ``priority``, ``action`` and ``reason``.
    """

    application_id: str | None
    timestamp: str
    agent_id: str
    checks: dict[str, Any] = field(default_factory=dict)
    overall_status: str = PENDING
    violations: list[dict[str, Any]] = field(default_factory=list)
    recommendations: list[dict[str, Any]] = field(default_factory=list)
