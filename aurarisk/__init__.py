"""Loan application credit risk and compliance review.

Public API:
- CreditRiskAgent: risk scoring, stress testing, decision and pricing
- ComplianceAgent: KYC, AML, sanctions, fair lending, regulatory checks
- run_pipeline: assessment followed by compliance screening
"""

from .compliance import ComplianceAgent
from .credit import CreditRiskAgent
from .errors import ComplianceError, RiskAssessmentError
from .pipeline import PipelineResult, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "ComplianceAgent",
    "CreditRiskAgent",
    "ComplianceError",
    "RiskAssessmentError",
    "PipelineResult",
    "run_pipeline",
]
