"""Exceptions raised by the risk and compliance agents."""


class ComplianceError(Exception):
    """A compliance check could not be run on the given application."""

    def __init__(self, message: str, code: str = "COMPLIANCE_ERROR") -> None:
        super().__init__(message)
        self.code = code


class RiskAssessmentError(Exception):
    """A credit risk assessment failed part-way through."""

    def __init__(self, message: str, assessment_id: str | None = None) -> None:
        super().__init__(message)
        self.assessment_id = assessment_id
