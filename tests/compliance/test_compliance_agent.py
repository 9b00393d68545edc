"""Tests for ComplianceAgent."""

import pytest

from aurarisk.compliance import ComplianceAgent
from aurarisk.compliance.results import COMPLIANT, NON_COMPLIANT, REVIEW_REQUIRED
from aurarisk.errors import ComplianceError

AS_OF = "2024-07-01"


@pytest.fixture
def agent() -> ComplianceAgent:
    return ComplianceAgent()


class TestPerformComplianceCheck:
    """Tests for ComplianceAgent.perform_compliance_check."""

    def test_clean_application_compliant(self, agent: ComplianceAgent, application: dict) -> None:
        """Test the sample application is compliant on every check."""
        check = agent.perform_compliance_check(application, as_of=AS_OF)

        assert check.overall_status == COMPLIANT
        assert set(check.checks) == {"kyc", "aml", "fair_lending", "regulatory", "sanctions"}
        assert check.violations == []
        assert check.recommendations == []
        assert check.application_id == "APP-2024-0001"

    def test_sanctions_hit_non_compliant(self, application: dict) -> None:
        """Test a sanctions hit rejects the application."""
        agent = ComplianceAgent(watchlists={"sanctions": [{"name": "Maria Lopez", "list": "OFAC"}]})

        check = agent.perform_compliance_check(application, as_of=AS_OF)

        assert check.overall_status == NON_COMPLIANT
        assert check.checks["aml"]["status"] == "FAIL"
        assert check.recommendations[0]["action"] == "REJECT_APPLICATION"
        assert {"type": "aml", "severity": "HIGH", "description": "aml check failed"} in check.violations

    def test_review_required(self, agent: ComplianceAgent, application: dict) -> None:
        """Test unverified income needs review."""
        application["income_verified"] = False

        check = agent.perform_compliance_check(application, as_of=AS_OF)

        assert check.overall_status == REVIEW_REQUIRED
        assert check.recommendations[0]["action"] == "MANUAL_REVIEW"

    def test_regulatory_violation_listed(self, agent: ComplianceAgent, application: dict) -> None:
        """Test framework violations are tagged with their check."""
        application["financial_info"]["monthly_debt"] = 5000

        check = agent.perform_compliance_check(application, as_of=AS_OF)

        assert check.overall_status == NON_COMPLIANT
        assert check.violations[0]["type"] == "regulatory"
        assert check.violations[0]["framework"] == "DODD_FRANK"

    def test_missing_personal_info_raises(self, agent: ComplianceAgent) -> None:
        """Test an unscreenable application raises ComplianceError."""
        with pytest.raises(ComplianceError):
            agent.perform_compliance_check({"id": "X"})

    def test_non_dict_application(self, agent: ComplianceAgent) -> None:
        """Test a non-dict application is rejected as invalid."""
        with pytest.raises(ComplianceError) as excinfo:
            agent.perform_compliance_check(["not", "an", "application"])

        assert excinfo.value.code == "INVALID_APPLICATION"

    def test_config_override(self, application: dict) -> None:
        """Test configuration overrides reach the checks."""
        agent = ComplianceAgent(config={"regulatory": {"qm_dti_limit": 0.1}})

        check = agent.perform_compliance_check(application, as_of=AS_OF)

        assert check.checks["regulatory"]["status"] == "VIOLATION"
        assert agent.config["regulatory"]["max_risk_weight"] == 1.5

    def test_serialises(self, agent: ComplianceAgent, application: dict) -> None:
        """Test the check converts to a plain dict."""
        data = agent.perform_compliance_check(application, as_of=AS_OF).to_dict()

        assert data["overall_status"] == COMPLIANT
        assert data["checks"]["kyc"]["score"] == 100


class TestEvaluateOverallCompliance:
    """Tests for ComplianceAgent.evaluate_overall_compliance."""

    def test_precedence(self) -> None:
        """Test blocking statuses beat review statuses."""
        evaluate = ComplianceAgent.evaluate_overall_compliance

        assert evaluate({"a": {"status": "PASS"}, "b": {"status": "CLEAR"}}) == COMPLIANT
        assert evaluate({"a": {"status": "WARNING"}, "b": {"status": "PASS"}}) == REVIEW_REQUIRED
        assert evaluate({"a": {"status": "WARNING"}, "b": {"status": "VIOLATION"}}) == NON_COMPLIANT


class TestAuditAndCommunication:
    """Tests for audit trail and inter-agent messages."""

    def test_check_audited(self, agent: ComplianceAgent, application: dict) -> None:
        """Test each check is recorded."""
        agent.perform_compliance_check(application, as_of=AS_OF)

        trail = agent.get_audit_trail(action="COMPLIANCE_CHECK")

        assert len(trail) == 1
        assert trail[0]["details"]["status"] == COMPLIANT
        assert agent.get_status()["total_checks"] == 1

    def test_request_risk_reassessment(self, agent: ComplianceAgent) -> None:
        """Test reassessment requests go to the credit risk agent."""
        message = agent.request_risk_reassessment("APP-1", "Income changed")

        assert message["to"] == "credit-risk-001"
        assert message["message"] == "REQUEST_REASSESSMENT"
        assert agent.get_audit_trail(action="AGENT_COMMUNICATION")[0]["details"] == message

    def test_notify_reporting(self, agent: ComplianceAgent, application: dict) -> None:
        """Test completion notices go to reporting."""
        check = agent.perform_compliance_check(application, as_of=AS_OF)

        message = agent.notify_reporting(check)

        assert message["to"] == "reporting-001"
        assert message["data"]["status"] == COMPLIANT

    def test_status(self, agent: ComplianceAgent) -> None:
        """Test a fresh agent reports no activity."""
        status = agent.get_status()

        assert status["agent_id"] == "compliance-001"
        assert status["last_activity"] is None
        assert "AML" in status["regulatory_frameworks"]
