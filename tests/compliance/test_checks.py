"""Tests for the individual compliance checks."""

import pytest

from aurarisk.compliance.aml import perform_aml_check
from aurarisk.compliance.kyc import perform_kyc_check
from aurarisk.compliance.results import (
    CLEAR,
    COMPLIANT,
    CONDITIONAL,
    FAIL,
    PASS,
    REVIEW_REQUIRED,
    VIOLATION,
    WARNING,
)
from aurarisk.compliance.sanctions import entries_for_list, perform_sanctions_check
from aurarisk.compliance.regulatory import (
    check_basel_compliance,
    check_dodd_frank_compliance,
    check_qm_compliance,
    perform_regulatory_check,
)
from aurarisk.data.config import load_default_config
from aurarisk.data.watchlists import empty_watchlists
from aurarisk.errors import ComplianceError

AS_OF = "2024-07-01"


@pytest.fixture
def config() -> dict:
    return load_default_config("compliance")


class TestKYC:
    """Tests for perform_kyc_check function."""

    def test_fully_verified(self, application: dict, config: dict) -> None:
        """Test a fully documented applicant passes with 100 points."""
        result = perform_kyc_check(application, config)

        assert result.status == PASS
        assert result.score == 100
        assert result.issues == []
        assert "W2_2023" in result.documents

    def test_conditional(self, application: dict, config: dict) -> None:
        """Test two missing requirements leave a conditional pass."""
        application["employment_verified"] = False
        application["personal_info"]["address_verified"] = False

        result = perform_kyc_check(application, config)

        assert result.status == CONDITIONAL
        assert result.score == 50
        assert result.issues == ["Address not verified", "Employment not verified"]

    def test_fail(self, config: dict) -> None:
        """Test an unverified applicant fails."""
        result = perform_kyc_check({"id": "X", "personal_info": {}}, config)

        assert result.status == FAIL
        assert result.score == 0
        assert len(result.issues) == 4

    def test_no_personal_info(self) -> None:
        """Test an application without personal_info cannot be checked."""
        with pytest.raises(ComplianceError) as exc_info:
            perform_kyc_check({"id": "X"})

        assert exc_info.value.code == "KYC_FAILURE"


class TestAML:
    """Tests for perform_aml_check function."""

    def test_clean_applicant(self, application: dict, config: dict) -> None:
        """Test no hits and regular transactions pass."""
        result = perform_aml_check(application, empty_watchlists(), config, as_of=AS_OF)

        assert result.status == PASS
        assert result.risk_level == "LOW"
        assert result.flags == []
        assert result.requires_manual_review is False
        assert "transaction_pattern" in result.screening_results

    def test_sanctions_hit_fails(self, application: dict, config: dict) -> None:
        """Test an exact sanctions hit fails with HIGH risk."""
        watchlists = {**empty_watchlists(), "sanctions": [{"name": "Maria Lopez"}]}

        result = perform_aml_check(application, watchlists, config, as_of=AS_OF)

        assert result.status == FAIL
        assert result.risk_level == "HIGH"
        assert result.flags == ["SANCTIONS_MATCH"]

    def test_pep_does_not_lower_level(self, application: dict, config: dict) -> None:
        """Test a PEP hit after a sanctions hit keeps HIGH."""
        watchlists = {
            "sanctions": [{"name": "Maria Lopez"}],
            "pep": [{"name": "Maria Lopez"}],
            "adverse": [],
        }

        result = perform_aml_check(application, watchlists, config, as_of=AS_OF)

        assert result.risk_level == "HIGH"
        assert result.flags == ["SANCTIONS_MATCH", "PEP_MATCH"]

    def test_pep_and_adverse_media_review(self, application: dict, config: dict) -> None:
        """Test PEP and adverse media hits need review."""
        watchlists = {"sanctions": [], "pep": [{"name": "Maria Lopez"}], "adverse": [{"name": "Maria Lopez"}]}

        result = perform_aml_check(application, watchlists, config, as_of=AS_OF)

        assert result.status == REVIEW_REQUIRED
        assert result.risk_level == "MEDIUM"
        assert result.flags == ["PEP_MATCH", "ADVERSE_MEDIA"]

    def test_fuzzy_hit_is_not_a_flag(self, application: dict, config: dict) -> None:
        """Test near matches are reported but do not flag."""
        watchlists = {**empty_watchlists(), "pep": [{"name": "Maria Lopes"}]}

        result = perform_aml_check(application, watchlists, config, as_of=AS_OF)

        assert result.status == PASS
        assert len(result.screening_results["pep"]["fuzzy_matches"]) == 1

    def test_high_risk_geography(self, application: dict, config: dict) -> None:
        """Test residence in a high-risk country needs review."""
        application["personal_info"]["address"]["country"] = "Country1"

        result = perform_aml_check(application, empty_watchlists(), config, as_of=AS_OF)

        assert result.status == REVIEW_REQUIRED
        assert result.flags == ["HIGH_RISK_GEOGRAPHY"]

    def test_suspicious_transactions(self, application: dict, config: dict) -> None:
        """Test structured deposits with a volume burst are flagged."""
        application["account_history"] = {
            "transactions": [{"date": f"2024-06-{d:02d}", "amount": 9500} for d in range(10, 16)]
        }

        result = perform_aml_check(application, empty_watchlists(), config, as_of=AS_OF)

        assert "SUSPICIOUS_PATTERN" in result.flags
        assert result.status == REVIEW_REQUIRED

    def test_no_personal_info(self) -> None:
        """Test an application without personal_info cannot be screened."""
        with pytest.raises(ComplianceError) as exc_info:
            perform_aml_check({"id": "X"}, empty_watchlists())

        assert exc_info.value.code == "AML_FAILURE"


class TestSanctions:
    """Tests for perform_sanctions_check function."""

    def test_clear(self, application: dict, config: dict) -> None:
        """Test no hits is CLEAR across every configured list."""
        result = perform_sanctions_check(application, empty_watchlists(), config)

        assert result.status == CLEAR
        assert result.lists == ["OFAC", "UN", "EU", "UK"]
        assert result.matches == []

    def test_entries_for_list(self) -> None:
        """Test list filtering keeps tagged and untagged entries."""
        watchlist = [{"name": "a", "list": "OFAC"}, {"name": "b", "list": "UN"}, {"name": "c"}]

        assert [e["name"] for e in entries_for_list(watchlist, "ofac")] == ["a", "c"]

    def test_tagged_hit(self, application: dict, config: dict) -> None:
        """Test an exact hit is reported under its issuing list."""
        watchlists = {**empty_watchlists(), "sanctions": [{"name": "Maria Lopez", "list": "UN"}]}

        result = perform_sanctions_check(application, watchlists, config)

        assert result.status == REVIEW_REQUIRED
        assert result.requires_review is True
        assert [hit["list"] for hit in result.matches] == ["UN"]

    def test_untagged_hit_reported_once(self, application: dict, config: dict) -> None:
        """Test an untagged entry is not repeated for every list."""
        watchlists = {**empty_watchlists(), "sanctions": [{"name": "Maria Lopez"}]}

        result = perform_sanctions_check(application, watchlists, config)

        assert len(result.matches) == 1
        assert result.matches[0]["list"] == "OFAC"

    def test_low_confidence_false_positive(self, application: dict, config: dict) -> None:
        """Test a weak fuzzy hit is set aside as a false positive."""
        watchlists = {**empty_watchlists(), "sanctions": [{"name": "Mario Lopes"}]}

        result = perform_sanctions_check(application, watchlists, config)

        assert result.status == CLEAR
        assert len(result.false_positives) == 1
        assert result.false_positives[0]["confidence"] == pytest.approx(9 / 11)

    def test_strong_fuzzy_hit_reviewed(self, application: dict, config: dict) -> None:
        """Test a close fuzzy hit still needs review."""
        watchlists = {**empty_watchlists(), "sanctions": [{"name": "Maria Lopes"}]}

        result = perform_sanctions_check(application, watchlists, config)

        assert result.status == REVIEW_REQUIRED


class TestRegulatory:
    """Tests for the regulatory framework checks."""

    def test_qm_compliance(self, application: dict) -> None:
        """Test DTI of 0.2 meets the QM limit."""
        result = check_qm_compliance(application)

        assert result["compliant"] is True
        assert result["dti_ratio"] == pytest.approx(0.2)
        assert result["verification"] is True

    def test_qm_no_income(self, application: dict) -> None:
        """Test an undefined DTI is not compliant."""
        application["financial_info"]["monthly_income"] = 0

        assert check_qm_compliance(application)["compliant"] is False

    def test_dodd_frank_violation(self, application: dict) -> None:
        """Test a mortgage over the DTI limit is a violation."""
        application["financial_info"]["monthly_debt"] = 5000

        result = check_dodd_frank_compliance(application)

        assert result["status"] == VIOLATION
        assert result["violations"][0]["framework"] == "DODD_FRANK"

    def test_dodd_frank_non_mortgage(self, application: dict) -> None:
        """Test non-mortgage loans skip the QM test."""
        application["loan_details"]["loan_type"] = "term_loan"
        application["financial_info"]["monthly_debt"] = 5000

        result = check_dodd_frank_compliance(application)

        assert result["status"] == COMPLIANT
        assert result["qualified_mortgage"] is None

    def test_basel_without_assessment(self, application: dict) -> None:
        """Test the standardised weight applies without an assessment."""
        result = check_basel_compliance(application, None)

        assert result["risk_weight"] == 1.0
        assert result["status"] == COMPLIANT

    def test_basel_risk_weight(self, application: dict) -> None:
        """Test risk weight is capital over 8% of the loan."""
        result = check_basel_compliance(application, {"capital_requirement": 48000})

        assert result["risk_weight"] == pytest.approx(2.0)
        assert result["status"] == WARNING

    def test_perform_regulatory_check(self, application: dict, config: dict) -> None:
        """Test the sample application is compliant."""
        result = perform_regulatory_check(application, None, config)

        assert result.status == COMPLIANT
        assert set(result.frameworks) == {"BASEL_III", "DODD_FRANK", "LENDING_REGS"}
        assert result.requirements == []

    def test_unverified_income_warns(self, application: dict, config: dict) -> None:
        """Test missing income verification is a warning with a requirement."""
        application["income_verified"] = False

        result = perform_regulatory_check(application, None, config)

        assert result.status == WARNING
        assert result.requirements == ["LENDING_REGS: Income not verified for ability-to-repay"]

    def test_violation_collected(self, application: dict, config: dict) -> None:
        """Test framework violations surface on the result."""
        application["financial_info"]["monthly_debt"] = 5000

        result = perform_regulatory_check(application, None, config)

        assert result.status == VIOLATION
        assert len(result.violations) == 1
