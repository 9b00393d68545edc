"""Tests for portfolio and concentration modules."""

import pytest

from aurarisk.credit.concentration import (
    analyze_concentration_risk,
    correlated_industry_exposure,
    exceeds_any_limit,
)
from aurarisk.credit.portfolio import PORTFOLIO_COLUMNS, Portfolio, borrower_id, bucket_keys
from aurarisk.models import CorrelationModel

SCORES = {
    "probability_of_default": 0.02,
    "loss_given_default": 0.4,
    "exposure_at_default": 100000.0,
    "expected_loss": 800.0,
}


class TestBucketKeys:
    """Tests for borrower_id and bucket_keys."""

    def test_borrower_id_precedence(self, application: dict) -> None:
        """Test explicit id beats SSN beats name."""
        assert borrower_id(application) == "123-45-6789"

        application["borrower_id"] = "B-9"
        assert borrower_id(application) == "B-9"

        del application["borrower_id"]
        del application["personal_info"]["ssn"]
        assert borrower_id(application) == "maria lopez"

    def test_bucket_keys(self, application: dict) -> None:
        """Test industry, state and product buckets."""
        assert bucket_keys(application) == {
            "borrower_id": "123-45-6789",
            "industry": "technology",
            "state": "TX",
            "product": "mortgage",
        }

    def test_bucket_defaults(self) -> None:
        """Test missing fields fall into default buckets."""
        keys = bucket_keys({"personal_info": {"address": {"country": "US"}}})

        assert keys["industry"] == "unknown"
        assert keys["state"] == "US"
        assert keys["product"] == "term_loan"


class TestPortfolio:
    """Tests for Portfolio."""

    def test_add_and_totals(self, application: dict) -> None:
        """Test exposure and risk-weighted assets accumulate."""
        portfolio = Portfolio()
        portfolio.add_loan("L1", 100000, SCORES, application, capital_requirement=8000)
        portfolio.add_loan("L2", 50000, SCORES, application, capital_requirement=2000)

        assert len(portfolio) == 2
        assert portfolio.total_exposure == 150000.0
        assert portfolio.risk_weighted_assets == pytest.approx(10000 * 12.5)

    def test_to_frame(self, application: dict) -> None:
        """Test one row per loan with the standard columns."""
        portfolio = Portfolio()
        portfolio.add_loan("L1", 100000, SCORES, application)

        df = portfolio.to_frame()

        assert list(df.columns) == PORTFOLIO_COLUMNS
        assert df.loc[0, "industry"] == "technology"
        assert df.loc[0, "expected_loss"] == 800.0

    def test_empty_frame(self) -> None:
        """Test an empty portfolio still has every column."""
        df = Portfolio().to_frame()

        assert len(df) == 0
        assert list(df.columns) == PORTFOLIO_COLUMNS

    def test_exposure_by(self, application: dict) -> None:
        """Test exposure grouped by bucket."""
        other = {**application, "financial_info": {**application["financial_info"], "industry_type": "retail"}}
        portfolio = Portfolio()
        portfolio.add_loan("L1", 100000, SCORES, application)
        portfolio.add_loan("L2", 40000, SCORES, other)
        portfolio.add_loan("L3", 60000, SCORES, application)

        by_industry = portfolio.exposure_by("industry")

        assert by_industry.to_dict() == {"retail": 40000.0, "technology": 160000.0}

    def test_exposure_by_unknown_column(self) -> None:
        """Test unknown columns raise ValueError."""
        with pytest.raises(ValueError, match="Unknown portfolio column"):
            Portfolio().exposure_by("colour")

    def test_negative_exposure(self, application: dict) -> None:
        """Test negative exposure is rejected."""
        with pytest.raises(ValueError):
            Portfolio().add_loan("L1", -1, SCORES, application)

    def test_remove_loan(self, application: dict) -> None:
        """Test removing a loan returns it; unknown ids raise KeyError."""
        portfolio = Portfolio()
        portfolio.add_loan("L1", 100000, SCORES, application)

        removed = portfolio.remove_loan("L1")

        assert removed.loan_id == "L1"
        assert len(portfolio) == 0
        with pytest.raises(KeyError):
            portfolio.remove_loan("L1")

    def test_scores_copied(self, application: dict) -> None:
        """Test later changes to the caller's scores do not leak in."""
        scores = dict(SCORES)
        portfolio = Portfolio()
        portfolio.add_loan("L1", 100000, scores, application)

        scores["expected_loss"] = 0.0

        assert portfolio.loans["L1"].risk_scores["expected_loss"] == 800.0


class TestConcentration:
    """Tests for analyze_concentration_risk function."""

    def test_empty_portfolio(self, application: dict) -> None:
        """Test the first loan is measured against the capital base."""
        analysis = analyze_concentration_risk(application, Portfolio())

        assert set(analysis) == {"borrower", "industry", "geographic", "product"}
        assert analysis["borrower"]["current_exposure"] == 0.0
        assert analysis["borrower"]["proposed_exposure"] == pytest.approx(0.03)
        assert analysis["borrower"]["limit_utilization"] == pytest.approx(0.03 / 0.25)
        assert exceeds_any_limit(analysis) is False

    def test_borrower_limit_breach(self, application: dict) -> None:
        """Test existing exposure to the same borrower counts."""
        portfolio = Portfolio()
        portfolio.add_loan("L1", 2600000, SCORES, application)

        analysis = analyze_concentration_risk(application, portfolio)

        assert analysis["borrower"]["current_exposure"] == pytest.approx(0.26)
        assert analysis["borrower"]["exceeds_limit"] is True
        assert analysis["industry"]["exceeds_limit"] is False
        assert exceeds_any_limit(analysis) is True

    def test_other_buckets_ignored(self, application: dict) -> None:
        """Test exposure in other buckets does not count."""
        other = {**application, "borrower_id": "B-2", "financial_info": {"industry_type": "retail"}}
        portfolio = Portfolio()
        portfolio.add_loan("L1", 2600000, SCORES, other)

        analysis = analyze_concentration_risk(application, portfolio)

        assert analysis["borrower"]["current_exposure"] == 0.0
        assert analysis["industry"]["current_exposure"] == 0.0
        assert analysis["geographic"]["current_exposure"] == pytest.approx(0.26)

    def test_custom_limits(self, application: dict) -> None:
        """Test limit overrides and capital base."""
        analysis = analyze_concentration_risk(
            application, Portfolio(), limits={"product_type": 0.1}, capital_base=1000000
        )

        assert analysis["product"]["exceeds_limit"] is True
        assert analysis["borrower"]["limit"] == 0.25

    def test_invalid_capital_base(self, application: dict) -> None:
        """Test a non-positive capital base is rejected."""
        with pytest.raises(ValueError):
            analyze_concentration_risk(application, Portfolio(), capital_base=0)

    def test_correlated_industry_exposure(self, application: dict) -> None:
        """Test other industries count in proportion to their correlation."""
        finance = {**application, "borrower_id": "B-2", "financial_info": {"industry_type": "finance"}}
        energy = {**application, "borrower_id": "B-3", "financial_info": {"industry_type": "energy"}}
        portfolio = Portfolio()
        portfolio.add_loan("L1", 500000, SCORES, application)
        portfolio.add_loan("L2", 1000000, SCORES, finance)
        portfolio.add_loan("L3", 200000, SCORES, energy)

        model = CorrelationModel()
        booked = correlated_industry_exposure("technology", portfolio, model)
        analysis = analyze_concentration_risk(application, portfolio, correlation_model=model)

        assert booked == pytest.approx(500000 + 1000000 * 0.3 + 200000 * 0.2)
        assert analysis["industry"]["correlated_exposure"] == pytest.approx((booked + 300000) / 10000000)
        assert analysis["industry"]["current_exposure"] == pytest.approx(0.05)

    def test_correlation_optional(self, application: dict) -> None:
        """Test correlated exposure is only reported with a correlation model."""
        analysis = analyze_concentration_risk(application, Portfolio())

        assert "correlated_exposure" not in analysis["industry"]
        assert correlated_industry_exposure("technology", Portfolio(), CorrelationModel()) == 0.0
