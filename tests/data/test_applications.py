"""Tests for applications module."""

import json
from pathlib import Path

import pandas as pd
import pytest

from aurarisk.data.applications import (
    load_application,
    lookup,
    section,
    transactions_frame,
    validate_application,
)


class TestLoadApplication:
    """Tests for load_application function."""

    def test_load_fixture(self, application_path: Path) -> None:
        """Test loading the sample application."""
        app = load_application(application_path)

        assert app["id"] == "APP-2024-0001"
        assert app["loan_details"]["loan_amount"] == 300000

    def test_missing_file(self) -> None:
        """Test loading a non-existent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_application("/nonexistent/application.json")

    def test_non_object(self, tmp_path: Path) -> None:
        """Test a JSON array raises ValueError."""
        path = tmp_path / "app.json"
        path.write_text(json.dumps([1, 2]))

        with pytest.raises(ValueError, match="JSON object"):
            load_application(path)


class TestSectionAndLookup:
    """Tests for section and lookup helpers."""

    def test_section_absent(self) -> None:
        """Test an absent or non-dict section is empty."""
        assert section({}, "collateral") == {}
        assert section({"collateral": None}, "collateral") == {}

    def test_lookup_prefers_top_level(self) -> None:
        """Test top-level keys win over financial_info."""
        app = {"monthly_debt": 100, "financial_info": {"monthly_debt": 200}}

        assert lookup(app, "monthly_debt") == 100

    def test_lookup_falls_back(self) -> None:
        """Test financial_info is used when the top level lacks the key."""
        app = {"financial_info": {"monthly_debt": 200}}

        assert lookup(app, "monthly_debt") == 200
        assert lookup(app, "missing", default=0) == 0


class TestValidateApplication:
    """Tests for validate_application function."""

    def test_valid_application(self, application: dict) -> None:
        """Test the sample application passes."""
        result = validate_application(application)

        assert result.is_valid is True
        assert result.errors == []
        assert result.warnings == []
        assert result.stats == {"transactions": 8, "credit_cards": 2}

    def test_missing_sections(self) -> None:
        """Test missing id and sections are errors."""
        result = validate_application({})

        assert result.is_valid is False
        assert "Missing application id" in result.errors
        assert "Missing section 'loan_details'" in result.errors

    def test_non_positive_values(self, application: dict) -> None:
        """Test zero income and loan amount are errors."""
        application["financial_info"]["annual_income"] = 0
        application["financial_info"]["monthly_debt"] = -5
        application["loan_details"]["loan_amount"] = 0

        result = validate_application(application)

        assert result.is_valid is False
        assert "'annual_income' must be positive" in result.errors
        assert "'monthly_debt' must not be negative" in result.errors
        assert "'loan_amount' must be positive" in result.errors

    def test_warnings(self, application: dict) -> None:
        """Test missing score, worthless collateral and address are warnings."""
        del application["financial_info"]["credit_score"]
        application["collateral"]["collateral_value"] = 0
        del application["personal_info"]["address"]

        result = validate_application(application)

        assert result.is_valid is True
        assert len(result.warnings) == 3


class TestTransactionsFrame:
    """Tests for transactions_frame function."""

    def test_empty_history(self) -> None:
        """Test no history gives an empty frame with the standard columns."""
        df = transactions_frame(None)

        assert len(df) == 0
        assert list(df.columns) == ["date", "amount", "type", "on_time"]

    def test_types_coerced(self, application: dict) -> None:
        """Test dates are parsed and amounts are floats."""
        df = transactions_frame(application["financial_info"]["account_history"])

        assert len(df) == 8
        assert pd.api.types.is_datetime64_any_dtype(df["date"])
        assert df["amount"].dtype == float
        assert df["on_time"].isna().sum() == 2

    def test_missing_columns_filled(self) -> None:
        """Test transactions without optional fields still produce every column."""
        df = transactions_frame({"transactions": [{"date": "2024-01-01", "amount": "12.5"}]})

        assert df.loc[0, "amount"] == pytest.approx(12.5)
        assert df["type"].isna().all()
