"""Tests for AML transaction heuristics."""

import numpy as np
import pandas as pd
import pytest

from aurarisk.compliance.aml_utils import (
    analyze_transaction_patterns,
    assess_geographic_risk,
    calculate_average_monthly_volume,
    calculate_recent_volume,
    detect_structuring,
    detect_unusual_volume,
)
from aurarisk.data.applications import transactions_frame

AS_OF = "2024-07-01"


def _history(amounts_by_date: list[tuple[str, float]]) -> dict:
    return {"transactions": [{"date": d, "amount": a, "type": "deposit"} for d, a in amounts_by_date]}


@pytest.fixture
def structured_history() -> dict:
    """Six deposits just under 10k in June plus one old small deposit."""
    recent = [(f"2024-06-{day:02d}", 9500) for day in range(10, 16)]
    return _history([("2024-01-02", 1000)] + recent)


class TestDetectStructuring:
    """Tests for detect_structuring function."""

    def test_more_than_min_count_detected(self, structured_history: dict) -> None:
        """Test six near-threshold deposits are structuring."""
        result = detect_structuring(transactions_frame(structured_history))

        assert result == {"detected": True, "count": 6}

    def test_exactly_min_count_not_detected(self) -> None:
        """Test five near-threshold deposits are not enough."""
        history = _history([(f"2024-06-{day:02d}", 9500) for day in range(10, 15)])

        result = detect_structuring(transactions_frame(history))

        assert result == {"detected": False, "count": 5}

    def test_band_bounds_exclusive(self) -> None:
        """Test amounts at 9000 and 10000 are outside the band."""
        history = _history([("2024-06-01", 9000), ("2024-06-02", 10000), ("2024-06-03", 9001)])

        assert detect_structuring(transactions_frame(history))["count"] == 1


class TestVolume:
    """Tests for the volume helpers."""

    def test_recent_volume_window(self) -> None:
        """Test only transactions strictly after the cutoff count."""
        df = transactions_frame(_history([("2024-06-01", 100), ("2024-06-02", 200), ("2024-05-01", 400)]))

        assert calculate_recent_volume(df, as_of=AS_OF, lookback_days=30) == pytest.approx(200)

    def test_recent_volume_tz_aware_as_of(self) -> None:
        """Test a timezone-aware reference date works against naive dates."""
        df = transactions_frame(_history([("2024-06-20", 100)]))

        assert calculate_recent_volume(df, as_of=pd.Timestamp(AS_OF, tz="UTC")) == pytest.approx(100)

    def test_recent_volume_empty(self) -> None:
        """Test an empty frame has no volume."""
        assert calculate_recent_volume(transactions_frame(None), as_of=AS_OF) == 0.0

    def test_average_monthly_volume(self) -> None:
        """Test the average spreads the total over twelve months."""
        df = transactions_frame(_history([("2024-01-01", 1200), ("2024-02-01", 2400)]))

        assert calculate_average_monthly_volume(df) == pytest.approx(300)

    def test_unusual_volume(self, structured_history: dict) -> None:
        """Test a recent burst is flagged."""
        result = detect_unusual_volume(transactions_frame(structured_history), as_of=AS_OF)

        assert result["detected"] is True
        assert result["ratio"] == pytest.approx(57000 / (58000 / 12))

    def test_zero_average_ratio_nan(self) -> None:
        """Test the ratio is undefined without volume."""
        df = transactions_frame(_history([("2024-06-20", 0)]))

        result = detect_unusual_volume(df, as_of=AS_OF)

        assert result["detected"] is False
        assert np.isnan(result["ratio"])


class TestAnalyzeTransactionPatterns:
    """Tests for analyze_transaction_patterns function."""

    def test_both_patterns_suspicious(self, structured_history: dict) -> None:
        """Test structuring plus unusual volume reaches the suspicious score."""
        result = analyze_transaction_patterns(structured_history, as_of=AS_OF)

        assert result["flags"] == ["STRUCTURING", "UNUSUAL_VOLUME"]
        assert result["risk_score"] == pytest.approx(0.5)
        assert result["suspicious"] is True

    def test_single_pattern_not_suspicious(self, structured_history: dict) -> None:
        """Test structuring alone stays under the suspicious score."""
        result = analyze_transaction_patterns(structured_history, as_of="2025-07-01")

        assert result["flags"] == ["STRUCTURING"]
        assert result["suspicious"] is False

    def test_regular_history(self, application: dict) -> None:
        """Test the sample history raises nothing."""
        result = analyze_transaction_patterns(application["financial_info"]["account_history"], as_of=AS_OF)

        assert result["flags"] == []
        assert result["suspicious"] is False

    def test_empty_history(self) -> None:
        """Test no history is not suspicious."""
        assert analyze_transaction_patterns(None) == {"suspicious": False, "flags": [], "risk_score": 0.0}

    def test_config_threshold(self, structured_history: dict) -> None:
        """Test a lower suspicious score makes one pattern enough."""
        result = analyze_transaction_patterns(
            structured_history, {"suspicious_risk_score": 0.3}, as_of="2025-07-01"
        )

        assert result["suspicious"] is True


class TestAssessGeographicRisk:
    """Tests for assess_geographic_risk function."""

    def test_high_risk_country(self) -> None:
        """Test a listed country is HIGH."""
        result = assess_geographic_risk({"country": "Country1"}, ["Country1"])

        assert result == {"risk_score": 0.8, "country": "Country1", "risk_level": "HIGH"}

    def test_other_country(self) -> None:
        """Test an unlisted or missing country is LOW."""
        assert assess_geographic_risk({"country": "US"}, ["Country1"])["risk_level"] == "LOW"
        assert assess_geographic_risk(None)["risk_score"] == 0.1
