"""Macroeconomic stress testing.

A scenario shocks unemployment, growth, rates, house prices, equities
and credit spreads. Each shock is measured against the baseline
scenario, so stressing under the baseline leaves PD, LGD and EAD
unchanged.

Stressed parameters are capped: PD and LGD at 1.0, EAD at the loan
amount (a facility cannot draw past its limit).
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import pandas as pd

from ..data.applications import section
from ..models.capital import capital_requirement
from ..models.correlation import CorrelationModel
from .portfolio import Portfolio

logger = logging.getLogger(__name__)

BASELINE = "baseline"
REVOLVING_PRODUCTS = {"revolving_credit", "credit_card", "overdraft"}

# PD sensitivities
UNEMPLOYMENT_SENSITIVITY = 10.0
GDP_SENSITIVITY = 8.0
RATE_SENSITIVITY = 5.0

# LGD sensitivities by collateral channel
HOUSING_SENSITIVITY = 1.5
EQUITY_SENSITIVITY = 1.0
SECURED_SPREAD_SENSITIVITY = 10.0
UNSECURED_SPREAD_SENSITIVITY = 5.0

# EAD sensitivities for revolving products
DRAWDOWN_RATE_SENSITIVITY = 5.0
DRAWDOWN_UNEMPLOYMENT_SENSITIVITY = 2.0


@dataclass(frozen=True)
class EconomicScenario:
    """One macroeconomic scenario.

    Attributes
    ----------
    key : str
        Short identifier (``baseline``, ``adverse``, ...).
    name : str
        Display name.
    gdp_growth, unemployment_rate : float
        Annual GDP growth and unemployment rate.
    interest_rate_shock : float
        Parallel rate shift.
    housing_price_change, equity_market_shock : float
        Asset price moves (negative is a fall).
    corporate_bond_spreads : float
        Credit spread level.
    probability : float
        Scenario weight for probability-weighted loss.
    """

    key: str
    name: str
    gdp_growth: float
    unemployment_rate: float
    interest_rate_shock: float
    housing_price_change: float
    equity_market_shock: float
    corporate_bond_spreads: float
    probability: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def default_scenarios(config: dict[str, Any]) -> dict[str, EconomicScenario]:
    """
    Build scenarios from the ``scenarios`` section of the credit config.

    Raises
    ------
    ValueError
        If there is no baseline scenario.
    """
    raw = config.get("scenarios") or {}
    scenarios = {key: EconomicScenario(key=key, **values) for key, values in raw.items()}
    if BASELINE not in scenarios:
        raise ValueError("Scenario configuration must include a 'baseline' scenario")
    return scenarios


def _dti(application: dict[str, Any]) -> float:
    financial = section(application, "financial_info")
    income = financial.get("annual_income") or 0
    if income <= 0:
        return 2.0
    return min((financial.get("monthly_debt") or 0) * 12 / income, 2.0)


def pd_stress_multiplier(
    scenario: EconomicScenario,
    application: dict[str, Any],
    baseline: EconomicScenario,
) -> float:
    """
    PD multiplier from unemployment, growth and rate shocks.

    Formula:
        1 + 10 * du + 8 * dg + 5 * dr * (1 + DTI)

    where each gap is the adverse move versus baseline, floored at 0.
    Leveraged borrowers feel rate shocks harder.
    """
    unemployment_gap = max(0.0, scenario.unemployment_rate - baseline.unemployment_rate)
    gdp_gap = max(0.0, baseline.gdp_growth - scenario.gdp_growth)
    rate_gap = max(0.0, scenario.interest_rate_shock - baseline.interest_rate_shock)

    return (
        1.0
        + UNEMPLOYMENT_SENSITIVITY * unemployment_gap
        + GDP_SENSITIVITY * gdp_gap
        + RATE_SENSITIVITY * rate_gap * (1 + _dti(application))
    )


def lgd_stress_multiplier(
    scenario: EconomicScenario,
    application: dict[str, Any],
    baseline: EconomicScenario,
) -> float:
    """
    LGD multiplier from the collateral's own price channel.

    Real estate follows house prices, securities follow equities, other
    collateral and unsecured loans follow credit spreads.
    """
    collateral = section(application, "collateral")
    collateral_type = collateral.get("collateral_type")
    spread_gap = max(0.0, scenario.corporate_bond_spreads - baseline.corporate_bond_spreads)

    if collateral_type == "real_estate":
        decline = max(0.0, baseline.housing_price_change - scenario.housing_price_change)
        return 1.0 + HOUSING_SENSITIVITY * decline
    if collateral_type == "securities":
        decline = max(0.0, baseline.equity_market_shock - scenario.equity_market_shock)
        return 1.0 + EQUITY_SENSITIVITY * decline
    if collateral:
        return 1.0 + SECURED_SPREAD_SENSITIVITY * spread_gap
    return 1.0 + UNSECURED_SPREAD_SENSITIVITY * spread_gap


def ead_stress_multiplier(
    scenario: EconomicScenario,
    application: dict[str, Any],
    baseline: EconomicScenario,
) -> float:
    """Revolving facilities draw down under stress; term products do not."""
    loan_type = section(application, "loan_details").get("loan_type")
    if loan_type not in REVOLVING_PRODUCTS:
        return 1.0

    rate_gap = max(0.0, scenario.interest_rate_shock - baseline.interest_rate_shock)
    unemployment_gap = max(0.0, scenario.unemployment_rate - baseline.unemployment_rate)
    return 1.0 + DRAWDOWN_RATE_SENSITIVITY * rate_gap + DRAWDOWN_UNEMPLOYMENT_SENSITIVITY * unemployment_gap


def apply_stress_scenario(
    scores: dict[str, float],
    scenario: EconomicScenario,
    application: dict[str, Any],
    baseline: EconomicScenario,
) -> dict[str, float]:
    """
    Stress PD, LGD and EAD and recompute expected loss.

    Returns
    -------
    dict[str, float]
        Copy of ``scores`` with stressed ``probability_of_default``,
        ``loss_given_default``, ``exposure_at_default`` and ``expected_loss``.
    """
    loan_amount = section(application, "loan_details").get("loan_amount") or 0
    stressed = dict(scores)

    stressed["probability_of_default"] = min(
        scores["probability_of_default"] * pd_stress_multiplier(scenario, application, baseline), 1.0
    )
    stressed["loss_given_default"] = min(
        scores["loss_given_default"] * lgd_stress_multiplier(scenario, application, baseline), 1.0
    )
    stressed["exposure_at_default"] = min(
        scores["exposure_at_default"] * ead_stress_multiplier(scenario, application, baseline), loan_amount
    )
    stressed["expected_loss"] = (
        stressed["probability_of_default"] * stressed["loss_given_default"] * stressed["exposure_at_default"]
    )
    return stressed


def risk_adjusted_return(
    application: dict[str, Any],
    stressed: dict[str, float],
    capital: float,
    default_rate: float = 0.08,
) -> float:
    """
    RAROC: (interest income - expected loss) / capital.

    Interest income is one year at the loan's rate on EAD. NaN when the
    capital requirement is zero.
    """
    rate = section(application, "loan_details").get("interest_rate") or default_rate
    income = rate * stressed["exposure_at_default"]
    if capital <= 0:
        return np.nan
    return (income - stressed["expected_loss"]) / capital


def perform_application_stress_test(
    application: dict[str, Any],
    scores: dict[str, float],
    scenarios: dict[str, EconomicScenario],
    correlation: float,
    el_threshold: float = 0.05,
    default_rate: float = 0.08,
) -> dict[str, dict[str, Any]]:
    """
    Stress one application under every scenario.

    Parameters
    ----------
    application : dict[str, Any]
        Loan application.
    scores : dict[str, float]
        Unstressed scores from ``calculate_comprehensive_risk_scores``.
    scenarios : dict[str, EconomicScenario]
        Scenarios keyed by id; must include ``baseline``.
    correlation : float
        Asset correlation for the capital formula.
    el_threshold : float, default 0.05
        Maximum stressed expected loss per unit of loan amount.
    default_rate : float, default 0.08
        Interest rate assumed when the loan has none.

    Returns
    -------
    dict[str, dict[str, Any]]
        Per scenario: stressed PD/LGD/EAD/EL, capital requirement
        (currency), risk-adjusted return and ``passes_stress_test``.
    """
    if BASELINE not in scenarios:
        raise ValueError("Stress test requires a 'baseline' scenario")

    baseline = scenarios[BASELINE]
    loan_amount = section(application, "loan_details").get("loan_amount") or 0
    results: dict[str, dict[str, Any]] = {}

    for key, scenario in scenarios.items():
        stressed = apply_stress_scenario(scores, scenario, application, baseline)
        capital = capital_requirement(
            stressed["probability_of_default"], stressed["loss_given_default"], correlation
        ) * stressed["exposure_at_default"]
        loss_rate = stressed["expected_loss"] / loan_amount if loan_amount > 0 else np.nan

        results[key] = {
            "scenario": scenario.to_dict(),
            "stressed_pd": stressed["probability_of_default"],
            "stressed_lgd": stressed["loss_given_default"],
            "stressed_ead": stressed["exposure_at_default"],
            "stressed_expected_loss": stressed["expected_loss"],
            "loss_rate": loss_rate,
            "capital_requirement": capital,
            "risk_adjusted_return": risk_adjusted_return(application, stressed, capital, default_rate),
            "passes_stress_test": bool(loss_rate <= el_threshold),
        }

    return results


def probability_weighted_loss(results: dict[str, dict[str, Any]]) -> float:
    """Expected loss averaged over scenarios by their probability."""
    weights = np.array([result["scenario"]["probability"] for result in results.values()], dtype=float)
    losses = np.array([result["stressed_expected_loss"] for result in results.values()], dtype=float)
    if weights.sum() <= 0:
        return np.nan
    return float((weights * losses).sum() / weights.sum())


def base_expected_loss(scores: dict[str, float]) -> float:
    return scores["probability_of_default"] * scores["loss_given_default"] * scores["exposure_at_default"]


def apply_portfolio_stress_scenario(
    portfolio: Portfolio,
    scenario: EconomicScenario,
    baseline: EconomicScenario,
    correlation_model: CorrelationModel,
    provision_rate: float = 0.02,
    failed_pd: float = 0.5,
    max_loan_results: int = 100,
) -> dict[str, Any]:
    """
    Stress every booked loan under one scenario.

    Returns
    -------
    dict[str, Any]
        ``scenario`` name, ``portfolio_metrics`` and ``loan_results``
        (the ``max_loan_results`` loans with the largest additional loss).

    Notes
    -----
    base EL = PD * LGD * EAD of the stored scores, so the baseline
    scenario adds no loss.
    additional_loss_required = stressed EL - provision_rate * total exposure
    A loan fails when its stressed PD exceeds ``failed_pd``.
    """
    rows = []
    for loan in portfolio.loans.values():
        stressed = apply_stress_scenario(loan.risk_scores, scenario, loan.application, baseline)
        correlation = correlation_model.calculate_asset_correlation(loan.application)
        capital = capital_requirement(
            stressed["probability_of_default"], stressed["loss_given_default"], correlation
        ) * stressed["exposure_at_default"]
        rows.append({
            "loan_id": loan.loan_id,
            "base_expected_loss": base_expected_loss(loan.risk_scores),
            "stressed_expected_loss": stressed["expected_loss"],
            "stressed_pd": stressed["probability_of_default"],
            "capital_requirement": capital,
        })

    total_exposure = portfolio.total_exposure
    if not rows:
        logger.warning(f"Portfolio stress '{scenario.key}': portfolio is empty")
        results = pd.DataFrame(
            columns=["loan_id", "base_expected_loss", "stressed_expected_loss", "stressed_pd", "capital_requirement"]
        ).astype({"base_expected_loss": float, "stressed_expected_loss": float,
                  "stressed_pd": float, "capital_requirement": float})
    else:
        results = pd.DataFrame(rows)

    results["additional_loss"] = results["stressed_expected_loss"] - results["base_expected_loss"]
    results["failed"] = results["stressed_pd"] > failed_pd

    n_loans = len(results)
    stressed_el = float(results["stressed_expected_loss"].sum())
    failed = int(results["failed"].sum())

    top = results.sort_values("additional_loss", ascending=False).head(max_loan_results)

    return {
        "scenario": scenario.name,
        "portfolio_metrics": {
            "total_loans": n_loans,
            "total_exposure": total_exposure,
            "base_expected_loss": float(results["base_expected_loss"].sum()),
            "stressed_expected_loss": stressed_el,
            "additional_loss_required": stressed_el - total_exposure * provision_rate,
            "capital_requirement": float(results["capital_requirement"].sum()),
            "failed_loan_count": failed,
            "failure_rate": failed / n_loans if n_loans else 0.0,
        },
        "loan_results": top.drop(columns=["stressed_pd"]).to_dict("records"),
    }


def perform_portfolio_stress_test(
    portfolio: Portfolio,
    scenarios: dict[str, EconomicScenario],
    correlation_model: CorrelationModel,
    provision_rate: float = 0.02,
    failed_pd: float = 0.5,
    max_loan_results: int = 100,
    baseline: EconomicScenario | None = None,
) -> dict[str, dict[str, Any]]:
    """Stress the whole portfolio under each scenario, keyed by scenario name.

    Shocks are measured against ``baseline``, which defaults to the
    ``baseline`` entry of ``scenarios``.
    """
    if baseline is None:
        if BASELINE not in scenarios:
            raise ValueError("Stress test requires a 'baseline' scenario")
        baseline = scenarios[BASELINE]
    results = {
        scenario.name: apply_portfolio_stress_scenario(
            portfolio,
            scenario,
            baseline,
            correlation_model,
            provision_rate=provision_rate,
            failed_pd=failed_pd,
            max_loan_results=max_loan_results,
        )
        for scenario in scenarios.values()
    }

    logger.info(f"Portfolio stress test complete: {len(scenarios)} scenarios, {len(portfolio)} loans")
    return results
