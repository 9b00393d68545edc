"""Credit risk agent.

Scores loan applications, stress tests them against macroeconomic
scenarios, checks concentration limits and recommends a lending
decision with pricing. Booked loans accumulate in the agent's portfolio,
which can itself be stress tested.
"""
from __future__ import annotations

import logging
import secrets
import time
from dataclasses import asdict
from datetime import datetime
from typing import Any, Iterable

from ..audit import AuditTrail, Listener, utc_now
from ..data.config import get_nested, load_default_config, merge_config
from ..errors import RiskAssessmentError
from ..models import (
    CorrelationModel,
    CreditScoreModel,
    ExposureAtDefaultModel,
    LossGivenDefaultModel,
    ProbabilityOfDefaultModel,
)
from .assessment import RiskAssessment
from .concentration import analyze_concentration_risk
from .factors import analyze_detailed_risk_factors
from .portfolio import Portfolio
from .profile import create_borrower_profile
from .recommendation import (
    calculate_pricing_adjustments,
    generate_detailed_recommendation,
    validate_assessment,
)
from .scores import calculate_comprehensive_risk_scores
from .stress import (
    BASELINE,
    EconomicScenario,
    default_scenarios,
    perform_application_stress_test,
    perform_portfolio_stress_test,
    probability_weighted_loss,
)

logger = logging.getLogger(__name__)

MODELS_INITIALIZED = "MODELS_INITIALIZED"
MODEL_INITIALIZATION_FAILED = "MODEL_INITIALIZATION_FAILED"
RISK_ASSESSMENT_COMPLETED = "RISK_ASSESSMENT_COMPLETED"
RISK_ASSESSMENT_FAILED = "RISK_ASSESSMENT_FAILED"
LOAN_BOOKED = "LOAN_BOOKED"
PORTFOLIO_STRESS_TEST_COMPLETED = "PORTFOLIO_STRESS_TEST_COMPLETED"


def generate_assessment_id() -> str:
    return f"RISK_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class CreditRiskAgent:
    """Credit risk assessment and portfolio stress testing.

    Parameters
    ----------
    config : dict[str, Any] | None
        Overrides merged over the bundled ``credit_risk.yaml``.

    Examples
    --------
    >>> agent = CreditRiskAgent()
    >>> assessment = agent.assess_credit_risk(application)
    >>> assessment.decision
    'APPROVE'
    """

    agent_id = "credit-risk-001"
    name = "Credit Risk Agent"
    capabilities = [
        "risk_assessment",
        "credit_scoring",
        "portfolio_analysis",
        "stress_testing",
        "default_prediction",
        "model_validation",
        "concentration_risk",
        "market_risk",
    ]

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = merge_config(load_default_config("credit_risk"), config)
        self.risk_thresholds: dict[str, float] = dict(self.config["risk_thresholds"])
        self.exposure_limits: dict[str, float] = dict(self.config["exposure_limits"])
        self.capital_base: float = float(self.config["capital_base"])
        self.score_weights: dict[str, float] = dict(self.config["score_weights"])
        self.economic_scenarios: dict[str, EconomicScenario] = default_scenarios(self.config)

        self.models = {
            "credit_score": CreditScoreModel(),
            "pd": ProbabilityOfDefaultModel(),
            "lgd": LossGivenDefaultModel(),
            "ead": ExposureAtDefaultModel(),
            "correlation": CorrelationModel(),
        }
        self.portfolio = Portfolio()
        self.audit_trail = AuditTrail(self.agent_id)

        self.initialize_models()

    def initialize_models(self) -> None:
        """Calibrate every model; failures are audited and re-raised."""
        try:
            for model in self.models.values():
                model.calibrate()
        except Exception as exc:
            self.audit_trail.record(MODEL_INITIALIZATION_FAILED, {"error": str(exc)})
            raise

        self.audit_trail.record(MODELS_INITIALIZED, {
            "model_count": len(self.models),
            "calibration_status": "COMPLETED",
        })

    def subscribe(self, listener: Listener) -> None:
        """Receive every audit entry as it is recorded."""
        self.audit_trail.subscribe(listener)

    def assess_credit_risk(
        self,
        application: dict[str, Any],
        as_of: datetime | str | None = None,
    ) -> RiskAssessment:
        """
        Run the full assessment pipeline on one application.

        Parameters
        ----------
        application : dict[str, Any]
            Loan application.
        as_of : datetime | str | None
            Reference date for age calculation. Defaults to now.

        Returns
        -------
        RiskAssessment
            Scores, factors, concentration, stress results, model outputs,
            validation, recommendation and pricing.

        Raises
        ------
        RiskAssessmentError
            If any stage fails; the failure is recorded in the audit trail.
        """
        started = time.perf_counter()
        assessment = RiskAssessment(
            id=generate_assessment_id(),
            application_id=application.get("id"),
            timestamp=utc_now().isoformat(),
            agent_id=self.agent_id,
            risk_thresholds=dict(self.risk_thresholds),
        )

        try:
            assessment.borrower_profile = create_borrower_profile(application, as_of=as_of)
            assessment.risk_scores = calculate_comprehensive_risk_scores(
                application, self.models, self.score_weights
            )
            assessment.risk_factors = analyze_detailed_risk_factors(application)
            assessment.concentration_analysis = analyze_concentration_risk(
                application,
                self.portfolio,
                self.exposure_limits,
                self.capital_base,
                correlation_model=self.models["correlation"],
            )
            assessment.stress_test_results = perform_application_stress_test(
                application,
                assessment.risk_scores,
                self.economic_scenarios,
                correlation=self.models["correlation"].calculate_asset_correlation(application),
                el_threshold=get_nested(self.config, "stress_test", "el_threshold", default=0.05),
                default_rate=get_nested(self.config, "pricing", "base_rate", default=0.08),
            )
            assessment.risk_scores["probability_weighted_loss"] = probability_weighted_loss(
                assessment.stress_test_results
            )
            assessment.model_outputs = self.generate_model_outputs(application)
            assessment.validation_results = asdict(validate_assessment(assessment))
            assessment.recommendation = generate_detailed_recommendation(assessment, self.risk_thresholds)
            assessment.pricing_adjustments = calculate_pricing_adjustments(assessment, self.config.get("pricing"))
        except (KeyError, TypeError, ValueError, ZeroDivisionError) as exc:
            self.audit_trail.record(RISK_ASSESSMENT_FAILED, {
                "assessment_id": assessment.id,
                "application_id": assessment.application_id,
                "error": str(exc),
            })
            raise RiskAssessmentError(
                f"Assessment of application {assessment.application_id} failed: {exc}",
                assessment_id=assessment.id,
            ) from exc

        self.audit_trail.record(RISK_ASSESSMENT_COMPLETED, {
            "assessment_id": assessment.id,
            "application_id": assessment.application_id,
            "overall_risk_score": assessment.risk_scores["overall"],
            "recommendation": assessment.decision,
            "execution_time_ms": (time.perf_counter() - started) * 1000,
        })

        return assessment

    def generate_model_outputs(self, application: dict[str, Any]) -> dict[str, Any]:
        credit_model = self.models["credit_score"]
        pd_model = self.models["pd"]
        lgd_model = self.models["lgd"]
        ead_model = self.models["ead"]

        return {
            "credit_score": {
                "predicted": credit_model.predict(application),
                "confidence": credit_model.get_confidence(application),
                "feature_importance": credit_model.get_feature_importance(),
            },
            "probability_of_default": {
                "predicted": pd_model.predict(application),
                "confidence": pd_model.get_confidence(application),
                "calibration": pd_model.get_calibration_metrics(),
                "baseline_rate": pd_model.baseline_rate(
                    (application.get("financial_info") or {}).get("credit_score")
                ),
            },
            "loss_given_default": {
                "predicted": lgd_model.predict(application),
                "confidence": lgd_model.get_confidence(application),
                "downturn_adjustment": lgd_model.get_downturn_adjustment(application),
            },
            "exposure_at_default": {
                "predicted": ead_model.predict(application),
                "confidence": ead_model.get_confidence(application),
                "utilization_factor": ead_model.get_utilization_factor(application),
            },
        }

    def book_loan(self, assessment: RiskAssessment, application: dict[str, Any], loan_id: str | None = None) -> str:
        """
        Add an assessed application to the portfolio.

        Returns
        -------
        str
            The loan id (the application id unless given).
        """
        loan_id = loan_id or assessment.application_id or assessment.id
        amount = (application.get("loan_details") or {}).get("loan_amount") or 0
        self.portfolio.add_loan(
            loan_id,
            amount,
            assessment.risk_scores,
            application,
            capital_requirement=assessment.capital_requirement,
        )
        self.audit_trail.record(LOAN_BOOKED, {"loan_id": loan_id, "exposure": amount})
        return loan_id

    def perform_portfolio_stress_test(
        self,
        scenarios: Iterable[EconomicScenario] | None = None,
    ) -> dict[str, dict[str, Any]]:
        """
        Stress the booked portfolio.

        Parameters
        ----------
        scenarios : Iterable[EconomicScenario] | None
            Scenarios to run. Defaults to the configured ones. Shocks are
            always measured against the configured baseline.
        """
        if scenarios is None:
            selected = self.economic_scenarios
        else:
            selected = {scenario.key: scenario for scenario in scenarios}

        results = perform_portfolio_stress_test(
            self.portfolio,
            selected,
            self.models["correlation"],
            provision_rate=get_nested(self.config, "stress_test", "provision_rate", default=0.02),
            failed_pd=get_nested(self.config, "stress_test", "failed_pd", default=0.5),
            max_loan_results=get_nested(self.config, "stress_test", "max_loan_results", default=100),
            baseline=self.economic_scenarios[BASELINE],
        )

        self.audit_trail.record(PORTFOLIO_STRESS_TEST_COMPLETED, {
            "scenario_count": len(selected),
            "portfolio_size": len(self.portfolio),
            "total_exposure": self.portfolio.total_exposure,
        })
        return results

    def get_audit_trail(
        self,
        action: str | None = None,
        date_from: str | datetime | None = None,
        date_to: str | datetime | None = None,
    ) -> list[dict[str, Any]]:
        return self.audit_trail.filter(action=action, date_from=date_from, date_to=date_to)

    def get_status(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "name": self.name,
            "capabilities": list(self.capabilities),
            "status": "ACTIVE",
            "last_activity": self.audit_trail.last_timestamp,
            "total_assessments": self.audit_trail.count(RISK_ASSESSMENT_COMPLETED),
            "portfolio_size": len(self.portfolio),
            "total_exposure": self.portfolio.total_exposure,
            "risk_weighted_assets": self.portfolio.risk_weighted_assets,
            "model_status": {
                name: "ACTIVE" if model.is_calibrated else "INACTIVE"
                for name, model in self.models.items()
            },
        }
