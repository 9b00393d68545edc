"""Credit risk assessment.

Public API:
- CreditRiskAgent: full assessment pipeline and portfolio stress testing
- RiskAssessment: assessment container
- Portfolio: booked loans
- EconomicScenario, apply_stress_scenario: stress testing primitives
- calculate_comprehensive_risk_scores: weighted scoring
"""

from .agent import CreditRiskAgent
from .assessment import RiskAssessment
from .portfolio import Portfolio
from .scores import calculate_comprehensive_risk_scores
from .stress import EconomicScenario, apply_stress_scenario

__all__ = [
    "CreditRiskAgent",
    "RiskAssessment",
    "Portfolio",
    "calculate_comprehensive_risk_scores",
    "EconomicScenario",
    "apply_stress_scenario",
]
