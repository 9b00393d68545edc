"""Compliance screening.

Public API:
- ComplianceAgent: runs every check and folds them into one verdict
- perform_kyc_check, perform_aml_check, perform_sanctions_check,
  perform_fair_lending_check, perform_regulatory_check: individual checks
- screen_against_watchlist: exact and fuzzy name screening
"""

from .agent import ComplianceAgent
from .aml import perform_aml_check
from .fair_lending import perform_fair_lending_check
from .kyc import perform_kyc_check
from .regulatory import perform_regulatory_check
from .results import ComplianceCheck
from .sanctions import perform_sanctions_check
from .screening import ScreeningResult, fuzzy_match, screen_against_watchlist

__all__ = [
    "ComplianceAgent",
    "ComplianceCheck",
    "ScreeningResult",
    "fuzzy_match",
    "perform_aml_check",
    "perform_fair_lending_check",
    "perform_kyc_check",
    "perform_regulatory_check",
    "perform_sanctions_check",
    "screen_against_watchlist",
]
