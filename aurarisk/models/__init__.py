"""Credit risk models.

Public API:
- CreditScoreModel: credit quality score in [0, 1]
- ProbabilityOfDefaultModel: logistic PD
- LossGivenDefaultModel: LGD with collateral recovery caps
- ExposureAtDefaultModel: EAD in currency units
- CorrelationModel: asset and industry correlations
- capital_requirement: Basel IRB capital per unit of EAD
"""

from .capital import capital_requirement
from .correlation import CorrelationModel
from .credit_score import CreditScoreModel
from .default import ProbabilityOfDefaultModel
from .exposure import ExposureAtDefaultModel
from .loss import LossGivenDefaultModel

__all__ = [
    "capital_requirement",
    "CorrelationModel",
    "CreditScoreModel",
    "ProbabilityOfDefaultModel",
    "ExposureAtDefaultModel",
    "LossGivenDefaultModel",
]
