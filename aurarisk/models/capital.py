"""Basel IRB capital requirement."""
from __future__ import annotations

import logging

import numpy as np
from scipy import stats as scipy_stats

logger = logging.getLogger(__name__)


def capital_requirement(
    pd_: float,
    lgd: float,
    correlation: float,
    confidence: float = 0.999,
) -> float:
    """
    Unexpected-loss capital per unit of exposure (Basel IRB, no maturity adjustment).

    Formula:
        K = LGD * [ N( (G(PD) + sqrt(R) * G(q)) / sqrt(1 - R) ) - PD ]

    where N is the standard normal CDF, G its inverse and q the
    confidence level.

    Parameters
    ----------
    pd_ : float
        Probability of default in (0, 1).
    lgd : float
        Loss given default in [0, 1].
    correlation : float
        Asset correlation R in [0, 1).
    confidence : float, default 0.999
        Regulatory confidence level.

    Returns
    -------
    float
        Capital as a fraction of EAD, floored at 0. PD of 0 gives 0;
        PD of 1 gives 0 because the loss is fully expected.

    Examples
    --------
    >>> capital_requirement(0.01, 0.45, 0.15)
    0.0451  # Approximately
    """
    if not 0 < confidence < 1:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    if not 0 <= correlation < 1:
        raise ValueError(f"correlation must be in [0, 1), got {correlation}")

    if pd_ <= 0 or pd_ >= 1:
        return 0.0

    numerator = scipy_stats.norm.ppf(pd_) + np.sqrt(correlation) * scipy_stats.norm.ppf(confidence)
    conditional_pd = scipy_stats.norm.cdf(numerator / np.sqrt(1 - correlation))
    return float(max(0.0, lgd * (conditional_pd - pd_)))
