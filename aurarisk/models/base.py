"""Shared behaviour for the credit models."""
from __future__ import annotations

from typing import Any

from ..data.applications import section


class RiskModel:
    """Base class for a calibrated credit model.

    Subclasses set ``coefficients`` and ``performance`` in ``calibrate``
    and list the application fields they read in ``inputs`` as
    ``(section, key)`` pairs; a section of ``None`` means top level.
    """

    inputs: list[tuple[str | None, str]] = []

    def __init__(self) -> None:
        self.is_calibrated = False
        self.coefficients: dict[str, float] = {}
        self.performance: dict[str, float] = {}

    def calibrate(self) -> None:
        raise NotImplementedError

    def ensure_calibrated(self) -> None:
        if not self.is_calibrated:
            self.calibrate()

    def predict(self, application: dict[str, Any]) -> float:
        raise NotImplementedError

    def feature_completeness(self, application: dict[str, Any]) -> float:
        """Fraction of this model's inputs that the application supplies."""
        if not self.inputs:
            return 1.0

        present = 0
        for section_name, key in self.inputs:
            source = application if section_name is None else section(application, section_name)
            if source.get(key) is not None:
                present += 1
        return present / len(self.inputs)

    def get_confidence(self, application: dict[str, Any]) -> float:
        """Feature completeness scaled by the model's accuracy."""
        self.ensure_calibrated()
        return self.feature_completeness(application) * self.performance["accuracy"]

    def weighted_sum(self, features: dict[str, float | None]) -> float:
        """Sum of ``coefficient * value`` over features with a coefficient."""
        total = 0.0
        for feature, value in features.items():
            coefficient = self.coefficients.get(feature)
            if coefficient and value is not None:
                total += coefficient * value
        return total
