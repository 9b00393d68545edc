"""Name screening against watchlists.

Names are compared case-insensitively as ``"first last"``. Exact
matches carry confidence 1.0; near matches are scored with a
normalised Levenshtein similarity.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)

EXACT_MATCH = "EXACT_MATCH"
FUZZY_MATCH = "FUZZY_MATCH"


@dataclass
class ScreeningResult:
    """Matches found for one applicant against one watchlist."""

    matches: list[dict[str, Any]] = field(default_factory=list)
    fuzzy_matches: list[dict[str, Any]] = field(default_factory=list)

    @property
    def hit(self) -> bool:
        return bool(self.matches or self.fuzzy_matches)

    def to_dict(self) -> dict[str, Any]:
        return {"matches": self.matches, "fuzzy_matches": self.fuzzy_matches}


def levenshtein_distance(a: str, b: str) -> int:
    """
    Edit distance between two strings.

    Examples
    --------
    >>> levenshtein_distance("kitten", "sitting")
    3
    """
    rows, cols = len(b) + 1, len(a) + 1
    matrix = np.zeros((rows, cols), dtype=int)
    matrix[:, 0] = np.arange(rows)
    matrix[0, :] = np.arange(cols)

    for i in range(1, rows):
        for j in range(1, cols):
            if b[i - 1] == a[j - 1]:
                matrix[i, j] = matrix[i - 1, j - 1]
            else:
                matrix[i, j] = 1 + min(
                    matrix[i - 1, j - 1],  # substitution
                    matrix[i, j - 1],  # insertion
                    matrix[i - 1, j],  # deletion
                )

    return int(matrix[-1, -1])


def fuzzy_match(a: str, b: str) -> float:
    """
    Similarity in [0, 1] derived from edit distance.

    Formula:
        sim = (len(longer) - distance) / len(longer)

    Two empty strings are identical (1.0).
    """
    longer, shorter = (a, b) if len(a) > len(b) else (b, a)
    if len(longer) == 0:
        return 1.0
    return (len(longer) - levenshtein_distance(longer, shorter)) / len(longer)


def full_name(personal_info: dict[str, Any]) -> str:
    first = personal_info.get("first_name") or ""
    last = personal_info.get("last_name") or ""
    return f"{first} {last}".strip().lower()


def screen_against_watchlist(
    personal_info: dict[str, Any],
    watchlist: list[dict[str, Any]],
    threshold: float = 0.8,
) -> ScreeningResult:
    """
    Screen an applicant's name against a watchlist.

    Parameters
    ----------
    personal_info : dict[str, Any]
        Applicant details with ``first_name`` and ``last_name``.
    watchlist : list[dict[str, Any]]
        Entries with a ``name`` field.
    threshold : float, default 0.8
        Similarity a near match must exceed.

    Returns
    -------
    ScreeningResult
        Exact and fuzzy matches, each ``{type, confidence, entry}``.
    """
    result = ScreeningResult()
    name = full_name(personal_info)
    if not name:
        logger.warning("Screening skipped: applicant has no name")
        return result

    for entry in watchlist:
        candidate = str(entry.get("name", "")).strip().lower()
        if not candidate:
            continue

        if candidate == name:
            result.matches.append({"type": EXACT_MATCH, "confidence": 1.0, "entry": entry})
            continue

        similarity = fuzzy_match(name, candidate)
        if similarity > threshold:
            result.fuzzy_matches.append({"type": FUZZY_MATCH, "confidence": similarity, "entry": entry})

    logger.debug(
        "Screened '%s' against %d entries: %d exact, %d fuzzy",
        name, len(watchlist), len(result.matches), len(result.fuzzy_matches),
    )
    return result
