"""Sanctions list screening (OFAC, UN, EU, UK)."""
from __future__ import annotations

import logging
from typing import Any

from ..data.config import get_nested
from .results import CLEAR, REVIEW_REQUIRED, SanctionsResult
from .screening import EXACT_MATCH, screen_against_watchlist

logger = logging.getLogger(__name__)

DEFAULT_LISTS = ["OFAC", "UN", "EU", "UK"]


def entries_for_list(watchlist: list[dict[str, Any]], list_name: str) -> list[dict[str, Any]]:
    """Entries issued by ``list_name``. Untagged entries belong to every list."""
    return [
        entry for entry in watchlist
        if entry.get("list") is None or str(entry["list"]).upper() == list_name.upper()
    ]


def screen_against_sanctions_list(
    personal_info: dict[str, Any],
    watchlist: list[dict[str, Any]],
    list_name: str,
    threshold: float = 0.8,
) -> list[dict[str, Any]]:
    """Exact and fuzzy hits on one sanctions list, each tagged with ``list``."""
    result = screen_against_watchlist(personal_info, entries_for_list(watchlist, list_name), threshold)
    return [{**hit, "list": list_name} for hit in result.matches + result.fuzzy_matches]


def perform_sanctions_check(
    application: dict[str, Any],
    watchlists: dict[str, list[dict[str, Any]]],
    config: dict[str, Any] | None = None,
) -> SanctionsResult:
    """
    Screen the applicant against every configured sanctions list.

    Fuzzy hits below ``false_positive_confidence`` are set aside as likely
    false positives; they are reported but do not trigger review. An
    untagged entry that hits is reported once, under the first list.

    Returns
    -------
    SanctionsResult
        REVIEW_REQUIRED when any match remains, otherwise CLEAR.
    """
    config = config or {}
    personal_info = application.get("personal_info") or {}
    lists = get_nested(config, "sanctions", "lists", default=DEFAULT_LISTS)
    threshold = get_nested(config, "screening", "fuzzy_threshold", default=0.8)
    fp_confidence = get_nested(config, "screening", "false_positive_confidence", default=0.9)
    watchlist = watchlists.get("sanctions", [])

    sanctions = SanctionsResult(lists=list(lists))
    seen: set[int] = set()

    for list_name in lists:
        for hit in screen_against_sanctions_list(personal_info, watchlist, list_name, threshold):
            key = id(hit["entry"])
            if key in seen:
                continue
            seen.add(key)

            if hit["type"] != EXACT_MATCH and hit["confidence"] < fp_confidence:
                sanctions.false_positives.append(hit)
            else:
                sanctions.matches.append(hit)

    if sanctions.matches:
        sanctions.requires_review = True
        sanctions.status = REVIEW_REQUIRED
        logger.warning(
            f"Sanctions hits for application {application.get('id')}: "
            f"{[hit['list'] for hit in sanctions.matches]}"
        )
    else:
        sanctions.status = CLEAR

    return sanctions
