"""Watchlist loading.

Watchlists are JSON arrays. Each element is either a bare name or an
entry object with at least a ``name`` field (sanctions entries also
carry the issuing ``list``, e.g. ``"OFAC"``).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

WATCHLIST_FILES = {
    "pep": "pep.json",
    "sanctions": "sanctions.json",
    "adverse": "adverse_media.json",
}


def normalize_entries(raw: list[Any]) -> list[dict[str, Any]]:
    """Turn a decoded watchlist into a list of entry dicts.

    Bare strings become ``{"name": s}``; entries without a name are dropped.
    """
    entries: list[dict[str, Any]] = []
    for item in raw:
        if isinstance(item, str):
            entries.append({"name": item})
        elif isinstance(item, dict) and item.get("name"):
            entries.append(dict(item))
        else:
            logger.debug("Skipping watchlist item without a name: %r", item)
    return entries


def load_watchlist(path: str | Path) -> list[dict[str, Any]]:
    """
    Load a single watchlist file.

    A missing or undecodable file is logged and yields an empty list, so
    screening still runs against whatever lists are available.

    Parameters
    ----------
    path : str | Path
        Path to a JSON array.

    Returns
    -------
    list[dict[str, Any]]
        Watchlist entries.
    """
    path = Path(path)

    try:
        with open(path, "r") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error(f"Failed to load watchlist {path}: {exc}")
        return []

    if not isinstance(raw, list):
        logger.error(f"Watchlist {path} is not a JSON array")
        return []

    entries = normalize_entries(raw)
    logger.info(f"Loaded {len(entries)} watchlist entries from {path}")
    return entries


def load_watchlists(directory: str | Path) -> dict[str, list[dict[str, Any]]]:
    """
    Load the PEP, sanctions and adverse media lists from a directory.

    Returns
    -------
    dict[str, list[dict[str, Any]]]
        Keys ``pep``, ``sanctions`` and ``adverse``.
    """
    directory = Path(directory)
    return {key: load_watchlist(directory / filename) for key, filename in WATCHLIST_FILES.items()}


def empty_watchlists() -> dict[str, list[dict[str, Any]]]:
    """Watchlists with no entries."""
    return {key: [] for key in WATCHLIST_FILES}
