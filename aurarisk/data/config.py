"""Configuration loading utilities.

Agents read their thresholds, weights and stress scenarios from YAML.
Bundled defaults live in ``aurarisk/conf``; callers may load their own
file and merge it over the defaults.
"""
from __future__ import annotations

import copy
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

CONF_PACKAGE = "aurarisk.conf"


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Read agent overrides from a YAML file.

    The file holds the same sections as the bundled defaults, e.g.
    ``risk_thresholds`` or ``kyc``; the command line accepts one file with
    ``credit_risk`` and ``compliance`` sections.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If the top level of the file is not a mapping.
    yaml.YAMLError
        If the YAML cannot be parsed.

    Examples
    --------
    >>> overrides = load_config("review.yaml")
    >>> overrides["credit_risk"]["capital_base"]
    25000000
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {path} must hold a mapping, got {type(config).__name__}")
    return config


def load_default_config(name: str) -> dict[str, Any]:
    """
    Load one of the bundled configuration files.

    Parameters
    ----------
    name : str
        File stem under ``aurarisk/conf`` (``"compliance"`` or ``"credit_risk"``).

    Returns
    -------
    dict[str, Any]
        Configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If no bundled file has that name.
    """
    resource = resources.files(CONF_PACKAGE).joinpath(f"{name}.yaml")
    if not resource.is_file():
        raise FileNotFoundError(f"No bundled configuration named '{name}'")

    config = yaml.safe_load(resource.read_text())
    return config if config is not None else {}


def merge_config(base: dict[str, Any], overrides: dict[str, Any] | None) -> dict[str, Any]:
    """
    Recursively merge ``overrides`` over ``base``.

    Neither input is modified. Nested dicts are merged key by key; any
    other value in ``overrides`` replaces the base value outright.

    Examples
    --------
    >>> merge_config({"kyc": {"pass": 75, "conditional": 50}}, {"kyc": {"pass": 80}})
    {'kyc': {'pass': 80, 'conditional': 50}}
    """
    merged = copy.deepcopy(base)
    if not overrides:
        return merged

    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_nested(config: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """
    Walk ``keys`` down a config, returning ``default`` at the first gap.

    A key that leads to a non-mapping also counts as a gap, so
    ``get_nested(cfg, "aml", "lookback_days")`` is safe on a config whose
    ``aml`` section was overridden with a scalar.

    >>> get_nested({"stress_test": {"el_threshold": 0.05}}, "stress_test", "el_threshold")
    0.05
    """
    node: Any = config
    for key in keys:
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node
