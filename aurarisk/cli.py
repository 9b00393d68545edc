"""Command line entry point.

    aurarisk assess application.json [--watchlists DIR] [--config FILE] [--as-of DATE]

Prints the validation, assessment and compliance results as JSON.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

import yaml

from .compliance import ComplianceAgent
from .credit import CreditRiskAgent
from .data import load_application, load_config, load_watchlists
from .errors import ComplianceError, RiskAssessmentError
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aurarisk", description="Loan application risk and compliance review")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    assess = sub.add_parser("assess", help="Assess one application")
    assess.add_argument("application", help="Application JSON file")
    assess.add_argument("--watchlists", help="Directory holding pep.json, sanctions.json, adverse_media.json")
    assess.add_argument(
        "--config",
        help="YAML file with 'credit_risk' and/or 'compliance' sections overriding the defaults",
    )
    assess.add_argument("--as-of", dest="as_of", help="Reference date (YYYY-MM-DD)")
    return parser


def assess(args: argparse.Namespace) -> int:
    watchlists = load_watchlists(args.watchlists) if args.watchlists else None

    try:
        overrides = load_config(args.config) if args.config else {}
        application = load_application(args.application)

        credit_agent = CreditRiskAgent(overrides.get("credit_risk"))
        compliance_agent = ComplianceAgent(overrides.get("compliance"), watchlists=watchlists)
        result = run_pipeline(application, credit_agent, compliance_agent, as_of=args.as_of)
    except (FileNotFoundError, ValueError, yaml.YAMLError, RiskAssessmentError, ComplianceError) as exc:
        logger.error(str(exc))
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2, default=str, allow_nan=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "assess":
        return assess(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
