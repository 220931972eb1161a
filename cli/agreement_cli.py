"""
Command line front end for the agreement pipeline.

    python -m cli.agreement_cli generate request.json --output agreement.pdf
    python -m cli.agreement_cli validate request.json
    python -m cli.agreement_cli duration 2024-01-01 2025-03-15
    python -m cli.agreement_cli costs 1000 --maintenance 200 --services services.json

Request files hold the same JSON body the HTTP API accepts (``landlord``,
``tenant``, ``property``, ``agreementDetails``, ``additionalServices``,
``familyMembers``).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from agreements import calculate_duration, calculate_total_costs, generate_agreement, validate_agreement_data


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _print(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _default_output(agreement_number: str) -> Path:
    return Path(f"rental_agreement_{agreement_number}.pdf")


def _cmd_generate(args: argparse.Namespace) -> int:
    request = _load_json(args.request)
    result = generate_agreement(
        request.get("landlord"),
        request.get("tenant"),
        request.get("property"),
        request.get("agreementDetails"),
        request.get("additionalServices"),
        request.get("familyMembers"),
    )
    payload = result.to_payload(include_pdf=False)
    if result.success and result.pdf_document is not None:
        target = Path(args.output) if args.output else _default_output(result.agreement_number)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.pdf_document)
        payload["pdfPath"] = str(target)
    _print(payload)
    return 0 if result.success else 1


def _cmd_validate(args: argparse.Namespace) -> int:
    request = _load_json(args.request)
    result = validate_agreement_data(
        request.get("landlord"),
        request.get("tenant"),
        request.get("property"),
        request.get("agreementDetails"),
        request.get("familyMembers"),
    )
    _print(result.to_payload())
    return 0 if result.is_valid else 1


def _cmd_duration(args: argparse.Namespace) -> int:
    try:
        breakdown = calculate_duration(args.start, args.end)
    except ValueError as exc:
        print(f"Invalid date: {exc}", file=sys.stderr)
        return 1
    _print(breakdown.to_payload())
    return 0


def _cmd_costs(args: argparse.Namespace) -> int:
    services: List[Dict[str, Any]] = _load_json(args.services) if args.services else []
    breakdown = calculate_total_costs(args.rent, args.maintenance, services)
    _print(breakdown.to_payload())
    return 0


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rental agreement generator")
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Validate a request and write the agreement PDF.")
    generate.add_argument("request", help="Path to the JSON request body.")
    generate.add_argument("--output", "-o", metavar="PATH", help="Where to write the PDF.")
    generate.set_defaults(handler=_cmd_generate)

    validate = sub.add_parser("validate", help="Report validation errors and warnings only.")
    validate.add_argument("request", help="Path to the JSON request body.")
    validate.set_defaults(handler=_cmd_validate)

    duration = sub.add_parser("duration", help="Break a date range into years, months and days.")
    duration.add_argument("start", help="Start date (YYYY-MM-DD).")
    duration.add_argument("end", help="End date (YYYY-MM-DD).")
    duration.set_defaults(handler=_cmd_duration)

    costs = sub.add_parser("costs", help="Compute monthly and yearly totals.")
    costs.add_argument("rent", type=float, help="Monthly rent amount.")
    costs.add_argument("--maintenance", type=float, default=0.0, help="Monthly maintenance charges.")
    costs.add_argument("--services", metavar="FILE", help="JSON list of additional services.")
    costs.set_defaults(handler=_cmd_costs)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
