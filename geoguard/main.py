"""Command-line entrypoint for geoguard."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Sequence

from geoguard.export.activity import log_activity
from geoguard.intel.geo import get_geo_location
from geoguard.intel.risk import check_ip_security

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geoguard",
        description="Geolocate IP addresses and score them for login risk.",
    )
    parser.add_argument("ips", nargs="+", metavar="IP", help="IP address to evaluate")
    parser.add_argument("--json", action="store_true", help="print one JSON object per IP")
    parser.add_argument("--timeout", type=float, default=None, help="lookup timeout in seconds")
    parser.add_argument("--endpoint", default=None, help="lookup URL template containing {ip}")
    parser.add_argument("--activity-log", default=None, help="record each check in this JSON-lines activity log")
    parser.add_argument("-v", "--verbose", action="store_true", help="log lookups at INFO level")
    return parser


def _format_text(ip: str, verdict: dict) -> str:
    line = f"{ip}: {verdict['risk_level']}"
    if verdict["reasons"]:
        line += " (" + "; ".join(verdict["reasons"]) + ")"
    return line


def main(argv: Sequence[str] | None = None) -> int:
    """Application entrypoint."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    for ip in args.ips:
        location = get_geo_location(ip, timeout_seconds=args.timeout, endpoint=args.endpoint)
        verdict = check_ip_security(location).to_dict()
        record = {"ip": ip, "location": location.to_dict(), **verdict}
        if args.activity_log:
            log_activity("ip_check", ip, "geoguard-cli", location, verdict, path=args.activity_log)
        if args.json:
            print(json.dumps(record, ensure_ascii=False))
        else:
            print(_format_text(ip, verdict))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
