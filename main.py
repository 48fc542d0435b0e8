import argparse
import getpass
import json
import logging
import sys

from safetykit.cache import MemoryCache, SqliteCache
from safetykit.collectors.certificate import inspect_certificate
from safetykit.collectors.connection import check_connection
from safetykit.collectors.passwords import check_password_breach, password_strength
from safetykit.config import DEFAULT_CACHE_FILE, Settings
from safetykit.engine import SafetyScanner
from safetykit.errors import ConfigurationError, SafetyKitError
from safetykit.report_generator import generate_html_report

EXIT_USER_ERROR = 2
EXIT_CONFIG_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="safetykit",
        description="Check links, email addresses and email headers for phishing risk.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan a URL, an email address or raw email headers.")
    scan.add_argument("input", nargs="?", help="Target to scan. Reads stdin when omitted.")
    scan.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    scan.add_argument("--html", metavar="PATH", help="Also write an HTML report.")
    scan.add_argument("--no-cache", action="store_true", help="Ignore cached results.")

    sub.add_parser("password", help="Rate a password and check whether it appears in known breaches.")

    cert = sub.add_parser("cert", help="Inspect a domain's TLS certificate.")
    cert.add_argument("domain")

    sub.add_parser("whoami", help="Show the public IP and location of this connection.")
    return parser


def _print_report(report) -> None:
    v = report.verdict
    print(f"\n=== {v.type.value.upper()} ===")
    if v.score is not None:
        print(f"Risk score: {v.score}/100")
    print(v.summary)
    print(f"Potential harm: {v.harm_explanation}")
    print(f"Advice: {v.advice}")
    for r in v.reasons:
        print(f" - {r}")
    unavailable = getattr(report.signals, "unavailable", None)
    if unavailable:
        print(f"(checks unavailable: {', '.join(unavailable)})")
    if report.cached:
        print("(cached result)")


def cmd_scan(args, settings: Settings) -> int:
    raw = args.input if args.input is not None else sys.stdin.read()
    cache = SqliteCache(settings.cache_path or DEFAULT_CACHE_FILE, settings.cache_ttl_hours) \
        if not args.no_cache else MemoryCache()

    report = SafetyScanner(settings, cache=cache).scan(raw, use_cache=not args.no_cache)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_report(report)
    if args.html:
        generate_html_report(report, args.html)
        print(f"HTML report written to {args.html}")
    return 0


def cmd_password(args, settings: Settings) -> int:
    password = getpass.getpass("Password to check: ")
    strength = password_strength(password)
    print(f"Strength: {strength.label} ({strength.score}/4)")
    for scenario, display in strength.crack_times.items():
        print(f"  {scenario.replace('_', ' ')}: {display}")
    if strength.warning:
        print(f"Warning: {strength.warning}")
    for s in strength.suggestions:
        print(f" - {s}")

    count = check_password_breach(password, settings)
    if count:
        print(f"Found in {count:,} breaches. Do not use this password.")
    else:
        print("Not found in known breaches.")
    return 0


def cmd_cert(args, settings: Settings) -> int:
    detail = inspect_certificate(args.domain, settings)
    print(json.dumps(detail.to_dict(), indent=2))
    return 0


def cmd_whoami(args, settings: Settings) -> int:
    info = check_connection(settings)
    print(json.dumps(info.to_dict(), indent=2))
    return 0


COMMANDS = {
    "scan": cmd_scan,
    "password": cmd_password,
    "cert": cmd_cert,
    "whoami": cmd_whoami,
}


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = Settings.from_env()
        return COMMANDS[args.command](args, settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except SafetyKitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USER_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
