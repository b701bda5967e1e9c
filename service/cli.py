# service/cli.py
"""
User-facing command-line entrypoints.

Subcommands
-----------
run [--kwargs k=v ...] [--out-json PATH] [--out-report PATH] [--print-report]
    - Runs modules.grad_watch once
    - Writes the JSON feed and the Markdown report
    - Prints a one-line summary (and the report with --print-report)

check-portals
    - Fetches only the direct company portals and prints a JSON summary per portal

list-sources
    - Loads the seed list and prints one row per company

validate-config
    - Builds settings, loads the seed list, reports configuration gaps; nonzero on error
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
import uuid
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from modules.grad_watch import main as _grad_watch
from modules.grad_watch.lib import providers as _providers
from modules.grad_watch.lib.config import ConfigError, Settings
from modules.grad_watch.lib.models import Provider
from service import logging_utils as L

LOG = logging.getLogger("service.cli")

DEFAULT_OUT_JSON = "data/eu_roles.json"
DEFAULT_OUT_REPORT = "README.md"


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging() -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.INFO),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


# -------------------------- Utility / glue code ------------------------------
def _parse_kv_pairs(pairs: Iterable[str]) -> dict[str, Any]:
    """
    Parse key=value strings into a dict.
    - Values that look like JSON (true/false/null/number/object/array) are parsed.
    - Otherwise keep as raw strings.
    """
    out: dict[str, Any] = {}
    for raw in pairs:
        if "=" not in raw:
            raise argparse.ArgumentTypeError(f"--kwargs item must be key=value (got {raw!r})")
        k, v = raw.split("=", 1)
        k = k.strip()
        v = v.strip()
        if not k:
            raise argparse.ArgumentTypeError(f"Invalid key in --kwargs item {raw!r}")
        try:
            out[k] = json.loads(v)
        except ValueError:
            out[k] = v
    return out


def _print_table(rows: Iterable[tuple[str, str]], headers: tuple[str, str] = ("ID", "DETAILS")) -> None:
    """Very simple two-column table printer."""
    rows = list(rows)
    w0 = max(len(headers[0]), *(len(r[0]) for r in rows)) if rows else len(headers[0])
    w1 = max(len(headers[1]), *(len(r[1]) for r in rows)) if rows else len(headers[1])
    sep = f"+-{'-' * w0}-+-{'-' * w1}-+"
    print(sep)
    print(f"| {headers[0].ljust(w0)} | {headers[1].ljust(w1)} |")
    print(sep)
    for c0, c1 in rows:
        print(f"| {c0.ljust(w0)} | {c1.ljust(w1)} |")
    print(sep)


def _write_text(path: str, text: str) -> Path:
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    return out


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


def _settings_from_args(args: argparse.Namespace) -> Settings:
    kwargs = _parse_kv_pairs(getattr(args, "kwargs", None) or [])
    if args.companies:
        kwargs["companies_path"] = args.companies
    return Settings.from_env_and_kwargs(kwargs)


# ------------------------------ Subcommands ----------------------------------
def cmd_run(args: argparse.Namespace) -> int:
    run_id = uuid.uuid4().hex
    start_time = time.monotonic()

    kwargs = _parse_kv_pairs(args.kwargs or [])
    if args.companies:
        kwargs["companies_path"] = args.companies
    LOG.debug("Run grad_watch with kwargs=%s", kwargs)

    try:
        report, meta = _grad_watch.run(**kwargs)

        json_path = _write_text(args.out_json, json.dumps(meta["payload"], indent=2, ensure_ascii=False) + "\n")
        report_path = _write_text(args.out_report, report)

        L.write_activity_log({
            "ts": _now_iso(),
            "event": "cli_run",
            "run_id": run_id,
            "count": meta["count"],
            "failures": len(meta["failures"]),
            "gaps": len(meta["gaps"]),
            "out_json": str(json_path),
            "out_report": str(report_path),
            "kwargs": kwargs,
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })

        if args.print_report:
            print("\n----- REPORT -----\n")
            print(report)
        degraded = f" ({len(meta['failures'])} source(s) failed)" if meta["failures"] else ""
        print(f"DONE: {meta['count']} roles written to {json_path} and {report_path}{degraded}.")

        if meta["used_example"]:
            print(f"\nNo seed list at {kwargs.get('companies_path') or 'data/companies.json'}; used {meta['companies_path']}.")
            print("Create data/companies.json with entries like the example to control sources.")
        return 0

    except KeyboardInterrupt:
        return 130
    except Exception as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": "cli.run",
            "run_id": run_id,
            "kwargs": kwargs,
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        return 1


def cmd_check_portals(args: argparse.Namespace) -> int:
    """Smoke-test each direct portal; prints [{portal, count, sample} | {portal, error}]."""
    out: list[dict[str, Any]] = []
    names = list(args.portal or _providers.all_portals().keys())
    for name in names:
        try:
            adapter = _providers.get_portal(name)()
        except KeyError as e:
            out.append({"portal": name, "error": str(e)})
            continue
        try:
            items = adapter.fetch(name)
            out.append({
                "portal": name,
                "count": len(items),
                "sample": [
                    {"id": p.id, "title": p.title, "location": p.location, "url": p.apply_url}
                    for p in items[:3]
                ],
            })
        except Exception as e:
            out.append({"portal": name, "error": str(e)})
        finally:
            adapter.close()
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


def cmd_list_sources(args: argparse.Namespace) -> int:
    try:
        seed = _settings_from_args(args).seed_list()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    if not seed.companies:
        print(f"No companies found in {seed.path}.")
        return 0
    _print_table(((c.name, c.label) for c in seed.companies), headers=("COMPANY", "SOURCE"))
    return 0


def cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        settings = _settings_from_args(args)
        seed = settings.seed_list()
    except KeyboardInterrupt:
        return 130
    except ConfigError as e:
        LOG.error("Configuration validation failed: %s", e)
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 1

    known = set(_providers.all_providers())
    portals = set(_providers.all_portals())
    gaps: list[tuple[str, str]] = []
    for c in seed.companies:
        if not c.provider or not c.identifier:
            gaps.append((c.name or "?", "missing provider or identifier"))
        elif c.provider == Provider.DIRECT.value and c.identifier.lower() not in portals:
            gaps.append((c.name, f"unknown direct portal {c.identifier!r}"))
        elif c.provider != Provider.DIRECT.value and c.provider not in known:
            gaps.append((c.name, f"unknown provider {c.provider!r}"))
    for name in settings.direct_portals:
        if name not in portals:
            gaps.append((name, "unknown direct portal"))

    if gaps:
        print(f"WARNING: {len(gaps)} source(s) will be skipped:")
        _print_table(gaps, headers=("SOURCE", "REASON"))
    note = " (example list)" if seed.used_example else ""
    print(f"OK: {len(seed.companies)} companies in {seed.path}{note}.")
    return 0


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="EU new-grad role tracker",
    )
    p.add_argument(
        "--companies",
        help="Path to the seed list (fallbacks to GRAD_WATCH_COMPANIES env or data/companies.json).",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # run
    sp = sub.add_parser("run", help="Fetch, filter and write the feed and report.")
    sp.add_argument(
        "--kwargs",
        metavar="k=v",
        nargs="*",
        help="Settings overrides, e.g. max_age_days=7 region_keywords='[\"paris\"]' (JSON values supported).",
    )
    sp.add_argument("--out-json", default=DEFAULT_OUT_JSON, help=f"JSON feed path (default {DEFAULT_OUT_JSON}).")
    sp.add_argument(
        "--out-report", default=DEFAULT_OUT_REPORT, help=f"Markdown report path (default {DEFAULT_OUT_REPORT})."
    )
    sp.add_argument("--print-report", action="store_true", help="Also print the Markdown report to stdout.")
    sp.set_defaults(func=cmd_run)

    # check-portals
    sp = sub.add_parser("check-portals", help="Query the direct company portals and print a sample.")
    sp.add_argument("portal", nargs="*", help="Portal names (default: all registered).")
    sp.set_defaults(func=cmd_check_portals)

    # list-sources
    sp = sub.add_parser("list-sources", help="Print the companies in the seed list.")
    sp.set_defaults(func=cmd_list_sources)

    # validate-config
    sp = sub.add_parser("validate-config", help="Verify settings and the seed list.")
    sp.add_argument("--kwargs", metavar="k=v", nargs="*", help="Settings overrides to validate.")
    sp.set_defaults(func=cmd_validate_config)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
