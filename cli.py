"""
CLI entry point for relnote-audit. Wires the pipeline: load config -> ingest -> resolve -> check -> report
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
import webbrowser
from datetime import datetime, timezone

from config.loader import load_project, load_tickets, load_trackers, tracker_for
from correlate.resolver import resolve_queries
from errors import ReleaseNotesError
from ingest import fetch_tickets, fetch_single
from normalize.models import Service
from report.renderer import render
from scoring.metrics import analyze_status, combined_releases
from scoring.checks import check_ticket

logger = logging.getLogger(__name__)

EXTENSIONS = {"html": "html", "htm": "html", "md": "md", "markdown": "md", "csv": "csv", "json": "json"}


def _print_json(obj):
    print(json.dumps(obj, indent=2, default=str))


def _open_file_in_browser(path: str):
    """Open a file URL in the system default web browser."""
    webbrowser.open("file://" + os.path.abspath(path))


def _write_report_file(path: str, content: str, open_html: bool = False) -> str:
    """Write the rendered content to a file and optionally open HTML in the browser."""
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    # newline='' is safe for CSV on Windows and harmless for other formats
    with open(path, 'w', encoding='utf-8', newline='') as fh:
        fh.write(content)
    print(f"Wrote report to {path}")
    if open_html:
        try:
            _open_file_in_browser(path)
        except webbrowser.Error:
            print('Failed to open browser automatically; file saved at', path)
    return path


def write_output(fmt: str, rendered: str, args):
    """Write output to file or stdout and optionally open HTML in browser."""
    ext = EXTENSIONS.get(fmt)
    if ext is None:
        print(rendered)
        return
    out_path = args.out_file.strip() or f"status_report_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.{ext}"
    _write_report_file(out_path, rendered, open_html=(args.open and ext == "html"))


def _load_config(args, parser):
    """Load trackers and queries either from a project directory or from explicit files."""
    if args.project:
        return load_project(args.project)
    if not (args.trackers and args.tickets):
        parser.error('Provide --project DIR or both --trackers and --tickets')
    return load_trackers(args.trackers), load_tickets(args.tickets)


def run_status(args, parser) -> str:
    """Execute load -> fetch -> resolve -> check and return the rendered report."""
    trackers, arena = _load_config(args, parser)
    tickets, searches = fetch_tickets(arena, trackers)
    resolved = resolve_queries(arena, tickets, searches)
    logger.info("Resolved %d tickets from %d queries", len(resolved), len(arena.configured()))
    report = analyze_status(resolved)
    return render(report, fmt=args.output)


def run_ticket(args) -> dict:
    """Fetch a single ticket and return it together with its checks."""
    service = Service.parse(args.tracker)
    trackers = load_trackers(args.trackers)
    instance = tracker_for(trackers, service)
    if args.host:
        instance = dataclasses.replace(instance, host=args.host)
    ticket = fetch_single(args.key, instance, api_key=args.api_key)
    releases = combined_releases([ticket])
    checks = check_ticket(ticket, releases[0] if releases else None)
    return {'ticket': ticket.to_dict(), 'checks': checks.to_dict()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="relnote-audit", description="Check the release notes status of tracker tickets")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Fetch all configured tickets and report their release notes status")
    status.add_argument("--project", type=str, default="", help="Directory with trackers.yaml and tickets.yaml")
    status.add_argument("--trackers", type=str, default="", help="Path to the trackers configuration file")
    status.add_argument("--tickets", type=str, default="", help="Path to the tickets configuration file")
    status.add_argument("--output", type=str, default="html", help="Output format (html, md, csv, json, text)")
    status.add_argument("--out-file", type=str, default="", help="Output file path. If omitted a default name will be used")
    status.add_argument("--open", action="store_true", help="Open the generated HTML report in the default browser")

    ticket = sub.add_parser("ticket", help="Fetch a single ticket and print it with its checks as JSON")
    ticket.add_argument("--tracker", type=str, required=True, help="Issue tracker: jira, bugzilla or BZ")
    ticket.add_argument("--key", type=str, required=True, help="Ticket key or bug ID")
    ticket.add_argument("--trackers", type=str, required=True, help="Path to the trackers configuration file (for field names)")
    ticket.add_argument("--host", type=str, default="", help="Override the tracker host URL")
    ticket.add_argument("--api-key", type=str, default="", help="API key (or set BZ_API_KEY / JIRA_API_KEY)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(asctime)s %(levelname)s %(message)s")

    try:
        if args.command == "ticket":
            _print_json(run_ticket(args))
        else:
            rendered = run_status(args, parser)
            write_output((args.output or "html").lower(), rendered, args)
    except (ReleaseNotesError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
