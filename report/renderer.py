"""
Report renderer: generate the release notes status table as HTML, Markdown, CSV, JSON or text.
HTML uses the Jinja2 template report/templates/status-table.html.j2 when Jinja2 is available.
"""

from typing import List
from html import escape
import os
import importlib.util
import json
import io
import csv

from scoring.metrics import StatusReport

TEMPLATE_NAME = 'status-table.html.j2'

CSV_HEADER = ['tracker', 'key', 'summary', 'docs_contact', 'assignee', 'doc_type', 'doc_text_status', 'target_releases', 'subsystems', 'components', 'overall', 'message']


def render_text(report: StatusReport) -> str:
    """Render a plain-text summary of the overall progress."""
    p = report.overall_progress
    lines = [
        f"Products: {report.products}",
        f"Release: {report.release}",
        f"Release notes: {p.all}",
        f"Complete: {p.complete} ({p.complete_pct:.0f}%)",
        f"Warnings: {p.warnings} ({p.warnings_pct:.0f}%)",
        f"Incomplete: {p.incomplete} ({p.incomplete_pct:.0f}%)",
    ]
    return "\n".join(lines)


def render_markdown(report: StatusReport) -> str:
    p = report.overall_progress
    md = []
    md.append(f"# Release notes status: {report.products} {report.release}\n")
    md.append(f"- Complete: **{p.complete}** ({p.complete_pct:.0f}%)")
    md.append(f"- Warnings: **{p.warnings}** ({p.warnings_pct:.0f}%)")
    md.append(f"- Incomplete: **{p.incomplete}** ({p.incomplete_pct:.0f}%)")
    md.append("\n## Writers\n")
    md.append("| Writer | Total | Complete | Warnings | Incomplete | % |")
    md.append("|---|---|---|---|---|---|")
    for w in report.per_writer_stats:
        md.append(f"| {w.name} | {w.total} | {w.complete} | {w.warnings} | {w.incomplete} | {w.percent():.0f} |")
    md.append("\n## Tickets\n")
    md.append("| Ticket | Summary | Docs contact | Status |")
    md.append("|---|---|---|---|")
    for ticket, checks in report.tickets_with_checks:
        md.append(f"| [{ticket.id}]({ticket.url}) | {ticket.summary} | {ticket.docs_contact_short()} | {checks.overall().message} |")
    md.append(f"\n_Generated on {report.generated_date}_")
    return "\n".join(md)


def _ticket_csv_row(ticket, checks) -> list:
    overall = checks.overall()
    return [
        ticket.id.tracker.value,
        ticket.id.key,
        ticket.summary,
        ticket.docs_contact.as_str(),
        ticket.assignee or '',
        ticket.doc_type or '',
        str(ticket.doc_text_status),
        ticket.display_target_releases(),
        ticket.display_subsystems(),
        ticket.display_components(),
        overall.severity.name,
        overall.message,
    ]


def render_csv(report: StatusReport) -> str:
    """Render one CSV row per ticket with a header."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for ticket, checks in report.tickets_with_checks:
        writer.writerow(_ticket_csv_row(ticket, checks))
    return output.getvalue()


def render_json(report: StatusReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def _status_cell(status) -> str:
    return f"<td style=\"color: {status.color}\">{escape(status.message)}</td>"


def render_html_fallback(report: StatusReport) -> str:
    """Simple HTML renderer used when Jinja2 is not installed."""
    p = report.overall_progress
    html: List[str] = ["<html><body>"]
    html.append(f"<h1>Release notes status: {escape(report.products)} {escape(report.release)}</h1>")
    html.append(f"<p>Complete: {p.complete} ({p.complete_pct:.0f}%), warnings: {p.warnings} ({p.warnings_pct:.0f}%), incomplete: {p.incomplete} ({p.incomplete_pct:.0f}%)</p>")
    html.append("<table><tr><th>Writer</th><th>Total</th><th>Complete</th><th>%</th></tr>")
    for w in report.per_writer_stats:
        html.append(f"<tr><td>{escape(w.name)}</td><td>{w.total}</td><td>{w.complete}</td><td>{w.percent():.0f}</td></tr>")
    html.append("</table>")
    html.append("<table><tr><th>Ticket</th><th>Summary</th><th>Overall</th></tr>")
    for ticket, checks in report.tickets_with_checks:
        html.append(f"<tr><td><a href=\"{escape(ticket.url)}\">{escape(str(ticket.id))}</a></td><td>{escape(ticket.summary)}</td>{_status_cell(checks.overall())}</tr>")
    html.append("</table>")
    html.append(f"<p>Generated on {escape(report.generated_date)}</p>")
    html.append("</body></html>")
    return "\n".join(html)


def render_html(report: StatusReport) -> str:
    """Render the status table with Jinja2 when available, otherwise fall back to simple HTML."""
    if importlib.util.find_spec('jinja2') is None:
        return render_html_fallback(report)
    from jinja2 import Environment, FileSystemLoader, select_autoescape

    tmpl_dir = os.path.join(os.path.dirname(__file__), 'templates')
    env = Environment(loader=FileSystemLoader(tmpl_dir), autoescape=select_autoescape(['html', 'xml', 'j2']))
    tmpl = env.get_template(TEMPLATE_NAME)
    return tmpl.render(
        products=report.products,
        release=report.release,
        overall_progress=report.overall_progress,
        tickets_with_checks=report.tickets_with_checks,
        per_writer_stats=report.per_writer_stats,
        generated_date=report.generated_date,
    )


def render(report: StatusReport, fmt: str = 'text') -> str:
    """Main render function: dispatch on the output format name."""
    fmt_l = (fmt or 'text').lower()
    if fmt_l in ('md', 'markdown'):
        return render_markdown(report)
    if fmt_l == 'csv':
        return render_csv(report)
    if fmt_l in ('html', 'htm'):
        return render_html(report)
    if fmt_l == 'json':
        return render_json(report)
    return render_text(report)
