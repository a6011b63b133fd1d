"""
安全掃描報告 - 從 SecurityScanResult 產生 Markdown / JSON / HTML 文字

- 發現依嚴重度排序：High → Medium → Low → Informational（同等級保留原順序）
- 沒有任何發現時輸出「未發現弱點」區塊，不輸出 Vulnerabilities 區塊

用法：
    from scanner.report import generate_report, render_html, render_json

    md = generate_report(result)
    html = render_html(result, title="OWASP ZAP Security Report")
"""

from __future__ import annotations

import html
import json
from datetime import datetime

from scanner.models import RiskLevel, SecurityScanResult, SecurityVulnerability

DEFAULT_TITLE = "OWASP Security Scan Report"
NO_ISSUES_HEADING = "✅ No vulnerabilities found!"

_RISK_ICON = {
    RiskLevel.HIGH: "🔴",
    RiskLevel.MEDIUM: "🟠",
    RiskLevel.LOW: "🟡",
    RiskLevel.INFORMATIONAL: "ℹ️",
}


def sort_by_severity(
    vulnerabilities: tuple[SecurityVulnerability, ...] | list[SecurityVulnerability],
) -> list[SecurityVulnerability]:
    """依嚴重度排序（sorted 本身是 stable）"""
    return sorted(vulnerabilities, key=lambda v: v.risk_level.severity)


def _format_date(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return timestamp


# ── Markdown ──

def generate_report(result: SecurityScanResult, title: str = DEFAULT_TITLE) -> str:
    """產生 Markdown 報告"""
    summary = result.summary
    lines = [
        f"# {title}",
        "",
        f"**Target URL:** {result.url}",
        f"**Scan Date:** {_format_date(result.timestamp)}",
        "",
        "## Summary",
        "",
        "| Risk Level | Count |",
        "|------------|-------|",
        f"| {_RISK_ICON[RiskLevel.HIGH]} High | {summary.high} |",
        f"| {_RISK_ICON[RiskLevel.MEDIUM]} Medium | {summary.medium} |",
        f"| {_RISK_ICON[RiskLevel.LOW]} Low | {summary.low} |",
        f"| {_RISK_ICON[RiskLevel.INFORMATIONAL]} Informational | {summary.informational} |",
        f"| **Total** | **{summary.total}** |",
        "",
    ]

    if not result.vulnerabilities:
        lines.extend([
            f"## {NO_ISSUES_HEADING}",
            "",
            "The security scan did not identify any obvious security issues.",
            "",
        ])
        return "\n".join(lines)

    lines.extend(["## Vulnerabilities", ""])
    for i, vuln in enumerate(sort_by_severity(result.vulnerabilities), 1):
        icon = _RISK_ICON[vuln.risk_level]
        lines.extend([
            f"### {i}. {icon} {vuln.name}",
            "",
            f"**Risk:** {vuln.risk} | **Confidence:** {vuln.confidence}",
            "",
            f"**Description:** {vuln.description}",
            "",
            f"**Solution:** {vuln.solution}",
            "",
        ])
        if vuln.reference:
            lines.extend([f"**Reference:** [{vuln.reference}]({vuln.reference})", ""])
        if vuln.cweid:
            lines.extend([f"**CWE ID:** {vuln.cweid}", ""])
        lines.extend(["---", ""])

    return "\n".join(lines)


# ── JSON ──

def render_json(result: SecurityScanResult, **extra) -> str:
    """產生 JSON 報告，extra 會合併到最上層（例如 generatedBy）"""
    data = result.to_dict()
    data["vulnerabilities"] = [
        v.to_dict() for v in sort_by_severity(result.vulnerabilities)
    ]
    data.update(extra)
    return json.dumps(data, indent=2, ensure_ascii=False)


# ── HTML ──

def render_html(result: SecurityScanResult, title: str = DEFAULT_TITLE) -> str:
    """產生獨立 HTML 報告（內嵌 CSS）"""
    sections = [
        _html_header(result, title),
        _html_stats(result),
        _html_findings(result),
    ]
    return _wrap_html(title, "\n".join(sections))


def _html_header(result: SecurityScanResult, title: str) -> str:
    return f"""
    <div class="header">
        <h1>🔒 {html.escape(title)}</h1>
        <div class="meta">
            <span>Target: <strong>{html.escape(result.url)}</strong></span>
            <span>Scan Date: {html.escape(_format_date(result.timestamp))}</span>
        </div>
    </div>
    """


def _html_stats(result: SecurityScanResult) -> str:
    summary = result.summary
    cards = [
        ("high", summary.high, "High"),
        ("medium", summary.medium, "Medium"),
        ("low", summary.low, "Low"),
        ("info", summary.informational, "Informational"),
        ("total", summary.total, "Total"),
    ]
    items = "".join(
        f"""
        <div class="stat-card {css}">
            <div class="stat-number">{count}</div>
            <div class="stat-label">{label}</div>
        </div>"""
        for css, count, label in cards
    )
    return f'<div class="stats-grid">{items}\n    </div>'


def _html_findings(result: SecurityScanResult) -> str:
    if not result.vulnerabilities:
        return f"""
    <div class="section ok">
        <h2>{NO_ISSUES_HEADING}</h2>
        <p>The security scan did not identify any obvious security issues.</p>
    </div>
    """

    rows = []
    for i, vuln in enumerate(sort_by_severity(result.vulnerabilities), 1):
        ref = html.escape(vuln.reference)
        rows.append(f"""
            <tr class="risk-{vuln.risk_level.bucket}">
                <td>{i}</td>
                <td><strong>{html.escape(vuln.name)}</strong></td>
                <td><span class="badge">{html.escape(vuln.risk)}</span></td>
                <td>{html.escape(vuln.confidence)}</td>
                <td>{html.escape(vuln.description)}</td>
                <td>{html.escape(vuln.solution)}</td>
                <td>{f'<a href="{ref}">{ref}</a>' if ref else '-'}</td>
                <td>{html.escape(vuln.cweid or '-')}</td>
            </tr>
            """)

    return f"""
    <div class="section">
        <h2>Vulnerabilities</h2>
        <table>
            <thead>
                <tr>
                    <th>#</th>
                    <th>Name</th>
                    <th>Risk</th>
                    <th>Confidence</th>
                    <th>Description</th>
                    <th>Solution</th>
                    <th>Reference</th>
                    <th>CWE</th>
                </tr>
            </thead>
            <tbody>
                {''.join(rows)}
            </tbody>
        </table>
    </div>
    """


def _wrap_html(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{html.escape(title)}</title>
<style>
    body {{ font-family: -apple-system, "Segoe UI", sans-serif; margin: 24px; color: #222; }}
    .header h1 {{ margin-bottom: 4px; }}
    .meta span {{ margin-right: 24px; color: #555; }}
    .stats-grid {{ display: flex; gap: 12px; margin: 20px 0; }}
    .stat-card {{ padding: 12px 20px; border-radius: 8px; background: #f3f4f6; text-align: center; }}
    .stat-card.high {{ background: #fde2e2; }}
    .stat-card.medium {{ background: #fff0d9; }}
    .stat-card.low {{ background: #fff9c4; }}
    .stat-number {{ font-size: 28px; font-weight: bold; }}
    table {{ border-collapse: collapse; width: 100%; }}
    th, td {{ border: 1px solid #ddd; padding: 6px 8px; vertical-align: top; text-align: left; }}
    tr.risk-high .badge {{ background: #d32f2f; }}
    tr.risk-medium .badge {{ background: #f57c00; }}
    tr.risk-low .badge {{ background: #fbc02d; }}
    tr.risk-informational .badge {{ background: #1976d2; }}
    .badge {{ color: #fff; padding: 2px 8px; border-radius: 4px; }}
    .section.ok {{ color: #2e7d32; }}
</style>
</head>
<body>
{body}
</body>
</html>
"""
