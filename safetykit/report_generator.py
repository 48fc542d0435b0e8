# -*- coding: utf-8 -*-
"""
Report Generator Module.
Generate a standalone HTML report from one ScanReport.
"""
from __future__ import annotations

import html
from datetime import datetime
from pathlib import Path
from typing import Optional

from safetykit.header_analysis import is_private_ip
from safetykit.models import EmailSignals, HeaderSignals, ScanReport, UrlSignals

BADGE_CLASS = {
    "safe": "pass",
    "warning": "warn",
    "danger": "fail",
    "info": "info",
}


def esc(s) -> str:
    return html.escape(str(s)) if s is not None and s != "" else ""


def _rows(pairs) -> str:
    return "".join(f"<tr><th>{esc(k)}</th><td>{esc(v)}</td></tr>" for k, v in pairs)


def _url_section(s: UrlSignals) -> str:
    tally = s.reputation
    tally_rows = ""
    if tally:
        tally_rows = _rows([
            ("Malicious", tally.malicious),
            ("Suspicious", tally.suspicious),
            ("Harmless", tally.harmless),
            ("Undetected", tally.undetected),
            ("Timeout", tally.timeout),
        ])
    geo = s.geo
    location = ", ".join(p for p in (geo.city, geo.region, geo.country) if p) if geo else "Unknown"
    check_rows = _rows([
        ("URL", s.url),
        ("Suspicious keywords", "Yes" if s.is_suspicious_keyword else "No"),
        ("On phishing blocklist", "Yes" if s.is_on_blocklist else "No"),
        ("SSL/TLS", f"{s.ssl_status.value} (Grade: {s.ssl_grade})" if s.ssl_grade else s.ssl_status.value),
        ("Server location", location),
        ("High-risk location", "Yes" if s.is_high_risk_geo else "No"),
        ("Redirects", s.redirect_count),
    ])
    link = f'<a href="{esc(s.reputation_link)}">Full VirusTotal report</a>' if s.reputation_link else ""

    return f"""
    <div class="section">
        <h2>🔗 Link Checks</h2>
        <table>{check_rows}</table>
        <h3>Engine results</h3>
        <table>{tally_rows or "<tr><td>No engine results</td></tr>"}</table>
        <p>{link}</p>
    </div>
    """


def _email_section(s: EmailSignals) -> str:
    rep = s.reputation
    if rep is None:
        body = "<tr><td>No reputation data</td></tr>"
    else:
        body = _rows([
            ("Reputation", rep.reputation or "unknown"),
            ("Suspicious", "Yes" if rep.suspicious else "No"),
            ("Blacklisted", "Yes" if rep.blacklisted else "No"),
            ("Credentials leaked", "Yes" if rep.credentials_leaked else "No"),
            ("Data breach", "Yes" if rep.data_breach else "No"),
        ])
    address_row = _rows([("Address", s.address)])
    return f"""
    <div class="section">
        <h2>📧 Sender Reputation</h2>
        <table>{address_row}{body}</table>
    </div>
    """


def _header_section(s: HeaderSignals) -> str:
    auth_rows = ""
    for mechanism, result in (("SPF", s.spf), ("DKIM", s.dkim), ("DMARC", s.dmarc)):
        status_class = "pass" if result == "pass" else ("fail" if result else "info")
        auth_rows += f"""
            <tr>
                <td><strong>{mechanism}</strong></td>
                <td class="{status_class}">{esc((result or "not found").upper())}</td>
            </tr>
            """

    if s.ip_hops:
        hop_list = "".join(
            f"<li>{esc(ip)}{' <em>(private)</em>' if is_private_ip(ip) else ''}</li>"
            for ip in s.ip_hops
        )
    else:
        hop_list = "<li>None found</li>"

    address_rows = _rows([("From", s.from_address or "-"), ("Reply-To", s.reply_to_address or "-")])

    return f"""
    <div class="section">
        <h2>🛡️ Authentication Results</h2>
        <table>
            <tr><th>Mechanism</th><th>Result</th></tr>
            {auth_rows}
        </table>
        <h3>Addresses</h3>
        <table>{address_rows}</table>
        <h3>IP hops</h3>
        <ul>{hop_list}</ul>
    </div>
    """


def generate_html_report(report: ScanReport, output_path: Optional[Path] = None) -> str:
    """
    Render a ScanReport as HTML.

    Returns the HTML string. If output_path is provided, also saves to file.
    """
    v = report.verdict
    signals = report.signals

    if isinstance(signals, UrlSignals):
        details = _url_section(signals)
    elif isinstance(signals, EmailSignals):
        details = _email_section(signals)
    else:
        details = _header_section(signals)

    score_line = f"<p class='score'>Risk score: {v.score}/100</p>" if v.score is not None else ""
    reasons = "".join(f"<li>{esc(r)}</li>" for r in v.reasons)
    reasons_block = f"<ul>{reasons}</ul>" if reasons else ""
    unavailable = getattr(signals, "unavailable", None)
    unavailable_block = (
        f"<p class='muted'>Checks unavailable: {esc(', '.join(unavailable))}</p>"
        if unavailable else ""
    )

    report_html = f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>SafetyKit Scan Report</title>
    <style>
        * {{ box-sizing: border-box; }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            max-width: 1000px;
            margin: 0 auto;
            padding: 20px;
            background: #1a1a2e;
            color: #eee;
        }}
        h1 {{ color: #00d4ff; border-bottom: 2px solid #00d4ff; padding-bottom: 10px; }}
        h2 {{ color: #ff6b6b; margin-top: 30px; }}
        .section {{
            background: #16213e;
            border-radius: 8px;
            padding: 20px;
            margin-bottom: 20px;
        }}
        table {{ width: 100%; border-collapse: collapse; margin: 10px 0; }}
        th, td {{ text-align: left; padding: 10px; border-bottom: 1px solid #333; }}
        th {{ background: #0f3460; }}
        .pass {{ color: #00ff88; font-weight: bold; }}
        .warn {{ color: #ff9800; font-weight: bold; }}
        .fail {{ color: #ff4444; font-weight: bold; }}
        .info {{ color: #aaa; font-weight: bold; }}
        .muted {{ color: #888; }}
        .footer {{ text-align: center; color: #666; margin-top: 40px; font-size: 12px; }}
    </style>
</head>
<body>
    <h1>SafetyKit Scan Report</h1>
    <p>Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}</p>

    <div class="section verdict">
        <h2 class="{BADGE_CLASS.get(v.type.value, 'info')}">{esc(v.type.value.upper())}</h2>
        <p>{esc(v.summary)}</p>
        {score_line}
        <p><strong>Potential harm:</strong> {esc(v.harm_explanation)}</p>
        <p><strong>What to do:</strong> {esc(v.advice)}</p>
        {reasons_block}
        {unavailable_block}
    </div>

    {details}

    <div class="footer">
        <p>Generated by SafetyKit</p>
    </div>
</body>
</html>
    """

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report_html, encoding='utf-8')

    return report_html
