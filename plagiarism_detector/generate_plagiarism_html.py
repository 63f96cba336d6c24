#!/usr/bin/env python3
"""Render the JSON plagiarism report as a standalone HTML page."""

import argparse
import html
import logging
from datetime import datetime
from pathlib import Path

from .models import DocumentStatus, PairResult, PlagiarismReport, Verdict

logger = logging.getLogger(__name__)

VERDICT_CLASSES = {
    Verdict.HIGH_PLAGIARISM: ("high", "🚨"),
    Verdict.SUSPICIOUS: ("suspicious", "⚠️"),
    Verdict.NEEDS_REVIEW: ("review", "📋"),
    Verdict.likely_clean: ("clean", "✅"),
}

STYLE = """
        * { box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
            background: #f5f5f5;
        }
        h1 { color: #333; border-bottom: 3px solid #e74c3c; padding-bottom: 10px; }
        h2 { color: #444; margin-top: 30px; }
        .summary {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(180px, 1fr));
            gap: 20px;
            margin: 20px 0;
        }
        .summary-card {
            background: white;
            padding: 20px;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            text-align: center;
        }
        .summary-card.high { border-left: 4px solid #e74c3c; }
        .summary-card.suspicious { border-left: 4px solid #f39c12; }
        .summary-card.review { border-left: 4px solid #3498db; }
        .summary-card.clean { border-left: 4px solid #27ae60; }
        .summary-card h3 { margin: 0 0 10px 0; font-size: 2em; }
        .summary-card p { margin: 0; color: #666; }
        .pair {
            background: white;
            margin: 12px 0;
            border-radius: 8px;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            padding: 12px 20px;
            display: flex;
            justify-content: space-between;
            align-items: center;
        }
        .pair.high { border-left: 6px solid #e74c3c; }
        .pair.suspicious { border-left: 6px solid #f39c12; }
        .pair.review { border-left: 6px solid #3498db; }
        .pair .score { font-weight: bold; }
        .pair .detail { color: #666; font-size: 0.9em; }
        table { border-collapse: collapse; width: 100%; background: white; }
        th, td { padding: 6px 10px; border-bottom: 1px solid #ddd; text-align: left; }
        td.error { color: #c0392b; font-family: 'Monaco', 'Menlo', monospace; font-size: 0.85em; }
        .timestamp { color: #888; font-size: 0.9em; margin-top: 30px; }
"""


def render_pair(pair: PairResult) -> str:
    css_class, emoji = VERDICT_CLASSES[pair.verdict]
    return f"""
    <div class="pair {css_class}">
        <div>
            <strong>{emoji} {html.escape(pair.document1)} ↔ {html.escape(pair.document2)}</strong>
            <div class="detail">{pair.shared_fingerprints} of {pair.union_fingerprints} fingerprints shared · {pair.verdict.value}</div>
        </div>
        <span class="score">{pair.similarity:.2f}%</span>
    </div>
"""


def render_report(report: PlagiarismReport) -> str:
    summary = report.summary
    review_pairs = [p for p in report.pairs if p.verdict == Verdict.NEEDS_REVIEW]
    skipped = [d for d in report.documents if d.status != DocumentStatus.ok]

    content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Plagiarism Detection Report</title>
    <style>{STYLE}    </style>
</head>
<body>
    <h1>🔍 Structural Plagiarism Report</h1>
    <p>{summary.documents_analyzed} documents analyzed, {summary.documents_skipped} skipped,
       {summary.pairs_analyzed} pairs compared. Threshold: {summary.threshold:g}%.</p>

    <div class="summary">
        <div class="summary-card high"><h3>{summary.high_plagiarism}</h3><p>🚨 High Plagiarism</p></div>
        <div class="summary-card suspicious"><h3>{summary.suspicious}</h3><p>⚠️ Suspicious</p></div>
        <div class="summary-card review"><h3>{summary.needs_review}</h3><p>📋 Needs Review</p></div>
        <div class="summary-card clean"><h3>{summary.likely_clean}</h3><p>✅ Clean</p></div>
    </div>

    <h2>Flagged Pairs</h2>
"""
    if report.flagged_pairs:
        content += "".join(render_pair(p) for p in report.flagged_pairs)
    else:
        content += "    <p>No pairs reached the threshold.</p>\n"

    if review_pairs:
        content += "\n    <h2>Needs Review</h2>\n"
        content += "".join(render_pair(p) for p in review_pairs)

    if skipped:
        content += """
    <h2>Skipped Documents</h2>
    <table>
        <tr><th>Document</th><th>Status</th><th>Reason</th></tr>
"""
        for doc in skipped:
            content += (
                f"        <tr><td>{html.escape(doc.label)}</td><td>{doc.status.value}</td>"
                f"<td class=\"error\">{html.escape(doc.error or '')}</td></tr>\n"
            )
        content += "    </table>\n"

    content += f"""
    <p class="timestamp">Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}</p>
</body>
</html>
"""
    return content


def generate_html_report(json_path: Path, output_path: Path) -> None:
    """Generate HTML report from the JSON plagiarism report."""
    report = PlagiarismReport.model_validate_json(json_path.read_text(encoding="utf-8"))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report(report), encoding="utf-8")
    logger.info("Generated HTML report: %s", output_path)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", default="results/plagiarism_report.json")
    parser.add_argument("--output", default="results/plagiarism_report.html")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    generate_html_report(Path(args.input), Path(args.output))
