from __future__ import annotations

import json
import logging
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

REPORT_TITLE = "REST API Test Automation Report"

_STATUS_COLORS = {
    "PASS": "#16a34a",
    "FAIL": "#dc2626",
    "WARN": "#d97706",
    "INFO": "#2563eb",
    "ERROR": "#dc2626",
}

_STYLE = """
body { font-family: Arial, Helvetica, sans-serif; background-color: #f3f4f6; color: #111827; margin: 24px; }
h1 { margin-bottom: 4px; }
table { border-collapse: collapse; margin: 8px 0 16px; background-color: #ffffff; }
th, td { border: 1px solid #d1d5db; padding: 4px 8px; text-align: left; vertical-align: top; }
th { background-color: #e5e7eb; }
.case { background-color: #ffffff; border: 1px solid #d1d5db; border-radius: 6px; padding: 8px 16px; margin-bottom: 12px; }
.label { color: #ffffff; border-radius: 4px; padding: 2px 8px; font-weight: 600; }
.logs { font-family: Consolas, "Courier New", monospace; font-size: 10pt; }
"""


class ResultExporter:
    def export_json(self, result: dict, output_dir: str) -> str:
        file_path = self._target(result, output_dir, "json")
        payload: dict[str, Any] = dict(result)
        payload.setdefault("execute_time", datetime.now().isoformat())

        with file_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2, default=str)

        logger.info("JSON report written to %s", file_path)
        return str(file_path)

    def export_html(self, result: dict, output_dir: str) -> str:
        file_path = self._target(result, output_dir, "html")
        with file_path.open("w", encoding="utf-8") as handle:
            handle.write(render_html(result))
        logger.info("HTML report written to %s", file_path)
        return str(file_path)

    def _target(self, result: dict, output_dir: str, suffix: str) -> Path:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        suite_name = str(result.get("suite_name", "suite"))
        safe_name = "".join(ch for ch in suite_name if ch.isalnum() or ch in ("-", "_")) or "suite"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return output_path / f"{safe_name}_{timestamp}.{suffix}"


def render_html(result: dict) -> str:
    summary = result.get("summary") or {}
    execute_time = result.get("execute_time") or datetime.now().strftime("%b %d, %Y %H:%M:%S")
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en"><head><meta charset="utf-8">',
        f"<title>{escape(REPORT_TITLE)}</title>",
        f"<style>{_STYLE}</style></head><body>",
        f"<h1>{escape(REPORT_TITLE)}</h1>",
        f"<p>{escape(str(result.get('suite_name', 'suite')))} &middot; {escape(str(execute_time))}</p>",
        "<h2>System info</h2>",
        _key_value_table(result.get("system_info") or {}),
        "<h2>Summary</h2>",
        _key_value_table(
            {
                "Total": summary.get("total", 0),
                "Passed": summary.get("pass", 0),
                "Failed": summary.get("fail", 0),
                "Warnings": summary.get("warn", 0),
                "Pass rate": f"{summary.get('pass_rate', 0.0)}%",
            }
        ),
        "<h2>Cases</h2>",
    ]
    parts.extend(_case_section(case) for case in result.get("cases") or [])
    parts.append("</body></html>")
    return "\n".join(parts)


def _label(status: str) -> str:
    color = _STATUS_COLORS.get(status, "#6b7280")
    return f'<span class="label" style="background-color: {color}">{escape(status)}</span>'


def _key_value_table(values: dict) -> str:
    rows = "".join(
        f"<tr><th>{escape(str(key))}</th><td>{escape(str(value))}</td></tr>"
        for key, value in values.items()
    )
    return f"<table>{rows}</table>"


def _case_section(case: dict) -> str:
    status = str(case.get("result", "FAIL"))
    title = escape(str(case.get("name") or case.get("case_id") or ""))
    parts = [
        '<div class="case">',
        f"<h3>{_label(status)} {title}</h3>",
    ]
    if case.get("description"):
        parts.append(f"<p>{escape(str(case['description']))}</p>")
    parts.append(f"<p>Execution time: {escape(str(case.get('elapsed_ms', 0)))} ms</p>")
    if case.get("error_message"):
        parts.append(f"<p>{_label('ERROR')} {escape(str(case['error_message']))}</p>")
    logs = case.get("logs") or []
    if logs:
        rows = "".join(
            f"<tr><td>{_label(str(entry.get('level', 'INFO')))}</td><td>{escape(str(entry.get('message', '')))}</td></tr>"
            for entry in logs
        )
        parts.append(f'<table class="logs"><tr><th>Status</th><th>Details</th></tr>{rows}</table>')
    for step in case.get("steps") or []:
        parts.append(_assertion_table(step))
    parts.append("</div>")
    return "\n".join(parts)


def _assertion_table(step: dict) -> str:
    results = step.get("assertion_results") or []
    if not results:
        return ""
    request = step.get("request") or {}
    url = (step.get("response") or {}).get("url") or request.get("url", "")
    heading = escape(f"{request.get('method', '')} {url}".strip())
    rows = "".join(
        "<tr>"
        f"<td>{_label(str(item.get('result', 'FAIL')))}</td>"
        f"<td>{escape(str(item.get('type')))}</td>"
        f"<td>{escape(str(item.get('path') or item.get('header') or ''))}</td>"
        f"<td>{escape(str(item.get('operator') or ''))}</td>"
        f"<td>{escape(str(item.get('expected')))}</td>"
        f"<td>{escape(_truncate(item.get('actual')))}</td>"
        f"<td>{escape(str(item.get('message') or ''))}</td>"
        "</tr>"
        for item in results
    )
    header = "<tr><th>Result</th><th>Type</th><th>Target</th><th>Operator</th><th>Expected</th><th>Actual</th><th>Message</th></tr>"
    return f"<h4>{heading}</h4><table>{header}{rows}</table>"


def _truncate(value: Any, limit: int = 300) -> str:
    text = str(value)
    return text if len(text) <= limit else text[:limit] + "..."
