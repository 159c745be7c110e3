from __future__ import annotations

import html
import json
from typing import Any, Iterable

from .activity_log import LogEntry
from .results import ChartResult, ErrorResult, MessageResult, Result, TableResult

Card = dict[str, Any]

CARD_TITLES = {
    "chart": "Visualization",
    "table": "Data",
    "text": "Answer",
    "error": "Error",
}


def make_text_card(text: str) -> Card:
    return {"type": "text", "title": CARD_TITLES["text"], "text": text}


def make_table_card(rows: list[dict[str, Any]]) -> Card:
    return {"type": "table", "title": CARD_TITLES["table"], "rows": rows}


def make_chart_card(chart_spec: Any) -> Card:
    return {"type": "chart", "title": CARD_TITLES["chart"], "spec": chart_spec}


def make_error_card(result: ErrorResult) -> Card:
    return {
        "type": "error",
        "title": CARD_TITLES["error"],
        "text": result.message,
        "trace": result.raw_trace,
    }


def result_to_cards(result: Result | None) -> list[Card]:
    if result is None:
        return []
    if isinstance(result, ErrorResult):
        return [make_error_card(result)]

    cards: list[Card] = []
    for part in result.parts():
        if isinstance(part, ChartResult):
            cards.append(make_chart_card(part.chart_spec))
        elif isinstance(part, TableResult):
            cards.append(make_table_card(part.rows))
        elif isinstance(part, MessageResult):
            cards.append(make_text_card(part.text))
    return cards


def records_to_html(rows: list[dict[str, Any]]) -> str:
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    headers = "".join(f"<th>{html.escape(str(c))}</th>" for c in columns)
    body_rows: list[str] = []
    for row in rows:
        cells = "".join(f"<td>{html.escape(str(row.get(c, '')))}</td>" for c in columns)
        body_rows.append(f"<tr>{cells}</tr>")
    return (
        '<table class="result-table">'
        f"<thead><tr>{headers}</tr></thead>"
        f"<tbody>{''.join(body_rows)}</tbody>"
        "</table>"
    )


def _render_text(text: str) -> str:
    escaped = html.escape(text).replace("\n", "<br>")
    return f'<div class="result-text">{escaped}</div>'


def _render_error(card: Card) -> str:
    parts = [f'<pre class="result-error">{html.escape(str(card.get("text", "")))}</pre>']
    trace = card.get("trace")
    if trace:
        parts.append(
            '<details class="result-trace"><summary>Show technical details</summary>'
            f"<pre>{html.escape(str(trace))}</pre></details>"
        )
    return "".join(parts)


def render_cards_to_html(cards: list[Card]) -> str:
    blocks: list[str] = ['<div class="result-cards">']
    for card in cards:
        title = html.escape(str(card.get("title", "Result")))
        card_type = card.get("type")
        blocks.append(f'<section class="result-card result-{card_type}"><div class="result-card-title">{title}</div>')
        if card_type == "table":
            blocks.append(records_to_html(card.get("rows") or []))
        elif card_type == "chart":
            spec = html.escape(json.dumps(card.get("spec"), ensure_ascii=False, default=str), quote=True)
            blocks.append(f'<div class="result-chart" data-spec="{spec}"></div>')
        elif card_type == "error":
            blocks.append(_render_error(card))
        else:
            blocks.append(_render_text(str(card.get("text", ""))))
        blocks.append("</section>")
    blocks.append("</div>")
    return "".join(blocks)


def render_log_html(entries: Iterable[LogEntry]) -> str:
    lines: list[str] = []
    for entry in entries:
        css = "log-entry log-error" if entry.is_error else "log-entry"
        time_text = entry.timestamp.astimezone().strftime("%H:%M:%S")
        lines.append(
            f'<div class="{css}"><span class="log-time">{time_text}</span> {html.escape(entry.message)}</div>'
        )
    return "".join(lines)
