from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from .datasets import SAMPLE_SIZE
from .errors import UploadError
from .session_storage import UPLOADED_COLUMNS_KEY, UPLOADED_DATA_KEY, SessionStorage

logger = logging.getLogger(__name__)

CSV_ENCODINGS = ["utf-8-sig", "utf-8", "cp1251", "latin-1"]
XLSX_SUFFIXES = {".xlsx", ".xlsm", ".xltx", ".xltm"}

UploadPayload = dict[str, Any]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_column_name(name: Any) -> str:
    raw = "" if name is None else str(name)
    cleaned = " ".join(raw.replace("\n", " ").replace("\r", " ").split()).strip()
    return cleaned or "column"


def _dedupe_columns(columns: list[str]) -> list[str]:
    seen: dict[str, int] = {}
    out: list[str] = []
    for col in columns:
        count = seen.get(col, 0) + 1
        seen[col] = count
        out.append(col if count == 1 else f"{col}_{count}")
    return out


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = _dedupe_columns([_clean_column_name(col) for col in df.columns.tolist()])
    return df


def _detect_delimiter(path: Path, encoding: str, sample_lines: int = 30) -> str:
    with path.open("r", encoding=encoding, errors="strict", newline="") as f:
        text = "".join(line for _, line in zip(range(sample_lines), f))
    if not text:
        return ","
    try:
        return csv.Sniffer().sniff(text, delimiters=[",", "\t", ";", "|"]).delimiter
    except csv.Error:
        return ","


def load_csv(path: Path) -> pd.DataFrame:
    errors: list[str] = []
    for enc in CSV_ENCODINGS:
        try:
            delimiter = _detect_delimiter(path, enc)
            df = pd.read_csv(path, encoding=enc, sep=delimiter)
            logger.debug("Read %s with encoding %s", path.name, enc)
            return _normalize_columns(df)
        except Exception as exc:  # noqa: BLE001
            errors.append(f"{enc}: {exc}")

    raise UploadError(f"Could not read CSV file {path.name}. Attempts: {' | '.join(errors)}")


def _sheet_score(df: pd.DataFrame) -> int:
    non_empty_rows = df.dropna(how="all")
    if non_empty_rows.empty:
        return 0
    non_empty_cols = non_empty_rows.dropna(axis=1, how="all")
    return int(non_empty_rows.shape[0] * max(1, non_empty_cols.shape[1]))


def load_xlsx(path: Path) -> pd.DataFrame:
    try:
        sheets = pd.read_excel(path, sheet_name=None, engine="openpyxl")
    except Exception as exc:  # noqa: BLE001
        raise UploadError(f"Could not read workbook {path.name}: {exc}") from exc

    best_df: pd.DataFrame | None = None
    best_score = -1
    for sheet, df in sheets.items():
        score = _sheet_score(df)
        if score > best_score:
            best_score = score
            best_df = df
            logger.debug("Sheet %s scored %s", sheet, score)

    if best_df is None:
        raise UploadError(f"Workbook {path.name} has no readable sheets")
    return _normalize_columns(best_df)


def load_table(path: str | Path) -> pd.DataFrame:
    p = Path(path)
    if not p.exists():
        raise UploadError(f"File not found: {p}")
    if p.suffix.lower() in XLSX_SUFFIXES:
        return load_xlsx(p)
    return load_csv(p)


def build_payload(df: pd.DataFrame, name: str) -> UploadPayload:
    # to_json turns NaN into null and numpy scalars into plain JSON values
    records = json.loads(df.to_json(orient="records", date_format="iso", force_ascii=False))
    column_names = [str(c) for c in df.columns.tolist()]
    return {
        "rows": len(records),
        "columns": len(column_names),
        "sample": records[:SAMPLE_SIZE],
        "columnNames": column_names,
        "data": records,
        "logs": [
            {
                "timestamp": _utc_now_iso(),
                "message": f"Loaded {name}: {len(records)} rows, {len(column_names)} columns",
            }
        ],
    }


def persist_payload(storage: SessionStorage, payload: UploadPayload) -> None:
    storage.set_item(UPLOADED_DATA_KEY, json.dumps(payload["data"], ensure_ascii=False))
    storage.set_item(UPLOADED_COLUMNS_KEY, json.dumps(payload["columnNames"], ensure_ascii=False))


def upload_file(
    path: str | Path,
    storage: SessionStorage,
    on_data_loaded: Callable[[UploadPayload], Any],
) -> UploadPayload:
    p = Path(path)
    df = load_table(p)
    payload = build_payload(df, p.name)
    persist_payload(storage, payload)
    logger.info("Uploaded %s: %s rows", p.name, payload["rows"])
    on_data_loaded(payload)
    return payload
