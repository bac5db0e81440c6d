"""
showlist.storage.writers

Writers for ETL artifacts:
- JSON (entities, chunks, indexes, manifest)
- CSV diagnostics report (pandas)

Checksums in the manifest are computed over exactly the bytes written, so
serialization goes through ``dumps_json`` in both places.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable

import pandas as pd
from pydantic import BaseModel

from showlist.ingestion.normalization.hashing import checksum
from showlist.schemas.data import FileInfo
from showlist.schemas.diagnostics import Diagnostic
from showlist.storage.layouts import ensure_parent

DIAGNOSTIC_COLUMNS = ["severity", "type", "source_file", "line", "message", "raw_text"]


# ---------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------


def to_jsonable(obj: Any) -> Any:
    """Models become camelCase dicts; lists and dicts are walked."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def dumps_json(obj: Any) -> str:
    return json.dumps(to_jsonable(obj), indent=2, ensure_ascii=False)


def file_info(filename: str, obj: Any) -> FileInfo:
    """Size and checksum of ``obj`` as it will be written."""
    body = dumps_json(obj).encode("utf-8")
    return FileInfo(filename=filename, size=len(body), checksum=checksum(body))


# ---------------------------------------------------------------------
# Generic low-level writers
# ---------------------------------------------------------------------


def write_json(path: Path, obj: Any, *, encoding: str = "utf-8") -> Path:
    ensure_parent(path)
    with path.open("w", encoding=encoding) as f:
        f.write(dumps_json(obj))
    return path


# ---------------------------------------------------------------------
# Diagnostics report
# ---------------------------------------------------------------------


def diagnostics_frame(diagnostics: Iterable[Diagnostic]) -> pd.DataFrame:
    """One row per error/warning, ordered by source file and line."""
    rows = [d.to_row() for d in diagnostics]
    df = pd.DataFrame(rows, columns=DIAGNOSTIC_COLUMNS)
    if df.empty:
        return df
    return df.sort_values(["source_file", "line"], kind="stable").reset_index(drop=True)


def summarize_diagnostics(diagnostics: Iterable[Diagnostic]) -> Dict[str, int]:
    """Counts per ``severity/type``, e.g. ``{"warning/data-quality": 3}``."""
    df = diagnostics_frame(diagnostics)
    if df.empty:
        return {}
    counts = df.groupby(["severity", "type"]).size()
    return {f"{severity}/{kind}": int(n) for (severity, kind), n in counts.items()}


def write_diagnostics(path: Path, diagnostics: Iterable[Diagnostic]) -> Path:
    ensure_parent(path)
    diagnostics_frame(diagnostics).to_csv(path, index=False, encoding="utf-8")
    return path
