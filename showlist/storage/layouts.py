"""
showlist.storage.layouts

Defines the output folder layout and file naming conventions.

Default layout:
  public/data/
    manifest.json
    events-YYYY-MM.json      (one per month chunk)
    artists.json
    venues.json
    indexes.json
    search-documents.json
    search-terms.json
    diagnostics.csv
    logs/
      run_<run_id>.log
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Layout:
    root: Path  # output dir

    def manifest_path(self) -> Path:
        return self.root / "manifest.json"

    # chunks
    @staticmethod
    def chunk_filename(chunk_id: str) -> str:
        return f"events-{chunk_id}.json"

    def chunk_path(self, chunk_id: str) -> Path:
        return self.root / self.chunk_filename(chunk_id)

    # entities
    def artists_path(self) -> Path:
        return self.root / "artists.json"

    def venues_path(self) -> Path:
        return self.root / "venues.json"

    # indexes
    def indexes_path(self) -> Path:
        return self.root / "indexes.json"

    def search_documents_path(self) -> Path:
        return self.root / "search-documents.json"

    def search_terms_path(self) -> Path:
        return self.root / "search-terms.json"

    # run-level
    def diagnostics_path(self) -> Path:
        return self.root / "diagnostics.csv"

    def logs_dir(self) -> Path:
        return self.root / "logs"

    def run_log_path(self, run_id: str) -> Path:
        return self.logs_dir() / f"run_{run_id}.log"


def ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
