"""
Output Formatter Module

Formats the capture results into JSON documents and writes them to the
output directory: the full endpoint tree, one file per module and section,
navigation failures, export/print calls and a run summary.
"""

import json
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .aggregator import ResultTree
from .errors import FileSystemError
from .models import ExportPrintResult, NavigationFailure, PageVisit, RunSummary


ALL_ENDPOINTS_FILE = "all_endpoints.json"
FAILURES_FILE = "navigation_failures.json"
EXPORT_PRINT_FILE = "export_print_endpoints.json"
SUMMARY_FILE = "capture_summary.json"

UNSAFE_NAME_CHARS = re.compile(r"[^\w.\- ]+")


def safe_name(name: str) -> str:
    """Make a hierarchy label usable as a file or directory name."""
    cleaned = UNSAFE_NAME_CHARS.sub("_", name).strip(" .")
    return cleaned or "_"


class OutputFormatter:
    """Formats analysis results and persists them as JSON files."""

    def __init__(self, output_dir: str, verbose: bool = False):
        """
        Initialize the output formatter.

        Args:
            output_dir: Directory receiving every artifact
            verbose: Enable verbose logging
        """
        self.output_dir = Path(output_dir)
        self.verbose = verbose
        self.written: List[Path] = []

    def format_failures(self, failures: List[NavigationFailure]) -> List[Dict]:
        return [failure.to_record() for failure in failures]

    def format_export_print(self, results: List[ExportPrintResult]) -> Dict[str, Dict]:
        return {result.page_url: result.to_record() for result in results}

    def format_summary(
        self,
        summary: RunSummary,
        visits: List[PageVisit],
        settings: Optional[Dict] = None,
    ) -> Dict:
        """
        Generate the run summary document.

        Args:
            summary: Run counters
            visits: Per-target visit records
            settings: Run settings to echo back

        Returns:
            Summary dictionary
        """
        pages_with_apis = len([visit for visit in visits if visit.calls_captured])
        return {
            "capture_timestamp": datetime.now(timezone.utc).isoformat(),
            "summary": summary.to_record(),
            "page_statistics": {
                "pages_with_apis": pages_with_apis,
                "pages_without_apis": len(visits) - pages_with_apis,
                "avg_apis_per_page": round(
                    sum(visit.calls_captured for visit in visits) / len(visits), 2
                )
                if visits
                else 0,
            },
            "pages": [visit.to_record() for visit in visits],
            "settings": settings or {},
        }

    def write_results(
        self,
        tree: ResultTree,
        failures: List[NavigationFailure],
        export_print: List[ExportPrintResult],
    ) -> None:
        """
        Write the endpoint tree and its per-module/per-section views.

        Raises:
            FileSystemError: If a directory or file cannot be written
        """
        self.write_json(self.output_dir / ALL_ENDPOINTS_FILE, tree.to_dict())

        for module in tree.modules():
            module_view = tree.module_view(module)
            module_dir = self.output_dir / safe_name(module)
            self.write_json(module_dir / f"{safe_name(module)}_endpoints.json", module_view)

            for section, section_view in module_view.items():
                section_dir = module_dir / safe_name(section)
                self.write_json(
                    section_dir / f"{safe_name(section)}_endpoints.json", section_view
                )

        if failures:
            self.write_json(self.output_dir / FAILURES_FILE, self.format_failures(failures))

        if export_print:
            self.write_json(
                self.output_dir / EXPORT_PRINT_FILE, self.format_export_print(export_print)
            )

    def write_summary(
        self,
        summary: RunSummary,
        visits: List[PageVisit],
        settings: Optional[Dict] = None,
    ) -> Path:
        path = self.output_dir / SUMMARY_FILE
        self.write_json(path, self.format_summary(summary, visits, settings))
        return path

    def write_json(self, path: Path, data) -> None:
        try:
            os.makedirs(path.parent, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(json.dumps(data, indent=2, ensure_ascii=False))
        except OSError as e:
            raise FileSystemError(f"Failed to write {path}: {e}")

        self.written.append(path)
        if self.verbose:
            print(f"💾 Saved: {path}")
