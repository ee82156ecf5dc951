"""
Tests for the Output Formatter module.
"""

import json
from unittest.mock import patch

import pytest

from endpoint_capture.aggregator import ResultTree
from endpoint_capture.errors import FileSystemError
from endpoint_capture.models import (
    CapturedCall,
    CategorizedCall,
    ExportPrintResult,
    NavigationFailure,
    NavigationTarget,
    PageVisit,
    RunSummary,
    TargetState,
)
from endpoint_capture.output_formatter import OutputFormatter, safe_name


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestOutputFormatter:
    """Test cases for OutputFormatter class."""

    def setup_method(self):
        self.call = CapturedCall("https://api/list", "GET", "https://x.test/orders")
        self.tree = ResultTree()
        self.tree.add(CategorizedCall(self.call, "Sales", "Orders", "Orders"))
        self.tree.add(
            CategorizedCall(
                CapturedCall("https://api/menu", "GET", "https://x.test/orders"),
                "Sales",
                "Dashboard",
                "SideMenu",
            )
        )

    def test_write_results_layout(self, tmp_path):
        formatter = OutputFormatter(str(tmp_path))

        formatter.write_results(self.tree, [], [])

        assert read_json(tmp_path / "all_endpoints.json") == self.tree.to_dict()
        module = read_json(tmp_path / "Sales" / "Sales_endpoints.json")
        assert list(module) == ["Orders", "Dashboard"]
        section = read_json(tmp_path / "Sales" / "Orders" / "Orders_endpoints.json")
        assert section["Orders"][0]["endpoint"] == "https://api/list"
        assert not (tmp_path / "navigation_failures.json").exists()
        assert not (tmp_path / "export_print_endpoints.json").exists()

    def test_failures_and_export_print(self, tmp_path):
        formatter = OutputFormatter(str(tmp_path))
        failure = NavigationFailure("https://x.test/broken", "Timeout")
        export = ExportPrintResult("https://x.test/orders", excel=[self.call])

        formatter.write_results(self.tree, [failure], [export])

        failures = read_json(tmp_path / "navigation_failures.json")
        assert failures[0]["url"] == "https://x.test/broken"
        assert failures[0]["reason"] == "Timeout"
        assert "timestamp" in failures[0]
        export_data = read_json(tmp_path / "export_print_endpoints.json")
        assert export_data["https://x.test/orders"]["excel"][0]["method"] == "GET"
        assert export_data["https://x.test/orders"]["pdf"] == []

    def test_summary(self, tmp_path):
        formatter = OutputFormatter(str(tmp_path))
        target = NavigationTarget("Sales", "Orders", "Orders", "https://x.test/orders")
        visits = [
            PageVisit(target, TargetState.SUCCEEDED, attempts=1, title="Orders", calls_captured=2),
            PageVisit(target, TargetState.FAILED, attempts=3, error="Timeout"),
        ]
        summary = RunSummary(targets_total=2, targets_processed=2, succeeded=1, failed=1,
                             endpoints_captured=2, duration_seconds=1.234)

        path = formatter.write_summary(summary, visits, {"api_prefix": "https://api"})

        data = read_json(path)
        assert data["summary"]["duration_seconds"] == 1.23
        assert data["page_statistics"] == {
            "pages_with_apis": 1,
            "pages_without_apis": 1,
            "avg_apis_per_page": 1.0,
        }
        assert data["pages"][1]["state"] == "failed"
        assert data["settings"]["api_prefix"] == "https://api"

    def test_unsafe_names(self):
        assert safe_name("Sales/Returns") == "Sales_Returns"
        assert safe_name("..") == "_"
        assert safe_name("Master_data") == "Master_data"

    def test_write_error_raises_file_system_error(self, tmp_path):
        formatter = OutputFormatter(str(tmp_path))

        with patch("endpoint_capture.output_formatter.open", side_effect=OSError("disk full"), create=True):
            with pytest.raises(FileSystemError, match="disk full"):
                formatter.write_results(self.tree, [], [])
