"""Tests for reporting/exporter.py — serialization formats, files, dashboard."""

import csv
import io
import json

import pytest

from compliance_engine.reporting.exporter import (
    build_dashboard,
    export_results,
    render_compliance_report,
    write_reports,
)
from compliance_engine.validators.errors import UnsupportedExportFormatError
from compliance_engine.validators.history import ValidationHistory
from compliance_engine.validators.models import ReportingPolicy, ValidationMetrics

from doubles import build_result, issue


class TestExportResults:
    def test_json_is_full_serialization(self, failing_result):
        data = json.loads(export_results(failing_result, "json"))
        assert data["overall_score"] == failing_result.overall_score
        assert set(data["validation_results"]) == {"gdpr", "wcag"}
        assert "metrics" in data

    def test_json_without_metrics(self, failing_result):
        data = json.loads(export_results(failing_result, "json", include_metrics=False))
        assert "metrics" not in data

    def test_pdf_falls_back_to_json(self, failing_result):
        assert export_results(failing_result, "pdf") == export_results(failing_result, "json")

    def test_csv_has_header_and_seven_rows(self, failing_result):
        rows = list(csv.reader(io.StringIO(export_results(failing_result, "csv"))))
        assert rows[0] == ["Metric", "Value"]
        assert [r[0] for r in rows[1:]] == [
            "Overall Score",
            "Compliant",
            "Total Issues",
            "Total Warnings",
            "Total Errors",
            "Execution Time",
            "Compliance Level",
        ]
        assert rows[2][1] == "false"
        assert rows[7][1] == "Non-compliant"

    def test_html_report(self, failing_result):
        html = export_results(failing_result, "html")
        assert html.lstrip().startswith("<!DOCTYPE html>")
        assert f"{failing_result.overall_score}/100" in html
        assert "Non-compliant" in html
        assert "Personal data field" in html

    def test_html_escapes_finding_text(self):
        result = build_result({
            "custom": {"score": 50, "compliant": False, "issues": [issue("error", "<script>alert(1)</script>")]},
        })
        html = export_results(result, "html")
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_html_shows_top_five_recommendations(self):
        result = build_result({
            "custom": {
                "score": 50,
                "compliant": False,
                "issues": [issue("warning", f"finding-{n}") for n in range(8)],
            },
        })
        html = export_results(result, "html")
        assert "finding-4" in html
        assert "finding-5" not in html

    def test_unsupported_format(self, failing_result):
        with pytest.raises(UnsupportedExportFormatError):
            export_results(failing_result, "xml")


class TestWriteReports:
    def test_one_file_per_format(self, tmp_path, failing_result):
        policy = ReportingPolicy(formats=["json", "csv", "html", "pdf"], output_path=str(tmp_path / "out"))
        paths = write_reports(failing_result, policy)

        assert [p.suffix for p in paths] == [".json", ".csv", ".html", ".json"]
        assert all(p.exists() and p.parent == tmp_path / "out" for p in paths)
        assert paths[3].name.endswith(".pdf.json")
        assert json.loads(paths[0].read_text())["overall_score"] == failing_result.overall_score

    def test_duplicate_formats_written_once(self, tmp_path, failing_result):
        policy = ReportingPolicy(formats=["csv", "csv"], output_path=str(tmp_path))
        assert len(write_reports(failing_result, policy)) == 1

    def test_include_metrics_flag(self, tmp_path, failing_result):
        policy = ReportingPolicy(formats=["json"], output_path=str(tmp_path), include_metrics=False)
        [path] = write_reports(failing_result, policy)
        assert "metrics" not in json.loads(path.read_text())


class TestComplianceReport:
    def test_empty(self):
        assert render_compliance_report([], ValidationMetrics()) == "No validation results available for reporting."

    def test_sections(self, failing_result):
        history = ValidationHistory()
        history.append(failing_result)
        report = render_compliance_report(history.entries(), history.get_metrics())

        assert report.startswith("# Compliance Report")
        for heading in (
            "## Executive Summary",
            "## Validation Results",
            "## Performance Metrics",
            "## Top Recommendations",
            "## Common Issues",
            "## Next Steps",
            "## Compliance Trends",
        ):
            assert heading in report
        assert "### gdpr" in report
        assert "### wcag" in report
        assert "Address critical compliance issues immediately" in report
        assert "- **Score Improvement**: +0" in report


class TestDashboard:
    def test_empty(self):
        dashboard = build_dashboard([], ValidationMetrics())
        assert dashboard["overall_score"] == 0
        assert dashboard["compliant"] is False
        assert dashboard["timeline"] == []

    def test_latest_and_timeline(self):
        history = ValidationHistory()
        for score in range(60, 72):
            history.append(build_result({"custom": {"score": score, "compliant": True, "issues": []}}))

        dashboard = build_dashboard(history.entries(), history.get_metrics())
        assert dashboard["overall_score"] == 71
        assert dashboard["total_validations"] == 12
        assert dashboard["frameworks"] == [{"name": "custom", "score": 71.0, "compliant": True}]
        assert [point["score"] for point in dashboard["timeline"]] == list(range(62, 72))
