import json
import logging
import os
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from formqa_agent.data import TestSession, TestStatus

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "..", "static")


class ResultAggregator:
    """Summarizes a finished session and writes its JSON and HTML reports."""

    def aggregate_results(self, test_session: TestSession) -> Dict[str, Any]:
        logging.debug(f"Aggregating results for session: {test_session.session_id}")
        stats = test_session.get_summary_stats()
        issues = self._collect_issues(test_session)
        return {
            "title": f"Form exploration: {test_session.form_name}",
            "statistics": [
                {"label": "Sub-tests", "value": stats["total_sub_tests"]},
                {"label": "Passed", "value": stats["passed_sub_tests"]},
                {"label": "Not passed", "value": stats["total_sub_tests"] - stats["passed_sub_tests"]},
            ],
            "summary": stats,
            "issues": issues,
        }

    def _collect_issues(self, test_session: TestSession) -> List[Dict[str, Any]]:
        issues = []
        for test_result in test_session.test_results.values():
            if test_result.status != TestStatus.PASSED and test_result.error_message:
                issues.append(
                    {
                        "issue_name": f"Execution error: {test_result.test_name}",
                        "issue_type": test_result.test_type.value,
                        "severity": "high",
                        "issues": test_result.error_message,
                    }
                )
            for sub in test_result.sub_tests:
                if sub.status == TestStatus.PASSED:
                    continue
                severity = "low" if sub.status == TestStatus.WARNING else "high"
                details = "; ".join(f"{r.title}: {r.issues}" for r in sub.report) or sub.final_summary
                issues.append(
                    {
                        "issue_name": f"Not passed: {test_result.test_name}",
                        "issue_type": test_result.test_type.value,
                        "sub_test_name": sub.name,
                        "severity": severity,
                        "issues": details,
                    }
                )
        return issues

    def _report_dir(self, report_dir: str | None) -> str:
        if report_dir is None:
            timestamp = os.getenv("FORMQA_TIMESTAMP", "latest")
            report_dir = f"./reports/test_{timestamp}"
        os.makedirs(report_dir, exist_ok=True)
        return report_dir

    def generate_json_report(self, test_session: TestSession, report_dir: str | None = None) -> str:
        try:
            report_dir = self._report_dir(report_dir)
            json_path = os.path.join(report_dir, "test_results.json")
            with open(json_path, "w", encoding="utf-8") as f:
                json.dump(test_session.to_dict(), f, indent=2, ensure_ascii=False, default=str)
            absolute_path = os.path.abspath(json_path)
            logging.debug(f"JSON report generated: {absolute_path}")
            return absolute_path
        except Exception as e:
            logging.error(f"Failed to generate JSON report: {e}")
            return ""

    def generate_html_report(self, test_session: TestSession, report_dir: str | None = None) -> str:
        try:
            env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(["html"]))
            template = env.get_template("report.html")
            html_out = template.render(
                session=test_session,
                aggregated=test_session.aggregated_results or self.aggregate_results(test_session),
                results=list(test_session.test_results.values()),
            )
            report_dir = self._report_dir(report_dir)
            html_path = os.path.join(report_dir, "test_report.html")
            with open(html_path, "w", encoding="utf-8") as f:
                f.write(html_out)
            absolute_path = os.path.abspath(html_path)
            logging.debug(f"HTML report generated: {absolute_path}")
            return absolute_path
        except Exception as e:
            logging.error(f"Failed to generate HTML report: {e}")
            return ""
