import json
import logging
import os
from typing import Any, Dict, List

from jinja2 import Environment, PackageLoader, select_autoescape

from storefront_qa.data import RunSession, TestStatus


class ResultAggregator:
    """Turns a finished RunSession into JSON and HTML reports."""

    def __init__(self):
        self.env = Environment(
            loader=PackageLoader("storefront_qa.executor", "templates"),
            autoescape=select_autoescape(["html"]),
        )

    def collect_issues(self, run_session: RunSession) -> List[Dict[str, Any]]:
        issues = []
        for result in run_session.results.values():
            if result.status == TestStatus.PASSED:
                continue
            issue = {
                "scenario": result.title,
                "status": result.status.value,
                "severity": "high" if result.status == TestStatus.FAILED else "medium",
                "issues": result.error_message,
            }
            if result.diagnostics:
                issue["url"] = result.diagnostics.url
                issue["screenshot"] = result.diagnostics.screenshot_path
            issues.append(issue)
        return issues

    def generate_json_report(self, run_session: RunSession, report_dir: str) -> str:
        """Write ``test_results.json``; returns its absolute path."""
        os.makedirs(report_dir, exist_ok=True)
        data = run_session.to_dict()
        data["issues"] = self.collect_issues(run_session)

        json_path = os.path.join(report_dir, "test_results.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        absolute_path = os.path.abspath(json_path)
        logging.debug(f"JSON report generated: {absolute_path}")
        return absolute_path

    def generate_html_report(self, run_session: RunSession, report_dir: str) -> str:
        """Render ``test_report.html``; returns its absolute path."""
        os.makedirs(report_dir, exist_ok=True)
        template = self.env.get_template("report.html")
        html_out = template.render(
            session=run_session.to_dict(),
            summary=run_session.get_summary_stats(),
            issues=self.collect_issues(run_session),
            report_dir=os.path.abspath(report_dir),
        )

        html_path = os.path.join(report_dir, "test_report.html")
        with open(html_path, "w", encoding="utf-8") as f:
            f.write(html_out)

        absolute_path = os.path.abspath(html_path)
        logging.debug(f"HTML report generated: {absolute_path}")
        return absolute_path
