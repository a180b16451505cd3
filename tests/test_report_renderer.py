"""
Tests for HTML report rendering through the external XSLT processor.
"""

import subprocess

import pytest

from oval_core.logic.models import ReportConfig
from oval_core.infrastructure.reporting import REPORT_TEMPLATE, ReportRenderer
from oval_core.infrastructure.shared.error_handling import ReportError


class FakeRun:
    """Records subprocess.run calls and returns a canned result."""

    def __init__(self, returncode=0, stdout="<html/>", stderr="", raises=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.commands = []

    def __call__(self, command, **kwargs):
        self.commands.append(command)
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


class TestReportRenderer:
    """Command construction and failure handling."""

    def test_bundled_template_exists(self):
        renderer = ReportRenderer()
        assert renderer.template_path.name == REPORT_TEMPLATE
        assert renderer.template_path.is_file()

    def test_command_with_output(self):
        renderer = ReportRenderer(ReportConfig(xslt_command="xsltproc"))
        assert renderer.build_command("results.xml", "report.html") == [
            "xsltproc", "-o", "report.html", str(renderer.template_path), "results.xml"
        ]

    def test_command_without_output(self):
        renderer = ReportRenderer()
        assert renderer.build_command("results.xml", None) == [
            "xsltproc", str(renderer.template_path), "results.xml"
        ]

    def test_render_to_file(self, monkeypatch):
        fake = FakeRun()
        monkeypatch.setattr(subprocess, "run", fake)
        assert ReportRenderer().render("results.xml", "report.html") is None
        assert fake.commands[0][1:3] == ["-o", "report.html"]

    def test_render_returns_html_without_output(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(stdout="<html>report</html>"))
        assert ReportRenderer().render("results.xml") == "<html>report</html>"

    def test_nonzero_exit(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(returncode=6, stderr="unable to parse results.xml\n"))
        with pytest.raises(ReportError) as excinfo:
            ReportRenderer().render("results.xml", "report.html")
        assert excinfo.value.message == "Failed to generate report (results.xml)."
        assert excinfo.value.code == 6
        assert excinfo.value.description == "unable to parse results.xml"

    def test_missing_processor(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(raises=FileNotFoundError(2, "No such file or directory")))
        with pytest.raises(ReportError) as excinfo:
            ReportRenderer().render("results.xml", "report.html")
        assert excinfo.value.code == 2

    def test_timeout(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(raises=subprocess.TimeoutExpired("xsltproc", 1)))
        with pytest.raises(ReportError):
            ReportRenderer().render("results.xml", "report.html")

    def test_missing_template(self, tmp_path):
        renderer = ReportRenderer(ReportConfig(template_dir=str(tmp_path)))
        with pytest.raises(ReportError) as excinfo:
            renderer.render("results.xml", "report.html")
        assert "template" in excinfo.value.description
