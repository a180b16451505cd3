"""
HTML report rendering.

Reports are produced by an external XSLT processor (``xsltproc`` by default)
applying the bundled ``oval-results-report.xsl`` template to a results file.
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Union
import logging

from oval_core.logic.models import ReportConfig
from oval_core.infrastructure.shared.error_handling import ReportError


REPORT_TEMPLATE = "oval-results-report.xsl"


class ReportRenderer:
    """Runs the external transform that turns a results file into HTML."""

    def __init__(self, config: Optional[ReportConfig] = None):
        self.config = config or ReportConfig()
        self.logger = logging.getLogger("report.renderer")

    @property
    def template_path(self) -> Path:
        return self.config.get_template_dir() / REPORT_TEMPLATE

    def build_command(self, results_file: Union[str, Path], output_file: Optional[Union[str, Path]]) -> List[str]:
        command = [self.config.xslt_command]
        if output_file is not None:
            command += ["-o", str(output_file)]
        command += [str(self.template_path), str(results_file)]
        return command

    def render(self, results_file: Union[str, Path],
               output_file: Optional[Union[str, Path]] = None) -> Optional[str]:
        """
        Render an HTML report.

        Args:
            results_file: OVAL results document
            output_file: Report destination; when omitted the HTML is returned

        Returns:
            The HTML text when no output file is given, otherwise None

        Raises:
            ReportError: If the transform cannot be run or exits non-zero
        """
        if not self.template_path.is_file():
            raise ReportError(f"Failed to generate report ({results_file}).",
                              description=f"Report template not found: {self.template_path}")

        command = self.build_command(results_file, output_file)
        self.logger.debug(f"Running report transform: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds
            )
        except subprocess.TimeoutExpired:
            raise ReportError(f"Failed to generate report ({results_file}).",
                              description=f"{self.config.xslt_command} timed out after "
                                          f"{self.config.timeout_seconds} seconds")
        except OSError as e:
            raise ReportError(f"Failed to generate report ({results_file}).",
                              code=e.errno, description=f"{self.config.xslt_command}: {e.strerror or e}")

        if result.returncode != 0:
            raise ReportError(f"Failed to generate report ({results_file}).",
                              code=result.returncode,
                              description=result.stderr.strip() or f"{self.config.xslt_command} failed")

        if output_file is None:
            return result.stdout
        self.logger.info(f"Report written to {output_file}")
        return None
