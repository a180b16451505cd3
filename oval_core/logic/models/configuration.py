"""
Configuration domain models.

Contains the data structures for evaluation, probing, reporting and logging
settings, loaded from YAML or JSON.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import json
from pathlib import Path

import yaml


DEFAULT_PROBES = ('family', 'uname', 'environmentvariable', 'file', 'textfilecontent54')


@dataclass
class EvaluationConfig:
    """Settings for the evaluation workflow."""
    validate: bool = True
    # -1 quiet, 0 normal, 1 verbose
    verbosity: int = 0

    def __post_init__(self):
        if self.verbosity < -1:
            raise ValueError(f"verbosity must be -1 or greater, got {self.verbosity}")


@dataclass
class ProbeConfig:
    """Settings for the live probes."""
    enabled: Dict[str, bool] = field(default_factory=lambda: {name: True for name in DEFAULT_PROBES})
    max_file_size_mb: int = 50
    follow_symlinks: bool = True

    def __post_init__(self):
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")

    def is_enabled(self, object_type: str) -> bool:
        return self.enabled.get(object_type, True)


@dataclass
class ReportConfig:
    """Settings for HTML report rendering."""
    xslt_command: str = "xsltproc"
    template_dir: Optional[str] = None
    timeout_seconds: int = 120

    def __post_init__(self):
        if not self.xslt_command:
            raise ValueError("xslt_command cannot be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    def get_template_dir(self) -> Path:
        """Directory holding the XSL templates (bundled templates by default)."""
        if self.template_dir:
            return Path(self.template_dir).expanduser()
        return Path(__file__).resolve().parents[2] / "infrastructure" / "reporting" / "xsl"


@dataclass
class LoggingConfig:
    """Settings for log output."""
    log_file: Optional[str] = None
    level: str = "INFO"

    def __post_init__(self):
        if self.level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level: {self.level}")


@dataclass
class OvalConfig:
    """
    Main configuration for the evaluation tool.

    Loaded from config.yaml next to the CLI unless another file is given.
    """
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    probes: ProbeConfig = field(default_factory=ProbeConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: str) -> 'OvalConfig':
        """Load configuration from a file (JSON or YAML)."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in ['.yml', '.yaml']:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        config = cls.from_dict(data or {})
        config._source_file = str(path)
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OvalConfig':
        """Create configuration from dictionary."""
        evaluation_data = data.get('evaluation', {}) or {}
        evaluation = EvaluationConfig(
            validate=evaluation_data.get('validate', True),
            verbosity=evaluation_data.get('verbosity', 0)
        )

        probes_data = data.get('probes', {}) or {}
        enabled = ProbeConfig().enabled
        enabled.update(probes_data.get('enabled', {}) or {})
        probes = ProbeConfig(
            enabled=enabled,
            max_file_size_mb=probes_data.get('max_file_size_mb', 50),
            follow_symlinks=probes_data.get('follow_symlinks', True)
        )

        report_data = data.get('report', {}) or {}
        report = ReportConfig(
            xslt_command=report_data.get('xslt_command', 'xsltproc'),
            template_dir=report_data.get('template_dir'),
            timeout_seconds=report_data.get('timeout_seconds', 120)
        )

        logging_data = data.get('logging', {}) or {}
        logging_config = LoggingConfig(
            log_file=logging_data.get('log_file'),
            level=logging_data.get('level', 'INFO')
        )

        return cls(
            evaluation=evaluation,
            probes=probes,
            report=report,
            logging=logging_config
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'evaluation': {
                'validate': self.evaluation.validate,
                'verbosity': self.evaluation.verbosity
            },
            'probes': {
                'enabled': dict(self.probes.enabled),
                'max_file_size_mb': self.probes.max_file_size_mb,
                'follow_symlinks': self.probes.follow_symlinks
            },
            'report': {
                'xslt_command': self.report.xslt_command,
                'template_dir': self.report.template_dir,
                'timeout_seconds': self.report.timeout_seconds
            },
            'logging': {
                'log_file': self.logging.log_file,
                'level': self.logging.level
            }
        }

    def save_to_file(self, file_path: str):
        """Save configuration to a file."""
        path = Path(file_path)

        with open(path, 'w', encoding='utf-8') as f:
            if path.suffix.lower() in ['.yml', '.yaml']:
                yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)
            else:
                json.dump(self.to_dict(), f, indent=2)
