"""
Use case for evaluating definitions against the running system.

This is the main ``eval`` workflow: optional validation, import, a live
evaluation session, either one targeted definition or a full sweep,
optional results export and optional HTML report.
"""

from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
import logging
import sys
from typing import Callable, Optional, TextIO

from oval_core.logic.models import DefinitionModel, OvalConfig, ResultDirectives, Verdict
from oval_core.logic.services import ResultAggregate, format_verdict_line, is_targeted_success
from oval_core.logic.services.evaluation_session import EvaluationSession
from oval_core.infrastructure.parsers import import_definitions
from oval_core.infrastructure.processors import DocumentType, DocumentValidator
from oval_core.infrastructure.reporting import ReportRenderer
from oval_core.infrastructure.shared.error_handling import EngineError, ValidationError
from oval_core.infrastructure.storage import ResultsWriter
from oval_core.infrastructure.logging import enhanced_logger


SessionFactory = Callable[[DefinitionModel, str], EvaluationSession]

INVALID_DOCUMENT_MSG = "Invalid OVAL Definitions document."


@dataclass
class EvaluationOutcome:
    """What an evaluation run produced."""
    success: bool
    verdict: Optional[Verdict] = None
    aggregate: Optional[ResultAggregate] = None


class EvaluateDefinitionsUseCase:
    """
    Evaluate a definitions file on the running host.

    Args:
        config: Tool configuration
        verbosity: -1 quiet, 0 normal, 1 verbose (default: from configuration)
        output: Stream for verdict lines and the report (default: stdout)
        session_factory: Creates the evaluation session for an imported model
    """

    def __init__(self, config: Optional[OvalConfig] = None, verbosity: Optional[int] = None,
                 output: Optional[TextIO] = None, session_factory: Optional[SessionFactory] = None):
        self.config = config or OvalConfig()
        self.verbosity = self.config.evaluation.verbosity if verbosity is None else verbosity
        self.output = output
        self.session_factory = session_factory or self._default_session
        self.logger = logging.getLogger("oval.evaluate")

    @property
    def stream(self) -> TextIO:
        return self.output if self.output is not None else sys.stdout

    def execute(self, definitions_file: str, definition_id: Optional[str] = None,
                result_file: Optional[str] = None, report_file: Optional[str] = None,
                validate: Optional[bool] = None) -> EvaluationOutcome:
        """
        Run the evaluation.

        Returns:
            Outcome with the success flag (targeted: verdict not FALSE or
            UNKNOWN; full sweep: no FALSE and no UNKNOWN definitions)

        Raises:
            ValidationError: If the definitions document is invalid
            ModelImportError: If the definitions cannot be imported
            SessionError: If the evaluation session cannot be created
            EngineError: If the engine cannot produce verdicts
            ReportError: If the HTML report cannot be rendered
        """
        if validate is None:
            validate = self.config.evaluation.validate
        if validate:
            self._validate(definitions_file)

        enhanced_logger.create_evaluation_log_entry("evaluate", "Evaluation started", {
            "definitions": definitions_file,
            "definition_id": definition_id,
            "config_file": getattr(self.config, '_source_file', 'default')
        })

        with ExitStack() as stack:
            definition_model = import_definitions(definitions_file)
            stack.callback(definition_model.release)

            session = self.session_factory(definition_model, Path(definitions_file).name)
            stack.callback(session.release)

            outcome = self._evaluate(session, definition_id)

            if result_file is not None:
                self._export(session, result_file, report_file)

        enhanced_logger.create_evaluation_log_entry("evaluate", "Evaluation completed", {
            "success": outcome.success,
            "counts": outcome.aggregate.to_dict() if outcome.aggregate else None
        })
        return outcome

    def _validate(self, definitions_file: str) -> None:
        reporter = self._print if self.verbosity >= 0 else None
        if not DocumentValidator().validate(definitions_file, DocumentType.DEFINITIONS, reporter):
            raise ValidationError(INVALID_DOCUMENT_MSG)

    def _evaluate(self, session: EvaluationSession, definition_id: Optional[str]) -> EvaluationOutcome:
        aggregate = None
        verdict = None
        try:
            if definition_id is not None:
                verdict = session.evaluate_definition(definition_id)
                if self.verbosity >= 0:
                    self._print(format_verdict_line(definition_id, verdict))
            else:
                aggregate = ResultAggregate(self.verbosity, self.stream)
                session.evaluate_system(aggregate)
        except EngineError:
            if self.verbosity >= 0:
                self._print("Evaluation done.")
            raise

        if self.verbosity >= 0:
            self._print("Evaluation done.")

        if aggregate is not None:
            if self.verbosity >= 0:
                aggregate.print_report()
            return EvaluationOutcome(success=aggregate.is_success(), aggregate=aggregate)
        return EvaluationOutcome(success=is_targeted_success(verdict), verdict=verdict)

    def _export(self, session: EvaluationSession, result_file: str, report_file: Optional[str]) -> None:
        results_model = session.get_results_model()
        ResultsWriter().export(results_model, ResultDirectives.report_everything(), result_file)

        if report_file is not None:
            ReportRenderer(self.config.report).render(result_file, report_file)

    def _default_session(self, definition_model: DefinitionModel, name: str) -> EvaluationSession:
        return EvaluationSession(definition_model, name, probe_config=self.config.probes)

    def _print(self, line: str) -> None:
        print(line, file=self.stream)
