"""
Use case for offline evaluation of recorded system characteristics.
"""

from contextlib import ExitStack
import logging
from typing import Dict, Optional

from oval_core.logic.models import (
    DefinitionModel, OvalConfig, ResultDirectives, ResultsModel, SyscharModel, Verdict
)
from oval_core.infrastructure.parsers import import_definitions, import_syschar
from oval_core.infrastructure.storage import ResultsWriter
from oval_core.infrastructure.logging import enhanced_logger


class AnalyseCharacteristicsUseCase:
    """
    Evaluate a definitions file against a characteristics file.

    No probing happens on this path: objects missing from the
    characteristics file are evaluated as not collected.
    """

    def __init__(self, config: Optional[OvalConfig] = None):
        self.config = config or OvalConfig()
        self.logger = logging.getLogger("oval.analyse")

    def execute(self, definitions_file: str, syschar_file: str,
                result_file: Optional[str] = None) -> Dict[str, Verdict]:
        """
        Run the analysis.

        Returns:
            Verdict per definition id, in document order

        Raises:
            ModelImportError: If either document cannot be imported
            EngineError: If the engine cannot produce verdicts
        """
        enhanced_logger.create_evaluation_log_entry("analyse", "Analysis started", {
            "definitions": definitions_file,
            "syschar": syschar_file
        })

        with ExitStack() as stack:
            definition_model = self._load_definitions(definitions_file)
            stack.callback(definition_model.release)

            syschar_model = self._new_syschar_model(definition_model)
            stack.callback(syschar_model.release)
            self._import_syschar(syschar_model, syschar_file)

            results_model = ResultsModel(definition_model, [syschar_model])
            stack.callback(results_model.release)
            results_model.evaluate()

            if result_file is not None:
                ResultsWriter().export(results_model, ResultDirectives.report_everything(), result_file)

            system = results_model.systems[0]
            verdicts = {
                definition.id: system.definition_results[definition.id].verdict
                for definition in definition_model.iter_definitions()
            }

        enhanced_logger.create_evaluation_log_entry("analyse", "Analysis completed",
                                                    {"definitions": len(verdicts)})
        return verdicts

    def _load_definitions(self, definitions_file: str) -> DefinitionModel:
        return import_definitions(definitions_file)

    def _new_syschar_model(self, definition_model: DefinitionModel) -> SyscharModel:
        return SyscharModel(definition_model)

    def _import_syschar(self, syschar_model: SyscharModel, syschar_file: str) -> None:
        import_syschar(syschar_model, syschar_file)
