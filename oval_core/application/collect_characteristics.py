"""
Use case for live collection of system characteristics.

Imports a definitions document, probes every object it references on the
running host and writes the resulting characteristics document.
"""

from contextlib import ExitStack
import logging
import sys
from typing import BinaryIO, Optional

from oval_core.logic.models import DefinitionModel, OvalConfig, SyscharModel
from oval_core.infrastructure.parsers import import_definitions
from oval_core.infrastructure.probes import ProbeRegistry, ProbeSession
from oval_core.infrastructure.storage import SyscharWriter
from oval_core.infrastructure.logging import enhanced_logger


class CollectCharacteristicsUseCase:
    """
    Collect system characteristics for a definitions file.

    Nothing is written unless every stage succeeds. The definition model,
    the characteristics model and the probe session are released in reverse
    order of acquisition on every exit path.

    Args:
        config: Tool configuration (probe settings are used here)
        output: Binary stream receiving the document (default: stdout)
    """

    def __init__(self, config: Optional[OvalConfig] = None, output: Optional[BinaryIO] = None):
        self.config = config or OvalConfig()
        self.output = output
        self.logger = logging.getLogger("oval.collect")

    def execute(self, definitions_file: str) -> int:
        """
        Run the collection.

        Returns:
            Number of objects collected

        Raises:
            ModelImportError: If the definitions cannot be imported
            ProbeError: If system information or an object query fails
        """
        enhanced_logger.create_evaluation_log_entry("collect", "Collection started",
                                                    {"definitions": definitions_file})

        with ExitStack() as stack:
            definition_model = self._load_definitions(definitions_file)
            stack.callback(definition_model.release)

            syschar_model = self._new_syschar_model(definition_model)
            stack.callback(syschar_model.release)

            probe_session = self._open_probe_session(syschar_model)
            stack.callback(probe_session.release)

            syschar_model.set_sysinfo(probe_session.query_sysinfo())
            collected = probe_session.query_objects()

            SyscharWriter().export(syschar_model, self._output_stream())

        enhanced_logger.create_evaluation_log_entry("collect", "Collection completed",
                                                    {"objects": collected})
        return collected

    def _load_definitions(self, definitions_file: str) -> DefinitionModel:
        return import_definitions(definitions_file)

    def _new_syschar_model(self, definition_model: DefinitionModel) -> SyscharModel:
        return SyscharModel(definition_model)

    def _open_probe_session(self, syschar_model: SyscharModel) -> ProbeSession:
        return ProbeSession(syschar_model, registry=ProbeRegistry.create_default(self.config.probes))

    def _output_stream(self) -> BinaryIO:
        return self.output if self.output is not None else sys.stdout.buffer
