"""
Results writer.

Exports a ResultsModel as an OVAL Results document filtered by a set of
ResultDirectives. The output depends only on the model and the directives, so
exporting the same pair twice produces identical bytes.
"""

import copy
from pathlib import Path
from typing import List, Set, Union
import logging
import xml.etree.ElementTree as ET

from oval_core import __version__
from oval_core.logic.models import (
    ContentLevel, CriteriaResult, CriterionResult, DIRECTIVES_ORDER, ExtendDefinitionResult,
    ResultDirectives, ResultsModel, ResultSystem, Verdict
)
from oval_core.infrastructure.parsers.xml_utils import (
    OVAL_RESULTS_NS, format_bool, generator_element, serialize, sub_element
)
from oval_core.infrastructure.shared.error_handling import ExportError, error_context
from .syschar_writer import PRODUCT_NAME, SyscharWriter


_DIRECTIVE_ELEMENTS = {
    Verdict.TRUE: "definition_true",
    Verdict.FALSE: "definition_false",
    Verdict.UNKNOWN: "definition_unknown",
    Verdict.ERROR: "definition_error",
    Verdict.NOT_EVALUATED: "definition_not_evaluated",
    Verdict.NOT_APPLICABLE: "definition_not_applicable",
}


class ResultsWriter:
    """Serializes results models as OVAL Results documents."""

    def __init__(self):
        self.syschar_writer = SyscharWriter()
        self.logger = logging.getLogger("results.exporter")

    def build_element(self, model: ResultsModel, directives: ResultDirectives) -> ET.Element:
        timestamp = model.generated_at.isoformat()
        definition_model = model.definition_model

        root = ET.Element(f"{{{OVAL_RESULTS_NS}}}oval_results")
        generator_element(root, OVAL_RESULTS_NS, PRODUCT_NAME, __version__, timestamp,
                          definition_model.schema_version)

        directives_element = sub_element(root, OVAL_RESULTS_NS, "directives")
        for verdict in DIRECTIVES_ORDER:
            sub_element(directives_element, OVAL_RESULTS_NS, _DIRECTIVE_ELEMENTS[verdict],
                        reported=format_bool(directives.is_reported(verdict)),
                        content=directives.get_content(verdict).value)

        if definition_model.source_root is not None:
            root.append(copy.deepcopy(definition_model.source_root))

        results = sub_element(root, OVAL_RESULTS_NS, "results")
        for system in model.systems:
            self._build_system(results, model, system, directives, timestamp)
        return root

    def _build_system(self, parent: ET.Element, model: ResultsModel, system: ResultSystem,
                      directives: ResultDirectives, timestamp: str) -> None:
        system_element = sub_element(parent, OVAL_RESULTS_NS, "system")

        exported_tests: Set[str] = set()
        definition_results = [
            system.definition_results[definition.id]
            for definition in model.definition_model.iter_definitions()
            if definition.id in system.definition_results
        ]
        reported = [result for result in definition_results if directives.is_reported(result.verdict)]

        if reported:
            definitions = sub_element(system_element, OVAL_RESULTS_NS, "definitions")
            for result in reported:
                element = sub_element(definitions, OVAL_RESULTS_NS, "definition",
                                      definition_id=result.definition_id,
                                      version=result.version,
                                      result=result.verdict.text)
                if directives.get_content(result.verdict) == ContentLevel.FULL:
                    if result.criteria is not None:
                        self._build_criteria(element, result.criteria)
                    exported_tests.update(result.referenced_test_ids())

        tests = self._ordered_tests(model, system, exported_tests)
        if tests:
            tests_element = sub_element(system_element, OVAL_RESULTS_NS, "tests")
            for test_result in tests:
                element = sub_element(tests_element, OVAL_RESULTS_NS, "test",
                                      test_id=test_result.test_id,
                                      version=test_result.version,
                                      check_existence=test_result.check_existence.value,
                                      check=test_result.check.value,
                                      state_operator=test_result.state_operator.value,
                                      result=test_result.verdict.text)
                for message in test_result.messages:
                    sub_element(element, OVAL_RESULTS_NS, "message", message, level="info")
                for tested_item in test_result.tested_items:
                    sub_element(element, OVAL_RESULTS_NS, "tested_item",
                                item_id=tested_item.item_id, result=tested_item.verdict.text)

        system_element.append(self.syschar_writer.build_element(system.syschar_model, model.generated_at))

    def _build_criteria(self, parent: ET.Element, criteria: CriteriaResult) -> None:
        element = sub_element(parent, OVAL_RESULTS_NS, "criteria",
                              operator=criteria.operator.value,
                              negate="true" if criteria.negate else None,
                              result=criteria.verdict.text)
        for child in criteria.children:
            if isinstance(child, CriteriaResult):
                self._build_criteria(element, child)
            elif isinstance(child, CriterionResult):
                sub_element(element, OVAL_RESULTS_NS, "criterion",
                            test_ref=child.test_ref, version=child.version,
                            negate="true" if child.negate else None,
                            result=child.verdict.text)
            elif isinstance(child, ExtendDefinitionResult):
                sub_element(element, OVAL_RESULTS_NS, "extend_definition",
                            definition_ref=child.definition_ref, version=child.version,
                            negate="true" if child.negate else None,
                            result=child.verdict.text)

    @staticmethod
    def _ordered_tests(model: ResultsModel, system: ResultSystem, test_ids: Set[str]) -> List:
        """Test results for the given ids, in test document order."""
        return [
            system.test_results[test_id]
            for test_id in model.definition_model.tests
            if test_id in test_ids and test_id in system.test_results
        ]

    def to_bytes(self, model: ResultsModel, directives: ResultDirectives) -> bytes:
        return serialize(self.build_element(model, directives))

    def export(self, model: ResultsModel, directives: ResultDirectives,
               destination: Union[str, Path]) -> None:
        """
        Write a results document.

        Raises:
            ExportError: If the destination cannot be written
        """
        data = self.to_bytes(model, directives)
        with error_context("export results", "ResultsWriter",
                           wrap=ExportError,
                           message=f"Failed to export results ({destination}).",
                           file=str(destination)):
            Path(destination).parent.mkdir(parents=True, exist_ok=True)
            with open(destination, 'wb') as f:
                f.write(data)
        self.logger.info(f"Results written to {destination} ({directives!r})")
