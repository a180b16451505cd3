"""
Structural validation of OVAL documents.

Checks what the readers rely on before a document is imported: well-formed
XML, the expected root element and namespace, a supported schema version,
required attributes, id syntax, id uniqueness and reference integrity.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
import logging
import re
import xml.etree.ElementTree as ET

from oval_core.logic.models import ItemStatus, ObjectFlag, Verdict
from oval_core.infrastructure.parsers.xml_utils import (
    OVAL_DEFINITIONS_NS, OVAL_RESULTS_NS, OVAL_SYSCHAR_NS, SCHEMA_VERSION,
    child_text, find_child, find_children, local_name, namespace_of
)
from oval_core.infrastructure.shared.error_handling import ValidationError


Reporter = Callable[[str], None]

_ID_KINDS = {"definition": "def", "test": "tst", "object": "obj", "state": "ste"}
_ID_PATTERNS = {
    kind: re.compile(rf"^oval:[A-Za-z0-9_\-.]+:{abbreviation}:[1-9][0-9]*$")
    for kind, abbreviation in _ID_KINDS.items()
}
_DEFINITION_CLASSES = {"compliance", "inventory", "miscellaneous", "patch", "vulnerability"}


class DocumentType(Enum):
    """Document kinds accepted by the validator: (root element, namespace)."""
    DEFINITIONS = ("oval_definitions", OVAL_DEFINITIONS_NS)
    SYSCHAR = ("oval_system_characteristics", OVAL_SYSCHAR_NS)
    RESULTS = ("oval_results", OVAL_RESULTS_NS)

    @property
    def root_name(self) -> str:
        return self.value[0]

    @property
    def namespace(self) -> str:
        return self.value[1]


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """Represents a validation issue."""
    severity: ValidationSeverity
    message: str
    line: Optional[int] = None

    def format(self, source: str) -> str:
        location = f"{source}:{self.line}" if self.line else source
        return f"{location}: {self.severity.value}: {self.message}"


class DocumentValidator:
    """
    Validator for definitions, characteristics and results documents.

    Args:
        file_version: Accepted schema version (only the major version is
            compared, so "5.10" accepts every 5.x document)
    """

    def __init__(self, file_version: Optional[str] = None):
        self.file_version = file_version or SCHEMA_VERSION
        self.logger = logging.getLogger("document.validator")

    def validate(self, file_path: Union[str, Path], doctype: DocumentType,
                 reporter: Optional[Reporter] = None) -> bool:
        """
        Validate a document, passing one line per problem to the reporter.

        Returns:
            True if the document has no errors (warnings are allowed)

        Raises:
            ValidationError: If the file cannot be read
        """
        path = str(file_path)
        issues = self.check(path, doctype)
        for issue in issues:
            if reporter is not None:
                reporter(issue.format(path))

        errors = [issue for issue in issues if issue.severity == ValidationSeverity.ERROR]
        self.logger.info(f"Validated {path} as {doctype.name.lower()}: "
                         f"{len(errors)} errors, {len(issues) - len(errors)} warnings")
        return not errors

    def check(self, path: str, doctype: DocumentType) -> List[ValidationIssue]:
        """Collect the validation issues of a document."""
        try:
            root = ET.parse(path).getroot()
        except OSError as e:
            raise ValidationError(f"Unable to read {path}.", code=e.errno, description=e.strerror or str(e))
        except ET.ParseError as e:
            line = e.position[0] if e.position else None
            return [ValidationIssue(ValidationSeverity.ERROR, f"not well-formed: {e}", line)]

        if local_name(root) != doctype.root_name or namespace_of(root) != doctype.namespace:
            return [ValidationIssue(
                ValidationSeverity.ERROR,
                f"root element is {{{namespace_of(root)}}}{local_name(root)}, "
                f"expected {{{doctype.namespace}}}{doctype.root_name}"
            )]

        issues = self._check_schema_version(root)
        if doctype == DocumentType.DEFINITIONS:
            issues.extend(self._check_definitions(root))
        elif doctype == DocumentType.SYSCHAR:
            issues.extend(self._check_syschar(root))
        else:
            issues.extend(self._check_results(root))
        return issues

    def _check_schema_version(self, root: ET.Element) -> List[ValidationIssue]:
        generator = find_child(root, "generator")
        if generator is None:
            return [ValidationIssue(ValidationSeverity.ERROR, "missing generator element")]

        version = child_text(generator, "schema_version")
        if not version:
            return [ValidationIssue(ValidationSeverity.ERROR, "missing generator/schema_version")]
        if version.split(".")[0] != self.file_version.split(".")[0]:
            return [ValidationIssue(ValidationSeverity.ERROR,
                                    f"schema version {version} is not supported (expected {self.file_version})")]
        return []

    def _check_definitions(self, root: ET.Element) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        declared: Dict[str, set] = {kind: set() for kind in _ID_KINDS}

        sections = (("definitions", "definition"), ("tests", "test"), ("objects", "object"), ("states", "state"))
        for section_name, kind in sections:
            section = find_child(root, section_name)
            if section is None:
                continue
            for element in section:
                if kind == "definition" and local_name(element) != "definition":
                    continue
                element_id = element.get("id")
                if not element_id:
                    issues.append(self._error(f"<{local_name(element)}> is missing attribute 'id'"))
                    continue
                if not _ID_PATTERNS[kind].match(element_id):
                    issues.append(self._error(f"'{element_id}' is not a valid {kind} id"))
                if element_id in declared[kind]:
                    issues.append(self._error(f"duplicate {kind} id '{element_id}'"))
                declared[kind].add(element_id)
                if element.get("version") is None:
                    issues.append(self._error(f"{kind} '{element_id}' is missing attribute 'version'"))
                if kind == "definition" and element.get("class") not in _DEFINITION_CLASSES:
                    issues.append(self._error(f"definition '{element_id}' has invalid class "
                                              f"'{element.get('class')}'"))

        issues.extend(self._check_definition_references(root, declared))
        return issues

    def _check_definition_references(self, root: ET.Element, declared: Dict[str, set]) -> List[ValidationIssue]:
        issues = []
        definitions = find_child(root, "definitions")
        if definitions is not None:
            for element in definitions.iter():
                name = local_name(element)
                if name == "criterion" and element.get("test_ref") not in declared["test"]:
                    issues.append(self._error(f"criterion references unknown test '{element.get('test_ref')}'"))
                elif name == "extend_definition" and element.get("definition_ref") not in declared["definition"]:
                    issues.append(self._error(
                        f"extend_definition references unknown definition '{element.get('definition_ref')}'"))

        tests = find_child(root, "tests")
        if tests is not None:
            for test in tests:
                test_id = test.get("id")
                object_element = find_child(test, "object")
                if object_element is None:
                    issues.append(self._error(f"test '{test_id}' has no object reference"))
                elif object_element.get("object_ref") not in declared["object"]:
                    issues.append(self._error(
                        f"test '{test_id}' references unknown object '{object_element.get('object_ref')}'"))
                for state in find_children(test, "state"):
                    if state.get("state_ref") not in declared["state"]:
                        issues.append(self._error(
                            f"test '{test_id}' references unknown state '{state.get('state_ref')}'"))
        return issues

    def _check_syschar(self, root: ET.Element) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        if find_child(root, "system_info") is None:
            issues.append(self._error("missing system_info element"))

        flags = {flag.value for flag in ObjectFlag}
        statuses = {status.value for status in ItemStatus}

        item_ids = set()
        system_data = find_child(root, "system_data")
        if system_data is not None:
            for item in system_data:
                item_id = item.get("id")
                if not item_id:
                    issues.append(self._error(f"<{local_name(item)}> is missing attribute 'id'"))
                elif item_id in item_ids:
                    issues.append(self._error(f"duplicate item id '{item_id}'"))
                item_ids.add(item_id)
                if item.get("status", "exists") not in statuses:
                    issues.append(self._error(f"item '{item_id}' has invalid status '{item.get('status')}'"))

        collected = find_child(root, "collected_objects")
        if collected is not None:
            for obj in find_children(collected, "object"):
                object_id = obj.get("id")
                if not object_id:
                    issues.append(self._error("<object> is missing attribute 'id'"))
                if obj.get("flag") not in flags:
                    issues.append(self._error(f"object '{object_id}' has invalid flag '{obj.get('flag')}'"))
                for reference in find_children(obj, "reference"):
                    if reference.get("item_ref") not in item_ids:
                        issues.append(self._error(
                            f"object '{object_id}' references unknown item '{reference.get('item_ref')}'"))
        return issues

    def _check_results(self, root: ET.Element) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        if find_child(root, "directives") is None:
            issues.append(self._error("missing directives element"))

        results = find_child(root, "results")
        if results is None or not find_children(results, "system"):
            issues.append(self._error("missing results/system element"))
            return issues

        verdict_texts = {verdict.text for verdict in Verdict}
        for system in find_children(results, "system"):
            definitions = find_child(system, "definitions")
            if definitions is not None:
                for definition in find_children(definitions, "definition"):
                    if definition.get("result") not in verdict_texts:
                        issues.append(self._error(f"definition '{definition.get('definition_id')}' has "
                                                  f"invalid result '{definition.get('result')}'"))
            if find_child(system, "oval_system_characteristics") is None:
                issues.append(self._error("system is missing oval_system_characteristics"))
        return issues

    @staticmethod
    def _error(message: str) -> ValidationIssue:
        return ValidationIssue(ValidationSeverity.ERROR, message)
