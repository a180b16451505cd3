"""
Definitions parser.

Builds a DefinitionModel from an OVAL Definitions document. Tests, objects
and states are recognised by their element suffix (``_test``, ``_object``,
``_state``) so every platform family is read the same way.
"""

from pathlib import Path
from typing import Optional, Union
import logging
import xml.etree.ElementTree as ET

from oval_core.logic.models import (
    Check, Criteria, Criterion, Definition, DefinitionModel, Entity, ExistenceCheck,
    ExtendDefinition, Operator, OvalObject, OvalState, OvalTest
)
from oval_core.infrastructure.shared.error_handling import ModelImportError, error_context
from .xml_utils import (
    SCHEMA_VERSION, child_text, find_child, find_children, local_name, namespace_of, parse_bool
)


# Children of objects and states that are not entities
_NON_ENTITY_ELEMENTS = {"behaviors", "notes", "signature", "set", "filter"}


def _optional_bool(value: Optional[str]) -> Optional[bool]:
    return None if value is None else parse_bool(value)


class DefinitionsParser:
    """Parser for OVAL Definitions documents."""

    def __init__(self):
        self.logger = logging.getLogger("parser.definitions")

    def parse_file(self, file_path: Union[str, Path]) -> DefinitionModel:
        """
        Import a definitions file.

        Raises:
            ModelImportError: If the file cannot be read or is not a valid
                definitions document
        """
        path = str(file_path)
        with error_context("import definitions", "DefinitionsParser",
                           wrap=ModelImportError,
                           message=f"Failed to import the definition model ({path}).",
                           file=path):
            root = ET.parse(path).getroot()
            model = self.parse_root(root, source=path)

        self.logger.info(f"Imported {model.get_definition_count()} definitions, {len(model.tests)} tests, "
                         f"{len(model.objects)} objects and {len(model.states)} states from {path}")
        return model

    def parse_root(self, root: ET.Element, source: str = "") -> DefinitionModel:
        """
        Build a model from a parsed ``oval_definitions`` element.

        Raises:
            ValueError: On a wrong root element, duplicate ids or invalid attribute values
        """
        if local_name(root) != "oval_definitions":
            raise ValueError(f"Unexpected root element '{local_name(root)}', expected 'oval_definitions'")

        schema_version = SCHEMA_VERSION
        generator = find_child(root, "generator")
        if generator is not None:
            schema_version = child_text(generator, "schema_version", SCHEMA_VERSION)

        model = DefinitionModel(source=source, schema_version=schema_version)
        model.source_root = root

        definitions = find_child(root, "definitions")
        if definitions is not None:
            for element in find_children(definitions, "definition"):
                model.add_definition(self._parse_definition(element))

        tests = find_child(root, "tests")
        if tests is not None:
            for element in tests:
                model.add_test(self._parse_test(element))

        objects = find_child(root, "objects")
        if objects is not None:
            for element in objects:
                model.add_object(self._parse_object(element))

        states = find_child(root, "states")
        if states is not None:
            for element in states:
                model.add_state(self._parse_state(element))

        return model

    def _parse_definition(self, element: ET.Element) -> Definition:
        metadata = find_child(element, "metadata")
        criteria = find_child(element, "criteria")
        return Definition(
            id=self._required(element, "id"),
            version=element.get("version", "1"),
            definition_class=element.get("class", ""),
            title=child_text(metadata, "title") if metadata is not None else "",
            description=child_text(metadata, "description") if metadata is not None else "",
            criteria=self._parse_criteria(criteria) if criteria is not None else None,
            deprecated=parse_bool(element.get("deprecated"))
        )

    def _parse_criteria(self, element: ET.Element) -> Criteria:
        children = []
        for child in element:
            name = local_name(child)
            if name == "criteria":
                children.append(self._parse_criteria(child))
            elif name == "criterion":
                children.append(Criterion(
                    test_ref=self._required(child, "test_ref"),
                    negate=parse_bool(child.get("negate")),
                    applicability_check=_optional_bool(child.get("applicability_check"))
                ))
            elif name == "extend_definition":
                children.append(ExtendDefinition(
                    definition_ref=self._required(child, "definition_ref"),
                    negate=parse_bool(child.get("negate")),
                    applicability_check=_optional_bool(child.get("applicability_check"))
                ))

        return Criteria(
            operator=Operator.parse(element.get("operator")),
            negate=parse_bool(element.get("negate")),
            children=tuple(children),
            applicability_check=_optional_bool(element.get("applicability_check"))
        )

    def _parse_test(self, element: ET.Element) -> OvalTest:
        name = local_name(element)
        object_element = find_child(element, "object")
        if object_element is None:
            raise ValueError(f"Test {element.get('id')} has no object reference")

        return OvalTest(
            id=self._required(element, "id"),
            test_type=name[:-len("_test")] if name.endswith("_test") else name,
            object_ref=self._required(object_element, "object_ref"),
            state_refs=[self._required(state, "state_ref") for state in find_children(element, "state")],
            version=element.get("version", "1"),
            check=Check(element.get("check", "all")),
            check_existence=ExistenceCheck(element.get("check_existence", "at_least_one_exists")),
            state_operator=Operator.parse(element.get("state_operator")),
            comment=element.get("comment", "")
        )

    def _parse_object(self, element: ET.Element) -> OvalObject:
        name = local_name(element)
        behaviors = find_child(element, "behaviors")
        return OvalObject(
            id=self._required(element, "id"),
            object_type=name[:-len("_object")] if name.endswith("_object") else name,
            namespace=namespace_of(element),
            version=element.get("version", "1"),
            comment=element.get("comment", ""),
            entities=self._parse_entities(element),
            behaviors=dict(behaviors.attrib) if behaviors is not None else {}
        )

    def _parse_state(self, element: ET.Element) -> OvalState:
        name = local_name(element)
        return OvalState(
            id=self._required(element, "id"),
            state_type=name[:-len("_state")] if name.endswith("_state") else name,
            version=element.get("version", "1"),
            operator=Operator.parse(element.get("operator")),
            entities=self._parse_entities(element)
        )

    def _parse_entities(self, element: ET.Element):
        entities = []
        for child in element:
            name = local_name(child)
            if name in _NON_ENTITY_ELEMENTS:
                if name in ("set", "filter"):
                    self.logger.warning(f"{element.get('id')}: <{name}> is not supported and is ignored")
                continue
            entities.append(Entity(
                name=name,
                value=child.text.strip() if child.text is not None else None,
                operation=child.get("operation", "equals"),
                datatype=child.get("datatype", "string"),
                entity_check=Check(child.get("entity_check", "all")),
                var_ref=child.get("var_ref")
            ))
        return entities

    @staticmethod
    def _required(element: ET.Element, attribute: str) -> str:
        value = element.get(attribute)
        if not value:
            raise ValueError(f"<{local_name(element)}> is missing required attribute '{attribute}'")
        return value


def import_definitions(file_path: Union[str, Path]) -> DefinitionModel:
    """Import an OVAL Definitions file into a new DefinitionModel."""
    return DefinitionsParser().parse_file(file_path)
