"""
Definition domain models.

Contains the parsed representation of an OVAL Definitions document:
definitions with their criteria trees, and the tests, objects and states those
criteria refer to. A DefinitionModel is immutable once imported.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union
import logging
import xml.etree.ElementTree as ET


class Operator(Enum):
    """Logical operator combining child results."""
    AND = "AND"
    OR = "OR"
    ONE = "ONE"
    XOR = "XOR"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Operator':
        return cls((value or "AND").upper())


class ExistenceCheck(Enum):
    """How many collected items must exist for a test to pass."""
    ALL_EXIST = "all_exist"
    ANY_EXIST = "any_exist"
    AT_LEAST_ONE_EXISTS = "at_least_one_exists"
    NONE_EXIST = "none_exist"
    ONLY_ONE_EXISTS = "only_one_exists"


class Check(Enum):
    """How many items (or entity values) must satisfy a state."""
    ALL = "all"
    AT_LEAST_ONE = "at least one"
    NONE_SATISFY = "none satisfy"
    ONLY_ONE = "only one"
    # Deprecated OVAL spelling, treated as NONE_SATISFY
    NONE_EXIST = "none exist"


@dataclass(frozen=True)
class Entity:
    """A named value of an object or state, with its comparison semantics."""
    name: str
    value: Optional[str] = None
    operation: str = "equals"
    datatype: str = "string"
    entity_check: Check = Check.ALL
    var_ref: Optional[str] = None


@dataclass
class OvalObject:
    """An object declaration: what a probe should collect."""
    id: str
    object_type: str
    namespace: str = ""
    version: str = "1"
    comment: str = ""
    entities: List[Entity] = field(default_factory=list)
    behaviors: Dict[str, str] = field(default_factory=dict)

    def get_entity(self, name: str) -> Optional[Entity]:
        """Get the first entity with the given name."""
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None


@dataclass
class OvalState:
    """A state declaration: the expected values of collected items."""
    id: str
    state_type: str
    version: str = "1"
    operator: Operator = Operator.AND
    entities: List[Entity] = field(default_factory=list)


@dataclass
class OvalTest:
    """A test binding an object to zero or more states."""
    id: str
    test_type: str
    object_ref: str
    state_refs: List[str] = field(default_factory=list)
    version: str = "1"
    check: Check = Check.ALL
    check_existence: ExistenceCheck = ExistenceCheck.AT_LEAST_ONE_EXISTS
    state_operator: Operator = Operator.AND
    comment: str = ""


@dataclass(frozen=True)
class Criterion:
    """Leaf of a criteria tree referring to a test."""
    test_ref: str
    negate: bool = False
    applicability_check: Optional[bool] = None


@dataclass(frozen=True)
class ExtendDefinition:
    """Leaf of a criteria tree referring to another definition."""
    definition_ref: str
    negate: bool = False
    applicability_check: Optional[bool] = None


@dataclass(frozen=True)
class Criteria:
    """Inner node of a criteria tree."""
    operator: Operator = Operator.AND
    negate: bool = False
    children: tuple = ()
    applicability_check: Optional[bool] = None


CriteriaNode = Union[Criteria, Criterion, ExtendDefinition]


@dataclass(frozen=True)
class Definition:
    """A named logical assertion about system state."""
    id: str
    version: str = "1"
    definition_class: str = "compliance"
    title: str = ""
    description: str = ""
    criteria: Optional[Criteria] = None
    deprecated: bool = False


class DefinitionModel:
    """
    Holds every definition, test, object and state of one definitions document.

    Definitions keep document order; the evaluation engine iterates them in
    this order during a full sweep.
    """

    def __init__(self, source: str = "", schema_version: str = "5.10"):
        self.source = source
        self.schema_version = schema_version
        self.definitions: Dict[str, Definition] = {}
        self.tests: Dict[str, OvalTest] = {}
        self.objects: Dict[str, OvalObject] = {}
        self.states: Dict[str, OvalState] = {}
        # Parsed document root, embedded in exported results when present
        self.source_root: Optional[ET.Element] = None
        self._released = False
        self.logger = logging.getLogger("model.definitions")

    @property
    def released(self) -> bool:
        return self._released

    def add_definition(self, definition: Definition) -> None:
        if definition.id in self.definitions:
            raise ValueError(f"Duplicate definition id: {definition.id}")
        self.definitions[definition.id] = definition

    def add_test(self, test: OvalTest) -> None:
        if test.id in self.tests:
            raise ValueError(f"Duplicate test id: {test.id}")
        self.tests[test.id] = test

    def add_object(self, obj: OvalObject) -> None:
        if obj.id in self.objects:
            raise ValueError(f"Duplicate object id: {obj.id}")
        self.objects[obj.id] = obj

    def add_state(self, state: OvalState) -> None:
        if state.id in self.states:
            raise ValueError(f"Duplicate state id: {state.id}")
        self.states[state.id] = state

    def get_definition(self, definition_id: str) -> Optional[Definition]:
        return self.definitions.get(definition_id)

    def get_test(self, test_id: str) -> Optional[OvalTest]:
        return self.tests.get(test_id)

    def get_object(self, object_id: str) -> Optional[OvalObject]:
        return self.objects.get(object_id)

    def get_state(self, state_id: str) -> Optional[OvalState]:
        return self.states.get(state_id)

    def iter_definitions(self) -> Iterator[Definition]:
        """Iterate definitions in document order."""
        return iter(list(self.definitions.values()))

    def get_referenced_object_ids(self) -> List[str]:
        """Object ids referenced by tests, in test document order, without duplicates."""
        seen = {}
        for test in self.tests.values():
            if test.object_ref not in seen:
                seen[test.object_ref] = True
        return list(seen)

    def get_definition_count(self) -> int:
        return len(self.definitions)

    def release(self) -> None:
        """Drop all held content. Safe to call more than once."""
        if self._released:
            return
        self.definitions.clear()
        self.tests.clear()
        self.objects.clear()
        self.states.clear()
        self.source_root = None
        self._released = True
        self.logger.debug(f"Released definition model: {self.source}")
