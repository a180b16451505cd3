"""
Results domain models.

Contains per-definition verdict records, the criteria trees they were derived
from and the test results with the items each test examined.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Union
import logging

from .definition_model import Check, DefinitionModel, ExistenceCheck, Operator
from .syschar_model import SyscharModel
from .verdict import Verdict


@dataclass
class TestedItem:
    """An item examined by a test and the verdict of its state comparison."""
    __test__ = False

    item_id: str
    verdict: Verdict


@dataclass
class TestResult:
    """Outcome of evaluating one test against one characteristics model."""
    __test__ = False

    test_id: str
    verdict: Verdict
    version: str = "1"
    check: Check = Check.ALL
    check_existence: ExistenceCheck = ExistenceCheck.AT_LEAST_ONE_EXISTS
    state_operator: Operator = Operator.AND
    tested_items: List[TestedItem] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


@dataclass
class CriterionResult:
    test_ref: str
    verdict: Verdict
    negate: bool = False
    version: str = "1"


@dataclass
class ExtendDefinitionResult:
    definition_ref: str
    verdict: Verdict
    negate: bool = False
    version: str = "1"


@dataclass
class CriteriaResult:
    operator: Operator
    verdict: Verdict
    negate: bool = False
    children: List[Union['CriteriaResult', CriterionResult, ExtendDefinitionResult]] = field(default_factory=list)


@dataclass
class DefinitionResult:
    """Verdict record for one definition."""
    definition_id: str
    verdict: Verdict
    version: str = "1"
    definition_class: str = "compliance"
    criteria: Optional[CriteriaResult] = None

    def referenced_test_ids(self) -> List[str]:
        """Tests referenced directly by this definition's criteria, in tree order."""
        found: List[str] = []

        def walk(node):
            if isinstance(node, CriterionResult):
                if node.test_ref not in found:
                    found.append(node.test_ref)
            elif isinstance(node, CriteriaResult):
                for child in node.children:
                    walk(child)

        if self.criteria is not None:
            walk(self.criteria)
        return found


class ResultSystem:
    """Results for one characteristics snapshot."""

    def __init__(self, syschar_model: SyscharModel):
        self.syschar_model = syschar_model
        self.definition_results: Dict[str, DefinitionResult] = {}
        self.test_results: Dict[str, TestResult] = {}

    def get_definition_result(self, definition_id: str) -> Optional[DefinitionResult]:
        return self.definition_results.get(definition_id)


class ResultsModel:
    """
    Per-definition verdicts for a definition model over one or more
    characteristics snapshots.

    The results model owns its ResultSystem records but borrows the
    definition and characteristics models it was built from.
    """

    def __init__(self, definition_model: DefinitionModel,
                 syschar_models: Sequence[SyscharModel],
                 generated_at: Optional[datetime] = None):
        if not syschar_models:
            raise ValueError("A results model needs at least one system characteristics model")
        self.definition_model = definition_model
        self.systems: List[ResultSystem] = [ResultSystem(model) for model in syschar_models]
        # Fixed at construction so repeated exports are byte-identical
        self.generated_at = (generated_at or datetime.now()).replace(microsecond=0)
        self._released = False
        self.logger = logging.getLogger("model.results")

    @property
    def released(self) -> bool:
        return self._released

    def evaluate(self) -> None:
        """
        Evaluate every definition against every system, eagerly.

        Raises:
            EngineError: If the engine cannot produce verdicts
        """
        from oval_core.logic.services.evaluation_engine import EvaluationEngine

        for system in self.systems:
            engine = EvaluationEngine(self.definition_model, system)
            for definition in self.definition_model.iter_definitions():
                engine.evaluate_definition(definition.id)
        self.logger.info(f"Evaluated {self.definition_model.get_definition_count()} definitions "
                         f"against {len(self.systems)} system(s)")

    def release(self) -> None:
        if self._released:
            return
        for system in self.systems:
            system.definition_results.clear()
            system.test_results.clear()
        self.systems = []
        self._released = True
