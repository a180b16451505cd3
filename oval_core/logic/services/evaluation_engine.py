"""
Evaluation engine.

Maps collected system characteristics to per-definition verdicts: definitions
are evaluated through their criteria trees, criteria leaves through tests, and
tests by checking item existence and comparing items against states.
"""

from typing import Callable, List, Optional, Set
import logging

from oval_core.logic.models import (
    Check, CollectedObject, Criteria, CriteriaResult, Criterion, CriterionResult,
    DefinitionModel, DefinitionResult, ExistenceCheck, ExtendDefinition,
    ExtendDefinitionResult, Item, ItemStatus, ObjectFlag, OvalState, OvalTest,
    ResultSystem, TestedItem, TestResult, Verdict
)
from oval_core.infrastructure.shared.error_handling import EngineError, ProbeError
from .entity_comparison import compare_entity
from .operators import apply_check, apply_existence, apply_operator


ObjectCollector = Callable[[str], Optional[CollectedObject]]

# Engine error codes
ERR_UNKNOWN_DEFINITION = 1
ERR_DANGLING_REFERENCE = 2
ERR_CIRCULAR_DEFINITION = 3
ERR_PROBE_FAILURE = 4


class EvaluationEngine:
    """
    Evaluates definitions of one definition model against one result system.

    Results are cached in the result system, so every definition and test is
    evaluated at most once per system.

    Args:
        definition_model: Definitions to evaluate
        result_system: Characteristics snapshot and the result records to fill
        object_collector: Called for objects missing from the characteristics
            model (live sessions probe on demand)
    """

    def __init__(self, definition_model: DefinitionModel, result_system: ResultSystem,
                 object_collector: Optional[ObjectCollector] = None):
        self.definition_model = definition_model
        self.system = result_system
        self.syschar_model = result_system.syschar_model
        self.object_collector = object_collector
        self._in_progress: Set[str] = set()
        self.logger = logging.getLogger("oval.engine")

    def evaluate_definition(self, definition_id: str) -> DefinitionResult:
        """
        Evaluate one definition.

        Raises:
            EngineError: If the definition is unknown, refers to missing
                content, extends itself or probing fails
        """
        cached = self.system.get_definition_result(definition_id)
        if cached is not None:
            return cached

        definition = self.definition_model.get_definition(definition_id)
        if definition is None:
            raise EngineError(
                f"Failed to evaluate definition {definition_id}.",
                code=ERR_UNKNOWN_DEFINITION,
                description=f"Definition {definition_id} not found"
            )

        if definition_id in self._in_progress:
            raise EngineError(
                f"Failed to evaluate definition {definition_id}.",
                code=ERR_CIRCULAR_DEFINITION,
                description=f"Circular extend_definition reference to {definition_id}"
            )

        self._in_progress.add(definition_id)
        try:
            if definition.criteria is None:
                criteria_result = None
                verdict = Verdict.NOT_EVALUATED
            else:
                criteria_result = self._evaluate_criteria(definition.criteria)
                verdict = criteria_result.verdict
        finally:
            self._in_progress.discard(definition_id)

        result = DefinitionResult(
            definition_id=definition.id,
            verdict=verdict,
            version=definition.version,
            definition_class=definition.definition_class,
            criteria=criteria_result
        )
        self.system.definition_results[definition_id] = result
        self.logger.debug(f"Definition {definition_id}: {verdict.text}")
        return result

    def _evaluate_criteria(self, criteria: Criteria) -> CriteriaResult:
        children = []
        for child in criteria.children:
            if isinstance(child, Criteria):
                children.append(self._evaluate_criteria(child))
            elif isinstance(child, Criterion):
                test_result = self.evaluate_test(child.test_ref)
                verdict = test_result.verdict.negate() if child.negate else test_result.verdict
                children.append(CriterionResult(
                    test_ref=child.test_ref,
                    verdict=verdict,
                    negate=child.negate,
                    version=test_result.version
                ))
            elif isinstance(child, ExtendDefinition):
                extended = self.evaluate_definition(child.definition_ref)
                verdict = extended.verdict.negate() if child.negate else extended.verdict
                children.append(ExtendDefinitionResult(
                    definition_ref=child.definition_ref,
                    verdict=verdict,
                    negate=child.negate,
                    version=extended.version
                ))

        verdict = apply_operator(criteria.operator, [c.verdict for c in children], criteria.negate)
        return CriteriaResult(
            operator=criteria.operator,
            verdict=verdict,
            negate=criteria.negate,
            children=children
        )

    def evaluate_test(self, test_id: str) -> TestResult:
        """Evaluate one test, caching the result in the result system."""
        cached = self.system.test_results.get(test_id)
        if cached is not None:
            return cached

        test = self.definition_model.get_test(test_id)
        if test is None:
            raise self._dangling("test", test_id)

        obj = self.definition_model.get_object(test.object_ref)
        if obj is None:
            raise self._dangling("object", test.object_ref)

        states = []
        for state_ref in test.state_refs:
            state = self.definition_model.get_state(state_ref)
            if state is None:
                raise self._dangling("state", state_ref)
            states.append(state)

        collected = self._get_collected_object(obj.id)
        result = TestResult(
            test_id=test.id,
            verdict=Verdict.UNKNOWN,
            version=test.version,
            check=test.check,
            check_existence=test.check_existence,
            state_operator=test.state_operator,
            messages=list(collected.messages)
        )
        result.verdict = self._evaluate_collected(test, states, collected, result.tested_items)

        self.system.test_results[test_id] = result
        return result

    def _evaluate_collected(self, test: OvalTest, states: List[OvalState],
                            collected: CollectedObject, tested_items: List[TestedItem]) -> Verdict:
        if collected.flag == ObjectFlag.ERROR:
            return Verdict.ERROR
        if collected.flag == ObjectFlag.NOT_COLLECTED:
            return Verdict.UNKNOWN
        if collected.flag == ObjectFlag.NOT_APPLICABLE:
            return Verdict.NOT_APPLICABLE

        items: List[Item] = []
        if collected.flag != ObjectFlag.DOES_NOT_EXIST:
            items = self.syschar_model.get_items_for(collected)

        existence = apply_existence(test.check_existence, [item.status for item in items])

        if existence != Verdict.TRUE or not states:
            for item in items:
                tested_items.append(TestedItem(item.id, Verdict.NOT_EVALUATED))
            verdict = existence
        else:
            item_verdicts = []
            for item in items:
                if item.status == ItemStatus.DOES_NOT_EXIST:
                    continue
                if item.status == ItemStatus.ERROR:
                    item_verdict = Verdict.ERROR
                elif item.status == ItemStatus.NOT_COLLECTED:
                    item_verdict = Verdict.UNKNOWN
                else:
                    item_verdict = apply_operator(
                        test.state_operator,
                        [self._evaluate_state(state, item) for state in states]
                    )
                tested_items.append(TestedItem(item.id, item_verdict))
                item_verdicts.append(item_verdict)
            verdict = apply_check(test.check, item_verdicts) if item_verdicts else existence

        if (collected.flag == ObjectFlag.INCOMPLETE and verdict == Verdict.TRUE
                and not self._incomplete_is_conclusive(test, bool(states))):
            verdict = Verdict.UNKNOWN
        return verdict

    @staticmethod
    def _incomplete_is_conclusive(test: OvalTest, has_states: bool) -> bool:
        """A TRUE verdict over a partial item set holds only for 'at least one' style checks."""
        if has_states:
            return test.check == Check.AT_LEAST_ONE
        return test.check_existence in (ExistenceCheck.AT_LEAST_ONE_EXISTS, ExistenceCheck.ANY_EXIST)

    @staticmethod
    def _evaluate_state(state: OvalState, item: Item) -> Verdict:
        if not state.entities:
            return Verdict.TRUE
        verdicts = [compare_entity(entity, item.get_values(entity.name)) for entity in state.entities]
        return apply_operator(state.operator, verdicts)

    def _get_collected_object(self, object_id: str) -> CollectedObject:
        collected = self.syschar_model.get_collected_object(object_id)
        if collected is None and self.object_collector is not None:
            try:
                collected = self.object_collector(object_id)
            except ProbeError as e:
                raise EngineError(
                    f"Failed to collect object {object_id}.",
                    code=ERR_PROBE_FAILURE,
                    description=e.description or e.message
                ) from e
        if collected is None:
            return CollectedObject(object_id=object_id, flag=ObjectFlag.NOT_COLLECTED,
                                   messages=[f"Object {object_id} was not collected"])
        return collected

    @staticmethod
    def _dangling(kind: str, ref: str) -> EngineError:
        return EngineError(
            f"Failed to evaluate {kind} {ref}.",
            code=ERR_DANGLING_REFERENCE,
            description=f"Referenced {kind} {ref} not found"
        )
