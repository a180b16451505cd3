"""
Tests for the evaluation engine.

Models are built directly, without parsing, so each test controls exactly
which objects were collected and with which items.
"""

import pytest

from oval_core.logic.models import (
    Check, CollectedObject, Criteria, Criterion, Definition, DefinitionModel, Entity,
    ExistenceCheck, ExtendDefinition, Item, ObjectFlag, Operator, OvalObject, OvalState,
    OvalTest, ResultsModel, SyscharModel, Verdict
)
from oval_core.logic.services import EvaluationEngine
from oval_core.infrastructure.shared.error_handling import EngineError, ProbeError


# =============================================================================
# HELPERS
# =============================================================================

def make_model():
    model = DefinitionModel(source="engine-test.xml")
    model.add_object(OvalObject("obj:1", "environmentvariable", entities=[Entity("name", "HOME")]))
    model.add_state(OvalState("ste:home", "environmentvariable", entities=[Entity("value", "/root")]))
    model.add_test(OvalTest("tst:exists", "environmentvariable_test", "obj:1"))
    model.add_test(OvalTest("tst:value", "environmentvariable_test", "obj:1", state_refs=["ste:home"]))
    return model


def add_definition(model, definition_id, *children, operator=Operator.AND, negate=False):
    model.add_definition(Definition(
        id=definition_id,
        criteria=Criteria(operator=operator, negate=negate, children=tuple(children))
    ))


def collect(syschar, object_id, flag=ObjectFlag.COMPLETE, values=()):
    refs = []
    for value in values:
        refs.append(syschar.add_item(Item("environmentvariable").add_entity("name", "HOME")
                                     .add_entity("value", value)))
    syschar.add_collected_object(CollectedObject(object_id, flag, item_refs=refs))


def make_engine(model, syschar=None, collector=None):
    syschar = syschar or SyscharModel(model)
    results = ResultsModel(model, [syschar])
    return EvaluationEngine(model, results.systems[0], object_collector=collector), results


# =============================================================================
# DEFINITION EVALUATION TESTS
# =============================================================================

class TestDefinitionEvaluation:
    """Criteria trees down to verdicts."""

    def test_existence_only_test(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:exists"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/root"])

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.TRUE

    def test_state_mismatch_is_false(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:value"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/home/user"])

        engine, results = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.FALSE
        tested = results.systems[0].test_results["tst:value"].tested_items
        assert [t.verdict for t in tested] == [Verdict.FALSE]

    def test_negated_criterion(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:value", negate=True))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/home/user"])

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.TRUE

    def test_missing_object_is_false_for_existence(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:exists"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", flag=ObjectFlag.DOES_NOT_EXIST)

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.FALSE

    @pytest.mark.parametrize("flag,expected", [
        (ObjectFlag.ERROR, Verdict.ERROR),
        (ObjectFlag.NOT_COLLECTED, Verdict.UNKNOWN),
        (ObjectFlag.NOT_APPLICABLE, Verdict.NOT_APPLICABLE),
    ])
    def test_object_flag_decides_test(self, flag, expected):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:value"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", flag=flag)

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is expected

    def test_uncollected_object_without_collector_is_unknown(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:exists"))

        engine, _ = make_engine(model)
        assert engine.evaluate_definition("def:1").verdict is Verdict.UNKNOWN

    def test_incomplete_object_downgrades_all_check(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:value"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", flag=ObjectFlag.INCOMPLETE, values=["/root"])

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.UNKNOWN

    def test_definition_without_criteria_is_not_evaluated(self):
        model = make_model()
        model.add_definition(Definition(id="def:empty"))

        engine, _ = make_engine(model)
        assert engine.evaluate_definition("def:empty").verdict is Verdict.NOT_EVALUATED

    def test_extend_definition(self):
        model = make_model()
        add_definition(model, "def:base", Criterion("tst:exists"))
        add_definition(model, "def:1", ExtendDefinition("def:base", negate=True))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/root"])

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.FALSE

    def test_results_are_cached(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:exists"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/root"])

        engine, _ = make_engine(model, syschar)
        first = engine.evaluate_definition("def:1")
        assert engine.evaluate_definition("def:1") is first

    def test_multiple_states_use_state_operator(self):
        model = make_model()
        model.add_state(OvalState("ste:other", "environmentvariable", entities=[Entity("value", "/tmp")]))
        model.add_test(OvalTest("tst:either", "environmentvariable_test", "obj:1",
                                state_refs=["ste:home", "ste:other"], state_operator=Operator.OR))
        add_definition(model, "def:1", Criterion("tst:either"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/tmp"])

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.TRUE

    def test_none_exist_with_items_is_false(self):
        model = make_model()
        model.add_test(OvalTest("tst:absent", "environmentvariable_test", "obj:1",
                                check_existence=ExistenceCheck.NONE_EXIST, check=Check.ALL))
        add_definition(model, "def:1", Criterion("tst:absent"))
        syschar = SyscharModel(model)
        collect(syschar, "obj:1", values=["/root"])

        engine, _ = make_engine(model, syschar)
        assert engine.evaluate_definition("def:1").verdict is Verdict.FALSE


# =============================================================================
# ENGINE ERROR TESTS
# =============================================================================

class TestEngineErrors:
    """Conditions where no verdict can be produced at all."""

    def test_unknown_definition(self):
        engine, _ = make_engine(make_model())
        with pytest.raises(EngineError) as excinfo:
            engine.evaluate_definition("def:missing")
        assert "def:missing" in excinfo.value.message

    def test_dangling_test_reference(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:missing"))
        engine, _ = make_engine(model)
        with pytest.raises(EngineError):
            engine.evaluate_definition("def:1")

    def test_dangling_state_reference(self):
        model = make_model()
        model.add_test(OvalTest("tst:bad", "environmentvariable_test", "obj:1", state_refs=["ste:missing"]))
        add_definition(model, "def:1", Criterion("tst:bad"))
        engine, _ = make_engine(model)
        with pytest.raises(EngineError):
            engine.evaluate_definition("def:1")

    def test_circular_extend_definition(self):
        model = make_model()
        add_definition(model, "def:a", ExtendDefinition("def:b"))
        add_definition(model, "def:b", ExtendDefinition("def:a"))
        engine, _ = make_engine(model)
        with pytest.raises(EngineError):
            engine.evaluate_definition("def:a")

    def test_probe_failure_aborts_evaluation(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:exists"))

        def collector(object_id):
            raise ProbeError("Failed to collect object.", code=3, description="probe crashed")

        engine, _ = make_engine(model, collector=collector)
        with pytest.raises(EngineError) as excinfo:
            engine.evaluate_definition("def:1")
        assert excinfo.value.description == "probe crashed"


class TestObjectCollector:
    """On-demand collection during live evaluation."""

    def test_collector_called_for_uncollected_objects(self):
        model = make_model()
        add_definition(model, "def:1", Criterion("tst:exists"))
        add_definition(model, "def:2", Criterion("tst:value"))
        syschar = SyscharModel(model)
        calls = []

        def collector(object_id):
            calls.append(object_id)
            item_id = syschar.add_item(Item("environmentvariable").add_entity("name", "HOME")
                                       .add_entity("value", "/root"))
            collected = CollectedObject(object_id, ObjectFlag.COMPLETE, item_refs=[item_id])
            syschar.add_collected_object(collected)
            return collected

        engine, _ = make_engine(model, syschar, collector)
        assert engine.evaluate_definition("def:1").verdict is Verdict.TRUE
        assert engine.evaluate_definition("def:2").verdict is Verdict.TRUE
        assert calls == ["obj:1"]
