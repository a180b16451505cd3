"""
Tests for the live evaluation session.
"""

import pytest

from conftest import DEF_FALSE, DEF_NA, DEF_TRUE
from oval_core.logic.models import ObjectFlag, Verdict
from oval_core.logic.services import ResultAggregate
from oval_core.logic.services.evaluation_session import EvaluationSession
from oval_core.infrastructure.parsers import import_definitions
from oval_core.infrastructure.probes import ProbeSession
from oval_core.infrastructure.shared.error_handling import EngineError, SessionError


class RecordingObserver:
    def __init__(self):
        self.calls = []

    def on_verdict(self, definition_id, verdict):
        self.calls.append((definition_id, verdict))


class TestEvaluationSession:
    """Session lifecycle and evaluation."""

    def test_sweep_reports_in_document_order(self, definitions_file, probe_session_factory):
        model = import_definitions(definitions_file)
        observer = RecordingObserver()

        with EvaluationSession(model, "test-oval.xml", probe_session_factory=probe_session_factory) as session:
            session.evaluate_system(observer)

        assert observer.calls == [
            (DEF_TRUE, Verdict.TRUE),
            (DEF_FALSE, Verdict.FALSE),
            (DEF_NA, Verdict.NOT_APPLICABLE),
        ]

    def test_sweep_with_aggregate(self, definitions_file, probe_session_factory):
        model = import_definitions(definitions_file)
        session = EvaluationSession(model, "test-oval.xml", probe_session_factory=probe_session_factory)
        aggregate = ResultAggregate(verbosity=-1)

        session.evaluate_system(aggregate)

        assert aggregate.to_dict() == {'true': 1, 'false': 1, 'error': 0, 'unknown': 0, 'neval': 0, 'napp': 1}
        assert not aggregate.is_success()
        session.release()

    def test_targeted_evaluation_collects_on_demand(self, definitions_file, probe_session_factory):
        model = import_definitions(definitions_file)
        session = EvaluationSession(model, "test-oval.xml", probe_session_factory=probe_session_factory)

        assert session.evaluate_definition(DEF_TRUE) is Verdict.TRUE

        syschar = session.syschar_model
        assert syschar.sysinfo.primary_host_name == "test-host"
        assert syschar.get_collected_object("oval:org.test:obj:1").flag is ObjectFlag.COMPLETE
        assert syschar.get_collected_object("oval:org.test:obj:2") is None
        results = session.get_results_model().systems[0]
        assert list(results.definition_results) == [DEF_TRUE]
        session.release()

    def test_unknown_definition(self, definitions_file, probe_session_factory):
        model = import_definitions(definitions_file)
        session = EvaluationSession(model, "test-oval.xml", probe_session_factory=probe_session_factory)
        with pytest.raises(EngineError):
            session.evaluate_definition("oval:org.test:def:404")
        session.release()

    def test_sysinfo_failure_releases_resources(self, definitions_file, registry_factory,
                                                failing_sysinfo_probe):
        model = import_definitions(definitions_file)
        created = []

        def factory(syschar_model):
            session = ProbeSession(syschar_model, registry=registry_factory(), sysinfo_probe=failing_sysinfo_probe)
            created.append((syschar_model, session))
            return session

        with pytest.raises(SessionError) as excinfo:
            EvaluationSession(model, "test-oval.xml", probe_session_factory=factory)

        assert excinfo.value.message == "Failed to create new agent session."
        assert excinfo.value.code == 5
        syschar_model, probe_session = created[0]
        assert probe_session.released
        assert syschar_model.released
        assert not model.released

    def test_released_definition_model_is_rejected(self, definitions_file, probe_session_factory):
        model = import_definitions(definitions_file)
        model.release()
        with pytest.raises(SessionError):
            EvaluationSession(model, "test-oval.xml", probe_session_factory=probe_session_factory)

    def test_use_after_release(self, definitions_file, probe_session_factory):
        model = import_definitions(definitions_file)
        session = EvaluationSession(model, "test-oval.xml", probe_session_factory=probe_session_factory)
        session.release()
        session.release()

        assert session.released
        assert session.probe_session.released
        assert session.syschar_model.released
        assert session.results_model.released
        assert not model.released
        with pytest.raises(SessionError):
            session.evaluate_definition(DEF_TRUE)
        with pytest.raises(SessionError):
            session.get_results_model()
