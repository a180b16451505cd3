"""
Tests for the collect, eval and analyse workflows.
"""

import io
import xml.etree.ElementTree as ET

import pytest

from conftest import DEF_FALSE, DEF_NA, DEF_TRUE, DEFINITIONS_XML
from oval_core.application import (
    AnalyseCharacteristicsUseCase, CollectCharacteristicsUseCase, EvaluateDefinitionsUseCase
)
from oval_core.application.evaluate_definitions import INVALID_DOCUMENT_MSG
from oval_core.logic.models import Verdict
from oval_core.logic.services.evaluation_session import EvaluationSession
from oval_core.infrastructure.parsers.xml_utils import OVAL_RESULTS_NS, OVAL_SYSCHAR_NS
from oval_core.infrastructure.probes import ProbeSession
from oval_core.infrastructure.reporting import ReportRenderer
from oval_core.infrastructure.shared.error_handling import (
    EngineError, ModelImportError, ProbeError, ReportError, SessionError, ValidationError
)


# =============================================================================
# COLLECT
# =============================================================================

class RecordingCollect(CollectCharacteristicsUseCase):
    """Collect use case over fake probes, keeping the resources it acquired."""

    def __init__(self, registry, sysinfo_probe, **kwargs):
        super().__init__(**kwargs)
        self.registry = registry
        self.sysinfo_probe = sysinfo_probe
        self.acquired = []

    def _load_definitions(self, definitions_file):
        model = super()._load_definitions(definitions_file)
        self.acquired.append(model)
        return model

    def _new_syschar_model(self, definition_model):
        model = super()._new_syschar_model(definition_model)
        self.acquired.append(model)
        return model

    def _open_probe_session(self, syschar_model):
        session = ProbeSession(syschar_model, registry=self.registry, sysinfo_probe=self.sysinfo_probe)
        self.acquired.append(session)
        return session


class TestCollectCharacteristics:
    """Live collection written as a characteristics document."""

    def test_collect_writes_document(self, definitions_file, probe_registry, fake_sysinfo_probe):
        output = io.BytesIO()
        use_case = RecordingCollect(probe_registry, fake_sysinfo_probe, output=output)

        assert use_case.execute(str(definitions_file)) == 2

        root = ET.fromstring(output.getvalue())
        sc = f"{{{OVAL_SYSCHAR_NS}}}"
        assert root.find(f"{sc}system_info/{sc}primary_host_name").text == "test-host"
        flags = {o.get("id"): o.get("flag") for o in root.iter(f"{sc}object")}
        assert flags == {"oval:org.test:obj:1": "complete", "oval:org.test:obj:2": "not applicable"}
        assert all(resource.released for resource in use_case.acquired)

    def test_object_query_failure_writes_nothing(self, definitions_file, failing_object_registry,
                                                 fake_sysinfo_probe):
        output = io.BytesIO()
        use_case = RecordingCollect(failing_object_registry, fake_sysinfo_probe, output=output)

        with pytest.raises(ProbeError) as excinfo:
            use_case.execute(str(definitions_file))

        assert excinfo.value.code == 7
        assert output.getvalue() == b""
        assert len(use_case.acquired) == 3
        assert all(resource.released for resource in use_case.acquired)

    def test_sysinfo_failure_writes_nothing(self, definitions_file, probe_registry, failing_sysinfo_probe):
        output = io.BytesIO()
        use_case = RecordingCollect(probe_registry, failing_sysinfo_probe, output=output)

        with pytest.raises(ProbeError):
            use_case.execute(str(definitions_file))

        assert output.getvalue() == b""
        assert all(resource.released for resource in use_case.acquired)

    def test_import_failure(self, tmp_path, probe_registry, fake_sysinfo_probe):
        use_case = RecordingCollect(probe_registry, fake_sysinfo_probe, output=io.BytesIO())
        with pytest.raises(ModelImportError):
            use_case.execute(str(tmp_path / "absent.xml"))
        assert use_case.acquired == []


# =============================================================================
# EVAL
# =============================================================================

class TestEvaluateDefinitions:
    """Live evaluation: sweep, targeted definition, export and report."""

    def test_full_sweep(self, definitions_file, session_factory):
        output = io.StringIO()
        use_case = EvaluateDefinitionsUseCase(verbosity=0, output=output, session_factory=session_factory)

        outcome = use_case.execute(str(definitions_file), validate=True)

        assert outcome.aggregate.to_dict() == {
            'true': 1, 'false': 1, 'error': 0, 'unknown': 0, 'neval': 0, 'napp': 1
        }
        assert outcome.success is False
        lines = output.getvalue().splitlines()
        assert lines[:4] == [
            f"Definition {DEF_TRUE}: true",
            f"Definition {DEF_FALSE}: false",
            f"Definition {DEF_NA}: not applicable",
            "Evaluation done.",
        ]
        assert lines[4] == "===== REPORT ====="

    def test_quiet_prints_nothing(self, definitions_file, session_factory):
        output = io.StringIO()
        use_case = EvaluateDefinitionsUseCase(verbosity=-1, output=output, session_factory=session_factory)
        use_case.execute(str(definitions_file))
        assert output.getvalue() == ""

    @pytest.mark.parametrize("definition_id,verdict,success", [
        (DEF_TRUE, Verdict.TRUE, True),
        (DEF_FALSE, Verdict.FALSE, False),
        (DEF_NA, Verdict.NOT_APPLICABLE, True),
    ])
    def test_targeted_definition(self, definitions_file, session_factory, definition_id, verdict, success):
        output = io.StringIO()
        use_case = EvaluateDefinitionsUseCase(verbosity=0, output=output, session_factory=session_factory)

        outcome = use_case.execute(str(definitions_file), definition_id=definition_id)

        assert outcome.verdict is verdict
        assert outcome.success is success
        assert outcome.aggregate is None
        assert output.getvalue().splitlines() == [
            f"Definition {definition_id}: {verdict.text}",
            "Evaluation done.",
        ]

    def test_unknown_definition_still_reports_done(self, definitions_file, session_factory):
        output = io.StringIO()
        use_case = EvaluateDefinitionsUseCase(verbosity=0, output=output, session_factory=session_factory)

        with pytest.raises(EngineError):
            use_case.execute(str(definitions_file), definition_id="oval:org.test:def:404")
        assert output.getvalue() == "Evaluation done.\n"

    def test_result_file_export(self, definitions_file, session_factory, tmp_path):
        result_file = tmp_path / "out" / "results.xml"
        use_case = EvaluateDefinitionsUseCase(verbosity=-1, session_factory=session_factory)

        use_case.execute(str(definitions_file), result_file=str(result_file))

        root = ET.parse(result_file).getroot()
        res = f"{{{OVAL_RESULTS_NS}}}"
        assert [d.get("result") for d in root.iter(f"{res}definition")] == ["true", "false", "not applicable"]

    def test_report_failure_after_export(self, definitions_file, session_factory, tmp_path, monkeypatch):
        def fail(self, results_file, output_file=None):
            raise ReportError(f"Failed to generate report ({results_file}).", code=1, description="xslt failed")

        monkeypatch.setattr(ReportRenderer, "render", fail)
        result_file = tmp_path / "results.xml"
        use_case = EvaluateDefinitionsUseCase(verbosity=-1, session_factory=session_factory)

        with pytest.raises(ReportError):
            use_case.execute(str(definitions_file), result_file=str(result_file),
                             report_file=str(tmp_path / "report.html"))
        assert result_file.exists()

    def test_invalid_document(self, tmp_path, session_factory):
        path = tmp_path / "invalid.xml"
        path.write_text(DEFINITIONS_XML.replace('class="inventory"', 'class="bogus"'), encoding="utf-8")
        output = io.StringIO()
        use_case = EvaluateDefinitionsUseCase(verbosity=0, output=output, session_factory=session_factory)

        with pytest.raises(ValidationError) as excinfo:
            use_case.execute(str(path), validate=True)

        assert excinfo.value.message == INVALID_DOCUMENT_MSG
        assert "invalid class 'bogus'" in output.getvalue()

    def test_skip_validation(self, tmp_path, session_factory):
        path = tmp_path / "invalid.xml"
        path.write_text(DEFINITIONS_XML.replace('class="inventory"', 'class="bogus"'), encoding="utf-8")
        use_case = EvaluateDefinitionsUseCase(verbosity=-1, session_factory=session_factory)

        outcome = use_case.execute(str(path), validate=False)
        assert outcome.aggregate.total == 3

    def test_session_failure_releases_definitions(self, definitions_file, registry_factory,
                                                  failing_sysinfo_probe):
        models = []

        def factory(definition_model, name):
            models.append(definition_model)
            return EvaluationSession(definition_model, name, probe_session_factory=lambda syschar: ProbeSession(
                syschar, registry=registry_factory(), sysinfo_probe=failing_sysinfo_probe))

        use_case = EvaluateDefinitionsUseCase(verbosity=-1, session_factory=factory)
        with pytest.raises(SessionError):
            use_case.execute(str(definitions_file))
        assert models[0].released


# =============================================================================
# ANALYSE
# =============================================================================

class RecordingAnalyse(AnalyseCharacteristicsUseCase):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.acquired = []

    def _load_definitions(self, definitions_file):
        model = super()._load_definitions(definitions_file)
        self.acquired.append(model)
        return model

    def _new_syschar_model(self, definition_model):
        model = super()._new_syschar_model(definition_model)
        self.acquired.append(model)
        return model


class TestAnalyseCharacteristics:
    """Offline evaluation of recorded characteristics."""

    def test_verdicts_in_document_order(self, definitions_file, syschar_file):
        use_case = RecordingAnalyse()

        verdicts = use_case.execute(str(definitions_file), str(syschar_file))

        assert list(verdicts.items()) == [
            (DEF_TRUE, Verdict.TRUE),
            (DEF_FALSE, Verdict.FALSE),
            (DEF_NA, Verdict.NOT_APPLICABLE),
        ]
        assert all(resource.released for resource in use_case.acquired)

    def test_result_file(self, definitions_file, syschar_file, tmp_path):
        result_file = tmp_path / "results.xml"
        AnalyseCharacteristicsUseCase().execute(str(definitions_file), str(syschar_file), str(result_file))
        root = ET.parse(result_file).getroot()
        assert root.tag == f"{{{OVAL_RESULTS_NS}}}oval_results"

    def test_bad_syschar_releases_both_models(self, definitions_file, tmp_path):
        bad = tmp_path / "bad.xml"
        bad.write_text("<oval_system_characteristics>", encoding="utf-8")
        use_case = RecordingAnalyse()

        with pytest.raises(ModelImportError):
            use_case.execute(str(definitions_file), str(bad))

        assert len(use_case.acquired) == 2
        assert all(resource.released for resource in use_case.acquired)

    def test_missing_objects_are_unknown(self, definitions_file, tmp_path):
        empty = tmp_path / "empty.xml"
        empty.write_text(
            '<oval_system_characteristics xmlns="http://oval.mitre.org/XMLSchema/oval-system-characteristics-5"/>',
            encoding="utf-8"
        )
        verdicts = AnalyseCharacteristicsUseCase().execute(str(definitions_file), str(empty))
        assert set(verdicts.values()) == {Verdict.UNKNOWN}
