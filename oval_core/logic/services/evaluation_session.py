"""
Evaluation session.

An EvaluationSession binds one definition model to a name and owns the
state a live evaluation needs: an empty system characteristics model, the
probe session filling it on demand and the results model receiving verdicts.
"""

from contextlib import ExitStack
from typing import Callable, Optional
import logging

from oval_core.logic.models import (
    DefinitionModel, ProbeConfig, ResultsModel, SyscharModel, Verdict
)
from oval_core.infrastructure.probes import ProbeRegistry, ProbeSession
from oval_core.infrastructure.shared.error_handling import ProbeError, SessionError
from .evaluation_engine import EvaluationEngine
from .result_aggregator import VerdictObserver


ProbeSessionFactory = Callable[[SyscharModel], ProbeSession]


class EvaluationSession:
    """
    Live evaluation of one definition model.

    The definition model is borrowed; everything else is created here and
    released by ``release()`` in reverse order of creation.

    Args:
        definition_model: Definitions to evaluate
        name: Session name, normally the base name of the definitions file
        probe_session_factory: Builds the probe session for the new
            characteristics model (default: ProbeSession with the registry)
        probe_registry: Probes used by the default factory
        probe_config: Probe configuration used by the default registry

    Raises:
        SessionError: If the session cannot be created
    """

    def __init__(self, definition_model: DefinitionModel, name: str,
                 probe_session_factory: Optional[ProbeSessionFactory] = None,
                 probe_registry: Optional[ProbeRegistry] = None,
                 probe_config: Optional[ProbeConfig] = None):
        self.definition_model = definition_model
        self.name = name
        self.logger = logging.getLogger("oval.session")

        if definition_model.released:
            raise SessionError("Failed to create new agent session.",
                               description="Definition model has been released")

        if probe_session_factory is None:
            def probe_session_factory(model: SyscharModel) -> ProbeSession:
                return ProbeSession(model, registry=probe_registry, config=probe_config)

        stack = ExitStack()
        try:
            self.syschar_model = SyscharModel(definition_model)
            stack.callback(self.syschar_model.release)

            self.probe_session = probe_session_factory(self.syschar_model)
            stack.callback(self.probe_session.release)

            self.syschar_model.set_sysinfo(self.probe_session.query_sysinfo())

            self.results_model = ResultsModel(definition_model, [self.syschar_model])
            stack.callback(self.results_model.release)
        except ProbeError as e:
            stack.close()
            raise SessionError("Failed to create new agent session.",
                               code=e.code, description=e.description or e.message) from e
        except BaseException:
            stack.close()
            raise

        self._resources = stack
        self._released = False
        self._engine = EvaluationEngine(
            definition_model,
            self.results_model.systems[0],
            object_collector=self.probe_session.query_object
        )
        self.logger.info(f"Session '{name}' created for {definition_model.get_definition_count()} definitions")

    @property
    def released(self) -> bool:
        return self._released

    def evaluate_definition(self, definition_id: str) -> Verdict:
        """
        Evaluate a single definition.

        Raises:
            EngineError: If the definition cannot be evaluated at all
            SessionError: If the session has been released
        """
        self._check_open()
        return self._engine.evaluate_definition(definition_id).verdict

    def evaluate_system(self, observer: VerdictObserver) -> None:
        """
        Evaluate every definition in document order, reporting each verdict
        to the observer as soon as it is known.

        Raises:
            EngineError: If a definition cannot be evaluated at all
            SessionError: If the session has been released
        """
        self._check_open()
        for definition in self.definition_model.iter_definitions():
            result = self._engine.evaluate_definition(definition.id)
            observer.on_verdict(definition.id, result.verdict)

    def get_results_model(self) -> ResultsModel:
        """Results gathered so far; owned by the session."""
        self._check_open()
        return self.results_model

    def release(self) -> None:
        """Release results, probe session and characteristics. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self._resources.close()
        self.logger.debug(f"Session '{self.name}' released")

    def _check_open(self) -> None:
        if self._released:
            raise SessionError(f"Session '{self.name}' has been released.")

    def __enter__(self) -> 'EvaluationSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()


__all__ = ['EvaluationSession', 'ProbeSessionFactory']
