"""
Domain services for the OVAL evaluation core.

This module contains the operator tables, entity comparison, the evaluation
engine and the result aggregator. EvaluationSession lives in
``evaluation_session`` because it depends on the probe subsystem.
"""

from .operators import apply_operator, apply_check, apply_existence
from .entity_comparison import compare_entity, compare_values, ComparisonError
from .evaluation_engine import EvaluationEngine
from .result_aggregator import ResultAggregate, VerdictObserver, format_verdict_line, is_targeted_success

__all__ = [
    'apply_operator',
    'apply_check',
    'apply_existence',
    'compare_entity',
    'compare_values',
    'ComparisonError',
    'EvaluationEngine',
    'ResultAggregate',
    'VerdictObserver',
    'format_verdict_line',
    'is_targeted_success'
]
