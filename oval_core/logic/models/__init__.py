"""
Domain models for the OVAL evaluation core.

This module contains the three model types (definitions, system
characteristics, results), verdicts, export directives and configuration.
"""

from .verdict import Verdict, REPORT_ORDER, DIRECTIVES_ORDER, ALL_VERDICTS_MASK, verdict_mask
from .definition_model import (
    DefinitionModel, Definition, Criteria, Criterion, ExtendDefinition,
    OvalTest, OvalObject, OvalState, Entity, Operator, Check, ExistenceCheck
)
from .syschar_model import (
    SyscharModel, SystemInfo, NetworkInterface, CollectedObject, Item, ItemEntity,
    ObjectFlag, ItemStatus
)
from .results_model import (
    ResultsModel, ResultSystem, DefinitionResult, TestResult, TestedItem,
    CriteriaResult, CriterionResult, ExtendDefinitionResult
)
from .directives import ResultDirectives, ContentLevel
from .configuration import OvalConfig, EvaluationConfig, ProbeConfig, ReportConfig, LoggingConfig

__all__ = [
    'Verdict',
    'REPORT_ORDER',
    'DIRECTIVES_ORDER',
    'ALL_VERDICTS_MASK',
    'verdict_mask',
    'DefinitionModel',
    'Definition',
    'Criteria',
    'Criterion',
    'ExtendDefinition',
    'OvalTest',
    'OvalObject',
    'OvalState',
    'Entity',
    'Operator',
    'Check',
    'ExistenceCheck',
    'SyscharModel',
    'SystemInfo',
    'NetworkInterface',
    'CollectedObject',
    'Item',
    'ItemEntity',
    'ObjectFlag',
    'ItemStatus',
    'ResultsModel',
    'ResultSystem',
    'DefinitionResult',
    'TestResult',
    'TestedItem',
    'CriteriaResult',
    'CriterionResult',
    'ExtendDefinitionResult',
    'ResultDirectives',
    'ContentLevel',
    'OvalConfig',
    'EvaluationConfig',
    'ProbeConfig',
    'ReportConfig',
    'LoggingConfig'
]
