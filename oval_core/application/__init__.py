"""
Application layer for the OVAL evaluation core.

This module contains the use cases and the command registry used by the CLI.
"""

from .collect_characteristics import CollectCharacteristicsUseCase
from .evaluate_definitions import EvaluateDefinitionsUseCase, EvaluationOutcome
from .analyse_characteristics import AnalyseCharacteristicsUseCase
from .command_registry import CommandContext, CommandDescriptor, CommandRegistry, ExitStatus
from .oval_commands import register_oval_commands

__all__ = [
    'CollectCharacteristicsUseCase',
    'EvaluateDefinitionsUseCase',
    'EvaluationOutcome',
    'AnalyseCharacteristicsUseCase',
    'CommandContext',
    'CommandDescriptor',
    'CommandRegistry',
    'ExitStatus',
    'register_oval_commands'
]
