"""
Readers for the OVAL definitions and system characteristics documents.
"""

from .definitions_parser import DefinitionsParser, import_definitions
from .syschar_parser import SyscharParser, import_syschar

__all__ = [
    'DefinitionsParser',
    'import_definitions',
    'SyscharParser',
    'import_syschar'
]
