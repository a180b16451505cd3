"""
Writers for system characteristics and results documents.
"""

from .syschar_writer import SyscharWriter
from .results_writer import ResultsWriter

__all__ = ['SyscharWriter', 'ResultsWriter']
