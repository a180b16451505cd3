"""
OVAL evaluation core.

Evaluates OVAL definitions against live or recorded system characteristics,
aggregates the verdicts and exports results documents.
"""

__version__ = "0.1.0"
