"""
Document processors.

This package contains the structural validator run before documents are imported.
"""

from .document_validator import DocumentValidator, DocumentType, ValidationIssue, ValidationSeverity

__all__ = [
    'DocumentValidator',
    'DocumentType',
    'ValidationIssue',
    'ValidationSeverity'
]
