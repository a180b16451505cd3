"""
HTML report rendering from results documents.
"""

from .xslt_renderer import ReportRenderer, REPORT_TEMPLATE

__all__ = ['ReportRenderer', 'REPORT_TEMPLATE']
