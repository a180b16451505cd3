"""
Logging setup for the OVAL evaluation core.
"""

from .enhanced_logging import EnhancedLogger, enhanced_logger

__all__ = ['EnhancedLogger', 'enhanced_logger']
