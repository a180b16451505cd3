"""
Infrastructure layer for the OVAL evaluation core.

This package contains technical concerns: live probes, document parsing and
serialization, validation, report rendering, logging and error handling.
Subpackages are imported directly (``oval_core.infrastructure.probes`` and
so on) because the domain services depend on ``shared.error_handling``.
"""
