"""
Live system probes.

Probes collect the items matching OVAL objects on the running host and feed
them into a system characteristics model through a ProbeSession.
"""

from .base_probe import BaseProbe, UnsupportedObjectError
from .probe_registry import ProbeRegistry
from .probe_session import ProbeSession
from .system_probes import EnvironmentVariableProbe, FamilyProbe, SystemInfoProbe, UnameProbe
from .file_probes import FileProbe, TextFileContent54Probe

__all__ = [
    'BaseProbe',
    'UnsupportedObjectError',
    'ProbeRegistry',
    'ProbeSession',
    'FamilyProbe',
    'UnameProbe',
    'EnvironmentVariableProbe',
    'SystemInfoProbe',
    'FileProbe',
    'TextFileContent54Probe'
]
