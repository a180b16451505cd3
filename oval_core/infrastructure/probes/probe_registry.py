"""
Registry for managing object probes.

Provides centralized registration and lookup of probes by object type.
"""

from typing import Dict, List, Optional, Type
import logging

from oval_core.logic.models import ProbeConfig
from .base_probe import BaseProbe


class ProbeRegistry:
    """
    Registry mapping OVAL object types to probe instances.

    Only probes enabled in the probe configuration are registered by
    ``create_default``; objects of any other type are reported as not
    collected by the probe session.
    """

    def __init__(self, config: Optional[ProbeConfig] = None):
        """Initialize the probe registry."""
        self.config = config or ProbeConfig()
        self._probes: Dict[str, BaseProbe] = {}
        self.logger = logging.getLogger("probe.registry")

    def register(self, probe: BaseProbe) -> None:
        """
        Register a probe instance.

        Raises:
            ValueError: If the probe is not a BaseProbe
        """
        if not isinstance(probe, BaseProbe):
            raise ValueError(f"Probe {probe!r} must inherit from BaseProbe")

        object_type = probe.object_type
        if object_type in self._probes:
            self.logger.warning(f"Probe {object_type} is already registered, overwriting")

        self._probes[object_type] = probe
        self.logger.debug(f"Registered probe: {object_type}")

    def register_class(self, probe_class: Type[BaseProbe]) -> None:
        """Instantiate a probe class with the registry configuration and register it."""
        self.register(probe_class(self.config))

    def get_probe(self, object_type: str) -> Optional[BaseProbe]:
        return self._probes.get(object_type)

    def get_available_probes(self) -> List[str]:
        return list(self._probes.keys())

    def clear(self) -> None:
        self._probes.clear()

    @classmethod
    def create_default(cls, config: Optional[ProbeConfig] = None) -> 'ProbeRegistry':
        """Create a registry with every built-in probe enabled by the configuration."""
        from .file_probes import FileProbe, TextFileContent54Probe
        from .system_probes import EnvironmentVariableProbe, FamilyProbe, UnameProbe

        registry = cls(config)
        for probe_class in (FamilyProbe, UnameProbe, EnvironmentVariableProbe,
                            FileProbe, TextFileContent54Probe):
            probe = probe_class(registry.config)
            if registry.config.is_enabled(probe.object_type):
                registry.register(probe)
            else:
                registry.logger.info(f"Probe {probe.object_type} disabled by configuration")
        return registry
