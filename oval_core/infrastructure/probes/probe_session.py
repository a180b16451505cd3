"""
Probe session: live collection of system characteristics.

A ProbeSession fills one SyscharModel by dispatching each object of the
definition model to the probe registered for its object type.
"""

from typing import List, Optional
import logging

from oval_core.logic.models import (
    CollectedObject, ObjectFlag, ProbeConfig, SyscharModel, SystemInfo
)
from oval_core.infrastructure.shared.error_handling import ProbeError
from .base_probe import UnsupportedObjectError
from .probe_registry import ProbeRegistry
from .system_probes import SystemInfoProbe


class ProbeSession:
    """
    Live collection bound to one system characteristics model.

    Args:
        syschar_model: Model receiving collected objects and items
        registry: Probes by object type (built-in probes by default)
        sysinfo_probe: Source of the system_info block
        config: Probe configuration used for the default registry
    """

    def __init__(self, syschar_model: SyscharModel, registry: Optional[ProbeRegistry] = None,
                 sysinfo_probe: Optional[SystemInfoProbe] = None, config: Optional[ProbeConfig] = None):
        self.syschar_model = syschar_model
        self.definition_model = syschar_model.definition_model
        self.registry = registry or ProbeRegistry.create_default(config)
        self.sysinfo_probe = sysinfo_probe or SystemInfoProbe()
        self._released = False
        self.logger = logging.getLogger("probe.session")

    @property
    def released(self) -> bool:
        return self._released

    def query_sysinfo(self) -> SystemInfo:
        """
        Collect host metadata.

        Raises:
            ProbeError: If system information cannot be collected
        """
        self._check_open()
        sysinfo = self.sysinfo_probe.collect()
        self.logger.debug(f"System info collected for {sysinfo.primary_host_name}")
        return sysinfo

    def query_objects(self) -> int:
        """
        Collect every object referenced by the definition model.

        Returns:
            Number of objects collected

        Raises:
            ProbeError: If a probe fails in a way that aborts collection
        """
        self._check_open()
        object_ids = self.definition_model.get_referenced_object_ids()
        self.logger.info(f"Collecting {len(object_ids)} objects")
        for object_id in object_ids:
            self.query_object(object_id)
        return len(object_ids)

    def query_object(self, object_id: str) -> Optional[CollectedObject]:
        """
        Collect one object and record it in the characteristics model.

        Objects collected earlier are returned as they are. Returns ``None``
        when the definition model has no such object.
        """
        self._check_open()
        existing = self.syschar_model.get_collected_object(object_id)
        if existing is not None:
            return existing

        obj = self.definition_model.get_object(object_id)
        if obj is None:
            self.logger.warning(f"Object {object_id} is not declared")
            return None

        collected = CollectedObject(object_id=obj.id, flag=ObjectFlag.COMPLETE, version=obj.version)
        probe = self.registry.get_probe(obj.object_type)

        if probe is None:
            collected.flag = ObjectFlag.NOT_COLLECTED
            collected.messages.append(f"No probe available for {obj.object_type}_object")
        elif not probe.is_applicable():
            collected.flag = ObjectFlag.NOT_APPLICABLE
        else:
            try:
                items = probe.collect(obj)
            except UnsupportedObjectError as e:
                collected.flag = ObjectFlag.NOT_COLLECTED
                collected.messages.append(str(e))
            except OSError as e:
                collected.flag = ObjectFlag.ERROR
                collected.messages.append(f"{obj.object_type} probe failed: {e}")
                self.logger.warning(f"Object {object_id}: {e}")
            else:
                if not items:
                    collected.flag = ObjectFlag.DOES_NOT_EXIST
                for item in items:
                    collected.item_refs.append(self.syschar_model.add_item(item))

        self.syschar_model.add_collected_object(collected)
        self.logger.debug(f"Object {object_id}: {collected.flag.value} ({len(collected.item_refs)} items)")
        return collected

    def release(self) -> None:
        """Close the session. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self.logger.debug("Probe session released")

    def _check_open(self) -> None:
        if self._released:
            raise ProbeError("Probe session has been released.")


__all__ = ['ProbeSession']
