"""
Probes for host-level facts: platform family, uname, environment variables
and the system information block of a characteristics model.
"""

import os
import platform
import re
import socket
import sys
from typing import List, Mapping, Optional

from oval_core.logic.models import Item, NetworkInterface, OvalObject, ProbeConfig, SystemInfo
from oval_core.infrastructure.parsers.xml_utils import INDEPENDENT_SC_NS, UNIX_SC_NS
from oval_core.infrastructure.shared.error_handling import ProbeError
from .base_probe import BaseProbe, UnsupportedObjectError


def current_family() -> str:
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    return "unix"


class FamilyProbe(BaseProbe):
    """Collects the platform family (family_object has no entities)."""

    @property
    def object_type(self) -> str:
        return "family"

    @property
    def item_namespace(self) -> str:
        return INDEPENDENT_SC_NS

    def collect(self, obj: OvalObject) -> List[Item]:
        return [self.new_item().add_entity("family", current_family())]


class UnameProbe(BaseProbe):
    """Collects uname(2) information on POSIX systems."""

    @property
    def object_type(self) -> str:
        return "uname"

    @property
    def item_namespace(self) -> str:
        return UNIX_SC_NS

    def is_applicable(self) -> bool:
        return os.name == "posix"

    def collect(self, obj: OvalObject) -> List[Item]:
        uname = platform.uname()
        item = self.new_item()
        item.add_entity("machine_class", uname.machine)
        item.add_entity("node_name", uname.node)
        item.add_entity("os_name", uname.system)
        item.add_entity("os_release", uname.release)
        item.add_entity("os_version", uname.version)
        item.add_entity("processor_type", uname.processor or uname.machine)
        return [item]


class EnvironmentVariableProbe(BaseProbe):
    """Collects environment variables selected by the object's name entity."""

    def __init__(self, config: Optional[ProbeConfig] = None, environ: Optional[Mapping[str, str]] = None):
        super().__init__(config)
        self.environ = environ if environ is not None else os.environ

    @property
    def object_type(self) -> str:
        return "environmentvariable"

    @property
    def item_namespace(self) -> str:
        return INDEPENDENT_SC_NS

    def collect(self, obj: OvalObject) -> List[Item]:
        name_entity = self.require_entity(obj, "name")
        items = []
        for name in sorted(self.environ):
            if self.entity_matches(name_entity, name):
                item = self.new_item()
                item.add_entity("name", name)
                item.add_entity("value", self.environ[name])
                items.append(item)
        return items


class SystemInfoProbe:
    """Collects the system_info block: OS, architecture, host name and interfaces."""

    def collect(self) -> SystemInfo:
        """
        Raises:
            ProbeError: If the host name cannot be determined
        """
        try:
            host_name = socket.getfqdn() or platform.node()
        except OSError as e:
            raise ProbeError("Failed to query system information.", code=e.errno, description=str(e))

        return SystemInfo(
            os_name=platform.system(),
            os_version=platform.version(),
            architecture=platform.machine(),
            primary_host_name=host_name,
            interfaces=self._collect_interfaces(host_name)
        )

    def _collect_interfaces(self, host_name: str) -> List[NetworkInterface]:
        try:
            names = [name for _, name in socket.if_nameindex()]
        except (AttributeError, OSError):
            names = []

        try:
            primary_address = socket.gethostbyname(host_name)
        except OSError:
            primary_address = ""

        interfaces = []
        for name in names:
            address = "127.0.0.1" if re.match(r"^lo\d*$", name) else ""
            interfaces.append(NetworkInterface(name=name, ip_address=address))
        if primary_address and not any(i.ip_address == primary_address for i in interfaces):
            interfaces.append(NetworkInterface(name="primary", ip_address=primary_address))
        return interfaces


__all__ = [
    'FamilyProbe',
    'UnameProbe',
    'EnvironmentVariableProbe',
    'SystemInfoProbe',
    'UnsupportedObjectError',
    'current_family'
]
