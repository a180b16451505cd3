"""
System characteristics writer.
"""

from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Union
import logging
import xml.etree.ElementTree as ET

from oval_core import __version__
from oval_core.logic.models import SyscharModel
from oval_core.infrastructure.parsers.xml_utils import (
    INDEPENDENT_SC_NS, OVAL_SYSCHAR_NS, generator_element, serialize, sub_element
)
from oval_core.infrastructure.shared.error_handling import ExportError, error_context


PRODUCT_NAME = "oval-core"


class SyscharWriter:
    """
    Serializes a SyscharModel as an OVAL System Characteristics document.
    """

    def __init__(self):
        self.logger = logging.getLogger("syschar.exporter")

    def build_element(self, model: SyscharModel, generated_at: Optional[datetime] = None) -> ET.Element:
        """Build the ``oval_system_characteristics`` element for a model."""
        timestamp = (generated_at or datetime.now()).replace(microsecond=0).isoformat()

        root = ET.Element(f"{{{OVAL_SYSCHAR_NS}}}oval_system_characteristics")
        generator_element(root, OVAL_SYSCHAR_NS, PRODUCT_NAME, __version__, timestamp, model.schema_version)

        if model.sysinfo is not None:
            info = model.sysinfo
            system_info = sub_element(root, OVAL_SYSCHAR_NS, "system_info")
            sub_element(system_info, OVAL_SYSCHAR_NS, "os_name", info.os_name)
            sub_element(system_info, OVAL_SYSCHAR_NS, "os_version", info.os_version)
            sub_element(system_info, OVAL_SYSCHAR_NS, "architecture", info.architecture)
            sub_element(system_info, OVAL_SYSCHAR_NS, "primary_host_name", info.primary_host_name)
            interfaces = sub_element(system_info, OVAL_SYSCHAR_NS, "interfaces")
            for interface in info.interfaces:
                element = sub_element(interfaces, OVAL_SYSCHAR_NS, "interface")
                sub_element(element, OVAL_SYSCHAR_NS, "interface_name", interface.name)
                sub_element(element, OVAL_SYSCHAR_NS, "ip_address", interface.ip_address)
                sub_element(element, OVAL_SYSCHAR_NS, "mac_address", interface.mac_address)

        if model.collected_objects:
            collected_objects = sub_element(root, OVAL_SYSCHAR_NS, "collected_objects")
            for collected in model.collected_objects.values():
                element = sub_element(collected_objects, OVAL_SYSCHAR_NS, "object",
                                      id=collected.object_id, version=collected.version,
                                      flag=collected.flag.value)
                for message in collected.messages:
                    sub_element(element, OVAL_SYSCHAR_NS, "message", message, level="info")
                for item_ref in collected.item_refs:
                    sub_element(element, OVAL_SYSCHAR_NS, "reference", item_ref=item_ref)

        if model.items:
            system_data = sub_element(root, OVAL_SYSCHAR_NS, "system_data")
            for item in model.items.values():
                element = sub_element(system_data, item.namespace or INDEPENDENT_SC_NS, f"{item.item_type}_item",
                                      id=item.id, status=item.status.value)
                for entity in item.entities:
                    sub_element(element, item.namespace or INDEPENDENT_SC_NS, entity.name, entity.value or "",
                                datatype=None if entity.datatype == "string" else entity.datatype,
                                status=None if entity.status.value == "exists" else entity.status.value)

        return root

    def export(self, model: SyscharModel, destination: Union[str, Path, BinaryIO],
               generated_at: Optional[datetime] = None) -> None:
        """
        Write a model to a file path or a binary stream.

        Raises:
            ExportError: If the destination path cannot be written
        """
        data = serialize(self.build_element(model, generated_at))
        if isinstance(destination, (str, Path)):
            with error_context("export system characteristics", "SyscharWriter",
                               wrap=ExportError,
                               message=f"Failed to export system characteristics ({destination}).",
                               file=str(destination)):
                with open(destination, 'wb') as f:
                    f.write(data)
            self.logger.info(f"System characteristics written to {destination}")
        else:
            destination.write(data)
            destination.flush()
