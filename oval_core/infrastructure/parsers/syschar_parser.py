"""
System characteristics parser.

Imports an OVAL System Characteristics document into an existing
SyscharModel (the offline ``analyse`` path).
"""

from pathlib import Path
from typing import Union
import logging
import xml.etree.ElementTree as ET

from oval_core.logic.models import (
    CollectedObject, Item, ItemEntity, ItemStatus, NetworkInterface, ObjectFlag,
    SyscharModel, SystemInfo
)
from oval_core.infrastructure.shared.error_handling import ModelImportError, error_context
from .xml_utils import child_text, find_child, find_children, local_name, namespace_of


class SyscharParser:
    """Parser for OVAL System Characteristics documents."""

    def __init__(self):
        self.logger = logging.getLogger("parser.syschar")

    def import_into(self, syschar_model: SyscharModel, file_path: Union[str, Path]) -> None:
        """
        Fill a characteristics model from a file.

        Raises:
            ModelImportError: If the file cannot be read or is not a valid
                characteristics document
        """
        path = str(file_path)
        with error_context("import system characteristics", "SyscharParser",
                           wrap=ModelImportError,
                           message=f"Failed to import the system characteristics model ({path}).",
                           file=path):
            root = ET.parse(path).getroot()
            self.parse_root(syschar_model, root)

        self.logger.info(f"Imported {len(syschar_model.collected_objects)} collected objects and "
                         f"{len(syschar_model.items)} items from {path}")

    def parse_root(self, syschar_model: SyscharModel, root: ET.Element) -> None:
        """
        Raises:
            ValueError: On a wrong root element or invalid attribute values
        """
        if local_name(root) != "oval_system_characteristics":
            raise ValueError(f"Unexpected root element '{local_name(root)}', "
                             f"expected 'oval_system_characteristics'")

        system_info = find_child(root, "system_info")
        if system_info is not None:
            syschar_model.set_sysinfo(self._parse_system_info(system_info))

        system_data = find_child(root, "system_data")
        if system_data is not None:
            for element in system_data:
                syschar_model.add_item(self._parse_item(element))

        collected_objects = find_child(root, "collected_objects")
        if collected_objects is not None:
            for element in find_children(collected_objects, "object"):
                syschar_model.add_collected_object(self._parse_collected_object(element))

    @staticmethod
    def _parse_system_info(element: ET.Element) -> SystemInfo:
        interfaces = []
        interfaces_element = find_child(element, "interfaces")
        if interfaces_element is not None:
            for interface in find_children(interfaces_element, "interface"):
                interfaces.append(NetworkInterface(
                    name=child_text(interface, "interface_name"),
                    ip_address=child_text(interface, "ip_address"),
                    mac_address=child_text(interface, "mac_address")
                ))
        return SystemInfo(
            os_name=child_text(element, "os_name"),
            os_version=child_text(element, "os_version"),
            architecture=child_text(element, "architecture"),
            primary_host_name=child_text(element, "primary_host_name"),
            interfaces=interfaces
        )

    @staticmethod
    def _parse_item(element: ET.Element) -> Item:
        name = local_name(element)
        item_id = element.get("id")
        if not item_id:
            raise ValueError(f"<{name}> is missing required attribute 'id'")

        item = Item(
            item_type=name[:-len("_item")] if name.endswith("_item") else name,
            namespace=namespace_of(element),
            status=ItemStatus(element.get("status", "exists")),
            id=item_id
        )
        for child in element:
            if local_name(child) == "message":
                continue
            item.entities.append(ItemEntity(
                name=local_name(child),
                value=child.text if child.text is not None else "",
                datatype=child.get("datatype", "string"),
                status=ItemStatus(child.get("status", "exists"))
            ))
        return item

    @staticmethod
    def _parse_collected_object(element: ET.Element) -> CollectedObject:
        object_id = element.get("id")
        if not object_id:
            raise ValueError("<object> is missing required attribute 'id'")
        return CollectedObject(
            object_id=object_id,
            flag=ObjectFlag(element.get("flag", "complete")),
            version=element.get("version", "1"),
            item_refs=[ref.get("item_ref", "") for ref in find_children(element, "reference")],
            messages=[(message.text or "").strip() for message in find_children(element, "message")]
        )


def import_syschar(syschar_model: SyscharModel, file_path: Union[str, Path]) -> None:
    """Import a characteristics file into an existing model."""
    SyscharParser().import_into(syschar_model, file_path)
