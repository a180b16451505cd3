"""
System characteristics domain models.

Holds the facts observed on a system: collected objects keyed by object id,
the items they reference and optional host metadata. Built once per run,
either by live probing or by file import.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import logging

from .definition_model import DefinitionModel


class ObjectFlag(Enum):
    """Collection outcome for one object."""
    ERROR = "error"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    DOES_NOT_EXIST = "does not exist"
    NOT_COLLECTED = "not collected"
    NOT_APPLICABLE = "not applicable"


class ItemStatus(Enum):
    """Collection status of one item or item entity."""
    ERROR = "error"
    EXISTS = "exists"
    DOES_NOT_EXIST = "does not exist"
    NOT_COLLECTED = "not collected"


@dataclass
class NetworkInterface:
    """One network interface of the probed host."""
    name: str
    ip_address: str = ""
    mac_address: str = ""


@dataclass
class SystemInfo:
    """Host and platform metadata."""
    os_name: str = ""
    os_version: str = ""
    architecture: str = ""
    primary_host_name: str = ""
    interfaces: List[NetworkInterface] = field(default_factory=list)


@dataclass
class ItemEntity:
    """A single collected value."""
    name: str
    value: Optional[str]
    datatype: str = "string"
    status: ItemStatus = ItemStatus.EXISTS


@dataclass
class Item:
    """A collected item, for example one file or one environment variable."""
    item_type: str
    namespace: str = ""
    status: ItemStatus = ItemStatus.EXISTS
    entities: List[ItemEntity] = field(default_factory=list)
    id: Optional[str] = None

    def add_entity(self, name: str, value, datatype: str = "string") -> 'Item':
        """Append an entity; ``None`` values are recorded with status does not exist."""
        if value is None:
            self.entities.append(ItemEntity(name, None, datatype, ItemStatus.DOES_NOT_EXIST))
        else:
            self.entities.append(ItemEntity(name, str(value), datatype))
        return self

    def get_entities(self, name: str) -> List[ItemEntity]:
        return [entity for entity in self.entities if entity.name == name]

    def get_values(self, name: str) -> List[str]:
        """Values of the existing entities with the given name."""
        return [
            entity.value for entity in self.entities
            if entity.name == name and entity.status == ItemStatus.EXISTS and entity.value is not None
        ]


@dataclass
class CollectedObject:
    """Collection result for one object: a flag plus references to items."""
    object_id: str
    flag: ObjectFlag
    version: str = "1"
    item_refs: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


class SyscharModel:
    """
    Observed system characteristics for one definition model.

    The definition model is borrowed, not owned: releasing a SyscharModel does
    not release the definitions it was built from.
    """

    def __init__(self, definition_model: DefinitionModel):
        self.definition_model = definition_model
        self.sysinfo: Optional[SystemInfo] = None
        self.collected_objects: Dict[str, CollectedObject] = {}
        self.items: Dict[str, Item] = {}
        self.schema_version = definition_model.schema_version
        self._next_item_id = 1
        self._released = False
        self.logger = logging.getLogger("model.syschar")

    @property
    def released(self) -> bool:
        return self._released

    def set_sysinfo(self, sysinfo: SystemInfo) -> None:
        """Attach host metadata. Allowed once per model."""
        if self.sysinfo is not None:
            raise ValueError("System info is already set for this model")
        self.sysinfo = sysinfo

    def add_item(self, item: Item) -> str:
        """Store an item, assigning an id when it has none, and return the id."""
        if item.id is None:
            while str(self._next_item_id) in self.items:
                self._next_item_id += 1
            item.id = str(self._next_item_id)
            self._next_item_id += 1
        self.items[item.id] = item
        return item.id

    def add_collected_object(self, collected: CollectedObject) -> None:
        self.collected_objects[collected.object_id] = collected

    def get_collected_object(self, object_id: str) -> Optional[CollectedObject]:
        return self.collected_objects.get(object_id)

    def get_item(self, item_id: str) -> Optional[Item]:
        return self.items.get(item_id)

    def get_items_for(self, collected: CollectedObject) -> List[Item]:
        """Resolve the item references of a collected object, skipping dangling ones."""
        items = []
        for item_ref in collected.item_refs:
            item = self.items.get(item_ref)
            if item is None:
                self.logger.warning(f"Object {collected.object_id} references unknown item {item_ref}")
                continue
            items.append(item)
        return items

    def release(self) -> None:
        """Drop all collected content. Safe to call more than once."""
        if self._released:
            return
        self.collected_objects.clear()
        self.items.clear()
        self.sysinfo = None
        self._released = True
        self.logger.debug("Released system characteristics model")
