"""
Base probe interface for live system collection.

Defines the contract that all object probes must implement.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from oval_core.logic.models import Entity, Item, OvalObject, ProbeConfig
from oval_core.logic.services.entity_comparison import ComparisonError, compare_values


class UnsupportedObjectError(Exception):
    """The probe cannot collect this object (unsupported entity, operation or behavior)."""
    pass


class BaseProbe(ABC):
    """
    Base interface for all object probes.

    A probe turns one object declaration into the list of items found on the
    running system. An empty list means the object does not exist. Failures
    collecting a single object are raised as ``OSError`` (object flagged as
    error) or ``UnsupportedObjectError`` (object flagged as not collected);
    ``ProbeError`` aborts the whole collection.
    """

    def __init__(self, config: Optional[ProbeConfig] = None):
        """Initialize probe with configuration."""
        self.config = config or ProbeConfig()
        self.logger = logging.getLogger(f"probe.{self.__class__.__name__}")

    @property
    @abstractmethod
    def object_type(self) -> str:
        """Object type handled by this probe, e.g. 'file' for file_object."""
        pass

    @property
    @abstractmethod
    def item_namespace(self) -> str:
        """Namespace of the items this probe produces."""
        pass

    @abstractmethod
    def collect(self, obj: OvalObject) -> List[Item]:
        """
        Collect the items matching an object.

        Args:
            obj: Object declaration to collect

        Returns:
            Items found on the system (empty when the object does not exist)
        """
        pass

    def is_applicable(self) -> bool:
        """Whether this probe's object type applies to the running platform."""
        return True

    def new_item(self) -> Item:
        return Item(item_type=self.object_type, namespace=self.item_namespace)

    def require_entity(self, obj: OvalObject, name: str) -> Entity:
        entity = obj.get_entity(name)
        if entity is None:
            raise UnsupportedObjectError(f"{obj.id}: missing '{name}' entity")
        if entity.var_ref:
            raise UnsupportedObjectError(f"{obj.id}: variable references are not supported ('{name}')")
        return entity

    def entity_matches(self, entity: Entity, candidate: str) -> bool:
        """Match a candidate value against an object entity using its operation."""
        try:
            return compare_values(candidate, entity.value or "", entity.operation, entity.datatype)
        except ComparisonError as e:
            raise UnsupportedObjectError(str(e))
