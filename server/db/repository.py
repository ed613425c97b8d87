# Repository abstraction over entity collections

import abc
from typing import Dict, List, Optional, Generic, TypeVar

from utils.exceptions import NotFoundError

T = TypeVar('T')


class Repository(abc.ABC, Generic[T]):
    """
    Keyed collection of entities.

    Implementations store whole records; callers replace an entity rather than
    mutating it. snapshot()/restore() let the store roll back a failed transaction.
    """

    entity_name = "entity"

    @abc.abstractmethod
    def get(self, entity_id: str) -> Optional[T]:
        """Return the entity or None"""

    @abc.abstractmethod
    def list(self) -> List[T]:
        """All entities in insertion order"""

    @abc.abstractmethod
    def add(self, entity: T) -> T:
        """Insert a new entity; its id must be unused"""

    @abc.abstractmethod
    def replace(self, entity: T) -> T:
        """Swap the stored record that has the same id"""

    @abc.abstractmethod
    def delete(self, entity_id: str) -> T:
        """Remove and return the entity"""

    @abc.abstractmethod
    def snapshot(self) -> object:
        """Opaque copy of the current contents"""

    @abc.abstractmethod
    def restore(self, snapshot: object):
        """Return to the contents captured by snapshot()"""

    def require(self, entity_id: str) -> T:
        entity = self.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} {entity_id} not found")
        return entity

    def __len__(self) -> int:
        return len(self.list())


class InMemoryRepository(Repository[T]):
    """Process-memory repository backed by an insertion-ordered dict"""

    def __init__(self, entity_name: str = "entity"):
        self.entity_name = entity_name
        self._items: Dict[str, T] = {}

    def get(self, entity_id: str) -> Optional[T]:
        return self._items.get(entity_id)

    def list(self) -> List[T]:
        return list(self._items.values())

    def add(self, entity: T) -> T:
        if entity.id in self._items:
            raise ValueError(f"{self.entity_name} {entity.id} already exists")
        self._items[entity.id] = entity
        return entity

    def replace(self, entity: T) -> T:
        if entity.id not in self._items:
            raise NotFoundError(f"{self.entity_name} {entity.id} not found")
        self._items[entity.id] = entity
        return entity

    def delete(self, entity_id: str) -> T:
        try:
            return self._items.pop(entity_id)
        except KeyError:
            raise NotFoundError(f"{self.entity_name} {entity_id} not found")

    def snapshot(self) -> object:
        # entities are immutable, a shallow copy is enough
        return dict(self._items)

    def restore(self, snapshot: object):
        self._items = dict(snapshot)
