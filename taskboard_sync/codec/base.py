"""
Base class for entity codecs.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, List, Sequence, Tuple, TypeVar

from pydantic import ValidationError

from ..models.primitives import Entity
from .cells import Table

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)


class EntityCodec(ABC, Generic[T]):
    """Maps one entity kind to a sheet tab and back.

    Row 0 of every table is the fixed header; each following row holds one
    entity with columns in header order.
    """

    #: Sheet tab name used as the payload key
    table_name: str = ""
    #: Snapshot attribute holding this kind's collection
    collection: str = ""
    header: Tuple[str, ...] = ()

    @abstractmethod
    def to_row(self, entity: T) -> List[Any]:
        """Flatten one entity into a row of cells."""
        pass

    @abstractmethod
    def from_row(self, row: Sequence[Any]) -> T:
        """Build one entity from a row padded to the header width.

        May raise ValidationError when the row cannot form a valid entity.
        """
        pass

    def encode(self, entities: Iterable[T]) -> Table:
        """Encode a collection into a table (header row first)."""
        return [list(self.header)] + [self.to_row(entity) for entity in entities]

    def decode(self, table: Any) -> List[T]:
        """Decode a table into a collection.

        Never raises: a missing or header-only table is an empty collection,
        blank rows are skipped and invalid rows are dropped with a warning.
        """
        if not isinstance(table, list) or len(table) < 2:
            return []

        entities: List[T] = []
        width = len(self.header)
        for index, row in enumerate(table[1:], start=1):
            if not isinstance(row, (list, tuple)):
                logger.warning("%s row %d is not a list, skipping", self.table_name, index)
                continue
            cells = list(row) + [""] * (width - len(row))
            if all(cell is None or cell == "" for cell in cells):
                continue
            try:
                entities.append(self.from_row(cells))
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning("Dropping invalid %s row %d: %s", self.table_name, index, e)
        return entities

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table_name={self.table_name!r})"
