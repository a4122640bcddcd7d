"""
Relationship inference for the Eloquent Model Generator.

Relationships for a table are derived in a fixed order: belongs-to from the
table's own foreign keys, has-many from keys on other tables that point at
it, belongs-to-many from pivot tables found by naming heuristics, and finally
any configured special cases. Method names are unique per table ignoring
case; whichever relationship claims a name first keeps it.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from .models import (
    ColumnDescriptor,
    InferenceResult,
    RelationshipDescriptor,
    RelationshipKind,
    TableSchema,
)
from .naming import (
    belongs_to_method_name,
    collection_method_name,
    singularize,
    to_class_name,
)
from ..constants import EloquentDefaults


logger = logging.getLogger(__name__)

PIVOT_KEY_MARKER = "_id"


class ColumnSource(Protocol):
    """The slice of the schema introspector the inferencer needs."""

    def get_columns(self, table: str) -> List[ColumnDescriptor]:
        ...


def is_junction_name(table_name: str) -> bool:
    """A pivot table name has several underscore-delimited segments or a digit."""
    segments = [segment for segment in table_name.split("_") if segment]
    return len(segments) >= 2 or re.search(r"\d", table_name) is not None


class RelationshipSet:
    """Ordered relationship descriptors, unique by case-insensitive method name."""

    def __init__(self):
        self._items: List[RelationshipDescriptor] = []
        self._names = set()

    def __contains__(self, method_name: str) -> bool:
        return method_name.lower() in self._names

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, descriptor: RelationshipDescriptor) -> bool:
        """Add a descriptor unless its name is taken. Returns whether it was added."""
        if descriptor.method_name in self:
            return False
        self._items.append(descriptor)
        self._names.add(descriptor.method_name.lower())
        return True

    def to_list(self) -> List[RelationshipDescriptor]:
        return list(self._items)


class RelationshipInferencer:
    """
    Derives relationship descriptors for one table at a time.

    Args:
        columns: where pivot candidate columns are read from
        special_relationships: extra descriptors per table name, layered on
            top of the inferred ones when their method name is still free
    """

    def __init__(
        self,
        columns: ColumnSource,
        special_relationships: Optional[Dict[str, Sequence[RelationshipDescriptor]]] = None,
    ):
        self.columns = columns
        self.special_relationships = special_relationships or {}

    def infer(self, schema: TableSchema, all_tables: Iterable[str]) -> InferenceResult:
        """
        Infer relationships for ``schema``.

        Any failure while reading the catalog degrades to an empty result
        carrying a warning; the caller keeps going with the next table.
        """
        result = InferenceResult()
        try:
            relationships = RelationshipSet()
            self._add_belongs_to(schema, relationships)
            self._add_has_many(schema, relationships)
            self._add_belongs_to_many(schema, list(all_tables), relationships, result.warnings)
            self._add_special(schema, relationships)
        except Exception as e:
            logger.debug(f"Relationship inference failed for '{schema.name}'", exc_info=True)
            return InferenceResult(
                relationships=[],
                warnings=[f"Could not infer relationships for '{schema.name}': {e}"],
            )

        result.relationships = relationships.to_list()
        logger.debug(f"Inferred relationships for '{schema.name}': {result.method_names}")
        return result

    # --- Belongs-To ---

    def _add_belongs_to(self, schema: TableSchema, relationships: RelationshipSet) -> None:
        for fk in schema.outgoing_fks:
            relationships.add(RelationshipDescriptor(
                kind=RelationshipKind.BELONGS_TO,
                method_name=belongs_to_method_name(fk.from_column),
                related_class_name=to_class_name(fk.to_table),
                local_key=fk.to_column,
                foreign_key=fk.from_column,
            ))

    # --- Has-Many ---

    def _add_has_many(self, schema: TableSchema, relationships: RelationshipSet) -> None:
        for fk in schema.incoming_fks:
            if not fk.from_table:
                continue
            relationships.add(RelationshipDescriptor(
                kind=RelationshipKind.HAS_MANY,
                method_name=collection_method_name(fk.from_table),
                related_class_name=to_class_name(fk.from_table),
                local_key=EloquentDefaults.LOCAL_KEY,
                foreign_key=fk.from_column,
            ))

    # --- Belongs-To-Many ---

    def find_pivot_candidates(self, table_name: str, all_tables: Sequence[str]) -> List[str]:
        """Tables whose name suggests they join ``table_name`` to something else."""
        names = {table_name, singularize(table_name)}
        return [
            candidate for candidate in all_tables
            if candidate != table_name
            and any(name in candidate for name in names)
            and is_junction_name(candidate)
        ]

    def _add_belongs_to_many(
        self,
        schema: TableSchema,
        all_tables: Sequence[str],
        relationships: RelationshipSet,
        warnings: List[str],
    ) -> None:
        local_keys = [f"{schema.name}{PIVOT_KEY_MARKER}", f"{singularize(schema.name)}{PIVOT_KEY_MARKER}"]

        for pivot in self.find_pivot_candidates(schema.name, all_tables):
            key_columns = [
                col.name for col in self.columns.get_columns(pivot)
                if PIVOT_KEY_MARKER in col.name
            ]
            if len(key_columns) != 2:
                warnings.append(
                    f"Possible pivot table '{pivot}' for '{schema.name}' has "
                    f"{len(key_columns)} key-like columns, expected 2; review manually."
                )
                continue

            local_key = next((key for key in local_keys if key in key_columns), None)
            if local_key is None:
                warnings.append(
                    f"Possible pivot table '{pivot}' for '{schema.name}' has no "
                    f"'{local_keys[-1]}' column; review manually."
                )
                continue

            other_key = next(key for key in key_columns if key != local_key)
            related_table = (
                other_key[:-len(PIVOT_KEY_MARKER)] if other_key.endswith(PIVOT_KEY_MARKER) else other_key
            )
            related_key = f"{related_table}{PIVOT_KEY_MARKER}"
            explicit = related_key in key_columns

            descriptor = RelationshipDescriptor(
                kind=RelationshipKind.BELONGS_TO_MANY,
                method_name=collection_method_name(related_table),
                related_class_name=to_class_name(related_table),
                local_key=local_key if explicit else None,
                foreign_key=related_key if explicit else None,
                pivot_table=pivot,
            )
            if not relationships.add(descriptor):
                warnings.append(
                    f"Pivot table '{pivot}' would add '{descriptor.method_name}' to "
                    f"'{schema.name}' but that name is already used; review manually."
                )

    # --- Special cases ---

    def _add_special(self, schema: TableSchema, relationships: RelationshipSet) -> None:
        for descriptor in self.special_relationships.get(schema.name, ()):
            relationships.add(descriptor)
