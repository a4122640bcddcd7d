"""
Mapping from introspected tables to model file specifications.

This module turns a :class:`TableSchema` plus its inferred relationships into
the :class:`ModelFileSpec` the emitter and the patcher work from. It decides
which columns are mass-assignable, which get a cast and how each column and
relationship is described in the class doc block.

Example:
    >>> from .mapper import build_model_spec
    >>> spec = build_model_spec(schema, "App\\Models", relationships)
    >>> spec.fillable_fields
    ('name', 'price')
"""

import logging
from typing import Dict, List, Optional, Sequence

from .constants import EloquentDefaults, FieldNames
from .domain.field_mapping import TypeMapper
from .domain.models import (
    CastCategory,
    DocProperty,
    ModelFileSpec,
    RelationshipDescriptor,
    TableSchema,
)
from .domain.naming import to_class_name


logger = logging.getLogger(__name__)


def qualified_class_name(namespace: str, class_name: str) -> str:
    """``App\\Models`` + ``Post`` -> ``\\App\\Models\\Post``."""
    namespace = namespace.strip("\\")
    return f"\\{namespace}\\{class_name}"


def relationship_doc_type(relationship: RelationshipDescriptor, namespace: str) -> str:
    related = qualified_class_name(namespace, relationship.related_class_name)
    if relationship.kind.is_collection:
        return f"{EloquentDefaults.COLLECTION}|{related}[]"
    return related


def build_model_spec(
    schema: TableSchema,
    namespace: str,
    relationships: Sequence[RelationshipDescriptor] = (),
    type_mapper: Optional[TypeMapper] = None,
) -> ModelFileSpec:
    """
    Build the complete model description for one table.

    Reserved columns (primary key, timestamps, soft-delete and remember
    token) are left out of the fillable list but keep their casts and doc
    entries. Column order from the catalog is preserved everywhere.
    """
    type_mapper = type_mapper or TypeMapper()

    fillable: List[str] = []
    casts: Dict[str, CastCategory] = {}
    doc_block: List[DocProperty] = []

    for col in schema.columns:
        classification = type_mapper.classify(col.raw_type, col.nullable, column_name=col.name)

        if col.name not in FieldNames.RESERVED_COLUMNS:
            fillable.append(col.name)
        if classification.cast_category is not None:
            casts[col.name] = classification.cast_category

        doc_block.append(DocProperty(
            name=col.name,
            type=classification.doc_type,
            read_only=col.name in FieldNames.READ_ONLY_COLUMNS,
        ))

    for rel in relationships:
        doc_block.append(DocProperty(
            name=rel.method_name,
            type=relationship_doc_type(rel, namespace),
            read_only=True,
        ))

    spec = ModelFileSpec(
        class_name=to_class_name(schema.name),
        namespace=namespace,
        table_name=schema.name,
        fillable_fields=tuple(fillable),
        casts=casts,
        relationships=tuple(relationships),
        doc_block=tuple(doc_block),
    )
    logger.debug(
        f"Mapped '{schema.name}' -> {spec.class_name}: "
        f"{len(spec.fillable_fields)} fillable, {len(spec.casts)} casts, "
        f"{len(spec.relationships)} relationships"
    )
    return spec
