"""
Domain module for the Eloquent Model Generator.

Schema descriptors, naming rules, type mapping and relationship inference,
free of any database or filesystem access.
"""

from .models import (
    CastCategory,
    ChangeKind,
    ColumnDescriptor,
    DocProperty,
    ForeignKeyDescriptor,
    GenerationOutcome,
    GenerationSummary,
    InferenceResult,
    ModelFileSpec,
    RelationshipDescriptor,
    RelationshipKind,
    TableSchema,
    TypeClassification,
)

from .naming import (
    NamingConventions,
    singularize,
    pluralize,
    to_pascal_case,
    to_camel_case,
    to_class_name,
    to_method_name,
    strip_key_suffix,
    belongs_to_method_name,
    collection_method_name,
)

from .field_mapping import (
    TypeMapper,
    TypeRule,
    TYPE_RULES,
    classify,
)

from .relationships import (
    RelationshipInferencer,
    RelationshipSet,
    is_junction_name,
)

__all__ = [
    # Core models
    'CastCategory',
    'ChangeKind',
    'ColumnDescriptor',
    'DocProperty',
    'ForeignKeyDescriptor',
    'GenerationOutcome',
    'GenerationSummary',
    'InferenceResult',
    'ModelFileSpec',
    'RelationshipDescriptor',
    'RelationshipKind',
    'TableSchema',
    'TypeClassification',

    # Naming
    'NamingConventions',
    'singularize',
    'pluralize',
    'to_pascal_case',
    'to_camel_case',
    'to_class_name',
    'to_method_name',
    'strip_key_suffix',
    'belongs_to_method_name',
    'collection_method_name',

    # Type mapping
    'TypeMapper',
    'TypeRule',
    'TYPE_RULES',
    'classify',

    # Relationships
    'RelationshipInferencer',
    'RelationshipSet',
    'is_junction_name',
]
