"""
Column type mapping for the Eloquent Model Generator.

A raw catalog type string is classified into an Eloquent cast category and a
PHP doc-block type. Matching is substring based and evaluated in a fixed
order; temporal types come first because their spellings overlap with the
numeric ones (``timestamp`` vs ``int``). New backends add rows to
``TYPE_RULES``, not new branches.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import CastCategory, TypeClassification
from ..constants import EloquentDefaults, FieldNames


def _contains(*needles: str) -> Callable[[str], bool]:
    def predicate(raw_type: str) -> bool:
        return any(needle in raw_type for needle in needles)
    return predicate


def _is_boolean(raw_type: str) -> bool:
    return (
        "bool" in raw_type
        or re.search(r"\b(tinyint|bit)\s*\(\s*1\s*\)", raw_type) is not None
    )


def _is_integer(raw_type: str) -> bool:
    if "interval" in raw_type or "point" in raw_type:
        return False
    return "int" in raw_type or "serial" in raw_type


@dataclass(frozen=True)
class TypeRule:
    """One row of the type table."""

    matches: Callable[[str], bool]
    category: Optional[CastCategory]
    doc_type: str


TYPE_RULES: List[TypeRule] = [
    TypeRule(_contains("timestamp", "datetime"), CastCategory.DATETIME, EloquentDefaults.DATETIME_TYPE),
    TypeRule(_contains("date"), CastCategory.DATE, EloquentDefaults.DATETIME_TYPE),
    TypeRule(_contains("json"), CastCategory.ARRAY, "array"),
    TypeRule(_is_boolean, CastCategory.BOOLEAN, "bool"),
    TypeRule(_is_integer, CastCategory.INTEGER, "int"),
    TypeRule(_contains("decimal", "numeric", "float", "double", "real"), CastCategory.FLOAT, "float"),
]

FALLBACK_DOC_TYPE = "string"


class TypeMapper:
    """
    Maps raw column types to cast categories and doc types.

    The integer cast is suppressed for the primary key column so that
    ``id`` keeps the framework's own key handling; its doc type is still
    ``int``.
    """

    def __init__(self, rules: Optional[List[TypeRule]] = None, primary_key: str = FieldNames.PRIMARY_KEY):
        self.rules = rules if rules is not None else TYPE_RULES
        self.primary_key = primary_key

    def classify(self, raw_type: str, nullable: bool, column_name: Optional[str] = None) -> TypeClassification:
        normalized = (raw_type or "").lower()

        category: Optional[CastCategory] = None
        doc_type = FALLBACK_DOC_TYPE
        for rule in self.rules:
            if rule.matches(normalized):
                category = rule.category
                doc_type = rule.doc_type
                break

        if category is CastCategory.INTEGER and column_name == self.primary_key:
            category = None

        if nullable:
            doc_type += EloquentDefaults.NULLABLE_MARKER

        return TypeClassification(cast_category=category, doc_type=doc_type)


def classify(raw_type: str, nullable: bool, column_name: Optional[str] = None) -> TypeClassification:
    """Classify a column type with the default rule table."""
    return TypeMapper().classify(raw_type, nullable, column_name)
