"""
Naming convention utilities for the Eloquent Model Generator.

Table names are plural snake_case, model classes are singular PascalCase and
relationship methods are camelCase. The inflection rules are deliberately
small and deterministic: an irregular-noun table consulted first, then an
ordered list of suffix rewrites where the first match wins.
"""

import re
from typing import Dict, List, Tuple

from ..constants import FieldNames


IRREGULAR_PLURAL_TO_SINGULAR: Dict[str, str] = {
    'people': 'person',
    'children': 'child',
    'men': 'man',
    'women': 'woman',
    'teeth': 'tooth',
    'feet': 'foot',
    'mice': 'mouse',
    'geese': 'goose',
}

IRREGULAR_SINGULAR_TO_PLURAL: Dict[str, str] = {
    singular: plural for plural, singular in IRREGULAR_PLURAL_TO_SINGULAR.items()
}

# (pattern, replacement); most specific suffix first
SINGULAR_RULES: List[Tuple[str, str]] = [
    (r'(.*)ies$', r'\1y'),
    (r'(.*)ses$', r'\1s'),
    (r'(.*)xes$', r'\1x'),
    (r'(.*)ches$', r'\1ch'),
    (r'(.*)shes$', r'\1sh'),
    (r'(.*)uses$', r'\1us'),
    (r'(.*)sses$', r'\1ss'),
    # Already singular: class, status, analysis
    (r'(.*(?:ss|us|is))$', r'\1'),
    (r'(.*)s$', r'\1'),
]

PLURAL_RULES: List[Tuple[str, str]] = [
    (r'(.*[^aeiou])y$', r'\1ies'),
    (r'(.*)(ss|us|s|x|z|ch|sh)$', r'\1\2es'),
    (r'(.*)$', r'\1s'),
]


def _apply_rules(word: str, rules: List[Tuple[str, str]]) -> str:
    for pattern, replacement in rules:
        if re.match(pattern, word):
            return re.sub(pattern, replacement, word, count=1)
    return word


def singularize(noun: str) -> str:
    """
    Convert a plural noun to its singular form.

    Example:
        >>> singularize("categories")
        'category'
        >>> singularize("people")
        'person'
    """
    if not noun:
        return noun
    if noun in IRREGULAR_PLURAL_TO_SINGULAR:
        return IRREGULAR_PLURAL_TO_SINGULAR[noun]
    return _apply_rules(noun, SINGULAR_RULES)


def pluralize(noun: str) -> str:
    """
    Convert a singular noun to its plural form.

    Example:
        >>> pluralize("category")
        'categories'
        >>> pluralize("child")
        'children'
    """
    if not noun:
        return noun
    if noun in IRREGULAR_SINGULAR_TO_PLURAL:
        return IRREGULAR_SINGULAR_TO_PLURAL[noun]
    return _apply_rules(noun, PLURAL_RULES)


def to_pascal_case(identifier: str) -> str:
    """Convert snake_case to PascalCase without touching the grammatical number."""
    return "".join(segment[:1].upper() + segment[1:] for segment in identifier.split("_") if segment)


def to_camel_case(identifier: str) -> str:
    """Convert snake_case to camelCase without touching the grammatical number."""
    pascal = to_pascal_case(identifier)
    return pascal[:1].lower() + pascal[1:]


def to_class_name(identifier: str) -> str:
    """
    Convert a table name to a model class name.

    Example:
        >>> to_class_name("order_items")
        'OrderItem'
    """
    return to_pascal_case(singularize(identifier))


def to_method_name(identifier: str) -> str:
    """Same as :func:`to_class_name` with a lower-case first character."""
    class_name = to_class_name(identifier)
    return class_name[:1].lower() + class_name[1:]


def strip_key_suffix(column_name: str) -> str:
    """Drop a trailing ``_id`` and then a trailing ``_uuid`` from a column name."""
    name = column_name
    for suffix in FieldNames.FOREIGN_KEY_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            name = name[:-len(suffix)]
    return name


def belongs_to_method_name(column_name: str) -> str:
    """
    Name the belongs-to method for a foreign key column.

    Example:
        >>> belongs_to_method_name("author_id")
        'author'
    """
    return to_method_name(strip_key_suffix(column_name))


def collection_method_name(table_name: str) -> str:
    """
    Name a has-many / belongs-to-many method: the related class, pluralized, camelCased.

    Example:
        >>> collection_method_name("order_items")
        'orderItems'
    """
    return to_camel_case(pluralize(singularize(table_name)))


class NamingConventions:
    """
    Centralized naming convention utilities.

    This class provides consistent naming across the codebase.
    """

    @staticmethod
    def table_to_class(table_name: str) -> str:
        return to_class_name(table_name)

    @staticmethod
    def foreign_key_to_method(column_name: str) -> str:
        return belongs_to_method_name(column_name)

    @staticmethod
    def table_to_collection_method(table_name: str) -> str:
        return collection_method_name(table_name)
