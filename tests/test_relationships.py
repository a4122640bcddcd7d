"""
Tests for relationship inference: belongs-to, has-many, pivot detection,
de-duplication and graceful degradation.
"""

from unittest import TestCase
from unittest.mock import MagicMock

from eloquent_model_generator.domain.models import (
    ColumnDescriptor,
    ForeignKeyDescriptor,
    RelationshipDescriptor,
    RelationshipKind,
    TableSchema,
)
from eloquent_model_generator.domain.relationships import (
    RelationshipInferencer,
    RelationshipSet,
    is_junction_name,
)


def columns_source(tables):
    """Stand-in for the introspector: table name -> list of column names."""
    source = MagicMock()
    source.get_columns.side_effect = lambda table: [
        ColumnDescriptor(name, "integer") for name in tables.get(table, [])
    ]
    return source


class TestJunctionName(TestCase):

    def test_multiple_segments_or_digit(self):
        assert is_junction_name("item_tag")
        assert is_junction_name("role_user_links")
        assert is_junction_name("tags2items")
        assert not is_junction_name("items")
        assert not is_junction_name("_items_")


class TestRelationshipSet(TestCase):

    def test_first_name_wins_ignoring_case(self):
        relationships = RelationshipSet()
        first = RelationshipDescriptor(RelationshipKind.BELONGS_TO, "author", "User", "id", "author_id")
        second = RelationshipDescriptor(RelationshipKind.HAS_MANY, "Author", "Author", "id", "user_id")

        assert relationships.add(first)
        assert not relationships.add(second)
        assert relationships.to_list() == [first]
        assert "AUTHOR" in relationships


class TestRelationshipInferencer(TestCase):

    def test_belongs_to_from_outgoing_keys(self):
        schema = TableSchema(
            name="comments",
            outgoing_fks=[ForeignKeyDescriptor("post_id", "posts", "id", from_table="comments")],
        )
        result = RelationshipInferencer(columns_source({})).infer(schema, ["comments", "posts"])

        assert result.relationships == [
            RelationshipDescriptor(
                kind=RelationshipKind.BELONGS_TO,
                method_name="post",
                related_class_name="Post",
                local_key="id",
                foreign_key="post_id",
            )
        ]
        assert result.warnings == []

    def test_has_many_from_incoming_keys(self):
        schema = TableSchema(
            name="orders",
            incoming_fks=[ForeignKeyDescriptor("order_id", "orders", "id", from_table="order_items")],
        )
        result = RelationshipInferencer(columns_source({})).infer(schema, ["orders", "order_items"])

        assert result.relationships == [
            RelationshipDescriptor(
                kind=RelationshipKind.HAS_MANY,
                method_name="orderItems",
                related_class_name="OrderItem",
                local_key="id",
                foreign_key="order_id",
            )
        ]

    def test_outgoing_relationship_wins_name_collision(self):
        # "Teeth_id" -> belongsTo "teeth"; table "tooth" -> hasMany "teeth"
        schema = TableSchema(
            name="tooth",
            outgoing_fks=[ForeignKeyDescriptor("Teeth_id", "tooth", "id", from_table="tooth")],
            incoming_fks=[ForeignKeyDescriptor("Teeth_id", "tooth", "id", from_table="tooth")],
        )
        result = RelationshipInferencer(columns_source({})).infer(schema, ["tooth"])

        assert result.method_names == ["teeth"]
        assert result.relationships[0].kind is RelationshipKind.BELONGS_TO

    def test_duplicate_outgoing_names_keep_the_first(self):
        schema = TableSchema(
            name="books",
            outgoing_fks=[
                ForeignKeyDescriptor("author_id", "users", "id"),
                ForeignKeyDescriptor("author_uuid", "authors", "uuid"),
            ],
        )
        result = RelationshipInferencer(columns_source({})).infer(schema, ["books"])

        assert result.method_names == ["author"]
        assert result.relationships[0].related_class_name == "User"

    def test_pivot_table_gives_belongs_to_many_with_explicit_keys(self):
        source = columns_source({"item_tag": ["item_id", "tag_id"]})
        schema = TableSchema(name="item")

        result = RelationshipInferencer(source).infer(schema, ["item", "tag", "item_tag"])

        assert result.relationships == [
            RelationshipDescriptor(
                kind=RelationshipKind.BELONGS_TO_MANY,
                method_name="tags",
                related_class_name="Tag",
                local_key="item_id",
                foreign_key="tag_id",
                pivot_table="item_tag",
            )
        ]
        source.get_columns.assert_called_once_with("item_tag")

    def test_pivot_found_from_plural_table_name(self):
        source = columns_source({"post_tag": ["post_id", "tag_id"]})
        result = RelationshipInferencer(source).infer(TableSchema(name="posts"), ["posts", "tags", "post_tag"])

        assert result.method_names == ["tags"]
        assert result.relationships[0].pivot_table == "post_tag"

    def test_pivot_related_table_keeps_inner_id_segments(self):
        source = columns_source({"item_user_identity": ["item_id", "user_identity_id"]})
        result = RelationshipInferencer(source).infer(
            TableSchema(name="item"), ["item", "user_identity", "item_user_identity"]
        )

        relationship = result.relationships[0]
        assert relationship.related_class_name == "UserIdentity"
        assert relationship.local_key == "item_id"
        assert relationship.foreign_key == "user_identity_id"
        assert relationship.pivot_table == "item_user_identity"

    def test_rejected_pivot_candidates_are_reported(self):
        source = columns_source({
            "item_tag": ["item_id", "tag_id", "creator_id"],
            "item_logs": ["id", "message"],
        })
        result = RelationshipInferencer(source).infer(TableSchema(name="item"), ["item", "item_tag", "item_logs"])

        assert result.relationships == []
        assert len(result.warnings) == 2
        assert "item_tag" in result.warnings[0]
        assert "item_logs" in result.warnings[1]

    def test_pivot_without_local_key_is_reported(self):
        source = columns_source({"item_tag": ["thing_id", "tag_id"]})
        result = RelationshipInferencer(source).infer(TableSchema(name="item"), ["item", "item_tag"])

        assert result.relationships == []
        assert "item_id" in result.warnings[0]

    def test_failure_degrades_to_empty_result_with_warning(self):
        source = MagicMock()
        source.get_columns.side_effect = RuntimeError("connection lost")
        schema = TableSchema(
            name="item",
            outgoing_fks=[ForeignKeyDescriptor("owner_id", "users", "id")],
        )

        result = RelationshipInferencer(source).infer(schema, ["item", "item_tag"])

        assert result.relationships == []
        assert len(result.warnings) == 1
        assert "connection lost" in result.warnings[0]

    def test_special_relationships_fill_free_names_only(self):
        special = {
            "users": [
                RelationshipDescriptor(RelationshipKind.HAS_MANY, "sessions", "Session", "id", "user_id"),
                RelationshipDescriptor(RelationshipKind.HAS_MANY, "Posts", "Article", "id", "author_id"),
            ]
        }
        schema = TableSchema(
            name="users",
            incoming_fks=[ForeignKeyDescriptor("user_id", "users", "id", from_table="posts")],
        )

        result = RelationshipInferencer(columns_source({}), special).infer(schema, ["users", "posts"])

        assert result.method_names == ["posts", "sessions"]
        assert result.relationships[0].related_class_name == "Post"
