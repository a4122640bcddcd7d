"""
Tests for configuration loading and validation.
"""

import argparse
from unittest import TestCase

import pytest
import yaml

from eloquent_model_generator.codegen import ModelEmitter
from eloquent_model_generator.config_validation import ToolConfigSchema, load_config
from eloquent_model_generator.constants import SupportedDatabases
from eloquent_model_generator.domain.models import ModelFileSpec, RelationshipKind


SQLITE_DATABASES = {
    "default": {"ENGINE": SupportedDatabases.SQLITE, "NAME": "db.sqlite3"},
}


def cli_args(**overrides):
    values = {
        "config": None,
        "tables": None,
        "output_dir": None,
        "namespace": None,
        "relationships": None,
        "force": None,
        "verbose": False,
        "no_color": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestToolConfigSchema(TestCase):

    def test_defaults(self):
        config = ToolConfigSchema.model_validate({"databases": SQLITE_DATABASES})

        assert config.output_dir == "./app/Models"
        assert config.namespace == "App\\Models"
        assert config.tables is None
        assert config.relationships is False
        assert config.force is False
        assert config.schema_name == "public"
        assert config.special_relationships == {}

    def test_tables_accepts_comma_separated_string(self):
        config = ToolConfigSchema.model_validate({"databases": SQLITE_DATABASES, "tables": "users, posts,,"})
        assert config.tables == ["users", "posts"]

    def test_namespace_is_normalized(self):
        config = ToolConfigSchema.model_validate({"databases": SQLITE_DATABASES, "namespace": "\\Domain\\Blog\\"})
        assert config.namespace == "Domain\\Blog"

    def test_invalid_namespace(self):
        with pytest.raises(ValueError):
            ToolConfigSchema.model_validate({"databases": SQLITE_DATABASES, "namespace": "App/Models"})

    def test_default_database_required(self):
        with pytest.raises(ValueError):
            ToolConfigSchema.model_validate({"databases": {"other": SQLITE_DATABASES["default"]}})

    def test_unsupported_engine(self):
        with pytest.raises(ValueError):
            ToolConfigSchema.model_validate(
                {"databases": {"default": {"ENGINE": "django.db.backends.oracle", "NAME": "x"}}}
            )

    def test_port_validation(self):
        databases = {"default": {"ENGINE": SupportedDatabases.POSTGRESQL, "NAME": "shop", "PORT": "5432"}}
        config = ToolConfigSchema.model_validate({"databases": databases})
        assert config.default_database.PORT == 5432

        databases["default"]["PORT"] = "99999"
        with pytest.raises(ValueError):
            ToolConfigSchema.model_validate({"databases": databases})

    def test_schema_alias(self):
        config = ToolConfigSchema.model_validate({"databases": SQLITE_DATABASES, "schema": "sales"})
        assert config.schema_name == "sales"

    def test_special_relationships(self):
        config = ToolConfigSchema.model_validate({
            "databases": SQLITE_DATABASES,
            "special_relationships": {
                "users": [
                    {"kind": "hasMany", "method_name": "tokens", "related_class_name": "Token",
                     "local_key": "id", "foreign_key": "user_id"},
                ],
            },
        })

        descriptors = config.special_relationship_descriptors()

        assert descriptors["users"][0].kind is RelationshipKind.HAS_MANY
        assert descriptors["users"][0].method_name == "tokens"
        assert descriptors["users"][0].foreign_key == "user_id"

    def test_special_relationship_kind_is_validated(self):
        with pytest.raises(ValueError):
            ToolConfigSchema.model_validate({
                "databases": SQLITE_DATABASES,
                "special_relationships": {
                    "users": [{"kind": "hasOne", "method_name": "profile", "related_class_name": "Profile"}],
                },
            })

    def test_special_relationship_without_keys_renders_inferred_form(self):
        config = ToolConfigSchema.model_validate({
            "databases": SQLITE_DATABASES,
            "special_relationships": {
                "users": [{"kind": "hasMany", "method_name": "posts", "related_class_name": "Post"}],
            },
        })
        spec = ModelFileSpec(
            class_name="User",
            namespace="App\\Models",
            table_name="users",
            relationships=tuple(config.special_relationship_descriptors()["users"]),
        )

        output = ModelEmitter().render(spec)

        assert "return $this->hasMany(Post::class);" in output
        assert "'None'" not in output

    def test_special_belongs_to_many_requires_pivot_table(self):
        with pytest.raises(ValueError, match="pivot_table"):
            ToolConfigSchema.model_validate({
                "databases": SQLITE_DATABASES,
                "special_relationships": {
                    "users": [{"kind": "belongsToMany", "method_name": "roles", "related_class_name": "Role"}],
                },
            })


def write_config(tmp_path, data):
    path = tmp_path / "config.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return str(path)


def test_file_values_and_cli_overrides(tmp_path):
    path = write_config(tmp_path, {
        "databases": SQLITE_DATABASES,
        "namespace": "Domain\\Shop",
        "tables": ["users"],
        "relationships": True,
    })

    config = load_config(path, cli_args(tables="posts,comments", force=True))

    assert config.namespace == "Domain\\Shop"
    assert config.tables == ["posts", "comments"]
    assert config.relationships is True
    assert config.force is True
    assert config.SECRET_KEY


def test_unset_cli_flags_do_not_override_file(tmp_path):
    path = write_config(tmp_path, {"databases": SQLITE_DATABASES, "force": True})
    config = load_config(path, cli_args())
    assert config.force is True


def test_output_dir_is_resolved(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = write_config(tmp_path, {"databases": SQLITE_DATABASES})
    config = load_config(path, cli_args(output_dir="models"))
    assert config.output_dir == str((tmp_path / "models").resolve())


def test_validation_failure_exits_with_status_1(tmp_path, capsys):
    path = write_config(tmp_path, {"namespace": "App\\Models"})
    with pytest.raises(SystemExit) as exc_info:
        load_config(path, cli_args())
    assert exc_info.value.code == 1
    assert "databases" in capsys.readouterr().err


def test_missing_file_without_databases_exits(tmp_path):
    with pytest.raises(SystemExit):
        load_config(str(tmp_path / "missing.yaml"), cli_args())
