"""
Tests for the Django-backed connection layer.

Django settings can only be configured once per process, so everything that
needs a real Django connection lives in this module and shares one setup.
"""

import pytest

from eloquent_model_generator import connection as connection_module
from eloquent_model_generator.config_validation import DatabaseSettings
from eloquent_model_generator.constants import SupportedDatabases
from eloquent_model_generator.exceptions import DatabaseConnectionError
from eloquent_model_generator.introspection import create_introspector


@pytest.fixture(scope="module")
def django_connection():
    databases = {
        "default": DatabaseSettings(ENGINE=SupportedDatabases.SQLITE, NAME=":memory:"),
        "broken": {"ENGINE": SupportedDatabases.SQLITE, "NAME": "/nonexistent/dir/db.sqlite3"},
    }
    connection_module.setup_django(databases, secret_key="test-secret")
    conn = connection_module.get_connection()
    with conn.cursor() as cursor:
        cursor.execute("CREATE TABLE authors (id integer PRIMARY KEY, name varchar(100) NOT NULL)")
        cursor.execute(
            "CREATE TABLE books (id integer PRIMARY KEY, title varchar(200) NOT NULL, "
            "author_id integer NULL REFERENCES authors(id), published_on date NULL)"
        )
    yield conn


def test_setup_is_idempotent(django_connection):
    # A second call must not try to reconfigure Django
    connection_module.setup_django({}, secret_key="ignored")
    assert connection_module.get_connection() is django_connection


def test_introspection_through_django_cursor(django_connection):
    introspector = create_introspector(django_connection, SupportedDatabases.SQLITE, ":memory:")

    assert introspector.list_tables() == ["authors", "books"]

    schema = introspector.describe_table("books")
    assert schema.column_names == ["id", "title", "author_id", "published_on"]
    nullable = {col.name: col.nullable for col in schema.columns}
    assert nullable["published_on"] is True
    assert nullable["title"] is False
    assert [(fk.from_column, fk.to_table) for fk in schema.outgoing_fks] == [("author_id", "authors")]

    authors = introspector.describe_table("authors")
    assert [(fk.from_table, fk.from_column) for fk in authors.incoming_fks] == [("books", "author_id")]


def test_unreachable_database_raises(django_connection):
    with pytest.raises(DatabaseConnectionError) as exc_info:
        connection_module.get_connection("broken")
    assert exc_info.value.error_code == "DATABASE_CONNECTION_ERROR"
    assert exc_info.value.context["alias"] == "broken"
    assert exc_info.value.context["engine"] == SupportedDatabases.SQLITE


def test_password_is_masked():
    masked = connection_module._masked({"default": {"NAME": "shop", "PASSWORD": "hunter2"}})
    assert masked == {"default": {"NAME": "shop", "PASSWORD": "***"}}
