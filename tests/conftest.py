# File: tests/conftest.py
# Contains pytest fixtures shared by the unit and end-to-end tests.

import sqlite3
from pathlib import Path
from typing import Generator

import pytest

from eloquent_model_generator.introspection import SQLiteIntrospector


# --- Constants ---
GENERATOR_PROJECT_ROOT = Path(__file__).parent.parent

# A small blog/shop schema: plain table, one-to-many, a pivot table and
# two framework tables that must never be modelled.
SAMPLE_SCHEMA = """
CREATE TABLE products (
    id INTEGER PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    price DECIMAL(8,2) NOT NULL,
    created_at TIMESTAMP
);
CREATE TABLE posts (
    id INTEGER PRIMARY KEY,
    title VARCHAR(255) NOT NULL,
    published BOOLEAN NOT NULL DEFAULT 0,
    meta JSON,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
);
CREATE TABLE comments (
    id INTEGER PRIMARY KEY,
    post_id INTEGER NOT NULL REFERENCES posts(id),
    body TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
);
CREATE TABLE item (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL
);
CREATE TABLE tag (
    id INTEGER PRIMARY KEY,
    label TEXT NOT NULL
);
CREATE TABLE item_tag (
    item_id INTEGER NOT NULL REFERENCES item(id),
    tag_id INTEGER NOT NULL REFERENCES tag(id)
);
CREATE TABLE migrations (
    id INTEGER PRIMARY KEY,
    migration VARCHAR(255) NOT NULL
);
CREATE TABLE sessions (
    id VARCHAR(255) PRIMARY KEY,
    payload TEXT NOT NULL
);
"""


def create_sample_schema(connection) -> None:
    connection.executescript(SAMPLE_SCHEMA)
    connection.commit()


# --- Fixtures ---
@pytest.fixture
def sqlite_connection() -> Generator[sqlite3.Connection, None, None]:
    """In-memory SQLite database loaded with the sample schema."""
    connection = sqlite3.connect(":memory:")
    create_sample_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def sqlite_database_file(tmp_path) -> Path:
    """On-disk SQLite database with the sample schema, for tests that reconnect."""
    db_path = tmp_path / "sample.sqlite3"
    connection = sqlite3.connect(str(db_path))
    create_sample_schema(connection)
    connection.close()
    return db_path


@pytest.fixture
def introspector(sqlite_connection) -> SQLiteIntrospector:
    return SQLiteIntrospector(sqlite_connection, database_name=":memory:")


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "app" / "Models"
