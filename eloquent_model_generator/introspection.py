"""
Schema introspection for the Eloquent Model Generator.

One introspector class per backend. Each runs its own catalog queries and
normalizes the rows into the shared column and foreign key descriptors.
The variant is chosen once at startup by :func:`create_introspector`.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import closing
from typing import Any, List, Optional, Sequence, Tuple

from .constants import SupportedDatabases, TableNames, DefaultConfig
from .domain.models import ColumnDescriptor, ForeignKeyDescriptor, TableSchema
from .exceptions import ConfigurationError, SchemaIntrospectionError


logger = logging.getLogger(__name__)


class SchemaIntrospector(ABC):
    """
    Base class for backend-specific catalog readers.

    ``connection`` is any DB-API style object with a ``cursor()`` method,
    typically a Django connection handle.
    """

    vendor: str = ""

    def __init__(self, connection: Any, database_name: Optional[str] = None):
        self.connection = connection
        self.database_name = database_name

    # --- Query plumbing ---

    def _query(self, sql: str, params: Optional[Sequence[Any]] = None, table: Optional[str] = None) -> List[Tuple]:
        """Run a catalog query and return all rows; failures raise SchemaIntrospectionError."""
        try:
            with closing(self.connection.cursor()) as cursor:
                if params is None:
                    cursor.execute(sql)
                else:
                    cursor.execute(sql, params)
                return list(cursor.fetchall())
        except Exception as e:
            raise SchemaIntrospectionError(
                f"Catalog query failed on {self.vendor}: {e}", table=table, query=sql
            ) from e

    def _safe(self, operation: str, table: str, fetch) -> list:
        """Run a per-table fetch, reporting failures as an empty sequence."""
        try:
            return fetch()
        except SchemaIntrospectionError as e:
            logger.warning(f"Could not read {operation} for table '{table}': {e.message}")
            return []

    # --- Backend-specific catalog access ---

    @abstractmethod
    def _fetch_table_names(self) -> List[str]:
        ...

    @abstractmethod
    def _fetch_columns(self, table: str) -> List[ColumnDescriptor]:
        ...

    @abstractmethod
    def _fetch_outgoing_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        ...

    @abstractmethod
    def _fetch_incoming_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        ...

    # --- Public contract ---

    def list_tables(self, table_filter: Optional[Sequence[str]] = None) -> List[str]:
        """
        List modelable tables.

        Denylisted framework tables are never returned. With a filter, the
        filter's order is kept and names unknown to the catalog are dropped.
        """
        catalog = [name for name in self._fetch_table_names() if name not in TableNames.DENYLIST]
        logger.debug(f"Tables found in catalog: {', '.join(catalog)}")

        if not table_filter:
            return catalog

        known = set(catalog)
        selected: List[str] = []
        for name in table_filter:
            if name in TableNames.DENYLIST:
                logger.info(f"Excluding framework table: {name}")
            elif name not in known:
                logger.warning(f"Table '{name}' was not found in the database, skipping.")
            elif name not in selected:
                selected.append(name)
        return selected

    def get_columns(self, table: str) -> List[ColumnDescriptor]:
        return self._safe("columns", table, lambda: self._fetch_columns(table))

    def get_outgoing_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        return self._safe("foreign keys", table, lambda: self._fetch_outgoing_foreign_keys(table))

    def get_incoming_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        return self._safe("referencing foreign keys", table, lambda: self._fetch_incoming_foreign_keys(table))

    def describe_table(self, table: str, with_foreign_keys: bool = True) -> TableSchema:
        """Collect everything known about ``table`` into a TableSchema."""
        schema = TableSchema(name=table, columns=self.get_columns(table))
        if with_foreign_keys:
            schema.outgoing_fks = self.get_outgoing_foreign_keys(table)
            schema.incoming_fks = self.get_incoming_foreign_keys(table)
        return schema


class MySQLIntrospector(SchemaIntrospector):
    """MySQL / MariaDB: SHOW statements plus INFORMATION_SCHEMA key usage."""

    vendor = "mysql"

    @staticmethod
    def _quote(identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"

    def _fetch_table_names(self) -> List[str]:
        return [row[0] for row in self._query("SHOW TABLES")]

    def _fetch_columns(self, table: str) -> List[ColumnDescriptor]:
        # Field, Type, Null, Key, Default, Extra
        rows = self._query(f"SHOW COLUMNS FROM {self._quote(table)}", table=table)
        return [
            ColumnDescriptor(name=row[0], raw_type=str(row[1]), nullable=str(row[2]).upper() == "YES")
            for row in rows
        ]

    def _fetch_outgoing_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        rows = self._query(
            """
            SELECT COLUMN_NAME, REFERENCED_TABLE_NAME, REFERENCED_COLUMN_NAME
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE REFERENCED_TABLE_NAME IS NOT NULL
              AND TABLE_SCHEMA = %s
              AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
            """,
            [self.database_name, table],
            table=table,
        )
        return [
            ForeignKeyDescriptor(from_column=col, to_table=ref_table, to_column=ref_col, from_table=table)
            for col, ref_table, ref_col in rows
        ]

    def _fetch_incoming_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        rows = self._query(
            """
            SELECT TABLE_NAME, COLUMN_NAME, REFERENCED_COLUMN_NAME
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE REFERENCED_TABLE_NAME = %s
              AND TABLE_SCHEMA = %s
            ORDER BY TABLE_NAME, ORDINAL_POSITION
            """,
            [table, self.database_name],
            table=table,
        )
        return [
            ForeignKeyDescriptor(from_column=col, to_table=table, to_column=ref_col, from_table=from_table)
            for from_table, col, ref_col in rows
        ]


class PostgresIntrospector(SchemaIntrospector):
    """PostgreSQL: information_schema and pg_catalog restricted to one schema."""

    vendor = "postgresql"

    # Constraint names are only unique per table, so keys are paired through
    # pg_constraint rather than joined by name in information_schema.
    FOREIGN_KEY_SQL = """
        SELECT src.relname, src_col.attname, dst.relname, dst_col.attname
        FROM pg_catalog.pg_constraint AS con
        JOIN pg_catalog.pg_namespace AS ns ON ns.oid = con.connamespace
        JOIN pg_catalog.pg_class AS src ON src.oid = con.conrelid
        JOIN pg_catalog.pg_class AS dst ON dst.oid = con.confrelid
        CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
            WITH ORDINALITY AS k(src_attnum, dst_attnum, position)
        JOIN pg_catalog.pg_attribute AS src_col
          ON src_col.attrelid = con.conrelid AND src_col.attnum = k.src_attnum
        JOIN pg_catalog.pg_attribute AS dst_col
          ON dst_col.attrelid = con.confrelid AND dst_col.attnum = k.dst_attnum
        WHERE con.contype = 'f'
          AND ns.nspname = %s
          AND {side}.relname = %s
        ORDER BY src.relname, con.oid, k.position
    """

    def __init__(self, connection: Any, database_name: Optional[str] = None,
                 schema: str = DefaultConfig.POSTGRES_SCHEMA):
        super().__init__(connection, database_name)
        self.schema = schema

    def _fetch_table_names(self) -> List[str]:
        rows = self._query(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s
              AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            [self.schema],
        )
        return [row[0] for row in rows]

    def _fetch_columns(self, table: str) -> List[ColumnDescriptor]:
        rows = self._query(
            """
            SELECT column_name, data_type, is_nullable
            FROM information_schema.columns
            WHERE table_schema = %s
              AND table_name = %s
            ORDER BY ordinal_position
            """,
            [self.schema, table],
            table=table,
        )
        return [
            ColumnDescriptor(name=name, raw_type=data_type, nullable=str(is_nullable).upper() == "YES")
            for name, data_type, is_nullable in rows
        ]

    def _fetch_foreign_keys(self, table: str, side: str) -> List[ForeignKeyDescriptor]:
        rows = self._query(self.FOREIGN_KEY_SQL.format(side=side), [self.schema, table], table=table)
        return [
            ForeignKeyDescriptor(from_column=col, to_table=ref_table, to_column=ref_col, from_table=from_table)
            for from_table, col, ref_table, ref_col in rows
        ]

    def _fetch_outgoing_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        return self._fetch_foreign_keys(table, side="src")

    def _fetch_incoming_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        return self._fetch_foreign_keys(table, side="dst")


class SQLiteIntrospector(SchemaIntrospector):
    """SQLite: sqlite_master plus PRAGMA table_info / foreign_key_list."""

    vendor = "sqlite"

    @staticmethod
    def _quote(identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def _fetch_table_names(self) -> List[str]:
        rows = self._query(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
            "ORDER BY name"
        )
        return [row[0] for row in rows]

    def _fetch_columns(self, table: str) -> List[ColumnDescriptor]:
        # cid, name, type, notnull, dflt_value, pk
        rows = self._query(f"PRAGMA table_info({self._quote(table)})", table=table)
        return [
            ColumnDescriptor(name=row[1], raw_type=row[2] or "", nullable=not row[3] and not row[5])
            for row in rows
        ]

    def _foreign_key_rows(self, table: str) -> List[Tuple]:
        # id, seq, table, from, to, on_update, on_delete, match
        return self._query(f"PRAGMA foreign_key_list({self._quote(table)})", table=table)

    def _fetch_outgoing_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        # SQLite numbers constraints from the last declared one
        rows = sorted(self._foreign_key_rows(table), key=lambda r: (-r[0], r[1]))
        return [
            ForeignKeyDescriptor(from_column=row[3], to_table=row[2], to_column=row[4] or "id", from_table=table)
            for row in rows
        ]

    def _fetch_incoming_foreign_keys(self, table: str) -> List[ForeignKeyDescriptor]:
        incoming: List[ForeignKeyDescriptor] = []
        for other in self._fetch_table_names():
            for fk in self._fetch_outgoing_foreign_keys(other):
                if fk.to_table == table:
                    incoming.append(fk)
        return incoming


INTROSPECTORS = {
    MySQLIntrospector.vendor: MySQLIntrospector,
    PostgresIntrospector.vendor: PostgresIntrospector,
    SQLiteIntrospector.vendor: SQLiteIntrospector,
}


def create_introspector(
    connection: Any,
    engine: str,
    database_name: Optional[str] = None,
    schema: str = DefaultConfig.POSTGRES_SCHEMA,
) -> SchemaIntrospector:
    """Pick the introspector variant for a Django engine path."""
    vendor = SupportedDatabases.VENDORS.get(engine)
    if vendor is None:
        raise ConfigurationError(
            f"Unsupported database engine: {engine}",
            context={"supported_engines": SupportedDatabases.ALL},
        )

    logger.debug(f"Using {vendor} introspector for database '{database_name}'")
    if vendor == PostgresIntrospector.vendor:
        return PostgresIntrospector(connection, database_name, schema=schema)
    return INTROSPECTORS[vendor](connection, database_name)
