"""
Centralized constants for the Eloquent Model Generator.

Defaults, reserved column names and the framework bookkeeping tables that are
never turned into models live here so behavior can be tuned in one place.
"""

from typing import Dict, FrozenSet, List


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "./app/Models"
    NAMESPACE = "App\\Models"
    POSTGRES_SCHEMA = "public"
    GENERATE_RELATIONSHIPS = False
    FORCE_UPDATE = False
    FILE_EXTENSION = "php"


class SupportedDatabases:
    """Supported database engines (Django engine paths)."""

    POSTGRESQL = 'django.db.backends.postgresql'
    SQLITE = 'django.db.backends.sqlite3'
    MYSQL = 'django.db.backends.mysql'

    ALL = [POSTGRESQL, SQLITE, MYSQL]

    # Engine path -> short vendor name used for introspector selection
    VENDORS: Dict[str, str] = {
        POSTGRESQL: "postgresql",
        SQLITE: "sqlite",
        MYSQL: "mysql",
    }


# =============================================================================
# SCHEMA CONVENTIONS
# =============================================================================

class TableNames:
    """Framework bookkeeping tables that are never modelled."""

    DENYLIST: FrozenSet[str] = frozenset({
        "migrations",
        "password_reset_tokens",
        "password_resets",
        "failed_jobs",
        "personal_access_tokens",
        "sessions",
        "jobs",
        "job_batches",
        "cache",
        "cache_locks",
    })


class FieldNames:
    """Column names with framework-defined meaning."""

    PRIMARY_KEY = "id"

    # Never mass-assignable
    RESERVED_COLUMNS: List[str] = [
        'id', 'created_at', 'updated_at', 'deleted_at', 'remember_token'
    ]

    # Rendered as @property-read in the doc block
    READ_ONLY_COLUMNS: List[str] = [
        'id', 'created_at', 'updated_at', 'deleted_at'
    ]

    # Suffixes stripped from foreign key columns to name belongs-to methods
    FOREIGN_KEY_SUFFIXES: List[str] = ['_id', '_uuid']


# =============================================================================
# ELOQUENT OUTPUT
# =============================================================================

class EloquentDefaults:
    """Names used in the emitted PHP source."""

    BASE_MODEL = "Illuminate\\Database\\Eloquent\\Model"
    FACTORY_TRAIT = "Illuminate\\Database\\Eloquent\\Factories\\HasFactory"
    COLLECTION = "\\Illuminate\\Database\\Eloquent\\Collection"
    DATETIME_TYPE = "\\Carbon\\Carbon"
    NULLABLE_MARKER = "|null"
    LOCAL_KEY = "id"
