import logging
from typing import Any, Dict

import django
from django.conf import settings
from django.db import connections, DEFAULT_DB_ALIAS

from .exceptions import DatabaseConnectionError


logger = logging.getLogger(__name__)

_django_setup_done = False


def setup_django(db_settings: Dict[str, Any], secret_key: str) -> None:
    """Configures minimal Django settings and runs django.setup()."""
    global _django_setup_done
    if _django_setup_done:
        logger.debug("Django setup already performed.")
        return

    plain_db_settings: Dict[str, Dict[str, Any]] = {}
    for alias, db_model in db_settings.items():
        if hasattr(db_model, "model_dump"):
            plain_db_settings[alias] = db_model.model_dump(exclude_none=True)
        elif isinstance(db_model, dict):
            plain_db_settings[alias] = db_model
        else:
            raise TypeError(f"Invalid database settings type for alias '{alias}': {type(db_model).__name__}")

    logger.debug(f"Using DB settings for Django: {_masked(plain_db_settings)}")
    try:
        settings.configure(
            SECRET_KEY=secret_key,
            DATABASES=plain_db_settings,
            TIME_ZONE="UTC",
            USE_TZ=True,
        )
        django.setup()
    except Exception as e:
        logger.error(f"Failed to configure Django: {e}", exc_info=True)
        raise
    _django_setup_done = True


def get_connection(alias: str = DEFAULT_DB_ALIAS):
    """Return the Django connection for ``alias`` after checking it can be opened."""
    if not _django_setup_done:
        raise RuntimeError("Django has not been set up. Call setup_django() first.")

    try:
        conn = connections[alias]
        conn.ensure_connection()
    except Exception as e:
        engine = settings.DATABASES.get(alias, {}).get("ENGINE")
        raise DatabaseConnectionError(
            f"Could not connect to database '{alias}': {e}", alias=alias, engine=engine
        ) from e

    logger.debug(f"Connected to '{alias}' ({conn.vendor}).")
    return conn


def _masked(db_settings: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return {
        alias: {key: ("***" if key == "PASSWORD" else value) for key, value in values.items()}
        for alias, values in db_settings.items()
    }
