import argparse
import logging
import sys

from eloquent_model_generator.connection import setup_django, get_connection
from eloquent_model_generator.config_validation import load_config
from eloquent_model_generator.introspection import create_introspector
from eloquent_model_generator.generator import ModelGenerator
from eloquent_model_generator.exceptions import ModelGeneratorError

# Import colored logging
from eloquent_model_generator.colored_logging import (
    count_noun,
    setup_colored_logging,
    get_colored_logger,
    log_highlight,
    log_success,
    log_progress,
    log_section,
)

# Note: Colored logging will be configured after parsing args
logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eloquent-models",
        description="Generate Laravel Eloquent model classes from an existing database schema.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file (containing the Django-style databases dict).",
    )
    parser.add_argument(
        "--tables",
        help="Comma separated list of tables to generate models for (default: all tables).",
    )
    parser.add_argument(
        "--path",
        dest="output_dir",
        help="Directory to write the model files to (default: ./app/Models).",
    )
    parser.add_argument(
        "--namespace",
        help="PHP namespace of the generated models (default: App\\Models).",
    )
    parser.add_argument(
        "--relationships",
        action="store_true",
        default=None,
        help="Generate relationship methods from foreign keys and pivot tables.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        default=None,
        help="Add missing properties and relationships to existing model files.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def main(argv=None):
    # --- Argument Parsing ---
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    use_colors = not args.no_color
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=use_colors)

    global logger
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        # 1. Load Configuration
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        log_success(logger, "Configuration loaded and validated successfully.")
        logger.debug(f"Effective configuration loaded: {config.model_dump(exclude={'databases', 'SECRET_KEY'})}")

        # 2. Connect through Django's database layer
        log_progress(logger, "Connecting to the database...")
        setup_django(config["databases"], config["SECRET_KEY"])
        database = config.default_database
        introspector = create_introspector(
            get_connection(),
            database.ENGINE,
            database_name=database.NAME,
            schema=config.schema_name,
        )
        log_success(logger, f"Connected to {introspector.vendor} database '{database.NAME}'.")

        # 3. Select tables
        log_section(logger, "Database Schema Introspection")
        tables = introspector.list_tables(config.tables)
        if not tables:
            logger.warning("No tables found to generate models for. Exiting.")
            sys.exit(0)
        log_highlight(logger, f"Found {count_noun(len(tables), 'table')}: {', '.join(tables)}")

        # 4. Generate models
        log_section(logger, "Model Generation")
        generator = ModelGenerator(
            introspector,
            config.output_dir,
            namespace=config.namespace,
            relationships=config.relationships,
            force=config.force,
            special_relationships=config.special_relationship_descriptors(),
        )
        summary = generator.run(tables)

        # --- Summary ---
        log_section(logger, "Summary")
        log_success(logger, f"Generated {count_noun(summary.generated, 'model')}")
        if summary.updated:
            log_success(logger, f"Updated {count_noun(summary.updated, 'model')} with relationships")
        if summary.completed:
            log_success(logger, f"Completed {count_noun(summary.completed, 'model')} with missing properties")
        if summary.skipped:
            log_highlight(logger, f"Skipped {count_noun(summary.skipped, 'model')}")
        if summary.failed:
            logger.warning(f"Failed to generate {count_noun(summary.failed, 'model')}; see warnings above.")
        log_highlight(logger, f"Location: {config.output_dir}")

    # --- Error Handling ---
    except ModelGeneratorError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Configuration Error: {e}", exc_info=args.verbose)
        sys.exit(1)
    except ImportError as e:
        logger.error(
            f"Import Error: {e}. Ensure Django and the necessary database drivers are installed.",
            exc_info=args.verbose,
        )
        logger.error("Example: pip install 'eloquent-model-generator[postgres]' (for PostgreSQL)")
        sys.exit(1)
    except Exception as e:
        # Catch any other unexpected exceptions
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
