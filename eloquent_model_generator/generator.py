"""
Batch driver for model generation.

Tables are processed one at a time in the order they were listed. Each table
is introspected, mapped to a model spec and either written as a new file or
patched into an existing one. Anything that goes wrong for a single table is
logged and counted as a failure; only setup problems (the output directory)
stop the run.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .codegen import ModelEmitter
from .colored_logging import log_highlight, log_success
from .constants import DefaultConfig
from .domain.field_mapping import TypeMapper
from .domain.models import (
    ChangeKind,
    GenerationOutcome,
    GenerationSummary,
    ModelFileSpec,
    RelationshipDescriptor,
)
from .domain.naming import to_class_name
from .domain.relationships import RelationshipInferencer
from .exceptions import FileStoreError, ModelGeneratorError, OutputDirectoryError
from .file_store import FileStore, LocalFileStore
from .introspection import SchemaIntrospector
from .mapper import build_model_spec
from .patcher import IncrementalPatcher


logger = logging.getLogger(__name__)

CHANGE_OUTCOMES = {
    ChangeKind.NO_CHANGE: GenerationOutcome.SKIPPED,
    ChangeKind.COMPLETED: GenerationOutcome.COMPLETED,
    ChangeKind.UPDATED_WITH_RELATIONSHIPS: GenerationOutcome.UPDATED,
}


class ModelGenerator:
    """
    Generates one Eloquent model file per table.

    Args:
        introspector: catalog reader for the configured backend
        output_dir: directory the ``{ClassName}.php`` files go to
        namespace: PHP namespace of the generated classes
        relationships: whether relationship methods are inferred
        force: whether existing files are patched instead of skipped
        special_relationships: extra descriptors per table name
        file_store: filesystem access, local by default
    """

    def __init__(
        self,
        introspector: SchemaIntrospector,
        output_dir,
        namespace: str = DefaultConfig.NAMESPACE,
        relationships: bool = DefaultConfig.GENERATE_RELATIONSHIPS,
        force: bool = DefaultConfig.FORCE_UPDATE,
        special_relationships: Optional[Dict[str, Sequence[RelationshipDescriptor]]] = None,
        file_store: Optional[FileStore] = None,
        emitter: Optional[ModelEmitter] = None,
    ):
        self.introspector = introspector
        self.output_dir = Path(output_dir)
        self.namespace = namespace
        self.relationships = relationships
        self.force = force
        self.file_store = file_store or LocalFileStore()
        self.emitter = emitter or ModelEmitter()
        self.patcher = IncrementalPatcher()
        self.type_mapper = TypeMapper()
        self.inferencer = RelationshipInferencer(introspector, special_relationships)
        self._all_tables: List[str] = []

    def model_path(self, table: str) -> Path:
        return self.output_dir / f"{to_class_name(table)}.{DefaultConfig.FILE_EXTENSION}"

    def ensure_output_dir(self) -> None:
        """Create the output directory. Failure here aborts the run."""
        try:
            if not self.file_store.exists(self.output_dir):
                self.file_store.make_directory(self.output_dir, recursive=True)
                logger.info(f"Created output directory: {self.output_dir}")
        except FileStoreError as e:
            raise OutputDirectoryError(
                f"Could not create output directory {self.output_dir}: {e.message}",
                path=str(self.output_dir),
            ) from e

    def build_spec(self, table: str) -> ModelFileSpec:
        schema = self.introspector.describe_table(table, with_foreign_keys=self.relationships)

        relationships: List[RelationshipDescriptor] = []
        if self.relationships:
            result = self.inferencer.infer(schema, self._all_tables)
            for warning in result.warnings:
                logger.warning(warning)
            relationships = result.relationships

        return build_model_spec(schema, self.namespace, relationships, self.type_mapper)

    def generate_model(self, table: str) -> GenerationOutcome:
        """Generate or patch the model for one table and report what happened."""
        path = self.model_path(table)
        exists = self.file_store.exists(path)

        if exists and not self.force:
            log_highlight(logger, f"Skipping {path.name}: already exists (use --force to update)")
            return GenerationOutcome.SKIPPED

        spec = self.build_spec(table)

        if not exists:
            self.file_store.write_text(path, self.emitter.render(spec))
            log_success(logger, f"Generated {path.name}")
            return GenerationOutcome.GENERATED

        existing = self.file_store.read_text(path)
        patched, change = self.patcher.patch(existing, self.emitter.fragments(spec))
        outcome = CHANGE_OUTCOMES[change]

        if change is ChangeKind.NO_CHANGE:
            log_highlight(logger, f"Skipping {path.name}: already complete")
            return outcome

        self.file_store.write_text(path, patched)
        if change is ChangeKind.UPDATED_WITH_RELATIONSHIPS:
            log_success(logger, f"Updated {path.name} with relationships")
        else:
            log_success(logger, f"Completed {path.name} with missing properties")
        return outcome

    def run(self, tables: Sequence[str]) -> GenerationSummary:
        """Process ``tables`` in order and return the run's counters."""
        self.ensure_output_dir()
        summary = GenerationSummary()

        if self.relationships:
            # Pivot detection looks at every table, not just the selected ones
            self._all_tables = self.introspector.list_tables()

        for table in tables:
            logger.debug(f"Processing table '{table}'")
            try:
                outcome = self.generate_model(table)
            except ModelGeneratorError as e:
                logger.warning(f"Failed to generate model for '{table}': {e.message}")
                outcome = GenerationOutcome.FAILED
            except Exception as e:
                logger.warning(f"Failed to generate model for '{table}': {e}")
                logger.debug("Traceback:", exc_info=True)
                outcome = GenerationOutcome.FAILED
            summary.record(outcome)

        return summary
