"""
Custom exception hierarchy for the Eloquent Model Generator.

Every error carries optional context and recovery suggestions so that the
command line can print something actionable instead of a bare traceback.
"""

from typing import Dict, Any, Optional, List


class ModelGeneratorError(Exception):
    """
    Base exception for all Eloquent Model Generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(ModelGeneratorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify the 'databases.default' entry is present",
                "Check the supported database engines",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class DatabaseConnectionError(ModelGeneratorError):
    """Raised when the database connection cannot be established."""

    def __init__(self, message: str, alias: str = None, engine: str = None, **kwargs):
        context = kwargs.get('context', {})
        if alias:
            context['alias'] = alias
        if engine:
            context['engine'] = engine

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check database server is running",
                "Verify connection credentials",
                "Ensure the database driver is installed",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DATABASE_CONNECTION_ERROR"
        )


class SchemaIntrospectionError(ModelGeneratorError):
    """Raised when a catalog query fails."""

    def __init__(self, message: str, table: str = None, query: str = None, **kwargs):
        context = kwargs.get('context', {})
        if table:
            context['table'] = table
        if query:
            context['query'] = " ".join(query.split())

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check database connection settings",
                "Verify the table exists in the database",
                "Check database user permissions on the catalog tables",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="INTROSPECTION_ERROR"
        )


class RelationshipError(ModelGeneratorError):
    """Raised when relationship inference fails for a table."""

    def __init__(
        self,
        message: str,
        source_table: str = None,
        target_table: str = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if source_table:
            context['source_table'] = source_table
        if target_table:
            context['target_table'] = target_table

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check foreign key constraints in the database",
                "Add the relationship manually or via 'special_relationships'",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="RELATIONSHIP_ERROR"
        )


class CodeGenerationError(ModelGeneratorError):
    """Raised when rendering a model file fails."""

    def __init__(self, message: str, template: str = None, table: str = None, **kwargs):
        context = kwargs.get('context', {})
        if template:
            context['template'] = template
        if table:
            context['table'] = table

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions', []),
            error_code="CODE_GENERATION_ERROR"
        )


class FileStoreError(ModelGeneratorError):
    """Raised when a model file cannot be read or written."""

    def __init__(self, message: str, path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check file permissions in the output directory",
                "Make sure the disk is not full",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="FILE_STORE_ERROR"
        )


class OutputDirectoryError(FileStoreError):
    """Raised when the output directory cannot be created. Always fatal."""

    def __init__(self, message: str, path: str = None, **kwargs):
        kwargs.setdefault('suggestions', [
            "Choose a writable location with --path",
            "Create the directory manually and re-run",
        ])
        super().__init__(message, path=path, **kwargs)
        self.error_code = "OUTPUT_DIRECTORY_ERROR"
