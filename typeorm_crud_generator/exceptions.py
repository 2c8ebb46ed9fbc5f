"""
Custom exception hierarchy for the TypeORM CRUD generator.

Every error raised by the generator carries a message, an optional context
block and a list of suggestions, so the CLI can print something actionable.
"""

from typing import Dict, Any, Optional, List


class CrudGeneratorError(Exception):
    """
    Base exception for all generator errors.

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


class ConfigurationError(CrudGeneratorError):
    """Raised when a generation option is invalid or selects an unknown code path."""

    def __init__(self, message: str, option: str = None, **kwargs):
        context = kwargs.get('context') or {}
        if option:
            context['option'] = option

        suggestions = kwargs.get('suggestions') or [
            "Check the option spelling in the config file",
            "Use one of the documented values for enumerated options",
        ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code=kwargs.get('error_code', "CONFIG_ERROR")
        )
        self.option = option


class FileNameCollisionError(ConfigurationError):
    """Raised when two entities map to the same generated file name and collisions are errors."""

    def __init__(self, message: str, file_name: str = None, entities: List[str] = None, **kwargs):
        context = kwargs.get('context') or {}
        if file_name:
            context['file_name'] = file_name
        if entities:
            context['entities'] = ", ".join(entities)

        super().__init__(
            message,
            option="on_file_name_collision",
            context=context,
            suggestions=[
                "Rename one of the tables in the schema model",
                "Pick a file case that keeps the names distinct",
                "Set on_file_name_collision to 'overwrite' to keep the last entity",
            ],
            error_code="FILE_NAME_COLLISION",
        )
        self.file_name = file_name
        self.entities = entities or []


class SchemaModelError(CrudGeneratorError):
    """Raised when the entity model handed to the generator is unusable."""

    def __init__(self, message: str, entity: str = None, source: str = None, **kwargs):
        context = kwargs.get('context') or {}
        if entity:
            context['entity'] = entity
        if source:
            context['source'] = source

        suggestions = kwargs.get('suggestions') or [
            "Re-run the schema introspection step",
            "Verify the dump is a list of entities with a non-empty name",
        ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="SCHEMA_MODEL_ERROR"
        )


class TemplateRenderError(CrudGeneratorError):
    """Raised when a template fails to render for an entity."""

    def __init__(self, message: str, template: str = None, entity: str = None, **kwargs):
        context = kwargs.get('context') or {}
        if template:
            context['template'] = template
        if entity:
            context['entity'] = entity

        suggestions = kwargs.get('suggestions') or [
            "Check the template syntax",
            "Check the entity for missing columns or relation data",
        ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="TEMPLATE_RENDER_ERROR"
        )


class FormattingError(CrudGeneratorError):
    """Raised by formatters; the generator recovers by keeping the unformatted text."""

    def __init__(self, message: str, file_name: str = None, **kwargs):
        context = kwargs.get('context') or {}
        if file_name:
            context['file_name'] = file_name

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions') or ["Install prettier or check its output"],
            error_code="FORMATTING_ERROR"
        )


class OutputWriteError(CrudGeneratorError):
    """Raised when generated files cannot be written to disk."""

    def __init__(self, message: str, path: str = None, **kwargs):
        context = kwargs.get('context') or {}
        if path:
            context['path'] = path

        suggestions = kwargs.get('suggestions') or [
            "Check the output directory permissions",
            "Check there is enough free disk space",
        ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="OUTPUT_WRITE_ERROR"
        )


class ArchiveError(CrudGeneratorError):
    """Raised when the generated output cannot be archived."""

    def __init__(self, message: str, source_dir: str = None, **kwargs):
        context = kwargs.get('context') or {}
        if source_dir:
            context['source_dir'] = source_dir

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions') or ["Check the generated directory exists"],
            error_code="ARCHIVE_ERROR"
        )


# Convenience functions for common error patterns
def raise_configuration_error(message: str, option: str = None, **kwargs):
    """Convenience function to raise configuration errors."""
    raise ConfigurationError(message, option=option, **kwargs)
