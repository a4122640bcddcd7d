import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from .constants import EloquentDefaults
from .domain.models import ModelFileSpec, RelationshipDescriptor, RelationshipKind
from .exceptions import CodeGenerationError, RelationshipError


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"

MODEL_TEMPLATE = "model.php.j2"
FRAGMENTS_TEMPLATE = "fragments.php.j2"


def php_string_literal(value: Any) -> str:
    """Quote a value as a single-quoted PHP string literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html", "xml"]),  # PHP output is never escaped
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        keep_trailing_newline=True,
    )
    env.filters["php_str"] = php_string_literal
    return env


def render_fragment(env: Environment, macro_name: str, *args: Any) -> str:
    """Call one macro of the fragments template and return its text without the trailing newline."""
    try:
        macro = getattr(env.get_template(FRAGMENTS_TEMPLATE).module, macro_name)
        return str(macro(*args)).rstrip("\n")
    except TemplateError as e:
        raise CodeGenerationError(
            f"Error rendering fragment '{macro_name}': {e}", template=FRAGMENTS_TEMPLATE
        ) from e


@dataclass(frozen=True)
class ModelFragments:
    """Rendered pieces of one model file, in file order."""

    doc_block: Optional[str]
    table_property: str
    fillable_property: str
    casts_property: Optional[str]
    relationship_methods: Dict[str, str]


class ModelEmitter:
    """
    Renders model files from a :class:`ModelFileSpec`.

    Rendering is a pure function of the spec: the same spec always yields
    the same text. Empty fillable lists render as ``[]``, an empty cast map
    omits the ``$casts`` property entirely.
    """

    def __init__(self, env: Optional[Environment] = None):
        self.env = env or setup_jinja_env()

    def fragment(self, macro_name: str, *args: Any) -> str:
        return render_fragment(self.env, macro_name, *args)

    def relationship_method(self, relationship: RelationshipDescriptor) -> str:
        if relationship.kind is RelationshipKind.BELONGS_TO_MANY and not relationship.pivot_table:
            raise RelationshipError(
                f"belongsToMany relationship '{relationship.method_name}' has no pivot table",
                target_table=relationship.related_class_name,
            )
        return self.fragment("relationship_method", relationship)

    def fragments(self, spec: ModelFileSpec) -> ModelFragments:
        return ModelFragments(
            doc_block=self.fragment("doc_block", spec.doc_block) if spec.doc_block else None,
            table_property=self.fragment("table_property", spec.table_name),
            fillable_property=self.fragment("fillable_property", spec.fillable_fields),
            casts_property=self.fragment("casts_property", spec.casts) if spec.casts else None,
            relationship_methods={
                rel.method_name: self.relationship_method(rel) for rel in spec.relationships
            },
        )

    def render(self, spec: ModelFileSpec) -> str:
        """Render the complete PHP source of a model file."""
        parts = self.fragments(spec)
        context = {
            "namespace": spec.namespace,
            "class_name": spec.class_name,
            "base_model": EloquentDefaults.BASE_MODEL,
            "factory_trait": EloquentDefaults.FACTORY_TRAIT,
            "doc_block": parts.doc_block,
            "table_property": parts.table_property,
            "fillable_property": parts.fillable_property,
            "casts_property": parts.casts_property,
            "relationship_methods": list(parts.relationship_methods.values()),
        }
        try:
            return self.env.get_template(MODEL_TEMPLATE).render(context)
        except TemplateError as e:
            logger.error(f"Error rendering model '{spec.class_name}': {e}", exc_info=True)
            raise CodeGenerationError(
                f"Error rendering model '{spec.class_name}': {e}",
                template=MODEL_TEMPLATE,
                table=spec.table_name,
            ) from e
