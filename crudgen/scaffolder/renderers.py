"""Artifact renderers.

Each ``render_*`` function is pure: the same specs and names always produce
the same text.  Snippets destined for marker-anchored insertion (entity
augmentation, schema columns, validation rules) already carry the leading
newlines and indentation of the file they are inserted into.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crudgen.naming import EntityNames
from crudgen.parser.models import FieldSpec, FieldType, RelationSpec, parse_enum_values
from crudgen.scaffolder.templates import TemplateRenderer

VIEW_NAMES: tuple[str, ...] = ("index", "create", "edit", "show")

# Indentation of statements inside a migration's Schema::create closure and
# inside a FormRequest's ``return [`` array.
_BODY_INDENT = " " * 12

# The only enum tag the validation table matches by default.  Column
# rendering accepts any ``enum(...)`` tag.
LITERAL_ENUM_TAG = "enum(open,closed)"

_VALIDATION_RULES: dict[str, str] = {
    FieldType.STRING.value: "required|string|max:255",
    FieldType.TEXT.value: "nullable|string",
    LITERAL_ENUM_TAG: "required|in:open,closed",
    FieldType.INTEGER.value: "required|integer",
    FieldType.BOOLEAN.value: "nullable|boolean",
}

_DEFAULT_RULE = "nullable"

_ROUTE_TEMPLATE = (
    "Route::apiResource('{{ names.plural_lower }}', "
    "App\\Http\\Controllers\\Api\\{{ names.controller }}::class);"
)


def php_quote(value: str) -> str:
    """Return *value* as a single-quoted PHP string literal.

    ``php_quote("it's") == "'it\\'s'"``
    """
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# ---------------------------------------------------------------------------
# Plan models
# ---------------------------------------------------------------------------

class ArtifactKind(str, Enum):
    """The artifacts produced for one entity."""
    ENTITY = "entity"
    SCHEMA = "schema"
    CONTROLLER = "controller"
    VALIDATION = "validation"
    ROUTE = "route"
    VIEW = "view"


class WriteMode(str, Enum):
    """How a plan's content reaches the file system."""
    PATCH = "patch"
    CREATE = "create"
    APPEND = "append"


class ArtifactPlan(BaseModel):
    """Rendered text plus its destination, consumed once by the mutator."""
    model_config = ConfigDict(frozen=True)

    kind: ArtifactKind
    path: Path
    content: str
    mode: WriteMode
    marker: Optional[str] = Field(default=None, description="Anchor for PATCH plans")
    route_segment: Optional[str] = Field(
        default=None, description="Resource segment checked before APPEND plans"
    )


class EntityAugmentation(BaseModel):
    """The two text blocks added to an entity class."""
    model_config = ConfigDict(frozen=True)

    fillable: str = Field(..., description="protected $fillable = [...];")
    relation_methods: str = Field(default="", description="Concatenated accessor methods")

    @property
    def insertion(self) -> str:
        """Text inserted after the factory trait usage line."""
        return f"\n\n    {self.fillable}\n{self.relation_methods}"


@lru_cache(maxsize=1)
def default_renderer() -> TemplateRenderer:
    """Shared renderer over the bundled templates."""
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Validation rule table
# ---------------------------------------------------------------------------

def get_validation_rule(type_tag: str, generalize_enums: bool = False) -> str:
    """Map a field type tag to a Laravel validation rule string.

    Only the literal ``enum(open,closed)`` tag maps to an ``in:`` rule unless
    *generalize_enums* is set, in which case any ``enum(...)`` tag does.
    Unknown tags map to ``nullable``.

    Examples::

        get_validation_rule("integer")                        -> "required|integer"
        get_validation_rule("enum(low,high)")                 -> "nullable"
        get_validation_rule("enum(low,high)", generalize_enums=True)
                                                              -> "required|in:low,high"
    """
    if type_tag in _VALIDATION_RULES:
        return _VALIDATION_RULES[type_tag]
    if generalize_enums:
        values = parse_enum_values(type_tag)
        if values:
            return "required|in:" + ",".join(values)
    return _DEFAULT_RULE


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def render_entity_augmentation(
    fields: list[FieldSpec],
    relations: list[RelationSpec],
    renderer: TemplateRenderer | None = None,
) -> EntityAugmentation:
    """Render the ``$fillable`` list and one accessor per supported relation.

    Relations whose kind is neither ``hasMany`` nor ``belongsTo`` are skipped.
    """
    renderer = renderer or default_renderer()
    names = ", ".join(php_quote(field.name) for field in fields)
    fillable = f"protected $fillable = [{names}];"

    methods = []
    for relation in relations:
        kind = relation.relation_kind
        if kind is None:
            continue
        methods.append(
            renderer.render(
                "relation_method.php.j2", {"relation": relation, "method": kind.value}
            )
        )
    return EntityAugmentation(fillable=fillable, relation_methods="".join(methods))


def render_schema_column(field: FieldSpec) -> Optional[str]:
    """Render the migration column for *field*, or ``None`` if unsupported."""
    if field.type == FieldType.STRING.value:
        return f"$table->string({php_quote(field.name)});"
    if field.type == FieldType.TEXT.value:
        return f"$table->text({php_quote(field.name)});"
    if field.is_enum:
        values = ", ".join(php_quote(value) for value in field.enum_values)
        return f"$table->enum({php_quote(field.name)}, [{values}]);"
    return None


def render_schema_columns(fields: list[FieldSpec]) -> str:
    """Render migration columns in field order, each on its own indented line.

    Only ``string``, ``text`` and ``enum(...)`` fields produce a column;
    every other type tag is dropped.
    """
    lines = (render_schema_column(field) for field in fields)
    return "".join(f"\n{_BODY_INDENT}{line}" for line in lines if line is not None)


def render_controller(names: EntityNames, renderer: TemplateRenderer | None = None) -> str:
    """Render the full API resource controller for the entity."""
    renderer = renderer or default_renderer()
    return renderer.render("controller.php.j2", {"names": names})


def render_validation_rules(fields: list[FieldSpec], generalize_enums: bool = False) -> str:
    """Render ``'field' => 'rule',`` entries for a FormRequest ``rules()`` array."""
    return "".join(
        f"\n{_BODY_INDENT}{php_quote(field.name)} => "
        f"{php_quote(get_validation_rule(field.type, generalize_enums))},"
        for field in fields
    )


def render_route(names: EntityNames, renderer: TemplateRenderer | None = None) -> str:
    """Render the ``Route::apiResource`` registration line."""
    renderer = renderer or default_renderer()
    return renderer.render_string(_ROUTE_TEMPLATE, {"names": names})


def render_views(names: EntityNames, renderer: TemplateRenderer | None = None) -> dict[str, str]:
    """Render the four placeholder Blade views keyed by view name."""
    renderer = renderer or default_renderer()
    return {
        view: renderer.render("view.blade.php.j2", {"view": view, "names": names})
        for view in VIEW_NAMES
    }
