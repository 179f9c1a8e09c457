"""crudgen scaffolder -- renders and applies CRUD artifacts.

Renderers turn parsed specs and derived names into PHP/Blade text, the
mutator writes that text to files, and a collaborator creates the blank
model/migration/request skeletons the renderers patch.

Quick usage::

    from crudgen.scaffolder import render_controller, apply_at_marker

    source = render_controller(derive_names("project"))
    patched = apply_at_marker(content, "return [", rules)
"""

from crudgen.scaffolder.collaborator import (
    ArtisanScaffolder,
    BlankArtifactKind,
    LocalScaffolder,
    ScaffoldCollaborator,
    find_latest_migration,
)
from crudgen.scaffolder.mutator import (
    ArtifactMutator,
    append_line,
    append_route_once,
    apply_at_marker,
    patch_at_marker,
)
from crudgen.scaffolder.renderers import (
    ArtifactKind,
    ArtifactPlan,
    EntityAugmentation,
    WriteMode,
    get_validation_rule,
    render_controller,
    render_entity_augmentation,
    render_route,
    render_schema_columns,
    render_validation_rules,
    render_views,
)
from crudgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "ArtifactKind",
    "ArtifactMutator",
    "ArtifactPlan",
    "ArtisanScaffolder",
    "BlankArtifactKind",
    "EntityAugmentation",
    "LocalScaffolder",
    "ScaffoldCollaborator",
    "TemplateRenderer",
    "WriteMode",
    "append_line",
    "append_route_once",
    "apply_at_marker",
    "find_latest_migration",
    "get_validation_rule",
    "patch_at_marker",
    "render_controller",
    "render_entity_augmentation",
    "render_route",
    "render_schema_columns",
    "render_validation_rules",
    "render_views",
]
