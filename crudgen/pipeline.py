"""CRUD generation orchestrator.

Runs the generation stages for one entity, in a fixed order:

1. CREATE_ENTITY_AND_SCHEMA_SKELETON -- blank model, factory and migration.
2. AUGMENT_ENTITY_AND_PATCH_SCHEMA   -- ``$fillable``, relations, columns.
3. CREATE_CONTROLLER                 -- API resource controller.
4. CREATE_AND_PATCH_VALIDATION_SCHEMA -- FormRequest with rules.
5. REGISTER_ROUTE                    -- ``Route::apiResource`` line.
6. CREATE_VIEWS                      -- index/create/edit/show Blade stubs.

Names and specs are derived before any file is touched, so a malformed
``--fields`` value is a fatal error with nothing written.  A failing stage
stops the run; earlier artifacts are kept as they are.

Usage::

    crudgen project --fields="name:string, status:enum(open,closed)" \\
        --relations="tasks:hasMany"
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.panel import Panel

from crudgen.config import ArtifactPaths, Config
from crudgen.errors import CrudGenError, GenerationError, ScaffoldError
from crudgen.naming import EntityNames, derive_names
from crudgen.parser import FieldSpec, RelationSpec, parse_fields, parse_relations
from crudgen.scaffolder import (
    ArtifactKind,
    ArtifactMutator,
    ArtifactPlan,
    ArtisanScaffolder,
    BlankArtifactKind,
    LocalScaffolder,
    ScaffoldCollaborator,
    TemplateRenderer,
    WriteMode,
    render_controller,
    render_entity_augmentation,
    render_route,
    render_schema_columns,
    render_validation_rules,
    render_views,
)
from crudgen.utils import (
    configure_logging,
    console,
    ensure_dir,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
    relative_to_root,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------


class Stage(str, Enum):
    """Generation stages in execution order."""
    CREATE_ENTITY_AND_SCHEMA_SKELETON = "create_entity_and_schema_skeleton"
    AUGMENT_ENTITY_AND_PATCH_SCHEMA = "augment_entity_and_patch_schema"
    CREATE_CONTROLLER = "create_controller"
    CREATE_AND_PATCH_VALIDATION_SCHEMA = "create_and_patch_validation_schema"
    REGISTER_ROUTE = "register_route"
    CREATE_VIEWS = "create_views"

    @property
    def title(self) -> str:
        return self.value.replace("_", " ").capitalize()


STAGES: tuple[Stage, ...] = tuple(Stage)


class RunOutcome(str, Enum):
    """How a generation run ended."""
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    FATAL_ERROR = "fatal_error"


class RunResult(BaseModel):
    """Explicit outcome of one generation run, rendered by the caller."""

    entity: str
    outcome: RunOutcome = RunOutcome.SUCCESS
    completed_stages: list[Stage] = Field(default_factory=list)
    failed_stage: Optional[Stage] = None
    error: Optional[str] = None
    written: list[Path] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome is RunOutcome.SUCCESS


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


def build_scaffolder(config: Config, renderer: TemplateRenderer | None = None) -> ScaffoldCollaborator:
    """Return the collaborator selected by ``config.scaffolder``."""
    if config.scaffolder == "artisan":
        return ArtisanScaffolder(config)
    return LocalScaffolder(config, renderer=renderer)


class _RunContext:
    """Per-run state shared between stages; discarded when the run ends."""

    def __init__(
        self,
        names: EntityNames,
        fields: list[FieldSpec],
        relations: list[RelationSpec],
        paths: ArtifactPaths,
    ) -> None:
        self.names = names
        self.fields = fields
        self.relations = relations
        self.paths = paths
        self.entity_path: Optional[Path] = None
        self.migration_path: Optional[Path] = None


class CrudGenerator:
    """Generates every CRUD artifact for one entity.

    Attributes:
        config: Project root, layout, markers and rule options.
        scaffolder: Collaborator creating blank model/migration/request files.
        renderer: Jinja2 renderer shared by all artifact renderers.
        mutator: Applies rendered plans to files.
    """

    def __init__(
        self,
        config: Config,
        scaffolder: ScaffoldCollaborator | None = None,
        renderer: TemplateRenderer | None = None,
        on_stage: Callable[[int, Stage], None] | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.scaffolder = scaffolder or build_scaffolder(config, self.renderer)
        self.mutator = ArtifactMutator()
        self.on_stage = on_stage

    # -- Public API --------------------------------------------------------

    def run(
        self,
        entity: str,
        fields: str | None = None,
        relations: str | None = None,
    ) -> RunResult:
        """Generate all artifacts for *entity*.

        Args:
            entity: Singular entity name, e.g. ``"project"``.
            fields: ``"name:type, name:type"`` string.
            relations: ``"name:kind,name:kind"`` string.

        Returns:
            A ``RunResult``; errors are captured on it, never raised.
        """
        result = RunResult(entity=entity)

        try:
            names = derive_names(entity)
            ctx = _RunContext(
                names=names,
                fields=parse_fields(fields),
                relations=parse_relations(relations),
                paths=ArtifactPaths.resolve(self.config, names),
            )
        except CrudGenError as exc:
            logger.error("Cannot start generation for %r: %s", entity, exc)
            result.outcome = RunOutcome.FATAL_ERROR
            result.error = str(exc)
            return result

        handlers: dict[Stage, Callable[[_RunContext, RunResult], None]] = {
            Stage.CREATE_ENTITY_AND_SCHEMA_SKELETON: self._create_skeletons,
            Stage.AUGMENT_ENTITY_AND_PATCH_SCHEMA: self._augment_entity_and_schema,
            Stage.CREATE_CONTROLLER: self._create_controller,
            Stage.CREATE_AND_PATCH_VALIDATION_SCHEMA: self._create_validation_schema,
            Stage.REGISTER_ROUTE: self._register_route,
            Stage.CREATE_VIEWS: self._create_views,
        }

        for index, stage in enumerate(STAGES, start=1):
            if self.on_stage is not None:
                self.on_stage(index, stage)
            logger.debug("Stage %d: %s", index, stage.value)
            try:
                handlers[stage](ctx, result)
            except (CrudGenError, OSError) as exc:
                error = GenerationError(stage.value, str(exc))
                logger.error("%s", error)
                result.outcome = RunOutcome.PARTIAL_FAILURE
                result.failed_stage = stage
                result.error = str(error)
                return result
            result.completed_stages.append(stage)

        return result

    # -- Stages ------------------------------------------------------------

    def _create_skeletons(self, ctx: _RunContext, result: RunResult) -> None:
        ctx.entity_path = self.scaffolder.create_blank_artifact(
            BlankArtifactKind.ENTITY, ctx.names.studly
        )
        ctx.migration_path = self.scaffolder.create_blank_artifact(
            BlankArtifactKind.SCHEMA, ctx.names.studly
        )

    def _augment_entity_and_schema(self, ctx: _RunContext, result: RunResult) -> None:
        augmentation = render_entity_augmentation(ctx.fields, ctx.relations, self.renderer)
        self._apply(
            ArtifactPlan(
                kind=ArtifactKind.ENTITY,
                path=ctx.entity_path or ctx.paths.entity,
                content=augmentation.insertion,
                mode=WriteMode.PATCH,
                marker=self.config.markers.entity,
            ),
            result,
        )
        if ctx.migration_path is None:
            raise ScaffoldError("collaborator returned no migration file")
        self._apply(
            ArtifactPlan(
                kind=ArtifactKind.SCHEMA,
                path=ctx.migration_path,
                content=render_schema_columns(ctx.fields),
                mode=WriteMode.PATCH,
                marker=self.config.markers.schema_anchor,
            ),
            result,
        )

    def _create_controller(self, ctx: _RunContext, result: RunResult) -> None:
        self._apply(
            ArtifactPlan(
                kind=ArtifactKind.CONTROLLER,
                path=ctx.paths.controller,
                content=render_controller(ctx.names, self.renderer),
                mode=WriteMode.CREATE,
            ),
            result,
        )

    def _create_validation_schema(self, ctx: _RunContext, result: RunResult) -> None:
        request_path = self.scaffolder.create_blank_artifact(
            BlankArtifactKind.VALIDATION_SCHEMA, ctx.names.studly
        )
        self._apply(
            ArtifactPlan(
                kind=ArtifactKind.VALIDATION,
                path=request_path,
                content=render_validation_rules(
                    ctx.fields, generalize_enums=self.config.generalize_enum_rules
                ),
                mode=WriteMode.PATCH,
                marker=self.config.markers.validation,
            ),
            result,
        )

    def _register_route(self, ctx: _RunContext, result: RunResult) -> None:
        self._apply(
            ArtifactPlan(
                kind=ArtifactKind.ROUTE,
                path=ctx.paths.routes,
                content=render_route(ctx.names, self.renderer),
                mode=WriteMode.APPEND,
                route_segment=ctx.names.plural_lower,
            ),
            result,
        )

    def _create_views(self, ctx: _RunContext, result: RunResult) -> None:
        ensure_dir(ctx.paths.views_dir)
        for view, content in render_views(ctx.names, self.renderer).items():
            self._apply(
                ArtifactPlan(
                    kind=ArtifactKind.VIEW,
                    path=ctx.paths.view(view),
                    content=content,
                    mode=WriteMode.CREATE,
                ),
                result,
            )

    def _apply(self, plan: ArtifactPlan, result: RunResult) -> None:
        outcome = self.mutator.apply(plan)
        if outcome.changed:
            if outcome.path not in result.written:
                result.written.append(outcome.path)
        else:
            result.warnings.append(f"{plan.kind.value}: {outcome.reason} ({outcome.path})")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def render_result(result: RunResult, config: Config) -> None:
    """Print a run result: written files, warnings and the final outcome."""
    if result.written:
        print_summary_table(
            {
                f"{i}.": relative_to_root(path, config.project_root)
                for i, path in enumerate(result.written, start=1)
            },
            title=f"Artifacts for {result.entity}",
        )
    for warning in result.warnings:
        print_warning(f"Warning: {warning}")

    if result.outcome is RunOutcome.SUCCESS:
        print_success("CRUD generation completed.")
    elif result.outcome is RunOutcome.PARTIAL_FAILURE:
        done = ", ".join(stage.value for stage in result.completed_stages) or "none"
        print_error(f"Error: {result.error}")
        print_error(
            f"CRUD generation stopped at '{result.failed_stage.value}' "
            f"(completed stages: {done}). Files already written were kept."
        )
    else:
        print_error(f"Error: {result.error}")
        print_error("CRUD generation aborted before any file was written.")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``crudgen`` / ``python -m crudgen.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="crudgen",
        description="Generate CRUD for a model with migrations, controller, views and so on",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  crudgen project --fields=\"name:string, status:enum(open,closed)\"\n"
            "  crudgen project --relations=\"tasks:hasMany\" --root ./my-app\n"
        ),
    )

    parser.add_argument("model", help="Singular entity name, e.g. 'project'")
    parser.add_argument(
        "--fields",
        default="",
        help="Comma+space separated name:type pairs (string, text, integer, boolean, enum(a,b))",
    )
    parser.add_argument(
        "--relations",
        default="",
        help="Comma separated name:kind pairs (hasMany, belongsTo)",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Laravel project root (default: $CRUDGEN_PROJECT_ROOT or the current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file previously written by Config.save()",
    )
    parser.add_argument(
        "--scaffolder",
        choices=["local", "artisan"],
        default=None,
        help="Create blank files from bundled stubs (local) or via php artisan",
    )
    parser.add_argument(
        "--generalize-enum-rules",
        action="store_true",
        help="Derive 'in:' validation rules for every enum(...) field",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    config_path = Path(args.config) if args.config else None
    if config_path is not None and not config_path.exists():
        console.print(f"[bold red]Error:[/bold red] Config file not found: {config_path}")
        sys.exit(1)
    try:
        config = Config.load(config_path) if config_path is not None else Config.from_env()
    except (OSError, ValueError) as exc:
        # pydantic's ValidationError is a ValueError.
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    if args.root:
        config.project_root = Path(args.root)
    if args.scaffolder:
        config.scaffolder = args.scaffolder
    if args.generalize_enum_rules:
        config.generalize_enum_rules = True

    console.print(
        Panel(f"[bold]Generating CRUD for[/bold] {escape(args.model)}", style="cyan")
    )
    generator = CrudGenerator(
        config,
        on_stage=lambda index, stage: print_stage_header(index, stage.title),
    )
    result = generator.run(args.model, fields=args.fields, relations=args.relations)
    render_result(result, config)

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
