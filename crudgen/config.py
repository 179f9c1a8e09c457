"""crudgen configuration.

Centralised, typed configuration for a generation run.  All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.

Artifact destinations are never supplied by the caller: they are derived from
the project root, the directory layout and the entity name by
:meth:`ArtifactPaths.resolve`, a pure function that never touches the disk.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from crudgen.naming import EntityNames


class LayoutConfig(BaseModel):
    """Framework-standard directories, relative to the project root."""

    models_dir: str = Field(default="app/Models")
    controllers_dir: str = Field(default="app/Http/Controllers/Api")
    requests_dir: str = Field(default="app/Http/Requests")
    migrations_dir: str = Field(default="database/migrations")
    factories_dir: str = Field(default="database/factories")
    views_dir: str = Field(default="resources/views")
    routes_file: str = Field(default="routes/api.php")


class MarkerConfig(BaseModel):
    """Literal anchors after which generated snippets are inserted."""

    entity: str = Field(default="use HasFactory;", description="Factory trait usage line")
    schema_anchor: str = Field(default="$table->id();", description="Primary-key column line")
    validation: str = Field(default="return [", description="Opening of the rules array")


class Config(BaseModel):
    """Global crudgen configuration.

    Instances are typically created once by the CLI entry point and passed to
    ``CrudGenerator``.
    """

    project_root: Path = Field(default=Path("."))
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    markers: MarkerConfig = Field(default_factory=MarkerConfig)

    # Which collaborator creates blank model/migration/request files.
    scaffolder: Literal["local", "artisan"] = Field(default="local")
    php_binary: str = Field(default="php")
    artisan_timeout: int = Field(default=60, ge=1, description="Seconds per artisan call")

    # Widen the enum validation rule from the literal ``enum(open,closed)``
    # to any ``enum(...)`` tag.
    generalize_enum_rules: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def models_path(self) -> Path:
        return self.project_root / self.layout.models_dir

    @property
    def controllers_path(self) -> Path:
        return self.project_root / self.layout.controllers_dir

    @property
    def requests_path(self) -> Path:
        return self.project_root / self.layout.requests_dir

    @property
    def migrations_path(self) -> Path:
        return self.project_root / self.layout.migrations_dir

    @property
    def factories_path(self) -> Path:
        return self.project_root / self.layout.factories_dir

    @property
    def views_path(self) -> Path:
        return self.project_root / self.layout.views_dir

    @property
    def routes_path(self) -> Path:
        return self.project_root / self.layout.routes_file

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<project_root>/crudgen.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.project_root / "crudgen.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CRUDGEN_PROJECT_ROOT, CRUDGEN_SCAFFOLDER, CRUDGEN_PHP_BINARY,
            CRUDGEN_ARTISAN_TIMEOUT, CRUDGEN_GENERALIZE_ENUM_RULES.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CRUDGEN_PROJECT_ROOT"):
            kwargs["project_root"] = Path(os.environ["CRUDGEN_PROJECT_ROOT"])
        if os.environ.get("CRUDGEN_SCAFFOLDER"):
            kwargs["scaffolder"] = os.environ["CRUDGEN_SCAFFOLDER"]
        if os.environ.get("CRUDGEN_PHP_BINARY"):
            kwargs["php_binary"] = os.environ["CRUDGEN_PHP_BINARY"]
        if os.environ.get("CRUDGEN_ARTISAN_TIMEOUT"):
            raw_timeout = os.environ["CRUDGEN_ARTISAN_TIMEOUT"]
            try:
                kwargs["artisan_timeout"] = int(raw_timeout)
            except ValueError as exc:
                raise ValueError(
                    f"CRUDGEN_ARTISAN_TIMEOUT must be an integer, got {raw_timeout!r}"
                ) from exc

        flag = os.environ.get("CRUDGEN_GENERALIZE_ENUM_RULES", "")
        kwargs["generalize_enum_rules"] = flag.strip().lower() in {"1", "true", "yes", "on"}

        return cls(**kwargs)


class ArtifactPaths(BaseModel):
    """Destination of every artifact for one entity."""
    model_config = ConfigDict(frozen=True)

    entity: Path
    factory: Path
    migrations_dir: Path
    controller: Path
    request: Path
    routes: Path
    views_dir: Path

    def view(self, name: str) -> Path:
        """Path of the Blade view *name* (``index``, ``create``, ...)."""
        return self.views_dir / f"{name}.blade.php"

    @classmethod
    def resolve(cls, config: Config, names: EntityNames) -> "ArtifactPaths":
        """Compute all destinations from *config* and *names* without I/O."""
        return cls(
            entity=config.models_path / f"{names.studly}.php",
            factory=config.factories_path / f"{names.factory}.php",
            migrations_dir=config.migrations_path,
            controller=config.controllers_path / f"{names.controller}.php",
            request=config.requests_path / f"{names.request}.php",
            routes=config.routes_path,
            views_dir=config.views_path / names.plural_lower,
        )
