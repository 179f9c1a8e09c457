"""Scaffolding collaborators that create blank artifacts.

The generator never writes the model, migration or FormRequest skeletons
itself; it asks a collaborator for "a blank artifact of kind K named N" and
patches whatever comes back.  Two collaborators are provided:

* ``LocalScaffolder`` writes Laravel's stock stubs directly (no PHP needed).
* ``ArtisanScaffolder`` shells out to ``php artisan make:model -mf`` and
  ``php artisan make:request`` inside the project.
"""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol

from crudgen.config import ArtifactPaths, Config
from crudgen.errors import ScaffoldError
from crudgen.naming import EntityNames, derive_names
from crudgen.scaffolder.mutator import write_file
from crudgen.scaffolder.templates import TemplateRenderer

logger = logging.getLogger(__name__)

MIGRATION_TIMESTAMP_FORMAT = "%Y_%m_%d_%H%M%S"


class BlankArtifactKind(str, Enum):
    """Skeleton files the collaborator knows how to create."""
    ENTITY = "entity"
    SCHEMA = "schema"
    VALIDATION_SCHEMA = "validation_schema"


class ScaffoldCollaborator(Protocol):
    """Anything that can create a blank artifact and report its path."""

    def create_blank_artifact(self, kind: BlankArtifactKind, name: str) -> Path:
        ...


def migration_glob(table: str) -> str:
    """Filename pattern of the create-table migration for *table*."""
    return f"*_create_{table}_table.php"


def find_latest_migration(migrations_dir: Path, table: str) -> Optional[Path]:
    """Return the most recently modified create-table migration for *table*."""
    if not migrations_dir.is_dir():
        return None
    candidates = sorted(
        migrations_dir.glob(migration_glob(table)),
        key=lambda p: (p.stat().st_mtime, p.name),
        reverse=True,
    )
    return candidates[0] if candidates else None


# ---------------------------------------------------------------------------
# Local stubs
# ---------------------------------------------------------------------------


class LocalScaffolder:
    """Writes Laravel's stock model, factory, migration and request stubs.

    Existing files are never overwritten: asking for an entity that already
    exists returns its path, and asking for a schema skeleton when a
    create-table migration exists returns the newest one.
    """

    def __init__(
        self,
        config: Config,
        renderer: TemplateRenderer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.clock = clock

    def create_blank_artifact(self, kind: BlankArtifactKind, name: str) -> Path:
        names = derive_names(name)
        paths = ArtifactPaths.resolve(self.config, names)

        if kind is BlankArtifactKind.ENTITY:
            self._write_stub_once("stubs/factory.php.j2", paths.factory, names)
            return self._write_stub_once("stubs/model.php.j2", paths.entity, names)

        if kind is BlankArtifactKind.SCHEMA:
            existing = find_latest_migration(paths.migrations_dir, names.table)
            if existing is not None:
                logger.info("Reusing migration %s", existing.name)
                return existing
            stamp = self.clock().strftime(MIGRATION_TIMESTAMP_FORMAT)
            target = paths.migrations_dir / f"{stamp}_create_{names.table}_table.php"
            return self._write_stub_once("stubs/migration.php.j2", target, names)

        if kind is BlankArtifactKind.VALIDATION_SCHEMA:
            return self._write_stub_once("stubs/request.php.j2", paths.request, names)

        raise ScaffoldError(f"Unsupported artifact kind: {kind!r}")

    def _write_stub_once(self, template: str, target: Path, names: EntityNames) -> Path:
        if target.exists():
            logger.info("%s already exists; leaving it untouched", target)
            return target
        return write_file(target, self.renderer.render(template, {"names": names}))


# ---------------------------------------------------------------------------
# php artisan
# ---------------------------------------------------------------------------


class ArtisanScaffolder:
    """Delegates blank-artifact creation to ``php artisan`` in the project root."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def create_blank_artifact(self, kind: BlankArtifactKind, name: str) -> Path:
        names = derive_names(name)
        paths = ArtifactPaths.resolve(self.config, names)

        if kind is BlankArtifactKind.ENTITY:
            self._artisan("make:model", names.studly, "-mf")
            return self._require(paths.entity)

        if kind is BlankArtifactKind.SCHEMA:
            # ``make:model -mf`` already produced the migration.
            migration = find_latest_migration(paths.migrations_dir, names.table)
            if migration is None:
                raise ScaffoldError(
                    f"No migration matching {migration_glob(names.table)} "
                    f"in {paths.migrations_dir}"
                )
            return migration

        if kind is BlankArtifactKind.VALIDATION_SCHEMA:
            self._artisan("make:request", names.request)
            return self._require(paths.request)

        raise ScaffoldError(f"Unsupported artifact kind: {kind!r}")

    def _artisan(self, *args: str) -> None:
        cmd = [self.config.php_binary, "artisan", *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.config.project_root,
                capture_output=True,
                text=True,
                timeout=self.config.artisan_timeout,
            )
        except FileNotFoundError as exc:
            raise ScaffoldError(f"{self.config.php_binary!r} not found on PATH") from exc
        except subprocess.TimeoutExpired as exc:
            raise ScaffoldError(
                f"'{' '.join(cmd)}' timed out after {self.config.artisan_timeout}s"
            ) from exc

        # artisan exits non-zero when the file already exists; the existing
        # file is still usable, so only the missing-file case is fatal.
        if proc.returncode != 0:
            logger.warning(
                "'%s' exited with %d: %s",
                " ".join(cmd), proc.returncode, (proc.stderr or proc.stdout).strip(),
            )

    @staticmethod
    def _require(path: Path) -> Path:
        if not path.exists():
            raise ScaffoldError(f"Expected artisan to create {path}")
        return path
