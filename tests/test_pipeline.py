"""Tests for the CRUD generation orchestrator and CLI (crudgen.pipeline).

Covers:
- Stage order and completion bookkeeping
- Fatal errors (naming/parsing) write nothing
- Partial failures stop at the failing stage and keep earlier files
- Marker-not-found and duplicate-route warnings
- CLI exit codes and completion message
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from crudgen.config import Config
from crudgen.errors import FileSystemError, ScaffoldError
from crudgen.pipeline import (
    STAGES,
    CrudGenerator,
    RunOutcome,
    RunResult,
    Stage,
    build_scaffolder,
    main,
    render_result,
)
from crudgen.scaffolder import ArtisanScaffolder, LocalScaffolder

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Scaffolder selection
# ---------------------------------------------------------------------------


class TestBuildScaffolder:
    def test_local_by_default(self, config):
        assert isinstance(build_scaffolder(config), LocalScaffolder)

    def test_artisan(self, laravel_root):
        assert isinstance(
            build_scaffolder(Config(project_root=laravel_root, scaffolder="artisan")),
            ArtisanScaffolder,
        )


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


class TestSuccessfulRun:
    def test_all_stages_in_order(self, config, local_scaffolder):
        seen: list[Stage] = []
        generator = CrudGenerator(
            config, scaffolder=local_scaffolder, on_stage=lambda i, s: seen.append(s)
        )
        result = generator.run("project", fields="name:string")
        assert result.outcome is RunOutcome.SUCCESS
        assert result.success is True
        assert result.completed_stages == list(STAGES)
        assert seen == list(STAGES)
        assert result.error is None
        assert result.failed_stage is None

    def test_written_paths(self, generator, laravel_root):
        result = generator.run("project", fields="name:string")
        written = {p.relative_to(laravel_root).as_posix() for p in result.written}
        assert "app/Models/Project.php" in written
        assert "app/Http/Controllers/Api/ProjectController.php" in written
        assert "app/Http/Requests/ProjectRequest.php" in written
        assert "routes/api.php" in written
        assert "resources/views/projects/show.blade.php" in written
        assert any(p.startswith("database/migrations/") for p in written)

    def test_no_fields_or_relations(self, generator, laravel_root):
        result = generator.run("project")
        assert result.success
        model = (laravel_root / "app/Models/Project.php").read_text(encoding="utf-8")
        assert "protected $fillable = [];" in model

    def test_generalized_enum_rules(self, laravel_root, local_scaffolder):
        config = Config(project_root=laravel_root, generalize_enum_rules=True)
        CrudGenerator(config, scaffolder=local_scaffolder).run(
            "project", fields="level:enum(low,high)"
        )
        request = (laravel_root / "app/Http/Requests/ProjectRequest.php").read_text(
            encoding="utf-8"
        )
        assert "'level' => 'required|in:low,high'," in request


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFatalErrors:
    def test_invalid_entity_name(self, generator, laravel_root):
        result = generator.run("", fields="name:string")
        assert result.outcome is RunOutcome.FATAL_ERROR
        assert result.failed_stage is None
        assert result.completed_stages == []
        assert "Invalid entity name" in result.error
        assert not (laravel_root / "app").exists()

    def test_malformed_fields_write_nothing(self, generator, laravel_root):
        result = generator.run("project", fields="name")
        assert result.outcome is RunOutcome.FATAL_ERROR
        assert "Malformed field spec 'name'" in result.error
        assert result.written == []
        assert not (laravel_root / "app").exists()

    def test_malformed_relations(self, generator):
        result = generator.run("project", fields="name:string", relations="tasks")
        assert result.outcome is RunOutcome.FATAL_ERROR
        assert "Malformed relation spec" in result.error


class TestPartialFailures:
    def test_scaffolder_failure_in_first_stage(self, config):
        scaffolder = MagicMock()
        scaffolder.create_blank_artifact.side_effect = ScaffoldError("php not found")
        result = CrudGenerator(config, scaffolder=scaffolder).run("project", fields="name:string")
        assert result.outcome is RunOutcome.PARTIAL_FAILURE
        assert result.failed_stage is Stage.CREATE_ENTITY_AND_SCHEMA_SKELETON
        assert result.completed_stages == []
        assert "php not found" in result.error

    def test_failure_keeps_earlier_artifacts(self, generator, laravel_root):
        with patch(
            "crudgen.pipeline.render_validation_rules",
            side_effect=FileSystemError(laravel_root, "disk full"),
        ):
            result = generator.run("project", fields="name:string")
        assert result.outcome is RunOutcome.PARTIAL_FAILURE
        assert result.failed_stage is Stage.CREATE_AND_PATCH_VALIDATION_SCHEMA
        assert result.completed_stages == [
            Stage.CREATE_ENTITY_AND_SCHEMA_SKELETON,
            Stage.AUGMENT_ENTITY_AND_PATCH_SCHEMA,
            Stage.CREATE_CONTROLLER,
        ]
        assert "disk full" in result.error
        assert (laravel_root / "app/Http/Controllers/Api/ProjectController.php").exists()
        assert not (laravel_root / "resources/views/projects").exists()

    def test_routes_path_is_a_directory(self, generator, laravel_root):
        routes = laravel_root / "routes" / "api.php"
        routes.unlink()
        routes.mkdir()
        result = generator.run("project", fields="name:string")
        assert result.outcome is RunOutcome.PARTIAL_FAILURE
        assert result.failed_stage is Stage.REGISTER_ROUTE

    def test_non_utf8_entity_file(self, generator, laravel_root):
        model = laravel_root / "app" / "Models" / "Project.php"
        model.parent.mkdir(parents=True, exist_ok=True)
        model.write_bytes(b"<?php\n// caf\xe9\nclass Project {\n    use HasFactory;\n}\n")
        result = generator.run("project", fields="name:string")
        assert result.outcome is RunOutcome.PARTIAL_FAILURE
        assert result.failed_stage is Stage.AUGMENT_ENTITY_AND_PATCH_SCHEMA
        assert "not valid UTF-8" in result.error


class TestWarnings:
    def test_marker_not_found_is_reported_not_raised(self, generator, laravel_root):
        model = laravel_root / "app/Models/Project.php"
        model.parent.mkdir(parents=True)
        model.write_text("<?php\nclass Project extends Model\n{\n}\n", encoding="utf-8")
        result = generator.run("project", fields="name:string")
        assert result.success
        assert any("use HasFactory;" in w and "not found" in w for w in result.warnings)
        assert model.read_text(encoding="utf-8") == "<?php\nclass Project extends Model\n{\n}\n"
        assert model not in result.written

    def test_rerun_does_not_duplicate_route(self, generator, laravel_root):
        generator.run("project", fields="name:string")
        second = generator.run("project", fields="name:string")
        routes = (laravel_root / "routes/api.php").read_text(encoding="utf-8")
        assert routes.count("Route::apiResource('projects'") == 1
        assert any("already registered" in w for w in second.warnings)


# ---------------------------------------------------------------------------
# Rendering & CLI
# ---------------------------------------------------------------------------


class TestRenderResult:
    def test_success_message(self, capsys, tmp_path):
        render_result(RunResult(entity="project"), Config(project_root=tmp_path))
        assert "CRUD generation completed." in capsys.readouterr().out

    def test_failure_has_no_completion_message(self, capsys, tmp_path):
        result = RunResult(
            entity="project",
            outcome=RunOutcome.PARTIAL_FAILURE,
            failed_stage=Stage.CREATE_CONTROLLER,
            completed_stages=[Stage.CREATE_ENTITY_AND_SCHEMA_SKELETON],
            error="Stage create_controller: boom",
        )
        render_result(result, Config(project_root=tmp_path))
        out = capsys.readouterr().out
        assert "boom" in out
        assert "create_controller" in out
        assert "CRUD generation completed." not in out

    def test_fatal_message(self, capsys, tmp_path):
        result = RunResult(entity="", outcome=RunOutcome.FATAL_ERROR, error="bad name")
        render_result(result, Config(project_root=tmp_path))
        out = capsys.readouterr().out
        assert "bad name" in out
        assert "before any file was written" in out


class TestMain:
    def test_success(self, laravel_root, capsys):
        main([
            "project",
            "--root", str(laravel_root),
            "--fields=name:string, status:enum(open,closed)",
            "--relations=tasks:hasMany",
        ])
        assert "CRUD generation completed." in capsys.readouterr().out
        assert (laravel_root / "app/Http/Controllers/Api/ProjectController.php").exists()

    def test_malformed_fields_exit_nonzero(self, laravel_root, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["project", "--root", str(laravel_root), "--fields=name"])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Malformed field spec" in out
        assert "CRUD generation completed." not in out

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["project", "--config", str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1

    def test_malformed_config_file(self, tmp_path, capsys):
        cfg = tmp_path / "crudgen.json"
        cfg.write_text('{"artisan_timeout": "soon"}', encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["project", "--config", str(cfg)])
        assert exc_info.value.code == 1
        assert "Invalid configuration" in capsys.readouterr().out

    def test_bad_timeout_env(self, capsys):
        with patch.dict(os.environ, {"CRUDGEN_ARTISAN_TIMEOUT": "abc"}, clear=True):
            with pytest.raises(SystemExit) as exc_info:
                main(["project"])
        assert exc_info.value.code == 1
        assert "Invalid configuration" in capsys.readouterr().out

    def test_config_file_and_flags(self, laravel_root):
        cfg = Config(project_root=Path("/does/not/matter")).save(laravel_root / "crudgen.json")
        main([
            "project",
            "--config", str(cfg),
            "--root", str(laravel_root),
            "--generalize-enum-rules",
            "--fields=level:enum(low,high)",
        ])
        request = (laravel_root / "app/Http/Requests/ProjectRequest.php").read_text(
            encoding="utf-8"
        )
        assert "'level' => 'required|in:low,high'," in request
