"""Shared pytest fixtures for the crudgen test suite.

Provides reusable fixtures for:
- A temporary Laravel-like project root with a stock ``routes/api.php``
- Configs and generators bound to that root
- A fixed clock so migration filenames are deterministic
"""

from __future__ import annotations

import textwrap
from datetime import datetime
from pathlib import Path

import pytest

from crudgen.config import Config
from crudgen.naming import EntityNames, derive_names
from crudgen.pipeline import CrudGenerator
from crudgen.scaffolder import LocalScaffolder


STOCK_API_ROUTES = textwrap.dedent(
    """\
    <?php

    use Illuminate\\Http\\Request;
    use Illuminate\\Support\\Facades\\Route;

    Route::get('/user', function (Request $request) {
        return $request->user();
    })->middleware('auth:sanctum');
    """
)

FIXED_NOW = datetime(2024, 5, 17, 9, 30, 15)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def laravel_root(tmp_path: Path) -> Path:
    """Temporary project root containing only ``routes/api.php``."""
    root = tmp_path / "laravel-app"
    (root / "routes").mkdir(parents=True)
    (root / "routes" / "api.php").write_text(STOCK_API_ROUTES, encoding="utf-8")
    yield root


# ---------------------------------------------------------------------------
# Configuration & generators
# ---------------------------------------------------------------------------

@pytest.fixture
def config(laravel_root: Path) -> Config:
    return Config(project_root=laravel_root)


@pytest.fixture
def local_scaffolder(config: Config) -> LocalScaffolder:
    return LocalScaffolder(config, clock=lambda: FIXED_NOW)


@pytest.fixture
def generator(config: Config, local_scaffolder: LocalScaffolder) -> CrudGenerator:
    return CrudGenerator(config, scaffolder=local_scaffolder)


@pytest.fixture
def project_names() -> EntityNames:
    return derive_names("project")
