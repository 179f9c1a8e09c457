"""Exception hierarchy for the CRUD generator.

Every error raised while generating artifacts derives from ``CrudGenError`` so
the orchestrator can catch them at a single boundary.  A missing anchor is not
an error; it is reported as a warning on the run result.
"""

from __future__ import annotations

from pathlib import Path


class CrudGenError(Exception):
    """Base class for all generator errors."""


class MalformedFieldSpec(CrudGenError):
    """Raised when a ``name:type`` field token cannot be split in two."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Malformed field spec {token!r} (expected 'name:type')")


class MalformedRelationSpec(CrudGenError):
    """Raised when a ``name:kind`` relation token cannot be split in two."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Malformed relation spec {token!r} (expected 'name:kind')")


class InvalidEntityName(CrudGenError):
    """Raised when the entity name is empty or not identifier-safe."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Invalid entity name {name!r}: {reason}")


class FileSystemError(CrudGenError):
    """Raised when reading or writing an artifact fails."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{path}: {message}")


class GenerationError(CrudGenError):
    """Raised when a generation stage fails irrecoverably."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"Stage {stage}: {message}")


class ScaffoldError(CrudGenError):
    """Raised when the scaffolding collaborator cannot create a blank artifact."""
