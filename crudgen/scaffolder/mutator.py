"""Apply rendered artifacts to files.

Three write modes:

* **patch** -- insert a snippet right after the first literal occurrence of an
  anchor (``use HasFactory;``, ``$table->id();``, ``return [``).  A missing
  anchor leaves the file untouched and is reported, not raised.
* **create** -- write a whole file, creating parent directories.
* **append** -- add a line to the end of a file.  Route registrations are
  appended only if no registration for the same resource segment exists.

All ``OSError`` failures surface as :class:`~crudgen.errors.FileSystemError`.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import NamedTuple

from crudgen.errors import FileSystemError
from crudgen.scaffolder.renderers import ArtifactPlan, WriteMode

logger = logging.getLogger(__name__)


class PatchResult(NamedTuple):
    """Outcome of a marker-anchored insertion."""
    content: str
    marker_found: bool


class ApplyResult(NamedTuple):
    """Outcome of applying one ``ArtifactPlan``.

    ``changed`` is ``False`` when the anchor was missing or the route was
    already registered; ``reason`` says which.
    """
    path: Path
    changed: bool
    reason: str = ""


# ---------------------------------------------------------------------------
# Pure text operations
# ---------------------------------------------------------------------------

def patch_at_marker(existing: str, marker: str, insertion: str) -> PatchResult:
    """Insert *insertion* after the first occurrence of *marker*.

    Applying the same patch twice inserts the snippet twice.
    """
    index = existing.find(marker)
    if index == -1:
        return PatchResult(existing, False)
    end = index + len(marker)
    return PatchResult(existing[:end] + insertion + existing[end:], True)


def apply_at_marker(existing: str, marker: str, insertion: str) -> str:
    """Like :func:`patch_at_marker` but return only the content.

    ``apply_at_marker("abc", "xyz", "!!") == "abc"``
    """
    return patch_at_marker(existing, marker, insertion).content


def has_route_for(content: str, segment: str) -> bool:
    """True if *content* already registers a resource route for *segment*."""
    pattern = re.compile(
        r"Route::(?:api)?[Rr]esource\(\s*['\"]" + re.escape(segment) + r"['\"]"
    )
    return pattern.search(content) is not None


# ---------------------------------------------------------------------------
# File operations
# ---------------------------------------------------------------------------

def read_file(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FileSystemError(path, "not valid UTF-8") from exc
    except OSError as exc:
        raise FileSystemError(path, f"cannot read file ({exc.strerror or exc})") from exc


def write_file(path: Path, content: str) -> Path:
    """Create parent directories and write *content* to *path*."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(path, f"cannot write file ({exc.strerror or exc})") from exc
    logger.debug("Wrote %s (%d bytes)", path, len(content))
    return path


def append_line(path: Path, line: str) -> Path:
    """Append *line* to *path* unconditionally, starting a new line if needed."""
    path = Path(path)
    existing = read_file(path) if path.exists() else ""
    prefix = "\n" if existing and not existing.endswith("\n") else ""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{prefix}{line}\n")
    except OSError as exc:
        raise FileSystemError(path, f"cannot append to file ({exc.strerror or exc})") from exc
    logger.debug("Appended to %s: %s", path, line)
    return path


def append_route_once(path: Path, line: str, segment: str) -> bool:
    """Append a route registration unless *segment* is already routed.

    Returns:
        ``True`` if the line was appended, ``False`` if a registration for
        the segment already existed.
    """
    path = Path(path)
    if path.exists() and has_route_for(read_file(path), segment):
        logger.info("Route for %r already registered in %s", segment, path)
        return False
    append_line(path, line)
    return True


# ---------------------------------------------------------------------------
# Plan application
# ---------------------------------------------------------------------------

class ArtifactMutator:
    """Applies ``ArtifactPlan`` objects to the file system."""

    def apply(self, plan: ArtifactPlan) -> ApplyResult:
        """Apply *plan* according to its write mode."""
        if plan.mode is WriteMode.CREATE:
            write_file(plan.path, plan.content)
            return ApplyResult(plan.path, True)

        if plan.mode is WriteMode.APPEND:
            if plan.route_segment is None:
                append_line(plan.path, plan.content)
                return ApplyResult(plan.path, True)
            appended = append_route_once(plan.path, plan.content, plan.route_segment)
            reason = "" if appended else f"route '{plan.route_segment}' already registered"
            return ApplyResult(plan.path, appended, reason)

        if plan.marker is None:
            raise ValueError(f"Patch plan for {plan.kind.value} has no marker")
        result = patch_at_marker(read_file(plan.path), plan.marker, plan.content)
        if not result.marker_found:
            logger.warning("Marker %r not found in %s; file left unchanged", plan.marker, plan.path)
            return ApplyResult(plan.path, False, f"marker '{plan.marker}' not found")
        write_file(plan.path, result.content)
        return ApplyResult(plan.path, True)
