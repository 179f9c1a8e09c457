"""Pydantic v2 models for parsed field and relation specifications.

A ``FieldSpec`` is one ``name:type`` pair from the ``--fields`` option and a
``RelationSpec`` is one ``name:kind`` pair from ``--relations``.  Both keep the
raw tokens verbatim; interpretation of type tags and relation kinds happens at
render time.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


_ENUM_VALUES_RE = re.compile(r"\((.*?)\)")


def parse_enum_values(type_tag: str) -> list[str]:
    """Return the values of an ``enum(a,b)`` tag, or ``[]`` for any other tag."""
    match = _ENUM_VALUES_RE.search(type_tag)
    if "enum" not in type_tag or match is None:
        return []
    return [value.strip() for value in match.group(1).split(",")]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FieldType(str, Enum):
    """Primitive field type tags understood by the renderers."""
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"


class RelationKind(str, Enum):
    """Eloquent relation kinds that produce an accessor method."""
    HAS_MANY = "hasMany"
    BELONGS_TO = "belongsTo"


# ---------------------------------------------------------------------------
# Spec models
# ---------------------------------------------------------------------------

class FieldSpec(BaseModel):
    """A single entity attribute."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Attribute/column name")
    type: str = Field(..., description="Type tag, e.g. 'string' or 'enum(open,closed)'")

    @property
    def is_enum(self) -> bool:
        """True for any tag containing ``enum`` with a parenthesized value list."""
        return "enum" in self.type and _ENUM_VALUES_RE.search(self.type) is not None

    @property
    def enum_values(self) -> list[str]:
        """The enumeration domain, or an empty list for non-enum tags."""
        return parse_enum_values(self.type)


class RelationSpec(BaseModel):
    """An association from the scaffolded entity to another entity."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Accessor name, e.g. 'tasks'")
    kind: str = Field(..., description="Relation kind token, stored verbatim")
    related_entity: str = Field(..., description="Studly singular of the name, e.g. 'Task'")

    @property
    def relation_kind(self) -> Optional[RelationKind]:
        """The recognised relation kind, or ``None`` for unsupported tokens."""
        try:
            return RelationKind(self.kind)
        except ValueError:
            return None
