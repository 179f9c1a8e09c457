"""Parse the terse ``--fields`` and ``--relations`` grammars.

Fields use ``"name:type, name:type"`` (comma *and* a single space between
tokens, so enum value lists such as ``enum(open,closed)`` survive the split).
Relations use ``"name:kind,name:kind"`` with optional whitespace.
"""

from __future__ import annotations

import logging

from crudgen.errors import MalformedFieldSpec, MalformedRelationSpec
from crudgen.naming import singularize, studly
from crudgen.parser.models import FieldSpec, RelationSpec

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ", "
RELATION_SEPARATOR = ","


def parse_fields(raw: str | None) -> list[FieldSpec]:
    """Parse a field string into ordered ``FieldSpec`` values.

    Args:
        raw: The ``--fields`` option value. ``None`` or blank yields ``[]``.

    Returns:
        Field specs in input order.

    Raises:
        MalformedFieldSpec: If a token does not contain exactly one ``:`` or
            its name part is empty.
    """
    if raw is None or not raw.strip():
        return []

    fields: list[FieldSpec] = []
    for token in raw.split(FIELD_SEPARATOR):
        parts = token.split(":")
        if len(parts) != 2:
            raise MalformedFieldSpec(token)
        name, type_tag = (part.strip() for part in parts)
        if not name:
            raise MalformedFieldSpec(token)
        fields.append(FieldSpec(name=name, type=type_tag))

    logger.debug("Parsed %d field(s): %s", len(fields), [f.name for f in fields])
    return fields


def parse_relations(raw: str | None) -> list[RelationSpec]:
    """Parse a relation string into ordered ``RelationSpec`` values.

    The related entity is always derived from the relation name
    (``tasks`` -> ``Task``); it is never supplied independently.

    Raises:
        MalformedRelationSpec: If a token does not contain exactly one ``:``.
    """
    if raw is None or not raw.strip():
        return []

    relations: list[RelationSpec] = []
    for token in raw.split(RELATION_SEPARATOR):
        parts = token.split(":")
        if len(parts) != 2:
            raise MalformedRelationSpec(token)
        name, kind = (part.strip() for part in parts)
        if not name:
            raise MalformedRelationSpec(token)
        relations.append(
            RelationSpec(name=name, kind=kind, related_entity=studly(singularize(name)))
        )

    logger.debug("Parsed %d relation(s): %s", len(relations), [r.name for r in relations])
    return relations
